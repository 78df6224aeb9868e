from kshtool.batch import BatchConverter, first_difference, verify_round_trip
from kshtool.settings import ConversionSettings
from tests.conftest import PIXEL_SOURCE, VERTEX_SOURCE, raw_container, u32


def test_first_difference():
    assert first_difference(b"abc", b"abc") is None

    mismatch = first_difference(b"abcdef", b"abXdef")
    assert mismatch.offset == 2
    assert mismatch.expected == b"abcdef"
    assert mismatch.actual == b"abXdef"
    assert "byte 2" in mismatch.describe()


def test_first_difference_length_only():
    mismatch = first_difference(b"abc", b"abcd")
    assert mismatch.offset == 3
    assert (mismatch.expected_size, mismatch.actual_size) == (3, 4)
    assert "sizes 3 != 4" in mismatch.describe()


def test_verify_round_trip_identical(worked_example_bytes):
    assert verify_round_trip(worked_example_bytes) is None


def test_verify_round_trip_reports_trailer(worked_example_bytes):
    mismatch = verify_round_trip(worked_example_bytes + u32(1))
    assert mismatch.offset == len(worked_example_bytes)


def test_verify_round_trip_reports_default_data():
    data = raw_container(
        "simple",
        [("MVP", 20, 1, [1] + [0] * 15), ("Tex", 43, 1, None)],
        ("simple.vs", VERTEX_SOURCE),
        ("simple.ps", PIXEL_SOURCE),
        vs_refs=[0],
        ps_refs=[1],
    )
    mismatch = verify_round_trip(data)
    assert mismatch is not None
    assert mismatch.expected_size == mismatch.actual_size


def _populate(directory, worked_example_bytes):
    directory.mkdir()
    (directory / "a.ksh").write_bytes(worked_example_bytes)
    (directory / "b.ksh").write_bytes(worked_example_bytes)
    (directory / "broken.ksh").write_bytes(b"\x01\x00")
    (directory / "readme.txt").write_text("not a container")


def test_extract_all(tmp_path, worked_example_bytes):
    src = tmp_path / "shaders"
    _populate(src, worked_example_bytes)
    out = tmp_path / "out"

    report = BatchConverter(ConversionSettings(workers=4)).extract_all(src, out)

    assert report.total == 3
    assert [item.source.name for item in report.failed] == ["broken.ksh"]
    assert not report.ok
    assert (out / "a" / "simple.vs").read_text() == VERTEX_SOURCE
    assert (out / "b" / "simple.ps").read_text() == PIXEL_SOURCE


def test_verify_all(tmp_path, worked_example_bytes):
    src = tmp_path / "shaders"
    src.mkdir()
    (src / "a.ksh").write_bytes(worked_example_bytes)
    (src / "b.ksh").write_bytes(worked_example_bytes + u32(0))

    report = BatchConverter().verify_all(src)

    assert report.total == 2
    assert [item.source.name for item in report.failed] == ["b.ksh"]
