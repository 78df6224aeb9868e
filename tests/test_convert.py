import pytest

from kshtool.codec.decoder import decode
from kshtool.convert import (
    analyze_file,
    build_file,
    build_from_directory,
    container_name,
    find_stage_pair,
    order_stage_pair,
    with_container_suffix,
)
from kshtool.errors import AlreadyExists, InvalidPath, StagePairNotFound
from tests.conftest import PIXEL_SOURCE, VERTEX_SOURCE, raw_container


def test_container_name(tmp_path):
    assert container_name(tmp_path / "bloom.ksh") == "bloom"
    assert container_name(tmp_path / "a.b.ksh") == "a.b"


def test_with_container_suffix(tmp_path):
    assert with_container_suffix(tmp_path / "out").name == "out.ksh"
    assert with_container_suffix(tmp_path / "out.ksh").name == "out.ksh"


def test_analyze_file(tmp_path, worked_example_bytes):
    src = tmp_path / "simple.ksh"
    src.write_bytes(worked_example_bytes)
    out_dir = tmp_path / "out"

    vs, ps = analyze_file(src, out_dir)

    assert vs == out_dir / "simple.vs"
    assert ps == out_dir / "simple.ps"
    assert vs.read_text() == VERTEX_SOURCE
    assert ps.read_text() == PIXEL_SOURCE


def test_analyze_file_refuses_overwrite(tmp_path, worked_example_bytes):
    src = tmp_path / "simple.ksh"
    src.write_bytes(worked_example_bytes)
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    (out_dir / "simple.ps").write_text("keep me")

    with pytest.raises(AlreadyExists):
        analyze_file(src, out_dir)

    # Neither stage is written when one target is blocked.
    assert not (out_dir / "simple.vs").exists()
    assert (out_dir / "simple.ps").read_text() == "keep me"

    analyze_file(src, out_dir, force=True)
    assert (out_dir / "simple.ps").read_text() == PIXEL_SOURCE


def test_analyze_file_rejects_stage_path(tmp_path):
    src = tmp_path / "evil.ksh"
    src.write_bytes(
        raw_container("evil", [], ("../evil.vs", ""), ("evil.ps", ""), [], [])
    )
    with pytest.raises(InvalidPath):
        analyze_file(src, tmp_path / "out")


def test_build_file(shader_dir, tmp_path, worked_example_bytes):
    out = tmp_path / "simple.ksh"
    build_file(shader_dir / "simple.vs", shader_dir / "simple.ps", out)

    assert out.read_bytes() == worked_example_bytes

    with pytest.raises(AlreadyExists):
        build_file(shader_dir / "simple.vs", shader_dir / "simple.ps", out)


def test_build_uses_output_stem_as_name(shader_dir, tmp_path):
    out = tmp_path / "renamed.ksh"
    build_file(shader_dir / "simple.vs", shader_dir / "simple.ps", out)

    container = decode(out.read_bytes())
    assert container.name == "renamed"
    assert container.vertex.name == "simple.vs"


def test_round_trip_through_files(tmp_path, worked_example_bytes):
    src = tmp_path / "simple.ksh"
    src.write_bytes(worked_example_bytes)
    vs, ps = analyze_file(src, tmp_path / "simple")

    rebuilt = build_file(vs, ps, tmp_path / "rebuilt" / "simple.ksh")
    assert rebuilt.read_bytes() == worked_example_bytes


def test_find_stage_pair(shader_dir):
    (shader_dir / "notes.txt").write_text("ignored")
    vs, ps = find_stage_pair(shader_dir)
    assert (vs.name, ps.name) == ("simple.vs", "simple.ps")


def test_find_stage_pair_ambiguous(shader_dir):
    (shader_dir / "other.vs").write_text("void main() {}")
    with pytest.raises(StagePairNotFound):
        find_stage_pair(shader_dir)


def test_find_stage_pair_missing(tmp_path):
    with pytest.raises(StagePairNotFound):
        find_stage_pair(tmp_path)


def test_order_stage_pair(shader_dir):
    vs, ps = shader_dir / "simple.vs", shader_dir / "simple.ps"
    assert order_stage_pair(ps, vs) == (vs, ps)
    assert order_stage_pair(vs, ps) == (vs, ps)

    with pytest.raises(StagePairNotFound):
        order_stage_pair(vs, vs)


def test_build_from_directory(shader_dir, tmp_path, worked_example_bytes):
    out = build_from_directory(shader_dir, tmp_path / "simple.ksh")
    assert out.read_bytes() == worked_example_bytes


@pytest.mark.parametrize("stage_name", ["..", "."])
def test_analyze_file_rejects_relative_stage_names(tmp_path, stage_name):
    src = tmp_path / "dots.ksh"
    src.write_bytes(
        raw_container("dots", [], (stage_name, ""), ("dots.ps", ""), [], [])
    )
    with pytest.raises(InvalidPath):
        analyze_file(src, tmp_path / "out")


def test_analyze_file_rejects_duplicate_stage_names(tmp_path):
    src = tmp_path / "same.ksh"
    src.write_bytes(
        raw_container("same", [], ("same.glsl", "a"), ("same.glsl", "b"), [], [])
    )
    out_dir = tmp_path / "out"
    with pytest.raises(InvalidPath):
        analyze_file(src, out_dir)
    assert not out_dir.exists()
