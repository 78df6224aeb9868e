import pytest

from kshtool.codec.decoder import decode, extract_sources
from kshtool.codec.variable import VariableType
from kshtool.errors import (
    CorruptContainer,
    InvalidEncoding,
    InvalidValue,
    TruncatedInput,
)
from tests.conftest import PIXEL_SOURCE, VERTEX_SOURCE, lp, raw_container, u32


def test_decode_worked_example(worked_example_bytes):
    container = decode(worked_example_bytes)

    assert container.name == "simple"
    assert [v.name for v in container.uniform_table] == ["MVP", "Tex"]

    mvp, tex = container.uniform_table
    assert mvp.type is VariableType.MAT4
    assert mvp.array_length is None
    assert mvp.default_data.tolist() == [0] * 16
    assert tex.type is VariableType.SAMPLER2D
    assert tex.default_data.size == 0

    assert container.vertex.name == "simple.vs"
    assert container.vertex.source == VERTEX_SOURCE
    assert container.vertex.used_uniform_names == ["MVP"]
    assert container.pixel.name == "simple.ps"
    assert container.pixel.source == PIXEL_SOURCE
    assert container.pixel.used_uniform_names == ["Tex"]
    assert container.trailer.size == 0


def test_extract_sources(worked_example_bytes):
    name, vertex, pixel = extract_sources(worked_example_bytes)
    assert name == "simple"
    assert (vertex.name, pixel.name) == ("simple.vs", "simple.ps")


def test_decode_keeps_default_data():
    data = raw_container(
        "c",
        [("Color", 4, 1, [0x3F800000, 0, 0, 0x3F800000])],
        ("c.vs", "void main(){}"),
        ("c.ps", "void main(){}"),
        vs_refs=[],
        ps_refs=[0],
    )
    color = decode(data).uniform("Color")
    assert color.default_floats().tolist() == [1.0, 0.0, 0.0, 1.0]


def test_decode_array_length():
    data = raw_container(
        "c",
        [("Lights", 4, 8, [])],
        ("c.vs", ""),
        ("c.ps", ""),
        vs_refs=[0],
        ps_refs=[],
    )
    lights = decode(data).uniform("Lights")
    assert lights.array_length == 8
    assert lights.default_data.size == 0


def test_decode_skips_trailer(worked_example_bytes):
    container = decode(worked_example_bytes + u32(7) + u32(9) + b"\x01\x02")
    assert container.trailer.tolist() == [7, 9]
    assert container.name == "simple"


def test_truncated_header():
    with pytest.raises(TruncatedInput):
        decode(lp(b"simple") + b"\x02\x00")


def test_truncated_anywhere(worked_example_bytes):
    for cut in (3, 20, 60, len(worked_example_bytes) - 1):
        with pytest.raises(TruncatedInput):
            decode(worked_example_bytes[:cut])


def test_invalid_type_id():
    data = raw_container(
        "c", [("X", 1, 1, [0])], ("a", ""), ("b", ""), vs_refs=[], ps_refs=[]
    )
    with pytest.raises(InvalidValue, match="Invalid type id: 1"):
        decode(data)


def test_invalid_scope():
    data = raw_container(
        "c",
        [("X", 0, 1, [0])],
        ("a", ""),
        ("b", ""),
        vs_refs=[],
        ps_refs=[],
        scope=3,
    )
    with pytest.raises(InvalidValue, match="Invalid variable scope: 3"):
        decode(data)


def test_reference_out_of_range():
    data = raw_container(
        "c", [("X", 0, 1, [0])], ("a", ""), ("b", ""), vs_refs=[1], ps_refs=[]
    )
    with pytest.raises(CorruptContainer):
        decode(data)


def test_source_without_terminator():
    data = lp(b"c") + u32(0) + lp(b"a") + lp(b"void main(){}")
    with pytest.raises(CorruptContainer):
        decode(data)


def test_invalid_utf8_name():
    with pytest.raises(InvalidEncoding):
        decode(lp(b"\xc3\x28") + u32(0))
