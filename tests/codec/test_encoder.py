import pytest

from kshtool.codec.container import Container, ShaderStage
from kshtool.codec.decoder import decode
from kshtool.codec.encoder import build_container, encode, encode_container
from kshtool.codec.variable import Variable, VariableType
from kshtool.errors import InternalInconsistency, InvalidPath, UnsupportedType
from tests.conftest import PIXEL_SOURCE, VERTEX_SOURCE, raw_container


def test_encode_worked_example(worked_example_bytes):
    data = encode("simple", "simple.vs", VERTEX_SOURCE, "simple.ps", PIXEL_SOURCE)
    assert data == worked_example_bytes


def test_decode_then_encode_is_identical(worked_example_bytes):
    container = decode(worked_example_bytes)
    assert encode_container(container) == worked_example_bytes


def test_trailer_is_not_written(worked_example_bytes):
    container = decode(worked_example_bytes + b"\x05\x00\x00\x00")
    assert encode_container(container) == worked_example_bytes


def test_unused_uniforms_dropped():
    vs = (
        "uniform vec4 Unused;\n"
        "uniform vec3 Offset;\n"
        "void main() { gl_Position = vec4(Offset, 1.0); }\n"
    )
    ps = "void main() { gl_FragColor = vec4(1.0); }\n"
    expected = raw_container(
        "off",
        [("Offset", 3, 1, [0, 0, 0])],
        ("off.vs", vs),
        ("off.ps", ps),
        vs_refs=[0],
        ps_refs=[],
    )
    assert encode("off", "off.vs", vs, "off.ps", ps) == expected


def test_shared_uniform_vertex_wins():
    vs = "uniform float M; void main() { gl_Position = vec4(M); }"
    ps = "uniform vec4 M[4]; uniform float T; void main() { gl_FragColor = M[0] * T; }"
    expected = raw_container(
        "dup",
        [("M", 0, 1, [0]), ("T", 0, 1, [0])],
        ("dup.vs", vs),
        ("dup.ps", ps),
        vs_refs=[0],
        ps_refs=[0, 1],
    )
    assert encode("dup", "dup.vs", vs, "dup.ps", ps) == expected


def test_array_gets_empty_default_block():
    vs = "uniform mat4 Bones[32]; void main() { gl_Position = Bones[0] * vec4(1.0); }"
    ps = "void main() {}"
    expected = raw_container(
        "skin",
        [("Bones", 20, 32, [])],
        ("skin.vs", vs),
        ("skin.ps", ps),
        vs_refs=[0],
        ps_refs=[],
    )
    assert encode("skin", "skin.vs", vs, "skin.ps", ps) == expected


def test_build_container_tables():
    container = build_container(
        "simple", "simple.vs", VERTEX_SOURCE, "simple.ps", PIXEL_SOURCE
    )
    assert [v.describe() for v in container.uniform_table] == [
        "mat4 MVP",
        "sampler2D Tex",
    ]
    assert container.vertex.used_uniform_names == ["MVP"]
    assert container.pixel.used_uniform_names == ["Tex"]


def test_encode_rejects_unencodable_name():
    with pytest.raises(InvalidPath):
        encode("bad\udcff", "a.vs", "", "a.ps", "")


def test_encode_container_unknown_reference():
    container = Container(
        name="c",
        uniform_table=[Variable("A", VariableType.FLOAT).zeroed()],
        vertex=ShaderStage("c.vs", "", ["B"]),
        pixel=ShaderStage("c.ps", "", []),
    )
    with pytest.raises(InternalInconsistency, match="Uniform B not found"):
        encode_container(container)


def test_source_text_preserved_byte_for_byte():
    vs = "// comment\r\nuniform float t;\r\nvoid main() { gl_Position = vec4(t); }\r\n"
    data = encode("crlf", "crlf.vs", vs, "crlf.ps", "void main(){}")
    assert decode(data).vertex.source == vs


def test_encode_oversized_array_is_a_ksh_error():
    vs = "uniform vec4 X[4294967296]; void main() { gl_Position = X[0]; }"
    with pytest.raises(UnsupportedType):
        encode("c", "c.vs", vs, "c.ps", "void main() {}")
