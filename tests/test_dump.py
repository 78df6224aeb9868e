import io

from kshtool.codec.decoder import decode
from kshtool.debug.dump import dump_container
from tests.conftest import raw_container, u32


def test_dump_sections(worked_example_bytes):
    buf = io.StringIO()
    dump_container(decode(worked_example_bytes + u32(0xDEADBEEF)), out=buf)
    text = buf.getvalue()

    assert "KSH CONTAINER DUMP" in text
    assert "Name            : simple" in text
    assert "00: mat4 MVP (type id 20)" in text
    assert "01: sampler2D Tex (type id 43)" in text
    assert "Stage 'simple.vs'" in text
    assert "[00] MVP" in text
    assert "[01] Tex" in text
    assert "deadbeef" in text


def test_dump_lists_unused_declarations():
    vs = "uniform float Spare; uniform float T; void main() { gl_Position = vec4(T); }"
    data = raw_container(
        "c",
        [("T", 0, 1, [0x3F800000])],
        ("c.vs", vs),
        ("c.ps", "void main() {}"),
        vs_refs=[0],
        ps_refs=[],
    )
    buf = io.StringIO()
    dump_container(decode(data), out=buf)
    text = buf.getvalue()

    assert "default: [1]" in text
    assert "Unused        : Spare" in text


def test_dump_survives_unparsable_source():
    data = raw_container(
        "c", [], ("c.vs", "not glsl at all {"), ("c.ps", ""), vs_refs=[], ps_refs=[]
    )
    buf = io.StringIO()
    dump_container(decode(data), out=buf)
    assert "Analysis failed" in buf.getvalue()
