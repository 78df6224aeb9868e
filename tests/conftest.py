import struct
from typing import Iterable, Optional, Sequence, Tuple

import pytest

VERTEX_SOURCE = "uniform mat4 MVP; void main(){ gl_Position = MVP * vec4(0); }"
PIXEL_SOURCE = (
    "uniform sampler2D Tex; void main(){ gl_FragColor = texture2D(Tex, vec2(0)); }"
)

# (name, type id, array length, default words or None for sampler2D)
UniformSpec = Tuple[str, int, int, Optional[Sequence[int]]]


def u32(value: int) -> bytes:
    return struct.pack("<I", value)


def lp(data: bytes) -> bytes:
    return u32(len(data)) + data


def raw_container(
    name: str,
    uniforms: Iterable[UniformSpec],
    vs: Tuple[str, str],
    ps: Tuple[str, str],
    vs_refs: Sequence[int],
    ps_refs: Sequence[int],
    trailer: Sequence[int] = (),
    scope: int = 0,
) -> bytes:
    """Hand-assembled container bytes, independent of the writer under test."""
    uniforms = list(uniforms)
    out = lp(name.encode()) + u32(len(uniforms))
    for uname, type_id, length, words in uniforms:
        out += lp(uname.encode()) + u32(scope) + u32(type_id) + u32(length)
        if words is not None:
            out += u32(len(words)) + b"".join(u32(w) for w in words)
    for stage_name, source in (vs, ps):
        out += lp(stage_name.encode()) + lp(source.encode() + b"\x00")
    out += u32(len(vs_refs)) + b"".join(u32(i) for i in vs_refs)
    out += u32(len(ps_refs)) + b"".join(u32(i) for i in ps_refs)
    out += b"".join(u32(w) for w in trailer)
    return out


@pytest.fixture
def worked_example_bytes():
    """Container for the MVP / Tex shader pair, as the game ships it."""
    return raw_container(
        "simple",
        [("MVP", 20, 1, [0] * 16), ("Tex", 43, 1, None)],
        ("simple.vs", VERTEX_SOURCE),
        ("simple.ps", PIXEL_SOURCE),
        vs_refs=[0],
        ps_refs=[1],
    )


@pytest.fixture
def shader_dir(tmp_path):
    """Directory holding one vertex and one pixel shader."""
    d = tmp_path / "simple"
    d.mkdir()
    (d / "simple.vs").write_text(VERTEX_SOURCE)
    (d / "simple.ps").write_text(PIXEL_SOURCE)
    return d
