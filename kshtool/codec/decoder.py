# kshtool/codec/decoder.py
from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from kshtool.codec.container import Container, ShaderStage
from kshtool.codec.cursor import BinaryReader
from kshtool.codec.variable import Variable, VariableScope, VariableType
from kshtool.errors import CorruptContainer, InvalidEncoding

log = logging.getLogger(__name__)


def read_variable(reader: BinaryReader) -> Variable:
    """
    Format: [name] [scope] [type id] [array length] ([n] [n words])
    The default-data block is absent for sampler2D.
    """
    name = reader.read_string()
    scope = VariableScope.from_id(reader.read_u32())
    var_type = VariableType.from_id(reader.read_u32())
    length = reader.read_u32()

    var = Variable(
        name=name,
        type=var_type,
        scope=scope,
        array_length=length if length > 1 else None,
    )
    if var_type.has_default_block:
        var.default_data = reader.read_u32_array(reader.read_u32())
    return var


def read_stage_source(reader: BinaryReader, stage_name: str) -> str:
    """Shader blobs carry a trailing NUL that is not part of the text."""
    start = reader.tell()
    blob = reader.read_blob()
    if not blob or blob[-1] != 0:
        raise CorruptContainer(
            f"Source of {stage_name!r} at offset 0x{start:x} "
            "is missing its NUL terminator"
        )
    try:
        return blob[:-1].decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidEncoding(
            f"Invalid UTF-8 in source of {stage_name!r}: {e}"
        ) from e


def read_references(
    reader: BinaryReader, table: Sequence[Variable], stage_name: str
) -> List[str]:
    count = reader.read_u32()
    indices = reader.read_u32_array(count)
    names = []
    for index in indices.tolist():
        if index >= len(table):
            raise CorruptContainer(
                f"Stage {stage_name!r} references uniform {index}, "
                f"but the table only has {len(table)} entries"
            )
        names.append(table[index].name)
    return names


def read_trailer(reader: BinaryReader) -> NDArray[np.uint32]:
    # Words until EOF. Running out here is the normal way to stop.
    return reader.read_u32_array(reader.remaining() // 4)


def decode(data: bytes) -> Container:
    reader = BinaryReader(data)

    name = reader.read_string()
    uniform_count = reader.read_u32()
    log.debug("Container %r declares %d uniforms", name, uniform_count)
    uniforms = [read_variable(reader) for _ in range(uniform_count)]

    vs_name = reader.read_string()
    vs_source = read_stage_source(reader, vs_name)
    ps_name = reader.read_string()
    ps_source = read_stage_source(reader, ps_name)

    vertex = ShaderStage(
        vs_name, vs_source, read_references(reader, uniforms, vs_name)
    )
    pixel = ShaderStage(
        ps_name, ps_source, read_references(reader, uniforms, ps_name)
    )

    trailer = read_trailer(reader)
    if trailer.size:
        log.debug("Skipped %d trailing words", trailer.size)

    return Container(
        name=name,
        uniform_table=uniforms,
        vertex=vertex,
        pixel=pixel,
        trailer=trailer,
    )


def extract_sources(data: bytes) -> Tuple[str, ShaderStage, ShaderStage]:
    """Decode and keep only what is needed to write the two source files."""
    container = decode(data)
    return container.name, container.vertex, container.pixel
