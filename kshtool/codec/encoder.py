# kshtool/codec/encoder.py
from __future__ import annotations

import logging
from typing import Sequence

from kshtool.codec.container import Container, ShaderStage
from kshtool.codec.cursor import BinaryWriter
from kshtool.codec.reconcile import reconcile, resolve_indices
from kshtool.codec.variable import Variable, VariableScope
from kshtool.errors import InvalidPath
from kshtool.glsl.uniforms import live_uniforms

log = logging.getLogger(__name__)


def check_name(name: str, what: str) -> None:
    """Names written to the container must survive a UTF-8 round trip."""
    try:
        name.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidPath(f"{what} contains invalid UTF-8: {name!r}") from e


def write_variable(writer: BinaryWriter, var: Variable) -> None:
    writer.write_string(var.name)
    writer.write_u32(VariableScope.UNIFORM)
    writer.write_u32(var.type.type_id)
    writer.write_u32(var.array_length if var.array_length is not None else 1)
    if var.type.has_default_block:
        writer.write_u32(var.default_data.size)
        writer.write_u32_array(var.default_data)


def write_stage_source(writer: BinaryWriter, stage: ShaderStage) -> None:
    writer.write_string(stage.name)
    writer.write_blob(stage.source.encode("utf-8") + b"\x00")


def write_references(writer: BinaryWriter, indices: Sequence[int]) -> None:
    writer.write_u32(len(indices))
    writer.write_u32_array(indices)


def encode_container(container: Container) -> bytes:
    """
    Serialize a Container as-is, default data included.
    The trailer is never written back.
    """
    check_name(container.name, "Container name")
    for stage in container.stages():
        check_name(stage.name, "Stage name")

    table = container.uniform_table
    vertex_indices = resolve_indices(table, container.vertex.used_uniform_names)
    pixel_indices = resolve_indices(table, container.pixel.used_uniform_names)

    writer = BinaryWriter()
    writer.write_string(container.name)
    writer.write_u32(len(table))
    for var in table:
        write_variable(writer, var)

    write_stage_source(writer, container.vertex)
    write_stage_source(writer, container.pixel)

    write_references(writer, vertex_indices)
    write_references(writer, pixel_indices)

    log.debug(
        "Encoded %r: %d uniforms, %d bytes",
        container.name,
        len(table),
        len(writer),
    )
    return writer.getvalue()


def build_container(
    name: str, vs_name: str, vs_source: str, ps_name: str, ps_source: str
) -> Container:
    """Run uniform analysis on both stages and assemble the container."""
    vertex_live = live_uniforms(vs_source, stage=vs_name)
    pixel_live = live_uniforms(ps_source, stage=ps_name)
    merged = reconcile(vertex_live, pixel_live)

    return Container(
        name=name,
        uniform_table=[var.zeroed() for var in merged.uniforms],
        vertex=ShaderStage(vs_name, vs_source, [v.name for v in vertex_live]),
        pixel=ShaderStage(ps_name, ps_source, [v.name for v in pixel_live]),
    )


def encode(
    name: str, vs_name: str, vs_source: str, ps_name: str, ps_source: str
) -> bytes:
    check_name(name, "Container name")
    check_name(vs_name, "Vertex shader name")
    check_name(ps_name, "Pixel shader name")
    return encode_container(
        build_container(name, vs_name, vs_source, ps_name, ps_source)
    )
