# kshtool/debug/dump.py
from __future__ import annotations

from typing import List, TextIO

from kshtool.codec.container import Container, ShaderStage
from kshtool.codec.reconcile import resolve_indices
from kshtool.glsl.uniforms import declared_uniforms
from kshtool.errors import KshError


def _stage_lines(container: Container, stage: ShaderStage) -> List[str]:
    indices = resolve_indices(container.uniform_table, stage.used_uniform_names)
    lines = [
        f"\n  Stage '{stage.name}'",
        f"    Source bytes  : {len(stage.source.encode('utf-8'))}",
        f"    Source lines  : {stage.source.count(chr(10)) + 1}",
        f"    References    : {len(indices)}",
    ]
    for index, name in zip(indices, stage.used_uniform_names):
        lines.append(f"      [{index:02d}] {name}")

    # Declared but not referenced: what a rebuild will drop.
    try:
        declared = {v.name for v in declared_uniforms(stage.source, stage.name)}
    except KshError as e:
        lines.append(f"    Analysis failed: {e}")
        return lines
    unused = sorted(declared - set(stage.used_uniform_names))
    if unused:
        lines.append(f"    Unused        : {', '.join(unused)}")
    return lines


def dump_container(
    container: Container,
    *,
    out: TextIO | None = None,
    header: str = "KSH CONTAINER DUMP",
) -> None:
    """
    Print a snapshot of a decoded container.

    Intended for debugging round-trip mismatches: table order, reference
    indices, default data and the unparsed trailer.
    """
    lines = ["=" * 80, header, "=" * 80]

    # ------------------------------------------------------------------
    # Overview
    # ------------------------------------------------------------------

    lines.append("\n[Container]")
    lines.append(f"  Name            : {container.name}")
    lines.append(f"  Uniform count   : {len(container.uniform_table)}")
    lines.append(f"  Trailer words   : {container.trailer.size}")

    # ------------------------------------------------------------------
    # Uniform table
    # ------------------------------------------------------------------

    lines.append("\n[Uniforms]")
    for i, var in enumerate(container.uniform_table):
        lines.append(f"  {i:02d}: {var.describe()} (type id {var.type.type_id})")
        if var.default_data.size:
            values = ", ".join(f"{v:g}" for v in var.default_floats().tolist())
            lines.append(f"      default: [{values}]")

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    lines.append("\n[Stages]")
    for stage in container.stages():
        lines.extend(_stage_lines(container, stage))

    if container.trailer.size:
        lines.append("\n[Trailer]")
        lines.append("  " + " ".join(f"{w:08x}" for w in container.trailer.tolist()))

    print("\n".join(lines), file=out)
