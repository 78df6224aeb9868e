# kshtool/codec/reconcile.py
from __future__ import annotations

from dataclasses import dataclass
from itertools import chain
from typing import List, Sequence, Set

from kshtool.codec.container import UniformIndex
from kshtool.codec.variable import Variable
from kshtool.errors import InternalInconsistency


@dataclass(frozen=True)
class Reconciliation:
    """
    Merged uniform table plus each stage's references into it.

    The table order is the on-disk order and therefore fixes every index.
    """

    uniforms: List[Variable]
    vertex_indices: List[UniformIndex]
    pixel_indices: List[UniformIndex]


def merge_uniforms(
    vertex_live: Sequence[Variable], pixel_live: Sequence[Variable]
) -> List[Variable]:
    """
    Vertex uniforms first, then pixel-only uniforms in pixel declaration order.
    On a name clash the vertex declaration wins and the pixel one is dropped.
    """
    merged: List[Variable] = []
    seen: Set[str] = set()
    for var in chain(vertex_live, pixel_live):
        if var.name not in seen:
            merged.append(var)
            seen.add(var.name)
    return merged


def resolve_indices(
    table: Sequence[Variable], names: Sequence[str]
) -> List[UniformIndex]:
    positions = {var.name: UniformIndex(i) for i, var in enumerate(table)}
    indices: List[UniformIndex] = []
    for name in names:
        if name not in positions:
            raise InternalInconsistency(
                f"Uniform {name} not found in uniforms"
            )
        indices.append(positions[name])
    return indices


def reconcile(
    vertex_live: Sequence[Variable], pixel_live: Sequence[Variable]
) -> Reconciliation:
    merged = merge_uniforms(vertex_live, pixel_live)
    return Reconciliation(
        uniforms=merged,
        vertex_indices=resolve_indices(merged, [v.name for v in vertex_live]),
        pixel_indices=resolve_indices(merged, [v.name for v in pixel_live]),
    )
