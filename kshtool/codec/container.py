# kshtool/codec/container.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, NewType, Optional

import numpy as np
from numpy.typing import NDArray

from kshtool.codec.variable import Variable

UniformIndex = NewType("UniformIndex", int)


@dataclass(slots=True)
class ShaderStage:
    """One half (vertex or pixel) of a container."""

    name: str
    source: str
    # Order = the stage's declaration order, not first use.
    used_uniform_names: List[str] = field(default_factory=list)


@dataclass(slots=True)
class Container:
    """
    In-memory form of a KSH file.
    Built for a single decode or encode call and discarded afterwards.
    """

    name: str
    uniform_table: List[Variable]
    vertex: ShaderStage
    pixel: ShaderStage
    trailer: NDArray[np.uint32] = field(
        default_factory=lambda: np.zeros(0, dtype=np.uint32), compare=False
    )

    def uniform(self, name: str) -> Optional[Variable]:
        for var in self.uniform_table:
            if var.name == name:
                return var
        return None

    def stages(self) -> tuple[ShaderStage, ShaderStage]:
        return self.vertex, self.pixel
