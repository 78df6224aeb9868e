# kshtool/codec/variable.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, Optional

import numpy as np
from numpy.typing import NDArray

from kshtool.errors import InvalidValue, UnsupportedType


class VariableScope(IntEnum):
    UNIFORM = 0

    @classmethod
    def from_id(cls, value: int) -> VariableScope:
        try:
            return cls(value)
        except ValueError:
            raise InvalidValue(f"Invalid variable scope: {value}") from None


class VariableType(Enum):
    """
    Uniform types the container can describe.

    Each member's value is (type id, GLSL name, default-data arity).
    """

    FLOAT = (0, "float", 1)
    VEC2 = (2, "vec2", 2)
    VEC3 = (3, "vec3", 3)
    VEC4 = (4, "vec4", 4)
    MAT4 = (20, "mat4", 16)
    SAMPLER2D = (43, "sampler2D", 0)

    @property
    def type_id(self) -> int:
        return self.value[0]

    @property
    def glsl_name(self) -> str:
        return self.value[1]

    @property
    def arity(self) -> int:
        return self.value[2]

    @property
    def has_default_block(self) -> bool:
        return self is not VariableType.SAMPLER2D

    @classmethod
    def from_id(cls, type_id: int) -> VariableType:
        t = _BY_ID.get(type_id)
        if t is None:
            raise InvalidValue(f"Invalid type id: {type_id}")
        return t

    @classmethod
    def from_glsl(cls, name: str) -> VariableType:
        t = _BY_GLSL_NAME.get(name)
        if t is None:
            raise UnsupportedType(f"Unsupported uniform type: {name}")
        return t


_BY_ID: Dict[int, VariableType] = {t.type_id: t for t in VariableType}
_BY_GLSL_NAME: Dict[str, VariableType] = {t.glsl_name: t for t in VariableType}


def _no_words() -> NDArray[np.uint32]:
    return np.zeros(0, dtype=np.uint32)


@dataclass(slots=True)
class Variable:
    """
    One entry of a container's uniform table.

    `array_length` is None for scalars. `default_data` holds raw 32-bit words;
    its size follows `default_data_length()` when the variable is built from
    source, and whatever the file says when decoded.
    """

    name: str
    type: VariableType
    scope: VariableScope = VariableScope.UNIFORM
    array_length: Optional[int] = None
    default_data: NDArray[np.uint32] = field(default_factory=_no_words, compare=False)

    @property
    def is_array(self) -> bool:
        return self.array_length is not None

    def default_data_length(self) -> int:
        """Words in the default-data block written for a freshly built variable."""
        # Arrays always get an empty block, whatever their element type.
        if self.is_array:
            return 0
        return self.type.arity

    def zeroed(self) -> Variable:
        """Copy with a zero-filled default-data block of the canonical size."""
        return Variable(
            name=self.name,
            type=self.type,
            scope=self.scope,
            array_length=self.array_length,
            default_data=np.zeros(self.default_data_length(), dtype=np.uint32),
        )

    def default_floats(self) -> NDArray[np.float32]:
        """Default data reinterpreted as float32 (how the engine consumes it)."""
        return self.default_data.view(np.float32)

    def describe(self) -> str:
        suffix = f"[{self.array_length}]" if self.is_array else ""
        return f"{self.type.glsl_name} {self.name}{suffix}"
