# kshtool/assets/types.py
from dataclasses import dataclass


@dataclass(frozen=True)
class ShaderSource:
    """Raw shader source code of one stage."""

    source: str
    name: str  # File name written into the container.
    path: str  # For debugging / error reporting.
