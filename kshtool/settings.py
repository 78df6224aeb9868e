# kshtool/settings.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum


class StageKind(str, Enum):
    """File suffix of each shader stage on disk."""

    VERTEX = ".vs"
    PIXEL = ".ps"


CONTAINER_SUFFIX = ".ksh"


@dataclass(slots=True)
class SuffixSettings:
    """
    Settings: Which file extensions identify containers and stages.
    """

    container: str = CONTAINER_SUFFIX
    vertex: str = StageKind.VERTEX.value
    pixel: str = StageKind.PIXEL.value


@dataclass(slots=True)
class ConversionSettings:
    """
    Settings: The master configuration object passed to every file operation.
    """

    suffixes: SuffixSettings = field(default_factory=SuffixSettings)

    force: bool = False  # Overwrite existing outputs
    debug: bool = False
    workers: int = 2  # Batch conversion threads

    @property
    def log_level(self) -> int:
        return logging.DEBUG if self.debug else logging.INFO
