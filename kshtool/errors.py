# kshtool/errors.py
from __future__ import annotations


class KshError(ValueError):
    """Base class for every failure raised by a conversion."""


class TruncatedInput(KshError):
    """The container ended before a required field could be read."""

    def __init__(self, offset: int, needed: int, available: int) -> None:
        super().__init__(
            f"Read past end at offset 0x{offset:x}: "
            f"needed {needed} bytes, {available} available"
        )
        self.offset = offset
        self.needed = needed
        self.available = available


class InvalidEncoding(KshError):
    """A length-prefixed string is not valid UTF-8."""


class InvalidValue(KshError):
    """Unknown scope or type id in a uniform record."""


class CorruptContainer(KshError):
    """Structurally invalid container (bad reference index, missing NUL)."""


class UnsupportedType(KshError):
    """GLSL construct outside what the container format can carry."""


class ParseError(KshError):
    """Malformed GLSL source. Wraps the parser diagnostic."""


class InternalInconsistency(KshError):
    """A stage references a uniform missing from the merged table."""


class InvalidPath(KshError):
    """A file or stage name cannot be represented as UTF-8."""


class AlreadyExists(KshError):
    """Output target exists and overwriting was not requested."""


class StagePairNotFound(KshError):
    """A directory does not hold exactly one vertex and one pixel shader."""
