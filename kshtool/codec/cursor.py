# kshtool/codec/cursor.py
from __future__ import annotations

import struct
from typing import Iterable

import numpy as np
from numpy.typing import NDArray

from kshtool.errors import InvalidEncoding, TruncatedInput

# < = Little Endian, I = Unsigned Int (4 bytes)
_U32 = struct.Struct("<I")
U32_DTYPE = np.dtype("<u4")


class BinaryReader:
    """
    Forward-only reader over an in-memory container.
    Every read either consumes exactly what it asks for or raises TruncatedInput.
    """

    def __init__(self, data: bytes) -> None:
        self.data = memoryview(data)
        self.pos = 0
        self.size = len(data)

    def remaining(self) -> int:
        return self.size - self.pos

    def tell(self) -> int:
        return self.pos

    def _take(self, count: int) -> memoryview:
        if self.pos + count > self.size:
            raise TruncatedInput(self.pos, count, self.remaining())
        chunk = self.data[self.pos : self.pos + count]
        self.pos += count
        return chunk

    def read_u32(self) -> int:
        return _U32.unpack(self._take(_U32.size))[0]

    def read_u32_array(self, count: int) -> NDArray[np.uint32]:
        """Read `count` words at once. Returned array owns its memory."""
        chunk = self._take(count * _U32.size)
        if not count:
            return np.zeros(0, dtype=np.uint32)
        return np.frombuffer(chunk, dtype=U32_DTYPE).astype(np.uint32)

    def read_blob(self) -> bytes:
        length = self.read_u32()
        return bytes(self._take(length))

    def read_string(self) -> str:
        start = self.pos
        blob = self.read_blob()
        try:
            return blob.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidEncoding(
                f"Invalid UTF-8 in string at offset 0x{start:x}: {e}"
            ) from e


class BinaryWriter:
    """Append-only counterpart of BinaryReader."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def __len__(self) -> int:
        return len(self._buffer)

    def write_u32(self, value: int) -> None:
        self._buffer += _U32.pack(value)

    def write_u32_array(self, values: Iterable[int] | NDArray[np.uint32]) -> None:
        self._buffer += np.asarray(values, dtype=U32_DTYPE).tobytes()

    def write_blob(self, blob: bytes) -> None:
        self.write_u32(len(blob))
        self._buffer += blob

    def write_string(self, value: str) -> None:
        self.write_blob(value.encode("utf-8"))

    def getvalue(self) -> bytes:
        return bytes(self._buffer)
