"""Sequential, cursor-based access to a buffer through a StructCodec."""

import math
import os
from collections.abc import Iterator
from typing import Any, Self

from .errors import OutOfBounds, TypeMismatch
from .serialization import Buffer, StructCodec, as_view
from .types import Endianness


class StructStream:
    """A cursor over a byte buffer for sequential and random-access decoding.

    The stream sees buffer[offset:]; all positions are relative to offset.
    Writing requires a writable buffer.

    Example:
        >>> stream = StructStream(data)
        >>> header = stream.read_next("Header", Endianness.LITTLE)
        >>> count = stream.read_next("u16", Endianness.LITTLE)
        >>> stream.tell()
        12
    """

    SEEK_SET = os.SEEK_SET
    SEEK_CUR = os.SEEK_CUR
    SEEK_END = os.SEEK_END

    def __init__(self, buffer: Buffer, offset: int = 0, codec: StructCodec | None = None) -> None:
        view = as_view(buffer)
        if not 0 <= offset <= len(view):
            raise OutOfBounds(f"Stream offset {offset} outside buffer of {len(view)} bytes")
        self._buffer = buffer
        self._view = view[offset:]
        self._codec = codec if codec is not None else StructCodec()
        self._position = 0

    @property
    def buffer(self) -> Buffer:
        """The underlying buffer."""
        return self._buffer

    @property
    def codec(self) -> StructCodec:
        return self._codec

    def __len__(self) -> int:
        return len(self._view)

    def seek(self, offset: int, whence: int = SEEK_SET) -> Self:
        """Move the cursor.

        Args:
            offset: Byte offset, interpreted according to whence.
            whence: SEEK_SET (from the start), SEEK_CUR (from the cursor) or
                SEEK_END (from the end of the stream).

        Returns:
            The stream, for chaining.
        """
        if isinstance(offset, bool) or not isinstance(offset, (int, float)):
            raise TypeMismatch(f"Seek offset must be a number, got {type(offset).__name__}")
        if isinstance(offset, float):
            if not math.isfinite(offset):
                raise OutOfBounds(f"Seek offset must be finite, got {offset}")
            if not offset.is_integer():
                raise TypeMismatch(f"Seek offset must be a whole number, got {offset}")
            offset = int(offset)

        if whence == self.SEEK_SET:
            self._position = offset
        elif whence == self.SEEK_CUR:
            self._position += offset
        elif whence == self.SEEK_END:
            self._position = len(self._view) + offset
        else:
            raise ValueError(f"Invalid whence value {whence!r}")
        return self

    def tell(self) -> int:
        """Return the current cursor position."""
        return self._position

    def read_next(self, type_name: str, endianness: Endianness = Endianness.BIG) -> Any:
        """Read a value at the cursor and advance past it."""
        value, count = self._codec.read_value(self._view, self._position, type_name, endianness)
        self._position += count
        return value

    def read_at(
        self, offset: int, type_name: str, endianness: Endianness = Endianness.BIG
    ) -> Any:
        """Read a value at offset without moving the cursor."""
        value, _ = self._codec.read_value(self._view, offset, type_name, endianness)
        return value

    def write_next(
        self, type_name: str, value: Any, endianness: Endianness = Endianness.BIG
    ) -> int:
        """Write a value at the cursor and advance past it."""
        count = self._codec.write_value(self._view, self._position, type_name, value, endianness)
        self._position += count
        return count

    def write_at(
        self, offset: int, type_name: str, value: Any, endianness: Endianness = Endianness.BIG
    ) -> int:
        """Write a value at offset without moving the cursor."""
        return self._codec.write_value(self._view, offset, type_name, value, endianness)

    def iter_values(
        self, type_name: str = "u8", endianness: Endianness = Endianness.BIG
    ) -> Iterator[Any]:
        """Yield consecutive values from the cursor until the end of the stream."""
        while self._position < len(self._view):
            yield self.read_next(type_name, endianness)

    def __iter__(self) -> Iterator[Any]:
        return self.iter_values()
