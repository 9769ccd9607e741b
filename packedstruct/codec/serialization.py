"""Reading and writing registered structs against byte buffers."""

import math
from collections.abc import Mapping, Sequence
from typing import Any

from .bitfield import RESERVED_MARKER, Bitfield
from .errors import EncodeError, OutOfBounds, TypeMismatch
from .registry import Descriptor, TypeRegistry, default_registry
from .types import Endianness, FieldDescriptor, StructDescriptor

Buffer = bytes | bytearray | memoryview


def as_view(buffer: Any, writable: bool = False) -> memoryview:
    """Return a flat unsigned byte view over a buffer.

    Raises:
        TypeMismatch: If buffer is not bytes, bytearray or memoryview, is not
            contiguous, or is read-only when writable is requested.
    """
    if not isinstance(buffer, (bytes, bytearray, memoryview)):
        raise TypeMismatch(
            f"Expected bytes, bytearray or memoryview, got {type(buffer).__name__}"
        )
    view = buffer if isinstance(buffer, memoryview) else memoryview(buffer)
    if not view.c_contiguous:
        raise TypeMismatch("Expected a contiguous buffer, got a strided memoryview")
    if view.ndim != 1 or view.format != "B":
        view = view.cast("B")
    if writable and view.readonly:
        raise TypeMismatch("Cannot write to a read-only buffer")
    return view


def check_position(position: Any) -> int:
    """Validate a byte position and return it as an int.

    Raises:
        TypeMismatch: If position is not a whole number.
        OutOfBounds: If position is negative, NaN or infinite.
    """
    if isinstance(position, bool) or not isinstance(position, (int, float)):
        raise TypeMismatch(f"Position must be a number, got {type(position).__name__}")
    if isinstance(position, float):
        if not math.isfinite(position):
            raise OutOfBounds(f"Position must be finite, got {position}")
        if not position.is_integer():
            raise TypeMismatch(f"Position must be a whole number, got {position}")
        position = int(position)
    if position < 0:
        raise OutOfBounds(f"Position must not be negative, got {position}")
    return position


def _check_span(view: memoryview, position: Any, size: int, name: str) -> int:
    position = check_position(position)
    if position + size > len(view):
        raise OutOfBounds(
            f"'{name}' needs {size} bytes at position {position}, "
            f"but the buffer holds {len(view)}"
        )
    return position


class StructCodec:
    """Reads and writes values of types held by a TypeRegistry.

    Example:
        >>> codec = StructCodec(registry)
        >>> value = codec.read(data, 0, "Header", Endianness.LITTLE)
        >>> codec.write(out, 0, "Header", value, Endianness.LITTLE)
    """

    def __init__(self, registry: TypeRegistry | None = None) -> None:
        self.registry = registry if registry is not None else default_registry

    def read(
        self,
        buffer: Buffer,
        position: int,
        struct_name: str,
        endianness: Endianness = Endianness.BIG,
    ) -> dict[str, Any]:
        """Read a struct into a dict of field name to value, in declaration order.

        Raises:
            TypeMismatch: If buffer is not a binary buffer.
            UnknownType: If struct_name is not a registered struct.
            OutOfBounds: If the struct does not fit in the buffer at position.
        """
        view = as_view(buffer)
        struct = self.registry.lookup_struct(struct_name)
        position = _check_span(view, position, struct.size, struct_name)
        value, _ = self._read_struct(view, position, struct, Endianness(endianness))
        return value

    def write(
        self,
        buffer: bytearray | memoryview,
        position: int,
        struct_name: str,
        value: Mapping[str, Any],
        endianness: Endianness = Endianness.BIG,
    ) -> int:
        """Write a struct from a mapping of field name to value.

        Bounds are checked before any byte is written. Fields are then written
        one by one, so an encoding error in a later field leaves the earlier
        fields already written.

        Returns:
            Number of bytes written.

        Raises:
            TypeMismatch: If buffer is not a writable binary buffer.
            UnknownType: If struct_name is not a registered struct.
            OutOfBounds: If position is invalid or the struct does not fit.
            EncodeError: If a field value cannot be encoded.
        """
        view = as_view(buffer, writable=True)
        struct = self.registry.lookup_struct(struct_name)
        position = _check_span(view, position, struct.size, struct_name)
        return self._write_struct(view, position, struct, value, Endianness(endianness))

    def read_value(
        self,
        buffer: Buffer,
        position: int,
        type_name: str,
        endianness: Endianness = Endianness.BIG,
        options: Any = None,
    ) -> tuple[Any, int]:
        """Read one value of any registered type.

        Returns:
            Tuple of (value, bytes_consumed).
        """
        view = as_view(buffer)
        descriptor = self.registry.lookup(type_name)
        if descriptor.size is None:
            position = check_position(position)
        else:
            position = _check_span(view, position, descriptor.size, type_name)
        return self._read(view, position, descriptor, Endianness(endianness), options)

    def write_value(
        self,
        buffer: bytearray | memoryview,
        position: int,
        type_name: str,
        value: Any,
        endianness: Endianness = Endianness.BIG,
        options: Any = None,
    ) -> int:
        """Write one value of any registered type. Returns the number of bytes written."""
        view = as_view(buffer, writable=True)
        descriptor = self.registry.lookup(type_name)
        if descriptor.size is None:
            raise TypeMismatch(f"Type '{type_name}' has no encoder")
        position = _check_span(view, position, descriptor.size, type_name)
        return self._write(view, position, descriptor, value, Endianness(endianness), options)

    def _read(
        self,
        view: memoryview,
        position: int,
        descriptor: Descriptor,
        endianness: Endianness,
        options: Any,
    ) -> tuple[Any, int]:
        if isinstance(descriptor, StructDescriptor):
            return self._read_struct(view, position, descriptor, endianness)
        return descriptor.decode(view, position, endianness, options)

    def _write(
        self,
        view: memoryview,
        position: int,
        descriptor: Descriptor,
        value: Any,
        endianness: Endianness,
        options: Any,
    ) -> int:
        if isinstance(descriptor, StructDescriptor):
            return self._write_struct(view, position, descriptor, value, endianness)
        if descriptor.encode is None:
            raise TypeMismatch(f"Type '{descriptor.name}' has no encoder")
        return descriptor.encode(view, position, value, endianness, options)

    def _read_struct(
        self,
        view: memoryview,
        position: int,
        struct: StructDescriptor,
        endianness: Endianness,
    ) -> tuple[dict[str, Any], int]:
        result: dict[str, Any] = {}
        cursor = position

        for member in struct.fields:
            descriptor = self.registry.lookup(member.type_name)
            options = member.options

            if member.array_length == 1:
                result[member.name], count = self._read(
                    view, cursor, descriptor, endianness, options
                )
                cursor += count
            else:
                items = []
                for _ in range(member.array_length):
                    item, count = self._read(view, cursor, descriptor, endianness, options)
                    cursor += count
                    items.append(item)
                result[member.name] = items

        return result, cursor - position

    def _write_struct(
        self,
        view: memoryview,
        position: int,
        struct: StructDescriptor,
        value: Any,
        endianness: Endianness,
    ) -> int:
        if not isinstance(value, Mapping):
            raise EncodeError(
                f"Struct '{struct.name}' must be written from a mapping, "
                f"got {type(value).__name__}"
            )
        cursor = position

        for member in struct.fields:
            if member.name not in value:
                raise EncodeError(f"Missing field '{member.name}' for struct '{struct.name}'")
            descriptor = self.registry.lookup(member.type_name)
            options = member.options

            if member.array_length == 1:
                cursor += self._write(
                    view, cursor, descriptor, value[member.name], endianness, options
                )
            else:
                for item in _array_items(member, value[member.name]):
                    cursor += self._write(view, cursor, descriptor, item, endianness, options)

        return cursor - position


def _array_items(member: FieldDescriptor, items: Any) -> Sequence[Any]:
    # str and bytes are sequences too, so char[N] fields accept "abcd" or b"abcd"
    if isinstance(items, Sequence):
        if len(items) != member.array_length:
            raise EncodeError(
                f"Field '{member.name}' must have {member.array_length} elements, "
                f"got {len(items)}"
            )
        return items
    raise EncodeError(f"Field '{member.name}' must be a sequence, got {type(items).__name__}")


def to_jsonable(value: Any) -> Any:
    """Project a read value into plain JSON-compatible data.

    Bitfields use their project() form and reserved-marker struct fields are
    dropped.
    """
    if isinstance(value, Bitfield):
        return value.project()
    if isinstance(value, Mapping):
        return {
            name: to_jsonable(item)
            for name, item in value.items()
            if not str(name).startswith(RESERVED_MARKER)
        }
    if isinstance(value, list):
        return [to_jsonable(item) for item in value]
    return value


def read_struct(
    buffer: Buffer,
    position: int,
    struct_name: str,
    endianness: Endianness = Endianness.BIG,
) -> dict[str, Any]:
    """Read a struct registered in the default registry."""
    return StructCodec().read(buffer, position, struct_name, endianness)


def write_struct(
    buffer: bytearray | memoryview,
    position: int,
    struct_name: str,
    value: Mapping[str, Any],
    endianness: Endianness = Endianness.BIG,
) -> int:
    """Write a struct registered in the default registry."""
    return StructCodec().write(buffer, position, struct_name, value, endianness)
