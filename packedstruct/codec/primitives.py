"""Primitive type table.

Fixed catalogue of scalar codecs seeded into every TypeRegistry. Numeric
primitives are thin wrappers over struct format characters.
"""

import struct as _struct
from typing import Any

from .errors import EncodeError, OutOfBounds
from .types import Endianness, TypeDescriptor

# Map primitive type names to struct format characters
FORMAT_CHARS: dict[str, str] = {
    "u8": "B",
    "s8": "b",
    "u16": "H",
    "s16": "h",
    "u32": "I",
    "s32": "i",
    "u64": "Q",
    "s64": "q",
    "float": "f",
    "double": "d",
}

# Size in bytes for each fixed-size primitive
TYPE_SIZES: dict[str, int] = {
    **{name: _struct.calcsize("<" + fmt) for name, fmt in FORMAT_CHARS.items()},
    "char": 1,
    "bool": 4,
}

STRING_TYPE = "string"

PRIMITIVE_TYPES = frozenset([*TYPE_SIZES, STRING_TYPE])


def unpack_value(fmt: str, buffer: memoryview, offset: int, endianness: Endianness) -> Any:
    try:
        return _struct.unpack_from(endianness.prefix + fmt, buffer, offset)[0]
    except _struct.error as e:
        raise OutOfBounds(f"Cannot read '{fmt}' at offset {offset}: {e}") from e


def pack_value(
    name: str, fmt: str, buffer: memoryview, offset: int, value: Any, endianness: Endianness
) -> None:
    try:
        _struct.pack_into(endianness.prefix + fmt, buffer, offset, value)
    except (_struct.error, OverflowError) as e:
        raise EncodeError(f"Cannot encode {value!r} as {name}: {e}") from e


def _numeric(name: str) -> TypeDescriptor:
    fmt = FORMAT_CHARS[name]
    size = TYPE_SIZES[name]

    def decode(buffer: memoryview, offset: int, endianness: Endianness, options: Any = None):
        return unpack_value(fmt, buffer, offset, endianness), size

    def encode(
        buffer: memoryview, offset: int, value: Any, endianness: Endianness, options: Any = None
    ) -> int:
        pack_value(name, fmt, buffer, offset, value, endianness)
        return size

    return TypeDescriptor(name, size, decode, encode)


def _decode_char(buffer: memoryview, offset: int, endianness: Endianness, options: Any = None):
    return unpack_value("c", buffer, offset, endianness).decode("latin-1"), 1


def _encode_char(
    buffer: memoryview, offset: int, value: Any, endianness: Endianness, options: Any = None
) -> int:
    if isinstance(value, str):
        try:
            value = value.encode("latin-1")
        except UnicodeEncodeError as e:
            raise EncodeError(f"Cannot encode {value!r} as char: {e}") from e
    elif isinstance(value, int) and not isinstance(value, bool):
        if not 0 <= value <= 0xFF:
            raise EncodeError(f"Cannot encode {value!r} as char: out of range")
        value = bytes([value])
    if not isinstance(value, bytes) or len(value) != 1:
        raise EncodeError(f"Cannot encode {value!r} as char: expected a single character")
    pack_value("char", "c", buffer, offset, value, endianness)
    return 1


def _decode_bool(buffer: memoryview, offset: int, endianness: Endianness, options: Any = None):
    return bool(unpack_value("I", buffer, offset, endianness)), 4


def _encode_bool(
    buffer: memoryview, offset: int, value: Any, endianness: Endianness, options: Any = None
) -> int:
    pack_value("bool", "I", buffer, offset, 1 if value else 0, endianness)
    return 4


def _decode_string(buffer: memoryview, offset: int, endianness: Endianness, options: Any = None):
    if offset < 0 or offset >= len(buffer):
        raise OutOfBounds(f"Cannot read string at offset {offset}")
    raw = bytes(buffer[offset:])
    end = raw.find(b"\x00")
    if end < 0:
        raise OutOfBounds(f"Unterminated string at offset {offset}")
    return raw[:end].decode("latin-1"), end + 1


def primitive_descriptors() -> list[TypeDescriptor]:
    """Build the primitive codec table."""
    descriptors = [_numeric(name) for name in FORMAT_CHARS]
    descriptors.append(TypeDescriptor("char", 1, _decode_char, _encode_char))
    descriptors.append(TypeDescriptor("bool", 4, _decode_bool, _encode_bool))
    descriptors.append(TypeDescriptor(STRING_TYPE, None, _decode_string))
    return descriptors


def is_primitive(name: str) -> bool:
    """Check if a type name is a primitive type."""
    return name in PRIMITIVE_TYPES
