"""packedstruct - binary struct and bitfield codec driven by a text schema.

Quick Start:
    >>> from packedstruct import Endianness, StructCodec, compile_struct, create_registry
    >>>
    >>> registry = create_registry()
    >>> compile_struct('''
    ...     u16 field1
    ...     u8 field2
    ...     Bitfield16{flagA: 1, flagB: 3, fieldC: 4} field3
    ... ''', "MyStruct", registry)
    >>> codec = StructCodec(registry)
    >>> value = codec.read(data, 0, "MyStruct", Endianness.LITTLE)
    >>> codec.write(out, 0, "MyStruct", value, Endianness.LITTLE)
"""

from importlib.metadata import PackageNotFoundError, version

from .codec import (
    Bitfield,
    Bitfield8,
    Bitfield16,
    Bitfield32,
    Bitfield64,
    DefinitionError,
    EncodeError,
    Endianness,
    FieldDescriptor,
    NameConflict,
    OutOfBounds,
    StructCodec,
    StructDescriptor,
    StructError,
    StructStream,
    TypeDescriptor,
    TypeMismatch,
    TypeRegistry,
    UnknownType,
    WidthOverflow,
    create_registry,
    default_registry,
    read_struct,
    to_jsonable,
    write_struct,
)
from .schema import StructCompiler, calculate_layout, compile_struct

try:
    __version__ = version("packedstruct")
except PackageNotFoundError:
    __version__ = "(local)"

__all__ = [
    # Core API
    "compile_struct",
    "StructCompiler",
    "StructCodec",
    "StructStream",
    "read_struct",
    "write_struct",
    "to_jsonable",
    "calculate_layout",
    # Registry and descriptors
    "TypeRegistry",
    "create_registry",
    "default_registry",
    "TypeDescriptor",
    "FieldDescriptor",
    "StructDescriptor",
    "Endianness",
    # Bitfields
    "Bitfield",
    "Bitfield8",
    "Bitfield16",
    "Bitfield32",
    "Bitfield64",
    # Exceptions
    "StructError",
    "DefinitionError",
    "UnknownType",
    "NameConflict",
    "WidthOverflow",
    "OutOfBounds",
    "TypeMismatch",
    "EncodeError",
    # Version
    "__version__",
]
