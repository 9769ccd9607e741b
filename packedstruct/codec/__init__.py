"""Runtime codec: type registry, bitfields and struct serialization."""

from .bitfield import (
    BITFIELD_TYPES,
    RESERVED_MARKER,
    Bitfield,
    Bitfield8,
    Bitfield16,
    Bitfield32,
    Bitfield64,
    bitfield_descriptors,
    register_bitfields,
)
from .errors import (
    DefinitionError,
    EncodeError,
    NameConflict,
    OutOfBounds,
    StructError,
    TypeMismatch,
    UnknownType,
    WidthOverflow,
)
from .primitives import PRIMITIVE_TYPES, primitive_descriptors
from .registry import TypeRegistry, create_registry, default_registry
from .serialization import StructCodec, read_struct, to_jsonable, write_struct
from .stream import StructStream
from .types import Endianness, FieldDescriptor, StructDescriptor, TypeDescriptor

__all__ = [
    # Descriptors
    "Endianness",
    "TypeDescriptor",
    "FieldDescriptor",
    "StructDescriptor",
    # Registry
    "TypeRegistry",
    "create_registry",
    "default_registry",
    "PRIMITIVE_TYPES",
    "primitive_descriptors",
    # Bitfields
    "Bitfield",
    "Bitfield8",
    "Bitfield16",
    "Bitfield32",
    "Bitfield64",
    "BITFIELD_TYPES",
    "RESERVED_MARKER",
    "bitfield_descriptors",
    "register_bitfields",
    # Codec
    "StructCodec",
    "StructStream",
    "read_struct",
    "write_struct",
    "to_jsonable",
    # Exceptions
    "StructError",
    "DefinitionError",
    "UnknownType",
    "NameConflict",
    "WidthOverflow",
    "OutOfBounds",
    "TypeMismatch",
    "EncodeError",
]
