"""Runtime type descriptors for packedstruct.

These dataclasses describe the codecs held by a TypeRegistry: primitive and
bitfield codecs are TypeDescriptors, compiled schemas are StructDescriptors.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .errors import DefinitionError


class Endianness(StrEnum):
    """Byte order applied to every multi-byte primitive touched by one call."""

    LITTLE = "little"
    BIG = "big"

    @property
    def prefix(self) -> str:
        """The struct module byte order character."""
        return "<" if self is Endianness.LITTLE else ">"


Decoder = Callable[[memoryview, int, Endianness, Any], tuple[Any, int]]
Encoder = Callable[[memoryview, int, Any, Endianness, Any], int]


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """Describes a codec that can be registered by name.

    size is None for variable-length types, which can only be decoded and
    cannot appear as struct fields.
    """

    name: str
    size: int | None
    decode: Decoder
    encode: Encoder | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise DefinitionError(f"Type name must be a non-empty string, got {self.name!r}")
        if self.size is not None and (
            not isinstance(self.size, int) or isinstance(self.size, bool) or self.size <= 0
        ):
            raise DefinitionError(f"Type '{self.name}' has invalid size {self.size!r}")
        if not callable(self.decode):
            raise DefinitionError(f"Type '{self.name}' has no callable decoder")
        if self.encode is not None and not callable(self.encode):
            raise DefinitionError(f"Type '{self.name}' has a non-callable encoder")

    @property
    def is_variable(self) -> bool:
        return self.size is None


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Describes one member of a struct.

    bits holds the (name, width) layout of a bitfield member, in packing order.
    element_size is the byte size of one element of type_name.
    """

    type_name: str
    name: str
    element_size: int
    array_length: int = 1
    bits: tuple[tuple[str, int], ...] | None = None

    def __post_init__(self) -> None:
        if self.array_length < 1:
            raise DefinitionError(
                f"Field '{self.name}' must have a positive array length, got {self.array_length}"
            )

    @property
    def size(self) -> int:
        return self.element_size * self.array_length

    @property
    def is_array(self) -> bool:
        return self.array_length > 1

    @property
    def options(self) -> dict[str, int] | None:
        """Per-use options handed to the element codec."""
        return dict(self.bits) if self.bits is not None else None


@dataclass(frozen=True, slots=True)
class StructDescriptor:
    """Describes a compiled struct: an ordered, immutable list of fields."""

    name: str
    fields: tuple[FieldDescriptor, ...]
    _index: dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise DefinitionError(f"Struct name must be a non-empty string, got {self.name!r}")
        index: dict[str, int] = {}
        for i, member in enumerate(self.fields):
            if member.name in index:
                raise DefinitionError(f"Duplicate field '{member.name}' in struct '{self.name}'")
            index[member.name] = i
        object.__setattr__(self, "_index", index)

    @property
    def size(self) -> int:
        return sum(member.size for member in self.fields)

    def get_field(self, name: str) -> FieldDescriptor:
        return self.fields[self._index[name]]

    def offsets(self) -> dict[str, int]:
        """Byte offset of each field relative to the start of the struct."""
        result: dict[str, int] = {}
        position = 0
        for member in self.fields:
            result[member.name] = position
            position += member.size
        return result
