"""Byte layout of compiled structs."""

from dataclasses import dataclass

from dataclasses_json import DataClassJsonMixin

from ..codec.types import StructDescriptor


@dataclass(frozen=True)
class FieldLayout(DataClassJsonMixin):
    """Placement of one struct member."""

    name: str
    type_name: str
    offset: int  # bytes from the start of the struct
    size: int  # total bytes, all array elements included
    array_length: int
    bits: dict[str, int] | None

    @property
    def element_size(self) -> int:
        return self.size // self.array_length


@dataclass(frozen=True)
class StructLayout(DataClassJsonMixin):
    """Complete layout of a struct."""

    name: str
    size: int
    fields: list[FieldLayout]


def calculate_layout(struct: StructDescriptor) -> StructLayout:
    """Calculate field offsets and sizes for a struct."""
    offsets = struct.offsets()
    fields = [
        FieldLayout(
            name=member.name,
            type_name=member.type_name,
            offset=offsets[member.name],
            size=member.size,
            array_length=member.array_length,
            bits=member.options,
        )
        for member in struct.fields
    ]
    return StructLayout(name=struct.name, size=struct.size, fields=fields)
