"""Parsed schema declarations, before type resolution."""

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin


@dataclass
class BitDecl(DataClassJsonMixin):
    """Represents one bitfield sub-field, e.g. 'flagA: 1'."""

    name: str
    width: int


@dataclass
class FieldDecl(DataClassJsonMixin):
    """Represents one schema line.

    bits is None unless the type is a Bitfield with a sub-field list.
    """

    type_name: str
    name: str
    array_length: int = 1
    bits: list[BitDecl] | None = None
    line: int = 0
    text: str = field(default="", compare=False)

    @property
    def layout(self) -> tuple[tuple[str, int], ...] | None:
        if self.bits is None:
            return None
        return tuple((bit.name, bit.width) for bit in self.bits)
