"""Bit-packed sub-fields inside fixed-width unsigned integer containers.

Sub-fields are packed most-significant-bit first in declaration order: the
first field occupies the top bits of the container. Field names starting with
RESERVED_MARKER (padding, unused bits) are hidden from project() but can still
be read and written.
"""

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, ClassVar, Self

from .errors import DefinitionError, EncodeError, TypeMismatch, WidthOverflow
from .primitives import FORMAT_CHARS, pack_value, unpack_value
from .types import Endianness, TypeDescriptor

if TYPE_CHECKING:
    from .registry import TypeRegistry

RESERVED_MARKER = "#"

Layout = Mapping[str, int] | Iterable[tuple[str, int]]


def build_layout(
    layout: Layout | None, width: int, container: str = "Bitfield"
) -> tuple[tuple[str, int, int], ...]:
    """Validate a sub-field layout and compute bit offsets.

    Returns:
        Rows of (name, bit width, bit offset), in packing order.

    Raises:
        DefinitionError: If a name is repeated or a width is not a positive integer.
        WidthOverflow: If the widths add up to more than the container width.
    """
    items = layout.items() if isinstance(layout, Mapping) else (layout or ())
    rows: list[tuple[str, int, int]] = []
    seen: set[str] = set()
    offset = 0

    for name, bits in items:
        if not isinstance(name, str) or not name.lstrip(RESERVED_MARKER):
            raise DefinitionError(f"Invalid bitfield sub-field name {name!r}")
        if name in seen:
            raise DefinitionError(f"Duplicate bitfield sub-field '{name}'")
        if not isinstance(bits, int) or isinstance(bits, bool) or bits <= 0:
            raise DefinitionError(f"Bitfield sub-field '{name}' has invalid width {bits!r}")
        seen.add(name)
        rows.append((name, bits, offset))
        offset += bits

    if offset > width:
        raise WidthOverflow(
            f"{container} sub-fields use {offset} bits, but the container holds {width}"
        )
    return tuple(rows)


def _parse_field_value(name: str, value: Any) -> int:
    if isinstance(value, str):
        try:
            return int(value, 2) if value.startswith("0b") else int(value, 0)
        except ValueError as e:
            raise EncodeError(f"Invalid value {value!r} for bitfield sub-field '{name}'") from e
    if isinstance(value, int):
        return int(value)
    raise EncodeError(f"Invalid value {value!r} for bitfield sub-field '{name}'")


class Bitfield:
    """A fixed-width unsigned integer subdivided into named sub-fields.

    Concrete containers are Bitfield8, Bitfield16, Bitfield32 and Bitfield64.

    Example:
        >>> flags = Bitfield16(0b1010011100000000, {"flagA": 1, "flagB": 3, "fieldC": 4})
        >>> flags.get("fieldC")
        7
        >>> flags.set("flagB", 0b111)
        >>> flags.project()
        {'flagA': True, 'flagB': '0b111', 'fieldC': '0b0111'}
    """

    width: ClassVar[int] = 0
    size: ClassVar[int] = 0
    container: ClassVar[str] = ""

    __slots__ = ("raw", "_fields", "_index")

    def __init__(self, raw: int = 0, layout: Layout | None = None) -> None:
        if not self.width:
            raise TypeMismatch("Bitfield is abstract, use Bitfield8/16/32/64")
        if not isinstance(raw, int) or isinstance(raw, bool):
            raise TypeMismatch(f"Bitfield raw value must be an int, got {type(raw).__name__}")
        if not 0 <= raw < (1 << self.width):
            raise WidthOverflow(f"Raw value {raw} does not fit in {self.width} bits")

        self._fields = build_layout(layout, self.width, type(self).__name__)
        self._index = {name: i for i, (name, _, _) in enumerate(self._fields)}
        self.raw = raw

    def _row(self, name: str) -> tuple[str, int, int]:
        try:
            return self._fields[self._index[name]]
        except KeyError:
            raise KeyError(f"{type(self).__name__} has no sub-field '{name}'") from None

    def get(self, name: str) -> int:
        """Return the unsigned value of a sub-field."""
        _, bits, offset = self._row(name)
        return (self.raw >> (self.width - offset - bits)) & ((1 << bits) - 1)

    def set(self, name: str, value: int) -> None:
        """Replace the bits of one sub-field.

        value is truncated to the sub-field width, other bits are kept.
        """
        _, bits, offset = self._row(name)
        shift = self.width - offset - bits
        mask = ((1 << bits) - 1) << shift
        self.raw = (self.raw & ~mask) | ((int(value) << shift) & mask)

    def __getitem__(self, name: str) -> int:
        return self.get(name)

    def __setitem__(self, name: str, value: int) -> None:
        self.set(name, value)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    @property
    def layout(self) -> tuple[tuple[str, int], ...]:
        """The (name, width) pairs of all sub-fields, reserved ones included."""
        return tuple((name, bits) for name, bits, _ in self._fields)

    def fields(self) -> list[str]:
        return [name for name, _, _ in self._fields]

    def bit_offset(self, name: str) -> int:
        return self._row(name)[2]

    def project(self) -> dict[str, bool | str]:
        """External representation, skipping reserved sub-fields.

        1-bit sub-fields become booleans, wider ones binary digit strings
        zero-padded to their width.
        """
        result: dict[str, bool | str] = {}
        for name, bits, _ in self._fields:
            if name.startswith(RESERVED_MARKER):
                continue
            value = self.get(name)
            result[name] = bool(value) if bits == 1 else "0b" + format(value, f"0{bits}b")
        return result

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bitfield):
            return NotImplemented
        return (self.width, self.raw, self.layout) == (other.width, other.raw, other.layout)

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return "0b" + format(self.raw, f"0{self.width}b")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self}, {dict(self.layout)!r})"

    @classmethod
    def coerce(cls, value: Any, layout: Layout | None = None) -> Self:
        """Turn a Bitfield, a raw int or a mapping of sub-field values into a Bitfield.

        Mappings may hold ints, booleans or '0b...' strings, as produced by project().
        """
        if isinstance(value, Bitfield):
            if value.width != cls.width:
                raise EncodeError(f"Cannot encode {type(value).__name__} as {cls.__name__}")
            return value  # type: ignore[return-value]
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value, layout)
        if isinstance(value, Mapping):
            result = cls(0, layout)
            for name, item in value.items():
                if name not in result:
                    raise EncodeError(f"{cls.__name__} has no sub-field '{name}'")
                result.set(name, _parse_field_value(name, item))
            return result
        raise EncodeError(f"Cannot encode {value!r} as {cls.__name__}")

    @classmethod
    def decode(
        cls,
        buffer: memoryview,
        position: int,
        endianness: Endianness = Endianness.BIG,
        layout: Layout | None = None,
    ) -> Self:
        """Read the container integer and apply a per-use sub-field layout."""
        raw = unpack_value(FORMAT_CHARS[cls.container], buffer, position, endianness)
        return cls(raw, layout)

    @classmethod
    def encode(
        cls,
        buffer: memoryview,
        position: int,
        value: Any,
        endianness: Endianness = Endianness.BIG,
        layout: Layout | None = None,
    ) -> int:
        """Write the raw container integer. Returns the number of bytes written."""
        raw = cls.coerce(value, layout).raw
        pack_value(cls.__name__, FORMAT_CHARS[cls.container], buffer, position, raw, endianness)
        return cls.size


class Bitfield8(Bitfield):
    width = 8
    size = 1
    container = "u8"
    __slots__ = ()


class Bitfield16(Bitfield):
    width = 16
    size = 2
    container = "u16"
    __slots__ = ()


class Bitfield32(Bitfield):
    width = 32
    size = 4
    container = "u32"
    __slots__ = ()


class Bitfield64(Bitfield):
    width = 64
    size = 8
    container = "u64"
    __slots__ = ()


BITFIELD_TYPES: dict[str, type[Bitfield]] = {
    cls.__name__: cls for cls in (Bitfield8, Bitfield16, Bitfield32, Bitfield64)
}


def bitfield_descriptor(cls: type[Bitfield]) -> TypeDescriptor:
    """Wrap a bitfield container as a registrable codec.

    The field layout arrives through the codec options.
    """

    def decode(buffer: memoryview, offset: int, endianness: Endianness, options: Any = None):
        return cls.decode(buffer, offset, endianness, options), cls.size

    def encode(
        buffer: memoryview, offset: int, value: Any, endianness: Endianness, options: Any = None
    ) -> int:
        return cls.encode(buffer, offset, value, endianness, options)

    return TypeDescriptor(cls.__name__, cls.size, decode, encode)


def bitfield_descriptors() -> list[TypeDescriptor]:
    return [bitfield_descriptor(cls) for cls in BITFIELD_TYPES.values()]


def register_bitfields(registry: "TypeRegistry") -> None:
    """Register the Bitfield8/16/32/64 containers."""
    for descriptor in bitfield_descriptors():
        registry.register(descriptor.name, descriptor)
