"""Python code generator for compiled structs.

Renders a dataclass per struct whose read()/write() delegate each field to a
StructCodec at a precomputed offset. Nested structs are rendered too, so the
generated module only needs the primitive and bitfield codecs at runtime.
"""

import keyword
import re

from jinja2 import Environment, PackageLoader

from ..codec.bitfield import BITFIELD_TYPES
from ..codec.errors import DefinitionError
from ..codec.registry import TypeRegistry, default_registry
from ..codec.types import StructDescriptor
from .layout import FieldLayout, StructLayout, calculate_layout

env = Environment(
    loader=PackageLoader("packedstruct.schema", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("python.py.j2")

# Map primitive type names to Python type annotations
PRIMITIVE_TYPE_MAP = {
    "u8": "int",
    "s8": "int",
    "u16": "int",
    "s16": "int",
    "u32": "int",
    "s32": "int",
    "u64": "int",
    "s64": "int",
    "float": "float",
    "double": "float",
    "char": "str",
    "bool": "bool",
}

# Names the generated dataclasses define themselves
CLASS_MEMBERS = frozenset(["SIZE", "read", "write"])


def to_class_name(name: str) -> str:
    """Turn a struct name into a valid Python class name."""
    result = re.sub(r"\W", "_", name)
    if not result or result[0].isdigit():
        result = "_" + result
    return result


def to_attr_name(name: str) -> str:
    """Turn a field name into a valid attribute name.

    Reserved-marker fields ('#pad') become private attributes ('_pad').
    Keywords and the generated class members get a trailing underscore.
    """
    result = "_" + name[1:] if name.startswith("#") else name
    if keyword.iskeyword(result) or result in CLASS_MEMBERS:
        result += "_"
    return result


class _Renderer:
    def __init__(self, structs: dict[str, StructLayout]) -> None:
        self.structs = structs

    def is_struct(self, f: FieldLayout) -> bool:
        return f.type_name in self.structs

    def map_type(self, f: FieldLayout) -> str:
        if self.is_struct(f):
            type_name = to_class_name(f.type_name)
        elif f.type_name in BITFIELD_TYPES:
            type_name = "Bitfield"
        else:
            type_name = PRIMITIVE_TYPE_MAP.get(f.type_name, "Any")

        if f.array_length > 1:
            return f"list[{type_name}]"
        return type_name

    def _read_expr(self, f: FieldLayout, position: str) -> str:
        if self.is_struct(f):
            return f"{to_class_name(f.type_name)}.read(data, {position}, endianness, codec)"
        options = f", {f.bits!r}" if f.bits is not None else ""
        return (
            f'codec.read_value(data, {position}, "{f.type_name}", endianness{options})[0]'
        )

    def _write_stmt(self, f: FieldLayout, position: str, value: str) -> str:
        if self.is_struct(f):
            return f"{value}.write(data, {position}, endianness, codec)"
        options = f", {f.bits!r}" if f.bits is not None else ""
        return (
            f'codec.write_value(data, {position}, "{f.type_name}", {value}, endianness{options})'
        )

    def gen_read_field(self, f: FieldLayout) -> str:
        """Generate the constructor argument reading one field."""
        attr = to_attr_name(f.name)
        if f.array_length == 1:
            return f"{attr}={self._read_expr(f, f'position + {f.offset}')}"
        position = f"position + {f.offset} + _i * {f.element_size}"
        return f"{attr}=[\n    {self._read_expr(f, position)}\n    for _i in range({f.array_length})\n]"

    def gen_write_field(self, f: FieldLayout) -> str:
        """Generate the statements writing one field."""
        attr = to_attr_name(f.name)
        if f.array_length == 1:
            return self._write_stmt(f, f"position + {f.offset}", f"self.{attr}")
        position = f"position + {f.offset} + _i * {f.element_size}"
        return (
            f"if len(self.{attr}) != {f.array_length}:\n"
            f'    raise EncodeError("{f.name} must have {f.array_length} elements")\n'
            f"for _i, _item in enumerate(self.{attr}):\n"
            f"    {self._write_stmt(f, position, '_item')}"
        )


def _check_names(structs: dict[str, StructLayout]) -> None:
    """Reject structs whose names clash once turned into Python identifiers."""
    classes: dict[str, str] = {}
    for s in structs.values():
        other = classes.setdefault(to_class_name(s.name), s.name)
        if other != s.name:
            raise DefinitionError(
                f"Structs '{other}' and '{s.name}' both generate class {to_class_name(s.name)}"
            )

        attrs: dict[str, str] = {}
        for f in s.fields:
            other = attrs.setdefault(to_attr_name(f.name), f.name)
            if other != f.name:
                raise DefinitionError(
                    f"Fields '{other}' and '{f.name}' of struct '{s.name}' "
                    f"both generate attribute {to_attr_name(f.name)}"
                )


def _collect_structs(
    struct: StructDescriptor, registry: TypeRegistry, found: dict[str, StructLayout]
) -> None:
    """Collect struct layouts depth first, dependencies before dependents."""
    if struct.name in found:
        return
    for member in struct.fields:
        if member.type_name in found:
            continue
        descriptor = registry.lookup(member.type_name)
        if isinstance(descriptor, StructDescriptor):
            _collect_structs(descriptor, registry, found)
    found[struct.name] = calculate_layout(struct)


def render(
    struct: StructDescriptor,
    registry: TypeRegistry | None = None,
    runtime_import: str = "packedstruct.codec",
) -> str:
    """Render a struct and the structs it nests to Python source code."""
    structs: dict[str, StructLayout] = {}
    _collect_structs(struct, registry if registry is not None else default_registry, structs)
    _check_names(structs)
    renderer = _Renderer(structs)

    return template.render(
        root=struct.name,
        structs=list(structs.values()),
        class_name=to_class_name,
        attr_name=to_attr_name,
        map_type=renderer.map_type,
        gen_read_field=renderer.gen_read_field,
        gen_write_field=renderer.gen_write_field,
        runtime_import=runtime_import,
    )
