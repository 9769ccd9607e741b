"""Compile schema text into registered struct descriptors."""

import logging

from ..codec.bitfield import BITFIELD_TYPES, build_layout
from ..codec.errors import DefinitionError, NameConflict
from ..codec.primitives import STRING_TYPE
from ..codec.registry import TypeRegistry, default_registry
from ..codec.types import FieldDescriptor, StructDescriptor
from .parser import parse
from .types import FieldDecl

logger = logging.getLogger(__name__)


class StructCompiler:
    """Turns schema text into StructDescriptors registered in a TypeRegistry."""

    def __init__(self, registry: TypeRegistry | None = None) -> None:
        self.registry = registry if registry is not None else default_registry

    def resolve(self, decl: FieldDecl) -> FieldDescriptor:
        """Resolve one declaration against the registry.

        Raises:
            DefinitionError: If the field uses 'string' or another variable-size type.
            UnknownType: If the referenced type is not registered.
            WidthOverflow: If bitfield sub-fields exceed the container width.
        """
        if decl.type_name == STRING_TYPE:
            raise DefinitionError(
                f"line {decl.line}: Struct members cannot be of type 'string'. "
                "Please use a char[] array."
            )

        descriptor = self.registry.lookup(decl.type_name)
        if descriptor.size is None:
            raise DefinitionError(
                f"line {decl.line}: Type '{decl.type_name}' has no fixed size "
                "and cannot be a struct member"
            )

        bits = None
        if decl.bits is not None:
            container = BITFIELD_TYPES.get(decl.type_name)
            if container is None:
                raise DefinitionError(
                    f"line {decl.line}: Type '{decl.type_name}' does not take a sub-field list"
                )
            rows = build_layout(decl.layout, container.width, decl.type_name)
            bits = tuple((name, width) for name, width, _ in rows)

        return FieldDescriptor(
            type_name=decl.type_name,
            name=decl.name,
            element_size=descriptor.size,
            array_length=decl.array_length,
            bits=bits,
        )

    def compile(self, text: str, struct_name: str) -> StructDescriptor:
        """Compile schema text and register the result as struct_name.

        Nothing is registered unless the whole schema is valid.

        Raises:
            NameConflict: If struct_name is already registered.
            DefinitionError: If the schema is malformed or empty.
            UnknownType: If a referenced type is not registered.
            WidthOverflow: If bitfield sub-fields exceed their container.
        """
        if self.registry.is_primitive(struct_name):
            raise NameConflict(f"Cannot redefine primitive type '{struct_name}'")
        if struct_name in self.registry:
            raise NameConflict(f"struct named '{struct_name}' already registered")

        decls = parse(text)
        if not decls:
            raise DefinitionError(f"Struct '{struct_name}' has no fields")

        fields: list[FieldDescriptor] = []
        seen: set[str] = set()
        for decl in decls:
            if decl.name in seen:
                raise DefinitionError(
                    f"line {decl.line}: Duplicate field '{decl.name}' in struct '{struct_name}'"
                )
            seen.add(decl.name)
            fields.append(self.resolve(decl))

        struct = StructDescriptor(name=struct_name, fields=tuple(fields))
        self.registry.register(struct_name, struct)
        logger.debug(
            "Compiled struct %s: %d fields, %d bytes", struct_name, len(fields), struct.size
        )
        return struct


def compile_struct(
    text: str, struct_name: str, registry: TypeRegistry | None = None
) -> StructDescriptor:
    """Compile schema text into a struct registered in registry (default registry if None)."""
    return StructCompiler(registry).compile(text, struct_name)
