"""Type registry mapping type names to codec descriptors."""

import logging
from collections.abc import Iterator

from .bitfield import register_bitfields
from .errors import DefinitionError, NameConflict, TypeMismatch, UnknownType
from .primitives import is_primitive, primitive_descriptors
from .types import StructDescriptor, TypeDescriptor

logger = logging.getLogger(__name__)

Descriptor = TypeDescriptor | StructDescriptor


class TypeRegistry:
    """Insert-only mapping from type name to descriptor.

    A new registry is seeded with the primitive table. Registration is not
    synchronized: finish all schema compilation before sharing a registry
    between threads.
    """

    def __init__(self) -> None:
        self._types: dict[str, Descriptor] = {}
        for descriptor in primitive_descriptors():
            self._types[descriptor.name] = descriptor

    def register(self, name: str, descriptor: Descriptor) -> None:
        """Register a descriptor under name.

        Raises:
            NameConflict: If name is a primitive or already registered.
            DefinitionError: If name does not match the descriptor's name.
            TypeMismatch: If descriptor is not a TypeDescriptor or StructDescriptor.
        """
        if is_primitive(name):
            raise NameConflict(f"Cannot redefine primitive type '{name}'")
        if name in self._types:
            raise NameConflict(f"Type named '{name}' already registered")
        if not isinstance(descriptor, (TypeDescriptor, StructDescriptor)):
            raise TypeMismatch(
                f"Cannot register {type(descriptor).__name__} as '{name}': "
                "expected a TypeDescriptor or StructDescriptor"
            )
        if descriptor.name != name:
            raise DefinitionError(
                f"Cannot register descriptor '{descriptor.name}' under name '{name}'"
            )

        self._types[name] = descriptor
        logger.debug("Registered type %s (size=%s)", name, descriptor.size)

    def lookup(self, name: str) -> Descriptor:
        """Return the descriptor registered under name.

        Raises:
            UnknownType: If no type named name is registered.
        """
        try:
            return self._types[name]
        except KeyError:
            raise UnknownType(f"No struct or type named '{name}' registered") from None

    def lookup_struct(self, name: str) -> StructDescriptor:
        descriptor = self.lookup(name)
        if not isinstance(descriptor, StructDescriptor):
            raise UnknownType(f"No struct named '{name}' registered")
        return descriptor

    def is_primitive(self, name: str) -> bool:
        return is_primitive(name)

    def structs(self) -> list[StructDescriptor]:
        """All registered structs, in registration order."""
        return [d for d in self._types.values() if isinstance(d, StructDescriptor)]

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)


def create_registry() -> TypeRegistry:
    """Create a registry holding the primitives and the bitfield containers."""
    registry = TypeRegistry()
    register_bitfields(registry)
    return registry


default_registry = create_registry()
