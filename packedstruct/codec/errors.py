"""Exception hierarchy for packedstruct.

Every error raised by the codec or the schema compiler derives from StructError,
so callers can catch all packedstruct failures in one place.
"""


class StructError(RuntimeError):
    """Base exception for all packedstruct errors."""


class DefinitionError(StructError):
    """Raised when a schema or type descriptor is invalid.

    Examples:
        - Malformed schema line
        - 'string' used as a struct field type
        - Duplicate field name within a struct
        - Descriptor that does not satisfy the codec contract
    """


class UnknownType(DefinitionError):
    """Raised when a type name is not present in the registry."""


class NameConflict(DefinitionError):
    """Raised when registering a name that is already taken."""


class WidthOverflow(StructError):
    """Raised when bitfield sub-fields do not fit in their container."""


class OutOfBounds(StructError):
    """Raised when a position or access falls outside the buffer."""


class TypeMismatch(StructError, TypeError):
    """Raised when an argument is not of the expected kind.

    Examples:
        - Buffer is not bytes, bytearray or memoryview
        - Read-only buffer passed to a write
        - Writing a type that has no encoder
    """


class EncodeError(StructError):
    """Raised when a value cannot be encoded into its field.

    Examples:
        - Integer out of range for its primitive
        - Missing field in the value mapping
        - Array value with the wrong number of elements
    """
