from typing import Any


def describe_target(target: Any) -> str:
    """Human readable name of a declaring entity (class, GraphQL type or plain value)."""
    name = getattr(target, "__qualname__", None) or getattr(target, "name", None)
    return str(name) if name else repr(target)


class SchemaBuildErrorMessages:
    """Standard error messages for schema build failures."""

    MISSING_INTERFACE = "Type '{host}' implements interface '{target}' which was never compiled"
    MISSING_PARENT = "Type '{host}' extends '{target}' which is registered but was never compiled"
    MISSING_INTERFACE_METADATA = "Type '{host}' implements '{target}' which is not registered as an interface"
    CIRCULAR_INHERITANCE = "Circular interface inheritance detected: {path}"
    OUTPUT_TYPE = (
        "Cannot determine a GraphQL output type for the '{host}' field (value: {target}). "
        "Make sure the referenced type is decorated and registered in the schema"
    )
    INPUT_TYPE = (
        "Cannot determine a GraphQL input type for the '{host}' argument (value: {target}). "
        "Make sure the referenced type is an input type, enum or scalar"
    )
    NULLABLE_ITEMS = (
        "Incorrect 'nullable' option value set for '{host}'. "
        "'items' and 'itemsAndList' can only be used with list types"
    )
    DEFAULT_VALUE_CONFLICT = (
        "Incorrect 'nullable' option value set for '{host}'. "
        "A non-nullable argument cannot have a 'None' default value"
    )
    FROZEN = "Cannot register '{target}': metadata storage is frozen until it is cleared"
    HANDLER_RESOLUTION = "Failed to resolve field resolver handler '{target}' for field '{host}'"
    UNKNOWN_HANDLER = "No provider registered for '{target}'"


class SchemaBuildError(Exception):
    """Base class for structural errors found while compiling metadata into a schema.

    These errors are fatal for the whole build: there is no partial schema.
    """


class ReferentialIntegrityError(SchemaBuildError, LookupError):
    """Raised when a referenced interface or parent type was never compiled."""

    def __init__(self, message: str, host: Any = None, target: Any = None) -> None:
        super().__init__(message)
        self.host = host
        self.target = target


class CircularInheritanceError(SchemaBuildError, ValueError):
    """Raised when an implements/extends chain revisits an entity already on the current path."""

    def __init__(self, path: list[Any]) -> None:
        self.path = path
        super().__init__(
            SchemaBuildErrorMessages.CIRCULAR_INHERITANCE.format(path=" -> ".join(describe_target(p) for p in path))
        )


class CannotDetermineOutputTypeError(ReferentialIntegrityError):
    def __init__(self, host: str, target: Any) -> None:
        super().__init__(
            SchemaBuildErrorMessages.OUTPUT_TYPE.format(host=host, target=describe_target(target)),
            host=host,
            target=target,
        )


class CannotDetermineInputTypeError(ReferentialIntegrityError):
    def __init__(self, host: str, target: Any) -> None:
        super().__init__(
            SchemaBuildErrorMessages.INPUT_TYPE.format(host=host, target=describe_target(target)),
            host=host,
            target=target,
        )


class InvalidTypeOptionsError(SchemaBuildError, ValueError):
    """Raised when field or argument options contradict the declared type."""


class SchemaValidationError(SchemaBuildError):
    """Raised when the assembled schema does not pass graphql-core validation."""

    def __init__(self, errors: list[Any]) -> None:
        self.errors = errors
        super().__init__("Schema validation failed:\n" + "\n".join(str(error) for error in errors))


class MetadataFrozenError(RuntimeError):
    """Raised when metadata is registered after the storage was frozen for compilation."""


class HandlerResolutionFailure(Exception):
    """Raised at request time when looking up a field resolver handler fails unexpectedly.

    A handler that is simply absent is not a failure: the field falls back to
    reading the value from its parent object.
    """

    def __init__(self, message: str, target: Any = None) -> None:
        super().__init__(message)
        self.target = target


class UnknownHandlerError(LookupError):
    """Raised by a strict instance lookup for a target nobody registered."""
