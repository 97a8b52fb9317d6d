from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal, Union

from caseconverter import camelcase, cobolcase, flatcase, kebabcase, macrocase, pascalcase, snakecase, titlecase

from schemaforge.config import CaseFormat


class _Undefined:
    """Sentinel for "no value given", distinct from an explicit ``None``."""

    _instance: "_Undefined | None" = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNDEFINED"


UNDEFINED: Any = _Undefined()

NullableOption = Union[bool, Literal["items", "itemsAndList"], None]
TypeFn = Callable[[], Any]
InterfacesRef = Union[Sequence[type], Callable[[], Sequence[type]]]

CASE_CONVERTERS = {
    CaseFormat.CAMEL_CASE: camelcase,
    CaseFormat.PASCAL_CASE: pascalcase,
    CaseFormat.SNAKE_CASE: snakecase,
    CaseFormat.KEBAB_CASE: kebabcase,
    CaseFormat.MACRO_CASE: macrocase,
    CaseFormat.COBOL_CASE: cobolcase,
    CaseFormat.FLAT_CASE: flatcase,
    CaseFormat.TITLE_CASE: titlecase,
}


def convert_name(name: str, target_case: CaseFormat) -> str:
    """Convert a name to the specified case format.

    Args:
        name: The name to convert
        target_case: The target case format

    Returns:
        The converted name
    """
    return str(CASE_CONVERTERS[target_case](name))


@dataclass
class FieldOptions:
    """Nullability, list wrapping and default value of a field or argument.

    Args:
        nullable: ``True``, ``False``/``None`` (non-null), ``"items"`` (nullable list items)
            or ``"itemsAndList"`` (nullable items and nullable list)
        is_array: whether the declared type is wrapped in one or more lists
        array_depth: how many list wrappers to apply
        default_value: value returned when the parent object has no value for the field
    """

    nullable: NullableOption = None
    is_array: bool = False
    array_depth: int = 0
    default_value: Any = UNDEFINED


@dataclass(frozen=True)
class DirectiveMetadata:
    sdl: str


@dataclass
class MethodArgsMetadata:
    """One declared argument of a field.

    ``kind == "arg"`` is a single named argument, ``kind == "args"`` points to an
    args-type class whose properties are expanded into several arguments.
    """

    kind: Literal["arg", "args"]
    index: int = 0
    name: str | None = None
    type_fn: TypeFn | None = None
    options: FieldOptions = field(default_factory=FieldOptions)
    description: str | None = None
    deprecation_reason: str | None = None
    target_type: type | None = None
    directives: list[DirectiveMetadata] = field(default_factory=list)


@dataclass
class PropertyMetadata:
    """Description of one field of an object or interface type.

    The type-producing function must be idempotent and free of side effects; it is
    called once at compile time for orphan tracking and again inside the field thunk.
    """

    name: str
    type_fn: TypeFn
    schema_name: str | None = None
    options: FieldOptions = field(default_factory=FieldOptions)
    method_args: list[MethodArgsMetadata] = field(default_factory=list)
    directives: list[DirectiveMetadata] = field(default_factory=list)
    description: str | None = None
    deprecation_reason: str | None = None
    complexity: int | Callable[..., int] | None = None
    middleware: list[Callable[..., Any]] = field(default_factory=list)
    extensions: dict[str, Any] = field(default_factory=dict)
    target: type | None = None

    def graphql_name(self, case: CaseFormat | None = None) -> str:
        if self.schema_name:
            return self.schema_name
        if case:
            return convert_name(self.name, case)
        return self.name


@dataclass
class ClassMetadata:
    target: type
    name: str
    description: str | None = None
    is_abstract: bool = False
    properties: list[PropertyMetadata] = field(default_factory=list)
    directives: list[DirectiveMetadata] = field(default_factory=list)
    extensions: dict[str, Any] = field(default_factory=dict)


@dataclass
class ObjectTypeMetadata(ClassMetadata):
    interfaces: InterfacesRef | None = None


@dataclass
class InterfaceMetadata(ObjectTypeMetadata):
    resolve_type: Callable[..., Any] | None = None


@dataclass
class ArgsTypeMetadata(ClassMetadata):
    pass


@dataclass
class InputTypeMetadata(ClassMetadata):
    pass


@dataclass(frozen=True)
class FieldResolverHandler:
    """Handler class computing one field instead of reading it off the parent value.

    Args:
        target: the handler class, instantiated through the instance resolver
        method_name: name of the handler method resolving the field
    """

    target: type
    method_name: str


def get_interfaces_array(interfaces: InterfacesRef | None) -> list[type]:
    if not interfaces:
        return []
    if callable(interfaces) and not isinstance(interfaces, Sequence):
        return list(interfaces())
    return list(interfaces)
