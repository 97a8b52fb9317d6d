"""Decorators registering classes and their fields in the metadata storage.

Example:

```python
@interface_type()
class Node:
    id = field(ID)


@object_type(implements=[Node])
class User:
    name = field(str)
    friends = field(lambda: [User], nullable="items")


class UserFieldResolver:
    @resolve_field(User, "name")
    async def name(self, root, info):
        return root.name.title()
```
"""

import inspect
from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeVar, get_type_hints

from schemaforge.errors import CannotDetermineOutputTypeError
from schemaforge.metadata.models import (
    UNDEFINED,
    ArgsTypeMetadata,
    DirectiveMetadata,
    FieldOptions,
    InputTypeMetadata,
    InterfaceMetadata,
    InterfacesRef,
    MethodArgsMetadata,
    NullableOption,
    ObjectTypeMetadata,
    PropertyMetadata,
    TypeFn,
)
from schemaforge.metadata.storage import TypeMetadataStorage, type_metadata_storage

ClassT = TypeVar("ClassT", bound=type)


def _as_type_fn(type_ref: Any) -> TypeFn:
    """Turn a type reference into a zero-argument type-producing function.

    Plain functions (usually lambdas) are already deferred references; anything
    else, classes included, is wrapped.
    """
    if inspect.isfunction(type_ref):
        return type_ref
    return lambda: type_ref


def _annotation_type_fn(owner: type, name: str) -> TypeFn:
    # resolved lazily, annotations may reference classes declared later
    def type_fn() -> Any:
        try:
            return get_type_hints(owner)[name]
        except (KeyError, NameError) as e:
            raise CannotDetermineOutputTypeError(f"{owner.__name__}.{name}", None) from e

    return type_fn


def _directives(directives: Iterable[str | DirectiveMetadata]) -> list[DirectiveMetadata]:
    return [d if isinstance(d, DirectiveMetadata) else DirectiveMetadata(sdl=d) for d in directives]


def _class_description(cls: type) -> str | None:
    # own docstring only, inherited ones describe the parent type
    doc = cls.__dict__.get("__doc__")
    return inspect.cleandoc(doc) if doc else None


def arg(
    name: str,
    type_ref: Any,
    *,
    nullable: NullableOption = None,
    default: Any = UNDEFINED,
    description: str | None = None,
    deprecation_reason: str | None = None,
    directives: Iterable[str | DirectiveMetadata] = (),
) -> MethodArgsMetadata:
    """Declare a single named field argument."""
    return MethodArgsMetadata(
        kind="arg",
        name=name,
        type_fn=_as_type_fn(type_ref),
        options=FieldOptions(nullable=nullable, default_value=default),
        description=description,
        deprecation_reason=deprecation_reason,
        directives=_directives(directives),
    )


def args(args_type: type) -> MethodArgsMetadata:
    """Declare that every field of an ``@args_type()`` class is an argument."""
    return MethodArgsMetadata(kind="args", target_type=args_type)


class FieldDescriptor:
    """Class attribute declaring a field; registers itself once the owner class is created.

    On instances it behaves like a plain attribute with the field default.
    """

    def __init__(
        self,
        type_ref: Any,
        storage: TypeMetadataStorage,
        *,
        name: str | None,
        options: FieldOptions,
        description: str | None,
        deprecation_reason: str | None,
        complexity: int | Callable[..., int] | None,
        middleware: Sequence[Callable[..., Any]],
        directives: Iterable[str | DirectiveMetadata],
        extensions: dict[str, Any] | None,
        field_args: Sequence[MethodArgsMetadata],
    ) -> None:
        self.type_ref = type_ref
        self.storage = storage
        self.schema_name = name
        self.options = options
        self.description = description
        self.deprecation_reason = deprecation_reason
        self.complexity = complexity
        self.middleware = list(middleware)
        self.directives = _directives(directives)
        self.extensions = dict(extensions or {})
        self.field_args = list(field_args)
        self.attribute_name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.attribute_name = name
        if self.type_ref is None:
            type_fn = _annotation_type_fn(owner, name)
        else:
            type_fn = _as_type_fn(self.type_ref)

        for index, method_arg in enumerate(self.field_args):
            method_arg.index = index

        self.storage.add_class_field_metadata(
            owner,
            PropertyMetadata(
                name=name,
                type_fn=type_fn,
                schema_name=self.schema_name,
                options=self.options,
                method_args=self.field_args,
                directives=self.directives,
                description=self.description,
                deprecation_reason=self.deprecation_reason,
                complexity=self.complexity,
                middleware=self.middleware,
                extensions=self.extensions,
            ),
        )

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        default = self.options.default_value
        return None if default is UNDEFINED else default


def field(
    type_ref: Any = None,
    *,
    name: str | None = None,
    nullable: NullableOption = None,
    default: Any = UNDEFINED,
    description: str | None = None,
    deprecation_reason: str | None = None,
    complexity: int | Callable[..., int] | None = None,
    middleware: Sequence[Callable[..., Any]] = (),
    directives: Iterable[str | DirectiveMetadata] = (),
    extensions: dict[str, Any] | None = None,
    args: Sequence[MethodArgsMetadata] = (),
    storage: TypeMetadataStorage = type_metadata_storage,
) -> Any:
    """Declare a field on an object, interface or args type.

    ``type_ref`` may be a class, a scalar, ``[T]`` for lists, or a zero-argument
    lambda for forward references. Without ``type_ref`` the class annotation of
    the attribute is used.
    """
    return FieldDescriptor(
        type_ref,
        storage,
        name=name,
        options=FieldOptions(nullable=nullable, default_value=default),
        description=description,
        deprecation_reason=deprecation_reason,
        complexity=complexity,
        middleware=middleware,
        directives=directives,
        extensions=extensions,
        field_args=args,
    )


def object_type(
    name: str | None = None,
    *,
    description: str | None = None,
    implements: InterfacesRef | None = None,
    is_abstract: bool = False,
    directives: Iterable[str | DirectiveMetadata] = (),
    extensions: dict[str, Any] | None = None,
    storage: TypeMetadataStorage = type_metadata_storage,
) -> Callable[[ClassT], ClassT]:
    def decorator(cls: ClassT) -> ClassT:
        storage.add_object_type_metadata(
            ObjectTypeMetadata(
                target=cls,
                name=name or cls.__name__,
                description=description if description is not None else _class_description(cls),
                is_abstract=is_abstract,
                interfaces=implements,
                directives=_directives(directives),
                extensions=dict(extensions or {}),
            )
        )
        return cls

    return decorator


def interface_type(
    name: str | None = None,
    *,
    description: str | None = None,
    implements: InterfacesRef | None = None,
    is_abstract: bool = False,
    resolve_type: Callable[..., Any] | None = None,
    directives: Iterable[str | DirectiveMetadata] = (),
    extensions: dict[str, Any] | None = None,
    storage: TypeMetadataStorage = type_metadata_storage,
) -> Callable[[ClassT], ClassT]:
    def decorator(cls: ClassT) -> ClassT:
        storage.add_interface_metadata(
            InterfaceMetadata(
                target=cls,
                name=name or cls.__name__,
                description=description if description is not None else _class_description(cls),
                is_abstract=is_abstract,
                interfaces=implements,
                resolve_type=resolve_type,
                directives=_directives(directives),
                extensions=dict(extensions or {}),
            )
        )
        return cls

    return decorator


def args_type(storage: TypeMetadataStorage = type_metadata_storage) -> Callable[[ClassT], ClassT]:
    def decorator(cls: ClassT) -> ClassT:
        storage.add_args_metadata(ArgsTypeMetadata(target=cls, name=cls.__name__))
        return cls

    return decorator


def input_type(
    name: str | None = None,
    *,
    description: str | None = None,
    directives: Iterable[str | DirectiveMetadata] = (),
    storage: TypeMetadataStorage = type_metadata_storage,
) -> Callable[[ClassT], ClassT]:
    def decorator(cls: ClassT) -> ClassT:
        storage.add_input_type_metadata(
            InputTypeMetadata(
                target=cls,
                name=name or cls.__name__,
                description=description if description is not None else _class_description(cls),
                directives=_directives(directives),
            )
        )
        return cls

    return decorator


class _ResolveFieldMarker:
    def __init__(
        self, func: Callable[..., Any], owner_type: type, field_name: str, storage: TypeMetadataStorage
    ) -> None:
        self.func = func
        self.owner_type = owner_type
        self.field_name = field_name
        self.storage = storage

    def __set_name__(self, handler: type, name: str) -> None:
        self.storage.add_field_resolver_metadata(handler, self.owner_type, self.field_name, name)
        # the handler keeps a plain method
        setattr(handler, name, self.func)


def resolve_field(
    owner_type: type, field_name: str | None = None, *, storage: TypeMetadataStorage = type_metadata_storage
) -> Callable[[Callable[..., Any]], Any]:
    """Mark a handler method as the resolver of ``owner_type``'s field.

    The method is called with the field resolver arguments ``(root, info, **args)``
    on an instance obtained from the instance resolver for the current request.
    ``field_name`` defaults to the method name.
    """

    def decorator(func: Callable[..., Any]) -> Any:
        return _ResolveFieldMarker(func, owner_type, field_name or func.__name__, storage)

    return decorator
