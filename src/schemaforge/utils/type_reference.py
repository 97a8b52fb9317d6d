import types
from dataclasses import replace
from typing import Any, Union, get_args, get_origin

from schemaforge.metadata.models import FieldOptions, NullableOption, TypeFn


def unwrap_type_reference(type_ref: Any) -> tuple[Any, int, NullableOption]:
    """Strip list notation and optionality from a type reference.

    Supports ``[T]``/``[[T]]`` list literals, ``list[T]`` generics and ``T | None``.

    Args:
        type_ref: The value returned by a type-producing function

    Returns:
        tuple of (inner type, list depth, nullability implied by ``None`` members)
    """
    depth = 0
    nullable_list = False
    nullable_items = False
    while True:
        if isinstance(type_ref, list | tuple) and len(type_ref) == 1:
            type_ref = type_ref[0]
            depth += 1
            continue

        origin = get_origin(type_ref)
        if origin in (list, tuple) and get_args(type_ref):
            type_ref = get_args(type_ref)[0]
            depth += 1
            continue

        if origin in (Union, types.UnionType):
            members = [arg for arg in get_args(type_ref) if arg is not type(None)]
            if len(members) == 1:
                if depth:
                    nullable_items = True
                else:
                    nullable_list = True
                type_ref = members[0]
                continue

        break

    nullable: NullableOption = None
    if nullable_items:
        nullable = "itemsAndList" if nullable_list else "items"
    elif nullable_list:
        nullable = True
    return type_ref, depth, nullable


def resolve_type_reference(type_fn: TypeFn, options: FieldOptions) -> tuple[Any, FieldOptions]:
    """Call a type-producing function and merge list/optional notation into the options."""
    type_ref, depth, nullable = unwrap_type_reference(type_fn())
    changes: dict[str, Any] = {}
    if depth and not options.is_array:
        changes.update(is_array=True, array_depth=depth)
    if nullable is not None and options.nullable is None:
        changes["nullable"] = nullable
    return type_ref, replace(options, **changes) if changes else options
