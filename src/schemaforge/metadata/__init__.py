"""Type metadata collected from decorated classes."""

from .models import (
    UNDEFINED,
    ArgsTypeMetadata,
    ClassMetadata,
    DirectiveMetadata,
    FieldOptions,
    FieldResolverHandler,
    InputTypeMetadata,
    InterfaceMetadata,
    MethodArgsMetadata,
    ObjectTypeMetadata,
    PropertyMetadata,
    get_interfaces_array,
)
from .storage import TypeMetadataStorage, type_metadata_storage

__all__ = [
    "UNDEFINED",
    "ArgsTypeMetadata",
    "ClassMetadata",
    "DirectiveMetadata",
    "FieldOptions",
    "FieldResolverHandler",
    "InputTypeMetadata",
    "InterfaceMetadata",
    "MethodArgsMetadata",
    "ObjectTypeMetadata",
    "PropertyMetadata",
    "TypeMetadataStorage",
    "get_interfaces_array",
    "type_metadata_storage",
]
