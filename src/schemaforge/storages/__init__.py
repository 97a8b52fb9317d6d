"""Registries of compiled type definitions."""

from .type_definitions import (
    InputTypeDefinition,
    InterfaceTypeDefinition,
    ObjectTypeDefinition,
    TypeDefinitionsStorage,
)

__all__ = ["InputTypeDefinition", "InterfaceTypeDefinition", "ObjectTypeDefinition", "TypeDefinitionsStorage"]
