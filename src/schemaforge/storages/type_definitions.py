from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from graphql import (
    GraphQLEnumType,
    GraphQLInputObjectType,
    GraphQLInputType,
    GraphQLInterfaceType,
    GraphQLObjectType,
    GraphQLOutputType,
)


@dataclass
class ObjectTypeDefinition:
    """Compiled object type for one declaring class.

    Args:
        target: the declaring class
        type: the compiled graphql-core type, with lazily evaluated fields and interfaces
        is_abstract: abstract types are compiled but not added to the schema on their own
        interfaces: directly implemented interface classes
    """

    target: type
    type: GraphQLObjectType
    is_abstract: bool = False
    interfaces: list[type] = field(default_factory=list)


@dataclass
class InterfaceTypeDefinition:
    target: type
    type: GraphQLInterfaceType
    is_abstract: bool = False
    interfaces: list[type] = field(default_factory=list)


@dataclass
class InputTypeDefinition:
    target: type
    type: GraphQLInputObjectType
    is_abstract: bool = False


class TypeDefinitionsStorage:
    """Mapping from declaring class to its compiled type, for one schema build."""

    def __init__(self) -> None:
        self._object_types: dict[type, ObjectTypeDefinition] = {}
        self._interfaces: dict[type, InterfaceTypeDefinition] = {}
        self._input_types: dict[type, InputTypeDefinition] = {}
        self._enums: dict[type[Enum], GraphQLEnumType] = {}

    def clear(self) -> None:
        self._object_types.clear()
        self._interfaces.clear()
        self._input_types.clear()
        self._enums.clear()

    def add_object_types(self, definitions: list[ObjectTypeDefinition]) -> None:
        for definition in definitions:
            self._object_types[definition.target] = definition

    def add_interfaces(self, definitions: list[InterfaceTypeDefinition]) -> None:
        for definition in definitions:
            self._interfaces[definition.target] = definition

    def add_input_types(self, definitions: list[InputTypeDefinition]) -> None:
        for definition in definitions:
            self._input_types[definition.target] = definition

    def add_enum(self, target: type[Enum], enum_type: GraphQLEnumType) -> None:
        self._enums[target] = enum_type

    def get_object_type_by_target(self, target: Any) -> ObjectTypeDefinition | None:
        return self._object_types.get(target)

    def get_interface_by_target(self, target: Any) -> InterfaceTypeDefinition | None:
        return self._interfaces.get(target)

    def get_enum_by_target(self, target: Any) -> GraphQLEnumType | None:
        return self._enums.get(target)

    def get_object_type_definitions(self) -> list[ObjectTypeDefinition]:
        return list(self._object_types.values())

    def get_interface_definitions(self) -> list[InterfaceTypeDefinition]:
        return list(self._interfaces.values())

    def get_input_type_definitions(self) -> list[InputTypeDefinition]:
        return list(self._input_types.values())

    def get_output_type_and_extract(self, target: Any) -> GraphQLOutputType | None:
        definition = self._object_types.get(target) or self._interfaces.get(target)
        if definition:
            return definition.type
        return self._enums.get(target)

    def get_input_type_and_extract(self, target: Any) -> GraphQLInputType | None:
        definition = self._input_types.get(target)
        if definition:
            return definition.type
        return self._enums.get(target)
