from enum import Enum

from graphql import GraphQLEnumType, GraphQLEnumValue

from schemaforge.storages.type_definitions import TypeDefinitionsStorage


class EnumDefinitionFactory:
    """Creates one GraphQLEnumType per Python enum, cached for the whole build."""

    def __init__(self, type_definitions_storage: TypeDefinitionsStorage) -> None:
        self.type_definitions_storage = type_definitions_storage

    def get_or_create(self, target: type[Enum]) -> GraphQLEnumType:
        enum_type = self.type_definitions_storage.get_enum_by_target(target)
        if enum_type is None:
            # members are the internal values: resolvers return members, arguments receive members
            enum_type = GraphQLEnumType(
                name=target.__name__,
                values={member.name: GraphQLEnumValue(member) for member in target},
                description=target.__dict__.get("__doc__"),
            )
            self.type_definitions_storage.add_enum(target, enum_type)
        return enum_type
