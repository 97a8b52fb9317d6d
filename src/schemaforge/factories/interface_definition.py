import inspect
from collections.abc import Callable, Mapping
from typing import Any

from graphql import GraphQLInterfaceType, GraphQLObjectType, GraphQLResolveInfo

from schemaforge.config import BuildSchemaOptions
from schemaforge.factories.object_type_definition import ClassTypeDefinitionFactory
from schemaforge.metadata.models import InterfaceMetadata, get_interfaces_array
from schemaforge.storages.type_definitions import InterfaceTypeDefinition


class InterfaceDefinitionFactory(ClassTypeDefinitionFactory):
    def create(self, metadata: InterfaceMetadata, options: BuildSchemaOptions) -> InterfaceTypeDefinition:
        get_parent_type = self.get_parent_type_getter(metadata)
        return InterfaceTypeDefinition(
            target=metadata.target,
            is_abstract=metadata.is_abstract,
            interfaces=get_interfaces_array(metadata.interfaces),
            type=GraphQLInterfaceType(
                name=metadata.name,
                description=metadata.description,
                ast_node=self.ast_definition_node_factory.create_interface_type_node(
                    metadata.name, metadata.directives
                ),
                extensions=metadata.extensions,
                interfaces=self.generate_interfaces(metadata, get_parent_type),
                fields=self.generate_fields(metadata, options, get_parent_type),
                resolve_type=self.create_resolve_type(metadata),
            ),
        )

    def create_resolve_type(self, metadata: InterfaceMetadata) -> Callable[..., Any]:
        """Build the strategy picking the concrete object type of a polymorphic value.

        A custom ``resolve_type`` may return a class, a type name or a
        GraphQLObjectType, or an awaitable of any of those. Without one, the value's
        class hierarchy is matched against the compiled object types, and mappings
        may name their type under ``__typename``.
        """
        custom_resolve_type = metadata.resolve_type

        def resolve_type(value: Any, info: GraphQLResolveInfo, abstract_type: GraphQLInterfaceType) -> Any:
            if custom_resolve_type is None:
                return self.get_default_type_name(value)

            result = custom_resolve_type(value, info, abstract_type)
            if inspect.isawaitable(result):

                async def await_type_name() -> str | None:
                    return self.get_type_name(await result)

                return await_type_name()
            return self.get_type_name(result)

        return resolve_type

    def get_default_type_name(self, value: Any) -> str | None:
        if isinstance(value, Mapping):
            type_name = value.get("__typename")
            return type_name if isinstance(type_name, str) else None
        for klass in type(value).__mro__:
            definition = self.type_definitions_storage.get_object_type_by_target(klass)
            if definition is not None:
                return definition.type.name
        return None

    def get_type_name(self, result: Any) -> str | None:
        if result is None or isinstance(result, str):
            return result
        if isinstance(result, GraphQLObjectType):
            return result.name
        definition = self.type_definitions_storage.get_object_type_by_target(result)
        return definition.type.name if definition is not None else None
