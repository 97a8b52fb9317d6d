from collections.abc import Callable
from typing import Any

from graphql import GraphQLInputField, GraphQLInputObjectType, Undefined

from schemaforge.config import BuildSchemaOptions
from schemaforge.factories.ast_definition_node import AstDefinitionNodeFactory
from schemaforge.factories.input_type import InputTypeFactory
from schemaforge.metadata.models import UNDEFINED, InputTypeMetadata, PropertyMetadata
from schemaforge.metadata.storage import TypeMetadataStorage
from schemaforge.storages.type_definitions import InputTypeDefinition
from schemaforge.utils.type_reference import resolve_type_reference


class InputTypeDefinitionFactory:
    def __init__(
        self,
        metadata_storage: TypeMetadataStorage,
        input_type_factory: InputTypeFactory,
        ast_definition_node_factory: AstDefinitionNodeFactory,
    ) -> None:
        self.metadata_storage = metadata_storage
        self.input_type_factory = input_type_factory
        self.ast_definition_node_factory = ast_definition_node_factory

    def create(self, metadata: InputTypeMetadata, options: BuildSchemaOptions) -> InputTypeDefinition:
        return InputTypeDefinition(
            target=metadata.target,
            is_abstract=metadata.is_abstract,
            type=GraphQLInputObjectType(
                name=metadata.name,
                description=metadata.description,
                fields=self.generate_fields(metadata, options),
                extensions=metadata.extensions,
            ),
        )

    def generate_fields(
        self, metadata: InputTypeMetadata, options: BuildSchemaOptions
    ) -> Callable[[], dict[str, GraphQLInputField]]:
        def fields_thunk() -> dict[str, GraphQLInputField]:
            properties: dict[str, PropertyMetadata] = {}
            # base input classes first, subclasses override
            for klass in reversed(metadata.target.__mro__):
                base_metadata = self.metadata_storage.get_input_type_metadata_by_target(klass)
                if base_metadata is None:
                    continue
                for prop in base_metadata.properties:
                    properties[prop.graphql_name(options.field_name_case)] = prop
            return {name: self.create_field(metadata, name, prop, options) for name, prop in properties.items()}

        return fields_thunk

    def create_field(
        self, metadata: InputTypeMetadata, name: str, prop: PropertyMetadata, options: BuildSchemaOptions
    ) -> GraphQLInputField:
        type_ref, type_options = resolve_type_reference(prop.type_fn, prop.options)
        graphql_type = self.input_type_factory.create(f"{metadata.name}.{name}", type_ref, options, type_options)
        default_value: Any = type_options.default_value
        return GraphQLInputField(
            graphql_type,
            default_value=Undefined if default_value is UNDEFINED else default_value,
            description=prop.description,
            deprecation_reason=prop.deprecation_reason,
            ast_node=self.ast_definition_node_factory.create_input_value_node(name, graphql_type, prop.directives),
            out_name=prop.name if name != prop.name else None,
        )
