from typing import Any

from graphql import GraphQLArgument, Undefined

from schemaforge.config import BuildSchemaOptions
from schemaforge.factories.ast_definition_node import AstDefinitionNodeFactory
from schemaforge.factories.input_type import InputTypeFactory
from schemaforge.metadata.models import UNDEFINED, DirectiveMetadata, FieldOptions, MethodArgsMetadata, TypeFn
from schemaforge.metadata.storage import TypeMetadataStorage
from schemaforge.utils.type_reference import resolve_type_reference


class ArgsFactory:
    """Converts declared field arguments into graphql-core argument definitions."""

    def __init__(
        self,
        metadata_storage: TypeMetadataStorage,
        input_type_factory: InputTypeFactory,
        ast_definition_node_factory: AstDefinitionNodeFactory,
    ) -> None:
        self.metadata_storage = metadata_storage
        self.input_type_factory = input_type_factory
        self.ast_definition_node_factory = ast_definition_node_factory

    def create(self, args: list[MethodArgsMetadata], options: BuildSchemaOptions) -> dict[str, GraphQLArgument]:
        field_config_map: dict[str, GraphQLArgument] = {}
        for param in sorted(args, key=lambda p: p.index):
            if param.kind == "arg" and param.name and param.type_fn:
                field_config_map[param.name] = self._create_argument(
                    param.name,
                    param.type_fn,
                    param.options,
                    param.description,
                    param.deprecation_reason,
                    param.directives,
                    options,
                )
            elif param.kind == "args" and param.target_type is not None:
                field_config_map.update(self._inherit_args_type_fields(param.target_type, options))
        return field_config_map

    def _inherit_args_type_fields(self, target: type, options: BuildSchemaOptions) -> dict[str, GraphQLArgument]:
        field_config_map: dict[str, GraphQLArgument] = {}
        # parents first so that subclasses can redeclare an argument
        for klass in reversed(target.__mro__):
            metadata = self.metadata_storage.get_args_metadata_by_target(klass)
            if metadata is None:
                continue
            for prop in metadata.properties:
                name = prop.graphql_name(options.field_name_case)
                field_config_map[name] = self._create_argument(
                    name,
                    prop.type_fn,
                    prop.options,
                    prop.description,
                    prop.deprecation_reason,
                    prop.directives,
                    options,
                )
        return field_config_map

    def _create_argument(
        self,
        name: str,
        type_fn: TypeFn,
        type_options: FieldOptions,
        description: str | None,
        deprecation_reason: str | None,
        directives: list[DirectiveMetadata],
        options: BuildSchemaOptions,
    ) -> GraphQLArgument:
        type_ref, type_options = resolve_type_reference(type_fn, type_options)
        graphql_type = self.input_type_factory.create(name, type_ref, options, type_options)
        default_value: Any = type_options.default_value
        return GraphQLArgument(
            graphql_type,
            default_value=Undefined if default_value is UNDEFINED else default_value,
            description=description,
            deprecation_reason=deprecation_reason,
            ast_node=self.ast_definition_node_factory.create_input_value_node(name, graphql_type, directives),
        )
