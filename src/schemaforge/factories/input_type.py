import inspect
from enum import Enum
from typing import Any

from graphql import GraphQLInputType, is_input_type

from schemaforge.config import BuildSchemaOptions
from schemaforge.errors import CannotDetermineInputTypeError
from schemaforge.factories.enum_definition import EnumDefinitionFactory
from schemaforge.metadata.models import FieldOptions
from schemaforge.services.type_mapper import TypeMapperService
from schemaforge.storages.type_definitions import TypeDefinitionsStorage


class InputTypeFactory:
    def __init__(
        self,
        type_definitions_storage: TypeDefinitionsStorage,
        type_mapper: TypeMapperService,
        enum_factory: EnumDefinitionFactory,
    ) -> None:
        self.type_definitions_storage = type_definitions_storage
        self.type_mapper = type_mapper
        self.enum_factory = enum_factory

    def create(
        self,
        hostname: str,
        type_ref: Any,
        options: BuildSchemaOptions,
        type_options: FieldOptions,
    ) -> GraphQLInputType:
        graphql_type = self.type_mapper.map_to_scalar_type(type_ref, options)
        if graphql_type is None:
            graphql_type = self._get_named_input_type(hostname, type_ref)
        return self.type_mapper.map_to_gql_type(hostname, graphql_type, type_options, is_input_type_ctx=True)

    def _get_named_input_type(self, hostname: str, type_ref: Any) -> GraphQLInputType:
        if inspect.isclass(type_ref) and issubclass(type_ref, Enum):
            return self.enum_factory.get_or_create(type_ref)
        if is_input_type(type_ref):
            return type_ref
        graphql_type = self.type_definitions_storage.get_input_type_and_extract(type_ref)
        if graphql_type is None:
            raise CannotDetermineInputTypeError(hostname, type_ref)
        return graphql_type
