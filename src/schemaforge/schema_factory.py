from typing import Any

from graphql import GraphQLNamedType, GraphQLObjectType, GraphQLSchema, validate_schema

from schemaforge import log
from schemaforge.config import BuildSchemaOptions
from schemaforge.context import InstanceResolver
from schemaforge.errors import ReferentialIntegrityError, SchemaBuildError, SchemaValidationError, describe_target
from schemaforge.factories.args import ArgsFactory
from schemaforge.factories.ast_definition_node import AstDefinitionNodeFactory
from schemaforge.factories.enum_definition import EnumDefinitionFactory
from schemaforge.factories.field_resolver import FieldResolverFactory
from schemaforge.factories.input_type import InputTypeFactory
from schemaforge.factories.input_type_definition import InputTypeDefinitionFactory
from schemaforge.factories.interface_definition import InterfaceDefinitionFactory
from schemaforge.factories.object_type_definition import ObjectTypeDefinitionFactory
from schemaforge.factories.output_type import OutputTypeFactory
from schemaforge.metadata.storage import TypeMetadataStorage, type_metadata_storage
from schemaforge.services.orphaned_reference import OrphanedReferenceRegistry
from schemaforge.services.type_mapper import TypeMapperService
from schemaforge.storages.type_definitions import TypeDefinitionsStorage


def unwrap_build_error(error: BaseException) -> SchemaBuildError | None:
    """Find the SchemaBuildError behind an exception.

    graphql-core re-raises exceptions from field and interface thunks as
    ``TypeError("<Type> fields cannot be resolved. ...")``, chained to the original.
    """
    current: BaseException | None = error
    while current is not None:
        if isinstance(current, SchemaBuildError):
            return current
        current = current.__cause__
    return None


class TypeDefinitionsGenerator:
    """Compiles every registered interface, object and input type into the TypeDefinitionsStorage."""

    def __init__(
        self,
        metadata_storage: TypeMetadataStorage,
        type_definitions_storage: TypeDefinitionsStorage,
        object_type_definition_factory: ObjectTypeDefinitionFactory,
        interface_definition_factory: InterfaceDefinitionFactory,
        input_type_definition_factory: InputTypeDefinitionFactory,
    ) -> None:
        self.metadata_storage = metadata_storage
        self.type_definitions_storage = type_definitions_storage
        self.object_type_definition_factory = object_type_definition_factory
        self.interface_definition_factory = interface_definition_factory
        self.input_type_definition_factory = input_type_definition_factory

    def generate(self, options: BuildSchemaOptions) -> None:
        self.generate_input_type_defs(options)
        self.generate_interface_type_defs(options)
        self.generate_object_type_defs(options)

    def generate_input_type_defs(self, options: BuildSchemaOptions) -> None:
        definitions = [
            self.input_type_definition_factory.create(metadata, options)
            for metadata in self.metadata_storage.get_input_types_metadata()
        ]
        self.type_definitions_storage.add_input_types(definitions)

    def generate_interface_type_defs(self, options: BuildSchemaOptions) -> None:
        definitions = [
            self.interface_definition_factory.create(metadata, options)
            for metadata in self.metadata_storage.get_interfaces_metadata()
        ]
        self.type_definitions_storage.add_interfaces(definitions)

    def generate_object_type_defs(self, options: BuildSchemaOptions) -> None:
        definitions = [
            self.object_type_definition_factory.create(metadata, options)
            for metadata in self.metadata_storage.get_object_types_metadata()
        ]
        self.type_definitions_storage.add_object_types(definitions)


class GraphQLSchemaFactory:
    """Builds an executable GraphQLSchema from the collected type metadata.

    Args:
        metadata_storage: the metadata registry to compile, the process-wide one by default
        instance_resolver: looks up field resolver handler instances per request
    """

    def __init__(
        self,
        metadata_storage: TypeMetadataStorage = type_metadata_storage,
        instance_resolver: InstanceResolver | None = None,
    ) -> None:
        self.metadata_storage = metadata_storage
        self.type_definitions_storage = TypeDefinitionsStorage()
        self.orphaned_reference_registry = OrphanedReferenceRegistry()

        type_mapper = TypeMapperService()
        enum_factory = EnumDefinitionFactory(self.type_definitions_storage)
        ast_definition_node_factory = AstDefinitionNodeFactory()
        input_type_factory = InputTypeFactory(self.type_definitions_storage, type_mapper, enum_factory)
        output_type_factory = OutputTypeFactory(self.type_definitions_storage, type_mapper, enum_factory)
        args_factory = ArgsFactory(metadata_storage, input_type_factory, ast_definition_node_factory)
        field_resolver_factory = FieldResolverFactory(metadata_storage, instance_resolver)

        factory_args = (
            metadata_storage,
            self.type_definitions_storage,
            output_type_factory,
            args_factory,
            ast_definition_node_factory,
            self.orphaned_reference_registry,
            field_resolver_factory,
        )
        self.type_definitions_generator = TypeDefinitionsGenerator(
            metadata_storage,
            self.type_definitions_storage,
            ObjectTypeDefinitionFactory(*factory_args),
            InterfaceDefinitionFactory(*factory_args),
            InputTypeDefinitionFactory(metadata_storage, input_type_factory, ast_definition_node_factory),
        )

    def create(
        self,
        query: Any,
        mutation: Any = None,
        subscription: Any = None,
        options: BuildSchemaOptions | None = None,
    ) -> GraphQLSchema:
        """Compile the registered metadata and assemble the schema.

        Root operation types are given as decorated classes or GraphQLObjectType instances.

        Raises:
            SchemaBuildError: If the metadata is structurally broken (missing or circular
                references, invalid type options). No partial schema is returned.
            SchemaValidationError: If the assembled schema is invalid, unless ``skip_check`` is set.
        """
        options = options or BuildSchemaOptions()
        self.type_definitions_storage.clear()
        self.orphaned_reference_registry.clear()

        with self.metadata_storage.frozen_for_compilation():
            try:
                self.type_definitions_generator.generate(options)
                schema = GraphQLSchema(
                    query=self.get_root_type(query),
                    mutation=self.get_root_type(mutation),
                    subscription=self.get_root_type(subscription),
                    types=self.get_orphaned_types(options),
                )
            except SchemaBuildError as e:
                log.error(f"Failed to build schema: {e}")
                raise
            except TypeError as e:
                build_error = unwrap_build_error(e)
                if build_error is None:
                    raise
                log.error(f"Failed to build schema: {build_error}")
                raise build_error from e

        log.info(f"Compiled schema with {len(schema.type_map)} types")

        if not options.skip_check:
            errors = validate_schema(schema)
            if errors:
                for error in errors:
                    log.error(error.message)
                raise SchemaValidationError(list(errors))
        return schema

    def get_root_type(self, target: Any) -> GraphQLObjectType | None:
        if target is None or isinstance(target, GraphQLObjectType):
            return target
        definition = self.type_definitions_storage.get_object_type_by_target(target)
        if definition is None:
            raise ReferentialIntegrityError(
                f"Root type '{describe_target(target)}' is not a registered object type", target=target
            )
        return definition.type

    def get_orphaned_types(self, options: BuildSchemaOptions) -> list[GraphQLNamedType]:
        """Types to pass to the schema besides those reachable from the root types.

        Non-abstract compiled types that implement an interface (otherwise unreachable
        through an interface-typed field) or were referenced only through field
        type-producing functions or ``options.orphaned_types``.
        """
        references = [*options.orphaned_types, *self.orphaned_reference_registry.drain()]
        if not references:
            return []

        definitions: list[Any] = [
            *self.type_definitions_storage.get_interface_definitions(),
            *self.type_definitions_storage.get_object_type_definitions(),
            *self.type_definitions_storage.get_input_type_definitions(),
        ]
        types: list[GraphQLNamedType] = []
        for definition in definitions:
            if definition.is_abstract:
                continue
            if getattr(definition, "interfaces", None) or definition.target in references:
                types.append(definition.type)
        log.info(f"Including {len(types)} orphaned types in the schema")
        return types
