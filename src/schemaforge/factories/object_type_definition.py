from collections.abc import Callable
from typing import Any

from graphql import GraphQLField, GraphQLInterfaceType, GraphQLObjectType

from schemaforge import log
from schemaforge.config import BuildSchemaOptions
from schemaforge.errors import (
    CircularInheritanceError,
    ReferentialIntegrityError,
    SchemaBuildErrorMessages,
    describe_target,
)
from schemaforge.factories.args import ArgsFactory
from schemaforge.factories.ast_definition_node import AstDefinitionNodeFactory
from schemaforge.factories.field_resolver import FieldResolverFactory
from schemaforge.factories.output_type import OutputTypeFactory
from schemaforge.metadata.models import InterfaceMetadata, ObjectTypeMetadata, PropertyMetadata, get_interfaces_array
from schemaforge.metadata.storage import TypeMetadataStorage
from schemaforge.services.orphaned_reference import OrphanedReferenceRegistry
from schemaforge.storages.type_definitions import ObjectTypeDefinition, TypeDefinitionsStorage
from schemaforge.utils.type_reference import resolve_type_reference

ParentTypeGetter = Callable[[], GraphQLObjectType | GraphQLInterfaceType | None]


class ClassTypeDefinitionFactory:
    """Shared compilation of object and interface types.

    Interfaces and fields are returned as thunks: graphql-core evaluates them once,
    on first access, after every type of the build has been registered in the
    TypeDefinitionsStorage. Forward and self references therefore resolve.
    """

    def __init__(
        self,
        metadata_storage: TypeMetadataStorage,
        type_definitions_storage: TypeDefinitionsStorage,
        output_type_factory: OutputTypeFactory,
        args_factory: ArgsFactory,
        ast_definition_node_factory: AstDefinitionNodeFactory,
        orphaned_reference_registry: OrphanedReferenceRegistry,
        field_resolver_factory: FieldResolverFactory,
    ) -> None:
        self.metadata_storage = metadata_storage
        self.type_definitions_storage = type_definitions_storage
        self.output_type_factory = output_type_factory
        self.args_factory = args_factory
        self.ast_definition_node_factory = ast_definition_node_factory
        self.orphaned_reference_registry = orphaned_reference_registry
        self.field_resolver_factory = field_resolver_factory

    def get_parent_type_getter(self, metadata: ObjectTypeMetadata) -> ParentTypeGetter:
        """Return a callable resolving the compiled type of the closest registered base class.

        Bases without object or interface metadata (mixins, ``object``) are skipped.
        """
        parent_target = self._get_parent_target(metadata.target)

        def get_parent_type() -> GraphQLObjectType | GraphQLInterfaceType | None:
            if parent_target is None:
                return None
            definition = self.type_definitions_storage.get_object_type_by_target(
                parent_target
            ) or self.type_definitions_storage.get_interface_by_target(parent_target)
            if definition is None:
                raise ReferentialIntegrityError(
                    SchemaBuildErrorMessages.MISSING_PARENT.format(
                        host=metadata.name, target=describe_target(parent_target)
                    ),
                    host=metadata.target,
                    target=parent_target,
                )
            return definition.type

        return get_parent_type

    def _get_parent_target(self, target: type) -> type | None:
        for base in target.__bases__:
            if self.metadata_storage.get_object_type_metadata_by_target(
                base
            ) or self.metadata_storage.get_interface_metadata_by_target(base):
                return base
        return None

    def generate_interfaces(
        self, metadata: ObjectTypeMetadata, get_parent_type: ParentTypeGetter
    ) -> Callable[[], list[GraphQLInterfaceType]]:
        def interfaces_thunk() -> list[GraphQLInterfaceType]:
            interfaces = [
                self._get_compiled_interface(metadata, target) for target in get_interfaces_array(metadata.interfaces)
            ]
            # graphql requires transitively implemented interfaces to be listed as well
            interfaces.extend(
                self._get_compiled_interface(metadata, interface.target)
                for interface in self.get_recursive_interfaces(metadata)
            )
            parent_type = get_parent_type()
            if parent_type is not None:
                interfaces.extend(parent_type.interfaces)
            return list(dict.fromkeys(interfaces))

        return interfaces_thunk

    def generate_fields(
        self, metadata: ObjectTypeMetadata, options: BuildSchemaOptions, get_parent_type: ParentTypeGetter
    ) -> Callable[[], dict[str, GraphQLField]]:
        for prop in metadata.properties:
            self.orphaned_reference_registry.add_to_registry_if_orphaned(prop.type_fn())

        def fields_thunk() -> dict[str, GraphQLField]:
            properties: dict[str, PropertyMetadata] = {}
            for interface in self.get_recursive_interfaces(metadata):
                for prop in interface.properties:
                    properties[prop.graphql_name(options.field_name_case)] = prop
            # own properties last so they override inherited ones
            for prop in metadata.properties:
                properties[prop.graphql_name(options.field_name_case)] = prop

            fields = {
                name: self.create_field(metadata, name, prop, options) for name, prop in properties.items()
            }

            parent_type = get_parent_type()
            if parent_type is not None:
                fields = {**parent_type.fields, **fields}

            log.debug(f"Compiled {len(fields)} fields for {metadata.name}")
            return fields

        return fields_thunk

    def create_field(
        self, metadata: ObjectTypeMetadata, name: str, prop: PropertyMetadata, options: BuildSchemaOptions
    ) -> GraphQLField:
        type_ref, type_options = resolve_type_reference(prop.type_fn, prop.options)
        graphql_type = self.output_type_factory.create(f"{metadata.name}.{name}", type_ref, options, type_options)
        return GraphQLField(
            graphql_type,
            args=self.args_factory.create(prop.method_args, options),
            resolve=self.field_resolver_factory.create(prop, options),
            description=prop.description,
            deprecation_reason=prop.deprecation_reason,
            ast_node=self.ast_definition_node_factory.create_field_node(name, graphql_type, prop.directives),
            extensions={"complexity": prop.complexity, **prop.extensions},
        )

    def get_recursive_interfaces(self, metadata: ObjectTypeMetadata) -> list[InterfaceMetadata]:
        """Collect every interface implemented directly or transitively by ``metadata``.

        Ancestors come before the interfaces extending them, each interface once.

        Raises:
            CircularInheritanceError: If an interface is reachable from itself.
            ReferentialIntegrityError: If an implemented class is not a registered interface.
        """
        collected: dict[type, InterfaceMetadata] = {}

        def visit(current: ObjectTypeMetadata, path: list[type]) -> None:
            for target in get_interfaces_array(current.interfaces):
                if target in path:
                    raise CircularInheritanceError([*path, target])
                if target in collected:
                    continue
                interface = self._get_interface_metadata(current, target)
                visit(interface, [*path, target])
                collected[target] = interface

        visit(metadata, [metadata.target])
        return list(collected.values())

    def _get_interface_metadata(self, host: ObjectTypeMetadata, target: Any) -> InterfaceMetadata:
        interface = self.metadata_storage.get_interface_metadata_by_target(target)
        if interface is None:
            raise ReferentialIntegrityError(
                SchemaBuildErrorMessages.MISSING_INTERFACE_METADATA.format(
                    host=host.name, target=describe_target(target)
                ),
                host=host.target,
                target=target,
            )
        return interface

    def _get_compiled_interface(self, host: ObjectTypeMetadata, target: Any) -> GraphQLInterfaceType:
        definition = self.type_definitions_storage.get_interface_by_target(target)
        if definition is None:
            raise ReferentialIntegrityError(
                SchemaBuildErrorMessages.MISSING_INTERFACE.format(host=host.name, target=describe_target(target)),
                host=host.target,
                target=target,
            )
        return definition.type


class ObjectTypeDefinitionFactory(ClassTypeDefinitionFactory):
    def create(self, metadata: ObjectTypeMetadata, options: BuildSchemaOptions) -> ObjectTypeDefinition:
        get_parent_type = self.get_parent_type_getter(metadata)
        return ObjectTypeDefinition(
            target=metadata.target,
            is_abstract=metadata.is_abstract,
            interfaces=get_interfaces_array(metadata.interfaces),
            type=GraphQLObjectType(
                name=metadata.name,
                description=metadata.description,
                ast_node=self.ast_definition_node_factory.create_object_type_node(metadata.name, metadata.directives),
                extensions=metadata.extensions,
                interfaces=self.generate_interfaces(metadata, get_parent_type),
                fields=self.generate_fields(metadata, options, get_parent_type),
            ),
        )
