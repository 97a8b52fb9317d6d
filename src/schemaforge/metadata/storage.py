from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TypeVar

from schemaforge import log
from schemaforge.errors import MetadataFrozenError, SchemaBuildErrorMessages, describe_target
from schemaforge.metadata.models import (
    ArgsTypeMetadata,
    ClassMetadata,
    FieldResolverHandler,
    InputTypeMetadata,
    InterfaceMetadata,
    ObjectTypeMetadata,
    PropertyMetadata,
)

ClassMetadataT = TypeVar("ClassMetadataT", bound=ClassMetadata)


@dataclass(frozen=True)
class _FieldResolverKey:
    owner: type
    field_name: str


class TypeMetadataStorage:
    """Process-wide registry of collected type descriptions.

    The storage is populated while modules declaring types are imported, frozen
    for the duration of a schema build and cleared between independent builds.
    """

    def __init__(self) -> None:
        self._frozen = False
        self._object_types: dict[type, ObjectTypeMetadata] = {}
        self._interfaces: dict[type, InterfaceMetadata] = {}
        self._args: dict[type, ArgsTypeMetadata] = {}
        self._input_types: dict[type, InputTypeMetadata] = {}
        self._pending_properties: dict[type, list[PropertyMetadata]] = defaultdict(list)
        self._field_resolvers: dict[_FieldResolverKey, FieldResolverHandler] = {}

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def unfreeze(self) -> None:
        self._frozen = False

    @contextmanager
    def frozen_for_compilation(self) -> Iterator["TypeMetadataStorage"]:
        """Reject registrations while a schema is being compiled."""
        was_frozen = self._frozen
        self.freeze()
        try:
            yield self
        finally:
            self._frozen = was_frozen

    def clear(self) -> None:
        self._frozen = False
        self._object_types.clear()
        self._interfaces.clear()
        self._args.clear()
        self._input_types.clear()
        self._pending_properties.clear()
        self._field_resolvers.clear()

    def _ensure_writable(self, target: object) -> None:
        if self._frozen:
            raise MetadataFrozenError(SchemaBuildErrorMessages.FROZEN.format(target=describe_target(target)))

    def add_object_type_metadata(self, metadata: ObjectTypeMetadata) -> None:
        self._ensure_writable(metadata.target)
        self._object_types[metadata.target] = self._attach_properties(metadata)
        log.debug(f"Registered object type {metadata.name}")

    def add_interface_metadata(self, metadata: InterfaceMetadata) -> None:
        self._ensure_writable(metadata.target)
        self._interfaces[metadata.target] = self._attach_properties(metadata)
        log.debug(f"Registered interface {metadata.name}")

    def add_args_metadata(self, metadata: ArgsTypeMetadata) -> None:
        self._ensure_writable(metadata.target)
        self._args[metadata.target] = self._attach_properties(metadata)

    def add_input_type_metadata(self, metadata: InputTypeMetadata) -> None:
        self._ensure_writable(metadata.target)
        self._input_types[metadata.target] = self._attach_properties(metadata)
        log.debug(f"Registered input type {metadata.name}")

    def add_class_field_metadata(self, target: type, metadata: PropertyMetadata) -> None:
        """Register a field of ``target``.

        Fields are usually declared while the class body executes, i.e. before the
        class decorator registers the type itself, so they are parked until then.
        """
        self._ensure_writable(target)
        metadata.target = target
        owner = (
            self._object_types.get(target)
            or self._interfaces.get(target)
            or self._args.get(target)
            or self._input_types.get(target)
        )
        properties = owner.properties if owner else self._pending_properties[target]
        self._replace_property(properties, metadata)

    def add_field_resolver_metadata(
        self, handler_target: type, owner: type, field_name: str, method_name: str
    ) -> None:
        self._ensure_writable(handler_target)
        self._field_resolvers[_FieldResolverKey(owner, field_name)] = FieldResolverHandler(
            target=handler_target, method_name=method_name
        )

    def get_object_type_metadata_by_target(self, target: type) -> ObjectTypeMetadata | None:
        return self._object_types.get(target)

    def get_interface_metadata_by_target(self, target: type) -> InterfaceMetadata | None:
        return self._interfaces.get(target)

    def get_args_metadata_by_target(self, target: type) -> ArgsTypeMetadata | None:
        return self._args.get(target)

    def get_input_type_metadata_by_target(self, target: type) -> InputTypeMetadata | None:
        return self._input_types.get(target)

    def get_input_types_metadata(self) -> list[InputTypeMetadata]:
        return list(self._input_types.values())

    def get_object_types_metadata(self) -> list[ObjectTypeMetadata]:
        return list(self._object_types.values())

    def get_interfaces_metadata(self) -> list[InterfaceMetadata]:
        return list(self._interfaces.values())

    def get_field_resolver_handler_for(self, metadata: PropertyMetadata) -> FieldResolverHandler | None:
        if metadata.target is None:
            return None
        return self._field_resolvers.get(_FieldResolverKey(metadata.target, metadata.name))

    def _attach_properties(self, metadata: ClassMetadataT) -> ClassMetadataT:
        for prop in self._pending_properties.pop(metadata.target, []):
            prop.target = metadata.target
            self._replace_property(metadata.properties, prop)
        return metadata

    @staticmethod
    def _replace_property(properties: list[PropertyMetadata], metadata: PropertyMetadata) -> None:
        for index, existing in enumerate(properties):
            if existing.name == metadata.name:
                properties[index] = metadata
                return
        properties.append(metadata)


type_metadata_storage = TypeMetadataStorage()
