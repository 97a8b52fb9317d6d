import inspect
from enum import Enum
from typing import Any

from schemaforge import log
from schemaforge.services.type_mapper import is_native_type
from schemaforge.utils.type_reference import unwrap_type_reference


class OrphanedReferenceRegistry:
    """Classes reachable only through a field's type-producing function.

    Such classes are never passed to the schema as root operation types, so they
    are handed over explicitly when the schema assembles its type list.
    """

    def __init__(self) -> None:
        self._registry: dict[type, None] = {}

    def add_to_registry_if_orphaned(self, type_ref: Any) -> None:
        type_ref, _, _ = unwrap_type_reference(type_ref)
        if not inspect.isclass(type_ref) or is_native_type(type_ref) or issubclass(type_ref, Enum):
            return
        if type_ref not in self._registry:
            log.debug(f"Registered orphaned reference {type_ref.__qualname__}")
            self._registry[type_ref] = None

    def get_all(self) -> list[type]:
        return list(self._registry)

    def drain(self) -> list[type]:
        references = list(self._registry)
        self._registry.clear()
        return references

    def clear(self) -> None:
        self._registry.clear()
