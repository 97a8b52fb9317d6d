import inspect
from collections.abc import Callable, Mapping
from typing import Any

from graphql import GraphQLResolveInfo

from schemaforge import log
from schemaforge.config import BuildSchemaOptions
from schemaforge.context import ContextIdFactory, InstanceResolver
from schemaforge.errors import HandlerResolutionFailure, SchemaBuildErrorMessages, describe_target
from schemaforge.metadata.models import UNDEFINED, FieldResolverHandler, PropertyMetadata
from schemaforge.metadata.storage import TypeMetadataStorage
from schemaforge.utils.decorate_field_resolver import decorate_field_resolver_with_middleware


def get_root_value(root: Any, field: PropertyMetadata) -> Any:
    """Read a field off its parent value, falling back to the field default."""
    if isinstance(root, Mapping):
        value = root.get(field.name, UNDEFINED)
    else:
        value = getattr(root, field.name, UNDEFINED)
    if value is UNDEFINED:
        default = field.options.default_value
        return None if default is UNDEFINED else default
    return value


class FieldResolverFactory:
    """Builds the resolve function of one compiled field.

    Building a resolver has no side effects, everything happens when graphql-core
    calls it during execution.
    """

    def __init__(
        self,
        metadata_storage: TypeMetadataStorage,
        instance_resolver: InstanceResolver | None = None,
        context_id_factory: type[ContextIdFactory] = ContextIdFactory,
    ) -> None:
        self.metadata_storage = metadata_storage
        self.instance_resolver = instance_resolver
        self.context_id_factory = context_id_factory

    def create(self, field: PropertyMetadata, options: BuildSchemaOptions) -> Callable[..., Any]:
        handler = self.metadata_storage.get_field_resolver_handler_for(field)
        if handler is not None and self.instance_resolver is not None:
            root_field_resolver = self._create_delegating_resolver(field, handler, self.instance_resolver)
        else:
            root_field_resolver = self._create_root_resolver(field)

        middleware_functions = list(options.field_middleware) + list(field.middleware)
        if not middleware_functions:
            return root_field_resolver

        def root_resolve_fn_factory(root: Any, info: GraphQLResolveInfo, **args: Any) -> Callable[[], Any]:
            return lambda: root_field_resolver(root, info, **args)

        return decorate_field_resolver_with_middleware(root_resolve_fn_factory, middleware_functions)

    @staticmethod
    def _create_root_resolver(field: PropertyMetadata) -> Callable[..., Any]:
        def resolve(root: Any, info: GraphQLResolveInfo, **args: Any) -> Any:
            return get_root_value(root, field)

        return resolve

    def _create_delegating_resolver(
        self, field: PropertyMetadata, handler: FieldResolverHandler, instance_resolver: InstanceResolver
    ) -> Callable[..., Any]:
        context_id_factory = self.context_id_factory

        async def resolve(root: Any, info: GraphQLResolveInfo, **args: Any) -> Any:
            context_id = context_id_factory.get_by_request(info.context)
            try:
                instance = instance_resolver.resolve(handler.target, context_id, strict=False)
                if inspect.isawaitable(instance):
                    instance = await instance
            except Exception as e:
                raise HandlerResolutionFailure(
                    SchemaBuildErrorMessages.HANDLER_RESOLUTION.format(
                        target=describe_target(handler.target), host=field.name
                    ),
                    target=handler.target,
                ) from e

            method = getattr(instance, handler.method_name, None) if instance is not None else None
            if method is None:
                log.debug(f"No handler instance for field {field.name}, reading it from the parent value")
                return get_root_value(root, field)

            result = method(root, info, **args)
            if inspect.isawaitable(result):
                result = await result
            return result

        return resolve
