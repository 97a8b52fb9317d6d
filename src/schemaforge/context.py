"""Request identity and handler instance lookup used by delegated field resolvers."""

import asyncio
import inspect
import itertools
import weakref
from collections.abc import Callable, MutableMapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from schemaforge import log
from schemaforge.errors import SchemaBuildErrorMessages, UnknownHandlerError, describe_target

REQUEST_CONTEXT_ID = "__schemaforge_context_id__"

_context_ids = itertools.count(1)


@dataclass(frozen=True)
class ContextId:
    id: int


class ContextIdFactory:
    """Derives a stable request identity from the GraphQL execution context."""

    @staticmethod
    def create() -> ContextId:
        return ContextId(next(_context_ids))

    @classmethod
    def get_by_request(cls, context: Any) -> ContextId:
        """Return the identity attached to ``context``, attaching a new one on first use.

        Mapping contexts store it under a reserved key, other objects as an attribute.
        A missing context, or one that cannot carry the identity, gets a fresh
        identity on every lookup.
        """
        if context is None:
            return cls.create()

        if isinstance(context, MutableMapping):
            context_id = context.get(REQUEST_CONTEXT_ID)
            if context_id is None:
                context_id = context[REQUEST_CONTEXT_ID] = cls.create()
            return context_id

        context_id = getattr(context, REQUEST_CONTEXT_ID, None)
        if context_id is None:
            context_id = cls.create()
            try:
                setattr(context, REQUEST_CONTEXT_ID, context_id)
            except AttributeError:
                log.debug(f"Cannot attach a context id to {type(context).__name__}, using a one-off context id")
        return context_id


class InstanceResolver(Protocol):
    """Looks up a handler instance for one request.

    ``resolve`` may return the instance or an awaitable of it. A missing instance
    is ``None`` unless ``strict`` is set.
    """

    def resolve(self, target: type, context_id: ContextId, *, strict: bool = False) -> Any: ...


class Scope(str, Enum):
    SINGLETON = "singleton"
    REQUEST = "request"


@dataclass
class _Provider:
    factory: Callable[[], Any]
    scope: Scope


class ModuleRef:
    """Minimal instance resolver: request-scoped or singleton handler instances.

    Request-scoped providers get a separate instance per ContextId, so two
    concurrent requests never share handler state. The per-request instances are
    held weakly by their ContextId and go away with the request context.
    """

    def __init__(self) -> None:
        self._providers: dict[type, _Provider] = {}
        self._singletons: dict[type, asyncio.Future[Any]] = {}
        self._request_instances: weakref.WeakKeyDictionary[ContextId, dict[type, asyncio.Future[Any]]] = (
            weakref.WeakKeyDictionary()
        )

    def register(
        self, target: type, factory: Callable[[], Any] | None = None, scope: Scope = Scope.REQUEST
    ) -> None:
        self._providers[target] = _Provider(factory=factory or target, scope=scope)

    async def resolve(self, target: type, context_id: ContextId, *, strict: bool = False) -> Any:
        provider = self._providers.get(target)
        if provider is None:
            if strict:
                raise UnknownHandlerError(
                    SchemaBuildErrorMessages.UNKNOWN_HANDLER.format(target=describe_target(target))
                )
            return None

        if provider.scope == Scope.SINGLETON:
            return await self._get_or_create(self._singletons, target, provider)

        instances = self._request_instances.get(context_id)
        if instances is None:
            instances = self._request_instances[context_id] = {}
        return await self._get_or_create(instances, target, provider)

    def release(self, context_id: ContextId) -> None:
        """Drop the request-scoped instances of a finished request."""
        self._request_instances.pop(context_id, None)

    async def _get_or_create(self, cache: dict[type, asyncio.Future[Any]], target: type, provider: _Provider) -> Any:
        # the pending instantiation is cached before the first await, concurrent lookups share it
        pending = cache.get(target)
        if pending is None:
            pending = cache[target] = asyncio.ensure_future(self._instantiate(provider))
        try:
            return await pending
        except Exception:
            if cache.get(target) is pending:
                del cache[target]
            raise

    @staticmethod
    async def _instantiate(provider: _Provider) -> Any:
        instance = provider.factory()
        if inspect.isawaitable(instance):
            instance = await instance
        return instance
