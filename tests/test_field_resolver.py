import asyncio
import gc
from dataclasses import dataclass
from typing import Any

import pytest
from graphql import GraphQLResolveInfo

from schemaforge.config import BuildSchemaOptions
from schemaforge.context import ContextId, ContextIdFactory, ModuleRef, Scope
from schemaforge.decorators import field, object_type, resolve_field
from schemaforge.errors import HandlerResolutionFailure, UnknownHandlerError
from schemaforge.factories.field_resolver import FieldResolverFactory, get_root_value
from schemaforge.metadata.models import FieldOptions, PropertyMetadata
from schemaforge.metadata.storage import TypeMetadataStorage
from schemaforge.utils.decorate_field_resolver import MiddlewareContext, decorate_field_resolver_with_middleware
from tests.conftest import fake_info


def _property(name: str = "x", default: Any = None, **kwargs: Any) -> PropertyMetadata:
    options = FieldOptions(default_value=default) if default is not None else FieldOptions()
    return PropertyMetadata(name=name, type_fn=lambda: int, options=options, **kwargs)


@pytest.mark.parametrize(
    "root,expected",
    [
        ({"x": 5}, 5),
        ({}, 0),
        ({"x": None}, None),
    ],
)
def test_root_resolver_reads_mapping_or_falls_back_to_default(root: dict[str, Any], expected: Any) -> None:
    resolver = FieldResolverFactory(TypeMetadataStorage()).create(_property(default=0), BuildSchemaOptions())

    assert resolver(root, fake_info()) == expected


def test_root_resolver_reads_attributes() -> None:
    @dataclass
    class Point:
        x: int

    assert get_root_value(Point(x=3), _property()) == 3
    assert get_root_value(object(), _property()) is None
    assert get_root_value(object(), _property(default=7)) == 7


def test_resolver_without_middleware_is_not_wrapped() -> None:
    factory = FieldResolverFactory(TypeMetadataStorage())
    resolver = factory.create(_property(), BuildSchemaOptions())

    assert resolver.__name__ == "resolve"
    assert resolver.__qualname__.startswith("FieldResolverFactory._create_root_resolver")


def test_middleware_order_global_first_then_field() -> None:
    trace: list[str] = []

    def recording(name: str) -> Any:
        def middleware(ctx: MiddlewareContext, next_: Any) -> Any:
            trace.append(f"{name}-before")
            result = next_()
            trace.append(f"{name}-after")
            return result

        return middleware

    prop = _property(middleware=[recording("B")])
    options = BuildSchemaOptions(field_middleware=[recording("A")])
    resolver = FieldResolverFactory(TypeMetadataStorage()).create(prop, options)

    assert resolver({"x": 1}, fake_info()) == 1
    assert trace == ["A-before", "B-before", "B-after", "A-after"]


def test_decorate_field_resolver_call_order_and_forwarded_arguments() -> None:
    trace: list[str] = []
    received: list[tuple[Any, dict[str, Any]]] = []

    def base_resolver(root: Any, info: GraphQLResolveInfo, **args: Any) -> str:
        trace.append("R")
        received.append((root, args))
        return "value"

    def middleware_a(ctx: MiddlewareContext, next_: Any) -> Any:
        trace.append("A-before")
        ctx.args["limit"] = 99
        result = next_()
        trace.append("A-after")
        return result

    def middleware_b(ctx: MiddlewareContext, next_: Any) -> Any:
        trace.append("B-before")
        result = next_()
        trace.append("B-after")
        return result.upper()

    resolver = decorate_field_resolver_with_middleware(
        lambda root, info, **args: lambda: base_resolver(root, info, **args),
        [middleware_a, middleware_b],
    )

    assert resolver({"root": True}, fake_info(), limit=1) == "VALUE"
    assert trace == ["A-before", "B-before", "R", "B-after", "A-after"]
    # arguments of the original call reach the resolver unchanged
    assert received == [({"root": True}, {"limit": 1})]


def test_middleware_can_short_circuit() -> None:
    calls: list[str] = []

    def deny(ctx: MiddlewareContext, next_: Any) -> Any:
        return "denied"

    def base(root: Any, info: Any, **args: Any) -> Any:
        calls.append("R")
        return "value"

    resolver = decorate_field_resolver_with_middleware(lambda *a, **k: lambda: base(*a, **k), [deny])

    assert resolver({}, fake_info()) == "denied"
    assert calls == []


def test_middleware_context_exposes_call_arguments() -> None:
    seen: list[MiddlewareContext] = []

    def capture(ctx: MiddlewareContext, next_: Any) -> Any:
        seen.append(ctx)
        return next_()

    info = fake_info(context={"user": "admin"})
    prop = _property(middleware=[capture])
    resolver = FieldResolverFactory(TypeMetadataStorage()).create(prop, BuildSchemaOptions())

    resolver({"x": 2}, info, first=3)

    assert seen[0].source == {"x": 2}
    assert seen[0].args == {"first": 3}
    assert seen[0].context == {"user": "admin"}
    assert seen[0].info is info


def test_async_middleware_can_await_sync_resolver() -> None:
    async def doubling(ctx: MiddlewareContext, next_: Any) -> Any:
        return (await next_()) * 2

    resolver = FieldResolverFactory(TypeMetadataStorage()).create(
        _property(middleware=[doubling]), BuildSchemaOptions()
    )

    assert asyncio.run(resolver({"x": 21}, fake_info())) == 42


# kept apart from the process-wide storage, which is cleared around every test
profile_storage = TypeMetadataStorage()


@object_type(storage=profile_storage)
class Profile:
    bio = field(str, default="n/a", storage=profile_storage)
    views = field(int, storage=profile_storage)


class ProfileFieldResolver:
    def __init__(self) -> None:
        self.calls = 0

    @resolve_field(Profile, "bio", storage=profile_storage)
    async def resolve_bio(self, root: Any, info: Any, **args: Any) -> str:
        self.calls += 1
        return f"bio of {root['name']}"


def _bio_property() -> PropertyMetadata:
    metadata = profile_storage.get_object_type_metadata_by_target(Profile)
    assert metadata is not None
    return next(p for p in metadata.properties if p.name == "bio")


def test_delegate_handler_result_is_used_verbatim() -> None:
    module_ref = ModuleRef()
    module_ref.register(ProfileFieldResolver)
    resolver = FieldResolverFactory(profile_storage, module_ref).create(_bio_property(), BuildSchemaOptions())

    result = asyncio.run(resolver({"name": "ada", "bio": "ignored"}, fake_info(context={})))

    assert result == "bio of ada"


def test_delegate_falls_back_to_root_value_without_instance() -> None:
    resolver = FieldResolverFactory(profile_storage, ModuleRef()).create(_bio_property(), BuildSchemaOptions())

    assert asyncio.run(resolver({"bio": "from root"}, fake_info(context={}))) == "from root"
    assert asyncio.run(resolver({}, fake_info(context={}))) == "n/a"


def test_delegate_falls_back_when_instance_lacks_the_method() -> None:
    class UnrelatedHandler:
        pass

    module_ref = ModuleRef()
    module_ref.register(ProfileFieldResolver, factory=UnrelatedHandler)
    resolver = FieldResolverFactory(profile_storage, module_ref).create(_bio_property(), BuildSchemaOptions())

    assert asyncio.run(resolver({"bio": "plain"}, fake_info(context={}))) == "plain"


def test_unexpected_lookup_error_is_surfaced_as_handler_resolution_failure() -> None:
    class FailingResolver:
        def resolve(self, target: type, context_id: ContextId, *, strict: bool = False) -> Any:
            raise RuntimeError("container is gone")

    resolver = FieldResolverFactory(profile_storage, FailingResolver()).create(
        _bio_property(), BuildSchemaOptions()
    )

    with pytest.raises(HandlerResolutionFailure, match="ProfileFieldResolver") as exc_info:
        asyncio.run(resolver({}, fake_info(context={})))
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_request_scoped_handlers_are_not_shared_between_requests() -> None:
    module_ref = ModuleRef()
    module_ref.register(ProfileFieldResolver)
    resolver = FieldResolverFactory(profile_storage, module_ref).create(_bio_property(), BuildSchemaOptions())
    first_request: dict[str, Any] = {}
    second_request: dict[str, Any] = {}

    async def run() -> None:
        await resolver({"name": "a"}, fake_info(first_request))
        await resolver({"name": "b"}, fake_info(first_request))
        await resolver({"name": "c"}, fake_info(second_request))

    asyncio.run(run())

    first_id = ContextIdFactory.get_by_request(first_request)
    second_id = ContextIdFactory.get_by_request(second_request)
    assert first_id != second_id
    first = asyncio.run(module_ref.resolve(ProfileFieldResolver, first_id))
    second = asyncio.run(module_ref.resolve(ProfileFieldResolver, second_id))
    assert (first.calls, second.calls) == (2, 1)


def test_singleton_handlers_are_shared() -> None:
    module_ref = ModuleRef()
    module_ref.register(ProfileFieldResolver, scope=Scope.SINGLETON)

    first = asyncio.run(module_ref.resolve(ProfileFieldResolver, ContextIdFactory.create()))
    second = asyncio.run(module_ref.resolve(ProfileFieldResolver, ContextIdFactory.create()))

    assert first is second


def test_strict_lookup_of_unknown_handler_raises() -> None:
    context_id = ContextIdFactory.create()

    with pytest.raises(UnknownHandlerError):
        asyncio.run(ModuleRef().resolve(ProfileFieldResolver, context_id, strict=True))
    assert asyncio.run(ModuleRef().resolve(ProfileFieldResolver, context_id)) is None


def test_context_id_is_attached_once_per_context() -> None:
    class RequestContext:
        pass

    mapping_context: dict[str, Any] = {}
    object_context = RequestContext()

    assert ContextIdFactory.get_by_request(mapping_context) == ContextIdFactory.get_by_request(mapping_context)
    assert ContextIdFactory.get_by_request(object_context) == ContextIdFactory.get_by_request(object_context)
    assert ContextIdFactory.get_by_request(None) != ContextIdFactory.get_by_request(None)


def test_context_that_cannot_carry_an_id_gets_a_fresh_one() -> None:
    class SealedContext:
        __slots__ = ()

    context = SealedContext()

    assert ContextIdFactory.get_by_request(context) != ContextIdFactory.get_by_request(context)


def test_context_less_executions_do_not_share_request_handlers() -> None:
    created: list[ProfileFieldResolver] = []

    def make_handler() -> ProfileFieldResolver:
        created.append(ProfileFieldResolver())
        return created[-1]

    module_ref = ModuleRef()
    module_ref.register(ProfileFieldResolver, factory=make_handler)
    resolver = FieldResolverFactory(profile_storage, module_ref).create(_bio_property(), BuildSchemaOptions())

    assert asyncio.run(resolver({"name": "a"}, fake_info())) == "bio of a"
    assert asyncio.run(resolver({"name": "b"}, fake_info())) == "bio of b"

    assert len(created) == 2
    assert [handler.calls for handler in created] == [1, 1]


def test_request_instances_are_dropped_with_the_request_context() -> None:
    module_ref = ModuleRef()
    module_ref.register(ProfileFieldResolver)
    resolver = FieldResolverFactory(profile_storage, module_ref).create(_bio_property(), BuildSchemaOptions())
    request: dict[str, Any] | None = {}

    asyncio.run(resolver({"name": "a"}, fake_info(request)))
    assert len(module_ref._request_instances) == 1

    request = None
    gc.collect()

    assert len(module_ref._request_instances) == 0


def test_release_drops_request_instances() -> None:
    module_ref = ModuleRef()
    module_ref.register(ProfileFieldResolver)
    context_id = ContextIdFactory.create()

    first = asyncio.run(module_ref.resolve(ProfileFieldResolver, context_id))
    module_ref.release(context_id)
    second = asyncio.run(module_ref.resolve(ProfileFieldResolver, context_id))

    assert first is not second


@pytest.mark.parametrize("scope", [Scope.REQUEST, Scope.SINGLETON])
def test_concurrent_lookups_share_one_instantiation(scope: Scope) -> None:
    created: list[ProfileFieldResolver] = []

    async def make_handler() -> ProfileFieldResolver:
        await asyncio.sleep(0)
        created.append(ProfileFieldResolver())
        return created[-1]

    module_ref = ModuleRef()
    module_ref.register(ProfileFieldResolver, factory=make_handler, scope=scope)
    context_id = ContextIdFactory.create()

    async def run() -> list[Any]:
        return await asyncio.gather(*(module_ref.resolve(ProfileFieldResolver, context_id) for _ in range(5)))

    handlers = asyncio.run(run())

    assert len(created) == 1
    assert all(handler is created[0] for handler in handlers)


def test_failed_instantiation_is_retried_on_next_lookup() -> None:
    attempts: list[int] = []

    def flaky_factory() -> ProfileFieldResolver:
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("not ready")
        return ProfileFieldResolver()

    module_ref = ModuleRef()
    module_ref.register(ProfileFieldResolver, factory=flaky_factory, scope=Scope.SINGLETON)
    context_id = ContextIdFactory.create()

    with pytest.raises(RuntimeError, match="not ready"):
        asyncio.run(module_ref.resolve(ProfileFieldResolver, context_id))

    assert isinstance(asyncio.run(module_ref.resolve(ProfileFieldResolver, context_id)), ProfileFieldResolver)
    assert len(attempts) == 2
