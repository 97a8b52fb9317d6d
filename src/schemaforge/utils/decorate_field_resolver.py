import inspect
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from graphql import GraphQLResolveInfo

NextFn = Callable[[], Any]
FieldMiddleware = Callable[["MiddlewareContext", NextFn], Any]


@dataclass
class MiddlewareContext:
    """Arguments of the intercepted field resolver call.

    Args:
        source: the parent value
        args: the field arguments
        context: the execution context value
        info: graphql-core resolve info
    """

    source: Any
    args: dict[str, Any]
    context: Any
    info: GraphQLResolveInfo


def _as_awaitable_next(next_fn: NextFn) -> Callable[[], Awaitable[Any]]:
    async def awaitable_next() -> Any:
        result = next_fn()
        if inspect.isawaitable(result):
            return await result
        return result

    return awaitable_next


def decorate_field_resolver_with_middleware(
    original_resolve_fn_factory: Callable[..., NextFn],
    middleware_functions: Sequence[FieldMiddleware],
) -> Callable[..., Any]:
    """Wrap a resolver in middleware, the first middleware being the outermost.

    ``original_resolve_fn_factory(root, info, **args)`` returns a zero-argument
    callable running the original resolver with those exact arguments. Each
    middleware is called as ``middleware(ctx, next_)`` and may short-circuit by not
    calling ``next_``. Coroutine middleware gets a ``next_`` that can always be
    awaited, whether the inner call is async or not.
    """
    middleware_functions = list(middleware_functions)

    def resolve(root: Any, info: GraphQLResolveInfo, **args: Any) -> Any:
        ctx = MiddlewareContext(source=root, args=args, context=info.context, info=info)
        original_next = original_resolve_fn_factory(root, info, **args)

        def chain(index: int) -> NextFn:
            if index == len(middleware_functions):
                return original_next
            middleware = middleware_functions[index]
            inner = chain(index + 1)
            if inspect.iscoroutinefunction(middleware):
                inner = _as_awaitable_next(inner)
            return lambda: middleware(ctx, inner)

        return chain(0)()

    return resolve
