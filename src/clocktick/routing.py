"""Route tree mapping dotted paths to job handlers.

Handlers are registered as a nested mapping::

    {
        "emails": {
            "send": send_email,
            "digest": custom_endpoint("digests", send_digest),
        },
        "cleanup": cleanup,
    }

which yields the routes ``emails.send``, ``emails.digest`` and ``cleanup``.
Wrapping a handler or a whole sub-mapping in :func:`custom_endpoint` changes
the endpoint its jobs are delivered to, never its path. The innermost wrapper
wins.
"""

import asyncio
import inspect
import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union

from clocktick.errors import (
    ArityMismatch,
    ConfigurationError,
    HandlerFailure,
    RouteNotFound,
)

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]
FailureHandler = Callable[[str, BaseException], None]


@dataclass(frozen=True)
class EndpointOverride:
    """Marks a handler or sub-mapping as delivered to a specific endpoint."""

    endpoint_id: str
    target: Any


def custom_endpoint(endpoint_id: str, target: Any) -> EndpointOverride:
    """Deliver jobs for ``target`` (a handler or mapping) to ``endpoint_id``."""
    if not isinstance(endpoint_id, str) or not endpoint_id:
        raise ConfigurationError("Endpoint ID must be a non-empty string")
    return EndpointOverride(endpoint_id=endpoint_id, target=target)


@dataclass(frozen=True)
class Leaf:
    """A registered handler."""

    path: str
    handler: Handler
    arity: int
    variadic: bool = False
    endpoint_id: str | None = None

    def accepts(self, count: int) -> bool:
        if self.variadic:
            return count >= self.arity
        return count == self.arity

    async def invoke(self, args: list[Any]) -> Any:
        if inspect.iscoroutinefunction(self.handler):
            return await self.handler(*args)
        result = await asyncio.to_thread(self.handler, *args)
        if inspect.isawaitable(result):
            return await result
        return result


@dataclass(frozen=True)
class Branch:
    """A namespace of child routes."""

    children: Mapping[str, "RouteNode"] = field(default_factory=dict)
    endpoint_id: str | None = None


RouteNode = Union[Leaf, Branch]


def _handler_arity(handler: Handler, path: str) -> tuple[int, bool]:
    """Count positional parameters; returns (count, accepts_var_positional)."""
    try:
        signature = inspect.signature(handler)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Cannot inspect handler for {path!r}: {e}") from e

    count = 0
    variadic = False
    for param in signature.parameters.values():
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1
        elif param.kind is inspect.Parameter.VAR_POSITIONAL:
            variadic = True
        elif (
            param.kind is inspect.Parameter.KEYWORD_ONLY
            and param.default is inspect.Parameter.empty
        ):
            raise ConfigurationError(
                f"Handler for {path!r} has a required keyword-only parameter "
                f"{param.name!r}"
            )
    return count, variadic


def _build_node(value: Any, path: list[str], endpoint_id: str | None) -> RouteNode:
    if isinstance(value, EndpointOverride):
        return _build_node(value.target, path, value.endpoint_id)

    dotted = ".".join(path)
    if isinstance(value, Mapping):
        children: dict[str, RouteNode] = {}
        for key, child in value.items():
            if not isinstance(key, str) or not key or "." in key:
                raise ConfigurationError(
                    f"Invalid route segment {key!r} under {dotted or '<root>'!r}"
                )
            children[key] = _build_node(child, [*path, key], endpoint_id)
        return Branch(children=MappingProxyType(children), endpoint_id=endpoint_id)

    if callable(value):
        if not path:
            raise ConfigurationError("Handlers must be registered under a name")
        arity, variadic = _handler_arity(value, dotted)
        return Leaf(
            path=dotted,
            handler=value,
            arity=arity,
            variadic=variadic,
            endpoint_id=endpoint_id,
        )

    raise ConfigurationError(
        f"Route {dotted!r} must be a callable, mapping or custom_endpoint(), "
        f"got {type(value).__name__}"
    )


def _log_failure(path: str, exc: BaseException) -> None:
    logger.error(
        "handler_failed",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={"route.path": path},
    )


class RouteTree:
    """Immutable tree of handlers, safe for concurrent reads."""

    def __init__(
        self,
        handlers: Mapping[str, Any] | EndpointOverride,
        failure_handler: FailureHandler | None = None,
    ):
        root = _build_node(handlers, [], None)
        if not isinstance(root, Branch):
            raise ConfigurationError("Handlers must be a mapping of route names")
        self._root = root
        self._failure_handler = failure_handler or _log_failure

    @property
    def root(self) -> Branch:
        return self._root

    def resolve(self, path: str) -> Leaf:
        """Find the handler at a dotted path.

        Raises:
            RouteNotFound: If a segment is missing or the path ends on a branch.
        """
        node: RouteNode = self._root
        for segment in path.split("."):
            if not isinstance(node, Branch) or segment not in node.children:
                raise RouteNotFound(path)
            node = node.children[segment]
        if not isinstance(node, Leaf):
            raise RouteNotFound(path)
        return node

    def routes(self) -> Iterator[Leaf]:
        """Yield every leaf in registration order."""
        stack: list[RouteNode] = [self._root]
        while stack:
            node = stack.pop()
            if isinstance(node, Leaf):
                yield node
            else:
                stack.extend(reversed(list(node.children.values())))

    async def dispatch(self, path: str, args: list[Any]) -> Any:
        """Invoke the handler at ``path`` with ``args``.

        Anything the handler raises, cancellation aside, is reported to the
        failure handler and re-raised as :class:`HandlerFailure`.

        Raises:
            RouteNotFound: Unknown path.
            ArityMismatch: Wrong number of arguments for the handler.
            HandlerFailure: The handler raised.
        """
        leaf = self.resolve(path)
        if not leaf.accepts(len(args)):
            raise ArityMismatch(path, leaf.arity, len(args))

        try:
            return await leaf.invoke(args)
        except asyncio.CancelledError:
            raise
        except BaseException as e:
            try:
                self._failure_handler(path, e)
            except Exception:
                logger.exception("failure_handler_failed", extra={"route.path": path})
            raise HandlerFailure(path, e) from e

