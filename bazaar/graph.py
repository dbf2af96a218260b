"""
Graph — nodnod runner for checkout computations.

    from bazaar import graph as G

    @G.node
    class ShippingNode:
        @classmethod
        async def __compose__(cls, inp: InputNode) -> "ShippingNode":
            ...

    node = await G.compose(ShippingNode, quote_input)

Nodes whose dependencies don't overlap run concurrently.
"""

from __future__ import annotations

from typing import Any, TypeVar, cast
from collections.abc import Callable, Coroutine

from nodnod import Scope, Value, EventLoopAgent, Node
from nodnod import scalar_node as node

T = TypeVar("T")


# ═══════════════════════════════════════════════════════════════════════════════
# Scope
# ═══════════════════════════════════════════════════════════════════════════════


class TypedScope:
    """Type-safe wrapper around nodnod.Scope."""

    __slots__ = ("_scope",)

    def __init__(self, detail: str = "checkout") -> None:
        self._scope = Scope(detail=detail)

    @property
    def inner(self) -> Scope:
        return self._scope

    def inject(self, value: object) -> TypedScope:
        """Inject a value under its runtime type."""
        self._scope.push(Value(type(value), value))
        return self

    def get(self, typ: type[T]) -> T:
        result = self._scope.get(typ)
        if result is None:
            raise KeyError(f"{typ.__name__} not found in scope")
        return cast(T, result.value)

    async def __aenter__(self) -> TypedScope:
        await self._scope.__aenter__()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self._scope.__aexit__(*args)


# ═══════════════════════════════════════════════════════════════════════════════
# compose — One-shot
# ═══════════════════════════════════════════════════════════════════════════════


async def compose(target: type[T], *inputs: object) -> T:
    """
    Resolve target and everything it depends on.

    Inputs are injected under their runtime type, so node signatures must
    name the concrete input classes.
    """
    agent = EventLoopAgent.build({cast(type[Node[Any, Any]], target)})

    async with TypedScope(detail=target.__name__) as scope:
        for value in inputs:
            scope.inject(value)

        run_method = cast(
            Callable[[Scope, dict[type[Any], Scope]], Coroutine[Any, Any, None]],
            getattr(agent, "run"),
        )
        await run_method(scope.inner, {})

        return scope.get(target)


__all__ = ("node", "TypedScope", "compose")
