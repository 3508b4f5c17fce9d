"""Shared pytest fixtures for luaassist tests.

The parser and scope builder are external collaborators, so tests build
scopes, symbols and AST fragments by hand through ``ScopeBuilder``.
Offsets advance monotonically: a reference created before a ``local`` is
declared cannot see it, mirroring Lua's scoping.
"""

from __future__ import annotations

import threading

import pytest

from luaassist.core.config import EngineConfig
from luaassist.core.engine import DeductionEngine, LuaEnvironment, Scope
from luaassist.core.ir import (
    Identifier,
    LazyValue,
    LuaFunction,
    LuaType,
    Node,
    Symbol,
    SymbolKind,
)

MAIN_URI = "file:///workspace/main.lua"


class ScopeBuilder:
    """Declares symbols into a scope at increasing source offsets."""

    BODY_SPAN = 1_000

    def __init__(self, scope: Scope) -> None:
        self.scope = scope
        self._cursor = scope.range[0]

    def _next(self, width: int = 10) -> int:
        start = self._cursor + 1
        self._cursor += width
        return start

    def ref(self, name: str) -> Identifier:
        """An identifier occurrence at the current position."""
        start = self._next()
        return Identifier(name=name, range=(start, start + len(name)))

    def lazy(self, node: Node | None, name: str | None = None, index: int = 0) -> LazyValue:
        return LazyValue(self.scope, node, name, index)

    def local(
        self,
        name: str,
        node: Node | None = None,
        *,
        kind: SymbolKind = SymbolKind.VARIABLE,
        index: int = 0,
        type: LuaType | None = None,
        is_local: bool = True,
    ) -> Symbol:
        start = self._next()
        return self.scope.declare(
            Symbol(
                name=name,
                location=(start, start + len(name)),
                range=(start + 1, self.scope.range[1]),
                is_local=is_local,
                kind=kind,
                type=type if type is not None else self.lazy(node, name, index),
            )
        )

    def assign_global(self, name: str, node: Node | None) -> Symbol:
        return self.local(name, node, is_local=False)

    def function(self, name: str, params: tuple[str, ...] = ()) -> tuple[Symbol, ScopeBuilder]:
        """Declare ``local function name(params)``; returns the symbol and body builder."""
        start = self._next(self.BODY_SPAN + 10)
        body = ScopeBuilder(self.scope.open_scope((start, start + self.BODY_SPAN)))
        for param in params:
            body.local(param, None, kind=SymbolKind.PARAMETER)
        symbol = self.local(name, type=LuaFunction(params=list(params)), kind=SymbolKind.FUNCTION)
        return symbol, body

    def returns(
        self,
        function: Symbol,
        *nodes: Node,
        is_local: bool = False,
        tail: Node | None = None,
    ) -> list[Symbol]:
        """Declare ``return nodes...`` in this (function body) scope."""
        ftype = function.type
        slots = [
            Symbol(
                name=f"return#{i}",
                scope=self.scope,
                is_local=is_local,
                uri=self.scope.uri,
                type=self.lazy(node, None, 0),
            )
            for i, node in enumerate(nodes)
        ]
        ftype.returns.extend(slots)
        if tail is not None:
            ftype.tail_call = self.lazy(tail, None, 0)
        return slots


@pytest.fixture
def env() -> LuaEnvironment:
    """Environment with the builtin functions installed."""
    environment = LuaEnvironment()
    environment.install_stdlib()
    return environment


@pytest.fixture
def engine(env: LuaEnvironment) -> DeductionEngine:
    return DeductionEngine(env, EngineConfig())


@pytest.fixture
def type_within(engine: DeductionEngine):
    """``type_of`` that fails the test instead of hanging on a non-terminating deduction."""

    def run(symbol: Symbol, seconds: float = 5.0) -> LuaType:
        result: list[LuaType] = []
        worker = threading.Thread(
            target=lambda: result.append(engine.type_of(symbol)), daemon=True
        )
        worker.start()
        worker.join(seconds)
        assert not worker.is_alive(), f"deduction of {symbol.name} did not finish in {seconds}s"
        return result[0]

    return run


@pytest.fixture
def chunk(env: LuaEnvironment) -> ScopeBuilder:
    """Root scope of ``main.lua``, falling back to the environment's globals."""
    return ScopeBuilder(Scope(range=(0, 1_000_000), uri=MAIN_URI, globals=env.globals))
