"""
Lexical scopes.

The scope builder (an external collaborator) creates one ``Scope`` per
chunk, function body and block, declares symbols into them, and nests them
by source range. The engine only needs ``search`` and the transient
``func_argt`` overlay used while inferring a call's return type.
"""

from __future__ import annotations

import bisect
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field

from luaassist.core.ir import LuaType, Range, Symbol

SymbolPredicate = Callable[[Symbol], bool]


def search_inner_scope_index(scopes: Sequence[Scope], location: Range) -> int:
    """Lower-bound position of ``location`` among scopes sorted by start offset.

    Args:
        scopes: Sibling scopes ordered by ``range[0]``.
        location: ``[start, end]`` offsets being looked up.

    Returns:
        Index of the first scope starting at or after ``location[0]``; the
        scope covering ``location`` is either at that index or just before it.
    """
    return bisect.bisect_left(scopes, location[0], key=lambda s: s.range[0])


@dataclass(eq=False)
class Scope:
    """
    A lexical scope.

    Attributes:
        range: Source offsets covered by the scope
        uri: Owning document
        parent: Enclosing scope, None for a chunk's root
        globals: Global table consulted after the root scope misses
        symbols: Declarations in source order
        children: Nested scopes ordered by start offset
        func_argt: Deduced argument types while a call return is inferred
    """

    range: Range
    uri: str = ""
    parent: Scope | None = None
    globals: dict[str, Symbol] | None = None
    symbols: list[Symbol] = field(default_factory=list)
    children: list[Scope] = field(default_factory=list)
    func_argt: dict[str, LuaType] | None = None

    def open_scope(self, range: Range) -> Scope:
        """Create a nested scope covering ``range``."""
        child = Scope(range=range, uri=self.uri, parent=self)
        bisect.insort(self.children, child, key=lambda s: s.range[0])
        return child

    def declare(self, symbol: Symbol) -> Symbol:
        symbol.scope = self
        if not symbol.uri:
            symbol.uri = self.uri
        self.symbols.append(symbol)
        return symbol

    def contains(self, range: Range) -> bool:
        return self.range[0] <= range[0] and range[1] <= self.range[1]

    def innermost(self, range: Range) -> Scope:
        """Deepest descendant scope covering ``range``."""
        index = search_inner_scope_index(self.children, range)
        for candidate in (index, index - 1):
            if 0 <= candidate < len(self.children):
                child = self.children[candidate]
                if child.contains(range):
                    return child.innermost(range)
        return self

    def search(
        self,
        name: str,
        range: Range | None,
        predicate: SymbolPredicate | None = None,
    ) -> Symbol | None:
        """Nearest declaration of ``name`` visible at ``range``.

        Walks from the innermost scope covering ``range`` outwards, then the
        global table. Locals are visible only inside their usage range;
        non-local declarations are visible anywhere in their scope.
        """
        scope: Scope | None = self.innermost(range) if range is not None else self
        while scope is not None:
            for symbol in reversed(scope.symbols):
                if symbol.name != name or not _visible(symbol, range):
                    continue
                if predicate is None or predicate(symbol):
                    return symbol
            if scope.globals is not None:
                symbol = scope.globals.get(name)
                if symbol is not None and (predicate is None or predicate(symbol)):
                    return symbol
            scope = scope.parent
        return None

    @contextmanager
    def overlay(self, argt: dict[str, LuaType]) -> Iterator[None]:
        """Install ``argt`` as the call-argument overlay for one deduction."""
        previous = self.func_argt
        self.func_argt = argt
        try:
            yield
        finally:
            self.func_argt = previous


def _visible(symbol: Symbol, range: Range | None) -> bool:
    if range is None or not symbol.is_local or symbol.range is None:
        return True
    return symbol.range[0] <= range[0] <= symbol.range[1]
