"""
Type model for Lua symbol deduction.

A type is a closed tagged variant: every value carries a ``tag`` and the
``is_*`` helpers below are plain discriminant checks. ``LazyValue`` shares
the tag space so a symbol's ``type`` slot can hold either a resolved type
or a deferred computation.

Tables and modules form mutable, possibly cyclic graphs (table entries are
symbols, symbols hold tables), so these are identity-compared dataclasses
rather than frozen value models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Callable, ClassVar

if TYPE_CHECKING:
    from .ast import Node, Range

# ---------------------------------------------------------------------------
# Tags and kinds
# ---------------------------------------------------------------------------


class TypeTag(StrEnum):
    """Discriminant of the type variant."""

    ANY = "any"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    FUNCTION = "function"
    TABLE = "table"
    MODULE = "module"
    LAZY = "lazy"


class SymbolKind(StrEnum):
    """What a symbol denotes, as shown to editors."""

    VARIABLE = "variable"
    PARAMETER = "parameter"
    PROPERTY = "property"
    FUNCTION = "function"
    CLASS = "class"
    MODULE = "module"
    TABLE = "table"


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class LuaBasicType:
    """One of the four atom types; use the module-level singletons."""

    tag: TypeTag

    def __str__(self) -> str:
        return self.tag.value


ANY = LuaBasicType(TypeTag.ANY)
BOOLEAN = LuaBasicType(TypeTag.BOOLEAN)
NUMBER = LuaBasicType(TypeTag.NUMBER)
STRING = LuaBasicType(TypeTag.STRING)


@dataclass(eq=False)
class LuaFunction:
    """
    A function signature.

    Attributes:
        params: Declared parameter names, in order
        returns: Return-slot symbols; the slot's ``is_local`` flag marks
            values produced by a local binding in the function body
        tail_call: Deferred type of a trailing ``return g(...)``; the tail
            call occupies the last declared return slot
    """

    tag: ClassVar[TypeTag] = TypeTag.FUNCTION

    params: list[str] = field(default_factory=list)
    returns: list[Symbol] = field(default_factory=list)
    tail_call: LazyValue | None = None

    def __str__(self) -> str:
        return f"function({', '.join(self.params)})"


@dataclass(eq=False)
class LuaTable:
    """
    A table with named entries and an optional prototype link.

    ``metatable`` is a reference to a symbol wrapping another table, never a
    copy: lookups that miss here fall back through ``metatable.__index``.
    """

    tag: ClassVar[TypeTag] = TypeTag.TABLE

    metatable: Symbol | None = None
    entries: dict[str, Symbol] = field(default_factory=dict)

    def set(self, name: str, symbol: Symbol) -> None:
        self.entries[name] = symbol

    def get(self, name: str) -> Symbol | None:
        """Own entry only; prototype fallback needs the deduction engine."""
        return self.entries.get(name)

    def set_metatable(self, metatable: Symbol | None) -> None:
        # Shared mutation: every holder of this table observes the new link.
        self.metatable = metatable

    def __str__(self) -> str:
        return "table{" + ", ".join(self.entries) + "}"


@dataclass(eq=False)
class LuaModule:
    """
    An analyzed document's namespace.

    Attributes:
        entries: Exported names
        scope: The document's root scope, for position-aware searches
        returns: Symbol holding the chunk's ``return`` value, if any
    """

    tag: ClassVar[TypeTag] = TypeTag.MODULE

    uri: str = ""
    entries: dict[str, Symbol] = field(default_factory=dict)
    scope: Any = None
    returns: Symbol | None = None

    def set(self, name: str, symbol: Symbol) -> None:
        self.entries[name] = symbol

    def get(self, name: str) -> Symbol | None:
        return self.entries.get(name)

    def search(
        self,
        name: str,
        range: Range | None,
        predicate: Callable[[Symbol], bool] | None = None,
    ) -> Symbol | None:
        """Nearest declaration of ``name`` visible at ``range``, then exports."""
        if self.scope is not None:
            found = self.scope.search(name, range, predicate)
            if found is not None:
                return found
        symbol = self.entries.get(name)
        if symbol is not None and (predicate is None or predicate(symbol)):
            return symbol
        return None

    def __str__(self) -> str:
        return f"module {self.uri}" if self.uri else "module"


@dataclass(frozen=True, eq=False)
class LazyValue:
    """
    Deferred type computation.

    Attributes:
        context: Scope in which free names of ``node`` resolve
        node: Expression whose evaluation yields the type (not owned)
        name: Binding name, for diagnostics
        index: Which value of a multi-return call to take
    """

    tag: ClassVar[TypeTag] = TypeTag.LAZY

    context: Any
    node: Node | None
    name: str | None = None
    index: int = 0

    def __str__(self) -> str:
        return f"lazy({self.name or self.node})"


LuaType = LuaBasicType | LuaFunction | LuaTable | LuaModule


# ---------------------------------------------------------------------------
# Symbols
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class Symbol:
    """
    A named binding.

    ``type`` starts out as a LazyValue wherever the declaration cannot be
    typed syntactically and is overwritten in place once deduction succeeds.
    """

    name: str
    location: Range | None = None
    range: Range | None = None
    scope: Any = None
    is_local: bool = True
    uri: str = ""
    kind: SymbolKind = SymbolKind.VARIABLE
    type: LuaType | LazyValue = ANY

    def __str__(self) -> str:
        return f"{self.name}: {self.type}"


# ---------------------------------------------------------------------------
# Discriminant helpers
# ---------------------------------------------------------------------------


def _tag(value: object) -> TypeTag | None:
    return getattr(value, "tag", None)


def is_lazy(value: object) -> bool:
    return _tag(value) is TypeTag.LAZY


def is_any(value: object) -> bool:
    return _tag(value) is TypeTag.ANY


def is_boolean(value: object) -> bool:
    return _tag(value) is TypeTag.BOOLEAN


def is_number(value: object) -> bool:
    return _tag(value) is TypeTag.NUMBER


def is_string(value: object) -> bool:
    return _tag(value) is TypeTag.STRING


def is_function(value: object) -> bool:
    return _tag(value) is TypeTag.FUNCTION


def is_table(value: object) -> bool:
    return _tag(value) is TypeTag.TABLE


def is_module(value: object) -> bool:
    return _tag(value) is TypeTag.MODULE


_RANKS: dict[TypeTag, int] = {
    TypeTag.ANY: 0,
    TypeTag.BOOLEAN: 1,
    TypeTag.NUMBER: 1,
    TypeTag.STRING: 1,
    TypeTag.FUNCTION: 2,
    TypeTag.TABLE: 3,
    TypeTag.MODULE: 4,
}


def type_rank(value: object) -> int:
    """Merge preference: richer shapes outrank atoms, anything unknown ranks 0."""
    tag = _tag(value)
    return _RANKS.get(tag, 0) if tag is not None else 0
