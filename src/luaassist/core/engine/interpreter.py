"""
Type interpreter over the Lua expression AST.

An ``Evaluation`` is one deduction pass. It walks the node behind a
``LazyValue``, recursing into other symbols' deferred types through scope
search, until it reaches a concrete type or gives up. Handlers return a
resolved type, another ``LazyValue`` to keep deducing, or None for "no
result"; only the engine boundary turns None into ``ANY``.

Cycles are broken with the pass's in-progress set: a node that is already
being evaluated yields no result instead of recursing.
"""

from __future__ import annotations

import dataclasses
import logging

from luaassist.core.config import EngineConfig
from luaassist.core.errors import DeductionDepthError, NoResultReason
from luaassist.core.ir import (
    ANY,
    BOOLEAN,
    NUMBER,
    STRING,
    BinaryExpression,
    BooleanLiteral,
    CallExpression,
    Identifier,
    LazyValue,
    LogicalExpression,
    LuaFunction,
    LuaTable,
    LuaType,
    MemberExpression,
    NamedTypeRef,
    NilLiteral,
    Node,
    NumericLiteral,
    Range,
    SetMetatable,
    StringCallExpression,
    StringLiteral,
    Symbol,
    SymbolKind,
    TableConstructorExpression,
    TableKeyString,
    UnaryExpression,
    VarargLiteral,
    is_any,
    is_function,
    is_lazy,
    is_module,
    is_table,
    member_path,
)

from .environment import LuaEnvironment
from .modules import resolve_require
from .rules import INDEX_KEY, inherit_from, pick_merged
from .scope import Scope

logger = logging.getLogger(__name__)

Deduced = LuaType | LazyValue | None

_NUMBER_UNARY_OPS = {"#", "-"}
_COMPARISON_OPS = {"==", "~=", "<", ">", "<=", ">="}
_ARITHMETIC_OPS = {"+", "-", "*", "/", "%", "^"}


def settle(symbol: Symbol, declared: LuaType | LazyValue, resolved: LuaType) -> LuaType:
    """Record a deduction result on ``symbol`` and return it.

    Kinds are upgraded only for lazily-typed symbols. ``ANY`` is never
    cached, and a parameter that deduces to ``ANY`` keeps its lazy type so
    later call sites can refine it.
    """
    if is_lazy(declared):
        if is_module(resolved):
            symbol.kind = SymbolKind.MODULE
        elif is_table(resolved):
            symbol.kind = SymbolKind.CLASS
        elif is_function(resolved):
            symbol.kind = SymbolKind.FUNCTION

    if symbol.kind is SymbolKind.PARAMETER and is_any(resolved):
        return resolved

    if not is_any(resolved):
        symbol.type = resolved
    return resolved


class Evaluation:
    """One deduction pass with its own in-progress node set."""

    def __init__(self, env: LuaEnvironment, config: EngineConfig) -> None:
        self.env = env
        self.config = config
        self._in_progress: set[int] = set()
        self._depth = 0

    # ------------------------------------------------------------------
    # Symbols and deferred values
    # ------------------------------------------------------------------

    def type_of(self, symbol: Symbol | None) -> LuaType:
        if symbol is None:
            return ANY
        declared = symbol.type
        return settle(symbol, declared, self.deduce(declared))

    def deduce(self, value: Deduced) -> LuaType:
        """Follow deferred values until a concrete type (or nothing) is reached."""
        followed: set[int] = set()
        while is_lazy(value):
            if id(value) in followed:
                logger.debug("%s: lazy value %s", NoResultReason.CYCLE_DETECTED, value)
                return ANY
            followed.add(id(value))
            value = self.parse(value.node, value)
        return ANY if value is None else value

    def parse(self, node: Node | None, lazy: LazyValue) -> Deduced:
        """Interpret ``node`` in the context of ``lazy``; re-entrant calls yield None."""
        if node is None:
            return None
        key = id(node)
        if key in self._in_progress:
            logger.debug("%s: %s (%s)", NoResultReason.CYCLE_DETECTED, node.kind, lazy.name)
            return None
        if self.config.max_depth is not None and self._depth >= self.config.max_depth:
            raise DeductionDepthError(f"Deduction exceeded depth {self.config.max_depth}")

        self._in_progress.add(key)
        self._depth += 1
        try:
            return self._dispatch(node, lazy)
        finally:
            self._depth -= 1
            self._in_progress.discard(key)

    def _dispatch(self, node: Node, lazy: LazyValue) -> Deduced:
        if isinstance(node, NamedTypeRef):
            return self._parse_named_type(node)
        if isinstance(node, StringLiteral):
            return STRING
        if isinstance(node, NumericLiteral):
            return NUMBER
        if isinstance(node, BooleanLiteral):
            return BOOLEAN
        if isinstance(node, NilLiteral):
            return ANY
        if isinstance(node, Identifier):
            return self._parse_name(node.name, node.range, lazy)
        if isinstance(node, VarargLiteral):
            return self._parse_name(node.value, node.range, lazy)
        if isinstance(node, UnaryExpression):
            return self._parse_unary(node)
        if isinstance(node, BinaryExpression):
            return self._parse_binary(node)
        if isinstance(node, MemberExpression):
            return self.resolve_member(node, lazy)
        if isinstance(node, (CallExpression, StringCallExpression)):
            return self._parse_call(node, lazy)
        if isinstance(node, LogicalExpression):
            return self._parse_logical(node, lazy)
        if isinstance(node, TableConstructorExpression):
            return self._parse_table_constructor(node, lazy)
        if isinstance(node, SetMetatable):
            return self._parse_setmetatable(node)

        logger.debug("%s: %s", NoResultReason.UNSUPPORTED_CONSTRUCT, node.kind)
        return None

    # ------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------

    def _parse_named_type(self, node: NamedTypeRef) -> Deduced:
        symbol = self.env.named_types.get(node.name)
        if symbol is None:
            return None
        # Deduced while this reference is still in progress so alias cycles stop here
        return self.deduce(symbol.type)

    def _parse_name(self, name: str, range: Range | None, lazy: LazyValue) -> Deduced:
        context = lazy.context
        argt = getattr(context, "func_argt", None)
        if argt:
            arg_type = argt.get(name)
            if arg_type is not None and not is_any(arg_type):
                return arg_type

        symbol = context.search(name, range)
        if symbol is None:
            logger.debug("%s: %s", NoResultReason.UNRESOLVABLE_REFERENCE, name)
            return None
        return self.type_of(symbol)

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def _parse_unary(self, node: UnaryExpression) -> Deduced:
        if node.operator in _NUMBER_UNARY_OPS:
            return NUMBER
        if node.operator == "not":
            return BOOLEAN
        # Operator overloading is not modeled
        return None

    def _parse_binary(self, node: BinaryExpression) -> Deduced:
        if node.operator == "..":
            return STRING
        if node.operator in _COMPARISON_OPS:
            return BOOLEAN
        if node.operator in _ARITHMETIC_OPS:
            return NUMBER
        return None

    def _parse_logical(self, node: LogicalExpression, lazy: LazyValue) -> Deduced:
        if node.operator == "and":
            return self.parse(node.right, lazy)
        if node.operator == "or":
            left = LazyValue(lazy.context, node.left, lazy.name, 0)
            right = LazyValue(lazy.context, node.right, lazy.name, 0)
            return self.merge(left, right)
        return None

    def merge(self, left: Deduced, right: Deduced) -> LuaType:
        return pick_merged(self.deduce(left), self.deduce(right))

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def _parse_table_constructor(
        self, node: TableConstructorExpression, lazy: LazyValue
    ) -> LuaTable:
        table = LuaTable()
        uri = getattr(lazy.context, "uri", "")
        for field in node.fields:
            # Only string keys are modeled
            if not isinstance(field, TableKeyString):
                continue
            name = field.key.name
            table.set(
                name,
                Symbol(
                    name=name,
                    location=field.key.range,
                    range=field.key.range,
                    scope=lazy.context,
                    is_local=True,
                    uri=uri,
                    kind=SymbolKind.PROPERTY,
                    type=self.deduce(LazyValue(lazy.context, field.value, name, 0)),
                ),
            )
        return table

    def lookup_field(self, table: LuaTable, name: str) -> Symbol | None:
        """Own entry of ``table``, else the entry reachable via ``metatable.__index``."""
        symbol = table.get(name)
        if symbol is not None or table.metatable is None:
            return symbol

        key = id(table)
        if key in self._in_progress:
            logger.debug("%s: metatable chain at %s", NoResultReason.CYCLE_DETECTED, name)
            return None
        self._in_progress.add(key)
        try:
            meta = self.type_of(table.metatable)
            if not is_table(meta):
                return None
            index = meta.get(INDEX_KEY)
            if index is None:
                return None
            parent = self.type_of(index)
            return self.lookup_field(parent, name) if is_table(parent) else None
        finally:
            self._in_progress.discard(key)

    def resolve_member(self, node: Node, lazy: LazyValue) -> LuaType | None:
        """Type at the end of an ``a.b.c`` chain, or None if any link is missing."""
        names = member_path(node)
        if not names:
            logger.debug("%s: member base %s", NoResultReason.UNSUPPORTED_CONSTRUCT, node.kind)
            return None

        head = names[0]
        definition = lazy.context.search(head, node.range, lambda s: s.name == head)
        if definition is None:
            logger.debug("%s: %s", NoResultReason.UNRESOLVABLE_REFERENCE, head)
            return None

        for name in names[1:]:
            owner = self.type_of(definition)
            if is_function(owner):
                # f().x: step through the first declared return value
                if not owner.returns:
                    return None
                definition = owner.returns[0]
                owner = self.type_of(definition)

            if is_table(owner):
                definition = self.lookup_field(owner, name)
            elif is_module(owner):
                definition = owner.get(name)
            else:
                return None

            if definition is None:
                logger.debug("%s: .%s", NoResultReason.UNRESOLVABLE_REFERENCE, name)
                return None

        return self.type_of(definition)

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def _parse_call(
        self, node: CallExpression | StringCallExpression, lazy: LazyValue
    ) -> Deduced:
        callee = self.resolve_member(node.base, lazy)
        if not is_function(callee):
            return None

        name = node.base.name if isinstance(node.base, Identifier) else None
        if name == "require":
            return self._parse_require(node)
        if name == "setmetatable":
            return self._parse_setmetatable_call(node, lazy)

        if lazy.index >= len(callee.returns):
            return self._unwrap_tail_call(callee, lazy)

        slot = callee.returns[lazy.index]
        declared = slot.type
        if not is_lazy(declared):
            if is_table(declared) and slot.is_local:
                return inherit_from(slot)
            return declared

        argt = self._argument_types(node, callee, lazy)
        context = declared.context
        if isinstance(context, Scope):
            with context.overlay(argt):
                result = self.deduce(declared)
        else:
            result = self.deduce(declared)

        if is_table(result) and slot.is_local:
            return inherit_from(slot)
        return result

    def _argument_types(
        self,
        node: CallExpression | StringCallExpression,
        callee: LuaFunction,
        lazy: LazyValue,
    ) -> dict[str, LuaType]:
        # Arguments beyond the declared parameters are dropped
        return {
            param: self.deduce(LazyValue(lazy.context, arg, lazy.name, 0))
            for param, arg in zip(callee.params, node.args)
        }

    def _unwrap_tail_call(self, callee: LuaFunction, lazy: LazyValue) -> Deduced:
        if callee.tail_call is None:
            return ANY
        # The tail call fills the last declared slot; rebase onto its own returns.
        rebased = dataclasses.replace(
            callee.tail_call, index=lazy.index - len(callee.returns) + 1
        )
        return self.deduce(rebased)

    def _parse_require(self, node: CallExpression | StringCallExpression) -> Deduced:
        args = node.args
        literal = args[0] if args else None
        if not isinstance(literal, StringLiteral):
            logger.debug("%s: non-literal require", NoResultReason.UNSUPPORTED_CONSTRUCT)
            return None
        declared = resolve_require(self.env, literal.value, self.config.path_separator)
        if declared is None:
            return None
        # Re-exports are followed inside this call frame so mutual requires stop here
        return self.deduce(declared)

    # ------------------------------------------------------------------
    # setmetatable
    # ------------------------------------------------------------------

    def _parse_setmetatable_call(
        self, node: CallExpression | StringCallExpression, lazy: LazyValue
    ) -> Deduced:
        """``setmetatable(t, mt)`` met while inferring a call's return value."""
        context = lazy.context
        if getattr(context, "func_argt", None) is None:
            return None

        args = node.args
        if not args:
            return None
        base = self.deduce(LazyValue(context, args[0], lazy.name, 0))
        if not is_table(base):
            return None
        if len(args) < 2:
            return base

        meta = self.deduce(LazyValue(context, args[1], "__mt", 0))
        if is_table(meta):
            base.set_metatable(
                Symbol(
                    name="__mt",
                    scope=context,
                    is_local=True,
                    uri=getattr(context, "uri", ""),
                    kind=SymbolKind.TABLE,
                    type=meta,
                )
            )
        return base

    def _parse_setmetatable(self, node: SetMetatable) -> Deduced:
        """A standalone metatable link recorded by the scope builder."""
        base = self.type_of(node.base)
        if not is_table(base):
            return None
        if node.meta is None:
            return base
        if is_table(self.type_of(node.meta)):
            base.set_metatable(node.meta)
        return base
