"""
Merge and inherit rules.

``pick_merged`` chooses between the two sides of an ``or``;
``inherit_from`` builds the per-call-site table returned by a function
whose declared return value is a local table.
"""

from __future__ import annotations

from luaassist.core.ir import LuaTable, LuaType, Symbol, SymbolKind, type_rank

METATABLE_NAME = "__metatable"
INDEX_KEY = "__index"


def pick_merged(left: LuaType, right: LuaType) -> LuaType:
    """Higher-ranked side wins; ties go to the left operand."""
    if type_rank(right) > type_rank(left):
        return right
    return left


def inherit_from(table_symbol: Symbol) -> LuaTable:
    """Create an empty table whose metatable ``__index`` is ``table_symbol``.

    Fields added to the returned table never reach the declaration behind
    ``table_symbol``; reads that miss fall back to it.
    """
    meta = Symbol(
        name=METATABLE_NAME,
        location=table_symbol.location,
        range=table_symbol.range,
        scope=table_symbol.scope,
        is_local=True,
        uri=table_symbol.uri,
        kind=SymbolKind.TABLE,
        type=LuaTable(),
    )
    meta.type.set(INDEX_KEY, table_symbol)
    return LuaTable(metatable=meta)
