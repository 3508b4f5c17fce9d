"""Tests for the AST helpers and the type model.

Covers:
- member_path flattening
- Discriminant helpers and merge ranking
- The merge and inherit rules
- Display strings
"""

from __future__ import annotations

import pytest

from luaassist.core.engine.rules import inherit_from, pick_merged
from luaassist.core.ir import (
    ANY,
    BOOLEAN,
    NUMBER,
    STRING,
    BinaryExpression,
    CallExpression,
    Identifier,
    LazyValue,
    LuaFunction,
    LuaModule,
    LuaTable,
    MemberExpression,
    NumericLiteral,
    StringLiteral,
    Symbol,
    SymbolKind,
    TableConstructorExpression,
    TableKeyString,
    is_any,
    is_function,
    is_lazy,
    is_module,
    is_table,
    member_path,
    type_rank,
)


class TestMemberPath:
    def test_identifier(self) -> None:
        assert member_path(Identifier(name="x")) == ["x"]

    def test_chain(self) -> None:
        node = MemberExpression(
            base=MemberExpression(base=Identifier(name="x"), identifier=Identifier(name="a")),
            identifier=Identifier(name="fd"),
        )
        assert member_path(node) == ["x", "a", "fd"]

    def test_method_indexer(self) -> None:
        node = MemberExpression(
            base=Identifier(name="obj"), identifier=Identifier(name="m"), indexer=":"
        )
        assert member_path(node) == ["obj", "m"]

    def test_call_rooted_chain(self) -> None:
        node = MemberExpression(
            base=CallExpression(base=Identifier(name="f")), identifier=Identifier(name="a")
        )
        assert member_path(node) is None

    def test_nodes_keep_identity_of_children(self) -> None:
        ident = Identifier(name="x")
        call = CallExpression(base=ident, arguments=[ident])
        assert call.base is ident
        assert call.arguments[0] is ident


class TestDiscriminants:
    def test_tags(self) -> None:
        assert is_any(ANY)
        assert is_table(LuaTable())
        assert is_function(LuaFunction())
        assert is_module(LuaModule())
        assert is_lazy(LazyValue(None, None))
        assert not is_table(None)
        assert not is_table(Symbol(name="t", type=LuaTable()))

    @pytest.mark.parametrize(
        "value,rank",
        [
            (ANY, 0),
            (BOOLEAN, 1),
            (NUMBER, 1),
            (STRING, 1),
            (LuaFunction(), 2),
            (LuaTable(), 3),
            (LuaModule(), 4),
            (None, 0),
        ],
    )
    def test_rank(self, value, rank) -> None:
        assert type_rank(value) == rank


class TestRules:
    def test_merge_tie_goes_left(self) -> None:
        assert pick_merged(NUMBER, STRING) is NUMBER
        assert pick_merged(STRING, NUMBER) is STRING

    def test_merge_prefers_rank(self) -> None:
        table = LuaTable()
        assert pick_merged(NUMBER, table) is table
        assert pick_merged(table, ANY) is table

    def test_inherit_builds_fresh_prototype(self) -> None:
        slot = Symbol(name="return#0", uri="file:///a.lua", type=LuaTable())
        table = inherit_from(slot)
        assert table.entries == {}
        assert table.metatable.kind is SymbolKind.TABLE
        assert table.metatable.uri == "file:///a.lua"
        assert table.metatable.type.get("__index") is slot
        assert inherit_from(slot).metatable is not table.metatable


class TestDisplay:
    def test_types(self) -> None:
        assert str(NUMBER) == "number"
        assert str(LuaFunction(params=["a", "b"])) == "function(a, b)"
        table = LuaTable()
        table.set("x", Symbol(name="x", type=NUMBER))
        assert str(table) == "table{x}"
        assert str(LuaModule(uri="file:///m.lua")) == "module file:///m.lua"

    def test_nodes(self) -> None:
        node = BinaryExpression(
            operator="..", left=NumericLiteral(value=1), right=StringLiteral(value="a")
        )
        assert str(node) == '(1 .. "a")'
        table = TableConstructorExpression(
            fields=[TableKeyString(key=Identifier(name="p"), value=NumericLiteral(value=1))]
        )
        assert str(table) == "{p = 1}"
        assert node.kind == "BinaryExpression"
