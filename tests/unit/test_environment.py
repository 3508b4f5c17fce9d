"""Tests for the workspace environment registries."""

from __future__ import annotations

from luaassist.core.engine import LuaEnvironment
from luaassist.core.ir import LuaModule, Symbol, SymbolKind, is_function


def _module(uri: str) -> Symbol:
    return Symbol(name="m", uri=uri, kind=SymbolKind.MODULE, type=LuaModule(uri=uri))


class TestStdlib:
    def test_builtins_declared(self) -> None:
        env = LuaEnvironment()
        env.install_stdlib()
        assert is_function(env.globals["require"].type)
        assert env.globals["setmetatable"].type.params == ["table", "metatable"]

    def test_clear_drops_builtins(self) -> None:
        env = LuaEnvironment()
        env.install_stdlib()
        env.clear()
        assert env.globals == {}


class TestDocuments:
    """Registration and invalidation."""

    def test_add_registers_both_indexes(self) -> None:
        env = LuaEnvironment()
        module = _module("file:///a/foo.lua")
        env.add_document("file:///a/foo.lua", "foo", module)
        assert env.documents["file:///a/foo.lua"] is module
        assert env.packages["foo"] == {"file:///a/foo.lua": module}

    def test_remove_invalidates_owned_entries(self) -> None:
        env = LuaEnvironment()
        uri = "file:///a/foo.lua"
        env.add_document(uri, "foo", _module(uri))
        env.define_global(Symbol(name="G", uri=uri, is_local=False))
        env.define_named_type(Symbol(name="T", uri=uri))
        env.define_global(Symbol(name="Other", uri="file:///b.lua", is_local=False))

        env.remove_document(uri)

        assert uri not in env.documents
        assert "foo" not in env.packages
        assert "G" not in env.globals
        assert "T" not in env.named_types
        assert "Other" in env.globals

    def test_readd_replaces(self) -> None:
        env = LuaEnvironment()
        uri = "file:///a/foo.lua"
        env.add_document(uri, "foo", _module(uri))
        fresh = _module(uri)
        env.add_document(uri, "foo", fresh)
        assert env.packages["foo"] == {uri: fresh}

    def test_registration_order_preserved(self) -> None:
        env = LuaEnvironment()
        env.add_document("file:///z/foo.lua", "foo", _module("file:///z/foo.lua"))
        env.add_document("file:///a/foo.lua", "foo", _module("file:///a/foo.lua"))
        assert list(env.packages["foo"]) == ["file:///z/foo.lua", "file:///a/foo.lua"]

    def test_remove_unknown_is_noop(self) -> None:
        env = LuaEnvironment()
        env.remove_document("file:///nothing.lua")
        assert env.documents == {}
