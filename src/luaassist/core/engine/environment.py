"""
Workspace registries consulted during deduction.

``LuaEnvironment`` holds the named-type table, the loaded packages and the
global table. It is rebuilt when documents are (re-)analyzed and read-only
while deduction queries run against them.
"""

from __future__ import annotations

import logging

from luaassist.core.ir import LuaFunction, Symbol, SymbolKind

logger = logging.getLogger(__name__)

# Builtins the interpreter special-cases by name; declared as globals so
# scope search resolves them to function symbols.
STDLIB_FUNCTIONS: dict[str, list[str]] = {
    "require": ["modname"],
    "setmetatable": ["table", "metatable"],
}


class LuaEnvironment:
    """Named types, loaded packages and globals for one workspace."""

    def __init__(self) -> None:
        self.named_types: dict[str, Symbol] = {}
        # module short-name -> document URI -> module symbol
        self.packages: dict[str, dict[str, Symbol]] = {}
        # document URI -> module symbol
        self.documents: dict[str, Symbol] = {}
        self.globals: dict[str, Symbol] = {}

    def install_stdlib(self) -> None:
        """Declare the builtin functions the interpreter knows about."""
        for name, params in STDLIB_FUNCTIONS.items():
            self.globals[name] = Symbol(
                name=name,
                is_local=False,
                uri="std",
                kind=SymbolKind.FUNCTION,
                type=LuaFunction(params=list(params)),
            )

    def define_global(self, symbol: Symbol) -> Symbol:
        self.globals[symbol.name] = symbol
        return symbol

    def define_named_type(self, symbol: Symbol) -> Symbol:
        self.named_types[symbol.name] = symbol
        return symbol

    def add_document(self, uri: str, module_name: str, module: Symbol) -> None:
        """Register an analyzed document under its URI and module short-name."""
        self.remove_document(uri)
        self.documents[uri] = module
        self.packages.setdefault(module_name, {})[uri] = module
        logger.debug("Registered %s as module %s", uri, module_name)

    def remove_document(self, uri: str) -> None:
        """Invalidate a document before it is re-analyzed."""
        if self.documents.pop(uri, None) is None:
            return
        for name in list(self.packages):
            by_uri = self.packages[name]
            by_uri.pop(uri, None)
            if not by_uri:
                del self.packages[name]
        for name in [n for n, s in self.globals.items() if s.uri == uri]:
            del self.globals[name]
        for name in [n for n, s in self.named_types.items() if s.uri == uri]:
            del self.named_types[name]
        logger.debug("Invalidated %s", uri)

    def clear(self) -> None:
        """Drop everything, including builtins."""
        self.named_types.clear()
        self.packages.clear()
        self.documents.clear()
        self.globals.clear()
