"""
Lazy type deduction engine.

Usage:
    from luaassist.core.engine import DeductionEngine, LuaEnvironment

    env = LuaEnvironment()
    env.install_stdlib()
    engine = DeductionEngine(env)
    engine.type_of(symbol)
"""

from .deduce import DeductionEngine
from .environment import LuaEnvironment
from .modules import parse_module_path, resolve_require
from .scope import Scope, search_inner_scope_index

__all__ = [
    "DeductionEngine",
    "LuaEnvironment",
    "Scope",
    "parse_module_path",
    "resolve_require",
    "search_inner_scope_index",
]
