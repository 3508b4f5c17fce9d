"""
Public entry points of the deduction engine.

Every method here is total: unresolvable references, cycles, unsupported
constructs and internal failures all degrade to ``ANY`` (or None for
lookups) so providers always have an answer to give the editor.

The engine assumes one in-flight pass per document: callers serialize
deductions against the same document's node graph.
"""

from __future__ import annotations

import logging

from luaassist.core.config import EngineConfig
from luaassist.core.ir import (
    ANY,
    LazyValue,
    LuaType,
    Range,
    Symbol,
    is_module,
    is_table,
)

from .environment import LuaEnvironment
from .interpreter import Evaluation, settle

logger = logging.getLogger(__name__)


class DeductionEngine:
    """Lazily deduces symbol types against a workspace environment."""

    def __init__(self, env: LuaEnvironment, config: EngineConfig | None = None) -> None:
        self.env = env
        self.config = config or EngineConfig()

    def _begin(self) -> Evaluation:
        return Evaluation(self.env, self.config)

    def type_of(self, symbol: Symbol | None) -> LuaType:
        """Deduce, memoize and return the type of ``symbol``.

        Args:
            symbol: The symbol to type. None yields ANY.

        Returns:
            The resolved type; ANY when nothing better is known. Non-ANY
            results are written back onto ``symbol.type``.
        """
        if symbol is None:
            return ANY

        declared = symbol.type
        try:
            resolved = self._begin().deduce(declared)
        except Exception:
            logger.debug("Deduction failed for %s", symbol.name, exc_info=True)
            resolved = ANY
        return settle(symbol, declared, resolved)

    def deduce_type(self, value: LuaType | LazyValue | None) -> LuaType:
        """Resolve ``value`` without touching any symbol."""
        try:
            return self._begin().deduce(value)
        except Exception:
            logger.debug("Deduction failed for %s", value, exc_info=True)
            return ANY

    def find_def(self, name: str, uri: str, range: Range | None) -> Symbol | None:
        """Definition of ``name`` visible at ``range`` in document ``uri``."""
        module = self.env.documents.get(uri)
        if module is None or not is_module(module.type):
            return None
        try:
            return module.type.search(name, range, lambda s: s.name == name)
        except Exception:
            logger.debug("Definition search failed for %s in %s", name, uri, exc_info=True)
            return None

    def lookup_field(self, table: LuaType | None, name: str) -> Symbol | None:
        """Property ``name`` of ``table``, following ``__index`` metatables."""
        if not is_table(table):
            return None
        try:
            return self._begin().lookup_field(table, name)
        except Exception:
            logger.debug("Field lookup failed for %s", name, exc_info=True)
            return None
