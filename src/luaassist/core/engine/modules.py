"""
``require`` resolution.

A module path such as ``"foo.bar"`` is matched against the loaded packages
registered under its trailing name (``bar``); the first document whose URI
contains the short path (``foo/bar``) wins. Without a match the trailing
name is looked up as a global.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from luaassist.core.ir import LazyValue, LuaType, Symbol

from .environment import LuaEnvironment

logger = logging.getLogger(__name__)

_MODULE_NAME_RE = re.compile(r"\w+(-\w+)*$")


@dataclass(frozen=True)
class ModulePath:
    """A parsed ``require`` argument."""

    module_name: str
    short_path: str


def parse_module_path(literal: str, separator: str = "/") -> ModulePath | None:
    """Split a require literal into its trailing name and search path.

    Returns None when the literal has no trailing word sequence.
    """
    match = _MODULE_NAME_RE.search(literal)
    if match is None:
        return None
    return ModulePath(module_name=match.group(0), short_path=literal.replace(".", separator))


def resolve_require(
    env: LuaEnvironment,
    literal: str,
    separator: str = "/",
) -> LuaType | LazyValue | None:
    """Declared type of the module ``literal`` names, or None.

    The result may still be lazy; the caller deduces it.
    """
    path = parse_module_path(literal, separator)
    if path is None:
        logger.debug("require(%r): no module name", literal)
        return None

    # First match in registration order; no best-match scoring.
    for uri, module in env.packages.get(path.module_name, {}).items():
        if path.short_path in uri:
            returned: Symbol | None = getattr(module.type, "returns", None)
            return returned.type if returned is not None else None

    symbol = env.globals.get(path.module_name)
    if symbol is None:
        logger.debug("require(%r): no package or global %s", literal, path.module_name)
        return None
    return symbol.type
