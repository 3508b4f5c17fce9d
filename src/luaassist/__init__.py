"""
luaassist - lazy type deduction for Lua language tooling.

Computes concrete types for Lua symbols on demand by interpreting the
expressions that produced them.
"""

from __future__ import annotations

import re
from importlib.metadata import version as _metadata_version
from pathlib import Path as _Path

from .core.config import EngineConfig, load_config
from .core.engine import DeductionEngine, LuaEnvironment, Scope
from .core.errors import ConfigError, DeductionError, LuaAssistError


def _get_version() -> str:
    """Get version from pyproject.toml (editable) or importlib.metadata (installed)."""
    # In editable mode, read directly from pyproject.toml for live updates
    pyproject = _Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        content = pyproject.read_text()
        if match := re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE):
            return match.group(1)

    # Fall back to installed metadata
    try:
        return _metadata_version("luaassist")
    except Exception:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    "ConfigError",
    "DeductionEngine",
    "DeductionError",
    "EngineConfig",
    "LuaAssistError",
    "LuaEnvironment",
    "Scope",
    "load_config",
]
