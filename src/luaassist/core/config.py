"""
Engine configuration.

Settings live in the ``[deduction]`` table of a TOML file and can be
overridden from the environment:

    [deduction]
    max_depth = 200
    path_separator = "/"

Environment overrides:
    LUAASSIST_MAX_DEPTH       integer ceiling, or "" / "none" to disable
    LUAASSIST_PATH_SEPARATOR  separator used when deriving require short paths
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ConfigError, ErrorContext

logger = logging.getLogger(__name__)

MAX_DEPTH_ENV_VAR = "LUAASSIST_MAX_DEPTH"
PATH_SEPARATOR_ENV_VAR = "LUAASSIST_PATH_SEPARATOR"


@dataclass
class EngineConfig:
    """Deduction engine settings."""

    max_depth: int | None = None  # None: bounded only by the interpreter stack
    path_separator: str = "/"

    def __post_init__(self) -> None:
        if self.max_depth is not None:
            if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
                raise ConfigError(f"max_depth must be an integer, got {self.max_depth!r}")
            if self.max_depth <= 0:
                raise ConfigError(f"max_depth must be positive, got {self.max_depth}")
        if not self.path_separator:
            raise ConfigError("path_separator must not be empty")


def _parse_depth(raw: str) -> int | None:
    value = raw.strip().lower()
    if value in ("", "none"):
        return None
    try:
        return int(value)
    except ValueError as e:
        raise ConfigError(f"{MAX_DEPTH_ENV_VAR} must be an integer, got {raw!r}") from e


def _apply_env(data: dict[str, Any]) -> dict[str, Any]:
    merged = dict(data)
    if MAX_DEPTH_ENV_VAR in os.environ:
        merged["max_depth"] = _parse_depth(os.environ[MAX_DEPTH_ENV_VAR])
    if PATH_SEPARATOR_ENV_VAR in os.environ:
        merged["path_separator"] = os.environ[PATH_SEPARATOR_ENV_VAR]
    return merged


def load_config(path: Path | None = None) -> EngineConfig:
    """Load engine configuration from a TOML file plus environment overrides.

    Args:
        path: TOML file containing a ``[deduction]`` table. A missing file
            (or ``None``) yields the defaults.

    Returns:
        The resolved EngineConfig.

    Raises:
        ConfigError: If the file is malformed or a value is invalid.
    """
    data: dict[str, Any] = {}
    if path is not None and path.exists():
        try:
            document = tomllib.loads(path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            lineno = getattr(e, "lineno", None) or 1
            raise ConfigError(str(e), ErrorContext(file=str(path), line=lineno)) from e
        data = document.get("deduction", {})
        if not isinstance(data, dict):
            raise ConfigError("[deduction] must be a table", ErrorContext(file=str(path), line=1))
    elif path is not None:
        logger.debug("No config file at %s, using defaults", path)

    data = _apply_env(data)
    return EngineConfig(
        max_depth=data.get("max_depth"),
        path_separator=data.get("path_separator", "/"),
    )
