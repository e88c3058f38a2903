"""
Storyboard configuration — environment settings and run options in one place.

Settings are read from the environment at runtime. Run options come from
command line flags and are frozen once parsed; the scanner receives a
ScanConfig derived from them instead of a shared list edited in place.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_IGNORE_TOKENS: tuple[str, ...] = (
    "index",
    "utils",
    "router",
    "spec",
    "mock",
    "helpers",
    "constants",
    "types",
)

COMPONENT_EXTENSIONS: tuple[str, ...] = (".jsx", ".js", ".tsx", ".ts")


def _split_tokens(raw: str) -> tuple[str, ...]:
    return tuple(token.strip() for token in raw.split(",") if token.strip())


class Settings:
    """Tool settings from environment variables."""

    @property
    def ROOT(self) -> Path:
        return Path(os.environ.get("STORYBOARD_ROOT") or os.getcwd()).resolve()

    @property
    def SRC_DIR(self) -> Path:
        return self.ROOT / os.environ.get("STORYBOARD_SRC_DIR", "src")

    @property
    def STORYBOARD_PATH(self) -> Path:
        return self.ROOT / os.environ.get("STORYBOARD_PATH", "utopia/storyboard.js")

    @property
    def STATE_PATH(self) -> Path | None:
        """Sidecar state file. Set STORYBOARD_STATE_PATH to an empty string to disable."""
        raw = os.environ.get("STORYBOARD_STATE_PATH")
        if raw is None:
            return self.STORYBOARD_PATH.parent / ".storyboard-state.json"
        if not raw.strip():
            return None
        return self.ROOT / raw

    @property
    def FORCE_INCLUDE(self) -> tuple[str, ...]:
        return _split_tokens(os.environ.get("STORYBOARD_FORCE_INCLUDE", ""))

    @property
    def LOG_LEVEL(self) -> int | None:
        raw = os.environ.get("STORYBOARD_LOG_LEVEL", "").strip().upper()
        if not raw:
            return None
        level = logging.getLevelName(raw)
        return level if isinstance(level, int) else None


settings = Settings()


@dataclass(frozen=True)
class ScanConfig:
    """What the scanner considers a candidate file."""

    ignore_tokens: tuple[str, ...] = DEFAULT_IGNORE_TOKENS
    force_include: tuple[str, ...] = ()
    extensions: tuple[str, ...] = COMPONENT_EXTENSIONS


@dataclass(frozen=True)
class RunOptions:
    """Flags for one storyboard update, computed once from the command line."""

    include_utils: bool = False
    include_index: bool = False
    verbose: bool = False
    preserve_existing: bool = True
    prune: bool = True
    force_regen: bool = True
    show_help: bool = False
    force_include: tuple[str, ...] = field(default_factory=tuple)

    def scan_config(self) -> ScanConfig:
        dropped = set()
        if self.include_utils:
            dropped.add("utils")
        if self.include_index:
            dropped.add("index")
        return ScanConfig(
            ignore_tokens=tuple(t for t in DEFAULT_IGNORE_TOKENS if t not in dropped),
            force_include=self.force_include,
        )
