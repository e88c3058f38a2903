"""
Storyboard — Component Scanner

Walks a source tree and yields a ComponentRecord for every exported
declaration that looks like a React component. Reads files, logs skip
decisions, nothing else.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from engine.storyboard.config import ScanConfig
from engine.storyboard.detectors import accepts_style, find_exports, is_react_component
from engine.storyboard.types import ComponentRecord

logger = logging.getLogger(__name__)


def is_ignored(base_name: str, relative_path: str, config: ScanConfig) -> bool:
    """
    True when a file should be skipped.

    A file is ignored if its base name or relative path contains any ignore
    token (case-insensitive), unless its base name contains a force-include
    token. Force-include wins.
    """
    base = base_name.lower()
    rel = relative_path.lower()
    ignored = any(token.lower() in base or token.lower() in rel for token in config.ignore_tokens)
    if not ignored:
        return False
    return not any(token.lower() in base for token in config.force_include)


def scan_file(path: Path, root: Path) -> list[ComponentRecord]:
    """Component records for one source file (no exclusion check)."""
    content = path.read_text(encoding="utf-8")
    relative = path.relative_to(root).as_posix()

    records: list[ComponentRecord] = []
    for export in find_exports(content):
        if not is_react_component(content, export.name):
            continue
        records.append(
            ComponentRecord(
                name=export.name,
                path=relative,
                full_path=str(path),
                has_style_prop=accepts_style(export.params),
            )
        )
    return records


def iter_components(root: Path, config: ScanConfig | None = None) -> Iterator[ComponentRecord]:
    """
    Recursively yield components under `root`.

    Directory entries are visited in sorted order so repeated scans of the
    same tree produce the same sequence.
    """
    config = config or ScanConfig()
    root = Path(root)
    yield from _walk(root, root, config)


def scan_components(root: Path, config: ScanConfig | None = None) -> list[ComponentRecord]:
    return list(iter_components(root, config))


def _walk(directory: Path, root: Path, config: ScanConfig) -> Iterator[ComponentRecord]:
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            yield from _walk(entry, root, config)
            continue
        if entry.suffix not in config.extensions:
            continue

        relative = os.path.relpath(entry, root).replace(os.sep, "/")
        if is_ignored(entry.stem, relative, config):
            logger.info("Skipping ignored file: %s", entry.name)
            continue

        try:
            records = scan_file(entry, root)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s, skipping: %s", relative, e)
            continue
        yield from records
