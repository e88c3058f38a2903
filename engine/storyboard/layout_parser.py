"""
Storyboard — Existing-Layout Parser

Recovers scene geometry from a previously generated storyboard file.
Uses regex on the generator's own markers (id + commentId attributes, the
inline style block, data-label). No JSX parser needed.

Anything the parser cannot make sense of at the block level is logged and
skipped. Structural problems with the file as a whole raise LayoutParseError
so the caller can discard the previous layout and generate fresh.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from engine.storyboard.types import WRAPPER_TAGS, ParsedScene, PreviousLayout

logger = logging.getLogger(__name__)


class LayoutParseError(Exception):
    """Storyboard file exists but cannot be trusted as a previous layout."""
    pass


FIXED_IMPORTS: tuple[str, ...] = (
    "import * as React from 'react'",
    "import { Scene, Storyboard } from 'utopia-api'",
)

SCENE_PATTERN = re.compile(
    r"<Scene[^>]*id='([^']+)'[^>]*commentId='([^']+)'[^>]*style=\{\{([^}]*)\}\}"
    r"[^>]*data-label='([^']+)'[^>]*>(.*?)</Scene>",
    re.DOTALL,
)
SCENE_OPEN_PATTERN = re.compile(r"<Scene\b")
COMPONENT_TAG_PATTERN = re.compile(r"<([A-Z][a-zA-Z0-9_]*)[ \t\n/>]")
WRAPPED_COMPONENT_PATTERN = re.compile(r"component=\{([A-Z][a-zA-Z0-9_]*)\}")
IMPORT_PATTERN = re.compile(r"^import\s.*$", re.MULTILINE)
IMPORT_CLAUSE_PATTERN = re.compile(r"^import\s+(.*?)\s+from\s")
IDENTIFIER_PATTERN = re.compile(r"[A-Za-z_$][\w$]*")
IMPORT_LINE_PATTERN = re.compile(
    r"^import\s+(?P<clause>.+?)\s+from\s+(?P<quote>['\"])(?P<source>[^'\"]+)(?P=quote)\s*;?\s*$"
)
NAMED_IMPORTS_PATTERN = re.compile(r"\{([^}]*)\}")

_STYLE_KEYS = ("width", "height", "left", "top")


def parse_storyboard(text: str) -> PreviousLayout:
    """
    Extract scenes and extra import lines from storyboard source text.

    Raises LayoutParseError when two blocks share a scene id.
    """
    scenes: dict[str, ParsedScene] = {}

    for match in SCENE_PATTERN.finditer(text):
        scene_id, _comment_id, style, label, body = match.groups()

        geometry = parse_style(style)
        if geometry is None:
            logger.warning("Scene %s has an unreadable style block, skipping", scene_id)
            continue

        if scene_id in scenes:
            raise LayoutParseError(f"Duplicate scene id {scene_id!r}")

        component_name = recover_component_name(body)
        if component_name is None:
            logger.info("Could not identify component for scene %s, will preserve it", scene_id)

        scenes[scene_id] = ParsedScene(
            scene_id=scene_id,
            width=geometry["width"],
            height=geometry["height"],
            left=geometry["left"],
            top=geometry["top"],
            label=label,
            component_name=component_name,
            body=body,
        )

    opened = len(SCENE_OPEN_PATTERN.findall(text))
    matched = len(SCENE_PATTERN.findall(text))
    if opened > matched:
        logger.warning("%d scene block(s) did not match the storyboard format and were ignored", opened - matched)

    return PreviousLayout(scenes=scenes, imports=parse_imports(text), source="storyboard")


def parse_style(style: str) -> dict[str, int] | None:
    """Pull width/height/left/top out of an inline style block. None if any is missing."""
    values: dict[str, int] = {}
    for key in _STYLE_KEYS:
        m = re.search(rf"\b{key}:\s*(-?\d+)", style)
        if not m:
            return None
        values[key] = int(m.group(1))
    return values


def recover_component_name(body: str) -> str | None:
    """
    Name of the component a scene renders.

    Takes the first capitalized tag; when that is an infrastructure wrapper,
    looks for a `component={Name}` reference instead. None if neither works.
    """
    m = COMPONENT_TAG_PATTERN.search(body)
    name = m.group(1) if m else None
    if name is None or name in WRAPPER_TAGS:
        wrapped = WRAPPED_COMPONENT_PATTERN.search(body)
        return wrapped.group(1) if wrapped else None
    return name


def parse_imports(text: str) -> list[str]:
    """Import lines other than the two fixed ones, in file order."""
    lines: list[str] = []
    for m in IMPORT_PATTERN.finditer(text):
        line = m.group(0).rstrip()
        if line in FIXED_IMPORTS or line in lines:
            continue
        lines.append(line)
    return lines


def imported_names(line: str) -> set[str]:
    """Identifiers bound by an import line: `import { A, B as C } from 'x'` → {A, B, C}."""
    m = IMPORT_CLAUSE_PATTERN.match(line)
    if not m:
        return set()
    return {name for name in IDENTIFIER_PATTERN.findall(m.group(1)) if name != "as"}


FIXED_BINDINGS: frozenset[str] = frozenset(name for line in FIXED_IMPORTS for name in imported_names(line))


@dataclass
class ImportLine:
    """
    One `import ... from '...'` statement, split into its bindings.

    named holds (imported, local) pairs; a plain `{ A }` is ("A", "A").
    """

    source: str
    default: str | None = None
    namespace: str | None = None
    named: list[tuple[str, str]] = field(default_factory=list)

    def bindings(self) -> list[str]:
        """Local names in declaration order."""
        names = [n for n in (self.default, self.namespace) if n]
        names.extend(local for _imported, local in self.named)
        return names

    def restricted_to(self, names: set[str]) -> ImportLine | None:
        """Same statement binding only `names`. None if nothing is left."""
        line = ImportLine(
            source=self.source,
            default=self.default if self.default in names else None,
            namespace=self.namespace if self.namespace in names else None,
            named=[(imported, local) for imported, local in self.named if local in names],
        )
        return line if line.bindings() else None

    def render(self) -> str:
        parts = [n for n in (self.default,) if n]
        if self.namespace:
            parts.append(f"* as {self.namespace}")
        if self.named:
            specs = ", ".join(imported if imported == local else f"{imported} as {local}" for imported, local in self.named)
            parts.append(f"{{ {specs} }}")
        return f"import {', '.join(parts)} from '{self.source}'"


def parse_import_line(line: str) -> ImportLine | None:
    """
    Split an import statement into default, namespace and named bindings.

    Returns None for side-effect imports and for shapes outside
    `import D, * as NS from 'x'` / `import D, { A, B as C } from 'x'`.
    """
    m = IMPORT_LINE_PATTERN.match(line.strip())
    if not m:
        return None
    clause = m.group("clause")
    parsed = ImportLine(source=m.group("source"))

    braces = NAMED_IMPORTS_PATTERN.search(clause)
    if braces:
        for spec in braces.group(1).split(","):
            tokens = spec.split()
            if not tokens:
                continue
            if len(tokens) == 1:
                parsed.named.append((tokens[0], tokens[0]))
            elif len(tokens) == 3 and tokens[1] == "as":
                parsed.named.append((tokens[0], tokens[2]))
            else:
                return None
        clause = clause[: braces.start()] + clause[braces.end() :]

    for part in clause.split(","):
        tokens = part.split()
        if not tokens:
            continue
        if len(tokens) == 3 and tokens[:2] == ["*", "as"]:
            parsed.namespace = tokens[2]
        elif len(tokens) == 1 and IDENTIFIER_PATTERN.fullmatch(tokens[0]) and parsed.default is None:
            parsed.default = tokens[0]
        else:
            return None
    return parsed
