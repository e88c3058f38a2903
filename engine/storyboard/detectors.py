"""
Storyboard — Component Detection Rules

Heuristics that decide whether an exported declaration is a React component
and whether it accepts a `style` prop. Each rule is an independent predicate
over raw text so it can be tested on its own. This is pattern matching, not
parsing: false positives and negatives are expected.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

# export <kind> <Name> [= (params) | = function (params)] | export function <Name>(params)
EXPORT_PATTERN = re.compile(
    r"export\s+(var|const|let|function|class)\s+(\w+)"
    r"(?:\s*=\s*(?:\(([^)]*)\)|function\s*\(([^)]*)\))|\s*\(([^)]*)\))?"
)

RETURNS_MARKUP_PATTERN = re.compile(r"(return|=>)\s*\(\s*<")
DESTRUCTURING_PATTERN = re.compile(r"{\s*[^}]*\s*}")


@dataclass(frozen=True)
class ExportMatch:
    """One `export ...` declaration found in a file."""

    kind: str
    name: str
    params: str


def find_exports(content: str) -> list[ExportMatch]:
    """All exported declarations in source order, with captured parameter text."""
    matches: list[ExportMatch] = []
    for m in EXPORT_PATTERN.finditer(content):
        params = m.group(3) or m.group(4) or m.group(5) or ""
        matches.append(ExportMatch(kind=m.group(1), name=m.group(2), params=params))
    return matches


# ---------------------------------------------------------------------------
# File-level rules
# ---------------------------------------------------------------------------


def has_markup(content: str) -> bool:
    return ("<" in content and "/>" in content) or "</" in content


def has_react_import(content: str) -> bool:
    return "import React" in content or "import * as React" in content


def extends_component(content: str) -> bool:
    return "extends React.Component" in content or "extends Component" in content


def uses_hooks(content: str) -> bool:
    return any(hook in content for hook in ("useState", "useEffect", "useContext"))


def returns_markup(content: str) -> bool:
    return bool(RETURNS_MARKUP_PATTERN.search(content))


COMPONENT_RULES: list[tuple[str, Callable[[str], bool]]] = [
    ("markup", has_markup),
    ("react_import", has_react_import),
    ("extends_component", extends_component),
    ("hooks", uses_hooks),
    ("returns_markup", returns_markup),
]


def matching_rules(content: str) -> list[str]:
    """Names of the component rules that hold for a file's text."""
    return [name for name, rule in COMPONENT_RULES if rule(content)]


def is_component_name(name: str) -> bool:
    return bool(name) and name[0].isupper()


def is_react_component(content: str, name: str) -> bool:
    """Capitalized name plus at least one React signal anywhere in the file."""
    return is_component_name(name) and any(rule(content) for _, rule in COMPONENT_RULES)


# ---------------------------------------------------------------------------
# Style prop
# ---------------------------------------------------------------------------


def accepts_style(params: str) -> bool:
    """
    Guess whether a component's parameter list can receive `style`.

    Matches a direct `style` param, a props object, a spread, or any
    destructuring pattern.
    """
    return (
        "style" in params
        or "props" in params
        or "..." in params
        or bool(DESTRUCTURING_PATTERN.search(params))
    )
