"""
Storyboard test configuration.

Shared source-tree fixtures. Scene and component factories live in the test
modules that use them.
"""

from __future__ import annotations

from pathlib import Path

import pytest

APP_SOURCE = """import * as React from 'react'

export var App = () => {
  return (
    <div>Hello</div>
  )
}
"""

APP2_SOURCE = """import React from 'react'

export const App2 = ({ style }) => {
  return <div style={style}>Second</div>
}
"""

PLAYGROUND_SOURCE = """import * as React from 'react'

export var Playground = (props) => {
  return (
    <div style={props.style}>Playground</div>
  )
}
"""

PLAIN_SOURCE = """export const formatDate = (d) => d.toISOString()
export const MAX_ITEMS = 10
"""


def _write_tree(root: Path, files: dict[str, str]) -> Path:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_tree(tmp_path: Path):
    """Create files under tmp_path/src from a {relative_path: content} mapping."""

    def make(files: dict[str, str]) -> Path:
        return _write_tree(tmp_path / "src", files)

    return make


@pytest.fixture
def src_tree(make_tree) -> Path:
    """A small project: three components plus files the scanner must ignore."""
    return make_tree(
        {
            "app.jsx": APP_SOURCE,
            "app2.jsx": APP2_SOURCE,
            "playground.jsx": PLAYGROUND_SOURCE,
            "index.jsx": APP_SOURCE.replace("App", "Root"),
            "Router.jsx": APP_SOURCE.replace("App", "Shell"),
            "lib/dates.js": PLAIN_SOURCE,
        }
    )
