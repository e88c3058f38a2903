"""
Storyboard — keeps a design-tool storyboard in sync with the source tree.

Components:
  scanner        — source tree → exported React components
  layout_parser  — previous storyboard text → scenes
  placement      — (components, previous scenes) → scenes  (pure, deterministic)
  renderer       — scenes → storyboard text  (pure)
  state          — JSON sidecar holding the last layout
  assembly       — coordinates the above + file IO
"""

from engine.storyboard.assembly import FileStorage, MemoryStorage, StoryboardAssembly, update_storyboard
from engine.storyboard.layout_parser import LayoutParseError, parse_storyboard
from engine.storyboard.placement import compact, find_gaps, reconcile
from engine.storyboard.renderer import render
from engine.storyboard.scanner import iter_components, scan_components

__all__ = [
    "scan_components",
    "iter_components",
    "parse_storyboard",
    "LayoutParseError",
    "reconcile",
    "find_gaps",
    "compact",
    "render",
    "StoryboardAssembly",
    "FileStorage",
    "MemoryStorage",
    "update_storyboard",
]
