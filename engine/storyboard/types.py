"""
Storyboard — Shared Types

Data classes used across scanner, layout parser, placement, renderer, and
assembly. These are the contracts that bind the storyboard tool together.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Layout constants
# ---------------------------------------------------------------------------

DEFAULT_SCENE_WIDTH = 700
DEFAULT_SCENE_HEIGHT = 700
SCENE_SPACING = 816  # left-to-left distance between neighbouring scenes
DEFAULT_TOP = 128
GAP_BUFFER = 20  # px kept free before the next scene when filling a gap

FIRST_ANCHOR = "Playground"
SECOND_ANCHOR = "App"


@dataclass(frozen=True)
class AnchorDefaults:
    """Reserved geometry for one of the two anchor components."""

    width: int
    height: int
    left: int
    label: str


ANCHORS: dict[str, AnchorDefaults] = {
    FIRST_ANCHOR: AnchorDefaults(width=700, height=759, left=212, label="Playground"),
    SECOND_ANCHOR: AnchorDefaults(width=744, height=1133, left=992, label="My App"),
}

# Tags that wrap a component inside a scene instead of being the component
WRAPPER_TAGS: set[str] = {"Scene", "Storyboard", "SafeComponentWrapper"}


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ComponentRecord:
    """One exported UI component found by the scanner."""

    name: str
    path: str  # relative to the scanned root, "/"-separated
    full_path: str
    has_style_prop: bool = False

    @property
    def scene_id(self) -> str:
        return scene_id_for(self.name)


@dataclass
class ParsedScene:
    """A scene recovered from a previous layout (storyboard text or state file)."""

    scene_id: str
    width: int
    height: int
    left: int
    top: int
    label: str
    component_name: str | None = None  # None = could not be identified
    body: str = ""  # inner markup between <Scene ...> and </Scene>

    @property
    def identifiable(self) -> bool:
        return self.component_name is not None

    def geometry(self) -> tuple[int, int, int, int, str]:
        return (self.width, self.height, self.left, self.top, self.label)

    def to_dict(self) -> dict[str, Any]:
        return {
            "scene_id": self.scene_id,
            "width": self.width,
            "height": self.height,
            "left": self.left,
            "top": self.top,
            "label": self.label,
            "component_name": self.component_name,
            "body": self.body,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ParsedScene:
        return cls(
            scene_id=d["scene_id"],
            width=d["width"],
            height=d["height"],
            left=d["left"],
            top=d["top"],
            label=d["label"],
            component_name=d.get("component_name"),
            body=d.get("body", ""),
        )


@dataclass
class PreviousLayout:
    """Everything known about the last generated storyboard."""

    scenes: dict[str, ParsedScene] = field(default_factory=dict)
    imports: list[str] = field(default_factory=list)  # import lines beyond the fixed ones
    source: str = "storyboard"  # "storyboard" or "state"


@dataclass
class SceneConfig:
    """
    A rectangle on the storyboard canvas assigned to one component.

    Scenes with a live `component` render the component tag. Passthrough
    scenes (kept from the previous layout with no scanned component) carry
    their original inner markup in `body` and re-emit it verbatim.
    """

    scene_id: str
    width: int
    height: int
    left: int
    top: int
    label: str
    component: ComponentRecord | None = None
    component_name: str | None = None
    body: str | None = None

    @property
    def name(self) -> str | None:
        if self.component is not None:
            return self.component.name
        return self.component_name

    @property
    def is_passthrough(self) -> bool:
        return self.component is None


@dataclass
class ReconcileResult:
    """Output of one reconciliation pass, in final render order."""

    scenes: list[SceneConfig]
    components: list[ComponentRecord]  # one per imported component name
    preserved_imports: list[str] = field(default_factory=list)
    carried: list[str] = field(default_factory=list)
    added: list[str] = field(default_factory=list)
    pruned: list[str] = field(default_factory=list)
    preserved: list[str] = field(default_factory=list)
    relocated: list[tuple[str, int, int]] = field(default_factory=list)  # (scene_id, old, new)
    gaps: list[int] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    def positions(self) -> dict[str, int]:
        return {scene.scene_id: scene.left for scene in self.scenes}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def scene_id_for(component_name: str) -> str:
    """Derive the scene identifier for a component: "App" → "app-scene"."""
    return f"{component_name.lower()}-scene"
