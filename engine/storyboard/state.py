"""
Storyboard — Layout State Sidecar

A small JSON record of the last generated layout, written next to the
storyboard. It is the source of truth for the next run as long as the
storyboard text still hashes to what was written; once the design tool (or a
person) edits the storyboard, the text wins and gets parsed instead.
"""

from __future__ import annotations

import hashlib
import json

from pydantic import BaseModel, Field

from engine.storyboard.layout_parser import parse_imports
from engine.storyboard.renderer import component_body
from engine.storyboard.types import ParsedScene, PreviousLayout, ReconcileResult

STATE_VERSION = 1


class VersionNotSupported(Exception):
    """State file is from a future format."""
    pass


class SceneRecord(BaseModel):
    """One scene as stored in the state file."""

    model_config = {"extra": "forbid"}

    scene_id: str = Field(min_length=1)
    width: int
    height: int
    left: int
    top: int
    label: str
    component_name: str | None = None
    body: str = ""


class StoryboardState(BaseModel):
    """What the state file contains."""

    version: int = STATE_VERSION
    storyboard_hash: str
    scenes: list[SceneRecord] = Field(default_factory=list)
    imports: list[str] = Field(default_factory=list)


def hash_storyboard(text: str) -> str:
    """First 16 hex chars of the SHA-256 of the storyboard text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]


def build_state(result: ReconcileResult, storyboard_text: str) -> StoryboardState:
    """State record for a freshly rendered storyboard."""
    scenes = []
    for scene in result.scenes:
        if scene.component is not None:
            body = component_body(scene.component)
        else:
            body = scene.body or ""
        scenes.append(
            SceneRecord(
                scene_id=scene.scene_id,
                width=scene.width,
                height=scene.height,
                left=scene.left,
                top=scene.top,
                label=scene.label,
                component_name=scene.name,
                body=body,
            )
        )
    return StoryboardState(
        storyboard_hash=hash_storyboard(storyboard_text),
        scenes=scenes,
        imports=parse_imports(storyboard_text),
    )


def dump_state(state: StoryboardState) -> str:
    return json.dumps(state.model_dump(), indent=2, sort_keys=True) + "\n"


def load_state(raw: str) -> StoryboardState:
    """
    Parse state file content.

    Raises pydantic.ValidationError on malformed content and
    VersionNotSupported for a newer format.
    """
    state = StoryboardState.model_validate_json(raw)
    if state.version > STATE_VERSION:
        raise VersionNotSupported(f"State version {state.version} not supported")
    return state


def matches(state: StoryboardState, storyboard_text: str) -> bool:
    """True when the state was written together with this exact storyboard text."""
    return state.storyboard_hash == hash_storyboard(storyboard_text)


def to_previous_layout(state: StoryboardState) -> PreviousLayout:
    scenes = {
        record.scene_id: ParsedScene.from_dict(record.model_dump())
        for record in state.scenes
    }
    return PreviousLayout(scenes=scenes, imports=list(state.imports), source="state")
