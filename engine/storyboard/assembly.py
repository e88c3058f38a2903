"""
Storyboard — Assembly Layer

Sits between the pure functions (scanner rules, placement, renderer) and the
filesystem. Coordinates one storyboard update: load the previous layout,
reconcile, render, write.

Operations: load, update, save

This is where IO happens. Placement and rendering are pure.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from engine.storyboard import state as layout_state
from engine.storyboard.config import RunOptions
from engine.storyboard.layout_parser import LayoutParseError, parse_storyboard
from engine.storyboard.placement import reconcile
from engine.storyboard.renderer import DEFAULT_IMPORT_PREFIX, render
from engine.storyboard.scanner import scan_components
from engine.storyboard.types import ComponentRecord, PreviousLayout, ReconcileResult

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Storage protocol
# ---------------------------------------------------------------------------


class StoryboardStorage:
    """
    Abstract storage interface.
    Implement with files for the CLI, or in-memory for tests.
    """

    def get_storyboard(self) -> str | None:
        """Fetch the storyboard text. Returns None if it does not exist."""
        raise NotImplementedError

    def put_storyboard(self, text: str) -> None:
        raise NotImplementedError

    def get_state(self) -> str | None:
        """Fetch the state sidecar. Returns None if missing or disabled."""
        raise NotImplementedError

    def put_state(self, text: str) -> None:
        raise NotImplementedError

    @property
    def import_prefix(self) -> str:
        return DEFAULT_IMPORT_PREFIX


class FileStorage(StoryboardStorage):
    """Storyboard and sidecar on disk."""

    def __init__(self, storyboard_path: Path, state_path: Path | None = None, src_dir: Path | None = None):
        self.storyboard_path = Path(storyboard_path)
        self.state_path = Path(state_path) if state_path is not None else None
        self.src_dir = Path(src_dir) if src_dir is not None else None

    def get_storyboard(self) -> str | None:
        if not self.storyboard_path.exists():
            return None
        return self.storyboard_path.read_text(encoding="utf-8")

    def put_storyboard(self, text: str) -> None:
        self.storyboard_path.parent.mkdir(parents=True, exist_ok=True)
        self.storyboard_path.write_text(text, encoding="utf-8")

    def get_state(self) -> str | None:
        if self.state_path is None or not self.state_path.exists():
            return None
        return self.state_path.read_text(encoding="utf-8")

    def put_state(self, text: str) -> None:
        if self.state_path is None:
            return
        self.state_path.parent.mkdir(parents=True, exist_ok=True)
        self.state_path.write_text(text, encoding="utf-8")

    @property
    def import_prefix(self) -> str:
        if self.src_dir is None:
            return DEFAULT_IMPORT_PREFIX
        rel = os.path.relpath(self.src_dir.resolve(), self.storyboard_path.parent.resolve())
        return rel.replace(os.sep, "/")


class MemoryStorage(StoryboardStorage):
    """In-memory storage for testing."""

    def __init__(self, storyboard: str | None = None, state: str | None = None, use_state: bool = True) -> None:
        self.storyboard = storyboard
        self.state = state
        self.use_state = use_state
        self.writes = 0

    def get_storyboard(self) -> str | None:
        return self.storyboard

    def put_storyboard(self, text: str) -> None:
        self.storyboard = text
        self.writes += 1

    def get_state(self) -> str | None:
        return self.state if self.use_state else None

    def put_state(self, text: str) -> None:
        if self.use_state:
            self.state = text


# ---------------------------------------------------------------------------
# Assembly class
# ---------------------------------------------------------------------------


@dataclass
class UpdateResult:
    """What one update produced."""

    text: str
    result: ReconcileResult
    previous: PreviousLayout | None


class StoryboardAssembly:
    """
    Manages the lifecycle of the storyboard file.
    Coordinates layout parser + state sidecar + placement + renderer + storage.
    """

    def __init__(self, storage: StoryboardStorage, options: RunOptions | None = None):
        self._storage = storage
        self._options = options or RunOptions()

    # -- load --

    def load(self) -> PreviousLayout | None:
        """
        Previous layout, or None when there is nothing usable.

        The state sidecar wins when it matches the storyboard text. Otherwise
        the storyboard is parsed. Any failure discards the previous layout so
        the update falls back to a fresh storyboard.
        """
        try:
            text = self._storage.get_storyboard()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Error reading existing storyboard, will generate new one: %s", e)
            return None
        if text is None:
            return None

        from_state = self._load_state(text)
        if from_state is not None:
            logger.info("Loaded %d scenes from layout state", len(from_state.scenes))
            return from_state

        logger.info("Reading existing storyboard...")
        try:
            previous = parse_storyboard(text)
        except LayoutParseError as e:
            logger.warning("Error parsing existing storyboard, will generate new one: %s", e)
            return None

        for scene_id, scene in previous.scenes.items():
            suffix = f", component: {scene.component_name}" if scene.component_name else ""
            logger.info("Found existing scene: %s (%s)%s", scene_id, scene.label, suffix)
        return previous

    def _load_state(self, storyboard_text: str) -> PreviousLayout | None:
        try:
            raw = self._storage.get_state()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read layout state, parsing storyboard instead: %s", e)
            return None
        if raw is None:
            return None

        try:
            state = layout_state.load_state(raw)
        except (ValidationError, layout_state.VersionNotSupported) as e:
            logger.warning("Ignoring layout state: %s", e)
            return None

        if not layout_state.matches(state, storyboard_text):
            logger.info("Storyboard changed since layout state was written, parsing storyboard instead")
            return None
        return layout_state.to_previous_layout(state)

    # -- update --

    def update(self, components: list[ComponentRecord]) -> UpdateResult:
        """
        Reconcile scanned components against the previous layout and render.
        Does NOT write. Call save() to persist.
        """
        previous = self.load()
        preserved = previous if self._options.preserve_existing else None
        if previous is not None and preserved is None:
            logger.info("Creating fresh storyboard without preserving existing configurations")

        logger.info("Generating storyboard...")
        result = reconcile(
            components,
            preserved,
            prune=self._options.prune,
            force_regen=self._options.force_regen,
        )
        text = render(result, self._storage.import_prefix)
        return UpdateResult(text=text, result=result, previous=preserved)

    # -- save --

    def save(self, update: UpdateResult) -> None:
        """Write the storyboard once, fully formed, then the state sidecar."""
        logger.info("Writing storyboard to file...")
        self._storage.put_storyboard(update.text)
        state = layout_state.build_state(update.result, update.text)
        self._storage.put_state(layout_state.dump_state(state))


def update_storyboard(
    src_dir: Path,
    storage: StoryboardStorage,
    options: RunOptions | None = None,
) -> UpdateResult:
    """Scan, reconcile, render, and write. The whole tool in one call."""
    options = options or RunOptions()
    components = scan_components(Path(src_dir), options.scan_config())
    assembly = StoryboardAssembly(storage, options)
    update = assembly.update(components)
    assembly.save(update)
    return update
