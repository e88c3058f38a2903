"""
Storyboard — Placement Reconciler

(components, previous layout) → ordered scenes. Pure and deterministic:
no IO, no randomness, same input → same output.

Order of decisions:
  1. carry-over     — scenes whose id matches a scanned component keep their geometry
  2. pruning        — scenes of removed components are dropped (unidentifiable ones never)
  3. anchors        — Playground and App get reserved rectangles when new
  4. gap discovery  — free slots between known positions
  5. placement      — new components take a gap slot, else the right-hand frontier
  6. compaction     — anchors pinned, everything else re-laid left to right
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from engine.storyboard.layout_parser import FIXED_BINDINGS, IDENTIFIER_PATTERN, imported_names, parse_import_line
from engine.storyboard.types import (
    ANCHORS,
    DEFAULT_SCENE_HEIGHT,
    DEFAULT_SCENE_WIDTH,
    DEFAULT_TOP,
    FIRST_ANCHOR,
    GAP_BUFFER,
    SCENE_SPACING,
    SECOND_ANCHOR,
    ComponentRecord,
    PreviousLayout,
    ReconcileResult,
    SceneConfig,
)

logger = logging.getLogger(__name__)


def reconcile(
    components: Iterable[ComponentRecord],
    previous: PreviousLayout | None = None,
    *,
    prune: bool = True,
    force_regen: bool = True,
) -> ReconcileResult:
    """
    Compute the new storyboard layout.

    Args:
        components: Scanner output, in scan order
        previous: Layout from the last run, or None for a fresh storyboard
        prune: Drop scenes whose component no longer exists
        force_regen: Create scenes for components missing from an existing layout

    Returns:
        ReconcileResult with scenes in final left-to-right order
    """
    components = list(components)
    previous_scenes = previous.scenes if previous is not None else {}
    current_names = {c.name for c in components}

    unique: list[ComponentRecord] = []
    seen: set[str] = set()
    for component in components:
        if component.scene_id in seen:
            logger.debug("Duplicate component %s (%s), keeping first", component.name, component.path)
            continue
        seen.add(component.scene_id)
        unique.append(component)

    configs: dict[str, SceneConfig] = {}
    carried: list[str] = []
    pruned: list[str] = []
    preserved: list[str] = []
    added: list[str] = []
    missing: list[str] = []

    # 1. Carry-over
    for component in unique:
        prev = previous_scenes.get(component.scene_id)
        if prev is None:
            continue
        configs[component.scene_id] = SceneConfig(
            scene_id=component.scene_id,
            width=prev.width,
            height=prev.height,
            left=prev.left,
            top=prev.top,
            label=prev.label,
            component=component,
        )
        carried.append(component.scene_id)

    # 2. Pruning; unclaimed survivors pass through untouched
    for scene_id, prev in previous_scenes.items():
        if scene_id in configs:
            continue
        if not prev.identifiable:
            logger.info("Preserving scene %s (could not identify component)", scene_id)
        elif prev.component_name not in current_names and prune:
            logger.info("Pruning scene %s for removed component %s", scene_id, prev.component_name)
            pruned.append(scene_id)
            continue
        else:
            logger.info("Keeping scene %s for component %s", scene_id, prev.component_name)
        configs[scene_id] = SceneConfig(
            scene_id=scene_id,
            width=prev.width,
            height=prev.height,
            left=prev.left,
            top=prev.top,
            label=prev.label,
            component_name=prev.component_name,
            body=prev.body,
        )
        preserved.append(scene_id)

    to_add = [c for c in unique if c.scene_id not in configs]
    if previous is not None and previous.scenes:
        for component in to_add:
            missing.append(component.name)
            if force_regen:
                logger.info(
                    "Component %s exists but scene %s is missing - will regenerate",
                    component.name,
                    component.scene_id,
                )
            else:
                logger.info("Not regenerating missing scene %s", component.scene_id)
        if not force_regen:
            to_add = []

    # 3. Anchors
    for component in to_add:
        anchor = ANCHORS.get(component.name)
        if anchor is None:
            continue
        configs[component.scene_id] = SceneConfig(
            scene_id=component.scene_id,
            width=anchor.width,
            height=anchor.height,
            left=anchor.left,
            top=DEFAULT_TOP,
            label=anchor.label,
            component=component,
        )
        added.append(component.scene_id)

    # 4. Gaps
    used = sorted({config.left for config in configs.values()})
    gaps = find_gaps(used)
    if len(used) > 1:
        logger.info("Found %d gaps between existing scenes", len(gaps))
    available = list(gaps)

    # 5. New components
    frontier = (used[-1] if used else 0) + SCENE_SPACING
    for component in to_add:
        if component.scene_id in configs:
            continue
        if available:
            left = available.pop(0)
            where = "in a gap"
        else:
            left = frontier
            frontier += SCENE_SPACING
            where = "at the end"
        configs[component.scene_id] = SceneConfig(
            scene_id=component.scene_id,
            width=DEFAULT_SCENE_WIDTH,
            height=DEFAULT_SCENE_HEIGHT,
            left=left,
            top=DEFAULT_TOP,
            label=component.name,
            component=component,
        )
        added.append(component.scene_id)
        logger.info("Added new scene for %s at position %d (%s)", component.name, left, where)

    # 6. Compaction
    scenes = compact(list(configs.values()))

    relocated: list[tuple[str, int, int]] = []
    for scene in scenes:
        prev = previous_scenes.get(scene.scene_id)
        if prev is None:
            continue
        if scene.left != prev.left:
            relocated.append((scene.scene_id, prev.left, scene.left))
            logger.info("Relocated scene %s from position %d to %d", scene.scene_id, prev.left, scene.left)
        else:
            logger.debug("Using existing configuration for %s", scene.scene_id)

    rendered_ids = {scene.scene_id for scene in scenes}
    imported = _imported_components(components, rendered_ids)

    return ReconcileResult(
        scenes=scenes,
        components=imported,
        preserved_imports=_preserved_imports(previous, scenes, {c.name for c in imported}),
        carried=carried,
        added=added,
        pruned=pruned,
        preserved=preserved,
        relocated=relocated,
        gaps=gaps,
        missing=missing,
    )


def find_gaps(
    positions: Iterable[int],
    width: int = DEFAULT_SCENE_WIDTH,
    spacing: int = SCENE_SPACING,
) -> list[int]:
    """
    Free slots between known left positions.

    For each neighbouring pair at least one spacing apart, every
    `start + spacing * k` that still leaves `width + GAP_BUFFER` before the
    next scene. Returned in discovery order, gap by gap.
    """
    ordered = sorted(set(positions))
    slots: list[int] = []
    for start, end in zip(ordered, ordered[1:]):
        gap = end - start
        if gap < spacing:
            continue
        for k in range(1, gap // spacing + 1):
            slot = start + spacing * k
            if slot + width + GAP_BUFFER <= end:
                slots.append(slot)
    return slots


def compact(scenes: list[SceneConfig], spacing: int = SCENE_SPACING) -> list[SceneConfig]:
    """
    Close every gap. Mutates and returns the scenes sorted by final left.

    Playground is pinned at its reserved offset. App is pinned at its own
    offset when Playground is present, else at the first one. All other
    scenes keep their relative order (by current left, stable) and are laid
    out one spacing apart, starting one spacing after the last anchor.

    Anchors are recognised only by the live component a scene renders.
    Scene labels such as "My App" are not consulted, and a passthrough scene
    is never pinned.
    """
    first = _find_anchor(scenes, FIRST_ANCHOR)
    second = _find_anchor(scenes, SECOND_ANCHOR)

    next_left = ANCHORS[FIRST_ANCHOR].left
    if first is not None:
        first.left = ANCHORS[FIRST_ANCHOR].left
        next_left = first.left + spacing
    if second is not None:
        second.left = ANCHORS[SECOND_ANCHOR].left if first is not None else ANCHORS[FIRST_ANCHOR].left
        next_left = second.left + spacing

    others = sorted((s for s in scenes if s is not first and s is not second), key=lambda s: s.left)
    shifts = 0
    for scene in others:
        if scene.left != next_left:
            logger.debug("Repositioning scene %s from %d to %d", scene.scene_id, scene.left, next_left)
            shifts += 1
        scene.left = next_left
        next_left += spacing

    if shifts:
        logger.info("Repositioned %d scenes to close gaps", shifts)
    else:
        logger.info("No scene repositioning needed - layout already optimal")

    return sorted(scenes, key=lambda s: s.left)


def _find_anchor(scenes: list[SceneConfig], name: str) -> SceneConfig | None:
    for scene in scenes:
        if scene.component is not None and scene.component.name == name:
            return scene
    return None


def _imported_components(components: list[ComponentRecord], rendered_ids: set[str]) -> list[ComponentRecord]:
    """One record per distinct name with a rendered scene, in scan order."""
    result: list[ComponentRecord] = []
    names: set[str] = set()
    for component in components:
        if component.name in names or component.scene_id not in rendered_ids:
            continue
        names.add(component.name)
        result.append(component)
    return result


def _preserved_imports(
    previous: PreviousLayout | None,
    scenes: list[SceneConfig],
    component_names: set[str],
) -> list[str]:
    """
    Previous import bindings still referenced by passthrough scene markup.

    Names bound elsewhere in the header are dropped from the line that repeats
    them. A line left binding nothing is dropped whole; a trimmed line is
    re-rendered.
    """
    if previous is None:
        return []
    referenced: set[str] = set()
    for scene in scenes:
        if scene.is_passthrough and scene.body:
            referenced.update(IDENTIFIER_PATTERN.findall(scene.body))

    bound = set(FIXED_BINDINGS) | component_names
    lines: list[str] = []
    for line in previous.imports:
        parsed = parse_import_line(line)
        if parsed is None:
            names = imported_names(line)
            if names & referenced and not names & bound:
                bound.update(names)
                lines.append(line)
            continue
        keep = {name for name in parsed.bindings() if name in referenced and name not in bound}
        kept = parsed.restricted_to(keep)
        if kept is None:
            continue
        bound.update(keep)
        if kept == parsed:
            lines.append(line)
        else:
            logger.debug("Trimmed import %r to %r", line, kept.render())
            lines.append(kept.render())
    return lines
