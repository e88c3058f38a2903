"""
Storyboard — Renderer

ReconcileResult → storyboard source text. Pure: same result, same string.
The output doubles as the input of the layout parser on the next run, so
the markers the parser relies on (id, commentId, style block, data-label)
must stay exactly as emitted here.
"""

from __future__ import annotations

import posixpath

from engine.storyboard.layout_parser import FIXED_IMPORTS
from engine.storyboard.types import ComponentRecord, ReconcileResult, SceneConfig

DEFAULT_IMPORT_PREFIX = "../src"


def render(result: ReconcileResult, import_prefix: str = DEFAULT_IMPORT_PREFIX) -> str:
    """
    Render the full storyboard file.

    Args:
        result: Reconciled scenes and imports
        import_prefix: Path from the storyboard's directory to the scanned root

    Returns:
        Complete storyboard source, newline-terminated
    """
    parts: list[str] = []
    parts.append(render_imports(result, import_prefix))
    parts.append("\nexport var storyboard = (\n  <Storyboard>\n")
    for scene in result.scenes:
        parts.append(render_scene(scene))
    parts.append("  </Storyboard>\n)\n")
    return "".join(parts)


def render_imports(result: ReconcileResult, import_prefix: str = DEFAULT_IMPORT_PREFIX) -> str:
    lines = list(FIXED_IMPORTS)
    names: set[str] = set()
    for component in result.components:
        if component.name in names:
            continue
        names.add(component.name)
        lines.append(render_import(component, import_prefix))
    lines.extend(result.preserved_imports)
    return "\n".join(lines) + "\n"


def render_import(component: ComponentRecord, import_prefix: str = DEFAULT_IMPORT_PREFIX) -> str:
    module, _ext = posixpath.splitext(component.path)
    return f"import {{ {component.name} }} from '{import_prefix}/{module}'"


def render_scene(scene: SceneConfig) -> str:
    if scene.component is not None:
        body = component_body(scene.component)
    else:
        body = scene.body or "\n    "
    return (
        "    <Scene\n"
        f"      id='{scene.scene_id}'\n"
        f"      commentId='{scene.scene_id}'\n"
        "      style={{\n"
        f"        width: {scene.width},\n"
        f"        height: {scene.height},\n"
        "        position: 'absolute',\n"
        f"        left: {scene.left},\n"
        f"        top: {scene.top},\n"
        "      }}\n"
        f"      data-label='{scene.label}'\n"
        f"    >{body}</Scene>\n"
    )


def component_body(component: ComponentRecord) -> str:
    """Inner scene markup: the component tag, with an empty style when it takes one."""
    if component.has_style_prop:
        return f"\n      <{component.name} style={{{{}}}} />\n    "
    return f"\n      <{component.name} />\n    "
