"""
Storyboard Assembly -- loading the previous layout.

The state sidecar is authoritative while it matches the storyboard text.
Edited storyboards, broken sidecars, and unparseable storyboards each fall
back to the next safe option instead of failing the run.
"""

import json

from engine.storyboard.assembly import MemoryStorage, StoryboardAssembly, update_storyboard
from engine.storyboard.config import RunOptions
from engine.storyboard.layout_parser import FIXED_IMPORTS
from engine.storyboard.state import STATE_VERSION, hash_storyboard

HAND_MADE_SCENE = """    <Scene
      id='notes-scene'
      commentId='notes-scene'
      style={{
        width: 400,
        height: 300,
        position: 'absolute',
        left: 1808,
        top: 128,
      }}
      data-label='Notes'
    >
      <div>Remember the footer</div>
    </Scene>
"""

WRAPPED_SCENE = """    <Scene
      id='wrapped-scene'
      commentId='wrapped-scene'
      style={{
        width: 400,
        height: 300,
        position: 'absolute',
        left: 1808,
        top: 128,
      }}
      data-label='Wrapped'
    >
      <SafeComponentWrapper>
        <div>hand made</div>
      </SafeComponentWrapper>
    </Scene>
"""


def with_header_line(text: str, line: str) -> str:
    return text.replace(FIXED_IMPORTS[1] + "\n", FIXED_IMPORTS[1] + "\n" + line + "\n", 1)


def seeded_storage(src_tree, **kwargs) -> MemoryStorage:
    storage = MemoryStorage(**kwargs)
    update_storyboard(src_tree, storage)
    return storage


class TestStateSidecar:
    def test_state_used_when_hash_matches(self, src_tree):
        storage = seeded_storage(src_tree)
        previous = StoryboardAssembly(storage).load()
        assert previous.source == "state"
        assert set(previous.scenes) == {"playground-scene", "app-scene", "app2-scene"}

    def test_state_records_hash(self, src_tree):
        storage = seeded_storage(src_tree)
        state = json.loads(storage.state)
        assert state["version"] == STATE_VERSION
        assert state["storyboard_hash"] == hash_storyboard(storage.storyboard)

    def test_edited_storyboard_wins_over_state(self, src_tree):
        storage = seeded_storage(src_tree)
        storage.storyboard = storage.storyboard.replace("height: 1133", "height: 900")
        previous = StoryboardAssembly(storage).load()
        assert previous.source == "storyboard"
        assert previous.scenes["app-scene"].height == 900

    def test_invalid_state_falls_back_to_storyboard(self, src_tree):
        storage = seeded_storage(src_tree)
        storage.state = "{not json"
        previous = StoryboardAssembly(storage).load()
        assert previous.source == "storyboard"
        assert len(previous.scenes) == 3

    def test_state_with_wrong_shape_falls_back(self, src_tree):
        storage = seeded_storage(src_tree)
        storage.state = json.dumps({"storyboard_hash": hash_storyboard(storage.storyboard), "scenes": [{"x": 1}]})
        assert StoryboardAssembly(storage).load().source == "storyboard"

    def test_future_state_version_falls_back(self, src_tree):
        storage = seeded_storage(src_tree)
        state = json.loads(storage.state)
        state["version"] = STATE_VERSION + 1
        storage.state = json.dumps(state)
        assert StoryboardAssembly(storage).load().source == "storyboard"

    def test_state_and_text_agree(self, src_tree):
        storage = seeded_storage(src_tree)
        from_state = StoryboardAssembly(storage).load()
        storage.use_state = False
        from_text = StoryboardAssembly(storage).load()
        assert from_state.scenes == from_text.scenes
        assert from_state.imports == from_text.imports


class TestFallbacks:
    def test_no_storyboard(self):
        assert StoryboardAssembly(MemoryStorage()).load() is None

    def test_duplicate_scene_ids_discard_previous_layout(self, src_tree):
        storage = seeded_storage(src_tree, use_state=False)
        block_start = storage.storyboard.index("    <Scene\n      id='app-scene'")
        block_end = storage.storyboard.index("</Scene>\n", block_start) + len("</Scene>\n")
        block = storage.storyboard[block_start:block_end].replace("left: 992", "left: 5000")
        storage.storyboard = storage.storyboard.replace("  </Storyboard>", block + "  </Storyboard>")

        assert StoryboardAssembly(storage).load() is None
        update = update_storyboard(src_tree, storage)
        assert update.previous is None
        assert update.text.count("id='app-scene'") == 1

    def test_unreadable_storyboard_generates_fresh(self, src_tree):
        class BrokenStorage(MemoryStorage):
            def get_storyboard(self):
                raise PermissionError("denied")

        storage = BrokenStorage()
        update = update_storyboard(src_tree, storage)
        assert update.previous is None
        assert storage.storyboard == update.text


class TestHandMadeScenes:
    def test_unidentifiable_scene_survives_prune(self, src_tree):
        storage = seeded_storage(src_tree, use_state=False)
        storage.storyboard = storage.storyboard.replace("  </Storyboard>", HAND_MADE_SCENE + "  </Storyboard>")

        update = update_storyboard(src_tree, storage, RunOptions(prune=True))
        assert "notes-scene" in update.result.preserved
        assert "<div>Remember the footer</div>" in update.text
        assert update.result.positions()["notes-scene"] == 2624

    def test_hand_made_scene_stable_across_runs(self, src_tree):
        storage = seeded_storage(src_tree)
        storage.storyboard = storage.storyboard.replace("  </Storyboard>", HAND_MADE_SCENE + "  </Storyboard>")
        first = update_storyboard(src_tree, storage)
        second = update_storyboard(src_tree, storage)
        assert second.previous.source == "state"
        assert second.text == first.text

    def test_wrapper_import_does_not_redeclare_header_names(self, src_tree):
        storage = seeded_storage(src_tree, use_state=False)
        board = with_header_line(storage.storyboard, "import { Scene, Storyboard, SafeComponentWrapper } from 'utopia-api'")
        storage.storyboard = board.replace("  </Storyboard>", WRAPPED_SCENE + "  </Storyboard>")

        first = update_storyboard(src_tree, storage)
        header = first.text.split("export var storyboard")[0]
        assert header.count("Scene, Storyboard") == 1
        assert header.count("import { SafeComponentWrapper } from 'utopia-api'") == 1
        assert "<div>hand made</div>" in first.text

        second = update_storyboard(src_tree, storage)
        assert second.text == first.text

    def test_mixed_import_line_keeps_kept_scene_name(self, src_tree):
        storage = seeded_storage(src_tree, use_state=False)
        board = with_header_line(storage.storyboard, "import { App, Legacy } from '../src/legacy'")
        storage.storyboard = board.replace("  </Storyboard>", HAND_MADE_SCENE.replace("<div>Remember the footer</div>", "<Legacy />") + "  </Storyboard>")

        update = update_storyboard(src_tree, storage, RunOptions(prune=False))
        assert "notes-scene" in update.result.preserved
        assert "import { Legacy } from '../src/legacy'" in update.text
        assert update.text.count("import { App }") == 1
