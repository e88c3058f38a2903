"""
Tests for storyboard_cli/main.py
"""

from __future__ import annotations

import json

import pytest

from engine.storyboard.config import Settings
from storyboard_cli.main import main, parse_args, run

COMPONENT = """import * as React from 'react'

export var {name} = () => {{
  return (
    <div>{name}</div>
  )
}}
"""


@pytest.fixture
def project(tmp_path, monkeypatch):
    src = tmp_path / "src"
    src.mkdir()
    for name in ("App", "Playground", "Gallery"):
        (src / f"{name.lower()}.jsx").write_text(COMPONENT.format(name=name), encoding="utf-8")
    monkeypatch.setenv("STORYBOARD_ROOT", str(tmp_path))
    monkeypatch.delenv("STORYBOARD_SRC_DIR", raising=False)
    monkeypatch.delenv("STORYBOARD_PATH", raising=False)
    monkeypatch.delenv("STORYBOARD_STATE_PATH", raising=False)
    monkeypatch.delenv("STORYBOARD_FORCE_INCLUDE", raising=False)
    return tmp_path


class TestParseArgs:
    def test_defaults(self):
        options = parse_args([])
        assert options.preserve_existing is True
        assert options.prune is True
        assert options.force_regen is True
        assert options.verbose is False
        assert options.show_help is False

    def test_all_flags(self):
        options = parse_args(
            [
                "--include-utils",
                "--include-index",
                "--verbose",
                "--no-preserve",
                "--no-prune",
                "--no-force-regen",
                "--help",
            ]
        )
        assert options.include_utils and options.include_index and options.verbose
        assert not options.preserve_existing
        assert not options.prune
        assert not options.force_regen
        assert options.show_help

    def test_unknown_arguments_ignored(self):
        assert parse_args(["--bogus", "stray", "--verbose"]) == parse_args(["--verbose"])

    def test_force_include_passed_through(self):
        options = parse_args([], force_include=("PageIndex",))
        assert options.scan_config().force_include == ("PageIndex",)

    def test_options_are_frozen(self):
        options = parse_args([])
        with pytest.raises(AttributeError):
            options.prune = False


class TestSettings:
    def test_paths_from_root(self, project):
        config = Settings()
        assert config.SRC_DIR == project.resolve() / "src"
        assert config.STORYBOARD_PATH == project.resolve() / "utopia" / "storyboard.js"
        assert config.STATE_PATH == project.resolve() / "utopia" / ".storyboard-state.json"

    def test_state_disabled(self, project, monkeypatch):
        monkeypatch.setenv("STORYBOARD_STATE_PATH", "")
        assert Settings().STATE_PATH is None

    def test_force_include_list(self, monkeypatch):
        monkeypatch.setenv("STORYBOARD_FORCE_INCLUDE", "PageIndex, SpecialUtils ,")
        assert Settings().FORCE_INCLUDE == ("PageIndex", "SpecialUtils")

    def test_log_level(self, monkeypatch):
        monkeypatch.setenv("STORYBOARD_LOG_LEVEL", "warning")
        assert Settings().LOG_LEVEL == 30
        monkeypatch.setenv("STORYBOARD_LOG_LEVEL", "chatty")
        assert Settings().LOG_LEVEL is None


class TestMain:
    def test_help_has_no_side_effects(self, project, capsys):
        main(["--help"])
        out = capsys.readouterr().out
        assert "--no-force-regen" in out
        assert "skipped components get no scene and no import" in out
        assert not (project / "utopia").exists()

    def test_writes_storyboard(self, project, capsys):
        main([])
        out = capsys.readouterr().out
        assert "Found 3 components:" in out
        assert "- App (app.jsx) no style prop" in out

        text = (project / "utopia" / "storyboard.js").read_text(encoding="utf-8")
        assert "import { Gallery } from '../src/gallery'" in text
        assert "left: 1808" in text
        state = json.loads((project / "utopia" / ".storyboard-state.json").read_text(encoding="utf-8"))
        assert len(state["scenes"]) == 3

    def test_verbose_prints_full_path(self, project, capsys):
        main(["--verbose"])
        out = capsys.readouterr().out
        assert f"Full path: {project.resolve() / 'src' / 'app.jsx'}" in out

    def test_rerun_is_stable(self, project):
        main([])
        first = (project / "utopia" / "storyboard.js").read_text(encoding="utf-8")
        main([])
        assert (project / "utopia" / "storyboard.js").read_text(encoding="utf-8") == first

    def test_failure_is_logged_not_raised(self, project, monkeypatch):
        monkeypatch.setenv("STORYBOARD_SRC_DIR", "missing")
        assert run(parse_args([]), Settings()) is False
        assert not (project / "utopia" / "storyboard.js").exists()
