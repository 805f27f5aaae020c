"""Tests for configuration loading."""

import os
import tempfile
from pathlib import Path

import pytest

from marginalia.config import load_config


def test_load_config_defaults():
    """Test loading config with defaults when no file exists."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config = load_config(config_path=Path(tmpdir) / "missing.toml")

    assert config.notes.window_behavior == ("start", "scroll")
    assert config.notes.window_location == "horizontal-split"
    assert config.notes.closest_tipping_point == 0.3
    assert config.notes.hide_other is True
    assert config.notes.default_heading_title == "Notes for page $p$"
    assert config.session.id_bytes == 4
    assert config.panel.height == 40


def test_load_config_from_file():
    """Test loading config from a file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "marginalia.toml"
        config_path.write_text("""
[notes]
window_behavior = ["scroll", "only-prev"]
window_location = "vertical-split"
doc_split_fraction = [0.6, 0.4]
auto_save_last_location = true
hide_other = false
closest_tipping_point = -1
default_heading_title = "Page $p$"
separate_notes_from_heading = true

[session]
id_bytes = 6
id_attempts = 3

[panel]
height = 20
""")

        config = load_config(config_path=config_path)

        assert config.notes.window_behavior == ("scroll", "only-prev")
        assert config.notes.window_location == "vertical-split"
        assert config.notes.doc_split_fraction == (0.6, 0.4)
        assert config.notes.auto_save_last_location is True
        assert config.notes.hide_other is False
        assert config.notes.closest_tipping_point == -1.0
        assert config.notes.default_heading_title == "Page $p$"
        assert config.notes.separate_notes_from_heading is True
        assert config.session.id_bytes == 6
        assert config.session.id_attempts == 3
        assert config.panel.height == 20


def test_load_config_rejects_unknown_values():
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "marginalia.toml"
        config_path.write_text('[notes]\nwindow_location = "sideways"\n')
        with pytest.raises(ValueError):
            load_config(config_path=config_path)

        config_path.write_text('[notes]\nwindow_behavior = ["always"]\n')
        with pytest.raises(ValueError):
            load_config(config_path=config_path)


def test_load_config_search_cwd():
    """Test config search in current working directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        orig_cwd = os.getcwd()
        try:
            os.chdir(tmpdir)
            Path(tmpdir, "marginalia.toml").write_text("[panel]\nheight = 12\n")

            config = load_config()
            assert config.panel.height == 12
        finally:
            os.chdir(orig_cwd)


def test_load_config_search_next_to_notes():
    """Test config search in the notes file's directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        notes_dir = Path(tmpdir) / "notes"
        notes_dir.mkdir()
        (notes_dir / "marginalia.toml").write_text("[session]\nid_bytes = 12\n")

        config = load_config(notes_path=notes_dir / "reading.md")
        assert config.session.id_bytes == 12
