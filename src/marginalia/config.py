"""Configuration loader for marginalia.toml."""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

WINDOW_BEHAVIORS = ("start", "scroll", "only-prev")
WINDOW_LOCATIONS = ("horizontal-split", "vertical-split", "other-frame")


@dataclass
class NotesConfig:
    """Global defaults that per-document properties override."""
    window_behavior: tuple[str, ...] = ("start", "scroll")
    window_location: str = "horizontal-split"
    doc_split_fraction: tuple[float, float] = (0.5, 0.5)
    auto_save_last_location: bool = False
    hide_other: bool = True
    closest_tipping_point: float = 0.3
    default_heading_title: str = "Notes for page $p$"
    insert_note_no_questions: bool = False
    separate_notes_from_heading: bool = False
    insert_selected_text_inside_note: bool = True
    doc_property_in_notes: bool = False
    kill_frame_at_session_end: bool = True


@dataclass
class SessionConfig:
    """Session id generation."""
    id_bytes: int = 4
    id_attempts: int = 8


@dataclass
class PanelConfig:
    """Headless notes panel."""
    height: int = 40


@dataclass
class MarginaliaConfig:
    """Complete marginalia configuration."""
    notes: NotesConfig = field(default_factory=NotesConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    panel: PanelConfig = field(default_factory=PanelConfig)


def _pick(data: dict[str, Any], key: str, default: Any, allowed: tuple[str, ...] | None = None) -> Any:
    value = data.get(key, default)
    if allowed is not None and value not in allowed:
        raise ValueError(f"Invalid value for {key}: {value!r} (expected one of {', '.join(allowed)})")
    return value


def load_config(config_path: Path | None = None, notes_path: Path | None = None) -> MarginaliaConfig:
    """
    Load configuration from marginalia.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/marginalia.toml
    3. marginalia.toml next to the notes file

    Args:
        config_path: Explicit path to config file
        notes_path: Notes file whose directory is searched last

    Returns:
        MarginaliaConfig with resolved settings
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / "marginalia.toml")
    if notes_path:
        search_paths.append(notes_path.parent / "marginalia.toml")

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    defaults = NotesConfig()
    notes_data = toml_data.get("notes", {})

    behavior = tuple(notes_data.get("window_behavior", defaults.window_behavior))
    for item in behavior:
        if item not in WINDOW_BEHAVIORS:
            raise ValueError(f"Invalid window_behavior entry: {item!r}")

    fraction = notes_data.get("doc_split_fraction", defaults.doc_split_fraction)
    notes_config = NotesConfig(
        window_behavior=behavior,
        window_location=_pick(notes_data, "window_location", defaults.window_location, WINDOW_LOCATIONS),
        doc_split_fraction=(float(fraction[0]), float(fraction[1])),
        auto_save_last_location=bool(notes_data.get("auto_save_last_location", defaults.auto_save_last_location)),
        hide_other=bool(notes_data.get("hide_other", defaults.hide_other)),
        closest_tipping_point=float(notes_data.get("closest_tipping_point", defaults.closest_tipping_point)),
        default_heading_title=notes_data.get("default_heading_title", defaults.default_heading_title),
        insert_note_no_questions=bool(notes_data.get("insert_note_no_questions", defaults.insert_note_no_questions)),
        separate_notes_from_heading=bool(
            notes_data.get("separate_notes_from_heading", defaults.separate_notes_from_heading)
        ),
        insert_selected_text_inside_note=bool(
            notes_data.get("insert_selected_text_inside_note", defaults.insert_selected_text_inside_note)
        ),
        doc_property_in_notes=bool(notes_data.get("doc_property_in_notes", defaults.doc_property_in_notes)),
        kill_frame_at_session_end=bool(
            notes_data.get("kill_frame_at_session_end", defaults.kill_frame_at_session_end)
        ),
    )

    session_data = toml_data.get("session", {})
    session_config = SessionConfig(
        id_bytes=session_data.get("id_bytes", 4),
        id_attempts=session_data.get("id_attempts", 8),
    )

    panel_data = toml_data.get("panel", {})
    panel_config = PanelConfig(height=panel_data.get("height", 40))

    return MarginaliaConfig(
        notes=notes_config,
        session=session_config,
        panel=panel_config,
    )
