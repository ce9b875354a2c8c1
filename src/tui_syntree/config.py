"""Editor configuration (tomlkit) and display settings (YAML)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator

import tomlkit
import yaml
from tomlkit.exceptions import TOMLKitError

from tui_syntree.models import EditorConfig

logger = logging.getLogger(__name__)

CONFIG_DIR = ".tui-syntree"
CONFIG_FILE = "config.toml"
SETTINGS_FILE = "settings.yaml"
BUNDLED_SETTINGS = Path(__file__).parent / "default_settings.yaml"


def config_path(project_dir: Path) -> Path:
    return project_dir / CONFIG_DIR / CONFIG_FILE


def _number(section: Any, key: str, default: float) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        logger.warning("Ignoring non-numeric %s = %r in config", key, value)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s = %r in config", key, value)
        return default
    return value


def load_config(project_dir: Path) -> EditorConfig:
    """Read .tui-syntree/config.toml, falling back to defaults per key."""
    path = config_path(project_dir)
    config = EditorConfig()
    if not path.is_file():
        return config

    try:
        doc = tomlkit.parse(path.read_text(encoding="utf-8"))
    except (OSError, TOMLKitError) as e:
        logger.warning("Could not read %s, using defaults: %s", path, e)
        return config

    layout = doc.get("layout", {})
    config.level_height = float(_number(layout, "level_height", config.level_height))
    config.char_width = float(_number(layout, "char_width", config.char_width))

    history = doc.get("history", {})
    config.coalesce_window_ms = int(
        _number(history, "coalesce_window_ms", config.coalesce_window_ms)
    )

    editor = doc.get("editor", {})
    config.sentence = str(editor.get("sentence", config.sentence))
    return config


def save_config(project_dir: Path, config: EditorConfig) -> None:
    """Write every setting of config to .tui-syntree/config.toml."""
    path = config_path(project_dir)
    path.parent.mkdir(parents=True, exist_ok=True)

    doc = tomlkit.document()
    doc.add(tomlkit.comment("TUI Syntree editor settings"))

    layout = tomlkit.table()
    layout.add("level_height", config.level_height)
    layout.add("char_width", config.char_width)
    layout["char_width"].comment("pixels per terminal cell")
    doc.add("layout", layout)

    history = tomlkit.table()
    history.add("coalesce_window_ms", config.coalesce_window_ms)
    doc.add("history", history)

    editor = tomlkit.table()
    editor.add("sentence", config.sentence)
    doc.add("editor", editor)

    path.write_text(tomlkit.dumps(doc), encoding="utf-8")


# ── Display settings ──

def _settings_files(project_dir: Path | None) -> Iterator[Path]:
    yield BUNDLED_SETTINGS
    if project_dir is not None:
        yield project_dir / CONFIG_DIR / SETTINGS_FILE


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return {}
    if data is not None and not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a mapping", path)
        return {}
    return data or {}


def _overlay(base: dict[str, Any], layer: dict[str, Any]) -> dict[str, Any]:
    """Return base with layer on top; nested mappings are combined key by key."""
    merged = dict(base)
    for key, value in layer.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = _overlay(current, value)
        merged[key] = value
    return merged


def load_settings(project_dir: Path | None = None) -> dict[str, Any]:
    """Return the bundled display settings with the project's settings.yaml
    (if any) laid over them.
    """
    settings: dict[str, Any] = {}
    for path in _settings_files(project_dir):
        if path.is_file():
            settings = _overlay(settings, _read_yaml(path))
    return settings
