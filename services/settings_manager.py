"""
Settings Manager.

Handles application settings with JSON file storage.
"""

import base64
import json
import logging
import os
import platform
from dataclasses import dataclass, field, asdict, fields
from typing import Optional
from pathlib import Path

from services.zoom_controller import DEFAULT_ZOOM

logger = logging.getLogger(__name__)


APP_NAME = "ArenaEditor"


def get_config_dir() -> Path:
    """Platform-specific configuration directory."""
    system = platform.system()

    if system == "Windows":
        base = os.environ.get("APPDATA", os.path.expanduser("~"))
        return Path(base) / APP_NAME
    elif system == "Darwin":  # macOS
        return Path.home() / "Library" / "Application Support" / APP_NAME
    else:  # Linux and others
        xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
        return Path(xdg_config) / APP_NAME


@dataclass
class EditorSettings:
    """Canvas and editing settings."""
    initial_zoom: float = DEFAULT_ZOOM
    show_grid: bool = True
    grid_size: int = 50
    canvas_width: int = 1200
    canvas_height: int = 800


@dataclass
class PathSettings:
    """Store location and last used directories."""
    # Empty means <config dir>/layouts.json
    store_path: str = ""
    last_export_dir: str = ""
    last_import_dir: str = ""

    def get_store_path(self) -> Path:
        if self.store_path:
            return Path(self.store_path).expanduser()
        return get_config_dir() / "layouts.json"


def _from_known_keys(cls, data):
    """
    Build a settings dataclass from a dict.

    Unknown keys are ignored; values whose type doesn't match the
    field's default keep the default.
    """
    settings = cls()
    if not isinstance(data, dict):
        return settings

    for f in fields(cls):
        if f.name not in data:
            continue
        value = data[f.name]
        expected = type(getattr(settings, f.name))
        # JSON has no separate float type for whole numbers
        if expected is float and type(value) is int:
            value = float(value)
        if type(value) is not expected:
            logger.warning(f"Ignoring setting {cls.__name__}.{f.name}={value!r}: expected {expected.__name__}")
            continue
        setattr(settings, f.name, value)
    return settings


@dataclass
class AppSettings:
    """Complete application settings."""
    editor: EditorSettings = field(default_factory=EditorSettings)
    paths: PathSettings = field(default_factory=PathSettings)
    window_geometry: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "editor": asdict(self.editor),
            "paths": asdict(self.paths),
            "window_geometry": self.window_geometry,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        """Create from dictionary."""
        settings = cls()

        if "editor" in data:
            settings.editor = _from_known_keys(EditorSettings, data["editor"])
        if "paths" in data:
            settings.paths = _from_known_keys(PathSettings, data["paths"])
        if isinstance(data.get("window_geometry"), dict):
            settings.window_geometry = data["window_geometry"]

        return settings


class SettingsManager:
    """
    Manages application settings with JSON file storage.

    Settings file location:
    - Windows: %APPDATA%/ArenaEditor/settings.json
    - Linux: ~/.config/ArenaEditor/settings.json
    - macOS: ~/Library/Application Support/ArenaEditor/settings.json
    """

    SETTINGS_FILE = "settings.json"

    def __init__(self, config_override: Optional[str] = None):
        """
        Initialize settings manager.

        Args:
            config_override: Optional path to override config file location.
                            Useful for testing.
        """
        self._settings = AppSettings()
        self._config_override = config_override
        self._settings_path = self._get_settings_path()
        self.load()

    @property
    def settings(self) -> AppSettings:
        """Get current settings."""
        return self._settings

    @property
    def settings_path(self) -> str:
        """Get the settings file path."""
        return str(self._settings_path)

    @property
    def editor(self) -> EditorSettings:
        return self._settings.editor

    @property
    def paths(self) -> PathSettings:
        """Get path settings."""
        return self._settings.paths

    @property
    def initial_zoom(self) -> float:
        return self._settings.editor.initial_zoom

    @initial_zoom.setter
    def initial_zoom(self, value: float):
        self._settings.editor.initial_zoom = value
        self.save()

    def get_store_path(self) -> Path:
        return self._settings.paths.get_store_path()

    def get_export_directory(self) -> str:
        """Directory to offer in the Download dialog."""
        last = self._settings.paths.last_export_dir
        if last and os.path.isdir(last):
            return last
        return str(Path.home())

    def set_export_directory(self, path: str):
        """Remember the directory of the last export."""
        if not os.path.isdir(path):
            path = os.path.dirname(path)
        self._settings.paths.last_export_dir = path
        self.save()

    def get_import_directory(self) -> str:
        last = self._settings.paths.last_import_dir
        if last and os.path.isdir(last):
            return last
        return str(Path.home())

    def set_import_directory(self, path: str):
        if os.path.isfile(path):
            path = os.path.dirname(path)
        self._settings.paths.last_import_dir = path
        self.save()

    def _get_settings_path(self) -> Path:
        """Get the settings file path."""
        if self._config_override:
            return Path(self._config_override)
        return get_config_dir() / self.SETTINGS_FILE

    def _ensure_settings_dir(self):
        """Create settings directory if it doesn't exist."""
        self._settings_path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> bool:
        """Load settings from file."""
        if not self._settings_path.exists():
            return False

        try:
            with open(self._settings_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._settings = AppSettings.from_dict(data if isinstance(data, dict) else {})
            return True
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Error loading settings: {e}")
            return False

    def save(self) -> bool:
        """Save settings to file."""
        try:
            self._ensure_settings_dir()
            with open(self._settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings.to_dict(), f, indent=2)
            return True
        except OSError as e:
            logger.error(f"Error saving settings: {e}")
            return False

    def reset(self):
        """Reset settings to defaults."""
        self._settings = AppSettings()
        self.save()

    def save_window_geometry(self, geometry: bytes, state: bytes):
        """Save window geometry and state."""
        self._settings.window_geometry = {
            "geometry": base64.b64encode(geometry).decode("ascii"),
            "state": base64.b64encode(state).decode("ascii"),
        }
        self.save()

    def get_window_geometry(self) -> tuple:
        """Get saved window geometry and state."""
        geo = self._settings.window_geometry
        if not geo:
            return None, None

        try:
            geometry = base64.b64decode(geo.get("geometry", ""))
            state = base64.b64decode(geo.get("state", ""))
            return geometry, state
        except (ValueError, TypeError):
            return None, None


# Global settings instance
_settings_manager: Optional[SettingsManager] = None


def get_settings(config_override: Optional[str] = None) -> SettingsManager:
    """
    Get the global settings manager instance.

    Args:
        config_override: Optional path to override config location.
                        Only used on first call to initialize.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager(config_override)
    return _settings_manager


def reset_settings_manager():
    """Reset the global settings manager (useful for testing)."""
    global _settings_manager
    _settings_manager = None
