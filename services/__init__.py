"""Services package."""

from .zoom_controller import (
    ZoomController,
    clamp_zoom,
    MIN_ZOOM,
    MAX_ZOOM,
    ZOOM_STEP,
    DEFAULT_ZOOM,
)
from .interaction import (
    InteractionStateMachine,
    InteractionMode,
    PointerSource,
    PointerSubscription,
)
from .layout_store import (
    KeyValueStore,
    MemoryStore,
    JsonFileStore,
    LAYOUTS_KEY,
    SELECTED_LAYOUT_KEY,
)
from .persistence import (
    PersistenceBridge,
    NoticeLevel,
    parse_layouts,
    serialize_layouts,
    serialize_layout,
    export_filename,
    fold_section_states,
)
from .settings_manager import (
    SettingsManager,
    AppSettings,
    EditorSettings,
    PathSettings,
    get_settings,
    reset_settings_manager,
)

__all__ = [
    "ZoomController",
    "clamp_zoom",
    "MIN_ZOOM",
    "MAX_ZOOM",
    "ZOOM_STEP",
    "DEFAULT_ZOOM",
    "InteractionStateMachine",
    "InteractionMode",
    "PointerSource",
    "PointerSubscription",
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "LAYOUTS_KEY",
    "SELECTED_LAYOUT_KEY",
    "PersistenceBridge",
    "NoticeLevel",
    "parse_layouts",
    "serialize_layouts",
    "serialize_layout",
    "export_filename",
    "fold_section_states",
    "SettingsManager",
    "AppSettings",
    "EditorSettings",
    "PathSettings",
    "get_settings",
    "reset_settings_manager",
]
