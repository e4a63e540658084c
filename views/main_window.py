"""
Main application window.

Assembles the toolbar, the arena canvas and the status bar, and wires
the services together:

    ZoomController ─┐
                    ├─> InteractionStateMachine ─> ArenaCanvas
    PersistenceBridge ─┘        (layout state)
"""

import logging
from pathlib import Path
from typing import Optional
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QToolBar, QPushButton, QLabel,
    QMessageBox, QApplication, QFileDialog, QComboBox, QSizePolicy
)

from services import (
    ZoomController, InteractionStateMachine, PersistenceBridge,
    NoticeLevel, JsonFileStore, KeyValueStore, SettingsManager,
    export_filename, get_settings
)
from views.arena_canvas import ArenaCanvas
from views.input_filters import RotateKeyFilter

logger = logging.getLogger(__name__)


class EditorToolbar(QToolBar):
    """Toolbar with layout selector, zoom controls, save and download."""

    def __init__(self, parent=None):
        super().__init__("Editor", parent)
        self.setMovable(False)
        self._setup_ui()

    def _setup_ui(self):
        self.setStyleSheet("""
            QToolBar {
                background: #F9FAFB;
                border-bottom: 1px solid #E5E7EB;
                padding: 8px 16px;
                spacing: 8px;
            }
            QPushButton {
                padding: 6px 12px;
                border-radius: 6px;
                font-weight: 500;
                font-size: 13px;
                background: white;
                color: #374151;
                border: 1px solid #D1D5DB;
            }
            QPushButton:hover {
                background: #F3F4F6;
            }
            QPushButton:disabled {
                color: #9CA3AF;
            }
        """)

        title = QLabel("Arena Editor")
        title.setStyleSheet("font-size: 16px; font-weight: 600; color: #111827; padding-right: 12px;")
        self.addWidget(title)

        # Layout selector
        self.layout_combo = QComboBox()
        self.layout_combo.setMinimumWidth(220)
        self.layout_combo.setPlaceholderText("Select Layout")
        self.addWidget(self.layout_combo)

        self.addSeparator()

        # Zoom controls
        self.addWidget(QLabel("Zoom"))
        self.zoom_out_btn = QPushButton("−")
        self.zoom_out_btn.setToolTip("Zoom out")
        self.addWidget(self.zoom_out_btn)

        self.zoom_reset_btn = QPushButton("1:1")
        self.zoom_reset_btn.setToolTip("Reset zoom")
        self.addWidget(self.zoom_reset_btn)

        self.zoom_in_btn = QPushButton("+")
        self.zoom_in_btn.setToolTip("Zoom in")
        self.addWidget(self.zoom_in_btn)

        self.zoom_label = QLabel("100%")
        self.zoom_label.setMinimumWidth(48)
        self.zoom_label.setStyleSheet("color: #6B7280;")
        self.addWidget(self.zoom_label)

        self.addSeparator()

        self.save_btn = QPushButton("💾 Save")
        self.save_btn.setStyleSheet("""
            QPushButton {
                background: #3B82F6;
                color: white;
                border: none;
            }
            QPushButton:hover {
                background: #2563EB;
            }
        """)
        self.addWidget(self.save_btn)

        self.download_btn = QPushButton("⬇ Download JSON")
        self.addWidget(self.download_btn)

        self.import_btn = QPushButton("Import JSON")
        self.addWidget(self.import_btn)

        # Spacer
        spacer = QWidget()
        spacer.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred)
        self.addWidget(spacer)

        hint = QLabel("Select a section, press R to rotate (Shift+R reverses)")
        hint.setStyleSheet("color: #6B7280; font-size: 12px;")
        self.addWidget(hint)

    def update_zoom(self, zoom: ZoomController):
        """Refresh the readout and button states."""
        self.zoom_label.setText(f"{zoom.percent}%")
        self.zoom_out_btn.setEnabled(zoom.can_decrease)
        self.zoom_in_btn.setEnabled(zoom.can_increase)
        self.zoom_reset_btn.setEnabled(not zoom.is_reset)


class MainWindow(QMainWindow):
    """
    Main application window for the arena layout editor.

    Layout:
    ┌──────────────────────────────────────────────────────────┐
    │ Toolbar: [Layout ▾] Zoom [−][1:1][+] 40%  [Save] [JSON]  │
    ├──────────────────────────────────────────────────────────┤
    │                                                          │
    │                     Arena Canvas                         │
    │                                                          │
    ├──────────────────────────────────────────────────────────┤
    │  Status Bar                                              │
    └──────────────────────────────────────────────────────────┘
    """

    def __init__(
        self,
        settings_manager: Optional[SettingsManager] = None,
        store: Optional[KeyValueStore] = None,
    ):
        super().__init__()

        # Settings manager (JSON file based)
        self.settings_manager = settings_manager or get_settings()
        editor_settings = self.settings_manager.editor

        # Services
        self.store = store if store is not None else JsonFileStore(self.settings_manager.get_store_path())
        self.zoom = ZoomController(editor_settings.initial_zoom, self)
        self.interaction = InteractionStateMachine(self.zoom, parent=self)
        self.persistence = PersistenceBridge(self.store, self.interaction, self)

        # Setup
        self._setup_window()
        self._setup_menu()
        self._setup_toolbar()
        self._setup_central_widget()
        self._setup_status_bar()
        self._connect_signals()
        self._install_key_filter()

        # Restore window geometry
        self._load_window_settings()

        self.persistence.load()

    def _load_window_settings(self):
        """Restore window geometry and state."""
        geometry, state = self.settings_manager.get_window_geometry()
        if geometry:
            self.restoreGeometry(geometry)
        if state:
            self.restoreState(state)

    def _save_window_settings(self):
        """Save window geometry and state."""
        self.settings_manager.save_window_geometry(
            self.saveGeometry(),
            self.saveState()
        )

    def closeEvent(self, event):
        """Handle window close - release input hooks and save settings."""
        self.interaction.shutdown()
        app = QApplication.instance()
        if app is not None:
            app.removeEventFilter(self._key_filter)
        self._save_window_settings()
        super().closeEvent(event)

    def _setup_window(self):
        """Configure window properties."""
        self._update_window_title()
        self.setMinimumSize(1000, 700)
        self.resize(1400, 900)

        self.setStyleSheet("""
            QMainWindow {
                background: #F3F4F6;
            }
        """)

    def _update_window_title(self):
        """Update window title with the active layout name."""
        base_title = "Arena Editor"
        layout = self.persistence.active_layout
        if layout is not None:
            self.setWindowTitle(f"{layout.display_name} - {base_title}")
        else:
            self.setWindowTitle(base_title)

    def _setup_menu(self):
        """Create menu bar."""
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("&File")

        import_action = QAction("&Import Layout JSON...", self)
        import_action.setShortcut(QKeySequence.StandardKey.Open)
        import_action.triggered.connect(self._on_import)
        file_menu.addAction(import_action)

        save_action = QAction("&Save", self)
        save_action.setShortcut(QKeySequence.StandardKey.Save)
        save_action.triggered.connect(self._on_save)
        file_menu.addAction(save_action)

        download_action = QAction("&Download JSON...", self)
        download_action.setShortcut("Ctrl+E")
        download_action.triggered.connect(self._on_download)
        file_menu.addAction(download_action)

        file_menu.addSeparator()

        exit_action = QAction("E&xit", self)
        exit_action.setShortcut(QKeySequence.StandardKey.Quit)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        # View menu
        view_menu = menubar.addMenu("&View")

        zoom_in_action = QAction("Zoom &In", self)
        zoom_in_action.setShortcut(QKeySequence.StandardKey.ZoomIn)
        zoom_in_action.triggered.connect(self.zoom.increase)
        view_menu.addAction(zoom_in_action)

        zoom_out_action = QAction("Zoom &Out", self)
        zoom_out_action.setShortcut(QKeySequence.StandardKey.ZoomOut)
        zoom_out_action.triggered.connect(self.zoom.decrease)
        view_menu.addAction(zoom_out_action)

        reset_zoom_action = QAction("&Reset Zoom", self)
        reset_zoom_action.setShortcut("Ctrl+0")
        reset_zoom_action.triggered.connect(self.zoom.reset)
        view_menu.addAction(reset_zoom_action)

        view_menu.addSeparator()

        self._grid_action = QAction("Show &Grid", self)
        self._grid_action.setCheckable(True)
        self._grid_action.setChecked(self.settings_manager.editor.show_grid)
        self._grid_action.toggled.connect(self._on_toggle_grid)
        view_menu.addAction(self._grid_action)

    def _setup_toolbar(self):
        self.toolbar = EditorToolbar(self)
        self.addToolBar(self.toolbar)
        self.toolbar.update_zoom(self.zoom)

    def _setup_central_widget(self):
        self.canvas = ArenaCanvas(self.interaction, self.zoom, self)
        editor = self.settings_manager.editor
        self.canvas.set_grid(editor.show_grid, editor.grid_size)
        self.canvas.set_canvas_size(editor.canvas_width, editor.canvas_height)
        self.setCentralWidget(self.canvas)

    def _setup_status_bar(self):
        self.statusBar().showMessage("Ready")

    def _connect_signals(self):
        tb = self.toolbar
        tb.zoom_in_btn.clicked.connect(self.zoom.increase)
        tb.zoom_out_btn.clicked.connect(self.zoom.decrease)
        tb.zoom_reset_btn.clicked.connect(self.zoom.reset)
        tb.save_btn.clicked.connect(self._on_save)
        tb.download_btn.clicked.connect(self._on_download)
        tb.import_btn.clicked.connect(self._on_import)
        tb.layout_combo.activated.connect(self._on_layout_activated)

        self.zoom.zoom_changed.connect(lambda _z: self.toolbar.update_zoom(self.zoom))

        self.persistence.layouts_changed.connect(self._refresh_layout_combo)
        self.persistence.active_layout_changed.connect(self._on_active_layout_changed)
        self.persistence.notice.connect(self._on_notice)

        self.canvas.sectionSelected.connect(self._on_section_selected)

    def _install_key_filter(self):
        """Single application-wide hook for the rotate key."""
        self._key_filter = RotateKeyFilter(self.interaction, self, self)
        app = QApplication.instance()
        if app is not None:
            app.installEventFilter(self._key_filter)

    # ------------------------------------------------------------------
    # Slots

    def _refresh_layout_combo(self):
        combo = self.toolbar.layout_combo
        combo.blockSignals(True)
        combo.clear()
        for layout in self.persistence.layouts:
            combo.addItem(layout.display_name, layout.id)
        index = combo.findData(self.persistence.active_layout_id)
        combo.setCurrentIndex(index)
        combo.blockSignals(False)

    def _on_layout_activated(self, index: int):
        layout_id = self.toolbar.layout_combo.itemData(index)
        if layout_id != self.persistence.active_layout_id:
            self.persistence.select_layout(layout_id)

    def _on_active_layout_changed(self, layout):
        self.canvas.set_layout(layout)
        combo = self.toolbar.layout_combo
        combo.blockSignals(True)
        combo.setCurrentIndex(combo.findData(layout.id) if layout else -1)
        combo.blockSignals(False)
        self._update_window_title()
        if layout is not None:
            self.statusBar().showMessage(
                f"Editing {layout.display_name} ({len(layout.sections)} sections)", 3000
            )

    def _on_section_selected(self, section_id):
        if section_id is None:
            self.statusBar().clearMessage()
            return
        layout = self.persistence.active_layout
        section = layout.get_section(section_id) if layout else None
        name = section.display_name if section else section_id
        self.statusBar().showMessage(f"Selected section {name}")

    def _on_toggle_grid(self, checked: bool):
        self.settings_manager.editor.show_grid = checked
        self.settings_manager.save()
        self.canvas.set_grid(checked, self.settings_manager.editor.grid_size)

    def _on_notice(self, level: NoticeLevel, title: str, message: str):
        if level == NoticeLevel.WARNING:
            QMessageBox.warning(self, title, message)
        elif level == NoticeLevel.ERROR:
            QMessageBox.critical(self, title, message)
        else:
            self.statusBar().showMessage(f"{title}: {message}", 3000)

    def _on_save(self):
        self.persistence.save()

    def _on_download(self):
        layout = self.persistence.active_layout
        if layout is None:
            # Let the bridge report it
            self.persistence.export_layout(Path(self.settings_manager.get_export_directory()))
            return

        default_path = Path(self.settings_manager.get_export_directory()) / export_filename(layout)
        filepath, _ = QFileDialog.getSaveFileName(
            self, "Download Layout JSON", str(default_path), "JSON Files (*.json);;All Files (*)"
        )
        if not filepath:
            return
        if self.persistence.export_layout(Path(filepath)) is not None:
            self.settings_manager.set_export_directory(filepath)

    def _on_import(self):
        filepath, _ = QFileDialog.getOpenFileName(
            self, "Import Layout JSON", self.settings_manager.get_import_directory(),
            "JSON Files (*.json);;All Files (*)"
        )
        if not filepath:
            return
        self.settings_manager.set_import_directory(filepath)
        layout = self.persistence.import_layout(Path(filepath))
        if layout is not None and self.persistence.active_layout_id is None:
            self.persistence.select_layout(layout.id)
