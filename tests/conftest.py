"""
Pytest configuration and shared fixtures for arena editor tests.
"""

import os
import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Generator

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

# Widgets are created without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from models.layout import LayoutDocument, SectionDocument
from models.transform import Position
from services.zoom_controller import ZoomController
from services.interaction import InteractionStateMachine
from services.layout_store import MemoryStore, LAYOUTS_KEY
from services.persistence import PersistenceBridge, serialize_layouts


# ============== Qt ==============

@pytest.fixture(scope="session", autouse=True)
def qt_app():
    """Application instance for signals and the widget tests."""
    app = QApplication.instance() or QApplication([])
    yield app


# ============== Temporary Directory Fixtures ==============

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    tmp = tempfile.mkdtemp(prefix="arena_editor_test_")
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


# ============== Pointer Source ==============

class FakePointerSource:
    """Records captures so tests can drive and inspect them."""

    def __init__(self):
        self.captures = 0
        self.releases = 0
        self.on_move = None
        self.on_release = None

    @property
    def active(self) -> bool:
        return self.captures > self.releases

    def capture(self, on_move, on_release):
        self.captures += 1
        self.on_move = on_move
        self.on_release = on_release

        def release():
            self.releases += 1
            self.on_move = None
            self.on_release = None
        return release

    def move(self, x: float, y: float):
        if self.on_move is not None:
            self.on_move(Position(x, y))

    def release(self):
        if self.on_release is not None:
            self.on_release()


# ============== Document Fixtures ==============

@pytest.fixture
def two_section_layout() -> LayoutDocument:
    """Layout with section A (persisted geometry) and B (none)."""
    return LayoutDocument(
        id="arena1",
        name="Main Hall",
        sections=[
            SectionDocument(
                id="A",
                title="Section A",
                grid=[["A1", "A2", None, "A3"], ["B1", "B2"]],
                row_labels=["A", "B"],
                meta={"x": 10, "y": 10, "rotation": 0},
            ),
            SectionDocument(
                id="B",
                grid=[["C1", "C2", "C3"]],
                seat_size=30,
                gap_size=6,
            ),
        ],
    )


@pytest.fixture
def second_layout() -> LayoutDocument:
    return LayoutDocument(
        id="arena2",
        name="Side Hall",
        sections=[
            SectionDocument(id="S1", grid=[["1", "2"]], meta={"x": 200, "y": 120, "rotation": 90}),
            SectionDocument(id="S2", grid=[["3", "4"]]),
            SectionDocument(id="S3", grid=[["5", "6"]], meta={"note": "keep me"}),
        ],
    )


# ============== Service Fixtures ==============

@pytest.fixture
def zoom() -> ZoomController:
    return ZoomController()


@pytest.fixture
def pointer_source() -> FakePointerSource:
    return FakePointerSource()


@pytest.fixture
def interaction(zoom, pointer_source) -> InteractionStateMachine:
    return InteractionStateMachine(zoom, pointer_source)


@pytest.fixture
def store(two_section_layout, second_layout) -> MemoryStore:
    """Store pre-populated with two layouts."""
    return MemoryStore({LAYOUTS_KEY: serialize_layouts([two_section_layout, second_layout])})


@pytest.fixture
def bridge(store, interaction) -> PersistenceBridge:
    return PersistenceBridge(store, interaction)


@pytest.fixture
def notices(bridge) -> list:
    """Collected (level, title, message) notices from the bridge."""
    collected = []
    bridge.notice.connect(lambda level, title, message: collected.append((level, title, message)))
    return collected
