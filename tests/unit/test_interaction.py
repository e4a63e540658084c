"""
Unit tests for the interaction state machine.

Tests:
- Selection and deselection
- Drag math at different zoom factors
- Pointer capture lifetime
- Rotation via handle_key and the rotate button path
"""

import pytest

from models.layout_state import SectionLayoutState
from models.transform import Position
from services.interaction import (
    InteractionMode, InteractionStateMachine, PointerSubscription
)


@pytest.fixture
def loaded(interaction, two_section_layout):
    """Interaction machine with the two-section layout installed."""
    interaction.reset(SectionLayoutState.from_layout(two_section_layout))
    return interaction


class TestPointerSubscription:
    """Tests for PointerSubscription."""

    def test_release_is_idempotent(self):
        calls = []
        sub = PointerSubscription(lambda: calls.append(1))
        assert sub.active
        sub.release()
        sub.release()
        assert not sub.active
        assert calls == [1]

    def test_without_release_fn(self):
        sub = PointerSubscription()
        sub.release()
        assert not sub.active


class TestSelection:
    """Tests for selection transitions."""

    def test_starts_idle(self, interaction):
        assert interaction.mode == InteractionMode.IDLE
        assert interaction.selected_id is None

    def test_press_selects_and_drags(self, loaded, pointer_source):
        assert loaded.press_section("A", Position(5, 5))
        assert loaded.mode == InteractionMode.DRAGGING
        assert loaded.selected_id == "A"
        assert loaded.dragging_id == "A"
        assert pointer_source.active

    def test_release_keeps_selection(self, loaded, pointer_source):
        loaded.press_section("A", Position(5, 5))
        loaded.release_pointer()
        assert loaded.mode == InteractionMode.SELECTED
        assert loaded.selected_id == "A"
        assert not pointer_source.active

    def test_press_canvas_deselects(self, loaded):
        loaded.press_section("A", Position(5, 5))
        loaded.release_pointer()
        loaded.press_canvas()
        assert loaded.mode == InteractionMode.IDLE
        assert loaded.selected_id is None

    def test_press_unknown_section(self, loaded, pointer_source):
        assert loaded.press_section("nope", Position(0, 0)) is False
        assert loaded.mode == InteractionMode.IDLE
        assert pointer_source.captures == 0

    def test_selection_signal(self, loaded):
        seen = []
        loaded.selection_changed.connect(seen.append)
        loaded.press_section("A", Position(5, 5))
        loaded.release_pointer()
        loaded.press_section("A", Position(5, 5))
        loaded.release_pointer()
        loaded.press_section("B", Position(30, 30))
        loaded.press_canvas()
        assert seen == ["A", "B", None]

    def test_pressing_other_section_switches(self, loaded, pointer_source):
        loaded.press_section("A", Position(5, 5))
        loaded.press_section("B", Position(30, 30))
        assert loaded.selected_id == "B"
        assert loaded.dragging_id == "B"
        assert pointer_source.captures == 2
        assert pointer_source.releases == 1


class TestDragging:
    """Tests for drag math."""

    def test_offset_fixed_at_drag_start(self, loaded, pointer_source):
        # A is at logical (10, 10) -> screen (4, 4) at zoom 0.4
        loaded.press_section("A", Position(6, 7))
        assert loaded.drag_offset.x == pytest.approx(2)
        assert loaded.drag_offset.y == pytest.approx(3)

        pointer_source.move(22, 23)
        state = loaded.layout_state.get("A")
        assert state.x == pytest.approx(50)
        assert state.y == pytest.approx(50)

        pointer_source.move(42, 43)
        assert loaded.drag_offset.x == pytest.approx(2)
        assert loaded.drag_offset.y == pytest.approx(3)
        state = loaded.layout_state.get("A")
        assert state.x == pytest.approx(100)
        assert state.y == pytest.approx(100)

    @pytest.mark.parametrize("zoom_value", [0.1, 0.4, 1.0, 2.5])
    def test_drag_at_zoom(self, loaded, zoom, pointer_source, zoom_value):
        zoom.set_zoom(zoom_value)
        start = loaded.screen_position("B")
        grip = Position(start.x + 3, start.y + 4)
        loaded.press_section("B", grip)

        pointer_source.move(grip.x + 10, grip.y - 20)
        state = loaded.layout_state.get("B")
        assert state.x == pytest.approx(70 + 10 / zoom_value)
        assert state.y == pytest.approx(70 - 20 / zoom_value)

    def test_section_drawn_under_pointer(self, loaded, pointer_source):
        loaded.press_section("A", Position(6, 7))
        pointer_source.move(100, 80)
        drawn = loaded.screen_position("A")
        assert drawn.x + loaded.drag_offset.x == pytest.approx(100)
        assert drawn.y + loaded.drag_offset.y == pytest.approx(80)

    def test_move_without_drag_is_ignored(self, loaded):
        assert loaded.move_pointer(Position(50, 50)) is False
        assert loaded.layout_state.get("A").x == 10

    def test_moved_signal(self, loaded, pointer_source):
        moved = []
        loaded.section_moved.connect(moved.append)
        loaded.press_section("A", Position(4, 4))
        pointer_source.move(8, 8)
        pointer_source.move(9, 9)
        assert moved == ["A", "A"]

    def test_release_from_pointer_source(self, loaded, pointer_source):
        loaded.press_section("A", Position(4, 4))
        pointer_source.release()
        assert loaded.mode == InteractionMode.SELECTED
        assert not loaded.has_pointer_capture
        assert pointer_source.releases == 1

    def test_zoom_change_cancels_drag(self, loaded, zoom, pointer_source):
        loaded.press_section("A", Position(4, 4))
        zoom.increase()
        assert loaded.mode == InteractionMode.SELECTED
        assert not pointer_source.active
        assert not loaded.has_pointer_capture

        # Later moves have no effect
        loaded.move_pointer(Position(200, 200))
        assert loaded.layout_state.get("A").x == 10

    def test_zoom_noop_keeps_drag(self, loaded, zoom):
        zoom.set_zoom(zoom.zoom)
        loaded.press_section("A", Position(4, 4))
        zoom.set_zoom(zoom.zoom)
        assert loaded.mode == InteractionMode.DRAGGING

    def test_cancel_drag(self, loaded, pointer_source):
        assert loaded.cancel_drag() is False
        loaded.press_section("A", Position(4, 4))
        assert loaded.cancel_drag() is True
        assert not pointer_source.active

    def test_shutdown_releases_capture(self, loaded, pointer_source):
        loaded.press_section("A", Position(4, 4))
        loaded.shutdown()
        assert pointer_source.captures == pointer_source.releases == 1

    def test_drag_without_pointer_source(self, zoom, two_section_layout):
        machine = InteractionStateMachine(zoom)
        machine.reset(SectionLayoutState.from_layout(two_section_layout))
        machine.press_section("A", Position(4, 4))
        assert machine.has_pointer_capture
        machine.release_pointer()
        assert not machine.has_pointer_capture

    def test_set_pointer_source_cancels_drag(self, loaded, pointer_source):
        loaded.press_section("A", Position(4, 4))
        loaded.set_pointer_source(None)
        assert loaded.mode == InteractionMode.SELECTED
        assert not pointer_source.active


class TestRotation:
    """Tests for rotation."""

    def test_r_rotates_selected(self, loaded):
        loaded.press_section("A", Position(4, 4))
        loaded.release_pointer()
        assert loaded.handle_key("r") is True
        assert loaded.layout_state.get("A").rotation == 90

    def test_shift_r_rotates_back(self, loaded):
        loaded.press_section("A", Position(4, 4))
        assert loaded.handle_key("R", shift=True) is True
        assert loaded.layout_state.get("A").rotation == 270

    def test_four_rotations_return_to_start(self, loaded):
        loaded.press_section("B", Position(28, 28))
        for _ in range(4):
            loaded.handle_key("r")
        assert loaded.layout_state.get("B").rotation == 0

    def test_key_follows_current_selection(self, loaded):
        loaded.press_section("A", Position(4, 4))
        loaded.handle_key("r")
        loaded.press_section("B", Position(28, 28))
        loaded.handle_key("r")
        loaded.handle_key("r")
        assert loaded.layout_state.get("A").rotation == 90
        assert loaded.layout_state.get("B").rotation == 180

    def test_no_selection(self, loaded):
        assert loaded.handle_key("r") is False
        assert loaded.layout_state.get("A").rotation == 0

    def test_other_keys_ignored(self, loaded):
        loaded.press_section("A", Position(4, 4))
        assert loaded.handle_key("t") is False
        assert loaded.layout_state.get("A").rotation == 0

    def test_rotate_without_selecting(self, loaded):
        rotated = []
        loaded.section_rotated.connect(lambda sid, rot: rotated.append((sid, rot)))
        assert loaded.rotate("B", 90) == 90
        assert loaded.selected_id is None
        assert rotated == [("B", 90.0)]

    def test_rotate_unknown(self, loaded):
        assert loaded.rotate("nope", 90) is None

    def test_rotate_selected_without_selection(self, loaded):
        assert loaded.rotate_selected(90) is None


class TestReset:
    """Tests for installing a new layout state."""

    def test_reset_clears_session(self, loaded, pointer_source, second_layout):
        loaded.press_section("A", Position(4, 4))
        resets = []
        loaded.layout_reset.connect(lambda: resets.append(True))

        loaded.reset(SectionLayoutState.from_layout(second_layout))
        assert loaded.mode == InteractionMode.IDLE
        assert loaded.drag_offset == Position()
        assert not pointer_source.active
        assert list(loaded.layout_state) == ["S1", "S2", "S3"]
        assert resets == [True]

    def test_reset_to_empty(self, loaded):
        loaded.reset()
        assert len(loaded.layout_state) == 0
