"""Tests for the editing session controller."""
import json

import pytest

from blockgrid.editor import (
    BlockKind, GridPosition, MemoryStore, SessionController, ShortcutAction,
)
from blockgrid.editor.persistence import STORAGE_KEYS


def _positions(session):
    return [(b.position.x, b.position.y) for b in session.layout]


@pytest.fixture
def two_blocks(session):
    a = session.add_block(BlockKind.TEXT)
    b = session.add_block(BlockKind.IMAGE)
    return a, b


class TestAddBlock:

    def test_blocks_flow_across_rows(self, session):
        first = session.add_block(BlockKind.TEXT)
        second = session.add_block(BlockKind.IMAGE)
        third = session.add_block(BlockKind.TEXT)

        assert first.position == GridPosition(0, 0)
        assert second.position == GridPosition(6, 0)
        assert third.position == GridPosition(0, 1)
        assert all(b.width == 6 for b in session.layout)
        assert len(session.history) == 3
        assert session.history.undo_description == "Add text block"

    def test_new_blocks_get_defaults(self, session):
        text = session.add_block("text")
        image = session.add_block("image")
        assert text.id.startswith("text-")
        assert text.content.startswith("# New Text Block")
        assert image.content == "https://placehold.co/600x400"
        assert text.id != image.id

    def test_first_snapshot_cannot_be_undone(self, session):
        session.add_block(BlockKind.TEXT)
        assert not session.can_undo
        assert not session.undo()
        assert len(session.layout) == 1

    def test_default_width_from_config(self, clock):
        store = MemoryStore({"config/default_block_width": "4"})
        session = SessionController.from_store(store, clock=clock)
        for _ in range(4):
            session.add_block(BlockKind.TEXT)
        assert _positions(session) == [(0, 0), (4, 0), (8, 0), (0, 1)]


class TestUndoRedo:

    def test_undo_and_redo(self, session):
        for _ in range(3):
            session.add_block(BlockKind.TEXT)

        assert session.undo()
        assert len(session.layout) == 2
        assert session.can_redo
        assert session.redo()
        assert len(session.layout) == 3
        assert not session.redo()

    def test_new_change_discards_redo(self, session):
        for _ in range(3):
            session.add_block(BlockKind.TEXT)
        session.undo()
        session.undo()
        session.add_block(BlockKind.IMAGE)

        assert not session.can_redo
        assert len(session.history) == 2
        assert [b.kind for b in session.layout] == [BlockKind.TEXT, BlockKind.IMAGE]

    def test_history_limit_from_config(self, clock):
        session = SessionController.from_store(
            MemoryStore({"config/history_limit": "3"}), clock=clock)
        for _ in range(5):
            session.add_block(BlockKind.TEXT)
        assert len(session.history) == 3
        assert session.history.cursor == 2

    def test_shortcuts(self, session):
        session.add_block(BlockKind.TEXT)
        session.add_block(BlockKind.TEXT)

        assert session.handle_shortcut("z", ctrl=True) is ShortcutAction.UNDO
        assert len(session.layout) == 1
        assert session.handle_shortcut("Z", meta=True, shift=True) is ShortcutAction.REDO
        assert len(session.layout) == 2
        assert session.handle_shortcut("z") is None
        assert len(session.layout) == 2


class TestMoveBlock:

    def test_drop_on_block_swaps(self, session, two_blocks):
        a, b = two_blocks
        assert session.move_block(a.id, drop_x=700, drop_y=10, container_width=1200)

        assert session.layout.get_block(a.id).position == GridPosition(6, 0)
        assert session.layout.get_block(b.id).position == GridPosition(0, 0)
        assert session.history.undo_description == "Move block"

        session.undo()
        assert session.layout.get_block(a.id).position == GridPosition(0, 0)

    def test_drop_on_empty_cell_clamps(self, session, two_blocks):
        c = session.add_block(BlockKind.TEXT)
        assert session.move_block(c.id, drop_x=900, drop_y=250, container_width=1200)
        assert session.layout.get_block(c.id).position == GridPosition(6, 3)

    def test_no_change_is_not_committed(self, session, two_blocks):
        a, _ = two_blocks
        assert not session.move_block(a.id, drop_x=50, drop_y=10, container_width=1200)
        assert not session.move_block("missing", drop_x=50, drop_y=10, container_width=1200)
        assert len(session.history) == 2


class TestResize:

    def test_live_resize_commits_after_quiet_period(self, session, clock):
        block = session.add_block(BlockKind.TEXT)
        drag = session.begin_resize(block.id, "right")

        live = session.resize_to(drag, 100)
        assert live.width == 7
        assert session.layout.get_block(block.id).width == 7
        assert session.has_pending_commit
        assert len(session.history) == 1

        clock.advance(0.3)
        assert session.poll()
        assert len(session.history) == 2
        assert session.history.undo_description == "Resize block"

    def test_rapid_updates_make_one_snapshot(self, session, clock):
        block = session.add_block(BlockKind.TEXT)
        drag = session.begin_resize(block.id, "right")
        for delta in (100, 200, 300):
            session.resize_to(drag, delta)
            clock.advance(0.1)

        clock.advance(0.3)
        session.poll()
        assert len(session.history) == 2
        assert session.layout.get_block(block.id).width == 9

    def test_end_resize_commits_immediately(self, session):
        block = session.add_block(BlockKind.TEXT)
        drag = session.begin_resize(block.id, "right")
        session.resize_to(drag, 200)

        final = session.end_resize(drag)
        assert final.width == 8
        assert not session.has_pending_commit
        assert len(session.history) == 2

        session.undo()
        assert session.layout.get_block(block.id).width == 6

    def test_left_edge_moves_anchor(self, session, two_blocks):
        _, b = two_blocks
        drag = session.begin_resize(b.id, "left")
        session.resize_to(drag, -200)
        final = session.end_resize(drag)
        assert (final.width, final.position.x) == (8, 4)

    def test_unchanged_drag_adds_nothing(self, session):
        block = session.add_block(BlockKind.TEXT)
        drag = session.begin_resize(block.id, "right")
        assert session.resize_to(drag, 20) is None
        session.end_resize(drag)
        assert len(session.history) == 1

    def test_resize_past_edge_is_rejected(self, session, two_blocks):
        _, b = two_blocks
        drag = session.begin_resize(b.id, "right")
        assert session.resize_to(drag, 100) is None
        assert not session.has_pending_commit
        assert session.layout.get_block(b.id).width == 6

    def test_undo_flushes_pending_resize(self, session):
        session.add_block(BlockKind.TEXT)
        block = session.add_block(BlockKind.TEXT)
        drag = session.begin_resize(block.id, "right")
        session.resize_to(drag, -100)

        assert session.undo()
        assert session.layout.get_block(block.id).width == 6
        assert session.redo()
        assert session.layout.get_block(block.id).width == 5

    def test_unknown_block(self, session):
        assert session.begin_resize("missing", "left") is None


class TestEdits:

    def test_delete_and_undo(self, session, two_blocks):
        a, b = two_blocks
        assert session.delete_block(a.id)
        assert session.layout.ids == [b.id]
        session.undo()
        assert session.layout.ids == [a.id, b.id]

    def test_unknown_ids_are_noops(self, session, two_blocks):
        assert not session.delete_block("missing")
        assert not session.set_block_content("missing", "x")
        assert not session.set_block_width("missing", 3)
        assert len(session.history) == 2

    def test_set_content(self, session, two_blocks):
        a, _ = two_blocks
        assert session.set_block_content(a.id, "## Changed")
        assert session.layout.get_block(a.id).content == "## Changed"
        assert session.history.undo_description == "Edit content"

        assert session.set_block_content(a.id, "## Changed")
        assert len(session.history) == 3

    def test_set_image_alt(self, session, two_blocks):
        a, b = two_blocks
        assert session.set_image_alt(b.id, "A placeholder")
        assert session.layout.get_block(b.id).alt == "A placeholder"
        assert not session.set_image_alt(a.id, "text blocks have no alt")

    def test_set_width(self, session, two_blocks):
        a, b = two_blocks
        assert session.set_block_width(a.id, 2)
        assert session.layout.get_block(a.id).width == 2
        assert not session.set_block_width(b.id, 20)
        assert session.layout.get_block(b.id).width == 6


class TestSessionLifecycle:

    def test_clear_all(self, session, store, two_blocks):
        session.clear_all()
        assert session.layout.is_empty
        assert session.history.is_empty
        assert not session.can_undo
        assert json.loads(store.get(STORAGE_KEYS['components'])) == []
        assert json.loads(store.get(STORAGE_KEYS['history_index'])) == -1

    def test_load_sample(self, session, two_blocks):
        session.load_sample()
        assert session.layout.ids == ["sample-text-1", "sample-image-1", "sample-text-2"]
        assert len(session.history) == 1
        assert session.history.cursor == 0
        assert not session.can_undo

    def test_state_survives_reload(self, session, store, clock):
        session.add_block(BlockKind.TEXT)
        session.add_block(BlockKind.IMAGE)
        session.undo()

        reloaded = SessionController(store=store, clock=clock)
        assert reloaded.layout == session.layout
        assert reloaded.history.entries == session.history.entries
        assert reloaded.can_redo
        assert reloaded.redo()
        assert len(reloaded.layout) == 2

    def test_listeners(self, session):
        seen = []
        session.add_listener(seen.append)
        session.add_block(BlockKind.TEXT)
        assert seen == [session.layout]

        session.remove_listener(seen.append)
        session.add_block(BlockKind.TEXT)
        assert len(seen) == 1


class TestModes:

    def test_preview_and_edit(self, session, store):
        session.set_preview_mode()
        assert session.modes.show_preview
        assert not session.modes.is_editing
        assert json.loads(store.get(STORAGE_KEYS['show_preview'])) is True

        assert session.set_edit_mode()
        assert session.modes.is_editing
        assert not session.modes.show_preview

    def test_sidebar(self, session, store):
        session.set_sidebar_visible(False)
        assert not session.modes.show_sidebar
        assert json.loads(store.get(STORAGE_KEYS['show_sidebar'])) is False

    def test_unchanged_mode_does_not_notify(self, session):
        seen = []
        session.add_listener(seen.append)
        session.set_preview_mode()
        session.set_preview_mode()
        assert len(seen) == 1

    def test_mobile_viewport_forces_preview(self, session):
        assert session.set_viewport_width(768)
        assert session.modes.show_preview
        assert not session.set_edit_mode()
        assert not session.modes.is_editing

        assert not session.set_viewport_width(1024)
        assert session.set_edit_mode()
        assert session.modes.is_editing


class TestAbsorbedErrors:

    @pytest.mark.parametrize("container_width", [0, -100])
    def test_move_with_collapsed_container(self, session, two_blocks, container_width):
        a, _ = two_blocks
        assert not session.move_block(a.id, drop_x=10, drop_y=10,
                                      container_width=container_width)
        assert session.layout.get_block(a.id).position == GridPosition(0, 0)
        assert len(session.history) == 2

    def test_move_with_non_finite_drop_point(self, session, two_blocks):
        a, _ = two_blocks
        assert not session.move_block(a.id, drop_x=float("nan"), drop_y=10,
                                      container_width=1200)
        assert len(session.history) == 2

    @pytest.mark.parametrize("width", [float("inf"), float("nan"), None])
    def test_set_width_with_bad_number(self, session, two_blocks, width):
        a, _ = two_blocks
        assert not session.set_block_width(a.id, width)
        assert session.layout.get_block(a.id).width == 6
        assert len(session.history) == 2


class TestResizeDuringEdits:

    def test_end_resize_keeps_content_edited_mid_drag(self, session):
        block = session.add_block(BlockKind.TEXT)
        drag = session.begin_resize(block.id, "right")
        session.resize_to(drag, 100)
        session.set_block_content(block.id, "## Edited")

        final = session.end_resize(drag)
        assert final.width == 7
        assert final.content == "## Edited"
        assert session.layout.get_block(block.id).content == "## Edited"

    def test_end_resize_keeps_row_after_move(self, session, two_blocks):
        c = session.add_block(BlockKind.TEXT)
        drag = session.begin_resize(c.id, "right")
        session.move_block(c.id, drop_x=50, drop_y=250, container_width=1200)

        final = session.end_resize(drag)
        assert final.position == GridPosition(0, 3)
        assert session.layout.get_block(c.id).position == GridPosition(0, 3)

    def test_end_resize_after_delete(self, session, two_blocks):
        a, _ = two_blocks
        drag = session.begin_resize(a.id, "right")
        session.delete_block(a.id)

        assert session.end_resize(drag) is None
        assert session.layout.get_block(a.id) is None
        assert len(session.history) == 3
