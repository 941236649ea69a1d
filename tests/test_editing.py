# tests/test_editing.py
"""
Annotation history (undo/redo) and the endpoint drag state machine.
"""

from __future__ import annotations

import pytest

from callout.core.editing import (
    AnnotationHistory,
    Commit,
    Confirming,
    DragStateMachine,
    Dragging,
    Idle,
    Preview,
    Revert,
    apply_commit,
    preview_annotation,
    screen_to_page,
)
from callout.core.types import Annotation


def _ann(id: str = "a1", label: int = 1, page: int = 1) -> Annotation:
    return Annotation(id=id, page=page, start=(10.0, 10.0), end=(100.0, 60.0), label=label)


def test_add_generates_id_and_undo_redo() -> None:
    history = AnnotationHistory()
    added = history.add(Annotation(id="", page=1, start=(0.0, 0.0), end=(5.0, 5.0), label=1))
    assert added.id.startswith("ann_")
    assert history.annotations == [added]
    assert history.can_undo and not history.can_redo

    assert history.undo() is True
    assert history.annotations == []
    assert history.can_redo
    assert history.redo() is True
    assert history.annotations == [added]
    assert history.redo() is False


def test_new_edit_clears_redo() -> None:
    history = AnnotationHistory([_ann()])
    history.update("a1", curvature=80.0)
    history.undo()
    history.update("a1", line_shape="curved")
    assert not history.can_redo
    assert history.get("a1").line_shape == "curved"
    assert history.get("a1").curvature == 50


def test_load_resets_history() -> None:
    history = AnnotationHistory()
    history.add(_ann())
    history.load([_ann("b1")])
    assert not history.can_undo
    assert [a.id for a in history.annotations] == ["b1"]


def test_update_and_delete_unknown_id() -> None:
    history = AnnotationHistory([_ann()])
    with pytest.raises(KeyError):
        history.update("missing", label=3)
    with pytest.raises(KeyError):
        history.delete("missing")


def test_delete_and_clear() -> None:
    history = AnnotationHistory([_ann("a1"), _ann("a2", label=2)])
    history.delete("a1")
    assert [a.id for a in history.annotations] == ["a2"]
    history.clear()
    assert history.annotations == []
    history.undo()
    assert [a.id for a in history.annotations] == ["a2"]


def test_next_label_per_page() -> None:
    history = AnnotationHistory([_ann("a1", 1), _ann("a2", 4), _ann("b1", 2, page=2)])
    assert history.next_label() == 5
    assert history.next_label(page=2) == 3
    assert history.next_label(page=3) == 1


def test_screen_to_page() -> None:
    assert screen_to_page((200.0, 50.0), 2.0) == (100.0, 25.0)
    assert screen_to_page((-10.0, 30.0), 1.0) == (0.0, 30.0)


def test_drag_commit_flow() -> None:
    history = AnnotationHistory([_ann()])
    fsm = DragStateMachine()
    assert isinstance(fsm.state, Idle)

    assert fsm.press(history.get("a1"), "end") is None
    assert isinstance(fsm.state, Dragging)

    msg = fsm.move((300.0, 240.0), 2.0)
    assert msg == Preview("a1", "end", (150.0, 120.0))
    assert preview_annotation(history.get("a1"), msg).end == (150.0, 120.0)
    assert history.get("a1").end == (100.0, 60.0)

    msg = fsm.release((320.0, 240.0), 2.0)
    assert isinstance(msg, Preview)
    assert isinstance(fsm.state, Confirming)

    commit = fsm.confirm()
    assert commit == Commit("a1", "end", (160.0, 120.0))
    assert isinstance(fsm.state, Idle)
    apply_commit(history, commit)
    assert history.get("a1").end == (160.0, 120.0)
    history.undo()
    assert history.get("a1").end == (100.0, 60.0)


def test_drag_cancel_reverts_to_origin() -> None:
    fsm = DragStateMachine()
    fsm.press(_ann(), "start")
    fsm.move((50.0, 50.0), 1.0)
    msg = fsm.cancel()
    assert msg == Revert("a1", "start", (10.0, 10.0))
    assert isinstance(fsm.state, Idle)


def test_drag_cancel_while_confirming() -> None:
    fsm = DragStateMachine()
    fsm.press(_ann(), "end")
    fsm.release((5.0, 5.0), 1.0)
    assert fsm.cancel() == Revert("a1", "end", (100.0, 60.0))


def test_events_ignored_in_wrong_state() -> None:
    fsm = DragStateMachine()
    assert fsm.move((1.0, 1.0), 1.0) is None
    assert fsm.release((1.0, 1.0), 1.0) is None
    assert fsm.confirm() is None
    assert fsm.cancel() is None
    fsm.press(_ann(), "end")
    assert fsm.press(_ann("a2"), "start") is None
    assert fsm.state.annotation_id == "a1"
    assert fsm.confirm() is None


def test_clear_page_is_one_undo_step() -> None:
    history = AnnotationHistory([_ann("a1", 1), _ann("a2", 2), _ann("a3", 3), _ann("b1", 1, page=2)])
    assert history.clear_page(1) == 3
    assert [a.id for a in history.annotations] == ["b1"]
    assert history.undo() is True
    assert [a.id for a in history.annotations] == ["a1", "a2", "a3", "b1"]
    assert history.undo() is False


def test_clear_empty_page_adds_no_history() -> None:
    history = AnnotationHistory([_ann()])
    assert history.clear_page(5) == 0
    assert not history.can_undo


def test_duplicate_to_other_page() -> None:
    source = Annotation(id="a1", page=1, start=(10.0, 10.0), end=(100.0, 60.0), label=3, line_shape="curved", terminator="arrow", curvature=70.0, curve_flipped=True)
    history = AnnotationHistory([source, _ann("b1", 4, page=2)])
    copy = history.duplicate("a1", 2)
    assert copy.id not in ("a1", "b1")
    assert copy.page == 2
    assert copy.label == 5
    assert (copy.start, copy.end, copy.line_shape, copy.terminator) == (source.start, source.end, "curved", "arrow")
    assert (copy.curvature, copy.curve_flipped) == (70.0, True)
    assert history.get("a1") == source
    history.undo()
    assert history.get(copy.id) is None
    assert len(history.annotations) == 2


def test_duplicate_onto_empty_page_starts_at_one() -> None:
    history = AnnotationHistory([_ann("a1", 6)])
    assert history.duplicate("a1", 3).label == 1
    assert history.duplicate("a1", 1).label == 7
    with pytest.raises(KeyError):
        history.duplicate("missing", 1)
