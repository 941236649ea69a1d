"""
Editor state outside the renderer: annotation history with undo/redo, and the endpoint
drag state machine.

The drag machine holds no reference to the history. Each event returns a message
(Preview / Commit / Revert) and the caller decides what to do with it, so there is no
shared mutable drag state between listeners.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from typing import Any, Literal, Union

from callout.core.types import Annotation, Point

Endpoint = Literal["start", "end"]


def new_annotation_id() -> str:
    return f"ann_{uuid.uuid4().hex[:12]}"


class AnnotationHistory:
    """Linear undo/redo over immutable snapshots of the annotation list."""

    def __init__(self, annotations: list[Annotation] | None = None) -> None:
        self._past: list[tuple[Annotation, ...]] = []
        self._present: tuple[Annotation, ...] = tuple(annotations or ())
        self._future: list[tuple[Annotation, ...]] = []

    @property
    def annotations(self) -> list[Annotation]:
        return list(self._present)

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    def _push(self, annotations: tuple[Annotation, ...]) -> None:
        self._past.append(self._present)
        self._present = annotations
        self._future = []

    def load(self, annotations: list[Annotation]) -> None:
        """Replace the list without creating history (opening a project)."""
        self._past = []
        self._present = tuple(annotations)
        self._future = []

    def get(self, annotation_id: str) -> Annotation | None:
        return next((a for a in self._present if a.id == annotation_id), None)

    def next_label(self, page: int | None = None) -> int:
        """Next free number: one past the highest label (on page, when given)."""
        labels = [a.label for a in self._present if page is None or a.page == page]
        return max(labels, default=0) + 1

    def add(self, annotation: Annotation) -> Annotation:
        if not annotation.id:
            annotation = replace(annotation, id=new_annotation_id())
        self._push(self._present + (annotation,))
        return annotation

    def update(self, annotation_id: str, **changes: Any) -> Annotation:
        """Apply field changes to one record. Raises KeyError for an unknown id."""
        current = self.get(annotation_id)
        if current is None:
            raise KeyError(annotation_id)
        updated = replace(current, **changes)
        self._push(tuple(updated if a.id == annotation_id else a for a in self._present))
        return updated

    def delete(self, annotation_id: str) -> None:
        if self.get(annotation_id) is None:
            raise KeyError(annotation_id)
        self._push(tuple(a for a in self._present if a.id != annotation_id))

    def clear(self) -> None:
        if self._present:
            self._push(())

    def clear_page(self, page: int) -> int:
        """Remove every annotation on page as one undoable edit. Returns how many were removed."""
        kept = tuple(a for a in self._present if a.page != page)
        removed = len(self._present) - len(kept)
        if removed:
            self._push(kept)
        return removed

    def duplicate(self, annotation_id: str, target_page: int) -> Annotation:
        """
        Copy one annotation onto target_page under a new id, numbered after the highest
        label already there. Raises KeyError for an unknown id.
        """
        source = self.get(annotation_id)
        if source is None:
            raise KeyError(annotation_id)
        copy = replace(source, id=new_annotation_id(), page=target_page, label=self.next_label(target_page))
        self._push(self._present + (copy,))
        return copy

    def undo(self) -> bool:
        if not self._past:
            return False
        self._future.insert(0, self._present)
        self._present = self._past.pop()
        return True

    def redo(self) -> bool:
        if not self._future:
            return False
        self._past.append(self._present)
        self._present = self._future.pop(0)
        return True


# ----- Drag state machine -----

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Dragging:
    annotation_id: str
    endpoint: Endpoint
    origin: Point
    position: Point


@dataclass(frozen=True)
class Confirming:
    annotation_id: str
    endpoint: Endpoint
    origin: Point
    position: Point


DragState = Union[Idle, Dragging, Confirming]


@dataclass(frozen=True)
class Preview:
    """Show the endpoint at position; not yet an edit."""
    annotation_id: str
    endpoint: Endpoint
    position: Point


@dataclass(frozen=True)
class Commit:
    """Record the move as one history entry."""
    annotation_id: str
    endpoint: Endpoint
    position: Point


@dataclass(frozen=True)
class Revert:
    """Put the endpoint back where the drag started."""
    annotation_id: str
    endpoint: Endpoint
    position: Point


DragMessage = Union[Preview, Commit, Revert]


def screen_to_page(screen: Point, zoom: float) -> Point:
    """Screen pixels (relative to the page corner) to page units, clamped to the page's top-left."""
    return (max(0.0, screen[0] / zoom), max(0.0, screen[1] / zoom))


class DragStateMachine:
    """
    Idle --press--> Dragging --move--> Dragging --release--> Confirming
    Confirming --confirm--> Idle (Commit); Dragging/Confirming --cancel--> Idle (Revert).
    Events that do not apply to the current state are ignored and return None.
    Positions passed to move/release are screen pixels; zoom converts them to page units.
    """

    def __init__(self) -> None:
        self.state: DragState = Idle()

    def press(self, annotation: Annotation, endpoint: Endpoint) -> DragMessage | None:
        if not isinstance(self.state, Idle):
            return None
        origin = annotation.start if endpoint == "start" else annotation.end
        self.state = Dragging(annotation.id, endpoint, origin, origin)
        return None

    def move(self, screen: Point, zoom: float) -> DragMessage | None:
        if not isinstance(self.state, Dragging):
            return None
        pos = screen_to_page(screen, zoom)
        self.state = replace(self.state, position=pos)
        return Preview(self.state.annotation_id, self.state.endpoint, pos)

    def release(self, screen: Point, zoom: float) -> DragMessage | None:
        if not isinstance(self.state, Dragging):
            return None
        pos = screen_to_page(screen, zoom)
        s = self.state
        self.state = Confirming(s.annotation_id, s.endpoint, s.origin, pos)
        return Preview(s.annotation_id, s.endpoint, pos)

    def confirm(self) -> DragMessage | None:
        if not isinstance(self.state, Confirming):
            return None
        s = self.state
        self.state = Idle()
        return Commit(s.annotation_id, s.endpoint, s.position)

    def cancel(self) -> DragMessage | None:
        if isinstance(self.state, Idle):
            return None
        s = self.state
        self.state = Idle()
        return Revert(s.annotation_id, s.endpoint, s.origin)


def apply_commit(history: AnnotationHistory, message: Commit) -> Annotation:
    """Write a committed drag into the history as one undoable edit."""
    return history.update(message.annotation_id, **{message.endpoint: message.position})


def preview_annotation(annotation: Annotation, message: Preview | Revert) -> Annotation:
    """Annotation as it should be drawn during the drag (history untouched)."""
    return replace(annotation, **{message.endpoint: message.position})
