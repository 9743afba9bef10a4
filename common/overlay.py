"""
common/overlay.py

Small transient overlays (the account menu) that close when the user
presses anywhere outside them.

The "document" is a `PointerEventBus`. An open overlay holds exactly one
listener on it, registered through a context manager and kept in an
ExitStack, so every way of closing (close, dismiss, dispose) releases it.
"""

from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from typing import Callable, List, Optional


@dataclass(frozen=True)
class PointerDown:
    target: str  # key of the element that was pressed


class PointerEventBus:
    """Global pointer-down listeners."""

    def __init__(self):
        self._listeners: List[Callable[[PointerDown], None]] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def add_listener(self, callback: Callable[[PointerDown], None]) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[PointerDown], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    @contextmanager
    def listening(self, callback: Callable[[PointerDown], None]):
        self.add_listener(callback)
        try:
            yield callback
        finally:
            self.remove_listener(callback)

    def dispatch(self, target: str) -> None:
        event = PointerDown(target)
        for callback in list(self._listeners):
            callback(event)


def region_with_prefix(prefix: str) -> Callable[[str], bool]:
    """Owned region = every element key starting with `prefix`."""
    return lambda target: target.startswith(prefix)


class OutsideDismissOverlay:

    def __init__(self, pointer_events: PointerEventBus, owns: Callable[[str], bool],
                 on_dismiss: Optional[Callable[[], None]] = None):
        self.pointer_events = pointer_events
        self.owns = owns
        self.on_dismiss = on_dismiss
        self._scope: Optional[ExitStack] = None

    @property
    def is_open(self) -> bool:
        return self._scope is not None

    def open(self) -> None:
        if self.is_open:
            return
        scope = ExitStack()
        scope.enter_context(self.pointer_events.listening(self._on_pointer_down))
        self._scope = scope

    def close(self) -> None:
        scope, self._scope = self._scope, None
        if scope is not None:
            scope.close()

    def toggle(self) -> None:
        if self.is_open:
            self.close()
        else:
            self.open()

    # Unmount
    dispose = close

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def _on_pointer_down(self, event: PointerDown) -> None:
        if not self.is_open or self.owns(event.target):
            return
        self.close()
        if self.on_dismiss is not None:
            self.on_dismiss()
