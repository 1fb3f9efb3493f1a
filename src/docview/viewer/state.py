"""Viewer state and its allowed transitions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Phase(str, Enum):
    """Lifecycle phase of a viewer."""

    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


# READY -> READY covers navigation; leaving READY is not possible.
TRANSITIONS: dict[Phase, frozenset[Phase]] = {
    Phase.LOADING: frozenset({Phase.READY, Phase.ERROR}),
    Phase.READY: frozenset({Phase.READY}),
    Phase.ERROR: frozenset({Phase.LOADING}),
}


def can_transition(source: Phase, target: Phase) -> bool:
    return target in TRANSITIONS[source]


@dataclass(frozen=True)
class ViewerState:
    """Snapshot of what the viewer shows.

    Build instances with :meth:`loading`, :meth:`ready` and :meth:`error`
    so each phase carries only its own data.
    """

    phase: Phase
    current_index: int = 1
    total_pages: int = 0
    error_message: str | None = None

    @classmethod
    def loading(cls) -> ViewerState:
        return cls(phase=Phase.LOADING)

    @classmethod
    def ready(cls, current_index: int, total_pages: int) -> ViewerState:
        if total_pages > 0 and not 1 <= current_index <= total_pages:
            raise ValueError(
                f"Index {current_index} outside 1..{total_pages}"
            )
        return cls(
            phase=Phase.READY, current_index=current_index, total_pages=total_pages
        )

    @classmethod
    def error(cls, message: str) -> ViewerState:
        return cls(phase=Phase.ERROR, error_message=message)

    @property
    def is_loading(self) -> bool:
        return self.phase == Phase.LOADING

    @property
    def is_ready(self) -> bool:
        return self.phase == Phase.READY

    @property
    def is_error(self) -> bool:
        return self.phase == Phase.ERROR

    @property
    def page_label(self) -> str:
        return f"Page {self.current_index} of {self.total_pages}"
