"""Client-side analysis session state.

An ``AnalysisBoard`` owns the one active ``AnalysisSession``. Every in-flight
request holds a ``Ticket`` naming the session it was issued for, and the board
drops outcomes whose session has since been replaced.

Slot lifecycle: idle -> pending -> resolved | failed. Slots never go back to
idle; replacing the image creates a new session instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union
from uuid import uuid4

from ..core.models import AnalysisKind, ImageReference

logger = logging.getLogger("uicritic.client")

IMAGE_MISSING_MESSAGE = "Image URL missing, cannot start analysis."


class SlotStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


class SlotTransitionError(RuntimeError):
    """Raised on an illegal slot state change."""


@dataclass
class AnalysisSlot:
    kind: AnalysisKind
    status: SlotStatus = SlotStatus.IDLE
    result: Any = None
    error: Optional[str] = None

    @property
    def done(self) -> bool:
        return self.status in (SlotStatus.RESOLVED, SlotStatus.FAILED)


@dataclass(frozen=True)
class Ticket:
    """Identifies which session and slot an in-flight request writes to."""

    session_id: str
    kind: AnalysisKind


@dataclass(frozen=True)
class SlotResolved:
    payload: Any


@dataclass(frozen=True)
class SlotFailed:
    message: str


SlotOutcome = Union[SlotResolved, SlotFailed]


def _empty_slots() -> Dict[AnalysisKind, AnalysisSlot]:
    return {kind: AnalysisSlot(kind) for kind in AnalysisKind}


@dataclass
class AnalysisSession:
    image: Optional[ImageReference]
    analysis_id: str
    session_id: str = field(default_factory=lambda: uuid4().hex)
    slots: Dict[AnalysisKind, AnalysisSlot] = field(default_factory=_empty_slots)
    error: Optional[str] = None

    def slot(self, kind: AnalysisKind) -> AnalysisSlot:
        return self.slots[kind]

    def start(self) -> Dict[AnalysisKind, Ticket]:
        """Move every slot from idle to pending and hand out one ticket per slot."""
        for slot in self.slots.values():
            if slot.status is not SlotStatus.IDLE:
                raise SlotTransitionError(
                    f"Slot {slot.kind.value} is {slot.status.value}; only idle slots can start."
                )
        tickets: Dict[AnalysisKind, Ticket] = {}
        for kind, slot in self.slots.items():
            slot.status = SlotStatus.PENDING
            tickets[kind] = Ticket(self.session_id, kind)
        return tickets

    def apply(self, kind: AnalysisKind, outcome: SlotOutcome) -> AnalysisSlot:
        slot = self.slots[kind]
        if slot.status is not SlotStatus.PENDING:
            raise SlotTransitionError(
                f"Slot {kind.value} is {slot.status.value}; only pending slots can settle."
            )
        if isinstance(outcome, SlotResolved):
            slot.status = SlotStatus.RESOLVED
            slot.result = outcome.payload
            slot.error = None
        elif isinstance(outcome, SlotFailed):
            slot.status = SlotStatus.FAILED
            slot.result = None
            slot.error = outcome.message
        else:
            raise TypeError(f"Unknown slot outcome: {type(outcome).__name__}")
        return slot

    @property
    def finished(self) -> bool:
        if self.error:
            return True
        return all(slot.done for slot in self.slots.values())


Listener = Callable[[AnalysisSession, AnalysisSlot], None]


class AnalysisBoard:
    """Owner of the active session; the only writer of session state."""

    def __init__(self) -> None:
        self._current: Optional[AnalysisSession] = None
        self._listeners: List[Listener] = []
        self.discarded = 0

    @property
    def current(self) -> Optional[AnalysisSession]:
        return self._current

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def replace_image(
        self,
        image: Optional[ImageReference],
        *,
        analysis_id: Optional[str] = None,
    ) -> AnalysisSession:
        """Start a fresh session; all four slots begin idle."""
        previous = self._current
        session = AnalysisSession(image=image, analysis_id=analysis_id or f"temp-{uuid4().hex[:12]}")
        self._current = session
        if previous is not None:
            logger.info(
                "Replaced session %s with %s",
                previous.session_id,
                session.session_id,
            )
        return session

    def is_current(self, session_id: str) -> bool:
        return self._current is not None and self._current.session_id == session_id

    def mark_image_missing(self, session: AnalysisSession) -> None:
        session.error = IMAGE_MISSING_MESSAGE
        logger.warning("Session %s has no image reference; skipping analysis", session.session_id)

    def deliver(self, ticket: Ticket, outcome: SlotOutcome) -> bool:
        """Apply an outcome to its slot. Returns False when the ticket is stale."""
        session = self._current
        if session is None or session.session_id != ticket.session_id:
            self.discarded += 1
            logger.info(
                "Discarding stale %s result for session %s",
                ticket.kind.value,
                ticket.session_id,
            )
            return False
        slot = session.apply(ticket.kind, outcome)
        for listener in self._listeners:
            try:
                listener(session, slot)
            except Exception:
                logger.exception("Listener failed for %s slot", ticket.kind.value)
        return True
