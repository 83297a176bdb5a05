"""Interrupt controller implementation."""

from __future__ import annotations

from typing import Optional

from circuitsim.interfaces.interrupt_controller import (
    IInterruptController,
    InterruptEvent,
    InterruptTarget,
)
from circuitsim.interfaces.scheduler import IScheduler


class InterruptController(IInterruptController):
    """Simple interrupt controller with pub/sub semantics.

    Events are timestamped with the scheduler's circ_time when a scheduler
    is attached.
    """

    def __init__(self, scheduler: Optional[IScheduler] = None):
        self._scheduler = scheduler
        self._subscribers: list[object] = []
        self._target: Optional[InterruptTarget] = None
        self._pending: list[InterruptEvent] = []

    @property
    def subscribers(self) -> tuple[object, ...]:
        return tuple(self._subscribers)

    @property
    def pending(self) -> tuple[InterruptEvent, ...]:
        return tuple(self._pending)

    def subscribe(self, peripheral: object) -> None:
        if peripheral not in self._subscribers:
            self._subscribers.append(peripheral)

    def attach_target(self, target: InterruptTarget) -> None:
        self._target = target

    def notify(self, source: object, vector: int | None = None) -> InterruptEvent:
        timestamp = self._scheduler.circ_time if self._scheduler is not None else None
        event = InterruptEvent(source=source, vector=vector, timestamp=timestamp)
        self._pending.append(event)
        if self._target is not None:
            self._target.handle_interrupt(event)
        return event

    def clear(self, source: object, vector: int | None = None) -> None:
        self._pending = [
            event
            for event in self._pending
            if event.source is not source or (vector is not None and event.vector != vector)
        ]

    def reset(self) -> None:
        self._pending.clear()
