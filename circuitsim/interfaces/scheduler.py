"""Scheduler interface for simulation timing and event dispatch."""

from __future__ import annotations

from abc import ABC, abstractmethod

from circuitsim.interfaces.element import EventTarget


class IScheduler(ABC):
    """Scheduler interface used by elements and peripherals.

    Elements only ever see this surface: the current time, the fixed step
    configuration and the event primitives.
    """

    @property
    @abstractmethod
    def circ_time(self) -> int:
        """Current simulation time in picoseconds."""
        ...

    @property
    @abstractmethod
    def step_size(self) -> int:
        """Fixed step size in picoseconds."""
        ...

    @property
    @abstractmethod
    def steps_per_frame(self) -> int:
        """Number of fixed steps run per frame."""
        ...

    @abstractmethod
    def add_event(self, delay: int, target: EventTarget) -> None:
        """Schedule target.run_event() at circ_time + delay."""
        ...

    @abstractmethod
    def cancel_events(self, target: EventTarget) -> None:
        """Drop every pending event of target. No-op when none are pending."""
        ...
