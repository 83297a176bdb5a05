"""Element interface: the lifecycle every network participant follows.

LIFECYCLE CONTRACT:
- initialize(): reset internal state; called once per simulation start,
  before any stamping. Must not depend on other elements' state.
- stamp(): contribute the initial admittance/current of every owned pin.
- update_step(): called once per fixed step, in registration order. Must not
  assume another element updated before or after it within the same step.
- run_event(): called once per scheduled event that fires for this element.
  May schedule further events.
- volt_changed(): called in the solve phase when a node this element
  subscribed to (through EPin.change_callback) moved.

All callbacks run to completion; none may block.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol


class EventTarget(Protocol):
    """Anything the event queue can fire."""

    def run_event(self) -> None:
        """Handle one scheduled event."""
        ...


class VoltageListener(Protocol):
    """Anything that reacts to node voltage changes."""

    def volt_changed(self) -> None:
        """Handle a voltage change on a subscribed node."""
        ...


class IElement(ABC):
    """Element interface used by the simulator."""

    @property
    @abstractmethod
    def element_id(self) -> str:
        """Unique element identifier."""
        ...

    @abstractmethod
    def initialize(self) -> None:
        """Reset state at simulation start."""
        ...

    @abstractmethod
    def stamp(self) -> None:
        """Stamp initial contributions into the network."""
        ...

    @abstractmethod
    def update_step(self) -> None:
        """Advance by one fixed step."""
        ...

    @abstractmethod
    def run_event(self) -> None:
        """Handle one scheduled event."""
        ...

    @abstractmethod
    def volt_changed(self) -> None:
        """Handle a voltage change on a subscribed node."""
        ...
