"""Base element helpers for shared lifecycle behavior."""

from __future__ import annotations

from typing import TYPE_CHECKING

from circuitsim.interfaces.element import IElement

if TYPE_CHECKING:
    from circuitsim.core.epin import EPin
    from circuitsim.core.simulator import Simulator


class BaseElement(IElement):
    """Optional base class for network elements.

    Holds the simulation context the element was built for and provides
    no-op defaults for every lifecycle hook, so concrete elements only
    override what they take part in.
    """

    def __init__(self, element_id: str, sim: "Simulator"):
        self._element_id = element_id
        self.sim = sim

    @property
    def element_id(self) -> str:
        return self._element_id

    @property
    def pins(self) -> list["EPin"]:
        """Pins owned by this element, in a stable order."""
        return []

    def initialize(self) -> None:
        """Reset state at simulation start. Default is no-op."""

    def stamp(self) -> None:
        """Stamp initial contributions. Default is no-op."""

    def update_step(self) -> None:
        """Advance by one fixed step. Default is no-op."""

    def run_event(self) -> None:
        """Handle a scheduled event. Default is no-op."""

    def volt_changed(self) -> None:
        """Handle a subscribed node voltage change. Default is no-op."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._element_id!r})"
