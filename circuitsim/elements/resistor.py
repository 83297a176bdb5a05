"""Two-terminal linear resistor."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from circuitsim.core.element import BaseElement
from circuitsim.core.epin import EPin
from circuitsim.utils.consts import ConstUtils

if TYPE_CHECKING:
    from circuitsim.core.simulator import Simulator

logger = logging.getLogger(__name__)


class Resistor(BaseElement):
    """Resistor stamped as one Thevenin branch per terminal.

    Each terminal presents G = 1/R towards the voltage last seen on the
    opposite terminal. Both terminals listen to their nodes and re-stamp
    when either side moves, so a chain of resistors relaxes to the divider
    solution inside one solve phase.
    """

    def __init__(self, element_id: str, sim: "Simulator", resistance: float = 1000.0):
        super().__init__(element_id, sim)
        self.pin_a = EPin(f"{element_id}-a", owner=self)
        self.pin_b = EPin(f"{element_id}-b", owner=self)
        self._resistance = max(resistance, ConstUtils.MIN_RESISTANCE)

    @property
    def pins(self) -> list[EPin]:
        return [self.pin_a, self.pin_b]

    @property
    def resistance(self) -> float:
        return self._resistance

    def set_resistance(self, resistance: float) -> None:
        if resistance < ConstUtils.MIN_RESISTANCE:
            logger.debug(f"{self.element_id}: resistance {resistance} clamped")
            resistance = ConstUtils.MIN_RESISTANCE
        self._resistance = resistance
        self.stamp()

    @property
    def current(self) -> float:
        """Current flowing from terminal A to terminal B."""
        return (self.pin_a.get_volt() - self.pin_b.get_volt()) / self._resistance

    def initialize(self) -> None:
        self.pin_a.change_callback(self)
        self.pin_b.change_callback(self)

    def stamp(self) -> None:
        admit = self._branch_admittance()
        self.pin_a.stamp_admittance(admit)
        self.pin_b.stamp_admittance(admit)
        self._stamp_currents(admit)

    def volt_changed(self) -> None:
        self._stamp_currents(self._branch_admittance())

    def _branch_admittance(self) -> float:
        # A dangling terminal leaves the other one open
        if not (self.pin_a.is_connected and self.pin_b.is_connected):
            return 0.0
        return 1.0 / self._resistance

    def _stamp_currents(self, admit: float) -> None:
        self.pin_a.stamp_current(admit * self.pin_b.get_volt())
        self.pin_b.stamp_current(admit * self.pin_a.get_volt())
