"""Light emitting diode with a threshold/series-resistance model."""

from __future__ import annotations

from typing import TYPE_CHECKING

from circuitsim.core.element import BaseElement
from circuitsim.core.epin import EPin
from circuitsim.utils.consts import ConstUtils

if TYPE_CHECKING:
    from circuitsim.core.simulator import Simulator


class Led(BaseElement):
    """LED re-linearized once per step.

    While conducting, the LED is a voltage drop of ``threshold`` in series
    with ``resistance``; otherwise it is a high impedance. The operating
    point is taken from the node voltages of the previous step, so the
    model converges over a few steps instead of being solved simultaneously
    with the rest of the network.
    """

    def __init__(
        self,
        element_id: str,
        sim: "Simulator",
        threshold: float = 2.4,
        resistance: float = 1.0,
        max_current: float = 0.02,
    ):
        super().__init__(element_id, sim)
        self.anode = EPin(f"{element_id}-anode", owner=self)
        self.cathode = EPin(f"{element_id}-cathode", owner=self)
        self.threshold = threshold
        self.resistance = max(resistance, ConstUtils.MIN_RESISTANCE)
        self.max_current = max_current

        self._conducting = False
        self._current = 0.0
        self._brightness = 0.0

    @property
    def pins(self) -> list[EPin]:
        return [self.anode, self.cathode]

    @property
    def conducting(self) -> bool:
        return self._conducting

    @property
    def current(self) -> float:
        return self._current

    @property
    def brightness(self) -> float:
        """Current relative to max_current, capped at 1.0."""
        return self._brightness

    @property
    def is_lit(self) -> bool:
        return self._brightness > 0.0

    @property
    def overloaded(self) -> bool:
        return self._current > self.max_current

    def initialize(self) -> None:
        self._conducting = False
        self._current = 0.0
        self._brightness = 0.0

    def stamp(self) -> None:
        self._stamp_branch()

    def update_step(self) -> None:
        volt_a = self.anode.get_volt()
        volt_c = self.cathode.get_volt()
        drop = volt_a - volt_c - self.threshold

        if self._conducting and drop > 0.0:
            self._current = drop / self.resistance
        else:
            self._current = 0.0
        self._brightness = min(self._current / self.max_current, 1.0)

        self._conducting = drop > 0.0
        self._stamp_branch()

    def _stamp_branch(self) -> None:
        if not (self.anode.is_connected and self.cathode.is_connected):
            self.anode.stamp_admittance(0.0)
            self.cathode.stamp_admittance(0.0)
            return

        volt_a = self.anode.get_volt()
        volt_c = self.cathode.get_volt()

        if self._conducting:
            admit = 1.0 / self.resistance
            self.anode.stamp_admittance(admit)
            self.anode.stamp_current(admit * (volt_c + self.threshold))
            self.cathode.stamp_admittance(admit)
            self.cathode.stamp_current(admit * (volt_a - self.threshold))
        else:
            admit = 1.0 / ConstUtils.HIGH_IMP
            self.anode.stamp_admittance(admit)
            self.anode.stamp_current(admit * volt_c)
            self.cathode.stamp_admittance(admit)
            self.cathode.stamp_current(admit * volt_a)
