"""Fixed voltage rails."""

from __future__ import annotations

from typing import TYPE_CHECKING

from circuitsim.core.element import BaseElement
from circuitsim.core.epin import EPin
from circuitsim.utils.consts import ConstUtils

if TYPE_CHECKING:
    from circuitsim.core.simulator import Simulator


class VoltageSource(BaseElement):
    """Ideal-ish rail: a stiff admittance towards a fixed voltage."""

    def __init__(self, element_id: str, sim: "Simulator", voltage: float = 5.0):
        super().__init__(element_id, sim)
        self.pin = EPin(f"{element_id}-out", owner=self)
        self._voltage = voltage
        self._admit = 1.0 / ConstUtils.CERO_DOUB

    @property
    def pins(self) -> list[EPin]:
        return [self.pin]

    @property
    def voltage(self) -> float:
        return self._voltage

    def set_voltage(self, voltage: float) -> None:
        self._voltage = voltage
        self.pin.stamp_current(self._voltage * self._admit)

    def stamp(self) -> None:
        self.pin.stamp_admittance(self._admit)
        self.pin.stamp_current(self._voltage * self._admit)


class Ground(VoltageSource):
    """0 V reference rail."""

    def __init__(self, element_id: str, sim: "Simulator"):
        super().__init__(element_id, sim, voltage=0.0)
