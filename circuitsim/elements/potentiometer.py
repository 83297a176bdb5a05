"""Three-terminal potentiometer with a movable wiper."""

from __future__ import annotations

from typing import TYPE_CHECKING

from circuitsim.core.element import BaseElement
from circuitsim.core.epin import EPin
from circuitsim.utils.consts import ConstUtils

if TYPE_CHECKING:
    from circuitsim.core.simulator import Simulator


class Potentiometer(BaseElement):
    """Resistance R split by the wiper M into A-M and M-B segments.

    position 0.0 puts the wiper on A, 1.0 on B.
    """

    def __init__(
        self,
        element_id: str,
        sim: "Simulator",
        resistance: float = 1000.0,
        position: float = 0.5,
    ):
        super().__init__(element_id, sim)
        self.pin_a = EPin(f"{element_id}-a", owner=self)
        self.pin_m = EPin(f"{element_id}-m", owner=self)
        self.pin_b = EPin(f"{element_id}-b", owner=self)
        self._resistance = max(resistance, ConstUtils.MIN_RESISTANCE)
        self._position = min(max(position, 0.0), 1.0)
        self._changed = False

    @property
    def pins(self) -> list[EPin]:
        return [self.pin_a, self.pin_m, self.pin_b]

    @property
    def resistance(self) -> float:
        return self._resistance

    def set_resistance(self, resistance: float) -> None:
        self._resistance = max(resistance, ConstUtils.MIN_RESISTANCE)
        self._changed = True

    @property
    def position(self) -> float:
        return self._position

    def set_position(self, position: float) -> None:
        """Move the wiper; takes effect on the next step."""
        self._position = min(max(position, 0.0), 1.0)
        self._changed = True

    @property
    def wiper_volt(self) -> float:
        return self.pin_m.get_volt()

    def segment_resistances(self) -> tuple[float, float]:
        res_a = max(self._resistance * self._position, ConstUtils.MIN_RESISTANCE)
        res_b = max(self._resistance * (1.0 - self._position), ConstUtils.MIN_RESISTANCE)
        return res_a, res_b

    def initialize(self) -> None:
        self._changed = False
        for pin in self.pins:
            pin.change_callback(self)

    def stamp(self) -> None:
        g_a, g_b = self._admittances()
        self.pin_a.stamp_admittance(g_a)
        self.pin_b.stamp_admittance(g_b)
        self.pin_m.stamp_admittance(g_a + g_b)
        self._stamp_currents(g_a, g_b)

    def update_step(self) -> None:
        if self._changed:
            self._changed = False
            self.stamp()

    def volt_changed(self) -> None:
        self._stamp_currents(*self._admittances())

    def _admittances(self) -> tuple[float, float]:
        res_a, res_b = self.segment_resistances()
        wiper = self.pin_m.is_connected
        g_a = 1.0 / res_a if wiper and self.pin_a.is_connected else 0.0
        g_b = 1.0 / res_b if wiper and self.pin_b.is_connected else 0.0
        return g_a, g_b

    def _stamp_currents(self, g_a: float, g_b: float) -> None:
        volt_a = self.pin_a.get_volt()
        volt_m = self.pin_m.get_volt()
        volt_b = self.pin_b.get_volt()

        self.pin_a.stamp_current(g_a * volt_m)
        self.pin_b.stamp_current(g_b * volt_m)
        self.pin_m.stamp_current(g_a * volt_a + g_b * volt_b)
