"""Square-wave generator on a digital output pin."""

from __future__ import annotations

from typing import TYPE_CHECKING

from circuitsim.core.clocked_device import ClockedDevice
from circuitsim.core.iopin import IoPin
from circuitsim.core.simulator import SimState
from circuitsim.interfaces.pin_enums import PinMode
from circuitsim.utils.consts import ConstUtils, period_from_freq

if TYPE_CHECKING:
    from circuitsim.core.epin import EPin
    from circuitsim.core.simulator import Simulator


class ClockSource(ClockedDevice):
    """Toggles its output every half period while running."""

    def __init__(
        self,
        element_id: str,
        sim: "Simulator",
        freq_hz: float = 1000.0,
        running: bool = True,
    ):
        super().__init__(element_id, sim, period=period_from_freq(freq_hz))
        self.out = IoPin(f"{element_id}-out", sim, owner=self, mode=PinMode.OUTPUT)
        self._enabled = running
        self._state = False

    @property
    def pins(self) -> list["EPin"]:
        return [self.out]

    @property
    def freq(self) -> float:
        return ConstUtils.PS_PER_SECOND / self.period

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        """Start or stop the wave; stopping leaves the output low."""
        self._enabled = enabled
        if self.sim.state != SimState.RUNNING:
            return
        if enabled:
            self.start_clocking(self.period // 2)
        else:
            self.stop_clocking()
            self._state = False
            self.out.set_out_state(False)

    def initialize(self) -> None:
        super().initialize()
        self._state = False
        self.out.set_out_state(False)
        if self._enabled:
            self.start_clocking(self.period // 2)

    def run_event(self) -> None:
        self._state = not self._state
        self.out.set_out_state(self._state)
        self.sim.add_event(self.period // 2, self)
