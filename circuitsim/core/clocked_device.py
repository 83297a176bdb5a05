"""Base class for elements that run on a clock."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from circuitsim.core.element import BaseElement
from circuitsim.interfaces.pin_enums import ClockState
from circuitsim.utils.consts import period_from_freq

if TYPE_CHECKING:
    from circuitsim.core.iopin import IoPin
    from circuitsim.core.simulator import Simulator


class ClockedDevice(BaseElement):
    """Periodic element that reschedules itself through the event queue.

    The clock edge state is derived from a clock pin (when one is set) by
    comparing its logic level with the level seen on the previous
    update_clock() call.
    """

    def __init__(self, element_id: str, sim: "Simulator", period: int = 0):
        super().__init__(element_id, sim)
        self._period = int(period)
        self._clock_pin: Optional[IoPin] = None
        self._clock = False
        self._clk_state = ClockState.LOW
        self._running = False

    @property
    def period(self) -> int:
        """Clock period in picoseconds."""
        return self._period

    def set_period(self, period: int) -> None:
        if period <= 0:
            raise ValueError("period must be positive")
        self._period = int(period)

    def set_freq(self, freq_hz: float) -> None:
        self._period = period_from_freq(freq_hz)

    @property
    def clock_pin(self) -> Optional["IoPin"]:
        return self._clock_pin

    def set_clock_pin(self, pin: Optional["IoPin"]) -> None:
        self._clock_pin = pin

    @property
    def clk_state(self) -> ClockState:
        return self._clk_state

    @property
    def running(self) -> bool:
        return self._running

    def initialize(self) -> None:
        super().initialize()
        self._clock = False
        self._clk_state = ClockState.LOW
        self._running = False

    def update_clock(self) -> ClockState:
        """Sample the clock pin and classify the edge since the last sample."""
        clk_high = self._clock_pin.get_inp_state() if self._clock_pin is not None else False

        if clk_high and not self._clock:
            self._clk_state = ClockState.RISING
        elif clk_high and self._clock:
            self._clk_state = ClockState.HIGH
        elif not clk_high and self._clock:
            self._clk_state = ClockState.FALLING
        else:
            self._clk_state = ClockState.LOW

        self._clock = clk_high
        return self._clk_state

    def start_clocking(self, delay: Optional[int] = None) -> None:
        """Drop pending events and schedule the first tick after delay."""
        if self._period <= 0:
            raise ValueError(f"{self.element_id}: clock period not set")
        self.sim.cancel_events(self)
        self._running = True
        self.sim.add_event(self._period if delay is None else delay, self)

    def stop_clocking(self) -> None:
        self._running = False
        self.sim.cancel_events(self)
