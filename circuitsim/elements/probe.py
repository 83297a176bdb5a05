"""Frequency and amplitude measurement on a node."""

from __future__ import annotations

from typing import TYPE_CHECKING

from circuitsim.core.element import BaseElement
from circuitsim.core.epin import EPin
from circuitsim.utils.consts import ConstUtils

if TYPE_CHECKING:
    from circuitsim.core.simulator import Simulator


class SignalProbe(BaseElement):
    """Passive probe tracking the waveform of the node it is wired to.

    Voltage changes smaller than ``noise_filter`` are ignored. Maxima are
    counted on each min-to-rising transition; the frequency is refreshed
    once per step from the average time between maxima. Amplitude and
    period become available once two full cycles were seen. When no
    maximum shows up for two periods (or two frames, whichever is longer)
    the wave is considered lost and every reading drops to zero.
    """

    def __init__(self, element_id: str, sim: "Simulator", noise_filter: float = 0.1):
        super().__init__(element_id, sim)
        self.pin = EPin(f"{element_id}-in", owner=self)
        self.noise_filter = noise_filter
        self._reset_readings()

    @property
    def pins(self) -> list[EPin]:
        return [self.pin]

    @property
    def frequency(self) -> float:
        """Measured frequency in Hz, 0.0 when there is no wave."""
        return self._freq

    @property
    def amplitude(self) -> float:
        """Peak-to-peak amplitude in volts."""
        return self._ampli

    @property
    def period(self) -> int:
        """Last measured period in picoseconds."""
        return self._period

    def set_filter(self, noise_filter: float) -> None:
        self.noise_filter = noise_filter
        self._ris_edge = 0
        self._n_cycles = 0
        self._total_p = 0
        self._num_max = 0

    def _reset_readings(self) -> None:
        self._rising = False
        self._falling = False
        self._period = 0
        self._ris_edge = 0
        self._n_cycles = 0
        self._total_p = 0
        self._num_max = 0
        self._last_max = 0
        self._ampli = 0.0
        self._max_val = -1e12
        self._min_val = 1e12
        self._last_value = 0.0
        self._freq = 0.0

    def initialize(self) -> None:
        self._reset_readings()
        self.pin.change_callback(self)

    def update_step(self) -> None:
        sim_time = self.sim.circ_time

        if self._period > 10:
            if self._num_max > 1:
                avg_period = self._total_p / (self._num_max - 1)
                self._freq = (self._freq + ConstUtils.PS_PER_SECOND / avg_period) / 2
                self._total_p = 0
                self._num_max = 0

            lost = max(
                self._period * 2,
                self.sim.steps_per_frame * self.sim.step_size * 2,
            )
            if sim_time - self._last_max > lost:
                self._freq = 0.0
                self._period = 0
                self._ris_edge = 0
                self._n_cycles = 0
                self._total_p = 0
                self._num_max = 0
                self._last_max = 0
                self._ampli = 0.0
        else:
            self._freq = 0.0
            self._max_val = -1e12
            self._min_val = 1e12

    def volt_changed(self) -> None:
        sim_time = self.sim.circ_time
        data = self.pin.get_volt()

        self._max_val = max(self._max_val, data)
        self._min_val = min(self._min_val, data)

        delta = data - self._last_value

        if delta > 0:
            if delta > self.noise_filter:
                if self._falling and not self._rising:
                    # Minimum to rising: one more maximum
                    if self._num_max > 0:
                        self._total_p += sim_time - self._last_max
                    self._last_max = sim_time
                    self._num_max += 1
                    self._n_cycles += 1
                    self._falling = False
                self._rising = True
                self._last_value = data

            if self._n_cycles > 1:
                self._ampli = self._max_val - self._min_val
                mid = self._min_val + self._ampli / 2

                if data >= mid:
                    if self._num_max > 1:
                        self._max_val = -1e12
                        self._min_val = 1e12
                    self._n_cycles -= 1

                    if self._ris_edge > 0:
                        self._period = sim_time - self._ris_edge
                    self._ris_edge = sim_time

        elif delta < -self.noise_filter:
            if self._rising and not self._falling:
                self._rising = False
            self._falling = True
            self._last_value = data
