"""Shared part of the UART receiver and transmitter."""

from __future__ import annotations

from typing import TYPE_CHECKING

from circuitsim.core.clocked_device import ClockedDevice
from circuitsim.usart.consts import Parity, UartState

if TYPE_CHECKING:
    from circuitsim.core.iopin import IoPin
    from circuitsim.core.simulator import Simulator
    from circuitsim.usart.usart_module import UsartModule


class UartTR(ClockedDevice):
    """One direction of a UART: a pin, a bit period and the frame format.

    Frame format comes from the owning UsartModule, so receiver and
    transmitter always agree on it. A frame, as handled here, excludes the
    start bit: data bits LSB first, the optional parity bit, then the stop
    bits.
    """

    def __init__(self, usart: "UsartModule", sim: "Simulator", name: str, pin: "IoPin"):
        super().__init__(name, sim)
        self.usart = usart
        self.pin = pin
        self._state = UartState.STOPPED
        self._enabled = False
        self._frame = 0
        self._current_bit = 0

    @property
    def state(self) -> UartState:
        return self._state

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def data_bits(self) -> int:
        return self.usart.data_bits

    @property
    def parity_bits(self) -> int:
        return 0 if self.usart.parity == Parity.NONE else 1

    @property
    def stop_bits(self) -> int:
        return self.usart.stop_bits

    @property
    def data_mask(self) -> int:
        return (1 << self.data_bits) - 1

    @property
    def frame_size(self) -> int:
        """Bits on the wire per frame, start bit included."""
        return 1 + self.data_bits + self.parity_bits + self.stop_bits

    def initialize(self) -> None:
        super().initialize()
        self._state = UartState.STOPPED
        self._enabled = False
        self._frame = 0
        self._current_bit = 0

    def get_parity(self, data: int) -> bool:
        """Parity bit for data under the configured mode (even or odd)."""
        parity = bin(data & self.data_mask).count("1") & 1 == 1
        if self.usart.parity == Parity.ODD:
            parity = not parity
        return parity

    def build_frame(self, data: int) -> int:
        """Frame bits for data as they follow the start bit on the wire."""
        frame = data & self.data_mask
        if self.parity_bits and self.get_parity(data):
            frame |= 1 << self.data_bits

        stop_shift = self.data_bits + self.parity_bits
        for i in range(self.stop_bits):
            frame |= 1 << (stop_shift + i)
        return frame
