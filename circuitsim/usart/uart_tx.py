"""UART transmitter state machine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from circuitsim.interfaces.pin_enums import PinMode
from circuitsim.usart.consts import UartState
from circuitsim.usart.uart_tr import UartTR

if TYPE_CHECKING:
    from circuitsim.core.iopin import IoPin
    from circuitsim.core.simulator import Simulator
    from circuitsim.usart.usart_module import UsartModule


class UartTx(UartTR):
    """Shifts frames onto its pin, one bit per period, LSB first.

    One byte can wait in the transmit buffer while another is on the wire.
    The line idles high.
    """

    def __init__(self, usart: "UsartModule", sim: "Simulator", name: str, pin: "IoPin"):
        super().__init__(usart, sim, name, pin)
        self._buffer: Optional[int] = None
        self._data = 0

    @property
    def buffer_empty(self) -> bool:
        return self._buffer is None

    @property
    def busy(self) -> bool:
        return self._state == UartState.TRANSMIT

    def initialize(self) -> None:
        super().initialize()
        self._buffer = None
        self._data = 0

    def enable(self, enabled: bool) -> None:
        if enabled == self._enabled:
            return
        self._enabled = enabled
        self.sim.cancel_events(self)
        self._buffer = None

        if enabled:
            self.pin.control_pin(True, True)
            self.pin.set_pin_mode(PinMode.OUTPUT)
            self.pin.set_out_state(True)
            self._state = UartState.IDLE
        else:
            self._state = UartState.STOPPED
            self.pin.control_pin(False, False)

    def process_data(self, data: int) -> bool:
        """Send data now, or buffer it when a frame is on the wire.

        Returns False when the transmitter is off or the buffer is taken.
        """
        if not self._enabled:
            return False

        if self._state == UartState.TRANSMIT:
            if self._buffer is not None:
                return False
            self._buffer = data & self.data_mask
            return True

        self._start_frame(data & self.data_mask)
        return True

    def _start_frame(self, data: int) -> None:
        self._data = data
        # Start bit (low) in bit 0
        self._frame = self.build_frame(data) << 1
        self._current_bit = 0
        self._state = UartState.TRANSMIT

        self._send_bit()
        self.sim.add_event(self.period, self)

    def _send_bit(self) -> None:
        self.pin.set_out_state(bool(self._frame & (1 << self._current_bit)))

    def run_event(self) -> None:
        if self._state != UartState.TRANSMIT:
            return

        self._current_bit += 1
        if self._current_bit < self.frame_size:
            self._send_bit()
            self.sim.add_event(self.period, self)
            return

        self._state = UartState.IDLE
        self._frame = 0

        if self._buffer is not None:
            data, self._buffer = self._buffer, None
            self._start_frame(data)
            self.usart.tx_buffer_free()
        else:
            self.usart.frame_sent(self._data)
