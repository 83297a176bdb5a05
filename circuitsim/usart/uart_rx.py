"""UART receiver state machine."""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from circuitsim.usart.consts import UartState, UsartConsts
from circuitsim.usart.uart_tr import UartTR

if TYPE_CHECKING:
    from circuitsim.core.iopin import IoPin
    from circuitsim.core.simulator import Simulator
    from circuitsim.usart.usart_module import UsartModule

logger = logging.getLogger(__name__)


class UartRx(UartTR):
    """Receives frames from its pin (hardware mode) or from queue_data().

    Hardware mode: a falling edge after the line was seen high marks a start
    bit. The line is sampled half a bit later and then once per bit period
    until frame_size samples were taken; the sample of the start bit is
    shifted out and the remaining bits form the frame.

    Software mode: frames built with build_frame() are delivered one frame
    time apart, through the same decoding path.

    Decoded frames go into a 2-deep FIFO. A frame arriving while the FIFO is
    full is dropped and reported as overrun.
    """

    def __init__(self, usart: "UsartModule", sim: "Simulator", name: str, pin: "IoPin"):
        super().__init__(usart, sim, name, pin)
        self._fifo: deque[int] = deque()
        self._in_buffer: deque[int] = deque()
        self._run_hardware = True
        self._start_high = False
        self._ignore_data = False

    @property
    def run_hardware(self) -> bool:
        return self._run_hardware

    @property
    def ignore_data(self) -> bool:
        return self._ignore_data

    def set_ignore_data(self, ignore: bool) -> None:
        """In 9-bit mode, drop frames whose bit 8 is clear (address filtering)."""
        self._ignore_data = ignore

    @property
    def fifo_len(self) -> int:
        return len(self._fifo)

    def initialize(self) -> None:
        super().initialize()
        self._fifo.clear()
        self._in_buffer.clear()
        self._run_hardware = True
        self._start_high = False
        self.pin.change_callback(self, False)

    def enable(self, enabled: bool) -> None:
        if enabled == self._enabled:
            return
        self._enabled = enabled

        self._run_hardware = self.pin.is_connected
        self._in_buffer.clear()
        self.sim.cancel_events(self)
        self.pin.change_callback(self, False)

        self._state = UartState.STOPPED
        self._frame = 0
        if enabled:
            self._process_data()

    def _process_data(self) -> None:
        self._current_bit = 0
        self._fifo.clear()
        self._start_high = False

        if self._run_hardware:
            self._start_high = self.pin.get_inp_state()
            self.pin.change_callback(self)
        else:
            self._state = UartState.RECEIVE
            self._schedule(self.period * self.frame_size)

    def _schedule(self, delay: int) -> None:
        if self.period:
            self.sim.add_event(delay, self)

    def volt_changed(self) -> None:
        if not self._enabled:
            return

        bit = self.pin.get_inp_state()

        if self._state == UartState.RXEND:
            self._rx_end()

        if not self._start_high and bit:
            self._start_high = True
        elif self._start_high and not bit:
            self._state = UartState.RECEIVE
            self.pin.change_callback(self, False)
            self._schedule(self.period // 2)

    def run_event(self) -> None:
        if self._state == UartState.STOPPED:
            return

        if self._state == UartState.RECEIVE:
            if self._run_hardware:
                self._read_bit()
                if self._state == UartState.RXEND:
                    self._rx_end()
                else:
                    self._schedule(self.period)
            else:
                if self._in_buffer:
                    self.byte_received(self._in_buffer.popleft())
                self._schedule(self.period * self.frame_size)
        elif self._state == UartState.RXEND:
            self._rx_end()

    def _read_bit(self) -> None:
        if self.pin.get_inp_state():
            self._frame |= 1 << self._current_bit

        self._current_bit += 1
        if self._current_bit == self.frame_size:
            self.pin.change_callback(self)
            self._state = UartState.RXEND

    def _rx_end(self) -> None:
        frame = self._frame >> 1
        self._current_bit = 0
        self._frame = 0

        if self._run_hardware:
            self._state = UartState.STOPPED
            self.pin.change_callback(self)
        else:
            self._state = UartState.RECEIVE

        self.sim.cancel_events(self)
        self.byte_received(frame)

    def byte_received(self, frame: int) -> None:
        """Decode a frame (start bit removed) and push it into the FIFO."""
        if len(self._fifo) >= UsartConsts.FIFO_DEPTH:
            self.usart.overrun_error()
            return

        data_bits = self.data_bits
        if self.parity_bits:
            parity_bit = bool(frame & (1 << data_bits))
            if self.get_parity(frame) != parity_bit:
                frame |= UsartConsts.PARITY_ERROR

        if not frame & (1 << (data_bits + self.parity_bits)):
            frame |= UsartConsts.FRAME_ERROR

        if data_bits == 9 and self._ignore_data and not frame & (1 << 8):
            return

        self._fifo.append(frame)
        self.usart.byte_received(frame & self.data_mask)

    def get_data(self) -> int:
        """Pop the oldest frame; its error tags go to the module status."""
        if not self._fifo:
            return 0

        frame = self._fifo.popleft()
        if self.data_bits == 9:
            self.usart.set_bit9_rx(bool(frame & (1 << 8)))
        self.usart.set_rx_errors(
            parity=bool(frame & UsartConsts.PARITY_ERROR),
            frame=bool(frame & UsartConsts.FRAME_ERROR),
        )
        if not self._fifo:
            self.usart.rx_fifo_empty()
        return frame & self.data_mask

    def queue_data(self, data: int) -> None:
        """Inject data as if it arrived on the wire (switches to software mode)."""
        if not self._enabled:
            return

        if self._run_hardware:
            self._run_hardware = False
            self.pin.change_callback(self, False)
            self.sim.cancel_events(self)
            self._schedule(self.period * (self.frame_size + 2))
            self._state = UartState.RECEIVE

        if len(self._in_buffer) > UsartConsts.IN_BUFFER_LIMIT:
            logger.debug(f"{self.element_id}: input buffer full, dropping 0x{data:02X}")
            return
        self._in_buffer.append(self.build_frame(data))
