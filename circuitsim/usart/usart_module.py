"""USART peripheral wrapping a UART receiver and transmitter.

Registers (AVR naming):

  UDR    last byte read from the receiver or written to the transmitter
  UCSRA  status flags: RXC, TXC, UDRE, FE, DOR, UPE (write 1 to clear)
  UCSRB  control: RXEN, TXEN, RXB8, TXB8

Error reporting:
- FE / UPE describe the frame last returned by read_byte()
- DOR is set when a frame is lost because the receive FIFO was full; it
  stays set until cleared by writing 1 to it
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from circuitsim.core.iopin import IoPin
from circuitsim.core.peripheral import BasePeripheral
from circuitsim.core.register import FlagRegister, SimpleRegister
from circuitsim.interfaces.pin_enums import PinMode
from circuitsim.usart.consts import Parity, UsartConsts
from circuitsim.usart.uart_rx import UartRx
from circuitsim.usart.uart_tx import UartTx
from circuitsim.utils.consts import period_from_freq

if TYPE_CHECKING:
    from circuitsim.core.epin import EPin
    from circuitsim.core.simulator import Simulator

logger = logging.getLogger(__name__)


class UsartModule(BasePeripheral):
    """Full-duplex USART with its own RX and TX pins."""

    def __init__(
        self,
        name: str,
        sim: "Simulator",
        baud_rate: Optional[int] = None,
        data_bits: Optional[int] = None,
        parity: Optional[str] = None,
        stop_bits: Optional[int] = None,
        rx_enabled: bool = True,
        tx_enabled: bool = True,
    ):
        super().__init__(name, sim)
        cfg = sim.config.usart

        self.data_bits = data_bits if data_bits is not None else cfg.data_bits
        self.parity = Parity.from_name(parity if parity is not None else cfg.parity)
        self.stop_bits = stop_bits if stop_bits is not None else cfg.stop_bits
        self._baud_rate = baud_rate if baud_rate is not None else cfg.baud_rate
        self._rx_enabled = rx_enabled
        self._tx_enabled = tx_enabled
        self._rx_bit9 = False

        self.rx_pin = IoPin(f"{name}-rx", sim, owner=self, mode=PinMode.INPUT)
        self.tx_pin = IoPin(f"{name}-tx", sim, owner=self, mode=PinMode.OUTPUT)
        self.rx = UartRx(self, sim, f"{name}-uartrx", self.rx_pin)
        self.tx = UartTx(self, sim, f"{name}-uarttx", self.tx_pin)

        self._udr = SimpleRegister("UDR", width=9)
        self._ucsra = FlagRegister("UCSRA", reset_value=UsartConsts.UDRE)
        self._ucsrb = SimpleRegister("UCSRB")
        for reg in (self._udr, self._ucsra, self._ucsrb):
            self.registers.add(reg)

        self.set_baud_rate(self._baud_rate)

    @property
    def pins(self) -> list["EPin"]:
        return [self.rx_pin, self.tx_pin]

    @property
    def status(self) -> FlagRegister:
        return self._ucsra

    @property
    def baud_rate(self) -> int:
        return self._baud_rate

    def set_baud_rate(self, baud_rate: int) -> None:
        self._baud_rate = baud_rate
        period = period_from_freq(baud_rate)
        self.rx.set_period(period)
        self.tx.set_period(period)

    @property
    def bit_period(self) -> int:
        return self.rx.period

    @property
    def frame_time(self) -> int:
        """Time one frame takes on the wire, in picoseconds."""
        return self.rx.period * self.rx.frame_size

    # ==========================================================
    # Lifecycle
    # ==========================================================

    def initialize(self) -> None:
        super().initialize()
        self._rx_bit9 = False
        self.rx.initialize()
        self.tx.initialize()
        self.enable_rx(self._rx_enabled)
        self.enable_tx(self._tx_enabled)

    def enable_rx(self, enabled: bool) -> None:
        self._rx_enabled = enabled
        self.rx.enable(enabled)
        self._set_control(UsartConsts.RXEN, enabled)

    def enable_tx(self, enabled: bool) -> None:
        self._tx_enabled = enabled
        self.tx.enable(enabled)
        self._set_control(UsartConsts.TXEN, enabled)

    def set_multiprocessor(self, enabled: bool) -> None:
        """Ignore data frames (bit 8 clear) until disabled again."""
        self.rx.set_ignore_data(enabled)

    def _set_control(self, bits: int, on: bool) -> None:
        value = self._ucsrb.value
        self._ucsrb.load(value | bits if on else value & ~bits)

    # ==========================================================
    # Software side
    # ==========================================================

    @property
    def data_available(self) -> bool:
        return self.status.test(UsartConsts.RXC)

    def read_byte(self) -> int:
        """Pop the oldest received byte and latch its error flags."""
        data = self.rx.get_data()
        self._udr.load(data)
        return data

    def write_byte(self, data: int) -> bool:
        """Hand data to the transmitter; False when it cannot take it."""
        if self.data_bits == 9:
            self._set_control(UsartConsts.TXB8, bool(data & 0x100))
        self._udr.load(data)

        accepted = self.tx.process_data(data)
        if accepted:
            self.status.clear_bits(UsartConsts.TXC)
            self.clear_interrupt(UsartConsts.TX_VECTOR)
            self.status.assign(UsartConsts.UDRE, self.tx.buffer_empty)
            if not self.tx.buffer_empty:
                self.clear_interrupt(UsartConsts.UDRE_VECTOR)
        return accepted

    def inject(self, data: int) -> None:
        """Feed data to the receiver without a wire (software mode)."""
        self.rx.queue_data(data)

    @property
    def rx_bit9(self) -> bool:
        return self._rx_bit9

    # ==========================================================
    # Callbacks from the receiver / transmitter
    # ==========================================================

    def byte_received(self, data: int) -> None:
        self.status.set_bits(UsartConsts.RXC)
        self.emit_interrupt(UsartConsts.RX_VECTOR)

    def rx_fifo_empty(self) -> None:
        self.status.clear_bits(UsartConsts.RXC)
        self.clear_interrupt(UsartConsts.RX_VECTOR)

    def overrun_error(self) -> None:
        logger.warning(f"{self.name}: receive overrun, frame dropped")
        self.status.set_bits(UsartConsts.DOR)

    def set_rx_errors(self, parity: bool, frame: bool) -> None:
        self.status.assign(UsartConsts.UPE, parity)
        self.status.assign(UsartConsts.FE, frame)
        if parity or frame:
            logger.debug(f"{self.name}: rx error (parity={parity}, frame={frame})")

    def set_bit9_rx(self, bit: bool) -> None:
        self._rx_bit9 = bit
        self._set_control(UsartConsts.RXB8, bit)

    def tx_buffer_free(self) -> None:
        self.status.set_bits(UsartConsts.UDRE)
        self.emit_interrupt(UsartConsts.UDRE_VECTOR)

    def frame_sent(self, data: int) -> None:
        self.status.set_bits(UsartConsts.TXC | UsartConsts.UDRE)
        self.emit_interrupt(UsartConsts.TX_VECTOR)

    @property
    def parity_error(self) -> bool:
        return self.status.test(UsartConsts.UPE)

    @property
    def frame_error(self) -> bool:
        return self.status.test(UsartConsts.FE)

    @property
    def overrun(self) -> bool:
        return self.status.test(UsartConsts.DOR)
