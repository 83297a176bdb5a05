"""TWI (I2C) master/slave peripheral.

Both lines are open-collector pins: writing True releases the line, False
pulls it low. The bus needs pull-ups (a resistor to a rail, or the pins'
own pull-up admittance) to read high when released.

Master: self-clocked. An event fires every half SCL cycle; clock edges are
produced by keep_clocking(), which toggles SCL a quarter cycle later. Data
is changed while SCL is low and sampled while SCL is high.

Slave: driven by volt_changed() on SDA/SCL. SDA falling while SCL is high
is a START, SDA rising while SCL is high is a STOP. SCL rising samples
SDA, SCL falling updates SDA through schedule_sda(), a quarter half-cycle
later, so the slave never changes SDA in the same instant SCL falls.

Every status change loads TWSR, sets TWINT and raises the TWI interrupt.
Bus errors never raise; the state machine falls back to STOP or IDLE.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from circuitsim.core.clocked_device import ClockedDevice
from circuitsim.core.iopin import IoPin
from circuitsim.core.peripheral import BasePeripheral
from circuitsim.core.register import ReadOnlyRegister, SimpleRegister
from circuitsim.interfaces.pin_enums import ClockState, PinMode
from circuitsim.twi.consts import I2CState, TwiConsts, TwiMode, TwiState
from circuitsim.utils.consts import ConstUtils

if TYPE_CHECKING:
    from circuitsim.core.epin import EPin
    from circuitsim.core.simulator import Simulator

logger = logging.getLogger(__name__)


class TwiModule(ClockedDevice, BasePeripheral):
    """Two-wire interface with AVR-style status codes."""

    def __init__(
        self,
        name: str,
        sim: "Simulator",
        mode: TwiMode = TwiMode.OFF,
        freq_khz: Optional[float] = None,
        address: Optional[int] = None,
        general_call: Optional[bool] = None,
    ):
        super().__init__(name, sim)
        cfg = sim.config.twi

        self.sda = IoPin(f"{name}-sda", sim, owner=self, mode=PinMode.OPEN_COLLECTOR)
        self.scl = IoPin(f"{name}-scl", sim, owner=self, mode=PinMode.OPEN_COLLECTOR)
        self.set_clock_pin(self.scl)

        self._twdr = SimpleRegister("TWDR")
        self._twsr = ReadOnlyRegister("TWSR", reset_value=TwiState.NO_STATE)
        self._twar = SimpleRegister("TWAR")
        self._twcr = SimpleRegister("TWCR")
        for reg in (self._twdr, self._twsr, self._twar, self._twcr):
            self.registers.add(reg)

        self._start_mode = mode
        self._address = 0
        self._gen_call_enabled = False
        self.set_freq_khz(freq_khz if freq_khz is not None else cfg.freq_khz)
        self.set_address(address if address is not None else cfg.address)
        self.set_general_call(general_call if general_call is not None else cfg.general_call)

        self._reset_state()

    def _reset_state(self) -> None:
        self._mode = TwiMode.OFF
        self._twi_state = TwiState.NO_STATE
        self._i2c_state = I2CState.IDLE
        self._last_state = I2CState.IDLE
        self._next_state = TwiState.NO_STATE

        self._schedule_sda = False
        self._next_sda = True
        self._schedule_scl = False
        self._next_scl = True
        self._toggle_scl = False

        self._sda_state = True
        self._last_sda = True
        self._send_ack = True
        self._addr_match = False
        self._is_addr = False
        self._write = False
        self._bus_owned = False

        self._bit_ptr = 0
        self._rx_reg = 0
        self._tx_reg = 0

    @property
    def pins(self) -> list["EPin"]:
        return [self.sda, self.scl]

    # ==========================================================
    # Configuration
    # ==========================================================

    @property
    def mode(self) -> TwiMode:
        return self._mode

    @property
    def i2c_state(self) -> I2CState:
        return self._i2c_state

    @property
    def twi_state(self) -> TwiState:
        return self._twi_state

    @property
    def address(self) -> int:
        return self._address

    def set_address(self, address: int) -> None:
        self._address = address & 0x7F
        self._update_twar()

    @property
    def general_call(self) -> bool:
        return self._gen_call_enabled

    def set_general_call(self, enabled: bool) -> None:
        self._gen_call_enabled = enabled
        self._update_twar()

    def _update_twar(self) -> None:
        self._twar.load((self._address << 1) | int(self._gen_call_enabled))

    @property
    def freq_khz(self) -> float:
        return self._freq_khz

    def set_freq_khz(self, freq_khz: float) -> None:
        """Set the SCL frequency; the event period is half an SCL cycle."""
        if freq_khz <= 0:
            raise ValueError("TWI frequency must be positive")
        self._freq_khz = freq_khz
        self.set_period(round(1e12 / (freq_khz * 1e3) / 2))

    @property
    def data(self) -> int:
        """TWDR: next byte to send, or last byte received."""
        return self._twdr.value

    @data.setter
    def data(self, value: int) -> None:
        self._twdr.load(value)

    @property
    def twint(self) -> bool:
        return bool(self._twcr.value & TwiConsts.TWINT)

    def clear_twint(self) -> None:
        self._twcr.load(self._twcr.value & ~TwiConsts.TWINT)
        self.clear_interrupt()

    # ==========================================================
    # Lifecycle
    # ==========================================================

    def initialize(self) -> None:
        super().initialize()
        self._reset_state()
        self._update_twar()
        self.set_mode(self._start_mode)

    def stamp(self) -> None:
        """Pins stamp themselves."""

    def set_mode(self, mode: TwiMode) -> None:
        """Switch role; pending events of the previous role are dropped."""
        self.sim.cancel_events(self)
        self._start_mode = mode

        if mode == TwiMode.MASTER:
            self.sim.add_event(self.period, self)

        self.scl.change_callback(self, mode == TwiMode.SLAVE)
        self.sda.change_callback(self, mode == TwiMode.SLAVE)

        # Release both lines; SCL a bit later to avoid a false STOP
        self.schedule_scl(True)
        self.set_sda(True)

        self._mode = mode
        self._i2c_state = I2CState.IDLE
        self._schedule_sda = False
        self._toggle_scl = False
        self._bus_owned = False

        self._twcr.load(TwiConsts.TWEN if mode != TwiMode.OFF else 0)
        if mode == TwiMode.SLAVE:
            self.update_clock()
            self._last_sda = self.sda.get_inp_state()

    # ==========================================================
    # Pin helpers
    # ==========================================================

    def set_scl(self, state: bool) -> None:
        self.scl.set_out_state(state)

    def set_sda(self, state: bool) -> None:
        self.sda.set_out_state(state)

    def _get_sda_state(self) -> None:
        self._sda_state = self.sda.get_inp_state()

    def schedule_sda(self, state: bool) -> None:
        self._schedule_sda = True
        self._next_sda = state
        self.sim.add_event(self.period // 4, self)

    def schedule_scl(self, state: bool) -> None:
        self._schedule_scl = True
        self._next_scl = state
        self.sim.add_event(self.period // 4, self)

    def keep_clocking(self) -> None:
        self._toggle_scl = True
        self.sim.add_event(self.period // 2, self)

    # ==========================================================
    # Master state machine
    # ==========================================================

    def run_event(self) -> None:
        if self._schedule_sda:
            self.set_sda(self._next_sda)
            self._schedule_sda = False
            return
        if self._schedule_scl:
            self.set_scl(self._next_scl)
            self._schedule_scl = False
            return
        if self._mode != TwiMode.MASTER:
            return

        clk_state = self.update_clock()
        clk_low = clk_state in (ClockState.LOW, ClockState.FALLING)

        if self._toggle_scl:
            self.set_scl(clk_low)
            self._toggle_scl = False
            return

        self.sim.add_event(self.period, self)
        if self._i2c_state == I2CState.IDLE:
            return

        self._get_sda_state()
        sda = self._sda_state
        state = self._i2c_state

        if state == I2CState.STOP:
            if sda and clk_low:
                self.set_sda(False)
            elif not sda and clk_low:
                self.keep_clocking()
            elif not sda and not clk_low:
                self.set_sda(True)
            else:
                self._bus_owned = False
                self.set_twi_state(TwiState.NO_STATE)
                self._i2c_state = I2CState.IDLE

        elif state == I2CState.START:
            if clk_low:
                # Repeated start: release SDA, then raise SCL
                if not sda:
                    self.set_sda(True)
                else:
                    self.keep_clocking()
            elif sda:
                self.set_sda(False)
            else:
                self.set_scl(False)
                self.set_twi_state(TwiState.REP_START if self._bus_owned else TwiState.START)
                self._bus_owned = True
                self._i2c_state = I2CState.IDLE

        elif state == I2CState.READ:
            if not clk_low:
                self._read_bit()
                if self._bit_ptr == 8:
                    self.read_byte()
            self.keep_clocking()

        elif state == I2CState.WRITE:
            if clk_low:
                self._write_bit()
            self.keep_clocking()

        elif state == I2CState.ACK:
            if clk_low:
                if self._send_ack:
                    self.set_sda(False)
                self._i2c_state = I2CState.ENDACK
            self.keep_clocking()

        elif state == I2CState.ENDACK:
            if clk_low:
                self.set_sda(True)
                self.set_twi_state(
                    TwiState.MRX_DATA_ACK if self._send_ack else TwiState.MRX_DATA_NACK
                )
                self._i2c_state = I2CState.IDLE
            else:
                self.keep_clocking()

        elif state == I2CState.READACK:
            if clk_low:
                self.set_twi_state(self._next_state)
                self._i2c_state = I2CState.IDLE
            else:
                if self._is_addr:
                    if self._write:
                        self._next_state = (
                            TwiState.MTX_ADR_NACK if sda else TwiState.MTX_ADR_ACK
                        )
                    else:
                        self._next_state = (
                            TwiState.MRX_ADR_NACK if sda else TwiState.MRX_ADR_ACK
                        )
                else:
                    self._next_state = TwiState.MTX_DATA_NACK if sda else TwiState.MTX_DATA_ACK
                self.keep_clocking()

    # ==========================================================
    # Slave state machine
    # ==========================================================

    def volt_changed(self) -> None:
        if self._mode != TwiMode.SLAVE:
            return

        clk_state = self.update_clock()
        self._get_sda_state()
        sda = self._sda_state

        if clk_state == ClockState.HIGH and self._i2c_state != I2CState.ACK:
            if self._last_sda and not sda:
                self._bit_ptr = 0
                self._rx_reg = 0
                self._i2c_state = I2CState.START
            elif not self._last_sda and sda:
                self.i2c_stop()

        elif clk_state == ClockState.RISING:
            if self._i2c_state == I2CState.START:
                self._read_bit()
                if self._bit_ptr > TwiConsts.ADDR_BITS:
                    self._address_received()

            elif self._i2c_state == I2CState.WRITE:
                self._read_bit()
                if self._bit_ptr == 8:
                    if self._addr_match:
                        self._next_state = (
                            TwiState.SRX_ADR_DATA_ACK
                            if self._send_ack
                            else TwiState.SRX_ADR_DATA_NACK
                        )
                    else:
                        self._next_state = (
                            TwiState.SRX_GEN_DATA_ACK
                            if self._send_ack
                            else TwiState.SRX_GEN_DATA_NACK
                        )
                    self.read_byte()

            elif self._i2c_state == I2CState.READACK:
                self.set_twi_state(TwiState.STX_DATA_NACK if sda else TwiState.STX_DATA_ACK)
                if not sda:
                    # Master acknowledged: keep sending
                    self._i2c_state = self._last_state
                    self.write_byte()
                else:
                    self._i2c_state = I2CState.IDLE

        elif clk_state == ClockState.FALLING:
            if self._i2c_state == I2CState.ACK:
                self.schedule_sda(not self._send_ack)
                self._i2c_state = I2CState.ENDACK

            elif self._i2c_state == I2CState.ENDACK:
                self.set_twi_state(self._next_state)
                self._i2c_state = self._last_state

                release_sda = True
                if self._i2c_state == I2CState.READ:
                    release_sda = bool(self._tx_reg >> self._bit_ptr & 1)
                self.schedule_sda(release_sda)
                self._rx_reg = 0

            if self._i2c_state == I2CState.READ:
                self._write_bit()

        self._last_sda = sda

    def _address_received(self) -> None:
        read = bool(self._rx_reg & 1)
        self._rx_reg >>= 1

        self._addr_match = self._rx_reg == self._address
        gen_call = self._gen_call_enabled and self._rx_reg == 0

        if not (self._addr_match or gen_call):
            logger.debug(f"{self.name}: address 0x{self._rx_reg:02X} not for us")
            self._i2c_state = I2CState.STOP
            self._rx_reg = 0
            return

        self._send_ack = True
        if read:
            self._next_state = TwiState.STX_ADR_ACK
            self._i2c_state = I2CState.READ
            self.write_byte()
        else:
            self._next_state = (
                TwiState.SRX_ADR_ACK if self._addr_match else TwiState.SRX_GEN_ACK
            )
            self._i2c_state = I2CState.WRITE
            self._bit_ptr = 0
        self._ack()

    def i2c_stop(self) -> None:
        """STOP seen on the bus while acting as slave."""
        if self._i2c_state == I2CState.WRITE:
            self.set_twi_state(TwiState.SRX_STOP_RESTART)
        self._i2c_state = I2CState.STOP

    # ==========================================================
    # Bit and byte helpers
    # ==========================================================

    def _read_bit(self) -> None:
        if self._bit_ptr > 0:
            self._rx_reg <<= 1
        self._rx_reg += int(self._sda_state)
        self._bit_ptr += 1

    def _write_bit(self) -> None:
        if self._bit_ptr < 0:
            self._wait_ack()
            return

        bit = bool(self._tx_reg >> self._bit_ptr & 1)
        self._bit_ptr -= 1

        if self._mode == TwiMode.MASTER:
            self.set_sda(bit)
        else:
            self.schedule_sda(bit)

    def write_byte(self) -> None:
        """Load the next byte to send from TWDR."""
        self._tx_reg = self._twdr.value
        self._bit_ptr = 7

    def read_byte(self) -> None:
        """A byte was shifted in: latch it into TWDR and acknowledge."""
        self._twdr.load(self._rx_reg & ConstUtils.MASK_8_BITS)
        self._bit_ptr = 0
        self._ack()

    def _wait_ack(self) -> None:
        self.set_sda(True)
        self._last_state = self._i2c_state
        self._i2c_state = I2CState.READACK

    def _ack(self) -> None:
        self._last_state = self._i2c_state
        self._i2c_state = I2CState.ACK

    def set_twi_state(self, state: TwiState) -> None:
        self._twi_state = state
        self._twsr.load(state)
        self._twcr.load(self._twcr.value | TwiConsts.TWINT)
        self.emit_interrupt(TwiConsts.TWI_VECTOR)

    # ==========================================================
    # Master commands
    # ==========================================================

    def master_start(self) -> None:
        """Send a START (or repeated START) condition."""
        self.clear_twint()
        self._i2c_state = I2CState.START

    def master_stop(self) -> None:
        """Send a STOP condition and release the bus."""
        self.clear_twint()
        self._i2c_state = I2CState.STOP

    def master_write(self, data: int, is_addr: bool = False, write: bool = True) -> None:
        """Send data; for an address byte, write tells the R/W direction."""
        self.clear_twint()
        self._is_addr = is_addr
        self._write = write

        self._i2c_state = I2CState.WRITE
        self._twdr.load(data)
        self.write_byte()

    def master_read(self, ack: bool = True) -> None:
        """Receive one byte, answering ACK (more wanted) or NACK (last byte)."""
        self.clear_twint()
        self._send_ack = ack

        self.set_sda(True)
        self._bit_ptr = 0
        self._rx_reg = 0
        self._i2c_state = I2CState.READ
