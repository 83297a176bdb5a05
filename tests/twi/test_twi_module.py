import pytest

from circuitsim.core.interrupt_controller import InterruptController
from circuitsim.twi.consts import I2CState, TwiConsts, TwiMode, TwiState
from circuitsim.twi.twi_module import TwiModule

SLAVE_ADDR = 0x50


class DummyCpu:
    def __init__(self):
        self.events = []

    def handle_interrupt(self, event) -> None:
        self.events.append(event)


def _addr_byte(address, read=False):
    return (address << 1) | int(read)


class TestConfiguration:
    def test_period_is_half_scl_cycle(self, sim):
        twi = TwiModule("twi0", sim)
        assert twi.freq_khz == 100.0
        assert twi.period == 5_000_000

        twi.set_freq_khz(400)
        assert twi.period == 1_250_000

        with pytest.raises(ValueError):
            twi.set_freq_khz(0)

    def test_address_register(self, sim):
        twi = TwiModule("twi0", sim, address=SLAVE_ADDR, general_call=True)
        assert twi.address == SLAVE_ADDR
        assert twi.registers.read("TWAR") == 0xA1

        twi.set_general_call(False)
        assert twi.registers.read("TWAR") == 0xA0

    def test_status_register_is_read_only(self, sim):
        twi = TwiModule("twi0", sim)
        twi.registers.write("TWSR", 0x00)
        assert twi.registers.read("TWSR") == TwiState.NO_STATE

    def test_mode_applied_on_start(self, sim, circuit):
        twi = TwiModule("twi0", sim, mode=TwiMode.SLAVE)
        circuit.add(twi)
        circuit.build()
        assert twi.mode == TwiMode.OFF

        sim.start()
        assert twi.mode == TwiMode.SLAVE
        assert twi.registers.read("TWCR") == TwiConsts.TWEN
        assert twi.i2c_state == I2CState.IDLE


def test_idle_bus_is_released(i2c_bus):
    assert i2c_bus.master.sda.get_inp_state()
    assert i2c_bus.master.scl.get_inp_state()
    assert i2c_bus.slave.sda.get_inp_state()
    assert not i2c_bus.master.twint


def test_start_condition(i2c_bus):
    assert i2c_bus.start() == TwiState.START
    assert i2c_bus.master.twint
    assert i2c_bus.master.registers.read("TWSR") == TwiState.START
    assert i2c_bus.slave.i2c_state == I2CState.START


def test_address_write_is_acknowledged(i2c_bus):
    i2c_bus.start()

    assert i2c_bus.write(_addr_byte(SLAVE_ADDR), is_addr=True) == TwiState.MTX_ADR_ACK
    assert i2c_bus.slave.twi_state == TwiState.SRX_ADR_ACK
    assert i2c_bus.slave.twint


def test_wrong_address_is_not_acknowledged(make_i2c_bus):
    bus = make_i2c_bus(slave_address=0x51)
    bus.start()

    assert bus.write(_addr_byte(SLAVE_ADDR), is_addr=True) == TwiState.MTX_ADR_NACK
    assert bus.slave.i2c_state == I2CState.STOP
    assert bus.slave.twi_state == TwiState.NO_STATE


def test_data_write(i2c_bus):
    i2c_bus.start()
    i2c_bus.write(_addr_byte(SLAVE_ADDR), is_addr=True)

    assert i2c_bus.write(0x3C) == TwiState.MTX_DATA_ACK
    assert i2c_bus.slave.twi_state == TwiState.SRX_ADR_DATA_ACK
    assert i2c_bus.slave.data == 0x3C

    assert i2c_bus.write(0xA5) == TwiState.MTX_DATA_ACK
    assert i2c_bus.slave.data == 0xA5


def test_stop_after_write(i2c_bus):
    i2c_bus.start()
    i2c_bus.write(_addr_byte(SLAVE_ADDR), is_addr=True)
    i2c_bus.write(0x3C)

    assert i2c_bus.stop() == TwiState.NO_STATE
    assert i2c_bus.master.twint
    assert i2c_bus.slave.twi_state == TwiState.SRX_STOP_RESTART
    assert i2c_bus.slave.i2c_state == I2CState.STOP
    assert i2c_bus.master.sda.get_inp_state()
    assert i2c_bus.master.scl.get_inp_state()


def test_master_read_with_nack(i2c_bus):
    i2c_bus.slave.data = 0xC5
    i2c_bus.start()

    status = i2c_bus.write(_addr_byte(SLAVE_ADDR, read=True), is_addr=True, write=False)
    assert status == TwiState.MRX_ADR_ACK
    assert i2c_bus.slave.twi_state == TwiState.STX_ADR_ACK

    assert i2c_bus.read(ack=False) == TwiState.MRX_DATA_NACK
    assert i2c_bus.master.data == 0xC5
    assert i2c_bus.slave.twi_state == TwiState.STX_DATA_NACK


def test_master_read_with_ack_keeps_slave_sending(i2c_bus):
    i2c_bus.slave.data = 0x81
    i2c_bus.start()
    i2c_bus.write(_addr_byte(SLAVE_ADDR, read=True), is_addr=True, write=False)

    assert i2c_bus.read(ack=True) == TwiState.MRX_DATA_ACK
    assert i2c_bus.master.data == 0x81
    assert i2c_bus.slave.twi_state == TwiState.STX_DATA_ACK


def test_general_call(make_i2c_bus):
    bus = make_i2c_bus(slave_address=SLAVE_ADDR, general_call=True)
    bus.start()

    assert bus.write(0x00, is_addr=True) == TwiState.MTX_ADR_ACK
    assert bus.slave.twi_state == TwiState.SRX_GEN_ACK

    assert bus.write(0x42) == TwiState.MTX_DATA_ACK
    assert bus.slave.twi_state == TwiState.SRX_GEN_DATA_ACK
    assert bus.slave.data == 0x42


def test_general_call_ignored_when_disabled(i2c_bus):
    i2c_bus.start()
    assert i2c_bus.write(0x00, is_addr=True) == TwiState.MTX_ADR_NACK


def test_repeated_start(i2c_bus):
    i2c_bus.start()
    i2c_bus.write(_addr_byte(SLAVE_ADDR), is_addr=True)

    assert i2c_bus.start() == TwiState.REP_START
    assert i2c_bus.slave.i2c_state == I2CState.START


def test_status_changes_raise_interrupts(i2c_bus, sim):
    cpu = DummyCpu()
    ctrl = InterruptController(sim)
    ctrl.attach_target(cpu)
    i2c_bus.master.attach_interrupt_controller(ctrl)

    i2c_bus.start()
    i2c_bus.write(_addr_byte(SLAVE_ADDR), is_addr=True)

    assert [event.vector for event in cpu.events] == [TwiConsts.TWI_VECTOR] * 2
    # The next command clears TWINT and its pending interrupt
    i2c_bus.master.master_stop()
    assert not i2c_bus.master.twint
    assert ctrl.pending == ()


def test_switching_mode_drops_pending_events(i2c_bus, sim):
    i2c_bus.master.set_mode(TwiMode.OFF)
    sim.run_for(i2c_bus.master.period)

    assert i2c_bus.master.mode == TwiMode.OFF
    assert not [e for e in sim.pending_events() if e.target is i2c_bus.master]
    assert i2c_bus.master.sda.get_inp_state()
    assert i2c_bus.master.scl.get_inp_state()
