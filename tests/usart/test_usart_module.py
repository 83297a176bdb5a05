import pytest

from circuitsim.core.interrupt_controller import InterruptController
from circuitsim.usart.consts import UartState, UsartConsts
from circuitsim.usart.usart_module import UsartModule


class DummyCpu:
    def __init__(self):
        self.events = []

    def handle_interrupt(self, event) -> None:
        self.events.append(event)


@pytest.fixture
def loopback(sim, circuit):
    """USART whose TX pin is wired to its own RX pin."""
    uart = UsartModule("uart0", sim)
    circuit.add(uart)
    circuit.connect(uart.tx_pin, uart.rx_pin)
    circuit.build()
    sim.start()
    return uart


@pytest.fixture
def unwired(sim, circuit):
    uart = UsartModule("uart0", sim)
    circuit.add(uart)
    circuit.build()
    sim.start()
    return uart


def test_defaults_from_config(sim):
    uart = UsartModule("uart0", sim)
    assert uart.baud_rate == 9600
    assert uart.data_bits == 8
    assert uart.stop_bits == 1
    assert uart.bit_period == 104_166_667


def test_set_baud_rate_updates_both_directions(sim):
    uart = UsartModule("uart0", sim)
    uart.set_baud_rate(19200)
    assert uart.rx.period == uart.tx.period == 52_083_333


def test_line_idles_high_after_start(loopback):
    assert loopback.tx_pin.get_inp_state() is True
    assert loopback.rx_pin.get_inp_state() is True
    assert loopback.tx.state == UartState.IDLE


def test_round_trip_over_wire(loopback, sim):
    assert loopback.write_byte(0xAA)
    sim.run_for(2 * loopback.frame_time)

    assert loopback.data_available
    assert loopback.read_byte() == 0xAA
    assert not loopback.parity_error
    assert not loopback.frame_error
    assert not loopback.overrun
    assert loopback.registers.read("UDR") == 0xAA


def test_back_to_back_frames_over_wire(loopback, sim):
    assert loopback.write_byte(0x55)
    assert loopback.write_byte(0x0F)
    sim.run_for(3 * loopback.frame_time)

    assert loopback.read_byte() == 0x55
    assert loopback.read_byte() == 0x0F
    assert not loopback.data_available


def test_round_trip_with_parity_and_two_stop_bits(sim, circuit):
    uart = UsartModule("uart0", sim, data_bits=7, parity="odd", stop_bits=2)
    circuit.add(uart)
    circuit.connect(uart.tx_pin, uart.rx_pin)
    circuit.build()
    sim.start()

    uart.write_byte(0x5A)
    sim.run_for(2 * uart.frame_time)

    assert uart.read_byte() == 0x5A
    assert not uart.parity_error
    assert not uart.frame_error


def test_receiver_disabled_ignores_line(loopback, sim):
    loopback.enable_rx(False)
    assert not loopback.registers.read("UCSRB") & UsartConsts.RXEN

    loopback.write_byte(0x42)
    sim.run_for(2 * loopback.frame_time)
    assert not loopback.data_available


def test_transmit_flags_and_buffer(unwired, sim):
    uart = unwired
    assert uart.status.test(UsartConsts.UDRE)

    assert uart.write_byte(0x41)
    # First byte went straight to the wire: buffer still free
    assert uart.status.test(UsartConsts.UDRE)
    assert not uart.status.test(UsartConsts.TXC)
    assert uart.tx.busy

    assert uart.write_byte(0x42)
    assert not uart.status.test(UsartConsts.UDRE)
    assert not uart.write_byte(0x43)

    sim.run_for(3 * uart.frame_time)

    assert uart.status.test(UsartConsts.TXC)
    assert uart.status.test(UsartConsts.UDRE)
    assert not uart.tx.busy


def test_transmitter_disabled_rejects_data(sim, circuit):
    uart = UsartModule("uart0", sim, tx_enabled=False)
    circuit.add(uart)
    circuit.build()
    sim.start()

    assert not uart.write_byte(0x10)
    assert not uart.registers.read("UCSRB") & UsartConsts.TXEN


def test_transmit_interrupts(unwired, sim):
    cpu = DummyCpu()
    ctrl = InterruptController(sim)
    ctrl.attach_target(cpu)
    unwired.attach_interrupt_controller(ctrl)

    unwired.write_byte(0x01)
    unwired.write_byte(0x02)
    sim.run_for(3 * unwired.frame_time)

    vectors = [event.vector for event in cpu.events]
    assert vectors == [UsartConsts.UDRE_VECTOR, UsartConsts.TX_VECTOR]
    assert cpu.events[0].timestamp == unwired.frame_time


def test_injected_bytes_arrive_one_frame_apart(unwired, sim):
    cpu = DummyCpu()
    ctrl = InterruptController(sim)
    ctrl.attach_target(cpu)
    unwired.attach_interrupt_controller(ctrl)

    unwired.inject(0x31)
    unwired.inject(0x32)
    sim.run_for(3 * unwired.frame_time)

    assert [event.vector for event in cpu.events] == [UsartConsts.RX_VECTOR] * 2
    assert cpu.events[1].timestamp - cpu.events[0].timestamp == unwired.frame_time
    assert unwired.read_byte() == 0x31
    assert unwired.read_byte() == 0x32


def test_injected_overrun(unwired, sim):
    for data in (0xA1, 0xA2, 0xA3):
        unwired.inject(data)
    sim.run_for(4 * unwired.frame_time)

    assert unwired.overrun
    assert unwired.read_byte() == 0xA1
    assert unwired.read_byte() == 0xA2
    assert not unwired.data_available


def test_inject_switches_wired_receiver_to_software(loopback, sim):
    loopback.inject(0x7E)
    assert not loopback.rx.run_hardware

    sim.run_for(3 * loopback.frame_time)
    assert loopback.read_byte() == 0x7E


def test_restart_clears_state(loopback, sim):
    loopback.write_byte(0x12)
    sim.run_for(2 * loopback.frame_time)
    sim.stop()

    sim.start()

    assert not loopback.data_available
    assert loopback.status.value == UsartConsts.UDRE
    loopback.write_byte(0x34)
    sim.run_for(2 * loopback.frame_time)
    assert loopback.read_byte() == 0x34


def test_reading_fifo_empty_clears_receive_interrupt(unwired, sim):
    ctrl = InterruptController(sim)
    unwired.attach_interrupt_controller(ctrl)

    for data in range(50):
        unwired.inject(data)
        sim.run_for(2 * unwired.frame_time)
        assert unwired.read_byte() == data

    assert not unwired.data_available
    assert ctrl.pending == ()


def test_clearing_receive_interrupt_keeps_transmit_interrupts(unwired, sim):
    ctrl = InterruptController(sim)
    unwired.attach_interrupt_controller(ctrl)

    unwired.write_byte(0x55)
    unwired.inject(0x66)
    sim.run_for(3 * unwired.frame_time)
    assert UsartConsts.RX_VECTOR in [event.vector for event in ctrl.pending]

    unwired.read_byte()

    vectors = [event.vector for event in ctrl.pending]
    assert UsartConsts.RX_VECTOR not in vectors
    assert UsartConsts.TX_VECTOR in vectors
