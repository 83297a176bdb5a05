import pytest

from circuitsim.core.circuit import Circuit
from circuitsim.core.exceptions import CircuitError
from circuitsim.elements.resistor import Resistor
from circuitsim.elements.sources import Ground, VoltageSource
from circuitsim.usart.usart_module import UsartModule


def test_connect_needs_two_pins(sim, circuit):
    r = Resistor("r", sim)
    circuit.add(r)
    with pytest.raises(CircuitError):
        circuit.connect(r.pin_a)


def test_build_while_running_raises(sim, circuit):
    circuit.build()
    sim.start()
    with pytest.raises(CircuitError) as exc_info:
        circuit.build()
    assert exc_info.value.details["state"] == "running"


def test_build_rejects_pin_of_unknown_element(sim, circuit):
    added = Resistor("r1", sim)
    stray = Resistor("r2", sim)
    circuit.add(added)
    circuit.connect(added.pin_a, stray.pin_a)

    with pytest.raises(CircuitError) as exc_info:
        circuit.build()
    assert exc_info.value.pin_id == stray.pin_a.pin_id


def test_nets_share_one_node(sim, circuit):
    vcc = VoltageSource("vcc", sim)
    r1 = Resistor("r1", sim)
    r2 = Resistor("r2", sim)
    circuit.add(vcc, r1, r2)
    circuit.connect(vcc.pin, r1.pin_a)
    circuit.connect(r1.pin_a, r2.pin_a)
    circuit.build()

    assert len(sim.arena) == 1
    assert vcc.pin.node is r1.pin_a.node is r2.pin_a.node
    assert not r1.pin_b.is_connected


def test_single_pin_net_gets_no_node(sim, circuit):
    r1 = Resistor("r1", sim)
    r2 = Resistor("r2", sim)
    circuit.add(r1, r2)
    circuit.connect(r1.pin_b, r2.pin_a)
    circuit.disconnect(r2.pin_a)
    circuit.build()

    assert len(sim.arena) == 0
    assert not r1.pin_b.is_connected
    assert circuit.net_of(r2.pin_a) == [r2.pin_a]


def test_disconnect_keeps_remaining_pins_connected(sim, circuit):
    rs = [Resistor(f"r{i}", sim) for i in range(3)]
    circuit.add(*rs)
    circuit.connect(rs[0].pin_a, rs[1].pin_a, rs[2].pin_a)

    circuit.disconnect(rs[1].pin_a)

    net = circuit.net_of(rs[0].pin_a)
    assert set(net) == {rs[0].pin_a, rs[2].pin_a}


def test_rebuild_invalidates_previous_handles(sim, circuit):
    vcc = VoltageSource("vcc", sim)
    gnd = Ground("gnd", sim)
    r = Resistor("r", sim)
    circuit.add(vcc, gnd, r)
    circuit.connect(vcc.pin, r.pin_a)
    circuit.connect(r.pin_b, gnd.pin)
    circuit.build()
    old_node = vcc.pin.node
    generation = sim.arena.generation

    circuit.build()

    assert sim.arena.generation == generation + 1
    assert vcc.pin.node is not old_node
    assert vcc.pin.node is r.pin_a.node
    assert old_node.pins == ()


def test_io_pins_register_before_their_owner(sim, circuit):
    uart = UsartModule("uart0", sim)
    circuit.add(uart)

    assert circuit.elements == (uart.rx_pin, uart.tx_pin, uart)
    assert sim.elements == (uart.rx_pin, uart.tx_pin, uart)


def test_remove_unregisters_element_and_pins(sim, circuit):
    uart = UsartModule("uart0", sim)
    r = Resistor("r", sim)
    circuit.add(uart, r)
    circuit.connect(uart.tx_pin, r.pin_a)

    circuit.remove(uart)
    circuit.build()

    assert circuit.elements == (r,)
    assert uart not in sim.elements
    assert not r.pin_a.is_connected


def test_divider_after_build(sim, circuit):
    vcc = VoltageSource("vcc", sim, voltage=5.0)
    gnd = Ground("gnd", sim)
    r1 = Resistor("r1", sim, 1000.0)
    r2 = Resistor("r2", sim, 3000.0)
    circuit.add(vcc, gnd, r1, r2)
    circuit.connect(vcc.pin, r1.pin_a)
    circuit.connect(r1.pin_b, r2.pin_a)
    circuit.connect(r2.pin_b, gnd.pin)
    circuit.build()
    sim.start()

    assert r1.pin_b.get_volt() == pytest.approx(3.75, rel=1e-4)


def test_add_registers_with_simulator(sim):
    circuit = Circuit(sim)
    r = Resistor("r", sim)
    circuit.add(r, r)
    assert circuit.elements == (r,)
    assert sim.elements == (r,)
