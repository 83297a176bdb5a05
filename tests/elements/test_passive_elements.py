import pytest

from circuitsim.elements.led import Led
from circuitsim.elements.potentiometer import Potentiometer
from circuitsim.elements.probe import SignalProbe
from circuitsim.elements.resistor import Resistor
from circuitsim.elements.sources import Ground, VoltageSource
from circuitsim.utils.consts import ConstUtils


@pytest.fixture
def rails(sim, circuit):
    vcc = VoltageSource("vcc", sim, voltage=5.0)
    gnd = Ground("gnd", sim)
    circuit.add(vcc, gnd)
    return vcc, gnd


class TestResistor:
    def test_divider(self, sim, circuit, rails):
        vcc, gnd = rails
        r1 = Resistor("r1", sim, 1000.0)
        r2 = Resistor("r2", sim, 1000.0)
        circuit.add(r1, r2)
        circuit.connect(vcc.pin, r1.pin_a)
        circuit.connect(r1.pin_b, r2.pin_a)
        circuit.connect(r2.pin_b, gnd.pin)
        circuit.build()
        sim.start()

        assert r1.pin_b.get_volt() == pytest.approx(2.5, rel=1e-4)
        assert r1.current == pytest.approx(2.5e-3, rel=1e-3)

    def test_divider_follows_source_change(self, sim, circuit, rails):
        vcc, gnd = rails
        r1 = Resistor("r1", sim, 2000.0)
        r2 = Resistor("r2", sim, 1000.0)
        circuit.add(r1, r2)
        circuit.connect(vcc.pin, r1.pin_a)
        circuit.connect(r1.pin_b, r2.pin_a)
        circuit.connect(r2.pin_b, gnd.pin)
        circuit.build()
        sim.start()

        vcc.set_voltage(9.0)
        sim.run_step()
        assert r1.pin_b.get_volt() == pytest.approx(3.0, rel=1e-4)

    def test_dangling_resistor_stamps_nothing(self, sim, circuit, rails):
        vcc, _ = rails
        r = Resistor("r", sim)
        circuit.add(r)
        circuit.connect(vcc.pin, r.pin_a)
        circuit.build()
        sim.start()

        assert r.pin_a.admittance == 0.0
        assert vcc.pin.get_volt() == pytest.approx(5.0)

    def test_resistance_is_clamped(self, sim):
        r = Resistor("r", sim)
        r.set_resistance(0.0)
        assert r.resistance == ConstUtils.MIN_RESISTANCE


class TestPotentiometer:
    @pytest.fixture
    def pot(self, sim, circuit, rails):
        vcc, gnd = rails
        pot = Potentiometer("pot", sim, resistance=1000.0, position=0.25)
        probe = SignalProbe("probe", sim)
        circuit.add(pot, probe)
        circuit.connect(vcc.pin, pot.pin_a)
        circuit.connect(pot.pin_b, gnd.pin)
        circuit.connect(pot.pin_m, probe.pin)
        circuit.build()
        sim.start()
        return pot

    def test_wiper_divides_supply(self, pot):
        assert pot.segment_resistances() == pytest.approx((250.0, 750.0))
        assert pot.wiper_volt == pytest.approx(3.75, rel=1e-4)

    def test_position_applies_on_next_step(self, pot, sim):
        pot.set_position(0.75)
        assert pot.wiper_volt == pytest.approx(3.75, rel=1e-4)

        sim.run_step()
        assert pot.wiper_volt == pytest.approx(1.25, rel=1e-4)

    def test_position_is_clamped(self, sim):
        pot = Potentiometer("pot", sim, position=2.0)
        assert pot.position == 1.0
        pot.set_position(-1.0)
        assert pot.position == 0.0
        assert pot.segment_resistances()[0] == ConstUtils.MIN_RESISTANCE


class TestLed:
    def _wire(self, sim, circuit, rails, forward=True):
        vcc, gnd = rails
        series = Resistor("r-led", sim, 220.0)
        led = Led("led", sim, threshold=2.4, resistance=1.0)
        circuit.add(series, led)
        circuit.connect(vcc.pin, series.pin_a)
        if forward:
            circuit.connect(series.pin_b, led.anode)
            circuit.connect(led.cathode, gnd.pin)
        else:
            circuit.connect(series.pin_b, led.cathode)
            circuit.connect(led.anode, gnd.pin)
        circuit.build()
        sim.start()
        return led

    def test_forward_biased_led_lights(self, sim, circuit, rails):
        led = self._wire(sim, circuit, rails)
        for _ in range(5):
            sim.run_step()

        assert led.conducting
        assert led.is_lit
        assert led.current == pytest.approx((5.0 - 2.4) / 221.0, rel=1e-2)
        assert led.brightness == pytest.approx(led.current / 0.02)
        assert not led.overloaded

    def test_reverse_biased_led_stays_dark(self, sim, circuit, rails):
        led = self._wire(sim, circuit, rails, forward=False)
        for _ in range(5):
            sim.run_step()

        assert not led.conducting
        assert not led.is_lit
        assert led.current == 0.0

    def test_unwired_led_is_dark(self, sim, circuit):
        led = Led("led", sim)
        circuit.add(led)
        circuit.build()
        sim.start()
        sim.run_step()

        assert led.anode.admittance == 0.0
        assert not led.is_lit
