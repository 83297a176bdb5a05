"""
Pytest configuration and shared fixtures for the circuitsim test suite.
"""

import sys
import tempfile
from pathlib import Path

import pytest
import yaml

# Ensure project root is on PYTHONPATH so 'circuitsim' can be imported
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from circuitsim.core.circuit import Circuit  # noqa: E402
from circuitsim.core.simulator import Simulator  # noqa: E402
from circuitsim.elements.resistor import Resistor  # noqa: E402
from circuitsim.elements.sources import VoltageSource  # noqa: E402
from circuitsim.twi.consts import TwiMode  # noqa: E402
from circuitsim.twi.twi_module import TwiModule  # noqa: E402
from circuitsim.utils.config_loader import clear_config_cache  # noqa: E402


SIMULATION_CFG = {
    "step_size_ps": 1_000_000,
    "steps_per_frame": 1000,
    "min_admittance": 1e-30,
    "volt_tolerance": 1e-6,
    "max_solver_iterations": 100,
}

IOPIN_CFG = {
    "input_high_v": 2.5,
    "input_low_v": 2.5,
    "output_high_v": 5.0,
    "output_low_v": 0.0,
    "input_imp": 1e14,
    "output_imp": 40.0,
    "open_imp": 1e28,
}

USART_CFG = {"baud_rate": 9600, "data_bits": 8, "parity": "none", "stop_bits": 1}

TWI_CFG = {"freq_khz": 100.0, "address": 0, "general_call": False}

PULL_UP_OHMS = 4700.0


@pytest.fixture
def temp_yaml_file():
    """
    Fixture that provides a temporary YAML file.

    Yields:
        Path: Path to the temporary YAML file
    """
    with tempfile.NamedTemporaryFile(
        mode="w",
        suffix=".yaml",
        delete=False,
    ) as f:
        temp_path = Path(f.name)

    yield temp_path

    # Cleanup
    if temp_path.exists():
        temp_path.unlink()


@pytest.fixture
def valid_kernel_config_dict():
    """
    Fixture providing a complete valid kernel configuration dictionary.
    """
    return {
        "simulation": dict(SIMULATION_CFG),
        "iopin": dict(IOPIN_CFG),
        "usart": dict(USART_CFG),
        "twi": dict(TWI_CFG),
    }


@pytest.fixture
def temp_config_yaml_file(temp_yaml_file, valid_kernel_config_dict):
    """
    Fixture that creates a temporary YAML file with valid configuration.

    Yields:
        Path: Path to the temporary YAML file with valid configuration
    """
    with open(temp_yaml_file, "w", encoding="utf-8") as f:
        yaml.dump(valid_kernel_config_dict, f)

    yield temp_yaml_file


@pytest.fixture(autouse=True)
def _fresh_config_cache():
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def sim():
    """A stopped simulator with the bundled default configuration."""
    return Simulator()


@pytest.fixture
def circuit(sim):
    return Circuit(sim)


def run_until(sim, predicate, timeout_ps):
    """Step sim until predicate() holds; fail after timeout_ps."""
    deadline = sim.circ_time + timeout_ps
    while not predicate():
        if sim.circ_time >= deadline:
            raise AssertionError(f"condition not reached within {timeout_ps} ps")
        sim.run_step()


class I2CBus:
    """Master and slave TWI modules sharing a pulled-up SDA/SCL pair."""

    def __init__(self, sim, slave_address=0x50, general_call=False):
        self.sim = sim
        self.circuit = Circuit(sim)
        self.vcc = VoltageSource("vcc", sim, voltage=5.0)
        self.sda_pull = Resistor("r-sda", sim, PULL_UP_OHMS)
        self.scl_pull = Resistor("r-scl", sim, PULL_UP_OHMS)

        self.master = TwiModule("twi-master", sim, mode=TwiMode.MASTER)
        self.slave = TwiModule(
            "twi-slave",
            sim,
            mode=TwiMode.SLAVE,
            address=slave_address,
            general_call=general_call,
        )

        self.circuit.add(
            self.vcc, self.sda_pull, self.scl_pull, self.master, self.slave
        )
        self.circuit.connect(self.vcc.pin, self.sda_pull.pin_a, self.scl_pull.pin_a)
        self.circuit.connect(self.sda_pull.pin_b, self.master.sda, self.slave.sda)
        self.circuit.connect(self.scl_pull.pin_b, self.master.scl, self.slave.scl)
        self.circuit.build()

    @property
    def byte_time(self):
        """Generous bound for one byte plus ACK on the bus."""
        return 15 * 2 * self.master.period

    def wait_master(self, timeout_ps=None):
        """Run until the master reports a new status (TWINT set)."""
        run_until(self.sim, lambda: self.master.twint, timeout_ps or self.byte_time)
        return self.master.twi_state

    def start(self):
        self.master.master_start()
        return self.wait_master()

    def stop(self):
        self.master.master_stop()
        return self.wait_master()

    def write(self, data, is_addr=False, write=True):
        self.master.master_write(data, is_addr=is_addr, write=write)
        return self.wait_master()

    def read(self, ack=True):
        self.master.master_read(ack)
        return self.wait_master()


@pytest.fixture
def wait_for(sim):
    """Step the simulator until a condition holds (fails on timeout)."""

    def _wait(predicate, timeout_ps):
        run_until(sim, predicate, timeout_ps)

    return _wait


@pytest.fixture
def i2c_bus(sim):
    """Started I2C bus with a slave at address 0x50."""
    bus = I2CBus(sim, slave_address=0x50)
    sim.start()
    # Let both modules release the lines
    sim.run_for(2 * bus.master.period)
    return bus


@pytest.fixture
def make_i2c_bus(sim):
    """Factory for started I2C buses with custom slave settings."""

    def _make(slave_address=0x50, general_call=False):
        bus = I2CBus(sim, slave_address=slave_address, general_call=general_call)
        sim.start()
        sim.run_for(2 * bus.master.period)
        return bus

    return _make


def pytest_configure(config):
    """
    Hook for initial pytest configuration.

    Used to add custom markers and configuration.
    """
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests",
    )
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
