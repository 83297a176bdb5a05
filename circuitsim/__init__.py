"""Circuit and microcontroller peripheral simulation kernel.

This package solves a resistive/voltage network node by node and drives
digital protocol peripherals (UART, I2C/TWI) from that network's state,
under a single fixed-step + discrete-event scheduler.

Getting started:
    from circuitsim import Circuit, Simulator
    from circuitsim.usart import UsartModule

    sim = Simulator()
    uart = UsartModule("uart0", sim)
    circuit = Circuit(sim)
    circuit.add(uart)
    circuit.connect(uart.tx_pin, uart.rx_pin)
    circuit.build()

    sim.start()
    uart.write_byte(0xAA)
    sim.run_for(2 * uart.frame_time)
    assert uart.read_byte() == 0xAA
"""

from circuitsim.core import (
    BaseElement,
    BasePeripheral,
    Circuit,
    CircuitError,
    ClockedDevice,
    ConfigurationError,
    ENode,
    EPin,
    InterruptController,
    IoPin,
    SimState,
    SimulationStateError,
    Simulator,
    SimulatorError,
)
from circuitsim.interfaces import ClockState, PinMode
from circuitsim.utils.config_loader import KernelConfig, get_config, load_config

__all__ = [
    # Simulation
    "Simulator",
    "SimState",
    "Circuit",
    # Network
    "ENode",
    "EPin",
    "IoPin",
    "PinMode",
    "BaseElement",
    "ClockedDevice",
    "ClockState",
    # Peripherals
    "BasePeripheral",
    "InterruptController",
    # Configuration
    "KernelConfig",
    "load_config",
    "get_config",
    # Errors
    "SimulatorError",
    "ConfigurationError",
    "CircuitError",
    "SimulationStateError",
]
