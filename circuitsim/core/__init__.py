"""Core modules for the simulation kernel.

Core infrastructure shared by every element and peripheral:
- enode / epin: nodes, the node arena and pin terminals
- iopin: digital pin with modes, hysteresis and tri-state
- simulator / event_queue: clock, fixed-step loop and event scheduling
- circuit: connectivity builder turning nets into nodes
- clocked_device: base for periodic elements
- register / peripheral / interrupt_controller: peripheral scaffolding
"""

from circuitsim.core.exceptions import (
    CircuitError,
    ConfigurationError,
    SimulationStateError,
    SimulatorError,
)
from circuitsim.core.register import (
    FlagRegister,
    ReadOnlyRegister,
    Register,
    RegisterFile,
    SimpleRegister,
)
from circuitsim.core.enode import ENode, NodeArena
from circuitsim.core.epin import EPin
from circuitsim.core.element import BaseElement
from circuitsim.core.event_queue import Event, EventQueue
from circuitsim.core.simulator import SimState, Simulator
from circuitsim.core.iopin import IoPin
from circuitsim.core.clocked_device import ClockedDevice
from circuitsim.core.interrupt_controller import InterruptController
from circuitsim.core.peripheral import BasePeripheral
from circuitsim.core.circuit import Circuit

__all__ = [
    # Errors
    "SimulatorError",
    "ConfigurationError",
    "CircuitError",
    "SimulationStateError",
    # Registers
    "Register",
    "SimpleRegister",
    "ReadOnlyRegister",
    "FlagRegister",
    "RegisterFile",
    # Network
    "ENode",
    "NodeArena",
    "EPin",
    "IoPin",
    "BaseElement",
    "Circuit",
    # Scheduling
    "Event",
    "EventQueue",
    "Simulator",
    "SimState",
    "ClockedDevice",
    # Peripherals
    "BasePeripheral",
    "InterruptController",
]
