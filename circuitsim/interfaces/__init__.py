"""Interface abstractions for the simulation kernel.

Defines behavioral contracts that implementations must satisfy:
- IElement / EventTarget / VoltageListener: element lifecycle
- IScheduler: time and event primitives seen by elements
- IInterruptController: peripheral interrupt delivery
- PinMode, ClockState: pin and clock enumerations
"""

from circuitsim.interfaces.element import (
    EventTarget,
    IElement,
    VoltageListener,
)
from circuitsim.interfaces.interrupt_controller import (
    IInterruptController,
    InterruptEvent,
    InterruptTarget,
)
from circuitsim.interfaces.pin_enums import ClockState, PinMode
from circuitsim.interfaces.scheduler import IScheduler

__all__ = [
    "IElement",
    "EventTarget",
    "VoltageListener",
    "IScheduler",
    "IInterruptController",
    "InterruptEvent",
    "InterruptTarget",
    "PinMode",
    "ClockState",
]
