"""Base peripheral helpers for shared behavior."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from circuitsim.core.element import BaseElement
from circuitsim.core.register import RegisterFile
from circuitsim.interfaces.interrupt_controller import IInterruptController

if TYPE_CHECKING:
    from circuitsim.core.simulator import Simulator


class BasePeripheral(BaseElement):
    """Optional base class for MCU peripherals living in the network.

    Provides a register file, interrupt wiring and snapshot(). Concrete
    peripherals declare their registers in __init__ and drive them from
    their state machines.
    """

    def __init__(self, name: str, sim: "Simulator"):
        super().__init__(name, sim)
        self.name = name
        self.registers = RegisterFile()
        self._interrupt_controller: Optional[IInterruptController] = None

    def attach_interrupt_controller(self, controller: IInterruptController) -> None:
        """Attach an interrupt controller to emit events."""
        self._interrupt_controller = controller
        controller.subscribe(self)

    def emit_interrupt(self, vector: int | None = None) -> None:
        """Emit an interrupt via the attached controller (if any)."""
        if self._interrupt_controller is not None:
            self._interrupt_controller.notify(self, vector)

    def clear_interrupt(self, vector: int | None = None) -> None:
        """Drop this peripheral's pending interrupts (only vector, if given)."""
        if self._interrupt_controller is not None:
            self._interrupt_controller.clear(self, vector)

    def initialize(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Reset registers and pending interrupts."""
        self.registers.reset()
        self.clear_interrupt()

    def snapshot(self) -> dict[str, int]:
        """Register name to value, for inspection."""
        return self.registers.snapshot()
