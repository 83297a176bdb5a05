"""Peripheral register abstraction.

Registers hold the externally visible state of a peripheral (status flags,
data buffers, control bits). Peripherals update them from their state
machines; inspection code reads them back through snapshot().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator, Optional


class Register(ABC):
    """Base class for any register with custom read/write behavior.

    For simple registers (just storage), use SimpleRegister.
    For registers with special behavior, subclass and override
    read() / write().
    """

    def __init__(self, name: str, width: int = 8, reset_value: int = 0):
        """Initialize a register.

        Args:
            name: Register name, unique within its RegisterFile
            width: Width in bits; values are masked to it
            reset_value: Value to return to on reset()
        """
        self.name = name
        self.width = width
        self.mask = (1 << width) - 1
        self.reset_value = reset_value & self.mask
        self.value = self.reset_value

    @abstractmethod
    def read(self) -> int:
        """Read as seen by software."""
        ...

    @abstractmethod
    def write(self, val: int) -> None:
        """Write as done by software."""
        ...

    def load(self, val: int) -> None:
        """Set the value from the hardware side, bypassing write rules."""
        self.value = val & self.mask

    def reset(self) -> None:
        self.value = self.reset_value


class SimpleRegister(Register):
    """A register that is just storage (no side effects)."""

    def read(self) -> int:
        return self.value

    def write(self, val: int) -> None:
        self.value = val & self.mask


class ReadOnlyRegister(SimpleRegister):
    """A read-only register. Writes are silently ignored; use load()."""

    def write(self, val: int) -> None:
        pass  # Ignore writes


class FlagRegister(SimpleRegister):
    """Status flags set by hardware and cleared by writing 1 to them."""

    def write(self, val: int) -> None:
        self.value &= ~val & self.mask

    def set_bits(self, bits: int) -> None:
        self.value |= bits & self.mask

    def clear_bits(self, bits: int) -> None:
        self.value &= ~bits & self.mask

    def test(self, bits: int) -> bool:
        return bool(self.value & bits)

    def assign(self, bits: int, on: bool) -> None:
        if on:
            self.set_bits(bits)
        else:
            self.clear_bits(bits)


class RegisterFile:
    """Registers of one peripheral, keyed by name."""

    def __init__(self):
        self._registers: dict[str, Register] = {}

    def add(self, reg: Register) -> Register:
        """Add a register to this file.

        Raises:
            ValueError: If a register with the same name already exists
        """
        if reg.name in self._registers:
            raise ValueError(f"Register {reg.name} already exists")
        self._registers[reg.name] = reg
        return reg

    def __getitem__(self, name: str) -> Register:
        return self._registers[name]

    def __contains__(self, name: str) -> bool:
        return name in self._registers

    def __iter__(self) -> Iterator[Register]:
        return iter(self._registers.values())

    def get_register(self, name: str) -> Optional[Register]:
        """Return the register called name, or None."""
        return self._registers.get(name)

    def read(self, name: str) -> int:
        return self._registers[name].read()

    def write(self, name: str, val: int) -> None:
        self._registers[name].write(val)

    def reset(self) -> None:
        """Reset all registers."""
        for reg in self._registers.values():
            reg.reset()

    def snapshot(self) -> dict[str, int]:
        """Raw value of every register, in declaration order."""
        return {name: reg.value for name, reg in self._registers.items()}
