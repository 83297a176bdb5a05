"""Pin and clock enumeration types."""

from enum import IntEnum


class PinMode(IntEnum):
    """IoPin electrical mode.

    Values are ordered so that ``mode >= PinMode.OPEN_COLLECTOR`` selects the
    modes that drive the pin from its output state.
    """

    UNDEFINED = 0
    """Pre-initialization state; never stamped."""

    INPUT = 1
    """High-impedance input referenced to ground."""

    OPEN_COLLECTOR = 2
    """Drives low or releases to the open impedance."""

    OUTPUT = 3
    """Push-pull output driving output_high_v / output_low_v."""

    SOURCE = 4
    """Ideal rail at output_high_v."""


class ClockState(IntEnum):
    """Edge state of a clock pin between two samples."""

    LOW = 0
    RISING = 1
    HIGH = 2
    FALLING = 3
