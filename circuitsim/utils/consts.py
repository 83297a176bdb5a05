"""Constants and utility values for the simulation kernel."""


class ConstUtils:
    """Electrical and timing constants."""

    PS_PER_SECOND = 1_000_000_000_000
    """Simulation time unit: picoseconds per second."""

    CERO_DOUB = 1e-14
    """Smallest admittance (S) used in place of a true zero."""

    HIGH_IMP = 1e14
    """Impedance (ohm) of an input pin or a non-conducting branch."""

    OPEN_IMP = 1e28
    """Impedance (ohm) of a released open-collector or tri-stated pin."""

    MIN_RESISTANCE = 1e-6
    """Lower bound applied to resistive elements."""

    MASK_8_BITS = 0xFF
    """Byte mask for 8-bit data registers."""


def period_from_freq(freq_hz: float) -> int:
    """Return the period of freq_hz in picoseconds, rounded to an integer."""
    if freq_hz <= 0:
        raise ValueError("frequency must be positive")
    return round(ConstUtils.PS_PER_SECOND / freq_hz)
