"""Two-wire interface (I2C) peripheral."""

from circuitsim.twi.consts import I2CState, TwiConsts, TwiMode, TwiState
from circuitsim.twi.twi_module import TwiModule

__all__ = [
    "I2CState",
    "TwiConsts",
    "TwiMode",
    "TwiState",
    "TwiModule",
]
