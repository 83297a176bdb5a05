"""Passive and source elements that populate a network."""

from circuitsim.elements.clock_source import ClockSource
from circuitsim.elements.led import Led
from circuitsim.elements.potentiometer import Potentiometer
from circuitsim.elements.probe import SignalProbe
from circuitsim.elements.resistor import Resistor
from circuitsim.elements.sources import Ground, VoltageSource

__all__ = [
    "VoltageSource",
    "Ground",
    "Resistor",
    "Potentiometer",
    "Led",
    "ClockSource",
    "SignalProbe",
]
