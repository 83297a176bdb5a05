"""Connectivity builder that turns wired pins into arena nodes.

Typical use::

    sim = Simulator()
    circuit = Circuit(sim)
    circuit.add(source, resistor)
    circuit.connect(source.pin, resistor.pin_a)
    circuit.build()
    sim.start()
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from circuitsim.core.epin import EPin
from circuitsim.core.exceptions import CircuitError
from circuitsim.core.simulator import SimState
from circuitsim.interfaces.element import IElement

if TYPE_CHECKING:
    from circuitsim.core.simulator import Simulator


class Circuit:
    """Collects elements and pin connections for one simulator."""

    def __init__(self, sim: "Simulator"):
        self.sim = sim
        self._elements: list[IElement] = []
        self._parent: dict[EPin, EPin] = {}

    @property
    def elements(self) -> tuple[IElement, ...]:
        return tuple(self._elements)

    def add(self, *elements: IElement) -> None:
        """Register elements with the simulator.

        Pins that are elements themselves (IoPin) are registered before their
        owner, so they are initialized and stepped first.
        """
        for element in elements:
            for pin in getattr(element, "pins", []):
                if isinstance(pin, IElement) and pin is not element:
                    self._register(pin)
            self._register(element)

    def _register(self, element: IElement) -> None:
        if element in self._elements:
            return
        self._elements.append(element)
        self.sim.add_element(element)

    def remove(self, element: IElement) -> None:
        """Unregister element and disconnect its pins (takes effect on build)."""
        for pin in getattr(element, "pins", []):
            self.disconnect(pin)
            if isinstance(pin, IElement) and pin is not element:
                self._unregister(pin)
        self._unregister(element)

    def _unregister(self, element: IElement) -> None:
        if element in self._elements:
            self._elements.remove(element)
        self.sim.remove_element(element)

    # ==========================================================
    # Nets
    # ==========================================================

    def _find(self, pin: EPin) -> EPin:
        root = self._parent.setdefault(pin, pin)
        while root is not self._parent[root]:
            root = self._parent[root]
        # Path compression
        while pin is not root:
            pin, self._parent[pin] = self._parent[pin], root
        return root

    def connect(self, *pins: EPin) -> None:
        """Place all pins on the same net."""
        if len(pins) < 2:
            raise CircuitError("A connection needs at least two pins")

        first = self._find(pins[0])
        for pin in pins[1:]:
            root = self._find(pin)
            if root is not first:
                self._parent[root] = first

    def disconnect(self, pin: EPin) -> None:
        """Take pin off its net, leaving the other pins connected."""
        if pin not in self._parent:
            return
        members = [p for p in self.net_of(pin) if p is not pin]
        for member in [pin] + members:
            self._parent.pop(member, None)
        if len(members) >= 2:
            self.connect(*members)

    def net_of(self, pin: EPin) -> list[EPin]:
        """All pins sharing a net with pin, including pin itself."""
        if pin not in self._parent:
            return [pin]
        root = self._find(pin)
        return [p for p in list(self._parent) if self._find(p) is root]

    def nets(self) -> list[list[EPin]]:
        groups: dict[EPin, list[EPin]] = {}
        for pin in list(self._parent):
            groups.setdefault(self._find(pin), []).append(pin)
        return list(groups.values())

    # ==========================================================
    # Build
    # ==========================================================

    def build(self) -> None:
        """Rebuild the node arena from the current nets.

        Every previously issued node handle becomes stale. Nets of a single
        pin get no node: the pin stays unconnected.
        """
        if self.sim.state != SimState.STOPPED:
            raise CircuitError(
                "Circuit can only be built while the simulator is stopped",
                details={"state": self.sim.state.value},
            )

        nets = self.nets()
        for net in nets:
            for pin in net:
                owner = pin.owner if pin.owner is not None else pin
                if owner not in self._elements:
                    raise CircuitError(
                        f"Pin {pin.pin_id} belongs to an element not added to the circuit",
                        pin_id=pin.pin_id,
                    )

        arena = self.sim.arena
        for element in self._elements:
            for pin in getattr(element, "pins", []):
                pin.set_node(None, None)
        arena.clear()

        for net in nets:
            if len(net) < 2:
                continue
            node = arena.create()
            for pin in net:
                pin.set_node(arena, node)
