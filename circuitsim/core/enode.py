"""Circuit nodes and the arena that owns them.

An ENode aggregates the (admittance, current) pairs stamped by its pins and
solves ``V = sum(I) / sum(G)``. Sums always run over the pins in attachment
order, so the order in which pins stamp never changes the result.

Pins never hold an ENode directly: they hold a handle (node number plus the
arena generation it was issued in). Rebuilding the arena bumps the
generation, which invalidates every outstanding handle at once.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator, Optional

if TYPE_CHECKING:
    from circuitsim.core.epin import EPin
    from circuitsim.interfaces.element import VoltageListener

logger = logging.getLogger(__name__)

DEFAULT_MIN_ADMITTANCE = 1e-30
DEFAULT_VOLT_TOLERANCE = 1e-6


class ENode:
    """A circuit node solved from its pins' Thevenin contributions."""

    def __init__(
        self,
        name: str,
        number: int = 0,
        arena: Optional["NodeArena"] = None,
    ):
        self.name = name
        self.number = number
        self._arena = arena
        self._pins: list[EPin] = []
        self._volt = 0.0
        self._last_volt = 0.0
        self._dirty = False

    @property
    def pins(self) -> tuple["EPin", ...]:
        return tuple(self._pins)

    def attach_pin(self, pin: "EPin") -> None:
        if pin not in self._pins:
            self._pins.append(pin)
            self.mark_dirty()

    def detach_pin(self, pin: "EPin") -> None:
        if pin in self._pins:
            self._pins.remove(pin)
            self.mark_dirty()

    def mark_dirty(self) -> None:
        """Flag the node for recompute; called whenever a pin re-stamps."""
        self._dirty = True
        if self._arena is not None:
            self._arena.mark_dirty(self)

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def volt(self) -> float:
        """Node voltage, consistent with the last stamp set."""
        if self._dirty:
            self._recompute()
        return self._volt

    def set_volt(self, volt: float) -> None:
        """Force the voltage of a node no pin stamps into (shadow nodes)."""
        self._volt = volt
        self._last_volt = volt
        self._dirty = False

    def reset(self) -> None:
        """Forget the solved voltage, as at simulation start."""
        self._volt = 0.0
        self._last_volt = 0.0
        self.mark_dirty()

    def total_admittance(self) -> float:
        return sum(pin.admittance for pin in self._pins)

    def total_current(self) -> float:
        return sum(pin.current for pin in self._pins)

    def _recompute(self) -> None:
        self._dirty = False
        total_g = self.total_admittance()
        if total_g <= 0.0:
            # Open node: keep the previous voltage
            logger.debug(f"Node {self.name} has no conductance, holding {self._volt} V")
            return

        min_admittance = (
            self._arena.min_admittance if self._arena is not None else DEFAULT_MIN_ADMITTANCE
        )
        self._volt = self.total_current() / max(total_g, min_admittance)

    def solve(self) -> bool:
        """Recompute and report whether the voltage moved since the last solve."""
        if self._dirty:
            self._recompute()

        tolerance = (
            self._arena.volt_tolerance if self._arena is not None else DEFAULT_VOLT_TOLERANCE
        )
        if abs(self._volt - self._last_volt) > tolerance:
            self._last_volt = self._volt
            return True
        return False

    def listeners(self) -> list["VoltageListener"]:
        """Elements subscribed through any attached pin, without duplicates."""
        result: list[VoltageListener] = []
        for pin in self._pins:
            for listener in pin.listeners:
                if listener not in result:
                    result.append(listener)
        return result

    def __repr__(self) -> str:
        return f"ENode({self.name!r}, number={self.number}, volt={self._volt:.6g})"


class NodeArena:
    """Owns every ENode of one built network, indexed by node number."""

    def __init__(
        self,
        min_admittance: float = DEFAULT_MIN_ADMITTANCE,
        volt_tolerance: float = DEFAULT_VOLT_TOLERANCE,
    ):
        self.min_admittance = min_admittance
        self.volt_tolerance = volt_tolerance
        self._nodes: list[ENode] = []
        self._generation = 0
        self._dirty: dict[int, ENode] = {}

    @property
    def generation(self) -> int:
        return self._generation

    def create(self, name: Optional[str] = None) -> ENode:
        number = len(self._nodes)
        node = ENode(name or f"enode-{number}", number=number, arena=self)
        self._nodes.append(node)
        return node

    def get(self, number: int, generation: int) -> Optional[ENode]:
        """Resolve a handle; stale or unknown handles resolve to None."""
        if generation != self._generation:
            return None
        if 0 <= number < len(self._nodes):
            return self._nodes[number]
        return None

    def clear(self) -> None:
        """Drop every node and invalidate all handles issued so far."""
        self._nodes.clear()
        self._dirty.clear()
        self._generation += 1

    def mark_dirty(self, node: ENode) -> None:
        if node.number < len(self._nodes) and self._nodes[node.number] is node:
            self._dirty[node.number] = node

    @property
    def has_dirty(self) -> bool:
        return bool(self._dirty)

    def pop_dirty(self) -> list[ENode]:
        """Return the nodes stamped since the last call, ordered by number."""
        nodes = [self._dirty[number] for number in sorted(self._dirty)]
        self._dirty.clear()
        return nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[ENode]:
        return iter(list(self._nodes))
