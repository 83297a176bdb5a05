"""Circuit terminal that stamps into a node and reads its voltage back."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from circuitsim.core.enode import ENode, NodeArena
    from circuitsim.interfaces.element import VoltageListener


class EPin:
    """A terminal of an element.

    The pin keeps its own stamped admittance and current; its node sums the
    contributions of all attached pins. The node is referenced through an
    arena handle, so after a rebuild a pin that was not re-attached reads as
    unconnected and stamps nothing.
    """

    def __init__(self, pin_id: str, owner: object | None = None):
        self.pin_id = pin_id
        self.owner = owner
        self._arena: Optional[NodeArena] = None
        self._node_number: Optional[int] = None
        self._generation = -1
        self._admit = 0.0
        self._current = 0.0
        self._listeners: list[VoltageListener] = []

    # ----------------------------------------------------------------------
    # Node handle
    # ----------------------------------------------------------------------

    def set_node(self, arena: Optional["NodeArena"], node: Optional["ENode"]) -> None:
        """Attach to node (issued by arena) or detach when node is None."""
        current = self.node
        if current is not None:
            current.detach_pin(self)

        if arena is None or node is None:
            self._arena = None
            self._node_number = None
            self._generation = -1
            return

        self._arena = arena
        self._node_number = node.number
        self._generation = arena.generation
        node.attach_pin(self)

    @property
    def node(self) -> Optional["ENode"]:
        if self._arena is None or self._node_number is None:
            return None
        return self._arena.get(self._node_number, self._generation)

    @property
    def is_connected(self) -> bool:
        return self.node is not None

    # ----------------------------------------------------------------------
    # Stamping
    # ----------------------------------------------------------------------

    @property
    def admittance(self) -> float:
        return self._admit

    @property
    def current(self) -> float:
        return self._current

    def stamp_admittance(self, admit: float) -> None:
        self._admit = admit
        node = self.node
        if node is not None:
            node.mark_dirty()

    def stamp_current(self, current: float) -> None:
        self._current = current
        node = self.node
        if node is not None:
            node.mark_dirty()

    def get_volt(self) -> float:
        node = self.node
        if node is None:
            return 0.0
        return node.volt

    # ----------------------------------------------------------------------
    # Voltage change subscription
    # ----------------------------------------------------------------------

    @property
    def listeners(self) -> tuple["VoltageListener", ...]:
        return tuple(self._listeners)

    def change_callback(self, listener: "VoltageListener", enabled: bool = True) -> None:
        """Subscribe or unsubscribe listener to this pin's node changes."""
        if enabled:
            if listener not in self._listeners:
                self._listeners.append(listener)
        elif listener in self._listeners:
            self._listeners.remove(listener)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.pin_id!r})"
