"""Simulation context: clock, fixed-step loop and event scheduling."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from circuitsim.core.enode import NodeArena
from circuitsim.core.event_queue import Event, EventQueue
from circuitsim.core.exceptions import SimulationStateError
from circuitsim.interfaces.element import EventTarget, IElement, VoltageListener
from circuitsim.interfaces.scheduler import IScheduler
from circuitsim.utils.config_loader import KernelConfig, get_config

logger = logging.getLogger(__name__)


class SimState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


class Simulator(IScheduler):
    """Explicit simulation context shared by every element of one network.

    Time advances in fixed steps of ``step_size`` picoseconds. Inside a step,
    events due before the step boundary fire in (time, insertion) order, then
    every element's ``update_step()`` runs in registration order. The solve
    phase runs after each event and after the update pass.
    """

    def __init__(
        self,
        config: Optional[KernelConfig] = None,
        step_size: Optional[int] = None,
        steps_per_frame: Optional[int] = None,
    ):
        self._config = config if config is not None else get_config()
        sim_cfg = self._config.simulation

        self._step_size = int(step_size if step_size is not None else sim_cfg.step_size_ps)
        self._steps_per_frame = int(
            steps_per_frame if steps_per_frame is not None else sim_cfg.steps_per_frame
        )
        if self._step_size <= 0:
            raise ValueError("step_size must be positive")
        if self._steps_per_frame <= 0:
            raise ValueError("steps_per_frame must be positive")

        self._max_iterations = sim_cfg.max_solver_iterations
        self._arena = NodeArena(
            min_admittance=sim_cfg.min_admittance,
            volt_tolerance=sim_cfg.volt_tolerance,
        )
        self._queue = EventQueue()
        self._elements: list[IElement] = []
        self._time = 0
        self._state = SimState.STOPPED

    # ==========================================================
    # Properties
    # ==========================================================

    @property
    def config(self) -> KernelConfig:
        return self._config

    @property
    def circ_time(self) -> int:
        return self._time

    @property
    def step_size(self) -> int:
        return self._step_size

    @property
    def steps_per_frame(self) -> int:
        return self._steps_per_frame

    @property
    def state(self) -> SimState:
        return self._state

    @property
    def arena(self) -> NodeArena:
        return self._arena

    @property
    def elements(self) -> tuple[IElement, ...]:
        return tuple(self._elements)

    # ==========================================================
    # Elements
    # ==========================================================

    def add_element(self, element: IElement) -> None:
        if element not in self._elements:
            self._elements.append(element)

    def remove_element(self, element: IElement) -> None:
        if element in self._elements:
            self._elements.remove(element)
        self._queue.cancel(element)

    # ==========================================================
    # Events
    # ==========================================================

    def add_event(self, delay: int, target: EventTarget) -> None:
        if delay < 0:
            raise ValueError(f"Event delay must not be negative, got {delay}")
        self._queue.push(self._time + int(delay), target)

    def cancel_events(self, target: EventTarget) -> None:
        self._queue.cancel(target)

    def pending_events(self) -> list[Event]:
        """Snapshot of the queue in firing order."""
        return list(self._queue)

    # ==========================================================
    # Lifecycle
    # ==========================================================

    def start(self) -> None:
        """Reset time and queue, then initialize and stamp every element."""
        self._time = 0
        self._queue.clear()
        self._state = SimState.RUNNING

        for node in self._arena:
            node.reset()
        for element in list(self._elements):
            element.initialize()
        for element in list(self._elements):
            element.stamp()
        self.solve()

        logger.info(
            f"Simulation started: {len(self._elements)} elements, "
            f"{len(self._arena)} nodes, step {self._step_size} ps"
        )

    def stop(self) -> None:
        self._queue.clear()
        self._state = SimState.STOPPED
        logger.info(f"Simulation stopped at {self._time} ps")

    def pause(self) -> None:
        if self._state != SimState.RUNNING:
            raise SimulationStateError("pause", self._state.value)
        self._state = SimState.PAUSED

    def resume(self) -> None:
        if self._state != SimState.PAUSED:
            raise SimulationStateError("resume", self._state.value)
        self._state = SimState.RUNNING

    # ==========================================================
    # Stepping
    # ==========================================================

    def run_step(self) -> None:
        """Advance time by one fixed step."""
        self._require_running("step")
        boundary = self._time + self._step_size

        while True:
            event = self._queue.pop_due(boundary)
            if event is None:
                break
            self._time = event.time
            event.target.run_event()
            self.solve()

        self._time = boundary
        for element in list(self._elements):
            element.update_step()
        self.solve()

    def run_frame(self) -> None:
        """Run steps_per_frame steps."""
        for _ in range(self._steps_per_frame):
            self.run_step()

    def run_until(self, time_ps: int) -> None:
        """Step until circ_time reaches or passes time_ps."""
        self._require_running("step")
        while self._time < time_ps:
            self.run_step()

    def run_for(self, duration_ps: int) -> None:
        self.run_until(self._time + duration_ps)

    def solve(self) -> None:
        """Solve dirty nodes and notify listeners of nodes that moved.

        Listeners may re-stamp, so this repeats until the network settles or
        the iteration cap is hit.
        """
        for _ in range(self._max_iterations):
            dirty = self._arena.pop_dirty()
            if not dirty:
                return

            listeners: list[VoltageListener] = []
            for node in dirty:
                if node.solve():
                    for listener in node.listeners():
                        if listener not in listeners:
                            listeners.append(listener)

            for listener in listeners:
                listener.volt_changed()

        if self._arena.has_dirty:
            # Pending changes are picked up on the next solve
            logger.warning(
                f"Solver did not settle after {self._max_iterations} iterations "
                f"at {self._time} ps"
            )

    def _require_running(self, operation: str) -> None:
        if self._state != SimState.RUNNING:
            raise SimulationStateError(operation, self._state.value)
