# vertexlabels/core/scheduler.py
"""
Simulation scheduler: Idle -> Running -> Idle state machine driving the force solver.
The host calls tick() once per animation frame (or any cooperative loop); tests call
run_to_completion(). Nothing here blocks or schedules itself.
"""

from __future__ import annotations

import logging
from typing import Callable

from vertexlabels.core import error_codes
from vertexlabels.core.config import (
    CYCLE_MAX_PERIOD,
    CYCLE_REL_TOL,
    CYCLE_TICKS,
    ENERGY_DELTA_EPS_PX2,
    ENERGY_FLOOR_PX2,
    STABLE_TICKS,
    STEPS_PER_TICK,
)
from vertexlabels.core.solver import ForceSolver
from vertexlabels.core.types import Label, SimulationState, ViewportBounds

logger = logging.getLogger(__name__)


def _repeats_earlier_tick(energy: float, history: list[float]) -> bool:
    """True if energy matches the tick 2..CYCLE_MAX_PERIOD ticks back (period 1 is the stable check)."""
    tolerance = max(ENERGY_DELTA_EPS_PX2, CYCLE_REL_TOL * energy)
    return any(abs(energy - history[-k]) < tolerance for k in range(2, len(history) + 1))


class SimulationScheduler:
    """
    At most one run at a time. labels_provider returns the live label list each tick,
    so labels added or removed during a run are picked up on the next step.
    """

    def __init__(
        self,
        solver: ForceSolver,
        labels_provider: Callable[[], list[Label]],
        view_provider: Callable[[], tuple[ViewportBounds, int]],
        render: Callable[[], None] | None = None,
        steps_per_tick: int = STEPS_PER_TICK,
    ) -> None:
        self.solver = solver
        self._labels = labels_provider
        self._view = view_provider
        self._render = render
        self.steps_per_tick = steps_per_tick
        self.state = SimulationState()
        self.on_complete: list[Callable[[], None]] = []

    @property
    def running(self) -> bool:
        return self.state.running

    def start(self) -> bool:
        """Begin a run. No-op (returns False) when already running."""
        if self.state.running:
            return False
        state = SimulationState(running=True)
        for label in self._labels():
            state.previous_position_by_label[label.key] = label.position
            state.velocity_by_label[label.key] = (0.0, 0.0)
        self.state = state
        logger.debug("Simulation started with %d labels", len(state.previous_position_by_label))
        return True

    def stop(self) -> None:
        """Force Idle without further steps or completion callbacks."""
        if self.state.running:
            logger.debug("Simulation stopped after %d iterations", self.state.iteration_count)
        self.state.running = False
        self.state.previous_position_by_label.clear()
        self.state.velocity_by_label.clear()

    def restart(self) -> None:
        """Stop any current run and start a fresh one."""
        self.stop()
        self.start()

    def tick(self) -> bool:
        """
        Advance one animation tick. Returns True while the run should continue.
        """
        if not self.state.running:
            return False
        state = self.state
        budget = self.solver.settings.iterations
        bounds, zoom = self._view()

        energies: list[float] = []
        for _ in range(self.steps_per_tick):
            if state.iteration_count >= budget:
                break
            energies.append(self.solver.step(self._labels(), state, bounds, zoom))
            state.iteration_count += 1
        state.tick_count += 1

        if energies:
            energy = float(sum(energies) / len(energies))
            if state.previous_energy is not None and abs(energy - state.previous_energy) < ENERGY_DELTA_EPS_PX2:
                state.stable_step_count += 1
            else:
                state.stable_step_count = 0
            if _repeats_earlier_tick(energy, state.energy_history):
                state.cycle_tick_count += 1
            else:
                state.cycle_tick_count = 0
            state.energy_history = (state.energy_history + [energy])[-CYCLE_MAX_PERIOD:]
            state.previous_energy = energy
            state.last_energy = energy
            state.converged = bool(energy < ENERGY_FLOOR_PX2 or state.stable_step_count >= STABLE_TICKS)
            state.cycle_detected = not state.converged and state.cycle_tick_count >= CYCLE_TICKS

        if self._render is not None:
            self._render()

        if state.converged or state.cycle_detected or state.iteration_count >= budget:
            self._finish()
            return False
        return True

    def _finish(self) -> None:
        state = self.state
        state.running = False
        state.previous_position_by_label.clear()
        state.velocity_by_label.clear()
        if state.converged:
            logger.debug(
                "Simulation converged: %d ticks, %d iterations, energy %.4g px^2",
                state.tick_count, state.iteration_count, state.last_energy,
            )
        elif state.cycle_detected:
            logger.warning(
                "%s: energy repeats with a period of a few ticks; stopped after %d iterations, energy %.4g px^2",
                error_codes.NOT_CONVERGED, state.iteration_count, state.last_energy,
            )
        else:
            logger.warning(
                "%s: iteration budget %d used, energy %.4g px^2",
                error_codes.NOT_CONVERGED, state.iteration_count, state.last_energy,
            )
        if self._render is not None:
            self._render()
        for callback in list(self.on_complete):
            callback()

    def run_to_completion(self, max_ticks: int | None = None) -> int:
        """Drive ticks synchronously until Idle. Returns the number of ticks run."""
        ticks = 0
        while self.state.running:
            if max_ticks is not None and ticks >= max_ticks:
                break
            self.tick()
            ticks += 1
        return ticks
