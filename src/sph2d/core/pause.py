from __future__ import annotations

import threading
from enum import Enum


class RunState(Enum):
    RUNNING = "running"
    PAUSED = "paused"


class TickAction(Enum):
    ADVANCE = "advance"          # regular step with configured substeps
    SINGLE_STEP = "single_step"  # one substep-free step while paused
    SKIP = "skip"


class PauseController:
    """
    Running/Paused state machine with single-step-while-paused.

    Signals (toggle, request_step) may arrive from another thread than the
    physics tick, so all transitions happen under one lock. A step request
    is only accepted while paused and is consumed by exactly one
    next_action() call.
    """

    def __init__(self, paused: bool = False):
        self._lock = threading.Lock()
        self._state = RunState.PAUSED if paused else RunState.RUNNING
        self._step_requested = False

    @property
    def state(self) -> RunState:
        with self._lock:
            return self._state

    @property
    def paused(self) -> bool:
        return self.state is RunState.PAUSED

    @property
    def step_requested(self) -> bool:
        with self._lock:
            return self._step_requested

    def toggle(self) -> RunState:
        with self._lock:
            if self._state is RunState.RUNNING:
                self._state = RunState.PAUSED
            else:
                self._state = RunState.RUNNING
                # resuming supersedes a pending single step
                self._step_requested = False
            return self._state

    def request_step(self) -> bool:
        with self._lock:
            if self._state is not RunState.PAUSED:
                return False
            self._step_requested = True
            return True

    def next_action(self) -> TickAction:
        with self._lock:
            if self._state is RunState.RUNNING:
                return TickAction.ADVANCE
            if self._step_requested:
                self._step_requested = False
                return TickAction.SINGLE_STEP
            return TickAction.SKIP
