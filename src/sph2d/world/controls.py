from __future__ import annotations

import threading

import numpy as np

from sph2d.interaction.pointer import InteractionMode


class StaticPointer:
    """Pointer provider with a settable world position and mode."""

    def __init__(self, position=(0.0, 0.0), mode: InteractionMode = InteractionMode.NONE):
        self.position = np.asarray(position, dtype=np.float64)
        self.mode = mode

    def get_pointer_world_position(self) -> np.ndarray:
        return self.position.copy()

    def get_active_mode(self) -> InteractionMode:
        return self.mode


class ManualPauseSignals:
    """
    Latched pause/step signals, e.g. fed from a key handler thread and
    consumed once per visual frame.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._toggle = False
        self._step = False

    def press_toggle(self) -> None:
        with self._lock:
            self._toggle = True

    def press_step(self) -> None:
        with self._lock:
            self._step = True

    def consume_toggle(self) -> bool:
        with self._lock:
            fired, self._toggle = self._toggle, False
            return fired

    def consume_step_request(self) -> bool:
        with self._lock:
            fired, self._step = self._step, False
            return fired
