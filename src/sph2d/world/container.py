from __future__ import annotations

import numpy as np

SPAWN_FRACTION_MIN = 0.05
SPAWN_FRACTION_MAX = 0.95


class Container:
    """
    Resizable rectangular container; the solver's bounds provider.

    Setting a new target width/height does not jump: update(frame_dt) moves
    the current size towards the target with t = 1 - exp(-transition_speed dt),
    so the bounds vary continuously between steps.
    """

    def __init__(
        self,
        width: float = 6.0,
        height: float = 3.0,
        center=(0.0, 0.0),
        transition_speed: float = 4.0,
        spawn_area_fraction: float = 0.5,
    ):
        if not (width > 0.0 and height > 0.0):
            raise ValueError("container width and height must be > 0")

        self.center = np.asarray(center, dtype=np.float64)
        self.width = float(width)
        self.height = float(height)
        self.current_width = self.width
        self.current_height = self.height
        self.transition_speed = float(transition_speed)
        self.spawn_area_fraction = float(spawn_area_fraction)

    def get_center_and_half_extents(self) -> tuple[np.ndarray, np.ndarray]:
        half = np.array([0.5 * self.current_width, 0.5 * self.current_height], dtype=np.float64)
        return self.center.copy(), half

    def resize(self, width: float, height: float) -> None:
        if not (width > 0.0 and height > 0.0):
            raise ValueError("container width and height must be > 0")
        self.width = float(width)
        self.height = float(height)

    def apply_immediate(self) -> None:
        self.current_width = self.width
        self.current_height = self.height

    def update(self, frame_dt: float) -> bool:
        """Returns True while the size is still moving towards the target."""
        if np.isclose(self.current_width, self.width) and np.isclose(self.current_height, self.height):
            self.apply_immediate()
            return False

        t = 1.0 - np.exp(-self.transition_speed * float(frame_dt))
        self.current_width += (self.width - self.current_width) * t
        self.current_height += (self.height - self.current_height) * t
        return True

    def central_spawn_bounds(self) -> tuple[float, float, float, float]:
        """(min_x, max_x, min_y, max_y) of the central spawn region, world space."""
        frac = min(max(self.spawn_area_fraction, SPAWN_FRACTION_MIN), SPAWN_FRACTION_MAX)
        w = self.current_width * frac
        h = self.current_height * frac
        cx, cy = float(self.center[0]), float(self.center[1])
        return cx - 0.5 * w, cx + 0.5 * w, cy - 0.5 * h, cy + 0.5 * h

    def frame_bounds(self) -> tuple[float, float, float, float]:
        hw = 0.5 * self.current_width
        hh = 0.5 * self.current_height
        cx, cy = float(self.center[0]), float(self.center[1])
        return cx - hw, cx + hw, cy - hh, cy + hh
