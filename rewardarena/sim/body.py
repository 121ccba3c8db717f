from __future__ import annotations

from typing import Protocol

import numpy as np

from ..constants import AIR_FRICTION, BASE_DT_S


class PhysicsBody(Protocol):
    """Velocity-commanded body stepped by an external integrator."""

    def set_position(self, pos: np.ndarray) -> None: ...

    def set_velocity(self, vel: np.ndarray) -> None: ...

    def get_position(self) -> np.ndarray: ...

    def get_velocity(self) -> np.ndarray: ...

    def advance(self, dt: float) -> None: ...


class PointBody:
    """
    Kinematic point mass with air friction.

    A commanded velocity is expressed in pixels per base step (1/60 s). Each
    advance damps the velocity by `air_friction` and then moves the body by the
    damped velocity, so a fresh command of v moves the body by v * (1 - friction)
    on the next 60 Hz step.
    """

    def __init__(
        self,
        pos: np.ndarray | tuple[float, float],
        radius: float,
        air_friction: float = AIR_FRICTION,
        base_dt: float = BASE_DT_S,
    ):
        self.pos = np.asarray(pos, dtype=np.float64).copy()
        self.vel = np.zeros(2, dtype=np.float64)
        self.radius = float(radius)
        self.air_friction = float(air_friction)
        self.base_dt = float(base_dt)

    def set_position(self, pos: np.ndarray) -> None:
        self.pos = np.asarray(pos, dtype=np.float64).copy()

    def set_velocity(self, vel: np.ndarray) -> None:
        self.vel = np.asarray(vel, dtype=np.float64).copy()

    def get_position(self) -> np.ndarray:
        return self.pos.copy()

    def get_velocity(self) -> np.ndarray:
        return self.vel.copy()

    def advance(self, dt: float) -> None:
        time_scale = dt / self.base_dt
        damping = max(0.0, 1.0 - self.air_friction * time_scale)
        self.vel = self.vel * damping
        self.pos = self.pos + self.vel * time_scale
