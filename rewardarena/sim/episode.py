"""Episode and policy records.

Both records are plain data; the functions below are the only writers of
their transient fields. The step loop in `rewardarena.env.arena` calls them in
tick order.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field

import numpy as np

from ..constants import HISTORY_CAPACITY


def distance(a: np.ndarray | tuple[float, float], b: np.ndarray | tuple[float, float]) -> float:
    """Euclidean distance in pixel space."""
    return math.hypot(float(a[0]) - float(b[0]), float(a[1]) - float(b[1]))


def _vec(pos: np.ndarray | tuple[float, float]) -> np.ndarray:
    return np.array([float(pos[0]), float(pos[1])], dtype=np.float64)


@dataclass
class Episode:
    spawn_pos: np.ndarray  # float64[2], agent start of every episode
    goal_pos: np.ndarray  # float64[2], static
    success_threshold: float
    history_capacity: int = HISTORY_CAPACITY

    agent_pos: np.ndarray = field(default_factory=lambda: np.zeros(2, dtype=np.float64))
    # Body velocity after the last advance (damped, not the raw command)
    agent_vel: np.ndarray = field(default_factory=lambda: np.zeros(2, dtype=np.float64))
    distance_history: deque[np.ndarray] = field(default_factory=deque)

    # Set on the first evaluation of a fresh episode, cleared on reset.
    initial_distance: float | None = None
    # Distance at the start of the previous tick (Phi(s) for shaping).
    previous_distance: float | None = None

    # Survives episode resets; only reset_success_count() clears it.
    success_count: int = 0
    ticks: int = 0  # Ticks in the current episode

    def __post_init__(self) -> None:
        if self.success_threshold <= 0.0:
            raise ValueError(f"success_threshold must be > 0, got {self.success_threshold}")
        self.goal_pos.setflags(write=False)
        self.distance_history = deque(self.distance_history, maxlen=self.history_capacity)

    @property
    def distance(self) -> float:
        return distance(self.agent_pos, self.goal_pos)

    @property
    def is_success(self) -> bool:
        return self.distance < self.success_threshold


@dataclass
class PolicyState:
    momentum: np.ndarray = field(default_factory=lambda: np.zeros(2, dtype=np.float64))
    reward_history: deque[float] = field(default_factory=lambda: deque(maxlen=HISTORY_CAPACITY))


def make_episode(
    spawn: np.ndarray | tuple[float, float],
    goal: np.ndarray | tuple[float, float],
    success_threshold: float,
    history_capacity: int = HISTORY_CAPACITY,
) -> Episode:
    spawn_pos = _vec(spawn)
    return Episode(
        spawn_pos=spawn_pos,
        goal_pos=_vec(goal),
        success_threshold=float(success_threshold),
        history_capacity=history_capacity,
        agent_pos=spawn_pos.copy(),
    )


def reset_episode(ep: Episode) -> None:
    """Restore transient fields to spawn defaults. success_count is untouched."""
    ep.agent_pos = ep.spawn_pos.copy()
    ep.agent_vel = np.zeros(2, dtype=np.float64)
    ep.distance_history.clear()
    ep.initial_distance = None
    ep.previous_distance = None
    ep.ticks = 0


def observe_distance(ep: Episode) -> float:
    """Measure the current distance, latching initial_distance on first use."""
    d = ep.distance
    if ep.initial_distance is None:
        ep.initial_distance = d
    return d


def record_position(ep: Episode, pos: np.ndarray, vel: np.ndarray | None = None) -> None:
    """Adopt the post-advance body state and push it into the ring buffer."""
    ep.agent_pos = _vec(pos)
    if vel is not None:
        ep.agent_vel = _vec(vel)
    ep.distance_history.append(ep.agent_pos.copy())
    ep.ticks += 1


def reset_policy_state(state: PolicyState) -> None:
    state.momentum = np.zeros(2, dtype=np.float64)
    state.reward_history.clear()
