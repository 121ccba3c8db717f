from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from ..config import PolicyConfig, Regime, RegimeParams
from ..sim.episode import Episode, PolicyState, distance
from .rewards import regime_reward

_INV_SQRT2 = 1.0 / math.sqrt(2.0)

# Unit offsets in enumeration order: axis-aligned first, then diagonals.
# Ties between candidates go to the earliest entry.
CANDIDATE_DIRECTIONS: tuple[tuple[float, float], ...] = (
    (1.0, 0.0),
    (-1.0, 0.0),
    (0.0, 1.0),
    (0.0, -1.0),
    (_INV_SQRT2, _INV_SQRT2),
    (_INV_SQRT2, -_INV_SQRT2),
    (-_INV_SQRT2, _INV_SQRT2),
    (-_INV_SQRT2, -_INV_SQRT2),
)


def _normalize(v: np.ndarray) -> np.ndarray:
    n = float(np.linalg.norm(v))
    if n <= 0.0:
        return v
    return v / n


@dataclass
class PolicyDecision:
    """What the policy chose on one tick (kept for tests and debugging)."""

    velocity: np.ndarray  # float64[2]
    direction: np.ndarray  # selected direction before momentum blending
    candidate_index: int | None  # None -> goal-seeking fallback
    current_reward: float
    best_reward: float
    speed: float


class RewardGuidedPolicy:
    """
    Sampling hill-climb on the reward surface.

    Behavior:
    - Probe 8 positions at a fixed radius around the agent.
    - Move toward the best-scoring probe if it beats the current position.
    - Otherwise head straight for the goal (sparse plateaus, gamma=0, ...).
    - Smooth the heading with a unit momentum vector.
    - Slow down near the goal, speed up far away.
    """

    def __init__(self, config: PolicyConfig | None = None, rng: np.random.Generator | None = None):
        self.config = config or PolicyConfig()
        self.rng = rng if rng is not None else np.random.default_rng()

    def candidates(self, agent_pos: np.ndarray, width: float, height: float, agent_radius: float) -> np.ndarray:
        """Candidate probe positions, clamped inside the canvas. Shape (8, 2)."""
        offsets = np.asarray(CANDIDATE_DIRECTIONS, dtype=np.float64) * self.config.sample_radius
        probes = np.asarray(agent_pos, dtype=np.float64)[None, :] + offsets
        lo = agent_radius
        probes[:, 0] = np.clip(probes[:, 0], lo, max(lo, width - agent_radius))
        probes[:, 1] = np.clip(probes[:, 1], lo, max(lo, height - agent_radius))
        return probes

    def decide(
        self,
        ep: Episode,
        state: PolicyState,
        regime: Regime | None,
        params: RegimeParams,
        width: float,
        height: float,
        agent_radius: float,
    ) -> PolicyDecision:
        cfg = self.config
        agent = ep.agent_pos
        goal = ep.goal_pos
        d = distance(agent, goal)

        # (1) Terminal: no movement, no momentum
        if d < ep.success_threshold:
            state.momentum = np.zeros(2, dtype=np.float64)
            zero = np.zeros(2, dtype=np.float64)
            return PolicyDecision(zero, zero.copy(), None, 0.0, 0.0, 0.0)

        # (2-3) Score the current position and each candidate with the live formula
        current_reward = regime_reward(
            regime, agent, goal, params, reference_distance=d, initial_distance=ep.initial_distance
        )
        best_reward = current_reward
        best_idx: int | None = None
        probes = self.candidates(agent, width, height, agent_radius)
        for i, probe in enumerate(probes):
            r = regime_reward(
                regime, probe, goal, params, reference_distance=d, initial_distance=ep.initial_distance
            )
            # (4) Strictly greater only: earliest candidate wins ties
            if r > best_reward:
                best_reward = r
                best_idx = i
        state.reward_history.append(current_reward)

        if best_idx is None:
            direction = np.asarray(goal, dtype=np.float64) - agent
        else:
            direction = probes[best_idx] - agent

        # (5) Unit direction
        direction = _normalize(direction)
        if cfg.exploration_noise > 0.0:
            jitter = (self.rng.random(2) - 0.5) * cfg.exploration_noise
            direction = _normalize(direction + jitter)

        # (6) Momentum: exponential smoothing of the heading
        decay = cfg.momentum_decay
        state.momentum = _normalize(state.momentum * decay + direction * (1.0 - decay))

        # (7) Blend momentum back into the heading
        w = cfg.momentum_weight
        final = _normalize(direction * (1.0 - w) + state.momentum * w)
        if not np.any(final):
            # Degenerate cancellation; head for the goal rather than stall
            final = _normalize(np.asarray(goal, dtype=np.float64) - agent)

        # (8) Speed: proportional to distance, bounded both ends
        speed = min(cfg.max_speed, max(cfg.min_speed, d * cfg.speed_gain))

        # (9) Velocity command
        return PolicyDecision(
            velocity=final * speed,
            direction=direction,
            candidate_index=best_idx,
            current_reward=current_reward,
            best_reward=best_reward,
            speed=speed,
        )
