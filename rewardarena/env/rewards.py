"""Reward computation for the four regimes.

This module encapsulates all reward logic, making it easier to:
1. Compare regimes on identical trajectories
2. Reuse the live formulas for policy look-ahead and the gradient overlay
3. Add a regime without touching the step loop

Design:
- RegimeParams (config.py): per-regime knobs (threshold, gamma, learning_rate, sigma)
- Free functions: one pure formula per regime, no state
- regime_reward: dispatch used by the step loop and the policy
"""

from __future__ import annotations

import math

import numpy as np

from ..config import Regime, RegimeParams
from ..constants import DEFAULT_GAMMA, DEFAULT_LEARNING_RATE, DEFAULT_SPARSE_THRESHOLD, SEMANTIC_SIGMA
from ..sim.episode import distance

Vec2 = np.ndarray | tuple[float, float]


def sparse_reward(agent_pos: Vec2, goal_pos: Vec2, threshold: float = DEFAULT_SPARSE_THRESHOLD) -> float:
    """1.0 strictly inside the threshold radius, else 0.0."""
    return 1.0 if distance(agent_pos, goal_pos) < threshold else 0.0


def potential(pos: Vec2, goal_pos: Vec2) -> float:
    """Phi(s) = -distance(s, goal)."""
    return -distance(pos, goal_pos)


def shaping_reward(
    current_pos: Vec2,
    next_pos: Vec2,
    goal_pos: Vec2,
    gamma: float = DEFAULT_GAMMA,
    base_reward: float = 0.0,
) -> float:
    """Potential-based shaping: base + gamma * Phi(s') - Phi(s).

    With gamma=1 and base=0 the sum over a trajectory telescopes to
    Phi(final) - Phi(initial), i.e. the net distance closed.
    """
    return base_reward + gamma * potential(next_pos, goal_pos) - potential(current_pos, goal_pos)


def progress_reward(
    current_pos: Vec2,
    goal_pos: Vec2,
    initial_distance: float | None,
    learning_rate: float = DEFAULT_LEARNING_RATE,
) -> float:
    """Continuous progress model: lr * max(0, normalised distance reduction)."""
    if initial_distance is None or initial_distance == 0:
        return 0.0
    d = distance(current_pos, goal_pos)
    progress = max(0.0, (initial_distance - d) / initial_distance)
    return learning_rate * progress


def semantic_reward(agent_pos: Vec2, goal_pos: Vec2, sigma: float = SEMANTIC_SIGMA) -> float:
    """Gaussian similarity exp(-d^2 / 2 sigma^2); 1.0 at the goal."""
    d = distance(agent_pos, goal_pos)
    return math.exp(-(d * d) / (2.0 * sigma * sigma))


def regime_reward(
    regime: Regime | None,
    probe_pos: Vec2,
    goal_pos: Vec2,
    params: RegimeParams,
    *,
    reference_distance: float | None = None,
    initial_distance: float | None = None,
) -> float:
    """Evaluate `regime` with `probe_pos` as the position being scored.

    Args:
        regime: Resolved regime, or None for an unrecognised id (scores 0).
        probe_pos: Live agent position or a look-ahead candidate. For shaping
            this is s'.
        goal_pos: Static goal.
        params: Regime parameters.
        reference_distance: Shaping only. Distance of s (Phi(s) = -distance).
            Defaults to the probe's own distance (potential-only snapshot).
        initial_distance: Progress only. Episode's latched start distance.
    """
    if regime is Regime.SPARSE:
        return sparse_reward(probe_pos, goal_pos, params.threshold)
    if regime is Regime.SHAPING:
        d_next = distance(probe_pos, goal_pos)
        d_ref = d_next if reference_distance is None else reference_distance
        # Same formula as shaping_reward, written on distances
        return params.base_reward + params.gamma * (-d_next) - (-d_ref)
    if regime is Regime.PROGRESS:
        return progress_reward(probe_pos, goal_pos, initial_distance, params.learning_rate)
    if regime is Regime.SEMANTIC:
        return semantic_reward(probe_pos, goal_pos, params.sigma)
    return 0.0
