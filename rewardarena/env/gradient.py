"""Static reward overlay for a canvas.

Evaluates every pixel as if a motionless agent stood there and maps the
result to a blue -> green RGBA ramp. Independent of any episode: only the goal
and the regime parameters go in, so results can be memoised by those inputs.
"""

from __future__ import annotations

from collections.abc import Mapping

import numpy as np

from ..config import Regime, RegimeParams
from ..constants import GRADIENT_ALPHA, SHAPING_GRADIENT_OFFSET, SHAPING_GRADIENT_SCALE


def coerce_params(params: RegimeParams | Mapping[str, float] | None) -> RegimeParams:
    """Accept RegimeParams or a partial mapping (threshold/gamma/learning_rate)."""
    if params is None:
        return RegimeParams()
    if isinstance(params, RegimeParams):
        return params
    defaults = RegimeParams()
    return RegimeParams(
        threshold=float(params.get("threshold", defaults.threshold)),
        gamma=float(params.get("gamma", defaults.gamma)),
        learning_rate=float(params.get("learning_rate", params.get("learningRate", defaults.learning_rate))),
        base_reward=defaults.base_reward,
        sigma=float(params.get("sigma", defaults.sigma)),
    )


def reward_field(
    width: int,
    height: int,
    goal_pos: tuple[float, float],
    regime: Regime | None,
    params: RegimeParams,
) -> np.ndarray:
    """Per-pixel static reward, float64[height, width], before clamping."""
    xs = np.arange(width, dtype=np.float64)
    ys = np.arange(height, dtype=np.float64)
    dx = xs[None, :] - float(goal_pos[0])
    dy = ys[:, None] - float(goal_pos[1])
    d = np.hypot(dx, dy)

    if regime is Regime.SPARSE:
        return (d < params.threshold).astype(np.float64)
    if regime is Regime.SHAPING:
        # current == next: gamma * Phi(s) - Phi(s) with base reward 0
        r = params.gamma * (-d) - (-d)
        return (r + SHAPING_GRADIENT_OFFSET) / SHAPING_GRADIENT_SCALE
    if regime is Regime.PROGRESS:
        # The canvas diagonal stands in for the episode's initial distance
        diag = float(np.hypot(width, height))
        if diag == 0.0:
            return np.zeros_like(d)
        return params.learning_rate * np.maximum(0.0, (diag - d) / diag)
    if regime is Regime.SEMANTIC:
        return np.exp(-(d**2) / (2.0 * params.sigma**2))
    return np.zeros_like(d)


def colorize(intensity: np.ndarray, alpha: int = GRADIENT_ALPHA) -> np.ndarray:
    """Two-segment ramp: dark blue (0) -> light blue (0.5) -> green (1)."""
    t = np.clip(intensity, 0.0, 1.0)
    low = t < 0.5
    hi_t = (t - 0.5) * 2.0
    lo_t = t * 2.0

    rgba = np.zeros((*t.shape, 4), dtype=np.uint8)
    green = np.where(low, np.floor(lo_t * 100.0), np.floor(100.0 + hi_t * 155.0))
    blue = np.where(low, np.floor(100.0 + lo_t * 155.0), np.floor(255.0 - hi_t * 100.0))
    rgba[..., 1] = green.astype(np.uint8)
    rgba[..., 2] = blue.astype(np.uint8)
    rgba[..., 3] = alpha
    return rgba


def generate_gradient_field(
    width: int,
    height: int,
    goal_pos: tuple[float, float],
    regime: Regime | str | None,
    params: RegimeParams | Mapping[str, float] | None = None,
    *,
    strict: bool = False,
) -> np.ndarray:
    """RGBA overlay, uint8[height, width, 4], row-major like an image buffer."""
    resolved = Regime.parse(regime, strict=strict)
    field = reward_field(int(width), int(height), goal_pos, resolved, coerce_params(params))
    return colorize(field)
