from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from enum import Enum

from .constants import (
    AGENT_RADIUS,
    AIR_FRICTION,
    BASE_DT_S,
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    DEFAULT_GAMMA,
    DEFAULT_LEARNING_RATE,
    DEFAULT_SPARSE_THRESHOLD,
    GOAL_RADIUS,
    HISTORY_CAPACITY,
    MAX_SPEED,
    MIN_SPEED,
    MOMENTUM_DECAY,
    MOMENTUM_WEIGHT,
    SAMPLE_RADIUS,
    SEMANTIC_SIGMA,
    SPEED_GAIN,
)
from .errors import SettingsError, UnknownRegimeError

logger = logging.getLogger(__name__)

# Unknown ids arrive from HTTP clients; remember only the most recent ones
UNKNOWN_REGIME_MEMO = 128


@functools.lru_cache(maxsize=UNKNOWN_REGIME_MEMO)
def _warn_unknown_regime(value: str) -> None:
    logger.warning(f"Unknown reward regime {value!r}; falling back to zero reward")


class Regime(str, Enum):
    """Reward regimes compared side by side."""

    SPARSE = "sparse"
    SHAPING = "shaping"
    PROGRESS = "progress"
    SEMANTIC = "semantic"

    @classmethod
    def parse(cls, value: Regime | str | None, *, strict: bool = False) -> Regime | None:
        """Resolve a regime id.

        Lenient mode returns None for unknown ids (callers treat that as a
        zero-reward regime); strict mode raises UnknownRegimeError.
        """
        if isinstance(value, Regime):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            if key in _REGIME_ALIASES:
                return _REGIME_ALIASES[key]
        if strict:
            raise UnknownRegimeError(value)
        _warn_unknown_regime(str(value)[:64])
        return None


_REGIME_ALIASES: dict[str, Regime] = {
    "sparse": Regime.SPARSE,
    "shaping": Regime.SHAPING,
    "progress": Regime.PROGRESS,
    "prm": Regime.PROGRESS,  # Process/progress reward model
    "semantic": Regime.SEMANTIC,
}


@dataclass(frozen=True)
class RegimeParams:
    threshold: float = DEFAULT_SPARSE_THRESHOLD  # Sparse reward radius (px)
    gamma: float = DEFAULT_GAMMA  # Shaping discount
    learning_rate: float = DEFAULT_LEARNING_RATE  # Progress model scale
    base_reward: float = 0.0  # Task reward added to the shaping term
    sigma: float = SEMANTIC_SIGMA  # Semantic kernel width (px)

    def cache_key(self) -> tuple[float, float, float, float, float]:
        return (self.threshold, self.gamma, self.learning_rate, self.base_reward, self.sigma)


@dataclass(frozen=True)
class ArenaConfig:
    width: int = CANVAS_WIDTH
    height: int = CANVAS_HEIGHT
    agent_radius: float = AGENT_RADIUS
    goal_radius: float = GOAL_RADIUS
    air_friction: float = AIR_FRICTION
    dt_s: float = BASE_DT_S
    history_capacity: int = HISTORY_CAPACITY
    # None -> agent_radius + goal_radius (bodies touching)
    success_threshold: float | None = None
    # Unknown regime ids raise instead of degrading to zero reward.
    strict_regimes: bool = False

    @property
    def threshold(self) -> float:
        if self.success_threshold is not None:
            return float(self.success_threshold)
        return float(self.agent_radius + self.goal_radius)

    @property
    def spawn(self) -> tuple[float, float]:
        return (self.width / 4.0, self.height / 2.0)

    @property
    def goal(self) -> tuple[float, float]:
        return (self.width * 0.75, self.height / 2.0)


@dataclass(frozen=True)
class PolicyConfig:
    sample_radius: float = SAMPLE_RADIUS
    momentum_decay: float = MOMENTUM_DECAY
    momentum_weight: float = MOMENTUM_WEIGHT
    speed_gain: float = SPEED_GAIN
    min_speed: float = MIN_SPEED
    max_speed: float = MAX_SPEED
    # Uniform jitter added to the chosen direction before normalisation (0 disables).
    exploration_noise: float = 0.0


@dataclass
class SimulationSettings:
    """Knobs shared by every regime panel; may change between frames."""

    gamma: float = DEFAULT_GAMMA
    learning_rate: float = DEFAULT_LEARNING_RATE
    speed_multiplier: int = 1
    width: int = CANVAS_WIDTH
    height: int = CANVAS_HEIGHT
    regimes: tuple[Regime, ...] = field(default_factory=lambda: tuple(Regime))

    def validate(self) -> None:
        if not 0.0 <= self.gamma <= 1.0:
            raise SettingsError(f"gamma must be in [0, 1], got {self.gamma}")
        if not 0.0 <= self.learning_rate <= 1.0:
            raise SettingsError(f"learning_rate must be in [0, 1], got {self.learning_rate}")
        if self.speed_multiplier < 1:
            raise SettingsError(f"speed_multiplier must be >= 1, got {self.speed_multiplier}")

    def clamped(self) -> SimulationSettings:
        return SimulationSettings(
            gamma=min(1.0, max(0.0, float(self.gamma))),
            learning_rate=min(1.0, max(0.0, float(self.learning_rate))),
            speed_multiplier=max(1, int(self.speed_multiplier)),
            width=self.width,
            height=self.height,
            regimes=self.regimes,
        )

    def regime_params(self) -> RegimeParams:
        return RegimeParams(gamma=self.gamma, learning_rate=self.learning_rate)
