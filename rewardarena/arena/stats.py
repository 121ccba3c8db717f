"""Run statistics and the rolling success chart."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any

from ..config import Regime
from ..constants import CHART_CAPACITY


@dataclass
class RegimeStats:
    """Aggregate statistics for one regime over a run."""

    successes: int = 0
    ticks: int = 0
    total_reward: float = 0.0
    # Ticks per completed episode, in order
    episode_lengths: list[int] = field(default_factory=list)

    @property
    def mean_episode_length(self) -> float | None:
        if not self.episode_lengths:
            return None
        return sum(self.episode_lengths) / len(self.episode_lengths)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dict for JSON storage."""
        return {
            "successes": self.successes,
            "ticks": self.ticks,
            "total_reward": self.total_reward,
            "episode_lengths": list(self.episode_lengths),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RegimeStats:
        return cls(
            successes=int(data.get("successes", 0)),
            ticks=int(data.get("ticks", 0)),
            total_reward=float(data.get("total_reward", 0.0)),
            episode_lengths=[int(n) for n in data.get("episode_lengths", [])],
        )


@dataclass
class RunRecord:
    """Complete record of a headless run across regimes."""

    run_id: str
    timestamp: float
    frames: int
    speed_multiplier: int
    gamma: float
    learning_rate: float
    seed: int | None
    regimes: dict[str, RegimeStats]

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "timestamp": self.timestamp,
            "frames": self.frames,
            "speed_multiplier": self.speed_multiplier,
            "gamma": self.gamma,
            "learning_rate": self.learning_rate,
            "seed": self.seed,
            "regimes": {name: stats.to_dict() for name, stats in self.regimes.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RunRecord:
        return cls(
            run_id=data["run_id"],
            timestamp=float(data["timestamp"]),
            frames=int(data["frames"]),
            speed_multiplier=int(data["speed_multiplier"]),
            gamma=float(data["gamma"]),
            learning_rate=float(data["learning_rate"]),
            seed=data.get("seed"),
            regimes={name: RegimeStats.from_dict(s) for name, s in data.get("regimes", {}).items()},
        )


class SuccessChart:
    """Rolling cumulative success counts, one row per success event.

    Each row carries every regime's latest count forward, so a row is a full
    snapshot at the moment one regime scored.
    """

    def __init__(self, regimes: tuple[Regime, ...] = tuple(Regime), capacity: int = CHART_CAPACITY) -> None:
        self.regimes = tuple(regimes)
        self.rows: deque[dict[str, int]] = deque(maxlen=capacity)

    def record(self, regime: Regime, count: int) -> dict[str, int]:
        last = self.rows[-1] if self.rows else {r.value: 0 for r in self.regimes}
        row = {**last, regime.value: count}
        self.rows.append(row)
        return row

    def clear(self) -> None:
        self.rows.clear()

    def to_list(self) -> list[dict[str, int]]:
        return [dict(row) for row in self.rows]

    def __len__(self) -> int:
        return len(self.rows)
