from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from ..config import ArenaConfig, PolicyConfig, Regime, RegimeParams
from ..constants import TERMINAL_REWARD
from ..sim.body import PhysicsBody, PointBody
from ..sim.episode import (
    Episode,
    PolicyState,
    make_episode,
    observe_distance,
    record_position,
    reset_episode,
    reset_policy_state,
)
from .policy import PolicyDecision, RewardGuidedPolicy
from .rewards import regime_reward

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepResult:
    reward: float
    done: bool
    # Arena success counter as of this tick; several successes can share one frame
    success_count: int = field(default=0, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {"reward": self.reward, "done": self.done, "success_count": self.success_count}


class RewardArena:
    """
    One regime panel: an agent chasing a static goal.

    Each `step()` is one tick:
    (a) score the pre-move state under the regime,
    (b) on success reset the episode and return (1.0, done),
    (c) ask the policy for a velocity and hand it to the body,
    (d) advance the body by one timestep,
    (e) push the new position into the history buffer,
    (f) remember this tick's starting distance for the next shaping term.
    """

    def __init__(
        self,
        config: ArenaConfig | None = None,
        policy: RewardGuidedPolicy | None = None,
        body: PhysicsBody | None = None,
        *,
        policy_config: PolicyConfig | None = None,
        rng: np.random.Generator | None = None,
    ):
        self.config = config or ArenaConfig()
        self.policy = policy or RewardGuidedPolicy(policy_config, rng=rng)
        cfg = self.config
        self.episode: Episode = make_episode(cfg.spawn, cfg.goal, cfg.threshold, cfg.history_capacity)
        self.policy_state = PolicyState()
        self.body: PhysicsBody = body or PointBody(cfg.spawn, cfg.agent_radius, air_friction=cfg.air_friction)
        self.body.set_position(self.episode.spawn_pos.copy())
        self.body.set_velocity(np.zeros(2, dtype=np.float64))
        self.last_decision: PolicyDecision | None = None
        self.total_ticks = 0

    # ------------------------------------------------------------------
    # Read-only accessors for renderers
    # ------------------------------------------------------------------

    def get_agent_position(self) -> tuple[float, float]:
        return (float(self.episode.agent_pos[0]), float(self.episode.agent_pos[1]))

    def get_goal_position(self) -> tuple[float, float]:
        return (float(self.episode.goal_pos[0]), float(self.episode.goal_pos[1]))

    def get_distance(self) -> float:
        return self.episode.distance

    def get_success_count(self) -> int:
        return self.episode.success_count

    def reset_success_count(self) -> None:
        self.episode.success_count = 0

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def evaluate(self, regime: Regime | None, params: RegimeParams) -> float:
        """Reward for the current (pre-move) state. Latches initial_distance."""
        ep = self.episode
        d = observe_distance(ep)
        return regime_reward(
            regime,
            ep.agent_pos,
            ep.goal_pos,
            params,
            reference_distance=ep.previous_distance if ep.previous_distance is not None else d,
            initial_distance=ep.initial_distance,
        )

    def step(
        self,
        regime: Regime | str | None,
        gamma: float | None = None,
        learning_rate: float | None = None,
        width: float | None = None,
        height: float | None = None,
        *,
        params: RegimeParams | None = None,
    ) -> StepResult:
        cfg = self.config
        resolved = Regime.parse(regime, strict=cfg.strict_regimes)
        params = params or RegimeParams()
        if gamma is not None or learning_rate is not None:
            params = RegimeParams(
                threshold=params.threshold,
                gamma=params.gamma if gamma is None else float(gamma),
                learning_rate=params.learning_rate if learning_rate is None else float(learning_rate),
                base_reward=params.base_reward,
                sigma=params.sigma,
            )
        bound_x = float(cfg.width if width is None else width)
        bound_y = float(cfg.height if height is None else height)
        ep = self.episode
        self.total_ticks += 1

        # (a) Reward attributed to the tick just completed
        start_distance = ep.distance
        reward = self.evaluate(resolved, params)

        # (b) Success: zero-duration transition back to spawn
        if ep.is_success:
            self._on_success(resolved)
            return StepResult(reward=TERMINAL_REWARD, done=True, success_count=ep.success_count)

        # (c) Policy -> velocity command
        decision = self.policy.decide(ep, self.policy_state, resolved, params, bound_x, bound_y, cfg.agent_radius)
        self.last_decision = decision
        self.body.set_velocity(decision.velocity)

        # (d) Physics
        self.body.advance(cfg.dt_s)

        # (e) History
        record_position(ep, self.body.get_position(), self.body.get_velocity())

        # (f) Start-of-tick distance becomes Phi(s) for the next shaping term
        ep.previous_distance = start_distance

        return StepResult(reward=float(reward), done=False, success_count=ep.success_count)

    def _on_success(self, regime: Regime | None) -> None:
        ep = self.episode
        ep.success_count += 1
        label = regime.value if regime is not None else "unknown"
        logger.debug(f"[{label}] success #{ep.success_count} after {ep.ticks} ticks")
        reset_episode(ep)
        reset_policy_state(self.policy_state)
        self.body.set_position(ep.spawn_pos.copy())
        self.body.set_velocity(np.zeros(2, dtype=np.float64))
        self.last_decision = None

    def snapshot(self) -> dict[str, Any]:
        ep = self.episode
        ax, ay = self.get_agent_position()
        gx, gy = self.get_goal_position()
        return {
            "agent": {"x": ax, "y": ay},
            "goal": {"x": gx, "y": gy},
            "distance": self.get_distance(),
            "success_count": ep.success_count,
            "success_threshold": ep.success_threshold,
            "initial_distance": ep.initial_distance,
            "previous_distance": ep.previous_distance,
            "episode_ticks": ep.ticks,
            "total_ticks": self.total_ticks,
        }
