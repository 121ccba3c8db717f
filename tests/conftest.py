import numpy as np
import pytest

from rewardarena.config import ArenaConfig, PolicyConfig
from rewardarena.env.arena import RewardArena
from rewardarena.sim.episode import Episode, make_episode


@pytest.fixture
def make_arena():
    def _make(**overrides) -> RewardArena:
        policy_config = overrides.pop("policy_config", None)
        seed = overrides.pop("seed", 0)
        return RewardArena(
            ArenaConfig(**overrides),
            policy_config=policy_config or PolicyConfig(),
            rng=np.random.default_rng(seed),
        )

    return _make


@pytest.fixture
def make_ep():
    def _make(agent=(100.0, 150.0), goal=(300.0, 150.0), threshold: float = 35.0) -> Episode:
        return make_episode(agent, goal, threshold)

    return _make


@pytest.fixture
def place_agent():
    """Teleport the agent; the episode record and the body move together."""

    def _place(arena: RewardArena, x: float, y: float) -> None:
        pos = np.array([x, y], dtype=np.float64)
        arena.episode.agent_pos = pos.copy()
        arena.body.set_position(pos)

    return _place
