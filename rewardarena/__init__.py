from .config import ArenaConfig, PolicyConfig, Regime, RegimeParams, SimulationSettings
from .env.arena import RewardArena, StepResult
from .env.gradient import generate_gradient_field

__all__ = [
    "ArenaConfig",
    "PolicyConfig",
    "Regime",
    "RegimeParams",
    "RewardArena",
    "SimulationSettings",
    "StepResult",
    "generate_gradient_field",
]
