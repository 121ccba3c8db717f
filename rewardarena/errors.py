from __future__ import annotations


class RewardArenaError(Exception):
    """Base class for rewardarena errors."""


class UnknownRegimeError(RewardArenaError, ValueError):
    """Raised in strict mode when a regime identifier is not recognised."""

    def __init__(self, regime: object):
        self.regime = regime
        super().__init__(f"Unknown reward regime: {regime!r}")


class SettingsError(RewardArenaError, ValueError):
    """Raised when simulation settings fall outside their documented ranges."""
