# rewardarena/server/config.py
"""Server configuration with sensible defaults for LAN use."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server settings, overridable via environment variables."""

    # SSE
    SSE_MAX_CLIENTS: int = 16
    SSE_KEEPALIVE_S: float = 15.0
    SSE_QUEUE_SIZE: int = 256
    SSE_REPLAY_MAX: int = 512

    # Caches
    GRADIENT_CACHE_MAX: int = 32

    # Simulation
    CANVAS_WIDTH: int = 400
    CANVAS_HEIGHT: int = 300
    STRICT_REGIMES: bool = False
    FRAME_INTERVAL_S: float = 1.0 / 60.0
    SEED: int | None = None

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8090
    RUNS_DIR: Path = Path("runs")

    model_config = SettingsConfigDict(env_prefix="REWARDARENA_", env_file=".env", extra="ignore")


settings = Settings()
