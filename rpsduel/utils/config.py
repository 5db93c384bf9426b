"""Configuration management for RPS Duel."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration.

    Every field can be overridden from the environment with the
    ``RPSDUEL_`` prefix, e.g. ``RPSDUEL_PORT=8080``.
    """

    model_config = SettingsConfigDict(
        env_prefix="RPSDUEL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server settings
    host: str = "0.0.0.0"
    port: int = 3001
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    # Player stats on join
    starting_health: int = 100
    starting_attack: int = 15
    starting_defense: int = 5

    # Damage settings
    min_damage: int = 5  # Floor so no exchange is ever a stalemate
    max_jitter: int = 5  # Jitter is drawn from [0, max_jitter)

    # Session settings
    game_id_length: int = 6
    max_log_entries: int = 50

    # Delays (seconds)
    animation_delay: float = 2.0  # Between the two attack animations
    state_update_delay: float = 4.0  # Before the post-battle state push
    cleanup_delay: float = 5.0  # Before a finished game is dropped


# Global config instance
config = Config()
