"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings pulled from MAPCOLOR_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MAPCOLOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Log format (json or console)")

    # Board
    board_width: float = Field(default=800, gt=0, description="Default board width")
    board_height: float = Field(default=600, gt=0, description="Default board height")
    board_margin: float = Field(default=60, ge=0, description="Inset of the outline from the board edge")

    # Generation
    split_attempts: int = Field(default=8, ge=1, description="Organic split attempts per region")
    adjacency_tolerance: float = Field(default=15.0, gt=0, description="Shared-border distance")
    adjacency_reach_factor: float = Field(
        default=2.2, gt=0, description="Center-distance rejection multiplier"
    )

    # Solver
    max_backtrack_steps: int = Field(
        default=20_000, ge=1, description="Backtracking budget before the greedy fallback"
    )


settings = Settings()
