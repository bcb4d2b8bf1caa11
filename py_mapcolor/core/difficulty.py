"""Difficulty tiers and the generation parameters they imply."""

from enum import Enum
from typing import Dict, Tuple, Union

from pydantic import BaseModel, Field

from .alea_prng import AleaPRNG


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class TierSpec(BaseModel):
    """Fixed parameters of one difficulty tier."""

    region_range: Tuple[int, int] = Field(..., description="Inclusive region count range")
    target_colors: int = Field(..., ge=1, description="Colors the tier aims to require")
    base_complexity: float = Field(..., ge=0.0, le=1.0, description="Complexity at level 1")


TIERS: Dict[Difficulty, TierSpec] = {
    Difficulty.EASY: TierSpec(region_range=(4, 7), target_colors=3, base_complexity=0.3),
    Difficulty.MEDIUM: TierSpec(region_range=(8, 11), target_colors=4, base_complexity=0.5),
    Difficulty.HARD: TierSpec(region_range=(12, 15), target_colors=5, base_complexity=0.7),
}

COMPLEXITY_PER_LEVEL = 0.05
MAX_COMPLEXITY = 0.9


class DifficultyConfig(BaseModel):
    """Generation input derived from a tier and a progression level."""

    region_count: int = Field(..., ge=1, description="Number of regions to generate")
    complexity: float = Field(..., ge=0.0, le=1.0, description="Organic jitter level")
    target_colors: int = Field(default=3, ge=1, description="Tier's intended color count")


def parse_difficulty(value: Union[str, Difficulty]) -> Difficulty:
    try:
        return Difficulty(value)
    except ValueError:
        valid = ", ".join(d.value for d in Difficulty)
        raise ValueError(f"Unknown difficulty {value!r}; expected one of {valid}") from None


def level_complexity(base: float, level: int) -> float:
    """Complexity grows per level past the first, capped."""
    return min(base + (level - 1) * COMPLEXITY_PER_LEVEL, MAX_COMPLEXITY)


def get_difficulty_config(difficulty: Union[str, Difficulty], level: int,
                          prng: AleaPRNG) -> DifficultyConfig:
    """
    Pick the region count for a tier and compute its complexity.

    Args:
        difficulty: Tier name or enum member
        level: Progression level, starting at 1
        prng: Random source for the region count

    Returns:
        DifficultyConfig
    """
    tier = TIERS[parse_difficulty(difficulty)]
    if level < 1:
        raise ValueError(f"level must be >= 1, got {level}")

    low, high = tier.region_range
    return DifficultyConfig(
        region_count=prng.randint(low, high),
        complexity=level_complexity(tier.base_complexity, level),
        target_colors=tier.target_colors,
    )
