"""Turn a finished session's average score into stars, coins, and XP."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

MIN_SCORE = 0
MAX_SCORE = 100


@dataclass(frozen=True)
class CookingReward:
    stars: int
    coins: int
    xp: int

    def as_dict(self) -> dict[str, int]:
        return {"stars": self.stars, "coins": self.coins, "xp": self.xp}


# (minimum average, reward), best tier first.
REWARD_TIERS: Tuple[Tuple[int, CookingReward], ...] = (
    (85, CookingReward(stars=3, coins=50, xp=45)),
    (60, CookingReward(stars=2, coins=40, xp=35)),
    (MIN_SCORE, CookingReward(stars=1, coins=30, xp=25)),
)

STAR_MESSAGES = {3: "Perfect Chef!", 2: "Great Job!"}


def clamp_score(value: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, int(value)))


def average_score(scores: Sequence[int]) -> int:
    """Floor of the mean; an empty score list averages to 0."""

    if not scores:
        return 0
    return sum(scores) // len(scores)


def calculate_reward(average: int) -> CookingReward:
    average = clamp_score(average)
    for minimum, reward in REWARD_TIERS:
        if average >= minimum:
            return reward
    return REWARD_TIERS[-1][1]


def star_message(stars: int) -> str:
    return STAR_MESSAGES.get(stars, "Good Try!")
