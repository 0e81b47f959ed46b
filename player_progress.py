"""Wallet, level, and recipe star bookkeeping the cooking session reports into."""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

STARTING_COINS = 100
XP_PER_LEVEL = 100


@dataclass
class PlayerProgress:
    """In-memory player store reached through a narrow interface.

    The cooking session only ever calls :meth:`complete_cooking`; everything
    else is here for the rest of the game shell (shop, garden, kitchen).
    """

    coins: int = STARTING_COINS
    xp: int = 0
    level: int = 1
    recipe_stars: Dict[str, int] = field(default_factory=dict)
    harvested: Counter[str] = field(default_factory=Counter)
    pantry: Counter[str] = field(default_factory=Counter)
    completions: List[Tuple[str, int, int, int]] = field(default_factory=list)

    # ----------------------------- Currency & XP ------------------------------
    def add_coins(self, amount: int) -> None:
        self.coins += int(amount)

    def spend_coins(self, amount: int) -> bool:
        if self.coins < amount:
            return False
        self.coins -= int(amount)
        return True

    def add_xp(self, amount: int) -> bool:
        """Add XP and return ``True`` when it triggered a level up."""

        self.xp += int(amount)
        needed = self.level * XP_PER_LEVEL
        if self.xp >= needed:
            self.xp -= needed
            self.level += 1
            logger.debug("Player reached level %d", self.level)
            return True
        return False

    # -------------------------------- Recipes ---------------------------------
    def best_stars(self, recipe_id: str) -> int:
        return self.recipe_stars.get(recipe_id, 0)

    def set_best_stars(self, recipe_id: str, stars: int) -> int:
        """Ratchet the stored rating for ``recipe_id``; it never goes down."""

        best = max(self.best_stars(recipe_id), int(stars))
        self.recipe_stars[recipe_id] = best
        return best

    def complete_cooking(self, recipe_id: str, stars: int, coins: int, xp: int) -> None:
        self.add_coins(coins)
        self.add_xp(xp)
        self.set_best_stars(recipe_id, stars)
        self.completions.append((recipe_id, stars, coins, xp))

    # ------------------------------ Inventories -------------------------------
    def add_harvest(self, vegetable_id: str, quantity: int = 1) -> None:
        self.harvested[vegetable_id] += quantity

    def add_pantry_stock(self, item_id: str, quantity: int = 1) -> None:
        self.pantry[item_id] += quantity

    def has_ingredient(self, vegetable_id: str, quantity: int = 1) -> bool:
        return self.harvested.get(vegetable_id, 0) >= quantity

    def use_ingredient(self, vegetable_id: str, quantity: int = 1) -> bool:
        if not self.has_ingredient(vegetable_id, quantity):
            return False
        self.harvested[vegetable_id] -= quantity
        if self.harvested[vegetable_id] <= 0:
            del self.harvested[vegetable_id]
        return True

    def last_completion(self) -> Optional[Tuple[str, int, int, int]]:
        return self.completions[-1] if self.completions else None
