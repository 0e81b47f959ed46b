"""Step-by-step cooking session: one mini-game at a time, then a reward."""
from __future__ import annotations

import logging
import random
from typing import Any, List, Optional, Sequence, Tuple

from kitchen_api import Recipe
from kitchen_timers import TimerHandle
from reward_calculator import CookingReward, average_score, calculate_reward, clamp_score
from step_compiler import CookingStep, compile_steps

logger = logging.getLogger(__name__)

LOADING = "loading"
PLAYING = "playing"
TRANSITIONING = "transitioning"
COMPLETE = "complete"

DEFAULT_DWELL_SECONDS = 0.8
DEFAULT_ENCOURAGEMENTS: Tuple[str, ...] = (
    "Nice work!",
    "Keep going!",
    "You're a natural!",
    "Almost there!",
    "Smells delicious!",
    "Great job, chef!",
    "Looking good!",
    "Yummy!",
    "Pip approves!",
)

MAX_SEED_VALUE = 2**32 - 1


def resolve_seed(seed: Optional[int]) -> Tuple[int, random.Random]:
    """Pick a seed (fresh from ``SystemRandom`` when ``None``) and its RNG."""

    chosen = random.SystemRandom().randint(0, MAX_SEED_VALUE) if seed is None else int(seed)
    return chosen, random.Random(chosen)


class CookingSession:
    """Drive a player through one recipe's compiled steps.

    ``progress`` is the persistence collaborator and must offer
    ``complete_cooking(recipe_id, stars, coins, xp)``; it is called exactly
    once when the last step is scored and never if the session is abandoned.
    ``scheduler`` provides ``schedule(delay, callback)`` and ``cancel(handle)``
    for the encouragement pause between steps.
    """

    def __init__(
        self,
        recipe: Recipe,
        progress: Any,
        scheduler: Any,
        *,
        dwell_seconds: float = DEFAULT_DWELL_SECONDS,
        encouragements: Sequence[str] = DEFAULT_ENCOURAGEMENTS,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ) -> None:
        if dwell_seconds < 0:
            raise ValueError("dwell_seconds cannot be negative")
        if not encouragements:
            raise ValueError("encouragements must contain at least one message")

        self.recipe = recipe
        self.progress = progress
        self.scheduler = scheduler
        self.dwell_seconds = float(dwell_seconds)
        self.encouragements = tuple(encouragements)
        if rng is not None:
            self.rng = rng
            self.seed = seed
        else:
            self.seed, self.rng = resolve_seed(seed)

        self.phase = LOADING
        self.steps: List[CookingStep] = []
        self.current_index = 0
        self.scores: List[int] = []
        self.encouragement: Optional[str] = None
        self.average: Optional[int] = None
        self.reward: Optional[CookingReward] = None
        self.abandoned = False
        self._dwell_handle: Optional[TimerHandle] = None
        self._events: List[str] = []

    # ----------------- Event helpers -----------------
    def _push_event(self, message: str) -> None:
        self._events.append(message)

    def consume_events(self) -> List[str]:
        events = list(self._events)
        self._events.clear()
        return events

    # ------------------------------ Lifecycle ---------------------------------
    def start(self) -> None:
        """Compile the recipe and enter the first step."""

        if self.phase != LOADING or self.abandoned:
            return
        self.steps = compile_steps(self.recipe)
        self.current_index = 0
        self.scores = []
        self._push_event(f"Cooking {self.recipe.title}: {len(self.steps)} steps.")
        if not self.steps:
            logger.info("Recipe %s compiled to no steps", self.recipe.recipe_id)
            self._finish()
            return
        self.phase = PLAYING

    def report_score(self, value: int, step_index: Optional[int] = None) -> bool:
        """Record the active mini-game's score.

        Returns ``False`` (and records nothing) when no step is waiting for a
        score, or when ``step_index`` names a step other than the active one.
        """

        if self.abandoned or self.phase != PLAYING:
            logger.warning(
                "Ignoring score %r for %s while %s",
                value,
                self.recipe.recipe_id,
                "abandoned" if self.abandoned else self.phase,
            )
            return False
        if step_index is not None and step_index != self.current_index:
            logger.warning(
                "Ignoring score %r for step %d; step %d is active",
                value,
                step_index,
                self.current_index,
            )
            return False

        score = clamp_score(value)
        self.scores.append(score)
        step = self.steps[self.current_index]
        self._push_event(f"Step {self.current_index + 1} ({step.kind}) scored {score}.")

        if self.current_index >= len(self.steps) - 1:
            self._finish()
            return True

        self.phase = TRANSITIONING
        self.encouragement = self.rng.choice(self.encouragements)
        self._dwell_handle = self.scheduler.schedule(self.dwell_seconds, self._advance)
        return True

    def abandon(self) -> bool:
        """Tear the session down without a reward. No-op once complete."""

        if self.phase == COMPLETE or self.abandoned:
            return False
        if self._dwell_handle is not None:
            self.scheduler.cancel(self._dwell_handle)
            self._dwell_handle = None
        self.abandoned = True
        self.scores = []
        self.encouragement = None
        self._push_event(f"Left the kitchen; {self.recipe.title} was not finished.")
        logger.info("Session for %s abandoned at step %d", self.recipe.recipe_id, self.current_index)
        return True

    def _advance(self) -> None:
        self._dwell_handle = None
        if self.abandoned or self.phase != TRANSITIONING:
            return
        self.current_index += 1
        self.encouragement = None
        self.phase = PLAYING

    def _finish(self) -> None:
        self.average = average_score(self.scores)
        self.reward = calculate_reward(self.average)
        self.phase = COMPLETE
        self.progress.complete_cooking(
            self.recipe.recipe_id,
            self.reward.stars,
            self.reward.coins,
            self.reward.xp,
        )
        self._push_event(
            f"{self.recipe.title} complete! Average {self.average}: "
            f"{self.reward.stars} stars, +{self.reward.coins} coins, +{self.reward.xp} XP."
        )

    # ------------------------------ Queries -----------------------------------
    @property
    def current_step(self) -> Optional[CookingStep]:
        if self.abandoned or self.phase not in (PLAYING, TRANSITIONING):
            return None
        if self.current_index >= len(self.steps):
            return None
        return self.steps[self.current_index]

    @property
    def instruction(self) -> Optional[str]:
        step = self.current_step
        if step is None or self.phase != PLAYING:
            return None
        return step.instruction

    @property
    def flavor_message(self) -> Optional[str]:
        step = self.current_step
        if step is None or self.phase != PLAYING:
            return None
        return step.flavor_message

    @property
    def progress_fraction(self) -> float:
        if not self.steps:
            return 0.0
        if self.phase == COMPLETE:
            return 1.0
        return self.current_index / len(self.steps)

    @property
    def step_label(self) -> str:
        return f"Step {self.current_index + 1}/{len(self.steps)}"

    def is_finished(self) -> bool:
        return self.phase == COMPLETE or self.abandoned
