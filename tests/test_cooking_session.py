import random

import pytest

from cooking_session import (
    COMPLETE,
    DEFAULT_ENCOURAGEMENTS,
    LOADING,
    PLAYING,
    TRANSITIONING,
    CookingSession,
)
from kitchen_api import KitchenData, make_recipe
from kitchen_timers import ManualScheduler
from player_progress import STARTING_COINS, PlayerProgress


def make_session(recipe, dwell: float = 0.8):
    progress = PlayerProgress()
    scheduler = ManualScheduler()
    session = CookingSession(
        recipe, progress, scheduler, dwell_seconds=dwell, rng=random.Random(7)
    )
    return session, progress, scheduler


def four_step_recipe(data: KitchenData):
    # No-cook: wash, slice, season, assemble.
    return data.recipe_by_id["cucumber-bites"]


def play_all(session: CookingSession, scheduler: ManualScheduler, scores) -> None:
    for value in scores:
        assert session.report_score(value)
        scheduler.advance(session.dwell_seconds)


def test_start_enters_first_step(kitchen_data: KitchenData) -> None:
    session, _, _ = make_session(four_step_recipe(kitchen_data))
    assert session.phase == LOADING
    session.start()
    assert session.phase == PLAYING
    assert session.current_index == 0
    assert session.step_label == "Step 1/4"
    assert session.instruction == "Wash the cucumber."
    assert session.flavor_message == "Wash the cucumber nice and clean!"


def test_four_step_session_rewards_average(kitchen_data: KitchenData) -> None:
    session, progress, scheduler = make_session(four_step_recipe(kitchen_data))
    session.start()
    play_all(session, scheduler, [100, 80, 60, 40])

    assert session.phase == COMPLETE
    assert session.average == 70
    assert session.reward is not None
    assert (session.reward.stars, session.reward.coins, session.reward.xp) == (2, 40, 35)
    assert progress.completions == [("cucumber-bites", 2, 40, 35)]
    assert progress.coins == STARTING_COINS + 40
    assert progress.best_stars("cucumber-bites") == 2
    assert session.progress_fraction == 1.0


def test_transition_dwell_blocks_scoring(kitchen_data: KitchenData) -> None:
    session, _, scheduler = make_session(four_step_recipe(kitchen_data))
    session.start()

    assert session.report_score(90)
    assert session.phase == TRANSITIONING
    assert session.encouragement in DEFAULT_ENCOURAGEMENTS
    assert session.instruction is None
    assert not session.report_score(50)
    assert session.scores == [90]

    scheduler.advance(0.4)
    assert session.phase == TRANSITIONING
    scheduler.advance(0.4)
    assert session.phase == PLAYING
    assert session.current_index == 1
    assert session.encouragement is None
    assert len(session.scores) == session.current_index


def test_duplicate_report_for_previous_step_ignored(kitchen_data: KitchenData) -> None:
    session, _, scheduler = make_session(four_step_recipe(kitchen_data))
    session.start()
    assert session.report_score(70, step_index=0)
    scheduler.advance(1.0)

    assert not session.report_score(10, step_index=0)
    assert session.scores == [70]
    assert session.report_score(80, step_index=1)
    assert session.scores == [70, 80]


def test_out_of_range_scores_are_clamped(kitchen_data: KitchenData) -> None:
    session, progress, scheduler = make_session(four_step_recipe(kitchen_data))
    session.start()
    play_all(session, scheduler, [250, 100, 130, -40])

    assert session.scores == [100, 100, 100, 0]
    assert session.average == 75
    assert progress.completions[-1][1] == 2


def test_no_reports_after_complete(kitchen_data: KitchenData) -> None:
    session, progress, scheduler = make_session(four_step_recipe(kitchen_data))
    session.start()
    play_all(session, scheduler, [90, 90, 90, 90])

    assert not session.report_score(10)
    assert not session.abandon()
    assert session.scores == [90, 90, 90, 90]
    assert len(progress.completions) == 1


def test_abandon_during_play_discards_everything(kitchen_data: KitchenData) -> None:
    session, progress, scheduler = make_session(four_step_recipe(kitchen_data))
    session.start()
    session.report_score(100)
    scheduler.advance(1.0)

    assert session.abandon()
    assert session.abandoned
    assert session.scores == []
    assert session.is_finished()
    assert not session.report_score(100)
    assert progress.completions == []
    assert progress.coins == STARTING_COINS
    assert session.current_step is None
    assert session.instruction is None
    assert session.flavor_message is None


def test_abandon_during_dwell_cancels_advance(kitchen_data: KitchenData) -> None:
    session, progress, scheduler = make_session(four_step_recipe(kitchen_data))
    session.start()
    session.report_score(100)
    assert session.phase == TRANSITIONING

    assert session.abandon()
    assert scheduler.pending() == 0
    scheduler.advance(5.0)
    assert session.current_index == 0
    assert progress.completions == []


def test_abandon_while_loading(kitchen_data: KitchenData) -> None:
    session, progress, _ = make_session(four_step_recipe(kitchen_data))
    assert session.abandon()
    session.start()
    assert session.steps == []
    assert session.phase == LOADING
    assert progress.completions == []


def test_empty_recipe_completes_immediately(kitchen_data: KitchenData) -> None:
    recipe = make_recipe("empty", [], [], [], cook_time_minutes=2)
    session, progress, _ = make_session(recipe)
    session.start()

    assert session.phase == COMPLETE
    assert session.steps == []
    assert session.average == 0
    assert session.reward is not None and session.reward.stars == 1
    assert progress.completions == [("empty", 1, 30, 25)]
    assert session.current_step is None


def test_full_catalog_recipe_plays_through(kitchen_data: KitchenData) -> None:
    recipe = kitchen_data.recipe_by_id["veggie-omelette"]
    session, progress, scheduler = make_session(recipe)
    session.start()
    total = len(session.steps)
    for index in range(total):
        assert session.current_step is session.steps[index]
        assert len(session.scores) == index
        session.report_score(95)
        scheduler.advance(1.0)

    assert session.phase == COMPLETE
    assert len(session.scores) == total
    assert progress.best_stars("veggie-omelette") == 3


def test_each_session_owns_its_steps(kitchen_data: KitchenData) -> None:
    recipe = kitchen_data.recipe_by_id["garden-pasta"]
    first, _, _ = make_session(recipe)
    second, _, _ = make_session(recipe)
    first.start()
    second.start()
    assert first.steps == second.steps
    assert first.steps is not second.steps


def test_events_are_consumed_once(kitchen_data: KitchenData) -> None:
    session, _, scheduler = make_session(four_step_recipe(kitchen_data))
    session.start()
    session.report_score(80)
    events = session.consume_events()
    assert events[0].startswith("Cooking Cool Cucumber Bites")
    assert "scored 80" in events[1]
    assert session.consume_events() == []


def test_invalid_configuration(kitchen_data: KitchenData) -> None:
    recipe = four_step_recipe(kitchen_data)
    with pytest.raises(ValueError):
        CookingSession(recipe, PlayerProgress(), ManualScheduler(), dwell_seconds=-1)
    with pytest.raises(ValueError):
        CookingSession(recipe, PlayerProgress(), ManualScheduler(), encouragements=[])


def test_seeded_sessions_pick_same_encouragements(kitchen_data: KitchenData) -> None:
    recipe = kitchen_data.recipe_by_id["garden-salad"]

    def run(seed: int) -> list:
        scheduler = ManualScheduler()
        session = CookingSession(recipe, PlayerProgress(), scheduler, seed=seed)
        session.start()
        picked = []
        while session.phase != COMPLETE:
            session.report_score(75)
            if session.encouragement:
                picked.append(session.encouragement)
            scheduler.advance(session.dwell_seconds)
        return picked

    assert run(1234) == run(1234)
