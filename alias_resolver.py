"""Decide whether an instruction line talks about a garden vegetable."""
from __future__ import annotations

from typing import Mapping, Tuple

from kitchen_api import GardenVegetable

# Phrases recipes use instead of the vegetable's display name.
VEGETABLE_ALIASES: Mapping[str, Tuple[str, ...]] = {
    "broccoli": ("floret",),
    "bell_pepper_red": ("red pepper", "bell pepper"),
    "bell_pepper_yellow": ("yellow pepper", "bell pepper"),
    "green_beans": ("green bean",),
    "sweet_potato": ("sweet potato",),
}


def matches_alias(text: str, vegetable: GardenVegetable) -> bool:
    aliases = VEGETABLE_ALIASES.get(vegetable.vegetable_id, ())
    return any(alias in text for alias in aliases)


def matches(instruction_line: str, vegetable: GardenVegetable) -> bool:
    """Return ``True`` when ``instruction_line`` mentions ``vegetable``.

    Plain lowercase substring containment against the display name, then the
    alias table. There is no stemming or fuzzy matching, so "tomatoes" matches
    "tomato" only because the singular is a prefix.
    """

    text = instruction_line.lower()
    if vegetable.display_name.lower() in text:
        return True
    return matches_alias(text, vegetable)
