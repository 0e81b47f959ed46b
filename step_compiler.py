"""Compile a recipe's ingredients and free-text steps into playable cooking steps.

Steps always come out in the kitchen's canonical order::

    heat pan -> fat -> prep -> crack -> add to pan -> stir -> season -> cook -> assemble

Each phase looks for fixed keywords in the lowercased instruction lines. Nothing
here raises: a recipe whose text matches no trigger simply compiles to a short
(possibly empty) list, and the session copes with that.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Iterable, List, Optional, Sequence, Tuple, Union

import alias_resolver
from kitchen_api import GardenVegetable, PantryItem, Recipe

NO_COOK_MAX_MINUTES = 5

FAT_PRIORITY: Tuple[str, ...] = ("butter", "olive_oil", "vegetable_oil")
SEASONING_ITEMS: Tuple[str, ...] = ("salt", "pepper", "cinnamon", "soy_sauce")
AROMATIC_VEGETABLES: Tuple[str, ...] = ("onion",)

COOKING_VERBS: Tuple[str, ...] = (
    "cook",
    "heat",
    "melt",
    "bake",
    "roast",
    "fry",
    "simmer",
    "boil",
)
FAT_LINE_WORDS: Tuple[str, ...] = ("melt", "heat", "oil")
CRACK_LINE_WORDS: Tuple[str, ...] = ("crack", "whisk")
ADD_VERBS: Tuple[str, ...] = ("add", "pour", "toss")
PROTEIN_VERBS: Tuple[str, ...] = ("cook", "add", "pour", "brown")
STIR_VERBS: Tuple[str, ...] = ("stir", "toss", "mix")

COOK_SECONDS = {"easy": 5, "medium": 8, "hard": 12}


# ----------------------------- Step type variants -----------------------------
@dataclass(frozen=True)
class HeatPan:
    kind: ClassVar[str] = "heat_pan"


@dataclass(frozen=True)
class AddFat:
    item: PantryItem
    kind: ClassVar[str] = "add_fat"


@dataclass(frozen=True)
class PrepVegetable:
    """Shared shape of the knife-and-sink steps that work on one vegetable."""

    vegetable: GardenVegetable
    kind: ClassVar[str] = "prep"


@dataclass(frozen=True)
class Wash(PrepVegetable):
    kind: ClassVar[str] = "wash"


@dataclass(frozen=True)
class Peel(PrepVegetable):
    kind: ClassVar[str] = "peel"


@dataclass(frozen=True)
class Grate(PrepVegetable):
    kind: ClassVar[str] = "grate"


@dataclass(frozen=True)
class Dice(PrepVegetable):
    kind: ClassVar[str] = "dice"


@dataclass(frozen=True)
class Slice(PrepVegetable):
    kind: ClassVar[str] = "slice"


@dataclass(frozen=True)
class Chop(PrepVegetable):
    kind: ClassVar[str] = "chop"


@dataclass(frozen=True)
class Crack:
    item: PantryItem
    kind: ClassVar[str] = "crack"


@dataclass(frozen=True)
class AddToPan:
    display_name: str
    image_name: str
    kind: ClassVar[str] = "add_to_pan"


@dataclass(frozen=True)
class Stir:
    kind: ClassVar[str] = "stir"


@dataclass(frozen=True)
class Season:
    items: Tuple[PantryItem, ...]
    kind: ClassVar[str] = "season"


@dataclass(frozen=True)
class Cook:
    seconds: int
    kind: ClassVar[str] = "cook"


@dataclass(frozen=True)
class Assemble:
    instruction: str
    kind: ClassVar[str] = "assemble"


CookingStepType = Union[
    HeatPan,
    AddFat,
    Wash,
    Peel,
    Grate,
    Dice,
    Slice,
    Chop,
    Crack,
    AddToPan,
    Stir,
    Season,
    Cook,
    Assemble,
]

PHASE_ORDER: Tuple[str, ...] = (
    "heat_pan",
    "add_fat",
    "prep",
    "crack",
    "add_to_pan",
    "stir",
    "season",
    "cook",
    "assemble",
)

# Checked in this order; the first verb group found in a line wins.
PREP_VERBS: Tuple[Tuple[type, Tuple[str, ...], str], ...] = (
    (Wash, ("wash",), "Wash the {name} nice and clean!"),
    (Peel, ("peel",), "Swipe down to peel the {name}!"),
    (Grate, ("grate", "shred"), "Grate the {name} into little shreds!"),
    (Dice, ("dice",), "Dice the {name} into tiny cubes!"),
    (Slice, ("slice",), "Slice the {name} carefully!"),
    (Chop, ("chop", "cut", "tear"), "Chop chop chop! Let's cut the {name}!"),
)

# (pantry id, keyword looked for in the line, display name, flavor message)
PROTEINS: Tuple[Tuple[str, str, str, str], ...] = (
    ("chicken", "chicken", "Chicken", "The chicken goes in — sizzle!"),
    ("ground_beef", "beef", "Ground Beef", "Brown that beef!"),
)


@dataclass(frozen=True)
class CookingStep:
    step_type: CookingStepType
    instruction: str
    flavor_message: str

    @property
    def kind(self) -> str:
        return self.step_type.kind


def phase_of(step_type: CookingStepType) -> str:
    if isinstance(step_type, PrepVegetable):
        return "prep"
    return step_type.kind


def phase_rank(step_type: CookingStepType) -> int:
    return PHASE_ORDER.index(phase_of(step_type))


def dedup_key(step: CookingStep) -> Optional[Tuple[str, str]]:
    """Return the key used to drop repeated steps, or ``None`` for once-only kinds."""

    step_type = step.step_type
    if isinstance(step_type, PrepVegetable):
        return (step_type.kind, step_type.vegetable.vegetable_id)
    if isinstance(step_type, AddToPan):
        return (step_type.kind, step_type.display_name)
    return None


def deduplicate_steps(steps: Iterable[CookingStep]) -> List[CookingStep]:
    seen: set[Tuple[str, str]] = set()
    result: List[CookingStep] = []
    for step in steps:
        key = dedup_key(step)
        if key is not None:
            if key in seen:
                continue
            seen.add(key)
        result.append(step)
    return result


# ------------------------------- Line helpers ---------------------------------
def _contains_any(text: str, words: Sequence[str]) -> bool:
    return any(word in text for word in words)


def _first_line_with(lines: Sequence[str], words: Sequence[str]) -> Optional[str]:
    for line in lines:
        if _contains_any(line, words):
            return line
    return None


def capitalize_first(text: str) -> str:
    if not text:
        return text
    return text[0].upper() + text[1:]


def is_no_cook(recipe: Recipe) -> bool:
    return recipe.cook_time_minutes <= NO_COOK_MAX_MINUTES


def recipe_fat(recipe: Recipe) -> Optional[PantryItem]:
    by_id = {item.item_id: item for item in recipe.pantry_ingredients}
    for item_id in FAT_PRIORITY:
        if item_id in by_id:
            return by_id[item_id]
    return None


def has_fat(recipe: Recipe) -> bool:
    return any(item.category == "fats" for item in recipe.pantry_ingredients)


def recipe_seasonings(recipe: Recipe) -> List[PantryItem]:
    return [item for item in recipe.pantry_ingredients if item.item_id in SEASONING_ITEMS]


# --------------------------------- Phases -------------------------------------
def _prep_steps(recipe: Recipe) -> List[CookingStep]:
    steps: List[CookingStep] = []
    for line in recipe.instructions:
        low = line.lower()
        for vegetable in recipe.garden_ingredients:
            if not alias_resolver.matches(line, vegetable):
                continue
            name = vegetable.display_name.lower()
            for step_cls, verbs, message in PREP_VERBS:
                if _contains_any(low, verbs):
                    steps.append(
                        CookingStep(
                            step_type=step_cls(vegetable),
                            instruction=line,
                            flavor_message=message.format(name=name),
                        )
                    )
                    break
    return steps


def _add_to_pan_step(display_name: str, image_name: str, message: str) -> CookingStep:
    return CookingStep(
        step_type=AddToPan(display_name, image_name),
        instruction=f"Add the {display_name.lower()} to the pan.",
        flavor_message=message,
    )


def _add_to_pan_steps(recipe: Recipe, low_lines: Sequence[str]) -> List[CookingStep]:
    steps: List[CookingStep] = []
    for vegetable in recipe.garden_ingredients:
        if vegetable.vegetable_id in AROMATIC_VEGETABLES:
            steps.append(
                _add_to_pan_step(
                    vegetable.display_name,
                    vegetable.image_name,
                    f"In goes the {vegetable.display_name.lower()}!",
                )
            )

    for vegetable in recipe.garden_ingredients:
        if vegetable.vegetable_id in AROMATIC_VEGETABLES:
            continue
        mentioned = any(
            _contains_any(line, ADD_VERBS) and alias_resolver.matches(line, vegetable)
            for line in low_lines
        )
        if mentioned:
            steps.append(
                _add_to_pan_step(
                    vegetable.display_name,
                    vegetable.image_name,
                    f"In goes the {vegetable.display_name.lower()}!",
                )
            )

    by_id = {item.item_id: item for item in recipe.pantry_ingredients}
    for item_id, keyword, display_name, message in PROTEINS:
        item = by_id.get(item_id)
        if item is None:
            continue
        mentioned = any(
            keyword in line and _contains_any(line, PROTEIN_VERBS) for line in low_lines
        )
        if mentioned:
            steps.append(_add_to_pan_step(display_name, item.image_name, message))
    return steps


def compile_steps(recipe: Recipe) -> List[CookingStep]:
    """Turn ``recipe`` into its ordered, de-duplicated list of cooking steps.

    Pure and deterministic: the same recipe always yields an equal list, and
    every call returns a fresh list the caller may own.
    """

    low_lines = [line.lower() for line in recipe.instructions]
    no_cook = is_no_cook(recipe)
    fat = recipe_fat(recipe)
    result: List[CookingStep] = []

    if not no_cook and (
        has_fat(recipe) or any(_contains_any(line, COOKING_VERBS) for line in low_lines)
    ):
        result.append(
            CookingStep(
                step_type=HeatPan(),
                instruction="Heat up the pan!",
                flavor_message="Hold your finger on the pan to warm it up!",
            )
        )

    if not no_cook and fat is not None:
        fat_line = _first_line_with(low_lines, FAT_LINE_WORDS)
        result.append(
            CookingStep(
                step_type=AddFat(fat),
                instruction=(
                    capitalize_first(fat_line)
                    if fat_line is not None
                    else f"Add {fat.display_name} to the pan."
                ),
                flavor_message=f"Drop the {fat.display_name.lower()} into the pan!",
            )
        )

    result.extend(_prep_steps(recipe))

    eggs = next((item for item in recipe.pantry_ingredients if item.item_id == "eggs"), None)
    if eggs is not None:
        egg_line = _first_line_with(low_lines, CRACK_LINE_WORDS)
        result.append(
            CookingStep(
                step_type=Crack(eggs),
                instruction=(
                    capitalize_first(egg_line)
                    if egg_line is not None
                    else "Crack the eggs into a bowl."
                ),
                flavor_message="Tap to crack the eggs!",
            )
        )

    if not no_cook:
        result.extend(_add_to_pan_steps(recipe, low_lines))

    if not no_cook and any(_contains_any(line, STIR_VERBS) for line in low_lines):
        result.append(
            CookingStep(
                step_type=Stir(),
                instruction="Stir everything together!",
                flavor_message="Draw circles to stir it all up!",
            )
        )

    seasonings = recipe_seasonings(recipe)
    if seasonings:
        names = " and ".join(item.display_name.lower() for item in seasonings)
        result.append(
            CookingStep(
                step_type=Season(tuple(seasonings)),
                instruction=f"Add a pinch of {names}!",
                flavor_message=f"Tap to sprinkle the {names}!",
            )
        )

    if not no_cook:
        result.append(
            CookingStep(
                step_type=Cook(COOK_SECONDS.get(recipe.difficulty, COOK_SECONDS["medium"])),
                instruction="Let it cook — watch the timer!",
                flavor_message="Take it off at just the right moment!",
            )
        )

    if recipe.instructions:
        last_line = recipe.instructions[-1]
        result.append(
            CookingStep(
                step_type=Assemble(last_line),
                instruction=last_line,
                flavor_message="Almost done — let's finish this dish!",
            )
        )

    return deduplicate_steps(result)


def minigame_parameters(step: CookingStep, difficulty: str) -> dict[str, object]:
    """Describe what the mini-game for ``step`` needs to know.

    The payload mirrors what each mini-game screen is handed: which vegetable
    or pantry items it shows, the timer length, and how many chops a knife
    game asks for on the recipe's difficulty.
    """

    step_type = step.step_type
    params: dict[str, object] = {"kind": step_type.kind}
    if isinstance(step_type, PrepVegetable):
        params["vegetable"] = step_type.vegetable.vegetable_id
        if isinstance(step_type, (Chop, Dice)):
            params["target_chops"] = 3 if difficulty == "easy" else 5
        elif isinstance(step_type, Slice):
            params["target_chops"] = 3 if difficulty == "easy" else 4
    elif isinstance(step_type, (AddFat, Crack)):
        params["item"] = step_type.item.item_id
    elif isinstance(step_type, AddToPan):
        params["item_name"] = step_type.display_name
        params["image"] = step_type.image_name
    elif isinstance(step_type, Season):
        params["items"] = [item.item_id for item in step_type.items]
    elif isinstance(step_type, Cook):
        params["seconds"] = step_type.seconds
    elif isinstance(step_type, Assemble):
        params["instruction"] = step_type.instruction
    return params
