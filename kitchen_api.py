from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

CATALOG_VERSION = "1.2.0"

MODULE_DIR = os.path.dirname(os.path.abspath(__file__))
INSTALLED_DATA_DIR = os.path.join(sys.prefix, "share", "garden-kitchen")


def resolve_data_dir(candidates: Sequence[str] = (MODULE_DIR, INSTALLED_DATA_DIR)) -> str:
    """Return the first directory holding the catalog JSON files.

    A source checkout keeps them beside this module; an installed copy finds
    them under ``share/garden-kitchen`` in the environment prefix.
    """

    for directory in candidates:
        if os.path.isfile(os.path.join(directory, "ingredients.json")):
            return directory
    return candidates[0]


DATA_DIR = resolve_data_dir()
DEFAULT_INGREDIENTS_JSON = os.path.join(DATA_DIR, "ingredients.json")
DEFAULT_RECIPES_JSON = os.path.join(DATA_DIR, "recipes.json")

DIFFICULTY_ORDER = ("easy", "medium", "hard")
RECIPE_CATEGORIES = ("breakfast", "lunch", "dinner", "snacks")
PANTRY_CATEGORIES = ("basics", "fats", "dairy", "protein", "grains", "sauces")


def load_json(path: str):
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


@dataclass(frozen=True)
class GardenVegetable:
    vegetable_id: str
    display_name: str
    image_name: str


@dataclass(frozen=True)
class PantryItem:
    item_id: str
    display_name: str
    category: str
    image_name: str


@dataclass(frozen=True)
class Recipe:
    """Immutable catalog entry that drives one cooking attempt."""

    recipe_id: str
    title: str
    garden_ingredients: Tuple[GardenVegetable, ...]
    pantry_ingredients: Tuple[PantryItem, ...]
    instructions: Tuple[str, ...]
    difficulty: str
    cook_time_minutes: int
    description: str = ""
    category: str = "lunch"
    servings: int = 1
    needs_adult_help: bool = False

    def has_pantry_item(self, item_id: str) -> bool:
        return any(item.item_id == item_id for item in self.pantry_ingredients)

    def can_cook(self, harvested: Mapping[str, int]) -> bool:
        """Return ``True`` when every garden ingredient is in the harvest."""

        for vegetable in self.garden_ingredients:
            if harvested.get(vegetable.vegetable_id, 0) < 1:
                return False
        return True

    def can_cook_full(
        self, harvested: Mapping[str, int], pantry: Mapping[str, int]
    ) -> bool:
        if not self.can_cook(harvested):
            return False
        return not self.missing_pantry_items(pantry)

    def missing_pantry_items(self, pantry: Mapping[str, int]) -> List[PantryItem]:
        return [
            item for item in self.pantry_ingredients if pantry.get(item.item_id, 0) < 1
        ]


@dataclass
class KitchenData:
    vegetables: Dict[str, GardenVegetable]
    pantry_items: Dict[str, PantryItem]
    recipes: List[Recipe]
    recipe_by_id: Dict[str, Recipe] = field(init=False)
    vegetable_recipes: Dict[str, List[str]] = field(init=False)

    def __post_init__(self) -> None:
        self.recipe_by_id = {recipe.recipe_id: recipe for recipe in self.recipes}
        self.vegetable_recipes = self._build_vegetable_recipes()

    def _build_vegetable_recipes(self) -> Dict[str, List[str]]:
        mapping: Dict[str, List[str]] = {}
        for recipe in self.recipes:
            for vegetable in recipe.garden_ingredients:
                mapping.setdefault(vegetable.vegetable_id, []).append(recipe.recipe_id)
        return mapping

    @classmethod
    def from_json(
        cls,
        ingredients_path: str = DEFAULT_INGREDIENTS_JSON,
        recipes_path: str = DEFAULT_RECIPES_JSON,
    ) -> "KitchenData":
        vegetables, pantry_items = _load_ingredients(ingredients_path)
        return cls(
            vegetables=vegetables,
            pantry_items=pantry_items,
            recipes=_load_recipes(recipes_path, vegetables, pantry_items),
        )

    # --- Helpers that operate on the loaded data ---
    def recipe(self, recipe_id: str) -> Optional[Recipe]:
        return self.recipe_by_id.get(recipe_id)

    def recipes_using(self, vegetable_id: str) -> List[Recipe]:
        return [
            self.recipe_by_id[recipe_id]
            for recipe_id in self.vegetable_recipes.get(vegetable_id, [])
        ]

    def available_recipes(
        self,
        harvested: Mapping[str, int],
        pantry: Optional[Mapping[str, int]] = None,
    ) -> List[Recipe]:
        """Recipes the player can start right now.

        Only the garden harvest is checked unless ``pantry`` is supplied, in
        which case pantry staples must be stocked as well.
        """

        if pantry is None:
            return [recipe for recipe in self.recipes if recipe.can_cook(harvested)]
        return [
            recipe for recipe in self.recipes if recipe.can_cook_full(harvested, pantry)
        ]

    def recipes_by_difficulty(self, difficulty: str) -> List[Recipe]:
        return [recipe for recipe in self.recipes if recipe.difficulty == difficulty]


def make_recipe(
    recipe_id: str,
    garden: Iterable[GardenVegetable],
    pantry: Iterable[PantryItem],
    instructions: Sequence[str],
    *,
    title: str = "",
    difficulty: str = "easy",
    cook_time_minutes: int = 10,
    **extra: object,
) -> Recipe:
    """Build a :class:`Recipe` from already-resolved ingredient kinds."""

    if difficulty not in DIFFICULTY_ORDER:
        raise ValueError(f"Unknown difficulty: {difficulty}")
    return Recipe(
        recipe_id=recipe_id,
        title=title or recipe_id.replace("-", " ").title(),
        garden_ingredients=tuple(garden),
        pantry_ingredients=tuple(pantry),
        instructions=tuple(instructions),
        difficulty=difficulty,
        cook_time_minutes=int(cook_time_minutes),
        **extra,  # type: ignore[arg-type]
    )


def _load_ingredients(
    path: str,
) -> Tuple[Dict[str, GardenVegetable], Dict[str, PantryItem]]:
    raw = load_json(path)
    vegetables: Dict[str, GardenVegetable] = {}
    for entry in raw.get("garden", []):
        identifier = str(entry["id"])
        vegetables[identifier] = GardenVegetable(
            identifier,
            str(entry["name"]),
            str(entry.get("image") or f"garden_{identifier}"),
        )

    pantry_items: Dict[str, PantryItem] = {}
    for entry in raw.get("pantry", []):
        identifier = str(entry["id"])
        category = str(entry.get("category", "basics"))
        if category not in PANTRY_CATEGORIES:
            raise ValueError(f"Pantry item {identifier} has unknown category {category}")
        pantry_items[identifier] = PantryItem(
            identifier,
            str(entry["name"]),
            category,
            str(entry.get("image") or f"farm_{identifier}"),
        )
    return vegetables, pantry_items


def _load_recipes(
    path: str,
    vegetables: Mapping[str, GardenVegetable],
    pantry_items: Mapping[str, PantryItem],
) -> List[Recipe]:
    raw = load_json(path)
    recipes: List[Recipe] = []
    for entry in raw:
        recipe_id = str(entry["id"])
        garden: List[GardenVegetable] = []
        for identifier in entry.get("garden", []):
            vegetable = vegetables.get(identifier)
            if vegetable is None:
                raise ValueError(
                    f"Recipe {recipe_id} references unknown vegetable {identifier}"
                )
            garden.append(vegetable)
        pantry: List[PantryItem] = []
        for identifier in entry.get("pantry", []):
            item = pantry_items.get(identifier)
            if item is None:
                raise ValueError(
                    f"Recipe {recipe_id} references unknown pantry item {identifier}"
                )
            pantry.append(item)
        try:
            cook_time = int(entry.get("cook_time", 10))
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"Recipe {recipe_id} has invalid cook_time {entry.get('cook_time')!r}"
            ) from exc
        recipes.append(
            make_recipe(
                recipe_id,
                garden,
                pantry,
                [str(line) for line in entry.get("steps", [])],
                title=str(entry.get("title", "")),
                difficulty=str(entry.get("difficulty", "easy")).lower(),
                cook_time_minutes=cook_time,
                description=str(entry.get("description", "")),
                category=str(entry.get("category", "lunch")),
                servings=int(entry.get("servings", 1)),
                needs_adult_help=bool(entry.get("needs_adult_help", False)),
            )
        )
    return recipes
