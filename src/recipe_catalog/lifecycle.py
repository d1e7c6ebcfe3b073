"""
Recipe lifecycle: create, edit, publish, archive, delete, and the read side.

All input checks for a call finish before the first write, so a rejected
request never leaves half-created ingredients behind.
"""
import logging
import math
import numbers
from typing import Callable, List, Optional, Sequence, Union

from pydantic import BaseModel, ValidationError

from . import workflow
from .computations import build_shopping_list, check_servings_target, scale_recipe
from .errors import InvalidArgument, NotFound
from .repository import (
    CategoryRepository,
    IngredientRepository,
    RecipeRepository,
    new_id,
    utcnow,
)
from .schemas import (
    IngredientLine,
    IngredientLineInput,
    Recipe,
    RecipeCreate,
    RecipeFilter,
    RecipeStatus,
    RecipeUpdate,
    ShoppingListItem,
)

logger = logging.getLogger(__name__)


def _parse(model, data):
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return model.model_validate(data or {})
    except ValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ()))
        raise InvalidArgument(f"{where}: {first.get('msg')}") from exc


def _clean_title(title) -> str:
    title = (title or "").strip()
    if not title:
        raise InvalidArgument("Title is required")
    return title


def _clean_servings(servings) -> Union[int, float]:
    if (
        isinstance(servings, bool)
        or not isinstance(servings, numbers.Real)
        or not math.isfinite(servings)
        or not servings > 0
    ):
        raise InvalidArgument("Servings must be greater than 0")
    return servings


def _clean_lines(lines: Optional[Sequence[IngredientLineInput]]) -> List[IngredientLineInput]:
    if not lines:
        raise InvalidArgument("Ingredients are required")
    cleaned = []
    for line in lines:
        name = (line.name or "").strip()
        unit = (line.unit or "").strip()
        quantity = line.quantity
        if not name:
            raise InvalidArgument("Ingredient name is required")
        if not (math.isfinite(quantity) and quantity > 0):
            raise InvalidArgument("Ingredient quantity must be > 0")
        if not unit:
            raise InvalidArgument("Ingredient unit is required")
        cleaned.append(IngredientLineInput(name=name, quantity=quantity, unit=unit))
    return cleaned


class RecipeService:
    """Orchestrates recipes over the three repositories."""

    def __init__(
        self,
        recipes: RecipeRepository,
        categories: CategoryRepository,
        ingredients: IngredientRepository,
        id_factory: Callable[[], str] = new_id,
        clock=utcnow,
    ):
        self.recipes = recipes
        self.categories = categories
        self.ingredients = ingredients
        self._new_id = id_factory
        self._clock = clock

    # Read side

    def list(self, filter: Optional[RecipeFilter] = None) -> List[Recipe]:
        filter = _parse(RecipeFilter, filter)
        category_id = filter.category_id

        if filter.category_name:
            category = self.categories.find_by_name(filter.category_name.strip())
            if category is None:
                return []
            category_id = category.id

        items = [r for r in self.recipes.list() if r.status == RecipeStatus.PUBLISHED]

        if category_id:
            items = [r for r in items if r.category_id == category_id]

        if filter.search:
            query = filter.search.strip().lower()
            name_by_id = {i.id: i.name.lower() for i in self.ingredients.list()}

            def matches(recipe: Recipe) -> bool:
                if query in recipe.title.lower():
                    return True
                if recipe.description and query in recipe.description.lower():
                    return True
                # lines whose ingredient was deleted have no name to match
                return any(
                    query in name_by_id[line.ingredient_id]
                    for line in recipe.ingredients
                    if line.ingredient_id in name_by_id
                )

            items = [r for r in items if matches(r)]

        return items

    def get(self, recipe_id: str) -> Recipe:
        recipe = self.recipes.find(recipe_id)
        # archived recipes are indistinguishable from missing ones here
        if recipe is None or recipe.status == RecipeStatus.ARCHIVED:
            raise NotFound("Recipe not found")
        return recipe

    # Write side

    def _require_category(self, category_id) -> str:
        try:
            self.categories.get(category_id)
        except NotFound:
            raise InvalidArgument("Category does not exist") from None
        return category_id

    def _resolve(self, lines: List[IngredientLineInput]) -> List[IngredientLine]:
        resolved = []
        for line in lines:
            ingredient = self.ingredients.get_or_create(line.name)
            logger.debug("Line %r resolved to ingredient %s", line.name, ingredient.id)
            resolved.append(
                IngredientLine(
                    ingredient_id=ingredient.id, quantity=line.quantity, unit=line.unit
                )
            )
        return resolved

    def create(self, data: Union[RecipeCreate, dict]) -> Recipe:
        data = _parse(RecipeCreate, data)

        title = _clean_title(data.title)
        category_id = self._require_category(data.category_id)
        lines = _clean_lines(data.ingredients)
        servings = _clean_servings(data.servings)

        recipe = Recipe(
            id=self._new_id(),
            title=title,
            description=data.description,
            ingredients=self._resolve(lines),
            steps=[str(s) for s in data.steps],
            servings=servings,
            category_id=category_id,
            created_at=self._clock(),
            status=workflow.INITIAL_STATUS,
        )
        self.recipes.add(recipe)
        logger.info("Created recipe %s (%r) as draft", recipe.id, recipe.title)
        return recipe

    def update(self, recipe_id: str, data: Union[RecipeUpdate, dict]) -> Recipe:
        data = _parse(RecipeUpdate, data)
        current = self.recipes.find(recipe_id)
        if current is None:
            raise NotFound("Recipe not found")
        workflow.ensure_mutable(current)

        supplied = data.model_fields_set
        changes = {}
        lines = None

        # a null or empty category_id leaves the category as it is
        if "category_id" in supplied and data.category_id:
            changes["category_id"] = self._require_category(data.category_id)
        if "title" in supplied:
            changes["title"] = _clean_title(data.title)
        if "description" in supplied:
            changes["description"] = data.description
        if "steps" in supplied:
            changes["steps"] = [str(s) for s in (data.steps or [])]
        if "servings" in supplied:
            changes["servings"] = _clean_servings(data.servings)
        if "ingredients" in supplied:
            lines = _clean_lines(data.ingredients)

        # validation done; from here on we write
        if lines is not None:
            changes["ingredients"] = self._resolve(lines)

        updated = current.model_copy(update=changes, deep=True)
        self.recipes.save(updated, expected_status=current.status)
        logger.info("Updated recipe %s (%s)", recipe_id, ", ".join(sorted(changes)) or "no changes")
        return updated

    def delete(self, recipe_id: str) -> None:
        current = self.recipes.find(recipe_id)
        if current is None:
            raise NotFound("Recipe not found")
        workflow.ensure_deletable(current)
        self.recipes.delete(recipe_id)
        logger.info("Deleted recipe %s", recipe_id)

    def publish(self, recipe_id: str) -> Recipe:
        recipe = self.recipes.get(recipe_id)
        source = recipe.status
        return self.recipes.save(workflow.publish(recipe), expected_status=source)

    def archive(self, recipe_id: str) -> Recipe:
        recipe = self.recipes.get(recipe_id)
        source = recipe.status
        return self.recipes.save(workflow.archive(recipe), expected_status=source)

    # Computations

    def scale_recipe(self, recipe_id: str, new_servings) -> Recipe:
        new_servings = check_servings_target(new_servings)
        return scale_recipe(self.get(recipe_id), new_servings)

    def generate_shopping_list(self, recipe_ids: Sequence[str]) -> List[ShoppingListItem]:
        if not isinstance(recipe_ids, (list, tuple)) or not recipe_ids:
            raise InvalidArgument("Recipe IDs are required")
        return build_shopping_list(self.get(rid) for rid in recipe_ids)
