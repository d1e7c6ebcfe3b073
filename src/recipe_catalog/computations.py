"""Derived views over resolved recipes. Nothing here touches storage."""
import numbers
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Tuple

from .errors import InvalidArgument
from .schemas import Recipe, ShoppingListItem


def check_servings_target(new_servings) -> int:
    """Validate a scaling target and return it as an int.

    Scaling needs whole servings, even though a stored recipe may hold a
    fractional count. ``6.0`` is accepted as 6; booleans are rejected.
    """
    if isinstance(new_servings, bool) or not isinstance(new_servings, numbers.Real):
        raise InvalidArgument("The number of people served must be an integer")
    if isinstance(new_servings, numbers.Integral):
        value = int(new_servings)
    elif float(new_servings).is_integer():
        value = int(new_servings)
    else:
        raise InvalidArgument("The number of people served must be an integer")
    if value <= 0:
        raise InvalidArgument("Servings must be greater than zero")
    return value


def _round_quantity(value: float) -> float:
    # halves round up, judged on the exact binary value of the float
    return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def scale_recipe(recipe: Recipe, new_servings: int) -> Recipe:
    """Return a copy of ``recipe`` with quantities scaled to ``new_servings``.

    Each quantity is multiplied by ``new_servings / recipe.servings`` and
    rounded to two decimals with halves going up. The input recipe is left
    untouched.
    """
    new_servings = check_servings_target(new_servings)
    factor = new_servings / recipe.servings
    lines = [
        line.model_copy(update={"quantity": _round_quantity(line.quantity * factor)})
        for line in recipe.ingredients
    ]
    return recipe.model_copy(
        update={"ingredients": lines, "servings": new_servings}, deep=True
    )


def build_shopping_list(recipes: Iterable[Recipe]) -> List[ShoppingListItem]:
    """Sum ingredient quantities across recipes.

    Lines group on (ingredient_id, unit); the same ingredient in two units
    stays as two lines since units are never converted. Output keeps the
    order in which each pair was first seen.
    """
    totals: Dict[Tuple[str, str], ShoppingListItem] = {}
    for recipe in recipes:
        for line in recipe.ingredients:
            key = (line.ingredient_id, line.unit)
            item = totals.get(key)
            if item is None:
                totals[key] = ShoppingListItem(
                    ingredient_id=line.ingredient_id,
                    unit=line.unit,
                    quantity=line.quantity,
                )
            else:
                item.quantity += line.quantity
    return list(totals.values())
