from dataclasses import dataclass

from sqlalchemy.orm import Session

from .crud import SqlCategoryRepository, SqlIngredientRepository, SqlRecipeRepository
from .lifecycle import RecipeService
from .memory import (
    InMemoryCategoryRepository,
    InMemoryIngredientRepository,
    InMemoryRecipeRepository,
)
from .repository import CategoryRepository, IngredientRepository


@dataclass
class Catalog:
    """The three collaborating entry points, wired to one backing store."""
    categories: CategoryRepository
    ingredients: IngredientRepository
    recipes: RecipeService


def memory_catalog(guard_ingredient_delete: bool = False) -> Catalog:
    recipes = InMemoryRecipeRepository()
    categories = InMemoryCategoryRepository(recipes)
    ingredients = InMemoryIngredientRepository(
        recipes, guard_delete=guard_ingredient_delete
    )
    return Catalog(
        categories=categories,
        ingredients=ingredients,
        recipes=RecipeService(recipes, categories, ingredients),
    )


def sql_catalog(db: Session, guard_ingredient_delete: bool = False) -> Catalog:
    recipes = SqlRecipeRepository(db)
    categories = SqlCategoryRepository(db)
    ingredients = SqlIngredientRepository(db, guard_delete=guard_ingredient_delete)
    return Catalog(
        categories=categories,
        ingredients=ingredients,
        recipes=RecipeService(recipes, categories, ingredients),
    )
