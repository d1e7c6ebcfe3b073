import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest

from recipe_catalog.errors import Conflict, InvalidArgument, InvalidState, NotFound
from recipe_catalog.memory import (
    InMemoryCategoryRepository,
    InMemoryIngredientRepository,
    InMemoryRecipeRepository,
)
from recipe_catalog.schemas import IngredientLine, Recipe, RecipeStatus


def make_recipe(recipe_id, category_id, ingredient_id="ing-1"):
    return Recipe(
        id=recipe_id,
        title="Test",
        ingredients=[IngredientLine(ingredient_id=ingredient_id, quantity=1, unit="g")],
        servings=1,
        category_id=category_id,
        created_at=datetime(2024, 1, 1),
    )


@pytest.fixture
def recipes():
    return InMemoryRecipeRepository()


@pytest.fixture
def categories(recipes):
    ids = iter(f"cat-{n}" for n in range(1, 100))
    return InMemoryCategoryRepository(recipes, id_factory=lambda: next(ids))


@pytest.fixture
def ingredients(recipes):
    return InMemoryIngredientRepository(recipes)


def test_create_trims_and_assigns_identity(categories):
    c = categories.create("  Desserts ")
    assert c.name == "Desserts"
    assert c.id == "cat-1"
    assert isinstance(c.created_at, datetime)
    assert categories.get(c.id) == c


@pytest.mark.parametrize("name", ("", "   ", None))
def test_create_rejects_empty_name(categories, name):
    with pytest.raises(InvalidArgument):
        categories.create(name)


def test_duplicate_normalized_name_conflicts(categories, ingredients):
    categories.create("Sobremesas")
    with pytest.raises(Conflict):
        categories.create(" SÔBREMESAS ")

    ingredients.create("Açúcar")
    with pytest.raises(Conflict):
        ingredients.create("acucar")


def test_find_by_name_with_any_variant(ingredients):
    created = ingredients.create("Jalapeño")
    assert ingredients.find_by_name("  JALAPENO ").id == created.id
    assert ingredients.find_by_name("habanero") is None


def test_list_keeps_insertion_order(categories):
    for name in ("Soups", "Salads", "Breads"):
        categories.create(name)
    assert [c.name for c in categories.list()] == ["Soups", "Salads", "Breads"]


def test_get_missing_raises_not_found(categories, ingredients):
    with pytest.raises(NotFound):
        categories.get("nope")
    with pytest.raises(NotFound):
        ingredients.get("nope")


def test_update_rename_checks_other_entities(categories):
    soups = categories.create("Soups")
    salads = categories.create("Salads")

    # renaming to a variant of its own name is fine
    renamed = categories.update(soups.id, name=" SOUPS & Stews ")
    assert renamed.name == "SOUPS & Stews"
    assert categories.update(salads.id, name="salads").name == "salads"

    with pytest.raises(Conflict):
        categories.update(salads.id, name="soups & stews")
    with pytest.raises(NotFound):
        categories.update("nope", name="Other")


def test_update_without_name_is_a_no_op(categories):
    c = categories.create("Soups")
    assert categories.update(c.id) == c


def test_category_delete_blocked_while_referenced(categories, recipes):
    c = categories.create("Soups")
    recipes.add(make_recipe("r1", c.id))
    with pytest.raises(Conflict):
        categories.delete(c.id)

    recipes.delete("r1")
    categories.delete(c.id)
    assert categories.list() == []


def test_category_delete_unknown_id_is_silent(categories):
    categories.delete("missing")


def test_ingredient_delete_is_unconditional_by_default(ingredients, recipes):
    flour = ingredients.create("flour")
    recipes.add(make_recipe("r1", "cat", ingredient_id=flour.id))
    ingredients.delete(flour.id)
    ingredients.delete(flour.id)
    assert ingredients.list() == []


def test_ingredient_delete_guard_when_enabled(recipes):
    guarded = InMemoryIngredientRepository(recipes, guard_delete=True)
    flour = guarded.create("flour")
    recipes.add(make_recipe("r1", "cat", ingredient_id=flour.id))
    with pytest.raises(Conflict):
        guarded.delete(flour.id)


def test_get_or_create_reuses_existing(ingredients):
    first = ingredients.get_or_create("Tomato")
    again = ingredients.get_or_create(" tomato ")
    assert first.id == again.id
    assert len(ingredients.list()) == 1


def test_parallel_get_or_create_makes_one_ingredient():
    def slow_id():
        # widen the gap between the lookup and the insert
        time.sleep(0.001)
        return str(uuid.uuid4())

    ingredients = InMemoryIngredientRepository(id_factory=slow_id)
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(ingredients.get_or_create, [" Tomato "] * 32))

    assert len({r.id for r in results}) == 1
    assert [i.name for i in ingredients.list()] == ["Tomato"]


def test_returned_entities_are_copies(categories):
    c = categories.create("Soups")
    c.name = "Changed outside"
    assert categories.get(c.id).name == "Soups"


def test_recipe_repository_keeps_archived_rows(recipes):
    r = make_recipe("r1", "cat")
    recipes.add(r)
    assert recipes.get("r1").id == "r1"
    assert recipes.find("other") is None
    with pytest.raises(NotFound):
        recipes.get("other")
    with pytest.raises(NotFound):
        recipes.delete("other")


def test_save_with_expected_status_refuses_stale_writes(recipes):
    r = make_recipe("r1", "cat")
    recipes.add(r)
    recipes.save(r.model_copy(update={"status": RecipeStatus.PUBLISHED}))

    with pytest.raises(InvalidState):
        recipes.save(r.model_copy(update={"title": "Stale"}), expected_status=RecipeStatus.DRAFT)
    stored = recipes.get("r1")
    assert stored.status is RecipeStatus.PUBLISHED
    assert stored.title == "Test"

    recipes.save(stored.model_copy(update={"title": "Fresh"}), expected_status=RecipeStatus.PUBLISHED)
    assert recipes.get("r1").title == "Fresh"
