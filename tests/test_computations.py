from datetime import datetime

import pytest

from recipe_catalog.catalog import memory_catalog
from recipe_catalog.computations import build_shopping_list, scale_recipe
from recipe_catalog.errors import InvalidArgument, NotFound
from recipe_catalog.schemas import IngredientLine, Recipe


def recipe(servings, *lines, rid="r1"):
    return Recipe(
        id=rid,
        title="Test",
        ingredients=[IngredientLine(ingredient_id=i, quantity=q, unit=u) for i, q, u in lines],
        servings=servings,
        category_id="c1",
        created_at=datetime(2024, 1, 1),
    )


def test_scale_four_to_six_servings():
    r = recipe(4, ("flour", 2.0, "cup"))
    scaled = scale_recipe(r, 6)
    assert scaled.servings == 6
    assert scaled.ingredients[0].quantity == 3.0
    assert scaled.ingredients[0].unit == "cup"
    # input recipe untouched
    assert r.servings == 4
    assert r.ingredients[0].quantity == 2.0


def test_scale_to_same_servings_is_identity():
    r = recipe(3, ("flour", 1.25, "cup"), ("salt", 0.5, "tsp"))
    assert [line.quantity for line in scale_recipe(r, 3).ingredients] == [1.25, 0.5]


def test_scale_rounds_to_two_decimals():
    r = recipe(3, ("flour", 1.0, "cup"))
    assert scale_recipe(r, 1).ingredients[0].quantity == 0.33


def test_scale_rounds_exact_halves_up():
    r = recipe(2, ("sugar", 0.25, "cup"), ("flour", 1.25, "cup"))
    assert [line.quantity for line in scale_recipe(r, 1).ingredients] == [0.13, 0.63]


def test_scale_rounds_on_the_stored_binary_value():
    # 1.005 is slightly below the half in binary, so it rounds down
    r = recipe(1, ("salt", 1.005, "tsp"))
    assert scale_recipe(r, 1).ingredients[0].quantity == 1.0


def test_scale_accepts_whole_float():
    assert scale_recipe(recipe(2, ("egg", 1, "unit")), 4.0).servings == 4


@pytest.mark.parametrize("target", (0, -3, 2.5, True, "4", None, float("nan")))
def test_scale_rejects_bad_targets(target):
    with pytest.raises(InvalidArgument):
        scale_recipe(recipe(4, ("flour", 2.0, "cup")), target)


def test_shopping_list_sums_matching_pairs():
    r1 = recipe(1, ("flour", 100, "g"), rid="r1")
    r2 = recipe(1, ("flour", 50, "g"), rid="r2")
    items = build_shopping_list([r1, r2])
    assert [(i.ingredient_id, i.unit, i.quantity) for i in items] == [("flour", "g", 150)]


def test_shopping_list_keeps_units_apart():
    r1 = recipe(1, ("flour", 100, "g"), rid="r1")
    r2 = recipe(1, ("flour", 50, "kg"), rid="r2")
    items = build_shopping_list([r1, r2])
    assert [(i.ingredient_id, i.unit, i.quantity) for i in items] == [
        ("flour", "g", 100),
        ("flour", "kg", 50),
    ]


def test_shopping_list_first_seen_order():
    r1 = recipe(1, ("milk", 1, "l"), ("egg", 2, "unit"), rid="r1")
    r2 = recipe(1, ("sugar", 10, "g"), ("milk", 1, "l"), rid="r2")
    items = build_shopping_list([r2, r1])
    assert [i.ingredient_id for i in items] == ["sugar", "milk", "egg"]
    assert items[1].quantity == 2


# Through the service


@pytest.fixture
def catalog():
    return memory_catalog()


def make(catalog, title, lines, servings=4):
    category = catalog.categories.find_by_name("Misc") or catalog.categories.create("Misc")
    r = catalog.recipes.create(
        {
            "title": title,
            "ingredients": [{"name": n, "quantity": q, "unit": u} for n, q, u in lines],
            "servings": servings,
            "category_id": category.id,
        }
    )
    return r


def test_service_scale_does_not_persist(catalog):
    r = make(catalog, "Soup", [("Water", 2.0, "cup")])
    scaled = catalog.recipes.scale_recipe(r.id, 6)
    assert scaled.ingredients[0].quantity == 3.0
    assert catalog.recipes.get(r.id).ingredients[0].quantity == 2.0
    assert catalog.recipes.get(r.id).servings == 4


def test_service_scale_validates_before_lookup(catalog):
    # the target check comes first, even for unknown recipes
    with pytest.raises(InvalidArgument):
        catalog.recipes.scale_recipe("missing", 2.5)
    with pytest.raises(InvalidArgument):
        catalog.recipes.scale_recipe("missing", 0)
    with pytest.raises(NotFound):
        catalog.recipes.scale_recipe("missing", 2)


def test_service_scale_archived_is_not_found(catalog):
    r = make(catalog, "Soup", [("Water", 2.0, "cup")])
    catalog.recipes.publish(r.id)
    catalog.recipes.archive(r.id)
    with pytest.raises(NotFound):
        catalog.recipes.scale_recipe(r.id, 2)


def test_service_shopping_list(catalog):
    r1 = make(catalog, "Bread", [("Flour", 100, "g"), ("Salt", 1, "tsp")])
    r2 = make(catalog, "Cake", [("flour", 50, "g"), ("Sugar", 20, "g")])
    flour = catalog.ingredients.find_by_name("FLOUR")

    items = catalog.recipes.generate_shopping_list([r1.id, r2.id, r1.id])
    assert items[0].ingredient_id == flour.id
    assert items[0].quantity == 250
    assert len(items) == 3


@pytest.mark.parametrize("ids", ([], (), "r1", None))
def test_service_shopping_list_rejects_bad_input(catalog, ids):
    with pytest.raises(InvalidArgument):
        catalog.recipes.generate_shopping_list(ids)


def test_service_shopping_list_propagates_not_found(catalog):
    r = make(catalog, "Bread", [("Flour", 100, "g")])
    with pytest.raises(NotFound):
        catalog.recipes.generate_shopping_list([r.id, "missing"])
