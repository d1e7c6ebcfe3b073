from pathlib import Path

from .catalog import memory_catalog
from .config import get_settings
from .logging_config import configure_logging
from .recipes import load_recipes, seed_catalog


def main():
    settings = get_settings()
    configure_logging(settings.log_level)

    data_file = Path(settings.seed_file)
    if not data_file.is_absolute():
        data_file = Path(__file__).resolve().parents[2] / data_file

    catalog = memory_catalog(settings.guard_ingredient_delete)
    seed_catalog(catalog, load_recipes(data_file))

    recipes = catalog.recipes.list()
    print(f"Loaded {len(recipes)} published recipe(s).")
    for r in recipes:
        print(f"- {r.title} ({r.servings} servings)")
    if not recipes:
        return

    names = {i.id: i.name for i in catalog.ingredients.list()}
    print("\nShopping list:")
    for item in catalog.recipes.generate_shopping_list([r.id for r in recipes]):
        print(f"- {names.get(item.ingredient_id, item.ingredient_id)}: "
              f"{round(item.quantity, 2)} {item.unit}")


if __name__ == "__main__":
    main()
