import json
import logging
from pathlib import Path

from .catalog import Catalog
from .schemas import RecipeCreate

logger = logging.getLogger(__name__)


def load_recipes(path):
    """Load recipe seed records from a JSON file and return a list of dicts.

    Args:
        path (str or Path): Path to the JSON file.

    Returns:
        list: list of recipe dictionaries, empty if the file is missing.
    """
    p = Path(path)
    if not p.exists():
        return []
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def seed_catalog(catalog: Catalog, records) -> int:
    """Create categories and recipes from seed records.

    Each record names its category by ``category``; missing categories are
    created on the fly. Records flagged ``published`` are published after
    creation. A record whose title is already stored is skipped.
    """
    existing = {r.title for r in catalog.recipes.recipes.list()}
    added = 0
    for record in records:
        title = (record.get("title") or "").strip()
        if not title or title in existing:
            continue
        category_name = record.get("category") or "Uncategorized"
        category = catalog.categories.find_by_name(category_name)
        if category is None:
            category = catalog.categories.create(category_name)

        recipe = catalog.recipes.create(
            RecipeCreate(
                title=title,
                description=record.get("description"),
                ingredients=record.get("ingredients", []),
                steps=record.get("steps", []),
                servings=record.get("servings", 1),
                category_id=category.id,
            )
        )
        if record.get("published"):
            catalog.recipes.publish(recipe.id)
        existing.add(title)
        added += 1
    logger.info("Seeded %d recipe(s)", added)
    return added
