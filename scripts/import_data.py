from pathlib import Path

from recipe_catalog.catalog import sql_catalog
from recipe_catalog.config import get_settings
from recipe_catalog.db import SessionLocal, init_db
from recipe_catalog.logging_config import configure_logging
from recipe_catalog.recipes import load_recipes, seed_catalog


def main():
    settings = get_settings()
    configure_logging(settings.log_level)
    init_db()
    p = Path(__file__).resolve().parents[1] / settings.seed_file
    if not p.exists():
        print(f'{settings.seed_file} not found')
        return
    db = SessionLocal()
    try:
        catalog = sql_catalog(db, settings.guard_ingredient_delete)
        added = seed_catalog(catalog, load_recipes(p))
    finally:
        db.close()
    print(f'Imported {added} recipes')


if __name__ == '__main__':
    main()
