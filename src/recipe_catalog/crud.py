import json
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models, schemas
from .errors import Conflict, NotFound
from .normalize import normalize_name
from .repository import (
    CategoryRepository,
    IngredientRepository,
    RecipeRepository,
    check_expected_status,
    clean_name,
    new_id,
    utcnow,
)

logger = logging.getLogger(__name__)


def get_by_id(db: Session, model, entity_id: str):
    return db.query(model).filter(model.id == entity_id).first()


def get_by_name(db: Session, model, name: str):
    return db.query(model).filter(model.name_key == normalize_name(name)).first()


def list_rows(db: Session, model):
    return db.query(model).order_by(model.pk).all()


def _servings(value):
    return int(value) if float(value).is_integer() else value


def recipe_to_schema(row: models.Recipe) -> schemas.Recipe:
    return schemas.Recipe(
        id=row.id,
        title=row.title,
        description=row.description,
        ingredients=json.loads(row.ingredients or "[]"),
        steps=json.loads(row.steps or "[]"),
        servings=_servings(row.servings),
        category_id=row.category_id,
        created_at=row.created_at,
        status=schemas.RecipeStatus(row.status),
    )


def _recipe_values(recipe: schemas.Recipe) -> dict:
    return {
        "title": recipe.title,
        "description": recipe.description,
        "ingredients": json.dumps([line.model_dump() for line in recipe.ingredients]),
        "steps": json.dumps(recipe.steps or []),
        "servings": recipe.servings,
        "category_id": recipe.category_id,
        "created_at": recipe.created_at,
        "status": recipe.status.value,
    }


class _SqlNamedRepository:
    model = None
    schema = None
    kind = "entity"

    def __init__(self, db: Session, id_factory=new_id, clock=utcnow):
        self.db = db
        self._new_id = id_factory
        self._clock = clock

    def _row(self, entity_id: str):
        row = get_by_id(self.db, self.model, entity_id)
        if not row:
            raise NotFound(f"{self.kind.capitalize()} not found")
        return row

    def list(self) -> List:
        return [self.schema.model_validate(r) for r in list_rows(self.db, self.model)]

    def get(self, entity_id: str):
        return self.schema.model_validate(self._row(entity_id))

    def find_by_name(self, name):
        row = get_by_name(self.db, self.model, name)
        return self.schema.model_validate(row) if row else None

    def create(self, name):
        name = clean_name(name, self.kind)
        if get_by_name(self.db, self.model, name):
            raise Conflict(f"{self.kind.capitalize()} name already exists")
        row = self.model(
            id=self._new_id(),
            name=name,
            name_key=normalize_name(name),
            created_at=self._clock(),
        )
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            # lost a race against another writer with the same name
            self.db.rollback()
            raise Conflict(f"{self.kind.capitalize()} name already exists") from None
        self.db.refresh(row)
        logger.info("Created %s %s (%r)", self.kind, row.id, row.name)
        return self.schema.model_validate(row)

    def update(self, entity_id: str, name=None):
        row = self._row(entity_id)
        if name is None:
            return self.schema.model_validate(row)
        name = clean_name(name, self.kind)
        existing = get_by_name(self.db, self.model, name)
        if existing and existing.id != entity_id:
            raise Conflict(f"{self.kind.capitalize()} name must be unique")
        row.name = name
        row.name_key = normalize_name(name)
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise Conflict(f"{self.kind.capitalize()} name must be unique") from None
        self.db.refresh(row)
        logger.info("Renamed %s %s to %r", self.kind, entity_id, name)
        return self.schema.model_validate(row)

    def _remove(self, entity_id: str) -> None:
        row = get_by_id(self.db, self.model, entity_id)
        if not row:
            return
        self.db.delete(row)
        self.db.commit()
        logger.info("Deleted %s %s", self.kind, entity_id)


class SqlCategoryRepository(_SqlNamedRepository, CategoryRepository):
    model = models.Category
    schema = schemas.Category
    kind = "category"

    def delete(self, entity_id: str) -> None:
        if SqlRecipeRepository(self.db).uses_category(entity_id):
            raise Conflict("Cannot delete category with recipes")
        self._remove(entity_id)


class SqlIngredientRepository(_SqlNamedRepository, IngredientRepository):
    model = models.Ingredient
    schema = schemas.Ingredient
    kind = "ingredient"

    def __init__(self, db: Session, guard_delete: bool = False, **kwargs):
        super().__init__(db, **kwargs)
        self._guard_delete = guard_delete

    def get_or_create(self, name) -> schemas.Ingredient:
        found = self.find_by_name(name)
        if found:
            return found
        try:
            return self.create(name)
        except Conflict:
            # the unique name_key index makes a concurrent create lose cleanly
            found = self.find_by_name(name)
            if found is None:
                raise
            return found

    def delete(self, entity_id: str) -> None:
        if self._guard_delete and SqlRecipeRepository(self.db).uses_ingredient(entity_id):
            raise Conflict("Cannot delete ingredient used by recipes")
        self._remove(entity_id)


class SqlRecipeRepository(RecipeRepository):
    def __init__(self, db: Session):
        self.db = db

    def list(self) -> List[schemas.Recipe]:
        return [recipe_to_schema(r) for r in list_rows(self.db, models.Recipe)]

    def find(self, recipe_id: str) -> Optional[schemas.Recipe]:
        row = get_by_id(self.db, models.Recipe, recipe_id)
        return recipe_to_schema(row) if row else None

    def get(self, recipe_id: str) -> schemas.Recipe:
        found = self.find(recipe_id)
        if found is None:
            raise NotFound("Recipe not found")
        return found

    def add(self, recipe: schemas.Recipe) -> schemas.Recipe:
        self.db.add(models.Recipe(id=recipe.id, **_recipe_values(recipe)))
        self.db.commit()
        return recipe

    def save(
        self, recipe: schemas.Recipe, expected_status: Optional[schemas.RecipeStatus] = None
    ) -> schemas.Recipe:
        query = self.db.query(models.Recipe).filter(models.Recipe.id == recipe.id)
        if expected_status is not None:
            # compare-and-set in the UPDATE itself
            query = query.filter(models.Recipe.status == expected_status.value)
        updated = query.update(_recipe_values(recipe), synchronize_session=False)
        if not updated:
            self.db.rollback()
            row = get_by_id(self.db, models.Recipe, recipe.id)
            if not row:
                raise NotFound("Recipe not found")
            check_expected_status(schemas.RecipeStatus(row.status), expected_status)
        self.db.commit()
        return recipe

    def delete(self, recipe_id: str) -> None:
        row = get_by_id(self.db, models.Recipe, recipe_id)
        if not row:
            raise NotFound("Recipe not found")
        self.db.delete(row)
        self.db.commit()

    def uses_category(self, category_id: str) -> bool:
        return (
            self.db.query(models.Recipe)
            .filter(models.Recipe.category_id == category_id)
            .first()
            is not None
        )

    def uses_ingredient(self, ingredient_id: str) -> bool:
        # lines live in JSON text, so scan in Python rather than in SQL
        return any(
            line.ingredient_id == ingredient_id
            for recipe in self.list()
            for line in recipe.ingredients
        )
