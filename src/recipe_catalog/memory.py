"""
In-memory repositories.

Each repository owns one list and one lock; every method holds the lock for
its whole body, so parallel callers see each call as a single step. A
read-modify-write spanning several calls is only safe through
``RecipeRepository.save(..., expected_status=...)``.
"""
import logging
import threading
from typing import Callable, List, Optional

from .errors import Conflict, NotFound
from .normalize import names_match
from .repository import (
    CategoryRepository,
    IngredientRepository,
    RecipeRepository,
    check_expected_status,
    clean_name,
    new_id,
    utcnow,
)
from .schemas import Category, Ingredient, Recipe, RecipeStatus

logger = logging.getLogger(__name__)


class _NamedStore:
    entity_cls = None
    kind = "entity"

    def __init__(self, id_factory: Callable[[], str] = new_id, clock=utcnow):
        self._items: List = []
        self._lock = threading.RLock()
        self._new_id = id_factory
        self._clock = clock

    def _index(self, entity_id: str) -> int:
        for idx, item in enumerate(self._items):
            if item.id == entity_id:
                return idx
        return -1

    def _find(self, name):
        for item in self._items:
            if names_match(item.name, name):
                return item
        return None

    def list(self) -> List:
        with self._lock:
            return [item.model_copy() for item in self._items]

    def get(self, entity_id: str):
        with self._lock:
            idx = self._index(entity_id)
            if idx < 0:
                raise NotFound(f"{self.kind.capitalize()} not found")
            return self._items[idx].model_copy()

    def find_by_name(self, name):
        with self._lock:
            found = self._find(name)
            return found.model_copy() if found is not None else None

    def create(self, name):
        with self._lock:
            name = clean_name(name, self.kind)
            if self._find(name) is not None:
                raise Conflict(f"{self.kind.capitalize()} name already exists")
            entity = self.entity_cls(id=self._new_id(), name=name, created_at=self._clock())
            self._items.append(entity)
            logger.info("Created %s %s (%r)", self.kind, entity.id, entity.name)
            return entity.model_copy()

    def update(self, entity_id: str, name=None):
        with self._lock:
            idx = self._index(entity_id)
            if idx < 0:
                raise NotFound(f"{self.kind.capitalize()} not found")
            current = self._items[idx]
            if name is None:
                return current.model_copy()
            name = clean_name(name, self.kind)
            existing = self._find(name)
            if existing is not None and existing.id != entity_id:
                raise Conflict(f"{self.kind.capitalize()} name must be unique")
            updated = current.model_copy(update={"name": name})
            self._items[idx] = updated
            logger.info("Renamed %s %s to %r", self.kind, entity_id, name)
            return updated.model_copy()

    def _remove(self, entity_id: str) -> None:
        idx = self._index(entity_id)
        if idx >= 0:
            del self._items[idx]
            logger.info("Deleted %s %s", self.kind, entity_id)


class InMemoryCategoryRepository(_NamedStore, CategoryRepository):
    entity_cls = Category
    kind = "category"

    def __init__(self, recipes: RecipeRepository, **kwargs):
        super().__init__(**kwargs)
        self._recipes = recipes

    def delete(self, entity_id: str) -> None:
        with self._lock:
            if self._recipes.uses_category(entity_id):
                raise Conflict("Cannot delete category with recipes")
            self._remove(entity_id)


class InMemoryIngredientRepository(_NamedStore, IngredientRepository):
    entity_cls = Ingredient
    kind = "ingredient"

    def __init__(
        self,
        recipes: Optional[RecipeRepository] = None,
        guard_delete: bool = False,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._recipes = recipes
        self._guard_delete = guard_delete

    def get_or_create(self, name) -> Ingredient:
        with self._lock:
            existing = self._find(name)
            if existing is not None:
                logger.debug("Resolved ingredient %r to %s", name, existing.id)
                return existing.model_copy()
            return self.create(name)

    def delete(self, entity_id: str) -> None:
        with self._lock:
            if (
                self._guard_delete
                and self._recipes is not None
                and self._recipes.uses_ingredient(entity_id)
            ):
                raise Conflict("Cannot delete ingredient used by recipes")
            self._remove(entity_id)


class InMemoryRecipeRepository(RecipeRepository):
    def __init__(self):
        self._items: List[Recipe] = []
        self._lock = threading.RLock()

    def _index(self, recipe_id: str) -> int:
        for idx, item in enumerate(self._items):
            if item.id == recipe_id:
                return idx
        return -1

    def list(self) -> List[Recipe]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._items]

    def find(self, recipe_id: str) -> Optional[Recipe]:
        with self._lock:
            idx = self._index(recipe_id)
            return self._items[idx].model_copy(deep=True) if idx >= 0 else None

    def get(self, recipe_id: str) -> Recipe:
        found = self.find(recipe_id)
        if found is None:
            raise NotFound("Recipe not found")
        return found

    def add(self, recipe: Recipe) -> Recipe:
        with self._lock:
            self._items.append(recipe.model_copy(deep=True))
            return recipe

    def save(self, recipe: Recipe, expected_status: Optional[RecipeStatus] = None) -> Recipe:
        with self._lock:
            idx = self._index(recipe.id)
            if idx < 0:
                raise NotFound("Recipe not found")
            check_expected_status(self._items[idx].status, expected_status)
            self._items[idx] = recipe.model_copy(deep=True)
            return recipe

    def delete(self, recipe_id: str) -> None:
        with self._lock:
            idx = self._index(recipe_id)
            if idx < 0:
                raise NotFound("Recipe not found")
            del self._items[idx]

    def uses_category(self, category_id: str) -> bool:
        with self._lock:
            return any(r.category_id == category_id for r in self._items)

    def uses_ingredient(self, ingredient_id: str) -> bool:
        with self._lock:
            return any(
                line.ingredient_id == ingredient_id
                for r in self._items
                for line in r.ingredients
            )
