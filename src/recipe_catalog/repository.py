"""
Repository interfaces for the recipe catalog.

Two backings implement them: ``memory`` (plain lists, used by tests and the
demo entry point) and ``crud`` (SQLAlchemy sessions, used by the API).
"""
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional

from .errors import InvalidArgument, InvalidState
from .schemas import Category, Ingredient, Recipe, RecipeStatus


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clean_name(name, kind: str) -> str:
    """Trim a submitted name, rejecting it if nothing is left."""
    name = "" if name is None else str(name)
    name = name.strip()
    if not name:
        raise InvalidArgument(f"{kind} name is required")
    return name


def check_expected_status(stored: RecipeStatus, expected: Optional[RecipeStatus]) -> None:
    if expected is not None and stored != expected:
        raise InvalidState(
            f"recipe is {stored.value}, expected {expected.value}; reload and retry"
        )


class NamedRepository(ABC):
    """Keyed collection whose names are unique after normalization."""

    kind = "entity"

    @abstractmethod
    def list(self) -> List:
        pass

    @abstractmethod
    def get(self, entity_id: str):
        """Return the entity or raise NotFound."""

    @abstractmethod
    def find_by_name(self, name: str):
        """Return the entity whose normalized name matches, else None."""

    @abstractmethod
    def create(self, name: str):
        """Add a new entity; Conflict if the normalized name is taken."""

    @abstractmethod
    def update(self, entity_id: str, name: Optional[str] = None):
        pass

    @abstractmethod
    def delete(self, entity_id: str) -> None:
        pass


class CategoryRepository(NamedRepository):
    kind = "category"

    @abstractmethod
    def get(self, entity_id: str) -> Category:
        pass


class IngredientRepository(NamedRepository):
    kind = "ingredient"

    @abstractmethod
    def get(self, entity_id: str) -> Ingredient:
        pass

    @abstractmethod
    def get_or_create(self, name: str) -> Ingredient:
        """Atomic find-or-create by normalized name."""


class RecipeRepository(ABC):
    """Raw recipe storage. Archived recipes are returned like any other."""

    @abstractmethod
    def list(self) -> List[Recipe]:
        pass

    @abstractmethod
    def find(self, recipe_id: str) -> Optional[Recipe]:
        pass

    @abstractmethod
    def get(self, recipe_id: str) -> Recipe:
        """Return the recipe or raise NotFound."""

    @abstractmethod
    def add(self, recipe: Recipe) -> Recipe:
        pass

    @abstractmethod
    def save(self, recipe: Recipe, expected_status: Optional[RecipeStatus] = None) -> Recipe:
        """Replace the stored recipe carrying the same id.

        With ``expected_status`` the write only happens if the stored recipe
        still has that status; otherwise InvalidState is raised and nothing
        changes. The check and the write are one step.
        """

    @abstractmethod
    def delete(self, recipe_id: str) -> None:
        pass

    @abstractmethod
    def uses_category(self, category_id: str) -> bool:
        pass

    @abstractmethod
    def uses_ingredient(self, ingredient_id: str) -> bool:
        pass
