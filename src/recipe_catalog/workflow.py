"""
Recipe publication workflow.

    draft --publish--> published --archive--> archived

``archived`` is terminal. Archived recipes are frozen, published recipes
cannot be deleted.
"""
import logging

from .errors import InvalidState
from .schemas import Recipe, RecipeStatus

logger = logging.getLogger(__name__)

INITIAL_STATUS = RecipeStatus.DRAFT

TRANSITIONS = {
    "publish": (RecipeStatus.DRAFT, RecipeStatus.PUBLISHED),
    "archive": (RecipeStatus.PUBLISHED, RecipeStatus.ARCHIVED),
}

_REFUSALS = {
    "publish": "only draft recipes can be published",
    "archive": "only published recipes can be archived",
}


def can_transition(status: RecipeStatus, action: str) -> bool:
    source, _ = TRANSITIONS[action]
    return status == source


def _apply(recipe: Recipe, action: str) -> Recipe:
    if not can_transition(recipe.status, action):
        raise InvalidState(_REFUSALS[action])
    _, target = TRANSITIONS[action]
    logger.info("Recipe %s: %s -> %s", recipe.id, recipe.status.value, target.value)
    recipe.status = target
    return recipe


def publish(recipe: Recipe) -> Recipe:
    return _apply(recipe, "publish")


def archive(recipe: Recipe) -> Recipe:
    return _apply(recipe, "archive")


def ensure_mutable(recipe: Recipe) -> None:
    if recipe.status == RecipeStatus.ARCHIVED:
        raise InvalidState("recipe is archived and cannot be edited")


def ensure_deletable(recipe: Recipe) -> None:
    if recipe.status == RecipeStatus.PUBLISHED:
        raise InvalidState("only draft or archived recipes can be deleted")
