from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class RecipeStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


# Entities


class Category(BaseModel):
    id: str
    name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Ingredient(BaseModel):
    id: str
    name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class IngredientLine(BaseModel):
    """An ingredient entry already resolved to a catalog ingredient id."""
    ingredient_id: str
    quantity: float
    unit: str


class Recipe(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    ingredients: List[IngredientLine] = Field(default_factory=list)
    steps: List[str] = Field(default_factory=list)
    # Any positive real here; only scaling insists on whole servings
    servings: Union[int, float]
    category_id: str
    created_at: datetime
    status: RecipeStatus = RecipeStatus.DRAFT


class ShoppingListItem(BaseModel):
    ingredient_id: str
    unit: str
    quantity: float


# Inputs


class NameCreate(BaseModel):
    name: str = Field(..., json_schema_extra={"example": "Desserts"})


class NameUpdate(BaseModel):
    name: Optional[str] = Field(None, json_schema_extra={"example": "Sweets"})


class IngredientLineInput(BaseModel):
    """A free-text ingredient line as submitted by a caller."""
    name: str = Field(..., json_schema_extra={"example": "flour"})
    quantity: float = Field(..., json_schema_extra={"example": 200})
    unit: str = Field(..., json_schema_extra={"example": "g"})


class RecipeCreate(BaseModel):
    title: str = Field(..., json_schema_extra={"example": "Simple Pancakes"})
    description: Optional[str] = None
    ingredients: List[IngredientLineInput] = Field(
        default_factory=list,
        json_schema_extra={
            "example": [
                {"name": "flour", "quantity": 200, "unit": "g"},
                {"name": "milk", "quantity": 300, "unit": "ml"},
            ]
        },
    )
    steps: List[str] = Field(
        default_factory=list,
        json_schema_extra={
            "example": [
                "Mix dry ingredients",
                "Add wet ingredients",
                "Cook on skillet until golden",
            ]
        },
    )
    servings: Union[int, float] = Field(..., json_schema_extra={"example": 4})
    category_id: str


class RecipeUpdate(BaseModel):
    """Partial update: only fields the caller actually sent are applied."""
    title: Optional[str] = None
    description: Optional[str] = None
    ingredients: Optional[List[IngredientLineInput]] = None
    steps: Optional[List[str]] = None
    servings: Optional[Union[int, float]] = None
    category_id: Optional[str] = None


class RecipeFilter(BaseModel):
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    search: Optional[str] = None


class ShoppingListRequest(BaseModel):
    recipe_ids: List[str] = Field(..., json_schema_extra={"example": ["a1", "b2"]})
