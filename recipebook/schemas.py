from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# Values are passed through untouched: recipebook.validation judges every
# field so that all errors come back together in one mapping.
class RecipeBase(BaseModel):
    name: Any = Field(None, json_schema_extra={"example": "カレーライス"})
    ingredients: Any = Field(
        None, json_schema_extra={"example": "カレールー、じゃがいも、にんじん"}
    )
    instructions: Any = Field(None, json_schema_extra={"example": "材料を切って煮込む"})
    category: Any = Field(None, json_schema_extra={"example": "和食"})
    cooking_time: Any = Field(None, json_schema_extra={"example": 30})
    servings: Any = Field(None, json_schema_extra={"example": 4})
    image_url: Any = None


class RecipeCreate(RecipeBase):
    favorite: Any = False


class RecipeUpdate(RecipeBase):
    favorite: Any = None


class Recipe(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    ingredients: str
    instructions: str
    category: Optional[str] = None
    cooking_time: Optional[int] = None
    servings: Optional[int] = None
    favorite: bool = False
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class RecipePage(BaseModel):
    items: List[Recipe]
    total: int
    page: int
    page_size: int
    pages: int


class FavoriteState(BaseModel):
    id: int
    favorite: bool


class DeleteResponse(BaseModel):
    deleted: bool
