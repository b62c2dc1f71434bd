# blogdesk/schemas.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- 입력 (procedure input) ---

class InputModel(CamelModel):
    """Procedure input; unknown keys are rejected instead of dropped."""
    model_config = ConfigDict(extra="forbid")


class EmptyInput(InputModel):
    pass


class IdInput(InputModel):
    id: int


class SlugInput(InputModel):
    slug: str


class PostCreate(InputModel):
    title: str = Field(..., min_length=3, max_length=256)
    content: Optional[str] = None
    category_ids: Optional[List[int]] = None
    published: bool = False


class PostUpdate(InputModel):
    id: int
    title: Optional[str] = Field(None, min_length=3, max_length=256)
    content: Optional[str] = None
    published: Optional[bool] = None
    category_ids: Optional[List[int]] = None


class PostListQuery(InputModel):
    category_id: Optional[int] = None
    search_term: Optional[str] = None


class CategoryCreate(InputModel):
    name: str = Field(..., min_length=2, max_length=256)
    description: Optional[str] = None


class CategoryUpdate(InputModel):
    id: int
    name: Optional[str] = Field(None, min_length=2, max_length=256)
    description: Optional[str] = None


# --- 출력 (procedure output) ---

class CategorySummary(CamelModel):
    id: int
    name: str
    slug: str


class Category(CamelModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None


class Post(CamelModel):
    id: int
    title: str
    slug: str
    content: Optional[str] = None
    published: bool
    created_at: datetime
    updated_at: datetime


class PostWithCategories(Post):
    categories: List[CategorySummary] = Field(default_factory=list)


class PostEditView(CamelModel):
    """Lighter shape used to pre-fill the edit form."""
    id: int
    title: str
    content: str
    published: bool
    category_ids: List[int]


class DeleteResult(CamelModel):
    success: bool = True
