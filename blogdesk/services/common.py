# blogdesk/services/common.py
from contextlib import asynccontextmanager
from typing import Iterable, List, Type, TypeVar

import pydantic

from blogdesk.database import classify_storage_error
from blogdesk.errors import BlogError, from_pydantic

M = TypeVar("M", bound=pydantic.BaseModel)


def validate_input(model: Type[M], **values) -> M:
    """Build an input model, raising ValidationError before any storage access."""
    try:
        return model(**values)
    except pydantic.ValidationError as exc:
        raise from_pydantic(exc) from exc


@asynccontextmanager
async def storage_errors(entity: str):
    """Re-raise driver failures as Conflict / NotFound / InternalError."""
    try:
        yield
    except BlogError:
        raise
    except Exception as exc:
        raise classify_storage_error(exc, entity) from exc


def unique_ids(ids: Iterable[int]) -> List[int]:
    """Drop repeated ids, keeping first-seen order."""
    return list(dict.fromkeys(ids))
