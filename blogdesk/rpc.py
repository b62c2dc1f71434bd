# blogdesk/rpc.py
"""Typed procedure router.

Each procedure has a dotted path (``post.create``), a kind (query or
mutation), a pydantic input model and an async handler. Calls go through
``observe_procedure`` so every one is logged and measured, including calls
whose input fails validation.
"""
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

import pydantic
from pydantic import BaseModel

from blogdesk.errors import MethodNotSupported, NotFound, from_pydantic
from blogdesk.observability import observe_procedure
from blogdesk.schemas import (
    CategoryCreate, CategoryUpdate, EmptyInput, IdInput, PostCreate, PostListQuery,
    PostUpdate, SlugInput,
)
from blogdesk.services import MutationService, QueryService

logger = logging.getLogger(__name__)

QUERY = "query"
MUTATION = "mutation"


def to_jsonable(value: Any) -> Any:
    """Serialize procedure output with camelCase keys."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, list):
        return [to_jsonable(item) for item in value]
    return value


@dataclass
class Procedure:
    path: str
    kind: str
    input_model: Type[BaseModel]
    handler: Callable[[Any], Awaitable[Any]]


class Router:
    def __init__(self):
        self._procedures: Dict[str, Procedure] = {}

    def query(self, path: str, input_model: Type[BaseModel] = EmptyInput):
        return self._register(QUERY, path, input_model)

    def mutation(self, path: str, input_model: Type[BaseModel] = EmptyInput):
        return self._register(MUTATION, path, input_model)

    def _register(self, kind: str, path: str, input_model: Type[BaseModel]):
        if path in self._procedures:
            raise ValueError(f"Procedure already registered: {path}")

        def decorator(func):
            @observe_procedure(kind, path)
            async def handler(raw_input: Any = None):
                try:
                    payload = input_model.model_validate(raw_input if raw_input is not None else {})
                except pydantic.ValidationError as exc:
                    raise from_pydantic(exc) from exc
                return to_jsonable(await func(payload))

            self._procedures[path] = Procedure(path, kind, input_model, handler)
            return func

        return decorator

    @property
    def paths(self) -> List[str]:
        return sorted(self._procedures)

    def get(self, path: str) -> Procedure:
        procedure = self._procedures.get(path)
        if procedure is None:
            raise NotFound(f'No procedure found on path "{path}"')
        return procedure

    async def call(self, path: str, raw_input: Any = None, kind: Optional[str] = None) -> Any:
        """Run a procedure; ``kind`` lets the transport insist on query vs mutation."""
        procedure = self.get(path)
        if kind is not None and kind != procedure.kind:
            raise MethodNotSupported(
                f'Unsupported {kind} call on {procedure.kind} procedure "{path}"'
            )
        return await procedure.handler(raw_input)


def build_app_router(mutations: MutationService, queries: QueryService) -> Router:
    """Register the post.* and category.* procedures against the given services."""
    router = Router()

    # --- post ---
    @router.mutation("post.create", PostCreate)
    async def create_post(inp: PostCreate):
        return await mutations.create_post(**inp.model_dump())

    @router.query("post.getAll", PostListQuery)
    async def list_posts(inp: PostListQuery):
        return await queries.list_posts(category_id=inp.category_id, search_term=inp.search_term)

    @router.query("post.getBySlug", SlugInput)
    async def get_post_by_slug(inp: SlugInput):
        return await queries.get_post_by_slug(inp.slug)

    @router.query("post.getById", IdInput)
    async def get_post_by_id(inp: IdInput):
        return await queries.get_post_by_id(inp.id)

    @router.mutation("post.update", PostUpdate)
    async def update_post(inp: PostUpdate):
        return await mutations.update_post(inp.id, **inp.model_dump(exclude_unset=True, exclude={"id"}))

    @router.mutation("post.delete", IdInput)
    async def delete_post(inp: IdInput):
        return await mutations.delete_post(inp.id)

    # --- category ---
    @router.mutation("category.create", CategoryCreate)
    async def create_category(inp: CategoryCreate):
        return await mutations.create_category(inp.name, inp.description)

    @router.query("category.getAll", EmptyInput)
    async def list_categories(inp: EmptyInput):
        return await queries.list_categories()

    @router.query("category.getBySlug", SlugInput)
    async def get_category_by_slug(inp: SlugInput):
        return await queries.get_category_by_slug(inp.slug)

    @router.mutation("category.update", CategoryUpdate)
    async def update_category(inp: CategoryUpdate):
        return await mutations.update_category(inp.id, **inp.model_dump(exclude_unset=True, exclude={"id"}))

    @router.mutation("category.delete", IdInput)
    async def delete_category(inp: IdInput):
        return await mutations.delete_category(inp.id)

    logger.info(f"Registered {len(router.paths)} RPC procedures")
    return router
