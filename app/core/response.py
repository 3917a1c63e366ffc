"""Response envelopes: `{ data }` for single items, `{ data, meta }` for lists.

Errors use a separate `{ error: { code, message, details } }` envelope built
in :mod:`app.core.exceptions`.
"""


from typing import Generic, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from app.core.pagination import PageMeta

T = TypeVar("T")

_ENVELOPE_CONFIG = {
    "populate_by_name": True,
    "alias_generator": to_camel,
}


class DataResponse(BaseModel, Generic[T]):
    data: T

    model_config = _ENVELOPE_CONFIG


class ListResponse(BaseModel, Generic[T]):
    data: list[T]
    meta: PageMeta

    model_config = _ENVELOPE_CONFIG


def paginated(items: list, total: int, page: int, limit: int) -> dict:
    """Body for a ``ListResponse[...]`` endpoint."""
    return {"data": items, "meta": PageMeta.build(total, page, limit).model_dump()}
