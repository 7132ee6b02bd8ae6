"""Offset pagination with allow-listed sorting.

Every list endpoint shares the same contract: 1-based ``page``, a
``page_size`` clamped to the configured maximum, a ``sort_by`` key resolved
against a per-resource allow-list (unknown keys fall back to the default) and
``sort_order`` of ``asc``/``desc`` (anything else means ``desc``). The total
count comes from the same filtered statement as the page slice.
"""

import math
from collections.abc import Mapping, Sequence
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from commentable.config import get_settings


T = TypeVar("T")

SortOrder = Literal["asc", "desc"]


class PageParams(BaseModel):
    """Normalized paging and sorting request."""

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1)
    sort_by: str | None = None
    sort_order: SortOrder = "desc"

    @classmethod
    def build(
        cls,
        page: int = 1,
        page_size: int | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
        *,
        default_page_size: int | None = None,
    ) -> "PageParams":
        """Build params from raw query values, applying defaults and bounds."""
        settings = get_settings()
        size = page_size or default_page_size or settings.pagination_default_page_size
        size = max(1, min(size, settings.pagination_max_page_size))
        order: SortOrder = "asc" if (sort_order or "").lower() == "asc" else "desc"
        return cls(page=max(page, 1), page_size=size, sort_by=sort_by, sort_order=order)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class Page(BaseModel, Generic[T]):
    """One page of results plus navigation metadata."""

    items: list[T]
    page: int
    page_size: int
    total_count: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def create(cls, items: Sequence[T], total_count: int, params: PageParams) -> "Page[T]":
        total_pages = math.ceil(total_count / params.page_size) if total_count else 0
        return cls(
            items=list(items),
            page=params.page,
            page_size=params.page_size,
            total_count=total_count,
            total_pages=total_pages,
            has_next_page=params.page < total_pages,
            has_previous_page=params.page > 1,
        )


def resolve_sort(
    params: PageParams,
    sort_columns: Mapping[str, ColumnElement[Any] | Any],
    default: str,
) -> tuple[Any, ...]:
    """Translate ``sort_by``/``sort_order`` into ORDER BY clauses.

    Unknown sort keys fall back to ``default``.
    """
    column = sort_columns.get(params.sort_by or default, sort_columns[default])
    if params.sort_order == "asc":
        return (column.asc(),)
    return (column.desc(),)


async def paginate(
    session: AsyncSession,
    stmt: Select[Any],
    params: PageParams,
    *,
    sort_columns: Mapping[str, Any],
    default_sort: str,
    tiebreaker: Any = None,
    options: Sequence[Any] = (),
) -> tuple[list[Any], int]:
    """Count and slice a filtered ORM select.

    Args:
        session: Active session.
        stmt: Filtered ``select(Model)`` without ordering or loader options.
        params: Paging request.
        sort_columns: Allow-listed sort keys mapped to column expressions.
        default_sort: Key used when ``sort_by`` is missing or unknown.
        tiebreaker: Column appended to ORDER BY so pages are stable.
        options: Loader options applied to the page query only.

    Returns:
        Tuple of (items, total_count).
    """
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total_count = (await session.execute(count_stmt)).scalar_one()

    order_by = resolve_sort(params, sort_columns, default_sort)
    if tiebreaker is not None:
        order_by = (*order_by, tiebreaker)

    page_stmt = (
        stmt.options(*options)
        .order_by(*order_by)
        .offset(params.offset)
        .limit(params.page_size)
    )
    result = await session.execute(page_stmt)
    return list(result.scalars().unique().all()), total_count
