"""Sorting helpers shared by list endpoints."""

from __future__ import annotations

from typing import Literal

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query

from lms.core.database import Base

SortOrder = Literal["asc", "desc"]


def apply_sort(
    query: Query,  # type: ignore[type-arg]
    model: type[Base],
    sort_by: str | None,
    sort_order: str | None = "desc",
    default_field: str = "created_at",
) -> Query:  # type: ignore[type-arg]
    """Order ``query`` by a column of ``model``.

    Unknown columns fall back to ``default_field`` and anything other than
    ``"asc"`` sorts descending, so user input can never raise here.

    Args:
        query: The query to sort.
        model: The mapped class whose columns may be sorted on.
        sort_by: Requested column name (e.g. ``"code"``).
        sort_order: ``"asc"`` or ``"desc"``.
        default_field: Column used when ``sort_by`` is missing or unknown.
    """
    field = default_field
    if sort_by and sort_by in model.__table__.columns:
        field = sort_by

    column = getattr(model, field)
    order_func = asc if sort_order == "asc" else desc
    # Stable secondary key so pagination does not shuffle equal rows
    return query.order_by(order_func(column), asc(model.id))
