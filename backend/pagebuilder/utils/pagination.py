# pagebuilder/utils/pagination.py
from __future__ import annotations

from typing import Any, Optional, Tuple, TypedDict

from flask import current_app
from sqlalchemy import func, select
from werkzeug.exceptions import BadRequest


class OffsetMeta(TypedDict):
    """
    Offset pagination metadata returned by list endpoints.
    """
    page: int
    per_page: int
    total: int
    pages: int


def parse_page_args(args) -> Tuple[Optional[int], Optional[int]]:
    """
    Read ?page= and ?per_page= from a request's query string.

    Returns (None, None) when the caller did not ask for pagination.
    per_page is capped at PAGES_MAX_PER_PAGE.
    """
    raw_page = args.get("page")
    if raw_page is None:
        return None, None

    try:
        page = int(raw_page)
        per_page = int(args.get("per_page", current_app.config["PAGES_PER_PAGE"]))
    except (TypeError, ValueError) as exc:
        raise BadRequest("page and per_page must be integers") from exc

    if page < 1 or per_page < 1:
        raise BadRequest("page and per_page must be greater than zero")

    return page, min(per_page, current_app.config["PAGES_MAX_PER_PAGE"])


def offset_meta(*, page: int, per_page: int, total: int) -> OffsetMeta:
    pages = (total + per_page - 1) // per_page if per_page else 0
    return {
        "page": page,
        "per_page": per_page,
        "total": total,
        "pages": pages,
    }


def paginate_select(session: Any, stmt: Any, *, page: int, per_page: int):
    """
    Run a SELECT for one page of ORM rows plus the total row count.
    """
    total = session.execute(
        select(func.count()).select_from(stmt.order_by(None).subquery())
    ).scalar_one()

    items = session.execute(
        stmt.limit(per_page).offset((page - 1) * per_page)
    ).scalars().all()

    return list(items), total
