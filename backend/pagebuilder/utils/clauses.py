# pagebuilder/utils/clauses.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from sqlalchemy.sql import and_, or_
from sqlalchemy.sql.elements import ColumnElement


class SearchMode(Enum):
    EXACT = "exact"
    FUZZY_LEFT = "fuzzy_left"
    FUZZY_RIGHT = "fuzzy_right"
    FUZZY_BOTH = "fuzzy_both"


@dataclass(frozen=True)
class SearchColumn:
    column: Any
    mode: SearchMode = SearchMode.FUZZY_BOTH


LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def like_pattern(value: str, mode: SearchMode) -> str:
    escaped = escape_like(value)

    if mode is SearchMode.EXACT:
        return escaped
    if mode is SearchMode.FUZZY_LEFT:
        return f"%{escaped}"
    if mode is SearchMode.FUZZY_RIGHT:
        return f"{escaped}%"
    if mode is SearchMode.FUZZY_BOTH:
        return f"%{escaped}%"

    raise ValueError(f"Unknown search mode: {mode}")


class ClauseBuilder:
    """
    Builds reusable WHERE / ORDER BY fragments from declarative column maps.

    Only column objects registered here ever become structural SQL; every
    user-supplied value is a bound parameter. The builder never touches a
    session, so the same instance can be shared by every query of a
    repository.
    """

    def __init__(
        self,
        *,
        sortable: Mapping[int, Any],
        searchable: Optional[Mapping[int, SearchColumn]] = None,
        activation: Optional[Tuple[Any, Any]] = None,
        default_sort: Optional[int] = None,
    ) -> None:
        if not sortable:
            raise ValueError("At least one sortable column is required")

        self.sortable: Dict[int, Any] = dict(sortable)
        self.searchable: Dict[int, SearchColumn] = dict(searchable or {})
        self.activation = activation
        self.default_sort = (
            default_sort if default_sort in self.sortable else min(self.sortable)
        )

    def sort_clause(self, ordinal: Any = None, direction: Optional[str] = None):
        """
        Ordering expression for a sort ordinal.

        Unknown or malformed ordinals fall back to the default column.
        Only "desc" (any case) sorts descending.
        """
        try:
            column = self.sortable.get(int(ordinal))
        except (TypeError, ValueError):
            column = None

        if column is None:
            column = self.sortable[self.default_sort]

        if (direction or "").strip().lower() == "desc":
            return column.desc()
        return column.asc()

    def search_clause(self, query: Optional[str]) -> Optional[ColumnElement]:
        """OR of LIKE matches over every searchable column, or None."""
        term = (query or "").strip()

        if not term or not self.searchable:
            return None

        matches = [
            search.column.ilike(like_pattern(term, search.mode), escape=LIKE_ESCAPE)
            for _, search in sorted(self.searchable.items())
        ]
        return or_(*matches)

    def activation_clause(self, now: Optional[datetime] = None) -> ColumnElement:
        """
        Rows whose activation window is open-ended or contains `now`.
        Timestamps are compared as naive UTC.
        """
        if self.activation is None:
            raise ValueError("No activation columns configured")

        start, end = self.activation
        now = now or datetime.now(timezone.utc).replace(tzinfo=None)

        return and_(
            or_(start.is_(None), start <= now),
            or_(end.is_(None), end >= now),
        )
