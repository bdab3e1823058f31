# pagebuilder/domain/commands.py
"""
Typed inputs for page writes and listings.

Each dataclass validates itself on construction so repositories never see a
half-filled page.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from .invariants.exceptions import InvariantViolation
from .invariants.page import assert_activation_window, assert_page_identity
from .page_types import PageTypeKind, coerce_page_type


@dataclass
class NewPage:
    site_id: int
    title: str
    page_type: PageTypeKind
    name: str = ""
    keywords: str = ""
    redirect_type: Optional[str] = None
    redirect_weighted_odds: bool = False
    is_searchable: bool = False
    is_shareable: bool = False
    activation_start: Optional[datetime] = None
    activation_end: Optional[datetime] = None
    background_color: str = ""
    created_by: Optional[int] = None

    def __post_init__(self) -> None:
        assert_page_identity(
            title=self.title, site_id=self.site_id, page_type=self.page_type
        )
        self.page_type = coerce_page_type(self.page_type)
        assert_activation_window(self.activation_start, self.activation_end)


@dataclass
class PageUpdate:
    """Full-row replacement of a page's editable fields."""

    site_id: int
    page_id: int
    title: str
    page_type: PageTypeKind
    name: str = ""
    keywords: str = ""
    redirect_type: Optional[str] = None
    redirect_weighted_odds: bool = False
    is_searchable: bool = False
    is_shareable: bool = False
    activation_start: Optional[datetime] = None
    activation_end: Optional[datetime] = None
    background_color: str = ""

    def __post_init__(self) -> None:
        if not self.page_id:
            raise InvariantViolation("Page id is required.")
        assert_page_identity(
            title=self.title, site_id=self.site_id, page_type=self.page_type
        )
        self.page_type = coerce_page_type(self.page_type)
        assert_activation_window(self.activation_start, self.activation_end)


@dataclass
class PageFilters:
    user_id: Optional[int] = None
    search: str = ""
    sort: int = 1
    direction: str = "asc"
    page_types: Tuple[PageTypeKind, ...] = field(default_factory=tuple)
    page: Optional[int] = None
    per_page: Optional[int] = None

    def __post_init__(self) -> None:
        if isinstance(self.page_types, (int, str, PageTypeKind)):
            self.page_types = (self.page_types,)
        self.page_types = tuple(coerce_page_type(t) for t in self.page_types)

        if self.page is not None and self.page < 1:
            raise InvariantViolation("Page number must be 1 or greater.")
        if self.per_page is not None and self.per_page < 1:
            raise InvariantViolation("per_page must be 1 or greater.")

    @property
    def paginate(self) -> bool:
        return self.page is not None and self.per_page is not None


@dataclass
class TagTransfer:
    """Describes a tag copy or link between a page and another site."""

    page_id: int
    from_site_id: int
    to_site_id: int
    to_page_id: Optional[int] = None
    primary_action: str = "page"

    def __post_init__(self) -> None:
        if self.primary_action != "page":
            raise InvariantViolation(
                f"Unsupported tag transfer target: {self.primary_action}"
            )
        if not self.page_id or not self.from_site_id or not self.to_site_id:
            raise InvariantViolation("Tag transfers need a page and both sites.")
