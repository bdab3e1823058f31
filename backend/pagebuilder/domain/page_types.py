from enum import Enum, IntEnum
from typing import FrozenSet

from .invariants.exceptions import InvariantViolation


class PageTypeKind(IntEnum):
    """Closed set of page types. Values are the page_type table ids."""

    HOMEPAGE = 1
    OTHER = 2
    COUPON = 3
    VENDOR = 4
    EXHIBITOR = 5
    THANK_YOU = 7
    HEADER = 8
    FOOTER = 9

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    PageTypeKind.HOMEPAGE: "Homepage",
    PageTypeKind.OTHER: "Other",
    PageTypeKind.COUPON: "Coupon",
    PageTypeKind.VENDOR: "Vendor",
    PageTypeKind.EXHIBITOR: "Exhibitor",
    PageTypeKind.THANK_YOU: "Thank You",
    PageTypeKind.HEADER: "Header",
    PageTypeKind.FOOTER: "Footer",
}


class PageFlag(str, Enum):
    SHAREABLE = "share"
    SEARCHABLE = "search"


UNSHAREABLE: FrozenSet[PageTypeKind] = frozenset({
    PageTypeKind.HOMEPAGE,
    PageTypeKind.HEADER,
    PageTypeKind.FOOTER,
    PageTypeKind.THANK_YOU,
})

UNSEARCHABLE: FrozenSet[PageTypeKind] = frozenset({
    PageTypeKind.HEADER,
    PageTypeKind.FOOTER,
    PageTypeKind.THANK_YOU,
})

# Never returned by the public site search, whatever their flag says
SEARCH_EXCLUDED: FrozenSet[PageTypeKind] = frozenset({
    PageTypeKind.HOMEPAGE,
    PageTypeKind.HEADER,
    PageTypeKind.FOOTER,
})


def flag_exclusions(flag: PageFlag) -> FrozenSet[PageTypeKind]:
    """Page types that may never carry the given flag."""
    if flag is PageFlag.SHAREABLE:
        return UNSHAREABLE
    if flag is PageFlag.SEARCHABLE:
        return UNSEARCHABLE
    raise ValueError(f"Unknown page flag: {flag}")


def coerce_page_type(value) -> PageTypeKind:
    if isinstance(value, PageTypeKind):
        return value
    try:
        return PageTypeKind(int(value))
    except (TypeError, ValueError):
        raise InvariantViolation(f"Unknown page type: {value!r}")
