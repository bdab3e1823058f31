# pagebuilder/normalizers/pagination.py
from typing import Callable, Any, List, Optional, Dict

from pagebuilder.utils.pagination import offset_meta


def normalize_pagination(
    items: List[Any],
    normalize_fn: Callable[[Any], Dict[str, Any]],
    *,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
    total: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Normalize list API responses.

    Without page/per_page the whole result set is returned and only the
    total is reported.
    """

    # Normalize ORM objects → dicts
    normalized_items = [normalize_fn(item) for item in items]

    response: Dict[str, Any] = {
        "items": normalized_items,
    }

    if page is not None and per_page is not None:
        response["pagination"] = offset_meta(
            page=page,
            per_page=per_page,
            total=total if total is not None else len(items),
        )
        return response

    response["pagination"] = {"total": total if total is not None else len(items)}
    return response
