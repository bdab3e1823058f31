from typing import Any, Dict, List, Optional
from .widget import normalize_widget


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def normalize_page(page, site_id: int, admin=False, widgets=None) -> Dict[str, Any]:
    """
    Page as seen from site_id. is_linked_page tells whether the page is
    shown here through a link rather than owned by this site.
    """
    data: Dict[str, Any] = {
        "id": page.id,
        "title": page.title,
        "name": page.display_name,
        "slug": page.slug,
        "page_type": {
            "id": page.page_type_id,
            "name": page.page_type.name if page.page_type else None,
        },
        "site_id": page.site_id,
        "keywords": page.keywords,
        "background_color": page.background_color,
        "activation_start": _iso(page.activation_start),
        "activation_end": _iso(page.activation_end),
        "is_linked_page": page.site_id != site_id,
        "tags": [tag.name for tag in page.tags],
    }

    if admin:
        data.update({
            "redirect_type": page.redirect_type,
            "redirect_weighted_odds": page.redirect_weighted_odds,
            "is_searchable": page.is_searchable,
            "is_shareable": page.is_shareable,
            "view_count": page.view_count,
            "update_count": page.update_count,
            "linked_site_ids": sorted(link.to_site_id for link in page.links),
            "created_at": _iso(page.created_at),
            "updated_at": _iso(page.updated_at),
        })

    if widgets is not None:
        data["widgets"] = [normalize_widget(w) for w in widgets]

    return data


def normalize_page_summary(page) -> Dict[str, Any]:
    return {
        "id": page.id,
        "title": page.title,
        "slug": page.slug,
    }


def normalize_page_type(page_type) -> Dict[str, Any]:
    return {
        "id": page_type.id,
        "name": page_type.name,
        "description": page_type.description,
    }


def normalize_page_types(page_types) -> List[Dict[str, Any]]:
    return [normalize_page_type(pt) for pt in page_types]
