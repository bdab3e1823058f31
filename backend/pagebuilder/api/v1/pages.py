# pagebuilder/api/v1/pages.py
from datetime import timezone
from typing import Any, Dict
from flask import abort, g, jsonify, request
from flask_jwt_extended import jwt_required
from dateutil.parser import isoparse
from sqlalchemy import select
from pagebuilder.extensions import db
from pagebuilder.application.pages import (
    copy_page,
    create_page,
    delete_page,
    link_page,
    update_page,
)
from pagebuilder.domain.commands import NewPage, PageFilters, PageUpdate
from pagebuilder.domain.invariants.exceptions import InvariantViolation
from pagebuilder.domain.page_types import PageFlag
from pagebuilder.models.page import Page
from pagebuilder.models.site import Site
from pagebuilder.normalizers.page import (
    normalize_page,
    normalize_page_summary,
    normalize_page_types,
)
from pagebuilder.normalizers.pagination import normalize_pagination
from pagebuilder.repositories.page import PageRepository, coerce_page_ids
from pagebuilder.repositories.widget import WidgetRepository
from pagebuilder.utils.decorators import site_required, roles_required
from pagebuilder.utils.optimistic_lock import enforce_optimistic_lock
from pagebuilder.utils.pagination import parse_page_args
from pagebuilder.utils.transaction import transactional
from . import v1_bp

TRUTHY = {"1", "true", "yes", "on"}


def _flag(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUTHY


def _parse_datetime(data: Dict[str, Any], key: str, default=None):
    if key not in data:
        return default

    raw = data[key]
    if raw in (None, ""):
        return None

    try:
        value = isoparse(raw)
    except (TypeError, ValueError) as exc:
        raise InvariantViolation(f"{key} must be an ISO 8601 timestamp") from exc

    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _page_fields(data: Dict[str, Any], current: Page | None = None) -> Dict[str, Any]:
    """
    Editable page fields from a JSON body. Missing keys keep the current
    value when updating.
    """
    def pick(key, attr=None, default=None):
        if key in data:
            return data[key]
        return getattr(current, attr or key) if current is not None else default

    return {
        "title": pick("title"),
        "name": pick("name", default="") or "",
        "page_type": pick("page_type", "page_type_id"),
        "keywords": pick("keywords", default="") or "",
        "redirect_type": pick("redirect_type"),
        "redirect_weighted_odds": _flag(pick("redirect_weighted_odds", default=False)),
        "is_searchable": _flag(pick("is_searchable", default=False)),
        "is_shareable": _flag(pick("is_shareable", default=False)),
        "activation_start": _parse_datetime(
            data, "activation_start", current.activation_start if current else None
        ),
        "activation_end": _parse_datetime(
            data, "activation_end", current.activation_end if current else None
        ),
        "background_color": pick("background_color", default="") or "",
    }


def _owned_page_or_404(page_id: int) -> Page:
    page = PageRepository().get_owned_page(g.current_site.id, page_id)
    if page is None:
        abort(404, description="Page not found")
    return page


# ------------------------
# Page types
# ------------------------

@v1_bp.route("/page-types", methods=["GET"])
@jwt_required()
@site_required
def list_page_types():
    filter_homepages = _flag(request.args.get("filter_homepages", "0"))
    page_types = PageRepository().get_page_types(filter_homepages=filter_homepages)
    return jsonify(normalize_page_types(page_types))


# ------------------------
# Pages
# ------------------------

@v1_bp.route("/pages", methods=["GET"])
@jwt_required()
@site_required
def list_pages():
    site = g.current_site
    page, per_page = parse_page_args(request.args)

    filters = PageFilters(
        user_id=g.current_user_id if _flag(request.args.get("mine", "0")) else None,
        search=request.args.get("q", ""),
        sort=request.args.get("sort", 1, type=int),
        direction=request.args.get("dir", "asc"),
        page_types=request.args.getlist("type", type=int),
        page=page,
        per_page=per_page,
    )

    items, total = PageRepository().list_by_site(site.id, filters)

    return jsonify(normalize_pagination(
        items,
        lambda p: normalize_page(p, site.id, admin=True),
        page=page,
        per_page=per_page,
        total=total,
    ))


@v1_bp.route("/pages/search", methods=["GET"])
def search_pages():
    pages = PageRepository().get_pages_by_search_query(
        g.current_site.id, request.args.get("q", "")
    )
    return jsonify([normalize_page_summary(p) for p in pages])


@v1_bp.route("/pages", methods=["POST"])
@jwt_required()
@site_required
@roles_required("admin")
def create_page_route():
    data = request.get_json(silent=True) or {}

    new_page = NewPage(
        site_id=g.current_site.id,
        created_by=g.current_user_id,
        **_page_fields(data),
    )
    page_id = create_page(new_page=new_page, actor_id=g.current_user_id)

    return jsonify({
        "id": page_id,
        "message": "Page created successfully"
    }), 201


@v1_bp.route("/pages/<id_or_slug>", methods=["GET"])
@jwt_required()
@site_required
def get_page(id_or_slug):
    site = g.current_site
    admin = g.current_role == "admin"
    include_inactive = admin and _flag(request.args.get("include_inactive", "0"))

    page = PageRepository().get_page(site.id, id_or_slug, include_inactive=include_inactive)
    if page is None:
        abort(404, description="Page not found")

    widgets = WidgetRepository().get_widgets(site.id, [page.id], include_linked=True)
    return jsonify(normalize_page(page, site.id, admin=admin, widgets=widgets))


@v1_bp.route("/pages/<int:page_id>", methods=["PUT"])
@jwt_required()
@site_required
@roles_required("admin")
def update_page_route(page_id):
    site = g.current_site
    page = _owned_page_or_404(page_id)

    enforce_optimistic_lock(page)

    data = request.get_json(silent=True) or {}
    changes = PageUpdate(site_id=site.id, page_id=page.id, **_page_fields(data, current=page))

    update_page(changes=changes, actor_id=g.current_user_id)

    page = PageRepository().get_page(site.id, page_id, include_inactive=True)
    return jsonify(normalize_page(page, site.id, admin=True)), 200


@v1_bp.route("/pages/<int:page_id>", methods=["DELETE"])
@jwt_required()
@site_required
@roles_required("admin")
def delete_page_route(page_id):
    deleted = delete_page(
        site_id=g.current_site.id,
        page_id=page_id,
        actor_id=g.current_user_id,
    )
    if not deleted:
        abort(404, description="Page not found")

    return jsonify({"message": "Page deleted"}), 200


@v1_bp.route("/pages/<int:page_id>/copy", methods=["POST"])
@jwt_required()
@site_required
@roles_required("admin")
def copy_page_route(page_id):
    site = g.current_site
    data = request.get_json(silent=True) or {}

    try:
        to_site_id = int(data.get("to_site_id", site.id))
    except (TypeError, ValueError):
        return jsonify({"error": "to_site_id must be an integer"}), 400

    target = Site.query.filter_by(id=to_site_id, is_active=True).first()
    if target is None:
        return jsonify({"error": "Target site not found"}), 404

    new_page_id = copy_page(
        from_site_id=site.id,
        to_site_id=target.id,
        page_id=page_id,
        actor_id=g.current_user_id,
        copy_widgets=_flag(data.get("copy_widgets", True)),
    )
    if not new_page_id:
        abort(404, description="Page not found")

    return jsonify({"id": new_page_id, "site_id": target.id}), 201


@v1_bp.route("/pages/<int:page_id>/links", methods=["PUT"])
@jwt_required()
@site_required
@roles_required("admin")
def link_page_route(page_id):
    site = g.current_site
    _owned_page_or_404(page_id)

    data = request.get_json(silent=True) or {}
    raw_ids = data.get("site_ids", [])
    if not isinstance(raw_ids, list):
        return jsonify({"error": "site_ids must be a list"}), 400

    site_ids = coerce_page_ids(raw_ids)
    known = set(
        db.session.execute(select(Site.id).where(Site.id.in_(site_ids))).scalars()
    ) if site_ids else set()
    unknown = sorted(set(site_ids) - known)
    if unknown:
        return jsonify({"error": f"Unknown sites: {unknown}"}), 404

    link_page(from_site_id=site.id, to_site_ids=site_ids, page_id=page_id)

    return jsonify({
        "page_id": page_id,
        "site_ids": PageRepository().get_linked_site_ids(site.id, page_id),
    }), 200


@v1_bp.route("/pages/<int:page_id>/views", methods=["POST"])
def record_page_view(page_id):
    repo = PageRepository()
    page = repo.get_page(g.current_site.id, page_id)
    if page is None:
        abort(404, description="Page not found")

    with transactional():
        repo.increment_view_count(page.id)

    return jsonify({"page_id": page.id, "views": repo.get_view_count(page.id)})


@v1_bp.route("/pages/flags", methods=["POST"])
@jwt_required()
@site_required
@roles_required("admin")
def toggle_page_flags():
    data = request.get_json(silent=True) or {}

    try:
        flag = PageFlag(data.get("flag"))
    except ValueError:
        return jsonify({"error": "flag must be 'share' or 'search'"}), 400

    requested = coerce_page_ids(data.get("page_ids") or [])
    owned = db.session.execute(
        select(Page.id).where(Page.id.in_(requested), Page.site_id == g.current_site.id)
    ).scalars().all() if requested else []

    with transactional():
        updated = PageRepository().toggle_flag(owned, flag, _flag(data.get("value", False)))

    return jsonify({"flag": flag.value, "updated": updated}), 200
