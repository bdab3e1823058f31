from pagebuilder.domain.page_types import PageTypeKind
from pagebuilder.extensions import db
from pagebuilder.models import AuditLog, Page, PageLink


# ------------------------------------------------------------------
# Site context and auth
# ------------------------------------------------------------------

def test_health_needs_no_site(client):
    res = client.get("/api/v1/health")
    assert res.status_code == 200
    assert res.get_json()["status"] == "ok"


def test_openapi_document_needs_no_site(client):
    res = client.get("/openapi/pages.yaml")
    assert res.status_code == 200
    assert b"/pages/{page_id}/copy" in res.data


def test_swagger_ui_needs_no_site(client):
    assert client.get("/swagger/").status_code == 200


def test_missing_site_header_is_rejected(client, admin_headers):
    headers = {"Authorization": admin_headers["Authorization"]}
    res = client.get("/api/v1/pages", headers=headers)
    assert res.status_code == 400


def test_non_integer_site_header_is_rejected(client, admin_headers):
    res = client.get("/api/v1/pages", headers={**admin_headers, "X-Site-ID": "abc"})
    assert res.status_code == 400


def test_unknown_site_is_rejected(client, admin_headers):
    res = client.get("/api/v1/pages", headers={**admin_headers, "X-Site-ID": "9999"})
    assert res.status_code == 404


def test_token_for_another_site_is_forbidden(client, admin_headers, site_b):
    res = client.get("/api/v1/pages", headers={**admin_headers, "X-Site-ID": str(site_b.id)})
    assert res.status_code == 403


def test_pages_require_token(client, site_a):
    res = client.get("/api/v1/pages", headers={"X-Site-ID": str(site_a.id)})
    assert res.status_code == 401


def test_login(client, admin, site_a):
    headers = {"X-Site-ID": str(site_a.id)}

    ok = client.post("/api/v1/auth/login", json={"login": "admin", "password": "secret"}, headers=headers)
    bad = client.post("/api/v1/auth/login", json={"login": "admin", "password": "nope"}, headers=headers)
    empty = client.post("/api/v1/auth/login", json={"login": "admin"}, headers=headers)

    assert ok.status_code == 200
    assert "access_token" in ok.get_json()
    assert bad.status_code == 401
    assert empty.status_code == 400


def test_logged_in_token_lists_pages(client, admin, site_a, make_page):
    make_page(site_a, "Listed")
    headers = {"X-Site-ID": str(site_a.id)}
    token = client.post(
        "/api/v1/auth/login", json={"login": "admin", "password": "secret"}, headers=headers
    ).get_json()["access_token"]

    res = client.get("/api/v1/pages", headers={**headers, "Authorization": f"Bearer {token}"})
    assert res.status_code == 200
    assert [p["title"] for p in res.get_json()["items"]] == ["Listed"]


# ------------------------------------------------------------------
# Page types
# ------------------------------------------------------------------

def test_page_types(client, editor_headers):
    all_types = client.get("/api/v1/page-types", headers=editor_headers).get_json()
    choosable = client.get(
        "/api/v1/page-types?filter_homepages=1", headers=editor_headers
    ).get_json()

    assert len(all_types) == len(PageTypeKind)
    assert "Homepage" in {t["name"] for t in all_types}
    assert "Homepage" not in {t["name"] for t in choosable}


# ------------------------------------------------------------------
# Listing and reading
# ------------------------------------------------------------------

def test_list_pages_paginated(client, admin_headers, make_page, site_a):
    for n in range(3):
        make_page(site_a, f"Page {n}")

    res = client.get("/api/v1/pages?page=2&per_page=2", headers=admin_headers)
    body = res.get_json()

    assert res.status_code == 200
    assert [p["title"] for p in body["items"]] == ["Page 2"]
    assert body["pagination"] == {"page": 2, "per_page": 2, "total": 3, "pages": 2}


def test_list_pages_rejects_bad_pagination(client, admin_headers):
    res = client.get("/api/v1/pages?page=0", headers=admin_headers)
    assert res.status_code == 400


def test_list_pages_filters_by_type_and_search(client, admin_headers, make_page, site_a):
    make_page(site_a, "Big Coupon", PageTypeKind.COUPON)
    make_page(site_a, "Small Coupon", PageTypeKind.COUPON)
    make_page(site_a, "Big Vendor", PageTypeKind.VENDOR)

    res = client.get(
        f"/api/v1/pages?type={int(PageTypeKind.COUPON)}&q=big", headers=admin_headers
    )

    assert [p["title"] for p in res.get_json()["items"]] == ["Big Coupon"]


def test_get_page_by_slug_with_widgets(client, editor_headers, make_page, make_widget, site_a):
    page_id = make_page(site_a, "With Widget")
    make_widget(page_id, site_a, "text", 1, {"body": "hello"})

    res = client.get("/api/v1/pages/with-widget", headers=editor_headers)
    body = res.get_json()

    assert res.status_code == 200
    assert body["id"] == page_id
    assert body["is_linked_page"] is False
    assert body["widgets"][0]["settings"] == {"body": "hello"}
    # admin-only fields are hidden from editors
    assert "view_count" not in body


def test_get_linked_page_is_flagged(client, make_page, headers_for, site_a, site_b, editor):
    page_id = make_page(site_a, "From A")
    link = PageLink()
    link.page_id = page_id
    link.from_site_id = site_a.id
    link.to_site_id = site_b.id
    db.session.add(link)
    db.session.commit()

    res = client.get(f"/api/v1/pages/{page_id}", headers=headers_for(editor, site_b))

    assert res.status_code == 200
    assert res.get_json()["is_linked_page"] is True


def test_inactive_pages_only_visible_to_admins_on_request(
    client, admin_headers, editor_headers, make_page, site_a, tomorrow
):
    page_id = make_page(site_a, "Later", activation_start=tomorrow)
    url = f"/api/v1/pages/{page_id}?include_inactive=1"

    assert client.get(f"/api/v1/pages/{page_id}", headers=admin_headers).status_code == 404
    assert client.get(url, headers=editor_headers).status_code == 404
    assert client.get(url, headers=admin_headers).status_code == 200


def test_public_search(client, make_page, site_a):
    make_page(site_a, "Summer Sale", is_searchable=True)
    make_page(site_a, "Hidden Sale")

    res = client.get("/api/v1/pages/search?q=sale", headers={"X-Site-ID": str(site_a.id)})

    assert res.status_code == 200
    assert [p["title"] for p in res.get_json()] == ["Summer Sale"]


# ------------------------------------------------------------------
# Writes
# ------------------------------------------------------------------

def test_create_page(client, admin_headers, admin, site_a):
    res = client.post(
        "/api/v1/pages",
        json={
            "title": "Fresh Page",
            "page_type": int(PageTypeKind.VENDOR),
            "keywords": "fresh",
            "is_searchable": "1",
            "activation_start": "2020-01-01T00:00:00Z",
        },
        headers=admin_headers,
    )

    assert res.status_code == 201
    page = db.session.get(Page, res.get_json()["id"])
    assert page.site_id == site_a.id
    assert page.slug == "fresh-page"
    assert page.is_searchable is True
    assert page.created_by == admin.id
    assert page.activation_start.year == 2020
    assert page.users[0].id == admin.id

    entry = db.session.query(AuditLog).filter_by(action="page.create").one()
    assert entry.actor_id == admin.id
    assert entry.site_id == site_a.id


def test_create_page_requires_admin(client, editor_headers):
    res = client.post(
        "/api/v1/pages", json={"title": "Nope", "page_type": 2}, headers=editor_headers
    )
    assert res.status_code == 403


def test_create_page_validation_errors(client, admin_headers):
    no_title = client.post("/api/v1/pages", json={"page_type": 2}, headers=admin_headers)
    bad_type = client.post(
        "/api/v1/pages", json={"title": "X", "page_type": 6}, headers=admin_headers
    )
    bad_date = client.post(
        "/api/v1/pages",
        json={"title": "X", "page_type": 2, "activation_end": "soon"},
        headers=admin_headers,
    )

    assert no_title.status_code == 400
    assert no_title.get_json()["error"] == "InvariantViolation"
    assert bad_type.status_code == 400
    assert bad_date.status_code == 400


def test_create_second_homepage_is_rejected(client, admin_headers, make_page, site_a):
    make_page(site_a, "Home", PageTypeKind.HOMEPAGE)

    res = client.post(
        "/api/v1/pages",
        json={"title": "Another Home", "page_type": int(PageTypeKind.HOMEPAGE)},
        headers=admin_headers,
    )

    assert res.status_code == 400
    assert "homepage" in res.get_json()["message"]


def test_update_page_keeps_unsent_fields(client, admin_headers, make_page, site_a):
    page_id = make_page(site_a, "Before", PageTypeKind.COUPON, keywords="keep me")

    res = client.put(
        f"/api/v1/pages/{page_id}", json={"title": "After"}, headers=admin_headers
    )
    body = res.get_json()

    assert res.status_code == 200
    assert body["title"] == "After"
    assert body["slug"] == "after"
    assert body["keywords"] == "keep me"
    assert body["page_type"]["id"] == int(PageTypeKind.COUPON)
    assert body["update_count"] == 1


def test_update_page_of_another_site_is_404(client, admin_headers, make_page, site_b):
    page_id = make_page(site_b, "Theirs")

    res = client.put(f"/api/v1/pages/{page_id}", json={"title": "Mine"}, headers=admin_headers)
    assert res.status_code == 404


def test_update_page_optimistic_lock(client, admin_headers, make_page, site_a):
    page_id = make_page(site_a, "Locked")

    stale = client.put(
        f"/api/v1/pages/{page_id}",
        json={"title": "Too Late"},
        headers={**admin_headers, "If-Unmodified-Since": "Mon, 01 Jan 2001 00:00:00 GMT"},
    )
    garbage = client.put(
        f"/api/v1/pages/{page_id}",
        json={"title": "Too Late"},
        headers={**admin_headers, "If-Unmodified-Since": "not a date"},
    )

    assert stale.status_code == 412
    assert garbage.status_code == 400


def test_delete_page(client, admin_headers, make_page, site_a):
    page_id = make_page(site_a, "Bye")

    first = client.delete(f"/api/v1/pages/{page_id}", headers=admin_headers)
    second = client.delete(f"/api/v1/pages/{page_id}", headers=admin_headers)

    assert first.status_code == 200
    assert second.status_code == 404
    assert db.session.query(AuditLog).filter_by(action="page.delete").count() == 1


def test_copy_page_to_another_site(client, admin_headers, make_page, site_a, site_b):
    page_id = make_page(site_a, "Copy Me")

    first = client.post(
        f"/api/v1/pages/{page_id}/copy", json={"to_site_id": site_b.id}, headers=admin_headers
    )
    again = client.post(
        f"/api/v1/pages/{page_id}/copy", json={"to_site_id": site_b.id}, headers=admin_headers
    )

    assert first.status_code == 201
    assert first.get_json()["site_id"] == site_b.id
    assert again.get_json()["id"] == first.get_json()["id"]


def test_copy_page_defaults_to_same_site(client, admin_headers, make_page, site_a):
    page_id = make_page(site_a, "Twin")

    res = client.post(f"/api/v1/pages/{page_id}/copy", headers=admin_headers)

    copy = db.session.get(Page, res.get_json()["id"])
    assert copy.site_id == site_a.id
    assert copy.title == "Copy of Twin"


def test_copy_page_errors(client, admin_headers, make_page, site_a):
    page_id = make_page(site_a, "Source")

    missing = client.post("/api/v1/pages/424242/copy", headers=admin_headers)
    bad_target = client.post(
        f"/api/v1/pages/{page_id}/copy", json={"to_site_id": "x"}, headers=admin_headers
    )
    unknown_target = client.post(
        f"/api/v1/pages/{page_id}/copy", json={"to_site_id": 9999}, headers=admin_headers
    )

    assert missing.status_code == 404
    assert bad_target.status_code == 400
    assert unknown_target.status_code == 404


def test_link_page_route(client, admin_headers, make_page, site_a, site_b, site_c):
    page_id = make_page(site_a, "Linkable")
    url = f"/api/v1/pages/{page_id}/links"

    linked = client.put(url, json={"site_ids": [site_b.id, site_c.id]}, headers=admin_headers)
    narrowed = client.put(url, json={"site_ids": [site_c.id]}, headers=admin_headers)
    cleared = client.put(url, json={"site_ids": []}, headers=admin_headers)

    assert linked.get_json() == {"page_id": page_id, "site_ids": [site_b.id, site_c.id]}
    assert narrowed.get_json()["site_ids"] == [site_c.id]
    assert cleared.get_json()["site_ids"] == []


def test_link_page_route_errors(client, admin_headers, make_page, site_a):
    page_id = make_page(site_a, "Linkable")
    url = f"/api/v1/pages/{page_id}/links"

    assert client.put(url, json={"site_ids": 3}, headers=admin_headers).status_code == 400
    assert client.put(url, json={"site_ids": [9999]}, headers=admin_headers).status_code == 404
    assert client.put(
        "/api/v1/pages/424242/links", json={"site_ids": []}, headers=admin_headers
    ).status_code == 404


def test_record_page_view(client, make_page, site_a, site_b):
    page_id = make_page(site_a, "Viewed")

    client.post(f"/api/v1/pages/{page_id}/views", headers={"X-Site-ID": str(site_a.id)})
    res = client.post(f"/api/v1/pages/{page_id}/views", headers={"X-Site-ID": str(site_a.id)})
    elsewhere = client.post(f"/api/v1/pages/{page_id}/views", headers={"X-Site-ID": str(site_b.id)})

    assert res.get_json() == {"page_id": page_id, "views": 2}
    assert elsewhere.status_code == 404


def test_toggle_flags_route(client, admin_headers, make_page, site_a, site_b):
    other = make_page(site_a, "Other")
    home = make_page(site_a, "Home", PageTypeKind.HOMEPAGE)
    foreign = make_page(site_b, "Foreign")

    res = client.post(
        "/api/v1/pages/flags",
        json={"flag": "share", "page_ids": [other, home, foreign, "junk"], "value": 1},
        headers=admin_headers,
    )

    assert res.status_code == 200
    assert res.get_json() == {"flag": "share", "updated": 1}

    db.session.expire_all()
    assert db.session.get(Page, other).is_shareable is True
    assert db.session.get(Page, home).is_shareable is False
    assert db.session.get(Page, foreign).is_shareable is False


def test_toggle_flags_rejects_unknown_flag(client, admin_headers):
    res = client.post(
        "/api/v1/pages/flags", json={"flag": "pin", "page_ids": [1]}, headers=admin_headers
    )
    assert res.status_code == 400
