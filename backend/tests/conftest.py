# backend/tests/conftest.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from flask_jwt_extended import create_access_token

from pagebuilder import create_app
from pagebuilder.domain.commands import NewPage
from pagebuilder.domain.page_types import PageTypeKind
from pagebuilder.extensions import db
from pagebuilder.models import Organization, Site, Tag, User, Widget, page_tag
from pagebuilder.models.page_type import seed_page_types
from pagebuilder.repositories.page import PageRepository


def naive_utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


@pytest.fixture()
def app():
    app = create_app("testing")

    with app.app_context():
        db.create_all()
        seed_page_types()
        db.session.commit()

        yield app

        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def organizations(app):
    acme = Organization()
    acme.name = "Acme"
    zenith = Organization()
    zenith.name = "Zenith"
    db.session.add_all([acme, zenith])
    db.session.commit()
    return acme, zenith


@pytest.fixture()
def sites(app, organizations):
    """Three active sites: A and B belong to Zenith, C to Acme."""
    acme, zenith = organizations
    created = []
    for name, org in (("Site A", zenith), ("Site B", zenith), ("Site C", acme)):
        site = Site()
        site.name = name
        site.is_active = True
        site.organization_id = org.id
        db.session.add(site)
        created.append(site)
    db.session.commit()
    return created


@pytest.fixture()
def site_a(sites):
    return sites[0]


@pytest.fixture()
def site_b(sites):
    return sites[1]


@pytest.fixture()
def site_c(sites):
    return sites[2]


@pytest.fixture()
def admin(site_a):
    user = User()
    user.site_id = site_a.id
    user.login = "admin"
    user.email = "admin@example.com"
    user.role = "admin"
    user.set_password("secret")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture()
def editor(site_a):
    user = User()
    user.site_id = site_a.id
    user.login = "editor"
    user.role = "editor"
    user.set_password("secret")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture()
def repo(app):
    return PageRepository()


@pytest.fixture()
def make_page(repo):
    """Add a page through the repository and commit it."""
    def _make(site, title, page_type=PageTypeKind.OTHER, **fields):
        page_id = repo.add(NewPage(site_id=site.id, title=title, page_type=page_type, **fields))
        db.session.commit()
        return page_id
    return _make


@pytest.fixture()
def make_widget():
    def _make(page_id, site, type_="text", order=1, settings=None):
        widget = Widget()
        widget.page_id = page_id
        widget.site_id = site.id
        widget.type = type_
        widget.title = f"{type_} {order}"
        widget.order = order
        widget.settings = settings or {"body": "hello"}
        db.session.add(widget)
        db.session.commit()
        return widget.id
    return _make


@pytest.fixture()
def tag_page():
    def _tag(page_id, site, *names):
        ids = []
        for name in names:
            tag = Tag()
            tag.site_id = site.id
            tag.name = name
            tag.slug = name.lower().replace(" ", "-")
            db.session.add(tag)
            db.session.flush()
            db.session.execute(page_tag.insert().values(page_id=page_id, tag_id=tag.id))
            ids.append(tag.id)
        db.session.commit()
        return ids
    return _tag


def auth_headers(user, site=None):
    site_id = site.id if site is not None else user.site_id
    token = create_access_token(
        identity=str(user.id),
        additional_claims={"site_id": site_id, "role": user.role},
    )
    return {
        "Authorization": f"Bearer {token}",
        "X-Site-ID": str(site_id),
    }


@pytest.fixture()
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture()
def editor_headers(editor):
    return auth_headers(editor)


@pytest.fixture()
def yesterday():
    return naive_utcnow() - timedelta(days=1)


@pytest.fixture()
def tomorrow():
    return naive_utcnow() + timedelta(days=1)


@pytest.fixture()
def headers_for(app):
    """auth_headers as a fixture, for tests that act as another user or site."""
    return auth_headers
