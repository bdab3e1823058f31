"""
Page repository: every read and write against the page tables.

Methods flush but never commit; callers own the transaction boundary
(see pagebuilder.utils.transaction.transactional).
"""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from flask import current_app
from sqlalchemy import delete, func, select, update
from sqlalchemy.sql import or_

from pagebuilder.domain.commands import NewPage, PageFilters, PageUpdate
from pagebuilder.domain.page_types import (
    SEARCH_EXCLUDED,
    PageFlag,
    PageTypeKind,
    flag_exclusions,
)
from pagebuilder.extensions import db
from pagebuilder.models.base import utcnow
from pagebuilder.models.organization import Organization
from pagebuilder.models.page import Page
from pagebuilder.models.page_copy_map import PageCopyMap
from pagebuilder.models.page_link import PageLink
from pagebuilder.models.page_type import PageType
from pagebuilder.models.page_user import page_user
from pagebuilder.models.site import Site
from pagebuilder.utils.bulk import insert_ignore
from pagebuilder.utils.clauses import ClauseBuilder, SearchColumn, SearchMode
from pagebuilder.utils.pagination import paginate_select
from pagebuilder.utils.slug import slugify

RECENTLY_MODIFIED_LIMIT = 10

page_clauses = ClauseBuilder(
    sortable={
        1: Page.title,
        2: Page.created_at,
        3: Organization.name,
        4: PageType.name,
    },
    searchable={
        1: SearchColumn(Page.title, SearchMode.FUZZY_BOTH),
        2: SearchColumn(Page.keywords, SearchMode.FUZZY_BOTH),
    },
    activation=(Page.activation_start, Page.activation_end),
    default_sort=1,
)


def linked_page_ids(site_id: int):
    """Subquery of page ids linked into a site from elsewhere."""
    return select(PageLink.page_id).where(PageLink.to_site_id == site_id)


def visible_on_site(site_id: int):
    """Pages a site can see: the ones it owns plus the ones linked to it."""
    return or_(Page.site_id == site_id, Page.id.in_(linked_page_ids(site_id)))


def coerce_page_ids(page_ids: Iterable) -> List[int]:
    """Keep positive integer ids, drop anything else."""
    ids: List[int] = []
    for raw in page_ids or ():
        try:
            value = int(raw)
        except (TypeError, ValueError):
            continue
        if value > 0:
            ids.append(value)
    return ids


class PageRepository:
    def __init__(self, session=None, clauses: ClauseBuilder = page_clauses) -> None:
        self.session = session or db.session
        self.clauses = clauses

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add(self, new_page: NewPage) -> int:
        """Insert a page and return its id. The slug is derived from the title."""
        page = Page()
        page.site_id = new_page.site_id
        page.page_type_id = int(new_page.page_type)
        page.title = new_page.title
        page.name = new_page.name or ""
        page.slug = slugify(new_page.title)
        page.keywords = new_page.keywords or ""
        page.redirect_type = new_page.redirect_type
        page.redirect_weighted_odds = bool(new_page.redirect_weighted_odds)
        page.is_searchable = bool(new_page.is_searchable)
        page.is_shareable = bool(new_page.is_shareable)
        page.activation_start = new_page.activation_start
        page.activation_end = new_page.activation_end
        page.background_color = new_page.background_color or ""
        page.created_by = new_page.created_by

        self.session.add(page)
        self.session.flush()  # ensures page.id is available

        current_app.logger.debug(f"Added page {page.id} ({page.slug}) to site {page.site_id}")
        return page.id

    def add_default_homepage(self, site_id: int) -> int:
        """Every new site starts with a searchable, unshareable homepage."""
        return self.add(
            NewPage(
                site_id=site_id,
                title="Homepage",
                name="Homepage",
                page_type=PageTypeKind.HOMEPAGE,
                is_searchable=True,
                is_shareable=False,
            )
        )

    def update(self, changes: PageUpdate) -> int:
        """
        Replace the editable fields of a page owned by changes.site_id.

        Bumps update_count and updated_at and re-derives the slug.
        Returns the number of rows updated (0 when the page is not owned by
        that site).
        """
        stmt = (
            update(Page)
            .where(Page.site_id == changes.site_id, Page.id == changes.page_id)
            .values(
                title=changes.title,
                name=changes.name or "",
                slug=slugify(changes.title),
                page_type_id=int(changes.page_type),
                keywords=changes.keywords or "",
                redirect_type=changes.redirect_type,
                redirect_weighted_odds=bool(changes.redirect_weighted_odds),
                is_searchable=bool(changes.is_searchable),
                is_shareable=bool(changes.is_shareable),
                activation_start=changes.activation_start,
                activation_end=changes.activation_end,
                background_color=changes.background_color or "",
                update_count=Page.update_count + 1,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount

    def update_theme(self, page_id: int, background_color: str) -> int:
        stmt = (
            update(Page)
            .where(Page.id == page_id)
            .values(background_color=background_color or "")
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount

    def remove(self, site_id: int, page_id: int) -> int:
        """
        Delete a page owned by site_id. Widgets, tag attachments, user
        affiliations and page links go with it; widget links, tag links and
        copy-map rows are the caller's job (see application.pages.delete_page).
        """
        page = self.get_owned_page(site_id, page_id)
        if page is None:
            return 0

        self.session.delete(page)
        self.session.flush()
        return 1

    def add_user_affiliation(self, page_id: int, user_id: int) -> int:
        return insert_ignore(
            self.session, page_user, [{"page_id": page_id, "user_id": user_id}]
        )

    # ------------------------------------------------------------------
    # Counters and flags
    # ------------------------------------------------------------------

    def _increment(self, page_id: int, **values) -> int:
        stmt = (
            update(Page)
            .where(Page.id == page_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount

    def increment_view_count(self, page_id: int) -> int:
        return self._increment(page_id, view_count=Page.view_count + 1)

    def increment_update_count(self, page_id: int) -> int:
        return self._increment(
            page_id, update_count=Page.update_count + 1, updated_at=utcnow()
        )

    def get_view_count(self, page_id: int) -> int:
        views = self.session.execute(
            select(Page.view_count).where(Page.id == page_id)
        ).scalar_one_or_none()
        return views or 0

    def toggle_flag(self, page_ids: Iterable, flag: PageFlag, value: bool) -> int:
        """
        Set a flag on many pages at once. Pages whose type can never carry
        the flag are left untouched. Returns the number of rows updated.
        """
        ids = coerce_page_ids(page_ids)
        if not ids:
            return 0

        column = "is_shareable" if flag is PageFlag.SHAREABLE else "is_searchable"
        excluded = [int(kind) for kind in flag_exclusions(flag)]

        stmt = (
            update(Page)
            .where(Page.id.in_(ids), Page.page_type_id.not_in(excluded))
            .values({column: bool(int(value))})
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount

    def toggle_share(self, page_ids: Iterable, share) -> int:
        return self.toggle_flag(page_ids, PageFlag.SHAREABLE, share)

    def toggle_search(self, page_ids: Iterable, search) -> int:
        return self.toggle_flag(page_ids, PageFlag.SEARCHABLE, search)

    def set_share_options(
        self,
        site_id: int,
        share: Optional[bool],
        kinds: Sequence[PageTypeKind],
    ):
        """Share or unshare every page of the given types on a site. None means leave as is."""
        if share is None:
            return True

        kinds = [int(kind) for kind in kinds]
        if not kinds:
            return 0

        stmt = (
            update(Page)
            .where(Page.site_id == site_id, Page.page_type_id.in_(kinds))
            .values(is_shareable=bool(share))
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_page(
        self,
        site_id: int,
        id_or_slug,
        include_inactive: bool = False,
        now: Optional[datetime] = None,
    ) -> Optional[Page]:
        """
        Find a page by id or slug as seen from site_id (owned or linked in).

        Pages outside their activation window are hidden unless
        include_inactive is set.
        """
        key = str(id_or_slug).strip() if id_or_slug is not None else ""
        if not key:
            return None

        match = Page.slug == key
        if key.isdigit():
            match = or_(Page.id == int(key), match)

        stmt = select(Page).where(visible_on_site(site_id), match)

        if not include_inactive:
            stmt = stmt.where(self.clauses.activation_clause(now))

        # An owned page wins over a linked page with the same slug
        stmt = stmt.order_by((Page.site_id == site_id).desc(), Page.id).limit(1)

        return self.session.execute(stmt).scalars().first()

    def get_page_by_id(
        self,
        site_id: int,
        page_id: int,
        include_inactive: bool = False,
        now: Optional[datetime] = None,
    ) -> Optional[Page]:
        """Like get_page, but the key is only ever matched against the id."""
        stmt = select(Page).where(visible_on_site(site_id), Page.id == page_id)
        if not include_inactive:
            stmt = stmt.where(self.clauses.activation_clause(now))
        return self.session.execute(stmt).scalar_one_or_none()

    def get_owned_page(self, site_id: int, page_id: int) -> Optional[Page]:
        return self.session.execute(
            select(Page).where(Page.id == page_id, Page.site_id == site_id)
        ).scalar_one_or_none()

    def list_by_site(
        self, site_id: int, filters: Optional[PageFilters] = None
    ) -> Tuple[List[Page], int]:
        """
        Pages visible on a site, filtered, searched, sorted and optionally
        paginated. Returns (items, total) where total counts every match,
        not just the returned page of results.
        """
        filters = filters or PageFilters()

        stmt = (
            select(Page)
            .join(PageType, Page.page_type_id == PageType.id)
            .join(Site, Page.site_id == Site.id)
            .outerjoin(Organization, Site.organization_id == Organization.id)
            .where(visible_on_site(site_id))
        )

        if filters.user_id:
            stmt = stmt.where(
                Page.id.in_(
                    select(page_user.c.page_id).where(page_user.c.user_id == filters.user_id)
                )
            )

        if filters.page_types:
            stmt = stmt.where(Page.page_type_id.in_([int(t) for t in filters.page_types]))

        search = self.clauses.search_clause(filters.search)
        if search is not None:
            stmt = stmt.where(search)

        stmt = stmt.order_by(
            self.clauses.sort_clause(filters.sort, filters.direction), Page.id
        )

        if filters.paginate:
            return paginate_select(
                self.session, stmt, page=filters.page, per_page=filters.per_page
            )

        items = list(self.session.execute(stmt).scalars().all())
        return items, len(items)

    def get_pages_by_type(
        self, site_id: int, user_id: Optional[int], types
    ) -> List[Page]:
        items, _ = self.list_by_site(
            site_id, PageFilters(user_id=user_id, page_types=types)
        )
        return items

    def get_thank_you_pages(
        self, site_id: int, user_id: Optional[int] = None
    ) -> List[Page]:
        pages = self.get_pages_by_type(site_id, user_id, PageTypeKind.THANK_YOU)
        return sorted(pages, key=lambda p: p.display_name.lower())

    def get_home_pages(
        self, site_id: int, limit_one: bool = False, now: Optional[datetime] = None
    ):
        stmt = (
            select(Page)
            .where(
                visible_on_site(site_id),
                Page.page_type_id == int(PageTypeKind.HOMEPAGE),
                self.clauses.activation_clause(now),
            )
            .order_by((Page.site_id == site_id).desc(), Page.id)
        )

        if limit_one:
            return self.session.execute(stmt.limit(1)).scalars().first()
        return list(self.session.execute(stmt).scalars().all())

    def get_pages_by_search_query(self, site_id: int, query: Optional[str]) -> List[Page]:
        search = self.clauses.search_clause(query)
        if search is None:
            return []

        stmt = (
            select(Page)
            .where(
                Page.site_id == site_id,
                Page.is_searchable.is_(True),
                Page.page_type_id.not_in([int(k) for k in SEARCH_EXCLUDED]),
                search,
            )
            .order_by(Page.title, Page.id)
        )
        return list(self.session.execute(stmt).scalars().all())

    def get_recently_modified(self, site_id: int) -> List[Page]:
        stmt = (
            select(Page)
            .where(Page.site_id == site_id, Page.update_count > 0)
            .order_by(Page.update_count.desc(), Page.id)
            .limit(RECENTLY_MODIFIED_LIMIT)
        )
        return list(self.session.execute(stmt).scalars().all())

    def get_pages_by_user(self, user_id: int) -> List[Page]:
        stmt = (
            select(Page)
            .join(page_user, page_user.c.page_id == Page.id)
            .where(page_user.c.user_id == user_id)
            .order_by(Page.id)
        )
        return list(self.session.execute(stmt).scalars().all())

    def get_linked_site_ids(self, site_id: int, page_id: int) -> List[int]:
        stmt = (
            select(PageLink.to_site_id)
            .where(PageLink.page_id == page_id, PageLink.from_site_id == site_id)
            .order_by(PageLink.to_site_id)
        )
        return list(self.session.execute(stmt).scalars().all())

    def get_redirect_settings(self, page_id: int) -> Optional[dict]:
        row = self.session.execute(
            select(Page.id, Page.redirect_type, Page.redirect_weighted_odds)
            .where(Page.id == page_id)
        ).first()

        if row is None:
            return None

        return {
            "page_id": row.id,
            "redirect_type": row.redirect_type,
            "redirect_weighted_odds": bool(row.redirect_weighted_odds),
        }

    # ------------------------------------------------------------------
    # Page types
    # ------------------------------------------------------------------

    def get_page_types(self, filter_homepages: bool = False) -> List[PageType]:
        """
        All page types by name. A site only ever has one homepage, so callers
        offering a "new page" choice filter that type out.
        """
        stmt = select(PageType).order_by(PageType.name)
        if filter_homepages:
            stmt = stmt.where(PageType.id != int(PageTypeKind.HOMEPAGE))
        return list(self.session.execute(stmt).scalars().all())

    def is_homepage(self, page_id: int) -> bool:
        page_type_id = self.session.execute(
            select(Page.page_type_id).where(Page.id == page_id)
        ).scalar_one_or_none()
        return page_type_id == int(PageTypeKind.HOMEPAGE)

    def get_page_type_count(self, site_id: int, kind: PageTypeKind) -> int:
        """Owned pages of a type plus pages of that type linked into the site."""
        owned = self.session.execute(
            select(func.count(Page.id)).where(
                Page.site_id == site_id, Page.page_type_id == int(kind)
            )
        ).scalar_one()

        linked = self.session.execute(
            select(func.count())
            .select_from(PageLink)
            .join(Page, Page.id == PageLink.page_id)
            .where(PageLink.to_site_id == site_id, Page.page_type_id == int(kind))
        ).scalar_one()

        return owned + linked

    def get_homepage_count(self, site_id: int) -> int:
        return self.get_page_type_count(site_id, PageTypeKind.HOMEPAGE)

    # ------------------------------------------------------------------
    # Copy map
    # ------------------------------------------------------------------

    def get_copy_map(
        self, page_id: int, from_site_id: int, to_site_id: int
    ) -> Optional[int]:
        """Id of the existing copy of page_id on to_site_id, if any."""
        return self.session.execute(
            select(PageCopyMap.to_page_id).where(
                PageCopyMap.from_page_id == page_id,
                PageCopyMap.from_site_id == from_site_id,
                PageCopyMap.to_site_id == to_site_id,
            )
        ).scalar_one_or_none()

    def record_copy_map(
        self, page_id: int, new_page_id: int, from_site_id: int, to_site_id: int
    ) -> int:
        entry = PageCopyMap()
        entry.from_page_id = page_id
        entry.to_page_id = new_page_id
        entry.from_site_id = from_site_id
        entry.to_site_id = to_site_id

        self.session.add(entry)
        self.session.flush()
        return entry.id

    def clear_copy_map(
        self, from_site_id: int, to_site_id: int, from_page_id: Optional[int] = None
    ) -> int:
        stmt = delete(PageCopyMap).where(
            PageCopyMap.from_site_id == from_site_id,
            PageCopyMap.to_site_id == to_site_id,
        )
        if from_page_id:
            stmt = stmt.where(PageCopyMap.from_page_id == from_page_id)

        return self.session.execute(
            stmt.execution_options(synchronize_session=False)
        ).rowcount

    def delete_copy_map_for_page(self, page_id: int) -> int:
        """Forget every copy relation the page takes part in."""
        stmt = delete(PageCopyMap).where(
            or_(PageCopyMap.from_page_id == page_id, PageCopyMap.to_page_id == page_id)
        )
        return self.session.execute(
            stmt.execution_options(synchronize_session=False)
        ).rowcount

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def link_page(self, page_id: int, from_site_id: int, to_site_ids: Iterable[int]) -> int:
        rows = [
            {"page_id": page_id, "from_site_id": from_site_id, "to_site_id": to_site_id}
            for to_site_id in to_site_ids
        ]
        return insert_ignore(self.session, PageLink, rows)

    def delete_page_links(self, page_id: int) -> int:
        stmt = (
            delete(PageLink)
            .where(PageLink.page_id == page_id)
            .execution_options(synchronize_session=False)
        )
        count = self.session.execute(stmt).rowcount
        self.session.expire_all()
        return count

