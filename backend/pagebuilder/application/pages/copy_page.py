# pagebuilder/application/pages/copy_page.py
from typing import Dict, Optional
from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from pagebuilder.extensions import db
from pagebuilder.domain.commands import NewPage, TagTransfer
from pagebuilder.models.page import Page
from pagebuilder.repositories.page import PageRepository
from pagebuilder.repositories.tag import TagRepository
from pagebuilder.repositories.widget import WidgetRepository
from pagebuilder.utils.audit import log_action
from pagebuilder.utils.transaction import transactional

COPY_PREFIX = "Copy of "


def clone_page(
    source: Page, *, from_site_id: int, to_site_id: int, actor_id: Optional[int]
) -> NewPage:
    """
    Field-by-field copy of a page for another (or the same) site.

    Copies made within one site get a "Copy of " prefix so the slug stays
    unique. Copies never inherit the search or share flags.
    """
    title = source.title
    name = source.name

    if from_site_id == to_site_id:
        title = COPY_PREFIX + source.title
        name = COPY_PREFIX + source.display_name

    return NewPage(
        site_id=to_site_id,
        title=title,
        name=name,
        page_type=source.page_type_id,
        keywords=source.keywords,
        redirect_type=source.redirect_type,
        redirect_weighted_odds=source.redirect_weighted_odds,
        is_searchable=False,
        is_shareable=False,
        activation_start=source.activation_start,
        activation_end=source.activation_end,
        background_color=source.background_color,
        created_by=actor_id,
    )


def copy_page(
    *,
    from_site_id: int,
    to_site_id: int,
    page_id: int,
    actor_id: Optional[int] = None,
    copy_widgets: bool = True,
) -> Optional[int]:
    """
    Copy a page onto a site and return the copy's id.

    Steps:
    1. An existing copy for (page, from site, to site) is returned as is
    2. A missing source page is a no-op (returns None)
    3. Clone, insert, copy tags, copy widgets (optional), record the copy map

    Steps 3 run in one transaction: any failure leaves nothing behind.
    """
    pages = PageRepository()

    existing = pages.get_copy_map(page_id, from_site_id, to_site_id)
    if existing:
        current_app.logger.debug(
            f"Page {page_id} already copied from site {from_site_id} to {to_site_id} as {existing}"
        )
        return existing

    source = pages.get_page_by_id(from_site_id, page_id, include_inactive=True)

    if source is None:
        current_app.logger.info(f"Nothing to copy: page {page_id} not found on site {from_site_id}")
        return None

    new_page = clone_page(
        source, from_site_id=from_site_id, to_site_id=to_site_id, actor_id=actor_id
    )

    try:
        with transactional():
            new_page_id = pages.add(new_page)

            TagRepository().copy_associated_tags(
                TagTransfer(
                    page_id=page_id,
                    from_site_id=from_site_id,
                    to_site_id=to_site_id,
                    to_page_id=new_page_id,
                )
            )

            if copy_widgets:
                WidgetRepository().copy_page_widgets(page_id, new_page_id, to_site_id)

            pages.record_copy_map(page_id, new_page_id, from_site_id, to_site_id)

            log_action(
                action="page.copy",
                entity_type="page",
                entity_id=new_page_id,
                payload={
                    "from_page_id": page_id,
                    "from_site_id": from_site_id,
                    "to_site_id": to_site_id,
                    "copy_widgets": copy_widgets,
                },
            )

    except IntegrityError:
        # A concurrent copy recorded its map row first; that copy wins
        winner = pages.get_copy_map(page_id, from_site_id, to_site_id)
        if winner:
            current_app.logger.warning(
                f"Concurrent copy of page {page_id} to site {to_site_id}; using page {winner}"
            )
            return winner
        raise

    current_app.logger.info(
        f"Copied page {page_id} (site {from_site_id}) to page {new_page_id} (site {to_site_id})"
    )
    return new_page_id


def copy_site(
    *,
    from_site_id: int,
    to_site_id: int,
    actor_id: Optional[int] = None,
    copy_widgets: bool = True,
    reset_map: bool = False,
) -> Dict[int, int]:
    """
    Copy every page owned by from_site_id onto to_site_id.

    Each page is copied in its own transaction. Pages that already have a
    copy on the target site are not copied again, so a failed run can simply
    be repeated. reset_map forgets earlier copies and duplicates everything.
    """
    pages = PageRepository()

    if reset_map:
        with transactional():
            cleared = pages.clear_copy_map(from_site_id, to_site_id)
        current_app.logger.info(
            f"Cleared {cleared} copy map rows for sites {from_site_id} -> {to_site_id}"
        )

    page_ids = db.session.execute(
        select(Page.id).where(Page.site_id == from_site_id).order_by(Page.id)
    ).scalars().all()

    copies: Dict[int, int] = {}
    for page_id in page_ids:
        new_page_id = copy_page(
            from_site_id=from_site_id,
            to_site_id=to_site_id,
            page_id=page_id,
            actor_id=actor_id,
            copy_widgets=copy_widgets,
        )
        if new_page_id:
            copies[page_id] = new_page_id

    return copies
