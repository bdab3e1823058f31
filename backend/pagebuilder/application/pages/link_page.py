# pagebuilder/application/pages/link_page.py
from typing import Iterable, List
from flask import current_app
from pagebuilder.extensions import db
from pagebuilder.domain.commands import TagTransfer
from pagebuilder.models.page import Page
from pagebuilder.repositories.page import PageRepository
from pagebuilder.repositories.tag import TagRepository
from pagebuilder.repositories.widget import WidgetRepository
from pagebuilder.utils.audit import log_action
from pagebuilder.utils.transaction import transactional


def unlink_page(page_id: int) -> int:
    """
    Remove every link of a page: page links, widget links and tag links.

    Runs inside the caller's transaction. Returns the number of link rows
    removed.
    """
    removed = PageRepository().delete_page_links(page_id)
    removed += WidgetRepository().delete_page_widget_links(page_id)
    removed += TagRepository().delete_page_tag_links(page_id)
    return removed


def link_page(
    *,
    from_site_id: int,
    to_site_ids: Iterable[int],
    page_id: int,
) -> bool:
    """
    Make a page (with its widgets and tags) visible on the given sites.

    Linking always replaces: existing links are removed first, so the page
    ends up linked to exactly to_site_ids. An empty list unlinks the page
    everywhere. Returns False when the page does not exist; any link rows
    still pointing at it are removed all the same.
    """
    targets: List[int] = list(dict.fromkeys(int(site_id) for site_id in to_site_ids or ()))

    with transactional():
        removed = unlink_page(page_id)

        if db.session.get(Page, page_id) is None:
            current_app.logger.info(
                f"Nothing to link: page {page_id} not found ({removed} stale link rows removed)"
            )
            return False

        if targets:
            PageRepository().link_page(page_id, from_site_id, targets)
            WidgetRepository().link_page_widgets(from_site_id, targets, page_id)

            tags = TagRepository()
            for to_site_id in targets:
                tags.link_associated_tags(
                    TagTransfer(
                        page_id=page_id,
                        from_site_id=from_site_id,
                        to_site_id=to_site_id,
                    )
                )

        log_action(
            action="page.link",
            entity_type="page",
            entity_id=page_id,
            payload={"from_site_id": from_site_id, "to_site_ids": targets},
        )

    current_app.logger.info(
        f"Linked page {page_id} from site {from_site_id} to {targets or 'no sites'} "
        f"({removed} previous link rows replaced)"
    )
    return True
