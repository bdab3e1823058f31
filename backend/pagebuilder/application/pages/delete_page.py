# pagebuilder/application/pages/delete_page.py
from typing import Optional
from flask import current_app
from pagebuilder.repositories.page import PageRepository
from pagebuilder.utils.audit import log_action
from pagebuilder.utils.transaction import transactional
from .link_page import unlink_page


def delete_page(
    *,
    site_id: int,
    page_id: int,
    actor_id: Optional[int] = None,
) -> bool:
    """
    Delete a page owned by site_id together with everything pointing at it.

    Order, all in one transaction:
    - page, widget and tag links
    - copy map rows where the page is the source or the copy
    - the page row (widgets, tag attachments and user affiliations cascade)

    Returns False when the site owns no such page.
    """
    pages = PageRepository()

    with transactional():
        if pages.get_owned_page(site_id, page_id) is None:
            return False

        unlink_page(page_id)
        pages.delete_copy_map_for_page(page_id)
        removed = pages.remove(site_id, page_id)

        log_action(
            action="page.delete",
            entity_type="page",
            entity_id=page_id,
            payload={"deleted_by": actor_id},
        )

    current_app.logger.info(f"Deleted page {page_id} from site {site_id}")
    return bool(removed)
