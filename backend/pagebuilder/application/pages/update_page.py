from typing import Optional
from sqlalchemy import select
from pagebuilder.extensions import db
from pagebuilder.domain.commands import PageUpdate
from pagebuilder.domain.invariants.exceptions import InvariantViolation
from pagebuilder.domain.page_types import PageTypeKind
from pagebuilder.models.page import Page
from pagebuilder.repositories.page import PageRepository
from pagebuilder.utils.audit import log_action
from pagebuilder.utils.transaction import transactional


def update_page(
    *,
    changes: PageUpdate,
    actor_id: Optional[int] = None,
) -> int:
    """
    Replace the editable fields of a page.

    Design rules:
    - Scoped by (site, page): another site's page is never touched
    - Slug always follows the title
    - A page may only become the homepage if the site has none

    Returns the number of rows updated (0 when the site owns no such page).
    """
    pages = PageRepository()

    current_type = db.session.execute(
        select(Page.page_type_id).where(
            Page.id == changes.page_id, Page.site_id == changes.site_id
        )
    ).scalar_one_or_none()

    if current_type is None:
        return 0

    becomes_homepage = (
        changes.page_type is PageTypeKind.HOMEPAGE
        and current_type != int(PageTypeKind.HOMEPAGE)
    )
    if becomes_homepage and pages.get_homepage_count(changes.site_id):
        raise InvariantViolation("This site already has a homepage.")

    with transactional():
        updated = pages.update(changes)

        log_action(
            action="page.update",
            entity_type="page",
            entity_id=changes.page_id,
            payload={"actor_id": actor_id, "title": changes.title},
        )

    return updated
