from typing import Optional
from pagebuilder.domain.commands import NewPage
from pagebuilder.domain.invariants.exceptions import InvariantViolation
from pagebuilder.domain.page_types import PageTypeKind
from pagebuilder.repositories.page import PageRepository
from pagebuilder.utils.audit import log_action
from pagebuilder.utils.transaction import transactional


def create_page(
    *,
    new_page: NewPage,
    actor_id: Optional[int] = None,
) -> int:
    """
    Create a page and affiliate it with the acting user.

    Edge cases handled:
    - Missing required fields (rejected when NewPage is built)
    - A second homepage on the same site
    """
    pages = PageRepository()

    if new_page.page_type is PageTypeKind.HOMEPAGE and pages.get_homepage_count(new_page.site_id):
        raise InvariantViolation("This site already has a homepage.")

    if actor_id and new_page.created_by is None:
        new_page.created_by = actor_id

    with transactional():
        page_id = pages.add(new_page)

        if actor_id:
            pages.add_user_affiliation(page_id, actor_id)

        log_action(
            action="page.create",
            entity_type="page",
            entity_id=page_id,
            payload={
                "title": new_page.title,
                "page_type": int(new_page.page_type),
            },
        )

    return page_id
