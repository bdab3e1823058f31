"""Tags attached to pages, and the copy/link of those attachments across sites."""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, select

from pagebuilder.domain.commands import TagTransfer
from pagebuilder.extensions import db
from pagebuilder.models.tag import PageTagLink, Tag, page_tag
from pagebuilder.utils.bulk import insert_ignore
from pagebuilder.utils.slug import slugify


class TagRepository:
    def __init__(self, session=None) -> None:
        self.session = session or db.session

    def get_page_tags(self, page_id: int) -> List[Tag]:
        stmt = (
            select(Tag)
            .join(page_tag, page_tag.c.tag_id == Tag.id)
            .where(page_tag.c.page_id == page_id)
            .order_by(Tag.id)
        )
        return list(self.session.execute(stmt).scalars().all())

    def get_or_create(self, site_id: int, name: str) -> Tag:
        slug = slugify(name)
        tag: Optional[Tag] = self.session.execute(
            select(Tag).where(Tag.site_id == site_id, Tag.slug == slug)
        ).scalar_one_or_none()

        if tag is None:
            tag = Tag()
            tag.site_id = site_id
            tag.name = name
            tag.slug = slug
            self.session.add(tag)
            self.session.flush()

        return tag

    def attach(self, page_id: int, tag_ids: List[int]) -> int:
        rows = [{"page_id": page_id, "tag_id": tag_id} for tag_id in tag_ids]
        return insert_ignore(self.session, page_tag, rows)

    def copy_associated_tags(self, transfer: TagTransfer) -> bool:
        """
        Attach the tags of transfer.page_id to transfer.to_page_id.

        Within one site the same tag rows are reused. Across sites each tag
        is matched by slug on the target site and created there if missing.
        """
        if not transfer.to_page_id:
            return False

        tags = self.get_page_tags(transfer.page_id)
        if not tags:
            return True

        if transfer.from_site_id == transfer.to_site_id:
            tag_ids = [tag.id for tag in tags]
        else:
            tag_ids = [self.get_or_create(transfer.to_site_id, tag.name).id for tag in tags]

        self.attach(transfer.to_page_id, tag_ids)
        return True

    def link_associated_tags(self, transfer: TagTransfer) -> bool:
        """Make every tag on the page visible on transfer.to_site_id."""
        rows = [
            {
                "page_id": transfer.page_id,
                "tag_id": tag.id,
                "from_site_id": transfer.from_site_id,
                "to_site_id": transfer.to_site_id,
            }
            for tag in self.get_page_tags(transfer.page_id)
        ]
        insert_ignore(self.session, PageTagLink, rows)
        return True

    def get_linked_site_ids(self, page_id: int) -> List[int]:
        stmt = (
            select(PageTagLink.to_site_id)
            .where(PageTagLink.page_id == page_id)
            .distinct()
            .order_by(PageTagLink.to_site_id)
        )
        return list(self.session.execute(stmt).scalars().all())

    def delete_page_tag_links(self, page_id: int) -> int:
        stmt = (
            delete(PageTagLink)
            .where(PageTagLink.page_id == page_id)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount
