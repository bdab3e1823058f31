"""Widgets placed on pages, and their copy/link across sites."""
from __future__ import annotations

import copy
from typing import Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.sql import or_

from pagebuilder.extensions import db
from pagebuilder.models.widget import Widget, WidgetLink
from pagebuilder.utils.bulk import insert_ignore


class WidgetRepository:
    def __init__(self, session=None) -> None:
        self.session = session or db.session

    def get_widgets(
        self,
        site_id: int,
        page_ids: Iterable[int],
        widget_type: Optional[str] = None,
        include_linked: bool = False,
    ) -> List[Widget]:
        """
        Widgets of the given pages as seen from site_id, in display order.
        With include_linked, widgets linked into the site are returned too.
        """
        page_ids = list(page_ids)
        if not page_ids:
            return []

        visibility = Widget.site_id == site_id
        if include_linked:
            visibility = or_(
                visibility,
                Widget.id.in_(
                    select(WidgetLink.widget_id).where(WidgetLink.to_site_id == site_id)
                ),
            )

        stmt = select(Widget).where(Widget.page_id.in_(page_ids), visibility)
        if widget_type:
            stmt = stmt.where(Widget.type == widget_type)

        stmt = stmt.order_by(Widget.page_id, Widget.order, Widget.id)
        return list(self.session.execute(stmt).scalars().all())

    def copy_page_widgets(self, page_id: int, new_page_id: int, to_site_id: int) -> bool:
        """Clone every widget of page_id onto new_page_id, owned by to_site_id."""
        source = self.session.execute(
            select(Widget).where(Widget.page_id == page_id).order_by(Widget.order, Widget.id)
        ).scalars().all()

        for widget in source:
            clone = Widget()
            clone.site_id = to_site_id
            clone.page_id = new_page_id
            clone.type = widget.type
            clone.title = widget.title
            clone.order = widget.order
            clone.settings = copy.deepcopy(widget.settings) if widget.settings else {}
            self.session.add(clone)

        self.session.flush()
        return True

    def link_page_widgets(
        self, from_site_id: int, to_site_ids: Iterable[int], page_id: int
    ) -> bool:
        """Link every widget of the page to each target site in one INSERT."""
        to_site_ids = list(to_site_ids)
        widgets = self.get_widgets(from_site_id, [page_id], include_linked=True)

        rows = [
            {
                "widget_id": widget.id,
                "from_site_id": from_site_id,
                "to_site_id": to_site_id,
            }
            for to_site_id in to_site_ids
            for widget in widgets
        ]
        insert_ignore(self.session, WidgetLink, rows)
        return True

    def get_linked_site_ids(self, page_id: int) -> List[int]:
        stmt = (
            select(WidgetLink.to_site_id)
            .join(Widget, Widget.id == WidgetLink.widget_id)
            .where(Widget.page_id == page_id)
            .distinct()
            .order_by(WidgetLink.to_site_id)
        )
        return list(self.session.execute(stmt).scalars().all())

    def delete_page_widget_links(self, page_id: int) -> int:
        stmt = (
            delete(WidgetLink)
            .where(
                WidgetLink.widget_id.in_(
                    select(Widget.id).where(Widget.page_id == page_id)
                )
            )
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount
