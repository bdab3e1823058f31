from .organization import Organization
from .site import Site
from .user import User
from .page_type import PageType
from .page import Page
from .page_link import PageLink
from .page_copy_map import PageCopyMap
from .page_user import page_user
from .widget import Widget, WidgetLink
from .tag import Tag, PageTagLink, page_tag
from .audit_log import AuditLog

__all__ = [
    "Organization",
    "Site",
    "User",
    "PageType",
    "Page",
    "PageLink",
    "PageCopyMap",
    "page_user",
    "Widget",
    "WidgetLink",
    "Tag",
    "PageTagLink",
    "page_tag",
    "AuditLog",
]
