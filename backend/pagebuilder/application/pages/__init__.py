from .copy_page import clone_page, copy_page, copy_site
from .create_page import create_page
from .delete_page import delete_page
from .link_page import link_page, unlink_page
from .update_page import update_page

__all__ = [
    "clone_page",
    "copy_page",
    "copy_site",
    "create_page",
    "delete_page",
    "link_page",
    "unlink_page",
    "update_page",
]
