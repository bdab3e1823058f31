from .page import PageRepository
from .tag import TagRepository
from .widget import WidgetRepository

__all__ = ["PageRepository", "TagRepository", "WidgetRepository"]
