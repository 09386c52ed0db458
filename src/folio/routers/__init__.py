"""API routers for the site."""

from .categories import router as categories_router
from .posts import router as posts_router
from .tags import router as tags_router
from .theme import router as theme_router
from .theme import ws_router as theme_ws_router

__all__ = [
    "categories_router",
    "posts_router",
    "tags_router",
    "theme_router",
    "theme_ws_router",
]
