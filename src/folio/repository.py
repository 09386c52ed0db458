"""Read-only query API over posts, categories and tags."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from . import content
from .config import settings
from .content import BlogFilters, BlogPost, CategoryRecord, TagRecord
from .database import Category, Post, Tag
from .errors import CategoryNotFoundError, PostNotFoundError

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo on the way out; stored values are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def post_to_record(post: Post) -> BlogPost:
    return BlogPost(
        id=post.id,
        title=post.title,
        description=post.description,
        content=post.content,
        category=post.category_id,
        tags=[tag.id for tag in post.tags],
        date=as_utc(post.date),
        rating=post.rating,
        image_url=post.image_url,
        source=post.source,
        personal_thoughts=post.personal_thoughts,
    )


def category_to_record(category: Category) -> CategoryRecord:
    return CategoryRecord(
        id=category.id,
        name=category.name,
        description=category.description,
        color=category.color,
        icon=category.icon,
    )


class ArticleRepository:
    """Query API used by the routers.

    Posts are loaded with their tags in one round trip and then filtered and
    ranked in memory by :mod:`folio.content`.
    """

    def __init__(self, db: AsyncSession):
        self._db = db

    # --- Posts ---

    async def list_posts(self) -> List[BlogPost]:
        """All posts, newest first."""
        result = await self._db.execute(
            select(Post).options(selectinload(Post.tags)).order_by(Post.date.desc())
        )
        return [post_to_record(p) for p in result.scalars().all()]

    async def get_post_by_id(self, post_id: str) -> BlogPost:
        """Fetch one post.

        Raises:
            PostNotFoundError: If no post has ``post_id``.
        """
        result = await self._db.execute(
            select(Post).options(selectinload(Post.tags)).where(Post.id == post_id)
        )
        post = result.scalar_one_or_none()
        if post is None:
            raise PostNotFoundError(post_id)
        return post_to_record(post)

    async def filter_posts(self, criteria: BlogFilters) -> List[BlogPost]:
        return content.filter_posts(await self.list_posts(), criteria)

    async def search_posts(self, query: str) -> List[BlogPost]:
        return content.search_posts(await self.list_posts(), query)

    async def posts_by_category(self, category_id: str) -> List[BlogPost]:
        await self.get_category_by_id(category_id)
        return content.filter_posts(
            await self.list_posts(), BlogFilters(category=category_id)
        )

    async def posts_by_tag(self, tag: str) -> List[BlogPost]:
        return content.filter_posts(await self.list_posts(), BlogFilters(tags=[tag]))

    async def featured_posts(self, limit: Optional[int] = None) -> List[BlogPost]:
        return content.featured_posts(
            await self.list_posts(),
            limit=settings.featured_limit if limit is None else limit,
            min_rating=settings.featured_min_rating,
        )

    async def recent_posts(self, limit: Optional[int] = None) -> List[BlogPost]:
        return content.recent_posts(
            await self.list_posts(),
            limit=settings.recent_limit if limit is None else limit,
        )

    async def posts_by_rating(
        self, min_rating: int, max_rating: int = 5
    ) -> List[BlogPost]:
        return content.posts_by_rating(await self.list_posts(), min_rating, max_rating)

    async def related_posts(
        self, post_id: str, limit: Optional[int] = None
    ) -> List[BlogPost]:
        """Posts related to ``post_id``; empty if the post does not exist."""
        posts = await self.list_posts()
        current = next((p for p in posts if p.id == post_id), None)
        if current is None:
            return []
        return content.related_posts(
            posts,
            current,
            limit=settings.related_limit if limit is None else limit,
        )

    # --- Categories ---

    async def list_categories(self) -> List[CategoryRecord]:
        result = await self._db.execute(select(Category).order_by(Category.name))
        return [category_to_record(c) for c in result.scalars().all()]

    async def get_category_by_id(self, category_id: str) -> CategoryRecord:
        """Fetch one category.

        Raises:
            CategoryNotFoundError: If no category has ``category_id``.
        """
        category = await self._db.get(Category, category_id)
        if category is None:
            result = await self._db.execute(select(Category.id).order_by(Category.id))
            raise CategoryNotFoundError(category_id, list(result.scalars().all()))
        return category_to_record(category)

    # --- Tags ---

    async def list_tags(self) -> List[TagRecord]:
        """Tags with their post counts, most used first."""
        result = await self._db.execute(
            select(Tag).order_by(Tag.count.desc(), Tag.id)
        )
        return [
            TagRecord(id=t.id, name=t.name, count=t.count)
            for t in result.scalars().all()
        ]
