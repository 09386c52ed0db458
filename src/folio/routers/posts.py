"""Post listing, search and detail endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from .. import content
from ..content import BlogFilters, BlogPost, SortField, SortOrder
from ..database import get_db
from ..formatting import (
    format_date,
    format_rating,
    format_relative_date,
    get_domain_from_url,
    rating_bg_color,
    rating_color,
    truncate_text,
)
from ..repository import ArticleRepository

router = APIRouter(prefix="/api/posts", tags=["posts"])

EXCERPT_LENGTH = 150


# --- Models ---


class PostCard(BlogPost):
    """Post plus the display strings a card needs."""

    excerpt: str
    formatted_date: str
    relative_date: str
    rating_stars: str
    rating_color: str
    rating_bg_color: str
    source_domain: Optional[str] = None


class PostListResponse(BaseModel):
    """Posts matching a query, with the size of the unfiltered collection."""

    posts: List[PostCard]
    total: int
    available: int


# --- Helpers ---


def get_repository(db: AsyncSession = Depends(get_db)) -> ArticleRepository:
    return ArticleRepository(db)


def to_card(post: BlogPost) -> PostCard:
    return PostCard(
        **post.model_dump(),
        excerpt=truncate_text(post.description, EXCERPT_LENGTH),
        formatted_date=format_date(post.date),
        relative_date=format_relative_date(post.date),
        rating_stars=format_rating(post.rating),
        rating_color=rating_color(post.rating),
        rating_bg_color=rating_bg_color(post.rating),
        source_domain=get_domain_from_url(post.source) if post.source else None,
    )


def to_cards(posts: List[BlogPost]) -> List[PostCard]:
    return [to_card(p) for p in posts]


# --- Endpoints ---


@router.get("", response_model=PostListResponse)
async def list_posts(
    category: Optional[str] = None,
    tag: List[str] = Query(default=[], description="Match posts with ANY of these tags"),
    min_rating: Optional[int] = Query(None, ge=0, le=5),
    q: Optional[str] = Query(None, description="Search title, description, content and tags"),
    sort_by: Optional[SortField] = None,
    sort_order: SortOrder = "desc",
    repo: ArticleRepository = Depends(get_repository),
):
    """List posts, newest first unless another sort is requested."""
    all_posts = await repo.list_posts()
    criteria = BlogFilters(
        category=category,
        tags=tag,
        min_rating=min_rating,
        search_query=q,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    posts = content.filter_posts(all_posts, criteria)
    return PostListResponse(posts=to_cards(posts), total=len(posts), available=len(all_posts))


@router.get("/featured", response_model=List[PostCard])
async def featured_posts(
    limit: Optional[int] = Query(None, ge=1, le=50),
    repo: ArticleRepository = Depends(get_repository),
):
    """Top-rated posts (rating 4 and up), best and newest first."""
    return to_cards(await repo.featured_posts(limit))


@router.get("/recent", response_model=List[PostCard])
async def recent_posts(
    limit: Optional[int] = Query(None, ge=1, le=100),
    repo: ArticleRepository = Depends(get_repository),
):
    return to_cards(await repo.recent_posts(limit))


@router.get("/by-rating", response_model=List[PostCard])
async def posts_by_rating(
    min_rating: int = Query(..., ge=0, le=5),
    max_rating: int = Query(5, ge=0, le=5),
    repo: ArticleRepository = Depends(get_repository),
):
    return to_cards(await repo.posts_by_rating(min_rating, max_rating))


@router.get("/{post_id}", response_model=PostCard)
async def get_post(
    post_id: str,
    repo: ArticleRepository = Depends(get_repository),
):
    """Get a single post. 404 if it does not exist."""
    return to_card(await repo.get_post_by_id(post_id))


@router.get("/{post_id}/related", response_model=List[PostCard])
async def related_posts(
    post_id: str,
    limit: Optional[int] = Query(None, ge=1, le=20),
    repo: ArticleRepository = Depends(get_repository),
):
    """Posts sharing the category or tags of ``post_id``."""
    await repo.get_post_by_id(post_id)
    return to_cards(await repo.related_posts(post_id, limit))
