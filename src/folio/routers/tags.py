"""Tag endpoints."""

from typing import List

from fastapi import APIRouter, Depends

from ..content import TagRecord
from ..repository import ArticleRepository
from .posts import PostCard, get_repository, to_cards

router = APIRouter(prefix="/api/tags", tags=["tags"])


@router.get("", response_model=List[TagRecord])
async def list_tags(repo: ArticleRepository = Depends(get_repository)):
    """All tags, most used first."""
    return await repo.list_tags()


@router.get("/{tag}/posts", response_model=List[PostCard])
async def tag_posts(tag: str, repo: ArticleRepository = Depends(get_repository)):
    return to_cards(await repo.posts_by_tag(tag))
