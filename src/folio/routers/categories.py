"""Category endpoints."""

from typing import List

from fastapi import APIRouter, Depends

from ..content import CategoryRecord
from ..repository import ArticleRepository
from .posts import PostCard, get_repository, to_cards

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=List[CategoryRecord])
async def list_categories(repo: ArticleRepository = Depends(get_repository)):
    return await repo.list_categories()


@router.get("/{category_id}", response_model=CategoryRecord)
async def get_category(
    category_id: str,
    repo: ArticleRepository = Depends(get_repository),
):
    return await repo.get_category_by_id(category_id)


@router.get("/{category_id}/posts", response_model=List[PostCard])
async def category_posts(
    category_id: str,
    repo: ArticleRepository = Depends(get_repository),
):
    """Posts in a category, newest first. 404 for an unknown category."""
    return to_cards(await repo.posts_by_category(category_id))
