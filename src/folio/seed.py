"""Load the bundled JSON content into the database.

Usage:
    python -m folio.seed [--data-dir DIR] [--force]
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import timezone
from pathlib import Path
from typing import List, Tuple

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .config import settings
from .content import BlogPost, CategoryRecord, tag_counts
from .database import (
    Category,
    Post,
    Tag,
    dispose_engine,
    get_session_factory,
    init_db,
    post_tags,
)
from .errors import SeedDataError
from .formatting import is_valid_url

logger = logging.getLogger(__name__)

POSTS_FILE = "posts.json"
CATEGORIES_FILE = "categories.json"

_posts_adapter = TypeAdapter(List[BlogPost])
_categories_adapter = TypeAdapter(List[CategoryRecord])


def _read_json(path: Path):
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise SeedDataError(str(path), f"unreadable: {e}") from e
    except json.JSONDecodeError as e:
        raise SeedDataError(str(path), f"not valid JSON: {e}") from e


def load_seed_content(
    data_dir: Path,
) -> Tuple[List[CategoryRecord], List[BlogPost]]:
    """Read and validate ``categories.json`` and ``posts.json``.

    Post dates without a timezone are taken as UTC.

    Raises:
        SeedDataError: If a file is missing, malformed, or a post names an
            unknown category.
    """
    categories_path = data_dir / CATEGORIES_FILE
    posts_path = data_dir / POSTS_FILE

    try:
        categories = _categories_adapter.validate_python(_read_json(categories_path))
    except ValidationError as e:
        raise SeedDataError(str(categories_path), str(e)) from e

    try:
        posts = _posts_adapter.validate_python(_read_json(posts_path))
    except ValidationError as e:
        raise SeedDataError(str(posts_path), str(e)) from e

    known = {c.id for c in categories}
    for post in posts:
        if post.category not in known:
            raise SeedDataError(
                str(posts_path), f"post {post.id} uses unknown category {post.category}"
            )
        for field in ("source", "image_url"):
            url = getattr(post, field)
            if url is not None and not is_valid_url(url):
                raise SeedDataError(
                    str(posts_path), f"post {post.id} has an invalid {field}: {url!r}"
                )
        if post.date.tzinfo is None:
            post.date = post.date.replace(tzinfo=timezone.utc)

    return categories, posts


async def is_empty(db: AsyncSession) -> bool:
    result = await db.execute(select(func.count()).select_from(Post))
    return result.scalar_one() == 0


async def clear_content(db: AsyncSession) -> None:
    await db.execute(delete(post_tags))
    await db.execute(delete(Post))
    await db.execute(delete(Tag))
    await db.execute(delete(Category))


async def seed_database(
    db: AsyncSession,
    categories: List[CategoryRecord],
    posts: List[BlogPost],
) -> int:
    """Insert categories, tags (with counts) and posts. Returns posts added."""
    for category in categories:
        db.add(Category(**category.model_dump()))

    tags = {
        record.id: Tag(id=record.id, name=record.name, count=record.count)
        for record in tag_counts(posts)
    }
    db.add_all(tags.values())

    for post in posts:
        db.add(
            Post(
                id=post.id,
                title=post.title,
                description=post.description,
                content=post.content,
                category_id=post.category,
                date=post.date,
                rating=post.rating,
                image_url=post.image_url,
                source=post.source,
                personal_thoughts=post.personal_thoughts,
                tags=[tags[t] for t in dict.fromkeys(post.tags)],
            )
        )

    await db.commit()
    return len(posts)


async def seed_if_empty(data_dir: Path) -> int:
    """Seed from ``data_dir`` unless posts already exist. Returns posts added."""
    factory = get_session_factory()
    async with factory() as db:
        if not await is_empty(db):
            logger.info("Database already has content; skipping seed")
            return 0
        categories, posts = load_seed_content(data_dir)
        added = await seed_database(db, categories, posts)
    logger.info("Seeded %s posts in %s categories", added, len(categories))
    return added


async def _run(data_dir: Path, force: bool) -> int:
    await init_db()
    try:
        if force:
            factory = get_session_factory()
            async with factory() as db:
                await clear_content(db)
                await db.commit()
        return await seed_if_empty(data_dir)
    finally:
        await dispose_engine()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Load bundled blog content")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=settings.seed_data_dir,
        help="Directory with posts.json and categories.json",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Delete existing content before loading",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    try:
        added = asyncio.run(_run(args.data_dir, args.force))
    except SeedDataError as e:
        print(f"Seed failed: {e.message}", file=sys.stderr)
        sys.exit(1)
    print(f"Loaded {added} posts")


if __name__ == "__main__":
    main()
