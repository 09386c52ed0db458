"""Post records and the selection logic that runs over them.

Everything here is pure: functions take a list of :class:`BlogPost` already
loaded from the store and return a new list. The repository loads posts once
per request and hands them to these functions, so filtering, ranking and
scoring never depend on the database dialect.
"""

from collections import Counter
from datetime import datetime
from typing import Iterable, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SortField = Literal["date", "rating", "title"]
SortOrder = Literal["asc", "desc"]

# Related-post scoring weights
SAME_CATEGORY_SCORE = 3
SHARED_TAG_SCORE = 2


class CategoryRecord(BaseModel):
    """Category as served to clients."""

    id: str
    name: str
    description: str
    color: str
    icon: Optional[str] = None


class TagRecord(BaseModel):
    """Tag with the number of posts carrying it."""

    id: str
    name: str
    count: int


class BlogPost(BaseModel):
    """Article as served to clients.

    Multi-word fields are camelCase on the wire (``imageUrl``,
    ``personalThoughts``).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    description: str
    content: str
    category: str
    tags: List[str] = Field(default_factory=list)
    date: datetime
    rating: int = Field(ge=0, le=5)
    image_url: Optional[str] = None
    source: Optional[str] = None
    personal_thoughts: Optional[str] = None


class BlogFilters(BaseModel):
    """Criteria for :func:`filter_posts`. Unset fields do not filter."""

    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    min_rating: Optional[int] = Field(default=None, ge=0, le=5)
    search_query: Optional[str] = None
    sort_by: Optional[SortField] = None
    sort_order: SortOrder = "desc"


def matches_query(post: BlogPost, query: str) -> bool:
    """Case-insensitive substring match on title, description, content and tags."""
    needle = query.lower()
    return (
        needle in post.title.lower()
        or needle in post.description.lower()
        or needle in post.content.lower()
        or any(needle in tag.lower() for tag in post.tags)
    )


def _sort_key(sort_by: SortField):
    if sort_by == "date":
        return lambda post: post.date
    if sort_by == "rating":
        return lambda post: post.rating
    return lambda post: post.title.lower()


def sort_posts(
    posts: Iterable[BlogPost],
    sort_by: SortField,
    sort_order: SortOrder = "desc",
) -> List[BlogPost]:
    return sorted(posts, key=_sort_key(sort_by), reverse=sort_order != "asc")


def newest_first(posts: Iterable[BlogPost]) -> List[BlogPost]:
    return sort_posts(posts, "date", "desc")


def filter_posts(posts: Iterable[BlogPost], filters: BlogFilters) -> List[BlogPost]:
    """Apply category, tag, rating and text filters, then optionally sort.

    Tag filtering matches posts carrying ANY of the requested tags. Without
    ``sort_by`` the input order is preserved.
    """
    result = list(posts)

    if filters.category:
        result = [p for p in result if p.category == filters.category]

    if filters.tags:
        wanted = set(filters.tags)
        result = [p for p in result if wanted.intersection(p.tags)]

    if filters.min_rating:
        result = [p for p in result if p.rating >= filters.min_rating]

    if filters.search_query:
        result = [p for p in result if matches_query(p, filters.search_query)]

    if filters.sort_by:
        result = sort_posts(result, filters.sort_by, filters.sort_order)

    return result


def search_posts(posts: Iterable[BlogPost], query: str) -> List[BlogPost]:
    return [p for p in posts if matches_query(p, query)]


def featured_posts(
    posts: Iterable[BlogPost],
    limit: int = 6,
    min_rating: int = 4,
) -> List[BlogPost]:
    """Top-rated posts, best rating first and newest first within a rating."""
    candidates = [p for p in posts if p.rating >= min_rating]
    candidates.sort(key=lambda p: (p.rating, p.date), reverse=True)
    return candidates[:limit]


def recent_posts(posts: Iterable[BlogPost], limit: int = 10) -> List[BlogPost]:
    return newest_first(posts)[:limit]


def posts_by_rating(
    posts: Iterable[BlogPost],
    min_rating: int,
    max_rating: int = 5,
) -> List[BlogPost]:
    return [p for p in posts if min_rating <= p.rating <= max_rating]


def related_score(candidate: BlogPost, current: BlogPost) -> int:
    score = 0
    if candidate.category == current.category:
        score += SAME_CATEGORY_SCORE
    shared = set(candidate.tags).intersection(current.tags)
    score += len(shared) * SHARED_TAG_SCORE
    return score


def related_posts(
    posts: Iterable[BlogPost],
    current: BlogPost,
    limit: int = 4,
) -> List[BlogPost]:
    """Posts sharing a category or tags with ``current``, best match first.

    A shared category is worth 3 points and each shared tag 2. Posts scoring
    zero are dropped; ties keep their input order.
    """
    scored = [
        (related_score(post, current), post)
        for post in posts
        if post.id != current.id
    ]
    scored = [(score, post) for score, post in scored if score > 0]
    scored.sort(key=lambda item: item[0], reverse=True)
    return [post for _, post in scored[:limit]]


def tag_counts(posts: Iterable[BlogPost]) -> List[TagRecord]:
    """Every tag used by ``posts`` with its usage count, most used first."""
    counts = Counter(tag for post in posts for tag in post.tags)
    ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [TagRecord(id=name, name=name, count=count) for name, count in ordered]


def unique_tags(posts: Iterable[BlogPost]) -> List[str]:
    return sorted({tag for post in posts for tag in post.tags})
