"""Tests for post endpoints."""

import pytest

from folio.content import BlogFilters
from folio.repository import ArticleRepository


def _ids(posts):
    return [p["id"] for p in posts]


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_list_posts_empty_database(client):
    """An empty database lists nothing."""
    response = await client.get("/api/posts")

    assert response.status_code == 200
    data = response.json()
    assert data == {"posts": [], "total": 0, "available": 0}


@pytest.mark.asyncio
async def test_list_posts_newest_first(seeded_client):
    """Posts are listed newest first by default."""
    response = await seeded_client.get("/api/posts")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 8
    assert data["available"] == 8
    assert _ids(data["posts"])[:3] == [
        "ripgrep",
        "designing-data-intensive-applications",
        "how-complex-systems-fail",
    ]


@pytest.mark.asyncio
async def test_post_card_display_fields(seeded_client):
    """Cards carry formatted strings alongside the raw post."""
    response = await seeded_client.get("/api/posts/designing-data-intensive-applications")

    assert response.status_code == 200
    post = response.json()
    assert post["category"] == "books"
    assert post["tags"] == ["architecture", "databases", "distributed-systems"]
    assert post["formattedDate"] == "March 12, 2024"
    assert post["ratingStars"] == "★★★★★"
    assert post["ratingColor"] == "text-green-600"
    assert post["ratingBgColor"] == "bg-green-100"
    assert post["sourceDomain"] == "dataintensive.net"
    assert post["personalThoughts"].startswith("Read it twice")
    assert post["imageUrl"] is None


@pytest.mark.asyncio
async def test_get_missing_post_is_404(seeded_client):
    response = await seeded_client.get("/api/posts/does-not-exist")

    assert response.status_code == 404
    data = response.json()
    assert "does-not-exist" in data["detail"]
    assert data["details"] == {"post_id": "does-not-exist"}


@pytest.mark.asyncio
async def test_filter_by_category_and_sort(seeded_client):
    response = await seeded_client.get(
        "/api/posts",
        params={"category": "tools", "sort_by": "rating", "sort_order": "asc"},
    )

    data = response.json()
    assert _ids(data["posts"]) == ["fish-shell", "ripgrep"]
    assert data["total"] == 2
    assert data["available"] == 8


@pytest.mark.asyncio
async def test_filtered_listing_loads_posts_once(seeded_client, monkeypatch):
    calls = []
    original = ArticleRepository.list_posts

    async def counting_list_posts(self):
        calls.append(1)
        return await original(self)

    monkeypatch.setattr(ArticleRepository, "list_posts", counting_list_posts)
    response = await seeded_client.get("/api/posts", params={"category": "tools"})

    assert response.json()["total"] == 2
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_filter_by_any_tag(seeded_client):
    """Repeated tag parameters match posts carrying any of them."""
    response = await seeded_client.get("/api/posts", params=[("tag", "cli"), ("tag", "talks")])

    assert _ids(response.json()["posts"]) == [
        "ripgrep",
        "simple-made-easy",
        "fish-shell",
        "the-art-of-code",
    ]


@pytest.mark.asyncio
async def test_filter_by_min_rating(seeded_client):
    response = await seeded_client.get("/api/posts", params={"min_rating": 5})

    posts = response.json()["posts"]
    assert len(posts) == 4
    assert all(p["rating"] == 5 for p in posts)


@pytest.mark.asyncio
async def test_search_is_case_insensitive(seeded_client):
    response = await seeded_client.get("/api/posts", params={"q": "SHELL"})

    assert _ids(response.json()["posts"]) == ["fish-shell"]


@pytest.mark.asyncio
async def test_sort_by_title(seeded_client):
    response = await seeded_client.get(
        "/api/posts", params={"sort_by": "title", "sort_order": "asc"}
    )

    titles = [p["title"] for p in response.json()["posts"]]
    assert titles == sorted(titles, key=str.lower)


@pytest.mark.asyncio
async def test_invalid_sort_field_rejected(seeded_client):
    response = await seeded_client.get("/api/posts", params={"sort_by": "views"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_featured_posts(seeded_client):
    """Featured posts are rated 4+, best rating first then newest."""
    response = await seeded_client.get("/api/posts/featured")

    assert response.status_code == 200
    assert _ids(response.json()) == [
        "ripgrep",
        "designing-data-intensive-applications",
        "how-complex-systems-fail",
        "simple-made-easy",
        "sqlite-is-not-a-toy",
        "the-pragmatic-programmer",
    ]


@pytest.mark.asyncio
async def test_featured_posts_limit(seeded_client):
    response = await seeded_client.get("/api/posts/featured", params={"limit": 3})

    assert len(response.json()) == 3


@pytest.mark.asyncio
async def test_recent_posts(seeded_client):
    response = await seeded_client.get("/api/posts/recent", params={"limit": 2})

    assert _ids(response.json()) == ["ripgrep", "designing-data-intensive-applications"]


@pytest.mark.asyncio
async def test_posts_by_rating_range(seeded_client):
    response = await seeded_client.get(
        "/api/posts/by-rating", params={"min_rating": 2, "max_rating": 3}
    )

    assert sorted(_ids(response.json())) == ["fish-shell", "the-art-of-code"]


@pytest.mark.asyncio
async def test_related_posts(seeded_client):
    """Same category scores above a single shared tag."""
    response = await seeded_client.get(
        "/api/posts/designing-data-intensive-applications/related"
    )

    assert response.status_code == 200
    assert _ids(response.json()) == [
        "the-pragmatic-programmer",
        "how-complex-systems-fail",
        "sqlite-is-not-a-toy",
        "simple-made-easy",
    ]


@pytest.mark.asyncio
async def test_related_posts_missing_post(seeded_client):
    response = await seeded_client.get("/api/posts/nope/related")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_repository_explicit_zero_limit(seeded_db, db_session):
    repo = ArticleRepository(db_session)

    assert await repo.featured_posts(0) == []
    assert await repo.recent_posts(0) == []
    assert await repo.related_posts("designing-data-intensive-applications", 0) == []
    assert len(await repo.recent_posts()) == 8


@pytest.mark.asyncio
async def test_repository_filter_and_search(seeded_db, db_session):
    repo = ArticleRepository(db_session)

    tools = await repo.filter_posts(
        BlogFilters(category="tools", sort_by="rating", sort_order="asc")
    )
    assert [p.id for p in tools] == ["fish-shell", "ripgrep"]

    found = await repo.search_posts("RIPGREP")
    assert [p.id for p in found] == ["ripgrep"]
