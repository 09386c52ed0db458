"""Display helpers for post cards and detail pages."""

import math
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

MAX_STARS = 5

# (minimum rating, text class, background class), checked top to bottom
RATING_COLORS = (
    (4.5, "text-green-600", "bg-green-100"),
    (4, "text-blue-600", "bg-blue-100"),
    (3, "text-yellow-600", "bg-yellow-100"),
    (2, "text-orange-600", "bg-orange-100"),
)
LOWEST_RATING_COLORS = ("text-red-600", "bg-red-100")


def format_date(value: datetime) -> str:
    """Format a date as e.g. "March 12, 2024"."""
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def format_relative_date(value: datetime, now: Optional[datetime] = None) -> str:
    """Describe how long ago ``value`` was ("Today", "3 weeks ago", ...).

    Args:
        value: The moment to describe. Naive values are taken as UTC.
        now: Reference time, defaults to the current UTC time.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    days = math.floor((now - value).total_seconds() / 86400)

    if days == 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    if days < 30:
        return f"{days // 7} weeks ago"
    if days < 365:
        return f"{days // 30} months ago"
    return f"{days // 365} years ago"


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length].strip() + "..."


def format_rating(rating: float) -> str:
    """Render a rating as five filled/empty stars."""
    full = max(0, min(MAX_STARS, math.floor(rating)))
    return "★" * full + "☆" * (MAX_STARS - full)


def _rating_colors(rating: float):
    for threshold, text_class, bg_class in RATING_COLORS:
        if rating >= threshold:
            return text_class, bg_class
    return LOWEST_RATING_COLORS


def rating_color(rating: float) -> str:
    return _rating_colors(rating)[0]


def rating_bg_color(rating: float) -> str:
    return _rating_colors(rating)[1]


def is_valid_url(value: str) -> bool:
    """True if ``value`` parses as an absolute URL with a scheme."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    if not parsed.scheme:
        return False
    # "mailto:x" style URLs have no netloc but are still absolute
    return bool(parsed.netloc or parsed.path)


def get_domain_from_url(url: str) -> str:
    """Host of ``url`` without a leading "www.", or "" if unparseable."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        return ""
    if not host:
        return ""
    return host.replace("www.", "", 1)
