"""Key-value media the theme preference can be persisted to.

Each backend is synchronous and local to one visitor: the in-memory dict used
by tests, the request/response cookie pair used by the HTTP API, and the
browser-forwarding backend used by theme WebSocket sessions.
"""

import logging
from typing import Callable, Dict, Mapping, Optional, Protocol

from fastapi import Response

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """Minimal storage contract (the shape of browser ``localStorage``)."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """Dict-backed storage."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class CookieStorage:
    """Storage backed by the visitor's cookies.

    Reads come from the incoming request's cookies. Writes are buffered and
    copied onto the outgoing response with :meth:`apply_to`.
    """

    def __init__(
        self,
        cookies: Mapping[str, str],
        max_age: int,
        secure: bool = False,
    ):
        self._cookies = dict(cookies)
        self._pending: Dict[str, str] = {}
        self._max_age = max_age
        self._secure = secure

    def get_item(self, key: str) -> Optional[str]:
        if key in self._pending:
            return self._pending[key]
        return self._cookies.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._pending[key] = value

    def apply_to(self, response: Response) -> None:
        """Emit a ``Set-Cookie`` header for each buffered write."""
        for key, value in self._pending.items():
            response.set_cookie(
                key,
                value,
                max_age=self._max_age,
                path="/",
                samesite="lax",
                secure=self._secure,
            )
        self._pending.clear()


class ForwardingStorage:
    """Storage that lives in the browser and is written by request.

    The handshake cookies give the initial contents; each write is mirrored
    locally and handed to ``forward`` so the connection can ask the browser to
    persist it.
    """

    def __init__(
        self,
        initial: Mapping[str, str],
        forward: Callable[[str, str], None],
    ):
        self._items: Dict[str, str] = dict(initial)
        self._forward = forward

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self._forward(key, value)
        logger.debug("Forwarded storage write %s=%s to client", key, value)
