"""Host light/dark preference detection.

The host environment is modelled as a ``prefers-color-scheme: dark`` media
query: something with a current ``matches`` value that reports changes to
registered listeners. On plain HTTP requests the value comes from the
``Sec-CH-Prefers-Color-Scheme`` client hint; on a theme WebSocket the browser
reports its ``matchMedia`` changes and the connection feeds them in through
:meth:`PrefersDarkQuery.report`.
"""

import logging
from typing import Callable, List, Optional

from .models import SystemTheme

logger = logging.getLogger(__name__)

COLOR_SCHEME_HINT_HEADER = "Sec-CH-Prefers-Color-Scheme"


class Subscription:
    """Handle for a listener registration."""

    def __init__(self, cancel_fn: Callable[[], None]) -> None:
        self._cancel = cancel_fn
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._cancel()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *args) -> None:
        self.cancel()


class PrefersDarkQuery:
    """A live "prefers dark" signal with change listeners."""

    def __init__(self, matches: bool = False) -> None:
        self._matches = matches
        self._listeners: List[Callable[[bool], None]] = []

    @property
    def matches(self) -> bool:
        return self._matches

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def add_listener(self, listener: Callable[[bool], None]) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[bool], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def report(self, matches: bool) -> bool:
        """Record a value reported by the host and notify on change.

        Listeners run one at a time, in registration order, each to
        completion. A failing listener is logged and does not stop the rest.

        Returns:
            True if the value changed and listeners were notified.
        """
        matches = bool(matches)
        if matches == self._matches:
            return False

        self._matches = matches
        # Iterate over a snapshot so listeners may unsubscribe while notified
        for listener in list(self._listeners):
            try:
                listener(matches)
            except Exception:
                logger.exception("Error in prefers-dark listener")
        return True


def parse_color_scheme_hint(value: Optional[str]) -> Optional[bool]:
    """Interpret a ``Sec-CH-Prefers-Color-Scheme`` header value.

    The header is a structured-field string such as ``"dark"``.

    Returns:
        True for dark, False for light, None when absent or unrecognised.
    """
    if not value:
        return None
    scheme = value.strip().strip('"').strip().lower()
    if scheme == "dark":
        return True
    if scheme == "light":
        return False
    return None


def query_from_client_hint(value: Optional[str]) -> Optional[PrefersDarkQuery]:
    """Build a query from a client hint, or None if the hint is missing."""
    prefers_dark = parse_color_scheme_hint(value)
    if prefers_dark is None:
        return None
    return PrefersDarkQuery(prefers_dark)


class SystemThemeDetector:
    """Reads the host theme and relays changes as :class:`SystemTheme` values.

    Without a query there is no environment signal: :meth:`current` reports
    light and :meth:`subscribe` hands back a subscription that does nothing.
    """

    def __init__(self, query: Optional[PrefersDarkQuery] = None) -> None:
        self._query = query

    def current(self) -> SystemTheme:
        if self._query is None:
            return SystemTheme.LIGHT
        return SystemTheme.from_prefers_dark(self._query.matches)

    def subscribe(self, callback: Callable[[SystemTheme], None]) -> Subscription:
        """Call ``callback`` with the new theme on each host-reported change.

        Returns:
            A Subscription whose ``cancel()`` removes the listener.
        """
        query = self._query
        if query is None:
            return Subscription(lambda: None)

        def listener(matches: bool) -> None:
            callback(SystemTheme.from_prefers_dark(matches))

        query.add_listener(listener)
        return Subscription(lambda: query.remove_listener(listener))
