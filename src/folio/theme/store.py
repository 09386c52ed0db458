"""Persistence of the visitor's explicit theme choice."""

import logging
from typing import Optional

from .models import ThemePreference
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

THEME_STORAGE_KEY = "theme-preference"


class ThemePreferenceStore:
    """Reads and writes the theme preference, best effort.

    Storage problems never reach the caller: an unreadable, missing or
    unrecognised value reads back as ``SYSTEM`` and a failed write is dropped.
    Passing ``storage=None`` models a visitor with no storage at all.
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorage],
        key: str = THEME_STORAGE_KEY,
    ):
        self._storage = storage
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def get(self) -> ThemePreference:
        if self._storage is None:
            return ThemePreference.SYSTEM

        try:
            raw = self._storage.get_item(self._key)
        except Exception as e:
            logger.debug("Theme preference read failed: %s", e)
            return ThemePreference.SYSTEM

        if raw is None:
            return ThemePreference.SYSTEM

        preference = ThemePreference.parse(raw)
        if preference is None:
            logger.debug("Ignoring unrecognised theme preference %r", raw)
            return ThemePreference.SYSTEM
        return preference

    def set(self, preference: ThemePreference) -> None:
        if self._storage is None:
            return

        try:
            self._storage.set_item(self._key, preference.value)
        except Exception as e:
            logger.debug("Theme preference write dropped: %s", e)
