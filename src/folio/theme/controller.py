"""Per-session theme state machine."""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from ..errors import ThemeNotInitializedError
from .detector import Subscription, SystemThemeDetector
from .models import ResolvedTheme, SystemTheme, ThemePreference
from .resolver import resolve
from .store import ThemePreferenceStore
from .surface import RootSurface

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThemeState:
    """A consistent reading of the controller's three fields."""

    preference: ThemePreference
    system_theme: SystemTheme
    resolved_theme: ResolvedTheme


class ThemeController:
    """Owns one visitor's theme for the life of a UI session.

    Nothing is readable until :meth:`initialize` has loaded the stored
    preference, read the host theme, subscribed to host changes and applied
    the result to the surface. :meth:`close` drops the host subscription.

    Usage:
        with ThemeController(store, detector, surface) as controller:
            controller.set_preference(ThemePreference.DARK)
    """

    def __init__(
        self,
        store: ThemePreferenceStore,
        detector: SystemThemeDetector,
        surface: Optional[RootSurface] = None,
    ) -> None:
        self._store = store
        self._detector = detector
        self._surface = surface if surface is not None else RootSurface()
        self._state: Optional[ThemeState] = None
        self._subscription: Optional[Subscription] = None

    # --- Lifecycle ---

    @property
    def initialized(self) -> bool:
        return self._state is not None

    def initialize(self) -> ThemeState:
        """Load inputs, resolve, subscribe and apply. Repeated calls are no-ops."""
        if self._state is not None:
            return self._state

        preference = self._store.get()
        system_theme = self._detector.current()
        self._state = ThemeState(
            preference=preference,
            system_theme=system_theme,
            resolved_theme=resolve(preference, system_theme),
        )
        self._subscription = self._detector.subscribe(self._on_system_change)
        self._surface.apply(self._state.resolved_theme)

        logger.debug(
            "Theme initialized: preference=%s system=%s resolved=%s",
            preference.value,
            system_theme.value,
            self._state.resolved_theme.value,
        )
        return self._state

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def __enter__(self) -> "ThemeController":
        self.initialize()
        return self

    def __exit__(self, *args) -> None:
        self.close()

    # --- State ---

    def _require(self, field: str) -> ThemeState:
        if self._state is None:
            raise ThemeNotInitializedError(field)
        return self._state

    @property
    def preference(self) -> ThemePreference:
        return self._require("preference").preference

    @property
    def system_theme(self) -> SystemTheme:
        return self._require("system_theme").system_theme

    @property
    def resolved_theme(self) -> ResolvedTheme:
        return self._require("resolved_theme").resolved_theme

    @property
    def surface(self) -> RootSurface:
        return self._surface

    def snapshot(self) -> ThemeState:
        return self._require("snapshot")

    # --- Transitions ---

    def set_preference(self, preference: Union[ThemePreference, str]) -> ThemeState:
        """Switch to ``preference``, persist it, and reapply the theme.

        Raises:
            ValueError: If ``preference`` is not light, dark or system.
        """
        state = self._require("set_preference")
        parsed = ThemePreference.parse(preference)
        if parsed is None:
            raise ValueError(f"Unknown theme preference: {preference!r}")

        self._store.set(parsed)
        self._state = ThemeState(
            preference=parsed,
            system_theme=state.system_theme,
            resolved_theme=resolve(parsed, state.system_theme),
        )
        self._surface.apply(self._state.resolved_theme)
        logger.debug(
            "Theme preference set to %s (resolved %s)",
            parsed.value,
            self._state.resolved_theme.value,
        )
        return self._state

    def _on_system_change(self, system_theme: SystemTheme) -> None:
        state = self._state
        if state is None:
            return

        resolved = resolve(state.preference, system_theme)
        self._state = ThemeState(
            preference=state.preference,
            system_theme=system_theme,
            resolved_theme=resolved,
        )
        if state.preference is ThemePreference.SYSTEM:
            self._surface.apply(resolved)
            logger.debug("System theme changed to %s; reapplied", system_theme.value)
