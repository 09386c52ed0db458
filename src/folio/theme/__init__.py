"""Theme preference resolution and application."""

from .controller import ThemeController, ThemeState
from .detector import (
    COLOR_SCHEME_HINT_HEADER,
    PrefersDarkQuery,
    Subscription,
    SystemThemeDetector,
    parse_color_scheme_hint,
    query_from_client_hint,
)
from .models import (
    DARK_PALETTE,
    LIGHT_PALETTE,
    PALETTES,
    ResolvedTheme,
    SystemTheme,
    ThemePalette,
    ThemePreference,
    get_palette,
)
from .resolver import resolve
from .storage import CookieStorage, ForwardingStorage, KeyValueStorage, MemoryStorage
from .store import THEME_STORAGE_KEY, ThemePreferenceStore
from .surface import RootSurface

__all__ = [
    "COLOR_SCHEME_HINT_HEADER",
    "CookieStorage",
    "DARK_PALETTE",
    "ForwardingStorage",
    "KeyValueStorage",
    "LIGHT_PALETTE",
    "MemoryStorage",
    "PALETTES",
    "PrefersDarkQuery",
    "ResolvedTheme",
    "RootSurface",
    "Subscription",
    "SystemTheme",
    "SystemThemeDetector",
    "THEME_STORAGE_KEY",
    "ThemeController",
    "ThemePalette",
    "ThemePreference",
    "ThemePreferenceStore",
    "ThemeState",
    "get_palette",
    "parse_color_scheme_hint",
    "query_from_client_hint",
    "resolve",
]
