"""Theme enums and colour palettes."""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Dict, Optional


class ThemePreference(str, Enum):
    """The user's explicit choice, including "follow the system"."""

    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"

    @classmethod
    def parse(cls, value: object) -> Optional["ThemePreference"]:
        """Return the preference named by ``value``, or None if unrecognised."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class SystemTheme(str, Enum):
    """Light/dark signal reported by the host environment."""

    LIGHT = "light"
    DARK = "dark"

    @classmethod
    def from_prefers_dark(cls, prefers_dark: bool) -> "SystemTheme":
        return cls.DARK if prefers_dark else cls.LIGHT


class ResolvedTheme(str, Enum):
    """The concrete theme applied to the page. Never "system"."""

    LIGHT = "light"
    DARK = "dark"


@dataclass(frozen=True)
class ThemePalette:
    """Colour variables for one resolved theme."""

    name: str

    background: str
    foreground: str
    primary: str
    secondary: str
    accent: str
    border: str
    muted: str
    card: str
    card_foreground: str
    popover: str
    popover_foreground: str

    def css_variables(self) -> Dict[str, str]:
        """Return the palette as ``--color-*`` custom properties."""
        return {
            f"--color-{f.name.replace('_', '-')}": getattr(self, f.name)
            for f in fields(self)
            if f.name != "name"
        }


LIGHT_PALETTE = ThemePalette(
    name="light",
    background="#ffffff",
    foreground="#171717",
    primary="#3b82f6",
    secondary="#6b7280",
    accent="#f59e0b",
    border="#e5e7eb",
    muted="#f3f4f6",
    card="#ffffff",
    card_foreground="#171717",
    popover="#ffffff",
    popover_foreground="#171717",
)


DARK_PALETTE = ThemePalette(
    name="dark",
    background="#0a0a0a",
    foreground="#ededed",
    primary="#60a5fa",
    secondary="#9ca3af",
    accent="#fbbf24",
    border="#374151",
    muted="#1f2937",
    card="#111827",
    card_foreground="#f9fafb",
    popover="#111827",
    popover_foreground="#f9fafb",
)


PALETTES: Dict[ResolvedTheme, ThemePalette] = {
    ResolvedTheme.LIGHT: LIGHT_PALETTE,
    ResolvedTheme.DARK: DARK_PALETTE,
}


def get_palette(theme: ResolvedTheme) -> ThemePalette:
    """Look up the palette for a resolved theme."""
    return PALETTES[theme]
