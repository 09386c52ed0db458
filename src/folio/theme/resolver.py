"""Combine the stored preference and the system signal into one theme."""

from .models import ResolvedTheme, SystemTheme, ThemePreference


def resolve(preference: ThemePreference, system: SystemTheme) -> ResolvedTheme:
    """Return the theme to apply.

    "system" follows the host signal; an explicit light/dark choice wins.
    """
    if preference is ThemePreference.SYSTEM:
        return ResolvedTheme(system.value)
    return ResolvedTheme(preference.value)
