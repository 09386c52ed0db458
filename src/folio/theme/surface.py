"""The page root the resolved theme is applied to."""

from typing import Callable, Dict, List, Optional

from .models import ResolvedTheme, get_palette

THEME_CLASSES = tuple(theme.value for theme in ResolvedTheme)


class RootSurface:
    """Server-side stand-in for the document root element.

    Tracks the root's class tokens and inline CSS custom properties. At most
    one of the ``light``/``dark`` tokens is present at a time.
    """

    def __init__(
        self,
        on_apply: Optional[Callable[["RootSurface"], None]] = None,
        classes: Optional[List[str]] = None,
    ) -> None:
        self._classes: List[str] = list(classes or [])
        self._variables: Dict[str, str] = {}
        self._on_apply = on_apply
        self._applied: Optional[ResolvedTheme] = None

    @property
    def applied_theme(self) -> Optional[ResolvedTheme]:
        return self._applied

    @property
    def classes(self) -> List[str]:
        return list(self._classes)

    @property
    def variables(self) -> Dict[str, str]:
        return dict(self._variables)

    def apply(self, theme: ResolvedTheme) -> None:
        self._classes = [c for c in self._classes if c not in THEME_CLASSES]
        self._classes.append(theme.value)
        self._variables.update(get_palette(theme).css_variables())
        self._applied = theme

        if self._on_apply is not None:
            self._on_apply(self)

    def style(self) -> str:
        """Render the custom properties as an inline ``style`` value."""
        return ";".join(f"{name}:{value}" for name, value in self._variables.items())

    def html_attributes(self) -> Dict[str, str]:
        """Attributes to put on ``<html>`` for a flicker-free first paint."""
        return {"class": " ".join(self._classes), "style": self.style()}

    def to_dict(self) -> dict:
        return {"classes": self.classes, "variables": self.variables}
