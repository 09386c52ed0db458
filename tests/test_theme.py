"""Tests for theme resolution, persistence, detection and the controller."""

import pytest

from folio.errors import ThemeNotInitializedError
from folio.theme import (
    DARK_PALETTE,
    LIGHT_PALETTE,
    THEME_STORAGE_KEY,
    MemoryStorage,
    PrefersDarkQuery,
    ResolvedTheme,
    RootSurface,
    SystemTheme,
    SystemThemeDetector,
    ThemeController,
    ThemePreference,
    ThemePreferenceStore,
    parse_color_scheme_hint,
    query_from_client_hint,
    resolve,
)


class BrokenStorage:
    """Storage whose every access fails, like a locked-down browser."""

    def get_item(self, key):
        raise PermissionError("storage disabled")

    def set_item(self, key, value):
        raise PermissionError("storage disabled")


# ── Resolver ────────────────────────────────────────────────────────────────


@pytest.mark.parametrize("system", list(SystemTheme))
@pytest.mark.parametrize("preference", list(ThemePreference))
def test_resolve(preference, system):
    """System follows the host; explicit choices win."""
    resolved = resolve(preference, system)
    if preference is ThemePreference.SYSTEM:
        assert resolved.value == system.value
    else:
        assert resolved.value == preference.value
    assert resolved in (ResolvedTheme.LIGHT, ResolvedTheme.DARK)


# ── Store ───────────────────────────────────────────────────────────────────


class TestThemePreferenceStore:
    """Tests for ThemePreferenceStore."""

    def test_defaults_to_system(self):
        assert ThemePreferenceStore(MemoryStorage()).get() is ThemePreference.SYSTEM

    @pytest.mark.parametrize("preference", list(ThemePreference))
    def test_set_then_get(self, preference):
        store = ThemePreferenceStore(MemoryStorage())
        store.set(preference)
        assert store.get() is preference

    def test_writes_plain_value_under_fixed_key(self):
        storage = MemoryStorage()
        ThemePreferenceStore(storage).set(ThemePreference.DARK)
        assert storage.get_item(THEME_STORAGE_KEY) == "dark"

    def test_corrupt_value_reads_as_system(self):
        storage = MemoryStorage({THEME_STORAGE_KEY: "purple"})
        assert ThemePreferenceStore(storage).get() is ThemePreference.SYSTEM

    def test_broken_storage_never_raises(self):
        store = ThemePreferenceStore(BrokenStorage())
        store.set(ThemePreference.DARK)
        assert store.get() is ThemePreference.SYSTEM

    def test_no_storage(self):
        store = ThemePreferenceStore(None)
        store.set(ThemePreference.LIGHT)
        assert store.get() is ThemePreference.SYSTEM


# ── Detector ────────────────────────────────────────────────────────────────


class TestSystemThemeDetector:
    """Tests for SystemThemeDetector."""

    def test_no_signal_is_light(self):
        assert SystemThemeDetector().current() is SystemTheme.LIGHT

    def test_no_signal_subscribe_is_noop(self):
        detector = SystemThemeDetector()
        subscription = detector.subscribe(lambda theme: None)
        subscription.cancel()
        subscription.cancel()

        assert subscription.cancelled

    def test_reads_query(self):
        assert SystemThemeDetector(PrefersDarkQuery(True)).current() is SystemTheme.DARK

    def test_notifies_once_per_change(self):
        query = PrefersDarkQuery(False)
        seen = []
        SystemThemeDetector(query).subscribe(seen.append)

        query.report(True)
        query.report(True)
        query.report(False)

        assert seen == [SystemTheme.DARK, SystemTheme.LIGHT]

    def test_cancel_stops_notifications(self):
        query = PrefersDarkQuery(False)
        seen = []
        with SystemThemeDetector(query).subscribe(seen.append) as subscription:
            query.report(True)
            assert not subscription.cancelled
        query.report(False)

        assert seen == [SystemTheme.DARK]
        assert subscription.cancelled
        assert query.listener_count == 0

    def test_failing_listener_does_not_block_others(self):
        query = PrefersDarkQuery(False)
        seen = []

        def explode(theme):
            raise RuntimeError("boom")

        detector = SystemThemeDetector(query)
        detector.subscribe(explode)
        detector.subscribe(seen.append)
        query.report(True)

        assert seen == [SystemTheme.DARK]


@pytest.mark.parametrize(
    "header,expected",
    [
        ('"dark"', True),
        ('"light"', False),
        ("dark", True),
        (' "DARK" ', True),
        ('"sepia"', None),
        ("", None),
        (None, None),
    ],
)
def test_parse_color_scheme_hint(header, expected):
    assert parse_color_scheme_hint(header) is expected


def test_query_from_missing_hint():
    assert query_from_client_hint(None) is None
    assert query_from_client_hint('"dark"').matches is True


# ── Surface ─────────────────────────────────────────────────────────────────


def test_surface_tokens_are_exclusive():
    surface = RootSurface(classes=["antialiased"])
    surface.apply(ResolvedTheme.LIGHT)
    surface.apply(ResolvedTheme.DARK)

    assert surface.classes == ["antialiased", "dark"]
    assert surface.variables["--color-background"] == "#0a0a0a"
    assert surface.variables["--color-card-foreground"] == "#f9fafb"
    assert len(surface.variables) == 11


def test_surface_html_attributes():
    surface = RootSurface()
    surface.apply(ResolvedTheme.LIGHT)

    attrs = surface.html_attributes()
    assert attrs["class"] == "light"
    assert "--color-popover-foreground:#171717" in attrs["style"]


def test_palette_variables():
    assert LIGHT_PALETTE.css_variables()["--color-primary"] == "#3b82f6"
    assert DARK_PALETTE.css_variables()["--color-primary"] == "#60a5fa"


# ── Controller ──────────────────────────────────────────────────────────────


def make_controller(stored=None, prefers_dark=None, storage=None):
    if storage is None:
        storage = MemoryStorage({THEME_STORAGE_KEY: stored} if stored else {})
    query = PrefersDarkQuery(prefers_dark) if prefers_dark is not None else None
    applied = []
    surface = RootSurface(on_apply=lambda s: applied.append(s.applied_theme))
    controller = ThemeController(
        ThemePreferenceStore(storage), SystemThemeDetector(query), surface
    )
    return controller, query, storage, applied


class TestThemeController:
    """Tests for ThemeController."""

    def test_state_hidden_until_initialized(self):
        controller, _, _, applied = make_controller()

        assert controller.initialized is False
        with pytest.raises(ThemeNotInitializedError):
            controller.resolved_theme
        with pytest.raises(ThemeNotInitializedError):
            controller.snapshot()
        with pytest.raises(ThemeNotInitializedError):
            controller.set_preference(ThemePreference.DARK)
        assert applied == []

    def test_system_preference_follows_dark_host(self):
        controller, _, _, applied = make_controller(prefers_dark=True)
        controller.initialize()

        assert controller.preference is ThemePreference.SYSTEM
        assert controller.system_theme is SystemTheme.DARK
        assert controller.resolved_theme is ResolvedTheme.DARK
        assert applied == [ResolvedTheme.DARK]
        assert controller.surface.variables["--color-background"] == "#0a0a0a"

    def test_explicit_light_overrides_dark_host(self):
        controller, _, _, _ = make_controller(stored="light", prefers_dark=True)
        controller.initialize()

        assert controller.resolved_theme is ResolvedTheme.LIGHT
        assert "light" in controller.surface.classes

    def test_no_signal_defaults_to_light(self):
        controller, _, _, _ = make_controller()
        controller.initialize()

        assert controller.resolved_theme is ResolvedTheme.LIGHT

    def test_initialize_twice_is_noop(self):
        controller, query, _, applied = make_controller(prefers_dark=False)
        controller.initialize()
        controller.initialize()

        assert applied == [ResolvedTheme.LIGHT]
        assert query.listener_count == 1

    def test_set_preference_persists_and_applies(self):
        controller, _, storage, applied = make_controller(prefers_dark=False)
        controller.initialize()
        state = controller.set_preference(ThemePreference.DARK)

        assert state.resolved_theme is ResolvedTheme.DARK
        assert storage.get_item(THEME_STORAGE_KEY) == "dark"
        assert applied == [ResolvedTheme.LIGHT, ResolvedTheme.DARK]

    def test_set_preference_accepts_string(self):
        controller, _, _, _ = make_controller()
        controller.initialize()
        controller.set_preference("dark")

        assert controller.preference is ThemePreference.DARK

    def test_set_preference_rejects_unknown(self):
        controller, _, _, _ = make_controller()
        controller.initialize()

        with pytest.raises(ValueError):
            controller.set_preference("sepia")
        assert controller.preference is ThemePreference.SYSTEM

    def test_set_preference_idempotent(self):
        controller, _, storage, _ = make_controller(prefers_dark=True)
        controller.initialize()

        first = controller.set_preference(ThemePreference.LIGHT)
        second = controller.set_preference(ThemePreference.LIGHT)

        assert first == second
        assert storage.get_item(THEME_STORAGE_KEY) == "light"

    def test_host_change_reapplies_when_following_system(self):
        controller, query, _, applied = make_controller(prefers_dark=False)
        controller.initialize()

        query.report(True)

        assert controller.system_theme is SystemTheme.DARK
        assert controller.resolved_theme is ResolvedTheme.DARK
        assert applied == [ResolvedTheme.LIGHT, ResolvedTheme.DARK]
        assert controller.surface.classes == ["dark"]

    def test_host_change_ignored_with_explicit_preference(self):
        controller, query, _, applied = make_controller(stored="dark", prefers_dark=False)
        controller.initialize()

        query.report(True)
        query.report(False)

        assert controller.system_theme is SystemTheme.LIGHT
        assert controller.resolved_theme is ResolvedTheme.DARK
        assert applied == [ResolvedTheme.DARK]

    def test_switching_back_to_system_uses_latest_host_theme(self):
        controller, query, _, _ = make_controller(stored="light", prefers_dark=False)
        controller.initialize()

        query.report(True)
        controller.set_preference(ThemePreference.SYSTEM)

        assert controller.resolved_theme is ResolvedTheme.DARK

    def test_context_manager_unsubscribes(self):
        controller, query, _, _ = make_controller(prefers_dark=False)

        with controller:
            assert query.listener_count == 1
        assert query.listener_count == 0

    def test_broken_storage(self):
        controller, _, _, _ = make_controller(storage=BrokenStorage(), prefers_dark=True)
        controller.initialize()
        controller.set_preference(ThemePreference.LIGHT)

        assert controller.resolved_theme is ResolvedTheme.LIGHT
