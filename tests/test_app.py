"""
Application wiring: settings lifecycle and build-time options.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from core.dependencies import (
    SettingsNotInitialized,
    clear_settings,
    get_settings,
    init_settings,
)
from core.settings import Settings
from main import create_app


def test_get_settings_before_startup_raises():
    clear_settings()
    with pytest.raises(SettingsNotInitialized, match="lifespan"):
        get_settings()


def test_init_settings_accepts_explicit_settings(mock_settings):
    try:
        assert init_settings(mock_settings) is mock_settings
        assert get_settings() is mock_settings
    finally:
        clear_settings()


def test_lifespan_loads_and_clears_settings():
    app = create_app(Settings(METRICS_ENABLED=False))

    with TestClient(app) as client:
        assert get_settings().APP_NAME == "Test IPN Listener"
        assert client.get("/health").status_code == 200

    with pytest.raises(SettingsNotInitialized):
        get_settings()


def test_metrics_disabled_skips_instrumentation():
    with patch("main.init_metrics") as mock_init_metrics:
        app = create_app(Settings(METRICS_ENABLED=False))

    mock_init_metrics.assert_not_called()
    with TestClient(app) as client:
        assert client.get("/metrics").status_code == 404


def test_metrics_enabled_instruments_app():
    with patch("main.init_metrics") as mock_init_metrics:
        app = create_app(Settings(METRICS_ENABLED=True))

    mock_init_metrics.assert_called_once_with(app)


@pytest.mark.parametrize("debug", [True, False])
def test_debug_setting_applied(debug):
    app = create_app(Settings(DEBUG=debug, METRICS_ENABLED=False))
    assert app.debug is debug
