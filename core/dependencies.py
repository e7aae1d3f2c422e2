"""Settings shared by the IPN listener, created by the app lifespan."""

from core.settings import Settings


class SettingsNotInitialized(RuntimeError):
    pass


_settings: Settings | None = None


def get_settings() -> Settings:
    """FastAPI dependency returning the listener's settings."""
    if _settings is None:
        raise SettingsNotInitialized(
            "IPN listener settings are not loaded; run the app through its lifespan "
            "or call init_settings() first"
        )
    return _settings


def init_settings(settings: Settings | None = None) -> Settings:
    global _settings
    _settings = settings or Settings()
    return _settings


def clear_settings():
    global _settings
    _settings = None
