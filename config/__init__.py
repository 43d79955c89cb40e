import importlib
import os
from types import ModuleType

_MODULES = {
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}

_REQUIRED_DB_KEYS = ("host", "user", "database")


def get_settings_module() -> str:
    """Pick the settings module from APP_ENV; anything unknown means development."""
    env = os.getenv("APP_ENV", "development").strip().lower()
    return _MODULES.get(env, "config.development")


def load_settings() -> ModuleType:
    settings = importlib.import_module(get_settings_module())
    db_config = getattr(settings, "DB_CONFIG", None) or {}
    missing = [k for k in _REQUIRED_DB_KEYS if not db_config.get(k)]
    if missing:
        raise RuntimeError(f"{settings.__name__}.DB_CONFIG is missing {', '.join(missing)}")
    return settings
