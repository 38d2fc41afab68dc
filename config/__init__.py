import importlib
import os
from types import ModuleType

_ENVIRONMENTS = {
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}


def get_settings_module() -> str:
    """Settings module for APP_ENV; anything unrecognised means development."""

    return _ENVIRONMENTS.get(os.getenv("APP_ENV", "development").strip().lower(), "config.development")


def load_settings() -> ModuleType:
    return importlib.import_module(get_settings_module())
