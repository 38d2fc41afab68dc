from __future__ import annotations

import pytest

from config import get_settings_module, load_settings


@pytest.mark.parametrize(
    "env, module",
    [
        ("production", "config.production"),
        (" PROD ", "config.production"),
        ("testing", "config.testing"),
        ("staging", "config.development"),
    ],
)
def test_app_env_selects_settings(monkeypatch, env, module):
    monkeypatch.setenv("APP_ENV", env)
    assert get_settings_module() == module


def test_missing_app_env_means_development(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    assert get_settings_module() == "config.development"


def test_testing_settings_refetch_every_request():
    settings = load_settings()

    assert settings.TESTING is True
    assert settings.WORKSPACE_MAX_AGE == 0
