from __future__ import annotations

import pytest

from eumgrid.config import Settings, get_settings
from eumgrid.errors import ConfigurationError


def test_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.api_base_url == "http://localhost:8081/api"
    assert settings.timeout_seconds == 10.0
    assert settings.default_page_size == 50
    assert settings.no_refresh_paths == frozenset({"/auth/refresh", "/auth/login"})


def test_environment_uses_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EUMGRID_API_BASE_URL", "https://grid.example.com/api")
    monkeypatch.setenv("EUMGRID_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("EUMGRID_REFRESH_PATH", "/token/renew")

    settings = get_settings()

    assert settings.api_base_url == "https://grid.example.com/api"
    assert settings.timeout_seconds == 2.5
    assert "/token/renew" in settings.no_refresh_paths


def test_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EUMGRID_DEFAULT_PAGE_SIZE", "20")

    assert get_settings(default_page_size=100).default_page_size == 100


@pytest.mark.parametrize("overrides", [{"timeout_seconds": 0}, {"default_page_size": -1}])
def test_invalid_values_raise_configuration_error(overrides: dict[str, object]) -> None:
    with pytest.raises(ConfigurationError):
        get_settings(**overrides)
