# tests/test_settings.py
"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from delerium_paste.core.settings import Settings


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("10.0.0.1,10.0.0.2", ["10.0.0.1", "10.0.0.2"]),
        (" 10.0.0.1 , 10.0.0.2 ,", ["10.0.0.1", "10.0.0.2"]),
        ('["10.0.0.1", "10.0.0.2"]', ["10.0.0.1", "10.0.0.2"]),
        ("", []),
    ],
)
def test_trusted_proxies_from_env(monkeypatch: pytest.MonkeyPatch, raw: str, expected: list[str]) -> None:
    monkeypatch.setenv("TRUSTED_PROXY_IPS", raw)
    assert Settings(_env_file=None).trusted_proxy_ips == expected


def test_cors_origins_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CORS_ORIGINS", "https://paste.example,https://alt.example")
    assert Settings(_env_file=None).cors_origins == [
        "https://paste.example",
        "https://alt.example",
    ]


def test_list_settings_by_keyword() -> None:
    settings = Settings(_env_file=None, TRUSTED_PROXY_IPS=["192.0.2.10"])
    assert settings.trusted_proxy_ips == ["192.0.2.10"]


def test_malformed_json_list_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRUSTED_PROXY_IPS", '["10.0.0.1",')
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
