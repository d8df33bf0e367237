from __future__ import annotations

import pytest
from pydantic import ValidationError

from crpt_client.config.settings import AppConfig
from crpt_client.config.urls import get_create_document_url


def test_defaults():
    cfg = AppConfig()
    assert cfg.api_url == "https://ismp.crpt.ru/api/v3/lk/documents/create"
    assert cfg.request_limit == 10
    assert cfg.time_interval_seconds == 1.0
    assert cfg.connect_timeout_seconds == 10.0
    assert cfg.shutdown_grace_seconds == 60.0
    assert cfg.acquire_timeout_seconds is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CRPT_API_URL", "http://localhost:9000/create")
    monkeypatch.setenv("CRPT_REQUEST_LIMIT", "3")
    monkeypatch.setenv("CRPT_TIME_INTERVAL_SECONDS", "0.5")
    monkeypatch.setenv("CRPT_ACQUIRE_TIMEOUT_SECONDS", "30")
    cfg = AppConfig()
    assert cfg.api_url == "http://localhost:9000/create"
    assert cfg.request_limit == 3
    assert cfg.time_interval_seconds == 0.5
    assert cfg.acquire_timeout_seconds == 30.0


@pytest.mark.parametrize(
    "field, value",
    [
        ("request_limit", 0),
        ("time_interval_seconds", 0),
        ("time_interval_seconds", -1),
        ("shutdown_grace_seconds", -1),
        ("acquire_timeout_seconds", -0.5),
        ("api_url", ""),
    ],
)
def test_invalid_values_are_rejected(field, value):
    with pytest.raises(ValidationError):
        AppConfig(**{field: value})


def test_create_document_url():
    assert get_create_document_url("http://host/api/v3/") == "http://host/api/v3/lk/documents/create"
