from __future__ import annotations

import pytest

from config import DevelopmentConfig, ProductionConfig, StagingConfig, get_config


def test_get_config_defaults_to_development(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)

    assert get_config() is DevelopmentConfig


def test_get_config_reads_app_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "Production")

    assert get_config() is ProductionConfig


def test_unknown_environment_raises():
    with pytest.raises(KeyError):
        get_config("qa")


def test_base_url_is_built_from_parts():
    assert DevelopmentConfig.rates_api_base_url() == "https://api.dolarapp.dev/v1"


def test_staging_emulates_currency_list(monkeypatch):
    monkeypatch.setattr(StagingConfig, "CURRENCY_LOAD_MOCK", " Enabled ")

    assert get_config("staging").CURRENCY_LOAD_MOCK == "enabled"


def test_emulate_with_delay_is_accepted(monkeypatch):
    monkeypatch.setattr(DevelopmentConfig, "CURRENCY_LOAD_MOCK", "emulate:250")

    assert get_config("development").CURRENCY_LOAD_MOCK == "emulate:250"


def test_invalid_mock_value_rejected(monkeypatch):
    monkeypatch.setattr(DevelopmentConfig, "CURRENCY_LOAD_MOCK", "sometimes")

    with pytest.raises(ValueError, match="CURRENCY_LOAD_MOCK"):
        get_config("development")


def test_attempt_counts_must_be_positive(monkeypatch):
    monkeypatch.setattr(DevelopmentConfig, "CURRENCIES_API_MAX_RETRIES", 0)

    with pytest.raises(ValueError, match="at least 1"):
        get_config("development")
