"""Test environment-driven configuration."""
from decimal import Decimal

import pytest

from patterns.domain_config import AltarPricingConfig
from verticals.altars.config import load_config


def test_defaults():
    config = AltarPricingConfig.default()
    assert config.cache.enabled is True
    assert config.cache.ttl_long == 3600
    assert config.cache.ttl_medium == 1800
    assert config.cache.key_prefix == ""
    assert config.pricing.currency == "MXN"
    assert config.pricing.minor_unit == Decimal("0.01")
    assert config.database.url.startswith("postgresql+asyncpg://")


def test_from_env(monkeypatch):
    monkeypatch.setenv("ALTARS_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("ALTARS_CACHE_ENABLED", "false")
    monkeypatch.setenv("ALTARS_REDIS_URL", "redis://cache:6379/1")
    monkeypatch.setenv("ALTARS_CACHE_KEY_PREFIX", "staging:")
    monkeypatch.setenv("ALTARS_CACHE_TTL_MEDIUM", "600")
    monkeypatch.setenv("ALTARS_CACHE_TIMEOUT_SECONDS", "0.25")
    monkeypatch.setenv("ALTARS_CACHE_BREAKER_THRESHOLD", "3")
    monkeypatch.setenv("ALTARS_LOG_JSON", "no")

    config = load_config()
    assert config.database.url == "sqlite+aiosqlite:///:memory:"
    assert config.cache.enabled is False
    assert config.cache.redis_url == "redis://cache:6379/1"
    assert config.cache.key_prefix == "staging:"
    assert config.cache.ttl_medium == 600
    assert config.cache.ttl_long == 3600
    assert config.cache.timeout_seconds == 0.25
    assert config.cache.breaker_failure_threshold == 3
    assert config.logging.json_output is False


def test_custom_prefix(monkeypatch):
    monkeypatch.setenv("TEST_CURRENCY", "USD")
    monkeypatch.setenv("TEST_CURRENCY_SYMBOL", "US$")
    pricing = AltarPricingConfig.from_env(prefix="TEST_").pricing
    assert pricing.currency == "USD"
    assert pricing.currency_symbol == "US$"


@pytest.mark.parametrize(
    "name,value",
    [
        ("ALTARS_CACHE_TTL_LONG", "0"),
        ("ALTARS_CACHE_TTL_MEDIUM", "soon"),
        ("ALTARS_CACHE_TIMEOUT_SECONDS", "-1"),
        ("ALTARS_CACHE_BREAKER_THRESHOLD", "0"),
    ],
)
def test_invalid_values_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        load_config()


def test_config_is_frozen():
    config = AltarPricingConfig.default()
    with pytest.raises(AttributeError):
        config.cache.ttl_long = 1
