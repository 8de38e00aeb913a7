"""Tests for environment-driven configuration."""

import pytest

from logiroute.config import Config
from logiroute.resolver import RoutingPolicy
from logiroute.scheduler import RetryInterval


def test_defaults_feed_policy_and_interval(monkeypatch):
    monkeypatch.setattr(Config, "PREFER_DIRECT_SUPPLY", False)
    monkeypatch.setattr(Config, "MAX_ROAD_DISTANCE", 42)
    monkeypatch.setattr(Config, "RETRY_INTERVAL_SECONDS", 7.5)

    policy = RoutingPolicy()
    assert policy.prefer_direct_supply is False
    assert policy.max_road_distance == 42
    assert RetryInterval().seconds == 7.5


def test_validate_rejects_bad_values(monkeypatch):
    monkeypatch.setattr(Config, "RETRY_INTERVAL_SECONDS", 0.0)
    with pytest.raises(ValueError, match="LOGIROUTE_RETRY_INTERVAL"):
        Config.validate()

    monkeypatch.setattr(Config, "RETRY_INTERVAL_SECONDS", 5.0)
    monkeypatch.setattr(Config, "MAX_ROAD_DISTANCE", -1)
    with pytest.raises(ValueError, match="LOGIROUTE_MAX_ROAD_DISTANCE"):
        Config.validate()

    monkeypatch.setattr(Config, "MAX_ROAD_DISTANCE", 0)
    with pytest.raises(ValueError, match="LOGIROUTE_MAX_ROAD_DISTANCE"):
        Config.validate()


def test_routing_policy_rejects_non_positive_cap(monkeypatch):
    with pytest.raises(ValueError, match="max_road_distance"):
        RoutingPolicy(prefer_direct_supply=True, max_road_distance=-1)
    with pytest.raises(ValueError, match="max_road_distance"):
        RoutingPolicy(prefer_direct_supply=True, max_road_distance=0)

    # A bad environment value fails when the policy is built, not mid-refresh
    monkeypatch.setattr(Config, "MAX_ROAD_DISTANCE", -1)
    with pytest.raises(ValueError):
        RoutingPolicy()


def test_display_lists_settings():
    text = Config.display()

    assert text.startswith("Logiroute Configuration:")
    assert "Retry Interval:" in text
    assert "Prefer Direct Supply:" in text
