"""Tests for settings validation."""

import pytest
from pydantic import ValidationError

from cafe_backoffice.config import Settings


def test_defaults() -> None:
    settings = Settings(database_url="sqlite+pysqlite:///:memory:")

    assert settings.sale_reference_prefix == "TXN"
    assert settings.partial_deductions is True
    assert settings.alert_dedupe_window_hours == 24
    assert settings.expiry_alert_days == 7
    assert settings.forecast_window_days == 30
    assert settings.reorder_round_to == 10
    assert settings.stockout_sentinel_days == 999


def test_log_level_is_normalized() -> None:
    assert Settings(log_level="debug").log_level == "DEBUG"


def test_invalid_log_level() -> None:
    with pytest.raises(ValidationError):
        Settings(log_level="chatty")


def test_rounding_step_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        Settings(reorder_round_to=0)


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARTIAL_DEDUCTIONS", "false")
    monkeypatch.setenv("SALE_REFERENCE_PREFIX", "POS")

    settings = Settings()

    assert settings.partial_deductions is False
    assert settings.sale_reference_prefix == "POS"
