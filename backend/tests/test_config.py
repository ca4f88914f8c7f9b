from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[2]))

from backend.app.api import config  # noqa: E402
from backend.app.clarity.benchmarks import BusinessProfile  # noqa: E402


def test_forecast_horizon_default_and_override(monkeypatch):
    monkeypatch.delenv("FORECAST_HORIZON", raising=False)
    assert config.forecast_horizon() == 3

    monkeypatch.setenv("FORECAST_HORIZON", "6")
    assert config.forecast_horizon() == 6


@pytest.mark.parametrize("raw", ["-1", "25", "three"])
def test_forecast_horizon_rejects_bad_values(monkeypatch, raw):
    monkeypatch.setenv("FORECAST_HORIZON", raw)

    with pytest.raises(RuntimeError, match="FORECAST_HORIZON"):
        config.forecast_horizon()


def test_default_business_profile_from_env(monkeypatch):
    monkeypatch.delenv("DEFAULT_BUSINESS_TYPE", raising=False)
    monkeypatch.delenv("DEFAULT_INDUSTRY", raising=False)
    assert config.default_business_profile() == BusinessProfile(type="SaaS", industry="Technology")

    monkeypatch.setenv("DEFAULT_BUSINESS_TYPE", "Technology")
    assert config.default_business_profile().type == "Technology"


def test_cors_origins(monkeypatch):
    monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
    assert config.cors_origins() == list(config.LOCAL_DEV_ORIGINS)

    monkeypatch.setenv("CORS_ALLOW_ORIGINS", " https://app.example.com , http://localhost:5173 ")
    assert config.cors_origins() == ["https://app.example.com", "http://localhost:5173"]

    monkeypatch.setenv("CORS_ALLOW_ORIGINS", " , ")
    with pytest.raises(RuntimeError):
        config.cors_origins()
