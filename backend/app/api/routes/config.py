from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from backend.app.api.config import MAX_FORECAST_HORIZON, default_business_profile, forecast_horizon

router = APIRouter(prefix="/api", tags=["config"])


class ConfigOut(BaseModel):
    default_forecast_horizon: int
    max_forecast_horizon: int
    default_business_type: str
    default_industry: str


@router.get("/config", response_model=ConfigOut)
def get_config() -> ConfigOut:
    profile = default_business_profile()
    return ConfigOut(
        default_forecast_horizon=forecast_horizon(),
        max_forecast_horizon=MAX_FORECAST_HORIZON,
        default_business_type=profile.type,
        default_industry=profile.industry,
    )
