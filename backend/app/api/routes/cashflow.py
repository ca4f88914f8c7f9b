from __future__ import annotations

from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from backend.app.analytics.forecast import generate_forecast
from backend.app.analytics.monthly import aggregate_by_month
from backend.app.api.config import MAX_FORECAST_HORIZON, default_business_profile, forecast_horizon
from backend.app.clarity.anomalies import detect_anomalies
from backend.app.clarity.benchmarks import BusinessProfile, compute_benchmarks, generate_recommendations
from backend.app.domain.contracts import (
    AnomalyAlertContract,
    BenchmarkContract,
    BusinessProfileContract,
    DashboardResult,
    ForecastPointContract,
    HistoryPointContract,
    PeriodMetricsContract,
    TransactionContract,
    UploadResult,
    as_rows,
)
from backend.app.norma.ingest import transactions_from_rows
from backend.app.norma.normalize import Transaction
from backend.app.services import cashflow_service

router = APIRouter(prefix="/api/cashflow", tags=["cashflow"])


class TransactionsIn(BaseModel):
    transactions: List[TransactionContract] = Field(default_factory=list)


class ProfiledTransactionsIn(TransactionsIn):
    profile: Optional[BusinessProfileContract] = None


class ForecastIn(BaseModel):
    history: List[HistoryPointContract] = Field(default_factory=list)
    horizon: Optional[int] = Field(default=None, ge=0, le=MAX_FORECAST_HORIZON)


class AnomaliesIn(TransactionsIn):
    forecast: Optional[List[HistoryPointContract]] = None
    horizon: Optional[int] = Field(default=None, ge=0, le=MAX_FORECAST_HORIZON)


class DashboardIn(ProfiledTransactionsIn):
    horizon: Optional[int] = Field(default=None, ge=0, le=MAX_FORECAST_HORIZON)


class UploadIn(BaseModel):
    csv_text: str = Field(..., min_length=1)
    dedupe: bool = True


class MonthlyOut(BaseModel):
    monthly: List[PeriodMetricsContract]


class ForecastOut(BaseModel):
    forecast: List[ForecastPointContract]


class AnomaliesOut(BaseModel):
    alerts: List[AnomalyAlertContract]


class BenchmarksOut(BaseModel):
    profile: BusinessProfileContract
    benchmarks: List[BenchmarkContract]


class RecommendationsOut(BaseModel):
    profile: BusinessProfileContract
    recommendations: List[str]


def _transactions(req: TransactionsIn) -> List[Transaction]:
    return transactions_from_rows(as_rows(req.transactions))


def _profile(contract: Optional[BusinessProfileContract]) -> BusinessProfile:
    if contract is None:
        return default_business_profile()
    return BusinessProfile(type=contract.type, industry=contract.industry)


def _horizon(value: Optional[int]) -> int:
    return forecast_horizon() if value is None else value


@router.post("/monthly", response_model=MonthlyOut)
def post_monthly(req: TransactionsIn):
    monthly = aggregate_by_month(_transactions(req))
    return {"monthly": [asdict(m) for m in monthly]}


@router.post("/forecast", response_model=ForecastOut)
def post_forecast(req: ForecastIn):
    forecast = generate_forecast(as_rows(req.history), _horizon(req.horizon))
    return {"forecast": [asdict(p) for p in forecast]}


@router.post("/anomalies", response_model=AnomaliesOut)
def post_anomalies(req: AnomaliesIn):
    txns = _transactions(req)
    if req.forecast is None:
        forecast = generate_forecast(aggregate_by_month(txns), _horizon(req.horizon))
    else:
        forecast = as_rows(req.forecast)
    alerts = detect_anomalies(txns, forecast)
    return {"alerts": [asdict(a) for a in alerts]}


@router.post("/benchmarks", response_model=BenchmarksOut)
def post_benchmarks(req: ProfiledTransactionsIn):
    profile = _profile(req.profile)
    benchmarks = compute_benchmarks(_transactions(req), profile)
    return {"profile": asdict(profile), "benchmarks": [asdict(b) for b in benchmarks]}


@router.post("/recommendations", response_model=RecommendationsOut)
def post_recommendations(req: ProfiledTransactionsIn):
    profile = _profile(req.profile)
    return {
        "profile": asdict(profile),
        "recommendations": generate_recommendations(_transactions(req), profile),
    }


@router.post("/dashboard", response_model=DashboardResult)
def post_dashboard(req: DashboardIn):
    return cashflow_service.build_dashboard(
        _transactions(req),
        profile=_profile(req.profile),
        horizon=_horizon(req.horizon),
    )


@router.post("/upload", response_model=UploadResult)
def post_upload(req: UploadIn):
    try:
        return cashflow_service.ingest_csv(req.csv_text, dedupe=req.dedupe)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
