from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator


class TransactionContract(BaseModel):
    # loose on purpose: values are coerced by norma.normalize
    date: Optional[str] = None
    amount: Union[float, str, None] = None
    type: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None


class TransactionOut(BaseModel):
    date: Optional[str] = None
    amount: float
    type: Literal["income", "expense"]
    category: str
    description: str = ""


class PeriodMetricsContract(BaseModel):
    month: str
    period: str
    income: float
    expense: float
    balance: float


class HistoryPointContract(BaseModel):
    period: Optional[str] = None
    name: Optional[str] = None
    month: Optional[str] = Field(default=None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$")
    income: float = 0.0
    expense: float = 0.0
    predicted: Optional[bool] = None

    @model_validator(mode="after")
    def require_label(self) -> "HistoryPointContract":
        if not (self.period or self.name or self.month):
            raise ValueError("each history point needs a period, name, or month")
        return self


class ForecastPointContract(BaseModel):
    month: Optional[str] = None
    period: str
    income: float
    expense: float
    predicted: Optional[bool] = None


class AnomalyAlertContract(BaseModel):
    kind: Literal["revenue_drop", "expense_spike", "balance_warning"]
    message: str
    severity: Literal["low", "medium", "high"]
    detected_at: datetime
    recommendation: Optional[str] = None


class BusinessProfileContract(BaseModel):
    type: str = Field(default="SaaS", min_length=1, max_length=64)
    industry: str = Field(default="Technology", min_length=1, max_length=64)


class BenchmarkContract(BaseModel):
    category: str
    actual: float
    average: float
    difference: float


class ForecastSummaryContract(BaseModel):
    total_income: float
    total_expense: float
    net_profit: float
    forecast_income: float
    forecast_expense: float
    forecast_net: float


class DashboardMeta(BaseModel):
    txn_count: int
    months_covered: int
    horizon: int
    profile: BusinessProfileContract
    generated_at: datetime


class DashboardResult(BaseModel):
    monthly: List[PeriodMetricsContract]
    forecast: List[ForecastPointContract]
    alerts: List[AnomalyAlertContract]
    benchmarks: List[BenchmarkContract]
    recommendations: List[str]
    summary: ForecastSummaryContract
    meta: DashboardMeta


class UploadResult(BaseModel):
    transactions: List[TransactionOut]
    preview: List[TransactionOut]
    errors: List[str]
    duplicates: List[TransactionOut]


def as_rows(items: List[BaseModel]) -> List[dict[str, Any]]:
    return [item.model_dump() for item in items]
