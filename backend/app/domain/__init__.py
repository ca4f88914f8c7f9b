"""Domain contracts and shared types."""

from backend.app.domain.contracts import (  # noqa: F401
    AnomalyAlertContract,
    BenchmarkContract,
    BusinessProfileContract,
    DashboardResult,
    ForecastPointContract,
    HistoryPointContract,
    PeriodMetricsContract,
    TransactionContract,
    UploadResult,
)
