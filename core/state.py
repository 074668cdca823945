"""Dashboard state and the pure transitions applied to it."""

from __future__ import annotations

from dataclasses import dataclass, replace

ERROR_KIND_DIVERGENCE = "divergence"
ERROR_KIND_CHART = "chart"

DIVERGENCE_ERROR_TEMPLATE = "無法獲取背離股票清單：{reason}"
CHART_ERROR_TEMPLATE = "無法獲取圖表：{reason}"
MISSING_STOCK_ID_ERROR = "請輸入股票代碼"


@dataclass(frozen=True)
class DivergenceRecord:
    """One stock flagged by the backend with its divergence dates."""

    stock_id: str
    divergent_dates: tuple[str, ...]

    @property
    def dates_label(self) -> str:
        return ", ".join(self.divergent_dates)


@dataclass(frozen=True)
class AnalysisStatus:
    """Backend batch-analysis progress."""

    progress: int
    is_running: bool


@dataclass(frozen=True)
class DashboardState:
    """Everything the dashboard renders."""

    stocks: tuple[DivergenceRecord, ...] = ()
    selected_stock_id: str = ""
    chart_url: str = ""
    error: str = ""
    error_kind: str = ""
    progress: int = 0
    is_running: bool = False

    def to_dict(self) -> dict:
        return {
            "stocks": [
                {"stockId": record.stock_id, "divergentDates": list(record.divergent_dates)}
                for record in self.stocks
            ],
            "selectedStockId": self.selected_stock_id,
            "chartUrl": self.chart_url,
            "error": self.error,
            "progress": self.progress,
            "is_running": self.is_running,
        }


def _clear_error_of_kind(state: DashboardState, kind: str) -> DashboardState:
    if state.error_kind != kind:
        return state
    return replace(state, error="", error_kind="")


def apply_divergence_list(state: DashboardState, records: list[DivergenceRecord]) -> DashboardState:
    """Replace the list wholesale and clear a previous list error."""
    cleared = _clear_error_of_kind(state, ERROR_KIND_DIVERGENCE)
    return replace(cleared, stocks=tuple(records))


def apply_divergence_failure(state: DashboardState, reason: str) -> DashboardState:
    """Surface a list fetch failure; the existing list stays visible."""
    return replace(
        state,
        error=DIVERGENCE_ERROR_TEMPLATE.format(reason=reason),
        error_kind=ERROR_KIND_DIVERGENCE,
    )


def apply_status(state: DashboardState, status: AnalysisStatus) -> DashboardState:
    return replace(state, progress=status.progress, is_running=status.is_running)


def apply_selected_stock(state: DashboardState, stock_id: str) -> DashboardState:
    return replace(state, selected_stock_id=stock_id)


def apply_missing_stock_id(state: DashboardState) -> DashboardState:
    return replace(state, error=MISSING_STOCK_ID_ERROR, error_kind=ERROR_KIND_CHART)


def apply_chart(state: DashboardState, chart_url: str) -> DashboardState:
    """Show a new chart and clear a previous chart lookup error."""
    cleared = _clear_error_of_kind(state, ERROR_KIND_CHART)
    return replace(cleared, chart_url=chart_url)


def apply_chart_failure(state: DashboardState, reason: str) -> DashboardState:
    """Surface a chart lookup failure; the previous chart stays visible."""
    return replace(
        state,
        error=CHART_ERROR_TEMPLATE.format(reason=reason),
        error_kind=ERROR_KIND_CHART,
    )
