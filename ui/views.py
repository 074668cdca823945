"""Projection of dashboard state onto what the page shows."""

from __future__ import annotations

from dataclasses import dataclass

from core.state import DashboardState

HEADING = "台股 MACD 背離分析"
LIST_HEADING = "背離股票清單"
COLUMN_STOCK_ID = "股票代碼"
COLUMN_DATES = "背離日期"
ANALYZING_PLACEHOLDER = "正在分析股票，請稍候..."
LOADING_PLACEHOLDER = "正在載入股票清單..."
INPUT_PLACEHOLDER = "輸入股票代碼（例如 2330）"
CHART_BUTTON_LABEL = "查看 K 線圖"
CHART_PLACEHOLDER = "請選擇股票代碼以查看 K 線圖"
PROGRESS_TEMPLATE = "分析進度：{progress}%"


@dataclass(frozen=True)
class DashboardView:
    """Render-ready dashboard payload."""

    heading: str
    error: str | None
    progress_line: str | None
    rows: list[tuple[str, str]]
    list_placeholder: str | None
    selected_stock_id: str
    chart_src: str | None
    chart_placeholder: str | None


def build_dashboard_view(state: DashboardState) -> DashboardView:
    rows = [(record.stock_id, record.dates_label) for record in state.stocks]

    list_placeholder = None
    if not rows:
        list_placeholder = ANALYZING_PLACEHOLDER if state.is_running else LOADING_PLACEHOLDER

    return DashboardView(
        heading=HEADING,
        error=state.error or None,
        progress_line=PROGRESS_TEMPLATE.format(progress=state.progress) if state.is_running else None,
        rows=rows,
        list_placeholder=list_placeholder,
        selected_stock_id=state.selected_stock_id,
        chart_src=state.chart_url or None,
        chart_placeholder=None if state.chart_url else CHART_PLACEHOLDER,
    )
