"""Tests for the dashboard view projection and the divergence table export."""

import io

import pandas as pd

from core.export import EXPORT_COLUMNS, divergences_csv, divergences_frame
from core.state import DashboardState
from ui.views import (
    ANALYZING_PLACEHOLDER,
    CHART_PLACEHOLDER,
    LOADING_PLACEHOLDER,
    build_dashboard_view,
)


class TestDashboardView:
    def test_rows_follow_backend_order(self, sample_records):
        view = build_dashboard_view(DashboardState(stocks=tuple(sample_records)))
        assert view.rows == [("2330", "2024-01-05, 2024-02-10"), ("2317", "2024-03-01")]
        assert view.list_placeholder is None

    def test_placeholder_while_running(self):
        view = build_dashboard_view(DashboardState(is_running=True, progress=12))
        assert view.list_placeholder == ANALYZING_PLACEHOLDER
        assert view.progress_line == "分析進度：12%"

    def test_placeholder_while_loading(self):
        view = build_dashboard_view(DashboardState())
        assert view.list_placeholder == LOADING_PLACEHOLDER
        assert view.progress_line is None

    def test_no_error_line_when_empty(self):
        assert build_dashboard_view(DashboardState()).error is None

    def test_chart_placeholder(self):
        view = build_dashboard_view(DashboardState())
        assert view.chart_src is None
        assert view.chart_placeholder == CHART_PLACEHOLDER

    def test_chart_src(self):
        view = build_dashboard_view(DashboardState(chart_url="https://backend.test/charts/2330.png"))
        assert view.chart_src == "https://backend.test/charts/2330.png"
        assert view.chart_placeholder is None


class TestExport:
    def test_frame_columns_and_order(self, sample_records):
        frame = divergences_frame(sample_records)
        assert list(frame.columns) == EXPORT_COLUMNS
        assert frame["StockId"].tolist() == ["2330", "2317"]
        assert frame.loc[0, "DivergenceCount"] == 2
        assert frame.loc[0, "LatestDivergence"] == "2024-02-10"

    def test_empty_frame_keeps_schema(self):
        frame = divergences_frame([])
        assert frame.empty
        assert list(frame.columns) == EXPORT_COLUMNS

    def test_csv(self, sample_records):
        loaded = pd.read_csv(io.StringIO(divergences_csv(sample_records)), dtype={"StockId": str})
        assert loaded["StockId"].tolist() == ["2330", "2317"]
        assert loaded.loc[0, "DivergentDates"] == "2024-01-05, 2024-02-10"
