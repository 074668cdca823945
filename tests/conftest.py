"""Shared fixtures for dashboard tests."""

import sys
import threading
from pathlib import Path

import pytest

# Ensure project root is importable
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from core.backend_client import BackendClient, BackendError
from core.state import AnalysisStatus, DivergenceRecord

TEST_BASE_URL = "https://backend.test"


class FakeBackendClient(BackendClient):
    """Scripted backend: each fetch returns (or raises) the configured value."""

    def __init__(self):
        super().__init__(base_url=TEST_BASE_URL)
        self.divergences = []
        self.status = AnalysisStatus(progress=0, is_running=False)
        self.chart_paths = {}
        self.calls = []
        self._lock = threading.Lock()

    def _record(self, call):
        with self._lock:
            self.calls.append(call)

    def _resolve(self, value):
        if isinstance(value, Exception):
            raise value
        return value

    def fetch_divergences(self):
        self._record("stocks")
        return self._resolve(self.divergences)

    def fetch_status(self):
        self._record("progress")
        return self._resolve(self.status)

    def fetch_chart_path(self, stock_id):
        self._record(f"stock/{stock_id}")
        if stock_id not in self.chart_paths:
            raise BackendError("Request failed with status code 404")
        return self._resolve(self.chart_paths[stock_id])

    def call_count(self):
        with self._lock:
            return len(self.calls)


@pytest.fixture
def fake_client():
    return FakeBackendClient()


@pytest.fixture
def sample_records():
    return [
        DivergenceRecord(stock_id="2330", divergent_dates=("2024-01-05", "2024-02-10")),
        DivergenceRecord(stock_id="2317", divergent_dates=("2024-03-01",)),
    ]
