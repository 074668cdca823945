"""HTTP client for the MACD divergence analysis backend."""

from __future__ import annotations

import http.client
import json
import logging
import math
import urllib.error
import urllib.request
from typing import Any
from urllib.parse import quote

from config.settings import BACKEND_URL
from core.state import AnalysisStatus, DivergenceRecord

LOGGER = logging.getLogger("divergence.backend")


class BackendError(Exception):
    """Transport, HTTP status, or payload failure talking to the backend."""


def _is_number(value: Any) -> bool:
    """Finite int or float; JSON NaN/Infinity and booleans are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not isinstance(value, float) or math.isfinite(value)


class BackendClient:
    """Read-only access to the three backend endpoints."""

    def __init__(self, base_url: str = BACKEND_URL) -> None:
        self.base_url = base_url.rstrip("/")

    def _get_json(self, path: str) -> Any:
        """GET a backend path and decode its JSON body."""
        url = f"{self.base_url}{path}"
        LOGGER.debug("GET %s", url)
        request = urllib.request.Request(
            url,
            headers={"User-Agent": "Mozilla/5.0", "Accept": "application/json"},
        )
        try:
            with urllib.request.urlopen(request) as response:
                payload = response.read()
        except urllib.error.HTTPError as exc:
            raise BackendError(f"Request failed with status code {exc.code}") from exc
        except urllib.error.URLError as exc:
            raise BackendError(str(exc.reason)) from exc
        except (TimeoutError, ConnectionError, OSError, http.client.HTTPException) as exc:
            raise BackendError(str(exc) or exc.__class__.__name__) from exc

        try:
            return json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise BackendError(f"Malformed response from {path}: {exc}") from exc

    def fetch_divergences(self) -> list[DivergenceRecord]:
        body = self._get_json("/stocks")
        stocks = body.get("stocks") if isinstance(body, dict) else None
        if not isinstance(stocks, list):
            raise BackendError("Malformed response from /stocks: missing 'stocks' list")

        records: list[DivergenceRecord] = []
        for item in stocks:
            if not isinstance(item, dict):
                raise BackendError("Malformed response from /stocks: entry is not an object")
            stock_id = item.get("stockId")
            dates = item.get("divergentDates")
            if not isinstance(stock_id, str) or not isinstance(dates, list):
                raise BackendError("Malformed response from /stocks: bad stock entry")
            records.append(DivergenceRecord(stock_id=stock_id, divergent_dates=tuple(str(d) for d in dates)))
        return records

    def fetch_status(self) -> AnalysisStatus:
        body = self._get_json("/progress")
        if not isinstance(body, dict):
            raise BackendError("Malformed response from /progress: not an object")
        progress = body.get("progress")
        is_running = body.get("is_running")
        if not _is_number(progress) or not isinstance(is_running, bool):
            raise BackendError("Malformed response from /progress: bad progress fields")
        return AnalysisStatus(progress=max(0, min(100, int(progress))), is_running=is_running)

    def fetch_chart_path(self, stock_id: str) -> str:
        """Return the backend-relative chart path for one stock."""
        path = f"/stock/{quote(stock_id, safe='')}"
        body = self._get_json(path)
        chart_url = body.get("chartUrl") if isinstance(body, dict) else None
        if not isinstance(chart_url, str):
            raise BackendError(f"Malformed response from {path}: missing 'chartUrl'")
        return chart_url

    def absolute_url(self, relative_path: str) -> str:
        """Compose a backend-relative path with the base address."""
        if relative_path and not relative_path.startswith("/"):
            relative_path = f"/{relative_path}"
        return f"{self.base_url}{relative_path}"
