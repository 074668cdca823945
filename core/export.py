"""Tabular views of the divergence list."""

from __future__ import annotations

from typing import Iterable

import pandas as pd

from core.state import DivergenceRecord

EXPORT_COLUMNS = ["StockId", "DivergentDates", "DivergenceCount", "LatestDivergence"]


def divergences_frame(records: Iterable[DivergenceRecord]) -> pd.DataFrame:
    """One row per flagged stock, in backend order."""
    rows = [
        {
            "StockId": record.stock_id,
            "DivergentDates": record.dates_label,
            "DivergenceCount": len(record.divergent_dates),
            "LatestDivergence": max(record.divergent_dates) if record.divergent_dates else "",
        }
        for record in records
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def divergences_csv(records: Iterable[DivergenceRecord]) -> str:
    return divergences_frame(records).to_csv(index=False)
