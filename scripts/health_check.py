#!/usr/bin/env python3
"""Backend health check: probe each analysis endpoint once and report."""

import os
import sys

# Add project to path
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)

from core.backend_client import BackendClient, BackendError
from core.export import divergences_frame


def check_divergence_list(client, preview_rows=10):
    """Fetch /stocks and preview the flagged stocks."""
    print("\n📊 Divergence List (/stocks)")
    print("=" * 70)

    try:
        records = client.fetch_divergences()
    except BackendError as e:
        print(f"  ✗ Error: {e}")
        return False, []

    print(f"  ✓ {len(records)} stocks flagged")
    if records:
        frame = divergences_frame(records).head(preview_rows)
        for line in frame.to_string(index=False).splitlines():
            print(f"  {line}")
    return True, records


def check_progress(client):
    """Fetch /progress and print the batch job state."""
    print("\n⏳ Analysis Progress (/progress)")
    print("=" * 70)

    try:
        status = client.fetch_status()
    except BackendError as e:
        print(f"  ✗ Error: {e}")
        return False

    state = "running" if status.is_running else "idle"
    print(f"  ✓ {status.progress}% ({state})")
    return True


def check_chart(client, stock_id):
    """Look up one chart to confirm the chart endpoint answers."""
    print(f"\n🖼  Chart Lookup (/stock/{stock_id})")
    print("=" * 70)

    try:
        chart_path = client.fetch_chart_path(stock_id)
    except BackendError as e:
        print(f"  ✗ Error: {e}")
        return False

    print(f"  ✓ {client.absolute_url(chart_path)}")
    return True


def main(argv=None):
    """Run all checks."""
    argv = sys.argv[1:] if argv is None else argv
    client = BackendClient()

    print("\n" + "=" * 70)
    print("  MACD Divergence Backend Health Check")
    print(f"  {client.base_url}")
    print("=" * 70)

    list_ok, records = check_divergence_list(client)
    progress_ok = check_progress(client)

    chart_stock_id = argv[0] if argv else (records[0].stock_id if records else None)
    if chart_stock_id:
        chart_ok = check_chart(client, chart_stock_id)
    else:
        print("\n🖼  Chart Lookup skipped: no stock identifier available.")
        chart_ok = True

    all_pass = list_ok and progress_ok and chart_ok
    print("\n" + "=" * 70)
    if all_pass:
        print("✓ All checks passed. Backend is healthy!")
    else:
        print("⚠ Some checks failed. Review above for details.")
    print("=" * 70 + "\n")

    return 0 if all_pass else 1


if __name__ == "__main__":
    sys.exit(main())
