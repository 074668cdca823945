"""Local Flask UI for the MACD divergence dashboard."""

from __future__ import annotations

import atexit
import logging
from pathlib import Path
import sys
from typing import Any
import weakref

from flask import Flask, Response, got_request_exception, jsonify, redirect, render_template, request, url_for

# Make `python ui/app.py` work without external PYTHONPATH setup.
THIS_DIR = Path(__file__).resolve().parent
PROJECT_DIR = THIS_DIR.parent
if str(PROJECT_DIR) not in sys.path:
    sys.path.insert(0, str(PROJECT_DIR))

from config.settings import LOGS_DIR, UI_HOST, UI_PORT
from core.controller import DashboardController
from core.export import divergences_csv
from ui import views

UI_DIR = THIS_DIR

# Controllers served by any app in this process, stopped once at exit.
_SERVED_CONTROLLERS: "weakref.WeakSet[DashboardController]" = weakref.WeakSet()


def _deactivate_served_controllers() -> None:
    for controller in list(_SERVED_CONTROLLERS):
        controller.deactivate()


atexit.register(_deactivate_served_controllers)


def _configure_ui_logger() -> logging.Logger:
    """Configure file logger for the UI app and its polling threads."""
    logs_dir = Path(LOGS_DIR)
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / "ui.log"

    logger = logging.getLogger("divergence.ui")
    logger.setLevel(logging.INFO)
    logger.propagate = False

    existing = None
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler):
            existing = handler
            break

    if existing is None:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
        logger.addHandler(handler)

    # Controller and backend loggers share the UI log file.
    for name in ("divergence.controller", "divergence.backend"):
        child = logging.getLogger(name)
        child.setLevel(logging.INFO)
        for handler in logger.handlers:
            if handler not in child.handlers:
                child.addHandler(handler)
        child.propagate = False

    return logger


def create_app(controller: DashboardController | None = None, start_polling: bool = True) -> Flask:
    """Create and configure the local Flask application."""
    app = Flask(__name__, template_folder=str(UI_DIR / "templates"))
    app.config["TEMPLATES_AUTO_RELOAD"] = True

    logger = _configure_ui_logger()
    controller = controller or DashboardController()
    app.extensions["dashboard_controller"] = controller
    _SERVED_CONTROLLERS.add(controller)
    logger.info("UI app initialized")

    refresh_ms = int(controller.poll_interval * 1000)

    def _ensure_polling() -> None:
        """Start backend polling on first use of the dashboard."""
        if start_polling and not controller.is_active:
            try:
                controller.activate()
            except RuntimeError as exc:
                logger.warning("Polling not started: %s", exc)

    def _template_context() -> dict[str, Any]:
        return {
            "view": views.build_dashboard_view(controller.snapshot()),
            "list_heading": views.LIST_HEADING,
            "column_stock_id": views.COLUMN_STOCK_ID,
            "column_dates": views.COLUMN_DATES,
            "input_placeholder": views.INPUT_PLACEHOLDER,
            "chart_button_label": views.CHART_BUTTON_LABEL,
            "refresh_ms": refresh_ms,
        }

    @app.route("/")
    def index() -> str:
        """Dashboard page with divergence table, progress and chart lookup."""
        _ensure_polling()
        return render_template("index.html", **_template_context())

    @app.route("/fragment")
    def dashboard_fragment() -> str:
        """Live part of the page, re-fetched by the browser on every poll."""
        _ensure_polling()
        return render_template("_dashboard.html", **_template_context())

    @app.route("/api/state")
    def state_api():
        _ensure_polling()
        return jsonify(controller.snapshot().to_dict())

    @app.route("/chart", methods=["POST"])
    def chart_lookup():
        """Look up the chart for the submitted stock identifier."""
        controller.fetch_chart_for_stock(request.form.get("stock_id", ""))
        return redirect(url_for("index"))

    @app.route("/api/chart/<path:stock_id>")
    def chart_api(stock_id: str):
        state = controller.fetch_chart_for_stock(stock_id)
        return jsonify(state.to_dict())

    @app.route("/export/divergences.csv")
    def export_divergences():
        records = controller.snapshot().stocks
        return Response(
            divergences_csv(records),
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=divergences.csv"},
        )

    def _log_unhandled_exception(sender: Flask, exception: Exception, **_: Any) -> None:
        logger.exception("Unhandled UI exception: %s", exception)

    got_request_exception.connect(_log_unhandled_exception, app)

    return app


app = create_app()


if __name__ == "__main__":
    app.run(host=UI_HOST, port=UI_PORT, debug=False)
