import argparse
import datetime
import logging
import os
import sys

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)

from config.settings import BACKEND_URL, LOGS_DIR, POLL_INTERVAL_SECONDS, UI_HOST, UI_PORT
from core.controller import DashboardController
from ui.app import create_app


def _configure_logging():
    """Configure file logging for local dashboard runs."""
    os.makedirs(LOGS_DIR, exist_ok=True)

    log_file = os.path.join(LOGS_DIR, "dashboard.log")
    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.handlers.clear()

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    root_logger.addHandler(file_handler)

    # Request logs from the dev server drown out polling messages.
    logging.getLogger("werkzeug").setLevel(logging.WARNING)


def main(argv: list[str] | None = None):
    _configure_logging()
    logger = logging.getLogger("divergence.runner")

    parser = argparse.ArgumentParser(description="Run the MACD divergence dashboard")
    parser.add_argument("--host", default=UI_HOST, help=f"Interface to bind (default: {UI_HOST})")
    parser.add_argument("--port", type=int, default=UI_PORT, help=f"Port to listen on (default: {UI_PORT})")
    args = parser.parse_args(argv)

    start_time = datetime.datetime.now(datetime.timezone.utc)
    logger.info("Dashboard started at %s against %s", start_time.isoformat(), BACKEND_URL)
    print(f"Polling {BACKEND_URL} every {POLL_INTERVAL_SECONDS:g}s")
    print(f"Open http://{args.host}:{args.port}/")

    exit_code = 0
    with DashboardController() as controller:
        app = create_app(controller=controller)
        try:
            app.run(host=args.host, port=args.port, debug=False)
        except KeyboardInterrupt:
            exit_code = 2
            logger.warning("Dashboard interrupted by user")
        except Exception as error:
            exit_code = 1
            logger.error("Fatal error: %s", error)

    end_time = datetime.datetime.now(datetime.timezone.utc)
    logger.info("Dashboard stopped at %s", end_time.isoformat())
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
