import os

# Project root directory
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Remote MACD divergence analysis backend (no trailing slash)
BACKEND_URL = "https://bullishmacddivergence-b4738fb587c2.herokuapp.com"

# Backend polling cadence for the divergence list and analysis progress
POLL_INTERVAL_SECONDS = 2.0

# Log file location
LOGS_DIR = os.path.join(BASE_DIR, "logs")

# Local dashboard server defaults
UI_HOST = "127.0.0.1"
UI_PORT = 5000
