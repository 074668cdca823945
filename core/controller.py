"""Dashboard controller: owns UI state and polls the analysis backend."""

from __future__ import annotations

import concurrent.futures as futures
import logging
import threading
from typing import Any, Callable

from config.settings import POLL_INTERVAL_SECONDS
from core.backend_client import BackendClient, BackendError
from core.state import (
    DashboardState,
    apply_chart,
    apply_chart_failure,
    apply_divergence_failure,
    apply_divergence_list,
    apply_missing_stock_id,
    apply_selected_stock,
    apply_status,
)

LOGGER = logging.getLogger("divergence.controller")

Listener = Callable[[DashboardState], None]


def _log_failed_poll(future: futures.Future) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        LOGGER.error("Polling task crashed: %s", exc, exc_info=exc)


class DashboardController:
    """Single owner of dashboard state.

    Every operation computes the next state with a reducer from ``core.state``
    and publishes it to subscribed listeners. Polling runs on a scheduler
    thread and hands each fetch to a worker pool without waiting for it, so a
    slow backend never delays the next tick and results land in arrival order.
    """

    def __init__(
        self,
        client: BackendClient | None = None,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        max_workers: int = 4,
    ) -> None:
        self.client = client or BackendClient()
        self.poll_interval = poll_interval
        self._max_workers = max_workers
        self._state = DashboardState()
        self._state_lock = threading.RLock()
        self._listeners: list[Listener] = []
        self._lifecycle_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._scheduler_thread: threading.Thread | None = None
        self._executor: futures.ThreadPoolExecutor | None = None
        self._deactivated = False

    # -- state -----------------------------------------------------------

    def snapshot(self) -> DashboardState:
        with self._state_lock:
            return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with the new state after every transition."""
        with self._state_lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._state_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def _transition(self, reducer: Callable[..., DashboardState], *args: Any) -> DashboardState:
        with self._state_lock:
            self._state = reducer(self._state, *args)
            new_state = self._state
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(new_state)
            except Exception as exc:
                LOGGER.exception("Dashboard listener failed: %s", exc)
        return new_state

    # -- operations ------------------------------------------------------

    def refresh_divergence_list(self) -> DashboardState:
        try:
            records = self.client.fetch_divergences()
        except BackendError as exc:
            LOGGER.warning("Error fetching stocks: %s", exc)
            return self._transition(apply_divergence_failure, str(exc))
        return self._transition(apply_divergence_list, records)

    def refresh_status(self) -> DashboardState:
        """Poll progress; failures are logged and never shown to the user."""
        try:
            status = self.client.fetch_status()
        except BackendError as exc:
            LOGGER.warning("Error fetching progress: %s", exc)
            return self.snapshot()
        return self._transition(apply_status, status)

    def select_stock(self, stock_id: str) -> DashboardState:
        return self._transition(apply_selected_stock, stock_id)

    def fetch_chart_for_stock(self, stock_id: str) -> DashboardState:
        self.select_stock(stock_id)
        if not stock_id.strip():
            return self._transition(apply_missing_stock_id)

        try:
            chart_path = self.client.fetch_chart_path(stock_id)
        except BackendError as exc:
            LOGGER.warning("Error fetching stock chart for %s: %s", stock_id, exc)
            return self._transition(apply_chart_failure, str(exc))
        return self._transition(apply_chart, self.client.absolute_url(chart_path))

    # -- polling ---------------------------------------------------------

    @property
    def is_active(self) -> bool:
        thread = self._scheduler_thread
        return thread is not None and thread.is_alive() and not self._stop_event.is_set()

    def _dispatch(self, operation: Callable[[], Any]) -> None:
        executor = self._executor
        if executor is None or self._stop_event.is_set():
            return
        try:
            future = executor.submit(operation)
        except RuntimeError:
            # Pool shut down between the check and the submit.
            LOGGER.debug("Skipped %s after shutdown", operation.__name__)
            return
        future.add_done_callback(_log_failed_poll)

    def poll_once(self) -> None:
        """Fire both refreshes without waiting for either to finish."""
        self._dispatch(self.refresh_divergence_list)
        self._dispatch(self.refresh_status)

    def _loop(self) -> None:
        self.poll_once()
        while not self._stop_event.wait(self.poll_interval):
            self.poll_once()

    def activate(self) -> None:
        """Poll immediately, then every ``poll_interval`` seconds."""
        with self._lifecycle_lock:
            if self._deactivated:
                raise RuntimeError("Dashboard controller was deactivated and cannot be restarted")
            if self._scheduler_thread is not None:
                return

            self._executor = futures.ThreadPoolExecutor(
                max_workers=self._max_workers,
                thread_name_prefix="divergence-fetch",
            )
            self._scheduler_thread = threading.Thread(
                target=self._loop,
                name="divergence-poll-scheduler",
                daemon=True,
            )
            self._scheduler_thread.start()
        LOGGER.info("Backend polling started (interval=%ss)", self.poll_interval)

    def deactivate(self) -> None:
        """Stop polling for good and release the timer and worker pool."""
        with self._lifecycle_lock:
            if self._deactivated:
                return
            self._deactivated = True
            self._stop_event.set()
            thread, self._scheduler_thread = self._scheduler_thread, None
            executor, self._executor = self._executor, None

        if thread is not None and thread is not threading.current_thread():
            thread.join()
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)
        LOGGER.info("Backend polling stopped")

    def __enter__(self) -> "DashboardController":
        self.activate()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.deactivate()
