"""Threaded poller that periodically refreshes the station board."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
import logging
import threading
import time
from typing import Callable

from src.data.cancellation import CancellationToken, LatestRequest, RequestCancelled
from src.data.ip_client import ScheduleClient, ScheduleClientError
from src.data.rows import BoardSnapshot, demo_snapshot

logger = logging.getLogger(__name__)

REFRESH_INTERVAL_SECONDS = 30
FETCH_ERROR_MESSAGE = "Não foi possível obter os dados. A tentar novamente..."
# A superseded request may still be blocked on the network while the new one runs.
FETCH_WORKERS = 4


def _local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass(frozen=True)
class PollResult:
    """Latest applied poll outcome.

    ``snapshot`` is the last successfully fetched board; it survives failed
    cycles, which only set ``error``.
    """

    snapshot: BoardSnapshot | None
    station_id: str
    fetched_at: float
    error: str | None


class BoardPoller:
    """Background poller that refreshes one station's board on a schedule.

    The loop thread only schedules cycles; each fetch runs on a worker so a
    station switch can start the new station's request while the previous one
    is still blocked upstream.
    """

    def __init__(
        self,
        client: ScheduleClient,
        station_id: str = "",
        poll_interval_seconds: float = REFRESH_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self._client = client
        self._station_id = station_id.strip()
        self._poll_interval_seconds = poll_interval_seconds
        self._clock = clock
        self._latest: PollResult | None = None
        self._requests = LatestRequest("board")
        self._stop_event = threading.Event()
        self._wake_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def station_id(self) -> str:
        return self._station_id

    def get_latest(self) -> PollResult | None:
        """Return the most recent applied poll result, if any."""
        with self._requests.lock:
            return self._latest

    def is_loading(self) -> bool:
        """True until a result for the currently selected station has been applied."""
        with self._requests.lock:
            return self._latest is None or self._latest.station_id != self._station_id

    def select_station(self, station_id: str) -> None:
        """Switch stations: cancel the in-flight request and start a new cycle now."""
        station_id = (station_id or "").strip()
        self._requests.cancel()
        with self._requests.lock:
            previous = self._station_id
            self._station_id = station_id
        logger.info("Board station changed from %s to %s", previous or "demo", station_id or "demo")
        self._wake_event.set()

    def refresh(self) -> PollResult | None:
        """Run one poll cycle; returns the applied result, or None when superseded."""
        token = self._requests.begin()
        with self._requests.lock:
            station_id = self._station_id
        try:
            snapshot = self._fetch(station_id, token)
        except RequestCancelled:
            logger.debug("Board request #%d for %s cancelled", token.generation, station_id or "demo")
            return None
        except ScheduleClientError as exc:
            logger.warning("Board refresh for %s failed: %s", station_id or "demo", exc)
            return self._apply(token, station_id, None, FETCH_ERROR_MESSAGE)
        return self._apply(token, station_id, snapshot, None)

    def start(self) -> None:
        """Start the background polling thread."""
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name="board-poller", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Signal the polling thread to stop and cancel any in-flight request."""
        self._stop_event.set()
        self._wake_event.set()
        self._requests.cancel()

    def _run_loop(self) -> None:
        executor = ThreadPoolExecutor(max_workers=FETCH_WORKERS, thread_name_prefix="board-fetch")
        try:
            while not self._stop_event.is_set():
                self._wake_event.clear()
                executor.submit(self.refresh).add_done_callback(self._log_failure)
                self._wake_event.wait(timeout=self._poll_interval_seconds)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    @staticmethod
    def _log_failure(future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Board refresh crashed", exc_info=exc)

    def _fetch(self, station_id: str, token: CancellationToken) -> BoardSnapshot:
        token.raise_if_cancelled()
        if not station_id:
            return demo_snapshot()
        return self._client.get_board(station_id, now=self._clock(), token=token)

    def _apply(
        self,
        token: CancellationToken,
        station_id: str,
        snapshot: BoardSnapshot | None,
        error: str | None,
    ) -> PollResult | None:
        with self._requests.lock:
            if not self._requests.is_current(token):
                logger.debug("Discarding stale board result #%d for %s", token.generation, station_id or "demo")
                return None
            if snapshot is None and self._latest is not None:
                snapshot = self._latest.snapshot
            self._latest = PollResult(
                snapshot=snapshot,
                station_id=station_id,
                fetched_at=time.time(),
                error=error,
            )
            result = self._latest
        if error is None:
            logger.info(
                "Board for %s refreshed: %d departures, %d arrivals",
                station_id or "demo",
                len(result.snapshot.departures) if result.snapshot else 0,
                len(result.snapshot.arrivals) if result.snapshot else 0,
            )
        return result


__all__ = ["PollResult", "BoardPoller", "FETCH_ERROR_MESSAGE", "REFRESH_INTERVAL_SECONDS"]
