"""Debounced, cancellable station search."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import threading
from typing import Any

from src.data.cancellation import CancellationToken, LatestRequest, RequestCancelled
from src.data.ip_client import ScheduleClient, ScheduleClientError
from src.data.rows import Station

logger = logging.getLogger(__name__)

SEARCH_DEBOUNCE_MS = 300
STATION_QUERY_MIN_LENGTH = 2

QUERY_TOO_SHORT_MESSAGE = "Parâmetro 'q' deve conter pelo menos 2 caracteres."
NO_STATIONS_MESSAGE = "Nenhuma estação encontrada."
SEARCH_ERROR_MESSAGE = "Não foi possível obter estações."


class InvalidQueryError(ValueError):
    """Raised for a station query that must not be sent upstream."""


@dataclass(frozen=True)
class SearchState:
    """What the station picker shows right now."""

    query: str = ""
    stations: tuple[Station, ...] = ()
    error: str = ""
    searching: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "stations": [station.to_dict() for station in self.stations],
            "error": self.error,
            "searching": self.searching,
        }


def validate_query(query: str | None, min_length: int = STATION_QUERY_MIN_LENGTH) -> str:
    """Return the trimmed query or raise InvalidQueryError when it is too short."""
    trimmed = (query or "").strip()
    if len(trimmed) < min_length:
        message = QUERY_TOO_SHORT_MESSAGE
        if min_length != STATION_QUERY_MIN_LENGTH:
            message = f"Parâmetro 'q' deve conter pelo menos {min_length} caracteres."
        raise InvalidQueryError(message)
    return trimmed


class StationSearch:
    """Runs at most one station search at a time; the latest query always wins.

    ``submit`` waits for the debounce delay before going upstream, so fast
    typing only produces one request. Each new query cancels the pending
    timer and the in-flight request, and results of superseded requests are
    dropped when they arrive.
    """

    def __init__(
        self,
        client: ScheduleClient,
        debounce_ms: int = SEARCH_DEBOUNCE_MS,
        min_query_length: int = STATION_QUERY_MIN_LENGTH,
    ) -> None:
        self._client = client
        self._debounce_seconds = debounce_ms / 1000.0
        self._min_query_length = min_query_length
        self._requests = LatestRequest("station-search")
        self._timer: threading.Timer | None = None
        self._state = SearchState()

    def get_state(self) -> SearchState:
        with self._requests.lock:
            return self._state

    def submit(self, query: str) -> bool:
        """Schedule a debounced search; returns False when the query was rejected."""
        started = self._start(query)
        if started is None:
            return False
        timer = threading.Timer(self._debounce_seconds, self._run, args=started)
        timer.daemon = True
        self._timer = timer
        timer.start()
        return True

    def search_now(self, query: str) -> SearchState:
        """Search immediately, skipping the debounce delay."""
        started = self._start(query)
        if started is not None:
            self._run(*started)
        return self.get_state()

    def cancel(self) -> None:
        """Drop any pending or in-flight search and clear the results."""
        self._cancel_timer()
        self._requests.cancel()
        with self._requests.lock:
            self._state = SearchState()

    def _start(self, query: str) -> tuple[CancellationToken, str] | None:
        self._cancel_timer()
        try:
            trimmed = validate_query(query, self._min_query_length)
        except InvalidQueryError:
            self._requests.cancel()
            with self._requests.lock:
                self._state = SearchState(query=(query or "").strip())
            return None

        token = self._requests.begin()
        with self._requests.lock:
            self._state = SearchState(query=trimmed, searching=True)
        return token, trimmed

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _run(self, token: CancellationToken, query: str) -> None:
        try:
            token.raise_if_cancelled()
            stations = self._client.search_stations(query, token=token)
        except RequestCancelled:
            logger.debug("Station search #%d for %r cancelled", token.generation, query)
            return
        except ScheduleClientError as exc:
            logger.warning("Station search for %r failed: %s", query, exc)
            self._apply(token, SearchState(query=query, error=SEARCH_ERROR_MESSAGE))
            return

        self._apply(
            token,
            SearchState(
                query=query,
                stations=tuple(stations),
                error="" if stations else NO_STATIONS_MESSAGE,
            ),
        )

    def _apply(self, token: CancellationToken, state: SearchState) -> None:
        with self._requests.lock:
            if not self._requests.is_current(token):
                logger.debug("Discarding stale station search #%d for %r", token.generation, state.query)
                return
            self._state = state


__all__ = [
    "SEARCH_DEBOUNCE_MS",
    "STATION_QUERY_MIN_LENGTH",
    "QUERY_TOO_SHORT_MESSAGE",
    "NO_STATIONS_MESSAGE",
    "SEARCH_ERROR_MESSAGE",
    "InvalidQueryError",
    "SearchState",
    "validate_query",
    "StationSearch",
]
