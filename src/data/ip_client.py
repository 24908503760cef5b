"""Infraestruturas de Portugal departures/arrivals and station search client."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
from typing import Any
from urllib.parse import quote

import requests

from src.config import UpstreamConfig
from src.data.cancellation import CancellationToken
from src.data.rows import ARRIVALS, DEPARTURES, BoardSnapshot, Station, rows_from_feed, stations_from_feed

logger = logging.getLogger(__name__)

SCHEDULE_BASE_URL = "https://www.infraestruturasdeportugal.pt/negocios-e-servicos/partidas-chegadas"
STATION_SEARCH_URL = "https://www.infraestruturasdeportugal.pt/negocios-e-servicos/estacao-nome"
SCHEDULE_SERVICES = ("INTERNACIONAL", "ALFA", "IC", "IR", "REGIONAL", "URB|SUBUR", "ESPECIAL")
LOOKBEHIND_MINUTES = 60
LOOKAHEAD_MINUTES = 12 * 60

DEPARTURES_REQUEST_TYPE = 1
ARRIVALS_REQUEST_TYPE = 2
ROWS_KEY = "NodesComboioTabelsPartidasChegadas"

# The upstream rejects requests that do not look like its own web client.
FETCH_HEADERS = {
    "accept": "application/json, text/plain, */*",
    "accept-language": "pt-PT,pt;q=0.9,en;q=0.8",
    "sec-fetch-dest": "empty",
    "sec-fetch-mode": "cors",
    "sec-fetch-site": "same-origin",
    "referer": SCHEDULE_BASE_URL,
    "user-agent": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/118.0.5993.90 Safari/537.36"
    ),
}


class ScheduleClientError(Exception):
    """Raised when an upstream request fails or returns a non-200 response."""


def format_schedule_datetime(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d %H:%M")


def build_schedule_url(
    station_id: str,
    now: datetime,
    base_url: str = SCHEDULE_BASE_URL,
    lookbehind_minutes: int = LOOKBEHIND_MINUTES,
    lookahead_minutes: int = LOOKAHEAD_MINUTES,
) -> str:
    """Build the board URL covering ``now - lookbehind`` to ``now + lookahead``."""
    start = now - timedelta(minutes=lookbehind_minutes)
    end = now + timedelta(minutes=lookahead_minutes)
    segments = (
        station_id,
        format_schedule_datetime(start),
        format_schedule_datetime(end),
        ", ".join(SCHEDULE_SERVICES),
    )
    return "/".join([base_url.rstrip("/"), *(quote(segment, safe="") for segment in segments)])


def _section_rows(sections: list[Any], request_type: int) -> list[Any]:
    for section in sections:
        if isinstance(section, dict) and section.get("TipoPedido") == request_type:
            rows = section.get(ROWS_KEY)
            return rows if isinstance(rows, list) else []
    return []


class ScheduleClient:
    """Thin wrapper around the schedule and station search endpoints using requests."""

    def __init__(
        self,
        schedule_base_url: str = SCHEDULE_BASE_URL,
        station_search_url: str = STATION_SEARCH_URL,
        timeout_seconds: float = 10,
        lookbehind_minutes: int = LOOKBEHIND_MINUTES,
        lookahead_minutes: int = LOOKAHEAD_MINUTES,
    ) -> None:
        self._schedule_base_url = schedule_base_url
        self._station_search_url = station_search_url
        self._timeout_seconds = timeout_seconds
        self._lookbehind_minutes = lookbehind_minutes
        self._lookahead_minutes = lookahead_minutes

    @classmethod
    def from_config(cls, config: UpstreamConfig) -> "ScheduleClient":
        return cls(
            schedule_base_url=config.schedule_base_url,
            station_search_url=config.station_search_url,
            timeout_seconds=config.timeout_seconds,
            lookbehind_minutes=config.lookbehind_minutes,
            lookahead_minutes=config.lookahead_minutes,
        )

    def get_board(
        self,
        station_id: str,
        now: datetime | None = None,
        token: CancellationToken | None = None,
    ) -> BoardSnapshot:
        """Fetch the departures and arrivals board for a station."""
        moment = now or datetime.now().astimezone()
        url = build_schedule_url(
            station_id,
            moment,
            base_url=self._schedule_base_url,
            lookbehind_minutes=self._lookbehind_minutes,
            lookahead_minutes=self._lookahead_minutes,
        )
        payload = self._get(url, token=token)
        sections = payload.get("response") if isinstance(payload, dict) else None
        if not isinstance(sections, list):
            sections = []
        return BoardSnapshot(
            departures=rows_from_feed(_section_rows(sections, DEPARTURES_REQUEST_TYPE), DEPARTURES),
            arrivals=rows_from_feed(_section_rows(sections, ARRIVALS_REQUEST_TYPE), ARRIVALS),
            message="",
            last_updated=datetime.now(timezone.utc).isoformat(),
        )

    def search_stations(self, query: str, token: CancellationToken | None = None) -> list[Station]:
        """Search stations by (partial) name."""
        url = f"{self._station_search_url.rstrip('/')}/{quote(query, safe='')}"
        payload = self._get(url, token=token)
        return stations_from_feed(payload.get("response") if isinstance(payload, dict) else None)

    def _get(self, url: str, token: CancellationToken | None = None) -> dict[str, Any]:
        if token is not None:
            token.raise_if_cancelled()
        logger.debug("GET %s", url)
        try:
            response = requests.get(url, headers=FETCH_HEADERS, timeout=self._timeout_seconds)
        except requests.RequestException as exc:
            raise ScheduleClientError(f"Schedule request failed: {exc}") from exc

        if response.status_code != 200:
            body_text = response.text.strip()
            detail = f"Status {response.status_code}"
            if body_text:
                detail = f"{detail}, Body: {body_text[:300]}"
            raise ScheduleClientError(f"Schedule request failed: {detail}")

        try:
            return response.json()
        except ValueError as exc:
            raise ScheduleClientError("Schedule response was not valid JSON") from exc


__all__ = [
    "SCHEDULE_BASE_URL",
    "STATION_SEARCH_URL",
    "SCHEDULE_SERVICES",
    "ScheduleClient",
    "ScheduleClientError",
    "build_schedule_url",
]
