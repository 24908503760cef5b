"""Local HTTP API: board and station search endpoints plus the emulator frame."""

from __future__ import annotations

from datetime import datetime
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
import json
import logging
from pathlib import Path
from typing import Any, Callable
from urllib.parse import parse_qs, urlsplit

from src.data.ip_client import ScheduleClient, ScheduleClientError
from src.data.rows import Station, demo_snapshot
from src.data.search import STATION_QUERY_MIN_LENGTH, InvalidQueryError, StationSearch, validate_query

logger = logging.getLogger(__name__)

BOARD_ERROR_MESSAGE = "Não foi possível obter o painel da estação selecionada."
STATIONS_ERROR_MESSAGE = "Não foi possível obter as estações."

INDEX_HTML = """<!doctype html>
<html>
  <head>
    <meta charset="utf-8">
    <meta http-equiv="refresh" content="1">
    <style>
      html, body { margin: 0; background: #000; height: 100%; }
      img { width: 100vw; height: 100vh; object-fit: contain; }
    </style>
    <title>Partidas / Departures</title>
  </head>
  <body>
    <img src="/frame.png" alt="Board">
  </body>
</html>"""


class BoardHTTPServer(ThreadingHTTPServer):
    """HTTP server carrying the collaborators its handlers need."""

    daemon_threads = True

    def __init__(
        self,
        address: tuple[str, int],
        client: ScheduleClient,
        frame_path: str,
        min_query_length: int = STATION_QUERY_MIN_LENGTH,
        on_select: Callable[[Station], None] | None = None,
        search: StationSearch | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__(address, BoardRequestHandler)
        self.client = client
        self.frame_path = Path(frame_path)
        self.min_query_length = min_query_length
        self.on_select = on_select
        self.search = search
        self.clock = clock or (lambda: datetime.now().astimezone())


class BoardRequestHandler(BaseHTTPRequestHandler):
    server: BoardHTTPServer

    def do_GET(self) -> None:  # noqa: N802
        parts = urlsplit(self.path)
        params = parse_qs(parts.query)

        if parts.path == "/healthz":
            self._send_body(200, b"ok", "text/plain; charset=utf-8")
            return
        if parts.path == "/api/board":
            self._handle_board(params)
            return
        if parts.path == "/api/stations":
            self._handle_stations(params)
            return
        if parts.path == "/api/search" and self.server.search is not None:
            self._send_json(200, self.server.search.get_state().to_dict())
            return
        if parts.path == "/frame.png":
            frame_path = self.server.frame_path
            if not frame_path.exists():
                self._send_body(404, b"", "text/plain; charset=utf-8")
                return
            self._send_body(200, frame_path.read_bytes(), "image/png")
            return
        if parts.path == "/":
            self._send_body(200, INDEX_HTML.encode("utf-8"), "text/html; charset=utf-8")
            return

        self._send_json(404, {"error": "Not found"})

    def do_POST(self) -> None:  # noqa: N802
        path = urlsplit(self.path).path
        if path == "/api/selection" and self.server.on_select is not None:
            self._handle_selection()
            return
        if path == "/api/search" and self.server.search is not None:
            self._handle_search_submit()
            return
        self._send_json(404, {"error": "Not found"})

    def _read_json(self) -> dict[str, Any] | None:
        length = int(self.headers.get("Content-Length") or 0)
        try:
            body = json.loads(self.rfile.read(length) or b"{}")
        except ValueError:
            self._send_json(400, {"error": "Invalid JSON body"})
            return None
        if not isinstance(body, dict):
            self._send_json(400, {"error": "Body must be a JSON object"})
            return None
        return body

    def _handle_selection(self) -> None:
        body = self._read_json()
        if body is None:
            return
        if not isinstance(body.get("name"), str):
            self._send_json(400, {"error": "Body must contain a station 'name'"})
            return
        raw_id = body.get("id")
        station = Station(id=None if raw_id is None else str(raw_id), name=body["name"], distance=None)
        self.server.on_select(station)
        self._send_json(200, {"selected": station.to_dict()})

    def _handle_search_submit(self) -> None:
        body = self._read_json()
        if body is None:
            return
        raw_query = body.get("q") if isinstance(body.get("q"), str) else ""
        try:
            query = validate_query(raw_query, self.server.min_query_length)
        except InvalidQueryError as exc:
            self.server.search.cancel()
            self._send_json(400, {"error": str(exc)})
            return
        self.server.search.submit(query)
        self._send_json(202, self.server.search.get_state().to_dict())

    def _handle_board(self, params: dict[str, list[str]]) -> None:
        station_id = (params.get("stationId") or [""])[0].strip()
        if not station_id:
            self._send_json(200, demo_snapshot().to_dict())
            return
        try:
            snapshot = self.server.client.get_board(station_id, now=self.server.clock())
        except ScheduleClientError as exc:
            logger.error("Board fetch for station %s failed: %s", station_id, exc)
            self._send_json(502, {"error": BOARD_ERROR_MESSAGE})
            return
        self._send_json(200, snapshot.to_dict())

    def _handle_stations(self, params: dict[str, list[str]]) -> None:
        try:
            query = validate_query((params.get("q") or [""])[0], self.server.min_query_length)
        except InvalidQueryError as exc:
            self._send_json(400, {"error": str(exc)})
            return
        try:
            stations = self.server.client.search_stations(query)
        except ScheduleClientError as exc:
            logger.error("Station search for %r failed: %s", query, exc)
            self._send_json(502, {"error": STATIONS_ERROR_MESSAGE})
            return
        self._send_json(200, {"stations": [station.to_dict() for station in stations]})

    def _send_json(self, status: int, payload: Any) -> None:
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        self._send_body(status, body, "application/json; charset=utf-8")

    def _send_body(self, status: int, body: bytes, content_type: str) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Cache-Control", "no-store")
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


__all__ = ["BoardHTTPServer", "BoardRequestHandler", "BOARD_ERROR_MESSAGE", "STATIONS_ERROR_MESSAGE"]
