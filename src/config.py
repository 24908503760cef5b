"""Configuration loader for the station departures board."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Any

from dotenv import load_dotenv
import yaml

DIRECTIONS = ("departures", "arrivals")


@dataclass(frozen=True)
class UpstreamConfig:
    """Infraestruturas de Portugal schedule feed configuration."""

    schedule_base_url: str
    station_search_url: str
    timeout_seconds: float
    lookbehind_minutes: int
    lookahead_minutes: int


@dataclass(frozen=True)
class BoardConfig:
    """Which station is shown and how often it refreshes."""

    station_id: str
    station_name: str
    direction: str
    refresh_interval_seconds: float
    max_visible_rows: int
    timezone: str


@dataclass(frozen=True)
class DisplayConfig:
    """Output viewport and frame location."""

    viewport_width: int
    viewport_height: int
    frame_path: str


@dataclass(frozen=True)
class SearchConfig:
    """Station search behaviour."""

    debounce_ms: int
    min_query_length: int


@dataclass(frozen=True)
class ServerConfig:
    """Local HTTP API binding."""

    host: str
    port: int


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str
    log_dir: str


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    upstream: UpstreamConfig
    board: BoardConfig
    display: DisplayConfig
    search: SearchConfig
    server: ServerConfig
    log: LoggingConfig


def _require_key(mapping: dict[str, Any], key: str, context: str) -> Any:
    if key not in mapping:
        raise ValueError(f"Missing required key '{key}' in {context} config")
    return mapping[key]


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = _require_key(data, name, name)
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' config must be a mapping")
    return section


def load_config(path: str = "config/config.yaml") -> AppConfig:
    """Load application configuration from a YAML file, with .env overrides."""
    load_dotenv()
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        raise ValueError(f"Config file not found: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping at the top level")

    upstream_section = _section(data, "upstream")
    board_section = _section(data, "board")
    display_section = _section(data, "display")
    search_section = _section(data, "search")
    server_section = _section(data, "server")
    logging_section = _section(data, "logging")

    upstream = UpstreamConfig(
        schedule_base_url=_require_key(upstream_section, "schedule_base_url", "upstream"),
        station_search_url=_require_key(upstream_section, "station_search_url", "upstream"),
        timeout_seconds=float(_require_key(upstream_section, "timeout_seconds", "upstream")),
        lookbehind_minutes=int(_require_key(upstream_section, "lookbehind_minutes", "upstream")),
        lookahead_minutes=int(_require_key(upstream_section, "lookahead_minutes", "upstream")),
    )

    direction = _require_key(board_section, "direction", "board")
    if direction not in DIRECTIONS:
        raise ValueError(f"'board.direction' must be one of {', '.join(DIRECTIONS)}, got {direction!r}")

    station_id = _require_key(board_section, "station_id", "board")
    station_name = _require_key(board_section, "station_name", "board")
    board = BoardConfig(
        station_id=os.environ.get("BOARD_STATION_ID", str(station_id or "")).strip(),
        station_name=os.environ.get("BOARD_STATION_NAME", str(station_name or "")).strip(),
        direction=direction,
        refresh_interval_seconds=float(_require_key(board_section, "refresh_interval_seconds", "board")),
        max_visible_rows=int(_require_key(board_section, "max_visible_rows", "board")),
        timezone=str(_require_key(board_section, "timezone", "board") or ""),
    )

    display = DisplayConfig(
        viewport_width=int(_require_key(display_section, "viewport_width", "display")),
        viewport_height=int(_require_key(display_section, "viewport_height", "display")),
        frame_path=_require_key(display_section, "frame_path", "display"),
    )

    search = SearchConfig(
        debounce_ms=int(_require_key(search_section, "debounce_ms", "search")),
        min_query_length=int(_require_key(search_section, "min_query_length", "search")),
    )

    server = ServerConfig(
        host=_require_key(server_section, "host", "server"),
        port=int(_require_key(server_section, "port", "server")),
    )

    logging = LoggingConfig(
        level=_require_key(logging_section, "level", "logging"),
        log_dir=_require_key(logging_section, "log_dir", "logging"),
    )

    return AppConfig(
        upstream=upstream,
        board=board,
        display=display,
        search=search,
        server=server,
        log=logging,
    )
