"""Build the board view model from the latest poll result and ``now``."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence

from src.data.poller import PollResult
from src.data.rows import ARRIVALS, Row
from src.logic.status import display_flags, status_label
from src.logic.times import effective_time, parse_time
from src.logic.window import MAX_VISIBLE_ROWS, should_blink, visible_rows
from src.rendering.frame_data import FrameData, RowView

TITLES = {
    "departures": ("PARTIDAS / DEPARTURES", "Destino"),
    ARRIVALS: ("CHEGADAS / ARRIVALS", "Origem"),
}
LOADING_MESSAGE = "A carregar informação…"
DEFAULT_TICKER = "Serviço normal"
EMPTY_CELL = "—"


def format_clock(now: datetime | None) -> str:
    if now is None:
        return "--:--:--"
    return now.strftime("%H:%M:%S")


def format_updated(value: str, now: datetime) -> str:
    """Render an ISO-8601 ``lastUpdated`` as local HH:MM:SS, or echo it when unparseable."""
    if not value:
        return ""
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return value
    if parsed.tzinfo is not None and now.tzinfo is not None:
        parsed = parsed.astimezone(now.tzinfo)
    return parsed.strftime("%H:%M:%S")


def _cell(value: Any) -> str:
    if isinstance(value, str):
        return value if value.strip() else EMPTY_CELL
    return EMPTY_CELL if value is None else str(value)


def build_row_view(row: Row, now: datetime, index: int) -> RowView:
    """Resolve times, flags and remark text for one visible row."""
    nominal = parse_time(row.time, now)
    effective = effective_time(row, now)
    nominal_hm = nominal.target.strftime("%H:%M") if nominal else None
    effective_hm = effective.target.strftime("%H:%M") if effective else None

    if effective_hm:
        time_text = effective_hm
    else:
        time_text = _cell(row.time)
    original = nominal_hm if nominal_hm and effective_hm and nominal_hm != effective_hm else None

    flags = display_flags(row)
    return RowView(
        time_text=time_text,
        original_time=original,
        place=_cell(row.place),
        line=_cell(row.line),
        service=_cell(row.service),
        remarks=row.remarks.strip() or status_label(row),
        delayed=flags.delayed,
        suppressed=flags.suppressed,
        blink=should_blink(row, now),
        highlight=index == 0,
    )


def build_frame_data(
    result: PollResult | None,
    now: datetime,
    *,
    direction: str = "departures",
    station_name: str = "",
    loading: bool = False,
    max_rows: int = MAX_VISIBLE_ROWS,
) -> FrameData:
    """Window, classify and format the latest snapshot for one render tick."""
    title, place_label = TITLES.get(direction, TITLES["departures"])
    snapshot = result.snapshot if result is not None else None
    error = result.error if result is not None else None

    rows: Sequence[Row] = snapshot.rows(direction) if snapshot is not None else ()
    views: list[RowView] = []
    if not loading:
        views = [build_row_view(row, now, index) for index, row in enumerate(visible_rows(rows, now, max_rows))]

    banner = error or (LOADING_MESSAGE if loading else None)
    return FrameData(
        title=title,
        place_label=place_label,
        station_name=station_name,
        clock_text=format_clock(now),
        rows=views,
        ticker_text=(snapshot.message if snapshot is not None else "") or DEFAULT_TICKER,
        updated_text=format_updated(snapshot.last_updated, now) if snapshot is not None else "",
        banner=banner,
        banner_is_error=bool(error),
        loading=loading,
    )


__all__ = ["build_frame_data", "build_row_view", "format_clock", "format_updated"]
