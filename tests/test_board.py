from __future__ import annotations

from datetime import datetime, timedelta, timezone

from src.data.poller import FETCH_ERROR_MESSAGE, PollResult
from src.data.rows import ARRIVALS, BoardSnapshot, Row, demo_snapshot
from src.logic.board import (
    DEFAULT_TICKER,
    EMPTY_CELL,
    LOADING_MESSAGE,
    build_frame_data,
    build_row_view,
    format_clock,
    format_updated,
)
from src.logic.status import ATRASADO, PONTUAL, SUPRIMIDO

NOW = datetime(2026, 3, 10, 7, 40)


def _row(time: str, status: str = PONTUAL, remarks: str = "", **overrides) -> Row:
    values = dict(
        id=f"dep-{time}",
        time=time,
        line="2",
        service="SUBU 18220",
        status=status,
        remarks=remarks,
        destination="SINTRA",
    )
    values.update(overrides)
    return Row(**values)


def _result(*rows: Row, message: str = "", error: str | None = None) -> PollResult:
    snapshot = BoardSnapshot(
        departures=tuple(rows),
        arrivals=(),
        message=message,
        last_updated="2026-03-10T07:39:30",
    )
    return PollResult(snapshot=snapshot, station_id="94-31039", fetched_at=0.0, error=error)


def test_format_clock() -> None:
    assert format_clock(NOW) == "07:40:00"
    assert format_clock(None) == "--:--:--"


def test_format_updated_converts_to_local_zone() -> None:
    now = datetime(2026, 3, 10, 8, 40, tzinfo=timezone(timedelta(hours=1)))

    assert format_updated("2026-03-10T07:30:00Z", now) == "08:30:00"
    assert format_updated("2026-03-10T07:30:00", NOW) == "07:30:00"
    assert format_updated("ontem", NOW) == "ontem"
    assert format_updated("", NOW) == ""


def test_build_row_view_delayed_row_shows_both_times() -> None:
    row = _row("07:38", ATRASADO, "Circula com atraso de 5 minutos")

    view = build_row_view(row, NOW, 0)

    assert view.time_text == "07:43"
    assert view.original_time == "07:38"
    assert view.delayed is True
    assert view.suppressed is False
    assert view.blink is True
    assert view.highlight is True
    assert view.remarks == "Circula com atraso de 5 minutos"


def test_build_row_view_on_time_row() -> None:
    view = build_row_view(_row("07:52"), NOW, 1)

    assert view.time_text == "07:52"
    assert view.original_time is None
    assert view.remarks == "Pontual"
    assert view.blink is False
    assert view.highlight is False


def test_build_row_view_suppressed_and_missing_cells() -> None:
    row = _row("", SUPRIMIDO, "", line="", destination="")

    view = build_row_view(row, NOW, 2)

    assert view.time_text == EMPTY_CELL
    assert view.place == EMPTY_CELL
    assert view.line == EMPTY_CELL
    assert view.suppressed is True
    assert view.remarks == "Suprimido"


def test_build_frame_data_windows_rows() -> None:
    rows = [
        _row("07:30"),
        _row("07:39", passed=True),
        _row("07:39"),
        _row("07:45"),
        _row("07:50"),
        _row("07:55"),
        _row("08:00"),
        _row("08:05"),
    ]

    data = build_frame_data(_result(*rows, message="Greve CP"), NOW, station_name="LISBOA - ROSSIO")

    assert [view.time_text for view in data.rows] == ["07:39", "07:45", "07:50", "07:55", "08:00"]
    assert [view.highlight for view in data.rows] == [True, False, False, False, False]
    assert [view.blink for view in data.rows] == [True, True, False, False, False]
    assert data.title == "PARTIDAS / DEPARTURES"
    assert data.place_label == "Destino"
    assert data.station_name == "LISBOA - ROSSIO"
    assert data.clock_text == "07:40:00"
    assert data.ticker_text == "Greve CP"
    assert data.updated_text == "07:39:30"
    assert data.banner is None
    assert data.loading is False


def test_build_frame_data_respects_max_rows() -> None:
    rows = [_row(f"08:0{minute}") for minute in range(6)]

    data = build_frame_data(_result(*rows), NOW, max_rows=2)

    assert len(data.rows) == 2


def test_build_frame_data_arrivals() -> None:
    result = PollResult(snapshot=demo_snapshot(), station_id="", fetched_at=0.0, error=None)

    data = build_frame_data(result, datetime(2026, 3, 10, 7, 33), direction=ARRIVALS)

    assert data.title == "CHEGADAS / ARRIVALS"
    assert data.place_label == "Origem"
    assert [view.place for view in data.rows] == ["SINTRA", "CASTANHEIRA"]
    assert data.rows[0].time_text == "07:40"
    assert data.rows[0].original_time == "07:32"


def test_build_frame_data_loading_hides_rows() -> None:
    data = build_frame_data(_result(_row("07:45")), NOW, loading=True)

    assert data.rows == []
    assert data.banner == LOADING_MESSAGE
    assert data.banner_is_error is False
    assert data.loading is True


def test_build_frame_data_error_keeps_rows() -> None:
    data = build_frame_data(_result(_row("07:45"), error=FETCH_ERROR_MESSAGE), NOW)

    assert data.banner == FETCH_ERROR_MESSAGE
    assert data.banner_is_error is True
    assert [view.time_text for view in data.rows] == ["07:45"]


def test_build_frame_data_without_result() -> None:
    data = build_frame_data(None, NOW, loading=True)

    assert data.rows == []
    assert data.ticker_text == DEFAULT_TICKER
    assert data.updated_text == ""
    assert data.banner == LOADING_MESSAGE
