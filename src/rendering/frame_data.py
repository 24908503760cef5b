"""Data structures for rendering board frames."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RowView:
    """Single board row for display."""

    time_text: str
    place: str
    line: str
    service: str
    remarks: str
    original_time: str | None = None  # nominal time, set only when it differs from time_text
    delayed: bool = False
    suppressed: bool = False
    blink: bool = False
    highlight: bool = False


@dataclass(frozen=True)
class FrameData:
    """Frame data for the renderer."""

    title: str
    place_label: str
    station_name: str
    clock_text: str
    rows: list[RowView]  # already windowed, at most max_visible_rows
    ticker_text: str
    updated_text: str = ""
    banner: str | None = None
    banner_is_error: bool = False
    loading: bool = False


__all__ = ["RowView", "FrameData"]
