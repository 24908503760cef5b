"""Rendering utilities for the station departures board."""

from src.rendering.composer import compose_board, fit_to_viewport, measure_board
from src.rendering.emulator import save_frame
from src.rendering.frame_data import FrameData, RowView

__all__ = ["FrameData", "RowView", "compose_board", "fit_to_viewport", "measure_board", "save_frame"]
