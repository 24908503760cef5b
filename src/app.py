"""Board runtime: wires polling, search, scaling and rendering together."""

from __future__ import annotations

from datetime import datetime
import logging
from zoneinfo import ZoneInfo

from PIL import Image

from src.config import AppConfig
from src.data.ip_client import ScheduleClient
from src.data.poller import BoardPoller
from src.data.rows import Station
from src.data.search import StationSearch
from src.logic.board import build_frame_data
from src.logic.scaling import ScaleTracker
from src.rendering import FrameData, compose_board, fit_to_viewport, measure_board, save_frame

logger = logging.getLogger(__name__)


class BoardApp:
    """Owns the runtime state of one board display.

    The caller drives ``tick`` once per second with the current instant; all
    time-dependent decisions for that frame use exactly that instant.
    """

    def __init__(
        self,
        config: AppConfig,
        client: ScheduleClient | None = None,
        poller: BoardPoller | None = None,
        search: StationSearch | None = None,
    ) -> None:
        self._config = config
        self._client = client or ScheduleClient.from_config(config.upstream)
        self._tz = ZoneInfo(config.board.timezone) if config.board.timezone else None
        self.poller = poller or BoardPoller(
            self._client,
            station_id=config.board.station_id,
            poll_interval_seconds=config.board.refresh_interval_seconds,
            clock=self.now,
        )
        self.search = search or StationSearch(
            self._client,
            debounce_ms=config.search.debounce_ms,
            min_query_length=config.search.min_query_length,
        )
        self.scale = ScaleTracker(config.display.viewport_width, config.display.viewport_height)
        self._station_name = config.board.station_name
        self._last_data: FrameData | None = None

    @property
    def client(self) -> ScheduleClient:
        return self._client

    @property
    def station_name(self) -> str:
        return self._station_name

    @property
    def last_frame_data(self) -> FrameData | None:
        return self._last_data

    def now(self) -> datetime:
        """Current instant in the board's timezone."""
        if self._tz is not None:
            return datetime.now(self._tz)
        return datetime.now().astimezone()

    def start(self) -> None:
        self.poller.start()

    def stop(self) -> None:
        self.poller.stop()
        self.search.cancel()

    def select_station(self, station: Station) -> None:
        """Show another station; the previous station's in-flight request is dropped."""
        self._station_name = station.name
        self.search.cancel()
        self.poller.select_station(station.id or "")

    def resize(self, viewport_width: float, viewport_height: float) -> bool:
        changed = self.scale.resize(viewport_width, viewport_height)
        if changed:
            logger.info("Viewport %sx%s -> scale %s", viewport_width, viewport_height, self.scale.scale)
        return changed

    def build(self, now: datetime) -> FrameData:
        return build_frame_data(
            self.poller.get_latest(),
            now,
            direction=self._config.board.direction,
            station_name=self._station_name,
            loading=self.poller.is_loading(),
            max_rows=self._config.board.max_visible_rows,
        )

    def tick(self, now: datetime, write: bool = True) -> Image.Image:
        """Render one frame for ``now``; optionally write it to the frame path."""
        data = self.build(now)
        self._last_data = data
        if self.scale.measure(*measure_board(data)):
            logger.debug("Board canvas %s -> scale %s", self.scale.canvas, self.scale.scale)
        board = compose_board(data, blink_on=now.second % 2 == 0)
        frame = fit_to_viewport(board, self.scale.scale, self.scale.viewport)
        if write:
            save_frame(frame, self._config.display.frame_path)
        return frame


__all__ = ["BoardApp"]
