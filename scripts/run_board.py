"""Run the station departures board: poll, render once per second, serve the API."""

from __future__ import annotations

import argparse
import logging
import threading
import time

from src.app import BoardApp
from src.config import load_config
from src.data.rows import Station
from src.log import setup_logging
from src.server import BoardHTTPServer

logger = logging.getLogger("run_board")


def _print_stations(app: BoardApp, query: str) -> int:
    state = app.search.search_now(query)
    if not state.searching and not state.stations and not state.error:
        print(f"Query too short: {query!r}")
        return 2
    if state.error:
        print(state.error)
        return 1
    for station in state.stations:
        print(f"{station.id or '-':>10}  {station.name}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", default="config/config.yaml", help="Path to the YAML config")
    parser.add_argument("--station-id", help="Station to show, overriding the config")
    parser.add_argument("--station-name", default="", help="Station name for the header")
    parser.add_argument("--search", metavar="QUERY", help="Print matching stations and exit")
    parser.add_argument("--once", action="store_true", help="Poll once, write one frame and exit")
    parser.add_argument("--no-server", action="store_true", help="Disable the local HTTP API")
    args = parser.parse_args()

    config = load_config(args.config)
    log_path = setup_logging(config.log)
    logger.info("Logging to %s", log_path)

    app = BoardApp(config)

    if args.search:
        return _print_stations(app, args.search)

    if args.station_id:
        app.select_station(Station(id=args.station_id, name=args.station_name, distance=None))

    if args.once:
        app.poller.refresh()
        app.tick(app.now())
        logger.info("Frame written to %s", config.display.frame_path)
        return 0

    server = None
    if not args.no_server:
        server = BoardHTTPServer(
            (config.server.host, config.server.port),
            client=app.client,
            frame_path=config.display.frame_path,
            min_query_length=config.search.min_query_length,
            on_select=app.select_station,
            search=app.search,
            clock=app.now,
        )
        threading.Thread(target=server.serve_forever, name="board-http", daemon=True).start()
        logger.info("Serving board API on %s:%d", config.server.host, config.server.port)

    app.start()
    try:
        while True:
            try:
                app.tick(app.now())
            except Exception:
                logger.exception("Board tick failed")
            # Align ticks to wall-clock second boundaries.
            time.sleep(1.0 - (time.time() % 1.0))
    except KeyboardInterrupt:
        return 0
    finally:
        app.stop()
        if server is not None:
            server.shutdown()


if __name__ == "__main__":
    raise SystemExit(main())
