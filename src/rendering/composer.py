"""Frame composer for the station departures board."""

from __future__ import annotations

from PIL import Image, ImageDraw, ImageFont

from src.logic.scaling import BOARD_BASE_HEIGHT, BOARD_BASE_WIDTH, ViewportScale
from src.rendering.frame_data import FrameData, RowView

HEADER_HEIGHT = 110
BANNER_HEIGHT = 48
COLUMN_HEADER_HEIGHT = 40
ROW_HEIGHT = 90
ROW_SLOTS = 5
FOOTER_MIN_HEIGHT = 120
FOOTER_PADDING = 24
TICKER_LINE_HEIGHT = 36
TICKER_LEFT_X = 120
UPDATED_WIDTH = 170

COLUMNS = (
    ("time", "Hora", 24),
    ("place", "", 250),
    ("line", "LN", 640),
    ("service", "Comboio", 720),
    ("remarks", "Observações", 920),
)

COLOR_BACKGROUND = (0, 20, 60)
COLOR_HEADER = (0, 40, 100)
COLOR_COLUMN_HEADER = (0, 30, 80)
COLOR_ROW = (0, 28, 74)
COLOR_ROW_ALT = (0, 34, 86)
COLOR_ROW_HIGHLIGHT = (0, 58, 128)
COLOR_ROW_BLINK = (230, 170, 0)
COLOR_FOOTER = (0, 40, 100)
COLOR_BANNER = (48, 48, 48)
COLOR_BANNER_ERROR = (150, 20, 20)
COLOR_LOGO = (0, 140, 70)

COLOR_TEXT = (255, 255, 255)
COLOR_DIM_TEXT = (150, 160, 190)
COLOR_DELAYED = (255, 200, 0)
COLOR_SUPPRESSED = (235, 50, 50)
COLOR_BLINK_TEXT = (0, 20, 60)

FONT_TITLE = ImageFont.load_default(size=40)
FONT_SUBTITLE = ImageFont.load_default(size=26)
FONT_CLOCK = ImageFont.load_default(size=44)
FONT_COLUMN = ImageFont.load_default(size=22)
FONT_ROW = ImageFont.load_default(size=34)
FONT_ROW_SMALL = ImageFont.load_default(size=22)
FONT_TICKER = ImageFont.load_default(size=28)
FONT_BANNER = ImageFont.load_default(size=26)

EMPTY_TEXT = "Sem registos disponíveis"


def _text_width(text: str, font: ImageFont.ImageFont | ImageFont.FreeTypeFont) -> float:
    return font.getlength(text)


def _fit(text: str, font, max_width: float) -> str:
    if _text_width(text, font) <= max_width:
        return text
    ellipsis = "…"
    while text and _text_width(text + ellipsis, font) > max_width:
        text = text[:-1]
    return text + ellipsis if text else ""


def wrap_text(text: str, font, max_width: float) -> list[str]:
    """Greedy word wrap; a single word wider than ``max_width`` gets its own line."""
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if current and _text_width(candidate, font) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines or [""]


def _ticker_lines(data: FrameData) -> list[str]:
    ticker_width = BOARD_BASE_WIDTH - TICKER_LEFT_X - UPDATED_WIDTH
    return wrap_text(data.ticker_text, FONT_TICKER, ticker_width)


def _footer_height(data: FrameData) -> int:
    lines = len(_ticker_lines(data))
    return max(FOOTER_MIN_HEIGHT, lines * TICKER_LINE_HEIGHT + 2 * FOOTER_PADDING)


def _content_top(data: FrameData) -> int:
    return HEADER_HEIGHT + (BANNER_HEIGHT if data.banner else 0)


def _row_slots(data: FrameData) -> int:
    return max(ROW_SLOTS, len(data.rows))


def measure_board(data: FrameData) -> tuple[int, int]:
    """Natural size of the board content; the height grows with banner, rows beyond five and ticker length."""
    height = _content_top(data) + COLUMN_HEADER_HEIGHT + _row_slots(data) * ROW_HEIGHT + _footer_height(data)
    return BOARD_BASE_WIDTH, height


def row_box(data: FrameData, index: int) -> tuple[int, int, int, int]:
    """Bounding box of row slot ``index``."""
    top = _content_top(data) + COLUMN_HEADER_HEIGHT + index * ROW_HEIGHT
    return 0, top, BOARD_BASE_WIDTH - 1, top + ROW_HEIGHT - 1


def _row_background(row: RowView, index: int, blink_on: bool) -> tuple[int, int, int]:
    if row.blink and blink_on:
        return COLOR_ROW_BLINK
    if row.highlight:
        return COLOR_ROW_HIGHLIGHT
    return COLOR_ROW_ALT if index % 2 else COLOR_ROW


def _draw_header(draw: ImageDraw.ImageDraw, data: FrameData) -> None:
    draw.rectangle((0, 0, BOARD_BASE_WIDTH - 1, HEADER_HEIGHT - 1), fill=COLOR_HEADER)
    draw.text((24, 18), "Infraestruturas", font=FONT_SUBTITLE, fill=COLOR_TEXT)
    draw.text((24, 52), "de Portugal", font=FONT_SUBTITLE, fill=COLOR_DIM_TEXT)

    title_width = _text_width(data.title, FONT_TITLE)
    title_x = (BOARD_BASE_WIDTH - title_width) // 2
    draw.text((title_x, 14), data.title, font=FONT_TITLE, fill=COLOR_TEXT)
    if data.station_name:
        name_width = _text_width(data.station_name, FONT_SUBTITLE)
        draw.text(((BOARD_BASE_WIDTH - name_width) // 2, 66), data.station_name, font=FONT_SUBTITLE, fill=COLOR_DELAYED)

    clock_width = _text_width(data.clock_text, FONT_CLOCK)
    draw.text((BOARD_BASE_WIDTH - 24 - clock_width, 30), data.clock_text, font=FONT_CLOCK, fill=COLOR_TEXT)


def _draw_banner(draw: ImageDraw.ImageDraw, data: FrameData) -> None:
    if not data.banner:
        return
    color = COLOR_BANNER_ERROR if data.banner_is_error else COLOR_BANNER
    draw.rectangle((0, HEADER_HEIGHT, BOARD_BASE_WIDTH - 1, HEADER_HEIGHT + BANNER_HEIGHT - 1), fill=color)
    draw.text((24, HEADER_HEIGHT + 10), data.banner, font=FONT_BANNER, fill=COLOR_TEXT)


def _draw_column_header(draw: ImageDraw.ImageDraw, data: FrameData) -> None:
    top = _content_top(data)
    draw.rectangle((0, top, BOARD_BASE_WIDTH - 1, top + COLUMN_HEADER_HEIGHT - 1), fill=COLOR_COLUMN_HEADER)
    for key, label, x in COLUMNS:
        text = data.place_label if key == "place" else label
        draw.text((x, top + 9), text, font=FONT_COLUMN, fill=COLOR_DIM_TEXT)


def _draw_row(draw: ImageDraw.ImageDraw, data: FrameData, index: int, row: RowView, blink_on: bool) -> None:
    left, top, right, bottom = row_box(data, index)
    background = _row_background(row, index, blink_on)
    draw.rectangle((left, top, right, bottom), fill=background)

    blinking = row.blink and blink_on
    base_color = COLOR_BLINK_TEXT if blinking else COLOR_TEXT
    text_y = top + (ROW_HEIGHT - 34) // 2
    column_x = {key: x for key, _, x in COLUMNS}

    time_color = base_color
    if not blinking and row.suppressed:
        time_color = COLOR_SUPPRESSED
    elif not blinking and row.delayed:
        time_color = COLOR_DELAYED

    if row.original_time:
        draw.text((column_x["time"], top + 8), row.original_time, font=FONT_ROW_SMALL, fill=COLOR_DIM_TEXT)
        original_width = _text_width(row.original_time, FONT_ROW_SMALL)
        strike_y = top + 8 + 12
        draw.line((column_x["time"], strike_y, column_x["time"] + original_width, strike_y), fill=COLOR_DIM_TEXT, width=2)
        draw.text((column_x["time"], top + 36), row.time_text, font=FONT_ROW, fill=time_color)
    else:
        draw.text((column_x["time"], text_y), row.time_text, font=FONT_ROW, fill=time_color)
        if row.suppressed:
            time_width = _text_width(row.time_text, FONT_ROW)
            strike_y = text_y + 18
            draw.line((column_x["time"], strike_y, column_x["time"] + time_width, strike_y), fill=time_color, width=3)

    place_width = column_x["line"] - column_x["place"] - 16
    draw.text((column_x["place"], text_y), _fit(row.place, FONT_ROW, place_width), font=FONT_ROW, fill=base_color)
    draw.text((column_x["line"], text_y), _fit(row.line, FONT_ROW, 64), font=FONT_ROW, fill=base_color)
    service_width = column_x["remarks"] - column_x["service"] - 16
    draw.text((column_x["service"], text_y), _fit(row.service, FONT_ROW, service_width), font=FONT_ROW, fill=base_color)

    remarks_color = base_color
    if not blinking and row.suppressed:
        remarks_color = COLOR_SUPPRESSED
    elif not blinking and row.delayed:
        remarks_color = COLOR_DELAYED
    remarks_width = BOARD_BASE_WIDTH - column_x["remarks"] - 24
    draw.text(
        (column_x["remarks"], top + (ROW_HEIGHT - 22) // 2),
        _fit(row.remarks, FONT_ROW_SMALL, remarks_width),
        font=FONT_ROW_SMALL,
        fill=remarks_color,
    )


def _draw_footer(draw: ImageDraw.ImageDraw, data: FrameData, height: int) -> None:
    footer_top = height - _footer_height(data)
    draw.rectangle((0, footer_top, BOARD_BASE_WIDTH - 1, height - 1), fill=COLOR_FOOTER)
    draw.rectangle((24, footer_top + FOOTER_PADDING, 84, footer_top + FOOTER_PADDING + 60), fill=COLOR_LOGO)
    draw.text((34, footer_top + FOOTER_PADDING + 16), "CP", font=FONT_TICKER, fill=COLOR_TEXT)

    for idx, line in enumerate(_ticker_lines(data)):
        y = footer_top + FOOTER_PADDING + idx * TICKER_LINE_HEIGHT
        draw.text((TICKER_LEFT_X, y), line, font=FONT_TICKER, fill=COLOR_TEXT)

    if data.updated_text:
        updated_width = _text_width(data.updated_text, FONT_COLUMN)
        draw.text(
            (BOARD_BASE_WIDTH - 24 - updated_width, footer_top + FOOTER_PADDING + 6),
            data.updated_text,
            font=FONT_COLUMN,
            fill=COLOR_DIM_TEXT,
        )


def compose_board(data: FrameData, blink_on: bool = True) -> Image.Image:
    """Compose an RGB board image at its natural logical size.

    ``blink_on`` is the current blink phase; rows inside the blink window are
    drawn emphasized only while it is True.
    """
    width, height = measure_board(data)
    height = max(height, BOARD_BASE_HEIGHT)
    image = Image.new("RGB", (width, height), COLOR_BACKGROUND)
    draw = ImageDraw.Draw(image)

    _draw_header(draw, data)
    _draw_banner(draw, data)
    _draw_column_header(draw, data)

    if not data.loading:
        if not data.rows:
            _, top, _, _ = row_box(data, 0)
            draw.text((24, top + (ROW_HEIGHT - 34) // 2), EMPTY_TEXT, font=FONT_ROW, fill=COLOR_DIM_TEXT)
        for index, row in enumerate(data.rows):
            _draw_row(draw, data, index, row, blink_on)

    _draw_footer(draw, data, height)
    return image


def fit_to_viewport(image: Image.Image, scale: ViewportScale, viewport: tuple[int, int]) -> Image.Image:
    """Scale the board per axis and centre it on a viewport-sized canvas."""
    viewport_width, viewport_height = (int(v) for v in viewport)
    if viewport_width <= 0 or viewport_height <= 0:
        return image
    scaled_size = (
        max(1, round(image.width * scale.x)),
        max(1, round(image.height * scale.y)),
    )
    scaled = image.resize(scaled_size, Image.Resampling.LANCZOS)
    canvas = Image.new("RGB", (viewport_width, viewport_height), (0, 0, 0))
    offset = ((viewport_width - scaled.width) // 2, (viewport_height - scaled.height) // 2)
    canvas.paste(scaled, offset)
    return canvas


__all__ = ["compose_board", "fit_to_viewport", "measure_board", "row_box", "wrap_text"]
