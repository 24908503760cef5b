from __future__ import annotations

from PIL import Image

from src.logic.scaling import ViewportScale
from src.rendering.composer import (
    BANNER_HEIGHT,
    COLOR_BANNER,
    COLOR_BANNER_ERROR,
    COLOR_ROW,
    COLOR_ROW_ALT,
    COLOR_ROW_BLINK,
    COLOR_ROW_HIGHLIGHT,
    FONT_TICKER,
    HEADER_HEIGHT,
    ROW_HEIGHT,
    compose_board,
    fit_to_viewport,
    measure_board,
    row_box,
    wrap_text,
)
from src.rendering.emulator import save_frame
from src.rendering.frame_data import FrameData, RowView


def _row(**overrides) -> RowView:
    values = dict(time_text="07:38", place="SINTRA", line="2", service="SUBU 18220", remarks="Pontual")
    values.update(overrides)
    return RowView(**values)


def _frame(rows: list[RowView] | None = None, **overrides) -> FrameData:
    values = dict(
        title="PARTIDAS / DEPARTURES",
        place_label="Destino",
        station_name="LISBOA - ROSSIO",
        clock_text="07:30:00",
        rows=rows or [],
        ticker_text="Serviço normal",
        updated_text="07:29:40",
    )
    values.update(overrides)
    return FrameData(**values)


def _row_pixel(image: Image.Image, data: FrameData, index: int) -> tuple[int, int, int]:
    _, top, _, _ = row_box(data, index)
    return image.getpixel((5, top + 5))


def test_measure_board_base_size() -> None:
    assert measure_board(_frame()) == (1280, 720)


def test_measure_board_grows_with_banner() -> None:
    assert measure_board(_frame(banner="A carregar informação…")) == (1280, 720 + BANNER_HEIGHT)


def test_measure_board_grows_with_long_ticker() -> None:
    data = _frame(ticker_text=" ".join(["Perturbações na circulação"] * 20))

    width, height = measure_board(data)

    assert width == 1280
    assert height > 720


def test_compose_board_size_and_mode() -> None:
    data = _frame([_row()])

    image = compose_board(data)

    assert isinstance(image, Image.Image)
    assert image.mode == "RGB"
    assert image.size == (1280, 720)


def test_compose_board_row_backgrounds() -> None:
    data = _frame(
        [
            _row(highlight=True),
            _row(time_text="07:45"),
            _row(time_text="07:53", blink=True),
            _row(time_text="08:01", delayed=True, original_time="07:56"),
        ]
    )

    image = compose_board(data, blink_on=True)

    assert _row_pixel(image, data, 0) == COLOR_ROW_HIGHLIGHT
    assert _row_pixel(image, data, 1) == COLOR_ROW_ALT
    assert _row_pixel(image, data, 2) == COLOR_ROW_BLINK
    assert _row_pixel(image, data, 3) == COLOR_ROW_ALT


def test_compose_board_blink_off_phase() -> None:
    data = _frame([_row(highlight=True), _row(), _row(blink=True)])

    image = compose_board(data, blink_on=False)

    assert _row_pixel(image, data, 2) == COLOR_ROW


def test_compose_board_banner_colors() -> None:
    loading = _frame(banner="A carregar informação…", loading=True)
    failed = _frame([_row()], banner="Não foi possível obter os dados.", banner_is_error=True)

    assert compose_board(loading).getpixel((5, HEADER_HEIGHT + 5)) == COLOR_BANNER
    assert compose_board(failed).getpixel((5, HEADER_HEIGHT + 5)) == COLOR_BANNER_ERROR
    assert compose_board(failed).size == (1280, 720 + BANNER_HEIGHT)


def test_compose_board_suppressed_and_empty_smoke() -> None:
    suppressed = _frame([_row(suppressed=True, remarks="Suprimido")])

    assert compose_board(suppressed).size == (1280, 720)
    assert compose_board(_frame()).size == (1280, 720)


def test_wrap_text() -> None:
    assert wrap_text("", FONT_TICKER, 100) == [""]
    assert wrap_text("Serviço normal", FONT_TICKER, 1000) == ["Serviço normal"]

    lines = wrap_text("Perturbações na circulação da linha de Sintra", FONT_TICKER, 200)

    assert len(lines) > 1
    assert " ".join(lines) == "Perturbações na circulação da linha de Sintra"


def test_fit_to_viewport_scales_and_centres() -> None:
    image = Image.new("RGB", (1280, 720), (10, 20, 30))

    full = fit_to_viewport(image, ViewportScale(1.5, 1.5), (1920, 1080))
    letterboxed = fit_to_viewport(image, ViewportScale(1.5, 1.0), (1920, 1080))

    assert full.size == (1920, 1080)
    assert full.getpixel((0, 0)) == (10, 20, 30)
    assert letterboxed.size == (1920, 1080)
    assert letterboxed.getpixel((960, 10)) == (0, 0, 0)
    assert letterboxed.getpixel((960, 540)) == (10, 20, 30)


def test_fit_to_viewport_without_viewport_returns_image() -> None:
    image = Image.new("RGB", (1280, 720))

    assert fit_to_viewport(image, ViewportScale(), (0, 0)) is image


def test_save_frame_replaces_file(tmp_path) -> None:
    path = tmp_path / "out" / "frame.png"

    save_frame(Image.new("RGB", (4, 4), (255, 0, 0)), str(path))
    written = save_frame(Image.new("RGB", (8, 8), (0, 255, 0)), str(path))

    assert written == path
    with Image.open(path) as saved:
        assert saved.size == (8, 8)
    assert [p.name for p in path.parent.iterdir()] == ["frame.png"]


def test_compose_board_grows_for_more_than_five_rows() -> None:
    data = _frame([_row(time_text=f"08:0{minute}") for minute in range(7)])

    image = compose_board(data)

    assert measure_board(data) == (1280, 720 + 2 * ROW_HEIGHT)
    assert image.size == (1280, 720 + 2 * ROW_HEIGHT)
    assert _row_pixel(image, data, 6) == COLOR_ROW
