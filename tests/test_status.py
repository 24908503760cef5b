from __future__ import annotations

from src.data.rows import Row
from src.logic.status import (
    ATRASADO,
    PONTUAL,
    SUPRIMIDO,
    UPSTREAM_STATUS_RULES,
    display_flags,
    infer_status,
    status_label,
)


def _row(status: str, remarks: str) -> Row:
    return Row(
        id="r1",
        time="08:15",
        line="3",
        service="REGI 4407",
        status=status,
        remarks=remarks,
        destination="TOMAR",
    )


def test_infer_status_rule_table() -> None:
    assert infer_status("Suprimido") == SUPRIMIDO
    assert infer_status("Comboio SUPRIMIDO por greve") == SUPRIMIDO
    assert infer_status("Supressão parcial") == PONTUAL
    assert infer_status("Circula com atraso") == ATRASADO
    assert infer_status("Atrasado 5 min") == ATRASADO
    assert infer_status("") == PONTUAL
    assert infer_status(None) == PONTUAL


def test_infer_status_first_rule_wins() -> None:
    assert UPSTREAM_STATUS_RULES[0] == ("suprim", SUPRIMIDO)
    assert infer_status("Atrasado e depois suprimido") == SUPRIMIDO


def test_display_flags_from_remarks_when_status_lags() -> None:
    flags = display_flags(_row(PONTUAL, "Circula com atraso de 5 minutos"))

    assert flags.delayed is True
    assert flags.suppressed is False


def test_display_flags_suppressed_remarks_with_pontual_status() -> None:
    flags = display_flags(_row(PONTUAL, "Comboio suprimido"))

    assert flags.suppressed is True
    assert flags.delayed is False


def test_display_flags_from_status_when_remarks_are_vague() -> None:
    delayed = display_flags(_row(ATRASADO, "Atraso previsto"))
    suppressed = display_flags(_row(SUPRIMIDO, "Suprimida a paragem"))

    assert delayed.delayed is True
    assert suppressed.suppressed is True


def test_display_flags_ignore_loose_wording() -> None:
    # "atraso" alone makes the upstream status atrasado, but the display pass
    # only reacts to the full phrase or the stored status.
    row = _row(PONTUAL, "Atraso previsto")

    assert infer_status(row.remarks) == ATRASADO
    assert display_flags(row).delayed is False


def test_status_label() -> None:
    assert status_label(_row(PONTUAL, "")) == "Pontual"
    assert status_label(_row("ATRASADO", "")) == "Atrasado"
    assert status_label(_row("desconhecido", "")) == ""
