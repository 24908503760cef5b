"""Status classification for schedule rows.

Two passes exist. ``infer_status`` runs once while a row is built from the
upstream feed and stores one of the three operational states on the row.
``display_flags`` runs on every render against the literal remark text and the
stored status; the two can disagree when upstream wording lags the status.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

PONTUAL = "pontual"
ATRASADO = "atrasado"
SUPRIMIDO = "suprimido"

# Ordered (lower-cased substring, status) pairs; first hit wins.
UPSTREAM_STATUS_RULES: tuple[tuple[str, str], ...] = (
    ("suprim", SUPRIMIDO),
    ("atras", ATRASADO),
)

DELAYED_REMARK_PHRASE = "circula com atraso"
SUPPRESSED_REMARK_PHRASE = "suprimido"

STATUS_LABELS = {
    PONTUAL: "Pontual",
    ATRASADO: "Atrasado",
    SUPRIMIDO: "Suprimido",
}


@dataclass(frozen=True)
class DisplayFlags:
    """Styling flags for one rendered row."""

    delayed: bool
    suppressed: bool


def _lower(value: Any) -> str:
    return value.lower() if isinstance(value, str) else ""


def infer_status(remarks: Any) -> str:
    """Classify upstream remarks into pontual, atrasado or suprimido."""
    text = _lower(remarks)
    for needle, status in UPSTREAM_STATUS_RULES:
        if needle in text:
            return status
    return PONTUAL


def display_flags(row: Any) -> DisplayFlags:
    """Compute the delayed/suppressed flags from the current remarks and status."""
    remarks = _lower(getattr(row, "remarks", ""))
    status = _lower(getattr(row, "status", ""))
    return DisplayFlags(
        delayed=DELAYED_REMARK_PHRASE in remarks or status == ATRASADO,
        suppressed=SUPPRESSED_REMARK_PHRASE in remarks or status == SUPRIMIDO,
    )


def status_label(row: Any) -> str:
    """Human-readable label for the row's stored status, or an empty string."""
    return STATUS_LABELS.get(_lower(getattr(row, "status", "")), "")


__all__ = [
    "PONTUAL",
    "ATRASADO",
    "SUPRIMIDO",
    "STATUS_LABELS",
    "UPSTREAM_STATUS_RULES",
    "DisplayFlags",
    "infer_status",
    "display_flags",
    "status_label",
]
