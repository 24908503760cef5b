"""Schedule row model and normalization of upstream feed entries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable

from src.logic.status import ATRASADO, PONTUAL, SUPRIMIDO, infer_status

DEPARTURES = "departures"
ARRIVALS = "arrivals"


@dataclass(frozen=True)
class Row:
    """One schedule entry, normalized at the feed boundary."""

    id: str
    time: str
    line: str
    service: str
    status: str
    remarks: str
    passed: bool = False
    destination: str | None = None
    origin: str | None = None

    @property
    def kind(self) -> str:
        return ARRIVALS if self.origin is not None and self.destination is None else DEPARTURES

    @property
    def place(self) -> str:
        """Destination for departures, origin for arrivals."""
        if self.destination is not None:
            return self.destination
        return self.origin or ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "time": self.time,
            "line": self.line,
            "service": self.service,
            "status": self.status,
            "remarks": self.remarks,
            "passed": self.passed,
        }
        if self.destination is not None:
            data["destination"] = self.destination
        if self.origin is not None:
            data["origin"] = self.origin
        return data


@dataclass(frozen=True)
class BoardSnapshot:
    """One complete board payload; replaced wholesale on every successful poll."""

    departures: tuple[Row, ...]
    arrivals: tuple[Row, ...]
    message: str
    last_updated: str

    def rows(self, kind: str = DEPARTURES) -> tuple[Row, ...]:
        return self.arrivals if kind == ARRIVALS else self.departures

    def to_dict(self) -> dict[str, Any]:
        return {
            "lastUpdated": self.last_updated,
            "message": self.message,
            "departures": [row.to_dict() for row in self.departures],
            "arrivals": [row.to_dict() for row in self.arrivals],
        }


@dataclass(frozen=True)
class Station:
    """Station search result."""

    id: str | None
    name: str
    distance: float | None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "distance": self.distance}


def _text(value: Any, strip: bool = True) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip() if strip else value


def _service_label(entry: dict[str, Any]) -> str:
    service_type = _text(entry.get("TipoServico"))
    code = entry.get("NComboio1")
    if code is None:
        code = entry.get("NComboio2")
    code_text = "" if code is None else str(code)

    if service_type and code_text:
        return f"{service_type} {code_text}"
    if code_text:
        return code_text
    return service_type


def _row_id(entry: dict[str, Any], kind: str, index: int) -> str:
    raw = entry.get("DataHoraPartidaChegada_ToOrderByi")
    # bool is an int subclass but never a usable key
    if isinstance(raw, str) or (isinstance(raw, (int, float)) and not isinstance(raw, bool)):
        return str(raw)
    return f"{kind}-{index}"


def rows_from_feed(entries: Iterable[Any], kind: str) -> tuple[Row, ...]:
    """Map raw upstream schedule entries to Rows, coercing every field."""
    rows: list[Row] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            continue
        remarks = _text(entry.get("Observacoes"))
        time_value = entry.get("DataHoraPartidaChegada")
        row = Row(
            id=_row_id(entry, kind, index),
            time=time_value if isinstance(time_value, str) else "",
            line=_text(entry.get("Linha")),
            service=_service_label(entry),
            status=infer_status(remarks),
            remarks=remarks,
            passed=bool(entry.get("ComboioPassou")),
            destination=_text(entry.get("NomeEstacaoDestino"), strip=False) if kind == DEPARTURES else None,
            origin=_text(entry.get("NomeEstacaoOrigem"), strip=False) if kind == ARRIVALS else None,
        )
        rows.append(row)
    return tuple(rows)


def stations_from_feed(entries: Any) -> list[Station]:
    """Map raw upstream station search entries to Stations."""
    if not isinstance(entries, list):
        return []
    stations: list[Station] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        node_id = entry.get("NodeID")
        distance = entry.get("Distancia")
        stations.append(
            Station(
                id=None if node_id is None else str(node_id),
                name=entry.get("Nome") if isinstance(entry.get("Nome"), str) else "",
                distance=float(distance)
                if isinstance(distance, (int, float)) and not isinstance(distance, bool)
                else None,
            )
        )
    return stations


def demo_snapshot(now: datetime | None = None) -> BoardSnapshot:
    """Fixed illustrative board shown while no station is selected."""
    moment = now or datetime.now(timezone.utc)
    return BoardSnapshot(
        departures=(
            Row("dep-1", "07:38", "2", "SUBU 18220", SUPRIMIDO, "Greve CP - Perturbações", destination="SINTRA"),
            Row("dep-2", "07:45", "4", "SUBU 16004", SUPRIMIDO, "Greve CP - Perturbações", destination="SINTRA"),
            Row("dep-3", "07:53", "5", "REGI 4407", SUPRIMIDO, "Greve CP - Perturbações", destination="TOMAR"),
        ),
        arrivals=(
            Row("arr-1", "07:32", "2", "SUBU 18219", ATRASADO, "Prevista chegada às 07:40", origin="SINTRA"),
            Row("arr-2", "07:50", "3", "SUBU 18223", PONTUAL, "", origin="CASTANHEIRA"),
        ),
        message="Operação normal",
        last_updated=moment.isoformat(),
    )


__all__ = [
    "DEPARTURES",
    "ARRIVALS",
    "Row",
    "BoardSnapshot",
    "Station",
    "rows_from_feed",
    "stations_from_feed",
    "demo_snapshot",
]
