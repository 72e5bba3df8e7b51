"""Classification-code ordering and file-number renumbering."""

from __future__ import annotations

import datetime as dt
from typing import Any, Iterable, Sequence

PERIOD_SEPARATOR = " s.d. "
UNDATED = "9999-12-31"


def base_code(code: str | None) -> str:
    """Return the classification code without its ``/suffix`` part."""

    return (code or "").split("/")[0].strip()


def classification_key(code: str | None) -> tuple[tuple[int, ...], int]:
    """Sort key placing dotted codes in natural numeric order.

    ``2.9`` sorts before ``2.10`` and ``000.5.1`` before ``000.5.1.1``.
    Components that are not numbers count as ``0``.
    """

    parts = []
    for part in (base_code(code) or "0").split("."):
        try:
            parts.append(int(part))
        except ValueError:
            parts.append(0)
    # Trailing zeros are significant only through the length tie-breaker.
    significant = list(parts)
    while len(significant) > 1 and significant[-1] == 0:
        significant.pop()
    return tuple(significant), len(parts)


def period_start(period: str | None) -> str:
    """Return the ISO start date of a ``dd-mm-yyyy s.d. dd-mm-yyyy`` period."""

    if not period:
        return UNDATED
    start = period.split(PERIOD_SEPARATOR)[0].strip()
    pieces = start.split("-")
    if len(pieces) != 3 or not all(piece.strip() for piece in pieces):
        return UNDATED
    day, month, year = (piece.strip() for piece in pieces)
    return f"{year}-{month}-{day}"


def _field(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def _created_key(value: Any) -> str:
    if isinstance(value, dt.datetime):
        return value.isoformat()
    return str(value or "")


def renumber_key(record: Any) -> tuple:
    return (
        classification_key(_field(record, "classification_code")),
        period_start(_field(record, "period")),
        _created_key(_field(record, "created_at")),
        _field(record, "id") or 0,
    )


def renumber_order(records: Iterable[Any]) -> list[Any]:
    """Return ``records`` sorted by code, period start, creation time, id."""

    return sorted(records, key=renumber_key)


def renumber(records: Sequence[Any]) -> dict[Any, int]:
    """Return ``{record id: new file number}`` numbering from 1."""

    return {
        _field(record, "id"): position
        for position, record in enumerate(renumber_order(records), start=1)
    }
