"""Classification catalogue lookups."""

from __future__ import annotations

import logging
from typing import Optional

from rapidfuzz import fuzz
from sqlmodel import Session, select

from arsip.classification import base_code, classification_key
from arsip_web import models

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 20
MIN_SCORE = 50.0


def find_classification(session: Session, code: str | None) -> Optional[models.Classification]:
    """Return the catalogue entry for ``code``, trying the legacy code second."""

    wanted = base_code(code)
    if not wanted:
        return None
    record = session.exec(
        select(models.Classification).where(models.Classification.code == wanted)
    ).first()
    if record is not None:
        return record
    record = session.exec(
        select(models.Classification).where(models.Classification.old_code == wanted)
    ).first()
    if record is not None:
        logger.debug("Resolved legacy classification code %s -> %s", wanted, record.code)
    return record


def _score(record: models.Classification, query: str) -> float:
    query_norm = query.strip().lower()
    code = (record.code or "").lower()
    label = (record.label or "").lower()
    scores = [
        float(fuzz.WRatio(query_norm, f"{code} {label}".strip())),
        float(fuzz.partial_ratio(query_norm, label)) if label else 0.0,
    ]
    bonus = 0.0
    if code == query_norm:
        bonus += 30.0
    elif code.startswith(query_norm):
        bonus += 15.0
    elif record.old_code and record.old_code.lower().startswith(query_norm):
        bonus += 10.0
    return max(scores) + bonus


def search_classifications(
    session: Session, query: str, limit: int = SEARCH_LIMIT
) -> list[tuple[models.Classification, float]]:
    """Return catalogue entries ranked by fuzzy similarity to ``query``."""

    if not query or not query.strip():
        return []
    records = session.exec(select(models.Classification)).all()
    scored = [(record, _score(record, query)) for record in records]
    scored = [item for item in scored if item[1] >= MIN_SCORE]
    scored.sort(key=lambda item: (-item[1], classification_key(item[0].code)))
    return scored[: max(limit, 0)]
