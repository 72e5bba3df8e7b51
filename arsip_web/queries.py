"""Record-store queries backing the location allocator."""

from __future__ import annotations

import logging
from typing import Callable, Optional, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from arsip.storage import LocationQueryError, StorageAddress

from . import models

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _guarded(action: Callable[[], T]) -> T:
    try:
        return action()
    except SQLAlchemyError as exc:
        raise LocationQueryError(str(exc)) from exc


def excluded_record_ids(session: Session) -> set[int]:
    """Return ids of active records already moved to inactive storage."""

    rows = session.exec(select(models.TransferLink.active_record_id)).all()
    return {row for row in rows if row is not None}


def _not_excluded(statement, exclude: set[int]):
    if exclude:
        statement = statement.where(models.ActiveRecord.id.notin_(sorted(exclude)))
    return statement


class SessionLocationQueries:
    """:class:`arsip.storage.LocationQueries` implemented over a session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def excluded_record_ids(self) -> set[int]:
        return _guarded(lambda: excluded_record_ids(self.session))

    def count_unit_records(self, unit_id: int, exclude: set[int]) -> int:
        statement = select(func.count(models.ActiveRecord.id)).where(
            models.ActiveRecord.unit_id == unit_id
        )
        statement = _not_excluded(statement, exclude)
        return int(_guarded(lambda: self.session.exec(statement).one()))

    def count_drawer_records(self, unit_id: int, drawer: int, exclude: set[int]) -> int:
        statement = (
            select(func.count(models.ActiveRecord.id))
            .join(models.StorageLocation, models.ActiveRecord.location_id == models.StorageLocation.id)
            .where(models.StorageLocation.unit_id == unit_id)
            .where(models.StorageLocation.drawer == str(drawer))
        )
        statement = _not_excluded(statement, exclude)
        return int(_guarded(lambda: self.session.exec(statement).one()))

    def stored_location(self, record_id: int) -> Optional[tuple[Optional[str], Optional[str]]]:
        def _lookup():
            record = self.session.get(models.ActiveRecord, record_id)
            if record is None:
                return None
            location = record.location
            if location is None:
                return None, None
            return location.drawer, location.folder

        return _guarded(_lookup)


def persist_location(session: Session, unit_id: int, address: StorageAddress) -> Optional[int]:
    """Return the id of the location row for ``address``, inserting it if new."""

    if address.is_blank:
        return None
    fields = address.as_fields()

    def _find() -> Optional[models.StorageLocation]:
        return session.exec(
            select(models.StorageLocation).where(
                (models.StorageLocation.unit_id == unit_id)
                & (models.StorageLocation.cabinet == fields["cabinet"])
                & (models.StorageLocation.drawer == fields["drawer"])
                & (models.StorageLocation.folder == fields["folder"])
            )
        ).first()

    existing = _find()
    if existing is not None:
        return existing.id

    location = models.StorageLocation(unit_id=unit_id, **fields)
    session.add(location)
    try:
        session.flush()
    except IntegrityError:
        # Another request inserted the same address first.
        session.rollback()
        existing = _find()
        if existing is None:
            raise
        return existing.id
    logger.info("Created storage location %s for unit %s", address.label(), unit_id)
    return location.id


def unit_records(session: Session, unit_id: int) -> list[models.ActiveRecord]:
    """Return active records of ``unit_id`` that were not moved."""

    statement = select(models.ActiveRecord).where(models.ActiveRecord.unit_id == unit_id)
    statement = _not_excluded(statement, excluded_record_ids(session))
    return list(session.exec(statement.order_by(models.ActiveRecord.file_number)).all())


def next_file_number(session: Session, unit_id: int) -> int:
    """Return the next sequential file number for ``unit_id``."""

    statement = select(func.max(models.ActiveRecord.file_number)).where(
        models.ActiveRecord.unit_id == unit_id
    )
    statement = _not_excluded(statement, excluded_record_ids(session))
    last = session.exec(statement).one()
    return int(last or 0) + 1
