"""Active archive record API routes."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Iterable

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from arsip import classification, retention, storage, storage_config
from arsip.storage import StorageAddress

from .. import models, queries, schemas
from ..database import get_session

router = APIRouter(prefix="/records", tags=["records"])

logger = logging.getLogger(__name__)

# Columns that cannot be cleared through an update.
REQUIRED_TEXT_FIELDS = ("description", "media", "access", "notes")


def _get_unit(session: Session, unit_id: int | None) -> models.Unit | None:
    if unit_id is None:
        return None
    return session.get(models.Unit, unit_id)


def _require_unit(session: Session, unit_id: int) -> models.Unit:
    unit = _get_unit(session, unit_id)
    if unit is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unit not found")
    return unit


def _get_record(session: Session, record_id: int) -> models.ActiveRecord:
    record = session.exec(
        select(models.ActiveRecord)
        .where(models.ActiveRecord.id == record_id)
        .options(selectinload(models.ActiveRecord.location))
    ).first()
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Record not found")
    return record


def _location_read(address: StorageAddress) -> schemas.LocationRead:
    return schemas.LocationRead(**address.as_fields(), label=address.label())


def _stored_address(location: models.StorageLocation | None) -> StorageAddress:
    if location is None:
        return storage.BLANK_ADDRESS
    try:
        return StorageAddress(location.cabinet, int(location.drawer), int(location.folder))
    except (TypeError, ValueError):
        return storage.BLANK_ADDRESS


def _serialize_record(record: models.ActiveRecord) -> schemas.RecordRead:
    data = record.model_dump(exclude={"location"})
    return schemas.RecordRead(**data, location=_location_read(_stored_address(record.location)))


def _serialize_records(records: Iterable[models.ActiveRecord]) -> list[schemas.RecordRead]:
    return [_serialize_record(record) for record in records]


def _retention_period(record: models.ActiveRecord) -> str | None:
    if record.active_from is None:
        return None
    return retention.active_period(record.active_from, record.retention_years)


def compute_location(
    session: Session,
    *,
    unit_id: int | None,
    file_number: int | None = None,
    edit_id: int | None = None,
) -> StorageAddress:
    """Run the allocator against the database for ``unit_id``."""

    unit = _get_unit(session, unit_id)
    return storage.allocate_location(
        queries.SessionLocationQueries(session),
        unit_name=unit.name if unit else None,
        unit_id=unit.id if unit else None,
        file_number=file_number,
        edit_id=edit_id,
        cabinet_map=storage_config.UNIT_CABINETS,
        capacity=storage_config.DRAWER_CAPACITY,
    )


@router.post("/location", response_model=schemas.LocationRead)
def preview_location(payload: schemas.LocationRequest, session: Session = Depends(get_session)):
    address = compute_location(
        session,
        unit_id=payload.unit_id,
        file_number=payload.file_number,
        edit_id=payload.edit_id,
    )
    return _location_read(address)


@router.get("/", response_model=list[schemas.RecordRead])
def list_records(unit_id: int = Query(...), session: Session = Depends(get_session)):
    _require_unit(session, unit_id)
    return _serialize_records(queries.unit_records(session, unit_id))


@router.get("/next-number", response_model=schemas.NextFileNumber)
def read_next_file_number(unit_id: int = Query(...), session: Session = Depends(get_session)):
    _require_unit(session, unit_id)
    return schemas.NextFileNumber(unit_id=unit_id, file_number=queries.next_file_number(session, unit_id))


@router.get("/cabinet", response_model=schemas.CabinetOccupancy)
def cabinet_occupancy(unit_id: int = Query(...), session: Session = Depends(get_session)):
    _require_unit(session, unit_id)
    triples = []
    for record in queries.unit_records(session, unit_id):
        location = record.location
        if location is not None:
            triples.append((location.cabinet, location.drawer, location.folder))
    return schemas.CabinetOccupancy(
        unit_id=unit_id, cabinets=storage.compute_drawer_occupancy(triples)
    )


@router.get("/retention", response_model=list[schemas.RetentionStatus])
def retention_status(
    unit_id: int = Query(...),
    within: int | None = Query(None, ge=0),
    expired: bool = False,
    session: Session = Depends(get_session),
):
    """Records still in active storage with the days left in their active period.

    ``expired`` keeps records whose period has passed, ``within`` keeps those
    ending in the next ``within`` days.  Filtered results come soonest first.
    """

    _require_unit(session, unit_id)
    today = dt.date.today()
    rows = []
    for record in queries.unit_records(session, unit_id):
        days = retention.days_remaining(record.retention_period, today)
        if days is None:
            continue
        if expired and days >= 0:
            continue
        if within is not None and not 0 <= days <= within:
            continue
        rows.append((days, record))

    if expired or within is not None:
        rows.sort(key=lambda row: (row[0], row[1].file_number))
    else:
        rows.sort(
            key=lambda row: (
                classification.classification_key(row[1].classification_code),
                row[1].file_number,
            )
        )
    return [
        schemas.RetentionStatus(**_serialize_record(record).model_dump(), days_remaining=days)
        for days, record in rows
    ]


@router.post("/renumber", response_model=schemas.RenumberResult)
def renumber_records(unit_id: int = Query(...), session: Session = Depends(get_session)):
    _require_unit(session, unit_id)
    records = queries.unit_records(session, unit_id)
    numbers = classification.renumber(records)
    for record in records:
        new_number = numbers[record.id]
        if record.file_number != new_number:
            record.file_number = new_number
            session.add(record)
    session.commit()
    logger.info("Renumbered %s active records of unit %s", len(records), unit_id)
    return schemas.RenumberResult(unit_id=unit_id, renumbered=len(records))


@router.post("/", response_model=schemas.RecordRead, status_code=status.HTTP_201_CREATED)
def create_record(payload: schemas.RecordCreate, session: Session = Depends(get_session)):
    unit = _require_unit(session, payload.unit_id)
    code = payload.classification_code.strip()
    if not code:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Classification code is required")

    address = compute_location(session, unit_id=unit.id, file_number=payload.file_number)
    if address.is_blank:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Storage location cannot be determined for this unit",
        )
    location_id = queries.persist_location(session, unit.id, address)

    file_number = payload.file_number
    if file_number is None or file_number <= 0:
        file_number = queries.next_file_number(session, unit.id)

    data = payload.model_dump(exclude={"unit_id", "file_number", "classification_code"})
    record = models.ActiveRecord(
        **data,
        unit_id=unit.id,
        file_number=file_number,
        classification_code=code,
        location_id=location_id,
    )
    record.retention_period = _retention_period(record)
    session.add(record)
    session.commit()
    session.refresh(record)
    logger.info("Filed record %s of unit %s at %s", record.id, unit.id, address.label())
    return _serialize_record(record)


@router.get("/{record_id}", response_model=schemas.RecordRead)
def read_record(record_id: int, session: Session = Depends(get_session)):
    return _serialize_record(_get_record(session, record_id))


@router.patch("/{record_id}", response_model=schemas.RecordRead)
def update_record(
    record_id: int,
    payload: schemas.RecordUpdate,
    session: Session = Depends(get_session),
):
    record = _get_record(session, record_id)
    changes = payload.model_dump(exclude_unset=True)

    if "file_number" in changes and (changes["file_number"] is None or changes["file_number"] <= 0):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File number must be positive")
    if "classification_code" in changes:
        code = (changes["classification_code"] or "").strip()
        if not code:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Classification code is required")
        changes["classification_code"] = code
    cleared = [field for field in REQUIRED_TEXT_FIELDS if field in changes and changes[field] is None]
    if cleared:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Fields cannot be empty: {', '.join(cleared)}",
        )

    unit_id = changes.pop("unit_id", None) or record.unit_id
    unit = _require_unit(session, unit_id)

    address = compute_location(session, unit_id=unit.id, edit_id=record.id)
    if not address.is_blank:
        record.location_id = queries.persist_location(session, unit.id, address)
    record.unit_id = unit.id

    for field, value in changes.items():
        setattr(record, field, value)
    record.retention_period = _retention_period(record)

    session.add(record)
    session.commit()
    session.refresh(record)
    return _serialize_record(record)


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_record(record_id: int, session: Session = Depends(get_session)):
    record = _get_record(session, record_id)
    linked = session.exec(
        select(models.TransferLink).where(models.TransferLink.active_record_id == record_id)
    ).first()
    selected = session.exec(
        select(models.TransferItem).where(models.TransferItem.active_record_id == record_id)
    ).first()
    if linked or selected:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Record is part of a transfer to inactive storage",
        )
    session.delete(record)
    session.commit()
    return None
