"""Move-to-inactive transfer workflow routes."""

from __future__ import annotations

import datetime as dt
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from arsip import classification, retention

from .. import catalogue, models, queries, schemas
from ..database import get_session

router = APIRouter(prefix="/transfers", tags=["transfers"])

logger = logging.getLogger(__name__)

APPROVED = "Disetujui"
REJECTED = "Ditolak"

ROLE_FIELDS = {"head": "head_status", "secretary": "secretary_status"}


def _get_transfer(session: Session, transfer_id: int) -> models.Transfer:
    transfer = session.exec(
        select(models.Transfer)
        .where(models.Transfer.id == transfer_id)
        .options(selectinload(models.Transfer.items))
    ).first()
    if not transfer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transfer not found")
    return transfer


def _serialize_transfer(transfer: models.Transfer) -> schemas.TransferRead:
    data = transfer.model_dump(exclude={"items"})
    record_ids = sorted(item.active_record_id for item in transfer.items)
    return schemas.TransferRead(**data, record_ids=record_ids)


@router.post("/", response_model=schemas.TransferRead, status_code=status.HTTP_201_CREATED)
def create_transfer(payload: schemas.TransferCreate, session: Session = Depends(get_session)):
    if session.get(models.Unit, payload.unit_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unit not found")
    record_ids = sorted(set(payload.record_ids))
    if not record_ids:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Select at least one record")

    records = session.exec(
        select(models.ActiveRecord).where(models.ActiveRecord.id.in_(record_ids))
    ).all()
    found = {record.id for record in records}
    missing = [record_id for record_id in record_ids if record_id not in found]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Records not found: {', '.join(map(str, missing))}",
        )
    foreign = [record.id for record in records if record.unit_id != payload.unit_id]
    if foreign:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="All records must belong to the transferring unit",
        )
    moved = queries.excluded_record_ids(session) & found
    if moved:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Records already moved: {', '.join(map(str, sorted(moved)))}",
        )

    transfer = models.Transfer(
        unit_id=payload.unit_id,
        box_number=payload.box_number,
        storage_place=payload.storage_place,
    )
    session.add(transfer)
    session.flush()
    for record_id in record_ids:
        session.add(models.TransferItem(transfer_id=transfer.id, active_record_id=record_id))
    session.commit()
    logger.info("Transfer %s created for %s records of unit %s", transfer.id, len(record_ids), payload.unit_id)
    return _serialize_transfer(_get_transfer(session, transfer.id))


@router.get("/{transfer_id}", response_model=schemas.TransferRead)
def read_transfer(transfer_id: int, session: Session = Depends(get_session)):
    return _serialize_transfer(_get_transfer(session, transfer_id))


@router.post("/{transfer_id}/decision", response_model=schemas.TransferRead)
def decide_transfer(
    transfer_id: int,
    payload: schemas.TransferDecision,
    session: Session = Depends(get_session),
):
    transfer = _get_transfer(session, transfer_id)
    if transfer.status != "pending":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Transfer is already {transfer.status}",
        )

    setattr(transfer, ROLE_FIELDS[payload.role], APPROVED if payload.approved else REJECTED)
    if REJECTED in (transfer.head_status, transfer.secretary_status):
        transfer.status = "rejected"
    elif transfer.head_status == APPROVED and transfer.secretary_status == APPROVED:
        transfer.status = "approved"

    session.add(transfer)
    session.commit()
    session.refresh(transfer)
    logger.info("Transfer %s %s by %s", transfer.id, "approved" if payload.approved else "rejected", payload.role)
    return _serialize_transfer(transfer)


@router.post("/{transfer_id}/complete", response_model=schemas.TransferCompletion)
def complete_transfer(transfer_id: int, session: Session = Depends(get_session)):
    transfer = _get_transfer(session, transfer_id)
    if transfer.status != "approved":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Transfer must be approved by the unit head and the secretary",
        )

    record_ids = [item.active_record_id for item in transfer.items]
    moved = queries.excluded_record_ids(session) & set(record_ids)
    if moved:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Records already moved: {', '.join(map(str, sorted(moved)))}",
        )
    records = session.exec(
        select(models.ActiveRecord).where(models.ActiveRecord.id.in_(record_ids))
    ).all()

    today = dt.datetime.now(dt.timezone.utc).date()
    created: list[models.InactiveRecord] = []
    for number, record in enumerate(classification.renumber_order(records), start=1):
        entry = catalogue.find_classification(session, record.classification_code)
        inactive_years = entry.inactive_years if entry else None
        inactive = models.InactiveRecord(
            active_record_id=record.id,
            file_number=number,
            classification_code=record.classification_code,
            description=record.description,
            period=record.period,
            inactive_period=retention.inactive_period(
                retention.period_end_year(record.retention_period), inactive_years
            ),
            retention_years=inactive_years,
            disposition=entry.disposition if entry else None,
            box_number=transfer.box_number,
            storage_place=transfer.storage_place,
            moved_on=today,
        )
        session.add(inactive)
        created.append(inactive)
    session.flush()

    for inactive in created:
        session.add(
            models.TransferLink(
                active_record_id=inactive.active_record_id,
                inactive_record_id=inactive.id,
                transfer_id=transfer.id,
            )
        )
    transfer.status = "completed"
    transfer.completed_at = dt.datetime.now(dt.timezone.utc)
    session.add(transfer)
    session.commit()
    for inactive in created:
        session.refresh(inactive)
    session.refresh(transfer)
    logger.info("Transfer %s completed, %s records moved to inactive storage", transfer.id, len(created))
    return schemas.TransferCompletion(
        transfer=_serialize_transfer(transfer),
        inactive_records=[schemas.InactiveRecordRead(**item.model_dump()) for item in created],
    )
