"""Unit and classification catalogue API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session, select

from arsip import storage_config
from arsip.classification import base_code, classification_key
from arsip.storage import resolve_cabinet

from .. import catalogue, models, schemas
from ..database import get_session

router = APIRouter(tags=["units"])


def _unit_read(unit: models.Unit) -> schemas.UnitRead:
    return schemas.UnitRead(
        id=unit.id,
        name=unit.name,
        created_at=unit.created_at,
        cabinet=resolve_cabinet(unit.name, storage_config.UNIT_CABINETS),
    )


@router.post("/units", response_model=schemas.UnitRead, status_code=status.HTTP_201_CREATED)
def create_unit(payload: schemas.UnitCreate, session: Session = Depends(get_session)):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unit name is required")
    existing = session.exec(select(models.Unit).where(models.Unit.name == name)).first()
    if existing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unit already registered")

    unit = models.Unit(name=name)
    session.add(unit)
    session.commit()
    session.refresh(unit)
    return _unit_read(unit)


@router.get("/units", response_model=list[schemas.UnitRead])
def list_units(session: Session = Depends(get_session)):
    units = session.exec(select(models.Unit).order_by(models.Unit.name)).all()
    return [_unit_read(unit) for unit in units]


@router.post(
    "/classifications",
    response_model=schemas.ClassificationRead,
    status_code=status.HTTP_201_CREATED,
)
def create_classification(
    payload: schemas.ClassificationBase, session: Session = Depends(get_session)
):
    code = base_code(payload.code)
    if not code:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Classification code is required")
    existing = session.exec(
        select(models.Classification).where(models.Classification.code == code)
    ).first()
    if existing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Classification already registered")

    data = payload.model_dump()
    data["code"] = code
    data["old_code"] = base_code(payload.old_code) or None
    record = models.Classification(**data)
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


@router.get("/classifications", response_model=list[schemas.ClassificationRead])
def list_classifications(session: Session = Depends(get_session)):
    records = session.exec(select(models.Classification)).all()
    return sorted(records, key=lambda record: classification_key(record.code))


@router.get("/classifications/search", response_model=list[schemas.ClassificationMatch])
def search_classifications(
    q: str = Query(..., min_length=1),
    limit: int = Query(catalogue.SEARCH_LIMIT, ge=1, le=100),
    session: Session = Depends(get_session),
):
    results = catalogue.search_classifications(session, q, limit=limit)
    return [
        schemas.ClassificationMatch(**record.model_dump(), score=round(score, 2))
        for record, score in results
    ]


@router.get("/classifications/{code:path}", response_model=schemas.ClassificationRead)
def read_classification(code: str, session: Session = Depends(get_session)):
    record = catalogue.find_classification(session, code)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Classification not found")
    return record
