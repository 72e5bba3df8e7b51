"""Pydantic/SQLModel schemas for the web API."""

from __future__ import annotations

import datetime as dt
from typing import Dict, List, Literal, Optional

from sqlmodel import Field, SQLModel


class UnitCreate(SQLModel):
    name: str


class UnitRead(UnitCreate):
    id: int
    created_at: dt.datetime
    cabinet: str = ""


class ClassificationBase(SQLModel):
    code: str
    old_code: Optional[str] = None
    label: str = ""
    active_years: Optional[int] = None
    inactive_years: Optional[int] = None
    disposition: Optional[str] = None


class ClassificationRead(ClassificationBase):
    id: int


class ClassificationMatch(ClassificationRead):
    score: float


class LocationRequest(SQLModel):
    unit_id: Optional[int] = None
    file_number: Optional[int] = None
    edit_id: Optional[int] = None


class LocationRead(SQLModel):
    cabinet: str = ""
    drawer: str = ""
    folder: str = ""
    label: str = ""


class RecordBase(SQLModel):
    classification_code: str
    description: str = ""
    period: Optional[str] = None
    active_from: Optional[dt.date] = None
    retention_years: Optional[int] = Field(default=None, ge=0)
    quantity: Optional[int] = Field(default=1, ge=0)
    development_level: Optional[str] = None
    media: str = "Filing Cabinet"
    access: str = "Biasa"
    notes: str = "-"


class RecordCreate(RecordBase):
    unit_id: int
    file_number: Optional[int] = None


class RecordUpdate(SQLModel):
    unit_id: Optional[int] = None
    file_number: Optional[int] = None
    classification_code: Optional[str] = None
    description: Optional[str] = None
    period: Optional[str] = None
    active_from: Optional[dt.date] = None
    retention_years: Optional[int] = Field(default=None, ge=0)
    quantity: Optional[int] = Field(default=None, ge=0)
    development_level: Optional[str] = None
    media: Optional[str] = None
    access: Optional[str] = None
    notes: Optional[str] = None


class RecordRead(RecordBase):
    id: int
    unit_id: int
    file_number: int
    retention_period: Optional[str] = None
    created_at: dt.datetime
    location_id: Optional[int] = None
    location: LocationRead = Field(default_factory=LocationRead)


class RetentionStatus(RecordRead):
    days_remaining: int


class NextFileNumber(SQLModel):
    unit_id: int
    file_number: int


class RenumberResult(SQLModel):
    unit_id: int
    renumbered: int


class CabinetOccupancy(SQLModel):
    unit_id: int
    cabinets: Dict[str, Dict[int, Dict[int, int]]] = Field(default_factory=dict)


class TransferCreate(SQLModel):
    unit_id: int
    record_ids: List[int]
    box_number: Optional[str] = None
    storage_place: Optional[str] = None


class TransferDecision(SQLModel):
    role: Literal["head", "secretary"]
    approved: bool


class TransferRead(SQLModel):
    id: int
    unit_id: int
    status: str
    head_status: str
    secretary_status: str
    box_number: Optional[str] = None
    storage_place: Optional[str] = None
    created_at: dt.datetime
    completed_at: Optional[dt.datetime] = None
    record_ids: List[int] = Field(default_factory=list)


class InactiveRecordRead(SQLModel):
    id: int
    active_record_id: int
    file_number: int
    classification_code: str
    description: str
    period: Optional[str] = None
    inactive_period: str
    retention_years: Optional[int] = None
    disposition: Optional[str] = None
    box_number: Optional[str] = None
    storage_place: Optional[str] = None
    moved_on: dt.date


class TransferCompletion(SQLModel):
    transfer: TransferRead
    inactive_records: List[InactiveRecordRead] = Field(default_factory=list)
