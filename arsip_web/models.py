"""Database models for the web API."""

import datetime as dt
from typing import List, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Unit(SQLModel, table=True):
    """Organisational unit (bidang) owning a filing cabinet."""

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True)
    created_at: dt.datetime = Field(default_factory=_utcnow)

    locations: List["StorageLocation"] = Relationship(back_populates="unit")


class Classification(SQLModel, table=True):
    """Classification code with its retention schedule."""

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(index=True, unique=True)
    old_code: Optional[str] = Field(default=None, index=True)
    label: str = ""
    active_years: Optional[int] = Field(default=None, ge=0)
    inactive_years: Optional[int] = Field(default=None, ge=0)
    disposition: Optional[str] = None


class StorageLocation(SQLModel, table=True):
    """Physical slot shared by the records filed at the same address."""

    __table_args__ = (
        UniqueConstraint("unit_id", "cabinet", "drawer", "folder", name="uq_location_address"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    unit_id: int = Field(foreign_key="unit.id", index=True)
    cabinet: str
    drawer: str = Field(index=True)
    folder: str

    unit: Optional["Unit"] = Relationship(back_populates="locations")
    records: List["ActiveRecord"] = Relationship(back_populates="location")


class ActiveRecord(SQLModel, table=True):
    """Active archive file (berkas arsip aktif)."""

    id: Optional[int] = Field(default=None, primary_key=True)
    unit_id: int = Field(foreign_key="unit.id", index=True)
    file_number: int = Field(default=0, index=True)
    classification_code: str = Field(index=True)
    description: str = ""
    period: Optional[str] = None
    active_from: Optional[dt.date] = None
    retention_years: Optional[int] = Field(default=None, ge=0)
    retention_period: Optional[str] = None
    quantity: Optional[int] = Field(default=1, ge=0)
    development_level: Optional[str] = None
    media: str = "Filing Cabinet"
    access: str = "Biasa"
    notes: str = "-"
    location_id: Optional[int] = Field(default=None, foreign_key="storagelocation.id", index=True)
    created_at: dt.datetime = Field(default_factory=_utcnow)

    location: Optional["StorageLocation"] = Relationship(back_populates="records")


class Transfer(SQLModel, table=True):
    """Request to move active records of a unit into inactive storage."""

    id: Optional[int] = Field(default=None, primary_key=True)
    unit_id: int = Field(foreign_key="unit.id", index=True)
    status: str = Field(default="pending", index=True)
    head_status: str = "Menunggu"
    secretary_status: str = "Menunggu"
    box_number: Optional[str] = None
    storage_place: Optional[str] = None
    created_at: dt.datetime = Field(default_factory=_utcnow)
    completed_at: Optional[dt.datetime] = None

    items: List["TransferItem"] = Relationship(back_populates="transfer")


class TransferItem(SQLModel, table=True):
    """Active record selected for a transfer."""

    __table_args__ = (
        UniqueConstraint("transfer_id", "active_record_id", name="uq_transfer_item"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    transfer_id: int = Field(foreign_key="transfer.id", index=True)
    active_record_id: int = Field(foreign_key="activerecord.id", index=True)

    transfer: Optional["Transfer"] = Relationship(back_populates="items")


class InactiveRecord(SQLModel, table=True):
    """Inactive archive file created when a transfer completes."""

    id: Optional[int] = Field(default=None, primary_key=True)
    active_record_id: int = Field(foreign_key="activerecord.id", index=True)
    file_number: int
    classification_code: str
    description: str = ""
    period: Optional[str] = None
    inactive_period: str = "-"
    retention_years: Optional[int] = None
    disposition: Optional[str] = None
    box_number: Optional[str] = None
    storage_place: Optional[str] = None
    moved_on: dt.date = Field(default_factory=lambda: _utcnow().date())


class TransferLink(SQLModel, table=True):
    """Marks an active record as moved to inactive storage."""

    id: Optional[int] = Field(default=None, primary_key=True)
    active_record_id: int = Field(foreign_key="activerecord.id", index=True, unique=True)
    inactive_record_id: int = Field(foreign_key="inactiverecord.id", index=True)
    transfer_id: int = Field(foreign_key="transfer.id", index=True)
