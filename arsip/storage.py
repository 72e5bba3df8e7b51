"""Filing-cabinet slot allocation for active archive records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Protocol

from .storage_config import DRAWER_CAPACITY, MAX_DRAWERS, UNIT_CABINETS

logger = logging.getLogger(__name__)


class LocationQueryError(Exception):
    """Raised by query adapters when the backing store cannot be read."""


class LocationQueries(Protocol):
    """Read queries the allocator needs from the record store."""

    def excluded_record_ids(self) -> set[int]:
        ...

    def count_unit_records(self, unit_id: int, exclude: set[int]) -> int:
        ...

    def count_drawer_records(self, unit_id: int, drawer: int, exclude: set[int]) -> int:
        ...

    def stored_location(self, record_id: int) -> Optional[tuple[Optional[str], Optional[str]]]:
        ...


@dataclass(frozen=True)
class StorageAddress:
    """Cabinet / drawer / folder address of an active record."""

    cabinet_prefix: str = ""
    drawer_number: Optional[int] = None
    folder_number: Optional[int] = None

    @property
    def is_blank(self) -> bool:
        return not self.cabinet_prefix or self.drawer_number is None or self.folder_number is None

    def as_fields(self) -> dict[str, str]:
        """Return the text form stored in the location table."""

        if self.is_blank:
            return {"cabinet": "", "drawer": "", "folder": ""}
        return {
            "cabinet": self.cabinet_prefix,
            "drawer": str(self.drawer_number),
            "folder": str(self.folder_number),
        }

    def label(self) -> str:
        if self.is_blank:
            return ""
        return (
            f"Filing Cabinet {self.cabinet_prefix} | Laci {self.drawer_number} "
            f"| Folder {self.folder_number}"
        )


BLANK_ADDRESS = StorageAddress()


def resolve_cabinet(unit_name: str | None, cabinet_map: Mapping[str, str] | None = None) -> str:
    """Return the cabinet prefix for ``unit_name`` or ``""`` when unmapped."""

    if not unit_name:
        return ""
    table = UNIT_CABINETS if cabinet_map is None else cabinet_map
    return table.get(unit_name, "") or ""


def drawer_for_count(count: int, capacity: int = DRAWER_CAPACITY, max_drawers: int = MAX_DRAWERS) -> int:
    """Return the drawer a record lands in when ``count`` records precede it.

    The drawer rolls over every ``capacity`` records and is clamped to
    ``max_drawers``: overflow piles into the last drawer.
    """

    if capacity <= 0:
        raise ValueError("capacity must be positive")
    drawer = max(count, 0) // capacity + 1
    if drawer > max_drawers:
        drawer = max_drawers
    return drawer


def fallback_folder_number(count_in_drawer: int, drawer: int) -> int:
    """Folder number used when no file number was supplied.

    Existing filed folders were numbered ``records in drawer + drawer + 1``,
    so the drawer addend stays.
    """

    return max(count_in_drawer, 0) + drawer + 1


def _parse_stored(value: str | None) -> int:
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return 1
    return number if number > 0 else 1


def allocate_location(
    queries: LocationQueries,
    *,
    unit_name: str | None,
    unit_id: int | None,
    file_number: int | None = None,
    edit_id: int | None = None,
    cabinet_map: Mapping[str, str] | None = None,
    capacity: int = DRAWER_CAPACITY,
    max_drawers: int = MAX_DRAWERS,
) -> StorageAddress:
    """Compute the storage address for a new or edited active record.

    Returns :data:`BLANK_ADDRESS` when the unit cannot be resolved or the
    record store cannot be read.  In edit mode the stored drawer and folder
    are returned unchanged and only the cabinet prefix is re-resolved.
    """

    cabinet = resolve_cabinet(unit_name, cabinet_map)
    if not cabinet or unit_id is None:
        return BLANK_ADDRESS
    if capacity <= 0:
        logger.warning("Cannot allocate location with drawer capacity %s", capacity)
        return BLANK_ADDRESS

    try:
        if edit_id is not None:
            stored = queries.stored_location(edit_id) or (None, None)
            drawer_raw, folder_raw = stored
            address = StorageAddress(cabinet, _parse_stored(drawer_raw), _parse_stored(folder_raw))
            logger.debug("Reusing stored location %s for record %s", address.label(), edit_id)
            return address

        excluded = set(queries.excluded_record_ids())
        existing = queries.count_unit_records(unit_id, excluded)
        drawer = drawer_for_count(existing, capacity, max_drawers)
        if file_number is not None and file_number > 0:
            folder = file_number
        else:
            folder = fallback_folder_number(
                queries.count_drawer_records(unit_id, drawer, excluded), drawer
            )
    except LocationQueryError as exc:
        logger.warning("Cannot allocate location for unit %s: %s", unit_id, exc)
        return BLANK_ADDRESS

    address = StorageAddress(cabinet, drawer, folder)
    logger.debug("Allocated %s for unit %s (%s existing)", address.label(), unit_id, existing)
    return address


def compute_drawer_occupancy(
    locations: Iterable[tuple[str, str, str]],
    max_drawers: int = MAX_DRAWERS,
) -> dict[str, dict[int, dict[int, int]]]:
    """Return record counts per folder in each drawer of each cabinet.

    ``locations`` holds one ``(cabinet, drawer, folder)`` triple per record.
    Every drawer ``1..max_drawers`` is present for each cabinet seen, empty
    drawers map to an empty folder mapping.  Triples with non-numeric drawer
    or folder values are skipped.
    """

    occ: dict[str, dict[int, dict[int, int]]] = {}
    for cabinet, drawer_raw, folder_raw in locations:
        if not cabinet:
            continue
        try:
            drawer = int(drawer_raw)
            folder = int(folder_raw)
        except (TypeError, ValueError):
            continue
        drawers = occ.setdefault(cabinet, {})
        folders = drawers.setdefault(drawer, {})
        folders[folder] = folders.get(folder, 0) + 1

    for drawers in occ.values():
        for drawer in range(1, max_drawers + 1):
            drawers.setdefault(drawer, {})
    return occ
