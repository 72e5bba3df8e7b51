"""Shared configuration for filing cabinets.

This module centralizes storage-related constants used by both the allocator
and the web API.  Adjust the values here (or the matching environment
variables) to match the physical filing cabinets and all modules will pick up
the changes automatically.
"""

from __future__ import annotations

import json
import logging
import os

logger = logging.getLogger(__name__)

# Drawer layout --------------------------------------------------------------

DEFAULT_DRAWER_CAPACITY = 50


def load_drawer_capacity(raw: str | None = None) -> int:
    """Return the drawer capacity, honouring ``ARSIP_DRAWER_CAPACITY``.

    Values that are not positive integers are logged and replaced by the
    default capacity.
    """

    if raw is None:
        raw = os.getenv("ARSIP_DRAWER_CAPACITY", "")
    if not raw.strip():
        return DEFAULT_DRAWER_CAPACITY
    try:
        capacity = int(raw)
    except ValueError:
        logger.warning("Ignoring malformed ARSIP_DRAWER_CAPACITY value %r", raw)
        return DEFAULT_DRAWER_CAPACITY
    if capacity <= 0:
        logger.warning("ARSIP_DRAWER_CAPACITY must be positive, got %s", capacity)
        return DEFAULT_DRAWER_CAPACITY
    return capacity


# Number of active records a single drawer holds before new records roll over
# into the next drawer.
DRAWER_CAPACITY = load_drawer_capacity()

# Every cabinet has four drawers.  Records counted past the last drawer are
# filed into it as well, there is no fifth drawer.
MAX_DRAWERS = 4

# Cabinet assignment ---------------------------------------------------------

# Mapping of ``unit name -> cabinet prefix``.  Each unit files its active
# records in its own cabinet; units missing here cannot be allocated a slot.
DEFAULT_UNIT_CABINETS: dict[str, str] = {
    "Sekretariat": "1",
    "Bidang Pengelolaan Arsip": "2",
    "Bidang Pembinaan Kearsipan": "3",
    "Bidang Layanan Perpustakaan": "4",
    "Bidang Pengembangan Perpustakaan": "5",
}


def load_unit_cabinets(raw: str | None = None) -> dict[str, str]:
    """Return the unit -> cabinet table, honouring ``ARSIP_UNIT_CABINETS``.

    The environment value must be a JSON object.  Invalid values are logged
    and the default table is used instead.
    """

    if raw is None:
        raw = os.getenv("ARSIP_UNIT_CABINETS", "")
    if not raw.strip():
        return dict(DEFAULT_UNIT_CABINETS)
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring malformed ARSIP_UNIT_CABINETS value")
        return dict(DEFAULT_UNIT_CABINETS)
    if not isinstance(data, dict):
        logger.warning("ARSIP_UNIT_CABINETS must be a JSON object")
        return dict(DEFAULT_UNIT_CABINETS)
    return {str(name): str(prefix) for name, prefix in data.items() if prefix}


UNIT_CABINETS: dict[str, str] = load_unit_cabinets()
