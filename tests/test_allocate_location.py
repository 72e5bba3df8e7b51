import logging

from arsip import storage
from arsip.storage import StorageAddress

from location_fakes import FakeLocationQueries, fill_unit

CABINETS = {"Sekretariat": "1", "Bidang Pengelolaan Arsip": "2"}


def allocate(queries, **kwargs):
    kwargs.setdefault("unit_name", "Sekretariat")
    kwargs.setdefault("unit_id", 1)
    kwargs.setdefault("cabinet_map", CABINETS)
    kwargs.setdefault("capacity", 50)
    return storage.allocate_location(queries, **kwargs)


def test_empty_unit_gets_first_drawer():
    address = allocate(FakeLocationQueries())
    assert address == StorageAddress("1", 1, 2)


def test_drawer_follows_unit_count():
    queries = FakeLocationQueries(records=fill_unit(1, 50, 50))
    assert allocate(queries).drawer_number == 2

    queries = FakeLocationQueries(records=fill_unit(1, 199, 50))
    assert allocate(queries).drawer_number == 4


def test_overflow_is_clamped_to_last_drawer():
    queries = FakeLocationQueries(records=fill_unit(1, 250, 50))
    address = allocate(queries, file_number=251)
    assert address.drawer_number == 4
    assert address.as_fields()["drawer"] == "4"


def test_other_units_do_not_count():
    records = fill_unit(2, 120, 50, start_id=1000)
    records.update(fill_unit(1, 10, 50))
    address = allocate(FakeLocationQueries(records=records))
    assert address.drawer_number == 1


def test_moved_records_are_excluded_from_counts():
    records = fill_unit(1, 50, 50)
    queries = FakeLocationQueries(records=records, moved={1, 2, 3})
    address = allocate(queries)
    # 47 remaining records keep the unit in drawer 1, whose count is 47 too.
    assert address.drawer_number == 1
    assert address.folder_number == 47 + 1 + 1


def test_exclusion_set_fetched_on_every_call():
    queries = FakeLocationQueries(records=fill_unit(1, 3, 50))
    allocate(queries)
    allocate(queries)
    assert [name for name, _ in queries.calls].count("excluded_record_ids") == 2


def test_folder_mirrors_positive_file_number():
    queries = FakeLocationQueries(records=fill_unit(1, 120, 50))
    address = allocate(queries, file_number=7)
    assert address.folder_number == 7
    assert address.as_fields()["folder"] == "7"
    assert "count_drawer_records" not in [name for name, _ in queries.calls]


def test_fallback_folder_uses_drawer_count_plus_drawer():
    records = fill_unit(1, 60, 50)
    queries = FakeLocationQueries(records=records)
    for file_number in (None, 0, -4):
        address = allocate(queries, file_number=file_number)
        # drawer 2 already holds 10 records
        assert address.drawer_number == 2
        assert address.folder_number == 10 + 2 + 1


def test_edit_mode_returns_stored_address():
    queries = FakeLocationQueries(
        records=fill_unit(1, 10, 50),
        stored={5: ("3", "12")},
    )
    address = allocate(queries, edit_id=5, file_number=1)
    assert address.as_fields() == {"cabinet": "1", "drawer": "3", "folder": "12"}
    assert [name for name, _ in queries.calls] == ["stored_location"]


def test_edit_mode_reresolves_cabinet_prefix():
    queries = FakeLocationQueries(stored={5: ("3", "12")})
    address = allocate(queries, edit_id=5, unit_name="Bidang Pengelolaan Arsip", unit_id=2)
    assert address == StorageAddress("2", 3, 12)


def test_edit_mode_does_not_clamp_stored_values():
    queries = FakeLocationQueries(stored={9: ("6", "40")})
    assert allocate(queries, edit_id=9).drawer_number == 6


def test_edit_mode_defaults_missing_fields():
    queries = FakeLocationQueries(stored={5: (None, ""), 6: ("2", None)})
    assert allocate(queries, edit_id=5) == StorageAddress("1", 1, 1)
    assert allocate(queries, edit_id=6) == StorageAddress("1", 2, 1)
    assert allocate(queries, edit_id=404) == StorageAddress("1", 1, 1)


def test_unmapped_unit_short_circuits_without_queries():
    queries = FakeLocationQueries(records=fill_unit(1, 10, 50), stored={5: ("3", "12")})
    for kwargs in (
        {"unit_name": "Bidang Tidak Dikenal"},
        {"unit_name": None},
        {"unit_name": ""},
        {"unit_id": None},
        {"unit_name": "Bidang Tidak Dikenal", "edit_id": 5},
    ):
        address = allocate(queries, **kwargs)
        assert address.as_fields() == {"cabinet": "", "drawer": "", "folder": ""}
    assert queries.calls == []


def test_query_failure_yields_blank_address(caplog):
    queries = FakeLocationQueries(fail=True)
    with caplog.at_level(logging.WARNING, logger="arsip.storage"):
        address = allocate(queries)
    assert address.is_blank
    assert "Cannot allocate location" in caplog.text

    assert allocate(queries, edit_id=3).is_blank


def test_allocation_is_idempotent():
    queries = FakeLocationQueries(records=fill_unit(1, 77, 50), moved={4, 9})
    first = allocate(queries)
    second = allocate(queries)
    assert first == second
    assert allocate(queries, file_number=5) == allocate(queries, file_number=5)


def test_non_positive_capacity_yields_blank_address(caplog):
    queries = FakeLocationQueries(records=fill_unit(1, 3, 50))
    with caplog.at_level(logging.WARNING, logger="arsip.storage"):
        assert allocate(queries, capacity=0).is_blank
        assert allocate(queries, capacity=-5, file_number=2).is_blank
    assert "drawer capacity" in caplog.text
    assert queries.calls == []
