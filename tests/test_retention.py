import datetime as dt

import pytest

from arsip import retention


def test_active_period_ends_on_last_retention_year():
    assert retention.active_period(dt.date(2020, 3, 5), 2) == "05-03-2020 s.d. 31-12-2021"
    assert retention.active_period(dt.date(2020, 3, 5), 1) == "05-03-2020 s.d. 31-12-2020"


def test_active_period_without_retention_ends_same_year():
    assert retention.active_period(dt.date(2020, 2, 29), None) == "29-02-2020 s.d. 31-12-2020"
    assert retention.active_period(dt.date(2020, 2, 29), 0) == "29-02-2020 s.d. 31-12-2020"


def test_active_period_rejects_negative_years():
    with pytest.raises(ValueError):
        retention.active_period(dt.date(2020, 1, 1), -1)


def test_period_end_year():
    assert retention.period_end_year("01-01-2019 s.d. 31-12-2021") == 2021
    assert retention.period_end_year("15-04-2018") == 2018
    assert retention.period_end_year("sometime") is None
    assert retention.period_end_year(None) is None


def test_inactive_period_follows_active_end():
    assert retention.inactive_period(2021, 5) == "01-01-2022 s.d. 31-12-2026"
    assert retention.inactive_period(2021, 1) == "01-01-2022 s.d. 31-12-2022"


def test_inactive_period_unknown_inputs():
    assert retention.inactive_period(None, 5) == "-"
    assert retention.inactive_period(2021, None) == "-"
    assert retention.inactive_period(2021, 0) == "01-01-2022"


def test_parse_date_rejects_malformed():
    with pytest.raises(ValueError):
        retention.parse_date("2021-01-01")


def test_days_remaining_counts_to_period_end():
    today = dt.date(2021, 12, 1)
    assert retention.days_remaining("05-03-2020 s.d. 31-12-2021", today) == 30
    assert retention.days_remaining("31-12-2021", today) == 30
    assert retention.days_remaining("01-01-2019 s.d. 31-12-2020", today) == -335
    assert retention.days_remaining("01-12-2021 s.d. 01-12-2021", today) == 0


def test_days_remaining_unknown_period():
    today = dt.date(2021, 12, 1)
    assert retention.days_remaining(None, today) is None
    assert retention.days_remaining("", today) is None
    assert retention.days_remaining("01-01-2020 s.d. 2021-12-31", today) is None
