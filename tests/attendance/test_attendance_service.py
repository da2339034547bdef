from datetime import date, datetime

import pytest

from src.attendance_engine.attendance_engine.core.enums import TimeEntryStatus
from src.attendance_engine.attendance_engine.core.exceptions import (
    AuthorizationError,
    DuplicateEntryError,
    InvalidRangeError,
    NoOpenEntryError,
    NotFoundError,
    ValidationError,
)


def test_clock_in_then_out_completes_entry(engine, employee_user):
    service = engine.container.attendance_service

    opened = service.clock_in(employee_user, 1, at="2024-03-04T08:00:00")
    assert opened.status is TimeEntryStatus.PENDING
    assert opened.work_date == date(2024, 3, 4)

    closed = service.clock_out(employee_user, 1, at="2024-03-04T17:00:00")
    assert closed.entry_id == opened.entry_id
    assert closed.total_hours == 9.0
    assert closed.status is TimeEntryStatus.COMPLETED
    assert closed.to_dict()["totalHours"] == 9.0


def test_mixed_offset_and_naive_clocks_are_both_read_as_utc(engine, employee_user):
    service = engine.container.attendance_service

    opened = service.clock_in(employee_user, 1, at="2024-03-04T08:00:00Z")
    assert opened.clock_in == datetime(2024, 3, 4, 8, 0)
    assert opened.clock_in.tzinfo is None

    closed = service.clock_out(employee_user, 1, at="2024-03-04T17:00:00")
    assert closed.total_hours == 9.0
    assert closed.status is TimeEntryStatus.COMPLETED


def test_offset_clock_out_converted_to_utc(engine, employee_user):
    service = engine.container.attendance_service
    service.clock_in(employee_user, 1, at="2024-03-04T08:00:00")

    closed = service.clock_out(employee_user, 1, at="2024-03-04T19:00:00+02:00")
    assert closed.clock_out == datetime(2024, 3, 4, 17, 0)
    assert closed.total_hours == 9.0


def test_clock_out_defaults_to_current_utc_time(engine, employee_user, monkeypatch):
    from src.attendance_engine.attendance_engine.attendance import service as attendance_module

    service = engine.container.attendance_service
    service.clock_in(employee_user, 1, at="2024-03-04T08:00:00Z")
    monkeypatch.setattr(attendance_module, "now_utc", lambda: datetime(2024, 3, 4, 12, 30))

    closed = service.clock_out(employee_user, 1)
    assert closed.total_hours == 4.5


def test_correction_mixing_offsets_compares_in_utc(engine, admin, make_completed):
    engine.entries.add(make_completed(1, 1, date(2024, 3, 4), "08:00", "17:00"))
    service = engine.container.attendance_service

    with pytest.raises(InvalidRangeError):
        service.correct_entry(admin, 1, clock_out="2024-03-04T09:00:00+02:00")

    corrected = service.correct_entry(admin, 1, clock_in="2024-03-04T09:00:00+01:00")
    assert corrected.clock_in == datetime(2024, 3, 4, 8, 0)
    assert corrected.total_hours == 9.0


def test_second_clock_in_same_day_while_open(engine, employee_user):
    service = engine.container.attendance_service
    service.clock_in(employee_user, 1, at="2024-03-04T08:00:00")

    with pytest.raises(DuplicateEntryError):
        service.clock_in(employee_user, 1, at="2024-03-04T09:00:00")


def test_split_shift_allowed_once_first_entry_closed(engine, employee_user):
    service = engine.container.attendance_service
    service.clock_in(employee_user, 1, at="2024-03-04T08:00:00")
    service.clock_out(employee_user, 1, at="2024-03-04T12:00:00")
    service.clock_in(employee_user, 1, at="2024-03-04T13:00:00")

    assert len(engine.entries.find_for_employee_and_date(1, date(2024, 3, 4))) == 2


def test_clock_out_without_open_entry(engine, employee_user):
    with pytest.raises(NoOpenEntryError):
        engine.container.attendance_service.clock_out(employee_user, 1, at="2024-03-04T17:00:00")


def test_clock_out_at_clock_in_instant_is_incomplete(engine, employee_user):
    service = engine.container.attendance_service
    service.clock_in(employee_user, 1, at="2024-03-04T08:00:00")
    closed = service.clock_out(employee_user, 1, at="2024-03-04T08:00:00")

    assert closed.total_hours == 0.0
    assert closed.status is TimeEntryStatus.INCOMPLETE


def test_clock_out_lost_race_reports_no_open_entry(engine, employee_user, monkeypatch):
    service = engine.container.attendance_service
    service.clock_in(employee_user, 1, at="2024-03-04T08:00:00")
    monkeypatch.setattr(engine.entries, "close_entry", lambda **kwargs: False)

    with pytest.raises(NoOpenEntryError):
        service.clock_out(employee_user, 1, at="2024-03-04T17:00:00")


def test_user_cannot_clock_for_someone_else(engine, employee_user):
    with pytest.raises(AuthorizationError):
        engine.container.attendance_service.clock_in(employee_user, 2, at="2024-03-04T08:00:00")


def test_unknown_employee(engine, admin):
    with pytest.raises(NotFoundError):
        engine.container.attendance_service.clock_in(admin, 99, at="2024-03-04T08:00:00")


def test_correction_with_bare_total_hours_is_authoritative(engine, admin, employee_user):
    service = engine.container.attendance_service
    entry = service.clock_in(employee_user, 1, at="2024-03-04T08:00:00")

    corrected = service.correct_entry(admin, entry.entry_id, total_hours=7.5)
    assert corrected.hours_overridden
    assert corrected.effective_hours == 7.5
    assert corrected.status is TimeEntryStatus.COMPLETED
    assert engine.entries.get_by_id(entry.entry_id).total_hours == 7.5


def test_correction_with_clock_times_rederives_hours(engine, admin, make_overridden):
    service = engine.container.attendance_service
    engine.entries.add(make_overridden(1, 1, date(2024, 3, 4), 7.5))

    corrected = service.correct_entry(
        admin, 1, clock_in="2024-03-04T08:00:00", clock_out="2024-03-04T16:00:00", total_hours=3
    )
    assert not corrected.hours_overridden
    assert corrected.total_hours == 8.0
    assert corrected.status is TimeEntryStatus.COMPLETED


def test_correction_drops_validation_mark(engine, admin, make_completed):
    engine.entries.add(
        make_completed(1, 1, date(2024, 3, 4), "08:00", "17:00", is_validated=True, validated_at=datetime(2024, 3, 5), validated_by=100)
    )

    corrected = engine.container.attendance_service.correct_entry(admin, 1, note="badge forgotten")
    assert not corrected.is_validated
    assert corrected.validated_at is None
    assert corrected.note == "badge forgotten"


def test_correction_rejects_inverted_clocks(engine, admin, make_completed):
    engine.entries.add(make_completed(1, 1, date(2024, 3, 4), "08:00", "17:00"))
    with pytest.raises(InvalidRangeError):
        engine.container.attendance_service.correct_entry(admin, 1, clock_out="2024-03-04T07:00:00")


def test_correction_rejects_bad_hours(engine, admin, make_completed):
    engine.entries.add(make_completed(1, 1, date(2024, 3, 4), "08:00", "17:00"))
    service = engine.container.attendance_service
    with pytest.raises(ValidationError):
        service.correct_entry(admin, 1, total_hours="abc")
    with pytest.raises(ValidationError):
        service.correct_entry(admin, 1, total_hours=-1)
    with pytest.raises(ValidationError):
        service.correct_entry(admin, 1, total_hours=float("nan"))


def test_users_cannot_correct_their_own_entries(engine, employee_user, make_completed):
    engine.entries.add(make_completed(1, 1, date(2024, 3, 4), "08:00", "17:00"))
    with pytest.raises(AuthorizationError):
        engine.container.attendance_service.correct_entry(employee_user, 1, total_hours=10)


def test_stale_open_entries_are_closed_incomplete(engine, admin, employee_user):
    service = engine.container.attendance_service
    stale = service.clock_in(employee_user, 1, at="2024-03-04T08:00:00")
    fresh = service.clock_in(employee_user, 1, at="2024-03-05T07:00:00")

    closed = service.close_stale_entries(admin, as_of="2024-03-05T08:00:00")

    assert [e.entry_id for e in closed] == [stale.entry_id]
    assert engine.entries.get_by_id(stale.entry_id).status is TimeEntryStatus.INCOMPLETE
    assert engine.entries.get_by_id(fresh.entry_id).status is TimeEntryStatus.PENDING


def test_closing_stale_entries_needs_correction_right(engine, employee_user):
    service = engine.container.attendance_service
    entry = service.clock_in(employee_user, 1, at="2024-03-04T08:00:00")

    with pytest.raises(AuthorizationError):
        service.close_stale_entries(employee_user, as_of="2024-03-06T08:00:00")
    assert engine.entries.get_by_id(entry.entry_id).status is TimeEntryStatus.PENDING


def test_mark_absent_once_per_day(engine, admin):
    service = engine.container.attendance_service
    entry = service.mark_absent(admin, 1, work_date="2024-03-06", note="No show")

    assert entry.status is TimeEntryStatus.ABSENT
    assert entry.clock_in is None
    with pytest.raises(DuplicateEntryError):
        service.mark_absent(admin, 1, work_date="2024-03-06")


def test_list_entries_sorted_by_day(engine, employee_user, make_completed):
    engine.entries.add(make_completed(2, 1, date(2024, 3, 5), "08:00", "17:00"))
    engine.entries.add(make_completed(1, 1, date(2024, 3, 4), "08:00", "17:00"))
    engine.entries.add(make_completed(3, 2, date(2024, 3, 4), "08:00", "17:00"))

    rows = engine.container.attendance_service.list_entries(employee_user, 1, start="2024-03-01", end="2024-03-31")
    assert [e.entry_id for e in rows] == [1, 2]
