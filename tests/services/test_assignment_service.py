"""
Tests for AttributeAssignmentService, the temporal assignment store.

Covers:
- Assigning with value checks and subject checks
- Non-overlap per (subject, attribute type), closed intervals
- Update (never reopens), end, delete of future-only records
- Point-in-time and history queries
"""

from datetime import date
from uuid import uuid4

import pytest

from fleet_kernel.domain.subjects import SubjectKind, SubjectRef
from fleet_kernel.exceptions import (
    AssignmentNotFoundError,
    AssignmentOverlapError,
    AttributeTypeInactiveError,
    AttributeTypeNotFoundError,
    ImmutableHistoryError,
    InvalidAttributeValueError,
    InvalidDateRangeError,
    MissingAttributeValueError,
    SubjectNotFoundError,
)
from fleet_kernel.services.assignment_service import AttributeAssignmentService


class TestAssign:

    def test_assign_open_ended(self, assignments, airport_license, shift_s1, test_actor_id):
        info = assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1))

        assert info.subject == shift_s1
        assert info.attribute_code == "AIRPORT_LICENSE"
        assert info.attribute_name == "Airport License"
        assert info.end_date is None
        assert info.is_open
        assert info.is_active_on(date(2030, 1, 1))

    def test_assign_to_cab(self, assignments, airport_license, cab_c1, test_actor_id):
        info = assignments.assign(
            cab_c1, airport_license.id, test_actor_id, date(2026, 1, 1), date(2026, 1, 31)
        )
        assert info.subject.kind is SubjectKind.CAB

    def test_single_day_assignment(self, assignments, airport_license, shift_s1, test_actor_id):
        info = assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 1, 5), date(2026, 1, 5)
        )
        assert info.date_range.days() == 1

    def test_value_is_trimmed(self, assignments, transponder, shift_s1, test_actor_id):
        info = assignments.assign(
            shift_s1, transponder.id, test_actor_id, date(2026, 1, 1), value="  TR-12345 "
        )
        assert info.value == "TR-12345"

    def test_required_value_missing(self, assignments, transponder, shift_s1, test_actor_id):
        with pytest.raises(MissingAttributeValueError):
            assignments.assign(shift_s1, transponder.id, test_actor_id, date(2026, 1, 1), value="  ")

    def test_value_must_match_pattern(self, assignments, transponder, shift_s1, test_actor_id):
        with pytest.raises(InvalidAttributeValueError) as exc_info:
            assignments.assign(shift_s1, transponder.id, test_actor_id, date(2026, 1, 1), value="TR-1")
        assert exc_info.value.pattern == r"TR-\d{5}"

    def test_unknown_attribute_type(self, assignments, shift_s1, test_actor_id):
        with pytest.raises(AttributeTypeNotFoundError):
            assignments.assign(shift_s1, uuid4(), test_actor_id, date(2026, 1, 1))

    def test_inactive_attribute_type(
        self, assignments, attribute_types, airport_license, shift_s1, test_actor_id
    ):
        attribute_types.deactivate(airport_license.id, test_actor_id)
        with pytest.raises(AttributeTypeInactiveError):
            assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1))

    def test_unknown_subject(self, assignments, airport_license, test_actor_id):
        with pytest.raises(SubjectNotFoundError) as exc_info:
            assignments.assign(
                SubjectRef.shift(uuid4()), airport_license.id, test_actor_id, date(2026, 1, 1)
            )
        assert exc_info.value.subject_kind == "shift"

    def test_subject_directory_is_required(self, session):
        with pytest.raises(TypeError):
            AttributeAssignmentService(session)

    def test_inverted_range(self, assignments, airport_license, shift_s1, test_actor_id):
        with pytest.raises(InvalidDateRangeError):
            assignments.assign(
                shift_s1, airport_license.id, test_actor_id, date(2026, 1, 31), date(2026, 1, 1)
            )

    def test_assignment_is_logged(
        self, assignments, airport_license, shift_s1, test_actor_id, captured_logs
    ):
        info = assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1))

        records = [r for r in captured_logs() if r["message"] == "attribute_assigned"]
        assert len(records) == 1
        assert records[0]["assignment_id"] == str(info.id)
        assert records[0]["actor_id"] == str(test_actor_id)
        assert records[0]["subject"] == str(shift_s1)


class TestNonOverlap:

    def test_shared_end_day_conflicts(self, assignments, airport_license, shift_s1, test_actor_id):
        first = assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1), date(2026, 1, 31)
        )

        with pytest.raises(AssignmentOverlapError) as exc_info:
            assignments.assign(
                shift_s1, airport_license.id, test_actor_id, date(2026, 1, 31), date(2026, 2, 28)
            )

        assert exc_info.value.conflicting_ids == [str(first.id)]
        assert exc_info.value.code == "ASSIGNMENT_OVERLAP"

    def test_adjacent_intervals_allowed(self, assignments, airport_license, shift_s1, test_actor_id):
        assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1), date(2026, 1, 31)
        )
        assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 2, 1), date(2026, 2, 28)
        )

        assert len(assignments.get_history_by_type(shift_s1, airport_license.id)) == 2

    def test_open_ended_blocks_later_start(self, assignments, airport_license, shift_s1, test_actor_id):
        assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1))
        with pytest.raises(AssignmentOverlapError):
            assignments.assign(
                shift_s1, airport_license.id, test_actor_id, date(2027, 6, 1), date(2027, 6, 2)
            )

    def test_all_conflicts_reported(self, assignments, airport_license, shift_s1, test_actor_id):
        a = assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1), date(2026, 1, 10)
        )
        b = assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 1, 20), date(2026, 1, 25)
        )

        with pytest.raises(AssignmentOverlapError) as exc_info:
            assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 1, 5))

        assert sorted(exc_info.value.conflicting_ids) == sorted([str(a.id), str(b.id)])

    def test_other_subject_unaffected(
        self, assignments, airport_license, shift_s1, shift_s2, test_actor_id
    ):
        assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1))
        assignments.assign(shift_s2, airport_license.id, test_actor_id, date(2026, 1, 1))

    def test_other_attribute_type_unaffected(
        self, assignments, airport_license, transponder, shift_s1, test_actor_id
    ):
        assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1))
        assignments.assign(
            shift_s1, transponder.id, test_actor_id, date(2026, 1, 1), value="TR-00001"
        )

        assert len(assignments.get_active_on(shift_s1, date(2026, 1, 15))) == 2

    def test_shift_and_cab_with_same_id_are_distinct(
        self, assignments, airport_license, shift_directory, test_actor_id
    ):
        same_id = uuid4()
        shift_directory.add_shift(same_id)
        shift_directory.add_cab(same_id)

        assignments.assign(SubjectRef.shift(same_id), airport_license.id, test_actor_id, date(2026, 1, 1))
        assignments.assign(SubjectRef.cab(same_id), airport_license.id, test_actor_id, date(2026, 1, 1))

    def test_rejection_is_logged(
        self, assignments, airport_license, shift_s1, test_actor_id, captured_logs
    ):
        assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1))
        with pytest.raises(AssignmentOverlapError):
            assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 3, 1))

        records = [r for r in captured_logs() if r["message"] == "assignment_overlap_rejected"]
        assert len(records) == 1
        assert records[0]["level"] == "WARNING"


class TestUpdate:

    def test_update_value(self, assignments, transponder, shift_s1, test_actor_id):
        info = assignments.assign(
            shift_s1, transponder.id, test_actor_id, date(2026, 1, 1), value="TR-11111"
        )
        updated = assignments.update(info.id, test_actor_id, value="TR-22222", notes="swapped unit")

        assert updated.value == "TR-22222"
        assert updated.notes == "swapped unit"
        assert updated.start_date == date(2026, 1, 1)

    def test_omitted_end_date_keeps_closed_assignment_closed(
        self, assignments, airport_license, shift_s1, test_actor_id
    ):
        info = assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1), date(2026, 1, 31)
        )
        updated = assignments.update(info.id, test_actor_id, notes="renewed paperwork")

        assert updated.end_date == date(2026, 1, 31)

    def test_empty_value_clears_optional_value(
        self, assignments, airport_license, shift_s1, test_actor_id
    ):
        info = assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1), value="AP-7"
        )
        assert assignments.update(info.id, test_actor_id, value="").value is None

    def test_empty_value_rejected_when_required(
        self, assignments, transponder, shift_s1, test_actor_id
    ):
        info = assignments.assign(
            shift_s1, transponder.id, test_actor_id, date(2026, 1, 1), value="TR-11111"
        )
        with pytest.raises(MissingAttributeValueError):
            assignments.update(info.id, test_actor_id, value="")

    def test_update_into_overlap_rejected(
        self, assignments, airport_license, shift_s1, test_actor_id
    ):
        jan = assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1), date(2026, 1, 31)
        )
        feb = assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 2, 1), date(2026, 2, 28)
        )

        with pytest.raises(AssignmentOverlapError) as exc_info:
            assignments.update(feb.id, test_actor_id, start_date=date(2026, 1, 25))
        assert exc_info.value.conflicting_ids == [str(jan.id)]

    def test_update_does_not_conflict_with_itself(
        self, assignments, airport_license, shift_s1, test_actor_id
    ):
        info = assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1), date(2026, 1, 31)
        )
        updated = assignments.update(info.id, test_actor_id, start_date=date(2026, 1, 10))
        assert updated.start_date == date(2026, 1, 10)

    def test_update_inverted_range(self, assignments, airport_license, shift_s1, test_actor_id):
        info = assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1), date(2026, 1, 31)
        )
        with pytest.raises(InvalidDateRangeError):
            assignments.update(info.id, test_actor_id, start_date=date(2026, 2, 1))

    def test_update_unknown(self, assignments, test_actor_id):
        with pytest.raises(AssignmentNotFoundError):
            assignments.update(uuid4(), test_actor_id, notes="x")


class TestEnd:

    def test_end_open_assignment(self, assignments, airport_license, shift_s1, test_actor_id):
        info = assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1))
        ended = assignments.end(info.id, date(2026, 3, 31), test_actor_id)

        assert ended.end_date == date(2026, 3, 31)
        assert not ended.is_active_on(date(2026, 4, 1))

    def test_end_on_start_date(self, assignments, airport_license, shift_s1, test_actor_id):
        info = assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 1, 10))
        assert assignments.end(info.id, date(2026, 1, 10), test_actor_id).end_date == date(2026, 1, 10)

    def test_end_before_start_rejected(self, assignments, airport_license, shift_s1, test_actor_id):
        info = assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 1, 10))
        with pytest.raises(InvalidDateRangeError):
            assignments.end(info.id, date(2026, 1, 9), test_actor_id)

    def test_extending_closed_assignment_checks_overlap(
        self, assignments, airport_license, shift_s1, test_actor_id
    ):
        jan = assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1), date(2026, 1, 31)
        )
        assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 2, 1))

        with pytest.raises(AssignmentOverlapError):
            assignments.end(jan.id, date(2026, 2, 15), test_actor_id)

    def test_end_is_logged(self, assignments, airport_license, shift_s1, test_actor_id, captured_logs):
        info = assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1))
        assignments.end(info.id, date(2026, 1, 31), test_actor_id)

        assert any(r["message"] == "assignment_ended" for r in captured_logs())


class TestDelete:
    """The fixture clock says today is 2026-01-15."""

    def test_delete_future_assignment(self, assignments, airport_license, shift_s1, test_actor_id):
        info = assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 2, 1))
        assignments.delete(info.id, test_actor_id)

        with pytest.raises(AssignmentNotFoundError):
            assignments.get(info.id)

    def test_delete_assignment_starting_today(
        self, assignments, airport_license, shift_s1, test_actor_id
    ):
        info = assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 1, 15))
        assignments.delete(info.id, test_actor_id)
        assert assignments.get_history(shift_s1) == []

    def test_delete_started_assignment_refused(
        self, assignments, airport_license, shift_s1, test_actor_id, captured_logs
    ):
        info = assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 1, 14))

        with pytest.raises(ImmutableHistoryError) as exc_info:
            assignments.delete(info.id, test_actor_id)

        assert exc_info.value.record_id == str(info.id)
        assert assignments.get(info.id).id == info.id
        assert any(r["message"] == "assignment_delete_rejected" for r in captured_logs())

    def test_delete_becomes_refused_as_clock_moves(
        self, assignments, airport_license, shift_s1, test_actor_id, clock
    ):
        info = assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 1, 20))
        clock.set_date(date(2026, 1, 21))

        with pytest.raises(ImmutableHistoryError):
            assignments.delete(info.id, test_actor_id)

    def test_delete_unknown(self, assignments):
        with pytest.raises(AssignmentNotFoundError):
            assignments.delete(uuid4())


class TestQueries:

    def test_get_active_boundaries(self, assignments, airport_license, shift_s1, test_actor_id):
        info = assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1), date(2026, 1, 31)
        )

        assert assignments.get_active(shift_s1, airport_license.id, date(2026, 1, 1)).id == info.id
        assert assignments.get_active(shift_s1, airport_license.id, date(2026, 1, 31)).id == info.id
        assert assignments.get_active(shift_s1, airport_license.id, date(2026, 2, 1)) is None
        assert assignments.get_active(shift_s1, airport_license.id, date(2025, 12, 31)) is None

    def test_get_current_uses_clock(
        self, assignments, airport_license, shift_s1, test_actor_id, clock
    ):
        assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1), date(2026, 1, 31)
        )
        assert len(assignments.get_current(shift_s1)) == 1

        clock.set_date(date(2026, 2, 1))
        assert assignments.get_current(shift_s1) == []

    def test_history_newest_first(self, assignments, airport_license, shift_s1, test_actor_id):
        assignments.assign(
            shift_s1, airport_license.id, test_actor_id, date(2025, 1, 1), date(2025, 12, 31)
        )
        assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1))

        history = assignments.get_history(shift_s1)
        assert [a.start_date for a in history] == [date(2026, 1, 1), date(2025, 1, 1)]

    def test_has_attribute_now(self, assignments, airport_license, shift_s1, shift_s2, test_actor_id):
        assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1))

        assert assignments.has_attribute_now(shift_s1, "airport_license")
        assert not assignments.has_attribute_now(shift_s2, "AIRPORT_LICENSE")
        assert not assignments.has_attribute_now(shift_s1, "UNKNOWN_CODE")

    def test_subjects_with_attribute(
        self, assignments, airport_license, shift_s1, shift_s2, cab_c1, test_actor_id
    ):
        assignments.assign(shift_s1, airport_license.id, test_actor_id, date(2026, 1, 1))
        assignments.assign(
            shift_s2, airport_license.id, test_actor_id, date(2025, 1, 1), date(2025, 12, 31)
        )
        assignments.assign(cab_c1, airport_license.id, test_actor_id, date(2026, 1, 1))

        assert assignments.subjects_with_attribute(airport_license.id, date(2026, 1, 15)) == [shift_s1.id]
        assert assignments.subjects_with_attribute(
            airport_license.id, date(2026, 1, 15), SubjectKind.CAB
        ) == [cab_c1.id]
