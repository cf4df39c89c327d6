"""
Tests for booking overlap detection and the booked-dates query
"""
from conftest import StayRecord

from guestform.domain.overlap import active_booked_ranges, has_overlap, ranges_overlap
from guestform.models import BookingStatus


class TestHasOverlap:
    """Half-open stay ranges with same-day turnover allowed"""

    def test_no_self_conflict_with_exclude_id(self):
        existing = [StayRecord("A", "2024-01-01", "2024-01-05")]
        result = has_overlap("2024-01-01", "2024-01-05", existing, exclude_id="A")
        assert result.overlap is False
        assert result.conflicts == []

    def test_same_booking_conflicts_without_exclude_id(self):
        existing = [StayRecord("A", "2024-01-01", "2024-01-05")]
        result = has_overlap("2024-01-01", "2024-01-05", existing)
        assert result.overlap is True

    def test_same_day_turnover_after(self):
        """New check-in on the existing check-out day"""
        existing = [StayRecord("A", "2024-01-01", "2024-01-05")]
        assert has_overlap("2024-01-05", "2024-01-08", existing).overlap is False

    def test_same_day_turnover_before(self):
        """New check-out on the existing check-in day"""
        existing = [StayRecord("A", "2024-01-05", "2024-01-08")]
        assert has_overlap("2024-01-01", "2024-01-05", existing).overlap is False

    def test_strict_overlap_reported(self):
        existing = [StayRecord("A", "2024-01-01", "2024-01-05")]
        result = has_overlap("2024-01-04", "2024-01-07", existing)
        assert result.overlap is True
        assert [b.id for b in result.conflicts] == ["A"]

    def test_containment(self):
        existing = [StayRecord("A", "2024-01-01", "2024-01-10")]
        assert has_overlap("2024-01-03", "2024-01-05", existing).overlap is True
        # and the other way around
        inner = [StayRecord("B", "2024-01-03", "2024-01-05")]
        assert has_overlap("2024-01-01", "2024-01-10", inner).overlap is True

    def test_disjoint(self):
        existing = [StayRecord("A", "2024-01-01", "2024-01-03")]
        assert has_overlap("2024-01-10", "2024-01-12", existing).overlap is False
        assert has_overlap("2023-12-20", "2023-12-22", existing).overlap is False

    def test_canceled_ignored(self):
        existing = [
            StayRecord("A", "2024-01-01", "2024-01-05", status="canceled"),
            StayRecord("B", "2024-01-01", "2024-01-05", status=BookingStatus.CANCELED),
        ]
        assert has_overlap("2024-01-02", "2024-01-04", existing).overlap is False

    def test_null_status_counts_as_booked(self):
        existing = [StayRecord("A", "2024-01-01", "2024-01-05", status=None)]
        assert has_overlap("2024-01-02", "2024-01-04", existing).overlap is True

    def test_mixed_format_equivalence(self):
        """MM-DD-YYYY stored rows compare against YYYY-MM-DD candidates"""
        stored = [StayRecord("A", "01-01-2024", "01-05-2024")]
        iso = [StayRecord("A", "2024-01-01", "2024-01-05")]
        for new_in, new_out in [
            ("2024-01-04", "2024-01-07"),
            ("2024-01-05", "2024-01-07"),
            ("12-30-2023", "01-01-2024"),
            ("2024-01-02", "01-03-2024"),
        ]:
            assert (
                has_overlap(new_in, new_out, stored).overlap
                == has_overlap(new_in, new_out, iso).overlap
            )

    def test_conflicts_in_input_order(self):
        existing = [
            StayRecord("C", "2024-01-06", "2024-01-09"),
            StayRecord("A", "2024-01-01", "2024-01-04"),
            StayRecord("B", "2024-01-20", "2024-01-22"),
        ]
        result = has_overlap("2024-01-02", "2024-01-08", existing)
        assert [b.id for b in result.conflicts] == ["C", "A"]

    def test_empty_input(self):
        result = has_overlap("2024-01-01", "2024-01-02", [])
        assert result.overlap is False
        assert result.conflicts == []


def test_ranges_overlap_boundaries():
    assert ranges_overlap("2024-01-01", "2024-01-05", "2024-01-04", "2024-01-06")
    assert not ranges_overlap("2024-01-01", "2024-01-05", "2024-01-05", "2024-01-06")
    assert not ranges_overlap("2024-01-05", "2024-01-06", "2024-01-01", "2024-01-05")


class TestActiveBookedRanges:
    """Availability variant used by the calendar widget"""

    def test_drops_past_and_canceled(self):
        bookings = [
            StayRecord("past", "2024-01-01", "2024-01-03"),
            StayRecord("ends-today", "2024-01-08", "01-10-2024"),
            StayRecord("canceled", "2024-01-12", "2024-01-14", status="canceled"),
            StayRecord("future", "01-20-2024", "01-22-2024"),
        ]
        ranges = active_booked_ranges(bookings, today="2024-01-10")
        assert [r.id for r in ranges] == ["ends-today", "future"]

    def test_dates_normalized_and_sorted(self):
        bookings = [
            StayRecord("B", "02-10-2030", "02-12-2030"),
            StayRecord("A", "2030-01-05", "2030-01-07"),
        ]
        ranges = active_booked_ranges(bookings, today="01-01-2030")
        assert [(r.id, r.check_in_date, r.check_out_date) for r in ranges] == [
            ("A", "2030-01-05", "2030-01-07"),
            ("B", "2030-02-10", "2030-02-12"),
        ]

    def test_defaults_to_today(self):
        bookings = [
            StayRecord("old", "2000-01-01", "2000-01-02"),
            StayRecord("far", "2999-01-01", "2999-01-02"),
        ]
        assert [r.id for r in active_booked_ranges(bookings)] == ["far"]
