from attendance_app.models import AttendanceStatus
from attendance_app.core.pagination import pagination_meta
from attendance_app.services.attendance_stats import format_percentage, summarize_statuses


def test_format_percentage():
    assert format_percentage(0, 0) == "0.00"
    assert format_percentage(2, 3) == "66.67"
    assert format_percentage(1, 8) == "12.50"
    assert format_percentage(5, 5) == "100.00"


def test_summary_counts_add_up():
    statuses = [
        AttendanceStatus.PRESENT,
        AttendanceStatus.PRESENT,
        AttendanceStatus.LATE,
        AttendanceStatus.ABSENT,
        AttendanceStatus.EXCUSED,
    ]

    summary = summarize_statuses(statuses)

    assert summary["totalClasses"] == 5
    assert summary["present"] + summary["absent"] + summary["late"] + summary["excused"] == 5
    assert summary["percentage"] == "60.00"


def test_excused_is_not_attended():
    summary = summarize_statuses([AttendanceStatus.EXCUSED, AttendanceStatus.PRESENT])
    assert summary["percentage"] == "50.00"


def test_accepts_raw_status_strings():
    assert summarize_statuses(["PRESENT", "ABSENT"])["present"] == 1


def test_pagination_meta():
    assert pagination_meta(1, 50, 0) == {"page": 1, "limit": 50, "totalCount": 0, "totalPages": 0}
    assert pagination_meta(2, 10, 25)["totalPages"] == 3
    assert pagination_meta(1, 10, 10)["totalPages"] == 1
