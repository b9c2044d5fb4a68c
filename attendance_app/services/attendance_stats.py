"""
Attendance aggregation.

Every attendance read (student, faculty, HOD) reduces records the same way:
count each status, then percentage = (present + late) / total * 100 with two
decimals. No records means "0.00".
"""

from collections import OrderedDict
from typing import Any, Dict, Iterable, List

from ..models.attendance import AttendanceRecord, AttendanceStatus


def format_percentage(attended: int, total: int) -> str:
    if total == 0:
        return "0.00"
    return f"{attended / total * 100:.2f}"


def summarize_statuses(statuses: Iterable[AttendanceStatus]) -> Dict[str, Any]:
    counts = {status: 0 for status in AttendanceStatus}
    for status in statuses:
        counts[AttendanceStatus(status)] += 1

    total = sum(counts.values())
    present = counts[AttendanceStatus.PRESENT]
    late = counts[AttendanceStatus.LATE]
    return {
        "totalClasses": total,
        "present": present,
        "absent": counts[AttendanceStatus.ABSENT],
        "late": late,
        "excused": counts[AttendanceStatus.EXCUSED],
        "percentage": format_percentage(present + late, total),
    }


def summarize(records: Iterable[AttendanceRecord]) -> Dict[str, Any]:
    return summarize_statuses(record.status for record in records)


def subject_wise(records: Iterable[AttendanceRecord]) -> List[Dict[str, Any]]:
    """Group records by their session's subject, keeping first-seen order"""
    groups: "OrderedDict[int, List[AttendanceRecord]]" = OrderedDict()
    subjects = {}
    for record in records:
        subject = record.session.subject
        groups.setdefault(subject.id, []).append(record)
        subjects[subject.id] = subject

    result = []
    for subject_id, subject_records in groups.items():
        subject = subjects[subject_id]
        summary = summarize(subject_records)
        summary.update({
            "subjectId": subject.id,
            "subjectName": subject.name,
            "subjectCode": subject.code,
        })
        result.append(summary)
    return result
