"""
Syllabus structure and coverage.

A unit counts as completed for a batch once any faculty member teaching it has
marked it COMPLETED. Overall progress is the share of completed units, rounded
to a whole percent.
"""

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session, selectinload

from ..models import SyllabusUnit, SyllabusProgress, SyllabusTopicProgress, ProgressStatus
from ..schemas.syllabus import UnitResponse, TopicResponse, ProgressResponse, TopicProgressResponse


def subject_units(db: Session, subject_id: int) -> List[SyllabusUnit]:
    return (
        db.query(SyllabusUnit)
        .options(selectinload(SyllabusUnit.topics))
        .filter(SyllabusUnit.subject_id == subject_id)
        .order_by(SyllabusUnit.unit_number)
        .all()
    )


def combined_status(statuses: Iterable[ProgressStatus]) -> ProgressStatus:
    statuses = set(statuses)
    if ProgressStatus.COMPLETED in statuses:
        return ProgressStatus.COMPLETED
    if ProgressStatus.IN_PROGRESS in statuses:
        return ProgressStatus.IN_PROGRESS
    return ProgressStatus.NOT_STARTED


def completion(unit_statuses: List[ProgressStatus]) -> Dict[str, int]:
    total = len(unit_statuses)
    completed = sum(1 for status in unit_statuses if status == ProgressStatus.COMPLETED)
    # half up, so 1 of 8 units reads as 13%
    overall = (completed * 200 + total) // (2 * total) if total else 0
    return {"totalUnits": total, "completedUnits": completed, "overallProgress": overall}


def syllabus_tree(
    db: Session,
    units: List[SyllabusUnit],
    batch_id: int,
    faculty_id: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Units and topics with the progress recorded for a batch.

    With `faculty_id` only that faculty member's rows are included, otherwise
    every teacher of the batch counts.
    """
    unit_ids = [unit.id for unit in units]
    topic_ids = [topic.id for unit in units for topic in unit.topics]

    unit_query = db.query(SyllabusProgress).filter(
        SyllabusProgress.unit_id.in_(unit_ids),
        SyllabusProgress.batch_id == batch_id,
    )
    topic_query = db.query(SyllabusTopicProgress).filter(
        SyllabusTopicProgress.topic_id.in_(topic_ids),
        SyllabusTopicProgress.batch_id == batch_id,
    )
    if faculty_id is not None:
        unit_query = unit_query.filter(SyllabusProgress.faculty_id == faculty_id)
        topic_query = topic_query.filter(SyllabusTopicProgress.faculty_id == faculty_id)

    unit_progress = defaultdict(list)
    for row in unit_query.order_by(SyllabusProgress.id).all():
        unit_progress[row.unit_id].append(row)
    topic_progress = defaultdict(list)
    for row in topic_query.order_by(SyllabusTopicProgress.id).all():
        topic_progress[row.topic_id].append(row)

    result = []
    statuses = []
    for unit in units:
        status = combined_status(row.status for row in unit_progress[unit.id])
        statuses.append(status)

        data = UnitResponse.model_validate(unit).model_dump(mode="json", by_alias=True, exclude={"topics"})
        data["status"] = status
        data["progress"] = [ProgressResponse.model_validate(row) for row in unit_progress[unit.id]]
        data["topics"] = []
        for topic in unit.topics:
            item = TopicResponse.model_validate(topic).model_dump(mode="json", by_alias=True)
            item["status"] = combined_status(row.status for row in topic_progress[topic.id])
            item["progress"] = [TopicProgressResponse.model_validate(row) for row in topic_progress[topic.id]]
            data["topics"].append(item)
        result.append(data)

    return {"units": result, **completion(statuses)}
