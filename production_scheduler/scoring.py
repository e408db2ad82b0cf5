# Optimization notes and confidence scoring for scheduling suggestions.
# Version: 1.0.0
# Advisory text and a 0-100 ordinal confidence score; neither alters the schedule.

from collections.abc import Sequence
from datetime import date, datetime

from .constants import SchedulingConstants
from .date_utils import calculate_days_difference
from .models import ConflictWarning, JobData, WorkCenterAssignment

ALL_CLEAR_NOTE = "Schedule looks optimal with no conflicts detected"
HIGH_PRIORITY_NOTE = "High priority job - consider expediting or adding resources"
TIGHT_DEADLINE_NOTE = "Tight deadline - monitor progress closely and prepare contingency plans"
SINGLE_WORK_CENTER_NOTE = "All operations on single work center - consider parallel processing if possible"


def generate_optimization_notes(
    assignments: Sequence[WorkCenterAssignment],
    conflicts: Sequence[ConflictWarning],
    job: JobData,
    today: date | None = None,
    constants: SchedulingConstants | None = None
) -> list[str]:
    """Generate free-text recommendations for a schedule.

    Args:
        assignments: Scheduled operations.
        conflicts: Detected conflicts.
        job: The job that was scheduled.
        today: Reference day for the deadline check.
        constants: Thresholds (defaults if None).

    Returns:
        Notes; the first one always summarizes conflicts.
    """
    constants = constants or SchedulingConstants()
    notes = []

    if not conflicts:
        notes.append(ALL_CLEAR_NOTE)
    else:
        notes.append(f"{len(conflicts)} potential issues identified - review suggestions")

    if job.priority_level >= constants.high_priority_level:
        notes.append(HIGH_PRIORITY_NOTE)

    if calculate_days_difference(job.due_date, today) <= constants.tight_deadline_days:
        notes.append(TIGHT_DEADLINE_NOTE)

    work_center_count = len({a.work_center_id for a in assignments})
    if work_center_count == 1 and len(assignments) > 2:
        notes.append(SINGLE_WORK_CENTER_NOTE)

    return notes


def calculate_utilization(
    assignments: Sequence[WorkCenterAssignment],
    window_end: datetime | None = None
) -> float:
    """Ratio of operation hours to the elapsed span of the schedule.

    The span runs from the first scheduled start to window_end when given,
    but never ends before the last scheduled end. Without window_end it is
    the first start to the last end.

    Returns:
        Utilization ratio, 0.0 for an empty or zero-length schedule.
    """
    if not assignments:
        return 0.0

    total_hours = sum(a.estimated_hours for a in assignments)
    first_start = min(a.scheduled_start for a in assignments)
    span_end = max(a.scheduled_end for a in assignments)
    if window_end is not None and window_end > span_end:
        span_end = window_end

    span_hours = (span_end - first_start).total_seconds() / 3600
    if total_hours <= 0 or span_hours <= 0:
        return 0.0
    return total_hours / span_hours


def calculate_confidence_score(
    conflicts: Sequence[ConflictWarning],
    assignments: Sequence[WorkCenterAssignment],
    window_end: datetime | None = None,
    constants: SchedulingConstants | None = None
) -> int:
    """Calculate the confidence score for a schedule.

    Starts at 100, subtracts a penalty per conflict by severity (25 high,
    15 medium, 5 low), and a further 10 when utilization is above 0.9.
    The result is clamped to [0, 100]. The score is ordinal, not a probability.

    Args:
        conflicts: Detected conflicts.
        assignments: Scheduled operations.
        window_end: End of the planning window (the due date), if known.
        constants: Penalties and thresholds (defaults if None).

    Returns:
        Integer score between 0 and 100.
    """
    constants = constants or SchedulingConstants()
    score = 100

    for conflict in conflicts:
        score -= constants.get_penalty(conflict.severity)

    if calculate_utilization(assignments, window_end) > constants.tight_schedule_utilization:
        score -= constants.tight_schedule_penalty

    return max(0, min(100, score))
