# Conflict detection for generated schedules.
# Version: 1.0.0
# Flags capacity overcommitment and operations scheduled too close together.

from collections.abc import Sequence
from datetime import timedelta

from .models import ConflictWarning, WorkCenterAssignment, WorkCenterCapacity

DEFAULT_MIN_GAP_MINUTES = 15

CAPACITY_RESOLUTION = "Consider splitting operations across multiple work centers or adjusting timeline"
TIMING_RESOLUTION = "Add buffer time between operations"


def detect_capacity_conflicts(
    assignments: Sequence[WorkCenterAssignment],
    capacity: Sequence[WorkCenterCapacity]
) -> list[ConflictWarning]:
    """Flag work centers this job would push over their maximum capacity.

    Walks the assignments in order, counting this job's operations per work
    center. Whenever that count plus the work center's existing load exceeds
    max_capacity, a high-severity warning is emitted for the assignment.
    Other jobs are only seen through the current_load snapshot.
    """
    centers = {center.work_center_id: center for center in capacity}
    placed: dict[str, int] = {}
    warnings = []

    for assignment in assignments:
        count = placed.get(assignment.work_center_id, 0) + 1
        placed[assignment.work_center_id] = count

        center = centers.get(assignment.work_center_id)
        if center is None:
            continue

        load = center.current_load + count
        if load > center.max_capacity:
            warnings.append(ConflictWarning(
                type="capacity",
                severity="high",
                message=f"Work center {center.name} will exceed capacity ({load}/{center.max_capacity})",
                affected_operations=(assignment.operation_id,),
                suggested_resolution=CAPACITY_RESOLUTION,
            ))

    return warnings


def detect_timing_conflicts(
    assignments: Sequence[WorkCenterAssignment],
    min_gap_minutes: int = DEFAULT_MIN_GAP_MINUTES
) -> list[ConflictWarning]:
    """Flag adjacent operations with less than the minimum gap between them.

    Only adjacent pairs are compared; assignments are already in
    chronological order.
    """
    min_gap = timedelta(minutes=min_gap_minutes)
    warnings = []

    for current, following in zip(assignments, assignments[1:]):
        gap = following.scheduled_start - current.scheduled_end
        if gap < min_gap:
            warnings.append(ConflictWarning(
                type="timing",
                severity="medium",
                message=f"Tight scheduling between {current.operation_name} and {following.operation_name}",
                affected_operations=(current.operation_id, following.operation_id),
                suggested_resolution=TIMING_RESOLUTION,
            ))

    return warnings


def detect_conflicts(
    assignments: Sequence[WorkCenterAssignment],
    capacity: Sequence[WorkCenterCapacity],
    min_gap_minutes: int = DEFAULT_MIN_GAP_MINUTES
) -> list[ConflictWarning]:
    """Detect capacity and timing conflicts in a schedule.

    Args:
        assignments: Assignments in schedule order.
        capacity: Work center snapshot used for the schedule.
        min_gap_minutes: Minimum gap between adjacent operations.

    Returns:
        Capacity warnings followed by timing warnings.
    """
    assignments = list(assignments)
    return (
        detect_capacity_conflicts(assignments, capacity)
        + detect_timing_conflicts(assignments, min_gap_minutes)
    )
