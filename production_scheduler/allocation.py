# Work center allocation for job operations.
# Version: 1.0.0
# Backward start-date planning and greedy, load-balanced assignment under capacity and time-window constraints.

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime

from .date_utils import hours_to_timedelta, parse_local_date
from .errors import UnplaceableOperationError
from .models import JobData, Operation, WorkCenterAssignment, WorkCenterCapacity

logger = logging.getLogger(__name__)


def calculate_optimal_start_date(
    job: JobData,
    now: datetime,
    buffer_ratio: float = 0.2
) -> datetime:
    """Calculate the job start date working backward from the due date.

    start = due date - estimated duration - buffer, where the buffer is
    buffer_ratio times the estimated duration. The result is clamped to
    now so nothing is scheduled in the past.

    Args:
        job: Job with due_date and estimated_duration (hours).
        now: Time of the scheduling call.
        buffer_ratio: Safety margin as a fraction of the duration.

    Returns:
        Planned start date.
    """
    due_date = parse_local_date(job.due_date, now)
    duration = hours_to_timedelta(job.estimated_duration)
    start_date = due_date - duration - duration * buffer_ratio
    return now if start_date < now else start_date


def is_work_center_available(
    work_center: WorkCenterCapacity,
    start_time: datetime,
    duration_hours: float
) -> bool:
    """Check if a work center can take an operation for its full duration.

    Available means the work center is below max capacity and at least one
    open time slot fully contains [start_time, start_time + duration).
    """
    if not work_center.has_capacity:
        return False

    end_time = start_time + hours_to_timedelta(duration_hours)
    return any(
        slot.available and slot.contains(start_time, end_time)
        for slot in work_center.available_hours
    )


def find_best_work_center(
    operation: Operation,
    start_time: datetime,
    capacity: Sequence[WorkCenterCapacity]
) -> WorkCenterCapacity | None:
    """Find the work center for an operation starting at start_time.

    The operation's preferred work center wins when it is available.
    Otherwise the available work center with the lowest current load is
    chosen; ties go to the one listed first.

    Returns:
        Chosen work center, or None if none is available.
    """
    if operation.work_center_id:
        for center in capacity:
            if center.work_center_id == operation.work_center_id:
                if is_work_center_available(center, start_time, operation.estimated_hours):
                    return center
                break

    available = [
        center for center in capacity
        if is_work_center_available(center, start_time, operation.estimated_hours)
    ]
    if not available:
        return None

    # min() keeps the first of equal loads, so ties follow input order
    return min(available, key=lambda center: center.current_load)


def latest_feasible_start(
    capacity: Sequence[WorkCenterCapacity],
    duration_hours: float,
    earliest: datetime,
    latest: datetime
) -> datetime | None:
    """Find the latest start in [earliest, latest] that some work center can take.

    Args:
        capacity: Work centers to search.
        duration_hours: Operation duration.
        earliest: Lower bound for the start (normally now).
        latest: Upper bound for the start (the planned start).

    Returns:
        Latest feasible start time, or None if no open slot fits.
    """
    duration = hours_to_timedelta(duration_hours)
    best: datetime | None = None

    for center in capacity:
        if not center.has_capacity:
            continue
        for slot in center.open_slots:
            candidate = min(latest, slot.end - duration)
            if candidate < max(earliest, slot.start):
                continue
            if best is None or candidate > best:
                best = candidate

    return best


def _unplaceable_reason(
    operation: Operation,
    start_time: datetime,
    capacity: Sequence[WorkCenterCapacity]
) -> str:
    if not capacity:
        return "no work centers supplied"
    if not any(center.has_capacity for center in capacity):
        return "all work centers are at capacity"
    end_time = start_time + hours_to_timedelta(operation.estimated_hours)
    return (
        f"no open time slot covers {start_time.isoformat(timespec='minutes')} "
        f"to {end_time.isoformat(timespec='minutes')}"
    )


class AllocationStrategy(ABC):
    """Assigns a job's operations to work centers and times.

    Implementations must place every operation or raise
    UnplaceableOperationError; partial schedules are never returned.
    """

    @abstractmethod
    def allocate(
        self,
        operations: Sequence[Operation],
        start_date: datetime,
        capacity: Sequence[WorkCenterCapacity],
        now: datetime
    ) -> list[WorkCenterAssignment]:
        """Allocate operations starting no earlier than start_date."""


class GreedyAllocator(AllocationStrategy):
    """Sequential, load-balancing allocation.

    Operations run end to end in operation_number order. Each one goes to
    its preferred work center when available, else to the least-loaded
    available work center. There is no lookahead and no backtracking.

    Attributes:
        pull_ahead: When the first operation cannot start at the planned
            start, move the job to the latest start between now and the
            planned start where one open slot holds the whole job (or, failing
            that, the first operation) instead of failing. Later operations
            always start where the previous one ended.
    """

    def __init__(self, pull_ahead: bool = True) -> None:
        self.pull_ahead = pull_ahead

    def allocate(
        self,
        operations: Sequence[Operation],
        start_date: datetime,
        capacity: Sequence[WorkCenterCapacity],
        now: datetime
    ) -> list[WorkCenterAssignment]:
        """Allocate operations to work centers.

        Args:
            operations: Operations in any order.
            start_date: Planned start for the first operation.
            capacity: Work center snapshot.
            now: Time of the scheduling call.

        Returns:
            Assignments in schedule order.

        Raises:
            UnplaceableOperationError: If any operation cannot be placed.
        """
        assignments: list[WorkCenterAssignment] = []
        current_date = start_date

        # sorted() is stable, so equal operation numbers keep input order
        sorted_ops = sorted(operations, key=lambda op: op.operation_number)

        for index, operation in enumerate(sorted_ops):
            best = find_best_work_center(operation, current_date, capacity)

            if best is None and index == 0 and self.pull_ahead:
                pulled = self._pull_ahead_start(sorted_ops, capacity, now, current_date)
                if pulled is not None:
                    logger.warning(
                        "Pulling job ahead from %s to %s to fit %s",
                        current_date.isoformat(timespec="minutes"),
                        pulled.isoformat(timespec="minutes"),
                        operation.name
                    )
                    current_date = pulled
                    best = find_best_work_center(operation, current_date, capacity)

            if best is None:
                raise UnplaceableOperationError(
                    operation.name,
                    operation.operation_id,
                    _unplaceable_reason(operation, current_date, capacity)
                )

            operation_end = current_date + hours_to_timedelta(operation.estimated_hours)
            assignments.append(WorkCenterAssignment(
                operation_id=operation.operation_id,
                operation_name=operation.name,
                work_center_id=best.work_center_id,
                work_center_name=best.name,
                scheduled_start=current_date,
                scheduled_end=operation_end,
                estimated_hours=operation.estimated_hours,
            ))
            logger.debug(
                "Placed %s on %s from %s to %s",
                operation.name, best.name, current_date, operation_end
            )

            # Next operation starts after this one completes
            current_date = operation_end

        return assignments

    def _pull_ahead_start(
        self,
        sorted_ops: Sequence[Operation],
        capacity: Sequence[WorkCenterCapacity],
        now: datetime,
        planned_start: datetime
    ) -> datetime | None:
        # Prefer a window that holds the whole job, then one that holds the first operation.
        total_hours = sum(op.estimated_hours for op in sorted_ops)
        pulled = latest_feasible_start(capacity, total_hours, now, planned_start)
        if pulled is None:
            pulled = latest_feasible_start(capacity, sorted_ops[0].estimated_hours, now, planned_start)
        return pulled
