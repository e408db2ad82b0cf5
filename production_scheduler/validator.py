# Input validation for the scheduling engine.
# Version: 1.0.0
# Rejects malformed jobs and work center snapshots before any planning happens.

import logging
import math
from collections.abc import Iterable

from .date_utils import try_parse_local_date
from .errors import ValidationError
from .models import JobData, Operation, WorkCenterCapacity

logger = logging.getLogger(__name__)

MIN_PRIORITY = 1
MAX_PRIORITY = 5

# Ten years of machine time; larger figures overflow calendar arithmetic
MAX_JOB_HOURS = 24 * 365 * 10


def _is_hours(value, allow_zero: bool = False) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return False
    lower_ok = value >= 0 if allow_zero else value > 0
    return lower_ok and value <= MAX_JOB_HOURS


def validate_operation(operation: Operation) -> None:
    """Validate a single operation.

    Args:
        operation: Operation to check.

    Raises:
        ValidationError: If estimated hours are not a finite positive number
            no larger than MAX_JOB_HOURS.
    """
    hours = operation.estimated_hours
    if not _is_hours(hours):
        raise ValidationError(
            field="estimated_hours",
            value=hours,
            reason=f"Operation '{operation.name}' must have positive estimated hours up to {MAX_JOB_HOURS}"
        )


def validate_job_data(job: JobData) -> None:
    """Validate a scheduling request.

    Checks:
    1. Due date is a real YYYY-MM-DD calendar day
    2. Total estimated duration is a finite, non-negative number of hours
    3. Priority level is an integer in 1-5
    4. Quantity is a positive integer
    5. Every operation has positive estimated hours, and together they stay
       within MAX_JOB_HOURS

    Args:
        job: JobData to validate.

    Raises:
        ValidationError: On the first failing check.
    """
    if try_parse_local_date(job.due_date) is None:
        raise ValidationError(
            field="due_date",
            value=job.due_date,
            reason="Must be a calendar date in YYYY-MM-DD format"
        )

    duration = job.estimated_duration
    if not _is_hours(duration, allow_zero=True):
        raise ValidationError(
            field="estimated_duration",
            value=duration,
            reason=f"Must be a non-negative number of hours up to {MAX_JOB_HOURS}"
        )

    if (
        isinstance(job.priority_level, bool)
        or not isinstance(job.priority_level, int)
        or not MIN_PRIORITY <= job.priority_level <= MAX_PRIORITY
    ):
        raise ValidationError(
            field="priority_level",
            value=job.priority_level,
            reason=f"Must be an integer between {MIN_PRIORITY} and {MAX_PRIORITY}"
        )

    if isinstance(job.quantity, bool) or not isinstance(job.quantity, int) or job.quantity <= 0:
        raise ValidationError(
            field="quantity",
            value=job.quantity,
            reason="Must be a positive integer"
        )

    for operation in job.operations:
        validate_operation(operation)

    if job.total_operation_hours > MAX_JOB_HOURS:
        raise ValidationError(
            field="operations",
            value=job.total_operation_hours,
            reason=f"Total operation hours cannot exceed {MAX_JOB_HOURS}"
        )

    if job.operations and job.estimated_duration == 0:
        logger.warning(
            "Job %s has %d operations but zero estimated duration",
            job.job_number, len(job.operations)
        )


def validate_work_centers(capacity: Iterable[WorkCenterCapacity]) -> None:
    """Validate a work center capacity snapshot.

    Args:
        capacity: Work centers to check.

    Raises:
        ValidationError: If capacity figures or time slots are inconsistent.
    """
    seen: set[str] = set()
    for center in capacity:
        if center.work_center_id in seen:
            raise ValidationError(
                field="work_center_id",
                value=center.work_center_id,
                reason="Work center ids must be unique"
            )
        seen.add(center.work_center_id)

        if center.max_capacity < 1:
            raise ValidationError(
                field="max_capacity",
                value=center.max_capacity,
                reason=f"Work center {center.name} must allow at least one concurrent job"
            )
        if center.current_load < 0:
            raise ValidationError(
                field="current_load",
                value=center.current_load,
                reason=f"Work center {center.name} cannot have negative load"
            )
        for slot in center.available_hours:
            # Scheduling runs on naive local time; offsets cannot be compared with it
            if slot.start.tzinfo is not None or slot.end.tzinfo is not None:
                raise ValidationError(
                    field="available_hours",
                    value=(slot.start.isoformat(), slot.end.isoformat()),
                    reason=f"Time slot for {center.name} must be local time without a UTC offset"
                )
            if slot.end <= slot.start:
                raise ValidationError(
                    field="available_hours",
                    value=(slot.start.isoformat(), slot.end.isoformat()),
                    reason=f"Time slot for {center.name} must end after it starts"
                )
