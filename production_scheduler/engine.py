# Scheduling engine: composes planning, allocation, conflict detection and scoring.
# Version: 1.0.0
# Produces one SchedulingSuggestion per job; holds no state between calls.

import logging
from collections.abc import Callable, Sequence
from datetime import datetime

from .allocation import AllocationStrategy, GreedyAllocator, calculate_optimal_start_date
from .capacity import CapacityProvider, DefaultCapacityProvider, estimate_cost
from .conflicts import detect_conflicts
from .constants import SchedulingConstants
from .date_utils import parse_local_date
from .errors import CapacityProviderError, ValidationError
from .models import JobData, SchedulingSuggestion, WorkCenterAssignment, WorkCenterCapacity
from .scoring import calculate_confidence_score, generate_optimization_notes
from .validator import validate_job_data, validate_work_centers

logger = logging.getLogger(__name__)


def calculate_end_date(
    assignments: Sequence[WorkCenterAssignment],
    default: datetime
) -> datetime:
    """Latest scheduled end across assignments, or default when there are none."""
    if not assignments:
        return default
    return max(a.scheduled_end for a in assignments)


class SchedulingEngine:
    """Generates scheduling suggestions for manufacturing jobs.

    The engine is a pure function of its inputs plus the clock: capacity
    is read once per call as a snapshot and nothing is cached. Callers
    persisting a suggestion must re-validate load before committing it.

    Attributes:
        capacity_provider: Source of work centers when a call supplies none.
        allocator: Strategy placing operations on work centers.
        constants: Planning, conflict and scoring constants.
        clock: Returns the current naive local time.
    """

    def __init__(
        self,
        capacity_provider: CapacityProvider | None = None,
        allocator: AllocationStrategy | None = None,
        constants: SchedulingConstants | None = None,
        clock: Callable[[], datetime] = datetime.now
    ) -> None:
        self.constants = constants or SchedulingConstants()
        self.capacity_provider = capacity_provider or DefaultCapacityProvider(self.constants)
        self.allocator = allocator or GreedyAllocator()
        self.clock = clock

    def get_work_center_capacity(self, now: datetime) -> list[WorkCenterCapacity]:
        """Fetch capacity from the provider.

        Raises:
            CapacityProviderError: If the provider fails for any reason.
        """
        try:
            return list(self.capacity_provider.get_work_center_capacity(now))
        except Exception as e:
            logger.warning("Capacity provider %s failed: %s", self.capacity_provider.name, e)
            raise CapacityProviderError(self.capacity_provider.name, e) from e

    def generate_suggestion(
        self,
        job: JobData,
        capacity: Sequence[WorkCenterCapacity] | None = None,
        now: datetime | None = None
    ) -> SchedulingSuggestion:
        """Generate a scheduling suggestion for a job.

        Args:
            job: Job to schedule.
            capacity: Work center override; fetched from the provider if None.
            now: Time of the call (defaults to the engine clock).

        Returns:
            SchedulingSuggestion with assignments, conflicts, notes and score.

        Raises:
            ValidationError: If the job or work centers are malformed.
            CapacityProviderError: If capacity cannot be fetched.
            UnplaceableOperationError: If any operation cannot be placed.
        """
        now = now or self.clock()
        validate_job_data(job)

        if capacity is None:
            work_centers = self.get_work_center_capacity(now)
        else:
            work_centers = list(capacity)
        validate_work_centers(work_centers)

        try:
            optimal_start = calculate_optimal_start_date(job, now, self.constants.start_buffer_ratio)
            assignments = self.allocator.allocate(job.operations, optimal_start, work_centers, now)
        except OverflowError as e:
            raise ValidationError(
                field="due_date",
                value=job.due_date,
                reason="Schedule would fall outside the supported calendar range"
            ) from e

        # The allocator may pull the first operation ahead of the planned start
        start_date = assignments[0].scheduled_start if assignments else optimal_start

        conflicts = detect_conflicts(assignments, work_centers, self.constants.min_operation_gap_minutes)

        notes = generate_optimization_notes(
            assignments, conflicts, job, today=now.date(), constants=self.constants
        )

        confidence = calculate_confidence_score(
            conflicts,
            assignments,
            window_end=parse_local_date(job.due_date, now),
            constants=self.constants
        )

        suggestion = SchedulingSuggestion(
            job_number=job.job_number,
            job_id=job.id,
            suggested_start_date=start_date,
            suggested_end_date=calculate_end_date(assignments, start_date),
            work_center_assignments=tuple(assignments),
            conflict_warnings=tuple(conflicts),
            optimization_notes=tuple(notes),
            confidence_score=confidence,
            estimated_cost=estimate_cost(assignments, work_centers),
        )

        logger.info(
            "Scheduled job %s: %d operations, %d conflicts, confidence %d%%",
            job.job_number, len(assignments), len(conflicts), confidence
        )
        return suggestion


_default_engine: SchedulingEngine | None = None


def get_default_engine() -> SchedulingEngine:
    """Return the shared engine with default configuration."""
    global _default_engine
    if _default_engine is None:
        _default_engine = SchedulingEngine()
    return _default_engine


def generate_suggestion(
    job: JobData,
    capacity: Sequence[WorkCenterCapacity] | None = None,
    now: datetime | None = None
) -> SchedulingSuggestion:
    """Generate a suggestion with the shared default engine."""
    return get_default_engine().generate_suggestion(job, capacity, now)
