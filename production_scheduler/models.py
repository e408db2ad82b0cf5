# Value objects for the production scheduling engine.
# Version: 1.0.0
# Jobs, operations, work center capacity, assignments, conflicts and suggestions.

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from math import ceil
from typing import Any, Literal, Mapping


# Type aliases for clarity
ConflictType = Literal["capacity", "timing", "resource", "dependency"]
Severity = Literal["low", "medium", "high"]

SEVERITIES: tuple[Severity, ...] = ("low", "medium", "high")


def _freeze(instance: object, name: str) -> None:
    # Frozen dataclasses still accept lists from callers; store them as tuples.
    value = getattr(instance, name)
    if value is None:
        object.__setattr__(instance, name, ())
    elif not isinstance(value, tuple):
        object.__setattr__(instance, name, tuple(value))


@dataclass(frozen=True)
class Operation:
    """One ordered unit of work within a job.

    Attributes:
        name: Display name.
        operation_number: Defines execution order (not necessarily contiguous).
        estimated_hours: Machine time required, in hours.
        id: Persisted identifier, if any.
        work_center_id: Preferred work center, if any.
        required_skills: Skill tags (carried through, not used for matching).
    """
    name: str
    operation_number: int
    estimated_hours: float
    id: str | None = None
    work_center_id: str | None = None
    required_skills: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "required_skills")

    @property
    def operation_id(self) -> str:
        """Identifier used in assignments (synthesized when not persisted)."""
        return self.id or f"temp-{self.operation_number}"


@dataclass(frozen=True)
class JobData:
    """A scheduling request for one manufacturing job.

    Attributes:
        job_number: Display job number.
        due_date: Due date as YYYY-MM-DD (or a date), a local calendar day.
        estimated_duration: Total estimated duration in hours.
        operations: Operations in any order (sorted by operation_number when scheduled).
        priority_level: 1 (lowest) to 5 (highest).
        quantity: Units ordered.
        id: Persisted job identifier, if any.
        customer_id: Owning customer, if known.
    """
    job_number: str
    due_date: str | date
    estimated_duration: float
    operations: tuple[Operation, ...] = ()
    priority_level: int = 3
    quantity: int = 1
    id: str | None = None
    customer_id: str | None = None

    def __post_init__(self) -> None:
        _freeze(self, "operations")

    @property
    def total_operation_hours(self) -> float:
        return sum(op.estimated_hours for op in self.operations)

    @classmethod
    def from_operations(
        cls,
        job_number: str,
        operations: list[Operation],
        due_date: str | date | None = None,
        priority_level: int = 3,
        quantity: int = 1,
        today: date | None = None,
        default_lead_days: int = 14,
        **kwargs: Any
    ) -> "JobData":
        """Build a job whose duration is the rounded-up sum of its operations.

        Args:
            job_number: Display job number.
            operations: Operations making up the job.
            due_date: Due date; defaults to today plus default_lead_days.
            priority_level: Priority 1-5.
            quantity: Units ordered.
            today: Reference day for the default due date.
            default_lead_days: Lead time used when no due date is known.
            **kwargs: Passed through (id, customer_id).

        Returns:
            New JobData.
        """
        if due_date is None:
            due_date = (today or date.today()) + timedelta(days=default_lead_days)
            due_date = due_date.isoformat()

        return cls(
            job_number=job_number,
            due_date=due_date,
            estimated_duration=ceil(sum(op.estimated_hours for op in operations)),
            operations=tuple(operations),
            priority_level=priority_level,
            quantity=quantity or 1,
            **kwargs
        )


@dataclass(frozen=True)
class TimeSlot:
    """A half-open window [start, end) when a work center is open.

    Attributes:
        start: Window start (naive local datetime).
        end: Window end, exclusive.
        work_center_id: Owning work center.
        available: Only available slots can receive operations.
        conflicting_jobs: Job ids already occupying the slot.
    """
    start: datetime
    end: datetime
    work_center_id: str
    available: bool = True
    conflicting_jobs: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "conflicting_jobs")

    def contains(self, start: datetime, end: datetime) -> bool:
        """Check if [start, end) lies fully inside this slot."""
        return self.start <= start and end <= self.end


@dataclass(frozen=True)
class WorkCenterCapacity:
    """A schedulable resource with finite concurrent capacity.

    Attributes:
        work_center_id: Work center identifier.
        name: Display name.
        max_capacity: Maximum concurrent jobs (>= 1).
        current_load: Jobs already running (>= 0), may be at or over capacity.
        hourly_rate: Cost per hour, if known.
        available_hours: Open time windows.
    """
    work_center_id: str
    name: str
    max_capacity: int
    current_load: int = 0
    hourly_rate: float | None = None
    available_hours: tuple[TimeSlot, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "available_hours")

    @property
    def has_capacity(self) -> bool:
        return self.current_load < self.max_capacity

    @property
    def open_slots(self) -> list[TimeSlot]:
        return [slot for slot in self.available_hours if slot.available]


@dataclass(frozen=True)
class WorkCenterAssignment:
    """An operation bound to a work center at a specific time."""
    operation_id: str
    operation_name: str
    work_center_id: str
    work_center_name: str
    scheduled_start: datetime
    scheduled_end: datetime
    estimated_hours: float

    @property
    def duration(self) -> timedelta:
        return self.scheduled_end - self.scheduled_start

    def overlaps(self, other: "WorkCenterAssignment") -> bool:
        """Check if this assignment overlaps another in time."""
        return (
            self.scheduled_start < other.scheduled_end
            and other.scheduled_start < self.scheduled_end
        )


@dataclass(frozen=True)
class ConflictWarning:
    """A non-fatal problem attached to an otherwise valid schedule.

    Attributes:
        type: capacity, timing, resource or dependency.
        severity: low, medium or high.
        message: Human-readable description.
        affected_operations: Operation ids involved.
        suggested_resolution: Optional hint for the planner.
    """
    type: ConflictType
    severity: Severity
    message: str
    affected_operations: tuple[str, ...] = ()
    suggested_resolution: str | None = None

    def __post_init__(self) -> None:
        _freeze(self, "affected_operations")


@dataclass(frozen=True)
class SchedulingSuggestion:
    """The complete result of one scheduling call.

    Attributes:
        job_number: Job the suggestion is for.
        suggested_start_date: Planned start of the job.
        suggested_end_date: Latest scheduled end across all assignments.
        work_center_assignments: Assignments in schedule order.
        conflict_warnings: Advisory conflicts.
        optimization_notes: Free-text advice, independent of each other.
        confidence_score: 0-100, ordinal only.
        job_id: Persisted job id, if any.
        estimated_cost: Sum of hours times hourly rate, when rates are known.
    """
    job_number: str
    suggested_start_date: datetime
    suggested_end_date: datetime
    work_center_assignments: tuple[WorkCenterAssignment, ...] = ()
    conflict_warnings: tuple[ConflictWarning, ...] = ()
    optimization_notes: tuple[str, ...] = ()
    confidence_score: int = 100
    job_id: str | None = None
    estimated_cost: float | None = None

    def __post_init__(self) -> None:
        _freeze(self, "work_center_assignments")
        _freeze(self, "conflict_warnings")
        _freeze(self, "optimization_notes")

    @property
    def has_conflicts(self) -> bool:
        return len(self.conflict_warnings) > 0


@dataclass(frozen=True)
class LineItem:
    """A quote or order line used to derive operations."""
    description: str
    quantity: int = 1

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any], default_quantity: int = 1) -> "LineItem":
        """Build a line item from a quote/order row.

        Missing or empty quantities fall back to default_quantity.
        """
        quantity = row.get("quantity")
        if quantity in (None, ""):
            quantity = default_quantity
        return cls(
            description=str(row.get("description") or ""),
            quantity=int(float(quantity))
        )
