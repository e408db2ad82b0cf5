# Production Scheduling Engine - Core Package
# Version: 1.0.0

"""
Production scheduling engine for manufacturing jobs.

Plans a job backward from its due date, assigns each operation to the
least-loaded work center with capacity and an open time slot, flags
capacity and timing conflicts, and returns a confidence-scored suggestion.
"""

__version__ = "1.0.0"

from .errors import (
    SchedulingError,
    ValidationError,
    ConfigurationError,
    FileLoadError,
    UnplaceableOperationError,
    CapacityProviderError,
)

from .models import (
    JobData,
    Operation,
    TimeSlot,
    WorkCenterCapacity,
    WorkCenterAssignment,
    ConflictWarning,
    SchedulingSuggestion,
    LineItem,
)

from .constants import (
    SchedulingConstants,
    OperationRule,
    load_constants_from_yaml,
    save_constants_to_yaml,
)

from .date_utils import (
    parse_local_date,
    calculate_days_difference,
    format_due_date,
)

from .capacity import (
    CapacityProvider,
    StaticCapacityProvider,
    DefaultCapacityProvider,
    FileCapacityProvider,
    estimate_cost,
)

from .operations import derive_operations_from_line_items

from .allocation import (
    AllocationStrategy,
    GreedyAllocator,
    calculate_optimal_start_date,
    is_work_center_available,
    find_best_work_center,
)

from .conflicts import detect_conflicts

from .scoring import (
    generate_optimization_notes,
    calculate_confidence_score,
)

from .engine import (
    SchedulingEngine,
    generate_suggestion,
    get_default_engine,
)

from .output_generator import (
    suggestion_to_dict,
    export_to_json,
    assignments_to_dataframe,
    generate_schedule_report,
    build_scheduled_operation_records,
)
