# Load and structure scheduling constants from YAML config file.
# Version: 1.0.0
# Planning buffers, conflict thresholds, scoring penalties, operation rules and default work centers.

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError, FileLoadError
from .models import SEVERITIES


@dataclass(frozen=True)
class OperationRule:
    """Keyword rule mapping a line item description to an operation.

    Attributes:
        keyword: Lowercase substring searched for in the description.
        label: Operation name prefix (e.g., "CNC Machining").
        hours_per_unit: Estimated hours per unit of quantity.
        min_hours: Floor applied to the estimate.
        work_center_id: Preferred work center for the operation.
        required_skills: Skill tags attached to the operation.
    """
    keyword: str
    label: str
    hours_per_unit: float
    min_hours: float
    work_center_id: str | None = None
    required_skills: tuple[str, ...] = ()

    def estimate_hours(self, quantity: int) -> float:
        return max(self.min_hours, quantity * self.hours_per_unit)


@dataclass(frozen=True)
class FixedOperation:
    """An operation with a fixed duration, such as the final inspection step."""
    name: str
    hours: float
    work_center_id: str | None = None


@dataclass(frozen=True)
class WorkCenterDefault:
    """Work center used by the built-in capacity provider.

    Attributes:
        work_center_id: Work center identifier.
        name: Display name.
        max_capacity: Maximum concurrent jobs.
        current_load: Jobs already running.
        hourly_rate: Cost per hour, if known.
    """
    work_center_id: str
    name: str
    max_capacity: int
    current_load: int = 0
    hourly_rate: float | None = None


DEFAULT_OPERATION_RULES: tuple[OperationRule, ...] = (
    OperationRule("machining", "CNC Machining", 0.17, 1.0, "wc-1"),  # ~10 min per unit
    OperationRule("welding", "Welding", 0.08, 0.5, "wc-2"),  # ~5 min per unit
    OperationRule("assembly", "Assembly", 0.13, 0.75, "wc-3"),  # ~8 min per unit
)

DEFAULT_PRODUCTION_RULE = OperationRule("", "Production", 0.08, 0.5, None, ("general",))

DEFAULT_FINAL_OPERATION = FixedOperation("Quality Control & Inspection", 1.0, "wc-4")

DEFAULT_WORK_CENTERS: tuple[WorkCenterDefault, ...] = (
    WorkCenterDefault("wc-1", "CNC Machining", 2, 0, 85.0),
    WorkCenterDefault("wc-2", "Welding Station", 3, 1, 65.0),
)


@dataclass(frozen=True)
class SchedulingConstants:
    """Container for all scheduling constants.

    Attributes:
        start_buffer_ratio: Safety margin added to the job duration when planning backward.
        min_operation_gap_minutes: Minimum gap between adjacent operations.
        severity_penalties: (severity, points) pairs removed from confidence per conflict.
        tight_schedule_utilization: Utilization above which the schedule counts as packed.
        tight_schedule_penalty: Confidence points removed for a packed schedule.
        tight_deadline_days: Days to due date at or below which the deadline is tight.
        high_priority_level: Priority at or above which a job is high priority.
        default_lead_days: Lead time used when a job has no due date.
        default_priority_level: Priority used when a request omits one.
        operation_rules: Keyword rules for deriving operations.
        default_operation: Rule for line items no keyword matches.
        final_operation: Operation appended to every derived list.
        default_work_centers: Work centers of the built-in capacity provider.
        open_hours: Length of the open window given to each default work center.
    """
    start_buffer_ratio: float = 0.2
    min_operation_gap_minutes: int = 15
    severity_penalties: tuple[tuple[str, int], ...] = (("high", 25), ("low", 5), ("medium", 15))
    tight_schedule_utilization: float = 0.9
    tight_schedule_penalty: int = 10
    tight_deadline_days: int = 7
    high_priority_level: int = 4
    default_lead_days: int = 14
    default_priority_level: int = 3
    operation_rules: tuple[OperationRule, ...] = DEFAULT_OPERATION_RULES
    default_operation: OperationRule = DEFAULT_PRODUCTION_RULE
    final_operation: FixedOperation = DEFAULT_FINAL_OPERATION
    default_work_centers: tuple[WorkCenterDefault, ...] = DEFAULT_WORK_CENTERS
    open_hours: float = 8.0

    def __post_init__(self) -> None:
        # Penalties may be given as a mapping; stored as sorted pairs so instances stay hashable.
        penalties = self.severity_penalties
        if isinstance(penalties, Mapping):
            penalties = penalties.items()
        object.__setattr__(self, "severity_penalties", tuple(sorted((str(k), v) for k, v in penalties)))

    def get_penalty(self, severity: str) -> int:
        """Get the confidence penalty for a conflict severity.

        Raises:
            ConfigurationError: If the severity is unknown.
        """
        penalties = dict(self.severity_penalties)
        if severity in penalties:
            return penalties[severity]
        raise ConfigurationError("severity_penalties", f"No penalty for severity '{severity}'")


def _parse_rule(data: dict[str, Any], source: str) -> OperationRule:
    try:
        return OperationRule(
            keyword=str(data.get('keyword', '')).lower(),
            label=str(data['label']),
            hours_per_unit=float(data['hours_per_unit']),
            min_hours=float(data['min_hours']),
            work_center_id=data.get('work_center_id'),
            required_skills=tuple(data.get('required_skills') or ()),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(source, f"Invalid operation rule {data!r}: {e}")


def _rule_to_dict(rule: OperationRule) -> dict[str, Any]:
    data = {
        'keyword': rule.keyword,
        'label': rule.label,
        'hours_per_unit': rule.hours_per_unit,
        'min_hours': rule.min_hours,
        'work_center_id': rule.work_center_id,
    }
    if rule.required_skills:
        data['required_skills'] = list(rule.required_skills)
    return data


def load_constants_from_yaml(yaml_path: str | Path) -> SchedulingConstants:
    """Load scheduling constants from YAML file.

    Keys missing from the file keep their default values.

    Args:
        yaml_path: Path to the YAML config file.

    Returns:
        SchedulingConstants object with all loaded data.

    Raises:
        FileLoadError: If file cannot be read.
        ConfigurationError: If file format is invalid.
    """
    yaml_path = Path(yaml_path)

    try:
        with open(yaml_path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise FileLoadError(str(yaml_path), e)

    if not isinstance(data, dict):
        raise ConfigurationError(yaml_path.name, "Top level must be a mapping")

    defaults = SchedulingConstants()

    # Planning and scoring
    penalties = dict(defaults.severity_penalties)
    penalties.update(data.get('severity_penalties') or {})
    unknown = set(penalties) - set(SEVERITIES)
    if unknown:
        raise ConfigurationError(yaml_path.name, f"Unknown severities: {', '.join(sorted(unknown))}")

    # Operation rules
    if 'operation_rules' in data:
        rules = tuple(_parse_rule(r, yaml_path.name) for r in data['operation_rules'] or [])
    else:
        rules = defaults.operation_rules

    default_operation = defaults.default_operation
    if data.get('default_operation'):
        default_operation = _parse_rule(data['default_operation'], yaml_path.name)

    final_operation = defaults.final_operation
    if data.get('final_operation'):
        f = data['final_operation']
        try:
            final_operation = FixedOperation(
                name=str(f['name']),
                hours=float(f['hours']),
                work_center_id=f.get('work_center_id'),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(yaml_path.name, f"Invalid final_operation: {e}")

    # Default work centers
    work_centers = defaults.default_work_centers
    if 'work_centers' in data:
        try:
            work_centers = tuple(
                WorkCenterDefault(
                    work_center_id=str(w['id']),
                    name=str(w['name']),
                    max_capacity=int(w['max_capacity']),
                    current_load=int(w.get('current_load', 0)),
                    hourly_rate=float(w['hourly_rate']) if w.get('hourly_rate') is not None else None,
                )
                for w in data['work_centers'] or []
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(yaml_path.name, f"Invalid work center: {e}")

    try:
        return SchedulingConstants(
            start_buffer_ratio=float(data.get('start_buffer_ratio', defaults.start_buffer_ratio)),
            min_operation_gap_minutes=int(data.get('min_operation_gap_minutes', defaults.min_operation_gap_minutes)),
            severity_penalties=penalties,
            tight_schedule_utilization=float(data.get('tight_schedule_utilization', defaults.tight_schedule_utilization)),
            tight_schedule_penalty=int(data.get('tight_schedule_penalty', defaults.tight_schedule_penalty)),
            tight_deadline_days=int(data.get('tight_deadline_days', defaults.tight_deadline_days)),
            high_priority_level=int(data.get('high_priority_level', defaults.high_priority_level)),
            default_lead_days=int(data.get('default_lead_days', defaults.default_lead_days)),
            default_priority_level=int(data.get('default_priority_level', defaults.default_priority_level)),
            operation_rules=rules,
            default_operation=default_operation,
            final_operation=final_operation,
            default_work_centers=work_centers,
            open_hours=float(data.get('open_hours', defaults.open_hours)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(yaml_path.name, str(e))


def save_constants_to_yaml(constants: SchedulingConstants, yaml_path: str | Path) -> None:
    """Save scheduling constants to YAML file.

    Args:
        constants: SchedulingConstants object to save.
        yaml_path: Path to save the YAML config file.
    """
    data = {
        'start_buffer_ratio': constants.start_buffer_ratio,
        'min_operation_gap_minutes': constants.min_operation_gap_minutes,
        'severity_penalties': dict(constants.severity_penalties),
        'tight_schedule_utilization': constants.tight_schedule_utilization,
        'tight_schedule_penalty': constants.tight_schedule_penalty,
        'tight_deadline_days': constants.tight_deadline_days,
        'high_priority_level': constants.high_priority_level,
        'default_lead_days': constants.default_lead_days,
        'default_priority_level': constants.default_priority_level,
        'open_hours': constants.open_hours,
        'operation_rules': [_rule_to_dict(r) for r in constants.operation_rules],
        'default_operation': _rule_to_dict(constants.default_operation),
        'final_operation': {
            'name': constants.final_operation.name,
            'hours': constants.final_operation.hours,
            'work_center_id': constants.final_operation.work_center_id,
        },
        'work_centers': [],
    }

    for w in constants.default_work_centers:
        data['work_centers'].append({
            'id': w.work_center_id,
            'name': w.name,
            'max_capacity': w.max_capacity,
            'current_load': w.current_load,
            'hourly_rate': w.hourly_rate,
        })

    yaml_path = Path(yaml_path)
    with open(yaml_path, 'w') as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
