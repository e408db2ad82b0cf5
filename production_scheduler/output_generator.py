# Output generation for scheduling suggestions.
# Version: 1.0.0
# JSON export, pandas tables, plain-text reports and scheduled-operation records.

import json
from collections.abc import Iterable, Mapping
from typing import Any

import pandas as pd

from .models import ConflictWarning, SchedulingSuggestion, WorkCenterAssignment


def assignment_to_dict(assignment: WorkCenterAssignment) -> dict[str, Any]:
    return {
        "operationId": assignment.operation_id,
        "operationName": assignment.operation_name,
        "workCenterId": assignment.work_center_id,
        "workCenterName": assignment.work_center_name,
        "scheduledStart": assignment.scheduled_start.isoformat(),
        "scheduledEnd": assignment.scheduled_end.isoformat(),
        "estimatedHours": assignment.estimated_hours,
    }


def conflict_to_dict(conflict: ConflictWarning) -> dict[str, Any]:
    return {
        "type": conflict.type,
        "severity": conflict.severity,
        "message": conflict.message,
        "affectedOperations": list(conflict.affected_operations),
        "suggestedResolution": conflict.suggested_resolution,
    }


def suggestion_to_dict(suggestion: SchedulingSuggestion) -> dict[str, Any]:
    """Convert a suggestion to a JSON-ready dictionary.

    Keys are camelCase for the UI; datetimes are ISO 8601 strings.
    """
    return {
        "jobId": suggestion.job_id,
        "jobNumber": suggestion.job_number,
        "suggestedStartDate": suggestion.suggested_start_date.isoformat(),
        "suggestedEndDate": suggestion.suggested_end_date.isoformat(),
        "workCenterAssignments": [assignment_to_dict(a) for a in suggestion.work_center_assignments],
        "conflictWarnings": [conflict_to_dict(c) for c in suggestion.conflict_warnings],
        "optimizationNotes": list(suggestion.optimization_notes),
        "confidenceScore": suggestion.confidence_score,
        "estimatedCost": suggestion.estimated_cost,
    }


def export_to_json(suggestion: SchedulingSuggestion, pretty: bool = True) -> str:
    """Export a suggestion to JSON format.

    Args:
        suggestion: Suggestion to export.
        pretty: Whether to format with indentation.

    Returns:
        JSON string.
    """
    indent = 2 if pretty else None
    return json.dumps(suggestion_to_dict(suggestion), indent=indent)


def assignments_to_dataframe(suggestion: SchedulingSuggestion) -> pd.DataFrame:
    """Tabulate assignments, one row per operation in schedule order.

    Returns:
        DataFrame with OPERATION_ID, OPERATION, WORK_CENTER_ID, WORK_CENTER,
        START, END and HOURS columns.
    """
    columns = ["OPERATION_ID", "OPERATION", "WORK_CENTER_ID", "WORK_CENTER", "START", "END", "HOURS"]
    rows = [
        {
            "OPERATION_ID": a.operation_id,
            "OPERATION": a.operation_name,
            "WORK_CENTER_ID": a.work_center_id,
            "WORK_CENTER": a.work_center_name,
            "START": a.scheduled_start,
            "END": a.scheduled_end,
            "HOURS": a.estimated_hours,
        }
        for a in suggestion.work_center_assignments
    ]
    return pd.DataFrame(rows, columns=columns)


def work_center_hours(suggestion: SchedulingSuggestion) -> dict[str, float]:
    """Total scheduled hours per work center name."""
    df = assignments_to_dataframe(suggestion)
    if df.empty:
        return {}
    return {str(name): float(hours) for name, hours in df.groupby("WORK_CENTER", sort=False)["HOURS"].sum().items()}


def generate_schedule_report(suggestion: SchedulingSuggestion) -> str:
    """Generate a plain-text report of a suggestion.

    Args:
        suggestion: Suggestion to describe.

    Returns:
        Multi-line report string.
    """
    lines = []
    lines.append("=" * 70)
    lines.append(f"SCHEDULING SUGGESTION - JOB {suggestion.job_number}")
    lines.append("=" * 70)
    lines.append(f"Start:      {suggestion.suggested_start_date:%Y-%m-%d %H:%M}")
    lines.append(f"End:        {suggestion.suggested_end_date:%Y-%m-%d %H:%M}")
    lines.append(f"Confidence: {suggestion.confidence_score}%")
    if suggestion.estimated_cost is not None:
        lines.append(f"Est. cost:  ${suggestion.estimated_cost:,.2f}")
    lines.append("")

    lines.append("OPERATIONS")
    lines.append("-" * 70)
    if not suggestion.work_center_assignments:
        lines.append("  (no operations)")
    for a in suggestion.work_center_assignments:
        lines.append(
            f"  {a.scheduled_start:%m-%d %H:%M} - {a.scheduled_end:%m-%d %H:%M}  "
            f"{a.work_center_name:<18} {a.operation_name} ({a.estimated_hours:g}h)"
        )
    lines.append("")

    if suggestion.conflict_warnings:
        lines.append("CONFLICTS")
        lines.append("-" * 70)
        for c in suggestion.conflict_warnings:
            lines.append(f"  [{c.severity.upper()}] {c.type}: {c.message}")
            if c.suggested_resolution:
                lines.append(f"      -> {c.suggested_resolution}")
        lines.append("")

    lines.append("NOTES")
    lines.append("-" * 70)
    for note in suggestion.optimization_notes:
        lines.append(f"  * {note}")

    return "\n".join(lines)


def build_scheduled_operation_records(
    suggestion: SchedulingSuggestion,
    job_operations: Iterable[Mapping[str, Any]]
) -> list[dict[str, Any]]:
    """Build the scheduled-operation rows an API layer persists.

    Assignments are matched to persisted job operations by operation id,
    falling back to the operation name. Unmatched assignments are dropped.

    Args:
        suggestion: Suggestion to persist.
        job_operations: Persisted operations with "id" and "name" keys.

    Returns:
        Rows with job_operation_id, work_center_id, scheduled_start,
        scheduled_end and notes.
    """
    job_operations = list(job_operations)
    by_id = {str(op["id"]): op for op in job_operations if op.get("id") is not None}
    by_name = {op.get("name"): op for op in job_operations if op.get("id") is not None}

    records = []
    for a in suggestion.work_center_assignments:
        operation = by_id.get(a.operation_id) or by_name.get(a.operation_name)
        if operation is None:
            continue
        records.append({
            "job_operation_id": operation["id"],
            "work_center_id": a.work_center_id,
            "scheduled_start": a.scheduled_start.isoformat(),
            "scheduled_end": a.scheduled_end.isoformat(),
            "notes": f"Auto-scheduled with {suggestion.confidence_score}% confidence",
        })
    return records
