"""Tests for suggestion export and reporting."""

from __future__ import annotations

import json
from datetime import datetime, timedelta

import pytest
from conftest import NOW

from production_scheduler.models import ConflictWarning, SchedulingSuggestion, WorkCenterAssignment
from production_scheduler.output_generator import (
    assignments_to_dataframe,
    build_scheduled_operation_records,
    export_to_json,
    generate_schedule_report,
    suggestion_to_dict,
    work_center_hours,
)


@pytest.fixture
def suggestion() -> SchedulingSuggestion:
    cut = WorkCenterAssignment(
        operation_id="temp-1",
        operation_name="Cut",
        work_center_id="wc-1",
        work_center_name="CNC Machining",
        scheduled_start=NOW,
        scheduled_end=NOW + timedelta(hours=2),
        estimated_hours=2,
    )
    weld = WorkCenterAssignment(
        operation_id="op-2",
        operation_name="Weld",
        work_center_id="wc-2",
        work_center_name="Welding Station",
        scheduled_start=NOW + timedelta(hours=2),
        scheduled_end=NOW + timedelta(hours=3, minutes=30),
        estimated_hours=1.5,
    )
    warning = ConflictWarning(
        type="timing",
        severity="medium",
        message="Tight scheduling between Cut and Weld",
        affected_operations=["temp-1", "op-2"],
        suggested_resolution="Add buffer time between operations",
    )
    return SchedulingSuggestion(
        job_number="J-200",
        job_id="job-1",
        suggested_start_date=NOW,
        suggested_end_date=weld.scheduled_end,
        work_center_assignments=[cut, weld],
        conflict_warnings=[warning],
        optimization_notes=["1 potential issues identified - review suggestions"],
        confidence_score=85,
        estimated_cost=267.5,
    )


def test_dict_uses_camel_case_and_iso_dates(suggestion):
    data = suggestion_to_dict(suggestion)

    assert data["jobId"] == "job-1"
    assert data["jobNumber"] == "J-200"
    assert data["suggestedStartDate"] == "2026-03-02T08:00:00"
    assert data["confidenceScore"] == 85
    assert data["estimatedCost"] == 267.5
    assert data["workCenterAssignments"][1]["operationId"] == "op-2"
    assert data["workCenterAssignments"][1]["scheduledEnd"] == "2026-03-02T11:30:00"
    assert data["conflictWarnings"][0]["affectedOperations"] == ["temp-1", "op-2"]


def test_export_to_json(suggestion):
    parsed = json.loads(export_to_json(suggestion))
    assert parsed == suggestion_to_dict(suggestion)
    assert "\n" not in export_to_json(suggestion, pretty=False)


def test_dataframe_and_hours(suggestion):
    df = assignments_to_dataframe(suggestion)

    assert list(df["OPERATION"]) == ["Cut", "Weld"]
    assert df.loc[0, "START"] == datetime(2026, 3, 2, 8, 0)
    assert work_center_hours(suggestion) == {"CNC Machining": 2.0, "Welding Station": 1.5}


def test_empty_suggestion_tables():
    empty = SchedulingSuggestion(job_number="J-0", suggested_start_date=NOW, suggested_end_date=NOW)
    assert assignments_to_dataframe(empty).empty
    assert work_center_hours(empty) == {}
    assert "(no operations)" in generate_schedule_report(empty)


def test_report_sections(suggestion):
    report = generate_schedule_report(suggestion)

    assert "SCHEDULING SUGGESTION - JOB J-200" in report
    assert "Confidence: 85%" in report
    assert "Est. cost:  $267.50" in report
    assert "[MEDIUM] timing: Tight scheduling between Cut and Weld" in report
    assert "-> Add buffer time between operations" in report
    assert "* 1 potential issues identified - review suggestions" in report


def test_records_match_by_id_then_name(suggestion):
    job_operations = [
        {"id": "op-1", "name": "Cut"},
        {"id": "op-2", "name": "Weld"},
        {"id": None, "name": "Draft"},
    ]

    records = build_scheduled_operation_records(suggestion, job_operations)

    assert [r["job_operation_id"] for r in records] == ["op-1", "op-2"]
    assert records[0]["scheduled_start"] == "2026-03-02T08:00:00"
    assert records[0]["notes"] == "Auto-scheduled with 85% confidence"


def test_unmatched_assignments_are_dropped(suggestion):
    records = build_scheduled_operation_records(suggestion, [{"id": "op-2", "name": "Weld"}])
    assert len(records) == 1
