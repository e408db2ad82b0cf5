"""Tests for capacity providers and cost estimation."""

from __future__ import annotations

from datetime import datetime, timedelta

import pandas as pd
import pytest
from conftest import NOW, make_work_center

from production_scheduler.capacity import (
    DefaultCapacityProvider,
    FileCapacityProvider,
    StaticCapacityProvider,
    estimate_cost,
    load_work_centers_from_frames,
)
from production_scheduler.constants import SchedulingConstants, WorkCenterDefault
from production_scheduler.errors import FileLoadError, ValidationError
from production_scheduler.models import WorkCenterAssignment


def write_tables(tmp_path):
    centers = tmp_path / "work_centers.csv"
    centers.write_text(
        "ID,NAME,MAX_CAPACITY,CURRENT_LOAD,HOURLY_RATE\n"
        "wc-1,CNC Machining,2,0,85\n"
        "wc-2,Welding Station,3,1,\n"
    )
    slots = tmp_path / "work_centers_slots.csv"
    slots.write_text(
        "WORK_CENTER_ID,START,END,AVAILABLE,CONFLICTING_JOBS\n"
        "wc-1,2026-03-02 08:00,2026-03-02 16:00,yes,\n"
        "wc-1,2026-03-03 08:00,2026-03-03 16:00,no,\"job-7, job-9\"\n"
        "wc-2,2026-03-02 06:00,2026-03-02 14:00,,\n"
    )
    return centers


def test_csv_with_sibling_slots_file(tmp_path):
    provider = FileCapacityProvider(write_tables(tmp_path))

    centers = provider.get_work_center_capacity(NOW)

    assert [c.work_center_id for c in centers] == ["wc-1", "wc-2"]
    cnc, weld = centers
    assert cnc.max_capacity == 2 and cnc.current_load == 0
    assert cnc.hourly_rate == 85.0
    assert weld.hourly_rate is None
    assert len(cnc.available_hours) == 2
    assert cnc.available_hours[0].start == datetime(2026, 3, 2, 8, 0)
    assert cnc.available_hours[0].available
    assert not cnc.available_hours[1].available
    assert cnc.available_hours[1].conflicting_jobs == ("job-7", "job-9")
    assert len(cnc.open_slots) == 1
    assert weld.available_hours[0].available


def test_csv_without_slots(tmp_path):
    path = tmp_path / "centers.csv"
    path.write_text("ID,NAME,MAX_CAPACITY,CURRENT_LOAD\nwc-1,Lathe,1,0\n")

    (center,) = FileCapacityProvider(path).get_work_center_capacity(NOW)

    assert center.available_hours == ()


def test_missing_file_is_a_load_error(tmp_path):
    with pytest.raises(FileLoadError):
        FileCapacityProvider(tmp_path / "missing.csv").get_work_center_capacity(NOW)


def test_missing_columns():
    df = pd.DataFrame({"ID": ["wc-1"], "NAME": ["Lathe"]})
    with pytest.raises(ValidationError, match="MAX_CAPACITY"):
        load_work_centers_from_frames(df)


def test_bad_number_reports_row():
    df = pd.DataFrame({
        "ID": ["wc-1", "wc-2"],
        "NAME": ["Lathe", "Mill"],
        "MAX_CAPACITY": [1, "lots"],
        "CURRENT_LOAD": [0, 0],
    })
    with pytest.raises(ValidationError) as exc_info:
        load_work_centers_from_frames(df)
    assert exc_info.value.field == "MAX_CAPACITY"
    assert exc_info.value.row == 3


def test_bad_slot_timestamp():
    centers = pd.DataFrame({"ID": ["wc-1"], "NAME": ["Lathe"], "MAX_CAPACITY": [1], "CURRENT_LOAD": [0]})
    slots = pd.DataFrame({"WORK_CENTER_ID": ["wc-1"], "START": ["soon"], "END": ["2026-03-02 16:00"]})
    with pytest.raises(ValidationError) as exc_info:
        load_work_centers_from_frames(centers, slots)
    assert exc_info.value.field == "START"
    assert exc_info.value.row == 2


def test_static_provider_returns_copy():
    centers = [make_work_center("wc-1")]
    provider = StaticCapacityProvider(centers)
    result = provider.get_work_center_capacity(NOW)
    assert result == centers
    assert result is not centers
    assert provider.name == "StaticCapacityProvider"


def test_default_provider_opens_window_at_call_time():
    constants = SchedulingConstants(
        default_work_centers=(WorkCenterDefault("wc-1", "Lathe", 1, 0, 40.0),),
        open_hours=6.0,
    )

    (center,) = DefaultCapacityProvider(constants).get_work_center_capacity(NOW)

    assert center.name == "Lathe"
    assert center.hourly_rate == 40.0
    (slot,) = center.available_hours
    assert slot.start == NOW
    assert slot.end == NOW + timedelta(hours=6)
    assert slot.work_center_id == "wc-1"


def test_default_provider_uses_configured_shop_floor():
    centers = DefaultCapacityProvider().get_work_center_capacity(NOW)
    assert [(c.work_center_id, c.max_capacity, c.current_load) for c in centers] == [
        ("wc-1", 2, 0),
        ("wc-2", 3, 1),
    ]


def _assignment(wc: str, hours: float) -> WorkCenterAssignment:
    return WorkCenterAssignment(
        operation_id="op",
        operation_name="op",
        work_center_id=wc,
        work_center_name=wc,
        scheduled_start=NOW,
        scheduled_end=NOW + timedelta(hours=hours),
        estimated_hours=hours,
    )


def test_estimate_cost():
    centers = [make_work_center("wc-1", hourly_rate=85.0), make_work_center("wc-2")]
    assert estimate_cost([_assignment("wc-1", 1.5), _assignment("wc-2", 3)], centers) == 127.5
    assert estimate_cost([_assignment("wc-2", 3)], centers) is None
    assert estimate_cost([], centers) is None


def test_slot_timestamps_with_offset_rejected():
    centers = pd.DataFrame({"ID": ["wc-1"], "NAME": ["Lathe"], "MAX_CAPACITY": [1], "CURRENT_LOAD": [0]})
    slots = pd.DataFrame({
        "WORK_CENTER_ID": ["wc-1"],
        "START": ["2026-03-02T08:00:00Z"],
        "END": ["2026-03-02T16:00:00Z"],
    })
    with pytest.raises(ValidationError) as exc_info:
        load_work_centers_from_frames(centers, slots)
    assert exc_info.value.field == "START"
    assert exc_info.value.row == 2
