"""Shared fixtures for the scheduling engine tests.

Also ensures the project root is on sys.path so 'production_scheduler'
and 'web.app' import without installation.
"""

from __future__ import annotations

import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

_root = Path(__file__).resolve().parents[1]
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from production_scheduler.models import Operation, TimeSlot, WorkCenterCapacity  # noqa: E402

# Monday morning, ten days before the usual test due date
NOW = datetime(2026, 3, 2, 8, 0)
DUE_IN_10_DAYS = "2026-03-12"


def make_work_center(
    work_center_id: str = "wc-1",
    name: str | None = None,
    max_capacity: int = 2,
    current_load: int = 0,
    slots: list[tuple[datetime, datetime]] | None = None,
    hourly_rate: float | None = None,
    available: bool = True,
) -> WorkCenterCapacity:
    """Build a work center with the given open windows (default: two weeks from NOW)."""
    if slots is None:
        slots = [(NOW, NOW + timedelta(days=14))]
    return WorkCenterCapacity(
        work_center_id=work_center_id,
        name=name or work_center_id.upper(),
        max_capacity=max_capacity,
        current_load=current_load,
        hourly_rate=hourly_rate,
        available_hours=[
            TimeSlot(start=start, end=end, work_center_id=work_center_id, available=available)
            for start, end in slots
        ],
    )


def make_operation(number: int, hours: float, **kwargs) -> Operation:
    return Operation(name=kwargs.pop("name", f"Op {number}"), operation_number=number, estimated_hours=hours, **kwargs)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def open_work_center() -> WorkCenterCapacity:
    return make_work_center()
