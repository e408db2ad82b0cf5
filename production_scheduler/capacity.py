# Capacity providers for the scheduling engine.
# Version: 1.0.0
# Supplies work center capacity snapshots from memory, configuration, or a CSV/Excel table.

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime, timedelta
from pathlib import Path

import pandas as pd

from .constants import SchedulingConstants
from .errors import FileLoadError, ValidationError
from .models import TimeSlot, WorkCenterAssignment, WorkCenterCapacity

logger = logging.getLogger(__name__)


class CapacityProvider(ABC):
    """Source of work center capacity for a scheduling call.

    The snapshot is read once per call and treated as immutable; the
    engine does not lock or re-read it.
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def get_work_center_capacity(self, now: datetime) -> list[WorkCenterCapacity]:
        """Return the current work center capacity snapshot.

        Args:
            now: Time of the scheduling call.

        Returns:
            List of work centers in a stable order.
        """


class StaticCapacityProvider(CapacityProvider):
    """Returns a fixed list of work centers (caller-supplied override)."""

    def __init__(self, work_centers: Iterable[WorkCenterCapacity]) -> None:
        self._work_centers = tuple(work_centers)

    def get_work_center_capacity(self, now: datetime) -> list[WorkCenterCapacity]:
        return list(self._work_centers)


class DefaultCapacityProvider(CapacityProvider):
    """Built-in shop floor from configuration.

    Each configured work center gets one open window of
    constants.open_hours starting at the time of the call.
    """

    def __init__(self, constants: SchedulingConstants | None = None) -> None:
        self.constants = constants or SchedulingConstants()

    def get_work_center_capacity(self, now: datetime) -> list[WorkCenterCapacity]:
        window_end = now + timedelta(hours=self.constants.open_hours)
        return [
            WorkCenterCapacity(
                work_center_id=wc.work_center_id,
                name=wc.name,
                max_capacity=wc.max_capacity,
                current_load=wc.current_load,
                hourly_rate=wc.hourly_rate,
                available_hours=(
                    TimeSlot(start=now, end=window_end, available=True, work_center_id=wc.work_center_id),
                ),
            )
            for wc in self.constants.default_work_centers
        ]


class FileCapacityProvider(CapacityProvider):
    """Work centers loaded from a CSV or Excel table.

    Excel workbooks carry a WORK_CENTERS sheet and an optional TIME_SLOTS
    sheet. A CSV file may have a sibling "<stem>_slots.csv" with the slots.
    The file is re-read on every call.

    Work center columns: ID, NAME, MAX_CAPACITY, CURRENT_LOAD, HOURLY_RATE (optional).
    Slot columns: WORK_CENTER_ID, START, END, AVAILABLE (optional), CONFLICTING_JOBS (optional).
    """

    def __init__(self, path: str | Path, slots_path: str | Path | None = None) -> None:
        self.path = Path(path)
        self.slots_path = Path(slots_path) if slots_path is not None else None

    def get_work_center_capacity(self, now: datetime) -> list[WorkCenterCapacity]:
        centers_df, slots_df = self._read_tables()
        return load_work_centers_from_frames(centers_df, slots_df)

    def _read_tables(self) -> tuple[pd.DataFrame, pd.DataFrame | None]:
        if self.path.suffix.lower() in (".xlsx", ".xls"):
            try:
                sheets = pd.read_excel(self.path, sheet_name=None)
            except Exception as e:
                raise FileLoadError(str(self.path), e)
            if "WORK_CENTERS" not in sheets:
                raise ValidationError(
                    field="sheets",
                    value=list(sheets),
                    reason="Missing required sheet: WORK_CENTERS"
                )
            return sheets["WORK_CENTERS"], sheets.get("TIME_SLOTS")

        try:
            centers_df = pd.read_csv(self.path)
        except Exception as e:
            raise FileLoadError(str(self.path), e)

        slots_path = self.slots_path or self.path.with_name(f"{self.path.stem}_slots.csv")
        slots_df = None
        if slots_path.exists():
            try:
                slots_df = pd.read_csv(slots_path)
            except Exception as e:
                raise FileLoadError(str(slots_path), e)
        return centers_df, slots_df


def load_work_centers_from_frames(
    centers_df: pd.DataFrame,
    slots_df: pd.DataFrame | None = None
) -> list[WorkCenterCapacity]:
    """Build work centers from a work center table and a time slot table.

    Args:
        centers_df: One row per work center.
        slots_df: One row per time slot, or None when no slots are known.

    Returns:
        Work centers in table order.

    Raises:
        ValidationError: If required columns are missing or a row is invalid.
    """
    _require_columns(centers_df, {"ID", "NAME", "MAX_CAPACITY", "CURRENT_LOAD"}, "work center")

    slots_by_center: dict[str, list[TimeSlot]] = {}
    if slots_df is not None:
        _require_columns(slots_df, {"WORK_CENTER_ID", "START", "END"}, "time slot")
        for idx, row in slots_df.iterrows():
            slot = _parse_slot_row(row, idx + 2)
            slots_by_center.setdefault(slot.work_center_id, []).append(slot)

    centers = []
    for idx, row in centers_df.iterrows():
        row_num = idx + 2  # 1-indexed, plus header
        work_center_id = str(row["ID"]).strip()
        if not work_center_id or work_center_id.lower() == "nan":
            raise ValidationError(field="ID", value=row["ID"], reason="Work center id cannot be empty", row=row_num)

        hourly_rate = None
        if "HOURLY_RATE" in row.index and pd.notna(row["HOURLY_RATE"]):
            hourly_rate = _parse_number(row["HOURLY_RATE"], "HOURLY_RATE", row_num)

        centers.append(WorkCenterCapacity(
            work_center_id=work_center_id,
            name=str(row["NAME"]),
            max_capacity=int(_parse_number(row["MAX_CAPACITY"], "MAX_CAPACITY", row_num)),
            current_load=int(_parse_number(row["CURRENT_LOAD"], "CURRENT_LOAD", row_num)),
            hourly_rate=hourly_rate,
            available_hours=tuple(slots_by_center.get(work_center_id, [])),
        ))

    logger.debug("Loaded %d work centers from table", len(centers))
    return centers


def _require_columns(df: pd.DataFrame, required: set[str], table: str) -> None:
    missing = required - set(df.columns)
    if missing:
        raise ValidationError(
            field="columns",
            value=list(df.columns),
            reason=f"Missing required {table} columns: {', '.join(sorted(missing))}"
        )


def _parse_slot_row(row: pd.Series, row_number: int) -> TimeSlot:
    start = _parse_timestamp(row["START"], "START", row_number)
    end = _parse_timestamp(row["END"], "END", row_number)

    available = True
    if "AVAILABLE" in row.index and pd.notna(row["AVAILABLE"]):
        value = row["AVAILABLE"]
        if isinstance(value, str):
            available = value.strip().upper() in ("TRUE", "YES", "1", "Y")
        else:
            available = bool(value)

    conflicting: tuple[str, ...] = ()
    if "CONFLICTING_JOBS" in row.index and pd.notna(row["CONFLICTING_JOBS"]):
        conflicting = tuple(j.strip() for j in str(row["CONFLICTING_JOBS"]).split(",") if j.strip())

    return TimeSlot(
        start=start,
        end=end,
        work_center_id=str(row["WORK_CENTER_ID"]).strip(),
        available=available,
        conflicting_jobs=conflicting,
    )


def _parse_timestamp(value, field_name: str, row_number: int) -> datetime:
    if pd.isna(value):
        raise ValidationError(field=field_name, value=value, reason="Timestamp cannot be empty", row=row_number)
    try:
        timestamp = pd.Timestamp(value)
    except (ValueError, TypeError):
        raise ValidationError(field=field_name, value=value, reason="Cannot parse as timestamp", row=row_number)
    if timestamp.tzinfo is not None:
        raise ValidationError(
            field=field_name,
            value=value,
            reason="Timestamp must be local time without a UTC offset",
            row=row_number
        )
    return timestamp.to_pydatetime()


def _parse_number(value, field_name: str, row_number: int) -> float:
    if pd.isna(value):
        raise ValidationError(field=field_name, value=value, reason="Value cannot be empty", row=row_number)
    try:
        return float(value)
    except (ValueError, TypeError):
        raise ValidationError(field=field_name, value=value, reason="Must be a number", row=row_number)


def estimate_cost(
    assignments: Iterable[WorkCenterAssignment],
    capacity: Iterable[WorkCenterCapacity]
) -> float | None:
    """Estimate the cost of a schedule from work center hourly rates.

    Args:
        assignments: Scheduled operations.
        capacity: Work centers the operations were placed on.

    Returns:
        Sum of hours times hourly rate over assignments whose work center has
        a rate, or None when no assignment has a known rate.
    """
    rates = {wc.work_center_id: wc.hourly_rate for wc in capacity if wc.hourly_rate is not None}
    total = 0.0
    priced = False
    for assignment in assignments:
        rate = rates.get(assignment.work_center_id)
        if rate is None:
            continue
        total += assignment.estimated_hours * rate
        priced = True
    return round(total, 2) if priced else None
