"""
Production Scheduling Engine - FastAPI Web Backend
"""

import logging
import os
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from production_scheduler import __version__
from production_scheduler.capacity import (
    CapacityProvider,
    DefaultCapacityProvider,
    FileCapacityProvider,
)
from production_scheduler.constants import SchedulingConstants, load_constants_from_yaml
from production_scheduler.engine import SchedulingEngine
from production_scheduler.errors import (
    CapacityProviderError,
    UnplaceableOperationError,
    ValidationError,
)
from production_scheduler.models import (
    JobData,
    LineItem,
    Operation,
    TimeSlot,
    WorkCenterCapacity,
)
from production_scheduler.operations import derive_operations_from_line_items
from production_scheduler.output_generator import suggestion_to_dict

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Production Scheduling Engine",
    description="Work center allocation, conflict detection and confidence scoring for manufacturing jobs",
    version=__version__
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Shared engine, built on first use
engine: SchedulingEngine | None = None


def get_base_path():
    return Path(__file__).parent.parent


def get_config_path():
    return Path(os.environ.get("SCHEDULER_CONFIG", get_base_path() / "config" / "scheduling.yaml"))


def build_capacity_provider(constants: SchedulingConstants) -> CapacityProvider:
    """Use a work center table when SCHEDULER_WORK_CENTERS is set, else the configured shop floor."""
    table = os.environ.get("SCHEDULER_WORK_CENTERS")
    if table:
        return FileCapacityProvider(table)
    return DefaultCapacityProvider(constants)


def get_engine() -> SchedulingEngine:
    global engine
    if engine is None:
        config_path = get_config_path()
        if config_path.exists():
            constants = load_constants_from_yaml(config_path)
            logger.info("Loaded scheduling constants from %s", config_path)
        else:
            constants = SchedulingConstants()
            logger.info("No config at %s, using built-in constants", config_path)
        engine = SchedulingEngine(capacity_provider=build_capacity_provider(constants), constants=constants)
    return engine


class OperationIn(BaseModel):
    name: str
    operation_number: int
    estimated_hours: float
    id: Optional[str] = None
    work_center_id: Optional[str] = None
    required_skills: list[str] = []


class LineItemIn(BaseModel):
    description: str
    quantity: Optional[int] = None


class TimeSlotIn(BaseModel):
    start: datetime
    end: datetime
    available: bool = True
    conflicting_jobs: list[str] = []


class WorkCenterIn(BaseModel):
    work_center_id: str
    name: str
    max_capacity: int
    current_load: int = 0
    hourly_rate: Optional[float] = None
    available_hours: list[TimeSlotIn] = []


class DeriveRequest(BaseModel):
    line_items: list[LineItemIn]
    quantity: int = 1


class ScheduleRequest(BaseModel):
    job_number: str
    job_id: Optional[str] = None
    customer_id: Optional[str] = None
    due_date: Optional[str] = None
    estimated_duration: Optional[float] = None
    priority_level: Optional[int] = None
    quantity: int = 1
    operations: list[OperationIn] = []
    line_items: list[LineItemIn] = []
    work_centers: Optional[list[WorkCenterIn]] = None


def to_operation(op: OperationIn) -> Operation:
    return Operation(
        name=op.name,
        operation_number=op.operation_number,
        estimated_hours=op.estimated_hours,
        id=op.id,
        work_center_id=op.work_center_id,
        required_skills=tuple(op.required_skills),
    )


def to_line_item(item: LineItemIn, default_quantity: int) -> LineItem:
    return LineItem(description=item.description, quantity=item.quantity or default_quantity)


def to_work_center(wc: WorkCenterIn) -> WorkCenterCapacity:
    return WorkCenterCapacity(
        work_center_id=wc.work_center_id,
        name=wc.name,
        max_capacity=wc.max_capacity,
        current_load=wc.current_load,
        hourly_rate=wc.hourly_rate,
        available_hours=tuple(
            TimeSlot(
                start=slot.start,
                end=slot.end,
                work_center_id=wc.work_center_id,
                available=slot.available,
                conflicting_jobs=tuple(slot.conflicting_jobs),
            )
            for slot in wc.available_hours
        ),
    )


def work_center_to_dict(wc: WorkCenterCapacity) -> dict:
    return {
        "work_center_id": wc.work_center_id,
        "name": wc.name,
        "max_capacity": wc.max_capacity,
        "current_load": wc.current_load,
        "hourly_rate": wc.hourly_rate,
        "available_hours": [
            {
                "start": slot.start.isoformat(),
                "end": slot.end.isoformat(),
                "available": slot.available,
                "conflicting_jobs": list(slot.conflicting_jobs),
            }
            for slot in wc.available_hours
        ],
    }


def operation_to_dict(op: Operation) -> dict:
    return {
        "id": op.id,
        "name": op.name,
        "operation_number": op.operation_number,
        "estimated_hours": op.estimated_hours,
        "work_center_id": op.work_center_id,
        "required_skills": list(op.required_skills),
    }


@app.on_event("startup")
async def load_data():
    """Load constants on startup."""
    scheduling_engine = get_engine()
    logger.info(
        "Ready - %d operation rules, %d default work centers",
        len(scheduling_engine.constants.operation_rules),
        len(scheduling_engine.constants.default_work_centers)
    )


@app.get("/api/config")
async def get_config():
    """Get scheduling configuration."""
    constants = get_engine().constants
    return {
        "version": __version__,
        "start_buffer_ratio": constants.start_buffer_ratio,
        "min_operation_gap_minutes": constants.min_operation_gap_minutes,
        "severity_penalties": dict(constants.severity_penalties),
        "tight_deadline_days": constants.tight_deadline_days,
        "operation_rules": [
            {"keyword": r.keyword, "label": r.label, "hours_per_unit": r.hours_per_unit}
            for r in constants.operation_rules
        ],
    }


@app.get("/api/work-centers")
async def get_work_centers():
    """Get the current work center capacity snapshot."""
    scheduling_engine = get_engine()
    try:
        work_centers = scheduling_engine.get_work_center_capacity(scheduling_engine.clock())
    except CapacityProviderError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"work_centers": [work_center_to_dict(wc) for wc in work_centers]}


@app.post("/api/operations/derive")
async def derive_operations(request: DeriveRequest):
    """Derive operations from quote or order line items."""
    items = [to_line_item(item, request.quantity) for item in request.line_items]
    operations = derive_operations_from_line_items(items, get_engine().constants)
    return {"operations": [operation_to_dict(op) for op in operations]}


@app.post("/api/schedule", status_code=201)
async def schedule_job(request: ScheduleRequest):
    """Generate a scheduling suggestion for a job."""
    scheduling_engine = get_engine()
    constants = scheduling_engine.constants

    if request.operations:
        operations = [to_operation(op) for op in request.operations]
    elif request.line_items:
        items = [to_line_item(item, request.quantity) for item in request.line_items]
        operations = derive_operations_from_line_items(items, constants)
    else:
        raise HTTPException(status_code=400, detail="Job has no operations or line items. Cannot create schedule.")

    now = scheduling_engine.clock()
    job = JobData.from_operations(
        job_number=request.job_number,
        operations=operations,
        due_date=request.due_date,
        priority_level=(
            request.priority_level if request.priority_level is not None
            else constants.default_priority_level
        ),
        quantity=request.quantity,
        today=now.date(),
        default_lead_days=constants.default_lead_days,
        id=request.job_id,
        customer_id=request.customer_id,
    )
    if request.estimated_duration is not None:
        job = replace(job, estimated_duration=request.estimated_duration)

    capacity = None
    if request.work_centers is not None:
        capacity = [to_work_center(wc) for wc in request.work_centers]

    try:
        suggestion = scheduling_engine.generate_suggestion(job, capacity, now=now)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UnplaceableOperationError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except CapacityProviderError as e:
        logger.error("Scheduling job %s failed: %s", request.job_number, e)
        raise HTTPException(status_code=503, detail=str(e))

    return {
        "message": f"Successfully scheduled job {request.job_number}",
        "suggestion": suggestion_to_dict(suggestion),
    }
