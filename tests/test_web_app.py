"""Tests for the FastAPI backend."""

from __future__ import annotations

import pytest
from conftest import NOW
from fastapi.testclient import TestClient

import web.app as web_app
from production_scheduler.capacity import CapacityProvider
from production_scheduler.engine import SchedulingEngine


class FailingProvider(CapacityProvider):
    def get_work_center_capacity(self, now):
        raise ConnectionError("capacity service down")


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(web_app, "engine", SchedulingEngine(clock=lambda: NOW))
    with TestClient(web_app.app) as test_client:
        yield test_client


def work_center(max_capacity=2, current_load=0):
    return {
        "work_center_id": "wc-1",
        "name": "CNC Machining",
        "max_capacity": max_capacity,
        "current_load": current_load,
        "available_hours": [{"start": "2026-03-02T08:00:00", "end": "2026-03-02T16:00:00"}],
    }


def test_schedule_with_explicit_work_centers(client):
    response = client.post("/api/schedule", json={
        "job_number": "J-300",
        "job_id": "job-300",
        "due_date": "2026-03-12",
        "operations": [{"name": "Mill housing", "operation_number": 1, "estimated_hours": 4}],
        "work_centers": [work_center()],
    })

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Successfully scheduled job J-300"
    suggestion = body["suggestion"]
    assert suggestion["jobId"] == "job-300"
    assert suggestion["suggestedStartDate"] == "2026-03-02T12:00:00"
    assert suggestion["confidenceScore"] == 100
    assert suggestion["workCenterAssignments"][0]["operationId"] == "temp-1"


def test_schedule_from_line_items(client):
    response = client.post("/api/schedule", json={
        "job_number": "J-301",
        "quantity": 10,
        "line_items": [{"description": "CNC machining of bracket"}],
    })

    assert response.status_code == 201
    assignments = response.json()["suggestion"]["workCenterAssignments"]
    assert [a["operationName"] for a in assignments] == [
        "CNC Machining - CNC machining of bracket",
        "Quality Control & Inspection",
    ]


def test_full_work_center_is_a_conflict(client):
    response = client.post("/api/schedule", json={
        "job_number": "J-302",
        "due_date": "2026-03-12",
        "operations": [{"name": "Mill housing", "operation_number": 1, "estimated_hours": 4}],
        "work_centers": [work_center(max_capacity=1, current_load=1)],
    })

    assert response.status_code == 409
    assert "No available work center found for operation: Mill housing" in response.json()["detail"]


def test_bad_due_date_rejected(client):
    response = client.post("/api/schedule", json={
        "job_number": "J-303",
        "due_date": "2026-02-30",
        "operations": [{"name": "Mill housing", "operation_number": 1, "estimated_hours": 4}],
    })
    assert response.status_code == 400
    assert "due_date" in response.json()["detail"]


def test_job_without_operations_rejected(client):
    response = client.post("/api/schedule", json={"job_number": "J-304", "due_date": "2026-03-12"})
    assert response.status_code == 400


def test_derive_operations(client):
    response = client.post("/api/operations/derive", json={
        "quantity": 10,
        "line_items": [{"description": "Welding frame"}, {"description": "Assembly", "quantity": 20}],
    })

    assert response.status_code == 200
    operations = response.json()["operations"]
    assert [op["operation_number"] for op in operations] == [1, 2, 3]
    assert operations[0]["work_center_id"] == "wc-2"
    assert operations[1]["estimated_hours"] == pytest.approx(2.6)


def test_config(client):
    body = client.get("/api/config").json()
    assert body["version"] == "1.0.0"
    assert body["severity_penalties"] == {"high": 25, "medium": 15, "low": 5}


def test_work_centers(client):
    body = client.get("/api/work-centers").json()
    assert [wc["work_center_id"] for wc in body["work_centers"]] == ["wc-1", "wc-2"]
    assert body["work_centers"][0]["available_hours"][0]["start"] == "2026-03-02T08:00:00"


def test_capacity_failure_is_unavailable(monkeypatch):
    monkeypatch.setattr(web_app, "engine", SchedulingEngine(capacity_provider=FailingProvider(), clock=lambda: NOW))
    with TestClient(web_app.app) as client:
        assert client.get("/api/work-centers").status_code == 503
        response = client.post("/api/schedule", json={
            "job_number": "J-305",
            "operations": [{"name": "Mill housing", "operation_number": 1, "estimated_hours": 4}],
        })
        assert response.status_code == 503


def test_slot_with_utc_offset_rejected(client):
    slot = {"start": "2026-03-02T08:00:00Z", "end": "2026-03-02T16:00:00Z"}
    response = client.post("/api/schedule", json={
        "job_number": "J-306",
        "due_date": "2026-03-12",
        "operations": [{"name": "Mill housing", "operation_number": 1, "estimated_hours": 4}],
        "work_centers": [dict(work_center(), available_hours=[slot])],
    })

    assert response.status_code == 400
    assert "UTC offset" in response.json()["detail"]


def test_oversized_hours_rejected(client):
    response = client.post("/api/schedule", json={
        "job_number": "J-307",
        "due_date": "2026-03-12",
        "operations": [{"name": "Mill housing", "operation_number": 1, "estimated_hours": 1e8}],
        "work_centers": [work_center()],
    })

    assert response.status_code == 400
    assert "87600" in response.json()["detail"]
