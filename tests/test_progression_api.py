import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from campus_records.api.v1.students import service as student_service


@pytest.mark.asyncio
async def test_promote_endpoint(client: AsyncClient, course, make_student, fetch_states) -> None:
    fourth = await make_student(semester="4", academic_year="2024-25")
    last = await make_student(semester="8", academic_year="2024-25")

    response = await client.post(
        "/api/v1/students/progression/promote",
        json={"studentIds": [str(fourth.id), str(last.id)]},
    )
    assert response.status_code == 200
    data = response.json()

    assert data["success"] is True
    assert data["preview"] is False
    assert data["summary"] == {"requested": 2, "applied": 1, "skipped": 1}
    applied = data["applied"][0]
    assert applied["student_id"] == str(fourth.id)
    assert applied["kind"] == "ADVANCE"
    assert applied["previous"] == {"semester": "4", "academic_year": "2024-25"}
    assert applied["current"] == {"semester": "5", "academic_year": "2025-26"}
    assert data["skipped"] == [{"student_id": str(last.id), "reason": "FINAL_SEMESTER", "detail": "Final semester"}]

    assert await fetch_states([fourth]) == [("5", "2025-26")]


@pytest.mark.asyncio
async def test_rollback_endpoint_reset_attendance(client: AsyncClient, course, make_student, fetch_states) -> None:
    student = await make_student(semester="3", academic_year="2025-26")

    response = await client.post(
        "/api/v1/students/progression/rollback",
        json={"student_ids": [str(student.id)], "reset_attendance": True},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Rollback completed successfully"
    assert data["applied"][0]["kind"] == "RESET_YEAR_ONLY"
    assert await fetch_states([student]) == [("3", "2026-27")]


@pytest.mark.asyncio
async def test_rollback_endpoint_preview(client: AsyncClient, course, make_student, fetch_states) -> None:
    student = await make_student(semester="2", academic_year="2025-26")

    response = await client.post(
        "/api/v1/students/progression/rollback?preview=true",
        json={"studentIds": [str(student.id)]},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["preview"] is True
    assert data["applied"][0]["current"] == {"semester": "1", "academic_year": "2024-25"}
    assert await fetch_states([student]) == [("2", "2025-26")]


@pytest.mark.asyncio
@pytest.mark.parametrize("endpoint", ["promote", "rollback"])
@pytest.mark.parametrize(
    "body",
    [
        {},
        [],
        ["00000000-0000-0000-0000-000000000001"],
        "studentIds",
        {"studentIds": []},
        {"studentIds": "x"},
        {"studentIds": ["nope"]},
        {"studentIds": ["00000000-0000-0000-0000-000000000001"], "resetAttendance": "maybe"},
        {"studentIds": ["00000000-0000-0000-0000-000000000001"], "resetAttendance": None},
    ],
)
async def test_malformed_batch_is_400(client: AsyncClient, endpoint, body) -> None:
    response = await client.post(f"/api/v1/students/progression/{endpoint}", json=body)
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize("endpoint", ["promote", "rollback"])
async def test_missing_or_null_body_is_400(client: AsyncClient, endpoint) -> None:
    url = f"/api/v1/students/progression/{endpoint}"
    response = await client.post(url)
    assert response.status_code == 400
    response = await client.post(url, content="null", headers={"Content-Type": "application/json"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unknown_students_is_404(client: AsyncClient) -> None:
    missing = str(uuid.uuid4())
    response = await client.post("/api/v1/students/progression/promote", json={"studentIds": [missing]})
    assert response.status_code == 404
    detail = response.json()["detail"]
    assert detail["message"] == "No valid students found"
    assert detail["missing_ids"] == [missing]


@pytest.mark.asyncio
async def test_transaction_failure_is_500(client: AsyncClient, course, make_student, fetch_states, monkeypatch) -> None:
    student = await make_student(semester="2", academic_year="2025-26")

    async def broken_update(db, student_id, semester=None, academic_year=None):
        raise OperationalError("UPDATE students", {}, Exception("database is locked"))

    monkeypatch.setattr(student_service, "update_student_state", broken_update)

    response = await client.post("/api/v1/students/progression/rollback", json={"studentIds": [str(student.id)]})
    assert response.status_code == 500
    detail = response.json()["detail"]
    assert detail["success"] is False
    assert detail["message"] == "Rollback failed"
    assert "database is locked" in detail["error"]
    assert await fetch_states([student]) == [("2", "2025-26")]
