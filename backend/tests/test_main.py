"""
Tests for the application shell: health endpoint and error mapping
"""
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from degree_planner.core.config import TestingSettings, validate_configuration
from degree_planner.core.exceptions import (
    CycleError,
    DegreePlannerError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from degree_planner.main import app, domain_exception_handler, status_for


def test_health_reports_in_memory_backends():
    with TestClient(app) as client:
        response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["environment"] == "testing"
    assert body["services"] == {"graph": "in-memory", "cache": "healthy"}


def test_root():
    with TestClient(app) as client:
        response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.parametrize(
    "error, status_code",
    [
        (ValidationError("bad"), 400),
        (CycleError("cycle"), 400),
        (NotFoundError("missing"), 404),
        (DuplicateError("twice"), 409),
        (DegreePlannerError("other"), 500),
    ],
)
def test_status_for(error, status_code):
    assert status_for(error) == status_code


def test_domain_errors_become_error_responses():
    shell = FastAPI()
    shell.add_exception_handler(DegreePlannerError, domain_exception_handler)

    @shell.get("/courses/{course_id}/prerequisites/{prerequisite_id}")
    async def add_prerequisite(course_id: str, prerequisite_id: str):
        raise CycleError(
            "Cannot create prerequisite: this would create a circular dependency",
            details={"course_id": course_id, "prerequisite_id": prerequisite_id},
        )

    client = TestClient(shell)
    response = client.get(
        "/courses/COURSE_A/prerequisites/COURSE_B", headers={"X-Request-ID": "req-1"}
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "CycleError"
    assert body["code"] == "circular_dependency"
    assert body["request_id"] == "req-1"
    assert body["details"] == {"course_id": "COURSE_A", "prerequisite_id": "COURSE_B"}


def test_validate_configuration():
    assert validate_configuration(TestingSettings())

    with pytest.raises(ValueError, match="NEO4J_PASSWORD"):
        validate_configuration(
            TestingSettings(graph_backend="neo4j", neo4j_password=None)
        )
