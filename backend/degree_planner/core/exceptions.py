"""
Domain error taxonomy for the Degree Planner
"""
from typing import Any, Dict, Optional


class DegreePlannerError(Exception):
    """Base class for errors surfaced to callers"""

    code = "degree_planner_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(DegreePlannerError):
    """Malformed input or a broken planning rule"""

    code = "validation_error"

    @classmethod
    def from_pydantic(cls, error, subject: str = "input") -> "ValidationError":
        """Wrap a pydantic validation failure, keeping the per-field messages"""
        errors = [
            {"field": ".".join(str(part) for part in e["loc"]), "message": e["msg"]}
            for e in error.errors()
        ]
        summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        return cls(f"Invalid {subject}: {summary}", details={"errors": errors})


class NotFoundError(DegreePlannerError):
    """A course, semester, plan or planned course that must exist is absent"""

    code = "not_found"


class DuplicateError(DegreePlannerError):
    """Unique constraint violation"""

    code = "duplicate"


class CycleError(DegreePlannerError):
    """Inserting a REQUIRES edge would close a cycle in the course graph"""

    code = "circular_dependency"
