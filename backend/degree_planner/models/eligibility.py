"""
Eligibility result models
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from .course import Course

ALREADY_PLANNED_REASON = "Course is already in your degree plan"
COURSE_NOT_FOUND_REASON = "Course not found"


def missing_prerequisites_reason(missing: List[str]) -> str:
    return f"Missing prerequisites: {', '.join(missing)}"


class EligibleCourse(Course):
    """Catalog course with its eligibility outcome for one student"""

    is_eligible: bool
    reason_ineligible: Optional[str] = None
    missing_prerequisites: List[str] = Field(default_factory=list)
    prerequisite_codes: List[str] = Field(default_factory=list)
    dependent_codes: List[str] = Field(default_factory=list)


class EligibilityResult(BaseModel):
    """Outcome of a single-course eligibility check"""

    course_code: str
    is_eligible: bool
    reason_ineligible: Optional[str] = None
    missing_prerequisites: List[str] = Field(default_factory=list)
