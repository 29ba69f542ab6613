"""
Degree plan data models (relational side)
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Term(str, Enum):
    FALL = "FALL"
    SPRING = "SPRING"
    SUMMER = "SUMMER"
    WINTER = "WINTER"


class CourseCategory(str, Enum):
    GENERAL_EDUCATION = "GENERAL_EDUCATION"
    COMPUTER_SCIENCE = "COMPUTER_SCIENCE"
    MINOR = "MINOR"
    SPECIALIZATION = "SPECIALIZATION"
    ENGINEERING_SCIENCE_MATHS = "ENGINEERING_SCIENCE_MATHS"
    FREE_ELECTIVES = "FREE_ELECTIVES"


class PlannedCourseStatus(str, Enum):
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class PlannedCourse(BaseModel):
    """A course code scheduled in one semester"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    plan_semester_id: str
    course_code: str

    # Snapshot taken when the course was planned; not kept in sync with the catalog
    course_title: Optional[str] = None
    credits: Optional[int] = None
    category: Optional[CourseCategory] = None

    status: PlannedCourseStatus = PlannedCourseStatus.PLANNED
    created_at: datetime = Field(default_factory=datetime.utcnow)


class PlanSemester(BaseModel):
    """One planning period of a degree plan"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    degree_plan_id: str
    year: int
    term: Term
    nth_semestre: int
    planned_courses: List[PlannedCourse] = Field(default_factory=list)

    @property
    def course_codes(self) -> List[str]:
        return [course.course_code for course in self.planned_courses]


class DegreePlan(BaseModel):
    """A student's plan: ordered semesters of planned courses"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    program_id: Optional[str] = None
    semesters: List[PlanSemester] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    def planned_course_codes(self) -> List[str]:
        return [code for semester in self.semesters for code in semester.course_codes]


class PlanSemesterCreate(BaseModel):
    """Input for opening a new semester"""

    degree_plan_id: str = Field(..., min_length=1)
    year: int = Field(..., ge=1900, le=2200)
    term: Term
    nth_semestre: int = Field(..., ge=1)


class PlannedCourseCreate(BaseModel):
    """Input for planning a course in a semester"""

    plan_semester_id: str = Field(..., min_length=1)
    course_code: str = Field(..., min_length=1)
    course_title: Optional[str] = None
    credits: Optional[int] = Field(None, gt=0)
    category: Optional[CourseCategory] = None
    status: PlannedCourseStatus = PlannedCourseStatus.PLANNED


class PlannedCourseDeletion(BaseModel):
    """Outcome of a cascading planned-course deletion"""

    deleted_count: int
    deleted_courses: List[str] = Field(default_factory=list)
