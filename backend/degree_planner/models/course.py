"""
Course-related data models
"""
import re
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

COURSE_ID_PREFIX = "COURSE_"
COURSE_CODE_PATTERN = re.compile(r"^[A-Z]{3}\d{4}$|^[A-Z]{2,4}\d{3,4}$")
REQUIRES = "REQUIRES"


def _unique(values: List[str]) -> List[str]:
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


class Course(BaseModel):
    """Core course node"""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    course_code: str  # e.g., "CSC3309"
    course_title: str
    description: str = ""
    sch_credits: int = 0
    n_credits: int = 0

    is_elective: bool = Field(False, alias="isElective")
    is_minor_elective: bool = Field(False, alias="isMinorElective")
    is_spec_elective: bool = Field(False, alias="isSpecElective")

    categories: List[str] = Field(default_factory=list)
    disciplines: List[str] = Field(default_factory=list)
    labels: List[str] = Field(default_factory=lambda: ["Course"])

    @field_validator("is_elective", "is_minor_elective", "is_spec_elective", mode="before")
    @classmethod
    def _missing_flag_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("categories", "disciplines", "labels", mode="before")
    @classmethod
    def _missing_list_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("categories", "disciplines", "labels")
    @classmethod
    def _dedupe(cls, value: List[str]) -> List[str]:
        return _unique(value)

    def to_properties(self) -> Dict[str, Any]:
        """Graph node properties (labels live on the node, not in properties)"""
        return self.model_dump(by_alias=True, exclude={"labels"})


class CourseDetail(Course):
    """Course with its direct prerequisites and dependents"""

    prerequisites: List[Course] = Field(default_factory=list)
    dependents: List[Course] = Field(default_factory=list)


class _CourseFieldRules(BaseModel):
    """Validation shared by create and update inputs"""

    @field_validator("course_code", check_fields=False)
    @classmethod
    def _code_format(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not COURSE_CODE_PATTERN.match(value):
            raise ValueError(
                "course_code must look like CSC3309, ENG1201, MAT2302, etc."
            )
        return value

    @field_validator("course_title", "description", check_fields=False)
    @classmethod
    def _not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("categories", "disciplines", check_fields=False)
    @classmethod
    def _non_empty_set(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return value
        cleaned = _unique([item.strip() for item in value if item and item.strip()])
        if not cleaned:
            raise ValueError("must contain at least one entry")
        return cleaned


class CourseCreate(_CourseFieldRules):
    """Input for creating a course node"""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    id: Optional[str] = None
    course_code: str = Field(..., min_length=1)
    course_title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    sch_credits: int = Field(..., ge=0, strict=True)
    n_credits: int = Field(..., ge=0, strict=True)

    is_elective: bool = Field(False, alias="isElective")
    is_minor_elective: bool = Field(False, alias="isMinorElective")
    is_spec_elective: bool = Field(False, alias="isSpecElective")

    categories: List[str]
    disciplines: List[str]

    # Course codes linked at creation time
    prerequisites: List[str] = Field(default_factory=list)
    dependents: List[str] = Field(default_factory=list)

    @field_validator("id")
    @classmethod
    def _id_prefix(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.startswith(COURSE_ID_PREFIX):
            raise ValueError("id must start with 'COURSE_' e.g. COURSE_CSC3309")
        return value

    def to_course(self) -> Course:
        return Course(
            id=self.id or f"{COURSE_ID_PREFIX}{self.course_code.upper()}",
            course_code=self.course_code,
            course_title=self.course_title,
            description=self.description,
            sch_credits=self.sch_credits,
            n_credits=self.n_credits,
            is_elective=self.is_elective,
            is_minor_elective=self.is_minor_elective,
            is_spec_elective=self.is_spec_elective,
            categories=self.categories,
            disciplines=self.disciplines,
        )


class CourseUpdate(_CourseFieldRules):
    """Allow-listed partial update; unknown fields are rejected"""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    course_code: Optional[str] = None
    course_title: Optional[str] = None
    description: Optional[str] = None
    sch_credits: Optional[int] = Field(None, ge=0, strict=True)
    n_credits: Optional[int] = Field(None, ge=0, strict=True)

    is_elective: Optional[bool] = Field(None, alias="isElective")
    is_minor_elective: Optional[bool] = Field(None, alias="isMinorElective")
    is_spec_elective: Optional[bool] = Field(None, alias="isSpecElective")

    categories: Optional[List[str]] = None
    disciplines: Optional[List[str]] = None

    def changes(self) -> Dict[str, Any]:
        """Supplied fields only, keyed by model field name"""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class CourseFilter(BaseModel):
    """AND-composed filters for course listing"""

    search: Optional[str] = None
    discipline: Optional[str] = None
    labels: Optional[List[str]] = None
    is_elective: Optional[bool] = None

    def matches(self, course: Course) -> bool:
        if self.search and not (
            self.search in course.course_code
            or self.search in course.course_title
            or self.search in course.description
        ):
            return False
        if self.discipline and self.discipline not in course.disciplines:
            return False
        if self.labels and not set(self.labels) & set(course.labels):
            return False
        if self.is_elective is not None and course.is_elective != self.is_elective:
            return False
        return True


class CourseRelationship(BaseModel):
    """A REQUIRES edge descriptor: start requires end"""

    model_config = ConfigDict(populate_by_name=True)

    type: str = REQUIRES
    start_node: str = Field(..., alias="startNode")
    end_node: str = Field(..., alias="endNode")


class EdgeInsertResult(str, Enum):
    CREATED = "created"
    EXISTS = "exists"
    CYCLE = "cycle"
    NOT_FOUND = "not_found"


class CatalogEntry(BaseModel):
    """Course annotated with direct prerequisite and dependent codes"""

    course: Course
    prerequisite_codes: List[str] = Field(default_factory=list)
    dependent_codes: List[str] = Field(default_factory=list)


class CourseRelationships(BaseModel):
    """Prerequisite and dependent codes of one course"""

    prerequisites: List[str] = Field(default_factory=list)
    dependents: List[str] = Field(default_factory=list)
