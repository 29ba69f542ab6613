"""
Degree plan repository interface
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ...models.plan import (
    DegreePlan,
    PlanSemester,
    PlanSemesterCreate,
    PlannedCourse,
    PlannedCourseCreate,
)


class PlanRepositoryInterface(ABC):
    """Abstract interface for degree plans, semesters and planned courses"""

    @abstractmethod
    async def get_degree_plan_by_user_id(self, user_id: str) -> Optional[DegreePlan]:
        """Get a student's plan with ordered semesters"""
        pass

    @abstractmethod
    async def get_degree_plan_by_id(self, degree_plan_id: str) -> Optional[DegreePlan]:
        """Get plan by ID"""
        pass

    @abstractmethod
    async def create_degree_plan(
        self, user_id: str, program_id: Optional[str] = None
    ) -> DegreePlan:
        """Create an empty plan; raises DuplicateError if the user has one"""
        pass

    @abstractmethod
    async def get_plan_semester_by_id(self, semester_id: str) -> Optional[PlanSemester]:
        """Get semester by ID"""
        pass

    @abstractmethod
    async def get_plan_semesters(self, degree_plan_id: str) -> List[PlanSemester]:
        """Semesters of a plan ordered by nth_semestre"""
        pass

    @abstractmethod
    async def create_plan_semester(self, data: PlanSemesterCreate) -> PlanSemester:
        """Create a semester; raises DuplicateError for a repeated (year, term)"""
        pass

    @abstractmethod
    async def delete_plan_semester(self, semester_id: str) -> bool:
        """Delete a semester and its planned courses"""
        pass

    @abstractmethod
    async def create_planned_course(self, data: PlannedCourseCreate) -> PlannedCourse:
        """Plan a course; raises DuplicateError for a repeated code"""
        pass

    @abstractmethod
    async def get_planned_course_by_id(
        self, planned_course_id: str
    ) -> Optional[PlannedCourse]:
        """Get planned course by ID"""
        pass

    @abstractmethod
    async def delete_planned_course(self, planned_course_id: str) -> bool:
        """Delete one planned course"""
        pass

    @abstractmethod
    async def delete_planned_courses(self, planned_course_ids: Sequence[str]) -> int:
        """Delete several planned courses, all or nothing"""
        pass
