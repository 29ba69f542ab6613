"""
In-memory degree plan repository for development/testing
"""
import threading
from datetime import datetime
from typing import Dict, List, Optional, Sequence
from uuid import uuid4

from .interfaces.plan_repository import PlanRepositoryInterface
from ..core.exceptions import DuplicateError, NotFoundError
from ..models.plan import (
    DegreePlan,
    PlanSemester,
    PlanSemesterCreate,
    PlannedCourse,
    PlannedCourseCreate,
)


class MemoryPlanRepository(PlanRepositoryInterface):
    """In-memory implementation of the plan store"""

    def __init__(self):
        self.plans: Dict[str, DegreePlan] = {}
        self.semesters: Dict[str, PlanSemester] = {}
        self.planned_courses: Dict[str, PlannedCourse] = {}
        self.lock = threading.RLock()

    def _semester_view(self, semester: PlanSemester) -> PlanSemester:
        courses = sorted(
            (
                pc.model_copy()
                for pc in self.planned_courses.values()
                if pc.plan_semester_id == semester.id
            ),
            key=lambda pc: pc.course_code,
        )
        return semester.model_copy(update={"planned_courses": courses})

    def _plan_view(self, plan: DegreePlan) -> DegreePlan:
        semesters = sorted(
            (
                self._semester_view(s)
                for s in self.semesters.values()
                if s.degree_plan_id == plan.id
            ),
            key=lambda s: s.nth_semestre,
        )
        return plan.model_copy(update={"semesters": semesters})

    async def get_degree_plan_by_user_id(self, user_id: str) -> Optional[DegreePlan]:
        with self.lock:
            for plan in self.plans.values():
                if plan.user_id == user_id:
                    return self._plan_view(plan)
            return None

    async def get_degree_plan_by_id(self, degree_plan_id: str) -> Optional[DegreePlan]:
        with self.lock:
            plan = self.plans.get(degree_plan_id)
            return self._plan_view(plan) if plan else None

    async def create_degree_plan(
        self, user_id: str, program_id: Optional[str] = None
    ) -> DegreePlan:
        with self.lock:
            if any(plan.user_id == user_id for plan in self.plans.values()):
                raise DuplicateError("Degree plan already exists for this user")

            plan = DegreePlan(id=str(uuid4()), user_id=user_id, program_id=program_id)
            self.plans[plan.id] = plan
            return self._plan_view(plan)

    async def get_plan_semester_by_id(self, semester_id: str) -> Optional[PlanSemester]:
        with self.lock:
            semester = self.semesters.get(semester_id)
            return self._semester_view(semester) if semester else None

    async def get_plan_semesters(self, degree_plan_id: str) -> List[PlanSemester]:
        with self.lock:
            plan = self.plans.get(degree_plan_id)
            return self._plan_view(plan).semesters if plan else []

    async def create_plan_semester(self, data: PlanSemesterCreate) -> PlanSemester:
        with self.lock:
            if data.degree_plan_id not in self.plans:
                raise NotFoundError("Degree plan not found")

            for semester in self.semesters.values():
                if (
                    semester.degree_plan_id == data.degree_plan_id
                    and semester.year == data.year
                    and semester.term == data.term
                ):
                    raise DuplicateError(
                        f"A semester for {data.term.value} {data.year} already "
                        "exists in this degree plan"
                    )

            semester = PlanSemester(id=str(uuid4()), **data.model_dump())
            self.semesters[semester.id] = semester
            return self._semester_view(semester)

    async def delete_plan_semester(self, semester_id: str) -> bool:
        with self.lock:
            if self.semesters.pop(semester_id, None) is None:
                return False
            orphaned = [
                pc.id
                for pc in self.planned_courses.values()
                if pc.plan_semester_id == semester_id
            ]
            for planned_course_id in orphaned:
                del self.planned_courses[planned_course_id]
            return True

    async def create_planned_course(self, data: PlannedCourseCreate) -> PlannedCourse:
        with self.lock:
            if data.plan_semester_id not in self.semesters:
                raise NotFoundError("Plan semester not found")

            for planned in self.planned_courses.values():
                if (
                    planned.plan_semester_id == data.plan_semester_id
                    and planned.course_code == data.course_code
                ):
                    raise DuplicateError(
                        "This course is already planned for this semester"
                    )

            planned = PlannedCourse(
                id=str(uuid4()), created_at=datetime.utcnow(), **data.model_dump()
            )
            self.planned_courses[planned.id] = planned
            return planned.model_copy()

    async def get_planned_course_by_id(
        self, planned_course_id: str
    ) -> Optional[PlannedCourse]:
        with self.lock:
            planned = self.planned_courses.get(planned_course_id)
            return planned.model_copy() if planned else None

    async def delete_planned_course(self, planned_course_id: str) -> bool:
        with self.lock:
            return self.planned_courses.pop(planned_course_id, None) is not None

    async def delete_planned_courses(self, planned_course_ids: Sequence[str]) -> int:
        with self.lock:
            missing = [i for i in planned_course_ids if i not in self.planned_courses]
            if missing:
                raise NotFoundError(
                    "Planned course not found", details={"ids": missing}
                )
            for planned_course_id in planned_course_ids:
                del self.planned_courses[planned_course_id]
            return len(planned_course_ids)
