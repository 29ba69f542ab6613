"""
Degree plan service - provisioning, semester sequencing and planned courses
"""
import logging
from collections import deque
from typing import Dict, List, Optional, Set

from pydantic import ValidationError as PydanticValidationError

from .term_rules import ensure_can_open_semester
from ..core.exceptions import DuplicateError, NotFoundError, ValidationError
from ..core.logging_config import get_component_logger
from ..models.plan import (
    CourseCategory,
    DegreePlan,
    PlanSemester,
    PlanSemesterCreate,
    PlannedCourse,
    PlannedCourseCreate,
    PlannedCourseDeletion,
    Term,
)
from ..repositories.interfaces.course_repository import CourseRepositoryInterface
from ..repositories.interfaces.plan_repository import PlanRepositoryInterface


async def get_or_create_plan(
    plan_repository: PlanRepositoryInterface, user_id: str
) -> DegreePlan:
    """Return the user's degree plan, creating an empty one on first use"""
    plan = await plan_repository.get_degree_plan_by_user_id(user_id)
    if plan:
        return plan

    try:
        return await plan_repository.create_degree_plan(user_id)
    except DuplicateError:
        # Another request provisioned it first
        plan = await plan_repository.get_degree_plan_by_user_id(user_id)
        if plan is None:
            raise
        return plan


class PlanService:
    """Operations over a student's degree plan"""

    def __init__(
        self,
        plan_repository: PlanRepositoryInterface,
        course_repository: CourseRepositoryInterface,
        logger: Optional[logging.Logger] = None,
    ):
        self.plan_repository = plan_repository
        self.course_repository = course_repository
        self.logger = get_component_logger(__name__, logger)

    async def get_or_create_degree_plan(self, user_id: str) -> DegreePlan:
        if not user_id or not user_id.strip():
            raise ValidationError("user_id is required")
        return await get_or_create_plan(self.plan_repository, user_id)

    async def get_degree_plan(self, degree_plan_id: str) -> Optional[DegreePlan]:
        return await self.plan_repository.get_degree_plan_by_id(degree_plan_id)

    async def create_plan_semester(
        self, degree_plan_id: str, year: int, term: Term, nth_semestre: int
    ) -> PlanSemester:
        """Open a semester, enforcing the term sequencing rules"""
        plan = await self.plan_repository.get_degree_plan_by_id(degree_plan_id)
        if plan is None:
            raise NotFoundError(
                "Degree plan not found", details={"degree_plan_id": degree_plan_id}
            )

        try:
            data = PlanSemesterCreate(
                degree_plan_id=degree_plan_id,
                year=year,
                term=term,
                nth_semestre=nth_semestre,
            )
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e, "semester") from e

        ensure_can_open_semester(plan.semesters, data.nth_semestre, data.term)

        semester = await self.plan_repository.create_plan_semester(data)
        self.logger.info(
            f"Opened semester {nth_semestre} ({semester.term.value} {year}) "
            f"in plan {degree_plan_id}"
        )
        return semester

    async def add_planned_course(
        self,
        plan_semester_id: str,
        course_code: str,
        course_title: Optional[str] = None,
        credits: Optional[int] = None,
        category: Optional[CourseCategory] = None,
    ) -> PlannedCourse:
        """Plan a course in a semester, snapshotting title and credits from the catalog"""
        semester = await self.plan_repository.get_plan_semester_by_id(plan_semester_id)
        if semester is None:
            raise NotFoundError(
                "Plan semester not found",
                details={"plan_semester_id": plan_semester_id},
            )

        if course_title is None or credits is None:
            course = await self.course_repository.get_course_by_code(course_code)
            if course is None:
                self.logger.warning(
                    f"Planning {course_code} which is not in the course catalog"
                )
            else:
                if course_title is None:
                    course_title = course.course_title
                if credits is None and course.sch_credits > 0:
                    credits = course.sch_credits

        try:
            data = PlannedCourseCreate(
                plan_semester_id=plan_semester_id,
                course_code=course_code,
                course_title=course_title,
                credits=credits,
                category=category,
            )
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e, "planned course") from e

        return await self.plan_repository.create_planned_course(data)

    async def get_planned_course_dependents(
        self, planned_course_id: str
    ) -> List[PlannedCourse]:
        """Planned courses in later semesters that transitively require this one"""
        planned = await self.plan_repository.get_planned_course_by_id(planned_course_id)
        if planned is None:
            raise NotFoundError(
                "Planned course not found",
                details={"planned_course_id": planned_course_id},
            )

        semester = await self.plan_repository.get_plan_semester_by_id(
            planned.plan_semester_id
        )
        plan = await self.plan_repository.get_degree_plan_by_id(semester.degree_plan_id)

        later: Dict[str, List[PlannedCourse]] = {}
        for other in plan.semesters:
            if other.nth_semestre > semester.nth_semestre:
                for course in other.planned_courses:
                    later.setdefault(course.course_code, []).append(course)
        if not later:
            return []

        relationships = await self.course_repository.get_course_relationships()

        visited: Set[str] = {planned.course_code}
        queue = deque([planned.course_code])
        found: List[PlannedCourse] = []
        while queue:
            code = queue.popleft()
            entry = relationships.get(code)
            if entry is None:
                continue
            for dependent_code in entry.dependents:
                if dependent_code in visited:
                    continue
                visited.add(dependent_code)
                queue.append(dependent_code)
                found.extend(later.get(dependent_code, []))

        return sorted(found, key=lambda pc: pc.course_code)

    async def delete_planned_course(self, planned_course_id: str) -> bool:
        """Delete one planned course; refused while later semesters depend on it"""
        planned = await self.plan_repository.get_planned_course_by_id(planned_course_id)
        if planned is None:
            return False

        dependents = await self.get_planned_course_dependents(planned_course_id)
        if dependents:
            codes = sorted({d.course_code for d in dependents})
            raise ValidationError(
                f"Cannot remove {planned.course_code}: it is a prerequisite of "
                f"planned courses {', '.join(codes)}",
                details={"dependent_courses": codes},
            )

        return await self.plan_repository.delete_planned_course(planned_course_id)

    async def delete_planned_course_with_dependents(
        self, planned_course_id: str
    ) -> PlannedCourseDeletion:
        """Delete a planned course and every later planned course depending on it"""
        planned = await self.plan_repository.get_planned_course_by_id(planned_course_id)
        if planned is None:
            raise NotFoundError(
                "Planned course not found",
                details={"planned_course_id": planned_course_id},
            )

        dependents = await self.get_planned_course_dependents(planned_course_id)
        ids = [planned.id] + [d.id for d in dependents]
        deleted_count = await self.plan_repository.delete_planned_courses(ids)

        deleted_courses = [planned.course_code] + [d.course_code for d in dependents]
        self.logger.info(
            f"Deleted {planned.course_code} with {len(dependents)} dependent "
            "planned course(s)"
        )
        return PlannedCourseDeletion(
            deleted_count=deleted_count, deleted_courses=deleted_courses
        )
