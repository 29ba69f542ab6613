"""
Eligibility engine - which catalog courses a student may plan next
"""
import logging
from datetime import timedelta
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .course_service import RELATIONSHIPS_CACHE_KEY
from .interfaces.cache_service import CacheServiceInterface
from .plan_service import get_or_create_plan
from ..core.config import BaseSettings
from ..core.exceptions import NotFoundError
from ..core.logging_config import get_component_logger
from ..models.course import CatalogEntry, CourseRelationships
from ..models.eligibility import (
    ALREADY_PLANNED_REASON,
    COURSE_NOT_FOUND_REASON,
    EligibilityResult,
    EligibleCourse,
    missing_prerequisites_reason,
)
from ..models.plan import DegreePlan
from ..repositories.interfaces.course_repository import CourseRepositoryInterface
from ..repositories.interfaces.plan_repository import PlanRepositoryInterface


def _plan_course_sets(
    plan: DegreePlan, up_to_semester_id: Optional[str] = None
) -> Tuple[Set[str], Set[str]]:
    """
    Split a plan into (completed, planned) course code sets.

    Completed holds the codes of semesters strictly before ``up_to_semester_id``
    when that semester belongs to the plan, otherwise every planned code.
    Planned always spans the whole plan.
    """
    planned = set(plan.planned_course_codes())

    cutoff = next((s for s in plan.semesters if s.id == up_to_semester_id), None)
    if cutoff is None:
        return set(planned), planned

    completed = {
        code
        for semester in plan.semesters
        if semester.nth_semestre < cutoff.nth_semestre
        for code in semester.course_codes
    }
    return completed, planned


def _evaluate(
    prerequisite_codes: Iterable[str],
    course_code: str,
    completed: Set[str],
    planned: Set[str],
) -> Tuple[bool, Optional[str], List[str]]:
    missing = sorted(set(prerequisite_codes) - completed)
    if course_code in planned:
        return False, ALREADY_PLANNED_REASON, missing
    if missing:
        return False, missing_prerequisites_reason(missing), missing
    return True, None, missing


class EligibilityService:
    """Computes eligible courses from a degree plan and the prerequisite graph"""

    def __init__(
        self,
        course_repository: CourseRepositoryInterface,
        plan_repository: PlanRepositoryInterface,
        settings: BaseSettings,
        cache_service: Optional[CacheServiceInterface] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.course_repository = course_repository
        self.plan_repository = plan_repository
        self.settings = settings
        self.cache_service = cache_service
        self.logger = get_component_logger(__name__, logger)

    def evaluate_courses(
        self, catalog: List[CatalogEntry], completed: Set[str], planned: Set[str]
    ) -> List[EligibleCourse]:
        """Attach an eligibility outcome to every catalog entry"""
        evaluated = []
        for entry in catalog:
            is_eligible, reason, missing = _evaluate(
                entry.prerequisite_codes, entry.course.course_code, completed, planned
            )
            evaluated.append(
                EligibleCourse(
                    **entry.course.model_dump(),
                    is_eligible=is_eligible,
                    reason_ineligible=reason,
                    missing_prerequisites=missing,
                    prerequisite_codes=entry.prerequisite_codes,
                    dependent_codes=entry.dependent_codes,
                )
            )
        return sorted(evaluated, key=lambda c: c.course_code)

    async def _eligible_for_plan(
        self,
        plan: DegreePlan,
        search: Optional[str],
        up_to_semester_id: Optional[str] = None,
    ) -> List[EligibleCourse]:
        completed, planned = _plan_course_sets(plan, up_to_semester_id)
        catalog = await self.course_repository.get_course_catalog(search or None)

        evaluated = self.evaluate_courses(catalog, completed, planned)
        eligible = [course for course in evaluated if course.is_eligible]

        self.logger.debug(
            f"Plan {plan.id}: {len(eligible)} of {len(evaluated)} courses eligible"
        )
        return eligible

    async def get_eligible_courses(
        self,
        student_id: str,
        search: Optional[str] = None,
        up_to_semester_id: Optional[str] = None,
    ) -> List[EligibleCourse]:
        """Eligible courses for a student, provisioning their plan if needed"""
        plan = await get_or_create_plan(self.plan_repository, student_id)
        return await self._eligible_for_plan(plan, search, up_to_semester_id)

    async def get_eligible_courses_for_degree_plan(
        self, degree_plan_id: str, search: Optional[str] = None
    ) -> List[EligibleCourse]:
        """Eligible courses treating every planned course as completed"""
        plan = await self.plan_repository.get_degree_plan_by_id(degree_plan_id)
        if plan is None:
            raise NotFoundError(
                "Degree plan not found", details={"degree_plan_id": degree_plan_id}
            )
        return await self._eligible_for_plan(plan, search)

    async def check_eligibility(
        self,
        student_id: str,
        course_code: str,
        up_to_semester_id: Optional[str] = None,
    ) -> EligibilityResult:
        """Eligibility of a single course, with the reason when ineligible"""
        plan = await get_or_create_plan(self.plan_repository, student_id)

        course = await self.course_repository.get_course_by_code(course_code)
        if course is None:
            return EligibilityResult(
                course_code=course_code,
                is_eligible=False,
                reason_ineligible=COURSE_NOT_FOUND_REASON,
            )

        completed, planned = _plan_course_sets(plan, up_to_semester_id)
        is_eligible, reason, missing = _evaluate(
            [p.course_code for p in course.prerequisites],
            course.course_code,
            completed,
            planned,
        )
        return EligibilityResult(
            course_code=course.course_code,
            is_eligible=is_eligible,
            reason_ineligible=reason,
            missing_prerequisites=missing,
        )

    async def get_all_course_relationships(self) -> Dict[str, CourseRelationships]:
        """Prerequisite and dependent codes for every course (cached)"""
        if self.cache_service:
            cached = await self.cache_service.get(RELATIONSHIPS_CACHE_KEY)
            if cached is not None:
                return {
                    code: CourseRelationships.model_validate(value)
                    for code, value in cached.items()
                }

        relationships = await self.course_repository.get_course_relationships()

        if self.cache_service:
            await self.cache_service.set(
                RELATIONSHIPS_CACHE_KEY,
                {code: rel.model_dump() for code, rel in relationships.items()},
                expire=timedelta(seconds=self.settings.cache_ttl_seconds),
            )
        return relationships
