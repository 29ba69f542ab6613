"""
Shared fixtures: in-memory stores and services wired the way the app wires them
"""
import os

os.environ.setdefault("ENVIRONMENT", "testing")

import pytest

from degree_planner.core.config import TestingSettings
from degree_planner.models.plan import Term
from degree_planner.repositories.memory_course_repository import MemoryCourseRepository
from degree_planner.repositories.memory_plan_repository import MemoryPlanRepository
from degree_planner.services.course_service import CourseService
from degree_planner.services.dependency_service import DependencyGraphService
from degree_planner.services.eligibility_service import EligibilityService
from degree_planner.services.memory_cache_service import MemoryCacheService
from degree_planner.services.plan_service import PlanService


def course_data(code, **overrides):
    """Valid creation payload for a course code"""
    data = {
        "course_code": code,
        "course_title": f"Course {code}",
        "description": f"Description of {code}",
        "sch_credits": 3,
        "n_credits": 6,
        "categories": ["Core"],
        "disciplines": [code[:3]],
    }
    data.update(overrides)
    return data


@pytest.fixture
def settings():
    return TestingSettings(cache_ttl_seconds=60)


@pytest.fixture
def course_repository():
    return MemoryCourseRepository()


@pytest.fixture
def plan_repository():
    return MemoryPlanRepository()


@pytest.fixture
def cache_service(settings):
    return MemoryCacheService(settings)


@pytest.fixture
def course_service(course_repository, settings, cache_service):
    return CourseService(course_repository, settings, cache_service=cache_service)


@pytest.fixture
def dependency_service(course_repository, cache_service):
    return DependencyGraphService(course_repository, cache_service=cache_service)


@pytest.fixture
def plan_service(plan_repository, course_repository):
    return PlanService(plan_repository, course_repository)


@pytest.fixture
def eligibility_service(course_repository, plan_repository, settings, cache_service):
    return EligibilityService(
        course_repository, plan_repository, settings, cache_service=cache_service
    )


@pytest.fixture
async def catalog(course_service):
    """
    A small prerequisite graph:

        MAT1001 <- MAT2001 <- CSC3001
        MAT1001 <- CSC2001 <- CSC3001
        ENG1001 (standalone)
    """
    await course_service.create_course(course_data("MAT1001"))
    await course_service.create_course(course_data("ENG1001", isElective=True))
    await course_service.create_course(
        course_data("MAT2001", prerequisites=["MAT1001"])
    )
    await course_service.create_course(
        course_data("CSC2001", prerequisites=["MAT1001"])
    )
    await course_service.create_course(
        course_data("CSC3001", prerequisites=["MAT2001", "CSC2001"])
    )
    return course_service


@pytest.fixture
async def student_plan(plan_service, catalog):
    """Plan for student-1 with MAT1001 in semester 1 (FALL 2024)"""
    plan = await plan_service.get_or_create_degree_plan("student-1")
    first = await plan_service.create_plan_semester(plan.id, 2024, Term.FALL, 1)
    await plan_service.add_planned_course(first.id, "MAT1001")
    return await plan_service.get_degree_plan(plan.id)
