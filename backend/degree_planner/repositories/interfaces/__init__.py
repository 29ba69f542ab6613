"""
Repository interfaces package
"""
from .course_repository import CourseRepositoryInterface
from .plan_repository import PlanRepositoryInterface

__all__ = [
    "CourseRepositoryInterface",
    "PlanRepositoryInterface",
]
