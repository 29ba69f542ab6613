"""
Prerequisite graph service - traversal, cycle checks and edge mutations
"""
import logging
from typing import List, Optional

from .course_service import RELATIONSHIPS_CACHE_KEY
from .interfaces.cache_service import CacheServiceInterface
from ..core.exceptions import CycleError, NotFoundError
from ..core.logging_config import get_component_logger
from ..models.course import Course, CourseRelationship, EdgeInsertResult
from ..repositories.interfaces.course_repository import CourseRepositoryInterface


class DependencyGraphService:
    """Queries and mutations over REQUIRES edges"""

    def __init__(
        self,
        course_repository: CourseRepositoryInterface,
        cache_service: Optional[CacheServiceInterface] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.course_repository = course_repository
        self.cache_service = cache_service
        self.logger = get_component_logger(__name__, logger)

    async def _invalidate_relationships(self):
        if self.cache_service:
            await self.cache_service.delete(RELATIONSHIPS_CACHE_KEY)

    async def get_prerequisites(self, course_id: str) -> List[Course]:
        """Courses directly required by this course"""
        return await self.course_repository.get_prerequisites(course_id)

    async def get_dependents(self, course_id: str) -> List[Course]:
        """Courses that directly require this course"""
        return await self.course_repository.get_dependents(course_id)

    async def get_prerequisite_chain(self, course_id: str) -> List[Course]:
        return await self.course_repository.get_prerequisite_chain(course_id)

    async def get_dependent_chain(self, course_id: str) -> List[Course]:
        return await self.course_repository.get_dependent_chain(course_id)

    async def would_create_circular_dependency(
        self, prerequisite_id: str, course_id: str
    ) -> bool:
        """
        Whether adding course -> prerequisite would close a cycle.

        That happens for a self-edge, or when the prerequisite already
        requires the course (directly or transitively).
        """
        if prerequisite_id == course_id:
            return True
        return await self.course_repository.path_exists(prerequisite_id, course_id)

    async def create_prerequisite(
        self, prerequisite_id: str, course_id: str
    ) -> CourseRelationship:
        """Insert the edge without a cycle check"""
        created = await self.course_repository.create_prerequisite(
            prerequisite_id, course_id
        )
        if not created:
            raise NotFoundError(
                "One or both courses not found",
                details={"course_id": course_id, "prerequisite_id": prerequisite_id},
            )

        await self._invalidate_relationships()
        return CourseRelationship(start_node=course_id, end_node=prerequisite_id)

    async def add_prerequisite(
        self, prerequisite_id: str, course_id: str
    ) -> CourseRelationship:
        """Check for a cycle and insert the edge as one atomic step"""
        result = await self.course_repository.create_prerequisite_if_acyclic(
            prerequisite_id, course_id
        )

        if result == EdgeInsertResult.NOT_FOUND:
            raise NotFoundError(
                "One or both courses not found",
                details={"course_id": course_id, "prerequisite_id": prerequisite_id},
            )
        if result == EdgeInsertResult.CYCLE:
            raise CycleError(
                "Cannot create prerequisite: this would create a circular dependency",
                details={"course_id": course_id, "prerequisite_id": prerequisite_id},
            )

        if result == EdgeInsertResult.CREATED:
            await self._invalidate_relationships()
            self.logger.info(f"Added prerequisite {prerequisite_id} to {course_id}")

        return CourseRelationship(start_node=course_id, end_node=prerequisite_id)

    async def delete_prerequisite(self, prerequisite_id: str, course_id: str) -> bool:
        deleted = await self.course_repository.delete_prerequisite(
            prerequisite_id, course_id
        )
        if deleted:
            await self._invalidate_relationships()
            self.logger.info(f"Removed prerequisite {prerequisite_id} from {course_id}")
        return deleted

    async def remove_prerequisite(self, prerequisite_id: str, course_id: str) -> bool:
        """Controller-facing alias of delete_prerequisite"""
        return await self.delete_prerequisite(prerequisite_id, course_id)
