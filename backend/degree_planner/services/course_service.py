"""
Course catalog service - validation and public course operations
"""
import logging
from typing import Any, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from .interfaces.cache_service import CacheServiceInterface
from ..core.config import BaseSettings
from ..core.exceptions import DuplicateError, ValidationError
from ..core.logging_config import get_component_logger
from ..models.course import (
    COURSE_ID_PREFIX,
    Course,
    CourseCreate,
    CourseDetail,
    CourseFilter,
    CourseUpdate,
)
from ..repositories.interfaces.course_repository import CourseRepositoryInterface

RELATIONSHIPS_CACHE_KEY = "course_relationships"


class CourseService:
    """Public operations over course nodes"""

    def __init__(
        self,
        course_repository: CourseRepositoryInterface,
        settings: BaseSettings,
        cache_service: Optional[CacheServiceInterface] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.course_repository = course_repository
        self.settings = settings
        self.cache_service = cache_service
        self.logger = get_component_logger(__name__, logger)

    async def _invalidate_relationships(self):
        if self.cache_service:
            await self.cache_service.delete(RELATIONSHIPS_CACHE_KEY)

    async def list_courses(
        self,
        skip: int = 0,
        limit: Optional[int] = None,
        filters: Optional[CourseFilter] = None,
    ) -> Tuple[List[Course], int]:
        """List courses with pagination and filtering"""
        if limit is None:
            limit = self.settings.default_page_size
        if skip < 0:
            raise ValidationError("skip must be 0 or greater")
        if limit <= 0:
            raise ValidationError("limit must be greater than 0")

        return await self.course_repository.list_courses(
            skip=skip, limit=limit, filters=filters
        )

    async def get_course(self, id_or_code: str) -> Optional[CourseDetail]:
        """Get course by ID or by course code"""
        if not id_or_code or not id_or_code.strip():
            return None
        value = id_or_code.strip()

        if value.startswith(COURSE_ID_PREFIX):
            lookups = (
                self.course_repository.get_course_by_id,
                self.course_repository.get_course_by_code,
            )
        else:
            lookups = (
                self.course_repository.get_course_by_code,
                self.course_repository.get_course_by_id,
            )

        for lookup in lookups:
            course = await lookup(value)
            if course:
                return course
        return None

    async def get_course_by_id(self, course_id: str) -> Optional[CourseDetail]:
        return await self.course_repository.get_course_by_id(course_id)

    async def get_course_by_code(self, course_code: str) -> Optional[CourseDetail]:
        return await self.course_repository.get_course_by_code(course_code)

    async def search_courses(self, query: str) -> List[Course]:
        """Search courses; a blank query matches nothing"""
        if not query or not query.strip():
            return []
        return await self.course_repository.search_courses(
            query.strip(), limit=self.settings.search_result_limit
        )

    async def get_courses_by_label(self, label: str) -> List[Course]:
        return await self.course_repository.get_courses_by_label(label)

    async def get_courses_by_discipline(self, discipline: str) -> List[Course]:
        return await self.course_repository.get_courses_by_discipline(discipline)

    async def get_all_labels(self) -> List[str]:
        return await self.course_repository.get_all_labels()

    async def get_all_disciplines(self) -> List[str]:
        return await self.course_repository.get_all_disciplines()

    async def get_disciplines_by_label(self, label: str) -> List[str]:
        return await self.course_repository.get_disciplines_by_label(label)

    async def create_course(
        self, data: Union[CourseCreate, Mapping[str, Any]]
    ) -> Course:
        """Validate and create a course, linking any supplied prerequisite/dependent codes"""
        if not isinstance(data, CourseCreate):
            try:
                data = CourseCreate.model_validate(dict(data))
            except PydanticValidationError as e:
                raise ValidationError.from_pydantic(e, "course data") from e

        course = data.to_course()

        if await self.course_repository.course_code_exists(course.course_code):
            raise DuplicateError(
                f"Course with code {course.course_code} already exists",
                details={"course_code": course.course_code},
            )
        if await self.course_repository.course_exists(course.id):
            raise DuplicateError(
                f"Course with ID {course.id} already exists",
                details={"course_id": course.id},
            )

        created = await self.course_repository.create_course(
            course,
            prerequisite_codes=data.prerequisites,
            dependent_codes=data.dependents,
        )
        await self._invalidate_relationships()

        self.logger.info(f"Created course {created.id} ({created.course_code})")
        return created

    async def update_course(
        self, course_id: str, patch: Union[CourseUpdate, Mapping[str, Any], None]
    ) -> Optional[Course]:
        """Apply an allow-listed partial update"""
        if patch is None:
            patch = CourseUpdate()
        elif not isinstance(patch, CourseUpdate):
            try:
                patch = CourseUpdate.model_validate(dict(patch))
            except PydanticValidationError as e:
                raise ValidationError.from_pydantic(e, "course data") from e

        current = await self.course_repository.get_course_by_id(course_id)
        if current is None:
            return None

        changes = patch.changes()
        if not changes:
            return Course.model_validate(
                current.model_dump(exclude={"prerequisites", "dependents"})
            )

        if "course_code" in changes and await self.course_repository.course_code_exists(
            changes["course_code"], exclude_id=course_id
        ):
            raise DuplicateError(
                f"Course with code {changes['course_code']} already exists",
                details={"course_code": changes["course_code"]},
            )

        updated = await self.course_repository.update_course(course_id, changes)
        if updated is None:
            return None

        await self._invalidate_relationships()
        self.logger.info(f"Updated course {course_id}: {sorted(changes)}")
        return updated

    async def delete_course(self, course_id: str) -> bool:
        """Delete a course and its edges"""
        deleted = await self.course_repository.delete_course(course_id)
        if deleted:
            await self._invalidate_relationships()
            self.logger.info(f"Deleted course {course_id}")
        return deleted
