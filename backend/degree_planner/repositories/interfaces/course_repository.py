"""
Course repository interface
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ...models.course import (
    CatalogEntry,
    Course,
    CourseDetail,
    CourseFilter,
    CourseRelationships,
    EdgeInsertResult,
)


class CourseRepositoryInterface(ABC):
    """Abstract interface for course nodes and REQUIRES edges"""

    # Node operations
    @abstractmethod
    async def list_courses(
        self, skip: int = 0, limit: int = 10, filters: Optional[CourseFilter] = None
    ) -> Tuple[List[Course], int]:
        """Page of courses sorted by code, plus the total matching count"""
        pass

    @abstractmethod
    async def search_courses(self, query: str, limit: int = 50) -> List[Course]:
        """Search courses by code, title or description"""
        pass

    @abstractmethod
    async def get_course_by_id(self, course_id: str) -> Optional[CourseDetail]:
        """Get course by ID with direct prerequisites and dependents"""
        pass

    @abstractmethod
    async def get_course_by_code(self, course_code: str) -> Optional[CourseDetail]:
        """Get course by course code (e.g., CSC3301)"""
        pass

    @abstractmethod
    async def get_courses_by_label(self, label: str) -> List[Course]:
        """Get all courses carrying a node label"""
        pass

    @abstractmethod
    async def get_courses_by_discipline(self, discipline: str) -> List[Course]:
        """Get all courses in a discipline"""
        pass

    @abstractmethod
    async def get_all_labels(self) -> List[str]:
        """All node labels in use"""
        pass

    @abstractmethod
    async def get_all_disciplines(self) -> List[str]:
        """All disciplines in use"""
        pass

    @abstractmethod
    async def get_disciplines_by_label(self, label: str) -> List[str]:
        """Disciplines of courses carrying a node label"""
        pass

    @abstractmethod
    async def course_exists(self, course_id: str) -> bool:
        """Check if a course node exists"""
        pass

    @abstractmethod
    async def course_code_exists(
        self, course_code: str, exclude_id: Optional[str] = None
    ) -> bool:
        """Check if another course already uses this code"""
        pass

    @abstractmethod
    async def create_course(
        self,
        course: Course,
        prerequisite_codes: Sequence[str] = (),
        dependent_codes: Sequence[str] = (),
    ) -> Course:
        """Create a course and its edges in one unit; raises CycleError"""
        pass

    @abstractmethod
    async def update_course(
        self, course_id: str, changes: Dict[str, Any]
    ) -> Optional[Course]:
        """Set only the supplied fields"""
        pass

    @abstractmethod
    async def delete_course(self, course_id: str) -> bool:
        """Detach-delete a course"""
        pass

    # Edge operations
    @abstractmethod
    async def get_prerequisites(self, course_id: str) -> List[Course]:
        """Direct prerequisites"""
        pass

    @abstractmethod
    async def get_dependents(self, course_id: str) -> List[Course]:
        """Courses directly requiring this one"""
        pass

    @abstractmethod
    async def get_prerequisite_chain(self, course_id: str) -> List[Course]:
        """Transitive prerequisites"""
        pass

    @abstractmethod
    async def get_dependent_chain(self, course_id: str) -> List[Course]:
        """Transitive dependents"""
        pass

    @abstractmethod
    async def path_exists(self, from_id: str, to_id: str) -> bool:
        """Whether a REQUIRES path of length >= 1 leads from one course to another"""
        pass

    @abstractmethod
    async def create_prerequisite(self, prerequisite_id: str, course_id: str) -> bool:
        """Insert course -> prerequisite without checks; False if an endpoint is missing"""
        pass

    @abstractmethod
    async def create_prerequisite_if_acyclic(
        self, prerequisite_id: str, course_id: str
    ) -> EdgeInsertResult:
        """Check and insert as one atomic operation"""
        pass

    @abstractmethod
    async def delete_prerequisite(self, prerequisite_id: str, course_id: str) -> bool:
        """Remove course -> prerequisite if present"""
        pass

    # Catalog operations
    @abstractmethod
    async def get_course_catalog(self, search: Optional[str] = None) -> List[CatalogEntry]:
        """All courses with direct prerequisite/dependent codes"""
        pass

    @abstractmethod
    async def get_course_relationships(self) -> Dict[str, CourseRelationships]:
        """Prerequisite and dependent codes for every course code"""
        pass
