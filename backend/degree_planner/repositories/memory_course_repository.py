"""
In-memory course graph implementation for development/testing
"""
import logging
import os
import threading
from collections import deque
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

import pandas as pd

from .interfaces.course_repository import CourseRepositoryInterface
from ..core.exceptions import CycleError, DuplicateError
from ..core.logging_config import get_component_logger
from ..models.course import (
    COURSE_ID_PREFIX,
    CatalogEntry,
    Course,
    CourseDetail,
    CourseFilter,
    CourseRelationships,
    EdgeInsertResult,
)

LIST_SEPARATOR = ";"


def _split(value: Any) -> List[str]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return []
    return [item.strip() for item in str(value).split(LIST_SEPARATOR) if item.strip()]


def _parse_bool(value: Any) -> bool:
    return str(value).strip().lower() in {"1", "true", "yes", "y"}


def _parse_int(value: Any) -> int:
    if value is None or str(value).strip() == "":
        return 0
    return int(float(value))


class MemoryCourseRepository(CourseRepositoryInterface):
    """In-memory implementation of the course graph"""

    def __init__(
        self,
        catalog_path: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.courses: Dict[str, Course] = {}
        # course id -> ids it REQUIRES, and the reverse index
        self.prerequisites: Dict[str, Set[str]] = {}
        self.dependents: Dict[str, Set[str]] = {}
        self.lock = threading.RLock()
        self.logger = get_component_logger(__name__, logger)

        if catalog_path:
            self._load_catalog(catalog_path)

    def _load_catalog(self, catalog_path: str):
        """Load courses and prerequisite codes from a CSV catalog"""
        if not os.path.exists(catalog_path):
            self.logger.warning(f"Course catalog not found at {catalog_path}")
            return

        df = pd.read_csv(catalog_path, dtype=str).fillna("")
        pending_edges: List[Tuple[str, str]] = []

        for _, row in df.iterrows():
            code = row["course_code"].strip()
            if not code:
                continue
            course = Course(
                id=row.get("id") or f"{COURSE_ID_PREFIX}{code.upper()}",
                course_code=code,
                course_title=row.get("course_title", ""),
                description=row.get("description", ""),
                sch_credits=_parse_int(row.get("sch_credits")),
                n_credits=_parse_int(row.get("n_credits")),
                is_elective=_parse_bool(row.get("isElective", "")),
                is_minor_elective=_parse_bool(row.get("isMinorElective", "")),
                is_spec_elective=_parse_bool(row.get("isSpecElective", "")),
                categories=_split(row.get("categories")),
                disciplines=_split(row.get("disciplines")),
            )
            self._add_node(course)
            for prereq_code in _split(row.get("prerequisites")):
                pending_edges.append((course.id, prereq_code))

        for course_id, prereq_code in pending_edges:
            prereq = self._find_by_code(prereq_code)
            if prereq is None:
                self.logger.warning(
                    f"Skipping unknown prerequisite {prereq_code} for {course_id}"
                )
                continue
            result = self._insert_edge_if_acyclic(prereq.id, course_id)
            if result == EdgeInsertResult.CYCLE:
                self.logger.warning(
                    f"Skipping {course_id} -> {prereq.id}: would create a cycle"
                )

        self.logger.info(f"Loaded {len(self.courses)} courses from {catalog_path}")

    # Internal helpers (callers hold the lock)
    def _add_node(self, course: Course):
        self.courses[course.id] = course
        self.prerequisites.setdefault(course.id, set())
        self.dependents.setdefault(course.id, set())

    def _remove_node(self, course_id: str):
        for prereq_id in self.prerequisites.pop(course_id, set()):
            self.dependents.get(prereq_id, set()).discard(course_id)
        for dependent_id in self.dependents.pop(course_id, set()):
            self.prerequisites.get(dependent_id, set()).discard(course_id)
        self.courses.pop(course_id, None)

    def _find_by_code(self, course_code: str) -> Optional[Course]:
        for course in self.courses.values():
            if course.course_code == course_code:
                return course
        return None

    def _sorted(self, ids: Iterable[str]) -> List[Course]:
        return sorted(
            (self.courses[i] for i in ids if i in self.courses),
            key=lambda c: c.course_code,
        )

    def _reachable(self, start_id: str, adjacency: Dict[str, Set[str]]) -> Set[str]:
        """Breadth-first closure; the visited set guarantees termination"""
        visited: Set[str] = set()
        queue = deque(adjacency.get(start_id, ()))
        while queue:
            node_id = queue.popleft()
            if node_id in visited:
                continue
            visited.add(node_id)
            queue.extend(adjacency.get(node_id, ()))
        return visited

    def _insert_edge_if_acyclic(
        self, prerequisite_id: str, course_id: str
    ) -> EdgeInsertResult:
        if prerequisite_id not in self.courses or course_id not in self.courses:
            return EdgeInsertResult.NOT_FOUND
        if prerequisite_id in self.prerequisites[course_id]:
            return EdgeInsertResult.EXISTS
        if prerequisite_id == course_id or course_id in self._reachable(
            prerequisite_id, self.prerequisites
        ):
            return EdgeInsertResult.CYCLE
        self.prerequisites[course_id].add(prerequisite_id)
        self.dependents[prerequisite_id].add(course_id)
        return EdgeInsertResult.CREATED

    def _detail(self, course: Course) -> CourseDetail:
        return CourseDetail(
            **course.model_dump(),
            prerequisites=self._sorted(self.prerequisites.get(course.id, ())),
            dependents=self._sorted(self.dependents.get(course.id, ())),
        )

    def _codes(self, ids: Iterable[str]) -> List[str]:
        return sorted(self.courses[i].course_code for i in ids if i in self.courses)

    # Node operations
    async def list_courses(
        self, skip: int = 0, limit: int = 10, filters: Optional[CourseFilter] = None
    ) -> Tuple[List[Course], int]:
        """List courses with pagination and filtering"""
        with self.lock:
            courses_list = self._sorted(self.courses)

            if filters:
                courses_list = [c for c in courses_list if filters.matches(c)]

            return courses_list[skip : skip + limit], len(courses_list)

    async def search_courses(self, query: str, limit: int = 50) -> List[Course]:
        with self.lock:
            course_filter = CourseFilter(search=query)
            return [c for c in self._sorted(self.courses) if course_filter.matches(c)][
                :limit
            ]

    async def get_course_by_id(self, course_id: str) -> Optional[CourseDetail]:
        with self.lock:
            course = self.courses.get(course_id)
            return self._detail(course) if course else None

    async def get_course_by_code(self, course_code: str) -> Optional[CourseDetail]:
        with self.lock:
            course = self._find_by_code(course_code)
            return self._detail(course) if course else None

    async def get_courses_by_label(self, label: str) -> List[Course]:
        with self.lock:
            return [c for c in self._sorted(self.courses) if label in c.labels]

    async def get_courses_by_discipline(self, discipline: str) -> List[Course]:
        with self.lock:
            return [c for c in self._sorted(self.courses) if discipline in c.disciplines]

    async def get_all_labels(self) -> List[str]:
        with self.lock:
            return sorted({label for c in self.courses.values() for label in c.labels})

    async def get_all_disciplines(self) -> List[str]:
        with self.lock:
            return sorted({d for c in self.courses.values() for d in c.disciplines})

    async def get_disciplines_by_label(self, label: str) -> List[str]:
        with self.lock:
            return sorted(
                {
                    d
                    for c in self.courses.values()
                    if label in c.labels
                    for d in c.disciplines
                }
            )

    async def course_exists(self, course_id: str) -> bool:
        with self.lock:
            return course_id in self.courses

    async def course_code_exists(
        self, course_code: str, exclude_id: Optional[str] = None
    ) -> bool:
        with self.lock:
            course = self._find_by_code(course_code)
            return course is not None and course.id != exclude_id

    async def create_course(
        self,
        course: Course,
        prerequisite_codes: Sequence[str] = (),
        dependent_codes: Sequence[str] = (),
    ) -> Course:
        """Create a course and its edges; nothing is kept if an edge would cycle"""
        with self.lock:
            if course.id in self.courses:
                raise DuplicateError(f"Course with ID {course.id} already exists")
            if self._find_by_code(course.course_code):
                raise DuplicateError(
                    f"Course with code {course.course_code} already exists"
                )

            self._add_node(course)
            edges = []
            for code in prerequisite_codes:
                prereq = self._find_by_code(code)
                if prereq:
                    edges.append((prereq.id, course.id))
            for code in dependent_codes:
                dependent = self._find_by_code(code)
                if dependent:
                    edges.append((course.id, dependent.id))

            for prerequisite_id, course_id in edges:
                if self._insert_edge_if_acyclic(prerequisite_id, course_id) == (
                    EdgeInsertResult.CYCLE
                ):
                    self._remove_node(course.id)
                    raise CycleError(
                        "Cannot create course: prerequisites and dependents "
                        "would form a circular dependency",
                        details={"course_id": course_id, "prerequisite_id": prerequisite_id},
                    )
            return course

    async def update_course(
        self, course_id: str, changes: Dict[str, Any]
    ) -> Optional[Course]:
        """Update course information"""
        with self.lock:
            if course_id not in self.courses:
                return None

            course = self.courses[course_id].model_copy(update=changes)
            self.courses[course_id] = course
            return course

    async def delete_course(self, course_id: str) -> bool:
        with self.lock:
            if course_id in self.courses:
                self._remove_node(course_id)
                return True
            return False

    # Edge operations
    async def get_prerequisites(self, course_id: str) -> List[Course]:
        with self.lock:
            return self._sorted(self.prerequisites.get(course_id, ()))

    async def get_dependents(self, course_id: str) -> List[Course]:
        with self.lock:
            return self._sorted(self.dependents.get(course_id, ()))

    async def get_prerequisite_chain(self, course_id: str) -> List[Course]:
        with self.lock:
            chain = self._reachable(course_id, self.prerequisites)
            chain.discard(course_id)
            return self._sorted(chain)

    async def get_dependent_chain(self, course_id: str) -> List[Course]:
        with self.lock:
            chain = self._reachable(course_id, self.dependents)
            chain.discard(course_id)
            return self._sorted(chain)

    async def path_exists(self, from_id: str, to_id: str) -> bool:
        with self.lock:
            return to_id in self._reachable(from_id, self.prerequisites)

    async def create_prerequisite(self, prerequisite_id: str, course_id: str) -> bool:
        with self.lock:
            if prerequisite_id not in self.courses or course_id not in self.courses:
                return False
            self.prerequisites[course_id].add(prerequisite_id)
            self.dependents[prerequisite_id].add(course_id)
            return True

    async def create_prerequisite_if_acyclic(
        self, prerequisite_id: str, course_id: str
    ) -> EdgeInsertResult:
        with self.lock:
            return self._insert_edge_if_acyclic(prerequisite_id, course_id)

    async def delete_prerequisite(self, prerequisite_id: str, course_id: str) -> bool:
        with self.lock:
            if prerequisite_id not in self.prerequisites.get(course_id, set()):
                return False
            self.prerequisites[course_id].discard(prerequisite_id)
            self.dependents[prerequisite_id].discard(course_id)
            return True

    # Catalog operations
    async def get_course_catalog(self, search: Optional[str] = None) -> List[CatalogEntry]:
        with self.lock:
            needle = search.lower() if search else None
            entries = []
            for course in self._sorted(self.courses):
                if needle and not (
                    needle in course.course_code.lower()
                    or needle in course.course_title.lower()
                ):
                    continue
                entries.append(
                    CatalogEntry(
                        course=course,
                        prerequisite_codes=self._codes(self.prerequisites[course.id]),
                        dependent_codes=self._codes(self.dependents[course.id]),
                    )
                )
            return entries

    async def get_course_relationships(self) -> Dict[str, CourseRelationships]:
        with self.lock:
            return {
                course.course_code: CourseRelationships(
                    prerequisites=self._codes(self.prerequisites[course.id]),
                    dependents=self._codes(self.dependents[course.id]),
                )
                for course in self.courses.values()
            }
