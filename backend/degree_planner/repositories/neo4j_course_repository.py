"""
Neo4j course graph repository
"""
import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from neo4j import AsyncManagedTransaction

from .interfaces.course_repository import CourseRepositoryInterface
from ..core.exceptions import CycleError, DuplicateError, ValidationError
from ..core.logging_config import get_component_logger
from ..graph.neo4j_client import Neo4jClient, fetch_records
from ..models.course import (
    CatalogEntry,
    Course,
    CourseDetail,
    CourseFilter,
    CourseRelationships,
    EdgeInsertResult,
)

LABEL_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

GET_COURSE_WITH_NEIGHBOURS = """
MATCH (c:Course {{{key}: $value}})
OPTIONAL MATCH (c)-[:REQUIRES]->(prereq:Course)
OPTIONAL MATCH (dependent:Course)-[:REQUIRES]->(c)
RETURN c,
       collect(DISTINCT prereq) AS prerequisites,
       collect(DISTINCT dependent) AS dependents
"""

EDGE_STATE = """
MATCH (course:Course {id: $courseId}), (prereq:Course {id: $prerequisiteId})
SET course._lock = true, prereq._lock = true
REMOVE course._lock, prereq._lock
RETURN EXISTS { MATCH (course)-[:REQUIRES]->(prereq) } AS already_linked,
       (course = prereq OR EXISTS { MATCH (prereq)-[:REQUIRES*]->(course) }) AS would_cycle
"""

MERGE_EDGE = """
MATCH (course:Course {id: $courseId}), (prereq:Course {id: $prerequisiteId})
MERGE (course)-[:REQUIRES]->(prereq)
RETURN count(*) AS linked
"""

CATALOG_WITH_CODES = """
MATCH (c:Course)
{where}
OPTIONAL MATCH (c)-[:REQUIRES]->(prereq:Course)
OPTIONAL MATCH (dependent:Course)-[:REQUIRES]->(c)
WITH c,
     collect(DISTINCT prereq.course_code) AS prerequisiteCodes,
     collect(DISTINCT dependent.course_code) AS dependentCodes
RETURN c,
       [code IN prerequisiteCodes WHERE code IS NOT NULL] AS prerequisiteCodes,
       [code IN dependentCodes WHERE code IS NOT NULL] AS dependentCodes
ORDER BY c.course_code
"""


def _to_course(node: Dict[str, Any]) -> Course:
    return Course.model_validate(node)


def _by_code(nodes: List[Optional[Dict[str, Any]]]) -> List[Course]:
    return sorted(
        (_to_course(n) for n in nodes if n is not None), key=lambda c: c.course_code
    )


def _property_names(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Map model field names onto graph property names"""
    properties = {}
    for name, value in changes.items():
        field = Course.model_fields[name]
        properties[field.alias or name] = value
    return properties


def _check_label(label: str) -> str:
    if not LABEL_PATTERN.match(label or ""):
        raise ValidationError(f"Invalid node label: {label!r}")
    return label


async def _insert_edge_if_acyclic(
    tx: AsyncManagedTransaction, prerequisite_id: str, course_id: str
) -> EdgeInsertResult:
    params = {"courseId": course_id, "prerequisiteId": prerequisite_id}
    rows = await fetch_records(tx, EDGE_STATE, params)
    if not rows:
        return EdgeInsertResult.NOT_FOUND
    if rows[0]["already_linked"]:
        return EdgeInsertResult.EXISTS
    if rows[0]["would_cycle"]:
        return EdgeInsertResult.CYCLE
    await fetch_records(tx, MERGE_EDGE, params)
    return EdgeInsertResult.CREATED


class Neo4jCourseRepository(CourseRepositoryInterface):
    """Course nodes and REQUIRES edges persisted in Neo4j"""

    def __init__(self, client: Neo4jClient, logger: Optional[logging.Logger] = None):
        self.client = client
        self.logger = get_component_logger(__name__, logger)

    def _filter_clause(
        self, filters: Optional[CourseFilter]
    ) -> Tuple[str, Dict[str, Any]]:
        """Build the WHERE clause and parameters for a course filter"""
        clauses: List[str] = []
        params: Dict[str, Any] = {}
        if filters is None:
            return "", params

        if filters.search:
            clauses.append(
                "(c.course_code CONTAINS $search OR c.course_title CONTAINS $search "
                "OR c.description CONTAINS $search)"
            )
            params["search"] = filters.search
        if filters.discipline:
            clauses.append("$discipline IN c.disciplines")
            params["discipline"] = filters.discipline
        if filters.labels:
            clauses.append("ANY(label IN labels(c) WHERE label IN $labels)")
            params["labels"] = filters.labels
        if filters.is_elective is not None:
            clauses.append("c.isElective = $isElective")
            params["isElective"] = filters.is_elective

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    async def _read_courses(
        self, query: str, params: Optional[Dict[str, Any]] = None, key: str = "c"
    ) -> List[Course]:
        rows = await self.client.run_read(query, params)
        return [_to_course(row[key]) for row in rows]

    async def _get_detail(self, key: str, value: str) -> Optional[CourseDetail]:
        rows = await self.client.run_read(
            GET_COURSE_WITH_NEIGHBOURS.format(key=key), {"value": value}
        )
        if not rows:
            return None
        row = rows[0]
        return CourseDetail(
            **_to_course(row["c"]).model_dump(),
            prerequisites=_by_code(row["prerequisites"]),
            dependents=_by_code(row["dependents"]),
        )

    # Node operations
    async def list_courses(
        self, skip: int = 0, limit: int = 10, filters: Optional[CourseFilter] = None
    ) -> Tuple[List[Course], int]:
        where, params = self._filter_clause(filters)

        count_rows = await self.client.run_read(
            f"MATCH (c:Course) {where} RETURN count(c) AS total", params
        )
        total = count_rows[0]["total"] if count_rows else 0

        courses = await self._read_courses(
            f"""
            MATCH (c:Course)
            {where}
            RETURN c
            ORDER BY c.course_code
            SKIP $skip
            LIMIT $limit
            """,
            {**params, "skip": int(skip), "limit": int(limit)},
        )
        return courses, total

    async def search_courses(self, query: str, limit: int = 50) -> List[Course]:
        return await self._read_courses(
            """
            MATCH (c:Course)
            WHERE c.course_code CONTAINS $query
               OR c.course_title CONTAINS $query
               OR c.description CONTAINS $query
            RETURN c
            ORDER BY c.course_code
            LIMIT $limit
            """,
            {"query": query, "limit": int(limit)},
        )

    async def get_course_by_id(self, course_id: str) -> Optional[CourseDetail]:
        return await self._get_detail("id", course_id)

    async def get_course_by_code(self, course_code: str) -> Optional[CourseDetail]:
        return await self._get_detail("course_code", course_code)

    async def get_courses_by_label(self, label: str) -> List[Course]:
        label = _check_label(label)
        return await self._read_courses(
            f"MATCH (c:`{label}`) RETURN c ORDER BY c.course_code"
        )

    async def get_courses_by_discipline(self, discipline: str) -> List[Course]:
        return await self._read_courses(
            """
            MATCH (c:Course)
            WHERE $discipline IN c.disciplines
            RETURN c
            ORDER BY c.course_code
            """,
            {"discipline": discipline},
        )

    async def get_all_labels(self) -> List[str]:
        rows = await self.client.run_read(
            "CALL db.labels() YIELD label RETURN label ORDER BY label"
        )
        return [row["label"] for row in rows]

    async def get_all_disciplines(self) -> List[str]:
        rows = await self.client.run_read(
            """
            MATCH (c:Course)
            UNWIND c.disciplines AS discipline
            RETURN DISTINCT discipline
            ORDER BY discipline
            """
        )
        return [row["discipline"] for row in rows]

    async def get_disciplines_by_label(self, label: str) -> List[str]:
        label = _check_label(label)
        rows = await self.client.run_read(
            f"""
            MATCH (c:`{label}`)
            UNWIND c.disciplines AS discipline
            RETURN DISTINCT discipline
            ORDER BY discipline
            """
        )
        return [row["discipline"] for row in rows]

    async def course_exists(self, course_id: str) -> bool:
        rows = await self.client.run_read(
            "MATCH (c:Course {id: $id}) RETURN count(c) AS found", {"id": course_id}
        )
        return bool(rows and rows[0]["found"])

    async def course_code_exists(
        self, course_code: str, exclude_id: Optional[str] = None
    ) -> bool:
        rows = await self.client.run_read(
            """
            MATCH (c:Course {course_code: $code})
            WHERE $excludeId IS NULL OR c.id <> $excludeId
            RETURN count(c) AS found
            """,
            {"code": course_code, "excludeId": exclude_id},
        )
        return bool(rows and rows[0]["found"])

    async def create_course(
        self,
        course: Course,
        prerequisite_codes: Sequence[str] = (),
        dependent_codes: Sequence[str] = (),
    ) -> Course:
        """Create the node and its edges in a single transaction"""

        async def work(tx: AsyncManagedTransaction) -> Course:
            clash = await fetch_records(
                tx,
                """
                MATCH (c:Course)
                WHERE c.id = $id OR c.course_code = $code
                RETURN c.id AS id
                LIMIT 1
                """,
                {"id": course.id, "code": course.course_code},
            )
            if clash:
                raise DuplicateError(
                    f"Course with code {course.course_code} already exists"
                )

            rows = await fetch_records(
                tx,
                "CREATE (c:Course) SET c = $props RETURN c",
                {"props": course.to_properties()},
            )
            created = _to_course(rows[0]["c"])

            edges = []
            for code in prerequisite_codes:
                found = await fetch_records(
                    tx, "MATCH (p:Course {course_code: $code}) RETURN p.id AS id", {"code": code}
                )
                edges.extend((row["id"], course.id) for row in found)
            for code in dependent_codes:
                found = await fetch_records(
                    tx, "MATCH (d:Course {course_code: $code}) RETURN d.id AS id", {"code": code}
                )
                edges.extend((course.id, row["id"]) for row in found)

            for prerequisite_id, course_id in edges:
                result = await _insert_edge_if_acyclic(tx, prerequisite_id, course_id)
                if result == EdgeInsertResult.CYCLE:
                    raise CycleError(
                        "Cannot create course: prerequisites and dependents "
                        "would form a circular dependency",
                        details={"course_id": course_id, "prerequisite_id": prerequisite_id},
                    )
            return created

        try:
            return await self.client.execute_write(work)
        except (DuplicateError, CycleError):
            raise
        except Exception as e:
            self.logger.error(f"Error in create_course: {e}")
            raise

    async def update_course(
        self, course_id: str, changes: Dict[str, Any]
    ) -> Optional[Course]:
        rows = await self.client.run_write(
            """
            MATCH (c:Course {id: $id})
            SET c += $changes
            RETURN c
            """,
            {"id": course_id, "changes": _property_names(changes)},
        )
        return _to_course(rows[0]["c"]) if rows else None

    async def delete_course(self, course_id: str) -> bool:
        rows = await self.client.run_write(
            """
            MATCH (c:Course {id: $id})
            DETACH DELETE c
            RETURN count(c) AS deleted
            """,
            {"id": course_id},
        )
        return bool(rows and rows[0]["deleted"] > 0)

    # Edge operations
    async def get_prerequisites(self, course_id: str) -> List[Course]:
        return await self._read_courses(
            """
            MATCH (c:Course {id: $id})-[:REQUIRES]->(prereq:Course)
            RETURN prereq
            ORDER BY prereq.course_code
            """,
            {"id": course_id},
            key="prereq",
        )

    async def get_dependents(self, course_id: str) -> List[Course]:
        return await self._read_courses(
            """
            MATCH (dependent:Course)-[:REQUIRES]->(c:Course {id: $id})
            RETURN dependent
            ORDER BY dependent.course_code
            """,
            {"id": course_id},
            key="dependent",
        )

    async def get_prerequisite_chain(self, course_id: str) -> List[Course]:
        return await self._read_courses(
            """
            MATCH (c:Course {id: $id})-[:REQUIRES*]->(prereq:Course)
            WHERE prereq <> c
            RETURN DISTINCT prereq
            ORDER BY prereq.course_code
            """,
            {"id": course_id},
            key="prereq",
        )

    async def get_dependent_chain(self, course_id: str) -> List[Course]:
        return await self._read_courses(
            """
            MATCH (dependent:Course)-[:REQUIRES*]->(c:Course {id: $id})
            WHERE dependent <> c
            RETURN DISTINCT dependent
            ORDER BY dependent.course_code
            """,
            {"id": course_id},
            key="dependent",
        )

    async def path_exists(self, from_id: str, to_id: str) -> bool:
        rows = await self.client.run_read(
            """
            MATCH (source:Course {id: $fromId}), (target:Course {id: $toId})
            RETURN EXISTS { MATCH (source)-[:REQUIRES*]->(target) } AS reachable
            """,
            {"fromId": from_id, "toId": to_id},
        )
        return bool(rows and rows[0]["reachable"])

    async def create_prerequisite(self, prerequisite_id: str, course_id: str) -> bool:
        rows = await self.client.run_write(
            MERGE_EDGE, {"courseId": course_id, "prerequisiteId": prerequisite_id}
        )
        return bool(rows and rows[0]["linked"] > 0)

    async def create_prerequisite_if_acyclic(
        self, prerequisite_id: str, course_id: str
    ) -> EdgeInsertResult:
        async def work(tx: AsyncManagedTransaction) -> EdgeInsertResult:
            return await _insert_edge_if_acyclic(tx, prerequisite_id, course_id)

        return await self.client.execute_write(work)

    async def delete_prerequisite(self, prerequisite_id: str, course_id: str) -> bool:
        rows = await self.client.run_write(
            """
            MATCH (course:Course {id: $courseId})-[r:REQUIRES]->(prereq:Course {id: $prerequisiteId})
            DELETE r
            RETURN count(r) AS deleted
            """,
            {"courseId": course_id, "prerequisiteId": prerequisite_id},
        )
        return bool(rows and rows[0]["deleted"] > 0)

    # Catalog operations
    async def get_course_catalog(self, search: Optional[str] = None) -> List[CatalogEntry]:
        where = (
            "WHERE toLower(c.course_code) CONTAINS toLower($searchQuery) "
            "OR toLower(c.course_title) CONTAINS toLower($searchQuery)"
            if search
            else ""
        )
        rows = await self.client.run_read(
            CATALOG_WITH_CODES.format(where=where), {"searchQuery": search or ""}
        )
        return [
            CatalogEntry(
                course=_to_course(row["c"]),
                prerequisite_codes=sorted(row["prerequisiteCodes"]),
                dependent_codes=sorted(row["dependentCodes"]),
            )
            for row in rows
        ]

    async def get_course_relationships(self) -> Dict[str, CourseRelationships]:
        rows = await self.client.run_read(
            """
            MATCH (c:Course)
            OPTIONAL MATCH (c)-[:REQUIRES]->(prereq:Course)
            OPTIONAL MATCH (dependent:Course)-[:REQUIRES]->(c)
            WITH c,
                 collect(DISTINCT prereq.course_code) AS prerequisiteCodes,
                 collect(DISTINCT dependent.course_code) AS dependentCodes
            RETURN c.course_code AS courseCode,
                   [code IN prerequisiteCodes WHERE code IS NOT NULL] AS prerequisiteCodes,
                   [code IN dependentCodes WHERE code IS NOT NULL] AS dependentCodes
            """
        )
        return {
            row["courseCode"]: CourseRelationships(
                prerequisites=sorted(row["prerequisiteCodes"]),
                dependents=sorted(row["dependentCodes"]),
            )
            for row in rows
        }
