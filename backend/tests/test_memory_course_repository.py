"""
Tests for the in-memory course graph and its CSV catalog loader
"""
import pytest

from degree_planner.models.course import Course, CourseFilter, EdgeInsertResult
from degree_planner.repositories.memory_course_repository import MemoryCourseRepository

CATALOG_CSV = """course_code,course_title,description,sch_credits,n_credits,isElective,categories,disciplines,prerequisites
MAT1001,Calculus I,Limits and derivatives,3,6,false,Core,MAT,
MAT2001,Calculus II,Integrals,3,6,,Core;Core,MAT,MAT1001
CSC2001,Programming,Intro to programming,4,8,true,Core;Major,CSC;MAT,MAT1001;PHY9999
CSC3001,Algorithms,Graph algorithms,3,6,false,Major,CSC,CSC2001;MAT2001
"""


@pytest.fixture
def catalog_path(tmp_path):
    path = tmp_path / "catalog.csv"
    path.write_text(CATALOG_CSV)
    return str(path)


@pytest.fixture
def loaded_repository(catalog_path):
    return MemoryCourseRepository(catalog_path=catalog_path)


async def test_loads_courses_from_csv(loaded_repository):
    courses, total = await loaded_repository.list_courses(limit=10)

    assert total == 4
    assert [c.course_code for c in courses] == ["CSC2001", "CSC3001", "MAT1001", "MAT2001"]

    csc = await loaded_repository.get_course_by_code("CSC2001")
    assert csc.id == "COURSE_CSC2001"
    assert csc.sch_credits == 4
    assert csc.is_elective is True
    assert csc.categories == ["Core", "Major"]
    assert csc.disciplines == ["CSC", "MAT"]

    mat = await loaded_repository.get_course_by_code("MAT2001")
    assert mat.is_elective is False
    assert mat.categories == ["Core"]


async def test_loads_edges_and_skips_unknown_codes(loaded_repository):
    csc = await loaded_repository.get_course_by_code("CSC2001")
    assert [c.course_code for c in csc.prerequisites] == ["MAT1001"]

    algorithms = await loaded_repository.get_course_by_code("CSC3001")
    assert [c.course_code for c in algorithms.prerequisites] == ["CSC2001", "MAT2001"]


async def test_skips_cyclic_edges_in_catalog(tmp_path):
    path = tmp_path / "cyclic.csv"
    path.write_text(
        "course_code,course_title,prerequisites\n"
        "AAA1000,First,BBB1000\n"
        "BBB1000,Second,AAA1000\n"
    )

    repository = MemoryCourseRepository(catalog_path=str(path))
    relationships = await repository.get_course_relationships()

    edges = sum(len(r.prerequisites) for r in relationships.values())
    assert edges == 1


def test_missing_catalog_file_leaves_repository_empty(tmp_path):
    repository = MemoryCourseRepository(catalog_path=str(tmp_path / "absent.csv"))
    assert repository.courses == {}


async def test_edge_insert_outcomes():
    repository = MemoryCourseRepository()
    await repository.create_course(Course(id="COURSE_A", course_code="AAA1000", course_title="A"))
    await repository.create_course(Course(id="COURSE_B", course_code="BBB1000", course_title="B"))

    assert (
        await repository.create_prerequisite_if_acyclic("COURSE_A", "COURSE_B")
        == EdgeInsertResult.CREATED
    )
    assert (
        await repository.create_prerequisite_if_acyclic("COURSE_A", "COURSE_B")
        == EdgeInsertResult.EXISTS
    )
    assert (
        await repository.create_prerequisite_if_acyclic("COURSE_B", "COURSE_A")
        == EdgeInsertResult.CYCLE
    )
    assert (
        await repository.create_prerequisite_if_acyclic("COURSE_A", "COURSE_A")
        == EdgeInsertResult.CYCLE
    )
    assert (
        await repository.create_prerequisite_if_acyclic("COURSE_X", "COURSE_A")
        == EdgeInsertResult.NOT_FOUND
    )
    assert await repository.path_exists("COURSE_B", "COURSE_A")
    assert not await repository.path_exists("COURSE_A", "COURSE_B")


async def test_catalog_search_is_case_insensitive(loaded_repository):
    entries = await loaded_repository.get_course_catalog("calc")

    assert [e.course.course_code for e in entries] == ["MAT1001", "MAT2001"]
    assert entries[0].dependent_codes == ["CSC2001", "MAT2001"]
    assert entries[1].prerequisite_codes == ["MAT1001"]


async def test_list_filter_search_is_case_sensitive(loaded_repository):
    _, upper = await loaded_repository.list_courses(filters=CourseFilter(search="Calculus"))
    _, lower = await loaded_repository.list_courses(filters=CourseFilter(search="calculus"))
    assert (upper, lower) == (2, 0)
