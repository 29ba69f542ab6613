"""
Tests for prerequisite graph traversal and edge mutations
"""
import pytest

from degree_planner.core.exceptions import CycleError, NotFoundError
from degree_planner.services.course_service import RELATIONSHIPS_CACHE_KEY


def codes(courses):
    return [c.course_code for c in courses]


async def test_direct_prerequisites_and_dependents(catalog, dependency_service):
    assert codes(await dependency_service.get_prerequisites("COURSE_CSC3001")) == [
        "CSC2001",
        "MAT2001",
    ]
    assert codes(await dependency_service.get_dependents("COURSE_MAT1001")) == [
        "CSC2001",
        "MAT2001",
    ]
    assert await dependency_service.get_prerequisites("COURSE_ENG1001") == []


async def test_transitive_chains_are_distinct_and_sorted(catalog, dependency_service):
    assert codes(await dependency_service.get_prerequisite_chain("COURSE_CSC3001")) == [
        "CSC2001",
        "MAT1001",
        "MAT2001",
    ]
    assert codes(await dependency_service.get_dependent_chain("COURSE_MAT1001")) == [
        "CSC2001",
        "CSC3001",
        "MAT2001",
    ]


async def test_chains_terminate_on_cyclic_data(
    catalog, dependency_service, course_repository
):
    # Unchecked insert closes MAT1001 -> CSC3001 -> ... -> MAT1001
    await dependency_service.create_prerequisite("COURSE_CSC3001", "COURSE_MAT1001")

    chain = await course_repository.get_prerequisite_chain("COURSE_MAT1001")
    assert codes(chain) == ["CSC2001", "CSC3001", "MAT2001"]


async def test_would_create_circular_dependency(catalog, dependency_service):
    assert await dependency_service.would_create_circular_dependency(
        "COURSE_MAT1001", "COURSE_MAT1001"
    )
    assert await dependency_service.would_create_circular_dependency(
        "COURSE_CSC3001", "COURSE_MAT1001"
    )
    assert not await dependency_service.would_create_circular_dependency(
        "COURSE_ENG1001", "COURSE_CSC3001"
    )


async def test_reverse_edge_becomes_circular_after_insert(catalog, dependency_service):
    assert not await dependency_service.would_create_circular_dependency(
        "COURSE_ENG1001", "COURSE_MAT1001"
    )

    await dependency_service.add_prerequisite("COURSE_MAT1001", "COURSE_ENG1001")

    assert await dependency_service.would_create_circular_dependency(
        "COURSE_ENG1001", "COURSE_MAT1001"
    )


async def test_add_prerequisite_creates_edge(catalog, dependency_service):
    relationship = await dependency_service.add_prerequisite(
        "COURSE_ENG1001", "COURSE_CSC3001"
    )

    assert relationship.type == "REQUIRES"
    assert relationship.start_node == "COURSE_CSC3001"
    assert relationship.end_node == "COURSE_ENG1001"
    assert relationship.model_dump(by_alias=True)["startNode"] == "COURSE_CSC3001"
    assert "ENG1001" in codes(await dependency_service.get_prerequisites("COURSE_CSC3001"))


async def test_add_prerequisite_is_idempotent(catalog, dependency_service):
    await dependency_service.add_prerequisite("COURSE_ENG1001", "COURSE_CSC3001")
    await dependency_service.add_prerequisite("COURSE_ENG1001", "COURSE_CSC3001")

    dependents = await dependency_service.get_dependents("COURSE_ENG1001")
    assert codes(dependents) == ["CSC3001"]


async def test_add_prerequisite_rejects_cycles(catalog, dependency_service):
    with pytest.raises(CycleError):
        await dependency_service.add_prerequisite("COURSE_CSC3001", "COURSE_MAT1001")

    with pytest.raises(CycleError):
        await dependency_service.add_prerequisite("COURSE_ENG1001", "COURSE_ENG1001")

    assert await dependency_service.get_prerequisites("COURSE_MAT1001") == []


async def test_add_prerequisite_missing_course(catalog, dependency_service):
    with pytest.raises(NotFoundError):
        await dependency_service.add_prerequisite("COURSE_MISSING", "COURSE_CSC3001")


async def test_create_prerequisite_missing_course(catalog, dependency_service):
    with pytest.raises(NotFoundError):
        await dependency_service.create_prerequisite("COURSE_MAT1001", "COURSE_MISSING")


async def test_remove_prerequisite(catalog, dependency_service):
    assert await dependency_service.remove_prerequisite("COURSE_MAT2001", "COURSE_CSC3001")
    assert not await dependency_service.remove_prerequisite(
        "COURSE_MAT2001", "COURSE_CSC3001"
    )
    assert codes(await dependency_service.get_prerequisites("COURSE_CSC3001")) == [
        "CSC2001"
    ]


async def test_edge_mutations_invalidate_relationship_cache(
    catalog, dependency_service, cache_service
):
    await cache_service.set(RELATIONSHIPS_CACHE_KEY, {"stale": {}})
    await dependency_service.add_prerequisite("COURSE_ENG1001", "COURSE_CSC3001")
    assert await cache_service.get(RELATIONSHIPS_CACHE_KEY) is None

    await cache_service.set(RELATIONSHIPS_CACHE_KEY, {"stale": {}})
    await dependency_service.delete_prerequisite("COURSE_ENG1001", "COURSE_CSC3001")
    assert await cache_service.get(RELATIONSHIPS_CACHE_KEY) is None
