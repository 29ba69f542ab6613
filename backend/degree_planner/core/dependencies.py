"""
Dependency injection setup for the Degree Planner
Manages store handles and service lifecycle
"""

from functools import lru_cache
from typing import Optional
import redis.asyncio as redis
import logging

from .config import get_settings, CacheBackend, GraphBackend
from ..graph.neo4j_client import Neo4jClient
from ..services.interfaces import CacheServiceInterface
from ..services.cache_service import RedisCacheService
from ..services.memory_cache_service import MemoryCacheService
from ..services.course_service import CourseService
from ..services.dependency_service import DependencyGraphService
from ..services.eligibility_service import EligibilityService
from ..services.plan_service import PlanService

# Import repositories
from ..repositories.interfaces import CourseRepositoryInterface, PlanRepositoryInterface
from ..repositories.memory_course_repository import MemoryCourseRepository
from ..repositories.memory_plan_repository import MemoryPlanRepository
from ..repositories.neo4j_course_repository import Neo4jCourseRepository

logger = logging.getLogger(__name__)


# Store Dependencies
@lru_cache()
def get_redis_pool():
    """Get Redis connection pool"""
    settings = get_settings()
    if settings.redis_url.startswith("redis://"):
        return redis.from_url(settings.redis_url)
    else:
        # For testing or memory-based scenarios
        return None


@lru_cache()
def get_neo4j_client() -> Optional[Neo4jClient]:
    """Get the graph store client; None when the graph lives in memory"""
    settings = get_settings()
    if settings.graph_backend != GraphBackend.NEO4J:
        return None
    return Neo4jClient.from_settings(settings)


# Repository Dependencies
@lru_cache()
def get_course_repository() -> CourseRepositoryInterface:
    """Get course repository instance"""
    settings = get_settings()
    if settings.graph_backend == GraphBackend.NEO4J:
        return Neo4jCourseRepository(get_neo4j_client())
    return MemoryCourseRepository(catalog_path=settings.course_catalog_path)


@lru_cache()
def get_plan_repository() -> PlanRepositoryInterface:
    """Get degree plan repository instance"""
    settings = get_settings()
    if settings.plan_backend != "memory":
        raise ValueError(f"Unsupported plan backend: {settings.plan_backend}")
    return MemoryPlanRepository()


# Service Dependencies
@lru_cache()
def get_cache_service() -> CacheServiceInterface:
    """Get cache service instance"""
    settings = get_settings()
    if settings.cache_backend == CacheBackend.MEMORY:
        return MemoryCacheService(settings)
    return RedisCacheService(get_redis_pool(), settings)


@lru_cache()
def get_course_service() -> CourseService:
    return CourseService(
        course_repository=get_course_repository(),
        settings=get_settings(),
        cache_service=get_cache_service(),
    )


@lru_cache()
def get_dependency_service() -> DependencyGraphService:
    return DependencyGraphService(
        course_repository=get_course_repository(),
        cache_service=get_cache_service(),
    )


@lru_cache()
def get_plan_service() -> PlanService:
    return PlanService(
        plan_repository=get_plan_repository(),
        course_repository=get_course_repository(),
    )


@lru_cache()
def get_eligibility_service() -> EligibilityService:
    return EligibilityService(
        course_repository=get_course_repository(),
        plan_repository=get_plan_repository(),
        settings=get_settings(),
        cache_service=get_cache_service(),
    )


# Health Check Dependencies
async def get_service_health() -> dict:
    """Get health status of all services"""
    health_status = {
        "graph": "unknown",
        "cache": "unknown",
    }

    try:
        client = get_neo4j_client()
        if client:
            await client.verify_connectivity()
            health_status["graph"] = "healthy"
        else:
            health_status["graph"] = "in-memory"
    except Exception as e:
        health_status["graph"] = f"unhealthy: {str(e)}"

    try:
        cache_service = get_cache_service()
        if await cache_service.ping():
            health_status["cache"] = "healthy"
        else:
            health_status["cache"] = "disabled"
    except Exception as e:
        health_status["cache"] = f"unhealthy: {str(e)}"

    return health_status


# Cleanup function for application shutdown
async def cleanup_resources():
    """Cleanup resources on application shutdown"""
    try:
        redis_pool = get_redis_pool()
        if redis_pool:
            await redis_pool.close()
    except Exception as e:
        logger.error(f"Error cleaning up Redis: {e}")

    try:
        client = get_neo4j_client()
        if client:
            await client.close()
    except Exception as e:
        logger.error(f"Error closing Neo4j driver: {e}")

    # Clear caches
    get_redis_pool.cache_clear()
    get_neo4j_client.cache_clear()
    get_course_repository.cache_clear()
    get_plan_repository.cache_clear()
    get_cache_service.cache_clear()
    get_course_service.cache_clear()
    get_dependency_service.cache_clear()
    get_plan_service.cache_clear()
    get_eligibility_service.cache_clear()
