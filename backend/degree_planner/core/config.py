"""
Core configuration management for the Degree Planner
Supports multiple environments and pluggable graph/cache backends
"""

import os
from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings as PydanticBaseSettings
from pydantic_settings import SettingsConfigDict


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class GraphBackend(str, Enum):
    NEO4J = "neo4j"
    MEMORY = "memory"


class CacheBackend(str, Enum):
    REDIS = "redis"
    MEMORY = "memory"


class BaseSettings(PydanticBaseSettings):
    """Base configuration settings"""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    # Application
    app_name: str = "DegreePlanner"
    app_version: str = "1.0.0"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Graph store (course catalog)
    graph_backend: GraphBackend = GraphBackend.NEO4J
    neo4j_uri: str = "neo4j://127.0.0.1:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: Optional[str] = None
    neo4j_database: Optional[str] = None

    # Relational store (degree plans); only the in-memory reader ships here
    plan_backend: str = "memory"

    # Caching
    cache_backend: CacheBackend = CacheBackend.REDIS
    redis_url: str = "redis://localhost:6379"
    cache_ttl_seconds: int = 3600  # 1 hour

    # Catalog queries
    default_page_size: int = 10
    search_result_limit: int = 50

    # Optional CSV catalog used to seed the in-memory graph
    course_catalog_path: Optional[str] = None


class DevelopmentSettings(BaseSettings):
    """Development environment settings"""

    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True
    log_level: str = "DEBUG"

    # Local services
    neo4j_password: Optional[str] = "degree-planner"
    redis_url: str = "redis://localhost:6379"


class TestingSettings(BaseSettings):
    """Testing environment settings"""

    environment: Environment = Environment.TESTING
    debug: bool = True

    # In-memory for testing
    graph_backend: GraphBackend = GraphBackend.MEMORY
    cache_backend: CacheBackend = CacheBackend.MEMORY
    redis_url: str = ""

    # Fast testing
    cache_ttl_seconds: int = 1


class ProductionSettings(BaseSettings):
    """Staging/production settings"""

    environment: Environment = Environment.PRODUCTION
    debug: bool = False
    log_level: str = "INFO"


@lru_cache()
def get_settings() -> BaseSettings:
    """
    Get settings based on environment variable
    Cached for performance
    """
    environment = Environment(os.getenv("ENVIRONMENT", "development"))

    if environment == Environment.TESTING:
        return TestingSettings()
    elif environment == Environment.DEVELOPMENT:
        return DevelopmentSettings()
    elif environment in [Environment.STAGING, Environment.PRODUCTION]:
        return ProductionSettings(environment=environment)
    else:
        return DevelopmentSettings()


# Configuration validation
def validate_configuration(settings: Optional[BaseSettings] = None):
    """Validate that all required configuration is present"""
    settings = settings or get_settings()
    errors = []

    if settings.graph_backend == GraphBackend.NEO4J:
        if not settings.neo4j_uri:
            errors.append("NEO4J_URI is required for the neo4j graph backend")
        if not settings.neo4j_password:
            errors.append("NEO4J_PASSWORD is required for the neo4j graph backend")

    if settings.cache_backend == CacheBackend.REDIS and not settings.redis_url:
        errors.append("REDIS_URL is required for the redis cache backend")

    if settings.default_page_size <= 0:
        errors.append("DEFAULT_PAGE_SIZE must be positive")

    if settings.course_catalog_path and not os.path.exists(
        settings.course_catalog_path
    ):
        errors.append(f"COURSE_CATALOG_PATH not found: {settings.course_catalog_path}")

    if errors:
        raise ValueError(f"Configuration errors: {', '.join(errors)}")

    return True
