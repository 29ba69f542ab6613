"""
API response models shared by the application shell
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime


class HealthCheckResponse(BaseModel):
    """Health check response"""

    status: str = "healthy"
    version: str
    environment: str
    services: Dict[str, str]  # service_name -> status
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class ErrorResponse(BaseModel):
    """Standard error response"""

    error: str
    message: str
    code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    request_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)
