"""
OM Spiritual Backend - Shared Response Schemas
===============================================

What:  Response shapes used across several routers: the error envelope, the
       bare success acknowledgement and the health report.
"""

from typing import Optional

from pydantic import BaseModel, Field


class SuccessResponse(BaseModel):
    """Acknowledgement for write endpoints that return no resource."""
    success: bool = Field(default=True)


class ErrorResponse(BaseModel):
    """
    What:  Error envelope produced by every global exception handler.

    Example:
        {
            "error": "forbidden",
            "message": "Admin role required",
            "request_id": "3f9c2a1b"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    gemini: str = Field(description="Gemini status: configured, not_configured, circuit_open")
    uptime_seconds: float = Field(description="Seconds since service started")
