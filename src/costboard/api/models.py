"""
API data models for the cost proxy.
"""

from pydantic import BaseModel


class HealthCheck(BaseModel):
    status: str


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
    code: str | None = None
    requestId: str | None = None


class ProviderList(BaseModel):
    providers: list[str]
