"""Pydantic request/response schemas for the FastAPI endpoints."""

from pydantic import BaseModel, Field


class RuleResponse(BaseModel):
    """A single keyword rule."""

    keyword: str
    assignee: str


class RulesResponse(BaseModel):
    """Response schema listing the loaded rule table."""

    count: int
    rules: list[RuleResponse]
    table_warning: str | None = None


class MatchRequest(BaseModel):
    """Request schema for matching already-recognized text."""

    text: str = Field(..., description="Recognized label text")


class ScanResponse(BaseModel):
    """Response schema for a scan or match request."""

    status: str
    assignee: str | None = None
    keyword: str | None = None
    method: str | None = None
    recognized_text: str
    focus_text: str
    confidence: float | None = None
    table_warning: str | None = None
    processing_time_ms: float = 0.0


class StateResponse(BaseModel):
    """Response schema for the scanner state."""

    state: str
    busy: bool


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
    rules_loaded: int
    table_warning: str | None = None
