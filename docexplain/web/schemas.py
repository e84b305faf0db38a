from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class AnalyzeResponse(BaseModel):
    markdown: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class LimitReachedResponse(BaseModel):
    error: str
    message: str
    remaining: int = 0


class SaveResponseRequest(BaseModel):
    """Body of POST /api/responses/save. Required fields are checked by the route."""

    title: Optional[str] = None
    markdown_content: Optional[str] = None
    task_type: Optional[str] = None
    original_filename: Optional[str] = None
    instructions_used: Optional[str] = None
    neurodivergence_type_used: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class SavedResponseOut(BaseModel):
    id: str
    user_id: str
    title: str
    markdown_content: str
    task_type: str
    original_filename: Optional[str] = None
    instructions_used: Optional[str] = None
    neurodivergence_type_used: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SavedResponseEnvelope(BaseModel):
    response: SavedResponseOut


class SavedResponseList(BaseModel):
    responses: list[SavedResponseOut] = Field(default_factory=list)


class DeleteResult(BaseModel):
    success: bool


class HealthResponse(BaseModel):
    status: str
    provider: str
    limits: dict[str, int]
