"""Pydantic schemas for the qualification API."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from fulqrun.core.qualification.types import (
    AnswerValue,
    Assessment,
    ConfigValidation,
    QualificationConfig,
    Response,
    ValidationIssue,
)


class ScoreRequest(BaseModel):
    responses: list[Response] = Field(default_factory=list)
    organization_id: Optional[UUID] = None


class AnswerUpdate(BaseModel):
    """Set one answer; an empty or null answer clears it."""

    pillar_id: str = Field(..., min_length=1)
    question_id: str = Field(..., min_length=1)
    answer: Optional[AnswerValue] = None
    points: Optional[float] = None


class QualificationState(BaseModel):
    opportunity_id: str
    responses: list[Response] = Field(default_factory=list)
    progress: dict[str, int] = Field(default_factory=dict, description="Pillar id → % answered")
    assessment: Assessment
    source: str = Field(default="calculated", description="'cache' or 'calculated'")


class SaveResult(BaseModel):
    assessment: Assessment
    issues: list[ValidationIssue] = Field(default_factory=list)
    saved: bool = True


class ValidateResponse(BaseModel):
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)


class StageTransitionRequest(BaseModel):
    current_stage: str = Field(..., min_length=1)
    target_stage: str = Field(..., min_length=1)
    force: bool = False


class StageTransitionResult(BaseModel):
    allowed: bool
    current_stage: str
    target_stage: str


class ConfigUpdateRequest(BaseModel):
    configuration: QualificationConfig
    changed_by: Optional[str] = None
    change_reason: Optional[str] = None


class ConfigExport(BaseModel):
    configuration: QualificationConfig
    exported_at: str
    organization_id: Optional[UUID] = None


class ConfigSaveResult(BaseModel):
    configuration: QualificationConfig
    validation: ConfigValidation
