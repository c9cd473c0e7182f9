"""API endpoints for MEDDPICC qualification scoring and stage gates."""

from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query

from fulqrun.core.logging import get_logger
from fulqrun.core.qualification import (
    Assessment,
    QualificationConfig,
    ResponseStore,
    StageStatus,
    StageTransitionError,
    calculate_score,
    evaluate_stage_status,
    validate_responses,
    validate_stage_transition,
)
from fulqrun.core.qualification_cache import (
    get_cached_assessment,
    load_opportunity_store,
    load_qualification_config,
    mark_cache_stale,
    refresh_opportunity_qualification,
)
from fulqrun.core.schemas_qualification import (
    AnswerUpdate,
    QualificationState,
    SaveResult,
    ScoreRequest,
    StageTransitionRequest,
    StageTransitionResult,
    ValidateResponse,
)
from fulqrun.db.opportunities import get_opportunity
from fulqrun.db.qualification_responses import (
    delete_response,
    replace_responses,
    upsert_response,
)

logger = get_logger(__name__)

router = APIRouter()

DEFAULT_STAGE = "prospecting"


def _load_opportunity(
    opportunity_id: UUID,
    organization_id: Optional[UUID],
) -> tuple[dict[str, Any], QualificationConfig]:
    """Fetch the opportunity and the configuration that applies to it."""
    opportunity = get_opportunity(opportunity_id)
    if opportunity is None:
        raise HTTPException(status_code=404, detail="Opportunity not found")

    org_id = organization_id or opportunity.get("organization_id")
    config = load_qualification_config(UUID(str(org_id)) if org_id else None)
    return opportunity, config


def _refresh_or_mark_stale(
    opportunity_id: UUID,
    config: QualificationConfig,
    store: ResponseStore,
) -> Assessment:
    """Refresh the cached score after responses were written.

    On failure the cached assessment is cleared before the error propagates.
    """
    try:
        return refresh_opportunity_qualification(opportunity_id, config, store)
    except Exception:
        try:
            mark_cache_stale(opportunity_id)
        except Exception:
            logger.exception(f"Failed to clear cached qualification for opportunity {opportunity_id}")
        raise


# =============================================================================
# Stateless scoring
# =============================================================================


@router.get("/qualification/config", response_model=QualificationConfig)
async def get_qualification_config(
    organization_id: Optional[UUID] = Query(None, description="Organization whose config to load"),
) -> QualificationConfig:
    """Get the pillar, question and stage-gate configuration."""
    try:
        return load_qualification_config(organization_id)
    except Exception as e:
        logger.exception("Failed to load qualification configuration")
        raise HTTPException(
            status_code=500, detail="Failed to load qualification configuration"
        ) from e


@router.post("/qualification/score", response_model=Assessment)
async def score_responses(request: ScoreRequest) -> Assessment:
    """Score a set of responses without persisting anything."""
    try:
        config = load_qualification_config(request.organization_id)
    except Exception as e:
        logger.exception("Failed to load qualification configuration")
        raise HTTPException(
            status_code=500, detail="Failed to load qualification configuration"
        ) from e

    return calculate_score(request.responses, config)


@router.post("/qualification/validate", response_model=ValidateResponse)
async def validate_qualification(request: ScoreRequest) -> ValidateResponse:
    """Check responses for required, length and option problems."""
    try:
        config = load_qualification_config(request.organization_id)
    except Exception as e:
        logger.exception("Failed to load qualification configuration")
        raise HTTPException(
            status_code=500, detail="Failed to load qualification configuration"
        ) from e

    issues = validate_responses(request.responses, config)
    return ValidateResponse(is_valid=not issues, issues=issues)


# =============================================================================
# Opportunity qualification
# =============================================================================


@router.get("/opportunities/{opportunity_id}/qualification", response_model=QualificationState)
async def get_opportunity_qualification(
    opportunity_id: UUID,
    organization_id: Optional[UUID] = Query(None),
    force_refresh: bool = Query(False, description="Recompute instead of returning the cached score"),
) -> QualificationState:
    """
    Get responses, progress and assessment for an opportunity.

    By default the cached assessment on the opportunity is returned when
    present. Pass force_refresh=true to recompute from stored responses.
    """
    try:
        opportunity, config = _load_opportunity(opportunity_id, organization_id)
        store = load_opportunity_store(opportunity_id, config, opportunity)

        source = "calculated"
        assessment = None
        if not force_refresh:
            assessment = get_cached_assessment(opportunity, config)
            if assessment is not None:
                source = "cache"
        if assessment is None:
            assessment = calculate_score(store.get_responses(), config)

        return QualificationState(
            opportunity_id=str(opportunity_id),
            responses=store.get_responses(),
            progress=store.get_all_progress(),
            assessment=assessment,
            source=source,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to load qualification for opportunity {opportunity_id}")
        raise HTTPException(status_code=500, detail="Failed to load qualification") from e


@router.put(
    "/opportunities/{opportunity_id}/qualification/answers",
    response_model=QualificationState,
)
async def set_opportunity_answer(
    opportunity_id: UUID,
    update: AnswerUpdate,
    organization_id: Optional[UUID] = Query(None),
) -> QualificationState:
    """
    Set or clear one answer, persist it and refresh the cached score.

    Unknown pillar or question ids are rejected with 400.
    """
    try:
        opportunity, config = _load_opportunity(opportunity_id, organization_id)
        store = load_opportunity_store(opportunity_id, config, opportunity)

        if store.registry.get_question(update.pillar_id, update.question_id) is None:
            raise HTTPException(
                status_code=400,
                detail=f"Unknown question: {update.pillar_id}.{update.question_id}",
            )

        store.set_answer(update.pillar_id, update.question_id, update.answer, update.points)

        response = store.get_response(update.pillar_id, update.question_id)
        if response is None:
            delete_response(opportunity_id, update.pillar_id, update.question_id)
        else:
            upsert_response(opportunity_id, response)

        assessment = _refresh_or_mark_stale(opportunity_id, config, store)

        return QualificationState(
            opportunity_id=str(opportunity_id),
            responses=store.get_responses(),
            progress=store.get_all_progress(),
            assessment=assessment,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to update answer for opportunity {opportunity_id}")
        raise HTTPException(status_code=500, detail="Failed to update answer") from e


@router.post("/opportunities/{opportunity_id}/qualification/save", response_model=SaveResult)
async def save_opportunity_qualification(
    opportunity_id: UUID,
    request: ScoreRequest,
) -> SaveResult:
    """
    Replace an opportunity's responses and cache the resulting score.

    Validation issues are reported alongside the result; they do not
    prevent saving a partially completed qualification.
    """
    try:
        _, config = _load_opportunity(opportunity_id, request.organization_id)
        store = ResponseStore(config)
        store.load(request.responses)

        issues = validate_responses(store.get_responses(), config)

        replace_responses(opportunity_id, store.get_responses())
        assessment = _refresh_or_mark_stale(opportunity_id, config, store)

        return SaveResult(assessment=assessment, issues=issues)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to save qualification for opportunity {opportunity_id}")
        raise HTTPException(status_code=500, detail="Failed to save qualification") from e


# =============================================================================
# Stage gates
# =============================================================================


def _current_assessment(
    opportunity_id: UUID,
    opportunity: dict[str, Any],
    config: QualificationConfig,
) -> Assessment:
    cached = get_cached_assessment(opportunity, config)
    if cached is not None:
        return cached
    store = load_opportunity_store(opportunity_id, config, opportunity)
    return calculate_score(store.get_responses(), config)


@router.get("/opportunities/{opportunity_id}/stage-status", response_model=StageStatus)
async def get_stage_status(
    opportunity_id: UUID,
    current_stage: Optional[str] = Query(None, description="Defaults to the opportunity's stage"),
    organization_id: Optional[UUID] = Query(None),
) -> StageStatus:
    """Criteria checklist for moving the opportunity to its next stage."""
    try:
        opportunity, config = _load_opportunity(opportunity_id, organization_id)
        stage = current_stage or opportunity.get("peak_stage") or DEFAULT_STAGE
        assessment = _current_assessment(opportunity_id, opportunity, config)
        return evaluate_stage_status(stage, assessment, config)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to evaluate stage status for opportunity {opportunity_id}")
        raise HTTPException(status_code=500, detail="Failed to evaluate stage status") from e


@router.post(
    "/opportunities/{opportunity_id}/stage-transition",
    response_model=StageTransitionResult,
)
async def check_stage_transition(
    opportunity_id: UUID,
    request: StageTransitionRequest,
    organization_id: Optional[UUID] = Query(None),
) -> StageTransitionResult:
    """
    Check whether a stage transition is permitted.

    The transition itself is owned by the opportunity record; this only
    answers yes (200) or no (409 with the blocking reason).
    """
    try:
        opportunity, config = _load_opportunity(opportunity_id, organization_id)
        assessment = _current_assessment(opportunity_id, opportunity, config)
        validate_stage_transition(
            request.current_stage,
            request.target_stage,
            assessment,
            config,
            force=request.force,
        )

    except StageTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to check stage transition for opportunity {opportunity_id}")
        raise HTTPException(status_code=500, detail="Failed to check stage transition") from e

    return StageTransitionResult(
        allowed=True,
        current_stage=request.current_stage,
        target_stage=request.target_stage,
    )
