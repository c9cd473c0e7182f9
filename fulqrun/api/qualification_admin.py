"""Admin endpoints for per-organization qualification configuration."""

from datetime import UTC, datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query

from fulqrun.core.logging import get_logger
from fulqrun.core.qualification import (
    ConfigValidation,
    QualificationConfig,
    ensure_valid_config,
    validate_config,
)
from fulqrun.core.qualification_cache import (
    default_config,
    load_qualification_config,
    recalculate_all,
)
from fulqrun.core.schemas_qualification import (
    ConfigExport,
    ConfigSaveResult,
    ConfigUpdateRequest,
)
from fulqrun.db.qualification_configs import (
    deactivate_configurations,
    list_configuration_history,
    save_configuration,
)

logger = get_logger(__name__)

router = APIRouter()


def _save_validated(
    organization_id: UUID,
    config: QualificationConfig,
    changed_by: Optional[str],
    change_reason: Optional[str],
) -> ConfigSaveResult:
    validation = ensure_valid_config(config)

    try:
        save_configuration(
            organization_id,
            config.model_dump(mode="json"),
            changed_by=changed_by,
            change_reason=change_reason,
        )
    except Exception as e:
        logger.exception(f"Failed to save configuration for organization {organization_id}")
        raise HTTPException(status_code=500, detail="Failed to save configuration") from e

    if validation.warnings:
        logger.info(
            f"Saved configuration for organization {organization_id} with warnings: "
            f"{'; '.join(validation.warnings)}"
        )
    return ConfigSaveResult(configuration=config, validation=validation)


@router.get("", response_model=QualificationConfig)
async def get_configuration(organization_id: UUID = Query(...)) -> QualificationConfig:
    """Get the configuration in effect for an organization."""
    try:
        return load_qualification_config(organization_id)
    except Exception as e:
        logger.exception(f"Failed to load configuration for organization {organization_id}")
        raise HTTPException(status_code=500, detail="Failed to load configuration") from e


@router.put("", response_model=ConfigSaveResult)
async def update_configuration(
    request: ConfigUpdateRequest,
    organization_id: UUID = Query(...),
) -> ConfigSaveResult:
    """Validate and store a new active configuration (400 with errors if invalid)."""
    return _save_validated(
        organization_id, request.configuration, request.changed_by, request.change_reason
    )


@router.post("/validate", response_model=ConfigValidation)
async def validate_configuration(config: QualificationConfig) -> ConfigValidation:
    """Dry-run validation of a configuration."""
    return validate_config(config)


@router.post("/reset", response_model=QualificationConfig)
async def reset_configuration(
    organization_id: UUID = Query(...),
    changed_by: Optional[str] = Query(None),
) -> QualificationConfig:
    """Drop the organization's configuration and return the default."""
    try:
        deactivate_configurations(organization_id, changed_by=changed_by)
    except Exception as e:
        logger.exception(f"Failed to reset configuration for organization {organization_id}")
        raise HTTPException(status_code=500, detail="Failed to reset configuration") from e
    return default_config()


@router.get("/history")
async def get_configuration_history(
    organization_id: UUID = Query(...),
    limit: int = Query(50, ge=1, le=200),
) -> list[dict]:
    """Recent configuration changes, newest first."""
    try:
        return list_configuration_history(organization_id, limit=limit)
    except Exception as e:
        logger.exception(f"Failed to list configuration history for {organization_id}")
        raise HTTPException(status_code=500, detail="Failed to list configuration history") from e


@router.get("/export", response_model=ConfigExport)
async def export_configuration(organization_id: UUID = Query(...)) -> ConfigExport:
    """Export the configuration in effect as a portable document."""
    try:
        config = load_qualification_config(organization_id)
    except Exception as e:
        logger.exception(f"Failed to export configuration for organization {organization_id}")
        raise HTTPException(status_code=500, detail="Failed to export configuration") from e

    return ConfigExport(
        configuration=config,
        exported_at=datetime.now(UTC).isoformat(),
        organization_id=organization_id,
    )


@router.post("/import", response_model=ConfigSaveResult)
async def import_configuration(
    document: ConfigExport,
    organization_id: UUID = Query(...),
    changed_by: Optional[str] = Query(None),
) -> ConfigSaveResult:
    """Import an exported configuration into an organization."""
    return _save_validated(
        organization_id,
        document.configuration,
        changed_by,
        f"Imported from export of {document.exported_at}",
    )


@router.post("/recalculate")
async def recalculate_scores(organization_id: Optional[UUID] = Query(None)) -> dict[str, int]:
    """
    Refresh cached scores after a configuration change.

    Without organization_id every opportunity is rescored under its own
    organization's configuration.
    """
    try:
        return recalculate_all(organization_id)
    except Exception as e:
        logger.exception("Failed to recalculate qualification scores")
        raise HTTPException(status_code=500, detail="Failed to recalculate scores") from e
