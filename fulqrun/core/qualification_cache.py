"""Cached qualification scores on opportunity records.

The assessment is recomputed from stored responses and written back to
the opportunities table when:
1. An answer is set or cleared
2. The qualification is explicitly saved
3. An admin recalculates after a configuration change

When refreshed, this module writes:
1. The overall score and qualification level (for list views)
2. The full assessment JSON (for the opportunity header)
3. The flattened per-pillar summary columns (for legacy readers)

The assessment JSON carries a fingerprint of the configuration it was
computed under. Reading it under any other configuration is a cache miss.
"""

import hashlib
import logging
from datetime import UTC, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import ValidationError

from fulqrun.core.config import get_settings
from fulqrun.core.logging import get_logger, log_with_context
from fulqrun.core.qualification import (
    Assessment,
    QualificationConfig,
    ResponseStore,
    build_default_config,
    build_pillar_summaries,
    calculate_score,
    parse_pillar_summaries,
    validate_config,
)
from fulqrun.db.opportunities import get_opportunity, list_opportunity_refs, update_qualification
from fulqrun.db.qualification_configs import get_active_configuration
from fulqrun.db.qualification_responses import list_responses

logger = get_logger(__name__)

# Stored inside meddpicc_data next to the assessment fields
FINGERPRINT_KEY = "config_fingerprint"


def default_config() -> QualificationConfig:
    """Built-in configuration with settings-level scoring overrides."""
    settings = get_settings()
    return build_default_config(
        weighting=settings.QUALIFICATION_SCORE_WEIGHTING,
        attention_threshold=settings.QUALIFICATION_ATTENTION_THRESHOLD,
    )


def load_qualification_config(organization_id: Optional[UUID] = None) -> QualificationConfig:
    """
    Resolve the configuration for an organization.

    Falls back to the default configuration when the organization has none
    or its stored configuration no longer validates.
    """
    if organization_id is None:
        return default_config()

    record = get_active_configuration(organization_id)
    if not record or not record.get("configuration_data"):
        return default_config()

    try:
        config = QualificationConfig.model_validate(record["configuration_data"])
    except ValidationError as e:
        logger.warning(
            f"Stored configuration for organization {organization_id} is malformed, "
            f"using default: {e.error_count()} errors"
        )
        return default_config()

    validation = validate_config(config)
    if not validation.is_valid:
        logger.warning(
            f"Stored configuration for organization {organization_id} is invalid, "
            f"using default: {'; '.join(validation.errors)}"
        )
        return default_config()

    return config


def load_opportunity_store(
    opportunity_id: UUID,
    config: QualificationConfig,
    opportunity: Optional[dict[str, Any]] = None,
) -> ResponseStore:
    """
    Rehydrate the response store for an opportunity.

    Structured rows are authoritative. Opportunities saved before they
    existed are migrated on read from their summary columns.
    """
    store = ResponseStore(config)
    stored = list_responses(opportunity_id)

    if stored:
        store.load(stored)
        return store

    if opportunity is None:
        opportunity = get_opportunity(opportunity_id)
    if opportunity:
        legacy = parse_pillar_summaries(opportunity, config)
        if legacy:
            logger.info(
                f"Rehydrated {len(legacy)} responses from summary text for opportunity {opportunity_id}"
            )
            store.load(legacy)

    return store


def config_fingerprint(config: QualificationConfig) -> str:
    """Short content hash identifying the configuration a score was computed under."""
    return hashlib.sha256(config.model_dump_json().encode("utf-8")).hexdigest()[:16]


def build_cached_fields(assessment: Assessment, config: QualificationConfig) -> dict[str, Any]:
    """Columns written onto the opportunity record."""
    data = assessment.model_dump(mode="json")
    data[FINGERPRINT_KEY] = config_fingerprint(config)

    fields: dict[str, Any] = {
        "meddpicc_score": assessment.overall_score,
        "meddpicc_level": assessment.qualification_level.value,
        "meddpicc_data": data,
        "meddpicc_calculated_at": datetime.now(UTC).isoformat(),
    }
    fields.update(build_pillar_summaries(assessment.responses, config))
    return fields


def refresh_opportunity_qualification(
    opportunity_id: UUID,
    config: QualificationConfig,
    store: Optional[ResponseStore] = None,
) -> Assessment:
    """
    Recompute and cache the assessment for an opportunity.

    Args:
        opportunity_id: Opportunity UUID
        config: Qualification configuration
        store: Already-loaded store (loaded from the database when omitted)

    Returns:
        The freshly computed Assessment
    """
    if store is None:
        store = load_opportunity_store(opportunity_id, config)

    assessment = calculate_score(store.get_responses(), config)
    update_qualification(opportunity_id, build_cached_fields(assessment, config))

    log_with_context(
        logger,
        logging.INFO,
        "Refreshed qualification",
        opportunity_id=str(opportunity_id),
        score=assessment.overall_score,
        level=assessment.qualification_level.value,
    )
    return assessment


def get_cached_assessment(
    opportunity: Optional[dict[str, Any]],
    config: QualificationConfig,
) -> Optional[Assessment]:
    """
    Cached assessment from an opportunity record.

    Returns None when the cache is absent, unreadable, or was computed
    under a different configuration than ``config``.
    """
    if not opportunity:
        return None

    cached = opportunity.get("meddpicc_data")
    if not cached:
        return None

    if cached.get(FINGERPRINT_KEY) != config_fingerprint(config):
        logger.debug(f"Cached assessment on opportunity {opportunity.get('id')} predates current config")
        return None

    try:
        return Assessment.model_validate(cached)
    except ValidationError:
        logger.warning(f"Ignoring unreadable cached assessment on opportunity {opportunity.get('id')}")
        return None


def mark_cache_stale(opportunity_id: UUID) -> None:
    """Drop the cached assessment so the next read recomputes it."""
    update_qualification(opportunity_id, {"meddpicc_data": None})
    log_with_context(
        logger,
        logging.WARNING,
        "Cleared cached qualification",
        opportunity_id=str(opportunity_id),
    )


def recalculate_all(organization_id: Optional[UUID] = None) -> dict[str, int]:
    """
    Refresh every opportunity's cached score, e.g. after a config change.

    Each opportunity is scored under its own organization's configuration.
    Failures are counted and logged; one bad record does not stop the run.

    Returns:
        Dict with ``updated`` and ``errors`` counts
    """
    batch_size = get_settings().QUALIFICATION_RECALC_BATCH_SIZE
    configs: dict[Optional[str], QualificationConfig] = {}
    updated = 0
    errors = 0
    offset = 0

    while True:
        refs = list_opportunity_refs(organization_id, offset=offset, limit=batch_size)
        for ref in refs:
            org_id = ref.get("organization_id")
            try:
                if org_id not in configs:
                    configs[org_id] = load_qualification_config(UUID(str(org_id)) if org_id else None)
                refresh_opportunity_qualification(UUID(str(ref["id"])), configs[org_id])
                updated += 1
            except Exception:
                errors += 1
                logger.exception(f"Failed to recalculate qualification for {ref.get('id')}")

        if len(refs) < batch_size:
            break
        offset += batch_size

    log_with_context(
        logger,
        logging.INFO,
        "Recalculated qualification scores",
        organization_id=str(organization_id) if organization_id else "all",
        organizations=len(configs),
        updated=updated,
        errors=errors,
    )
    return {"updated": updated, "errors": errors}
