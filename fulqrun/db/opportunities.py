"""Opportunity record access for qualification fields."""

from typing import Any
from uuid import UUID

from fulqrun.core.logging import get_logger
from fulqrun.db.supabase_client import get_supabase

logger = get_logger(__name__)


def get_opportunity(opportunity_id: UUID) -> dict[str, Any] | None:
    """
    Get an opportunity record.

    Args:
        opportunity_id: Opportunity UUID

    Returns:
        Opportunity record as dict or None if not found
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("opportunities")
            .select("*")
            .eq("id", str(opportunity_id))
            .execute()
        )
        return response.data[0] if response.data else None

    except Exception as e:
        logger.error(f"Failed to get opportunity {opportunity_id}: {e}")
        raise RuntimeError(f"Supabase error reading opportunities: {str(e)}") from e


def list_opportunity_refs(
    organization_id: UUID | None, offset: int = 0, limit: int = 200
) -> list[dict[str, Any]]:
    """
    Page through opportunities, optionally within one organization.

    Returns:
        Rows with ``id`` and ``organization_id`` only
    """
    supabase = get_supabase()

    try:
        query = supabase.table("opportunities").select("id, organization_id")
        if organization_id is not None:
            query = query.eq("organization_id", str(organization_id))
        response = query.order("created_at").range(offset, offset + limit - 1).execute()
        return response.data or []

    except Exception as e:
        logger.error(f"Failed to list opportunities: {e}")
        raise RuntimeError(f"Supabase error listing opportunities: {str(e)}") from e


def update_qualification(opportunity_id: UUID, fields: dict[str, Any]) -> dict[str, Any]:
    """
    Write cached qualification fields onto an opportunity.

    Args:
        opportunity_id: Opportunity UUID
        fields: Columns to update (score, level, data, summaries)

    Returns:
        Updated record as dict
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("opportunities")
            .update(fields)
            .eq("id", str(opportunity_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Opportunity not found")

        logger.info(f"Updated qualification fields for opportunity {opportunity_id}")
        return response.data[0]

    except Exception as e:
        logger.error(f"Failed to update opportunity {opportunity_id}: {e}")
        raise RuntimeError(f"Supabase error updating opportunities: {str(e)}") from e
