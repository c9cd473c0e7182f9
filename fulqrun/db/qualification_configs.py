"""Per-organization qualification configuration storage with history."""

from typing import Any
from uuid import UUID

from fulqrun.core.logging import get_logger
from fulqrun.db.supabase_client import get_supabase

logger = get_logger(__name__)

TABLE = "meddpicc_configurations"
HISTORY_TABLE = "meddpicc_configuration_history"


def get_active_configuration(organization_id: UUID) -> dict[str, Any] | None:
    """
    Get the active configuration record for an organization.

    Returns:
        Record with a ``configuration_data`` JSON column, or None
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table(TABLE)
            .select("*")
            .eq("organization_id", str(organization_id))
            .eq("is_active", True)
            .execute()
        )
        return response.data[0] if response.data else None

    except Exception as e:
        logger.error(f"Failed to get configuration for organization {organization_id}: {e}")
        raise RuntimeError(f"Supabase error reading {TABLE}: {str(e)}") from e


def save_configuration(
    organization_id: UUID,
    configuration_data: dict[str, Any],
    changed_by: str | None = None,
    change_reason: str | None = None,
) -> dict[str, Any]:
    """
    Store a configuration as the organization's active one and record history.

    Returns:
        Stored configuration record
    """
    supabase = get_supabase()
    previous = get_active_configuration(organization_id)

    try:
        response = (
            supabase.table(TABLE)
            .upsert(
                {
                    "organization_id": str(organization_id),
                    "name": configuration_data.get("project_name") or "MEDDPICC",
                    "version": configuration_data.get("version") or "1.0",
                    "configuration_data": configuration_data,
                    "is_active": True,
                    "updated_at": "now()",
                },
                on_conflict="organization_id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save configuration")

        record = response.data[0]

        supabase.table(HISTORY_TABLE).insert(
            {
                "configuration_id": record.get("id"),
                "organization_id": str(organization_id),
                "change_type": "update" if previous else "create",
                "previous_data": previous.get("configuration_data") if previous else None,
                "new_data": configuration_data,
                "changed_by": changed_by,
                "change_reason": change_reason,
            }
        ).execute()

        logger.info(f"Saved qualification configuration for organization {organization_id}")
        return record

    except Exception as e:
        logger.error(f"Failed to save configuration for organization {organization_id}: {e}")
        raise RuntimeError(f"Supabase error saving {TABLE}: {str(e)}") from e


def deactivate_configurations(organization_id: UUID, changed_by: str | None = None) -> None:
    """Deactivate the organization's configuration so the default applies."""
    supabase = get_supabase()
    previous = get_active_configuration(organization_id)

    try:
        (
            supabase.table(TABLE)
            .update({"is_active": False, "updated_at": "now()"})
            .eq("organization_id", str(organization_id))
            .execute()
        )
        if previous:
            supabase.table(HISTORY_TABLE).insert(
                {
                    "configuration_id": previous.get("id"),
                    "organization_id": str(organization_id),
                    "change_type": "reset",
                    "previous_data": previous.get("configuration_data"),
                    "new_data": None,
                    "changed_by": changed_by,
                }
            ).execute()
        logger.info(f"Reset qualification configuration for organization {organization_id}")

    except Exception as e:
        logger.error(f"Failed to reset configuration for organization {organization_id}: {e}")
        raise RuntimeError(f"Supabase error resetting {TABLE}: {str(e)}") from e


def list_configuration_history(organization_id: UUID, limit: int = 50) -> list[dict[str, Any]]:
    """Most recent configuration changes first."""
    supabase = get_supabase()

    try:
        response = (
            supabase.table(HISTORY_TABLE)
            .select("*")
            .eq("organization_id", str(organization_id))
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return response.data or []

    except Exception as e:
        logger.error(f"Failed to list configuration history for {organization_id}: {e}")
        raise RuntimeError(f"Supabase error reading {HISTORY_TABLE}: {str(e)}") from e
