"""Structured MEDDPICC responses, one row per (opportunity, pillar, question)."""

from typing import Any
from uuid import UUID

from fulqrun.core.logging import get_logger
from fulqrun.core.qualification.types import Response
from fulqrun.db.supabase_client import get_supabase

logger = get_logger(__name__)

TABLE = "meddpicc_responses"
CONFLICT_KEY = "opportunity_id,pillar_id,question_id"


def _to_row(opportunity_id: UUID, response: Response) -> dict[str, Any]:
    return {
        "opportunity_id": str(opportunity_id),
        "pillar_id": response.pillar_id,
        "question_id": response.question_id,
        "answer": str(response.answer),
        "points": response.points,
        "updated_at": "now()",
    }


def _from_row(row: dict[str, Any]) -> Response:
    return Response(
        pillar_id=row["pillar_id"],
        question_id=row["question_id"],
        answer=row.get("answer") or "",
        points=row.get("points"),
    )


def list_responses(opportunity_id: UUID) -> list[Response]:
    """
    List stored responses for an opportunity.

    Args:
        opportunity_id: Opportunity UUID

    Returns:
        Responses in storage order
    """
    supabase = get_supabase()

    try:
        result = (
            supabase.table(TABLE)
            .select("*")
            .eq("opportunity_id", str(opportunity_id))
            .execute()
        )
        return [_from_row(row) for row in (result.data or [])]

    except Exception as e:
        logger.error(f"Failed to list responses for opportunity {opportunity_id}: {e}")
        raise RuntimeError(f"Supabase error reading {TABLE}: {str(e)}") from e


def upsert_response(opportunity_id: UUID, response: Response) -> dict[str, Any]:
    """
    Insert or replace one response (last write wins on the key).

    Returns:
        Stored row as dict
    """
    supabase = get_supabase()

    try:
        result = (
            supabase.table(TABLE)
            .upsert(_to_row(opportunity_id, response), on_conflict=CONFLICT_KEY)
            .execute()
        )
        if not result.data:
            raise RuntimeError("Failed to upsert response")

        logger.debug(
            f"Upserted response {response.pillar_id}.{response.question_id} "
            f"for opportunity {opportunity_id}"
        )
        return result.data[0]

    except Exception as e:
        logger.error(f"Failed to upsert response for opportunity {opportunity_id}: {e}")
        raise RuntimeError(f"Supabase error upserting {TABLE}: {str(e)}") from e


def delete_response(opportunity_id: UUID, pillar_id: str, question_id: str) -> None:
    """Remove one response if present."""
    supabase = get_supabase()

    try:
        (
            supabase.table(TABLE)
            .delete()
            .eq("opportunity_id", str(opportunity_id))
            .eq("pillar_id", pillar_id)
            .eq("question_id", question_id)
            .execute()
        )
    except Exception as e:
        logger.error(f"Failed to delete response for opportunity {opportunity_id}: {e}")
        raise RuntimeError(f"Supabase error deleting {TABLE}: {str(e)}") from e


def replace_responses(opportunity_id: UUID, responses: list[Response]) -> int:
    """
    Replace the full response set for an opportunity.

    New rows are upserted before stale rows are removed, so a failed write
    leaves the previously stored answers in place.

    Returns:
        Number of rows written
    """
    supabase = get_supabase()
    keep = {r.key for r in responses}
    written = 0

    try:
        if responses:
            rows = [_to_row(opportunity_id, r) for r in responses]
            result = supabase.table(TABLE).upsert(rows, on_conflict=CONFLICT_KEY).execute()
            written = len(result.data or [])

        existing = (
            supabase.table(TABLE)
            .select("pillar_id, question_id")
            .eq("opportunity_id", str(opportunity_id))
            .execute()
        )
        stale = [
            (row["pillar_id"], row["question_id"])
            for row in (existing.data or [])
            if (row["pillar_id"], row["question_id"]) not in keep
        ]
        for pillar_id, question_id in stale:
            (
                supabase.table(TABLE)
                .delete()
                .eq("opportunity_id", str(opportunity_id))
                .eq("pillar_id", pillar_id)
                .eq("question_id", question_id)
                .execute()
            )

        logger.info(
            f"Replaced responses for opportunity {opportunity_id}: "
            f"{written} written, {len(stale)} removed"
        )
        return written

    except Exception as e:
        logger.error(f"Failed to replace responses for opportunity {opportunity_id}: {e}")
        raise RuntimeError(f"Supabase error replacing {TABLE}: {str(e)}") from e
