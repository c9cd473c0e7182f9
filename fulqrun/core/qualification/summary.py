"""Flattened per-pillar text summaries stored on the opportunity record.

Each pillar column holds ``"<question text>: <answer>"`` blocks separated
by blank lines. The format is lossy: answers containing blank lines, or
question texts that are prefixes of each other, cannot be recovered
reliably. Structured responses are the primary store; parsing exists
only to migrate rows that predate it.
"""

from typing import Iterable, Optional

from fulqrun.core.logging import get_logger
from fulqrun.core.qualification.defaults import LEGACY_SUMMARY_COLUMNS
from fulqrun.core.qualification.registry import QualificationRegistry
from fulqrun.core.qualification.types import QualificationConfig, Response

logger = get_logger(__name__)

BLOCK_SEPARATOR = "\n\n"


def build_pillar_summary(
    pillar_id: str,
    responses: Iterable[Response],
    config: QualificationConfig,
) -> str:
    """Flatten one pillar's answers in question order."""
    registry = QualificationRegistry(config)
    by_question = {r.question_id: r for r in responses if r.pillar_id == pillar_id}

    blocks = []
    for question in registry.get_questions(pillar_id):
        response = by_question.get(question.id)
        if response is None or not str(response.answer).strip():
            continue
        blocks.append(f"{question.text}: {str(response.answer).strip()}")
    return BLOCK_SEPARATOR.join(blocks)


def build_pillar_summaries(
    responses: Iterable[Response],
    config: QualificationConfig,
    columns: Optional[dict[str, str]] = None,
) -> dict[str, str]:
    """Summary text for every mapped opportunity column (empty string if unanswered)."""
    columns = columns or LEGACY_SUMMARY_COLUMNS
    response_list = list(responses)
    return {
        column: build_pillar_summary(pillar_id, response_list, config)
        for column, pillar_id in columns.items()
    }


def parse_pillar_summary(
    text: Optional[str],
    pillar_id: str,
    config: QualificationConfig,
) -> list[Response]:
    """
    Best-effort reverse of ``build_pillar_summary``.

    Blocks whose prefix matches a question text are attributed to that
    question. Blocks with no match go to the pillar's first unanswered
    question, so free-form legacy notes still count. Points are left unset
    and resolved by the scorer.
    """
    if not text or not text.strip():
        return []

    registry = QualificationRegistry(config)
    questions = registry.get_questions(pillar_id)
    if not questions:
        logger.warning(f"Cannot parse summary for unknown pillar '{pillar_id}'")
        return []

    parsed: dict[str, Response] = {}
    unmatched: list[str] = []

    for block in (b.strip() for b in text.split(BLOCK_SEPARATOR)):
        if not block:
            continue

        question = next(
            (q for q in questions if block.startswith(f"{q.text}:")),
            None,
        )
        if question is None:
            unmatched.append(block)
            continue

        answer = block[len(question.text) + 1 :].strip()
        if not answer:
            continue
        if question.id in parsed:
            logger.warning(
                f"Duplicate summary block for {pillar_id}.{question.id}; keeping the last one"
            )
        parsed[question.id] = Response(pillar_id=pillar_id, question_id=question.id, answer=answer)

    for block in unmatched:
        target = next((q for q in questions if q.id not in parsed), None)
        if target is None:
            logger.warning(f"Dropped unattributable summary block in pillar '{pillar_id}'")
            continue
        logger.warning(
            f"Summary block without a question prefix attributed to {pillar_id}.{target.id}"
        )
        parsed[target.id] = Response(pillar_id=pillar_id, question_id=target.id, answer=block)

    return list(parsed.values())


def parse_pillar_summaries(
    record: dict,
    config: QualificationConfig,
    columns: Optional[dict[str, str]] = None,
) -> list[Response]:
    """Parse every mapped summary column of an opportunity record."""
    columns = columns or LEGACY_SUMMARY_COLUMNS
    responses: list[Response] = []
    for column, pillar_id in columns.items():
        responses.extend(parse_pillar_summary(record.get(column), pillar_id, config))
    return responses
