"""In-memory response store for one qualification session."""

from typing import Iterable, Optional

from fulqrun.core.logging import get_logger
from fulqrun.core.qualification.registry import QualificationRegistry
from fulqrun.core.qualification.types import (
    AnswerValue,
    QualificationConfig,
    Response,
)
from fulqrun.core.qualification.utils import round_half_up

logger = get_logger(__name__)


def is_empty_answer(answer: Optional[AnswerValue]) -> bool:
    """None, empty and whitespace-only answers clear a response."""
    if answer is None:
        return True
    if isinstance(answer, str):
        return not answer.strip()
    return False


class ResponseStore:
    """Answers keyed by (pillar_id, question_id); setting a key replaces it.

    Concurrent edits resolve last-write-wins per key.
    """

    def __init__(self, config: Optional[QualificationConfig]):
        self.registry = QualificationRegistry(config)
        self._responses: dict[tuple[str, str], Response] = {}

    def set_answer(
        self,
        pillar_id: str,
        question_id: str,
        answer: Optional[AnswerValue],
        points: Optional[float] = None,
    ) -> None:
        key = (pillar_id, question_id)

        if is_empty_answer(answer):
            if self._responses.pop(key, None) is not None:
                logger.debug(f"Cleared response {pillar_id}.{question_id}")
            return

        question = self.registry.get_question(pillar_id, question_id)
        if question is None:
            logger.warning(f"Answer recorded for unknown question {pillar_id}.{question_id}")
        elif points is None and question.is_select:
            option = question.option_for(answer)
            if option is not None:
                points = option.points

        self._responses[key] = Response(
            pillar_id=pillar_id,
            question_id=question_id,
            answer=answer.strip() if isinstance(answer, str) else answer,
            points=points,
        )

    def get_responses(self) -> list[Response]:
        return list(self._responses.values())

    def get_response(self, pillar_id: str, question_id: str) -> Optional[Response]:
        return self._responses.get((pillar_id, question_id))

    def get_progress(self, pillar_id: str) -> int:
        """Percentage of the pillar's questions that have a response."""
        questions = self.registry.get_questions(pillar_id)
        if not questions:
            return 0
        answered = sum(1 for q in questions if (pillar_id, q.id) in self._responses)
        return round_half_up(answered / len(questions) * 100)

    def get_all_progress(self) -> dict[str, int]:
        return {pillar_id: self.get_progress(pillar_id) for pillar_id in self.registry.pillar_ids()}

    def load(self, responses: Iterable[Response]) -> None:
        """Rehydrate from persisted responses; later duplicates win."""
        for response in responses:
            self.set_answer(
                response.pillar_id, response.question_id, response.answer, response.points
            )

    def clear(self) -> None:
        self._responses.clear()

    def __len__(self) -> int:
        return len(self._responses)
