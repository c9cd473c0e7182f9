"""Read-only lookup over a qualification configuration."""

from typing import Optional

from fulqrun.core.qualification.types import (
    LITMUS_PILLAR_ID,
    LitmusTest,
    Pillar,
    QualificationConfig,
    Question,
)


class QualificationRegistry:
    """Pillar and question lookups for one configuration.

    A missing configuration behaves as zero pillars and an empty litmus test.
    """

    def __init__(self, config: Optional[QualificationConfig]):
        self.config = config
        self._pillars: dict[str, Pillar] = (
            {p.id: p for p in config.pillars} if config else {}
        )

    def get_pillars(self) -> list[Pillar]:
        return list(self._pillars.values())

    def get_litmus_test(self) -> LitmusTest:
        if self.config is None:
            return LitmusTest()
        return self.config.litmus_test

    def get_pillar(self, pillar_id: str) -> Optional[Pillar]:
        return self._pillars.get(pillar_id)

    def get_questions(self, pillar_id: str) -> list[Question]:
        """Questions for a pillar id, including the litmus pseudo-pillar."""
        if pillar_id == LITMUS_PILLAR_ID:
            return self.get_litmus_test().questions
        pillar = self._pillars.get(pillar_id)
        return pillar.questions if pillar else []

    def get_question(self, pillar_id: str, question_id: str) -> Optional[Question]:
        for question in self.get_questions(pillar_id):
            if question.id == question_id:
                return question
        return None

    def pillar_ids(self) -> list[str]:
        """Every id a response may carry: pillars plus litmus."""
        return [*self._pillars.keys(), LITMUS_PILLAR_ID]
