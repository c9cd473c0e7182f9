"""Qualification scoring.

This module turns a list of responses into an Assessment by:
1. Scoring each answered question (text heuristic or option points)
2. Normalizing per-pillar totals to 0-100
3. Aggregating the overall score (equal mean unless configured as weighted)
4. Bucketing the qualification level
5. Deriving next actions and stage-gate readiness

Everything here is pure: no I/O, no hidden state.
"""

from typing import Iterable, Optional

from fulqrun.core.qualification.gates import evaluate_stage_gates
from fulqrun.core.qualification.recommendations import generate_next_actions
from fulqrun.core.qualification.registry import QualificationRegistry
from fulqrun.core.qualification.types import (
    LITMUS_PILLAR_ID,
    TEXT_ANSWER_MAX_POINTS,
    Assessment,
    Pillar,
    QualificationConfig,
    QualificationLevel,
    Question,
    Response,
    ScoreWeighting,
    ScoringThresholds,
)
from fulqrun.core.qualification.utils import clamp, round_half_up

# Words that suggest a concrete, quantified answer
QUALITY_KEYWORDS = (
    "specific",
    "measurable",
    "quantified",
    "roi",
    "impact",
    "cost",
    "savings",
    "efficiency",
    "revenue",
    "profit",
    "test",
    "quality",
    "improvement",
    "lives",
    "saved",
)
MAX_KEYWORD_BONUS = 2

# (minimum length, points) awarded cumulatively
TEXT_LENGTH_BANDS = (
    (1, 3),
    (3, 2),
    (10, 2),
    (25, 2),
    (50, 1),
)


def score_text_answer(text: str) -> int:
    """Score a free-text answer on detail and specificity, capped at 10."""
    answer = text.strip()
    if not answer:
        return 0

    points = sum(band_points for min_len, band_points in TEXT_LENGTH_BANDS if len(answer) >= min_len)

    lowered = answer.lower()
    keyword_count = sum(1 for keyword in QUALITY_KEYWORDS if keyword in lowered)
    points += min(keyword_count, MAX_KEYWORD_BONUS)

    return min(points, TEXT_ANSWER_MAX_POINTS)


def score_response(question: Question, response: Optional[Response]) -> float:
    """Points one response earns against its question."""
    if response is None or not str(response.answer).strip():
        return 0

    if question.is_select:
        points = response.points
        if points is None:
            option = question.option_for(response.answer)
            points = option.points if option else 0
        return clamp(points, 0, question.max_points)

    return score_text_answer(str(response.answer))


def score_questions(
    pillar_id: str,
    questions: list[Question],
    responses: dict[tuple[str, str], Response],
) -> int:
    """Percentage of achievable points earned across a question set.

    Unanswered questions still count toward the maximum, so answering
    another question can never lower the score.
    """
    if not questions:
        return 0

    earned = 0.0
    achievable = 0.0
    for question in questions:
        earned += score_response(question, responses.get((pillar_id, question.id)))
        achievable += question.max_points

    if achievable <= 0:
        return 0

    return round_half_up(clamp(earned / achievable * 100, 0, 100))


def aggregate_overall_score(
    pillar_scores: dict[str, int],
    pillars: list[Pillar],
    weighting: ScoreWeighting = ScoreWeighting.EQUAL,
) -> int:
    """Combine pillar scores into the overall score."""
    if not pillars:
        return 0

    if weighting == ScoreWeighting.WEIGHTED:
        total_weight = sum(p.weight for p in pillars)
        if total_weight <= 0:
            return 0
        weighted = sum(pillar_scores.get(p.id, 0) * p.weight for p in pillars)
        return round_half_up(weighted / total_weight)

    return round_half_up(sum(pillar_scores.get(p.id, 0) for p in pillars) / len(pillars))


def get_qualification_level(
    score: float,
    thresholds: Optional[ScoringThresholds] = None,
) -> QualificationLevel:
    """Bucket an overall score into a qualification level."""
    thresholds = thresholds or ScoringThresholds()

    if score >= thresholds.excellent:
        return QualificationLevel.EXCELLENT
    if score >= thresholds.good:
        return QualificationLevel.GOOD
    if score >= thresholds.fair:
        return QualificationLevel.FAIR
    return QualificationLevel.POOR


def calculate_score(
    responses: Iterable[Response],
    config: Optional[QualificationConfig],
) -> Assessment:
    """
    Compute the full assessment for a set of responses.

    Args:
        responses: Responses to score; for duplicate keys the last one wins
        config: Qualification configuration (None scores as an empty config)

    Returns:
        Assessment with pillar scores, overall score, level, litmus score,
        next actions and stage-gate readiness
    """
    response_list = list(responses)
    by_key = {r.key: r for r in response_list}

    if config is None:
        return Assessment(responses=response_list)

    registry = QualificationRegistry(config)
    pillars = registry.get_pillars()

    pillar_scores = {
        pillar.id: score_questions(pillar.id, pillar.questions, by_key) for pillar in pillars
    }

    overall_score = aggregate_overall_score(pillar_scores, pillars, config.scoring.weighting)

    litmus_test_score = score_questions(
        LITMUS_PILLAR_ID, registry.get_litmus_test().questions, by_key
    )

    return Assessment(
        responses=list(by_key.values()),
        pillar_scores=pillar_scores,
        overall_score=overall_score,
        qualification_level=get_qualification_level(overall_score, config.scoring.thresholds),
        litmus_test_score=litmus_test_score,
        next_actions=generate_next_actions(pillar_scores, litmus_test_score, config),
        stage_gate_readiness=evaluate_stage_gates(pillar_scores, config),
    )
