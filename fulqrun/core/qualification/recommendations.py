"""Next-action generation.

Pillars below the attention threshold each produce an action. Pillars
carrying a ``critical_action`` (pain, champion) escalate to the top of
the list.
"""

from dataclasses import dataclass

from fulqrun.core.qualification.types import QualificationConfig

PRIORITY_CRITICAL = 1
PRIORITY_PILLAR = 2
PRIORITY_LITMUS = 3


@dataclass
class NextAction:
    action: str
    priority: int
    score: int


def generate_next_actions(
    pillar_scores: dict[str, int],
    litmus_test_score: int,
    config: QualificationConfig,
) -> list[str]:
    """
    Build the ordered list of recommended next actions.

    Ordering: critical pillars first, then remaining gaps by lowest score,
    then the litmus test.

    Args:
        pillar_scores: Pillar id to score (0-100)
        litmus_test_score: Litmus test score (0-100)
        config: Qualification configuration

    Returns:
        Deduplicated action strings, most critical first
    """
    threshold = config.scoring.attention_threshold
    candidates: list[NextAction] = []

    for pillar in config.pillars:
        score = pillar_scores.get(pillar.id, 0)
        if score >= threshold:
            continue

        if pillar.critical_action:
            candidates.append(NextAction(pillar.critical_action, PRIORITY_CRITICAL, score))

        candidates.append(
            NextAction(
                f"Complete {pillar.display_name} assessment - currently {score}% complete",
                PRIORITY_PILLAR,
                score,
            )
        )

    litmus = config.litmus_test
    if litmus.questions and litmus_test_score < threshold:
        candidates.append(
            NextAction(
                f"Work through the {litmus.display_name or 'litmus test'} - "
                f"currently {litmus_test_score}%",
                PRIORITY_LITMUS,
                litmus_test_score,
            )
        )

    # Stable sort keeps configuration order among equal scores
    candidates.sort(key=lambda a: (a.priority, a.score))

    seen: set[str] = set()
    actions: list[str] = []
    for candidate in candidates:
        key = candidate.action.lower().strip()
        if key not in seen:
            seen.add(key)
            actions.append(candidate.action)

    return actions
