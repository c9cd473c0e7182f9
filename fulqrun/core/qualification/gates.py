"""Stage-gate evaluation for the PEAK pipeline.

Stages form a linear sequence (Prospecting → Engaging → Advancing →
Key Decision). Each transition is guarded by named criteria; each
criterion name maps through the configuration's criterion table to a
pillar score threshold. The scorer's readiness map and the per-criterion
checklist both go through ``evaluate_criterion``, so they always agree.

The current stage belongs to the opportunity record. This module only
answers whether a transition is permitted; it never performs one.
"""

from typing import Optional

from fulqrun.core.logging import get_logger
from fulqrun.core.qualification.types import (
    Assessment,
    Criterion,
    CriterionStatus,
    QualificationConfig,
    Stage,
    StageGate,
    StageStatus,
)

logger = get_logger(__name__)

UNKNOWN_CRITERION_REASON = "Unknown criteria"


class StageTransitionError(Exception):
    """Raised when a stage transition is invalid."""


# =============================================================================
# Criteria
# =============================================================================


def criteria_table(config: QualificationConfig) -> dict[str, Criterion]:
    """Criterion name → definition."""
    return {c.name: c for c in config.criteria}


def evaluate_criterion(
    criterion: str,
    pillar_scores: dict[str, int],
    config: QualificationConfig,
) -> CriterionStatus:
    """Check one criterion against pillar scores. Unknown names are unmet."""
    definition = criteria_table(config).get(criterion)
    if definition is None:
        logger.warning(f"Stage gate references unknown criterion '{criterion}'")
        return CriterionStatus(criterion=criterion, met=False, reason=UNKNOWN_CRITERION_REASON)

    score = pillar_scores.get(definition.pillar_id, 0)
    met = score >= definition.threshold
    return CriterionStatus(
        criterion=criterion,
        met=met,
        reason=definition.met_reason if met else definition.unmet_reason,
        pillar_id=definition.pillar_id,
        threshold=definition.threshold,
        score=score,
    )


def get_criteria_status(
    criterion: str,
    assessment: Assessment,
    config: QualificationConfig,
) -> CriterionStatus:
    """Pass/fail and reason for one criterion, for checklist display."""
    return evaluate_criterion(criterion, assessment.pillar_scores, config)


def is_gate_ready(
    gate: StageGate,
    pillar_scores: dict[str, int],
    config: QualificationConfig,
) -> bool:
    """A gate is ready only when every criterion is met."""
    return all(evaluate_criterion(c, pillar_scores, config).met for c in gate.criteria)


def evaluate_stage_gates(
    pillar_scores: dict[str, int],
    config: QualificationConfig,
) -> dict[str, bool]:
    """Readiness of every configured gate, keyed ``"<from>_to_<to>"``."""
    return {gate.key: is_gate_ready(gate, pillar_scores, config) for gate in config.stage_gates}


# =============================================================================
# Stages
# =============================================================================


def resolve_stage(stage: str, config: QualificationConfig) -> Optional[Stage]:
    """Find a stage by id or display name, case-insensitively."""
    wanted = stage.strip().lower()
    for candidate in config.stages:
        if wanted in (candidate.id.lower(), candidate.name.lower()):
            return candidate
    return None


def _stage_index(stage: Stage, config: QualificationConfig) -> int:
    return next(i for i, s in enumerate(config.stages) if s.id == stage.id)


def find_stage_gate(
    current_stage: str,
    target_stage: str,
    config: QualificationConfig,
) -> Optional[StageGate]:
    """Gate guarding ``current_stage → target_stage``, if any."""
    current = resolve_stage(current_stage, config)
    target = resolve_stage(target_stage, config)
    if current is None or target is None:
        return None

    for gate in config.stage_gates:
        source = resolve_stage(gate.from_stage, config)
        dest = resolve_stage(gate.to_stage, config)
        if source is not None and dest is not None and (source.id, dest.id) == (current.id, target.id):
            return gate
    return None


def get_stage_info(stage: str, config: QualificationConfig) -> Optional[dict]:
    """Name, description and next stage id for a stage."""
    resolved = resolve_stage(stage, config)
    if resolved is None:
        return None

    index = _stage_index(resolved, config)
    next_stage = config.stages[index + 1].id if index + 1 < len(config.stages) else None
    return {
        "id": resolved.id,
        "name": resolved.name,
        "description": resolved.description,
        "next_stage": next_stage,
    }


def can_advance(
    current_stage: str,
    target_stage: str,
    assessment: Optional[Assessment],
    config: QualificationConfig,
) -> bool:
    """Whether the gate between two stages is satisfied. No gate means no."""
    if assessment is None:
        return False

    gate = find_stage_gate(current_stage, target_stage, config)
    if gate is None:
        return False

    return is_gate_ready(gate, assessment.pillar_scores, config)


def evaluate_stage_status(
    current_stage: str,
    assessment: Assessment,
    config: QualificationConfig,
) -> StageStatus:
    """
    Build the criteria checklist for moving to the next stage.

    Args:
        current_stage: Stage id or display name from the opportunity
        assessment: Current assessment
        config: Qualification configuration

    Returns:
        StageStatus with one CriterionStatus per criterion of the next gate
    """
    current = resolve_stage(current_stage, config)
    if current is None:
        return StageStatus(current_stage=current_stage)

    index = _stage_index(current, config)
    if index == len(config.stages) - 1:
        return StageStatus(current_stage=current.id, is_final_stage=True, progress_pct=100.0)

    next_stage = config.stages[index + 1]
    gate = find_stage_gate(current.id, next_stage.id, config)
    if gate is None:
        return StageStatus(current_stage=current.id, next_stage=next_stage.id)

    criteria = [get_criteria_status(c, assessment, config) for c in gate.criteria]
    met = sum(1 for c in criteria if c.met)
    total = len(criteria)

    return StageStatus(
        current_stage=current.id,
        next_stage=next_stage.id,
        can_advance=met == total,
        criteria=criteria,
        criteria_met=met,
        criteria_total=total,
        progress_pct=round(met / total * 100.0, 1) if total else 100.0,
        is_final_stage=False,
    )


def validate_stage_transition(
    current_stage: str,
    target_stage: str,
    assessment: Assessment,
    config: QualificationConfig,
    force: bool = False,
) -> None:
    """Validate that ``current → target`` is a legal transition.

    Raises StageTransitionError if blocked. ``force`` permits backward
    moves, skipped stages and unmet criteria but never unknown stages.
    """
    current = resolve_stage(current_stage, config)
    target = resolve_stage(target_stage, config)

    if current is None:
        raise StageTransitionError(f"Unknown stage: {current_stage}")
    if target is None:
        raise StageTransitionError(f"Unknown stage: {target_stage}")
    if current.id == target.id:
        raise StageTransitionError("Already at that stage")

    if force:
        return

    current_idx = _stage_index(current, config)
    target_idx = _stage_index(target, config)

    if target_idx < current_idx:
        raise StageTransitionError(
            f"Cannot move backward from {current.name} to {target.name} without force"
        )

    if target_idx > current_idx + 1:
        raise StageTransitionError(
            f"Cannot skip stages from {current.name} to {target.name} without force"
        )

    status = evaluate_stage_status(current.id, assessment, config)
    if not status.can_advance:
        unmet = [c.criterion for c in status.criteria if not c.met]
        if not unmet:
            raise StageTransitionError(
                f"No stage gate defined from {current.name} to {target.name}"
            )
        raise StageTransitionError(f"Criteria not met: {', '.join(unmet)}")
