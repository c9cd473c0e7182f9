"""MEDDPICC qualification engine.

Scores an opportunity's answers across the qualification pillars and
checks PEAK pipeline stage gates:
- Pillar scores (0-100) from question points
- Overall score (equal-weight mean by default) and qualification level
- Litmus test score
- Next actions
- Stage-gate readiness

Usage:
    from fulqrun.core.qualification import DEFAULT_QUALIFICATION_CONFIG, ResponseStore, calculate_score

    store = ResponseStore(DEFAULT_QUALIFICATION_CONFIG)
    store.set_answer("champion", "champion_commitment", "Fully committed")
    assessment = calculate_score(store.get_responses(), DEFAULT_QUALIFICATION_CONFIG)
"""

from fulqrun.core.qualification.defaults import (
    DEFAULT_QUALIFICATION_CONFIG,
    LEGACY_SUMMARY_COLUMNS,
    build_default_config,
)
from fulqrun.core.qualification.gates import (
    StageTransitionError,
    can_advance,
    evaluate_stage_gates,
    evaluate_stage_status,
    get_criteria_status,
    get_stage_info,
    validate_stage_transition,
)
from fulqrun.core.qualification.registry import QualificationRegistry
from fulqrun.core.qualification.responses import ResponseStore
from fulqrun.core.qualification.scoring import calculate_score, get_qualification_level
from fulqrun.core.qualification.summary import build_pillar_summaries, parse_pillar_summaries
from fulqrun.core.qualification.types import (
    LITMUS_PILLAR_ID,
    Assessment,
    ConfigValidation,
    CriterionStatus,
    QualificationConfig,
    QualificationLevel,
    Response,
    ScoreWeighting,
    StageStatus,
    ValidationIssue,
)
from fulqrun.core.qualification.validation import (
    ConfigurationError,
    ensure_valid_config,
    validate_config,
    validate_responses,
)

__all__ = [
    "calculate_score",
    "get_qualification_level",
    "ResponseStore",
    "QualificationRegistry",
    "can_advance",
    "evaluate_stage_gates",
    "evaluate_stage_status",
    "get_criteria_status",
    "get_stage_info",
    "validate_stage_transition",
    "StageTransitionError",
    "validate_config",
    "validate_responses",
    "ConfigurationError",
    "ensure_valid_config",
    "build_pillar_summaries",
    "parse_pillar_summaries",
    "build_default_config",
    "Assessment",
    "ConfigValidation",
    "CriterionStatus",
    "QualificationConfig",
    "QualificationLevel",
    "Response",
    "ScoreWeighting",
    "StageStatus",
    "ValidationIssue",
    "DEFAULT_QUALIFICATION_CONFIG",
    "LEGACY_SUMMARY_COLUMNS",
    "LITMUS_PILLAR_ID",
]
