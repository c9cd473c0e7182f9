"""Pydantic models for the MEDDPICC qualification engine."""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field

# Reserved pillar id under which litmus test responses are recorded
LITMUS_PILLAR_ID = "litmus"

# Points available for a free-text answer
TEXT_ANSWER_MAX_POINTS = 10

# Fallback maximum for a select question configured without options
DEFAULT_SELECT_MAX_POINTS = 10

DEFAULT_TEXT_MIN_LENGTH = 3
DEFAULT_TEXT_MAX_LENGTH = 5000

AnswerValue = Union[str, int, float]


# =============================================================================
# Configuration
# =============================================================================


class QuestionType(str, Enum):
    """How a question is answered."""

    TEXT = "text"
    SCALE = "scale"
    MULTIPLE_CHOICE = "multiple_choice"
    YES_NO = "yes_no"


SELECT_QUESTION_TYPES = frozenset(
    {QuestionType.SCALE, QuestionType.MULTIPLE_CHOICE, QuestionType.YES_NO}
)


class AnswerOption(BaseModel):
    """One selectable answer and the points it carries."""

    text: str = Field(..., description="Answer label")
    points: float = Field(..., description="Points awarded when selected")


class Question(BaseModel):
    """A single qualification question."""

    id: str = Field(..., description="Question key, unique within its pillar")
    text: str = Field(..., description="Prompt shown to the seller")
    type: QuestionType = Field(default=QuestionType.TEXT)
    tooltip: Optional[str] = None
    required: bool = True
    answers: list[AnswerOption] = Field(
        default_factory=list, description="Ordered options for select questions"
    )
    min_length: Optional[int] = Field(None, ge=0, description="Minimum text answer length")
    max_length: Optional[int] = Field(None, ge=1, description="Maximum text answer length")

    @property
    def is_select(self) -> bool:
        return self.type in SELECT_QUESTION_TYPES

    @property
    def max_points(self) -> float:
        """Most points this question can contribute."""
        if not self.is_select:
            return TEXT_ANSWER_MAX_POINTS
        if not self.answers:
            return DEFAULT_SELECT_MAX_POINTS
        return max(max(a.points for a in self.answers), 0)

    def option_for(self, answer: AnswerValue) -> Optional[AnswerOption]:
        """Find the option whose label matches ``answer``."""
        label = str(answer).strip()
        for option in self.answers:
            if option.text == label:
                return option
        return None


class Pillar(BaseModel):
    """One qualification dimension."""

    id: str
    display_name: str
    description: str = ""
    weight: float = Field(default=1, description="Relative weight under weighted scoring")
    icon: Optional[str] = None
    color: Optional[str] = Field(None, description="UI color tag")
    questions: list[Question] = Field(default_factory=list)
    critical_action: Optional[str] = Field(
        None, description="Escalated next action when this pillar needs attention"
    )


class LitmusTest(BaseModel):
    """Final qualification gate, separate from the pillars."""

    display_name: str = ""
    questions: list[Question] = Field(default_factory=list)


class Stage(BaseModel):
    """A sales-process stage in the linear pipeline."""

    id: str
    name: str
    description: str = ""


class StageGate(BaseModel):
    """Criteria required to move an opportunity between two stages."""

    from_stage: str = Field(..., description="Display name of the source stage")
    to_stage: str = Field(..., description="Display name of the target stage")
    criteria: list[str] = Field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.from_stage}_to_{self.to_stage}"


class Criterion(BaseModel):
    """Maps a criterion name to the pillar score threshold it checks."""

    name: str
    pillar_id: str
    threshold: float = Field(..., ge=0, le=100)
    met_reason: str
    unmet_reason: str


class ScoringThresholds(BaseModel):
    """Overall-score cut points for qualification levels."""

    excellent: float = 80
    good: float = 60
    fair: float = 40
    poor: float = 20


class ScoreWeighting(str, Enum):
    """How pillar scores aggregate into the overall score."""

    EQUAL = "equal"
    WEIGHTED = "weighted"


class ScoringPolicy(BaseModel):
    weighting: ScoreWeighting = ScoreWeighting.EQUAL
    thresholds: ScoringThresholds = Field(default_factory=ScoringThresholds)
    attention_threshold: float = Field(
        default=50, ge=0, le=100, description="Pillars scoring below this need attention"
    )


class QualificationConfig(BaseModel):
    """Complete, immutable qualification configuration."""

    project_name: str = ""
    version: str = "1.0"
    framework: str = "MEDD(I)PICC"
    scoring: ScoringPolicy = Field(default_factory=ScoringPolicy)
    pillars: list[Pillar] = Field(default_factory=list)
    litmus_test: LitmusTest = Field(default_factory=LitmusTest)
    stages: list[Stage] = Field(default_factory=list)
    stage_gates: list[StageGate] = Field(default_factory=list)
    criteria: list[Criterion] = Field(default_factory=list)


# =============================================================================
# Responses and assessment
# =============================================================================


class Response(BaseModel):
    """One answer to one question."""

    pillar_id: str
    question_id: str
    answer: AnswerValue
    points: Optional[float] = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.pillar_id, self.question_id)


class QualificationLevel(str, Enum):
    """Coarse bucket derived from the overall score."""

    POOR = "poor"
    FAIR = "fair"
    GOOD = "good"
    EXCELLENT = "excellent"

    @property
    def label(self) -> str:
        return self.value.capitalize()


LEVEL_DESCRIPTIONS = {
    QualificationLevel.EXCELLENT: "High probability of closing - all key areas covered",
    QualificationLevel.GOOD: "Good qualification - some areas need attention",
    QualificationLevel.FAIR: "Moderate qualification - several areas need work",
    QualificationLevel.POOR: "Low qualification - significant gaps to address",
}


class Assessment(BaseModel):
    """Scores derived from a set of responses. Never stored as primary state."""

    responses: list[Response] = Field(default_factory=list)
    pillar_scores: dict[str, int] = Field(default_factory=dict)
    overall_score: int = Field(default=0, ge=0, le=100)
    qualification_level: QualificationLevel = QualificationLevel.POOR
    litmus_test_score: int = Field(default=0, ge=0, le=100)
    next_actions: list[str] = Field(default_factory=list)
    stage_gate_readiness: dict[str, bool] = Field(default_factory=dict)


class CriterionStatus(BaseModel):
    """Pass/fail of one stage-gate criterion with a readable reason."""

    criterion: str
    met: bool
    reason: str
    pillar_id: Optional[str] = None
    threshold: Optional[float] = None
    score: Optional[int] = None


class StageStatus(BaseModel):
    """Eligibility of an opportunity to move to its next stage."""

    current_stage: str
    next_stage: Optional[str] = None
    can_advance: bool = False
    criteria: list[CriterionStatus] = Field(default_factory=list)
    criteria_met: int = 0
    criteria_total: int = 0
    progress_pct: float = 0.0
    is_final_stage: bool = False


class ValidationIssue(BaseModel):
    """A user-correctable problem with one answer."""

    field: str = Field(..., description="'<pillar_id>.<question_id>'")
    message: str


class ConfigValidation(BaseModel):
    """Outcome of validating a qualification configuration."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    total_weight: float = 0
