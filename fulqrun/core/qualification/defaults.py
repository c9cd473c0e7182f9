"""Default MEDD(I)PICC configuration with PEAK pipeline stage gates.

Organizations may store their own configuration; this one applies when
none is active.
"""

from fulqrun.core.qualification.types import (
    AnswerOption,
    Criterion,
    LitmusTest,
    Pillar,
    QualificationConfig,
    Question,
    QuestionType,
    ScoreWeighting,
    ScoringPolicy,
    ScoringThresholds,
    Stage,
    StageGate,
)


def _text(id: str, text: str, tooltip: str, required: bool = True) -> Question:
    return Question(id=id, text=text, tooltip=tooltip, type=QuestionType.TEXT, required=required)


def _select(
    id: str,
    text: str,
    options: list[tuple[str, float]],
    tooltip: str | None = None,
    type: QuestionType = QuestionType.SCALE,
) -> Question:
    return Question(
        id=id,
        text=text,
        tooltip=tooltip,
        type=type,
        answers=[AnswerOption(text=label, points=points) for label, points in options],
    )


# =============================================================================
# Pillars
# =============================================================================

PILLARS = [
    Pillar(
        id="metrics",
        display_name="Metrics",
        description="Quantify the business impact and ROI",
        weight=15,
        icon="📊",
        color="bg-blue-100 text-blue-800",
        questions=[
            _text(
                "current_cost",
                "What is the current cost of the problem?",
                "Quantify the financial impact of the current situation",
            ),
            _text(
                "expected_roi",
                "What is the expected ROI from solving this problem?",
                "Calculate the return on investment",
            ),
            _text(
                "success_metrics",
                "How will success be measured?",
                "Define specific KPIs and success criteria",
            ),
            _select(
                "urgency_level",
                "How urgent is this problem?",
                [
                    ("Critical (Must solve immediately)", 10),
                    ("High (Solve within 3 months)", 8),
                    ("Medium (Solve within 6 months)", 6),
                    ("Low (Solve within 12 months)", 4),
                    ("Not urgent", 2),
                ],
                tooltip="Rate the urgency of solving this problem",
            ),
        ],
    ),
    Pillar(
        id="economicBuyer",
        display_name="Economic Buyer",
        description="Identify the person who can approve the budget",
        weight=20,
        icon="💰",
        color="bg-green-100 text-green-800",
        questions=[
            _text(
                "budget_authority",
                "Who has the authority to approve this purchase?",
                "Identify the person with budget approval power",
            ),
            _text(
                "influence_level",
                "What is their role and influence level?",
                "Assess their position and decision-making power",
            ),
            _select(
                "meeting_status",
                "Have we met with the economic buyer?",
                [
                    ("Yes - Multiple meetings", 10),
                    ("Yes - One meeting", 7),
                    ("No - Scheduled", 4),
                    ("No - Not identified", 0),
                ],
                tooltip="Confirm direct engagement with budget holder",
                type=QuestionType.YES_NO,
            ),
            _text(
                "budget_range",
                "What is their budget authority?",
                "Understand their spending limits",
            ),
        ],
    ),
    Pillar(
        id="decisionCriteria",
        display_name="Decision Criteria",
        description="Understand how they will evaluate solutions",
        weight=10,
        icon="📋",
        color="bg-purple-100 text-purple-800",
        questions=[
            _text(
                "key_criteria",
                "What are their key decision criteria?",
                "List the main factors they will use to evaluate solutions",
            ),
            _text(
                "criteria_importance",
                "How important is each criterion?",
                "Rank the criteria by importance",
            ),
            _text(
                "must_haves",
                "What are their must-haves vs nice-to-haves?",
                "Distinguish between essential and optional features",
            ),
        ],
    ),
    Pillar(
        id="decisionProcess",
        display_name="Decision Process",
        description="Map the approval workflow and timeline",
        weight=15,
        icon="⚙️",
        color="bg-orange-100 text-orange-800",
        questions=[
            _text(
                "process_steps",
                "What is their decision-making process?",
                "Outline the steps in their decision process",
            ),
            _text(
                "stakeholders",
                "Who else needs to be involved?",
                "Identify all decision influencers",
            ),
            _text(
                "timeline",
                "What is the timeline for decision?",
                "Establish decision timeline and milestones",
            ),
        ],
    ),
    Pillar(
        id="paperProcess",
        display_name="Paper Process",
        description="Document requirements and procurement process",
        weight=5,
        icon="📄",
        color="bg-gray-100 text-gray-800",
        questions=[
            _text(
                "documentation",
                "What documentation is required?",
                "List all required documents and forms",
            ),
            _text(
                "procurement",
                "What is their procurement process?",
                "Understand their purchasing procedures",
            ),
            _text(
                "compliance",
                "Are there any compliance requirements?",
                "Identify regulatory or policy requirements",
                required=False,
            ),
        ],
    ),
    Pillar(
        id="identifyPain",
        display_name="Identify Pain",
        description="Understand their pain points and challenges",
        weight=20,
        icon="😰",
        color="bg-red-100 text-red-800",
        critical_action="Validate the customer's core pain and its business consequences",
        questions=[
            _text(
                "biggest_challenge",
                "What is their biggest challenge?",
                "Identify the primary pain point",
            ),
            _text(
                "consequences",
                "What happens if they don't solve this?",
                "Understand the impact of inaction",
            ),
            _text(
                "previous_attempts",
                "What have they tried before?",
                "Learn from their past solutions",
            ),
        ],
    ),
    Pillar(
        id="implicatePain",
        display_name="Implicate Pain",
        description="Help them understand the full impact of their pain",
        weight=20,
        icon="💡",
        color="bg-yellow-100 text-yellow-800",
        questions=[
            _text(
                "pain_amplification",
                "How can we help them understand the full impact?",
                "Strategies to amplify pain recognition",
            ),
            _text(
                "urgency_creation",
                "What creates urgency for them?",
                "Identify what motivates immediate action",
            ),
            _text(
                "stakeholder_impact",
                "Who else is affected by this pain?",
                "Map pain impact across stakeholders",
            ),
        ],
    ),
    Pillar(
        id="champion",
        display_name="Champion",
        description="Find internal advocate who will support you",
        weight=10,
        icon="🏆",
        color="bg-indigo-100 text-indigo-800",
        critical_action="Identify and test an internal champion with real influence",
        questions=[
            _text(
                "champion_identity",
                "Who is our internal champion?",
                "Identify the person who will advocate for us",
            ),
            _select(
                "champion_influence",
                "What is their influence level?",
                [
                    ("Very High (C-Level)", 10),
                    ("High (VP/Director)", 8),
                    ("Medium (Manager)", 6),
                    ("Low (Individual Contributor)", 4),
                    ("Unknown", 2),
                ],
                tooltip="Assess their power and influence in the organization",
            ),
            _select(
                "champion_commitment",
                "How committed are they to our solution?",
                [
                    ("Fully committed", 10),
                    ("Strongly supportive", 8),
                    ("Moderately supportive", 6),
                    ("Neutral", 4),
                    ("Not committed", 2),
                ],
                tooltip="Measure their level of commitment",
            ),
        ],
    ),
    Pillar(
        id="competition",
        display_name="Competition",
        description="Assess competitive landscape and positioning",
        weight=5,
        icon="⚔️",
        color="bg-pink-100 text-pink-800",
        questions=[
            _text(
                "competitors",
                "Who else are they considering?",
                "Identify competing solutions",
            ),
            _text(
                "competitive_advantages",
                "What are our competitive advantages?",
                "Define our unique value proposition",
            ),
            _text(
                "differentiation",
                "How do we differentiate ourselves?",
                "Explain what makes us different",
            ),
            _select(
                "win_probability",
                "What is our win probability?",
                [
                    ("Very High (90%+)", 10),
                    ("High (70-89%)", 8),
                    ("Medium (50-69%)", 6),
                    ("Low (30-49%)", 4),
                    ("Very Low (<30%)", 2),
                ],
                tooltip="Assess likelihood of winning",
            ),
        ],
    ),
]

LITMUS_TEST = LitmusTest(
    display_name="Final Qualification Gate",
    questions=[
        _select(
            "budget_confirmed",
            "Is budget confirmed and available?",
            [
                ("Yes - Budget approved", 10),
                ("Yes - Budget allocated", 8),
                ("Yes - Budget identified", 6),
                ("No - Budget unclear", 2),
            ],
            type=QuestionType.YES_NO,
        ),
        _select(
            "decision_timeline",
            "Is there a clear decision timeline?",
            [
                ("Yes - Specific date", 10),
                ("Yes - General timeframe", 7),
                ("No - Timeline unclear", 3),
            ],
            type=QuestionType.YES_NO,
        ),
        _select(
            "champion_confirmed",
            "Do we have a confirmed champion?",
            [
                ("Yes - Strong champion", 10),
                ("Yes - Moderate champion", 7),
                ("No - No champion", 2),
            ],
            type=QuestionType.YES_NO,
        ),
    ],
)


# =============================================================================
# PEAK pipeline
# =============================================================================

STAGES = [
    Stage(id="prospecting", name="Prospecting", description="Initial contact and qualification"),
    Stage(
        id="engaging",
        name="Engaging",
        description="Active communication and relationship building",
    ),
    Stage(id="advancing", name="Advancing", description="Solution presentation and negotiation"),
    Stage(id="key_decision", name="Key Decision", description="Final decision and closing"),
]

STAGE_GATES = [
    StageGate(
        from_stage="Prospecting",
        to_stage="Engaging",
        criteria=["Pain identified", "Champion identified", "Budget confirmed"],
    ),
    StageGate(
        from_stage="Engaging",
        to_stage="Advancing",
        criteria=[
            "Economic buyer engaged",
            "Decision criteria established",
            "Decision process mapped",
        ],
    ),
    StageGate(
        from_stage="Advancing",
        to_stage="Key Decision",
        criteria=["Paper process completed", "Competition neutralized", "Champion committed"],
    ),
]

CRITERIA = [
    Criterion(
        name="Pain identified",
        pillar_id="identifyPain",
        threshold=50,
        met_reason="Pain points clearly identified",
        unmet_reason="Pain identification incomplete",
    ),
    Criterion(
        name="Champion identified",
        pillar_id="champion",
        threshold=50,
        met_reason="Champion identified and engaged",
        unmet_reason="Champion identification needed",
    ),
    Criterion(
        name="Budget confirmed",
        pillar_id="economicBuyer",
        threshold=50,
        met_reason="Budget authority confirmed",
        unmet_reason="Budget confirmation required",
    ),
    Criterion(
        name="Economic buyer engaged",
        pillar_id="economicBuyer",
        threshold=70,
        met_reason="Economic buyer actively engaged",
        unmet_reason="Economic buyer engagement needed",
    ),
    Criterion(
        name="Decision criteria established",
        pillar_id="decisionCriteria",
        threshold=60,
        met_reason="Decision criteria clearly defined",
        unmet_reason="Decision criteria need clarification",
    ),
    Criterion(
        name="Decision process mapped",
        pillar_id="decisionProcess",
        threshold=60,
        met_reason="Decision process fully mapped",
        unmet_reason="Decision process mapping incomplete",
    ),
    Criterion(
        name="Paper process completed",
        pillar_id="paperProcess",
        threshold=70,
        met_reason="Paper process requirements met",
        unmet_reason="Paper process needs completion",
    ),
    Criterion(
        name="Competition neutralized",
        pillar_id="competition",
        threshold=70,
        met_reason="Competitive position secured",
        unmet_reason="Competitive threats remain",
    ),
    Criterion(
        name="Champion committed",
        pillar_id="champion",
        threshold=80,
        met_reason="Champion fully committed",
        unmet_reason="Champion commitment needed",
    ),
]


DEFAULT_QUALIFICATION_CONFIG = QualificationConfig(
    project_name="CRM Integration of the MEDDPICC & PEAK Sales Qualification Module",
    version="1.0",
    framework="MEDD(I)PICC",
    scoring=ScoringPolicy(
        thresholds=ScoringThresholds(excellent=80, good=60, fair=40, poor=20),
    ),
    pillars=PILLARS,
    litmus_test=LITMUS_TEST,
    stages=STAGES,
    stage_gates=STAGE_GATES,
    criteria=CRITERIA,
)

# Opportunity columns holding the flattened per-pillar text summary
LEGACY_SUMMARY_COLUMNS = {
    "metrics": "metrics",
    "economic_buyer": "economicBuyer",
    "decision_criteria": "decisionCriteria",
    "decision_process": "decisionProcess",
    "paper_process": "paperProcess",
    "identify_pain": "identifyPain",
    "implicate_pain": "implicatePain",
    "champion": "champion",
    "competition": "competition",
}


def build_default_config(
    weighting: str | None = None,
    attention_threshold: float | None = None,
) -> QualificationConfig:
    """Copy of the default config with settings-level scoring overrides applied."""
    scoring = DEFAULT_QUALIFICATION_CONFIG.scoring.model_copy()
    if weighting is not None:
        scoring.weighting = ScoreWeighting(weighting)
    if attention_threshold is not None:
        scoring.attention_threshold = attention_threshold
    return DEFAULT_QUALIFICATION_CONFIG.model_copy(update={"scoring": scoring})
