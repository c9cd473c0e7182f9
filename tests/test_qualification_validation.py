"""Tests for response and configuration validation."""

import pytest

from fulqrun.core.qualification import (
    ConfigurationError,
    QualificationConfig,
    ensure_valid_config,
    validate_config,
    validate_responses,
)
from fulqrun.core.qualification.types import Pillar, Question, QuestionType, StageGate
from tests.fixtures_qualification import make_response


def _issues_by_field(issues) -> dict[str, str]:
    return {issue.field: issue.message for issue in issues}


class TestValidateResponses:
    def test_required_questions_reported(self, config):
        issues = _issues_by_field(validate_responses([], config))

        assert issues["metrics.current_cost"] == "This question is required"
        assert issues["litmus.budget_confirmed"] == "This question is required"
        assert "paperProcess.compliance" not in issues

    def test_answered_question_not_reported(self, config):
        responses = [make_response("metrics", "current_cost", "Roughly two million a year")]
        issues = _issues_by_field(validate_responses(responses, config))
        assert "metrics.current_cost" not in issues

    def test_whitespace_answer_counts_as_missing(self, config):
        responses = [make_response("metrics", "current_cost", "   ")]
        issues = _issues_by_field(validate_responses(responses, config))
        assert issues["metrics.current_cost"] == "This question is required"

    def test_text_too_short(self, config):
        responses = [make_response("metrics", "current_cost", "ab")]
        issues = _issues_by_field(validate_responses(responses, config))
        assert issues["metrics.current_cost"] == "Answer must be at least 3 characters"

    def test_text_too_long(self, config):
        responses = [make_response("metrics", "current_cost", "x" * 5001)]
        issues = _issues_by_field(validate_responses(responses, config))
        assert issues["metrics.current_cost"] == "Answer must be at most 5000 characters"

    def test_select_answer_must_be_listed(self, config):
        responses = [make_response("champion", "champion_commitment", "Somewhat")]
        issues = _issues_by_field(validate_responses(responses, config))
        assert issues["champion.champion_commitment"] == "Select one of the listed answers"

    def test_unknown_question(self, config):
        responses = [make_response("metrics", "favourite_color", "Blue")]
        issues = _issues_by_field(validate_responses(responses, config))
        assert issues["metrics.favourite_color"] == "Unknown question"

    def test_per_question_length_limits(self):
        config = QualificationConfig(
            project_name="Custom",
            pillars=[
                Pillar(
                    id="metrics",
                    display_name="Metrics",
                    questions=[Question(id="cost", text="Cost?", min_length=20)],
                )
            ],
        )
        responses = [make_response("metrics", "cost", "Two million")]
        issues = validate_responses(responses, config)

        assert len(issues) == 1
        assert issues[0].message == "Answer must be at least 20 characters"


class TestValidateConfig:
    def test_default_config_is_valid(self, config):
        result = validate_config(config)

        assert result.is_valid is True
        assert result.errors == []
        assert result.total_weight == 120
        assert result.warnings == ["Total pillar weights sum to 120% instead of 100%"]

    def test_empty_config(self):
        result = validate_config(QualificationConfig())

        assert result.is_valid is False
        assert "Project name is required" in result.errors
        assert "At least one pillar is required" in result.errors

    def test_duplicate_pillar_id(self, config):
        custom = config.model_copy(update={"pillars": [config.pillars[0], config.pillars[0]]})
        result = validate_config(custom)
        assert 'Pillar 2: Duplicate ID "metrics"' in result.errors

    def test_litmus_pillar_id_is_reserved(self, config):
        litmus = Pillar(id="litmus", display_name="Litmus", questions=[Question(id="q", text="Q")])
        custom = config.model_copy(update={"pillars": [*config.pillars, litmus]})
        result = validate_config(custom)
        assert 'Pillar 10: ID "litmus" is reserved' in result.errors

    def test_weight_out_of_range(self, config):
        heavy = config.pillars[0].model_copy(update={"weight": 150})
        custom = config.model_copy(update={"pillars": [heavy, *config.pillars[1:]]})
        result = validate_config(custom)
        assert "Pillar 1: Weight must be between 0 and 100" in result.errors

    def test_scale_question_needs_answers(self, config):
        pillar = Pillar(
            id="extra",
            display_name="Extra",
            questions=[Question(id="rating", text="Rate it", type=QuestionType.SCALE)],
        )
        custom = config.model_copy(update={"pillars": [*config.pillars, pillar]})
        result = validate_config(custom)
        assert "Pillar 10, Question 1: Answers required for scale questions" in result.errors

    def test_pillar_without_questions_warns(self, config):
        pillar = Pillar(id="extra", display_name="Extra")
        custom = config.model_copy(update={"pillars": [*config.pillars, pillar]})
        result = validate_config(custom)

        assert result.is_valid is True
        assert "Pillar 10 (Extra): No questions defined" in result.warnings

    def test_gate_criterion_without_definition(self, config):
        gate = StageGate(from_stage="Prospecting", to_stage="Engaging", criteria=["Mystery"])
        custom = config.model_copy(update={"stage_gates": [gate]})
        result = validate_config(custom)
        assert (
            'Stage gate Prospecting_to_Engaging: criterion "Mystery" has no definition'
            in result.errors
        )

    def test_gate_unknown_stage(self, config):
        gate = StageGate(from_stage="Prospecting", to_stage="Closed", criteria=[])
        custom = config.model_copy(update={"stage_gates": [gate]})
        result = validate_config(custom)
        assert 'Stage gate Prospecting_to_Closed: unknown stage "Closed"' in result.errors

    def test_criterion_unknown_pillar(self, config):
        custom = config.model_copy(update={"pillars": config.pillars[:1]})
        result = validate_config(custom)
        assert (
            'Criterion "Pain identified" references unknown pillar "identifyPain"'
            in result.errors
        )

    def test_threshold_order_warning(self, config):
        scoring = config.scoring.model_copy(
            update={"thresholds": config.scoring.thresholds.model_copy(update={"good": 90})}
        )
        result = validate_config(config.model_copy(update={"scoring": scoring}))
        assert "Excellent threshold should be higher than good threshold" in result.warnings


def test_configuration_error_message():
    error = ConfigurationError(["Project name is required", "At least one pillar is required"])
    assert str(error) == (
        "Configuration validation failed: Project name is required, At least one pillar is required"
    )
    assert error.errors == ["Project name is required", "At least one pillar is required"]
    assert error.warnings == []


def test_ensure_valid_config(config):
    assert ensure_valid_config(config).is_valid is True

    with pytest.raises(ConfigurationError) as exc_info:
        ensure_valid_config(QualificationConfig(project_name="Broken"))
    assert exc_info.value.errors == ["At least one pillar is required"]
