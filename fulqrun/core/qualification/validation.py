"""Validation of responses and of qualification configurations."""

from typing import Iterable, Optional

from fulqrun.core.qualification.gates import resolve_stage
from fulqrun.core.qualification.registry import QualificationRegistry
from fulqrun.core.qualification.responses import is_empty_answer
from fulqrun.core.qualification.types import (
    DEFAULT_TEXT_MAX_LENGTH,
    DEFAULT_TEXT_MIN_LENGTH,
    LITMUS_PILLAR_ID,
    ConfigValidation,
    QualificationConfig,
    Question,
    QuestionType,
    Response,
    ValidationIssue,
)


class ConfigurationError(Exception):
    """Raised when a qualification configuration fails validation."""

    def __init__(self, errors: list[str], warnings: Optional[list[str]] = None):
        super().__init__(f"Configuration validation failed: {', '.join(errors)}")
        self.errors = errors
        self.warnings = warnings or []


# =============================================================================
# Responses
# =============================================================================


def _check_answer(field: str, question: Question, response: Response) -> list[ValidationIssue]:
    if question.is_select:
        if question.answers and question.option_for(response.answer) is None:
            return [ValidationIssue(field=field, message="Select one of the listed answers")]
        return []

    text = str(response.answer).strip()
    min_length = question.min_length if question.min_length is not None else DEFAULT_TEXT_MIN_LENGTH
    max_length = question.max_length if question.max_length is not None else DEFAULT_TEXT_MAX_LENGTH

    if len(text) < min_length:
        return [
            ValidationIssue(field=field, message=f"Answer must be at least {min_length} characters")
        ]
    if len(text) > max_length:
        return [
            ValidationIssue(field=field, message=f"Answer must be at most {max_length} characters")
        ]
    return []


def validate_responses(
    responses: Iterable[Response],
    config: QualificationConfig,
) -> list[ValidationIssue]:
    """
    Check responses against question rules.

    Returns one issue per problem, with field ``"<pillar_id>.<question_id>"``.
    Issues are user-correctable and never block scoring.
    """
    registry = QualificationRegistry(config)
    by_key = {r.key: r for r in responses if not is_empty_answer(r.answer)}
    issues: list[ValidationIssue] = []

    for pillar_id in registry.pillar_ids():
        for question in registry.get_questions(pillar_id):
            field = f"{pillar_id}.{question.id}"
            response = by_key.get((pillar_id, question.id))
            if response is None:
                if question.required:
                    issues.append(ValidationIssue(field=field, message="This question is required"))
                continue
            issues.extend(_check_answer(field, question, response))

    for pillar_id, question_id in by_key:
        if registry.get_question(pillar_id, question_id) is None:
            issues.append(
                ValidationIssue(field=f"{pillar_id}.{question_id}", message="Unknown question")
            )

    return issues


# =============================================================================
# Configuration
# =============================================================================


def _validate_questions(label: str, questions: list[Question], errors: list[str]) -> None:
    question_ids: set[str] = set()
    for q_index, question in enumerate(questions, start=1):
        prefix = f"{label}, Question {q_index}"
        if not question.id.strip():
            errors.append(f"{prefix}: ID is required")
        elif question.id in question_ids:
            errors.append(f'{prefix}: Duplicate ID "{question.id}"')
        else:
            question_ids.add(question.id)

        if not question.text.strip():
            errors.append(f"{prefix}: Text is required")

        if question.type in (QuestionType.SCALE, QuestionType.MULTIPLE_CHOICE) and not question.answers:
            errors.append(f"{prefix}: Answers required for {question.type.value} questions")


def validate_config(config: QualificationConfig) -> ConfigValidation:
    """
    Validate a configuration before it is saved or imported.

    Errors block saving. Warnings (weights not summing to 100, threshold
    ordering, empty pillars) are informational.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not config.project_name.strip():
        errors.append("Project name is required")
    if not config.version.strip():
        errors.append("Version is required")
    if not config.framework.strip():
        errors.append("Framework is required")

    total_weight = sum(p.weight for p in config.pillars)

    if not config.pillars:
        errors.append("At least one pillar is required")
    else:
        pillar_ids: set[str] = set()
        for index, pillar in enumerate(config.pillars, start=1):
            if not pillar.id.strip():
                errors.append(f"Pillar {index}: ID is required")
            elif pillar.id == LITMUS_PILLAR_ID:
                errors.append(f'Pillar {index}: ID "{LITMUS_PILLAR_ID}" is reserved')
            elif pillar.id in pillar_ids:
                errors.append(f'Pillar {index}: Duplicate ID "{pillar.id}"')
            else:
                pillar_ids.add(pillar.id)

            if not pillar.display_name.strip():
                errors.append(f"Pillar {index}: Display name is required")

            if pillar.weight < 0 or pillar.weight > 100:
                errors.append(f"Pillar {index}: Weight must be between 0 and 100")

            if not pillar.questions:
                warnings.append(f"Pillar {index} ({pillar.display_name}): No questions defined")
            else:
                _validate_questions(f"Pillar {index}", pillar.questions, errors)

        if abs(total_weight - 100) > 0.1:
            warnings.append(f"Total pillar weights sum to {total_weight:g}% instead of 100%")

    _validate_questions("Litmus test", config.litmus_test.questions, errors)

    thresholds = config.scoring.thresholds
    if thresholds.excellent <= thresholds.good:
        warnings.append("Excellent threshold should be higher than good threshold")
    if thresholds.good <= thresholds.fair:
        warnings.append("Good threshold should be higher than fair threshold")
    if thresholds.fair <= thresholds.poor:
        warnings.append("Fair threshold should be higher than poor threshold")
    for name in ("excellent", "good", "fair", "poor"):
        value = getattr(thresholds, name)
        if value < 0 or value > 100:
            errors.append(f"{name} threshold must be between 0 and 100")

    _validate_stage_gates(config, errors)

    return ConfigValidation(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        total_weight=total_weight,
    )


def _validate_stage_gates(config: QualificationConfig, errors: list[str]) -> None:
    pillar_ids = {p.id for p in config.pillars}
    criterion_names: set[str] = set()

    for criterion in config.criteria:
        if criterion.name in criterion_names:
            errors.append(f'Duplicate criterion "{criterion.name}"')
        criterion_names.add(criterion.name)
        if criterion.pillar_id not in pillar_ids:
            errors.append(
                f'Criterion "{criterion.name}" references unknown pillar "{criterion.pillar_id}"'
            )

    for gate in config.stage_gates:
        for stage in (gate.from_stage, gate.to_stage):
            if resolve_stage(stage, config) is None:
                errors.append(f'Stage gate {gate.key}: unknown stage "{stage}"')
        for name in gate.criteria:
            if name not in criterion_names:
                errors.append(f'Stage gate {gate.key}: criterion "{name}" has no definition')


def ensure_valid_config(config: QualificationConfig) -> ConfigValidation:
    """Validate and raise ConfigurationError if the configuration has errors."""
    validation = validate_config(config)
    if not validation.is_valid:
        raise ConfigurationError(validation.errors, validation.warnings)
    return validation
