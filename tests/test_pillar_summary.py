"""Tests for flattened per-pillar summaries."""

from fulqrun.core.qualification import build_pillar_summaries, parse_pillar_summaries
from fulqrun.core.qualification.summary import build_pillar_summary, parse_pillar_summary
from tests.fixtures_qualification import make_response

METRICS_SUMMARY = (
    "What is the current cost of the problem?: About $2M a year in rework\n\n"
    "How urgent is this problem?: High (Solve within 3 months)"
)


class TestBuildSummary:
    def test_blocks_in_question_order(self, config):
        responses = [
            make_response("metrics", "urgency_level", "High (Solve within 3 months)"),
            make_response("metrics", "current_cost", "About $2M a year in rework"),
        ]
        assert build_pillar_summary("metrics", responses, config) == METRICS_SUMMARY

    def test_other_pillars_ignored(self, config):
        responses = [make_response("champion", "champion_identity", "Dana, VP Operations")]
        assert build_pillar_summary("metrics", responses, config) == ""

    def test_all_columns(self, config):
        responses = [make_response("economicBuyer", "budget_authority", "The CFO")]
        summaries = build_pillar_summaries(responses, config)

        assert len(summaries) == 9
        assert summaries["economic_buyer"] == (
            "Who has the authority to approve this purchase?: The CFO"
        )
        assert summaries["metrics"] == ""

    def test_custom_column_mapping(self, config):
        responses = [make_response("champion", "champion_identity", "Dana")]
        summaries = build_pillar_summaries(responses, config, columns={"champ_notes": "champion"})
        assert summaries == {"champ_notes": "Who is our internal champion?: Dana"}


class TestParseSummary:
    def test_reverses_build(self, config):
        parsed = parse_pillar_summary(METRICS_SUMMARY, "metrics", config)
        by_question = {r.question_id: r for r in parsed}

        assert by_question["current_cost"].answer == "About $2M a year in rework"
        assert by_question["urgency_level"].answer == "High (Solve within 3 months)"
        assert all(r.points is None for r in parsed)

    def test_empty_text(self, config):
        assert parse_pillar_summary(None, "metrics", config) == []
        assert parse_pillar_summary("  ", "metrics", config) == []

    def test_unknown_pillar(self, config):
        assert parse_pillar_summary("Something: else", "unknown", config) == []

    def test_unprefixed_block_goes_to_first_unanswered_question(self, config):
        text = "What is the current cost of the problem?: Too high\n\nLegacy free-form note"
        parsed = {r.question_id: r.answer for r in parse_pillar_summary(text, "metrics", config)}

        assert parsed == {"current_cost": "Too high", "expected_roi": "Legacy free-form note"}

    def test_block_with_empty_answer_skipped(self, config):
        text = "What is the current cost of the problem?:   "
        assert parse_pillar_summary(text, "metrics", config) == []

    def test_record_columns(self, config):
        record = {
            "id": "opp-1",
            "metrics": METRICS_SUMMARY,
            "economic_buyer": "Who has the authority to approve this purchase?: The CFO",
            "champion": None,
        }
        parsed = parse_pillar_summaries(record, config)

        keys = {r.key for r in parsed}
        assert keys == {
            ("metrics", "current_cost"),
            ("metrics", "urgency_level"),
            ("economicBuyer", "budget_authority"),
        }
