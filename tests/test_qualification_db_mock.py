"""Tests for qualification persistence with mocked Supabase."""

from unittest.mock import MagicMock, patch

import pytest

from tests.fixtures_qualification import OPPORTUNITY_ID, ORGANIZATION_ID, make_response


@pytest.fixture
def mock_responses_supabase():
    """Mock Supabase client for the responses table."""
    with patch("fulqrun.db.qualification_responses.get_supabase") as mock_get_supabase:
        mock_client = MagicMock()
        mock_get_supabase.return_value = mock_client
        yield mock_client


@pytest.fixture
def mock_opportunities_supabase():
    with patch("fulqrun.db.opportunities.get_supabase") as mock_get_supabase:
        mock_client = MagicMock()
        mock_get_supabase.return_value = mock_client
        yield mock_client


@pytest.fixture
def mock_configs_supabase():
    with patch("fulqrun.db.qualification_configs.get_supabase") as mock_get_supabase:
        mock_client = MagicMock()
        mock_get_supabase.return_value = mock_client
        yield mock_client


class TestResponsesTable:
    def test_list_responses(self, mock_responses_supabase):
        from fulqrun.db.qualification_responses import list_responses

        mock_select = mock_responses_supabase.table.return_value.select.return_value
        mock_select.eq.return_value.execute.return_value = MagicMock(
            data=[
                {
                    "opportunity_id": str(OPPORTUNITY_ID),
                    "pillar_id": "champion",
                    "question_id": "champion_commitment",
                    "answer": "Fully committed",
                    "points": 10,
                }
            ]
        )

        responses = list_responses(OPPORTUNITY_ID)

        assert responses == [make_response("champion", "champion_commitment", "Fully committed", 10)]
        mock_responses_supabase.table.assert_called_with("meddpicc_responses")
        mock_select.eq.assert_called_once_with("opportunity_id", str(OPPORTUNITY_ID))

    def test_list_responses_empty(self, mock_responses_supabase):
        from fulqrun.db.qualification_responses import list_responses

        mock_select = mock_responses_supabase.table.return_value.select.return_value
        mock_select.eq.return_value.execute.return_value = MagicMock(data=[])

        assert list_responses(OPPORTUNITY_ID) == []

    def test_upsert_response_uses_conflict_key(self, mock_responses_supabase):
        from fulqrun.db.qualification_responses import CONFLICT_KEY, upsert_response

        mock_upsert = mock_responses_supabase.table.return_value.upsert
        mock_upsert.return_value.execute.return_value = MagicMock(data=[{"id": "row-1"}])

        result = upsert_response(OPPORTUNITY_ID, make_response("metrics", "current_cost", "High"))

        assert result == {"id": "row-1"}
        row = mock_upsert.call_args[0][0]
        assert row["opportunity_id"] == str(OPPORTUNITY_ID)
        assert row["pillar_id"] == "metrics"
        assert row["question_id"] == "current_cost"
        assert row["answer"] == "High"
        assert mock_upsert.call_args[1]["on_conflict"] == CONFLICT_KEY

    def test_upsert_response_empty_result_raises(self, mock_responses_supabase):
        from fulqrun.db.qualification_responses import upsert_response

        mock_upsert = mock_responses_supabase.table.return_value.upsert
        mock_upsert.return_value.execute.return_value = MagicMock(data=[])

        with pytest.raises(RuntimeError, match="Supabase error upserting meddpicc_responses"):
            upsert_response(OPPORTUNITY_ID, make_response("metrics", "current_cost", "High"))

    def test_delete_response_filters_full_key(self, mock_responses_supabase):
        from fulqrun.db.qualification_responses import delete_response

        mock_delete = mock_responses_supabase.table.return_value.delete.return_value

        delete_response(OPPORTUNITY_ID, "metrics", "current_cost")

        mock_delete.eq.assert_called_once_with("opportunity_id", str(OPPORTUNITY_ID))
        mock_delete.eq.return_value.eq.assert_called_once_with("pillar_id", "metrics")
        mock_delete.eq.return_value.eq.return_value.eq.assert_called_once_with(
            "question_id", "current_cost"
        )

    def _stored_keys(self, mock_client, keys):
        mock_select = mock_client.table.return_value.select.return_value
        mock_select.eq.return_value.execute.return_value = MagicMock(
            data=[{"pillar_id": p, "question_id": q} for p, q in keys]
        )

    def test_replace_responses_removes_only_stale_keys(self, mock_responses_supabase):
        from fulqrun.db.qualification_responses import replace_responses

        mock_table = mock_responses_supabase.table.return_value
        mock_table.upsert.return_value.execute.return_value = MagicMock(
            data=[{"id": "a"}, {"id": "b"}]
        )
        self._stored_keys(
            mock_responses_supabase,
            [
                ("metrics", "current_cost"),
                ("champion", "champion_commitment"),
                ("competition", "competitors"),
            ],
        )

        written = replace_responses(
            OPPORTUNITY_ID,
            [
                make_response("metrics", "current_cost", "High"),
                make_response("champion", "champion_commitment", "Neutral", 4),
            ],
        )

        assert written == 2
        assert len(mock_table.upsert.call_args[0][0]) == 2
        mock_delete = mock_table.delete.return_value
        mock_delete.eq.assert_called_once_with("opportunity_id", str(OPPORTUNITY_ID))
        mock_delete.eq.return_value.eq.assert_called_once_with("pillar_id", "competition")
        mock_delete.eq.return_value.eq.return_value.eq.assert_called_once_with(
            "question_id", "competitors"
        )

    def test_failed_upsert_keeps_stored_rows(self, mock_responses_supabase):
        from fulqrun.db.qualification_responses import replace_responses

        mock_table = mock_responses_supabase.table.return_value
        mock_table.upsert.return_value.execute.side_effect = Exception("timeout")

        with pytest.raises(RuntimeError, match="Supabase error replacing meddpicc_responses"):
            replace_responses(OPPORTUNITY_ID, [make_response("metrics", "current_cost", "High")])

        mock_table.delete.assert_not_called()

    def test_replace_with_nothing_removes_each_stored_row(self, mock_responses_supabase):
        from fulqrun.db.qualification_responses import replace_responses

        self._stored_keys(
            mock_responses_supabase,
            [("metrics", "current_cost"), ("champion", "champion_identity")],
        )

        assert replace_responses(OPPORTUNITY_ID, []) == 0
        mock_table = mock_responses_supabase.table.return_value
        mock_table.upsert.assert_not_called()
        assert mock_table.delete.call_count == 2

    def test_errors_are_wrapped(self, mock_responses_supabase):
        from fulqrun.db.qualification_responses import list_responses

        mock_responses_supabase.table.side_effect = Exception("connection refused")

        with pytest.raises(RuntimeError, match="Supabase error reading meddpicc_responses"):
            list_responses(OPPORTUNITY_ID)


class TestOpportunitiesTable:
    def test_get_opportunity_not_found(self, mock_opportunities_supabase):
        from fulqrun.db.opportunities import get_opportunity

        mock_select = mock_opportunities_supabase.table.return_value.select.return_value
        mock_select.eq.return_value.execute.return_value = MagicMock(data=[])

        assert get_opportunity(OPPORTUNITY_ID) is None

    def test_get_opportunity(self, mock_opportunities_supabase):
        from fulqrun.db.opportunities import get_opportunity

        mock_select = mock_opportunities_supabase.table.return_value.select.return_value
        mock_select.eq.return_value.execute.return_value = MagicMock(
            data=[{"id": str(OPPORTUNITY_ID), "peak_stage": "engaging"}]
        )

        assert get_opportunity(OPPORTUNITY_ID)["peak_stage"] == "engaging"

    def test_list_opportunity_refs_for_organization(self, mock_opportunities_supabase):
        from fulqrun.db.opportunities import list_opportunity_refs

        mock_select = mock_opportunities_supabase.table.return_value.select.return_value
        mock_range = mock_select.eq.return_value.order.return_value.range
        rows = [
            {"id": "a", "organization_id": str(ORGANIZATION_ID)},
            {"id": "b", "organization_id": str(ORGANIZATION_ID)},
        ]
        mock_range.return_value.execute.return_value = MagicMock(data=rows)

        assert list_opportunity_refs(ORGANIZATION_ID, offset=200, limit=100) == rows
        mock_opportunities_supabase.table.return_value.select.assert_called_once_with(
            "id, organization_id"
        )
        mock_select.eq.assert_called_once_with("organization_id", str(ORGANIZATION_ID))
        mock_range.assert_called_once_with(200, 299)

    def test_list_opportunity_refs_all(self, mock_opportunities_supabase):
        from fulqrun.db.opportunities import list_opportunity_refs

        mock_select = mock_opportunities_supabase.table.return_value.select.return_value
        mock_range = mock_select.order.return_value.range
        mock_range.return_value.execute.return_value = MagicMock(data=[{"id": "a"}])

        assert list_opportunity_refs(None) == [{"id": "a"}]
        mock_select.eq.assert_not_called()

    def test_update_qualification_missing_opportunity(self, mock_opportunities_supabase):
        from fulqrun.db.opportunities import update_qualification

        mock_update = mock_opportunities_supabase.table.return_value.update.return_value
        mock_update.eq.return_value.execute.return_value = MagicMock(data=[])

        with pytest.raises(RuntimeError, match="Opportunity not found"):
            update_qualification(OPPORTUNITY_ID, {"meddpicc_score": 40})


class TestConfigurationsTable:
    def _tables(self, mock_client, active=None):
        tables = {
            "meddpicc_configurations": MagicMock(),
            "meddpicc_configuration_history": MagicMock(),
        }
        configs = tables["meddpicc_configurations"]
        configs.select.return_value.eq.return_value.eq.return_value.execute.return_value = (
            MagicMock(data=[active] if active else [])
        )
        configs.upsert.return_value.execute.return_value = MagicMock(
            data=[{"id": "cfg-1", "organization_id": str(ORGANIZATION_ID)}]
        )
        mock_client.table.side_effect = lambda name: tables[name]
        return tables

    def test_get_active_configuration(self, mock_configs_supabase):
        from fulqrun.db.qualification_configs import get_active_configuration

        tables = self._tables(mock_configs_supabase, active={"id": "cfg-1"})

        assert get_active_configuration(ORGANIZATION_ID) == {"id": "cfg-1"}
        select = tables["meddpicc_configurations"].select.return_value
        select.eq.assert_called_once_with("organization_id", str(ORGANIZATION_ID))
        select.eq.return_value.eq.assert_called_once_with("is_active", True)

    def test_save_new_configuration_records_create(self, mock_configs_supabase):
        from fulqrun.db.qualification_configs import save_configuration

        tables = self._tables(mock_configs_supabase)

        record = save_configuration(
            ORGANIZATION_ID, {"project_name": "Acme", "version": "2.0"}, changed_by="admin@acme.io"
        )

        assert record["id"] == "cfg-1"
        upserted = tables["meddpicc_configurations"].upsert.call_args[0][0]
        assert upserted["name"] == "Acme"
        assert upserted["is_active"] is True
        history = tables["meddpicc_configuration_history"].insert.call_args[0][0]
        assert history["change_type"] == "create"
        assert history["previous_data"] is None
        assert history["changed_by"] == "admin@acme.io"

    def test_save_existing_configuration_records_update(self, mock_configs_supabase):
        from fulqrun.db.qualification_configs import save_configuration

        active = {"id": "cfg-1", "configuration_data": {"version": "1.0"}}
        tables = self._tables(mock_configs_supabase, active=active)

        save_configuration(ORGANIZATION_ID, {"project_name": "Acme", "version": "2.0"})

        history = tables["meddpicc_configuration_history"].insert.call_args[0][0]
        assert history["change_type"] == "update"
        assert history["previous_data"] == {"version": "1.0"}

    def test_deactivate_records_reset(self, mock_configs_supabase):
        from fulqrun.db.qualification_configs import deactivate_configurations

        active = {"id": "cfg-1", "configuration_data": {"version": "1.0"}}
        tables = self._tables(mock_configs_supabase, active=active)

        deactivate_configurations(ORGANIZATION_ID, changed_by="admin@acme.io")

        tables["meddpicc_configurations"].update.assert_called_once()
        assert tables["meddpicc_configurations"].update.call_args[0][0]["is_active"] is False
        history = tables["meddpicc_configuration_history"].insert.call_args[0][0]
        assert history["change_type"] == "reset"

    def test_deactivate_without_active_config_skips_history(self, mock_configs_supabase):
        from fulqrun.db.qualification_configs import deactivate_configurations

        tables = self._tables(mock_configs_supabase)

        deactivate_configurations(ORGANIZATION_ID)

        tables["meddpicc_configuration_history"].insert.assert_not_called()

    def test_list_history(self, mock_configs_supabase):
        from fulqrun.db.qualification_configs import list_configuration_history

        tables = self._tables(mock_configs_supabase)
        history = tables["meddpicc_configuration_history"]
        chain = history.select.return_value.eq.return_value.order.return_value.limit
        chain.return_value.execute.return_value = MagicMock(data=[{"change_type": "create"}])

        assert list_configuration_history(ORGANIZATION_ID, limit=10) == [{"change_type": "create"}]
        history.select.return_value.eq.return_value.order.assert_called_once_with(
            "created_at", desc=True
        )
        chain.assert_called_once_with(10)


class TestSupabaseClient:
    def test_client_created_once(self):
        from fulqrun.core.config import get_settings
        from fulqrun.db.supabase_client import get_supabase

        get_settings.cache_clear()
        get_supabase.cache_clear()
        try:
            with patch("fulqrun.db.supabase_client.create_client") as mock_create:
                first = get_supabase()
                second = get_supabase()
        finally:
            get_supabase.cache_clear()

        assert first is second
        mock_create.assert_called_once_with("https://test.supabase.co", "test-key")

    def test_initialization_error_wrapped(self):
        from fulqrun.db.supabase_client import get_supabase

        get_supabase.cache_clear()
        try:
            with patch("fulqrun.db.supabase_client.create_client") as mock_create:
                mock_create.side_effect = ValueError("Invalid URL")
                with pytest.raises(RuntimeError, match="Failed to initialize Supabase client"):
                    get_supabase()
        finally:
            get_supabase.cache_clear()
