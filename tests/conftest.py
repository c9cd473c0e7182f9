"""Pytest configuration and fixtures."""

import os

import pytest


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["SUPABASE_URL"] = "https://test.supabase.co"
    os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-key"
    os.environ["FULQRUN_ENV"] = "test"


@pytest.fixture
def config():
    """Default qualification configuration."""
    from fulqrun.core.qualification import DEFAULT_QUALIFICATION_CONFIG

    return DEFAULT_QUALIFICATION_CONFIG
