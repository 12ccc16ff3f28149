"""
Pytest config.

Every test gets a FastAPI app wired to an in-memory FakeSupabase, so no test
talks to a real Supabase project.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from textpost.config import Settings, get_settings
from textpost.main import create_app

from tests.fake_supabase import FakeSupabase


@pytest.fixture(autouse=True)
def _supabase_env(monkeypatch: pytest.MonkeyPatch):
    """Settings are loaded from the environment; never pick up a developer's .env."""
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "test-anon-key")
    monkeypatch.chdir(Path(__file__).parent)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def app(settings: Settings, fake_supabase: FakeSupabase):
    return create_app(settings, supabase=fake_supabase)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
