from typing import Generator, List, Optional
from unittest.mock import MagicMock, Mock

import pytest
from fastapi.testclient import TestClient

from jiji.config.settings import Settings
from jiji.database.supabase_client import SupabaseClients
from jiji.main import create_app


def make_settings(**overrides) -> Settings:
    """Settings isolated from the developer's .env and Supabase environment."""
    values = {
        "supabase_url": None,
        "supabase_anon_key": None,
        "supabase_service_role_key": None,
        "environment": "test",
        "rate_limit_enabled": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_resource_row(resource_id: str, title: str, resource_type: str = "ppt", **extra) -> dict:
    row = {
        "id": resource_id,
        "title": title,
        "description": f"About {title}",
        "type": resource_type,
        "file_url": f"https://files.example.com/{resource_id}",
        "storage_path": f"presentations/{resource_id}.pptx",
        "tags": [],
        "created_at": "2026-02-08T10:00:00+00:00",
    }
    row.update(extra)
    return row


def fake_supabase(text_rows: Optional[List[dict]] = None, tag_rows: Optional[List[dict]] = None) -> MagicMock:
    """Supabase client double answering the resource title/description and tag lookups."""
    client = MagicMock(name="supabase")
    select = client.table.return_value.select.return_value
    select.or_.return_value.order.return_value.limit.return_value.execute.return_value = Mock(data=text_rows or [])
    select.overlaps.return_value.order.return_value.limit.return_value.execute.return_value = Mock(data=tag_rows or [])
    return client


def fake_admin(saved_row: Optional[dict] = None) -> MagicMock:
    admin = MagicMock(name="supabase_admin")
    admin.table.return_value.insert.return_value.execute.return_value = Mock(data=[saved_row] if saved_row else [])
    return admin


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def mock_mode_client(settings) -> Generator[TestClient, None, None]:
    """App with no Supabase configuration at all"""
    app = create_app(settings=settings, clients=SupabaseClients())
    with TestClient(app) as client:
        yield client


@pytest.fixture
def supabase_client() -> MagicMock:
    return fake_supabase()


@pytest.fixture
def admin_client() -> MagicMock:
    return fake_admin({
        "id": "query-1",
        "user_id": "user-123",
        "query_text": "Explain RAG",
        "answer_text": "answer",
        "resources_returned": [],
        "created_at": "2026-02-08T10:00:00+00:00",
    })


@pytest.fixture
def live_clients(supabase_client, admin_client) -> SupabaseClients:
    return SupabaseClients(client=supabase_client, admin_client=admin_client)


@pytest.fixture
def live_client(settings, live_clients) -> Generator[TestClient, None, None]:
    """App whose Supabase handles are test doubles"""
    app = create_app(settings=settings, clients=live_clients)
    with TestClient(app) as client:
        yield client
