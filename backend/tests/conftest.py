"""Shared fixtures: app client with a temp sqlite history store and a fake gateway."""

import os
from unittest.mock import MagicMock, patch

# keep tests on the local sqlite store regardless of the developer's shell
os.environ.pop("SUPABASE_URL", None)
os.environ.pop("SUPABASE_SERVICE_ROLE_KEY", None)

import pytest
from fastapi.testclient import TestClient

from smart_review import db, llm_client
from smart_review.backend import app
from smart_review.db import SQLiteHistoryStore, get_history_store


def fake_response(status_code=200, body=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 300
    resp.text = text
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body
    return resp


def completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture(autouse=True)
def _no_supabase(monkeypatch):
    monkeypatch.setattr(db, "supabase", None)


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setattr(llm_client, "API_KEY", "test-key")
    return "test-key"


@pytest.fixture
def gateway(api_key):
    """Patched requests.post; set ``.return_value`` to a fake_response()."""
    with patch("smart_review.llm_client.requests.post") as post:
        post.return_value = fake_response(200, completion("looks good"))
        yield post


@pytest.fixture
def store(tmp_path):
    return SQLiteHistoryStore(str(tmp_path / "history.sqlite"))


@pytest.fixture
def client(store):
    app.dependency_overrides[get_history_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
