"""Tests for POST /ai-chat."""

from unittest.mock import patch

import pytest

from conftest import completion, fake_response

AUTH = {"Authorization": "Bearer session-token"}


def test_success_returns_upstream_response(client, gateway):
    gateway.return_value = fake_response(200, completion("Closures capture variables."))
    resp = client.post("/ai-chat", json={"message": "what is a closure?"}, headers=AUTH)
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "response": "Closures capture variables."}


def test_context_forwarded_as_roles(client, gateway):
    context = [{"content": "hi", "isUser": True}, {"content": "hello", "isUser": False}]
    client.post("/ai-chat", json={"message": "next", "context": context}, headers=AUTH)
    messages = gateway.call_args.kwargs["json"]["messages"]
    assert [(m["role"], m["content"]) for m in messages[1:]] == [
        ("user", "hi"), ("assistant", "hello"), ("user", "next"),
    ]


def test_missing_authorization(client, gateway):
    resp = client.post("/ai-chat", json={"message": "hi"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Authentication required"}
    gateway.assert_not_called()


def test_auth_checked_before_body(client, gateway):
    resp = client.post("/ai-chat", json={"message": ""})
    assert resp.status_code == 401


def test_auth_checked_before_malformed_json(client, gateway):
    resp = client.post("/ai-chat", content="{not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Authentication required"}


def test_malformed_json_with_auth(client, gateway):
    resp = client.post(
        "/ai-chat", content="{not json",
        headers={"Content-Type": "application/json", **AUTH},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request body"


def test_missing_message(client, gateway):
    resp = client.post("/ai-chat", json={}, headers=AUTH)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Valid message is required"


def test_non_string_message(client, gateway):
    resp = client.post("/ai-chat", json={"message": ["hi"]}, headers=AUTH)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Valid message is required"


def test_whitespace_message(client, gateway):
    resp = client.post("/ai-chat", json={"message": "   "}, headers=AUTH)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Message cannot be empty"


def test_message_too_long(client, gateway):
    resp = client.post("/ai-chat", json={"message": "a" * 10001}, headers=AUTH)
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Message exceeds maximum length"}
    gateway.assert_not_called()


def test_message_at_limit_is_accepted(client, gateway):
    resp = client.post("/ai-chat", json={"message": "a" * 10000}, headers=AUTH)
    assert resp.status_code == 200


def test_context_too_long(client, gateway):
    context = [{"content": "x", "isUser": True}] * 51
    resp = client.post("/ai-chat", json={"message": "hi", "context": context}, headers=AUTH)
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid context data"}


def test_context_at_limit_is_accepted(client, gateway):
    context = [{"content": "x", "isUser": i % 2 == 0} for i in range(50)]
    resp = client.post("/ai-chat", json={"message": "hi", "context": context}, headers=AUTH)
    assert resp.status_code == 200


def test_context_not_a_list(client, gateway):
    resp = client.post("/ai-chat", json={"message": "hi", "context": {"a": 1}}, headers=AUTH)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid context data"


@pytest.mark.parametrize("entry", [
    {"text": "x"},
    {"content": "x", "isUser": "yes"},
    {"content": "x", "isUser": 1},
    {"content": 1, "isUser": True},
])
def test_context_bad_entry(client, gateway, entry):
    resp = client.post("/ai-chat", json={"message": "hi", "context": [entry]}, headers=AUTH)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid context data"
    gateway.assert_not_called()


def test_length_counts_utf16_units(client, gateway):
    # each emoji is two UTF-16 code units
    resp = client.post("/ai-chat", json={"message": "\U0001F600" * 5001}, headers=AUTH)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Message exceeds maximum length"

    resp = client.post("/ai-chat", json={"message": "\U0001F600" * 5000}, headers=AUTH)
    assert resp.status_code == 200


def test_error_envelope_in_openapi(client):
    schema = client.get("/openapi.json").json()
    responses = schema["paths"]["/ai-chat"]["post"]["responses"]
    assert responses["401"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
    assert "ErrorResponse" in schema["components"]["schemas"]


def test_upstream_rate_limit(client, gateway):
    gateway.return_value = fake_response(429)
    resp = client.post("/ai-chat", json={"message": "hi"}, headers=AUTH)
    assert resp.status_code == 429
    assert resp.json()["error"] == "Rate limits exceeded, please try again later."


def test_upstream_payment_required(client, gateway):
    gateway.return_value = fake_response(402)
    resp = client.post("/ai-chat", json={"message": "hi"}, headers=AUTH)
    assert resp.status_code == 402
    assert resp.json()["error"] == "Payment required, please add funds to your workspace."


def test_unexpected_failure_is_generic(client, gateway):
    with patch("smart_review.backend.chat_reply", side_effect=RuntimeError("secret detail")):
        resp = client.post("/ai-chat", json={"message": "hi"}, headers=AUTH)
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "An error occurred processing your request"}
