"""
Tests for the HTTP API, driven through FastAPI's TestClient against the
scripted transport.
"""

import base64
import json

import pytest
from fastapi.testclient import TestClient

from playground.server import create_app
from playground.streaming.state import SessionState


@pytest.fixture
def app(playground_home, transport):
    app = create_app(home=playground_home, transport=transport)
    app.state.context.credentials.save("openai", "sk-test")
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as tc:
        yield tc


@pytest.fixture
def conversation_id(client):
    return client.post("/api/conversations", json={}).json()["id"]


def read_events(response):
    return [json.loads(line[len("data: "):]) for line in response.text.splitlines() if line.startswith("data: ")]


# ── Providers and settings ─────────────────────────────────────────

class TestProviders:

    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "ok"}

    def test_list_reports_key_status(self, client):
        providers = {p["id"]: p for p in client.get("/api/providers").json()}
        assert providers["openai"]["hasKey"] is True
        assert providers["anthropic"]["hasKey"] is False
        assert providers["ollama"]["requiresKey"] is False
        assert providers["openai"]["models"][0]["id"] == "gpt-4o"

    def test_unknown_provider_404(self, client):
        assert client.get("/api/providers/nope").status_code == 404
        assert client.put("/api/providers/nope/key", json={"key": "x"}).status_code == 404

    def test_save_and_clear_key(self, client):
        assert client.put("/api/providers/groq/key", json={"key": "gsk"}).json() == {"hasKey": True}
        assert client.get("/api/providers/groq").json()["hasKey"] is True
        assert client.delete("/api/providers/groq/key").json() == {"hasKey": False}
        assert client.put("/api/providers/groq/key", json={"key": ""}).json() == {"hasKey": False}

    def test_connection_probe(self, client, transport):
        assert client.post("/api/providers/openai/test").json() == {"ok": True}
        transport.connection_ok = False
        assert client.post("/api/providers/openai/test").json() == {"ok": False}

    def test_refresh_models(self, client, transport):
        from playground.models.provider import Model

        assert client.post("/api/providers/openai/models/refresh").status_code == 502
        transport.models = [Model(id="gpt-live", name="gpt-live")]
        assert [m["id"] for m in client.post("/api/providers/openai/models/refresh").json()] == ["gpt-live"]
        assert client.get("/api/providers/openai").json()["models"][0]["id"] == "gpt-live"

    def test_settings_round_trip(self, client):
        settings = client.get("/api/settings").json()
        settings["agenticMode"] = "react"
        settings["enabledToolNames"] = ["calculator"]
        assert client.put("/api/settings", json=settings).status_code == 200
        assert client.get("/api/settings").json()["agenticMode"] == "react"

    def test_invalid_settings_rejected(self, client):
        settings = client.get("/api/settings").json()
        settings["agenticMode"] = "galaxy_brain"
        assert client.put("/api/settings", json=settings).status_code == 422

    def test_usage(self, client, transport):
        transport.usage.add("openai", 12)
        assert client.get("/api/usage").json() == {"openai": 12}


# ── Profiles ───────────────────────────────────────────────────────

class TestProfiles:

    def test_save_apply_delete(self, client):
        settings = client.get("/api/settings").json()
        settings.update({"selectedProviderId": "groq", "selectedModelId": "llama-3.3-70b-versatile"})
        client.put("/api/settings", json=settings)
        profile = client.post("/api/profiles", json={"name": "Fast"}).json()
        assert profile["providerId"] == "groq"

        settings.update({"selectedProviderId": "openai", "selectedModelId": "gpt-4o"})
        client.put("/api/settings", json=settings)
        applied = client.post(f"/api/profiles/{profile['id']}/apply").json()
        assert applied["selectedProviderId"] == "groq"
        assert client.get("/api/settings").json()["selectedModelId"] == "llama-3.3-70b-versatile"

        assert client.delete(f"/api/profiles/{profile['id']}").status_code == 200
        assert client.delete(f"/api/profiles/{profile['id']}").status_code == 404
        assert client.get("/api/profiles").json() == []

    def test_blank_name(self, client):
        assert client.post("/api/profiles", json={"name": "  "}).status_code == 400

    def test_apply_missing(self, client):
        assert client.post("/api/profiles/missing/apply").status_code == 404


# ── Conversations ──────────────────────────────────────────────────

class TestConversations:

    def test_create_uses_current_settings(self, client):
        conversation = client.post("/api/conversations", json={"title": "Notes"}).json()
        assert conversation["title"] == "Notes"
        assert conversation["providerId"] == "openai"
        assert conversation["modelId"] == "gpt-4o"

    def test_list_rename_delete(self, client, conversation_id):
        assert client.patch(f"/api/conversations/{conversation_id}", json={"title": "Renamed"}).json()["title"] == "Renamed"
        summaries = client.get("/api/conversations").json()
        assert summaries[0]["title"] == "Renamed"
        assert summaries[0]["messageCount"] == 0
        assert client.delete(f"/api/conversations/{conversation_id}").status_code == 200
        assert client.get(f"/api/conversations/{conversation_id}").status_code == 404

    def test_missing_conversation(self, client):
        assert client.get("/api/conversations/none").status_code == 404
        assert client.post("/api/conversations/none/turns", json={"text": "hi"}).status_code == 404

    def test_message_management(self, client, conversation_id, transport):
        transport.queue("one", "two")
        client.post(f"/api/conversations/{conversation_id}/turns", json={"text": "first"})
        client.post(f"/api/conversations/{conversation_id}/turns", json={"text": "second"})
        messages = client.get(f"/api/conversations/{conversation_id}").json()["messages"]
        assert [m["content"] for m in messages] == ["first", "one", "second", "two"]

        forked = client.post(f"/api/conversations/{conversation_id}/fork",
                             json={"fromMessageId": messages[1]["id"]}).json()
        assert [m["content"] for m in forked["messages"]] == ["first", "one"]

        star_url = f"/api/conversations/{conversation_id}/messages/{messages[1]['id']}/star"
        assert client.put(star_url).json() == {"starred": True}
        starred = client.get(f"/api/conversations/{conversation_id}/starred").json()
        assert [m["id"] for m in starred] == [messages[1]["id"]]
        assert client.delete(star_url).json() == {"starred": False}

        removed = client.post(f"/api/conversations/{conversation_id}/messages/{messages[1]['id']}/truncate").json()
        assert removed == {"removed": 2}
        assert client.delete(f"/api/conversations/{conversation_id}/messages/{messages[0]['id']}").status_code == 200
        assert client.post(f"/api/conversations/{conversation_id}/clear").json() == {"cleared": True}

    def test_star_missing_message(self, client, conversation_id):
        assert client.put(f"/api/conversations/{conversation_id}/messages/nope/star").status_code == 404


# ── Turns ──────────────────────────────────────────────────────────

class TestTurns:

    def test_turn_streams_events(self, client, conversation_id, transport):
        transport.queue(["Hi ", "there"])
        response = client.post(f"/api/conversations/{conversation_id}/turns", json={"text": "Hello"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")

        events = read_events(response)
        assert [e["data"]["delta"] for e in events if e["type"] == "delta"] == ["Hi ", "there"]
        assert events[-1]["type"] == "done"
        assert events[-1]["data"]["result"]["outcome"] == "completed"
        assert client.get(f"/api/conversations/{conversation_id}/state").json() == {"state": "idle"}

    def test_empty_turn_rejected(self, client, conversation_id):
        assert client.post(f"/api/conversations/{conversation_id}/turns", json={"text": "  "}).status_code == 400

    def test_slash_command_turn(self, client, conversation_id, transport):
        events = read_events(client.post(f"/api/conversations/{conversation_id}/turns", json={"text": "/upper hey"}))
        assert events[-1]["data"]["result"]["outcome"] == "local"
        assert transport.payloads == []

    def test_errored_turn(self, client, conversation_id):
        client.delete("/api/providers/openai/key")
        events = read_events(client.post(f"/api/conversations/{conversation_id}/turns", json={"text": "Hi"}))
        errors = [e for e in events if e["type"] == "error"]
        assert errors[0]["data"]["message"] == "No API key for OpenAI. Add one in settings."
        assert events[-1]["data"]["result"]["outcome"] == "errored"

    def test_attachment_upload(self, client, conversation_id, transport):
        upload = {"name": "notes.txt", "mimeType": "text/plain", "data": base64.b64encode(b"remember milk").decode()}
        client.post(f"/api/conversations/{conversation_id}/turns", json={"text": "Summarise", "attachments": [upload]})
        sent = json.dumps(transport.payloads[0]["messages"][-1]["content"])
        assert "--- Attached: notes.txt ---" in sent
        assert "remember milk" in sent

    def test_bad_attachment(self, client, conversation_id):
        upload = {"name": "x.txt", "data": "***"}
        response = client.post(f"/api/conversations/{conversation_id}/turns", json={"text": "hi", "attachments": [upload]})
        assert response.status_code == 400

    def test_busy_conversation_rejects_second_turn(self, client, app, conversation_id):
        app.state.context.session_for(conversation_id)._state = SessionState.STREAMING
        assert client.post(f"/api/conversations/{conversation_id}/turns", json={"text": "Hi"}).status_code == 409
        assert client.post(f"/api/conversations/{conversation_id}/retry").status_code == 409

    def test_reserved_conversation_rejects_second_turn(self, client, app, conversation_id):
        session = app.state.context.session_for(conversation_id)
        assert session.reserve()
        assert client.post(f"/api/conversations/{conversation_id}/turns", json={"text": "Hi"}).status_code == 409
        session.release()
        response = client.post(f"/api/conversations/{conversation_id}/turns", json={"text": "Hi"})
        assert response.status_code == 200
        assert read_events(response)[-1]["type"] == "done"
        assert not session.busy

    def test_retry(self, client, conversation_id, transport):
        transport.queue("first", "second")
        client.post(f"/api/conversations/{conversation_id}/turns", json={"text": "Hi"})
        events = read_events(client.post(f"/api/conversations/{conversation_id}/retry"))
        assert events[-1]["data"]["result"]["outcome"] == "completed"
        messages = client.get(f"/api/conversations/{conversation_id}").json()["messages"]
        assert [m["content"] for m in messages] == ["Hi", "second"]

    def test_cancel_when_idle(self, client, conversation_id):
        assert client.post(f"/api/conversations/{conversation_id}/cancel").json() == {"cancelled": False}


# ── Tools and human input ──────────────────────────────────────────

class TestToolsAndHumanInput:

    def test_list_tools(self, client):
        tools = {t["name"]: t for t in client.get("/api/tools").json()}
        assert tools["generate_password"]["requiresConfirmation"] is True
        assert tools["calculator"]["requiresConfirmation"] is False
        assert "json" in tools["format_json"]["parameters"]["properties"]

    def test_run_tool_directly(self, client):
        result = client.post("/api/tools/calculator/run", json={"params": {"expression": "3*3"}}).json()
        assert result["text"] == "3*3 = 9"
        assert result["error"] is False

    def test_run_unknown_tool(self, client):
        result = client.post("/api/tools/nope/run", json={"params": {}}).json()
        assert result["error"] is True
        assert result["text"] == "Unknown tool: nope"

    def test_no_pending_request(self, client):
        assert client.get("/api/human-input").json() is None
        assert client.post("/api/human-input/abc/resolve", json={"answers": {}}).status_code == 409
        assert client.post("/api/human-input/abc/cancel").status_code == 409

    def test_shutdown_closes_transport(self, app, transport):
        with TestClient(app):
            pass
        assert transport.closed
