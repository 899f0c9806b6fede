import base64
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import requests

from conftest import PNG_B64
from origin.config import config
from origin.errors import RecognizerResponseInvalid, RecognizerUnavailable
from origin.models import Recognition
from origin.services.ai_service import ai_service
from origin.services.tts_service import tts_service
from origin.services.vocabulary_service import vocabulary_store

MOONCAKE = Recognition("Mooncake", "月饼", "yuèbǐng", "Shared during Mid-Autumn Festival.")
ATTRS = {"translation": "t", "pronunciation": "p", "cultural_note": ""}


def test_health(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.get_json()["status"] == "ok"


def test_scan_then_review_scan(client, recognizer):
    recognizer.result = MOONCAKE

    r = client.post("/api/scan", json={"image": PNG_B64, "userId": "alice"})
    assert r.status_code == 200
    body = r.get_json()
    assert body["english"] == "Mooncake"
    assert body["translation"] == "月饼"
    assert body["culturalContext"] == "Shared during Mid-Autumn Festival."
    assert body["timesSeen"] == 1
    assert body["isReview"] is False

    body = client.post("/api/scan", json={"image": PNG_B64, "userId": "alice"}).get_json()
    assert body["timesSeen"] == 2
    assert body["isReview"] is True


def test_scan_without_image(client, recognizer):
    r = client.post("/api/scan", json={"userId": "alice"})
    assert r.status_code == 400
    assert r.get_json()["error"] == "no_image_provided"
    assert recognizer.calls == []

    r = client.post("/api/scan", data="not json", content_type="text/plain")
    assert r.status_code == 400


def test_scan_not_recognized(client, recognizer):
    recognizer.result = None
    r = client.post("/api/scan", json={"image": PNG_B64, "userId": "alice"})
    assert r.status_code == 404
    assert r.get_json()["error"] == "item_not_recognized"
    assert client.get("/api/vocabulary/alice").get_json() == []


def test_scan_upstream_failures_are_500(client, recognizer):
    recognizer.error = RecognizerResponseInvalid(details="Expecting value")
    r = client.post("/api/scan", json={"image": PNG_B64})
    assert r.status_code == 500
    assert r.get_json() == {
        "error": "recognizer_response_invalid",
        "message": "Failed to parse AI response",
        "details": "Expecting value",
    }

    recognizer.error = RecognizerUnavailable()
    r = client.post("/api/scan", json={"image": PNG_B64})
    assert r.status_code == 500
    assert r.get_json()["error"] == "recognizer_unavailable"


def test_scan_storage_failure_is_500(client, recognizer, monkeypatch, tmp_path):
    recognizer.result = MOONCAKE
    monkeypatch.setattr(config, "DATABASE_PATH", str(tmp_path / "gone" / "x.db"))
    r = client.post("/api/scan", json={"image": PNG_B64})
    assert r.status_code == 500
    assert r.get_json()["error"] == "storage_unavailable"


def test_vocabulary_listing(client):
    now = datetime.now(timezone.utc)
    vocabulary_store.upsert_observation("alice", "zongzi", ATTRS, now - timedelta(hours=2))
    vocabulary_store.upsert_observation("alice", "mooncake", ATTRS, now - timedelta(hours=1))
    vocabulary_store.upsert_observation("bob", "tea", ATTRS, now)

    words = client.get("/api/vocabulary/alice").get_json()
    assert [w["english"] for w in words] == ["mooncake", "zongzi"]
    first = words[0]
    assert first["userId"] == "alice"
    assert first["timesSeen"] == 1
    assert first["lastSeenAt"].endswith("Z")
    assert set(first) == {
        "userId", "english", "translation", "pronunciation", "culturalContext",
        "timesSeen", "lastSeenAt", "nextReviewAt", "createdAt",
    }


def test_review_listing_only_due_words(client):
    now = datetime.now(timezone.utc)
    vocabulary_store.upsert_observation("alice", "tea", ATTRS, now - timedelta(days=3))
    vocabulary_store.upsert_observation("alice", "zongzi", ATTRS, now - timedelta(days=2))
    vocabulary_store.upsert_observation("alice", "mooncake", ATTRS, now)

    words = client.get("/api/review/alice").get_json()
    assert [w["english"] for w in words] == ["tea", "zongzi"]


def test_chat_uses_recent_vocabulary(client, monkeypatch):
    now = datetime.now(timezone.utc)
    for i in range(25):
        vocabulary_store.upsert_observation("alice", f"word{i:02d}", ATTRS, now + timedelta(seconds=i))
    captured = {}

    def fake_chat(message, history=None, words=None):
        captured.update(message=message, history=history, words=words)
        return "你好"

    monkeypatch.setattr(ai_service, "chat", fake_chat)
    r = client.post("/api/chat", json={
        "message": "hello",
        "userId": "alice",
        "conversationHistory": [{"isUser": True, "text": "hi"}],
    })

    assert r.status_code == 200
    assert r.get_json() == {"response": "你好"}
    assert captured["message"] == "hello"
    assert captured["history"] == [{"isUser": True, "text": "hi"}]
    assert len(captured["words"]) == 20
    assert captured["words"][0].lexical_key == "word24"


def test_chat_requires_message(client):
    r = client.post("/api/chat", json={"userId": "alice"})
    assert r.status_code == 400
    assert r.get_json()["error"] == "no_message_provided"


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def test_tts_returns_base64_audio(client, monkeypatch):
    monkeypatch.setattr(config, "ELEVENLABS_API_KEY", "xi-test")
    session = FakeSession(SimpleNamespace(ok=True, status_code=200, content=b"ID3audio", text=""))
    monkeypatch.setattr(tts_service, "session", session)

    r = client.post("/api/tts", json={"text": "月饼"})
    assert r.status_code == 200
    assert base64.b64decode(r.get_json()["audio"]) == b"ID3audio"
    url, kwargs = session.calls[0]
    assert url.endswith(f"/text-to-speech/{config.TTS_VOICE_ID}")
    assert kwargs["headers"]["xi-api-key"] == "xi-test"
    assert kwargs["json"]["model_id"] == config.TTS_MODEL_ID


def test_tts_upstream_error(client, monkeypatch):
    monkeypatch.setattr(config, "ELEVENLABS_API_KEY", "xi-test")
    session = FakeSession(SimpleNamespace(ok=False, status_code=401, content=b"", text="invalid key"))
    monkeypatch.setattr(tts_service, "session", session)

    r = client.post("/api/tts", json={"text": "hi"})
    assert r.status_code == 500
    assert r.get_json()["error"] == "speech_unavailable"
    assert r.get_json()["details"] == "invalid key"

    monkeypatch.setattr(tts_service, "session", FakeSession(error=requests.ConnectionError("down")))
    r = client.post("/api/tts", json={"text": "hi"})
    assert r.status_code == 500


def test_tts_requires_text(client):
    r = client.post("/api/tts", json={})
    assert r.status_code == 400
    assert r.get_json()["error"] == "no_text_provided"


def test_tts_without_api_key(client, monkeypatch):
    monkeypatch.setattr(config, "ELEVENLABS_API_KEY", "")
    r = client.post("/api/tts", json={"text": "hi"})
    assert r.status_code == 500
    assert r.get_json()["error"] == "speech_unavailable"


def test_scan_records_recognizer_output_as_is(client, recognizer):
    recognizer.result = Recognition("Moon Cake", "月餅", "yue bing", "Model wording about the festival.")

    body = client.post("/api/scan", json={"image": PNG_B64, "userId": "alice"}).get_json()
    assert body["english"] == "Moon Cake"
    assert body["translation"] == "月餅"
    assert body["pronunciation"] == "yue bing"
    assert body["culturalContext"] == "Model wording about the festival."

    words = client.get("/api/vocabulary/alice").get_json()
    assert [w["english"] for w in words] == ["moon cake"]
    assert words[0]["translation"] == "月餅"
    assert words[0]["culturalContext"] == "Model wording about the festival."


def test_cors_preflight_allows_browser_clients(client):
    r = client.options("/api/scan", headers={
        "Origin": "http://localhost:8081",
        "Access-Control-Request-Method": "POST",
    })
    assert r.status_code == 200
    assert r.headers.get("Access-Control-Allow-Origin") == "*"

    r = client.get("/", headers={"Origin": "http://localhost:8081"})
    assert r.headers.get("Access-Control-Allow-Origin") == "*"
