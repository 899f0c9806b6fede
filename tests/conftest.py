from types import SimpleNamespace

import pytest

from origin.config import config
from origin.services.scan_service import scan_service
from origin.services.vocabulary_service import VocabularyStore

# 1x1 transparent PNG
PNG_B64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="


class FakeRecognizer:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def recognize(self, image_bytes):
        self.calls.append(image_bytes)
        if self.error is not None:
            raise self.error
        return self.result


class FakeCompletions:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply()
        message = SimpleNamespace(content=reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def fake_client():
    def make(*replies):
        return SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions(replies)))
    return make


@pytest.fixture
def fake_recognizer():
    return FakeRecognizer


@pytest.fixture
def store(tmp_path):
    s = VocabularyStore(str(tmp_path / "vocabulary.db"))
    s.init_schema()
    return s


@pytest.fixture
def app(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "DATABASE_PATH", str(tmp_path / "app.db"))
    monkeypatch.setattr(config, "LOG_DIR", str(tmp_path / "logs"))
    from origin import create_app
    app = create_app()
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def recognizer(monkeypatch):
    """Replace the vision model behind /api/scan with a fake."""
    fake = FakeRecognizer()
    monkeypatch.setattr(scan_service, "recognizer", fake)
    return fake
