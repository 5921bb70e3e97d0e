"""
Pytest configuration and fixtures for Veo Analyzer tests.
"""
import os
import json
import tempfile
from pathlib import Path
from types import SimpleNamespace

import pytest

# Set test environment before importing app modules
os.environ["GEMINI_API_KEY"] = "test-gemini-key"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="veo-uploads-")
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="veo-logs-")


class FakeModels:
    """Stands in for client.aio.models of google.genai."""

    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.gate = None
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text, candidates=[])


class FakeGenaiClient:
    def __init__(self, text=None, error=None):
        self.models = FakeModels(text=text, error=error)
        self.aio = SimpleNamespace(models=self.models)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_analysis():
    """Two scenes of a 10-second clip, the first with dialogue."""
    return {
        "title": "Greeting at the park",
        "summary": "A man walks into frame and greets the camera.",
        "scenes": [
            {
                "scene_id": 1,
                "timestamp_start_seconds": 0,
                "timestamp_end_seconds": 8,
                "description": "A man waves at the camera",
                "objects": ["man", "camera"],
                "actions": ["waving"],
                "dialogue": [{"speaker": "Person 1", "line": "Hello"}],
            },
            {
                "scene_id": 2,
                "timestamp_start_seconds": 8,
                "timestamp_end_seconds": 10,
                "description": "The man sits on a bench",
                "objects": ["man", "bench", "tree"],
                "actions": ["sitting down", "smiling"],
            },
        ],
    }


@pytest.fixture
def sample_json_text(sample_analysis):
    return json.dumps(sample_analysis, indent=2)


@pytest.fixture
def fake_client_factory():
    return FakeGenaiClient


@pytest.fixture
def video_store(temp_dir):
    from veo_analyzer.services.media import VideoStore

    return VideoStore(temp_dir, lambda name: f"/uploads/{name}")


@pytest.fixture
def make_session(video_store):
    """Build a Session around a fake Gemini client."""
    from veo_analyzer.services.gemini import AnalysisClient
    from veo_analyzer.services.session import Session

    def _make(fake=None, api_key="test-gemini-key"):
        fake = fake or FakeGenaiClient(text="{}")
        client = AnalysisClient(api_key=api_key, client=fake)
        return Session(client=client, store=video_store)

    return _make


@pytest.fixture
def api(video_store, sample_json_text):
    """TestClient wired to a registry whose Gemini client returns the sample analysis."""
    from fastapi.testclient import TestClient

    from veo_analyzer.api.dependencies import get_registry
    from veo_analyzer.main import app
    from veo_analyzer.services.gemini import AnalysisClient
    from veo_analyzer.services.registry import SessionRegistry
    from veo_analyzer.services.session import Session

    fake = FakeGenaiClient(text=sample_json_text)
    client = AnalysisClient(api_key="test-gemini-key", client=fake)
    registry = SessionRegistry(lambda: Session(client=client, store=video_store))

    app.dependency_overrides[get_registry] = lambda: registry
    yield SimpleNamespace(http=TestClient(app), registry=registry, fake=fake)
    app.dependency_overrides.clear()
