"""
Tests for the Gemini analysis client.
"""
import asyncio
import json

import pytest

from veo_analyzer.core.exceptions import ConfigurationError
from veo_analyzer.services.gemini import (
    ANALYSIS_INSTRUCTIONS,
    PROGRESS_ANALYZING,
    PROGRESS_FORMATTING,
    PROGRESS_PREPARING,
    AnalysisClient,
)


def _analyze(client, data=b"fake-video", mime="video/mp4", progress=None):
    return asyncio.run(client.analyze(data, mime, progress))


class TestCredentials:
    """Tests for API key validation."""

    def test_missing_key_fails_before_request(self, fake_client_factory):
        fake = fake_client_factory(text="{}")
        client = AnalysisClient(api_key="", client=fake)
        messages = []

        with pytest.raises(ConfigurationError, match="GEMINI_API_KEY"):
            _analyze(client, progress=messages.append)

        assert fake.models.calls == []
        assert messages == []

    def test_blank_key_is_missing(self):
        with pytest.raises(ConfigurationError):
            AnalysisClient(api_key="   ").validate()


class TestAnalyze:
    """Tests for AnalysisClient.analyze."""

    def test_progress_milestones(self, fake_client_factory):
        client = AnalysisClient(api_key="k", client=fake_client_factory(text="{}"))
        messages = []

        _analyze(client, progress=messages.append)

        assert messages == [PROGRESS_PREPARING, PROGRESS_ANALYZING, PROGRESS_FORMATTING]

    def test_progress_is_optional(self, fake_client_factory):
        client = AnalysisClient(api_key="k", client=fake_client_factory(text="{}"))
        assert _analyze(client) == "{}"

    def test_pretty_prints_json(self, fake_client_factory, sample_analysis):
        compact = json.dumps(sample_analysis, separators=(",", ":"))
        client = AnalysisClient(api_key="k", client=fake_client_factory(text=compact))

        assert _analyze(client) == json.dumps(sample_analysis, indent=2)

    def test_malformed_output_returned_raw(self, fake_client_factory):
        raw = '{"title": "cut off", "scenes": ['
        client = AnalysisClient(api_key="k", client=fake_client_factory(text=raw))

        assert _analyze(client) == raw

    def test_remote_error_propagates(self, fake_client_factory):
        fake = fake_client_factory(error=RuntimeError("rate limited"))
        client = AnalysisClient(api_key="k", client=fake)

        with pytest.raises(RuntimeError, match="rate limited"):
            _analyze(client)
        assert len(fake.models.calls) == 1

    def test_request_shape(self, fake_client_factory):
        fake = fake_client_factory(text="{}")
        client = AnalysisClient(api_key="k", model_name="gemini-test", client=fake)

        _analyze(client, data=b"\x00\x01", mime="video/webm")

        call = fake.models.calls[0]
        assert call["model"] == "gemini-test"
        assert call["config"].response_mime_type == "application/json"
        assert call["config"].response_schema.required == ["title", "summary", "scenes"]

        parts = call["contents"][0].parts
        assert parts[0].text == ANALYSIS_INSTRUCTIONS
        assert parts[1].inline_data.mime_type == "video/webm"
        assert parts[1].inline_data.data == b"\x00\x01"

    def test_scene_schema_requirements(self, fake_client_factory):
        fake = fake_client_factory(text="{}")
        _analyze(AnalysisClient(api_key="k", client=fake))

        schema = fake.models.calls[0]["config"].response_schema
        scene = schema.properties["scenes"].items
        assert scene.required == [
            "scene_id", "timestamp_start_seconds", "timestamp_end_seconds",
            "description", "objects", "actions",
        ]
        assert "dialogue" not in scene.required
        assert scene.properties["dialogue"].items.required == ["speaker", "line"]

    def test_instructions_cover_scene_rules(self):
        assert "8 seconds" in ANALYSIS_INSTRUCTIONS
        assert "'Person 1', 'Person 2'" in ANALYSIS_INSTRUCTIONS
