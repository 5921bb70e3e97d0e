from __future__ import annotations

import time
from typing import Any, Callable, Optional

from google import genai as ggenai
from google.genai import types

from veo_analyzer.core.exceptions import ConfigurationError
from veo_analyzer.core.logger import log_info, log_warning
from veo_analyzer.services.document import pretty_json

ProgressCallback = Callable[[str], None]

# =========================================================
# Config / Defaults
# =========================================================
DEFAULT_VISION_MODEL = "gemini-2.5-flash"

PROGRESS_PREPARING = "Preparing video for analysis..."
PROGRESS_ANALYZING = "Uploading and analyzing with Gemini AI... This may take a moment."
PROGRESS_FORMATTING = "Formatting response..."

ANALYSIS_INSTRUCTIONS = (
    "Analyze this video in detail to generate prompts for a video generation model. "
    "Create a comprehensive JSON object that describes the video's content.\n"
    "The JSON should include a title, a brief summary, and a breakdown of key scenes.\n"
    "IMPORTANT: Each scene must not be longer than 8 seconds. If a continuous action takes longer "
    "than 8 seconds, you must split it into multiple consecutive scenes.\n"
    "For each scene, provide a start and end timestamp (in seconds, as a number), a detailed "
    "description, a list of prominent objects, and a list of actions taking place.\n"
    "Additionally, if there is any spoken dialogue or speech in a scene, transcribe it accurately. "
    "IMPORTANT: You must identify and separate dialogue by speaker. Label them generically as "
    "'Person 1', 'Person 2', etc., unless their names are clear. Structure the dialogue as a list "
    "of objects, each with a 'speaker' and their 'line'.\n"
    "Adhere strictly to the provided JSON schema. Ensure all descriptions are clear and concise, "
    "suitable for generating cinematic shots."
)

_DIALOGUE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "speaker": types.Schema(type=types.Type.STRING, description="The identified speaker (e.g., 'Person 1', 'Narrator')."),
        "line": types.Schema(type=types.Type.STRING, description="The transcribed line of dialogue."),
    },
    required=["speaker", "line"],
)

_SCENE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "scene_id": types.Schema(type=types.Type.INTEGER, description="A unique identifier for the scene, starting from 1."),
        "timestamp_start_seconds": types.Schema(type=types.Type.NUMBER, description="The start time of the scene in seconds."),
        "timestamp_end_seconds": types.Schema(type=types.Type.NUMBER, description="The end time of the scene in seconds."),
        "description": types.Schema(type=types.Type.STRING, description="A detailed description of what happens in this scene."),
        "dialogue": types.Schema(
            type=types.Type.ARRAY,
            description="Transcribed dialogue or speech from the scene, separated by speaker. Omit if there is no speech.",
            items=_DIALOGUE_SCHEMA,
        ),
        "objects": types.Schema(
            type=types.Type.ARRAY,
            description="A list of prominent objects visible in the scene.",
            items=types.Schema(type=types.Type.STRING),
        ),
        "actions": types.Schema(
            type=types.Type.ARRAY,
            description="A list of key actions or events occurring in the scene.",
            items=types.Schema(type=types.Type.STRING),
        ),
    },
    required=["scene_id", "timestamp_start_seconds", "timestamp_end_seconds", "description", "objects", "actions"],
)

ANALYSIS_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "title": types.Schema(type=types.Type.STRING, description="A concise, descriptive title for the video."),
        "summary": types.Schema(type=types.Type.STRING, description="A one-paragraph summary of the video content."),
        "scenes": types.Schema(
            type=types.Type.ARRAY,
            description="A list of distinct scenes in the video, each no longer than 8 seconds.",
            items=_SCENE_SCHEMA,
        ),
    },
    required=["title", "summary", "scenes"],
)


# =========================================================
# Small helpers
# =========================================================
def _pick_text_from_response(resp: Any) -> str:
    """Text of an SDK response; falls back to joining the first candidate's parts."""
    t = getattr(resp, "text", None)
    if isinstance(t, str) and t:
        return t
    for c in getattr(resp, "candidates", None) or []:
        content = getattr(c, "content", None)
        parts = getattr(content, "parts", None) or []
        s = "".join(getattr(p, "text", None) or "" for p in parts)
        if s:
            return s
    return ""


def _notify(progress: Optional[ProgressCallback], message: str) -> None:
    if progress is not None:
        progress(message)


# =========================================================
# Analysis client
# =========================================================
class AnalysisClient:
    """
    Scene-by-scene video analysis with Gemini.

    The API key is injected at construction and checked before any request is
    built. `client` lets callers pass a pre-built google.genai client.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = DEFAULT_VISION_MODEL,
        client: Optional[Any] = None,
    ):
        self.api_key = (api_key or "").strip()
        self.model_name = model_name or DEFAULT_VISION_MODEL
        self._client = client

    def validate(self) -> None:
        if not self.api_key:
            raise ConfigurationError("GEMINI_API_KEY environment variable not set.")

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = ggenai.Client(api_key=self.api_key)
        return self._client

    def build_contents(self, video_bytes: bytes, mime_type: str) -> list:
        # inline_data is base64-encoded by the SDK on the wire
        return [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_text(text=ANALYSIS_INSTRUCTIONS),
                    types.Part.from_bytes(data=video_bytes, mime_type=mime_type),
                ],
            )
        ]

    async def analyze(
        self,
        video_bytes: bytes,
        mime_type: str,
        progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Returns the model output as 2-space pretty-printed JSON, or the raw
        text when the output does not parse. Remote errors propagate as-is.
        """
        self.validate()

        _notify(progress, PROGRESS_PREPARING)
        contents = self.build_contents(video_bytes, mime_type)
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=ANALYSIS_SCHEMA,
        )
        client = self._get_client()

        _notify(progress, PROGRESS_ANALYZING)
        t0 = time.perf_counter()
        log_info(f"ANALYZE start model={self.model_name} mime={mime_type} bytes={len(video_bytes)}")
        resp = await client.aio.models.generate_content(
            model=self.model_name,
            contents=contents,
            config=config,
        )
        dt = int((time.perf_counter() - t0) * 1000)

        _notify(progress, PROGRESS_FORMATTING)
        raw_text = _pick_text_from_response(resp)
        formatted = pretty_json(raw_text)
        if formatted is None:
            log_warning(f"ANALYZE malformed_json chars={len(raw_text)} dt_ms={dt}")
            return raw_text
        log_info(f"ANALYZE ok chars={len(formatted)} dt_ms={dt}")
        return formatted
