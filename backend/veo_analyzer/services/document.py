# veo_analyzer/services/document.py
from __future__ import annotations
import json
from typing import Optional

from pydantic import ValidationError

from veo_analyzer.models.analysis import VideoAnalysis


def pretty_json(text: str) -> Optional[str]:
    """
    Re-serialize JSON text with 2-space indentation ("key": value).
    Returns None when the text is not valid JSON.
    """
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError):
        return None
    return json.dumps(parsed, indent=2, ensure_ascii=False)


def parse_analysis(text: str) -> Optional[VideoAnalysis]:
    """Parse analysis JSON text into the model; None if empty, malformed or off-schema."""
    if not (text or "").strip():
        return None
    try:
        return VideoAnalysis.model_validate_json(text)
    except ValidationError:
        return None


def export_filename(original_name: Optional[str]) -> str:
    # "clip.mp4" -> "clip_analysis.json"
    stem = (original_name or "").split(".")[0]
    return f"{stem}_analysis.json" if stem else "analysis.json"
