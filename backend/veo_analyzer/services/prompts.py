from __future__ import annotations
import math
from typing import List

from veo_analyzer.core.logger import log_warning
from veo_analyzer.models.analysis import Scene, ShotPrompt, VideoAnalysis
from veo_analyzer.services.document import parse_analysis


def format_time(seconds: float) -> str:
    """125.7 -> "2:05". Fractional seconds are truncated."""
    whole = math.floor(seconds)
    return f"{whole // 60}:{whole % 60:02d}"


def build_prompt_text(scene: Scene) -> str:
    text = f"Cinematic shot: {scene.description}."
    if scene.dialogue:
        dialogue = " ".join(f'{d.speaker}: "{d.line}"' for d in scene.dialogue)
        text += f" Dialogue: {dialogue}."
    text += f" Prominent objects: {', '.join(scene.objects)}."
    text += f" Actions: {', '.join(scene.actions)}."
    return text


def synthesize(analysis: VideoAnalysis) -> List[ShotPrompt]:
    """
    One shot prompt per scene, in the order the scenes appear.
    Scenes sharing a scene_id each get their own prompt.
    """
    return [
        ShotPrompt(
            id=scene.scene_id,
            timestamp=f"{format_time(scene.timestamp_start_seconds)} - {format_time(scene.timestamp_end_seconds)}",
            prompt=build_prompt_text(scene),
            scene=scene,
        )
        for scene in analysis.scenes
    ]


def derive_shot_prompts(json_text: str) -> List[ShotPrompt]:
    if not (json_text or "").strip():
        return []
    analysis = parse_analysis(json_text)
    if analysis is None:
        log_warning(f"PROMPTS parse_failed chars={len(json_text)}")
        return []
    return synthesize(analysis)
