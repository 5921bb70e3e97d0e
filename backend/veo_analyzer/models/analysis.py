from typing import List, Optional
from pydantic import BaseModel, ConfigDict


class DialogueLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    speaker: str
    line: str


class Scene(BaseModel):
    # NaN and 1e400 (inf) parse as floats but have no M:SS rendering
    model_config = ConfigDict(allow_inf_nan=False)

    scene_id: int
    timestamp_start_seconds: float
    timestamp_end_seconds: float
    description: str
    objects: List[str] = []
    actions: List[str] = []
    dialogue: Optional[List[DialogueLine]] = None


class VideoAnalysis(BaseModel):
    title: str = ""
    summary: str = ""
    scenes: List[Scene]


class ShotPrompt(BaseModel):
    id: int
    timestamp: str          # "M:SS - M:SS"
    prompt: str
    scene: Scene            # same instance as in the source analysis
