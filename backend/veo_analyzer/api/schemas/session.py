from typing import List, Optional
from pydantic import BaseModel

from veo_analyzer.models.analysis import ShotPrompt
from veo_analyzer.services.session import ResultView


class SessionSnapshot(BaseModel):
    id: str
    state: str
    view: str
    progress_message: str = ""
    error: Optional[str] = None
    filename: Optional[str] = None
    video_url: Optional[str] = None
    json_text: str = ""
    shot_prompts: List[ShotPrompt] = []
    selected_scene_id: Optional[int] = None
    selection: Optional[List[int]] = None   # [start, end) offsets into json_text


class SelectShotRequest(BaseModel):
    scene_id: int


class SelectShotResponse(SessionSnapshot):
    seek_seconds: Optional[float] = None


class EditJsonRequest(BaseModel):
    text: str


class SetViewRequest(BaseModel):
    view: ResultView
