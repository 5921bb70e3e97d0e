from __future__ import annotations

import uuid
from functools import partial
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from veo_analyzer.core.exceptions import (
    AnalysisInProgressError,
    InvalidTransitionError,
    InvalidVideoError,
)
from veo_analyzer.core.logger import log_exc, log_info, log_warning
from veo_analyzer.models.analysis import ShotPrompt
from veo_analyzer.services.document import export_filename, pretty_json
from veo_analyzer.services.gemini import AnalysisClient
from veo_analyzer.services.locator import locate_scene
from veo_analyzer.services.media import VideoHandle, VideoStore
from veo_analyzer.services.prompts import derive_shot_prompts

UNKNOWN_ERROR = "An unknown error occurred during analysis."


class SessionState(str, Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    READY = "ready"
    ERROR = "error"


class ResultView(str, Enum):
    PROMPTS = "prompts"
    JSON = "json"


class Session:
    """
    One user's upload -> analysis -> display -> reset lifecycle.

    The JSON text is the source of truth: every change to it goes through
    `_set_json_text`, which re-derives the shot prompt list. Holds at most one
    video handle at a time.
    """

    def __init__(self, client: AnalysisClient, store: VideoStore, session_id: Optional[str] = None):
        self.id = session_id or uuid.uuid4().hex
        self.client = client
        self.store = store
        self._generation = 0
        self._clear()

    def _clear(self) -> None:
        # results of analyses started before this point are dropped
        self._generation += 1
        self.state = SessionState.IDLE
        self.view = ResultView.PROMPTS
        self.progress_message = ""
        self.error: Optional[str] = None
        self.filename: Optional[str] = None
        self.video: Optional[VideoHandle] = None
        self.json_text = ""
        self.shot_prompts: List[ShotPrompt] = []
        self.selected_scene_id: Optional[int] = None
        self.selection: Optional[Tuple[int, int]] = None

    # ---- internal ------------------------------------------------------------
    def _log(self, message: str) -> None:
        log_info(f"SESSION id={self.id} {message}")

    def _require(self, action: str, *states: SessionState) -> None:
        if self.state not in states:
            raise InvalidTransitionError(action, self.state.value)

    def _release_video(self) -> None:
        if self.video is not None:
            self.store.release(self.video)
            self.video = None

    def _set_json_text(self, text: str) -> None:
        self.json_text = text or ""
        self.shot_prompts = derive_shot_prompts(self.json_text)
        self.selection = None

    def _is_current(self, generation: int) -> bool:
        return self._generation == generation

    def _on_progress(self, generation: int, message: str) -> None:
        if self._is_current(generation):
            self.progress_message = message

    def _fail(self, message: str) -> None:
        self.state = SessionState.ERROR
        self.error = message
        self._log(f"state=error error={message!r}")

    # ---- transitions ---------------------------------------------------------
    async def upload(self, filename: Optional[str], content_type: Optional[str], data: bytes) -> None:
        if self.state is SessionState.ANALYZING:
            raise AnalysisInProgressError()

        # new upload replaces the previous video and result
        self._release_video()
        self._clear()

        mime = (content_type or "").strip().lower()
        if not mime.startswith("video/"):
            self._log(f"UNSUPPORTED_MEDIA mime={mime or '-'}")
            self._fail(InvalidVideoError(mime).message)
            return

        self.filename = filename
        self.video = self.store.acquire(filename, data)
        self.state = SessionState.ANALYZING
        generation = self._generation
        self._log(f"state=analyzing file={filename} mime={mime} size={len(data)}")

        try:
            result = await self.client.analyze(data, mime, partial(self._on_progress, generation))
        except Exception as e:
            if self._is_current(generation):
                log_exc(f"SESSION id={self.id} ANALYZE failed err={e}")
                self._fail(str(e) or UNKNOWN_ERROR)
            else:
                log_warning(f"SESSION id={self.id} ANALYZE stale_failure dropped err={e}")
        else:
            if self._is_current(generation):
                self._set_json_text(result)
                self.view = ResultView.PROMPTS
                self.state = SessionState.READY
                self._log(f"state=ready prompts={len(self.shot_prompts)}")
            else:
                log_warning(f"SESSION id={self.id} ANALYZE stale_result dropped file={filename}")
        finally:
            if self._is_current(generation):
                self.progress_message = ""
                if self.state is SessionState.ANALYZING:
                    # cancelled while awaiting the remote call
                    self._fail("Analysis was cancelled.")

    def edit_json(self, text: str) -> None:
        self._require("edit the analysis", SessionState.READY)
        self._set_json_text(text)
        self._log(f"json_edited chars={len(self.json_text)} prompts={len(self.shot_prompts)}")

    def select_shot(self, scene_id: int) -> Optional[float]:
        """
        Mark a scene as selected and highlight its line in the JSON view.
        Returns the playback position to seek to, or None if no prompt has that id.
        """
        self._require("select a shot", SessionState.READY)
        self.selected_scene_id = scene_id

        span = locate_scene(self.json_text, scene_id)
        if span is not None:
            self.view = ResultView.JSON
            self.selection = span
        else:
            self.selection = None

        shot = next((p for p in self.shot_prompts if p.id == scene_id), None)
        return shot.scene.timestamp_start_seconds if shot else None

    def set_view(self, view: ResultView) -> None:
        self._require("switch views", SessionState.READY)
        self.view = ResultView(view)

    def format_json(self) -> bool:
        self._require("format the analysis", SessionState.READY)
        formatted = pretty_json(self.json_text)
        if formatted is None:
            log_warning(f"SESSION id={self.id} FORMAT skipped reason=invalid_json")
            return False
        self._set_json_text(formatted)
        return True

    def reset(self) -> None:
        self._release_video()
        self._clear()
        self._log("state=idle")

    def close(self) -> None:
        self.reset()

    # ---- exports -------------------------------------------------------------
    def export(self) -> Tuple[str, str]:
        self._require("download the analysis", SessionState.READY)
        return export_filename(self.filename), self.json_text

    def copy_json(self) -> Optional[str]:
        if not self.json_text:
            log_warning(f"SESSION id={self.id} COPY_JSON nothing_to_copy")
            return None
        return self.json_text

    def copy_prompt(self, index: int) -> Optional[str]:
        if not 0 <= index < len(self.shot_prompts):
            log_warning(f"SESSION id={self.id} COPY_PROMPT index={index} out_of_range")
            return None
        return self.shot_prompts[index].prompt

    def snapshot(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "state": self.state.value,
            "view": self.view.value,
            "progress_message": self.progress_message,
            "error": self.error,
            "filename": self.filename,
            "video_url": self.video.url if self.video else None,
            "json_text": self.json_text,
            "shot_prompts": self.shot_prompts,
            "selected_scene_id": self.selected_scene_id,
            "selection": list(self.selection) if self.selection else None,
        }
