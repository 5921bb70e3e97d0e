from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from fastapi.responses import PlainTextResponse
from starlette import status

from veo_analyzer.api.dependencies import get_registry, to_http_error
from veo_analyzer.api.schemas.session import (
    EditJsonRequest,
    SelectShotRequest,
    SelectShotResponse,
    SessionSnapshot,
    SetViewRequest,
)
from veo_analyzer.core.config import get_settings
from veo_analyzer.core.exceptions import AnalyzerError
from veo_analyzer.core.logger import log_info
from veo_analyzer.services.registry import SessionRegistry
from veo_analyzer.services.session import Session

router = APIRouter(prefix="/sessions")


# ---- Local helpers -----------------------------------------------------------
def _session(registry: SessionRegistry, session_id: str) -> Session:
    try:
        return registry.get(session_id)
    except AnalyzerError as e:
        raise to_http_error(e)


def _read_upload(f: UploadFile, max_mb: int) -> bytes:
    buf = bytearray()
    while True:
        chunk = f.file.read(1024 * 1024)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_mb * 1024 * 1024:
            raise HTTPException(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "File too large")
    return bytes(buf)


def _copy_response(text: Optional[str]) -> Response:
    if text is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return PlainTextResponse(text)


# ---- Routes ------------------------------------------------------------------
@router.post("", response_model=SessionSnapshot, status_code=status.HTTP_201_CREATED)
async def create_session(registry: SessionRegistry = Depends(get_registry)):
    return registry.create().snapshot()


@router.get("/{session_id}", response_model=SessionSnapshot)
async def get_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    return _session(registry, session_id).snapshot()


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    try:
        registry.remove(session_id)
    except AnalyzerError as e:
        raise to_http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{session_id}/upload", response_model=SessionSnapshot)
async def upload_video(
    session_id: str,
    video: UploadFile = File(...),
    registry: SessionRegistry = Depends(get_registry),
    settings=Depends(get_settings),
):
    session = _session(registry, session_id)
    data = _read_upload(video, settings.MAX_UPLOAD_SIZE_MB)
    log_info(f"UPLOAD session={session_id} file={video.filename} mime={video.content_type} size={len(data)}")
    try:
        await session.upload(video.filename, video.content_type, data)
    except AnalyzerError as e:
        raise to_http_error(e)
    return session.snapshot()


@router.put("/{session_id}/json", response_model=SessionSnapshot)
async def edit_json(session_id: str, payload: EditJsonRequest, registry: SessionRegistry = Depends(get_registry)):
    session = _session(registry, session_id)
    try:
        session.edit_json(payload.text)
    except AnalyzerError as e:
        raise to_http_error(e)
    return session.snapshot()


@router.post("/{session_id}/select", response_model=SelectShotResponse)
async def select_shot(session_id: str, payload: SelectShotRequest, registry: SessionRegistry = Depends(get_registry)):
    session = _session(registry, session_id)
    try:
        seek = session.select_shot(payload.scene_id)
    except AnalyzerError as e:
        raise to_http_error(e)
    return {**session.snapshot(), "seek_seconds": seek}


@router.post("/{session_id}/view", response_model=SessionSnapshot)
async def set_view(session_id: str, payload: SetViewRequest, registry: SessionRegistry = Depends(get_registry)):
    session = _session(registry, session_id)
    try:
        session.set_view(payload.view)
    except AnalyzerError as e:
        raise to_http_error(e)
    return session.snapshot()


@router.post("/{session_id}/format", response_model=SessionSnapshot)
async def format_json(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    session = _session(registry, session_id)
    try:
        session.format_json()
    except AnalyzerError as e:
        raise to_http_error(e)
    return session.snapshot()


@router.get("/{session_id}/download")
async def download_json(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    session = _session(registry, session_id)
    try:
        filename, text = session.export()
    except AnalyzerError as e:
        raise to_http_error(e)
    return Response(
        content=text,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{quote(filename)}"'},
    )


@router.get("/{session_id}/copy")
async def copy_json(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    return _copy_response(_session(registry, session_id).copy_json())


@router.get("/{session_id}/prompts/{index}/copy")
async def copy_prompt(session_id: str, index: int, registry: SessionRegistry = Depends(get_registry)):
    return _copy_response(_session(registry, session_id).copy_prompt(index))


@router.post("/{session_id}/reset", response_model=SessionSnapshot)
async def reset_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    session = _session(registry, session_id)
    session.reset()
    return session.snapshot()
