from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional
import uuid

from slugify import slugify

from veo_analyzer.core.logger import log_exc, log_info


def unique_stored_name(filename: Optional[str], default_stem: str = "video") -> str:
    """Slugified stem plus a short random suffix, e.g. beach-day-1a2b3c4d.mp4."""
    original = Path(filename or "")
    stem = slugify(original.stem) or default_stem
    return f"{stem}-{uuid.uuid4().hex[:8]}{original.suffix.lower()}"


@dataclass
class VideoHandle:
    """Playable copy of an uploaded video, served from the uploads mount."""

    path: Path
    url: str
    filename: str
    size: int
    released: bool = False


class VideoStore:
    """
    Writes uploads to `upload_dir` and hands out VideoHandles.
    `url_for` maps a stored file name to its public URL.
    """

    def __init__(self, upload_dir: Path, url_for: Callable[[str], str]):
        self.upload_dir = Path(upload_dir)
        self.url_for = url_for

    def acquire(self, filename: Optional[str], data: bytes) -> VideoHandle:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        stored_name = unique_stored_name(filename)
        stored_path = self.upload_dir / stored_name
        stored_path.write_bytes(data)
        log_info(f"VIDEO_HANDLE acquired path={stored_name} size={len(data)}")
        return VideoHandle(
            path=stored_path,
            url=self.url_for(stored_name),
            filename=filename or "",
            size=len(data),
        )

    def release(self, handle: Optional[VideoHandle]) -> None:
        if handle is None or handle.released:
            return
        handle.released = True
        try:
            handle.path.unlink(missing_ok=True)
            log_info(f"VIDEO_HANDLE released path={handle.path.name}")
        except OSError as e:
            log_exc(f"VIDEO_HANDLE release_failed path={handle.path} err={e}")
