# veo_analyzer/core/config.py
from functools import lru_cache
import os, json
from pathlib import Path
from typing import List, Union
from pydantic import AnyHttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Veo Analyzer API"
    DEBUG: bool = False
    API_PREFIX: str = "/api"

    UPLOAD_DIR: Path = Path(os.getenv("UPLOAD_DIR", "uploads"))
    UPLOAD_URL_PREFIX: str = "/uploads"
    LOG_DIR: str = "logs"

    MAX_UPLOAD_SIZE_MB: int = 300

    # --- CORS ---
    CORS_ORIGINS: Union[List[str], str] = ["*"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors(cls, v):
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            s = v.strip()
            if not s:
                return []
            try:
                parsed = json.loads(s)
                if isinstance(parsed, list):
                    return parsed
            except ValueError:
                return [x.strip() for x in s.split(",") if x.strip()]
        return v

    # --- Gemini ---
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL_VISION: str = "gemini-2.5-flash"

    # --- Base URL ---
    PUBLIC_BASE_URL: Union[AnyHttpUrl, str] = ""

    # ================= Helpers =================
    def base_url_str(self) -> str:
        return str(self.PUBLIC_BASE_URL or "").rstrip("/")

    def upload_url(self, filename: str) -> str:
        """
        Public URL of a stored upload, e.g. "/uploads/clip-1a2b3c4d.mp4".
        PUBLIC_BASE_URL is prepended when configured.
        """
        prefix = "/" + (self.UPLOAD_URL_PREFIX or "").strip().strip("/")
        rel_path = f"{prefix.rstrip('/')}/{filename.strip().strip('/')}"
        base = self.base_url_str()
        return f"{base}{rel_path}" if base else rel_path

    def ensure_dirs(self) -> None:
        self.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    s = Settings()
    s.ensure_dirs()
    return s
