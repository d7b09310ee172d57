# File: hearing_scribe/core/config/settings.py

import os
import shutil
from typing import Optional


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_optional_float(name: str) -> Optional[float]:
    value = os.getenv(name, "").strip()
    return float(value) if value else None


class Settings:
    # --- Database ---
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "postgres")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "password")
    POSTGRES_SERVER: str = os.getenv("POSTGRES_SERVER", "localhost")
    POSTGRES_PORT: str = os.getenv("POSTGRES_PORT", "5432")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "hearing_scribe")
    SQLITE_PATH: str = os.getenv("SQLITE_PATH", "./test_hearing_scribe.db")

    @property
    def DATABASE_URL(self) -> str:
        # SQLite only when explicitly requested (tests, local runs).
        if _env_flag("USE_SQLITE"):
            return f"sqlite:///{self.SQLITE_PATH}"

        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # --- External Tools ---
    FFMPEG_BINARY: str = os.getenv("FFMPEG_BINARY_PATH", shutil.which("ffmpeg") or "ffmpeg")
    FFPROBE_BINARY: str = os.getenv("FFPROBE_BINARY_PATH", shutil.which("ffprobe") or "ffprobe")
    TRANSCODE_TIMEOUT_SEC: int = int(os.getenv("TRANSCODE_TIMEOUT_SEC", "300"))
    CHUNK_TIMEOUT_SEC: int = int(os.getenv("CHUNK_TIMEOUT_SEC", "120"))
    PROBE_TIMEOUT_SEC: int = int(os.getenv("PROBE_TIMEOUT_SEC", "30"))

    # --- Audio Normalization ---
    AUDIO_BITRATE_KBPS: int = int(os.getenv("AUDIO_BITRATE_KBPS", "128"))
    AUDIO_SAMPLE_RATE_HZ: int = int(os.getenv("AUDIO_SAMPLE_RATE_HZ", "22050"))
    AUDIO_CHANNELS: int = 1
    WHISPER_MAX_UPLOAD_BYTES: int = int(os.getenv("WHISPER_MAX_UPLOAD_BYTES", str(24 * 1024 * 1024)))
    CHUNK_DURATION_SEC: int = int(os.getenv("CHUNK_DURATION_SEC", "600"))
    MEDIA_DOWNLOAD_TIMEOUT_SEC: int = int(os.getenv("MEDIA_DOWNLOAD_TIMEOUT_SEC", "300"))

    # --- Azure OpenAI (Whisper + Chat) ---
    AZURE_OPENAI_ENDPOINT: str = os.getenv("AZURE_OPENAI_ENDPOINT", "")
    AZURE_OPENAI_API_KEY: str = os.getenv("AZURE_OPENAI_API_KEY", "")
    WHISPER_DEPLOYMENT: str = os.getenv("WHISPER_DEPLOYMENT", "whisper")
    WHISPER_API_VERSION: str = os.getenv("WHISPER_API_VERSION", "2025-01-01")
    WHISPER_LANGUAGE: str = os.getenv("WHISPER_LANGUAGE", "pt")
    WHISPER_TIMEOUT_SEC: int = int(os.getenv("WHISPER_TIMEOUT_SEC", "300"))

    CHAT_DEPLOYMENT: str = os.getenv("CHAT_DEPLOYMENT", "gpt-5.2-chat")
    CHAT_API_VERSION: str = os.getenv("CHAT_API_VERSION", "2025-01-01")
    LLM_TIMEOUT_SEC: int = int(os.getenv("LLM_TIMEOUT_SEC", "180"))

    # --- Deepgram ---
    DEEPGRAM_API_KEY: str = os.getenv("DEEPGRAM_API_KEY", "")
    DEEPGRAM_URL: str = os.getenv("DEEPGRAM_URL", "https://api.deepgram.com/v1/listen")
    DEEPGRAM_MODEL: str = os.getenv("DEEPGRAM_MODEL", "nova-3")
    DEEPGRAM_LANGUAGE: str = os.getenv("DEEPGRAM_LANGUAGE", "pt-BR")
    DEEPGRAM_UTT_SPLIT: str = os.getenv("DEEPGRAM_UTT_SPLIT", "0.8")
    DEEPGRAM_TIMEOUT_SEC: int = int(os.getenv("DEEPGRAM_TIMEOUT_SEC", "600"))

    # --- Correction / Assistant ---
    CORRECTION_BATCH_SIZE: int = int(os.getenv("CORRECTION_BATCH_SIZE", "40"))
    CORRECTION_MAX_TOKENS: int = int(os.getenv("CORRECTION_MAX_TOKENS", "8000"))
    # Unset: no temperature is sent, the deployment default applies
    CORRECTION_TEMPERATURE: Optional[float] = _env_optional_float("CORRECTION_TEMPERATURE")
    SUMMARY_MAX_TOKENS: int = int(os.getenv("SUMMARY_MAX_TOKENS", "2000"))
    CHAT_MAX_TOKENS: int = int(os.getenv("CHAT_MAX_TOKENS", "4000"))

    # --- Jobs ---
    DEFAULT_ENGINE: str = os.getenv("DEFAULT_ENGINE", "deepgram")
    ERROR_MESSAGE_MAX_CHARS: int = int(os.getenv("ERROR_MESSAGE_MAX_CHARS", "500"))
    PROVIDER_ERROR_SNIPPET_CHARS: int = int(os.getenv("PROVIDER_ERROR_SNIPPET_CHARS", "300"))
    STALE_JOB_TTL_MINUTES: int = int(os.getenv("STALE_JOB_TTL_MINUTES", "60"))


settings = Settings()
