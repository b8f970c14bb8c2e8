from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field, field_validator
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, Literal, Mapping, Optional
import json
import logging
import os

from services.errors import ConfigurationError
from services.ssml import DEFAULT_MAX_BYTES, DEFAULT_MAX_CHARS, OutputMode


# Load environment variables
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


app = FastAPI(title="Speech Proxy API")

origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Language code -> Google voice name, used when the caller doesn't pick a voice
DEFAULT_VOICE_MAP = MappingProxyType({
    "hi-IN": "hi-IN-Wavenet-A",
    "en-US": "en-US-Journey-F",
    "en-GB": "en-GB-Studio-B",
    "en-IN": "en-IN-Journey-F",
    "es-ES": "es-ES-Studio-F",
    "fr-FR": "fr-FR-Studio-A",
    "de-DE": "de-DE-Studio-B",
    "ja-JP": "ja-JP-Neural2-B",
    "ko-KR": "ko-KR-Neural2-A",
})


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    auth_mode: Literal["api_key", "service_account"] = "api_key"
    google_api_key: Optional[str] = None
    google_credentials_json: Optional[str] = None
    bucket_name: Optional[str] = None
    output_mode: OutputMode = OutputMode.SSML
    default_language: str = "en-US"
    fallback_voice: str = "en-US-Journey-F"
    max_bytes: int = Field(DEFAULT_MAX_BYTES, ge=64)
    max_chars: int = Field(DEFAULT_MAX_CHARS, ge=1)
    voice_map: Mapping[str, str] = Field(default_factory=lambda: DEFAULT_VOICE_MAP)
    download_timeout: float = 30.0

    @field_validator("voice_map", mode="after")
    @classmethod
    def freeze_voice_map(cls, value):
        return MappingProxyType(dict(value))

    @property
    def upload_enabled(self) -> bool:
        return bool(self.bucket_name)

    def voice_for(self, language_code: str) -> str:
        return self.voice_map.get(language_code, self.fallback_voice)


def parse_voice_map(raw_json: Optional[str]) -> Dict[str, str]:
    voice_map = dict(DEFAULT_VOICE_MAP)
    if not raw_json:
        return voice_map
    try:
        overrides = json.loads(raw_json)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid TTS_VOICE_MAP_JSON: {str(e)}")
    if not isinstance(overrides, dict):
        raise ConfigurationError("Invalid TTS_VOICE_MAP_JSON: expected an object")
    voice_map.update({str(k): str(v) for k, v in overrides.items()})
    return voice_map


def load_settings() -> Settings:
    credentials_json = os.getenv("GOOGLE_CREDENTIALS_JSON")
    default_auth = "service_account" if credentials_json else "api_key"
    return Settings(
        auth_mode=os.getenv("GOOGLE_TTS_AUTH_MODE", default_auth).lower(),
        google_api_key=os.getenv("GOOGLE_CHIRP3_API_KEY"),
        google_credentials_json=credentials_json,
        bucket_name=os.getenv("GCS_BUCKET_NAME"),
        output_mode=os.getenv("TTS_OUTPUT_MODE", OutputMode.SSML.value).lower(),
        default_language=os.getenv("TTS_DEFAULT_LANGUAGE", "en-US"),
        fallback_voice=os.getenv("TTS_FALLBACK_VOICE", "en-US-Journey-F"),
        max_bytes=int(os.getenv("TTS_MAX_BYTES", DEFAULT_MAX_BYTES)),
        max_chars=int(os.getenv("TTS_MAX_CHARS", DEFAULT_MAX_CHARS)),
        voice_map=parse_voice_map(os.getenv("TTS_VOICE_MAP_JSON")),
        download_timeout=float(os.getenv("AUDIO_DOWNLOAD_TIMEOUT", "30")),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
