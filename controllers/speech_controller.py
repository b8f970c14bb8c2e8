from fastapi import Body, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
import base64
import logging

from config import Settings, get_settings
from services.errors import SpeechProxyError, ValidationError
from services.ssml import OutputMode, byte_length, normalize_text
from services.storage import audio_object_name, build_storage_client, upload_audio
from services.tts_client import build_tts_client, synthesize


logger = logging.getLogger(__name__)


class VoiceConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    language_code: Optional[str] = Field(None, alias="languageCode")
    name: Optional[str] = None
    voice_name: Optional[str] = Field(None, alias="voiceName")


class AudioSettings(BaseModel):
    speed: Optional[float] = None
    pitch: Optional[float] = None


class GenerateAudioRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    voice_id: Optional[str] = Field(None, alias="voiceId")
    voice_config: Optional[VoiceConfig] = Field(None, alias="voiceConfig")
    settings: AudioSettings = Field(default_factory=AudioSettings)
    max_bytes: Optional[int] = Field(None, alias="maxBytes", ge=64, description="UTF-8 byte ceiling for the synthesis input")
    max_chars: Optional[int] = Field(None, alias="maxChars", ge=1, description="Character ceiling applied before markup")
    mode: Optional[OutputMode] = Field(None, description="'ssml' or 'text', defaults to TTS_OUTPUT_MODE")


def resolve_voice(req: GenerateAudioRequest, settings: Settings) -> tuple:
    voice_config = req.voice_config or VoiceConfig()
    language_code = voice_config.language_code or settings.default_language
    voice_name = voice_config.name or voice_config.voice_name
    if not voice_name:
        voice_name = settings.voice_for(language_code)
    return language_code, voice_name


async def generate_audio(
    req: GenerateAudioRequest = Body(...),
    settings: Settings = Depends(get_settings),
):
    try:
        if not req.text:
            logger.warning("Rejected audio generation request without text")
            raise ValidationError("Missing required field: text")

        mode = req.mode or settings.output_mode
        synthesis_text = normalize_text(
            req.text,
            max_bytes=req.max_bytes or settings.max_bytes,
            max_chars=req.max_chars or settings.max_chars,
            mode=mode,
        )
        logger.info(f"Generating audio with {mode.value}, input length: {byte_length(synthesis_text)} bytes")

        language_code, voice_name = resolve_voice(req, settings)
        logger.info(f"Using voice: {voice_name}")

        client = await run_in_threadpool(build_tts_client, settings)
        audio_bytes = await run_in_threadpool(
            synthesize,
            client,
            synthesis_text,
            mode,
            language_code,
            voice_name,
            req.settings.speed or 1.0,
            req.settings.pitch or 0.0,
        )

        audio_url = None
        if settings.upload_enabled:
            storage_client = await run_in_threadpool(build_storage_client, settings)
            audio_url = await run_in_threadpool(
                upload_audio,
                storage_client,
                settings.bucket_name,
                audio_bytes,
                audio_object_name(),
            )

        logger.info("Audio generated successfully")

        response = {
            "success": True,
            "audioContent": base64.b64encode(audio_bytes).decode("utf-8"),
            "format": "mp3",
            "metadata": {
                "language": language_code,
                "voice": voice_name,
                "mode": mode.value,
                "voiceId": req.voice_id,
                "bytes": len(audio_bytes),
            },
        }
        if audio_url:
            response["audioUrl"] = audio_url
        return response

    except SpeechProxyError as e:
        raise e.to_http()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Audio generation error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Audio generation failed: {str(e)}")
