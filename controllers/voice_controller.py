from fastapi import Body, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
import base64
import logging
import time

from config import Settings, get_settings
from services.audio_source import fetch_audio
from services.errors import SpeechProxyError, ValidationError


logger = logging.getLogger(__name__)


class CloneVoiceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    audio_url: Optional[str] = Field(None, alias="audioUrl", description="Public URL of the reference recording")
    voice_name: Optional[str] = Field(None, alias="voiceName")
    language_code: str = Field("en-US", alias="languageCode")


async def clone_voice(
    req: CloneVoiceRequest = Body(...),
    settings: Settings = Depends(get_settings),
):
    """
    Build a voice configuration from a reference recording.

    The recording is downloaded and embedded base64-encoded, ready to be sent
    back as ``voiceConfig`` on later audio generation requests.
    """
    try:
        if not req.audio_url or not req.voice_name:
            logger.warning("Rejected clone request missing audioUrl or voiceName")
            raise ValidationError("Missing required fields: audioUrl, voiceName")

        audio_bytes = await run_in_threadpool(fetch_audio, req.audio_url, settings.download_timeout)
        logger.info(f"Voice configuration created for {req.voice_name} ({len(audio_bytes)} bytes)")

        return {
            "success": True,
            "voiceId": f"chirp3-{int(time.time() * 1000)}",
            "voiceConfig": {
                "voiceRefAudioContent": base64.b64encode(audio_bytes).decode("utf-8"),
                "languageCode": req.language_code,
                "gender": "NEUTRAL",
                "style": "NARRATION",
                "voiceName": req.voice_name,
            },
            "metadata": {
                "audioSize": len(audio_bytes),
                "language": req.language_code,
            },
        }

    except SpeechProxyError as e:
        raise e.to_http()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Voice cloning error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Voice cloning failed: {str(e)}")
