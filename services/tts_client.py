import logging

from google.api_core.client_options import ClientOptions
from google.api_core.exceptions import GoogleAPICallError
from google.cloud import texttospeech

from services.errors import ConfigurationError, UpstreamError
from services.google_auth import load_service_account_credentials
from services.ssml import OutputMode


logger = logging.getLogger(__name__)


def build_tts_client(settings) -> texttospeech.TextToSpeechClient:
    if settings.auth_mode == "service_account":
        credentials = load_service_account_credentials(settings.google_credentials_json)
        return texttospeech.TextToSpeechClient(credentials=credentials)

    if not settings.google_api_key:
        logger.error("Google API key not found")
        raise ConfigurationError("Google API key not configured")
    client_options = ClientOptions(api_key=settings.google_api_key)
    return texttospeech.TextToSpeechClient(client_options=client_options)


def build_synthesis_input(text: str, mode: OutputMode) -> texttospeech.SynthesisInput:
    if OutputMode(mode) == OutputMode.SSML:
        return texttospeech.SynthesisInput(ssml=text)
    return texttospeech.SynthesisInput(text=text)


def synthesize(
    client,
    text: str,
    mode: OutputMode,
    language_code: str,
    voice_name: str,
    speaking_rate: float = 1.0,
    pitch: float = 0.0,
) -> bytes:
    voice = texttospeech.VoiceSelectionParams(language_code=language_code, name=voice_name)
    audio_config = texttospeech.AudioConfig(
        audio_encoding=texttospeech.AudioEncoding.MP3,
        speaking_rate=speaking_rate,
        pitch=pitch,
    )
    try:
        response = client.synthesize_speech(
            input=build_synthesis_input(text, mode), voice=voice, audio_config=audio_config
        )
    except GoogleAPICallError as e:
        logger.error(f"Google TTS API error: {e.message}")
        raise UpstreamError(f"TTS API failed: {e.message}")

    if not response.audio_content:
        raise UpstreamError("No audio content received from TTS API")
    return response.audio_content
