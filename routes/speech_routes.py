from fastapi import APIRouter
from controllers.speech_controller import generate_audio
from controllers.voice_controller import clone_voice

router = APIRouter(prefix="/api", tags=["Speech"])

router.post("/generate-audio")(generate_audio)
router.post("/clone-voice")(clone_voice)
