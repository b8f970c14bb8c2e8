from fastapi import Request
from fastapi.responses import JSONResponse

from config import app
from routes.speech_routes import router as speech_router
from services.errors import SpeechProxyError


app.include_router(speech_router)


@app.exception_handler(SpeechProxyError)
async def speech_proxy_error_handler(request: Request, exc: SpeechProxyError):
    # Raised outside a controller, e.g. while loading settings
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/")
async def root():
    return {"status": "ok", "message": "Speech Proxy API"}


@app.get("/health")
async def health():
    return {"status": "ok", "message": "Speech Proxy API"}


# Run using:
# uvicorn main:app --reload
