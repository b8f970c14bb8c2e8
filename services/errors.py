from fastapi import HTTPException


class SpeechProxyError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_http(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.message)


class ValidationError(SpeechProxyError):
    """Required input missing from the request."""
    status_code = 400


class UpstreamError(SpeechProxyError):
    """Google TTS, Cloud Storage or an audio download did not succeed."""
    status_code = 502


class ConfigurationError(SpeechProxyError):
    """API key, service-account credentials or bucket not configured."""
    status_code = 500
