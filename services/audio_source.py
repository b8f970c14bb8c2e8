import logging

import requests

from services.errors import UpstreamError


logger = logging.getLogger(__name__)


def fetch_audio(url: str, timeout: float = 30) -> bytes:
    logger.info(f"Downloading audio from: {url}")
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning(f"Audio download failed for {url}: {str(e)}")
        raise UpstreamError(f"Failed to download audio from {url}")
    return response.content
