import logging
import uuid

from google.api_core.exceptions import GoogleAPICallError
from google.cloud import storage

from services.errors import ConfigurationError, UpstreamError
from services.google_auth import load_service_account_credentials


logger = logging.getLogger(__name__)


def build_storage_client(settings) -> storage.Client:
    if not settings.bucket_name:
        raise ConfigurationError("Storage bucket not configured")
    if settings.google_credentials_json:
        credentials = load_service_account_credentials(settings.google_credentials_json)
        return storage.Client(credentials=credentials, project=credentials.project_id)
    # Application default credentials
    return storage.Client()


def audio_object_name(prefix: str = "generated", extension: str = "mp3") -> str:
    return f"{prefix}/{uuid.uuid4().hex}.{extension}"


def upload_audio(client, bucket_name: str, audio_bytes: bytes, destination: str, content_type: str = "audio/mpeg") -> str:
    """
    Upload raw audio to ``bucket_name/destination``.

    Returns:
        str: public URL of the uploaded object
    """
    try:
        blob = client.bucket(bucket_name).blob(destination)
        blob.upload_from_string(audio_bytes, content_type=content_type)
    except GoogleAPICallError as e:
        logger.error(f"Upload to gs://{bucket_name}/{destination} failed: {e.message}")
        raise UpstreamError(f"Storage upload failed: {e.message}")

    logger.info(f"Uploaded {len(audio_bytes)} bytes to gs://{bucket_name}/{destination}")
    return blob.public_url
