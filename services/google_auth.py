import json
from typing import Optional

from google.oauth2 import service_account

from services.errors import ConfigurationError


CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


def parse_credentials_info(raw_json: Optional[str]) -> dict:
    if not raw_json or not raw_json.strip():
        raise ConfigurationError("Google service account credentials not configured")
    try:
        info = json.loads(raw_json)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid service account JSON: {str(e)}")
    if not isinstance(info, dict):
        raise ConfigurationError("Invalid service account JSON: expected an object")
    return info


def load_service_account_credentials(raw_json: Optional[str]) -> service_account.Credentials:
    info = parse_credentials_info(raw_json)
    try:
        return service_account.Credentials.from_service_account_info(
            info, scopes=[CLOUD_PLATFORM_SCOPE]
        )
    except ValueError as e:
        raise ConfigurationError(f"Invalid service account credentials: {str(e)}")
