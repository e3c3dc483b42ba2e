from typing import Optional

import requests

from shared.core.config import settings
from .user_directory_client import auth_headers


class HospitalDirectoryClient:
    """Display names of hospitals and hospital services."""

    def __init__(self, base_url: str, timeout: float = 5, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_name(self, token: str, path: str) -> Optional[str]:
        response = self.session.get(
            f"{self.base_url}{path}",
            headers=auth_headers(token),
            timeout=self.timeout,
        )
        if response.status_code == 404:
            return None
        response.raise_for_status()
        if not response.content:
            return None
        body = response.json()
        return body.get("name") if isinstance(body, dict) else None

    def get_service_name(self, token: str, service_id: str) -> Optional[str]:
        return self._get_name(token, f"/api/hospitals/services/{service_id}")

    def get_hospital_name(self, token: str, hospital_id: str) -> Optional[str]:
        return self._get_name(token, f"/api/hospitals/{hospital_id}")


def get_hospital_directory() -> HospitalDirectoryClient:
    return HospitalDirectoryClient(settings.HOSPITAL_SERVICE_URL, settings.DIRECTORY_TIMEOUT_SECONDS)
