import logging
from typing import Iterable, List, Optional

import requests

from shared.core.config import settings
from ..app.schemas.equipment.transfer_schemas import UserDTO

logger = logging.getLogger(__name__)


def auth_headers(token: str) -> dict:
    if token.lower().startswith("bearer "):
        return {"Authorization": token}
    return {"Authorization": f"Bearer {token}"}


class UserDirectoryClient:
    """Client for the user-service: supervisors, hospital admins, role lookups."""

    def __init__(self, base_url: str, timeout: float = 5, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, token: str, path: str, params: Optional[dict] = None):
        response = self.session.get(
            f"{self.base_url}{path}",
            headers=auth_headers(token),
            params=params,
            timeout=self.timeout,
        )
        if response.status_code == 404:
            return None
        response.raise_for_status()
        if not response.content:
            return None
        return response.json()

    def get_service_supervisors(self, token: str, service_id: str) -> List[UserDTO]:
        body = self._get(token, f"/api/users/services/{service_id}/supervisors")
        return [UserDTO.model_validate(u) for u in body or []]

    def get_admin_by_hospital_id(self, token: str, hospital_id: str) -> Optional[UserDTO]:
        body = self._get(token, f"/api/users/hospitals/{hospital_id}/admin")
        return UserDTO.model_validate(body) if body else None

    def get_users_by_hospital_and_roles(self, token: str, hospital_id: str, roles: Iterable[str]) -> List[UserDTO]:
        body = self._get(
            token,
            f"/api/users/hospitals/{hospital_id}/users",
            params={"roles": list(roles)},
        )
        return [UserDTO.model_validate(u) for u in body or []]


def get_user_directory() -> UserDirectoryClient:
    return UserDirectoryClient(settings.USER_SERVICE_URL, settings.DIRECTORY_TIMEOUT_SECONDS)
