import asyncio
from typing import Dict, Optional

import requests

from config import API_BASE_URL, HTTP_TIMEOUT
from services.exceptions import InvalidArgument, PermissionValidationError, TransportError
from tools.logger import get_logger

logger = get_logger("api_client")


class RoleApiClient:
    """
    Thin client for the role endpoints. Every failure to get a usable answer is a
    TransportError so callers can fail closed.
    """

    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None,
                 timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.base_url = (base_url or API_BASE_URL).rstrip("/")
        self.token = token
        self.timeout = HTTP_TIMEOUT if timeout is None else timeout
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, headers=self._headers(), timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise TransportError(f"Request to {path} failed", cause=e) from e
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return response.status_code, body

    def _unwrap(self, path: str, status_code: int, body: dict):
        if status_code >= 400 or not body.get("success", False):
            message = body.get("message") or f"HTTP {status_code}"
            logger.error(f"{path} answered {status_code}: {message}")
            raise TransportError(f"{path}: {message}")
        return body.get("data")

    def current_user(self) -> dict:
        status_code, body = self._request("GET", "/api/user")
        if status_code >= 400:
            raise TransportError(f"/api/user: HTTP {status_code}")
        return body

    def get_permissions(self, role: str) -> Dict[str, Dict[str, bool]]:
        status_code, body = self._request("GET", "/roles/rolekontrol", params={"role": role})
        return self._unwrap("/roles/rolekontrol", status_code, body) or {}

    def list_permissions(self, role: str) -> Dict[str, Dict[str, bool]]:
        status_code, body = self._request("GET", "/roles/list-permissions", params={"role": role})
        return self._unwrap("/roles/list-permissions", status_code, body) or {}

    def check(self, role: str, module: str, action: str) -> bool:
        status_code, body = self._request(
            "GET", "/roles/check", params={"role": role, "module": module, "action": action}
        )
        if status_code == 400:
            raise InvalidArgument(body.get("message") or f"Unknown permission {module}.{action}")
        data = self._unwrap("/roles/check", status_code, body) or {}
        return data.get("allowed") is True

    def update_permissions(self, role: str, permissions: dict) -> None:
        status_code, body = self._request(
            "POST", "/roles/update-permissions", json={"role": role, "permissions": permissions}
        )
        if status_code == 400 and body.get("errors"):
            raise PermissionValidationError(body["errors"])
        self._unwrap("/roles/update-permissions", status_code, body)

    def delete_role(self, role_id: str) -> None:
        status_code, body = self._request("DELETE", f"/roles/{role_id}")
        self._unwrap(f"/roles/{role_id}", status_code, body)

    async def fetch_permissions(self, role: str) -> Dict[str, Dict[str, bool]]:
        return await asyncio.to_thread(self.get_permissions, role)

    async def check_async(self, role: str, module: str, action: str) -> bool:
        return await asyncio.to_thread(self.check, role, module, action)
