from __future__ import annotations

import logging

import requests

from src.matching.department import department_short_code
from src.normalize.schema import DEPARTMENT_USERS_TABLE, DepartmentUser
from src.store.base import BaseStore, RemoteFailure
from src.store.settings import StoreSettings
from src.workflow.errors import RecordNotFoundError

logger = logging.getLogger(__name__)


class AuthClient:
    """Resolves the signed-in actor; sign-in itself happens elsewhere."""

    def __init__(self, settings: StoreSettings, session: requests.Session | None = None) -> None:
        self.settings = settings
        self._session = session or requests.Session()

    def close(self) -> None:
        self._session.close()

    def current_user_email(self, access_token: str) -> str:
        if not access_token:
            raise RemoteFailure("No access token for the current session.")
        url = f"{self.settings.auth_url}/user"
        try:
            response = self._session.get(
                url,
                headers={"apikey": self.settings.api_key, "Authorization": f"Bearer {access_token}"},
                timeout=self.settings.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            logger.warning("Could not resolve current user: %s", exc)
            raise RemoteFailure(f"GET {url} failed: {exc}") from exc

        email = str((payload or {}).get("email") or "").strip()
        if not email:
            raise RemoteFailure("Authenticated user has no email.")
        return email


def fetch_department_user(store: BaseStore, email: str) -> DepartmentUser:
    rows = store.select(DEPARTMENT_USERS_TABLE, filters={"email": email}, limit=1)
    if not rows:
        raise RecordNotFoundError(f"No department user found for {email}.")

    row = rows[0]
    department = row.get("assigned_department")
    return DepartmentUser(
        id=row.get("user_id") or row.get("id"),
        name=str(row.get("name") or ""),
        email=str(row.get("email") or email),
        faculty=row.get("assigned_faculty"),
        department=department,
        department_code=department_short_code(department),
        phone=row.get("phone_no"),
        role=str(row.get("role") or "department"),
    )
