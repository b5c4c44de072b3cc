"""
Client-side session: the logged-in user's snapshot and bearer token,
persisted so a later process can pick the session back up.
"""
import json
import logging
from typing import Any, Dict, Optional

from exameval.client.api import ApiClient, ApiError
from exameval.client.storage import LocalStorage

logger = logging.getLogger(__name__)

USER_KEY = "examEvalUser"
TOKEN_KEY = "examEvalToken"


class AuthError(Exception):
    """Login or registration was refused; ``message`` is the server's reason."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SessionStore:
    def __init__(self, api: ApiClient, storage: LocalStorage):
        self.api = api
        self.storage = storage
        self.current_user: Optional[Dict[str, Any]] = None
        self.token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    def restore(self) -> Optional[Dict[str, Any]]:
        """Load the persisted session. Malformed user data is discarded."""
        raw_user = self.storage.get_item(USER_KEY)
        self.current_user = None
        self.token = None

        if raw_user and raw_user != "undefined":
            try:
                user = json.loads(raw_user)
            except ValueError:
                logger.warning("Discarding malformed session data")
                self.storage.remove_item(USER_KEY)
            else:
                if isinstance(user, dict):
                    self.current_user = user
                else:
                    self.storage.remove_item(USER_KEY)

        if self.current_user is not None:
            token = self.storage.get_item(TOKEN_KEY)
            self.token = token if token and token != "undefined" else None
        self.api.token = self.token
        return self.current_user

    def _establish(self, body: Dict[str, Any]) -> Dict[str, Any]:
        user = body.get("data")
        token = body.get("token")
        if not isinstance(user, dict) or not token:
            raise AuthError("Unexpected response from server")

        self.storage.set_item(USER_KEY, json.dumps(user))
        self.storage.set_item(TOKEN_KEY, token)
        self.current_user = user
        self.token = token
        self.api.token = token
        return user

    def login(self, email: str, password: str) -> Dict[str, Any]:
        try:
            body = self.api.post("/auth/login", json={"email": email, "password": password})
        except ApiError as e:
            raise AuthError(e.message or "Login failed", e.status_code) from e
        return self._establish(body)

    def register(self, name: str, email: str, password: str, role: str = "student", **profile) -> Dict[str, Any]:
        payload = {"name": name, "email": email, "password": password, "role": role, **profile}
        try:
            body = self.api.post("/auth/register", json=payload)
        except ApiError as e:
            raise AuthError(e.message or "Registration failed", e.status_code) from e
        return self._establish(body)

    def logout(self) -> None:
        self.storage.remove_item(USER_KEY)
        self.storage.remove_item(TOKEN_KEY)
        self.current_user = None
        self.token = None
        self.api.token = None
