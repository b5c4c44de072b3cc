"""
Thin HTTP client for the ExamEval API.
"""
import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:5001/api/v1"


class ApiError(Exception):
    """Error response from the API, carrying the server's message."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ApiClient:
    """
    Wraps a requests Session. Anything with requests-style ``get``/``post``/
    ``put``/``delete`` methods can be passed as ``http`` (a FastAPI TestClient
    works too).
    """

    def __init__(self, base_url: str = DEFAULT_API_URL, http=None, token: Optional[str] = None):
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else requests.Session()
        self.token = token

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _send(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = getattr(self.http, method)(url, headers=self._headers(), **kwargs)
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method.upper(), url, e)
            raise ApiError(f"Could not reach server: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400:
            message = body.get("error") if isinstance(body, dict) else None
            raise ApiError(message or f"Request failed with status {response.status_code}", response.status_code)
        return body

    def get(self, path: str, **kwargs) -> Dict[str, Any]:
        return self._send("get", path, **kwargs)

    def post(self, path: str, **kwargs) -> Dict[str, Any]:
        return self._send("post", path, **kwargs)

    def put(self, path: str, **kwargs) -> Dict[str, Any]:
        return self._send("put", path, **kwargs)

    def delete(self, path: str, **kwargs) -> Dict[str, Any]:
        return self._send("delete", path, **kwargs)
