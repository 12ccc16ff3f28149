import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests
from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_TIMEOUT_SEC = 10


class ApiError(Exception):
    """Non-2xx response (or transport failure, status_code 0) from the TextPost API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


@dataclass(frozen=True)
class Post:
    id: int
    content: str
    created_at: datetime
    username: Optional[str] = None
    user_id: Optional[str] = None
    email: Optional[str] = None

    @property
    def author(self) -> str:
        return self.username or self.email or self.user_id or "unknown"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Post":
        return cls(
            id=int(data["id"]),
            content=data["content"],
            created_at=date_parser.isoparse(str(data["created_at"])),
            username=data.get("username"),
            user_id=data.get("user_id"),
            email=data.get("email"),
        )


class TextPostClient:
    """
    Thin wrapper over the TextPost HTTP API.

    `session` may be any object with a requests-style
    `request(method, url, json=..., headers=..., timeout=...)`.
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, session=None, timeout: float = DEFAULT_TIMEOUT_SEC):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.access_token: Optional[str] = None

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        headers = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ApiError(0, f"Request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            message = body.get("error") if isinstance(body, dict) else None
            raise ApiError(response.status_code, message or f"HTTP {response.status_code}")
        return body

    def _author(self, username: Optional[str]) -> Dict[str, Any]:
        # With a bearer token the server takes the author from the token
        return {} if self.access_token or not username else {"username": username}

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/api/health")

    def register(self, username: str, password: str) -> None:
        self._request("POST", "/api/register", {"username": username, "password": password})

    def login(self, username: str, password: str) -> str:
        """Returns the username the server confirmed."""
        body = self._request("POST", "/api/login", {"username": username, "password": password})
        return body["username"]

    def sign_up_email(self, email: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "/api/auth/signup", {"email": email, "password": password})

    def sign_in_email(self, email: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "/api/auth/session", {"email": email, "password": password})

    def me(self) -> Dict[str, Any]:
        return self._request("GET", "/api/auth/me")

    def oauth_url(self, provider: str) -> str:
        return self._request("GET", f"/api/auth/oauth/{provider}")["url"]

    def list_posts(self) -> List[Post]:
        return [Post.from_dict(p) for p in self._request("GET", "/api/posts") or []]

    def create_post(self, content: str, username: Optional[str] = None) -> Post:
        body = self._request("POST", "/api/posts", {**self._author(username), "content": content})
        return Post.from_dict(body)

    def update_post(self, post_id: int, content: str, username: Optional[str] = None) -> Post:
        body = self._request("PUT", f"/api/posts/{post_id}", {**self._author(username), "content": content})
        return Post.from_dict(body)

    def delete_post(self, post_id: int, username: Optional[str] = None) -> None:
        self._request("DELETE", f"/api/posts/{post_id}", self._author(username) or None)
