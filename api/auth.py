"""Identity provider client (Supabase-style /auth/v1 API). Tokens are validated remotely on every request."""
from typing import Any

import httpx

from config import settings
from utils.errors import AuthError, UpstreamError, ValidationError
from utils.logging import get_logger

logger = get_logger(__name__)


def _error_message(r: httpx.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return r.text[:200] or f"HTTP {r.status_code}"
    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {r.status_code}"


class AuthClient:
    def __init__(
        self,
        base_url: str | None = None,
        anon_key: str | None = None,
        service_role_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url if base_url is not None else settings.AUTH_URL).rstrip("/")
        self.anon_key = anon_key if anon_key is not None else settings.AUTH_ANON_KEY
        self.service_role_key = service_role_key if service_role_key is not None else settings.AUTH_SERVICE_ROLE_KEY
        self.timeout = timeout or settings.AUTH_TIMEOUT
        self._transport = transport

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        if not self.base_url:
            raise UpstreamError("Identity provider is not configured (AUTH_URL)")
        try:
            with httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self._transport) as client:
                return client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Identity provider %s %s failed: %s", method, path, e)
            raise UpstreamError(f"Identity provider unreachable: {e}") from e

    def get_user(self, token: str) -> dict:
        """Return the provider's user object for `token`; AuthError if the token is rejected."""
        r = self._request(
            "GET",
            "/auth/v1/user",
            headers={"Authorization": f"Bearer {token}", "apikey": self.anon_key or self.service_role_key},
        )
        if r.status_code in (400, 401, 403, 404):
            logger.info("Token rejected by identity provider: %s", _error_message(r))
            raise AuthError("Invalid or expired token")
        if r.status_code >= 400:
            raise UpstreamError(f"Identity provider error: {_error_message(r)}")
        user = r.json()
        if not isinstance(user, dict) or not user.get("id"):
            raise AuthError("Invalid or expired token")
        return user

    def create_user(self, email: str, password: str, name: str | None = None) -> dict:
        """Create a confirmed user through the admin API (there is no mail server to confirm with)."""
        if not self.service_role_key:
            raise UpstreamError("Signup is not configured (AUTH_SERVICE_ROLE_KEY)")
        r = self._request(
            "POST",
            "/auth/v1/admin/users",
            headers={"Authorization": f"Bearer {self.service_role_key}", "apikey": self.service_role_key},
            json={
                "email": email,
                "password": password,
                "user_metadata": {"name": name or email.split("@")[0]},
                "email_confirm": True,
            },
        )
        if 400 <= r.status_code < 500:
            msg = _error_message(r)
            logger.info("Signup rejected for %s: %s", email, msg)
            raise ValidationError(msg)
        if r.status_code >= 400:
            raise UpstreamError(f"Identity provider error: {_error_message(r)}")
        return r.json()
