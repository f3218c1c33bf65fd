from typing import Optional

import requests

from beauty_studio.core.config import settings
from beauty_studio.core.logger import logger


class AdminSession:
    """
    Holds the admin token and user for one client.

    Passed explicitly to the API client and the dashboard instead of living
    in global storage.
    """

    def __init__(self, base_url: Optional[str] = None, http: Optional[requests.Session] = None, timeout: float = 10):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.http = http or requests.Session()
        self.timeout = timeout
        self.token: Optional[str] = None
        self.user: Optional[dict] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None and self.user is not None

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.user.get("role") == "admin"

    def auth_headers(self) -> dict:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def login(self, email: str, password: str) -> bool:
        try:
            response = self.http.post(
                f"{self.base_url}/auth/login",
                json={"email": email, "password": password},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"❌ Login request failed: {e}")
            return False

        if response.status_code != 200:
            logger.info(f"🔒 Login failed ({response.status_code})")
            return False

        data = response.json()
        self.token = data.get("token")
        self.user = data.get("user")
        return self.is_authenticated

    def get_current_user(self) -> Optional[dict]:
        """Re-validates the stored token with the server; clears the session if it was rejected."""
        if not self.token:
            return None

        try:
            response = self.http.get(f"{self.base_url}/auth/me", headers=self.auth_headers(), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"❌ Current user lookup failed: {e}")
            return None

        if response.status_code != 200:
            self.logout()
            return None

        self.user = response.json().get("user")
        return self.user

    def logout(self):
        self.token = None
        self.user = None
