"""HTTP client for the bookstore REST API."""
import logging
from typing import Optional, Dict, Any, Callable

import requests

from bookstore.credentials import CredentialStore
from bookstore.errors import ApiError, DEFAULT_ERROR_MESSAGE

logger = logging.getLogger(__name__)


def redirect_to_login(login_url: str):
    """Default login boundary: tell the user where to re-authenticate."""
    logger.warning(f"Session expired or unauthorized, redirecting to {login_url}")


def error_message_from(payload: Any, fallback: Optional[str]) -> str:
    """Prefer the server's ``message`` field, then the transport's reason."""
    if isinstance(payload, dict) and payload.get("message"):
        return payload["message"]
    return fallback or DEFAULT_ERROR_MESSAGE


class ApiClient:
    """Client for the bookstore API with auth header and error normalization."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10,
        retry_attempts: int = 3,
        credentials: Optional[CredentialStore] = None,
        on_unauthorized: Callable[[str], None] = redirect_to_login,
        login_url: str = "/login",
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the API client.

        Args:
            base_url: Scheme and host of the API, e.g. http://localhost:8080
            timeout: Request timeout in seconds
            retry_attempts: Configured retry count (not used to retry)
            credentials: Where the bearer token lives
            on_unauthorized: Called with login_url after a 401
            login_url: Login boundary handed to on_unauthorized
            session: Pre-built session (tests inject fakes here)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_attempts = retry_attempts
        self.credentials = credentials
        self.on_unauthorized = on_unauthorized
        self.login_url = login_url

        # Create session for connection pooling
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._request("GET", path, params=params)

    def post(self, path: str, data: Optional[Dict[str, Any]] = None) -> Any:
        return self._request("POST", path, data=data)

    def put(self, path: str, data: Optional[Dict[str, Any]] = None) -> Any:
        return self._request("PUT", path, data=data)

    def delete(self, path: str) -> Any:
        return self._request("DELETE", path)

    def _auth_headers(self) -> Dict[str, str]:
        token = self.credentials.get_token() if self.credentials else None
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Make a single HTTP request.

        Args:
            method: HTTP verb
            path: Path relative to base_url
            params: Query parameters
            data: JSON body

        Returns:
            Decoded JSON, or None for an empty body

        Raises:
            ApiError: on transport failure or a non-2xx status
        """
        url = f"{self.base_url}{path}"
        logger.info(f"{method} {url}")

        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=data,
                headers=self._auth_headers(),
                timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            logger.warning(f"Timeout after {self.timeout}s: {method} {url}")
            raise ApiError(f"Request timed out after {self.timeout}s", 500)
        except requests.exceptions.RequestException as e:
            logger.warning(f"Connection error: {e}")
            raise ApiError(str(e) or DEFAULT_ERROR_MESSAGE, 500)

        if 200 <= response.status_code < 300:
            logger.info(f"Success: {response.status_code}")
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError:
                raise ApiError("Invalid JSON in response", response.status_code)

        self._raise_for_status(response)

    def _raise_for_status(self, response: requests.Response):
        try:
            payload = response.json()
        except ValueError:
            payload = None

        error = ApiError(
            error_message_from(payload, response.reason),
            response.status_code
        )

        if error.is_unauthorized:
            logger.warning("Unauthorized (401): clearing stored credentials")
            if self.credentials:
                self.credentials.clear()
            self.on_unauthorized(self.login_url)
        elif error.status >= 500:
            logger.warning(f"Server error ({error.status}): {error.message}")
        else:
            logger.error(f"Client error ({error.status}): {error.message}")

        raise error

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
