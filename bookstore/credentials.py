"""Local bearer-token storage."""
import os
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class CredentialStore:
    """File-backed store for the API bearer token."""

    def __init__(self, path: str):
        self.path = path

    def get_token(self) -> Optional[str]:
        """Return the stored token, or None when nothing is stored."""
        try:
            with open(self.path, encoding="utf-8") as f:
                token = f.read().strip()
        except FileNotFoundError:
            return None

        return token or None

    def set_token(self, token: str):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(self.path, "w", encoding="utf-8") as f:
            f.write(token)
        logger.info(f"Stored auth token at {self.path}")

    def clear(self):
        try:
            os.remove(self.path)
            logger.info("Cleared stored auth token")
        except FileNotFoundError:
            pass
