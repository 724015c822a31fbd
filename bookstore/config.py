"""Configuration management."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


# REST endpoints
BOOKS_ENDPOINT = "/api/books"
CUSTOMERS_ENDPOINT = "/api/customers"
ORDERS_ENDPOINT = "/api/orders"


class Config:
    """Application configuration."""
    
    # API
    API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8080")
    API_TIMEOUT_MS = int(os.getenv("API_TIMEOUT_MS", "10000"))
    # Not consumed by the request path; see DESIGN.md
    API_RETRY_ATTEMPTS = int(os.getenv("API_RETRY_ATTEMPTS", "3"))
    
    # Auth
    AUTH_TOKEN_PATH = os.getenv(
        "AUTH_TOKEN_PATH",
        os.path.join(os.path.expanduser("~"), ".bookstore", "auth_token")
    )
    LOGIN_URL = os.getenv("LOGIN_URL", "/login")
    
    # Defaults
    DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
    ASYNC_MAX_CONCURRENT = int(os.getenv("ASYNC_MAX_CONCURRENT", "5"))
    
    @property
    def timeout_seconds(self) -> float:
        """HTTP libraries take timeouts in seconds."""
        return self.API_TIMEOUT_MS / 1000
