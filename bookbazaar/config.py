"""Client configuration loaded from environment variables (and an optional .env file)."""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

DEFAULT_API_URL = "http://localhost:5000"
DEFAULT_STORAGE_PATH = Path.home() / ".bookbazaar" / "storage.json"
DEFAULT_HTTP_TIMEOUT = 10.0

# Durable storage keys
TOKEN_STORAGE_KEY = "token"
API_KEY_STORAGE_KEY = "apiKey"


class Settings(BaseModel):
    """Runtime settings for the storefront client."""
    api_url: str = DEFAULT_API_URL
    storage_path: Path = DEFAULT_STORAGE_PATH
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("http_timeout")
    @classmethod
    def positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout must be positive")
        return v

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from BOOKBAZAAR_* environment variables."""
        return cls(
            api_url=os.environ.get("BOOKBAZAAR_API_URL", DEFAULT_API_URL),
            storage_path=Path(
                os.environ.get("BOOKBAZAAR_STORAGE_PATH", str(DEFAULT_STORAGE_PATH))
            ).expanduser(),
            http_timeout=float(os.environ.get("BOOKBAZAAR_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT)),
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get Settings singleton, reading .env from the working directory first."""
    global _settings
    if _settings is None:
        env_path = Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path)
        _settings = Settings.from_env()
    return _settings
