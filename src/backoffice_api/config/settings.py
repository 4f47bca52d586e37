"""
Configuration settings management.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

load_dotenv()


@dataclass
class Settings:
    """Application settings configuration."""

    # API configuration
    api_title: str
    api_version: str
    api_description: str

    # Environment
    environment: str
    debug: bool

    # Authentication
    api_token: str

    # Security
    allowed_hosts: str

    @classmethod
    def load_from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            api_title="Backoffice Importacoes API",
            api_version="1.0.0",
            api_description="Import job tracking and reprocessing console",
            environment=os.getenv("ENVIRONMENT", "development"),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            api_token=cls._load_api_token(),
            allowed_hosts=os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1"),
        )

    @staticmethod
    def _load_api_token() -> str:
        """Load API token from env var or file path."""
        token = os.getenv("API_AUTH_TOKEN", "")
        if token:
            return token

        token_file = os.getenv("API_AUTH_TOKEN_FILE")
        if token_file:
            path = Path(token_file)
            if not path.exists():
                logger.warning(f"API token file not found: {token_file}")
                return ""
            try:
                token = path.read_text(encoding="utf-8").strip()
            except OSError as exc:
                logger.error(f"Failed to load API token from file {token_file}: {exc}")
                return ""
            if not token:
                logger.warning("API_AUTH_TOKEN_FILE is empty")
            return token

        return ""

    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    def get_allowed_hosts(self) -> list[str]:
        """Get allowed hosts as a list."""
        return [host.strip() for host in self.allowed_hosts.split(",") if host.strip()]


# Global settings instance
settings = Settings.load_from_env()
logger.info(f"Settings loaded for environment: {settings.environment}")
