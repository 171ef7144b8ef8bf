"""Configuration management for readtrack.

Loads configuration from environment variables and provides defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()

DEFAULT_LLM_API_URL = "https://open.bigmodel.cn/api/paas/v4/chat/completions"
DEFAULT_LLM_MODEL = "glm-4.6"


@dataclass
class Config:
    """Application configuration."""

    # Database
    db_path: Path

    # Text generation service
    llm_api_key: Optional[str]
    llm_api_url: str
    llm_model: str
    llm_timeout: float  # seconds

    # Web server
    host: str
    port: int

    # Logging
    log_level: str

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        db_path_str = os.environ.get(
            "READTRACK_DB_PATH",
            str(Path.home() / ".readtrack" / "readtrack.db"),
        )
        db_path = Path(db_path_str).expanduser()

        return cls(
            db_path=db_path,
            llm_api_key=os.environ.get("READTRACK_LLM_API_KEY"),
            llm_api_url=os.environ.get("READTRACK_LLM_API_URL", DEFAULT_LLM_API_URL),
            llm_model=os.environ.get("READTRACK_LLM_MODEL", DEFAULT_LLM_MODEL),
            llm_timeout=float(os.environ.get("READTRACK_LLM_TIMEOUT", "30")),
            host=os.environ.get("READTRACK_HOST", "127.0.0.1"),
            port=int(os.environ.get("READTRACK_PORT", "4000")),
            log_level=os.environ.get("READTRACK_LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        # Check database directory is writable
        if str(self.db_path) != ":memory:" and not self.db_path.parent.exists():
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            except PermissionError:
                errors.append(f"Cannot create database directory: {self.db_path.parent}")

        if not self.has_llm_config():
            errors.append("READTRACK_LLM_API_KEY is not set; AI features are disabled")

        return errors

    def has_llm_config(self) -> bool:
        """Check if text generation service configuration is present."""
        return bool(self.llm_api_key and self.llm_api_url)


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config instance. Used for testing."""
    global _config
    _config = None
