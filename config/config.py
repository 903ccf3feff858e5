import os
from pathlib import Path

from dotenv import load_dotenv

from utils.logger import get_logger

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent


class ConfigError(RuntimeError):
    """Required configuration is missing or invalid."""


class Config:
    """Configuration management for the search server."""

    def __init__(self):
        """Initialize configuration with environment variables."""
        # Load environment variables from .env file if it exists
        env_path = PROJECT_ROOT / '.env'
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # API Configuration
        self.TAVILY_API_KEY = os.getenv('TAVILY_API_KEY', '').strip()
        self.TAVILY_BASE_URL = os.getenv('TAVILY_BASE_URL', 'https://api.tavily.com')
        self.TAVILY_TIMEOUT_S = self._float_env('TAVILY_TIMEOUT_S', 30.0)

        # Storage Configuration
        self.SEARCH_DATA_DIR = Path(os.getenv('SEARCH_DATA_DIR', str(PROJECT_ROOT / 'data')))
        self.SEARCH_STORAGE_FILE = os.getenv('SEARCH_STORAGE_FILE', 'searches.json')

    @staticmethod
    def _float_env(name: str, default: float) -> float:
        raw = os.getenv(name)
        if raw is None or not raw.strip():
            return default
        try:
            value = float(raw)
        except ValueError:
            logger.warning(f"Ignoring non-numeric {name}={raw!r}, using {default}")
            return default
        if value <= 0:
            logger.warning(f"Ignoring non-positive {name}={raw!r}, using {default}")
            return default
        return value

    @property
    def storage_path(self) -> Path:
        """Full path of the JSON search cache."""
        return self.SEARCH_DATA_DIR / self.SEARCH_STORAGE_FILE

    def validate(self) -> bool:
        """
        Validate that all required configuration is present.

        Returns:
            bool: True if configuration is valid, False otherwise
        """
        if not self.TAVILY_API_KEY:
            logger.error("TAVILY_API_KEY is not set. Please set it in the environment or the .env file.")
            return False
        return True

    def require_api_key(self) -> str:
        """
        Get the Tavily API key.

        Raises:
            ConfigError: If TAVILY_API_KEY is not set
        """
        if not self.validate():
            raise ConfigError("TAVILY_API_KEY environment variable is required")
        return self.TAVILY_API_KEY
