"""
Challenge Arena Configuration
Store, identity provider and leaderboard settings read from the environment
"""

import os
from typing import List, Optional


class Config:
    """Validated configuration - fails fast on missing or malformed vars"""

    def __init__(self):
        self.MONGO_URL = self._require_env("MONGO_URL")
        self.MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "challenge_arena")

        # Firebase service account (all optional - falls back to default credentials)
        self.FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")
        self.FIREBASE_CLIENT_EMAIL = os.getenv("FIREBASE_CLIENT_EMAIL")
        private_key = os.getenv("FIREBASE_PRIVATE_KEY")
        self.FIREBASE_PRIVATE_KEY = private_key.replace('\\n', '\n') if private_key else None

        # Store ceiling for "$in" identity lookups
        self.LEADERBOARD_BATCH_SIZE = self._int_env("LEADERBOARD_BATCH_SIZE", 10)
        self.SEARCH_OVERFETCH_FACTOR = self._int_env("SEARCH_OVERFETCH_FACTOR", 3)

        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.CORS_ORIGINS = self._parse_list(os.getenv("CORS_ORIGINS", "*"))

    @staticmethod
    def _require_env(key: str) -> str:
        """Get required environment variable or crash"""
        value = os.getenv(key)
        if not value:
            raise RuntimeError(f"Missing required environment variable: {key}")
        return value

    @staticmethod
    def _int_env(key: str, default: int) -> int:
        raw = os.getenv(key)
        if raw is None or raw == "":
            return default
        try:
            value = int(raw)
        except ValueError:
            raise RuntimeError(f"Environment variable {key} must be an integer, got {raw!r}")
        if value < 1:
            raise RuntimeError(f"Environment variable {key} must be positive, got {value}")
        return value

    @staticmethod
    def _parse_list(value: str) -> List[str]:
        """Parse comma-separated values into a list"""
        return [item.strip() for item in value.split(',') if item.strip()]

    @property
    def has_service_account(self) -> bool:
        return bool(self.FIREBASE_PROJECT_ID and self.FIREBASE_CLIENT_EMAIL and self.FIREBASE_PRIVATE_KEY)


def load_config(overrides: Optional[dict] = None) -> Config:
    """Build a Config from the environment, then apply explicit overrides"""
    config = Config()
    for key, value in (overrides or {}).items():
        setattr(config, key, value)
    return config
