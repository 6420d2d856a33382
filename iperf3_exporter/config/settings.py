"""Environment settings."""

import os
from typing import Optional


class Settings:
    """Application settings from environment variables."""

    @staticmethod
    def get(key: str, default: Optional[str] = None) -> str:
        """
        Get environment variable value.

        Args:
            key: Environment variable name
            default: Default value if not set

        Returns:
            str: Environment variable value
        """
        return os.getenv(key, default) or ""

    @staticmethod
    def config_path() -> Optional[str]:
        """Config file named by IPERF3_EXPORTER_CONFIG, if any."""
        return Settings.get("IPERF3_EXPORTER_CONFIG") or None

    @staticmethod
    def log_level() -> str:
        return Settings.get("LOG_LEVEL", "INFO")
