"""
Configuration management with environment variables.

This module provides centralized configuration management
with validation and type safety.
"""

import os
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse
from dotenv import load_dotenv


DEFAULT_STORAGE_PATH = Path.home() / ".tutor_client" / "storage.json"


class SecureString:
    """
    Wrapper for sensitive strings that prevents accidental exposure.

    Examples:
        >>> password = SecureString("secret123")
        >>> str(password)  # Returns "********"
        >>> password.get_value()  # Returns actual value
    """

    def __init__(self, value: str):
        self._value = value

    def get_value(self) -> str:
        """
        Get the actual value (use with caution).

        Warning:
            Use only when building the login request and never log the
            result.
        """
        return self._value

    def __str__(self) -> str:
        return "********"

    def __repr__(self) -> str:
        return "SecureString(********)"

    def __eq__(self, other) -> bool:
        if isinstance(other, SecureString):
            return self._value == other._value
        return False

    def __bool__(self) -> bool:
        return bool(self._value)


class Config:
    """
    Application configuration manager.

    Loads configuration from environment variables (and a ``.env`` file if
    present) and provides validated access to configuration values.

    Attributes:
        api_url: Tutoring backend base URL
        email: Default login email
        password: Default login password (SecureString)
        request_timeout: Per-request timeout in seconds
        max_retries: Extra attempts for GET requests on transport errors
        storage_path: File that persists the access token
        notice_seconds: How long a notice stays visible
        output_dir: Output directory for exports and logs
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Examples:
        >>> config = Config()
        >>> if config.validate():
        ...     print(f"Backend: {config.api_url}")
    """

    @staticmethod
    def _validate_url(url: str, name: str) -> str:
        """
        Validate URL format and scheme.

        Raises:
            ValueError: If URL is invalid
        """
        parsed = urlparse(url)

        if not parsed.scheme:
            raise ValueError(f"{name} must include URL scheme (http/https)")

        if parsed.scheme not in ['http', 'https']:
            raise ValueError(f"{name} must use http or https scheme, got: {parsed.scheme}")

        if not parsed.netloc:
            raise ValueError(f"{name} must have a valid domain")

        return url

    def __init__(self, load_env_file: bool = True):
        """
        Initialize configuration by loading environment variables.

        Args:
            load_env_file: Read a ``.env`` file before reading the environment
        """
        if load_env_file:
            load_dotenv()

        url = os.getenv("TUTOR_API_URL", "http://127.0.0.1:8000")
        self._api_url = self._validate_url(url, "TUTOR_API_URL")

        self._email = os.getenv("TUTOR_EMAIL")

        pwd = os.getenv("TUTOR_PASSWORD")
        self._password = SecureString(pwd) if pwd else None

        # Network settings
        self._request_timeout = float(os.getenv("TUTOR_REQUEST_TIMEOUT", "10"))
        self._max_retries = int(os.getenv("TUTOR_MAX_RETRIES", "2"))

        # Client state
        storage = os.getenv("TUTOR_STORAGE_PATH")
        self._storage_path = Path(storage).expanduser() if storage else DEFAULT_STORAGE_PATH
        self._notice_seconds = float(os.getenv("TUTOR_NOTICE_SECONDS", "3"))

        # Output settings
        self._output_dir = Path(os.getenv("OUTPUT_DIR", "output"))
        self._log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def api_url(self) -> str:
        """Get backend base URL."""
        return self._api_url

    @property
    def email(self) -> Optional[str]:
        """Get default login email, if configured."""
        return self._email

    @property
    def password(self) -> Optional[SecureString]:
        """
        Get default login password (wrapped in SecureString).

        Warning:
            Never log or print the unwrapped value.
        """
        return self._password

    @property
    def request_timeout(self) -> float:
        """Get per-request timeout in seconds."""
        return self._request_timeout

    @property
    def max_retries(self) -> int:
        """Get the number of extra GET attempts on transport errors."""
        return self._max_retries

    @property
    def storage_path(self) -> Path:
        """Get path of the persisted token file."""
        return self._storage_path

    @property
    def notice_seconds(self) -> float:
        """Get notice auto-dismiss time in seconds."""
        return self._notice_seconds

    @property
    def output_dir(self) -> Path:
        """Get output directory path."""
        return self._output_dir

    @property
    def log_level(self) -> str:
        """Get logging level."""
        return self._log_level

    def validate(self) -> bool:
        """
        Validate configuration values.

        Returns:
            True if all configuration is valid

        Raises:
            ValueError: If validation fails
        """
        errors = []

        if self._email and "@" not in self._email:
            errors.append("TUTOR_EMAIL must be a valid email address")

        if self._request_timeout <= 0:
            errors.append("TUTOR_REQUEST_TIMEOUT must be positive")

        if self._max_retries < 0:
            errors.append("TUTOR_MAX_RETRIES must not be negative")

        if self._notice_seconds <= 0:
            errors.append("TUTOR_NOTICE_SECONDS must be positive")

        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self._log_level not in valid_levels:
            errors.append(
                f"LOG_LEVEL must be one of: {', '.join(valid_levels)}"
            )

        if errors:
            error_msg = "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            raise ValueError(error_msg)

        return True

    def create_output_directories(self):
        """Create output directories if they don't exist."""
        directories = [
            self.output_dir / "exports",
            self.output_dir / "logs",
        ]

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)
