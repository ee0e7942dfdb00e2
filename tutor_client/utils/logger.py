"""
Logging utilities with security features.

This module provides logging setup with:
- Configurable log levels and output destinations
- Log rotation for file handlers
- Sensitive data masking (passwords, bearer tokens, emails)
"""

import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


def mask_email(email: str) -> str:
    """
    Mask email address for safe logging.

    Examples:
        >>> mask_email("teacher@example.com")
        't***@example.com'
        >>> mask_email("invalid")
        '***'
    """
    if not email or "@" not in email:
        return "***"

    local, domain = email.split("@", 1)
    masked_local = local[0] + "***" if len(local) > 0 else "***"
    return f"{masked_local}@{domain}"


def mask_token(token: Optional[str]) -> str:
    """
    Mask an access token, keeping only the last four characters.

    Examples:
        >>> mask_token("eyJhbGciOiJIUzI1NiJ9.abcd")
        '****abcd'
        >>> mask_token(None)
        '<none>'
    """
    if not token:
        return "<none>"
    if len(token) <= 4:
        return "****"
    return "****" + token[-4:]


class SensitiveDataFilter(logging.Filter):
    """
    Logging filter that masks passwords and tokens before output.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = str(record.msg)

        # password=..., "password": "..."
        message = re.sub(
            r'password["\']?\s*[:=]\s*["\']?([^"\'\s,}]+)',
            r'password: ********',
            message,
            flags=re.IGNORECASE
        )

        # Authorization: Bearer <token>
        message = re.sub(
            r'(bearer)\s+[A-Za-z0-9\-._~+/]+=*',
            r'\1 ********',
            message,
            flags=re.IGNORECASE
        )

        # access_token=..., "access_token": "..."
        message = re.sub(
            r'(access_token)["\']?\s*[:=]\s*["\']?([^"\'\s,}]+)',
            r'\1: ********',
            message,
            flags=re.IGNORECASE
        )

        record.msg = message
        return True


def setup_logger(
    name: str = "tutor_client",
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and configure a logger instance.

    Args:
        name: Logger name (default: "tutor_client")
        level: Logging level (default: logging.INFO)
        log_file: Optional path to log file for file output

    Returns:
        Configured logger instance

    Examples:
        >>> logger = setup_logger()
        >>> logger.info("Client started")

        >>> logger = setup_logger(
        ...     level=logging.DEBUG,
        ...     log_file="output/logs/tutor_client.log"
        ... )
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    logger.setLevel(level)

    formatter = logging.Formatter(
        fmt='%(asctime)s [%(levelname)s] %(name)s:%(funcName)s:%(lineno)d %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.addFilter(SensitiveDataFilter())
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(SensitiveDataFilter())
        logger.addHandler(file_handler)

    return logger
