"""
Validation framework with Strategy pattern.

This module provides:
- Abstract Validator interface
- ValidationResult for consistent validation reporting
- Shared field checks used by the form validators
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional


@dataclass
class ValidationResult:
    """
    Result of form input validation.

    Attributes:
        is_valid: Whether validation passed
        errors: List of error messages
        warnings: List of warning messages (non-fatal)
    """

    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> 'ValidationResult':
        """
        Add an error message.

        Examples:
            >>> result = ValidationResult(is_valid=True)
            >>> result.add_error("Error 1").add_error("Error 2")
        """
        self.errors.append(message)
        self.is_valid = False
        return self

    def add_warning(self, message: str) -> 'ValidationResult':
        """Add a warning message."""
        self.warnings.append(message)
        return self

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def get_summary(self) -> str:
        """
        Get validation summary.

        Returns:
            Human-readable summary of validation results
        """
        if self.is_valid and not self.has_warnings:
            return "Validation passed"

        parts = []

        if self.has_errors:
            parts.append(f"Errors ({len(self.errors)}):")
            for error in self.errors:
                parts.append(f"  - {error}")

        if self.has_warnings:
            parts.append(f"Warnings ({len(self.warnings)}):")
            for warning in self.warnings:
                parts.append(f"  - {warning}")

        return "\n".join(parts)

    def first_error(self) -> Optional[str]:
        """Return the first error message, suitable for a one-line notice."""
        return self.errors[0] if self.errors else None


class Validator(ABC):
    """
    Abstract base class for validators.

    Subclasses implement validate() for one form of the client.
    """

    @abstractmethod
    def validate(self, data: Any) -> ValidationResult:
        """
        Validate data.

        Args:
            data: Data to validate

        Returns:
            ValidationResult with errors and warnings
        """
        pass

    def validate_required_fields(
        self,
        data: dict,
        required_fields: List[str]
    ) -> List[str]:
        """
        Validate that required fields exist.

        Returns:
            List of error messages for missing fields
        """
        errors = []
        for name in required_fields:
            if name not in data or data[name] is None:
                errors.append(f"Missing required field: {name}")
        return errors

    def validate_date_format(
        self,
        date_str: Any,
        field_name: str = "date"
    ) -> Optional[str]:
        """
        Validate date format (YYYY-MM-DD) and that the date exists.

        Returns:
            Error message if invalid, None if valid
        """
        if not isinstance(date_str, str) or not re.match(r'^\d{4}-\d{2}-\d{2}$', date_str):
            return f"Invalid {field_name} format: {date_str} (expected YYYY-MM-DD)"

        try:
            datetime.strptime(date_str, "%Y-%m-%d")
        except ValueError:
            return f"Invalid {field_name}: {date_str} is not a calendar date"

        return None

    def validate_positive_integer(
        self,
        value: Any,
        field_name: str
    ) -> Optional[str]:
        """
        Validate that value is a positive integer.

        Returns:
            Error message if invalid, None if valid
        """
        if isinstance(value, bool) or not isinstance(value, int):
            return f"{field_name} must be an integer, got {type(value).__name__}"

        if value <= 0:
            return f"{field_name} must be positive, got {value}"

        return None

    def validate_integer_range(
        self,
        value: Any,
        field_name: str,
        minimum: int,
        maximum: int
    ) -> Optional[str]:
        """
        Validate that value is an integer within [minimum, maximum].

        Returns:
            Error message if invalid, None if valid
        """
        if isinstance(value, bool) or not isinstance(value, int):
            return f"{field_name} must be an integer, got {type(value).__name__}"

        if not minimum <= value <= maximum:
            return f"{field_name} must be between {minimum} and {maximum}, got {value}"

        return None

    def validate_email_format(
        self,
        email: Any,
        field_name: str = "email"
    ) -> Optional[str]:
        """
        Validate email format.

        Returns:
            Error message if invalid, None if valid
        """
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        if not isinstance(email, str) or not re.match(pattern, email):
            return f"Invalid {field_name} format: {email}"
        return None

    def validate_string_length(
        self,
        value: Any,
        field_name: str,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None
    ) -> Optional[str]:
        """
        Validate string length (surrounding whitespace is ignored).

        Returns:
            Error message if invalid, None if valid
        """
        if not isinstance(value, str):
            return f"{field_name} must be a string, got {type(value).__name__}"

        length = len(value.strip())

        if min_length is not None and length < min_length:
            return f"{field_name} must be at least {min_length} characters, got {length}"

        if max_length is not None and length > max_length:
            return f"{field_name} must be at most {max_length} characters, got {length}"

        return None
