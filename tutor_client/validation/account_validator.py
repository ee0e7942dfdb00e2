"""
Account form validator (signup and login).
"""

from typing import Dict, Any

from .validators import Validator, ValidationResult


class AccountValidator(Validator):
    """
    Validator for signup and login forms.

    Login forms carry ``email`` and ``password``; signup forms also
    carry ``name``. Password strength is the backend's decision, so only
    presence is checked here.
    """

    def __init__(self, require_name: bool = False):
        self.require_name = require_name

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        result = ValidationResult(is_valid=True)

        required = ["email", "password"]
        if self.require_name:
            required.append("name")

        for error in self.validate_required_fields(data, required):
            result.add_error(error)

        if not result.is_valid:
            return result

        error = self.validate_email_format(data["email"])
        if error:
            result.add_error(error)

        error = self.validate_string_length(data["password"], "password", min_length=1)
        if error:
            result.add_error(error)

        if self.require_name:
            error = self.validate_string_length(data["name"], "name", min_length=1, max_length=100)
            if error:
                result.add_error(error)

        return result
