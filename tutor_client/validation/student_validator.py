"""
Student form validator.

Validates the name/grade pair used to create or update a student.
"""

from typing import Dict, Any

from .validators import Validator, ValidationResult


class StudentValidator(Validator):
    """
    Validator for student create/update forms.

    Examples:
        >>> validator = StudentValidator()
        >>> result = validator.validate({"name": "Kim", "grade_id": 3})
        >>> result.is_valid
        True
    """

    MAX_NAME_LENGTH = 100

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        result = ValidationResult(is_valid=True)

        for error in self.validate_required_fields(data, ["name", "grade_id"]):
            result.add_error(error)

        if not result.is_valid:
            return result

        error = self.validate_string_length(
            data["name"],
            "name",
            min_length=1,
            max_length=self.MAX_NAME_LENGTH
        )
        if error:
            result.add_error(error)

        error = self.validate_positive_integer(data["grade_id"], "grade_id")
        if error:
            result.add_error(error)

        return result
