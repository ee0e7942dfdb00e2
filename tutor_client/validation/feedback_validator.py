"""
Feedback request validator.

Validates the class details and teacher scores sent to the backend
when requesting AI feedback for a class session.
"""

from typing import Dict, Any

from .validators import Validator, ValidationResult
from ..models.records import SCORE_FIELDS, MIN_SCORE, MAX_SCORE


class FeedbackRequestValidator(Validator):
    """
    Validator for the new-feedback form.

    Validates:
    - class_info: subject, class date (YYYY-MM-DD), progress text, memo
    - feedback_info: four integer scores in the 1..5 range

    Examples:
        >>> validator = FeedbackRequestValidator()
        >>> result = validator.validate({
        ...     "class_info": {
        ...         "subject": "Math",
        ...         "class_date": "2025-10-15",
        ...         "progress_text": "Fractions",
        ...         "class_memo": ""
        ...     },
        ...     "feedback_info": {
        ...         "attitude_score": 4,
        ...         "understanding_score": 3,
        ...         "homework_score": 5,
        ...         "qa_score": 3
        ...     }
        ... })
        >>> result.is_valid
        True
    """

    MAX_SUBJECT_LENGTH = 100
    MAX_TEXT_LENGTH = 2000

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        result = ValidationResult(is_valid=True)

        for error in self.validate_required_fields(data, ["class_info", "feedback_info"]):
            result.add_error(error)

        if not result.is_valid:
            return result

        self._validate_class_info(data["class_info"], result)
        self._validate_scores(data["feedback_info"], result)

        return result

    def _validate_class_info(self, class_info: Dict[str, Any], result: ValidationResult):
        for error in self.validate_required_fields(class_info, ["subject", "class_date"]):
            result.add_error(error)

        if not result.is_valid:
            return

        error = self.validate_string_length(
            class_info["subject"],
            "subject",
            min_length=1,
            max_length=self.MAX_SUBJECT_LENGTH
        )
        if error:
            result.add_error(error)

        error = self.validate_date_format(class_info["class_date"], "class_date")
        if error:
            result.add_error(error)

        for name in ("progress_text", "class_memo"):
            value = class_info.get(name) or ""
            error = self.validate_string_length(value, name, max_length=self.MAX_TEXT_LENGTH)
            if error:
                result.add_error(error)

        if not (class_info.get("progress_text") or "").strip():
            result.add_warning("progress_text is empty; the generated feedback may be generic")

    def _validate_scores(self, feedback_info: Dict[str, Any], result: ValidationResult):
        for error in self.validate_required_fields(feedback_info, list(SCORE_FIELDS)):
            result.add_error(error)

        for name in SCORE_FIELDS:
            if feedback_info.get(name) is None:
                continue
            error = self.validate_integer_range(feedback_info[name], name, MIN_SCORE, MAX_SCORE)
            if error:
                result.add_error(error)
