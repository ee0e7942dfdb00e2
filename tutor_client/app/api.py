"""
Tutoring backend endpoints.

Thin wrappers that name each REST call of the backend. All of them go
through ApiGateway.request and return its Result unchanged.
"""

from typing import Any, Dict, List

from .gateway import ApiGateway, BodyEncoding
from ..models.records import ClassInfo, FeedbackInfo, Feedback, Grade, Student
from ..models.result import Result


API_PREFIX = "/api/v1"


class TutoringApi:
    """
    Endpoint catalogue of the tutoring backend.

    Examples:
        >>> api = TutoringApi(gateway)
        >>> result = api.login("teacher@example.com", "secret")
        >>> if result.is_success:
        ...     token = result.value["access_token"]
    """

    def __init__(self, gateway: ApiGateway):
        self.gateway = gateway

    def signup(self, email: str, password: str, name: str) -> Result[Dict[str, Any]]:
        return self.gateway.request(
            "POST",
            f"{API_PREFIX}/teachers/",
            {"email": email, "password": password, "name": name}
        )

    def login(self, email: str, password: str) -> Result[Dict[str, Any]]:
        """Exchange credentials for ``{"access_token": ...}`` (OAuth2 form)."""
        return self.gateway.request(
            "POST",
            f"{API_PREFIX}/auth/token",
            {"username": email, "password": password},
            encoding=BodyEncoding.FORM
        )

    def get_grades(self) -> Result[List[Grade]]:
        return self.gateway.request("GET", f"{API_PREFIX}/grades")

    def get_students(self) -> Result[List[Student]]:
        return self.gateway.request("GET", f"{API_PREFIX}/students")

    def create_student(self, name: str, grade_id: int) -> Result[Student]:
        return self.gateway.request(
            "POST",
            f"{API_PREFIX}/students",
            {"name": name, "grade_id": grade_id}
        )

    def update_student(self, student_id: int, name: str, grade_id: int) -> Result[Student]:
        return self.gateway.request(
            "PUT",
            f"{API_PREFIX}/students/{student_id}",
            {"name": name, "grade_id": grade_id}
        )

    def delete_student(self, student_id: int) -> Result[None]:
        """Delete a student; the backend answers 204, i.e. an EMPTY result."""
        return self.gateway.request("DELETE", f"{API_PREFIX}/students/{student_id}")

    def get_feedbacks(self, student_id: int) -> Result[List[Feedback]]:
        return self.gateway.request("GET", f"{API_PREFIX}/students/{student_id}/feedbacks")

    def create_feedback(
        self,
        student_id: int,
        class_info: ClassInfo,
        feedback_info: FeedbackInfo
    ) -> Result[Feedback]:
        return self.gateway.request(
            "POST",
            f"{API_PREFIX}/students/{student_id}/feedbacks",
            {"class_info": class_info, "feedback_info": feedback_info}
        )
