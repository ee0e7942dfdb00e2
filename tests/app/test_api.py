"""
Unit tests for the endpoint catalogue.
"""

from unittest.mock import MagicMock

import pytest

from tutor_client.app.api import TutoringApi
from tutor_client.app.gateway import ApiGateway, BodyEncoding
from tutor_client.models.result import Result


@pytest.fixture
def gateway():
    mock = MagicMock(spec=ApiGateway)
    mock.request.return_value = Result.success({})
    return mock


@pytest.fixture
def api(gateway):
    return TutoringApi(gateway)


class TestTutoringApi:
    """Test cases for TutoringApi endpoints."""

    def test_signup(self, api, gateway):
        api.signup("t@example.com", "pw", "Lee")

        gateway.request.assert_called_once_with(
            "POST", "/api/v1/teachers/",
            {"email": "t@example.com", "password": "pw", "name": "Lee"}
        )

    def test_login_uses_form_encoding(self, api, gateway):
        api.login("t@example.com", "pw")

        gateway.request.assert_called_once_with(
            "POST", "/api/v1/auth/token",
            {"username": "t@example.com", "password": "pw"},
            encoding=BodyEncoding.FORM
        )

    def test_collections(self, api, gateway):
        api.get_grades()
        api.get_students()
        api.get_feedbacks(7)

        paths = [c.args[1] for c in gateway.request.call_args_list]
        assert paths == ["/api/v1/grades", "/api/v1/students", "/api/v1/students/7/feedbacks"]

    def test_student_mutations(self, api, gateway):
        api.create_student("Kim", 2)
        api.update_student(7, "Kim Minji", 3)
        api.delete_student(7)

        calls = [c.args for c in gateway.request.call_args_list]
        assert calls == [
            ("POST", "/api/v1/students", {"name": "Kim", "grade_id": 2}),
            ("PUT", "/api/v1/students/7", {"name": "Kim Minji", "grade_id": 3}),
            ("DELETE", "/api/v1/students/7"),
        ]

    def test_create_feedback_body(self, api, gateway):
        class_info = {"subject": "Math", "class_date": "2025-10-15",
                      "progress_text": "", "class_memo": ""}
        scores = {"attitude_score": 3, "understanding_score": 3,
                  "homework_score": 3, "qa_score": 3}

        api.create_feedback(7, class_info, scores)

        gateway.request.assert_called_once_with(
            "POST", "/api/v1/students/7/feedbacks",
            {"class_info": class_info, "feedback_info": scores}
        )
