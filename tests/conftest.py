"""
Shared fixtures: canned HTTP responses and an in-memory tutoring backend.
"""

import json
import re
from http.client import responses as HTTP_REASONS
from typing import Any, Optional

import pytest
import requests

from tutor_client.app import Notifier, SessionManager, TokenStore, TutoringApi, TutorController
from tutor_client.app.gateway import ApiGateway


def build_response(
    status_code: int,
    payload: Any = None,
    text: Optional[str] = None,
    reason: Optional[str] = None
) -> requests.Response:
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason if reason is not None else HTTP_REASONS.get(status_code, "")
    response.encoding = "utf-8"

    if payload is not None:
        response._content = json.dumps(payload).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    elif text is not None:
        response._content = text.encode("utf-8")
    else:
        response._content = b""

    return response


class FakeTutoringBackend:
    """
    In-memory stand-in for the tutoring backend, used in place of a
    requests.Session.
    """

    EMAIL = "teacher@example.com"
    PASSWORD = "correct-horse"
    TOKEN = "t1"

    def __init__(self):
        self.grades = [
            {"grade_id": 1, "grade_name": "Elementary 6"},
            {"grade_id": 2, "grade_name": "Middle 1"},
        ]
        self.students = []
        self.feedbacks = {}
        self.calls = []
        self.closed = False
        self._next_student_id = 1
        self._next_feedback_id = 100

    def close(self):
        self.closed = True

    def request(self, method, url, headers=None, json=None, data=None, timeout=None):
        self.calls.append({
            "method": method,
            "url": url,
            "headers": headers or {},
            "json": json,
            "data": data,
            "timeout": timeout,
        })
        path = "/" + url.split("://", 1)[-1].split("/", 1)[-1]

        if method == "POST" and path == "/api/v1/teachers/":
            return build_response(201, {"teacher_id": 1, "email": json["email"], "name": json["name"]})

        if method == "POST" and path == "/api/v1/auth/token":
            if data == {"username": self.EMAIL, "password": self.PASSWORD}:
                return build_response(200, {"access_token": self.TOKEN, "token_type": "bearer"})
            return build_response(401, {"detail": "Incorrect username or password"})

        if (headers or {}).get("Authorization") != f"Bearer {self.TOKEN}":
            return build_response(401, {"detail": "Not authenticated"})

        if path == "/api/v1/grades" and method == "GET":
            return build_response(200, self.grades)

        if path == "/api/v1/students":
            if method == "GET":
                return build_response(200, self.students)
            if method == "POST":
                return build_response(201, self._add_student(json["name"], json["grade_id"]))

        match = re.fullmatch(r"/api/v1/students/(\d+)(/feedbacks)?", path)
        if match:
            student = self._find(int(match.group(1)))
            if student is None:
                return build_response(404, {"detail": "Student not found"})

            if match.group(2):
                if method == "GET":
                    return build_response(200, self.feedbacks.get(student["student_id"], []))
                if method == "POST":
                    return build_response(201, self._add_feedback(student, json))
            elif method == "PUT":
                student["name"] = json["name"]
                student["grade_info"] = self._grade(json["grade_id"])
                return build_response(200, student)
            elif method == "DELETE":
                self.students.remove(student)
                return build_response(204)

        return build_response(404, {"detail": "Not Found"})

    def _grade(self, grade_id):
        for grade in self.grades:
            if grade["grade_id"] == grade_id:
                return dict(grade)
        return {"grade_id": grade_id, "grade_name": "?"}

    def _find(self, student_id):
        for student in self.students:
            if student["student_id"] == student_id:
                return student
        return None

    def _add_student(self, name, grade_id):
        student = {
            "student_id": self._next_student_id,
            "name": name,
            "grade_info": self._grade(grade_id),
            "classes": [],
        }
        self._next_student_id += 1
        self.students.append(student)
        return student

    def _add_feedback(self, student, body):
        feedback = {
            "feedback_id": self._next_feedback_id,
            **body["feedback_info"],
            "ai_comment_improvement": f"Better at {body['class_info']['subject']}",
            "ai_comment_attitude": "Keep asking questions",
            "ai_comment_overall": "Good class",
        }
        self._next_feedback_id += 1
        self.feedbacks.setdefault(student["student_id"], []).append(feedback)
        student["classes"].append({"class_date": body["class_info"]["class_date"], "feedback": feedback})
        return feedback

    def requests_to(self, method, suffix):
        return [c for c in self.calls if c["method"] == method and c["url"].endswith(suffix)]


@pytest.fixture
def backend():
    return FakeTutoringBackend()


@pytest.fixture
def notifier():
    return Notifier(display_seconds=3)


@pytest.fixture
def token_store(tmp_path):
    return TokenStore(tmp_path / "storage.json")


@pytest.fixture
def make_controller(backend, notifier, token_store):
    """Build controllers sharing one backend, notifier and token file."""

    def factory(confirm=None):
        session_manager = SessionManager(token_store)
        gateway = ApiGateway(
            "http://backend.test",
            token_provider=lambda: session_manager.token,
            notifier=notifier,
            http=backend,
            max_retries=0
        )
        return TutorController(TutoringApi(gateway), session_manager, notifier, confirm=confirm)

    return factory


@pytest.fixture
def logged_in_controller(make_controller, backend):
    controller = make_controller(confirm=lambda question: True)
    result = controller.login(backend.EMAIL, backend.PASSWORD)
    assert result.is_success
    return controller
