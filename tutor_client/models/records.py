"""
Backend record shapes.

TypedDict definitions for the JSON payloads exchanged with the tutoring
backend. The backend owns these records; the client only keeps transient
copies for the view currently on screen.
"""

from typing import List, Optional, TypedDict


class Grade(TypedDict):
    """
    Grade option as returned by ``GET /api/v1/grades``.

    Examples:
        >>> grade: Grade = {"grade_id": 3, "grade_name": "Middle 1"}
    """

    grade_id: int
    grade_name: str


class Feedback(TypedDict, total=False):
    """
    AI-generated feedback for one class session.

    Scores normally arrive flat (``attitude_score`` ...). Some backend
    versions nest them under ``scores`` with short keys; see
    ``views.extract_scores``.
    """

    feedback_id: int
    attitude_score: int
    understanding_score: int
    homework_score: int
    qa_score: int
    scores: dict
    ai_comment_improvement: Optional[str]
    ai_comment_attitude: Optional[str]
    ai_comment_overall: Optional[str]


class ClassRecord(TypedDict, total=False):
    """One class session embedded in a student record."""

    class_date: str
    feedback: Optional[Feedback]


class Student(TypedDict):
    """
    Student record as returned by ``GET /api/v1/students``.

    Examples:
        >>> student: Student = {
        ...     "student_id": 7,
        ...     "name": "Kim",
        ...     "grade_info": {"grade_id": 3, "grade_name": "Middle 1"},
        ...     "classes": []
        ... }
    """

    student_id: int
    name: str
    grade_info: Grade
    classes: List[ClassRecord]


class ClassInfo(TypedDict):
    """Class session details sent when requesting new feedback."""

    subject: str
    class_date: str
    progress_text: str
    class_memo: str


class FeedbackInfo(TypedDict):
    """Teacher scores (1..5) sent when requesting new feedback."""

    attitude_score: int
    understanding_score: int
    homework_score: int
    qa_score: int


SCORE_FIELDS = (
    "attitude_score",
    "understanding_score",
    "homework_score",
    "qa_score",
)

DEFAULT_SCORE = 3
MIN_SCORE = 1
MAX_SCORE = 5


def default_feedback_info() -> FeedbackInfo:
    """Return a FeedbackInfo with every score at the default value."""
    return {field: DEFAULT_SCORE for field in SCORE_FIELDS}
