"""
View models.

Pure functions from (Session, fetched collections) to plain data that a
front end can print or render. Nothing here performs I/O.
"""

from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Any, Dict, List, Optional, Union

from .session import Page, Session
from ..models.records import Feedback, Grade, Student


UNKNOWN_DATE = "Unknown date"
NO_CONTENT = "No content"
NO_STUDENTS_MESSAGE = "No students registered yet. Add a student first."
NO_FEEDBACK_MESSAGE = "No feedback written yet."

# Nested score keys some backend versions use, mapped to the flat names.
_NESTED_SCORE_KEYS = {
    "attitude": "attitude_score",
    "understanding": "understanding_score",
    "homework": "homework_score",
    "qa": "qa_score",
}


@dataclass
class AuthView:
    """Login/signup page."""

    page: Page = Page.AUTH


@dataclass
class GradeOption:
    grade_id: int
    grade_name: str
    selected: bool = False


@dataclass
class StudentCard:
    """One row of the student list."""

    student_id: int
    name: str
    grade_id: Optional[int]
    grade_name: str
    class_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StudentListView:
    """
    Student management page.

    Attributes:
        students: One card per student, in backend order
        grade_options: Choices for the new-student grade picker
        empty_message: Shown instead of the list when there are no students
        load_failed: True when the backend could not be read; the lists
            are then empty rather than stale
    """

    students: List[StudentCard] = field(default_factory=list)
    grade_options: List[GradeOption] = field(default_factory=list)
    empty_message: Optional[str] = None
    load_failed: bool = False
    page: Page = Page.STUDENTS

    def find(self, student_id: int) -> Optional[StudentCard]:
        for card in self.students:
            if card.student_id == student_id:
                return card
        return None

    def grade_options_for(self, student_id: int) -> List[GradeOption]:
        """Grade choices for a student's edit form, with the current grade selected."""
        card = self.find(student_id)
        current = card.grade_id if card else None
        return [
            GradeOption(option.grade_id, option.grade_name, option.grade_id == current)
            for option in self.grade_options
        ]


@dataclass
class FeedbackCard:
    """One feedback record joined with its class date."""

    feedback_id: Optional[int]
    class_date: str
    improvement: str
    attitude: str
    overall: str
    scores: Dict[str, Optional[int]] = field(default_factory=dict)

    @property
    def title(self) -> str:
        return f"{self.class_date} class feedback"

    def to_dict(self) -> Dict[str, Any]:
        row = {
            "feedback_id": self.feedback_id,
            "class_date": self.class_date,
            "improvement": self.improvement,
            "attitude": self.attitude,
            "overall": self.overall,
        }
        row.update(self.scores)
        return row


@dataclass
class FeedbackView:
    """Feedback management page for the selected student."""

    student_id: int
    student_name: Optional[str]
    title: str
    default_class_date: str
    feedbacks: List[FeedbackCard] = field(default_factory=list)
    empty_message: Optional[str] = None
    load_failed: bool = False
    page: Page = Page.FEEDBACK


View = Union[AuthView, StudentListView, FeedbackView]


def build_grade_options(grades: List[Grade], selected_id: Optional[int] = None) -> List[GradeOption]:
    return [
        GradeOption(
            grade_id=grade["grade_id"],
            grade_name=grade["grade_name"],
            selected=grade["grade_id"] == selected_id
        )
        for grade in grades
    ]


def build_student_list_view(
    students: List[Student],
    grades: List[Grade],
    load_failed: bool = False
) -> StudentListView:
    """
    Build the student management page.

    Args:
        students: Freshly fetched student records
        grades: Freshly fetched grade options
        load_failed: Whether either fetch failed
    """
    cards = []
    for student in students:
        grade_info = student.get("grade_info") or {}
        cards.append(StudentCard(
            student_id=student["student_id"],
            name=student["name"],
            grade_id=grade_info.get("grade_id"),
            grade_name=grade_info.get("grade_name", ""),
            class_count=len(student.get("classes") or [])
        ))

    return StudentListView(
        students=cards,
        grade_options=build_grade_options(grades),
        empty_message=None if cards else NO_STUDENTS_MESSAGE,
        load_failed=load_failed
    )


def build_class_date_index(students: List[Student]) -> Dict[Any, str]:
    """
    Map feedback_id → class_date over every class of every student.

    Classes without feedback are skipped.
    """
    index: Dict[Any, str] = {}
    for student in students:
        for class_record in student.get("classes") or []:
            feedback = class_record.get("feedback")
            if feedback and feedback.get("feedback_id") is not None:
                index[feedback["feedback_id"]] = class_record.get("class_date") or UNKNOWN_DATE
    return index


def extract_scores(feedback: Feedback) -> Dict[str, Optional[int]]:
    """Read the four scores from either the flat or the nested layout."""
    nested = feedback.get("scores") or {}
    scores = {}
    for short_key, flat_key in _NESTED_SCORE_KEYS.items():
        value = feedback.get(flat_key)
        if value is None:
            value = nested.get(short_key)
        scores[flat_key] = value
    return scores


def build_feedback_card(feedback: Feedback, date_index: Dict[Any, str]) -> FeedbackCard:
    feedback_id = feedback.get("feedback_id")
    return FeedbackCard(
        feedback_id=feedback_id,
        class_date=date_index.get(feedback_id, UNKNOWN_DATE),
        improvement=feedback.get("ai_comment_improvement") or NO_CONTENT,
        attitude=feedback.get("ai_comment_attitude") or NO_CONTENT,
        overall=feedback.get("ai_comment_overall") or NO_CONTENT,
        scores=extract_scores(feedback)
    )


def build_feedback_view(
    session: Session,
    feedbacks: List[Feedback],
    students: List[Student],
    load_failed: bool = False,
    today: Optional[date] = None
) -> FeedbackView:
    """
    Build the feedback page for the selected student.

    Each feedback is joined with its class date through the students'
    embedded classes; records with no match get UNKNOWN_DATE.

    Raises:
        ValueError: If no student is selected
    """
    if session.selected_student_id is None:
        raise ValueError("Feedback view requires a selected student")

    date_index = build_class_date_index(students)
    cards = [build_feedback_card(feedback, date_index) for feedback in feedbacks]

    return FeedbackView(
        student_id=session.selected_student_id,
        student_name=session.selected_student_name,
        title=f"Feedback for '{session.selected_student_name or session.selected_student_id}'",
        default_class_date=(today or date.today()).isoformat(),
        feedbacks=cards,
        empty_message=None if cards else NO_FEEDBACK_MESSAGE,
        load_failed=load_failed
    )
