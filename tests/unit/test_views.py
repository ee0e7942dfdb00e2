"""
Unit tests for the view model builders.
"""

from datetime import date

import pytest

from tutor_client.app.session import Page, Session
from tutor_client.app.views import (
    NO_CONTENT,
    NO_FEEDBACK_MESSAGE,
    NO_STUDENTS_MESSAGE,
    UNKNOWN_DATE,
    build_class_date_index,
    build_feedback_view,
    build_student_list_view,
    extract_scores,
)


GRADES = [
    {"grade_id": 1, "grade_name": "Elementary 6"},
    {"grade_id": 2, "grade_name": "Middle 1"},
]


def student(student_id, name, grade_id=2, classes=None):
    return {
        "student_id": student_id,
        "name": name,
        "grade_info": {"grade_id": grade_id, "grade_name": f"G{grade_id}"},
        "classes": classes or [],
    }


class TestStudentListView:
    """Test cases for build_student_list_view."""

    def test_cards_follow_backend_order(self):
        view = build_student_list_view([student(2, "Lee"), student(1, "Kim", 1)], GRADES)

        assert [card.name for card in view.students] == ["Lee", "Kim"]
        assert view.students[1].grade_id == 1
        assert view.empty_message is None
        assert view.page == Page.STUDENTS

    def test_empty_list_message(self):
        view = build_student_list_view([], GRADES)

        assert view.students == []
        assert view.empty_message == NO_STUDENTS_MESSAGE

    def test_grade_options_for_selects_current_grade(self):
        view = build_student_list_view([student(1, "Kim", grade_id=2)], GRADES)

        options = view.grade_options_for(1)

        assert [o.selected for o in options] == [False, True]

    def test_class_count(self):
        view = build_student_list_view(
            [student(1, "Kim", classes=[{"class_date": "2025-10-01", "feedback": None}])],
            GRADES
        )

        assert view.students[0].class_count == 1

    def test_load_failed_flag(self):
        view = build_student_list_view([], [], load_failed=True)

        assert view.load_failed


class TestFeedbackView:
    """Test cases for build_feedback_view and the class-date join."""

    @pytest.fixture
    def session(self):
        return Session(
            token="t1",
            current_page=Page.FEEDBACK,
            selected_student_id=1,
            selected_student_name="Kim"
        )

    def test_requires_selected_student(self):
        session = Session(token="t1", current_page=Page.FEEDBACK)

        with pytest.raises(ValueError):
            build_feedback_view(session, [], [])

    def test_joins_class_date_by_feedback_id(self, session):
        students = [student(1, "Kim", classes=[
            {"class_date": "2025-10-15", "feedback": {"feedback_id": 100}},
            {"class_date": "2025-10-16", "feedback": None},
        ])]
        feedbacks = [{"feedback_id": 100, "ai_comment_overall": "Good"}]

        view = build_feedback_view(session, feedbacks, students)

        assert view.feedbacks[0].class_date == "2025-10-15"
        assert view.feedbacks[0].title == "2025-10-15 class feedback"
        assert view.feedbacks[0].overall == "Good"

    def test_unmatched_feedback_gets_unknown_date(self, session):
        view = build_feedback_view(session, [{"feedback_id": 999}], [student(1, "Kim")])

        assert view.feedbacks[0].class_date == UNKNOWN_DATE

    def test_unmatched_when_student_fetch_failed(self, session):
        view = build_feedback_view(session, [{"feedback_id": 5}], [], load_failed=True)

        assert view.feedbacks[0].class_date == UNKNOWN_DATE
        assert view.load_failed

    def test_missing_comments_show_no_content(self, session):
        view = build_feedback_view(session, [{"feedback_id": 1, "ai_comment_attitude": ""}], [])

        card = view.feedbacks[0]
        assert card.improvement == NO_CONTENT
        assert card.attitude == NO_CONTENT
        assert card.overall == NO_CONTENT

    def test_empty_feedback_list(self, session):
        view = build_feedback_view(session, [], [], today=date(2025, 10, 18))

        assert view.empty_message == NO_FEEDBACK_MESSAGE
        assert view.default_class_date == "2025-10-18"
        assert view.title == "Feedback for 'Kim'"

    def test_index_spans_all_students(self):
        students = [
            student(1, "Kim", classes=[{"class_date": "2025-10-01", "feedback": {"feedback_id": 1}}]),
            student(2, "Lee", classes=[{"class_date": "2025-10-02", "feedback": {"feedback_id": 2}}]),
        ]

        assert build_class_date_index(students) == {1: "2025-10-01", 2: "2025-10-02"}


class TestExtractScores:
    """Test cases for extract_scores."""

    def test_flat_scores(self):
        scores = extract_scores({"attitude_score": 4, "understanding_score": 3,
                                 "homework_score": 5, "qa_score": 2})

        assert scores == {"attitude_score": 4, "understanding_score": 3,
                          "homework_score": 5, "qa_score": 2}

    def test_nested_scores(self):
        scores = extract_scores({"scores": {"attitude": 1, "understanding": 2, "homework": 3, "qa": 4}})

        assert scores["attitude_score"] == 1
        assert scores["qa_score"] == 4

    def test_missing_scores_are_none(self):
        assert extract_scores({})["homework_score"] is None
