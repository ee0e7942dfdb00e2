"""
Unit tests for SessionManager page transitions.
"""

import pytest

from tutor_client.app.session import InvalidTransitionError, Page, SessionManager


class TestSessionManager:
    """Test cases for SessionManager."""

    def test_starts_on_auth_without_token(self, token_store):
        manager = SessionManager(token_store)

        assert manager.current_page == Page.AUTH
        assert not manager.is_logged_in

    def test_starts_on_students_with_stored_token(self, token_store):
        token_store.save("t1")

        manager = SessionManager(token_store)

        assert manager.current_page == Page.STUDENTS
        assert manager.token == "t1"

    def test_login_persists_token(self, token_store):
        manager = SessionManager(token_store)

        manager.mark_logged_in("t1")

        assert manager.current_page == Page.STUDENTS
        assert token_store.load() == "t1"

    def test_login_requires_token(self, token_store):
        manager = SessionManager(token_store)

        with pytest.raises(InvalidTransitionError):
            manager.mark_logged_in("")

        assert manager.current_page == Page.AUTH

    def test_open_feedback_sets_selection(self, token_store):
        manager = SessionManager(token_store)
        manager.mark_logged_in("t1")

        manager.open_feedback(7, "Kim")

        session = manager.session
        assert session.current_page == Page.FEEDBACK
        assert session.selected_student_id == 7
        assert session.selected_student_name == "Kim"

    def test_open_feedback_without_student_raises(self, token_store):
        manager = SessionManager(token_store)
        manager.mark_logged_in("t1")

        with pytest.raises(InvalidTransitionError):
            manager.open_feedback(None)

        assert manager.current_page == Page.STUDENTS

    def test_open_feedback_when_logged_out_raises(self, token_store):
        with pytest.raises(InvalidTransitionError):
            SessionManager(token_store).open_feedback(7, "Kim")

    def test_back_clears_selection(self, token_store):
        manager = SessionManager(token_store)
        manager.mark_logged_in("t1")
        manager.open_feedback(7, "Kim")

        manager.back_to_students()

        assert manager.current_page == Page.STUDENTS
        assert manager.session.selected_student_id is None

    def test_logout_from_feedback(self, token_store):
        manager = SessionManager(token_store)
        manager.mark_logged_in("t1")
        manager.open_feedback(7, "Kim")

        manager.mark_logged_out()

        assert manager.current_page == Page.AUTH
        assert manager.token is None
        assert manager.session.selected_student_id is None
        assert token_store.load() is None
        assert SessionManager(token_store).current_page == Page.AUTH

    def test_session_info_masks_token(self, token_store):
        manager = SessionManager(token_store)
        manager.mark_logged_in("abcdefgh")

        info = manager.get_session_info()

        assert info["token"] == "****efgh"
        assert info["page"] == "students"
        assert info["logged_in"] is True
