"""
Client session and page state machine.

This module owns the authentication/navigation state of the client:
the access token, the page on screen, and the selected student. Only the
token is persisted (through TokenStore); everything else starts fresh
with each process.

Pages and transitions:

    AUTH ──login──▶ STUDENTS ──select student──▶ FEEDBACK
      ▲                 ▲                            │
      └────logout───────┴──────────back──────────────┘
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .token_store import TokenStore
from ..utils.logger import mask_token


logger = logging.getLogger(__name__)


class Page(Enum):
    """Pages of the client."""

    AUTH = "auth"
    STUDENTS = "students"
    FEEDBACK = "feedback"


class InvalidTransitionError(ValueError):
    """Raised when a page transition's precondition does not hold."""
    pass


@dataclass
class Session:
    """
    Snapshot of the client session.

    Invariants:
        current_page is AUTH exactly when token is None
        selected_student_id is set whenever current_page is FEEDBACK
    """

    token: Optional[str] = None
    current_page: Page = Page.AUTH
    selected_student_id: Optional[int] = None
    selected_student_name: Optional[str] = None

    @property
    def is_logged_in(self) -> bool:
        return self.token is not None


class SessionManager:
    """
    Manages the client session and enforces page transitions.

    Examples:
        >>> manager = SessionManager(TokenStore(path))
        >>> manager.mark_logged_in("t1")
        >>> manager.open_feedback(7, "Kim")
        >>> manager.session.current_page
        <Page.FEEDBACK: 'feedback'>
        >>> manager.back_to_students()
        >>> manager.mark_logged_out()
    """

    def __init__(self, token_store: TokenStore):
        """
        Initialize SessionManager from persisted state.

        Args:
            token_store: Persistent storage holding the access token
        """
        self.token_store = token_store

        token = token_store.load()
        self._session = Session(
            token=token,
            current_page=Page.STUDENTS if token else Page.AUTH
        )
        logger.info(
            f"Session restored: page={self._session.current_page.value}, "
            f"token={mask_token(token)}"
        )

    @property
    def session(self) -> Session:
        """Get the current session."""
        return self._session

    @property
    def token(self) -> Optional[str]:
        return self._session.token

    @property
    def current_page(self) -> Page:
        return self._session.current_page

    @property
    def is_logged_in(self) -> bool:
        return self._session.is_logged_in

    def _clear_selection(self):
        self._session.selected_student_id = None
        self._session.selected_student_name = None

    def mark_logged_in(self, token: str):
        """
        AUTH → STUDENTS after a successful login.

        The token is persisted before the page changes.

        Raises:
            InvalidTransitionError: If the token is empty
            OSError: If the token cannot be persisted
        """
        if not token:
            raise InvalidTransitionError("Cannot log in without an access token")

        self.token_store.save(token)
        self._session.token = token
        self._clear_selection()
        self._session.current_page = Page.STUDENTS
        logger.info(f"Session marked as logged in (token={mask_token(token)})")

    def mark_logged_out(self):
        """
        * → AUTH: forget the token everywhere and drop the selection.

        The in-memory session is logged out even when the storage write fails.

        Raises:
            OSError: If the stored token cannot be removed
        """
        self._session.token = None
        self._clear_selection()
        self._session.current_page = Page.AUTH
        self.token_store.clear()
        logger.info("Session marked as logged out")

    def open_feedback(self, student_id: Optional[int], student_name: Optional[str] = None):
        """
        STUDENTS → FEEDBACK with the selected student, in one step.

        Raises:
            InvalidTransitionError: If not logged in or no student is given
        """
        if not self.is_logged_in:
            raise InvalidTransitionError("Log in before opening a student's feedback")
        if student_id is None:
            raise InvalidTransitionError("A student must be selected to open the feedback page")

        self._session.selected_student_id = student_id
        self._session.selected_student_name = student_name
        self._session.current_page = Page.FEEDBACK
        logger.info(f"Opened feedback page for student {student_id}")

    def back_to_students(self):
        """
        FEEDBACK (or STUDENTS) → STUDENTS, clearing the selection.

        Raises:
            InvalidTransitionError: If not logged in
        """
        if not self.is_logged_in:
            raise InvalidTransitionError("Log in before viewing students")

        self._clear_selection()
        self._session.current_page = Page.STUDENTS

    def get_session_info(self) -> dict:
        """
        Get session information for debugging.

        Examples:
            >>> info = manager.get_session_info()
            >>> print(f"Page: {info['page']}, Logged in: {info['logged_in']}")
        """
        return {
            "page": self._session.current_page.value,
            "logged_in": self.is_logged_in,
            "token": mask_token(self._session.token),
            "selected_student_id": self._session.selected_student_id,
            "selected_student_name": self._session.selected_student_name,
        }
