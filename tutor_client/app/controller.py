"""
Session/navigation controller.

TutorController is the only component that changes pages. Each public
action follows the same sequence: validate input, call the backend,
update the session, refetch every collection the next page shows, and
rebuild that page's view model before returning. Callers therefore
never see data older than their own last mutation.
"""

import functools
import logging
import threading
from datetime import date
from typing import Callable, Optional, Tuple

import requests

from .api import TutoringApi
from .gateway import ApiGateway
from .notifier import Notifier
from .session import InvalidTransitionError, Page, Session, SessionManager
from .token_store import TokenStore
from .views import (
    AuthView,
    FeedbackView,
    StudentListView,
    View,
    build_feedback_view,
    build_student_list_view,
)
from ..models.records import ClassInfo, FeedbackInfo, default_feedback_info
from ..models.result import Result
from ..resilience.circuit_breaker import CircuitBreaker
from ..utils.config import Config
from ..utils.logger import mask_email
from ..validation.account_validator import AccountValidator
from ..validation.feedback_validator import FeedbackRequestValidator
from ..validation.student_validator import StudentValidator


logger = logging.getLogger(__name__)


BUSY_MESSAGE = "Another request is already in progress."
LOGIN_FAILED_MESSAGE = "Login failed. Check your email and password."


def exclusive(method):
    """Reject an action while another action of the same controller runs."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        if not self._action_lock.acquire(blocking=False):
            logger.warning(f"Rejected {method.__name__}: {BUSY_MESSAGE}")
            self.notifier.error(BUSY_MESSAGE)
            return Result.failure(BUSY_MESSAGE)
        try:
            return method(self, *args, **kwargs)
        finally:
            self._action_lock.release()

    return wrapper


class TutorController:
    """
    Drives the client: login, student management and feedback pages.

    Examples:
        >>> controller = create_controller(Config(), confirm=lambda msg: True)
        >>> view = controller.start()
        >>> result = controller.login("teacher@example.com", "secret")
        >>> result = controller.create_student("Kim", grade_id=3)
        >>> result = controller.select_student(result.value.students[0].student_id)
        >>> result = controller.create_feedback({
        ...     "subject": "Math",
        ...     "class_date": "2025-10-15",
        ...     "progress_text": "Fractions",
        ...     "class_memo": ""
        ... })
        >>> controller.back()
        >>> controller.logout()
    """

    def __init__(
        self,
        api: TutoringApi,
        session_manager: SessionManager,
        notifier: Notifier,
        confirm: Optional[Callable[[str], bool]] = None
    ):
        """
        Initialize TutorController.

        Args:
            api: Backend endpoints
            session_manager: Owner of the session state
            notifier: Channel for user-visible notices
            confirm: Asks the user a yes/no question before destructive
                actions. Without it, destructive actions are declined.
        """
        self.api = api
        self.sessions = session_manager
        self.notifier = notifier
        self.confirm = confirm

        self.account_validator = AccountValidator()
        self.signup_validator = AccountValidator(require_name=True)
        self.student_validator = StudentValidator()
        self.feedback_validator = FeedbackRequestValidator()

        self._action_lock = threading.Lock()
        self._busy = False

        self.grades: list = []
        self.students: list = []
        self.feedbacks: list = []
        self.view: View = AuthView()

    @property
    def session(self) -> Session:
        return self.sessions.session

    @property
    def busy(self) -> bool:
        """True while AI feedback generation is running."""
        return self._busy

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _take_list(self, result: Result, what: str) -> Tuple[list, bool]:
        """Return (items, failed) for a collection fetch."""
        if result.is_success and isinstance(result.value, list):
            return result.value, False
        if result.is_empty:
            return [], False
        if result.is_success:
            self.notifier.error(
                "Error: Unexpected response from the server.",
                detail=f"{what}: expected a list, got {type(result.value).__name__}"
            )
        return [], True

    def _render_students(self) -> StudentListView:
        grades, grades_failed = self._take_list(self.api.get_grades(), "grades")
        students, students_failed = self._take_list(self.api.get_students(), "students")

        self.grades = grades
        self.students = students
        self.feedbacks = []

        return build_student_list_view(
            students,
            grades,
            load_failed=grades_failed or students_failed
        )

    def _render_feedback(self) -> FeedbackView:
        student_id = self.session.selected_student_id
        if student_id is None:
            raise InvalidTransitionError("Feedback page rendered without a selected student")

        feedbacks, feedbacks_failed = self._take_list(
            self.api.get_feedbacks(student_id), "feedbacks"
        )
        # Class dates are only embedded in the student records.
        students, students_failed = self._take_list(self.api.get_students(), "students")

        self.feedbacks = feedbacks
        self.students = students

        return build_feedback_view(
            self.session,
            feedbacks,
            students,
            load_failed=feedbacks_failed or students_failed
        )

    def _render(self) -> View:
        """Refetch the current page's collections and rebuild its view."""
        if not self.sessions.is_logged_in:
            self.grades, self.students, self.feedbacks = [], [], []
            self.view = AuthView()
        elif self.session.current_page == Page.FEEDBACK:
            self.view = self._render_feedback()
        else:
            self.view = self._render_students()

        logger.debug(f"Rendered page: {self.view.page.value}")
        return self.view

    def start(self) -> View:
        """Render the initial page (STUDENTS with a stored token, else AUTH)."""
        logger.info(f"Starting on page: {self.session.current_page.value}")
        return self._render()

    @exclusive
    def refresh(self) -> Result[View]:
        """Refetch and re-render the current page."""
        return Result.success(self._render())

    def _require_page(self, page: Page):
        if self.session.current_page != page:
            raise InvalidTransitionError(
                f"Action requires the {page.value} page, "
                f"current page is {self.session.current_page.value}"
            )

    def _reject_invalid(self, validation) -> Optional[Result]:
        for warning in validation.warnings:
            logger.warning(warning)
        if validation.is_valid:
            return None
        message = validation.first_error()
        self.notifier.error(f"Error: {message}", detail=validation.get_summary())
        return Result.failure(message)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    @exclusive
    def login(self, email: str, password: str) -> Result[View]:
        """
        Log in and move to the student list.

        On failure the session stays on AUTH and a notice is shown.
        """
        rejected = self._reject_invalid(
            self.account_validator.validate({"email": email, "password": password})
        )
        if rejected:
            return rejected

        logger.info(f"Logging in as {mask_email(email)}")
        result = self.api.login(email, password)

        token = None
        if result.is_success and isinstance(result.value, dict):
            token = result.value.get("access_token")

        if not token:
            self.notifier.error(LOGIN_FAILED_MESSAGE, detail=result.message)
            return Result.failure(LOGIN_FAILED_MESSAGE, result.error)

        try:
            self.sessions.mark_logged_in(token)
        except OSError as e:
            self.notifier.error("Error: Could not save the login token.", detail=str(e))
            return Result.failure("Could not save the login token", e)

        self.notifier.success("Logged in.")
        return Result.success(self._render())

    @exclusive
    def signup(self, email: str, password: str, name: str) -> Result[dict]:
        """Register a teacher account. The session stays on AUTH."""
        rejected = self._reject_invalid(
            self.signup_validator.validate({"email": email, "password": password, "name": name})
        )
        if rejected:
            return rejected

        logger.info(f"Signing up {mask_email(email)}")
        result = self.api.signup(email, password, name.strip())
        if result.is_failure:
            return result

        self.notifier.success("Signed up. Please log in.")
        return result

    @exclusive
    def logout(self) -> Result[View]:
        """
        Forget the token (including on disk) and return to AUTH.

        If the storage file cannot be rewritten the session is still
        logged out and an error notice is shown.
        """
        try:
            self.sessions.mark_logged_out()
        except OSError as e:
            self.notifier.error("Error: Could not remove the saved login token.", detail=str(e))
            return Result.failure("Could not remove the saved login token", e)
        finally:
            self._render()

        self.notifier.success("Logged out.")
        return Result.success(self.view)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _find_student_name(self, student_id: int) -> Optional[str]:
        for student in self.students:
            if student.get("student_id") == student_id:
                return student.get("name")
        return None

    @exclusive
    def select_student(
        self,
        student_id: int,
        student_name: Optional[str] = None
    ) -> Result[View]:
        """
        Open the feedback page of a student from the student list.

        Without a name, the student must be in the list last rendered.

        Raises:
            InvalidTransitionError: If not on the student list
        """
        self._require_page(Page.STUDENTS)

        if student_name is None:
            student_name = self._find_student_name(student_id)
            if student_name is None:
                message = f"Student {student_id} not found."
                self.notifier.error(f"Error: {message}")
                return Result.failure(message)

        self.sessions.open_feedback(student_id, student_name)
        return Result.success(self._render())

    @exclusive
    def back(self) -> Result[View]:
        """Return from the feedback page to the student list."""
        self.sessions.back_to_students()
        return Result.success(self._render())

    # ------------------------------------------------------------------
    # Student management
    # ------------------------------------------------------------------

    @exclusive
    def create_student(self, name: str, grade_id: int) -> Result[StudentListView]:
        self._require_page(Page.STUDENTS)

        rejected = self._reject_invalid(
            self.student_validator.validate({"name": name, "grade_id": grade_id})
        )
        if rejected:
            return rejected

        name = name.strip()
        result = self.api.create_student(name, grade_id)
        if result.is_failure:
            return result

        self.notifier.success(f"Added student {name}.")
        return Result.success(self._render())

    @exclusive
    def update_student(self, student_id: int, name: str, grade_id: int) -> Result[StudentListView]:
        self._require_page(Page.STUDENTS)

        rejected = self._reject_invalid(
            self.student_validator.validate({"name": name, "grade_id": grade_id})
        )
        if rejected:
            return rejected

        name = name.strip()
        result = self.api.update_student(student_id, name, grade_id)
        if result.is_failure:
            return result

        self.notifier.success(f"Updated student {name}.")
        return Result.success(self._render())

    @exclusive
    def delete_student(self, student_id: int) -> Result[StudentListView]:
        """
        Delete a student after the user confirms.

        Declining returns a failure without a notice and sends nothing.
        """
        self._require_page(Page.STUDENTS)

        label = self._find_student_name(student_id) or f"#{student_id}"
        question = f"Really delete student {label}?"
        if self.confirm is None or not self.confirm(question):
            logger.info(f"Deletion of student {student_id} cancelled")
            return Result.failure("Deletion cancelled")

        result = self.api.delete_student(student_id)
        if result.is_failure:
            return result

        self.notifier.success("Deleted student.")
        return Result.success(self._render())

    # ------------------------------------------------------------------
    # Feedback
    # ------------------------------------------------------------------

    @exclusive
    def create_feedback(
        self,
        class_info: ClassInfo,
        feedback_info: Optional[FeedbackInfo] = None
    ) -> Result[FeedbackView]:
        """
        Ask the backend to generate AI feedback for a class of the
        selected student.

        Missing scores default to 3 and a missing class date to today.
        """
        self._require_page(Page.FEEDBACK)

        class_info = dict(class_info)
        if not class_info.get("class_date"):
            class_info["class_date"] = date.today().isoformat()
        class_info.setdefault("progress_text", "")
        class_info.setdefault("class_memo", "")

        scores = default_feedback_info()
        scores.update(feedback_info or {})

        rejected = self._reject_invalid(
            self.feedback_validator.validate({"class_info": class_info, "feedback_info": scores})
        )
        if rejected:
            return rejected

        student_id = self.session.selected_student_id
        logger.info(f"Requesting AI feedback for student {student_id} ({class_info['class_date']})")

        self._busy = True
        try:
            result = self.api.create_feedback(student_id, class_info, scores)
        finally:
            self._busy = False

        if result.is_failure:
            return result

        self.notifier.success("AI feedback generated.")
        return Result.success(self._render())

    def close(self):
        """Release the HTTP connection pool."""
        self.api.gateway.close()


def create_controller(
    config: Config,
    confirm: Optional[Callable[[str], bool]] = None,
    http: Optional[requests.Session] = None,
    notifier: Optional[Notifier] = None
) -> TutorController:
    """
    Wire a controller from configuration.

    Args:
        config: Application configuration
        confirm: Yes/no prompt for destructive actions
        http: HTTP session override (tests)
        notifier: Notice channel override
    """
    notifier = notifier or Notifier(display_seconds=config.notice_seconds)
    session_manager = SessionManager(TokenStore(config.storage_path))

    gateway = ApiGateway(
        config.api_url,
        token_provider=lambda: session_manager.token,
        notifier=notifier,
        http=http,
        timeout=config.request_timeout,
        max_retries=config.max_retries,
        circuit_breaker=CircuitBreaker()
    )

    return TutorController(TutoringApi(gateway), session_manager, notifier, confirm=confirm)
