"""
Tutoring client application layer.

This module provides the session/navigation controller, the API gateway,
and the view models of the client.

Usage:
    >>> from tutor_client.app import create_controller
    >>> from tutor_client.utils.config import Config
    >>>
    >>> controller = create_controller(Config(), confirm=lambda question: True)
    >>> view = controller.start()
"""

from .api import TutoringApi
from .controller import TutorController, create_controller
from .gateway import ApiError, ApiGateway, BodyEncoding
from .notifier import Notice, NoticeLevel, Notifier
from .session import InvalidTransitionError, Page, Session, SessionManager
from .token_store import TokenStore

__all__ = [
    "ApiError",
    "ApiGateway",
    "BodyEncoding",
    "InvalidTransitionError",
    "Notice",
    "NoticeLevel",
    "Notifier",
    "Page",
    "Session",
    "SessionManager",
    "TokenStore",
    "TutorController",
    "TutoringApi",
    "create_controller",
]
