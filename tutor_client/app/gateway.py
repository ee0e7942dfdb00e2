"""
API gateway for the tutoring backend.

This module provides the single entry point for outbound HTTP calls:

- attaches the bearer token when the session holds one
- serializes bodies as JSON or form-encoded data
- applies a bounded timeout to every request
- retries idempotent GETs on transport errors with capped backoff
- short-circuits through a circuit breaker while the backend is down
- normalizes every failure into one notifier message and a FAILURE Result
"""

import logging
import time
from enum import Enum
from typing import Any, Callable, Dict, Optional

import requests

from .notifier import Notifier
from ..models.result import Result
from ..resilience.circuit_breaker import CircuitBreaker, CircuitBreakerOpenError


logger = logging.getLogger(__name__)


class BodyEncoding(Enum):
    """How a request body is serialized."""
    JSON = "json"
    FORM = "form"


class ApiError(Exception):
    """
    A backend call that did not happen.

    Attributes:
        detail: Normalized, user-presentable detail
        status_code: HTTP status, or None for transport/decoding failures
    """

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code

    @property
    def is_auth_error(self) -> bool:
        return self.status_code == 401


class ApiGateway:
    """
    Token-authenticated JSON gateway over ``requests``.

    Failures are reported to the notifier here, once, so callers only
    branch on the returned Result.

    Examples:
        >>> gateway = ApiGateway(
        ...     "http://127.0.0.1:8000",
        ...     token_provider=lambda: session.token,
        ...     notifier=Notifier()
        ... )
        >>> result = gateway.request("GET", "/api/v1/grades")
        >>> if result.is_success:
        ...     grades = result.value
    """

    IDEMPOTENT_METHODS = {"GET"}
    MAX_BACKOFF_SECONDS = 10

    def __init__(
        self,
        base_url: str,
        token_provider: Callable[[], Optional[str]],
        notifier: Notifier,
        http: Optional[requests.Session] = None,
        timeout: float = 10.0,
        max_retries: int = 2,
        retry_backoff: float = 0.5,
        circuit_breaker: Optional[CircuitBreaker] = None
    ):
        """
        Initialize ApiGateway.

        Args:
            base_url: Backend base URL
            token_provider: Returns the current access token, or None
            notifier: Channel that receives every failure
            http: HTTP session (a new requests.Session by default)
            timeout: Per-request timeout in seconds
            max_retries: Extra attempts for GET requests on transport errors
            retry_backoff: Base delay for exponential backoff, in seconds
            circuit_breaker: Breaker shared by all requests
        """
        self.base_url = base_url.rstrip('/')
        self.token_provider = token_provider
        self.notifier = notifier
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.circuit_breaker = circuit_breaker or CircuitBreaker()

        logger.info(f"ApiGateway initialized with base_url: {self.base_url}")

    def _build_url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _build_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.token_provider()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(
        self,
        method: str,
        endpoint: str,
        body: Optional[Dict[str, Any]] = None,
        encoding: BodyEncoding = BodyEncoding.JSON
    ) -> Result[Any]:
        """
        Send one request to the backend.

        Args:
            method: HTTP method
            endpoint: Path below the base URL (e.g. "/api/v1/students")
            body: Optional request body
            encoding: JSON (default) or FORM

        Returns:
            Result.success(decoded body) on 2xx with content,
            Result.empty() on 204 or an empty 2xx body,
            Result.failure(message, ApiError) otherwise (already reported)
        """
        method = method.upper()
        url = self._build_url(endpoint)

        kwargs: Dict[str, Any] = {
            "headers": self._build_headers(),
            "timeout": self.timeout,
        }
        if body is not None:
            if encoding == BodyEncoding.FORM:
                kwargs["data"] = body
            else:
                kwargs["json"] = body

        try:
            response = self._send(method, url, kwargs)
        except CircuitBreakerOpenError as e:
            return self._fail(
                ApiError("Service temporarily unavailable. Please try again shortly."),
                f"{method} {endpoint}: {e}"
            )
        except requests.RequestException as e:
            return self._fail(
                ApiError(self._describe_transport_error(e)),
                f"{method} {endpoint}: {e!r}"
            )

        return self._handle_response(method, endpoint, response)

    def _send(self, method: str, url: str, kwargs: Dict[str, Any]) -> requests.Response:
        """
        Send with breaker protection and GET-only retry.

        Raises:
            CircuitBreakerOpenError: If the breaker refuses the request
            requests.RequestException: If the last attempt failed in transport
        """
        attempts = 1 + (self.max_retries if method in self.IDEMPOTENT_METHODS else 0)
        last_error: Optional[requests.RequestException] = None

        for attempt in range(attempts):
            self.circuit_breaker.before_request()
            try:
                logger.debug(f"{method} {url} (attempt {attempt + 1}/{attempts})")
                response = self.http.request(method, url, **kwargs)
            except requests.RequestException as e:
                self.circuit_breaker.record_failure()
                last_error = e

                if attempt < attempts - 1:
                    wait_time = min(self.retry_backoff * (2 ** attempt), self.MAX_BACKOFF_SECONDS)
                    logger.warning(
                        f"{method} {url} failed ({e.__class__.__name__}), "
                        f"retrying in {wait_time:.1f}s"
                    )
                    time.sleep(wait_time)
                continue

            self.circuit_breaker.record_success()
            return response

        raise last_error

    def _handle_response(
        self,
        method: str,
        endpoint: str,
        response: requests.Response
    ) -> Result[Any]:
        status = response.status_code

        if not 200 <= status < 300:
            detail = self.extract_error_detail(response)
            if status == 401:
                detail = f"Authentication failed: {detail}"
            return self._fail(
                ApiError(detail, status),
                f"{method} {endpoint} -> {status}"
            )

        if status == 204 or not response.content:
            logger.debug(f"{method} {endpoint} -> {status} (no content)")
            return Result.empty(f"HTTP {status}")

        try:
            data = response.json()
        except ValueError as e:
            return self._fail(
                ApiError("Could not read the server response.", status),
                f"{method} {endpoint} -> {status}: {e}"
            )

        logger.debug(f"{method} {endpoint} -> {status}")
        return Result.success(data, f"HTTP {status}")

    def _fail(self, error: ApiError, diagnostic: str) -> Result[Any]:
        self.notifier.error(f"Error: {error.detail}", detail=diagnostic)
        return Result.failure(error.detail, error)

    @staticmethod
    def extract_error_detail(response: requests.Response) -> str:
        """
        Read a human-readable error detail from an error response.

        Uses the JSON ``detail`` field when present (joining validation
        error lists), else the HTTP reason phrase.
        """
        fallback = response.reason or f"HTTP {response.status_code}"

        try:
            data = response.json()
        except ValueError:
            return fallback

        if not isinstance(data, dict):
            return fallback

        detail = data.get("detail")
        if isinstance(detail, str) and detail:
            return detail

        if isinstance(detail, list):
            messages = []
            for item in detail:
                if isinstance(item, dict):
                    location = ".".join(str(part) for part in item.get("loc", []) if part != "body")
                    msg = item.get("msg", str(item))
                    messages.append(f"{location}: {msg}" if location else msg)
                else:
                    messages.append(str(item))
            if messages:
                return "; ".join(messages)

        return fallback

    @staticmethod
    def _describe_transport_error(error: requests.RequestException) -> str:
        if isinstance(error, requests.Timeout):
            return "The server did not respond in time."
        if isinstance(error, requests.ConnectionError):
            return "Could not connect to the server."
        return "The request could not be completed."

    def close(self):
        """Close the underlying HTTP session."""
        self.http.close()
