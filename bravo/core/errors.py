"""Bravo client exceptions."""

from datetime import datetime
from typing import Any, Optional


class BravoError(Exception):
    """Base exception for all Bravo errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BravoConfigError(BravoError):
    """Raised when required credentials are missing."""

    pass


class BravoPreconditionError(BravoError):
    """
    请求前置条件不满足（未发出任何网络请求）

    调用方可以通过调整参数或会话状态后重试。
    """

    pass


class BudgetExhaustedError(BravoPreconditionError):
    """Raised when the local request budget is exhausted."""

    def __init__(self, message: str, limit_resets_at: Optional[datetime] = None):
        super().__init__(message)
        self.limit_resets_at = limit_resets_at


class OrganizationRequiredError(BravoPreconditionError):
    """Raised when a request needs an organizationId but none is set."""

    pass


class BodyNotAllowedError(BravoPreconditionError):
    """Raised when a body is supplied with GET or DELETE."""

    pass


class BravoHTTPError(BravoError):
    """Raised when the API answers with an unexpected status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_text: str = "",
        response_data: Optional[Any] = None,
    ):
        super().__init__(message, status_code=status_code)
        self.response_text = response_text
        self.response_data = response_data


class BravoRateLimitError(BravoHTTPError):
    """Raised on HTTP 429."""

    def __init__(
        self,
        message: str,
        status_code: int = 429,
        response_text: str = "",
        limit_resets_at: Optional[datetime] = None,
    ):
        super().__init__(message, status_code=status_code, response_text=response_text)
        self.limit_resets_at = limit_resets_at


class BravoResponseParseError(BravoError):
    """Raised when a JSON response body cannot be parsed."""

    def __init__(self, message: str, content: str = ""):
        super().__init__(message)
        self.content = content


class BravoNotFoundError(BravoError):
    """Raised when a required entity lookup finds nothing."""

    pass


def assert_bravo_claim(claim: Any, message: str = "Assertion failed") -> None:
    """claim 为假时抛出 BravoError"""
    if not claim:
        raise BravoError(message)
