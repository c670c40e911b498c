from typing import Union

from .schemas import ErrorResponse


class MailchimpError(Exception):
    """Base class for everything the client raises."""


class MailchimpFetchError(MailchimpError):
    """The API answered with a structured (Problem Details) error body."""

    def __init__(self, error: ErrorResponse):
        super().__init__(error.detail)
        self.error = error
        self.status_code = error.status
        self.type = error.type
        self.title = error.title
        self.detail = error.detail
        self.instance = error.instance
        # Opaque id some frameworks attach to errors; unset by the client
        self.digest: Union[str, None] = None

    @property
    def status(self) -> int:
        return self.status_code

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status_code}, detail={self.detail!r})"


class MailchimpAuthError(MailchimpFetchError):
    """401/403: token revoked, expired or lacking access. Not retryable."""


class MailchimpRateLimitError(MailchimpFetchError):
    def __init__(self, error: ErrorResponse, retry_after: int, limit: int):
        super().__init__(error)
        self.retry_after = int(max(0, retry_after))
        self.limit = int(limit)


class MailchimpNetworkError(MailchimpError):
    """No usable HTTP answer: transport failure, timeout or an unreadable error body.

    Carries no status code, so the retry predicates treat it as transient.
    """

    def __init__(self, message: str, cause: Union[BaseException, None] = None):
        super().__init__(message)
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause
