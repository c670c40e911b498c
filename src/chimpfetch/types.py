from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Union

from .constants import DEFAULT_TIMEOUT_MS, MAILCHIMP_BASE_URL


@dataclass(frozen=True)
class ClientConfig:
    access_token: str
    server_prefix: str
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    @property
    def base_url(self) -> str:
        return MAILCHIMP_BASE_URL.format(server_prefix=self.server_prefix)

    def validate(self) -> "ClientConfig":
        if not self.access_token:
            raise ValueError("access_token must be a non-empty string")
        if not self.server_prefix:
            raise ValueError("server_prefix must be a non-empty string")
        if self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")
        return self


@dataclass(frozen=True)
class RateLimitInfo:
    remaining: int
    limit: int
    # UTC-aware
    reset_time: datetime


def _always_retry(error: BaseException, attempt: int) -> bool:
    return True


def _no_op(error: BaseException, attempt: int, delay_ms: int) -> None:
    return None


@dataclass(frozen=True)
class RetryOptions:
    # attempts after the first one
    max_retries: int = 3

    # backoff (milliseconds)
    initial_delay_ms: float = 1000
    max_delay_ms: float = 10000
    backoff_multiplier: float = 2.0
    # jitter range is [0, delay * jitter_factor]
    jitter_factor: float = 0.1

    # hooks
    should_retry: Callable[[BaseException, int], bool] = field(default=_always_retry)
    on_retry: Callable[[BaseException, int, int], None] = field(default=_no_op)

    @property
    def max_attempts(self) -> int:
        return max(0, self.max_retries) + 1


@dataclass
class ApiResponse:
    success: bool
    data: Any = None
    error: Union[str, None] = None
    error_code: Union[str, None] = None
    status_code: Union[int, None] = None
    rate_limit: Union[RateLimitInfo, None] = None
