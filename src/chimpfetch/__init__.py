from .actions import mailchimp_api_call
from .client import MailchimpFetchClient
from .constants import ErrorCode
from .env import load_client_config_from_env
from .errors import (
    MailchimpAuthError,
    MailchimpError,
    MailchimpFetchError,
    MailchimpNetworkError,
    MailchimpRateLimitError,
)
from .retry import (
    has_status_code,
    retry_with_backoff,
    retry_with_backoff_sync,
    should_retry_mailchimp_auth,
    should_retry_server_errors,
)
from .schemas import ErrorResponse
from .types import ApiResponse, ClientConfig, RateLimitInfo, RetryOptions

__all__ = [
    "ClientConfig",
    "RateLimitInfo",
    "RetryOptions",
    "ApiResponse",
    "ErrorResponse",
    "ErrorCode",
    "MailchimpFetchClient",
    "MailchimpError",
    "MailchimpFetchError",
    "MailchimpAuthError",
    "MailchimpRateLimitError",
    "MailchimpNetworkError",
    "retry_with_backoff",
    "retry_with_backoff_sync",
    "has_status_code",
    "should_retry_server_errors",
    "should_retry_mailchimp_auth",
    "mailchimp_api_call",
    "load_client_config_from_env",
]
