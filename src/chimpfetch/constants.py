from enum import Enum

MAILCHIMP_BASE_URL = "https://{server_prefix}.api.mailchimp.com/3.0"

DEFAULT_TIMEOUT_MS = 30_000

# Seconds to wait when a 429 arrives without a usable Retry-After
DEFAULT_RETRY_AFTER_S = 60

RATE_LIMIT_REMAINING_HEADER = "X-RateLimit-Remaining"
RATE_LIMIT_LIMIT_HEADER = "X-RateLimit-Limit"
RATE_LIMIT_RESET_HEADER = "X-RateLimit-Reset"
RETRY_AFTER_HEADER = "Retry-After"

AUTH_ERROR_STATUSES = frozenset({401, 403})
RATE_LIMIT_STATUS = 429
# Statuses worth another try for token exchange and other auth-adjacent calls
MAILCHIMP_RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


class ErrorCode(str, Enum):
    TOKEN_INVALID = "mailchimp_token_invalid"
    RATE_LIMIT = "rate_limit_exceeded"
    API_ERROR = "mailchimp_api_error"
    UNKNOWN_ERROR = "unknown_error"
