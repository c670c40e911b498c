import logging
from collections.abc import Awaitable
from datetime import datetime, timedelta, timezone
from typing import Callable, TypeVar

from .client import MailchimpFetchClient
from .constants import RATE_LIMIT_STATUS, ErrorCode
from .errors import (
    MailchimpAuthError,
    MailchimpFetchError,
    MailchimpNetworkError,
    MailchimpRateLimitError,
)
from .types import ApiResponse, RateLimitInfo

T = TypeVar("T")

NETWORK_ERROR_STATUS = 503
UNKNOWN_ERROR_STATUS = 500

logger = logging.getLogger("chimpfetch.actions")


async def mailchimp_api_call(
    client: MailchimpFetchClient,
    api_call: Callable[[MailchimpFetchClient], Awaitable[T]],
) -> ApiResponse:
    """Run `api_call(client)` and fold the outcome into an ApiResponse.

    Expected failures become values with a stable error_code instead of
    exceptions, so request handlers can branch without try/except.
    """
    try:
        data = await api_call(client)
    except MailchimpRateLimitError as e:
        return ApiResponse(
            success=False,
            error=f"Rate limit exceeded. Try again in {e.retry_after} seconds.",
            error_code=ErrorCode.RATE_LIMIT.value,
            status_code=RATE_LIMIT_STATUS,
            rate_limit=RateLimitInfo(
                remaining=0,
                limit=e.limit,
                reset_time=datetime.now(timezone.utc) + timedelta(seconds=e.retry_after),
            ),
        )
    except MailchimpAuthError as e:
        return ApiResponse(
            success=False,
            error=str(e),
            error_code=ErrorCode.TOKEN_INVALID.value,
            status_code=e.status_code,
        )
    except MailchimpFetchError as e:
        return ApiResponse(
            success=False,
            error=str(e),
            error_code=ErrorCode.API_ERROR.value,
            status_code=e.status_code,
        )
    except MailchimpNetworkError as e:
        return ApiResponse(
            success=False,
            error=str(e),
            error_code=ErrorCode.API_ERROR.value,
            status_code=NETWORK_ERROR_STATUS,
        )
    except Exception as e:
        logger.exception("unexpected error in Mailchimp API call")
        return ApiResponse(
            success=False,
            error=str(e) or "Unknown error occurred",
            error_code=ErrorCode.UNKNOWN_ERROR.value,
            status_code=UNKNOWN_ERROR_STATUS,
        )

    return ApiResponse(success=True, data=data, rate_limit=client.get_rate_limit_info())
