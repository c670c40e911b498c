from typing import Any, Union

from pydantic import BaseModel, ConfigDict, ValidationError


class ErrorResponse(BaseModel):
    """Problem Details body Mailchimp returns with every non-2xx answer."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    type: str
    title: str
    status: int
    detail: str
    instance: str


def parse_error_response(body: Any) -> Union[ErrorResponse, None]:
    """Validate a decoded JSON error body; None when it does not fit the shape."""
    if not isinstance(body, dict):
        return None
    try:
        return ErrorResponse.model_validate(body)
    except ValidationError:
        return None
