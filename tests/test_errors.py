import pytest
from pydantic import ValidationError

from chimpfetch import (
    ErrorResponse,
    MailchimpAuthError,
    MailchimpError,
    MailchimpFetchError,
    MailchimpNetworkError,
    MailchimpRateLimitError,
)
from chimpfetch.schemas import parse_error_response


def _body(status=404, detail="The requested resource could not be found."):
    return ErrorResponse(
        type="https://mailchimp.com/developer/marketing/docs/errors/",
        title="Resource Not Found",
        status=status,
        detail=detail,
        instance="12345678-90ab-cdef-1234-567890abcdef",
    )


def test_fetch_error_fields():
    body = _body()
    err = MailchimpFetchError(body)
    assert isinstance(err, MailchimpError)
    assert str(err) == body.detail
    assert err.status_code == 404  # noqa: PLR2004
    assert err.status == 404  # noqa: PLR2004
    assert err.type == body.type
    assert err.title == body.title
    assert err.instance == body.instance
    assert err.digest is None
    assert "404" in repr(err)


def test_rate_limit_error_fields():
    err = MailchimpRateLimitError(_body(429, "You have exceeded the rate limit."), 60, 10)
    assert isinstance(err, MailchimpFetchError)
    assert err.retry_after == 60  # noqa: PLR2004
    assert err.limit == 10  # noqa: PLR2004
    assert str(err) == "You have exceeded the rate limit."


def test_auth_error_is_fetch_error():
    err = MailchimpAuthError(_body(403, "You are not allowed to access this resource."))
    assert isinstance(err, MailchimpFetchError)
    assert err.status_code == 403  # noqa: PLR2004


def test_network_error_cause():
    assert MailchimpNetworkError("Network connection failed").cause is None
    cause = TimeoutError("Connection timeout")
    err = MailchimpNetworkError("Network request failed", cause)
    assert err.cause is cause
    assert err.__cause__ is cause
    assert not isinstance(err, MailchimpFetchError)
    assert not hasattr(err, "status")


def test_parse_error_response():
    raw = {
        "type": "about:blank",
        "title": "Bad Request",
        "status": 400,
        "detail": "Invalid Resource",
        "instance": "x",
        "errors": [{"field": "email_address", "message": "bad"}],
    }
    parsed = parse_error_response(raw)
    assert parsed.status == 400  # noqa: PLR2004
    assert parsed.detail == "Invalid Resource"


@pytest.mark.parametrize(
    "raw",
    [
        None,
        [],
        "oops",
        {"title": "x", "status": 400, "detail": "d", "instance": "i"},
        {"type": "t", "title": "x", "status": "not-a-number", "detail": "d", "instance": "i"},
    ],
)
def test_parse_error_response_rejects(raw):
    assert parse_error_response(raw) is None


def test_error_response_requires_all_fields():
    with pytest.raises(ValidationError):
        ErrorResponse.model_validate({"type": "t", "status": 500})
