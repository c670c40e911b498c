from datetime import datetime, timezone

import httpx
import pytest

from chimpfetch import ErrorCode, MailchimpFetchClient, mailchimp_api_call


def _error_body(status, detail):
    return {"type": "about:blank", "title": "t", "status": status, "detail": detail, "instance": "i"}


def _client(response: httpx.Response) -> MailchimpFetchClient:
    def handler(request):
        return response

    return MailchimpFetchClient(
        access_token="tok", server_prefix="us1", transport=httpx.MockTransport(handler)
    )


@pytest.mark.asyncio
async def test_success_carries_rate_limit():
    client = _client(
        httpx.Response(
            200,
            json={"account_name": "Acme"},
            headers={"X-RateLimit-Remaining": "9", "X-RateLimit-Limit": "10", "X-RateLimit-Reset": "0"},
        )
    )
    res = await mailchimp_api_call(client, lambda c: c.get("/"))
    assert res.success is True
    assert res.data == {"account_name": "Acme"}
    assert res.rate_limit.remaining == 9  # noqa: PLR2004
    assert res.error_code is None
    await client.aclose()


@pytest.mark.asyncio
async def test_auth_error_maps_to_token_invalid():
    client = _client(httpx.Response(401, json=_error_body(401, "Invalid token")))
    res = await mailchimp_api_call(client, lambda c: c.get("/lists"))
    assert res.success is False
    assert res.error == "Invalid token"
    assert res.error_code == ErrorCode.TOKEN_INVALID.value
    assert res.status_code == 401  # noqa: PLR2004
    await client.aclose()


@pytest.mark.asyncio
async def test_rate_limit_maps_with_reset_window():
    client = _client(
        httpx.Response(
            429,
            json=_error_body(429, "Too many"),
            headers={"Retry-After": "30", "X-RateLimit-Limit": "10"},
        )
    )
    before = datetime.now(timezone.utc)
    res = await mailchimp_api_call(client, lambda c: c.get("/lists"))
    assert res.error == "Rate limit exceeded. Try again in 30 seconds."
    assert res.error_code == ErrorCode.RATE_LIMIT.value
    assert res.status_code == 429  # noqa: PLR2004
    assert res.rate_limit.remaining == 0
    assert res.rate_limit.limit == 10  # noqa: PLR2004
    assert (res.rate_limit.reset_time - before).total_seconds() >= 29  # noqa: PLR2004
    await client.aclose()


@pytest.mark.asyncio
async def test_api_error_keeps_status():
    client = _client(httpx.Response(404, json=_error_body(404, "Not found")))
    res = await mailchimp_api_call(client, lambda c: c.get("/lists/x"))
    assert res.error_code == ErrorCode.API_ERROR.value
    assert res.status_code == 404  # noqa: PLR2004
    await client.aclose()


@pytest.mark.asyncio
async def test_network_error_maps_to_503():
    client = _client(httpx.Response(502, text="Bad Gateway"))
    res = await mailchimp_api_call(client, lambda c: c.get("/lists"))
    assert res.error == "HTTP 502: Bad Gateway"
    assert res.error_code == ErrorCode.API_ERROR.value
    assert res.status_code == 503  # noqa: PLR2004
    await client.aclose()


@pytest.mark.asyncio
async def test_unexpected_error_maps_to_unknown():
    client = _client(httpx.Response(200, json={}))

    async def broken(c):
        raise KeyError("campaigns")

    res = await mailchimp_api_call(client, broken)
    assert res.success is False
    assert res.error_code == ErrorCode.UNKNOWN_ERROR.value
    assert res.status_code == 500  # noqa: PLR2004
    await client.aclose()
