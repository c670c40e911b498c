import pytest

from chimpfetch import ClientConfig, MailchimpFetchClient, RetryOptions


def test_retry_option_defaults():
    opts = RetryOptions()
    assert opts.max_retries == 3  # noqa: PLR2004
    assert opts.max_attempts == 4  # noqa: PLR2004
    assert opts.initial_delay_ms == 1000  # noqa: PLR2004
    assert opts.max_delay_ms == 10000  # noqa: PLR2004
    assert opts.backoff_multiplier == 2  # noqa: PLR2004
    assert opts.jitter_factor == 0.1  # noqa: PLR2004
    assert opts.should_retry(RuntimeError(), 1) is True
    assert opts.on_retry(RuntimeError(), 1, 10) is None


@pytest.mark.asyncio
async def test_construct_and_close():
    client = MailchimpFetchClient(ClientConfig(access_token="t", server_prefix="us1"))
    assert client.get_rate_limit_info() is None
    await client.aclose()
