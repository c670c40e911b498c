import asyncio
import contextlib
import dataclasses
import json
import logging
from collections.abc import Mapping
from typing import Any, Union
from urllib.parse import urlencode

import httpx

from .constants import AUTH_ERROR_STATUSES, DEFAULT_TIMEOUT_MS, RATE_LIMIT_STATUS
from .env import load_client_config_from_env
from .errors import (
    MailchimpAuthError,
    MailchimpFetchError,
    MailchimpNetworkError,
    MailchimpRateLimitError,
)
from .ratelimit import parse_limit, parse_rate_limit, parse_retry_after
from .schemas import parse_error_response
from .types import ClientConfig, RateLimitInfo


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        # 10.0 -> "10", as Mailchimp's integer params expect
        return str(int(value))
    return str(value)


def build_query_string(params: Union[Mapping[str, Any], None]) -> str:
    """URL-encode params, dropping None values (0, False and "" are kept)."""
    if not params:
        return ""
    pairs = [(k, _query_value(v)) for k, v in params.items() if v is not None]
    return urlencode(pairs)


class MailchimpFetchClient:
    """Async client for the Mailchimp Marketing API (v3.0).

    One instance per account: the rate-limit snapshot lives on the instance.
    Failures surface as MailchimpError subclasses; nothing is retried here,
    wrap calls in retry_with_backoff for that.

    Usage:
        async with MailchimpFetchClient(access_token="...", server_prefix="us1") as client:
            lists = await client.get("/lists", {"count": 10})
    """

    def __init__(
        self,
        config: Union[ClientConfig, None] = None,
        *,
        access_token: Union[str, None] = None,
        server_prefix: Union[str, None] = None,
        timeout_ms: Union[int, None] = None,
        transport: Union[httpx.AsyncBaseTransport, None] = None,
        log_level: Union[int, None] = None,
    ):
        """Initialize a MailchimpFetchClient.

        Args:
            config (ClientConfig | None): full config; keywords are used when omitted
            access_token (str | None): OAuth access token or API key
            server_prefix (str | None): account data center, e.g. "us1"
            timeout_ms (int | None): per-request deadline; overrides config.timeout_ms
            transport (httpx.AsyncBaseTransport | None): custom transport (tests, proxies)
            log_level (int | None): log level for the client logger

        Raises:
            ValueError: if the token or server prefix is empty
        """
        if config is None:
            config = ClientConfig(
                access_token=access_token or "",
                server_prefix=server_prefix or "",
                timeout_ms=DEFAULT_TIMEOUT_MS if timeout_ms is None else timeout_ms,
            )
        elif timeout_ms is not None:
            config = dataclasses.replace(config, timeout_ms=timeout_ms)
        self._config = config.validate()
        self._base_url = config.base_url
        self._rate_limit_info: Union[RateLimitInfo, None] = None
        self._client = httpx.AsyncClient(
            transport=transport,
            timeout=httpx.Timeout(config.timeout_ms / 1000),
        )
        self._logger = logging.getLogger("chimpfetch.client")
        if log_level is not None:
            with contextlib.suppress(Exception):
                self._logger.setLevel(log_level)

    @classmethod
    def from_env(
        cls,
        prefix: str = "MAILCHIMP_",
        env_path: Union[str, None] = None,
        **kwargs,
    ) -> "MailchimpFetchClient":
        """Build a client from {prefix}ACCESS_TOKEN / {prefix}SERVER_PREFIX / {prefix}TIMEOUT_MS."""
        return cls(load_client_config_from_env(prefix=prefix, env_path=env_path), **kwargs)

    async def __aenter__(self) -> "MailchimpFetchClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
        return False

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout_ms(self) -> int:
        return self._config.timeout_ms

    def get_rate_limit_info(self) -> Union[RateLimitInfo, None]:
        return self._rate_limit_info

    # ---------- verbs ----------

    async def get(self, path: str, params: Union[Mapping[str, Any], None] = None) -> Any:
        query = build_query_string(params)
        return await self._fetch("GET", f"{path}?{query}" if query else path)

    async def post(self, path: str, body: Any = None) -> Any:
        return await self._fetch("POST", path, body=body)

    async def patch(self, path: str, body: Any = None) -> Any:
        return await self._fetch("PATCH", path, body=body)

    async def put(self, path: str, body: Any = None) -> Any:
        return await self._fetch("PUT", path, body=body)

    async def delete(self, path: str) -> Any:
        return await self._fetch("DELETE", path)

    # ---------- internals ----------

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _fetch(self, method: str, path: str, body: Any = None) -> Any:
        if not path.startswith("/"):
            path = f"/{path}"
        url = f"{self._base_url}{path}"
        content = json.dumps(body) if body is not None else None
        timeout_ms = self._config.timeout_ms

        self._logger.debug(f"req start method={method} url={url}")
        try:
            # wait_for cancels the in-flight request on expiry, which lets httpx
            # release the connection instead of leaving it checked out
            response = await asyncio.wait_for(
                self._client.request(method, url, headers=self._headers(), content=content),
                timeout=timeout_ms / 1000,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            self._logger.warning(f"req timeout method={method} url={url} after={timeout_ms}ms")
            raise MailchimpNetworkError(f"Request timeout after {timeout_ms}ms", e) from e
        except (httpx.HTTPError, OSError) as e:
            self._logger.warning(f"req failed method={method} url={url}: {e!r}")
            raise MailchimpNetworkError("Network request failed", e) from e

        # before any error branching so failed calls still refresh the snapshot
        self._record_rate_limit(response.headers)
        self._logger.debug(f"req done method={method} url={url} status={response.status_code}")

        if not response.is_success:
            self._raise_for_error(response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise MailchimpNetworkError("Network request failed", e) from e

    def _record_rate_limit(self, headers: Mapping[str, str]) -> None:
        info = parse_rate_limit(headers)
        # Missing or partial headers keep the previous snapshot
        if info is not None:
            self._rate_limit_info = info

    def _raise_for_error(self, response: httpx.Response) -> None:
        status = response.status_code
        reason = response.reason_phrase
        try:
            body = response.json()
        except ValueError as e:
            self._logger.warning(f"non-JSON error body status={status}")
            raise MailchimpNetworkError(f"HTTP {status}: {reason}") from e

        error = parse_error_response(body)
        if error is None:
            self._logger.warning(f"malformed error body status={status}")
            raise MailchimpNetworkError(f"Invalid error response from Mailchimp API: {reason}")

        if status == RATE_LIMIT_STATUS:
            retry_after = parse_retry_after(response.headers)
            self._logger.info(f"429 from Mailchimp; retry_after={retry_after}s")
            raise MailchimpRateLimitError(error, retry_after, parse_limit(response.headers))
        if status in AUTH_ERROR_STATUSES:
            raise MailchimpAuthError(error)
        self._logger.warning(f"Mailchimp API error status={status} title={error.title!r}")
        raise MailchimpFetchError(error)
