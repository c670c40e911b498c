import logging
import os

from .constants import DEFAULT_TIMEOUT_MS
from .types import ClientConfig

logger = logging.getLogger("chimpfetch.env")

_QUOTES = ('"', "'")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:  # noqa: PLR2004
        return value[1:-1]
    return value


def _parse_env_file(env_path: str) -> dict[str, str]:
    """Read MAILCHIMP_* style assignments from a dotenv file.

    `export` prefixes and matching outer quotes are accepted. A missing file
    is logged and treated as empty; other I/O errors propagate.
    """
    if not os.path.exists(env_path):
        logger.warning(f"env file not found: {env_path}")
        return {}

    values: dict[str, str] = {}
    with open(env_path, encoding="utf-8") as f:
        for lineno, raw_line in enumerate(f, start=1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            line = line.removeprefix("export ").lstrip()
            key, sep, val = line.partition("=")
            key = key.strip()
            if not sep or not key:
                logger.debug(f"skipping malformed line {lineno} in {env_path}")
                continue
            values[key] = _unquote(val.strip())
    return values


def _parse_timeout(raw: str | None) -> int:
    if not raw:
        return DEFAULT_TIMEOUT_MS
    try:
        n = int(raw.strip())
    except ValueError:
        logger.warning(f"ignoring non-numeric timeout {raw!r}")
        return DEFAULT_TIMEOUT_MS
    return n if n > 0 else DEFAULT_TIMEOUT_MS


def load_client_config_from_env(
    prefix: str = "MAILCHIMP_",
    env_path: str | None = None,
) -> ClientConfig:
    """Create a ClientConfig from environment variables.

    Reads {prefix}ACCESS_TOKEN, {prefix}SERVER_PREFIX and the optional
    {prefix}TIMEOUT_MS. If 'env_path' is provided, the .env file augments the
    lookup; values in the actual environment take precedence over the file.

    Raises:
        ValueError: if the token or the server prefix is missing
    """
    file_env = _parse_env_file(env_path) if env_path else {}
    env_map: dict[str, str] = {**file_env, **os.environ}

    token = (env_map.get(f"{prefix}ACCESS_TOKEN") or "").strip()
    server_prefix = (env_map.get(f"{prefix}SERVER_PREFIX") or "").strip()
    if not token:
        raise ValueError(f"{prefix}ACCESS_TOKEN is not set")
    if not server_prefix:
        raise ValueError(f"{prefix}SERVER_PREFIX is not set")

    return ClientConfig(
        access_token=token,
        server_prefix=server_prefix,
        timeout_ms=_parse_timeout(env_map.get(f"{prefix}TIMEOUT_MS")),
    )
