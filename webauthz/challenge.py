"""Parsing of webauthz ``Bearer`` challenges.

A protected resource that supports webauthz answers an unauthorized
request with a header like::

    WWW-Authenticate: Bearer realm="example", scope="read",
        path="/api", webauthz_discovery_uri="https%3A%2F%2Fauth.example%2Fd"

Values may be quoted and are percent-encoded.
"""

import logging
from urllib.parse import unquote

import httpx

from .models import Challenge

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


def split_auth_params(value: str) -> list[str]:
    """Split an auth-param list on commas that are outside double quotes.

    Backslash escapes inside a quoted string are kept for the caller to
    resolve.
    """
    items: list[str] = []
    current: list[str] = []
    in_quotes = False
    escaped = False

    for char in value:
        if escaped:
            current.append(char)
            escaped = False
        elif char == "\\" and in_quotes:
            current.append(char)
            escaped = True
        elif char == '"':
            current.append(char)
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            items.append("".join(current))
            current = []
        else:
            current.append(char)

    items.append("".join(current))
    return items


def _unquote_value(value: str) -> str:
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        inner = value[1:-1]
        chars: list[str] = []
        escaped = False
        for char in inner:
            if char == "\\" and not escaped:
                escaped = True
                continue
            chars.append(char)
            escaped = False
        return unquote("".join(chars))
    return unquote(value)


def parse_bearer_params(header_value: str) -> dict[str, str] | None:
    """Parse the parameters of a ``Bearer`` challenge.

    Args:
        header_value: Value of the WWW-Authenticate header

    Returns:
        Mapping of parameter name to decoded value, or None if the header
        does not use the Bearer scheme
    """
    if not header_value.lower().startswith(BEARER_PREFIX):
        return None

    params: dict[str, str] = {}
    for item in split_auth_params(header_value[len(BEARER_PREFIX) :]):
        key, sep, value = item.strip().partition("=")
        if not sep:
            continue
        params[key.strip()] = _unquote_value(value.strip())
    return params


def parse_challenge(
    resource_uri: str,
    user_id: str,
    response: httpx.Response,
) -> Challenge | None:
    """Look for a webauthz challenge in a resource response.

    Args:
        resource_uri: The URI that was requested
        user_id: Application user who will own the access request
        response: The resource server's response

    Returns:
        Challenge if the response carries a Bearer challenge with a
        webauthz_discovery_uri, otherwise None
    """
    logger.info(f"Resource response {response.status_code} {response.reason_phrase}")

    authenticate = response.headers.get("www-authenticate")
    if not authenticate:
        return None

    params = parse_bearer_params(authenticate)
    if params is None:
        return None
    logger.debug(f"Bearer challenge attributes: {params}")

    webauthz_discovery_uri = params.get("webauthz_discovery_uri")
    if not webauthz_discovery_uri:
        return None

    return Challenge(
        resource_uri=resource_uri,
        webauthz_discovery_uri=webauthz_discovery_uri,
        realm=params.get("realm"),
        scope=params.get("scope"),
        path=params.get("path"),
        user_id=user_id,
    )
