"""Token exchange with the authorization server.

After the user approves an access request, the authorization server
redirects back with a grant token. The grant token, or later a refresh
token, is exchanged for an access token at the server's exchange
endpoint, authenticated with this application's client token.

Each successful exchange stores a new AccessToken record and moves the
access request to ``granted``. The newest exchange response is
authoritative for the refresh token: if the server does not return one,
any previous refresh token is cleared.
"""

import secrets
from typing import Any

import httpx

from .context import WebauthzContext
from .discovery import get_configuration, get_registration
from .errors import (
    AccessDeniedError,
    ExchangeFailedError,
    InvalidRequestError,
    NotFoundError,
    StorageError,
)
from .models import (
    AccessRequestStatus,
    AccessToken,
    ExchangeResult,
    is_expired,
)
from .negotiation import load_access_request
from .urls import split_resource_uri


def _not_after(max_seconds: Any, now: float) -> float | None:
    if isinstance(max_seconds, bool) or not isinstance(max_seconds, int | float):
        return None
    return now + max_seconds


def _non_empty_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


async def exchange(
    ctx: WebauthzContext,
    *,
    client_id: str,
    client_state: str,
    user_id: str,
    grant_token: str | None = None,
    refresh: bool = False,
) -> ExchangeResult:
    """Exchange a grant token or the stored refresh token for an access token.

    Exactly one of ``grant_token`` or ``refresh=True`` must be given.

    Args:
        ctx: Runtime context
        client_id: client_id returned with the grant redirect
        client_state: Identifier of the access request
        user_id: Application user making the call
        grant_token: Grant token from the redirect
        refresh: Use the refresh token stored on the access request

    Returns:
        ExchangeResult with the new access token

    Raises:
        NotFoundError: If the request is unknown or client_id does not match
        AccessDeniedError: If the user does not own the request, the refresh
            token has expired, or the server refused the exchange
        InvalidRequestError: If neither a grant token nor a usable refresh
            token is available
        ExchangeFailedError: If the exchange request fails
        StorageError: If the new token cannot be stored
    """
    request = await load_access_request(ctx, client_state, user_id)

    if grant_token and refresh:
        ctx.logger.error("Exchange requires either grant_token or refresh, not both")
        raise InvalidRequestError()
    if grant_token:
        exchange_request = {
            "grant_token": grant_token,
            "access_request_uri": request.access_request_uri,
        }
    elif refresh and request.refresh_token:
        if is_expired(request.refresh_token_not_after, ctx.now()):
            ctx.logger.error(f"Refresh token for {client_state} has expired")
            raise AccessDeniedError("refresh token expired")
        exchange_request = {
            "refresh_token": request.refresh_token,
            "access_request_uri": request.access_request_uri,
        }
    else:
        ctx.logger.error("Exchange requires grant_token or a stored refresh token")
        raise InvalidRequestError()

    configuration = await get_configuration(ctx, request.webauthz_discovery_uri)
    registration = await get_registration(ctx, configuration.webauthz_register_uri)

    if client_id != registration.client_id:
        ctx.logger.error(
            f"client_id {client_id} does not match stored client_id {registration.client_id}"
        )
        raise NotFoundError()

    ctx.logger.info(
        f"Exchanging {'refresh token' if refresh else 'grant token'} for {request.resource_uri}"
    )

    try:
        response = await ctx.http.post(
            configuration.webauthz_exchange_uri,
            json=exchange_request,
            headers={
                "Accept": "application/json",
                "Authorization": f"Bearer {registration.client_token}",
            },
        )
        response.raise_for_status()
        exchange_response = response.json()
    except httpx.HTTPStatusError as e:
        ctx.logger.error(
            f"Token exchange failed: {e.response.status_code} {e.response.reason_phrase}"
        )
        raise ExchangeFailedError() from e
    except (httpx.HTTPError, ValueError) as e:
        ctx.logger.error(f"Token exchange failed: {e}")
        raise ExchangeFailedError() from e

    if not isinstance(exchange_response, dict):
        exchange_response = {}

    access_token = _non_empty_str(exchange_response.get("access_token"))
    if access_token is None:
        ctx.logger.error(f"No access token in exchange response for {client_state}")
        denied = request.model_copy(update={"status": AccessRequestStatus.DENIED})
        if not await ctx.store.edit_access_request(client_state, denied):
            raise StorageError("failed to update access request")
        raise AccessDeniedError()

    now = ctx.now()
    access_token_not_after = _not_after(exchange_response.get("access_token_max_seconds"), now)
    refresh_token = _non_empty_str(exchange_response.get("refresh_token"))
    refresh_token_not_after = _not_after(exchange_response.get("refresh_token_max_seconds"), now)

    origin, resource_path = split_resource_uri(request.resource_uri)

    token_record = AccessToken(
        user_id=user_id,
        origin=origin,
        path=request.path or resource_path,
        realm=request.realm,
        scope=request.scope,
        access_token=access_token,
        access_token_not_after=access_token_not_after,
        refresh_token_exists=refresh_token is not None,
        refresh_token_not_after=refresh_token_not_after,
        client_id=client_id,
        client_state=client_state,
    )

    if not await ctx.store.create_access_token(secrets.token_urlsafe(16), token_record):
        ctx.logger.error(f"Failed to store access token for {client_state}")
        raise StorageError("failed to store access token")

    granted = request.model_copy(
        update={
            "status": AccessRequestStatus.GRANTED,
            "refresh_token": refresh_token,
            "refresh_token_not_after": refresh_token_not_after,
        }
    )
    if not await ctx.store.edit_access_request(client_state, granted):
        ctx.logger.error(f"Failed to update access request {client_state}")
        raise StorageError("failed to update access request")

    ctx.logger.info(f"Access granted for {request.resource_uri}")
    return ExchangeResult(
        resource_uri=request.resource_uri,
        status=AccessRequestStatus.GRANTED,
        access_token=access_token,
    )
