"""Access request lifecycle.

An access request is created in ``redirect`` status when a resource
challenges us. The user is sent to ``access_request_uri`` to approve or
deny; on return, the exchange moves the request to ``granted`` or
``denied``. Only the user who started a request may read or use it.
"""

import secrets
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .context import WebauthzContext
from .discovery import get_configuration, get_registration
from .errors import AccessDeniedError, NotFoundError, StorageError
from .models import AccessRequest, AccessRequestInfo, AccessRequestStatus, Challenge


def generate_client_state() -> str:
    """Generate an unguessable identifier for an access request."""
    return secrets.token_urlsafe(16)


def build_access_request_uri(request_uri: str, params: dict[str, str | None]) -> str:
    """Append parameters to the server's access request endpoint.

    Query parameters already present on ``request_uri`` are kept. Parameters
    whose value is None are left out.
    """
    parts = urlsplit(request_uri)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.extend((key, value) for key, value in params.items() if value is not None)
    return urlunsplit(parts._replace(query=urlencode(query)))


async def create_access_request(
    ctx: WebauthzContext,
    challenge: Challenge,
    context: Any = None,
) -> AccessRequestInfo:
    """Start an access negotiation for a challenged resource.

    Args:
        ctx: Runtime context
        challenge: Challenge from ``parse_challenge``
        context: Application data needed to repeat the original request
            once access is granted (method, body, ...)

    Returns:
        The new access request; redirect the user to its access_request_uri

    Raises:
        DiscoveryFailedError: If the authorization server cannot be discovered
        RegistrationFailedError: If registration fails
        StorageError: If the access request cannot be created
    """
    if not challenge.user_id:
        raise ValueError("challenge.user_id is required to create an access request")

    configuration = await get_configuration(ctx, challenge.webauthz_discovery_uri)
    registration = await get_registration(ctx, configuration.webauthz_register_uri)

    client_state = generate_client_state()

    access_request_uri = build_access_request_uri(
        configuration.webauthz_request_uri,
        {
            "client_id": registration.client_id,
            "client_state": client_state,
            "realm": challenge.realm,
            "scope": challenge.scope,
            "path": challenge.path,
        },
    )

    record = AccessRequest(
        resource_uri=challenge.resource_uri,
        realm=challenge.realm,
        scope=challenge.scope,
        path=challenge.path,
        webauthz_discovery_uri=challenge.webauthz_discovery_uri,
        user_id=challenge.user_id,
        context=context,
        access_request_uri=access_request_uri,
        status=AccessRequestStatus.REDIRECT,
    )

    if not await ctx.store.create_access_request(client_state, record):
        ctx.logger.error(f"Failed to create access request for {challenge.resource_uri}")
        raise StorageError("failed to create access request")

    ctx.logger.info(f"Created access request {client_state} for {challenge.resource_uri}")
    return AccessRequestInfo.from_record(client_state, record)


async def load_access_request(
    ctx: WebauthzContext, client_state: str, user_id: str
) -> AccessRequest:
    """Load an access request owned by ``user_id``.

    Raises:
        NotFoundError: If there is no such request
        AccessDeniedError: If the request belongs to another user
    """
    record = await ctx.store.fetch_access_request(client_state)
    if record is None:
        ctx.logger.info(f"Access request {client_state} not found")
        raise NotFoundError()

    if record.user_id != user_id:
        ctx.logger.warning(f"Access request {client_state} requested by a different user")
        raise AccessDeniedError()

    return record


async def get_access_request(
    ctx: WebauthzContext, client_state: str, user_id: str
) -> AccessRequestInfo:
    """Get the observable state of an access request.

    Raises:
        NotFoundError: If there is no such request
        AccessDeniedError: If the request belongs to another user
    """
    record = await load_access_request(ctx, client_state, user_id)
    return AccessRequestInfo.from_record(client_state, record)
