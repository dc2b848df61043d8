"""Access token lookup with hierarchical path matching.

A token stored for ``/api`` also covers ``/api/contact/1234``; a token
stored for ``/`` covers the whole origin. The most specific stored path
wins. Expired tokens are refreshed transparently when a live refresh
token exists.
"""

from .context import WebauthzContext
from .errors import WebauthzError
from .exchanger import exchange
from .models import AccessToken
from .urls import candidate_paths, split_resource_uri


async def get_access_token(ctx: WebauthzContext, user_id: str, resource_uri: str) -> str | None:
    """Find an access token for ``user_id`` to use on ``resource_uri``.

    Args:
        ctx: Runtime context
        user_id: Application user making the request
        resource_uri: URI of the resource about to be requested

    Returns:
        The access token, or None if there is none or it expired and could
        not be refreshed
    """
    origin, path = split_resource_uri(resource_uri)
    path_list = candidate_paths(path)

    record = await ctx.store.fetch_access_token(user_id, origin, path_list)
    if record is None:
        return None

    if not record.is_access_token_expired(ctx.now()):
        return record.access_token

    if not record.can_refresh(ctx.now()):
        ctx.logger.info("Access token expired, no usable refresh token available")
        return None

    async with ctx.guard(f"refresh:{record.client_state}"):
        if ctx.settings.single_flight:
            # Another task may have refreshed while we waited
            current = await ctx.store.fetch_access_token(user_id, origin, path_list)
            if current is not None and not current.is_access_token_expired(ctx.now()):
                return current.access_token
        return await _refresh(ctx, record)


async def _refresh(ctx: WebauthzContext, record: AccessToken) -> str | None:
    try:
        result = await exchange(
            ctx,
            client_id=record.client_id,
            client_state=record.client_state,
            user_id=record.user_id,
            refresh=True,
        )
    except WebauthzError as e:
        ctx.logger.error(f"Failed to obtain new access token with refresh: {e}")
        return None

    ctx.logger.info("Obtained new access token with refresh")
    return result.access_token
