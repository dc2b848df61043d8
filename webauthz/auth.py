"""httpx integration.

``WebauthzAuth`` attaches a stored access token to outgoing requests so
application code does not have to look tokens up itself.
"""

from collections.abc import AsyncGenerator, Generator

import httpx

from .context import WebauthzContext
from .resolver import get_access_token


class WebauthzAuth(httpx.Auth):
    """Attach ``Authorization: Bearer`` with the user's token for the request URL.

    Requests for which no token is available are sent unchanged; the
    response can then be checked for a challenge with ``parse_challenge``.
    """

    def __init__(self, context: WebauthzContext, user_id: str):
        self.context = context
        self.user_id = user_id

    def sync_auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        raise RuntimeError("WebauthzAuth requires an httpx.AsyncClient")

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        access_token = await get_access_token(self.context, self.user_id, str(request.url))
        if access_token:
            request.headers["Authorization"] = f"Bearer {access_token}"
        yield request
