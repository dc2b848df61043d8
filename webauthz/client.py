"""High-level webauthz client.

``WebauthzClient`` bundles the webauthz operations over one context for
applications that prefer an object to module functions.

Example:
    async with WebauthzClient.from_settings(settings, store) as webauthz:
        response = await http.get(resource_uri, auth=webauthz.auth(user_id))
        challenge = webauthz.check_response(user_id, resource_uri, response)
        if challenge:
            request = await webauthz.create_access_request(challenge)
            # redirect the user to request.access_request_uri

        # later, in the grant redirect handler
        await webauthz.exchange(
            client_id=client_id, client_state=client_state,
            grant_token=grant_token, user_id=user_id,
        )
"""

import time
from typing import Any

import httpx

from . import challenge as challenge_parser
from . import exchanger, negotiation, resolver
from .auth import WebauthzAuth
from .config import WebauthzSettings
from .context import Clock, WebauthzContext
from .models import AccessRequestInfo, Challenge, ExchangeResult
from .storage.base import WebauthzStore


class WebauthzClient:
    """Webauthz operations bound to one context."""

    def __init__(self, context: WebauthzContext):
        self.context = context

    @classmethod
    def from_settings(
        cls,
        settings: WebauthzSettings,
        store: WebauthzStore,
        http: httpx.AsyncClient | None = None,
        clock: Clock = time.time,
    ) -> "WebauthzClient":
        """Build a client and its context from settings and a store."""
        return cls(WebauthzContext(store=store, settings=settings, http=http, clock=clock))

    async def __aenter__(self) -> "WebauthzClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.context.aclose()

    def check_response(
        self, user_id: str, resource_uri: str, response: httpx.Response
    ) -> Challenge | None:
        """Return the webauthz challenge in ``response``, if any."""
        return challenge_parser.parse_challenge(resource_uri, user_id, response)

    async def create_access_request(
        self, challenge: Challenge, context: Any = None
    ) -> AccessRequestInfo:
        return await negotiation.create_access_request(self.context, challenge, context)

    async def get_access_request(self, client_state: str, user_id: str) -> AccessRequestInfo:
        return await negotiation.get_access_request(self.context, client_state, user_id)

    async def exchange(
        self,
        *,
        client_id: str,
        client_state: str,
        user_id: str,
        grant_token: str | None = None,
        refresh: bool = False,
    ) -> ExchangeResult:
        return await exchanger.exchange(
            self.context,
            client_id=client_id,
            client_state=client_state,
            user_id=user_id,
            grant_token=grant_token,
            refresh=refresh,
        )

    async def get_access_token(self, user_id: str, resource_uri: str) -> str | None:
        return await resolver.get_access_token(self.context, user_id, resource_uri)

    def auth(self, user_id: str) -> WebauthzAuth:
        """httpx auth that attaches ``user_id``'s tokens to requests."""
        return WebauthzAuth(self.context, user_id)
