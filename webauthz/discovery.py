"""Authorization server discovery and client registration.

Both the discovery document (keyed by discovery URI) and this
application's registration (keyed by registration URI) are fetched from
the network once and then served from the store. A fetched document that
cannot be stored is a failure: later exchanges must find the same
configuration and registration in the store.
"""

import httpx

from .context import WebauthzContext
from .errors import DiscoveryFailedError, RegistrationFailedError
from .models import Configuration, Registration


async def fetch_discovery_document(http: httpx.AsyncClient, discovery_uri: str) -> Configuration:
    """Fetch a discovery document from the network.

    Args:
        http: HTTP client
        discovery_uri: Where to find the discovery document

    Returns:
        The parsed configuration

    Raises:
        httpx.HTTPError: If the request fails
        ValueError: If the response is not a valid discovery document
    """
    response = await http.get(discovery_uri, headers={"Accept": "application/json"})
    response.raise_for_status()
    return Configuration.model_validate(response.json())


async def get_configuration(ctx: WebauthzContext, discovery_uri: str) -> Configuration:
    """Get the discovery document, fetching and storing it on first use.

    Raises:
        DiscoveryFailedError: If the document cannot be fetched, parsed or stored
    """
    configuration = await ctx.store.fetch_configuration(discovery_uri)
    if configuration is not None:
        return configuration

    async with ctx.guard(f"configuration:{discovery_uri}"):
        if ctx.settings.single_flight:
            configuration = await ctx.store.fetch_configuration(discovery_uri)
            if configuration is not None:
                return configuration

        ctx.logger.info(f"Fetching webauthz configuration from {discovery_uri}")
        try:
            configuration = await fetch_discovery_document(ctx.http, discovery_uri)
        except (httpx.HTTPError, ValueError) as e:
            ctx.logger.error(f"Webauthz discovery failed for {discovery_uri}: {e}")
            raise DiscoveryFailedError("webauthz discovery failed") from e

        if not await ctx.store.store_configuration(discovery_uri, configuration):
            ctx.logger.error(f"Failed to store webauthz configuration for {discovery_uri}")
            raise DiscoveryFailedError("failed to store webauthz configuration")

    ctx.logger.info(
        f"Webauthz configuration for {discovery_uri}: "
        f"register={configuration.webauthz_register_uri} "
        f"request={configuration.webauthz_request_uri} "
        f"exchange={configuration.webauthz_exchange_uri}"
    )
    return configuration


async def register_client(ctx: WebauthzContext, register_uri: str) -> Registration:
    """Register this application with an authorization server.

    Raises:
        RegistrationFailedError: If registration fails or cannot be stored
    """
    registration_request = {
        "client_name": ctx.settings.client_name,
        "grant_redirect_uri": ctx.settings.grant_redirect_uri,
    }

    ctx.logger.info(f"Registering webauthz client with {register_uri}")

    try:
        response = await ctx.http.post(
            register_uri,
            json=registration_request,
            headers={"Accept": "application/json"},
        )
        response.raise_for_status()
        registration = Registration.model_validate(response.json())
    except (httpx.HTTPError, ValueError) as e:
        ctx.logger.error(f"Webauthz registration failed for {register_uri}: {e}")
        raise RegistrationFailedError("webauthz registration failed") from e

    if not await ctx.store.store_registration(register_uri, registration):
        ctx.logger.error(f"Failed to store webauthz registration for {register_uri}")
        raise RegistrationFailedError("failed to store webauthz registration")

    ctx.logger.info(f"Registered client: {registration.client_id}")
    return registration


async def get_registration(ctx: WebauthzContext, register_uri: str) -> Registration:
    """Get this application's registration, registering on first use.

    Raises:
        RegistrationFailedError: If registration fails or cannot be stored
    """
    registration = await ctx.store.fetch_registration(register_uri)
    if registration is not None:
        return registration

    async with ctx.guard(f"registration:{register_uri}"):
        if ctx.settings.single_flight:
            registration = await ctx.store.fetch_registration(register_uri)
            if registration is not None:
                return registration
        return await register_client(ctx, register_uri)
