"""URL helpers for matching access tokens to resources."""

from urllib.parse import urlsplit

DEFAULT_PORTS = {"http": 80, "https": 443}


def split_resource_uri(resource_uri: str) -> tuple[str, str]:
    """Split a resource URI into its origin and path.

    The origin is ``scheme://host[:port]`` with the default port left out,
    so ``https://Example.com:443/a`` and ``https://example.com/a`` share an
    origin. An empty path becomes ``/``.

    Raises:
        ValueError: If the URI has no scheme or host, or a bad port
    """
    parts = urlsplit(resource_uri)
    scheme = parts.scheme.lower()
    host = parts.hostname
    if not scheme or not host:
        raise ValueError(f"Not an absolute URI: {resource_uri}")

    if ":" in host:
        host = f"[{host}]"

    port = parts.port
    origin = f"{scheme}://{host}"
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        origin = f"{origin}:{port}"

    return origin, parts.path or "/"


def candidate_paths(path: str) -> list[str]:
    """List the paths whose tokens may cover ``path``, most specific first.

    >>> candidate_paths("/api/contact/1234")
    ['/api/contact/1234', '/api/contact', '/api', '/']
    """
    parts = path.split("/")
    paths = []
    for i in range(len(parts) - 1, 0, -1):
        prefix = "/".join(parts[: i + 1])
        if prefix and prefix != "/":
            paths.append(prefix)
    paths.append("/")
    return paths
