"""Webauthz management utility.

Inspect challenges, discovery documents and stored tokens.

Usage:
    # Parse a WWW-Authenticate header
    python -m webauthz challenge 'Bearer realm="x", webauthz_discovery_uri="https://auth.example/d"'

    # Fetch an authorization server's discovery document
    python -m webauthz discover https://auth.example/webauthz.json

    # List stored access tokens
    python -m webauthz tokens --user sparky

    # Generate encryption key for the file store
    python -m webauthz generate-key
"""

import argparse
import asyncio
import json
import sys
import time

import httpx
from dotenv import load_dotenv

from .challenge import parse_bearer_params
from .config import StoreSettings
from .discovery import fetch_discovery_document
from .logging_config import setup_logging
from .storage.file_store import JsonFileStore


def show_challenge(header: str) -> int:
    """Print the parameters of a Bearer challenge."""
    params = parse_bearer_params(header)
    if params is None or not params.get("webauthz_discovery_uri"):
        print("❌ Not a webauthz challenge")
        return 1

    print(json.dumps(params, indent=2))
    return 0


async def discover(discovery_uri: str, timeout: float) -> int:
    """Fetch and print a discovery document without storing it."""
    async with httpx.AsyncClient(timeout=timeout) as http:
        try:
            configuration = await fetch_discovery_document(http, discovery_uri)
        except (httpx.HTTPError, ValueError) as e:
            print(f"❌ Discovery failed: {e}")
            return 1

    print(json.dumps(configuration.model_dump(mode="json"), indent=2))
    return 0


def get_store(settings: StoreSettings) -> JsonFileStore:
    """Open the file store at the configured storage path."""
    if not settings.encryption_key:
        print("⚠️  Warning: No WEBAUTHZ_ENCRYPTION_KEY found. Store may be unencrypted.")

    return JsonFileStore(settings.storage_path, settings.encryption_key)


def list_tokens(settings: StoreSettings, user_id: str | None = None) -> int:
    """List stored access tokens."""
    store = get_store(settings)
    records = store.list_access_tokens()
    if user_id:
        records = [record for record in records if record.user_id == user_id]

    if not records:
        print("No tokens found.")
        return 0

    print(f"\n📦 Stored tokens ({len(records)}):\n")

    now = time.time()
    for record in records:
        if not record.is_access_token_expired(now):
            status = "✅ Valid"
        elif record.can_refresh(now):
            status = "🔄 Refreshable"
        else:
            status = "❌ Expired"

        expiry_info = ""
        if record.access_token_not_after is not None and status == "✅ Valid":
            hours = int((record.access_token_not_after - now) / 3600)
            expiry_info = f" (expires in {hours}h)"

        print(f"  {status} {record.user_id} {record.origin}{record.path}{expiry_info}")

    return 0


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(prog="webauthz", description="Webauthz client utility")
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WEBAUTHZ_LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    challenge_parser = subparsers.add_parser("challenge", help="Parse a WWW-Authenticate header")
    challenge_parser.add_argument("header", help="Header value, starting with 'Bearer'")

    discover_parser = subparsers.add_parser("discover", help="Fetch a discovery document")
    discover_parser.add_argument("discovery_uri", help="Discovery document URI")
    discover_parser.add_argument("--timeout", type=float, default=30.0, help="Timeout in seconds")

    tokens_parser = subparsers.add_parser("tokens", help="List stored access tokens")
    tokens_parser.add_argument("--user", default=None, help="Only show tokens for this user")

    subparsers.add_parser("generate-key", help="Generate a file store encryption key")

    args = parser.parse_args(argv)
    settings = StoreSettings()
    setup_logging(settings, level=args.log_level)

    if args.command == "challenge":
        return show_challenge(args.header)
    if args.command == "discover":
        return asyncio.run(discover(args.discovery_uri, args.timeout))
    if args.command == "tokens":
        try:
            return list_tokens(settings, args.user)
        except ValueError as e:
            print(f"❌ {e}")
            return 1
    if args.command == "generate-key":
        print(JsonFileStore.generate_encryption_key())
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
