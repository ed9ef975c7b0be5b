#!/usr/bin/env python3
"""Quick start example for signald SDK."""

import logging

import anyio

from signald_sdk import (
    DaemonError,
    SignaldClient,
    SignaldOptions,
    raise_for_error,
    send_request,
)


async def basic_example():
    """Basic example - one request, one response."""
    print("=== Basic Example ===")

    result = await send_request({"type": "version", "version": "v1"})
    print(f"signald {result.get('version')}")
    print()


async def with_options_example():
    """Example with custom options."""
    print("=== With Options Example ===")

    options = SignaldOptions(
        socket_path="/var/run/signald/signald.sock",
        version="v1",
        request_timeout=10.0,
    )

    async with SignaldClient(options=options) as client:
        accounts = await client.request({"type": "list_accounts"})
        for account in accounts.get("accounts", []):
            print(f"Account: {account.get('account_id')}")
    print()


async def error_example():
    """Example handling an error reported by the daemon."""
    print("=== Error Example ===")

    async with SignaldClient(options=SignaldOptions(version="v1")) as client:
        response = await client.request_raw(
            {"type": "get_profile", "account": "+10000000000", "address": {}}
        )
        try:
            raise_for_error(response)
        except DaemonError as e:
            print(f"signald said no: {e}")
    print()


async def main():
    """Run all examples."""
    await basic_example()
    await with_options_example()
    await error_example()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    anyio.run(main)
