#!/usr/bin/env python3
"""
Print incoming messages for an account until interrupted.

Usage: python examples/subscribe.py +12024561414
"""

import sys

import anyio

from signald_sdk import SignaldClient, SignaldOptions


def display_event(event):
    """Show the sender and body of an incoming message."""
    source = event.get("source", {}).get("number", "unknown")
    body = (event.get("data_message") or {}).get("body")
    if body:
        print(f"{source}: {body}")
    else:
        print(f"{source}: <{', '.join(sorted(event))}>")


async def main(account):
    options = SignaldOptions(version="v1", request_timeout=30.0)

    async with SignaldClient(options=options) as client:
        await client.request({"type": "subscribe", "account": account})
        print(f"Subscribed to {account}, waiting for messages...")

        async for event in client.events():
            display_event(event)

    print("Connection closed by signald")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python examples/subscribe.py <account>")
        sys.exit(1)
    anyio.run(main, sys.argv[1])
