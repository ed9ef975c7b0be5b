#!/usr/bin/env python3
"""
Example of receiving events while sending requests, using trio.

A nursery runs the event printer next to a task that keeps asking signald
for its version, showing that requests and events share one connection.
"""

import sys

import trio

from signald_sdk import SignaldClient, SignaldOptions


async def print_events(client):
    async for event in client.events():
        print(f"Event: {event}")


async def poll_version(client, count):
    for _ in range(count):
        result = await client.request({"type": "version"})
        print(f"Version: {result.get('version')}")
        await trio.sleep(1)


async def main(account):
    options = SignaldOptions(version="v1", request_timeout=30.0)
    client = SignaldClient(options=options)
    await client.connect()

    try:
        await client.request({"type": "subscribe", "account": account})
        async with trio.open_nursery() as nursery:
            nursery.start_soon(print_events, client)
            await poll_version(client, 5)
            nursery.cancel_scope.cancel()
    finally:
        await client.disconnect()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python examples/subscribe_trio.py <account>")
        sys.exit(1)
    trio.run(main, sys.argv[1])
