"""Pytest configuration for e2e tests."""

import os

import pytest


@pytest.fixture(scope="session")
def socket_path():
    """Ensure SIGNALD_SOCKET points at a running daemon for e2e tests."""
    path = os.environ.get("SIGNALD_SOCKET")
    if not path or not os.path.exists(path):
        pytest.fail(
            "SIGNALD_SOCKET must name the socket of a running signald daemon. "
            "Set it before running: export SIGNALD_SOCKET=/var/run/signald/signald.sock"
        )
    return path


@pytest.fixture(scope="session")
def event_loop_policy():
    """Use the default event loop policy for all async tests."""
    import asyncio

    return asyncio.get_event_loop_policy()


def pytest_configure(config):
    """Add e2e marker."""
    config.addinivalue_line(
        "markers", "e2e: marks tests as e2e tests requiring a running signald daemon"
    )
