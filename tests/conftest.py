"""Shared pytest configuration for the wayfinder test suite."""

import pytest


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
