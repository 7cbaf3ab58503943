"""Pytest fixtures for code that resolves through ``autowired``.

Enable with ``pytest_plugins = ["autowired.integrations.pytest_plugin"]`` in a
``conftest.py``.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from autowired.config import ResolverConfig, get_default_config, set_default_config
from autowired.provider import InstanceProvider, default_provider


@pytest.fixture(autouse=True)
def _autowired_default_config() -> Iterator[None]:
    """Restore the process default configuration after every test."""
    saved = get_default_config()
    try:
        yield
    finally:
        set_default_config(saved)


@pytest.fixture()
def autowired_provider() -> InstanceProvider:
    """Return an empty provider isolated from ``default_provider``."""
    return InstanceProvider()


@pytest.fixture()
def autowired_config(autowired_provider: InstanceProvider) -> ResolverConfig:
    """Return a configuration bound to the ``autowired_provider`` fixture."""
    return ResolverConfig(provider=autowired_provider)


@pytest.fixture()
def clean_default_provider() -> Iterator[InstanceProvider]:
    """Yield ``default_provider`` and clear it once the test finishes."""
    try:
        yield default_provider
    finally:
        default_provider.clear()
