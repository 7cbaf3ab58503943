"""Shared pytest fixtures for autowired tests."""

import pytest

from autowired.config import ResolverConfig
from autowired.provider import InstanceProvider


@pytest.fixture()
def provider() -> InstanceProvider:
    """Empty provider isolated from the process default."""
    return InstanceProvider()


@pytest.fixture()
def config(provider: InstanceProvider) -> ResolverConfig:
    """Configuration with attribute injection enabled and an isolated provider."""
    return ResolverConfig(provider=provider)


@pytest.fixture()
def config_without_injection(provider: InstanceProvider) -> ResolverConfig:
    """Configuration with attribute injection disabled."""
    return ResolverConfig(auto_inject_attributes=False, provider=provider)
