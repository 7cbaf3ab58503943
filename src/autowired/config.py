from __future__ import annotations

import dataclasses
import threading
from dataclasses import dataclass

from typing_extensions import Self

from autowired.exceptions import AutowiredConfigurationError
from autowired.provider import Provider, default_provider

DEFAULT_MAX_DEPTH = 32


@dataclass(frozen=True, slots=True)
class ResolverConfig:
    """Immutable settings for one top-level resolution and everything nested under it.

    Pass a config to ``create``/``new`` to isolate a call from the process
    default. When omitted, the process default is read once at the start of
    the top-level call and reused for every nested resolution.
    """

    auto_inject_attributes: bool = True
    """Run the attribute injector on every instance the resolver produces."""

    max_depth: int = DEFAULT_MAX_DEPTH
    """Maximum nesting of recursive resolutions before giving up."""

    provider: Provider | None = None
    """Registry consulted before automatic construction. ``None`` uses ``default_provider``."""

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            msg = f"max_depth must be at least 1, got {self.max_depth}."
            raise AutowiredConfigurationError(msg)

    @property
    def effective_provider(self) -> Provider:
        """Return the configured provider or the process default."""
        if self.provider is None:
            return default_provider
        return self.provider

    def replace(
        self,
        *,
        auto_inject_attributes: bool | None = None,
        max_depth: int | None = None,
        provider: Provider | None = None,
    ) -> Self:
        """Return a copy with the given fields changed."""
        changes: dict[str, object] = {}
        if auto_inject_attributes is not None:
            changes["auto_inject_attributes"] = auto_inject_attributes
        if max_depth is not None:
            changes["max_depth"] = max_depth
        if provider is not None:
            changes["provider"] = provider
        return dataclasses.replace(self, **changes)


_default_config = ResolverConfig()
_default_config_lock = threading.Lock()


def get_default_config() -> ResolverConfig:
    """Return the process default configuration snapshot."""
    with _default_config_lock:
        return _default_config


def set_default_config(config: ResolverConfig) -> None:
    """Replace the process default configuration.

    Resolutions already in progress keep the snapshot they started with.
    """
    global _default_config  # noqa: PLW0603
    with _default_config_lock:
        _default_config = config


def set_auto_injection_attributes(enabled: bool) -> None:  # noqa: FBT001
    """Toggle attribute injection in the process default configuration.

    Examples:
        .. code-block:: python

            set_auto_injection_attributes(False)
            service = new(ReportService)  # marked attributes stay unset

    """
    global _default_config  # noqa: PLW0603
    with _default_config_lock:
        _default_config = dataclasses.replace(
            _default_config,
            auto_inject_attributes=enabled,
        )


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "ResolverConfig",
    "get_default_config",
    "set_auto_injection_attributes",
    "set_default_config",
]
