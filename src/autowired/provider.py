from __future__ import annotations

import logging
import threading
from typing import Any, Protocol, runtime_checkable

from autowired._internal.type_locator import type_identifier

logger = logging.getLogger(__name__)


@runtime_checkable
class Provider(Protocol):
    """Describe the registry consulted before any automatic construction.

    The resolver asks ``exists`` with a type identifier (``"module.QualName"``
    or whatever string the caller passed) and, on a hit, takes ``get`` as
    authoritative: the returned object is used as-is, without autowiring.
    """

    def exists(self, type_identifier: str) -> bool:
        """Return whether an instance is available for ``type_identifier``."""
        ...

    def get(self, type_identifier: str) -> Any:
        """Return the instance registered for ``type_identifier``."""
        ...


class InstanceProvider:
    """Keep pre-built instances keyed by type identifier.

    Keys may be given as classes or strings; classes are normalized through
    ``type_identifier``. Writes are serialized with a lock, reads go straight
    to the underlying dict.

    Examples:
        .. code-block:: python

            provider = InstanceProvider()
            provider.add(Database, Database(url="sqlite://"))
            config = ResolverConfig(provider=provider)
            service = new(ReportService, config=config)

    """

    def __init__(self) -> None:
        self._instances: dict[str, Any] = {}
        self._lock = threading.Lock()

    def add(self, key: type[Any] | str, instance: Any) -> None:
        """Register ``instance`` under ``key``, replacing any previous entry.

        Args:
            key: Class or type identifier string.
            instance: Object returned for the key from now on.

        """
        identifier = self._normalize_key(key)
        with self._lock:
            self._instances[identifier] = instance
        logger.debug("Registered provider instance for %s", identifier)

    def remove(self, key: type[Any] | str) -> None:
        """Drop the entry for ``key``; missing keys are ignored."""
        identifier = self._normalize_key(key)
        with self._lock:
            self._instances.pop(identifier, None)

    def clear(self) -> None:
        """Drop every registered instance."""
        with self._lock:
            self._instances.clear()

    def exists(self, type_identifier: type[Any] | str) -> bool:
        return self._normalize_key(type_identifier) in self._instances

    def get(self, type_identifier: type[Any] | str) -> Any:
        identifier = self._normalize_key(type_identifier)
        try:
            return self._instances[identifier]
        except KeyError:
            msg = f"No instance registered for '{identifier}'."
            raise KeyError(msg) from None

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (str, type)):
            return False
        return self.exists(key)

    def __len__(self) -> int:
        return len(self._instances)

    def _normalize_key(self, key: type[Any] | str) -> str:
        if isinstance(key, str):
            return key
        return type_identifier(key)


default_provider = InstanceProvider()
"""Process-wide provider used when ``ResolverConfig.provider`` is ``None``."""


__all__ = ["InstanceProvider", "Provider", "default_provider"]
