from __future__ import annotations

import builtins
import importlib
import logging
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from autowired._internal.type_checks import is_runtime_class
from autowired.exceptions import AutowiredResolutionError

logger = logging.getLogger(__name__)


def type_identifier(cls: type[Any]) -> str:
    """Return the ``module.QualName`` identifier used as the provider key for ``cls``.

    Examples:
        .. code-block:: python

            from collections import OrderedDict

            assert type_identifier(OrderedDict) == "collections.OrderedDict"

    """
    return f"{cls.__module__}.{cls.__qualname__}"


@dataclass(frozen=True, slots=True)
class TypeLocator:
    """Turn type identifier strings back into runtime classes.

    Bare names are looked up in the supplied namespace (usually the globals of
    the module that mentioned them). Dotted names are split into the longest
    importable module prefix and a qualified name walked attribute by
    attribute, so nested classes resolve as well.
    """

    def locate(self, identifier: str, namespace: Mapping[str, Any] | None = None) -> type[Any]:
        """Return the class named by ``identifier``.

        Args:
            identifier: Bare or dotted class name.
            namespace: Optional mapping consulted first for the leading name.

        Raises:
            AutowiredResolutionError: When no class matches the identifier.

        """
        located = self.try_locate(identifier, namespace)
        if located is None:
            msg = f"Unable to locate type '{identifier}'."
            raise AutowiredResolutionError(msg, type_identifier=identifier)
        return located

    def try_locate(
        self,
        identifier: str,
        namespace: Mapping[str, Any] | None = None,
    ) -> type[Any] | None:
        """Return the class named by ``identifier`` or ``None`` when it cannot be found."""
        identifier = identifier.strip()
        if not identifier:
            return None

        head, _, rest = identifier.partition(".")
        if namespace is not None and head in namespace:
            located = self._walk(namespace[head], rest)
            if located is not None:
                return located

        if "." not in identifier:
            builtin = getattr(builtins, identifier, None)
            return builtin if is_runtime_class(builtin) else None

        return self._locate_dotted(identifier)

    def _locate_dotted(self, identifier: str) -> type[Any] | None:
        parts = identifier.split(".")
        for split_at in range(len(parts) - 1, 0, -1):
            module_name = ".".join(parts[:split_at])
            module = sys.modules.get(module_name)
            if module is None:
                try:
                    module = importlib.import_module(module_name)
                except ImportError:
                    continue
            located = self._walk(module, ".".join(parts[split_at:]))
            if located is not None:
                logger.debug("Located type %s in module %s", identifier, module_name)
                return located
        return None

    def _walk(self, root: object, qualname: str) -> type[Any] | None:
        current = root
        if qualname:
            for attribute in qualname.split("."):
                current = getattr(current, attribute, None)
                if current is None:
                    return None
        return current if is_runtime_class(current) else None


__all__ = ["TypeLocator", "type_identifier"]
