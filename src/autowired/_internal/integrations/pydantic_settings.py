from __future__ import annotations

import functools
import importlib
import warnings
from typing import Any

from autowired._internal.type_checks import is_runtime_class

_SETTINGS_MODULES = ("pydantic_settings", "pydantic.v1")
_PYDANTIC_V1_WARNING_PATTERN = (
    r"Core Pydantic V1 functionality isn't compatible with Python 3\.14 or greater\."
)


def _load_base_settings(module_name: str) -> type[Any] | None:
    try:
        with warnings.catch_warnings():
            warnings.filterwarnings(
                "ignore",
                message=_PYDANTIC_V1_WARNING_PATTERN,
                category=UserWarning,
            )
            module = importlib.import_module(module_name)
    except ImportError:
        return None
    base_settings = getattr(module, "BaseSettings", None)
    if isinstance(base_settings, type):
        return base_settings
    return None


@functools.cache
def settings_bases() -> tuple[type[Any], ...]:
    """Return the settings base classes importable in this environment, without duplicates."""
    bases: list[type[Any]] = []
    for module_name in _SETTINGS_MODULES:
        candidate = _load_base_settings(module_name)
        if candidate is not None and candidate not in bases:
            bases.append(candidate)
    return tuple(bases)


def is_pydantic_settings_subclass(candidate: object) -> bool:
    """Return whether a class is a supported Pydantic settings model.

    Both ``pydantic_settings.BaseSettings`` and the legacy
    ``pydantic.v1.BaseSettings`` are recognized when installed. Without Pydantic
    this returns ``False`` for every candidate.

    The resolver calls settings classes with the explicit overrides as keyword
    arguments and skips constructor autowiring, so every other field value comes
    from the environment or the field default.

    Args:
        candidate: Object to test.

    """
    if not is_runtime_class(candidate):
        return False
    try:
        return any(issubclass(candidate, base) for base in settings_bases())
    except TypeError:
        return False


__all__ = ["is_pydantic_settings_subclass", "settings_bases"]
