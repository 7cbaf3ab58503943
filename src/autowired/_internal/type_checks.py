from __future__ import annotations

import datetime
import decimal
import enum
import inspect
import pathlib
import types
import uuid
from dataclasses import dataclass
from typing import Any, TypeGuard

_CONSTRUCTOR_OWNER = object
_PRIMITIVE_MODULES = frozenset({"builtins", "typing", "typing_extensions"})


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_public_name(name: str) -> bool:
    """Return true when a member name is part of the public surface.

    Dunder names count as public protocol methods; any other leading
    underscore marks the member as private.
    """
    if name.startswith("__") and name.endswith("__"):
        return True
    return not name.startswith("_")


def has_own_constructor(cls: type[Any]) -> bool:
    """Return true when ``cls`` or a base other than ``object`` defines a constructor."""
    return (
        cls.__init__ is not _CONSTRUCTOR_OWNER.__init__
        or cls.__new__ is not _CONSTRUCTOR_OWNER.__new__
    )


@dataclass(frozen=True, slots=True)
class ConcreteTypePolicy:
    """Decide which declared types are classes the resolver may build."""

    value_base_types: tuple[type[Any], ...] = (
        pathlib.PurePath,
        datetime.datetime,
        datetime.date,
        datetime.time,
        datetime.timedelta,
        uuid.UUID,
        decimal.Decimal,
        enum.Enum,
    )

    def is_class_type(self, candidate: object) -> TypeGuard[type[Any]]:
        """Return true when candidate is a non-primitive class type.

        Builtins, typing special forms such as ``Any`` and value types are treated
        like primitives: they never get constructed automatically.

        Args:
            candidate: Value being checked for eligibility or runtime type constraints.

        """
        if not is_runtime_class(candidate):
            return False
        if candidate.__module__ in _PRIMITIVE_MODULES:
            return False
        if issubclass(candidate, type):
            return False
        return not issubclass(candidate, self.value_base_types)

    def is_instantiable(self, candidate: type[Any]) -> bool:
        """Return true when a class type can be built without further configuration.

        Args:
            candidate: Class type already accepted by ``is_class_type``.

        """
        if inspect.isabstract(candidate):
            return False
        return not getattr(candidate, "_is_protocol", False)


__all__ = [
    "ConcreteTypePolicy",
    "has_own_constructor",
    "is_public_name",
    "is_runtime_class",
]
