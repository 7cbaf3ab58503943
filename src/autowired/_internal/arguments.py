from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from inspect import Parameter
from typing import Any

from autowired._internal.descriptors import ParameterDescriptor
from autowired._internal.type_checks import ConcreteTypePolicy
from autowired._internal.type_locator import type_identifier
from autowired.provider import Provider

logger = logging.getLogger(__name__)

NestedResolver = Callable[[Any], Any]
"""Callable building a fresh, fully autowired instance for a class or identifier."""


@dataclass(frozen=True, slots=True)
class ResolvedArguments:
    """Argument values keyed by parameter name, in declaration order.

    Omitted parameters have no entry. ``call_arguments`` turns the mapping
    into ``*args``/``**kwargs`` that respect positional-only and variadic
    parameters.
    """

    parameters: tuple[ParameterDescriptor, ...] = ()
    values: dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.values)

    def __contains__(self, name: object) -> bool:
        return name in self.values

    def __getitem__(self, name: str) -> Any:
        return self.values[name]

    def call_arguments(self) -> tuple[list[Any], dict[str, Any]]:
        """Split values into positional and keyword arguments.

        Values are passed positionally while no earlier positional parameter
        was omitted, so a trailing ``*args`` value can still be spread.
        """
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        positional_gap = False

        for parameter in self.parameters:
            present = parameter.name in self.values
            value = self.values.get(parameter.name)

            if parameter.kind in (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD):
                if not present:
                    positional_gap = True
                elif not positional_gap:
                    args.append(value)
                elif parameter.kind is Parameter.POSITIONAL_OR_KEYWORD:
                    kwargs[parameter.name] = value
            elif parameter.kind is Parameter.VAR_POSITIONAL:
                if present and not positional_gap:
                    args.extend(value)
            elif parameter.kind is Parameter.KEYWORD_ONLY:
                if present:
                    kwargs[parameter.name] = value
            elif present:
                kwargs.update(value)

        return args, kwargs


@dataclass(frozen=True, slots=True)
class ArgumentResolver:
    """Fill a parameter list from explicit overrides and recursive construction.

    Overrides form one ordered pool. For each parameter, in declaration order:

    1. an override still in the pool under the parameter name is taken;
    2. a parameter annotated with a class is built through ``resolve_nested``
       when the class is concrete or known to the provider, and silently
       omitted otherwise;
    3. any other parameter takes the first override left in the pool,
       whatever its key.

    Every override is used at most once. Rule 3 does not skip overrides named
    after later parameters: with ``def run(a, b)`` and ``{"b": 2, "x": 1}``,
    ``a`` takes ``2`` and ``b`` then takes ``1``. Put overrides in declaration
    order, or name every untyped parameter, to avoid surprises.
    """

    provider: Provider
    resolve_nested: NestedResolver
    policy: ConcreteTypePolicy = field(default_factory=ConcreteTypePolicy)

    def resolve(
        self,
        parameters: Sequence[ParameterDescriptor],
        overrides: Mapping[Any, Any] | None = None,
    ) -> ResolvedArguments:
        """Return the argument values for ``parameters``.

        Args:
            parameters: Descriptors in declaration order.
            overrides: Explicit values keyed by parameter name; untyped parameters
                without a named entry take the first unused entry.

        """
        if not parameters:
            return ResolvedArguments()

        remaining = dict(overrides or {})
        values: dict[str, Any] = {}

        for parameter in parameters:
            if parameter.name in remaining:
                values[parameter.name] = remaining.pop(parameter.name)
                continue

            if parameter.is_variadic:
                continue

            if parameter.declared_type is not None:
                if self._can_resolve(parameter.declared_type):
                    values[parameter.name] = self.resolve_nested(parameter.declared_type)
                else:
                    logger.debug(
                        "Omitting parameter %s: %s is neither instantiable nor provided",
                        parameter.name,
                        parameter.type_identifier,
                    )
                continue

            if remaining:
                key = next(iter(remaining))
                values[parameter.name] = remaining.pop(key)
                logger.debug("Parameter %s consumed override %r positionally", parameter.name, key)

        return ResolvedArguments(parameters=tuple(parameters), values=values)

    def _can_resolve(self, declared_type: type[Any]) -> bool:
        if self.policy.is_instantiable(declared_type):
            return True
        return self.provider.exists(type_identifier(declared_type))


__all__ = ["ArgumentResolver", "NestedResolver", "ResolvedArguments"]
