from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from autowired._internal.arguments import NestedResolver
from autowired._internal.descriptors import MemberDescriptor, MemberInspector
from autowired._internal.type_checks import ConcreteTypePolicy
from autowired._internal.type_locator import TypeLocator
from autowired.exceptions import AutowiredConfigurationError, AutowiredResolutionError
from autowired.markers import parse_type_hint
from autowired.provider import Provider

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AttributeInjector:
    """Write autowired dependencies into the marked attributes of an instance.

    Only members carrying the injection marker are touched. Each one gets a
    fresh, fully resolved instance of its target type; members are processed
    independently, so no marked member may rely on another being set first.
    """

    provider: Provider
    resolve_nested: NestedResolver
    members: MemberInspector = field(default_factory=MemberInspector)
    locator: TypeLocator = field(default_factory=TypeLocator)
    policy: ConcreteTypePolicy = field(default_factory=ConcreteTypePolicy)

    def inject(self, instance: object, cls: type[Any]) -> None:
        """Resolve and assign every marked member of ``cls`` on ``instance``.

        Args:
            instance: Object receiving the dependencies.
            cls: Class whose members are scanned, normally ``type(instance)``.

        Raises:
            AutowiredConfigurationError: When a marked member names no type.

        """
        for member in self.members.describe(cls):
            if not member.is_marked:
                continue
            target = self.target_for(member)
            value = self.resolve_nested(target)
            self._assign(instance, member.name, value)
            logger.debug("Autowired %s.%s", cls.__qualname__, member.name)

    def target_for(self, member: MemberDescriptor) -> type[Any] | str:
        """Return what to resolve for ``member``: a class, or an identifier the provider serves.

        The declared annotation wins when it names a non-builtin class. Otherwise
        an unresolved string annotation and then ``type: <TypeName>`` documentation
        hints are tried in order.
        """
        if member.declared_type is not None:
            return member.declared_type

        candidates: list[str] = []
        if member.declared_name is not None:
            candidates.append(member.declared_name)
        for doc in member.docs:
            hint = parse_type_hint(doc)
            if hint is not None:
                candidates.append(hint)

        unlocated: str | None = None
        for candidate in candidates:
            if self.provider.exists(candidate):
                return candidate
            located = self.locator.try_locate(candidate, member.namespace)
            if located is None:
                unlocated = unlocated or candidate
            elif self.policy.is_class_type(located):
                return located

        if unlocated is not None:
            msg = (
                f"Unable to locate type '{unlocated}' for autowired attribute "
                f"'{member.name}' of '{member.owner.__qualname__}'."
            )
            raise AutowiredResolutionError(msg, type_identifier=unlocated)

        msg = (
            f"Document or type is missing in autowired attribute '{member.name}' "
            f"of '{member.owner.__qualname__}'."
        )
        raise AutowiredConfigurationError(msg, member_name=member.name)

    def _assign(self, instance: object, name: str, value: Any) -> None:
        try:
            setattr(instance, name, value)
        except AttributeError:
            # Frozen dataclasses and read-only descriptors.
            object.__setattr__(instance, name, value)


__all__ = ["AttributeInjector"]
