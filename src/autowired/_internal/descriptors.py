from __future__ import annotations

import inspect
import logging
import sys
import types
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from inspect import Parameter
from typing import Any, Union, get_args, get_origin, get_type_hints

from autowired._internal.type_checks import ConcreteTypePolicy
from autowired._internal.type_locator import TypeLocator, type_identifier
from autowired.markers import (
    AutowiredField,
    annotation_metadata,
    autowired_annotation_target,
    documentation_strings,
    has_autowired_marker,
    is_autowired_doc,
)

logger = logging.getLogger(__name__)

_MISSING_ANNOTATION: Any = object()
_CONSTRUCTOR_MEMBER_NAMES = ("__new__", "__init__")
_UNION_ORIGINS: tuple[Any, ...] = (Union, types.UnionType)


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    """Describe one callable parameter as seen by the argument resolver."""

    name: str
    kind: Any
    """One of the ``inspect.Parameter`` kinds."""
    declared_type: type[Any] | None = None
    """Class named by the annotation, ``None`` for primitive or untyped parameters."""

    @property
    def type_identifier(self) -> str | None:
        if self.declared_type is None:
            return None
        return type_identifier(self.declared_type)

    @property
    def is_variadic(self) -> bool:
        return self.kind in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)


@dataclass(frozen=True, slots=True)
class MemberDescriptor:
    """Describe one class attribute as seen by the attribute injector."""

    name: str
    owner: type[Any]
    """Class in the MRO that declares the member."""
    declared_type: type[Any] | None = None
    """Non-builtin class named by the annotation, if any."""
    declared_name: str | None = None
    """Unresolved string annotation, kept as a type identifier candidate."""
    docs: tuple[str, ...] = field(default=())
    is_marked: bool = False

    @property
    def namespace(self) -> Mapping[str, Any]:
        """Return the globals of the module declaring the member."""
        module = sys.modules.get(self.owner.__module__)
        if module is None:
            return {}
        return vars(module)


def unwrap_annotation(annotation: Any) -> Any:
    """Strip ``Annotated`` metadata and a single ``None`` option from optional unions."""
    inner, _metadata = annotation_metadata(annotation)
    if get_origin(inner) in _UNION_ORIGINS:
        options = [option for option in get_args(inner) if option is not type(None)]
        if len(options) == 1:
            return unwrap_annotation(options[0])
    return inner


def evaluate_annotation(
    annotation: str,
    globalns: Mapping[str, Any] | None,
    localns: Mapping[str, Any] | None = None,
) -> Any:
    """Evaluate one string annotation, returning it unchanged when it cannot be evaluated.

    Annotations are evaluated one at a time so a single unresolvable name does
    not hide the others.
    """
    globals_dict = globalns if isinstance(globalns, dict) else dict(globalns or {})
    try:
        return eval(annotation, globals_dict, localns)  # noqa: S307
    except (AttributeError, NameError, TypeError, SyntaxError):
        logger.debug("Keeping unevaluated annotation %r", annotation)
        return annotation


@dataclass(frozen=True, slots=True)
class ParameterInspector:
    """Build parameter descriptors for constructors and methods."""

    policy: ConcreteTypePolicy = field(default_factory=ConcreteTypePolicy)
    locator: TypeLocator = field(default_factory=TypeLocator)

    def describe_constructor(self, cls: type[Any]) -> list[ParameterDescriptor]:
        """Describe the parameters ``cls(...)`` accepts.

        Args:
            cls: Class whose constructor signature is inspected.

        """
        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError):
            logger.debug("No inspectable constructor signature for %s", cls.__qualname__)
            return []
        hints = self._constructor_hints(cls)
        return self._describe(signature, hints, namespace=self._module_namespace(cls))

    def describe_callable(self, function: Callable[..., Any]) -> list[ParameterDescriptor]:
        """Describe the parameters of a bound method or plain callable.

        Args:
            function: Callable whose signature is inspected. Bound methods omit ``self``.

        """
        try:
            signature = inspect.signature(function)
        except (TypeError, ValueError):
            return []
        hints, _error = self._resolved_type_hints(function)
        namespace = getattr(inspect.unwrap(function), "__globals__", None)
        return self._describe(signature, hints, namespace=namespace)

    def _describe(
        self,
        signature: inspect.Signature,
        hints: Mapping[str, Any],
        *,
        namespace: Mapping[str, Any] | None,
    ) -> list[ParameterDescriptor]:
        descriptors: list[ParameterDescriptor] = []
        for parameter in signature.parameters.values():
            annotation = hints.get(parameter.name, _MISSING_ANNOTATION)
            if annotation is _MISSING_ANNOTATION and parameter.annotation is not Parameter.empty:
                annotation = parameter.annotation
            descriptors.append(
                ParameterDescriptor(
                    name=parameter.name,
                    kind=parameter.kind,
                    declared_type=self._declared_class(annotation, namespace),
                ),
            )
        return descriptors

    def _declared_class(
        self,
        annotation: Any,
        namespace: Mapping[str, Any] | None,
    ) -> type[Any] | None:
        if annotation is _MISSING_ANNOTATION:
            return None
        if isinstance(annotation, str):
            annotation = evaluate_annotation(annotation, namespace)
        if isinstance(annotation, str):
            located = self.locator.try_locate(annotation, namespace)
            if located is None:
                return None
            annotation = located
        candidate = unwrap_annotation(annotation)
        if self.policy.is_class_type(candidate):
            return candidate
        return None

    def _constructor_hints(self, cls: type[Any]) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        for member_name in _CONSTRUCTOR_MEMBER_NAMES:
            member = getattr(cls, member_name)
            member_hints, _error = self._resolved_type_hints(member)
            merged.update(member_hints)
        class_hints, _error = self._resolved_type_hints(cls)
        for name, annotation in class_hints.items():
            merged.setdefault(name, annotation)
        merged.pop("return", None)
        return merged

    def _resolved_type_hints(self, target: Any) -> tuple[dict[str, Any], Exception | None]:
        try:
            return get_type_hints(target, include_extras=True), None
        except (AttributeError, NameError, TypeError, SyntaxError) as error:
            return {}, error

    def _module_namespace(self, cls: type[Any]) -> Mapping[str, Any] | None:
        module = sys.modules.get(cls.__module__)
        if module is None:
            return None
        return vars(module)


@dataclass(frozen=True, slots=True)
class MemberInspector:
    """Build member descriptors for every annotated or ``autowired()`` class attribute."""

    policy: ConcreteTypePolicy = field(default_factory=ConcreteTypePolicy)

    def describe(self, cls: type[Any]) -> list[MemberDescriptor]:
        """Describe the members of ``cls`` across its MRO; the most derived declaration wins.

        Args:
            cls: Class whose attributes are inspected.

        """
        declarations: dict[str, tuple[type[Any], Any]] = {}
        for owner in reversed(cls.__mro__):
            if owner is object:
                continue
            annotations = self._annotations(owner)
            for name, annotation in annotations.items():
                declarations[name] = (owner, annotation)
            for name, value in vars(owner).items():
                if isinstance(value, AutowiredField) and name not in annotations:
                    declarations[name] = (owner, _MISSING_ANNOTATION)

        return [
            self._describe_member(cls, name, owner, annotation)
            for name, (owner, annotation) in declarations.items()
        ]

    def _describe_member(
        self,
        cls: type[Any],
        name: str,
        owner: type[Any],
        annotation: Any,
    ) -> MemberDescriptor:
        field_marker = self._field_marker(cls, name)
        declared_type: type[Any] | None = None
        declared_name: str | None = None
        docs: tuple[str, ...] = ()
        is_marked = field_marker is not None

        if isinstance(annotation, str):
            target_name = autowired_annotation_target(annotation)
            if target_name is not None:
                is_marked = True
                declared_name = target_name
            elif is_autowired_doc(annotation):
                docs = (annotation,)
            else:
                declared_name = annotation
        elif annotation is not _MISSING_ANNOTATION:
            _inner, metadata = annotation_metadata(annotation)
            docs = documentation_strings(metadata)
            is_marked = is_marked or has_autowired_marker(annotation)
            candidate = unwrap_annotation(annotation)
            if self.policy.is_class_type(candidate):
                declared_type = candidate

        if field_marker is not None and field_marker.doc:
            docs = (*docs, field_marker.doc)
        is_marked = is_marked or any(is_autowired_doc(doc) for doc in docs)

        return MemberDescriptor(
            name=name,
            owner=owner,
            declared_type=declared_type,
            declared_name=declared_name,
            docs=docs,
            is_marked=is_marked,
        )

    def _annotations(self, owner: type[Any]) -> dict[str, Any]:
        module = sys.modules.get(owner.__module__)
        globalns = vars(module) if module is not None else {}
        localns = {**vars(owner), owner.__name__: owner}
        return {
            name: (
                evaluate_annotation(annotation, globalns, localns)
                if isinstance(annotation, str)
                else annotation
            )
            for name, annotation in inspect.get_annotations(owner).items()
        }

    def _field_marker(self, cls: type[Any], name: str) -> AutowiredField | None:
        for owner in cls.__mro__:
            if name in vars(owner):
                value = vars(owner)[name]
                return value if isinstance(value, AutowiredField) else None
        return None


__all__ = [
    "MemberDescriptor",
    "MemberInspector",
    "ParameterDescriptor",
    "ParameterInspector",
    "evaluate_annotation",
    "unwrap_annotation",
]
