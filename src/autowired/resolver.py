from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from typing import Any, TypeVar, overload

from autowired._internal.arguments import ArgumentResolver
from autowired._internal.attributes import AttributeInjector
from autowired._internal.descriptors import ParameterInspector
from autowired._internal.integrations.pydantic_settings import is_pydantic_settings_subclass
from autowired._internal.trace import ResolutionTrace
from autowired._internal.type_checks import has_own_constructor, is_public_name
from autowired._internal.type_locator import TypeLocator, type_identifier
from autowired.config import ResolverConfig, get_default_config
from autowired.config import set_auto_injection_attributes as _set_auto_injection_attributes
from autowired.exceptions import AutowiredAccessError, AutowiredResolutionError

T = TypeVar("T")

logger = logging.getLogger(__name__)

CONSTRUCTOR = "__init__"
"""Reserved method name that makes ``invoke_method`` build a new instance."""

_PARAMETER_INSPECTOR = ParameterInspector()
_TYPE_LOCATOR = TypeLocator()


class Resolver:
    """Resolve one autowiring request and hold its resulting instance.

    The target may be a class, a type identifier string (``"module.QualName"``
    or any key known to the provider), or an existing instance. Loading
    follows a fixed precedence: an existing instance is reused as-is, then the
    provider is asked for the type identifier, and only then is the class
    constructed with autowired constructor arguments. When attribute injection
    is enabled, every attribute marked with ``Autowired[T]``/``autowired()``
    is filled afterwards, on provider instances and reused instances too.

    Nothing is cached between calls: every resolution of a class builds a new
    object graph unless the provider short-circuits it.

    Examples:
        .. code-block:: python

            class Repository: ...


            class Service:
                def __init__(self, repository: Repository, retries: int = 3) -> None:
                    self.repository = repository
                    self.retries = retries


            service = Resolver(Service).instance
            assert isinstance(service.repository, Repository)

    """

    def __init__(
        self,
        target: Any,
        *,
        config: ResolverConfig | None = None,
        _trace: ResolutionTrace | None = None,
    ) -> None:
        """Load the target instance and autowire its attributes.

        Args:
            target: Class, type identifier string, or existing instance.
            config: Settings for this resolution tree. Defaults to a snapshot of
                the process default configuration.

        Raises:
            AutowiredResolutionError: When an identifier cannot be located or the
                graph nests deeper than ``config.max_depth``.
            AutowiredConfigurationError: When a marked attribute names no type.

        """
        self._config = config if config is not None else get_default_config()
        self._provider = self._config.effective_provider
        self._target_class: type[Any] | None = None

        if isinstance(target, type):
            self._target_class = target
            self._type_identifier = type_identifier(target)
        elif isinstance(target, str):
            self._type_identifier = target
        else:
            self._target_class = type(target)
            self._type_identifier = type_identifier(type(target))

        parent = _trace if _trace is not None else ResolutionTrace()
        self._trace = parent.enter(self._type_identifier, max_depth=self._config.max_depth)

        self._instance = self._load(target)

        if self._config.auto_inject_attributes:
            self._injector().inject(self._instance, self.target_class)

    @property
    def instance(self) -> Any:
        """Return the resolved instance."""
        return self._instance

    def get_instance(self) -> Any:
        """Return the resolved instance."""
        return self._instance

    @property
    def type_identifier(self) -> str:
        """Return the identifier the resolution was requested for."""
        return self._type_identifier

    @property
    def target_class(self) -> type[Any]:
        """Return the class being resolved, locating identifier strings on first use."""
        if self._target_class is None:
            self._target_class = _TYPE_LOCATOR.locate(self._type_identifier)
        return self._target_class

    @property
    def config(self) -> ResolverConfig:
        return self._config

    def invoke_method(self, method_name: str, overrides: Mapping[Any, Any] | None = None) -> Any:
        """Call a method of the target with autowired arguments.

        ``"__init__"`` builds and returns a new instance of the target class
        instead of calling anything on the held instance.

        Args:
            method_name: Name of the method, or ``"__init__"`` for construction.
            overrides: Explicit argument values keyed by parameter name. Untyped
                parameters without a named entry take the first unused entry.

        Raises:
            AutowiredAccessError: When the method is private.
            AutowiredResolutionError: When the method does not exist.

        """
        cls = self.target_class
        if method_name == CONSTRUCTOR:
            return self._construct(cls, overrides)

        attribute_name = self._find_method(cls, method_name)
        if attribute_name is None:
            msg = f'Method "{method_name}" does not exist in "{self._type_identifier}".'
            raise AutowiredResolutionError(
                msg,
                type_identifier=self._type_identifier,
                method_name=method_name,
            )
        if not is_public_name(method_name):
            raise AutowiredAccessError(self._type_identifier, method_name)

        method = getattr(self._instance, attribute_name)
        parameters = _PARAMETER_INSPECTOR.describe_callable(method)
        args, kwargs = self._arguments().resolve(parameters, overrides).call_arguments()
        return method(*args, **kwargs)

    @overload
    @classmethod
    def new(cls, target: type[T], *, config: ResolverConfig | None = None) -> T: ...

    @overload
    @classmethod
    def new(cls, target: Any, *, config: ResolverConfig | None = None) -> Any: ...

    @classmethod
    def new(cls, target: Any, *, config: ResolverConfig | None = None) -> Any:
        """Resolve ``target`` and return the instance in one call."""
        return cls(target, config=config).instance

    @staticmethod
    def set_auto_injection_attributes(enabled: bool) -> None:  # noqa: FBT001
        """Toggle attribute injection in the process default configuration."""
        _set_auto_injection_attributes(enabled)

    def _load(self, target: Any) -> Any:
        if not isinstance(target, (type, str)):
            logger.debug("Reusing existing instance of %s", self._type_identifier)
            return target
        if self._provider.exists(self._type_identifier):
            logger.debug("Provider supplied %s", self._type_identifier)
            instance = self._provider.get(self._type_identifier)
            if self._target_class is None:
                self._target_class = type(instance)
            return instance
        return self.invoke_method(CONSTRUCTOR)

    def _construct(self, cls: type[Any], overrides: Mapping[Any, Any] | None) -> Any:
        if not has_own_constructor(cls):
            logger.debug("%s has no constructor, creating a bare instance", self._type_identifier)
            return cls.__new__(cls)

        if is_pydantic_settings_subclass(cls):
            return cls(**dict(overrides or {}))

        parameters = _PARAMETER_INSPECTOR.describe_constructor(cls)
        args, kwargs = self._arguments().resolve(parameters, overrides).call_arguments()
        logger.debug("Constructing %s", self._type_identifier)
        return cls(*args, **kwargs)

    def _find_method(self, cls: type[Any], method_name: str) -> str | None:
        candidates = [method_name]
        if method_name.startswith("__") and not method_name.endswith("__"):
            candidates.extend(
                f"_{owner.__name__.lstrip('_')}{method_name}" for owner in cls.__mro__
            )
        for candidate in candidates:
            try:
                attribute = inspect.getattr_static(cls, candidate)
            except AttributeError:
                continue
            if isinstance(attribute, (classmethod, staticmethod)) or callable(attribute):
                return candidate
        return None

    def _resolve_nested(self, target: Any) -> Any:
        return Resolver(target, config=self._config, _trace=self._trace).instance

    def _arguments(self) -> ArgumentResolver:
        return ArgumentResolver(provider=self._provider, resolve_nested=self._resolve_nested)

    def _injector(self) -> AttributeInjector:
        return AttributeInjector(provider=self._provider, resolve_nested=self._resolve_nested)


def create(target: Any, *, config: ResolverConfig | None = None) -> Resolver:
    """Start a top-level resolution for a class, identifier string, or instance.

    Examples:
        .. code-block:: python

            resolver = create(ReportService)
            report = resolver.invoke_method("build", {"year": 2024})

    """
    return Resolver(target, config=config)


@overload
def new(target: type[T], *, config: ResolverConfig | None = None) -> T: ...


@overload
def new(target: Any, *, config: ResolverConfig | None = None) -> Any: ...


def new(target: Any, *, config: ResolverConfig | None = None) -> Any:
    """Resolve ``target`` and return the instance; shorthand for ``create(target).instance``."""
    return Resolver(target, config=config).instance


__all__ = ["CONSTRUCTOR", "Resolver", "create", "new"]
