from __future__ import annotations


class AutowiredError(Exception):
    """Represent a base class for all autowiring failures.

    Catch this type when you want to handle any autowiring error path without
    matching each concrete exception class individually.
    """


class AutowiredAccessError(AutowiredError):
    """Signal an attempt to invoke a method that is not publicly callable.

    Raised by ``Resolver.invoke_method`` when the requested method exists on
    the target class but its name marks it as private (a leading underscore
    that is not a dunder). The constructor is exempt.

    Typical fix is exposing a public wrapper method on the target class.
    """

    def __init__(self, type_identifier: str, method_name: str) -> None:
        self.type_identifier = type_identifier
        self.method_name = method_name
        super().__init__(
            f"Method '{method_name}' of '{type_identifier}' is not accessible.",
        )


class AutowiredResolutionError(AutowiredError):
    """Signal that a type or method could not be resolved.

    Raised by ``Resolver.invoke_method`` when the requested method does not
    exist on the target class, and by ``create``/``new`` when a type
    identifier string cannot be located.

    Typical fixes include checking the method name, importing the module that
    defines the target class, or registering an instance for the identifier in
    the provider.
    """

    def __init__(
        self,
        message: str,
        *,
        type_identifier: str | None = None,
        method_name: str | None = None,
    ) -> None:
        self.type_identifier = type_identifier
        self.method_name = method_name
        super().__init__(message)


class AutowiredResolutionDepthError(AutowiredResolutionError):
    """Signal that nested resolution went deeper than ``ResolverConfig.max_depth``.

    Cycles are not detected explicitly: a type that depends on itself, directly
    or through other types, keeps nesting until this guard trips. The ``trace``
    attribute holds the chain of type identifiers that led here.

    Typical fixes include breaking the cycle with a provider-registered
    instance or raising ``max_depth`` for legitimately deep graphs.
    """

    def __init__(self, trace: tuple[str, ...], max_depth: int) -> None:
        self.trace = trace
        self.max_depth = max_depth
        path = " -> ".join(trace)
        super().__init__(
            f"Dependency cycle or excessive depth (max_depth={max_depth}): {path}",
            type_identifier=trace[-1] if trace else None,
        )


class AutowiredConfigurationError(AutowiredError):
    """Signal invalid autowiring configuration.

    Raised by the attribute injector when a member is marked for autowiring
    but neither its annotation nor its documentation names a type, and by
    ``ResolverConfig`` for invalid settings.

    Typical fixes include annotating the member with a concrete class
    (``service: Autowired[Service]``) or documenting it
    (``autowired(doc="type: Service")``).
    """

    def __init__(self, message: str, *, member_name: str | None = None) -> None:
        self.member_name = member_name
        super().__init__(message)
