from __future__ import annotations

import abc
from typing import Annotated, Any

import pytest

import autowired._internal.type_locator as type_locator_module
from autowired import (
    CONSTRUCTOR,
    Autowired,
    AutowiredAccessError,
    AutowiredConfigurationError,
    AutowiredResolutionDepthError,
    AutowiredResolutionError,
    InstanceProvider,
    Resolver,
    ResolverConfig,
    autowired,
    create,
    new,
    set_auto_injection_attributes,
    type_identifier,
)


class _Plain:
    def __init__(self) -> None:
        self.ready = True


class _NoConstructor:
    pass


class _Engine:
    pass


class _Wheels:
    pass


class _Car:
    def __init__(self, engine: _Engine) -> None:
        self.engine = engine


class _Garage:
    def __init__(self, car: _Car, capacity: int = 2) -> None:
        self.car = car
        self.capacity = capacity


class _Port(abc.ABC):
    @abc.abstractmethod
    def send(self, message: str) -> None: ...


class _ConsolePort(_Port):
    def send(self, message: str) -> None:
        return None


class _Notifier:
    def __init__(self, port: _Port | None = None) -> None:
        self.port = port


class _Service:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def configure(self, count: int, dep: _Engine) -> tuple[int, _Engine]:
        return count, dep

    def describe(self, name: Any, title: Any) -> str:
        return f"{title} {name}"

    def greet(self, prefix: Any, name: Any) -> str:
        return f"{prefix}, {name}"

    def collect(self, *items: Any, **options: Any) -> tuple[tuple[Any, ...], dict[str, Any]]:
        return items, options

    def pair(self, first: Any, second: Any) -> tuple[Any, Any]:
        return first, second

    def positional(self, first: Any, second: Any, /) -> list[Any]:
        return [first, second]

    @staticmethod
    def build(engine: _Engine) -> _Engine:
        return engine

    def _hidden(self) -> str:
        return "hidden"

    def __secret(self) -> str:
        return "secret"

    def __call__(self) -> str:
        return "called"


class _WithMembers:
    engine: Autowired[_Engine]
    wheels = autowired(doc="type: _Wheels")
    label: str = "unchanged"
    spare: _Wheels | None = None


class _ChildWithMembers(_WithMembers):
    extra: Autowired[_Car]


class _DocMarked:
    engine: Annotated[Any, "@AutoWired type: _Engine"]


class _UntypedMember:
    thing = autowired()


class _BuiltinMember:
    count: Annotated[int, "@autowired"]


class _PrivateMember:
    __engine: Autowired[_Engine]

    def engine(self) -> _Engine:
        return self.__engine


class _SlottedMember:
    __slots__ = ("engine",)
    engine: Autowired[_Engine]


class _Served:
    engine: Autowired[_Engine]


class _Factory:
    @classmethod
    def build(cls, count: int, engine: _Engine) -> tuple[type[_Factory], int, _Engine]:
        return cls, count, engine


class _PartlyUnresolvable:
    missing: _NotDefinedAnywhere  # noqa: F821
    engine: Autowired[_Engine]


class _SelfReferencing:
    def __init__(self, other: _SelfReferencing) -> None:
        self.other = other


class _CycleLeft:
    right: Autowired[_CycleRight]


class _CycleRight:
    left: Autowired[_CycleLeft]


class _ConstructedWithMembers:
    engine: Autowired[_Engine]

    def __init__(self, car: _Car) -> None:
        self.car = car


class TestInstanceLoading:
    def test_zero_argument_constructor_produces_instance(self, config: ResolverConfig) -> None:
        instance = create(_Plain, config=config).get_instance()

        assert isinstance(instance, _Plain)
        assert instance.ready is True

    def test_class_without_constructor_produces_bare_instance(
        self,
        config: ResolverConfig,
    ) -> None:
        instance = new(_NoConstructor, config=config)

        assert isinstance(instance, _NoConstructor)

    def test_existing_instance_is_reused(self, config: ResolverConfig) -> None:
        existing = _Plain()

        assert new(existing, config=config) is existing

    def test_existing_instance_receives_attribute_injection(
        self,
        config: ResolverConfig,
    ) -> None:
        existing = _WithMembers()

        resolver = create(existing, config=config)

        assert resolver.instance is existing
        assert isinstance(existing.engine, _Engine)

    def test_provider_instance_wins_over_construction(
        self,
        config: ResolverConfig,
        provider: InstanceProvider,
    ) -> None:
        engine = _Engine()
        provider.add(_Engine, engine)

        car = new(_Car, config=config)

        assert car.engine is engine
        assert new(_Engine, config=config) is engine

    def test_provider_instance_receives_attribute_injection(
        self,
        config: ResolverConfig,
        provider: InstanceProvider,
    ) -> None:
        served = _Served()
        provider.add(_Served, served)

        instance = create(_Served, config=config).get_instance()

        assert instance is served
        assert isinstance(served.engine, _Engine)

    def test_provider_serves_identifiers_without_importing(
        self,
        config: ResolverConfig,
        provider: InstanceProvider,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        mailer = _Plain()
        provider.add("app.mailer", mailer)

        def _fail_import(name: str) -> Any:
            msg = f"unexpected import of {name}"
            raise AssertionError(msg)

        monkeypatch.setattr(type_locator_module.importlib, "import_module", _fail_import)

        assert new("app.mailer", config=config) is mailer

    def test_identifier_string_is_located_and_constructed(self, config: ResolverConfig) -> None:
        resolver = create(type_identifier(_Car), config=config)

        assert isinstance(resolver.instance, _Car)
        assert resolver.target_class is _Car
        assert resolver.type_identifier == type_identifier(_Car)

    def test_unknown_identifier_raises_resolution_error(self, config: ResolverConfig) -> None:
        with pytest.raises(AutowiredResolutionError) as exc_info:
            new("missing_module_for_autowired.Nothing", config=config)

        assert exc_info.value.type_identifier == "missing_module_for_autowired.Nothing"

    def test_resolver_new_matches_module_function(self, config: ResolverConfig) -> None:
        assert isinstance(Resolver.new(_Plain, config=config), _Plain)


class TestConstructorArguments:
    def test_class_typed_parameter_is_autowired(self, config: ResolverConfig) -> None:
        car = new(_Car, config=config)

        assert isinstance(car, _Car)
        assert isinstance(car.engine, _Engine)

    def test_nested_dependencies_are_autowired_recursively(self, config: ResolverConfig) -> None:
        garage = new(_Garage, config=config)

        assert isinstance(garage.car.engine, _Engine)
        assert garage.capacity == 2

    def test_each_resolution_builds_a_fresh_graph(self, config: ResolverConfig) -> None:
        first = new(_Car, config=config)
        second = new(_Car, config=config)

        assert first is not second
        assert first.engine is not second.engine

    def test_abstract_parameter_is_omitted(self, config: ResolverConfig) -> None:
        notifier = new(_Notifier, config=config)

        assert notifier.port is None

    def test_abstract_parameter_uses_provider_instance(
        self,
        config: ResolverConfig,
        provider: InstanceProvider,
    ) -> None:
        port = _ConsolePort()
        provider.add(_Port, port)

        notifier = new(_Notifier, config=config)

        assert notifier.port is port

    def test_constructor_overrides_win_over_autowiring(self, config: ResolverConfig) -> None:
        engine = _Engine()
        resolver = create(_Plain, config=config)
        resolver_for_car = create(_Car, config=config)

        car = resolver_for_car.invoke_method(CONSTRUCTOR, {"engine": engine})

        assert car.engine is engine
        assert car is not resolver_for_car.instance
        assert isinstance(resolver.invoke_method(CONSTRUCTOR), _Plain)


class TestInvokeMethod:
    def test_override_and_autowired_parameter(self, config: ResolverConfig) -> None:
        resolver = create(_Service, config=config)

        count, dep = resolver.invoke_method("configure", {"count": 5})

        assert count == 5
        assert isinstance(dep, _Engine)

    def test_untyped_parameters_consume_unmatched_overrides_in_order(
        self,
        config: ResolverConfig,
    ) -> None:
        resolver = create(_Service, config=config)

        assert resolver.invoke_method("describe", {"x": "Ada", "y": "Dr."}) == "Dr. Ada"

    def test_untyped_parameter_takes_first_remaining_override_whatever_its_key(
        self,
        config: ResolverConfig,
    ) -> None:
        resolver = create(_Service, config=config)

        assert resolver.invoke_method("pair", {"second": 2, "x": 1}) == (2, 1)
        assert resolver.invoke_method("greet", {"name": "Ann", "extra": "Hi"}) == "Ann, Hi"

    def test_named_overrides_in_declaration_order_bind_by_name(
        self,
        config: ResolverConfig,
    ) -> None:
        resolver = create(_Service, config=config)

        assert resolver.invoke_method("pair", {"first": 1, "second": 2}) == (1, 2)

    def test_variadic_parameters_take_named_overrides(self, config: ResolverConfig) -> None:
        resolver = create(_Service, config=config)

        items, options = resolver.invoke_method(
            "collect",
            {"items": (1, 2), "options": {"flag": True}},
        )

        assert items == (1, 2)
        assert options == {"flag": True}

    def test_positional_only_parameters(self, config: ResolverConfig) -> None:
        resolver = create(_Service, config=config)

        assert resolver.invoke_method("positional", {0: "a", 1: "b"}) == ["a", "b"]

    def test_static_method_is_autowired(self, config: ResolverConfig) -> None:
        resolver = create(_Service, config=config)

        assert isinstance(resolver.invoke_method("build"), _Engine)

    def test_class_method_is_autowired(self, config: ResolverConfig) -> None:
        resolver = create(_Factory, config=config)

        owner, count, engine = resolver.invoke_method("build", {"count": 5})

        assert owner is _Factory
        assert count == 5
        assert isinstance(engine, _Engine)

    def test_dunder_method_is_public(self, config: ResolverConfig) -> None:
        resolver = create(_Service, config=config)

        assert resolver.invoke_method("__call__") == "called"

    @pytest.mark.parametrize("method_name", ["_hidden", "__secret"])
    def test_private_method_raises_access_error(
        self,
        config: ResolverConfig,
        method_name: str,
    ) -> None:
        resolver = create(_Service, config=config)

        with pytest.raises(AutowiredAccessError) as exc_info:
            resolver.invoke_method(method_name)

        assert exc_info.value.method_name == method_name
        assert "not accessible" in str(exc_info.value)

    def test_missing_method_raises_resolution_error(self, config: ResolverConfig) -> None:
        resolver = create(_Service, config=config)

        with pytest.raises(AutowiredResolutionError) as exc_info:
            resolver.invoke_method("launch")

        message = str(exc_info.value)
        assert "launch" in message
        assert type_identifier(_Service) in message
        assert exc_info.value.method_name == "launch"


class TestAttributeInjection:
    def test_marked_members_are_injected(self, config: ResolverConfig) -> None:
        instance = new(_WithMembers, config=config)

        assert isinstance(instance.engine, _Engine)
        assert isinstance(instance.wheels, _Wheels)

    def test_unmarked_members_are_untouched(self, config: ResolverConfig) -> None:
        instance = new(_WithMembers, config=config)

        assert instance.label == "unchanged"
        assert instance.spare is None
        assert "label" not in vars(instance)

    def test_inherited_marked_members_are_injected(self, config: ResolverConfig) -> None:
        instance = new(_ChildWithMembers, config=config)

        assert isinstance(instance.engine, _Engine)
        assert isinstance(instance.extra.engine, _Engine)

    def test_documentation_marker_is_case_insensitive(self, config: ResolverConfig) -> None:
        instance = new(_DocMarked, config=config)

        assert isinstance(instance.engine, _Engine)

    def test_member_without_type_raises_configuration_error(
        self,
        config: ResolverConfig,
    ) -> None:
        with pytest.raises(AutowiredConfigurationError) as exc_info:
            new(_UntypedMember, config=config)

        assert exc_info.value.member_name == "thing"
        assert "thing" in str(exc_info.value)

    def test_builtin_member_type_without_hint_raises_configuration_error(
        self,
        config: ResolverConfig,
    ) -> None:
        with pytest.raises(AutowiredConfigurationError):
            new(_BuiltinMember, config=config)

    def test_private_member_is_injected(self, config: ResolverConfig) -> None:
        instance = new(_PrivateMember, config=config)

        assert isinstance(instance.engine(), _Engine)

    def test_slotted_member_is_injected(self, config: ResolverConfig) -> None:
        instance = new(_SlottedMember, config=config)

        assert isinstance(instance.engine, _Engine)

    def test_constructor_and_attribute_injection_combine(self, config: ResolverConfig) -> None:
        instance = new(_ConstructedWithMembers, config=config)

        assert isinstance(instance.car.engine, _Engine)
        assert isinstance(instance.engine, _Engine)

    def test_function_local_class_is_injected(self, config: ResolverConfig) -> None:
        class _LocalHolder:
            engine: Autowired[_Engine]

        instance = new(_LocalHolder, config=config)

        assert isinstance(instance.engine, _Engine)

    def test_member_naming_function_local_class_raises_instead_of_being_skipped(
        self,
        config: ResolverConfig,
    ) -> None:
        class _LocalDependency:
            pass

        class _LocalHolder:
            dependency: Autowired[_LocalDependency]

        with pytest.raises(AutowiredResolutionError) as exc_info:
            new(_LocalHolder, config=config)

        assert exc_info.value.type_identifier == "_LocalDependency"
        assert "dependency" in str(exc_info.value)

    def test_member_naming_function_local_class_can_be_provided(
        self,
        config: ResolverConfig,
        provider: InstanceProvider,
    ) -> None:
        class _LocalDependency:
            pass

        class _LocalHolder:
            dependency: Autowired[_LocalDependency]

        dependency = _LocalDependency()
        provider.add("_LocalDependency", dependency)

        instance = new(_LocalHolder, config=config)

        assert instance.dependency is dependency

    def test_unresolvable_annotation_does_not_hide_marked_members(
        self,
        config: ResolverConfig,
    ) -> None:
        instance = new(_PartlyUnresolvable, config=config)

        assert isinstance(instance.engine, _Engine)
        assert "missing" not in vars(instance)

    def test_disabled_injection_leaves_members_unset(
        self,
        config_without_injection: ResolverConfig,
    ) -> None:
        instance = new(_WithMembers, config=config_without_injection)

        assert "engine" not in vars(instance)
        with pytest.raises(AttributeError):
            _ = instance.wheels

    def test_process_toggle_disables_injection(self) -> None:
        set_auto_injection_attributes(False)

        instance = new(_WithMembers)

        assert not hasattr(instance, "engine")
        assert not hasattr(instance, "wheels")

    def test_process_toggle_does_not_affect_explicit_config(
        self,
        config: ResolverConfig,
    ) -> None:
        Resolver.set_auto_injection_attributes(False)

        instance = new(_WithMembers, config=config)

        assert isinstance(instance.engine, _Engine)


class TestDepthGuard:
    def test_self_referencing_constructor_raises_depth_error(
        self,
        provider: InstanceProvider,
    ) -> None:
        config = ResolverConfig(max_depth=5, provider=provider)

        with pytest.raises(AutowiredResolutionDepthError) as exc_info:
            new(_SelfReferencing, config=config)

        assert len(exc_info.value.trace) == 6
        assert set(exc_info.value.trace) == {type_identifier(_SelfReferencing)}
        assert "Dependency cycle or excessive depth" in str(exc_info.value)

    def test_attribute_cycle_raises_depth_error_instead_of_recursion_error(
        self,
        config: ResolverConfig,
    ) -> None:
        with pytest.raises(AutowiredResolutionDepthError) as exc_info:
            new(_CycleLeft, config=config)

        assert isinstance(exc_info.value, AutowiredResolutionError)
        assert exc_info.value.trace[:2] == (
            type_identifier(_CycleLeft),
            type_identifier(_CycleRight),
        )

    def test_cycle_through_provider_instance_raises_depth_error(
        self,
        config: ResolverConfig,
        provider: InstanceProvider,
    ) -> None:
        provider.add(_CycleRight, _CycleRight())

        with pytest.raises(AutowiredResolutionDepthError) as exc_info:
            new(_CycleLeft, config=config)

        assert set(exc_info.value.trace) == {
            type_identifier(_CycleLeft),
            type_identifier(_CycleRight),
        }
