from autowired._internal.type_locator import type_identifier
from autowired.config import (
    ResolverConfig,
    get_default_config,
    set_auto_injection_attributes,
    set_default_config,
)
from autowired.exceptions import (
    AutowiredAccessError,
    AutowiredConfigurationError,
    AutowiredError,
    AutowiredResolutionDepthError,
    AutowiredResolutionError,
)
from autowired.markers import Autowired, AutowiredMarker, autowired
from autowired.provider import InstanceProvider, Provider, default_provider
from autowired.resolver import CONSTRUCTOR, Resolver, create, new

__all__ = [
    "CONSTRUCTOR",
    "Autowired",
    "AutowiredAccessError",
    "AutowiredConfigurationError",
    "AutowiredError",
    "AutowiredMarker",
    "AutowiredResolutionDepthError",
    "AutowiredResolutionError",
    "InstanceProvider",
    "Provider",
    "Resolver",
    "ResolverConfig",
    "autowired",
    "create",
    "default_provider",
    "get_default_config",
    "new",
    "set_auto_injection_attributes",
    "set_default_config",
    "type_identifier",
]
