# Public API
from .binder import Binder, BindingSettings, TypedBinder
from .binding import Binding, Declaration, Generator
from .bootstrap import BootstrapAssembler, bootstrap
from .environment import Environment
from .exceptions import (
    AmbiguousBindingError,
    AmbiguousResolutionError,
    BootstrapError,
    ContainerClosedError,
    DeclarationError,
    DependencyCycleError,
    NoResourceError,
    NotConstructableError,
    ReferenceLoopBindingError,
    ReferenceLoopError,
    ResolutionContextError,
    ResolutionError,
    SilkInjectionError,
    SupplyError,
    UnknownScopeError,
    UnresolvedRequirementError,
    UnstableDependencyError,
)
from .generic_type import GenericType
from .injector import Injector
from .instance import Dependency, Injection, Instance
from .module import SilkModule
from .name import Name
from .resource import Packages, Resource, Target
from .scope import Scope, ScopeRegistry, Scopes
from .source import DeclarationType, Source

__all__ = [
    "bootstrap",
    "BootstrapAssembler",
    "Injector",
    "Environment",
    "SilkModule",
    "Binder",
    "BindingSettings",
    "TypedBinder",
    # Model
    "GenericType",
    "Name",
    "Instance",
    "Injection",
    "Dependency",
    "Packages",
    "Target",
    "Resource",
    "DeclarationType",
    "Source",
    "Declaration",
    "Binding",
    "Generator",
    "Scope",
    "Scopes",
    "ScopeRegistry",
    # Exceptions
    "SilkInjectionError",
    "ContainerClosedError",
    "ResolutionContextError",
    "BootstrapError",
    "DeclarationError",
    "AmbiguousBindingError",
    "ReferenceLoopBindingError",
    "UnknownScopeError",
    "UnresolvedRequirementError",
    "ResolutionError",
    "NoResourceError",
    "AmbiguousResolutionError",
    "DependencyCycleError",
    "ReferenceLoopError",
    "NotConstructableError",
    "UnstableDependencyError",
    "SupplyError",
]

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("silkinjection")
except PackageNotFoundError:
    # Fallback for development
    __version__ = '0.0.0'
