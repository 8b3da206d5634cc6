"""
Environment

Named strategies consumed while bootstrapping and resolving. An environment
is passed explicitly to ``bootstrap()``; there is no process-wide
configuration.

Example::

    env = Environment().with_(auto_construct=True)
    injector = bootstrap(AppModule(), env=env)
"""

import abc
from dataclasses import dataclass, field, replace
from typing import Any, Callable

from .scope import ScopeRegistry


def default_contracts_by(supertype: type, impl: type) -> bool:
    """Bind contracts to every supertype except the universal roots."""
    return supertype is not object and supertype is not abc.ABC


def default_constructs_by(cls: type) -> Callable[..., Any]:
    """Construct classes by calling them."""
    return cls


@dataclass(frozen=True)
class Environment:
    """Bootstrap and resolution configuration.

    Attributes:
        scopes: Scope names available to bindings
        contracts_by: ``(supertype, impl) -> bool`` deciding which
            supertypes a contract or provided declaration is bound to
        constructs_by: ``cls -> callable`` returning what constructs a class;
            its parameters are resolved from the class's ``__init__`` hints
        auto_construct: Construct concrete classes that have no binding
        verify_supplied_types: In debug mode, check that constructors and
            factories return an instance of the bound type
    """
    scopes: ScopeRegistry = field(default_factory=ScopeRegistry.standard)
    contracts_by: Callable[[type, type], bool] = default_contracts_by
    constructs_by: Callable[[type], Callable[..., Any]] = default_constructs_by
    auto_construct: bool = False
    verify_supplied_types: bool = True

    def with_(self, **changes: Any) -> 'Environment':
        return replace(self, **changes)

    def with_scope(self, name: str, factory: Callable) -> 'Environment':
        return replace(self, scopes=self.scopes.with_scope(name, factory))
