"""
Instance, Injection and Dependency

- ``Instance``: the (name, type) identity of what is requested or provided
- ``Injection``: one step of the construction chain (which binding is
  currently building which instance)
- ``Dependency``: a requested instance plus the chain of injections that led
  to the request. The chain drives target-specific bindings and cycle
  detection.
"""

from dataclasses import dataclass, replace
from typing import Any, Optional, Tuple

from .generic_type import GenericType
from .name import Name
from .scope import Scopes

# serial IDs of chain elements that do not belong to a binding
SYNTHETIC_SERIAL = -1
ON_DEMAND_SERIAL = -2


@dataclass(frozen=True)
class Instance:
    """Immutable (name, type) pair."""
    name: Name
    type: GenericType

    @staticmethod
    def of(hint: Any, name: Optional[str] = None) -> 'Instance':
        if isinstance(hint, Instance):
            return hint if name is None else hint.named(name)
        return Instance(Name.named(name), GenericType.from_hint(hint))

    @staticmethod
    def any_of(hint: Any) -> 'Instance':
        return Instance(Name.ANY, GenericType.from_hint(hint))

    def named(self, name: Optional[str]) -> 'Instance':
        return replace(self, name=Name.named(name))

    def typed(self, hint: Any) -> 'Instance':
        return replace(self, type=GenericType.from_hint(hint))

    def is_applicable_for(self, requested: 'Instance') -> bool:
        """Whether this declared instance can satisfy ``requested``."""
        return self.type.is_assignable_to(requested.type) \
            and requested.name.is_applicable_for(self.name)

    def __str__(self) -> str:
        if self.name.is_default:
            return str(self.type)
        return f"{self.type} \"{self.name}\""


@dataclass(frozen=True)
class Injection:
    """One element of the construction chain.

    Attributes:
        dependency: The instance that was requested
        target: The instance being constructed, ``None`` for references
            that are transparent to target matching at the top level
        serial_id: Serial ID of the binding doing the construction
        scope: Scope name of that binding
        is_reference: True when the binding is a pure alias
        allow_fragile: True when the binding may capture fragile scopes
    """
    dependency: Instance
    target: Optional[Instance]
    serial_id: int
    scope: Name = Scopes.INJECTION
    is_reference: bool = False
    allow_fragile: bool = False


@dataclass(frozen=True)
class Dependency:
    """A request for an instance within a construction chain.

    Attributes:
        instance: What is requested
        injections: The chain of injections, outermost first
        optional: When True, a missing resource yields ``default``
        default: Value returned for optional dependencies without resource

    Example::

        injector.resolve(Dependency.of(Bar))
        injector.resolve(Dependency.of(Bar).injecting_into(Instance.of(Foo)))
        injector.resolve(Dependency.of(Cache).as_optional())
    """
    instance: Instance
    injections: Tuple[Injection, ...] = ()
    optional: bool = False
    default: Any = None

    @staticmethod
    def of(hint: Any, name: Optional[str] = None) -> 'Dependency':
        return Dependency(Instance.of(hint, name))

    @property
    def type(self) -> GenericType:
        return self.instance.type

    @property
    def name(self) -> Name:
        return self.instance.name

    @property
    def depth(self) -> int:
        return len(self.injections)

    def named(self, name: Optional[str]) -> 'Dependency':
        return replace(self, instance=self.instance.named(name))

    def typed(self, hint: Any) -> 'Dependency':
        return replace(self, instance=self.instance.typed(hint))

    def as_optional(self, default: Any = None) -> 'Dependency':
        """Return ``default`` instead of failing when nothing is bound."""
        return replace(self, optional=True, default=default)

    def injecting_into(self, target: Any) -> 'Dependency':
        """Resolve as if this dependency was injected into ``target``."""
        target = target if isinstance(target, Instance) else Instance.of(target)
        return self.push(Injection(target, target, SYNTHETIC_SERIAL))

    def push(self, injection: Injection) -> 'Dependency':
        return replace(self, injections=self.injections + (injection,))

    def with_injections(self, injections: Tuple[Injection, ...]) -> 'Dependency':
        return replace(self, injections=injections)

    def target(self) -> Optional[Instance]:
        """The instance this dependency is directly injected into."""
        if not self.injections:
            return None
        return self.injections[-1].target

    def __str__(self) -> str:
        chain = ' <- '.join(
            str(i.target) for i in reversed(self.injections) if i.target is not None
        )
        return f"{self.instance} <- {chain}" if chain else str(self.instance)
