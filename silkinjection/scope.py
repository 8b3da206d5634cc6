"""
Scope

Lifecycle policies deciding when an instance is reused. Each scope instance
belongs to one injector and owns exactly one repository sized from the
number of bindings in that scope.

Scopes are ordered from stable (long-lived) to fragile (short-lived) by
their ``stability``. A stable instance must not capture a more fragile one
unless the capturing binding allows it. The unscoped INJECTION scope has no
stability and is ignored by that check.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Dict, Hashable, Iterator, Optional

from .name import Name
from .repository import (
    ExclusiveSlotRepository,
    KeyedRepository,
    SlotRepository,
    ThreadRepository,
)

if TYPE_CHECKING:
    from .instance import Dependency

ScopeFactory = Callable[[int], 'Scope']


class Scopes:
    """Names of the standard scopes."""
    INJECTION = Name.named('injection')
    APPLICATION = Name.named('application')
    SYNCHRONIZED = Name.named('synchronized')
    THREAD = Name.named('thread')
    DEPENDENCY_TYPE = Name.named('dependency-type')
    DEPENDENCY_INSTANCE = Name.named('dependency-instance')
    TARGET_INSTANCE = Name.named('target-instance')


class Scope(ABC):
    """Runtime scope instance.

    Attributes:
        stability: Higher is longer-lived, ``None`` opts out of the
            stability check
    """

    stability: Optional[int] = None

    @abstractmethod
    def provide(self, slot: int, dependency: 'Dependency', provider: Callable[[], Any]) -> Any:
        """Return the instance for ``slot``, constructing it with ``provider`` if needed.

        Args:
            slot: Dense index of the binding within this scope
            dependency: The dependency being resolved
            provider: Zero-argument callable constructing a fresh instance

        Returns:
            The instance every caller for this slot observes
        """

    def is_more_fragile_than(self, other: 'Scope') -> bool:
        if self.stability is None or other.stability is None:
            return False
        return self.stability < other.stability


class InjectionScope(Scope):
    """Unscoped: the provider runs for every injection."""

    def __init__(self, slot_count: int = 0):
        self.slot_count = slot_count

    def provide(self, slot, dependency, provider):
        return provider()


class ApplicationScope(Scope):
    """One instance per binding for the injector's lifetime.

    Construction is speculative: concurrent first calls may construct more
    than once, but a single instance is published and shared.
    """

    stability = 100

    def __init__(self, slot_count: int):
        self._repository = SlotRepository(slot_count)

    def provide(self, slot, dependency, provider):
        return self._repository.provide(slot, provider)


class SynchronizedScope(ApplicationScope):
    """Like ApplicationScope, but each instance is constructed exactly once."""

    def __init__(self, slot_count: int):
        self._repository = ExclusiveSlotRepository(slot_count)


class ThreadScope(Scope):
    """One instance per binding and thread."""

    stability = 10

    def __init__(self, slot_count: int):
        self._repository = ThreadRepository(slot_count)

    def provide(self, slot, dependency, provider):
        return self._repository.provide(slot, provider)


class KeyedScope(Scope):
    """One instance per binding and key derived from the dependency."""

    def __init__(self, slot_count: int):
        self._repository = KeyedRepository(slot_count)

    @abstractmethod
    def key(self, dependency: 'Dependency') -> Hashable:
        """Derive the repository key for ``dependency``."""

    def provide(self, slot, dependency, provider):
        return self._repository.provide(slot, self.key(dependency), provider)


class DependencyTypeScope(KeyedScope):
    """One instance per requested type (e.g. a logger per consumer type)."""

    stability = 50

    def key(self, dependency):
        return dependency.type


class DependencyInstanceScope(KeyedScope):
    """One instance per requested (name, type)."""

    stability = 40

    def key(self, dependency):
        return dependency.instance


class TargetInstanceScope(KeyedScope):
    """One instance per instance injected into."""

    stability = 30

    def key(self, dependency):
        return dependency.target()


class ScopeRegistry:
    """Immutable mapping from scope name to scope factory.

    A factory receives the number of slots (bindings) of its scope and
    returns a fresh scope instance.

    Example::

        scopes = ScopeRegistry.standard().with_scope("request", RequestScope)
    """

    def __init__(self, factories: Optional[Dict[Name, ScopeFactory]] = None):
        self._factories: Dict[Name, ScopeFactory] = dict(factories or {})

    @classmethod
    def standard(cls) -> 'ScopeRegistry':
        return cls({
            Scopes.INJECTION: InjectionScope,
            Scopes.APPLICATION: ApplicationScope,
            Scopes.SYNCHRONIZED: SynchronizedScope,
            Scopes.THREAD: ThreadScope,
            Scopes.DEPENDENCY_TYPE: DependencyTypeScope,
            Scopes.DEPENDENCY_INSTANCE: DependencyInstanceScope,
            Scopes.TARGET_INSTANCE: TargetInstanceScope,
        })

    def with_scope(self, name: Any, factory: ScopeFactory) -> 'ScopeRegistry':
        factories = dict(self._factories)
        factories[Name.named(name)] = factory
        return ScopeRegistry(factories)

    def create(self, name: Name, slot_count: int) -> Scope:
        """Create the scope instance for ``name``.

        Raises:
            KeyError: When no factory is registered for ``name``
        """
        return self._factories[name](slot_count)

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __iter__(self) -> Iterator[Name]:
        return iter(self._factories)
