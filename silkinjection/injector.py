"""
Injector

The immutable product of bootstrap. ``resolve()`` finds the single most
applicable binding for a dependency and lets that binding's generator
produce the instance through its scope:

1. Candidates: bindings of the requested raw type and array dimension
2. Filter: resource applicable (type, name, target) to the dependency
3. Selection: the candidate more applicable than all others; if none is,
   the source precedence decides ties, otherwise the request is ambiguous
4. Cycle check: the chosen binding must not already be constructing
5. Stability check: a stable consumer must not capture a fragile instance
6. Generation through the binding's scope

An array request without an applicable array binding collects one element
from every applicable binding of the element type (see ``multibind``).

The injector is safe to share between threads.
"""

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, TYPE_CHECKING

from .binding import Binding, Generator
from .environment import Environment
from .exceptions import (
    AmbiguousResolutionError,
    ContainerClosedError,
    DependencyCycleError,
    NoResourceError,
    NotConstructableError,
    ReferenceLoopError,
    UnstableDependencyError,
)
from .generic_type import GenericType
from .instance import ON_DEMAND_SERIAL, Dependency, Injection, Instance
from .name import Name
from .resolution_context import ResolutionContext, _resolution_context
from .scope import Scope
from .suppliers import ConstructorSupplier, is_constructable

if TYPE_CHECKING:
    from .module import SilkModule

logger = logging.getLogger(__name__)


class Injector:
    """Resolves dependencies from bootstrapped bindings.

    Instances are created by ``bootstrap()``; do not construct directly.

    Example::

        injector = bootstrap(AppModule())
        service = injector.resolve(UserService)
        primary = injector.resolve(Database, "primary")
        plugins = injector.resolve(Tuple[Plugin, ...])

        with bootstrap(AppModule()) as injector:
            ...
    """

    def __init__(
        self,
        bindings: Tuple[Binding, ...],
        generators: Tuple[Generator, ...],
        env: Environment,
        sub_contexts: Optional[Mapping[Name, Sequence['SilkModule']]] = None
    ):
        self._bindings = bindings
        self._env = env
        index: Dict[Tuple[type, int], List[Generator]] = {}
        for generator in generators:
            index.setdefault(generator.binding.type.index_key(), []).append(generator)
        self._index = {key: tuple(value) for key, value in index.items()}
        self._scopes: Dict[Name, Scope] = {g.binding.scope: g.scope for g in generators}
        self._sub_context_modules = {
            Name.named(name): tuple(modules) for name, modules in (sub_contexts or {}).items()
        }
        self._sub_contexts: Dict[Name, 'Injector'] = {}
        self._lock = threading.Lock()
        self._closed = False

    @property
    def environment(self) -> Environment:
        return self._env

    @property
    def bindings(self) -> Tuple[Binding, ...]:
        return self._bindings

    def bindings_for(self, hint: Any, name: Optional[str] = None) -> Tuple[Binding, ...]:
        """Bindings of the hint's raw type that match the name (all when omitted)."""
        requested = Instance(
            Name.named(name) if name is not None else Name.ANY, GenericType.from_hint(hint)
        )
        return tuple(
            g.binding for g in self._index.get(requested.type.index_key(), ())
            if g.binding.resource.instance.is_applicable_for(requested)
        )

    def resolve(self, dependency: Any, name: Optional[str] = None) -> Any:
        """Resolve a dependency to an instance.

        Args:
            dependency: A type hint, an ``Instance`` or a ``Dependency``
            name: Optional name (case-insensitive)

        Returns:
            The instance supplied by the most applicable binding

        Raises:
            ContainerClosedError: When the injector was closed
            NoResourceError: When no binding applies
            AmbiguousResolutionError: When no single binding is most applicable
            DependencyCycleError: When the binding is needed to construct itself
            UnstableDependencyError: When a stable instance would capture a
                more fragile one
            SupplyError: When a constructor or factory fails
        """
        if self._closed:
            raise ContainerClosedError(
                "Injector is closed. Bootstrap a new injector to resolve dependencies."
            )
        dependency = _as_dependency(dependency, name)
        if not dependency.injections:
            context = _resolution_context.get()
            if context is not None and context.injector is self:
                dependency = dependency.with_injections(context.dependency.injections)

        if dependency.type.raw_class is Injector and not dependency.type.is_array:
            if dependency.name.is_default or dependency.name.is_any:
                return self
            return self.sub_context(dependency.name)

        candidates = [
            g for g in self._index.get(dependency.type.index_key(), ())
            if g.binding.resource.is_applicable_for(dependency)
        ]
        if not candidates:
            if dependency.type.is_array:
                elements = self._collect_elements(dependency)
                if elements is not None:
                    return elements
            return self._no_resource(dependency)

        generator = self._most_applicable(candidates, dependency)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Resolved %s with %s", dependency, generator.binding)
        self._check_cycle(generator, dependency)
        self._check_stability(generator, dependency)
        return generator.generate(dependency, self)

    @staticmethod
    def _beats(a: Generator, b: Generator) -> bool:
        ra, rb = a.binding.resource, b.binding.resource
        if ra.more_applicable_than(rb):
            return True
        if rb.more_applicable_than(ra):
            return False
        return a.binding.source.more_precise_than(b.binding.source)

    def _most_applicable(self, candidates: List[Generator], dependency: Dependency) -> Generator:
        best = candidates[0]
        for candidate in candidates[1:]:
            if self._beats(candidate, best):
                best = candidate
        rivals = [c for c in candidates if c is not best and not self._beats(best, c)]
        if rivals:
            listing = '\n'.join(f"  {g.binding}" for g in [best] + rivals)
            raise AmbiguousResolutionError(
                f"Ambiguous resolution of {dependency}; no binding is most applicable:\n"
                f"{listing}"
            )
        return best

    @staticmethod
    def _check_cycle(generator: Generator, dependency: Dependency) -> None:
        serial = generator.binding.serial_id
        if not any(injection.serial_id == serial for injection in dependency.injections):
            return
        path = ' -> '.join(str(i.dependency) for i in dependency.injections)
        if generator.binding.is_reference:
            raise ReferenceLoopError(
                f"References form a loop: {path} -> {dependency.instance}"
            )
        raise DependencyCycleError(
            f"Circular dependency detected: {path} -> {dependency.instance}"
        )

    def _check_stability(self, generator: Generator, dependency: Dependency) -> None:
        supplied = generator.scope
        if supplied.stability is None:
            return
        for injection in reversed(dependency.injections):
            consumer = self._scopes.get(injection.scope)
            if injection.serial_id < 0 or consumer is None or consumer.stability is None:
                continue
            if not injection.allow_fragile and supplied.is_more_fragile_than(consumer):
                raise UnstableDependencyError(
                    f"{injection.target} in scope '{injection.scope}' cannot depend on "
                    f"{generator.binding} in the more fragile scope "
                    f"'{generator.binding.scope}'"
                )
            return

    def _collect_elements(self, dependency: Dependency) -> Optional[Tuple[Any, ...]]:
        """Resolve an unbound array from the bindings of its element type.

        A default-named array collects elements of any name. Of several
        bindings for the same instance only the most applicable are used.
        Returns ``None`` when no element binding applies.
        """
        component = dependency.type.base_type()
        name = Name.ANY if dependency.name.is_default else dependency.name
        request = Dependency(Instance(name, component), dependency.injections)
        candidates = [
            g for g in self._index.get(component.index_key(), ())
            if g.binding.resource.is_applicable_for(request)
        ]
        elements = [
            g for g in candidates
            if not any(
                other.binding.resource.instance == g.binding.resource.instance
                and other.binding.resource.more_applicable_than(g.binding.resource)
                for other in candidates
            )
        ]
        if not elements:
            return None
        logger.debug("Collected %d elements for %s", len(elements), dependency)
        values = []
        for generator in elements:
            self._check_cycle(generator, request)
            self._check_stability(generator, request)
            values.append(generator.generate(request, self))
        return tuple(values)

    def _no_resource(self, dependency: Dependency) -> Any:
        if dependency.optional:
            return dependency.default
        requested = dependency.type
        if self._env.auto_construct and not requested.is_array \
                and (dependency.name.is_default or dependency.name.is_any):
            return self._construct_on_demand(dependency)
        same_type = [b for b in self._bindings if b.type.raw_class is requested.raw_class]
        message = f"No binding applies to {dependency}."
        if same_type:
            message += " Bindings of the same type:\n" + '\n'.join(f"  {b}" for b in same_type)
        raise NoResourceError(message)

    def _construct_on_demand(self, dependency: Dependency) -> Any:
        cls = dependency.type.raw_class
        if not is_constructable(cls):
            raise NotConstructableError(
                f"No binding applies to {dependency} and {cls.__qualname__} "
                f"cannot be constructed on demand."
            )
        target = Instance(Name.DEFAULT, GenericType.raw(cls))
        for injection in dependency.injections:
            if injection.serial_id == ON_DEMAND_SERIAL and injection.target == target:
                raise DependencyCycleError(
                    f"Circular dependency detected while constructing {cls.__qualname__} "
                    f"on demand: {dependency}"
                )
        chained = dependency.push(Injection(dependency.instance, target, ON_DEMAND_SERIAL))
        token = _resolution_context.set(ResolutionContext(self, chained))
        try:
            return ConstructorSupplier(cls).supply(chained, self)
        finally:
            _resolution_context.reset(token)

    def sub_context(self, name: Any) -> 'Injector':
        """Return the injector of a named sub-context, bootstrapping it once.

        Raises:
            NoResourceError: When nothing was installed into that sub-context
        """
        name = Name.named(name)
        injector = self._sub_contexts.get(name)
        if injector is not None:
            return injector
        with self._lock:
            injector = self._sub_contexts.get(name)
            if injector is None:
                modules = self._sub_context_modules.get(name)
                if modules is None:
                    raise NoResourceError(f"No sub-context named '{name}'.")
                from .bootstrap import bootstrap
                logger.debug("Bootstrapping sub-context '%s'", name)
                injector = bootstrap(*modules, env=self._env)
                self._sub_contexts[name] = injector
        return injector

    def describe(self) -> str:
        """Text table of all bindings, one per line."""
        lines = [f"{len(self._bindings)} bindings:"]
        for binding in self._bindings:
            lines.append(
                f"  {binding.serial_id:>4}  {binding.resource}  ->  {binding.supplier}  "
                f"[{binding.scope}]  {binding.source}"
            )
        if self._sub_context_modules:
            lines.append("sub-contexts: " + ', '.join(str(n) for n in self._sub_context_modules))
        return '\n'.join(lines)

    def close(self) -> None:
        """Close the injector and its bootstrapped sub-contexts."""
        with self._lock:
            self._closed = True
            sub_contexts = list(self._sub_contexts.values())
        for injector in sub_contexts:
            injector.close()

    @property
    def is_closed(self) -> bool:
        return self._closed

    def __enter__(self) -> 'Injector':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Injector({len(self._bindings)} bindings)"


def _as_dependency(obj: Any, name: Optional[str]) -> Dependency:
    if isinstance(obj, Dependency):
        return obj if name is None else obj.named(name)
    if isinstance(obj, Instance):
        return Dependency(obj if name is None else obj.named(name))
    return Dependency.of(obj, name)
