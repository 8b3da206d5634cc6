"""
Declaration, Binding and Generator

- ``Declaration``: raw input produced by modules, not yet validated
- ``Binding``: a bootstrapped, numbered declaration owned by an injector
- ``Generator``: the runtime counterpart of a binding; knows its scope and
  drives one supplier call per instance that scope needs
"""

from dataclasses import dataclass
from typing import Any, Optional, TYPE_CHECKING

from .exceptions import SupplyError
from .generic_type import GenericType
from .instance import Dependency, Injection, Instance
from .name import Name
from .resolution_context import ResolutionContext, _resolution_context
from .resource import Resource
from .source import Source
from .suppliers import Supplier

if TYPE_CHECKING:
    from .injector import Injector
    from .scope import Scope


@dataclass(frozen=True)
class Declaration:
    """A resource offered by a module.

    Attributes:
        resource: The instance and where it is available
        supplier: How instances are produced, ``None`` for requirements
        scope: Name of the scope caching the instances
        source: Provenance and precedence
        allow_fragile: May capture dependencies of more fragile scopes
    """
    resource: Resource
    supplier: Optional[Supplier]
    scope: Name
    source: Source
    allow_fragile: bool = False

    def __str__(self) -> str:
        return f"{self.resource} -> {self.supplier} ({self.scope}) from {self.source}"


@dataclass(frozen=True)
class Binding:
    """A declaration accepted by bootstrap, identified by its serial ID."""
    serial_id: int
    resource: Resource
    supplier: Supplier
    scope: Name
    source: Source
    allow_fragile: bool = False

    @classmethod
    def of(cls, serial_id: int, declaration: Declaration) -> 'Binding':
        return cls(
            serial_id, declaration.resource, declaration.supplier,
            declaration.scope, declaration.source, declaration.allow_fragile
        )

    @property
    def type(self) -> GenericType:
        return self.resource.type

    @property
    def name(self) -> Name:
        return self.resource.name

    @property
    def is_reference(self) -> bool:
        return self.supplier.is_reference

    def __str__(self) -> str:
        return (
            f"#{self.serial_id} {self.resource} -> {self.supplier} "
            f"({self.scope}) from {self.source}"
        )


class Generator:
    """Produces the instances of one binding through its scope.

    Attributes:
        binding: The binding generated
        scope: The scope instance caching the binding's instances
        slot: Index of the binding within its scope
    """

    __slots__ = ('binding', 'scope', 'slot')

    def __init__(self, binding: Binding, scope: 'Scope', slot: int):
        self.binding = binding
        self.scope = scope
        self.slot = slot

    def generate(self, dependency: Dependency, injector: 'Injector') -> Any:
        """Return the instance for ``dependency`` according to the scope.

        The binding's injection is pushed onto the chain and the resolution
        context is set while the supplier runs, so that nested resolutions
        (including calls from user factories) see the full chain.
        """
        binding = self.binding
        chained = dependency.push(Injection(
            dependency.instance,
            self._target(dependency),
            binding.serial_id,
            binding.scope,
            binding.is_reference,
            binding.allow_fragile,
        ))

        def provider() -> Any:
            token = _resolution_context.set(ResolutionContext(injector, chained))
            try:
                instance = binding.supplier.supply(chained, injector)
            finally:
                _resolution_context.reset(token)
            if __debug__ and binding.supplier.produces_new \
                    and injector.environment.verify_supplied_types:
                self._verify(instance, dependency)
            return instance

        return self.scope.provide(self.slot, dependency, provider)

    def _target(self, dependency: Dependency) -> Instance:
        binding = self.binding
        if binding.is_reference:
            # references are transparent: targets see the referring instance
            return dependency.target()
        if binding.name.is_pattern:
            return Instance(dependency.name, binding.type)
        return binding.resource.instance

    def _verify(self, instance: Any, dependency: Dependency) -> None:
        bound = self.binding.type
        if bound.is_array or getattr(bound.raw_class, '_is_protocol', False):
            return
        if not isinstance(instance, bound.raw_class):
            raise SupplyError(
                f"{self.binding.supplier} returned {type(instance).__qualname__} "
                f"for {dependency}, expected an instance of {bound}"
            )

    def __repr__(self) -> str:
        return f"Generator({self.binding})"
