"""
Resource, Target and Packages

A ``Resource`` is what a binding offers: an ``Instance`` plus a ``Target``
describing where it is available. Targets restrict a binding to injections
into a specific instance (``injecting_into``), into anything below an
instance in the chain (``within``), or into classes of specific modules.
"""

from dataclasses import dataclass, field
from typing import ClassVar, Optional, Tuple, Type

from .generic_type import GenericType
from .instance import Dependency, Instance
from .name import Name


@dataclass(frozen=True)
class Packages:
    """Set of modules whose classes a target restriction applies to.

    Modules play the role of packages: ``package_of(Foo)`` is the module
    ``Foo`` is defined in.

    Attributes:
        roots: Module names, empty for all modules
        include_roots: Whether the root modules themselves are included
        include_subpackages: Whether modules below the roots are included
    """
    roots: Tuple[str, ...] = ()
    include_roots: bool = True
    include_subpackages: bool = True

    ALL: ClassVar['Packages']

    @staticmethod
    def package_of(cls: Type) -> 'Packages':
        return Packages((cls.__module__,), include_roots=True, include_subpackages=False)

    @staticmethod
    def package_and_subpackages_of(cls: Type) -> 'Packages':
        return Packages((cls.__module__,), include_roots=True, include_subpackages=True)

    @staticmethod
    def subpackages_of(cls: Type) -> 'Packages':
        return Packages((cls.__module__,), include_roots=False, include_subpackages=True)

    @property
    def is_all(self) -> bool:
        return not self.roots

    def includes(self, module: str) -> bool:
        if self.is_all:
            return True
        for root in self.roots:
            if self.include_roots and module == root:
                return True
            if self.include_subpackages and module.startswith(root + '.'):
                return True
        return False

    def more_precise_than(self, other: 'Packages') -> bool:
        return self.precision_rank() > other.precision_rank()

    def precision_rank(self) -> int:
        if self.is_all:
            return 0
        return 1 if self.include_subpackages else 2

    def __str__(self) -> str:
        if self.is_all:
            return '*'
        suffix = '.*' if self.include_subpackages else ''
        return ', '.join(root + suffix for root in self.roots)


Packages.ALL = Packages()


@dataclass(frozen=True)
class Target:
    """Where a resource is available.

    Attributes:
        instance: The instance injected into, ``None`` for everywhere
        indirect: Match any instance in the chain, not only the direct target
        packages: Modules the direct target's class must belong to
    """
    instance: Optional[Instance] = None
    indirect: bool = False
    packages: Packages = field(default=Packages.ALL)

    ANY: ClassVar['Target']

    @staticmethod
    def injecting_into(instance: Instance) -> 'Target':
        return Target(instance)

    @staticmethod
    def within(instance: Instance) -> 'Target':
        return Target(instance, indirect=True)

    @property
    def is_unrestricted(self) -> bool:
        return self.instance is None and self.packages.is_all

    def is_available_for(self, dependency: Dependency) -> bool:
        direct = dependency.target()
        if not self.packages.is_all:
            if direct is None or not self.packages.includes(direct.type.raw_class.__module__):
                return False
        if self.instance is None:
            return True
        if self.indirect:
            return any(
                self._matches(injection.target) for injection in dependency.injections
                if injection.target is not None
            )
        return direct is not None and self._matches(direct)

    def _matches(self, actual: Instance) -> bool:
        return actual.type.is_assignable_to(self.instance.type) \
            and actual.name.is_applicable_for(self.instance.name)

    def more_precise_than(self, other: 'Target') -> bool:
        """Restricted beats unrestricted, then type, name, directness, modules."""
        if self == other:
            return False
        if (self.instance is None) != (other.instance is None):
            return other.instance is None
        if self.instance is not None and self.instance != other.instance:
            if self.instance.type.more_specific_than(other.instance.type):
                return True
            if other.instance.type.more_specific_than(self.instance.type):
                return False
            if self.instance.name.more_precise_than(other.instance.name):
                return True
            if other.instance.name.more_precise_than(self.instance.name):
                return False
        if self.indirect != other.indirect:
            return not self.indirect
        return self.packages.more_precise_than(other.packages)

    def precision_rank(self) -> Tuple:
        if self.instance is None:
            instance_rank: Tuple = (0, 0, (0, 0))
        else:
            instance_rank = (
                1, len(self.instance.type.raw_class.__mro__),
                self.instance.name.precision_rank()
            )
        return instance_rank + (0 if self.indirect else 1, self.packages.precision_rank())

    def __str__(self) -> str:
        if self.is_unrestricted:
            return '*'
        parts = []
        if self.instance is not None:
            parts.append(('within ' if self.indirect else 'into ') + str(self.instance))
        if not self.packages.is_all:
            parts.append(f"in {self.packages}")
        return ' '.join(parts)


Target.ANY = Target()


@dataclass(frozen=True)
class Resource:
    """An instance together with its availability."""
    instance: Instance
    target: Target = field(default=Target.ANY)

    @property
    def type(self) -> GenericType:
        return self.instance.type

    @property
    def name(self) -> Name:
        return self.instance.name

    def typed(self, type_: GenericType) -> 'Resource':
        return Resource(Instance(self.instance.name, type_), self.target)

    def is_applicable_for(self, dependency: Dependency) -> bool:
        return self.instance.is_applicable_for(dependency.instance) \
            and self.target.is_available_for(dependency)

    def more_applicable_than(self, other: 'Resource') -> bool:
        """Compare by type specificity, then name, then target precision.

        Equal or incomparable components fall through to the next one.
        """
        if self.type.more_specific_than(other.type):
            return True
        if other.type.more_specific_than(self.type):
            return False
        if self.name.more_precise_than(other.name):
            return True
        if other.name.more_precise_than(self.name):
            return False
        return self.target.more_precise_than(other.target)

    def __str__(self) -> str:
        if self.target.is_unrestricted:
            return str(self.instance)
        return f"{self.instance} [{self.target}]"
