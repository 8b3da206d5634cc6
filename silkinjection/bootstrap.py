"""
Bootstrap

Assembles an immutable ``Injector`` from declarations:

1. Expansion: contract and provided declarations are also bound to their
   supertypes; required declarations become requirements
2. Deterministic sort: bindings of one raw type are adjacent, most precise
   first
3. Requirements: provided bindings nobody requires are dropped, required
   types must be bound
4. Dedup: one binding per resource unless all of them are multi
   bindings; two explicit bindings of the same resource are ambiguous
5. Numbering and scope sizing

All errors found here are ``BootstrapError`` subclasses and abort the
bootstrap.
"""

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .binding import Binding, Declaration, Generator
from .exceptions import (
    AmbiguousBindingError,
    ReferenceLoopBindingError,
    UnknownScopeError,
    UnresolvedRequirementError,
)
from .environment import Environment
from .generic_type import GenericType
from .injector import Injector
from .module import SilkModule, collect_declarations, collect_sub_contexts
from .name import Name
from .scope import Scope, Scopes
from .source import DeclarationType
from .suppliers import ReferenceSupplier

logger = logging.getLogger(__name__)

_EXPANDED = (DeclarationType.CONTRACT, DeclarationType.PROVIDED)


class _Entry:
    """A declaration on its way to become a binding."""

    __slots__ = ('declaration', 'order', 'group')

    def __init__(self, declaration: Declaration, order: int, group: Optional[int]):
        self.declaration = declaration
        self.order = order
        self.group = group


class BootstrapAssembler:
    """Turns declarations into an injector.

    Args:
        env: Scopes and strategies to assemble with

    Example::

        assembler = BootstrapAssembler(Environment())
        injector = assembler.assemble(module.declarations())
    """

    def __init__(self, env: Optional[Environment] = None):
        self.env = env or Environment()

    def assemble(
        self,
        declarations: Iterable[Declaration],
        sub_contexts: Optional[Dict[Name, Sequence[SilkModule]]] = None
    ) -> Injector:
        declarations = list(declarations)
        entries, requirements = self._expand(declarations)
        self._sort(entries)
        entries = self._apply_requirements(entries, requirements)
        entries = self._deduplicate(entries)
        bindings = tuple(Binding.of(serial, e.declaration) for serial, e in enumerate(entries))
        generators = self._generators(bindings)
        logger.debug(
            "Bootstrapped %d bindings from %d declarations (%d requirements)",
            len(bindings), len(declarations), len(requirements)
        )
        return Injector(bindings, generators, self.env, sub_contexts or {})

    def _expand(self, declarations: List[Declaration]) -> Tuple[List[_Entry], List[GenericType]]:
        entries: List[_Entry] = []
        requirements: List[GenericType] = []
        for index, declaration in enumerate(declarations):
            kind = declaration.source.declaration_type
            if kind is DeclarationType.REQUIRED:
                requirements.append(declaration.resource.type)
                continue
            self._check_reference(declaration)
            group = index if kind is DeclarationType.PROVIDED else None
            entries.append(_Entry(declaration, index, group))
            if kind in _EXPANDED:
                entries.extend(
                    _Entry(contract, index, group)
                    for contract in self._contracts(declaration)
                )
        return entries, requirements

    @staticmethod
    def _check_reference(declaration: Declaration) -> None:
        supplier = declaration.supplier
        if isinstance(supplier, ReferenceSupplier) \
                and supplier.instance == declaration.resource.instance:
            raise ReferenceLoopBindingError(
                f"{declaration.resource} is bound to a reference to itself "
                f"({declaration.source})"
            )

    def _contracts(self, declaration: Declaration) -> List[Declaration]:
        impl = declaration.resource.instance
        contracts = []
        for supertype in impl.type.supertypes():
            if not self.env.contracts_by(supertype.raw_class, impl.type.raw_class):
                continue
            contracts.append(Declaration(
                declaration.resource.typed(supertype),
                ReferenceSupplier(impl),
                Scopes.INJECTION,
                declaration.source,
                declaration.allow_fragile,
            ))
        return contracts

    @staticmethod
    def _sort(entries: List[_Entry]) -> None:
        # stable passes, least significant key first
        entries.sort(key=lambda e: e.order)
        entries.sort(key=lambda e: e.declaration.source.declaration_type.precedence, reverse=True)
        entries.sort(key=lambda e: e.declaration.resource.target.precision_rank(), reverse=True)
        entries.sort(key=lambda e: e.declaration.resource.name.precision_rank(), reverse=True)
        entries.sort(key=lambda e: e.declaration.resource.type.precision_rank(), reverse=True)
        entries.sort(key=lambda e: _group_key(e.declaration.resource.type))

    @staticmethod
    def _deduplicate(entries: List[_Entry]) -> List[_Entry]:
        kept: Dict[object, List[_Entry]] = OrderedDict()
        for entry in entries:
            declaration = entry.declaration
            key = declaration.resource
            same = kept.get(key)
            if same is None:
                kept[key] = [entry]
                continue
            first = same[0].declaration
            if first.source.is_multi and declaration.source.is_multi:
                if all(e.declaration is not declaration for e in same):
                    same.append(entry)
                continue
            if first.source.is_explicit and declaration.source.is_explicit \
                    and first is not declaration:
                raise AmbiguousBindingError(
                    f"{key} is bound explicitly more than once:\n"
                    f"  {first}\n"
                    f"  {declaration}"
                )
            logger.debug("Dropped %s, shadowed by %s", declaration, first)
        return [entry for same in kept.values() for entry in same]

    @staticmethod
    def _apply_requirements(entries: List[_Entry],
                            requirements: List[GenericType]) -> List[_Entry]:
        def satisfies(entry: _Entry, required: GenericType) -> bool:
            provided = entry.declaration.resource.type
            return provided.index_key() == required.index_key() \
                and provided.is_assignable_to(required)

        required_groups = {
            entry.group for entry in entries
            if entry.group is not None and any(satisfies(entry, r) for r in requirements)
        }
        kept = [
            entry for entry in entries
            if entry.group is None or entry.group in required_groups
        ]
        dropped = len(entries) - len(kept)
        if dropped:
            logger.debug("Dropped %d provided bindings that are not required", dropped)

        missing = [r for r in requirements if not any(satisfies(e, r) for e in kept)]
        if missing:
            raise UnresolvedRequirementError(
                "No binding for required type(s): " + ', '.join(str(r) for r in missing)
            )
        return kept

    def _generators(self, bindings: Tuple[Binding, ...]) -> Tuple[Generator, ...]:
        slots: Dict[Name, int] = OrderedDict()
        for binding in bindings:
            if binding.scope not in self.env.scopes:
                raise UnknownScopeError(
                    f"Unknown scope '{binding.scope}' used by {binding}. "
                    f"Known scopes: {', '.join(str(s) for s in self.env.scopes)}"
                )
            slots[binding.scope] = slots.get(binding.scope, 0) + 1

        scopes: Dict[Name, Scope] = {
            name: self.env.scopes.create(name, count) for name, count in slots.items()
        }
        logger.debug(
            "Sized scopes: %s",
            ', '.join(f"{name}={count}" for name, count in slots.items())
        )
        next_slot: Dict[Name, int] = dict.fromkeys(slots, 0)
        generators = []
        for binding in bindings:
            slot = next_slot[binding.scope]
            next_slot[binding.scope] = slot + 1
            generators.append(Generator(binding, scopes[binding.scope], slot))
        return tuple(generators)


def _group_key(type_: GenericType) -> Tuple[str, str, int]:
    raw = type_.raw_class
    return raw.__module__, raw.__qualname__, type_.array_dimensions


def bootstrap(*modules: SilkModule, env: Optional[Environment] = None) -> Injector:
    """Bootstrap an injector from modules.

    Args:
        *modules: Modules whose declarations are bound
        env: Optional environment (scopes, strategies); defaults to
            ``Environment()``

    Returns:
        The injector

    Raises:
        BootstrapError: When the declarations are inconsistent

    Example::

        injector = bootstrap(DatabaseModule(), ServiceModule())
        service = injector.resolve(UserService)
    """
    return BootstrapAssembler(env).assemble(
        collect_declarations(modules), collect_sub_contexts(modules)
    )
