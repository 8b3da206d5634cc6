"""
SilkModule

This module provides the module class for declaring bindings.
A SilkModule collects declarations, which are then assembled into an
injector by ``bootstrap()``.

Key features:
- Fluent binder DSL: ``module.bind[Type].to_constructor()``
- Declarations in a ``declare()`` override or in ``with module:`` blocks
- ``module.get()`` within factories, resolved by the current injector

Example::

    class AppModule(SilkModule):
        def declare(self):
            self.construct(Database)
            self.bind[UserRepository].to_factory(
                lambda: UserRepository(db=self.get(Database))
            )

    module = SilkModule("config")
    with module:
        module.bind(str, "db-url").to("sqlite://")

    injector = bootstrap(AppModule(), module)
"""

import logging
from collections import OrderedDict
from typing import Any, Dict, FrozenSet, Hashable, Iterable, List, Optional, Set, Tuple

from .binder import Binder
from .binding import Declaration
from .exceptions import ResolutionContextError
from .name import Name
from .resolution_context import _resolution_context
from .resource import Resource
from .source import DeclarationType, Source
from .suppliers import Supplier

logger = logging.getLogger(__name__)


class SilkModule(Binder):
    """Collects declarations for an injector.

    Subclass and override ``declare()``, or use an instance directly.
    ``declare()`` runs once, the first time the declarations are read.

    Args:
        name: Identifies the module in diagnostics (default: class name)

    Example::

        module = SilkModule()
        with module:
            module.bind[Number].to(1)
            module.bind[int].to(2)

        injector = bootstrap(module)
        injector.resolve(Number)  # 1
        injector.resolve(int)     # 2
    """

    def __init__(self, name: Optional[str] = None):
        super().__init__(self)
        self.name = name or type(self).__qualname__
        self._declarations: List[Declaration] = []
        self._installed: List['SilkModule'] = []
        self._sub_contexts: Dict[Name, List['SilkModule']] = OrderedDict()
        self._uninstalled: List[type] = []
        self._declared = False

    def declare(self) -> None:
        """Override to declare bindings."""

    def __enter__(self) -> 'SilkModule':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        return False

    def declarations(self) -> Tuple[Declaration, ...]:
        """Declarations of this module and of the modules it installs."""
        return collect_declarations([self])

    def sub_contexts(self) -> Dict[Name, Tuple['SilkModule', ...]]:
        """Modules installed into named sub-contexts, including installed modules'."""
        return collect_sub_contexts([self])

    def get(self, hint: Any, name: Optional[str] = None) -> Any:
        """Resolve a dependency from within a factory.

        Uses the injector that is currently supplying an instance, so the
        construction chain continues (cycles and targets still apply).

        Raises:
            ResolutionContextError: When called outside a factory
        """
        ctx = _resolution_context.get()
        if ctx is None:
            raise ResolutionContextError(
                "module.get() must be used within a factory function"
            )
        return ctx.injector.resolve(hint, name)

    @property
    def identity(self) -> Hashable:
        """Modules with equal identity are installed once.

        Subclasses that override ``declare()`` are identified by their class,
        so installing ``DatabaseModule()`` from two places binds it once.
        Other modules are identified by the instance.
        """
        cls = type(self)
        if cls.declare is not SilkModule.declare:
            return cls
        return id(self)

    def _run_declare(self) -> None:
        if not self._declared:
            self._declared = True
            self.declare()

    def _record(self, resource: Resource, supplier: Optional[Supplier], scope: Name,
                declaration_type: DeclarationType, allow_fragile: bool) -> None:
        source = Source(self.name, declaration_type, len(self._declarations))
        self._declarations.append(Declaration(resource, supplier, scope, source, allow_fragile))

    def _install(self, modules: Iterable['SilkModule']) -> None:
        self._installed.extend(modules)

    def _install_in(self, name: Name, modules: Iterable['SilkModule']) -> None:
        self._sub_contexts.setdefault(name, []).extend(modules)

    def _uninstall(self, module_classes: Iterable[type]) -> None:
        self._uninstalled.extend(module_classes)

    def __repr__(self) -> str:
        return f"SilkModule({self.name!r}, {len(self._declarations)} declarations)"


def installed_modules(roots: Iterable[SilkModule]) -> List[SilkModule]:
    """The roots followed by every module they install, each identity once.

    Module classes passed to ``uninstall()`` anywhere in the installed
    modules are left out, together with what only they install.
    """
    roots = list(roots)
    modules = _walk(roots, frozenset())
    uninstalled = frozenset(cls for module in modules for cls in module._uninstalled)
    if not uninstalled:
        return modules
    logger.debug("Uninstalled %s", ', '.join(cls.__qualname__ for cls in uninstalled))
    return _walk(roots, uninstalled)


def _walk(roots: List[SilkModule], uninstalled: FrozenSet[type]) -> List[SilkModule]:
    ordered: List[SilkModule] = []
    seen: Set[Hashable] = set()
    pending = list(roots)
    while pending:
        module = pending.pop(0)
        if type(module) in uninstalled:
            continue
        if module.identity in seen:
            if isinstance(module.identity, type):
                logger.debug("Skipped %r, %s is already installed", module, module.identity)
            continue
        seen.add(module.identity)
        module._run_declare()
        ordered.append(module)
        pending.extend(module._installed)
    return ordered


def collect_declarations(roots: Iterable[SilkModule]) -> Tuple[Declaration, ...]:
    collected: List[Declaration] = []
    for module in installed_modules(roots):
        collected.extend(module._declarations)
    return tuple(collected)


def collect_sub_contexts(roots: Iterable[SilkModule]) -> Dict[Name, Tuple[SilkModule, ...]]:
    merged: Dict[Name, List[SilkModule]] = OrderedDict()
    for module in installed_modules(roots):
        for name, modules in module._sub_contexts.items():
            merged.setdefault(name, []).extend(modules)
    return {name: tuple(modules) for name, modules in merged.items()}
