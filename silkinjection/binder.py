"""
Binder

Fluent declaration API used by modules. Binder settings are immutable:
every modifier returns a new binder that records into the same module.

Example::

    class AppModule(SilkModule):
        def declare(self):
            self.bind[Number].to(1)
            self.bind(Database, "primary").to_constructor(Postgres)
            self.per(Scopes.THREAD).construct(Session)
            self.injecting_into(Foo).bind[Bar].to_constructor(SpecialBar)
            self.contract(FileStorage)
            self.multibind[Plugin].to_constructor(AuditPlugin)
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional, TYPE_CHECKING

from .exceptions import DeclarationError, ReferenceLoopBindingError
from .generic_type import GenericType
from .instance import Instance
from .name import Name
from .resource import Packages, Resource, Target
from .scope import Scopes
from .source import DeclarationType
from .suppliers import (
    ConstantSupplier,
    ConstructorSupplier,
    ElementsSupplier,
    FactorySupplier,
    FieldSupplier,
    ReferenceSupplier,
    Supplier,
    is_constructable,
)

if TYPE_CHECKING:
    from .module import SilkModule


@dataclass(frozen=True)
class BindingSettings:
    """Settings applied to the next declarations of a binder.

    Attributes:
        scope: Scope of constructed instances
        target: Where bound resources are available
        declaration_type: Precedence of the declarations
        allow_fragile: Whether bound instances may capture fragile scopes
    """
    scope: Name = Scopes.APPLICATION
    target: Target = field(default=Target.ANY)
    declaration_type: DeclarationType = DeclarationType.EXPLICIT
    allow_fragile: bool = False


class Binder:
    """Records declarations into a module under fixed settings."""

    def __init__(self, module: 'SilkModule', settings: Optional[BindingSettings] = None):
        self._module = module
        self._settings = settings or BindingSettings()

    @property
    def settings(self) -> BindingSettings:
        return self._settings

    def _with(self, **changes: Any) -> 'Binder':
        return Binder(self._module, replace(self._settings, **changes))

    # -- settings ----------------------------------------------------------

    def per(self, scope: Any) -> 'Binder':
        """Bind in the given scope (a ``Scopes`` name or a custom scope name)."""
        return self._with(scope=Name.named(scope))

    def injecting_into(self, hint: Any, name: Optional[str] = None) -> 'Binder':
        """Only apply when directly injected into the given instance."""
        target = replace(self._settings.target, instance=Instance.of(hint, name), indirect=False)
        return self._with(target=target)

    def within(self, hint: Any, name: Optional[str] = None) -> 'Binder':
        """Apply anywhere below the given instance in the construction chain."""
        target = replace(self._settings.target, instance=Instance.of(hint, name), indirect=True)
        return self._with(target=target)

    def in_package_of(self, cls: type) -> 'Binder':
        """Only apply when injected into classes of the module ``cls`` is defined in."""
        return self._with(target=replace(self._settings.target, packages=Packages.package_of(cls)))

    def in_package_and_subpackages_of(self, cls: type) -> 'Binder':
        packages = Packages.package_and_subpackages_of(cls)
        return self._with(target=replace(self._settings.target, packages=packages))

    def allowing_fragile(self) -> 'Binder':
        return self._with(allow_fragile=True)

    def implicit(self) -> 'Binder':
        return self._with(declaration_type=DeclarationType.IMPLICIT)

    def auto(self) -> 'Binder':
        return self._with(declaration_type=DeclarationType.AUTO)

    # -- bindings ----------------------------------------------------------

    @property
    def bind(self) -> '_BindProxy':
        """Start a binding: ``bind[Type]`` or ``bind(Type, "name")``."""
        return _BindProxy(self)

    @property
    def multibind(self) -> '_BindProxy':
        """Like ``bind``, but several bindings of one instance may coexist.

        A request for the array ``Tuple[X, ...]`` collects all of them.
        """
        return _BindProxy(self._typed(DeclarationType.MULTI))

    @property
    def arraybind(self) -> '_BindProxy':
        """Bind the array of the given element type: ``arraybind[X]`` binds ``Tuple[X, ...]``."""
        return _BindProxy(self, array=True)

    def bind_named(self, name: str, hint: Any) -> 'TypedBinder':
        return TypedBinder(self, Instance.of(hint, name))

    def construct(self, cls: type, name: Optional[str] = None) -> None:
        """Bind ``cls`` to its own constructor."""
        self.bind(cls, name).to_constructor()

    def contract(self, cls: type, name: Optional[str] = None) -> None:
        """Construct ``cls`` and bind it to its supertypes as well."""
        self._typed(DeclarationType.CONTRACT).construct(cls, name)

    def provide(self, cls: type, name: Optional[str] = None) -> None:
        """Like ``contract``, but only kept when one of the types is required."""
        self._typed(DeclarationType.PROVIDED).construct(cls, name)

    def require(self, hint: Any) -> None:
        """State that some installed module must bind ``hint``."""
        self._declare(
            Instance.any_of(hint), None, Scopes.INJECTION,
            declaration_type=DeclarationType.REQUIRED, target=Target.ANY
        )

    def install(self, *modules: 'SilkModule') -> None:
        """Add the declarations of other modules to this module."""
        self._module._install(modules)

    def install_in(self, sub_context: str, *modules: 'SilkModule') -> None:
        """Install modules into a named sub-context (``injector.sub_context(name)``)."""
        self._module._install_in(Name.named(sub_context), modules)

    def uninstall(self, *module_classes: type) -> None:
        """Leave out every installed module of the given classes."""
        self._module._uninstall(module_classes)

    def _typed(self, declaration_type: DeclarationType) -> 'Binder':
        return self._with(declaration_type=declaration_type)

    def _declare(self, instance: Instance, supplier: Optional[Supplier], scope: Name,
                 declaration_type: Optional[DeclarationType] = None,
                 target: Optional[Target] = None) -> None:
        settings = self._settings
        self._module._record(
            Resource(instance, settings.target if target is None else target),
            supplier,
            scope,
            declaration_type or settings.declaration_type,
            settings.allow_fragile,
        )


class _BindProxy:
    """Supports both ``bind[Type]`` and ``bind(Type, name)``."""

    def __init__(self, binder: Binder, array: bool = False):
        self._binder = binder
        self._array = array

    def __getitem__(self, hint: Any) -> 'TypedBinder':
        return self(hint)

    def __call__(self, hint: Any, name: Optional[str] = None) -> 'TypedBinder':
        instance = Instance.of(hint, name)
        if self._array:
            instance = instance.typed(instance.type.add_array_dimension())
        return TypedBinder(self._binder, instance)


class TypedBinder:
    """Terminal step of a binding: chooses the supplier.

    Attributes:
        instance: The instance being bound
    """

    def __init__(self, binder: Binder, instance: Instance):
        self._binder = binder
        self.instance = instance

    @property
    def type(self) -> GenericType:
        return self.instance.type

    def to(self, constant: Any) -> None:
        """Bind to a constant.

        The constant's own class is bound implicitly too when it differs
        from the bound type, so ``bind[Number].to(1)`` also answers ``int``
        unless ``int`` is bound explicitly.

        Raises:
            DeclarationError: When the constant is not of the bound type
        """
        bound = self.type
        if bound.is_array:
            if not isinstance(constant, tuple):
                raise DeclarationError(f"Array {bound} must be bound to a tuple, got {constant!r}")
        elif not _is_protocol(bound.raw_class) and not isinstance(constant, bound.raw_class):
            raise DeclarationError(
                f"Cannot bind {self.instance} to {constant!r}: "
                f"not an instance of {bound.raw_class.__qualname__}"
            )
        supplier = ConstantSupplier(constant)
        self._binder._declare(self.instance, supplier, Scopes.INJECTION)

        exact = type(constant)
        if self._binder.settings.declaration_type is DeclarationType.EXPLICIT \
                and not bound.is_array and not bound.is_parameterized \
                and exact is not bound.raw_class:
            self._binder._declare(
                Instance(self.instance.name, GenericType.raw(exact)), supplier,
                Scopes.INJECTION, declaration_type=DeclarationType.IMPLICIT
            )

    def to_constructor(self, impl: Optional[type] = None, *hints: Any, **overrides: Any) -> None:
        """Bind to construction of ``impl`` (default: the bound class).

        Positional ``hints`` replace constructor parameters by position,
        keyword ``overrides`` by name. ``Instance``/``Dependency`` values are
        resolved, other values are passed as constants.

        Raises:
            DeclarationError: When ``impl`` is not a constructable subclass of
                the bound type
        """
        bound = self.type
        if bound.is_array:
            raise DeclarationError(f"Cannot construct array type {bound}; use to_elements()")
        cls = bound.raw_class if impl is None else impl
        if not is_constructable(cls):
            raise DeclarationError(
                f"Cannot bind {self.instance} to the constructor of {cls!r}: "
                f"not a concrete class"
            )
        if not issubclass(cls, bound.raw_class) and not _is_protocol(bound.raw_class):
            raise DeclarationError(
                f"Cannot bind {self.instance} to the constructor of {cls.__qualname__}: "
                f"not a subclass of {bound.raw_class.__qualname__}"
            )
        self._declare_in_scope(ConstructorSupplier(cls, hints, overrides))

    def to_factory(self, func: Callable[..., Any], *hints: Any, **overrides: Any) -> None:
        """Bind to a factory whose parameters are resolved like constructor parameters."""
        if not callable(func):
            raise DeclarationError(f"Factory for {self.instance} is not callable: {func!r}")
        self._declare_in_scope(FactorySupplier(func, hints, overrides))

    def to_field(self, owner: Any, attribute: str) -> None:
        """Bind to an attribute of ``owner``, read at every injection."""
        self._binder._declare(self.instance, FieldSupplier(owner, attribute), Scopes.INJECTION)

    def to_reference(self, hint: Any, name: Optional[str] = None) -> None:
        """Bind to another instance.

        A concrete referenced class is implicitly bound to its constructor in
        the binder's scope. A reference to the bound instance itself means
        construction of the bound class.

        Raises:
            ReferenceLoopBindingError: When referencing itself and the class
                cannot be constructed
        """
        referenced = Instance.of(hint, name)
        if referenced == self.instance:
            if self.type.is_array or not is_constructable(self.type.raw_class):
                raise ReferenceLoopBindingError(
                    f"{self.instance} is bound to a reference to itself and "
                    f"cannot be constructed"
                )
            self.to_constructor()
            return
        self._binder._declare(self.instance, ReferenceSupplier(referenced), Scopes.INJECTION)

        cls = referenced.type.raw_class
        if not referenced.type.is_array and not referenced.name.is_pattern \
                and is_constructable(cls):
            self._binder._declare(
                referenced, ConstructorSupplier(cls), self._binder.settings.scope,
                declaration_type=DeclarationType.IMPLICIT, target=Target.ANY
            )

    def to_elements(self, *elements: Any) -> None:
        """Bind an array (``Tuple[X, ...]``) to the given elements.

        Classes, ``Instance`` and ``Dependency`` elements are resolved on
        supply, other elements are used as constants.

        Raises:
            DeclarationError: When the bound type is not an array
        """
        if not self.type.is_array:
            raise DeclarationError(
                f"to_elements() requires an array type such as Tuple[X, ...], got {self.type}"
            )
        self._declare_in_scope(ElementsSupplier(elements))

    def _declare_in_scope(self, supplier: Supplier) -> None:
        self._binder._declare(self.instance, supplier, self._binder.settings.scope)


def _is_protocol(cls: type) -> bool:
    return bool(getattr(cls, '_is_protocol', False))
