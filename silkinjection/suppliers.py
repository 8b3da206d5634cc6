"""
Suppliers

Construction strategies of bindings. A supplier produces one instance for a
dependency whose chain already contains the injection of the binding being
supplied; nested dependencies are resolved through the injector with that
chain so that cycles and target restrictions keep working.

Parameters of constructors and factories are resolved from their type
hints:

- ``Annotated[T, "name"]`` requests ``T`` by name
- ``Optional[T]`` resolves to ``None`` when nothing is bound
- a parameter with a default keeps the default when nothing is bound
- an ``Injector`` parameter receives the injector itself
"""

import inspect
import types
import typing
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple, TYPE_CHECKING

from .exceptions import NotConstructableError, SilkInjectionError, SupplyError
from .instance import Dependency, Instance
from .name import Name

if TYPE_CHECKING:
    from .injector import Injector

_NONE_TYPE = type(None)
_UNION_ORIGINS = tuple(
    u for u in (typing.Union, getattr(types, "UnionType", None)) if u is not None
)


class Supplier(ABC):
    """Produces instances for a binding."""

    #: True for pure aliases of another instance
    is_reference = False
    #: True when the produced object comes from user code and can be type checked
    produces_new = False

    @abstractmethod
    def supply(self, dependency: Dependency, injector: 'Injector') -> Any:
        """Produce the instance for ``dependency``."""


class ConstantSupplier(Supplier):

    def __init__(self, value: Any):
        self.value = value

    def supply(self, dependency, injector):
        return self.value

    def __str__(self) -> str:
        return f"constant {self.value!r}"


class FieldSupplier(Supplier):
    """Reads ``owner.attribute`` every time it supplies."""

    def __init__(self, owner: Any, attribute: str):
        self.owner = owner
        self.attribute = attribute

    def supply(self, dependency, injector):
        try:
            return getattr(self.owner, self.attribute)
        except AttributeError as e:
            raise SupplyError(
                f"Failed to read field '{self.attribute}' for {dependency}: {e}"
            ) from e

    def __str__(self) -> str:
        return f"field {_callable_name(self.owner)}.{self.attribute}"


class ReferenceSupplier(Supplier):
    """Alias of another instance."""

    is_reference = True

    def __init__(self, instance: Instance):
        self.instance = instance

    def supply(self, dependency, injector):
        return injector.resolve(Dependency(self.instance, dependency.injections))

    def __str__(self) -> str:
        return f"reference to {self.instance}"


class ElementsSupplier(Supplier):
    """Builds a tuple from constants and referenced instances.

    Classes, ``Instance`` and ``Dependency`` elements are resolved in order,
    any other element is used as is.
    """

    def __init__(self, elements: Tuple[Any, ...]):
        self.elements = tuple(elements)

    def supply(self, dependency, injector):
        values = []
        for element in self.elements:
            if isinstance(element, type):
                element = Dependency.of(element)
            if isinstance(element, Instance):
                element = Dependency(element)
            if isinstance(element, Dependency):
                element = injector.resolve(element.with_injections(dependency.injections))
            values.append(element)
        return tuple(values)

    def __str__(self) -> str:
        return f"elements ({len(self.elements)})"


class _Parameter:
    """A resolvable parameter of a constructor or factory."""

    __slots__ = ('name', 'kind', 'dependency')

    def __init__(self, name: str, kind: Any, dependency: Dependency):
        self.name = name
        self.kind = kind
        self.dependency = dependency


class CallableSupplier(Supplier):
    """Base class of suppliers that call user code with resolved parameters.

    Positional ``hints`` replace parameters by position, keyword
    ``overrides`` by name. ``Instance`` and ``Dependency`` hints are
    resolved, anything else is passed as a constant.
    """

    produces_new = True

    def __init__(self, hints: Tuple[Any, ...] = (), overrides: Optional[Dict[str, Any]] = None):
        self.hints = tuple(hints)
        self.overrides = dict(overrides or {})
        self._parameters: Optional[List[_Parameter]] = None

    @abstractmethod
    def _target(self, injector: 'Injector') -> Callable[..., Any]:
        """The callable to invoke."""

    @abstractmethod
    def _analyse(self, injector: 'Injector') -> List[_Parameter]:
        """Analyse the parameters of the callable."""

    def supply(self, dependency, injector):
        func = self._target(injector)
        if self._parameters is None:
            self._parameters = self._analyse(injector)

        args: List[Any] = []
        kwargs: Dict[str, Any] = {}
        for index, parameter in enumerate(self._parameters):
            value = self._argument(index, parameter, dependency, injector)
            if parameter.kind is inspect.Parameter.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[parameter.name] = value

        try:
            return func(*args, **kwargs)
        except SilkInjectionError:
            raise
        except Exception as e:
            raise SupplyError(
                f"{_callable_name(func)} failed while supplying {dependency}: "
                f"{type(e).__name__}: {e}"
            ) from e

    def _argument(self, index: int, parameter: _Parameter, dependency: Dependency,
                  injector: 'Injector') -> Any:
        if parameter.name in self.overrides:
            hint = self.overrides[parameter.name]
        elif index < len(self.hints):
            hint = self.hints[index]
        else:
            return injector.resolve(parameter.dependency.with_injections(dependency.injections))
        if isinstance(hint, Instance):
            hint = Dependency(hint)
        if isinstance(hint, Dependency):
            return injector.resolve(hint.with_injections(dependency.injections))
        return hint


class ConstructorSupplier(CallableSupplier):
    """Constructs ``cls`` with the callable chosen by ``constructs_by``.

    Example::

        ConstructorSupplier(UserService)
        ConstructorSupplier(Server, overrides={'port': 8080})
    """

    def __init__(self, cls: type, hints: Tuple[Any, ...] = (),
                 overrides: Optional[Dict[str, Any]] = None):
        super().__init__(hints, overrides)
        self.cls = cls

    def _target(self, injector):
        if not is_constructable(self.cls):
            raise NotConstructableError(
                f"Cannot construct {_callable_name(self.cls)}: "
                f"abstract classes and protocols have no constructor."
            )
        return injector.environment.constructs_by(self.cls)

    def _analyse(self, injector):
        constructor = injector.environment.constructs_by(self.cls)
        if constructor is self.cls:
            return analyse_parameters(self.cls.__init__, owner=self.cls, skip_first=True)
        return analyse_parameters(constructor, owner=self.cls)

    def __str__(self) -> str:
        return f"constructor {_callable_name(self.cls)}"


class FactorySupplier(CallableSupplier):
    """Calls a factory function with resolved parameters."""

    def __init__(self, func: Callable[..., Any], hints: Tuple[Any, ...] = (),
                 overrides: Optional[Dict[str, Any]] = None):
        super().__init__(hints, overrides)
        self.func = func

    def _target(self, injector):
        return self.func

    def _analyse(self, injector):
        return analyse_parameters(self.func)

    def __str__(self) -> str:
        return f"factory {_callable_name(self.func)}"


def is_constructable(cls: Any) -> bool:
    """Whether instances of ``cls`` can be created by calling it."""
    return isinstance(cls, type) \
        and not inspect.isabstract(cls) \
        and not getattr(cls, '_is_protocol', False)


def analyse_parameters(func: Callable[..., Any], owner: Optional[type] = None,
                       skip_first: bool = False) -> List[_Parameter]:
    """Extract the dependencies of a callable from its type hints.

    Args:
        func: The function to analyse
        owner: Class the function belongs to (error messages, forward references)
        skip_first: Skip the first parameter (``self`` of ``__init__``)

    Returns:
        The parameters in declaration order, excluding ``*args``/``**kwargs``

    Raises:
        NotConstructableError: When the signature cannot be inspected or a
            parameter has no usable type hint
    """
    label = f"{owner.__qualname__}.__init__" if owner is not None else _callable_name(func)
    try:
        sig = inspect.signature(func)
    except (ValueError, TypeError) as e:
        raise NotConstructableError(
            f"Cannot inspect {label}: {e}. "
            f"This may occur with built-in types or C extension classes."
        ) from e

    resolved_hints = _resolve_type_hints(func)
    parameters = []
    for index, (name, param) in enumerate(sig.parameters.items()):
        if skip_first and index == 0:
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if param.annotation is inspect.Parameter.empty:
            raise NotConstructableError(
                f"Missing type hint for parameter '{name}' in {label}. "
                f"Constructor injection requires type hints for all parameters."
            )
        hint = resolved_hints.get(name, param.annotation)
        if isinstance(hint, str):
            hint = _resolve_string_annotation(func, owner, name, hint, label)
        dependency = _parameter_dependency(hint, name, label)
        if param.default is not inspect.Parameter.empty:
            dependency = dependency.as_optional(param.default)
        parameters.append(_Parameter(name, param.kind, dependency))
    return parameters


def _parameter_dependency(hint: Any, param_name: str, label: str) -> Dependency:
    hint, name = _unwrap_annotated(hint, None)
    optional = False
    args = typing.get_args(hint)
    if typing.get_origin(hint) in _UNION_ORIGINS and _NONE_TYPE in args:
        members = [a for a in args if a is not _NONE_TYPE]
        if len(members) == 1:
            hint, name = _unwrap_annotated(members[0], name)
            optional = True
    try:
        dependency = Dependency.of(hint, name)
    except TypeError as e:
        raise NotConstructableError(
            f"Unsupported type hint {hint!r} for parameter '{param_name}' in {label}: {e}"
        ) from e
    return dependency.as_optional() if optional else dependency


def _unwrap_annotated(hint: Any, name: Any) -> Tuple[Any, Any]:
    """Strip ``Annotated``; its first string or ``Name`` extra names the dependency."""
    if typing.get_origin(hint) is not typing.Annotated:
        return hint, name
    hint, *extras = typing.get_args(hint)
    named = next((e for e in extras if isinstance(e, (str, Name))), None)
    return hint, named if named is not None else name


def _resolve_type_hints(func: Callable[..., Any]) -> Dict[str, Any]:
    """Resolve hints with ``typing.get_type_hints``, empty on failure."""
    try:
        return typing.get_type_hints(func, include_extras=True)
    except (NameError, RecursionError, TypeError):
        # local classes, self-referencing types or unsupported annotations;
        # fall back to resolving string annotations one by one
        return {}


def _resolve_string_annotation(func: Callable[..., Any], owner: Optional[type],
                               param_name: str, annotation: str, label: str) -> Any:
    module = inspect.getmodule(owner if owner is not None else func)
    namespace: Dict[str, Any] = {}
    if module is not None:
        namespace.update(module.__dict__)
    if owner is not None:
        namespace.update(owner.__dict__)
    try:
        return eval(annotation, namespace)
    except NameError as e:
        raise NotConstructableError(
            f"Cannot resolve forward reference '{annotation}' for parameter "
            f"'{param_name}' in {label}. "
            f"Hint: Ensure '{annotation}' is defined and imported before "
            f"the dependency is resolved."
        ) from e
    except SyntaxError as e:
        raise NotConstructableError(
            f"Invalid forward reference '{annotation}' for parameter "
            f"'{param_name}' in {label}: {e}."
        ) from e


def _callable_name(obj: Any) -> str:
    return getattr(obj, '__qualname__', None) or getattr(obj, '__name__', None) or repr(obj)
