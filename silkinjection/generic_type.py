"""
GenericType

Explicit descriptor for generic types: a raw class, its type arguments and
an array dimension count. Descriptors are built once from type hints and are
immutable afterwards.

Python has no array types. An array of ``X`` is written ``Tuple[X, ...]`` in
hints and supplied as a tuple. A wildcard ``? extends B`` is written as a
``TypeVar`` bound to ``B``.

Example::

    GenericType.from_hint(List[int])                 # list[int]
    GenericType.raw(list).parameterized(
        GenericType.raw(Number).as_upper_bound())    # list[? extends Number]
    GenericType.from_hint(Tuple[Plugin, ...])        # Plugin[]
"""

import types
import typing
from dataclasses import dataclass, replace
from typing import Annotated, Any, Dict, List, Tuple, TypeVar

# Bases that describe generics themselves and never count as supertypes.
_EXCLUDED_SUPERTYPES = (object, typing.Generic, typing.Protocol)
_UNION_ORIGINS = tuple(
    u for u in (typing.Union, getattr(types, "UnionType", None)) if u is not None
)


@dataclass(frozen=True)
class GenericType:
    """Immutable generic type descriptor.

    Attributes:
        raw_class: The class without any type arguments
        parameters: Type arguments, themselves GenericTypes
        upper_bound: True for a wildcard ``? extends raw_class<...>``
        array_dimensions: Number of array dimensions (0 for plain types)
    """
    raw_class: type
    parameters: Tuple['GenericType', ...] = ()
    upper_bound: bool = False
    array_dimensions: int = 0

    @classmethod
    def raw(cls, raw_class: type) -> 'GenericType':
        if not isinstance(raw_class, type):
            raise TypeError(f"Not a class: {raw_class!r}")
        return cls(raw_class)

    @classmethod
    def from_hint(cls, hint: Any) -> 'GenericType':
        """Convert a type hint to a GenericType.

        Supported hints are plain classes, parameterized generics (``List[int]``,
        ``Repo[User]``), homogeneous tuples (``Tuple[X, ...]`` as arrays),
        ``TypeVar`` (upper-bounded wildcard) and ``Any``. ``Annotated`` extras
        are ignored.

        Raises:
            TypeError: When the hint has no GenericType equivalent
        """
        if isinstance(hint, GenericType):
            return hint
        if hint is Any:
            return cls(object, upper_bound=True)
        if isinstance(hint, TypeVar):
            bound = hint.__bound__
            base = cls.from_hint(bound) if bound is not None else cls(object)
            return base.as_upper_bound()

        origin = typing.get_origin(hint)
        args = typing.get_args(hint)
        if origin is Annotated:
            return cls.from_hint(args[0])
        if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
            return cls.from_hint(args[0]).add_array_dimension()
        if origin is not None:
            if origin in _UNION_ORIGINS or not isinstance(origin, type):
                raise TypeError(f"Unsupported type hint: {hint!r}")
            return cls(origin, tuple(cls.from_hint(arg) for arg in args))
        if isinstance(hint, type):
            return cls(hint)
        raise TypeError(f"Unsupported type hint: {hint!r}")

    def parameterized(self, *arguments: Any) -> 'GenericType':
        """Return this type with the given type arguments.

        Raises:
            ValueError: When the class declares generic parameters and the
                number of arguments does not match
        """
        declared = getattr(self.raw_class, '__parameters__', ())
        if declared and len(declared) != len(arguments):
            raise ValueError(
                f"{self.raw_class.__qualname__} takes {len(declared)} type "
                f"arguments, got {len(arguments)}"
            )
        return replace(
            self, parameters=tuple(GenericType.from_hint(a) for a in arguments)
        )

    def as_upper_bound(self) -> 'GenericType':
        return replace(self, upper_bound=True)

    def exact(self) -> 'GenericType':
        return replace(self, upper_bound=False)

    def add_array_dimension(self) -> 'GenericType':
        return replace(self, array_dimensions=self.array_dimensions + 1)

    def base_type(self) -> 'GenericType':
        """Strip one array dimension."""
        if not self.array_dimensions:
            raise ValueError(f"{self} is not an array type")
        return replace(self, array_dimensions=self.array_dimensions - 1)

    def component_type(self) -> 'GenericType':
        return replace(self, array_dimensions=0)

    @property
    def is_array(self) -> bool:
        return self.array_dimensions > 0

    @property
    def is_parameterized(self) -> bool:
        return bool(self.parameters)

    def index_key(self) -> Tuple[type, int]:
        """Key under which bindings of this type are looked up."""
        return self.raw_class, self.array_dimensions

    # -- supertypes --------------------------------------------------------

    def supertypes(self) -> Tuple['GenericType', ...]:
        """All ancestor types, most derived first.

        Type arguments of this type are substituted into the generic bases
        (``class UserRepo(Repo[User])`` has the supertype ``Repo[User]``).
        ``object``, ``Generic`` and ``Protocol`` are never included.
        """
        if self.array_dimensions:
            return tuple(
                replace(s, array_dimensions=self.array_dimensions)
                for s in self.component_type().supertypes()
            )
        found = _parameterized_bases(self.raw_class, self.parameters)
        return tuple(
            found[base] for base in self.raw_class.__mro__[1:]
            if base in found and base not in _EXCLUDED_SUPERTYPES
        )

    def as_supertype(self, supertype: type) -> 'GenericType':
        """View this type as the given supertype (arguments substituted)."""
        if supertype is self.raw_class:
            return self.component_type()
        for candidate in self.component_type().supertypes():
            if candidate.raw_class is supertype:
                return candidate
        return GenericType(supertype)

    # -- assignability & specificity ---------------------------------------

    def is_assignable_to(self, other: 'GenericType') -> bool:
        """Whether a value of this type can be used where ``other`` is expected.

        A raw (unparameterized) type is compatible with any parameterization
        of the same class in both directions.
        """
        return self._assignable(other, lenient=True)

    def more_specific_than(self, other: 'GenericType') -> bool:
        """Strict partial order of type specificity.

        ``a.more_specific_than(b)`` when ``a != b`` and ``a`` is strictly
        assignable to ``b``: a subclass, a concrete argument instead of an
        upper-bounded one, a parameterized type instead of the raw one.
        Arrays with more dimensions are more specific than arrays of an
        assignable component type with fewer dimensions.
        """
        if self.exact() == other.exact():
            return False
        if self.array_dimensions < other.array_dimensions:
            return False
        return self.component_type()._assignable(
            other.component_type(), lenient=False
        )

    def _assignable(self, other: 'GenericType', lenient: bool) -> bool:
        if self.array_dimensions != other.array_dimensions:
            return False
        if not _is_subclass(self.raw_class, other.raw_class):
            return False
        if not other.parameters:
            return True
        view = self.as_supertype(other.raw_class)
        if not view.parameters:
            return lenient
        if len(view.parameters) != len(other.parameters):
            return False
        return all(
            mine._argument_assignable(theirs, lenient)
            for mine, theirs in zip(view.parameters, other.parameters)
        )

    def _argument_assignable(self, target: 'GenericType', lenient: bool) -> bool:
        if target.upper_bound:
            return self.exact()._assignable(target.exact(), lenient)
        if self.upper_bound:
            return False
        if lenient and not (self.parameters and target.parameters):
            return self.raw_class is target.raw_class \
                and self.array_dimensions == target.array_dimensions
        return self == target

    def precision_rank(self) -> Tuple:
        """Sort key monotone with ``more_specific_than`` within one raw class."""
        return self.array_dimensions, _arguments_rank(self.parameters)

    def __str__(self) -> str:
        text = _class_name(self.raw_class)
        if self.parameters:
            text += '[' + ', '.join(str(p) for p in self.parameters) + ']'
        if self.upper_bound:
            text = '? extends ' + text
        return text + '[]' * self.array_dimensions


def _class_name(cls: type) -> str:
    if cls.__module__ == 'builtins':
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def _is_subclass(cls: type, base: type) -> bool:
    if base in cls.__mro__:
        return True
    try:
        return issubclass(cls, base)
    except TypeError:
        # protocols that are not runtime checkable only match through the MRO
        return False


def _arguments_rank(parameters: Tuple[GenericType, ...]) -> Tuple:
    return tuple(
        (0 if p.upper_bound else 1, len(p.raw_class.__mro__), p.array_dimensions,
         _arguments_rank(p.parameters))
        for p in parameters
    )


def _parameterized_bases(
    cls: type,
    arguments: Tuple[GenericType, ...]
) -> Dict[type, GenericType]:
    """Walk ``__orig_bases__`` and collect the parameterized view of each base."""
    declared = getattr(cls, '__parameters__', ())
    raw_view = bool(declared) and not arguments
    mapping = dict(zip(declared, arguments)) if not raw_view else {}

    found: Dict[type, GenericType] = {}
    # __orig_bases__ is inherited; only a class's own entry describes its bases
    bases: List[Any] = list(cls.__dict__.get('__orig_bases__', cls.__bases__))
    for base in bases:
        origin = typing.get_origin(base) or base
        if not isinstance(origin, type) or origin in _EXCLUDED_SUPERTYPES:
            continue
        if raw_view:
            base_type = GenericType(origin)
        else:
            base_type = _substitute(base, mapping)
        if origin not in found:
            found[origin] = base_type
        for ancestor, view in _parameterized_bases(origin, base_type.parameters).items():
            found.setdefault(ancestor, view)
    return found


def _substitute(hint: Any, mapping: Dict[Any, GenericType]) -> GenericType:
    if isinstance(hint, TypeVar):
        return mapping.get(hint) or GenericType.from_hint(hint)
    origin = typing.get_origin(hint)
    if origin is None:
        return GenericType.from_hint(hint)
    args = typing.get_args(hint)
    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
        return _substitute(args[0], mapping).add_array_dimension()
    return GenericType(origin, tuple(_substitute(arg, mapping) for arg in args))
