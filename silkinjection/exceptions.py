"""
SilkInjection Exceptions

Custom exception hierarchy for the SilkInjection container.

Errors come in two families:

- ``BootstrapError``: raised once while an injector is assembled. No usable
  injector exists afterwards.
- ``ResolutionError``: raised by a single ``resolve()`` call. The injector
  stays usable and no partially constructed instance is kept.
"""


class SilkInjectionError(Exception):
    """
    Base exception for all SilkInjection errors.

    All SilkInjection-specific exceptions inherit from this class.
    You can catch this to handle any container error generically.

    Example:
        >>> try:
        ...     service = injector.resolve(MyService)
        ... except SilkInjectionError as e:
        ...     print(f"DI error: {e}")
    """

    pass


class ContainerClosedError(SilkInjectionError):
    """
    Raised when attempting to use a closed injector.

    Common causes:
        - Resolving after calling ``injector.close()``
        - Resolving after leaving a ``with bootstrap(...) as injector:`` block

    Solution:
        Bootstrap a new injector instead of reusing a closed one::

            with bootstrap(AppModule()) as injector:
                service = injector.resolve(MyService)  # OK

            injector2 = bootstrap(AppModule())
    """

    pass


class ResolutionContextError(SilkInjectionError):
    """
    Raised when ``module.get()`` is called outside a resolution.

    ``module.get()`` resolves through the injector that is currently
    supplying an instance, so it only works inside a factory.

    Solution:
        Call it from a factory, or take the dependency as a parameter::

            module.bind[Repository].to_factory(
                lambda: Repository(module.get(Database))
            )

            def repository(db: Database) -> Repository:
                return Repository(db)

            module.bind[Repository].to_factory(repository)
    """

    pass


class BootstrapError(SilkInjectionError):
    """
    Base class for errors detected while assembling an injector.

    Bootstrap errors are fatal: ``bootstrap()`` raises them synchronously
    and does not return an injector.
    """

    pass


class DeclarationError(BootstrapError):
    """
    Raised when a module declares a binding that cannot be valid.

    Common causes:
        - Binding a constant that is not an instance of the bound type
        - ``to_constructor()`` with a class that is not a subclass of the
          bound type, or that is abstract
        - ``to_elements()`` on a type that is not an array (``Tuple[X, ...]``)

    Solution:
        Make the declaration consistent with the bound type::

            module.bind[Number].to(1)                  # OK
            module.bind[Tuple[Plugin, ...]].to_elements(a, b)
    """

    pass


class AmbiguousBindingError(BootstrapError):
    """
    Raised when two explicit bindings claim the same resource.

    Two explicit declarations with the same type, name and target
    restriction cannot be ordered by precedence, so neither may win.

    Common causes:
        - Binding the same type twice in one or more installed modules
        - Installing two module instances that declare the same bindings in
          ``with`` blocks

    Solution:
        1. Remove one of the declarations
        2. Give them different names::

            module.bind(Database, "primary").to_constructor(Postgres)
            module.bind(Database, "replica").to_constructor(Postgres)

        3. Restrict one to a target with ``injecting_into(...)``
        4. Use ``multibind`` when all of them are wanted as an array::

            module.multibind[Plugin].to_constructor(AuditPlugin)
            module.multibind[Plugin].to_constructor(MetricsPlugin)
    """

    pass


class ReferenceLoopBindingError(BootstrapError):
    """
    Raised when a binding references itself and cannot be constructed instead.

    A reference from an instance to the very same instance is rewritten to
    construction of the class. When the class is abstract or a protocol there
    is nothing to construct and the declaration is a loop.

    Example::

        module.bind[Repository].to_reference(Repository)  # Repository is an ABC

    Solution:
        Reference a concrete implementation::

            module.bind[Repository].to_reference(SqlRepository)
    """

    pass


class UnknownScopeError(BootstrapError):
    """
    Raised when a binding uses a scope that is not registered.

    Common causes:
        - A typo in ``per("...")``
        - A custom scope used without adding it to the environment

    Solution:
        Register the scope in the environment used for bootstrap::

            env = Environment().with_scope("request", RequestScope)
            injector = bootstrap(AppModule(), env=env)
    """

    pass


class UnresolvedRequirementError(BootstrapError):
    """
    Raised when a required type has no binding after bootstrap.

    Declaring ``require(T)`` states that some installed module must provide
    ``T`` (usually through ``provide(Impl)``).

    Solution:
        Install a module that provides an implementation::

            module.provide(FileStorage)  # FileStorage implements Storage
    """

    pass


class ResolutionError(SilkInjectionError):
    """
    Base class for errors raised by a single resolution.

    A failed resolution does not publish anything into a scope; later calls
    behave as if the failed call never happened.
    """

    pass


class NoResourceError(ResolutionError):
    """
    Raised when no binding is applicable for a requested dependency.

    Common causes:
        - Forgetting to bind the type in a module
        - Requesting a name that was never bound (names are case-insensitive)
        - Requesting an interface that was only bound through its
          implementation class (use ``contract(Impl)`` to bind supertypes)
        - A binding restricted to a target that does not match

    Solution:
        Bind the type, or mark the dependency optional::

            module.construct(MyService)

            injector.resolve(Dependency.of(MyService).as_optional())

    Note:
        The error message lists the bindings of the same raw type
        to help spot name or target mismatches.
    """

    pass


class AmbiguousResolutionError(ResolutionError):
    """
    Raised when several bindings apply and none of them is most applicable.

    Candidates are ordered by type specificity, name precision, target
    precision and source precedence. Two unrelated prefix names or two
    unrelated type parameterizations are incomparable.

    Solution:
        Request a more precise name or type, or make one binding more
        specific (a name, a target restriction, a concrete parameterization).
    """

    pass


class DependencyCycleError(ResolutionError):
    """
    Raised when a binding is needed to construct itself.

    Example of a cycle::

        class ServiceA:
            def __init__(self, b: "ServiceB"): ...

        class ServiceB:
            def __init__(self, a: ServiceA): ...  # Circular!

    Solution:
        1. Refactor to remove the circular dependency
        2. Inject the ``Injector`` and resolve lazily
        3. Extract common functionality to a third service
    """

    pass


class ReferenceLoopError(DependencyCycleError):
    """
    Raised when references between instances form a loop.

    Example::

        module.bind[X].to_reference(Y)
        module.bind[Y].to_reference(X)  # resolving X never reaches a supplier
    """

    pass


class NotConstructableError(ResolutionError):
    """
    Raised when a class cannot be constructed by the container.

    Common causes:
        - Missing type hints on ``__init__`` parameters
        - Abstract classes or protocols requested with ``auto_construct``
        - Union types other than ``Optional[X]`` used as parameter hints

    Solution:
        Ensure all ``__init__`` parameters have type hints::

            class UserRepository:
                def __init__(self, db: Database, cache: CacheService):
                    self.db = db
                    self.cache = cache
    """

    pass


class UnstableDependencyError(ResolutionError):
    """
    Raised when a stable scoped instance would capture a more fragile one.

    An application scoped service that keeps a thread scoped dependency
    would leak that dependency into other threads.

    Solution:
        Allow it explicitly where it is intended::

            module.allowing_fragile().construct(Dispatcher)
    """

    pass


class SupplyError(ResolutionError):
    """
    Raised when user code inside a supplier fails.

    The original exception is chained as ``__cause__``.

    Common causes:
        - A constructor or factory raising an exception
        - A factory returning an object of the wrong type
    """

    pass
