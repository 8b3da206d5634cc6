"""
Test Configuration and Utilities

Common base classes and helper functions for SilkInjection tests
"""

import unittest
from typing import Callable, Type

from silkinjection import Environment, Injector, SilkModule, bootstrap


class SilkInjectionTestCase(unittest.TestCase):
    """
    Base test case class for SilkInjection tests.

    Injectors bootstrapped through ``self.bootstrap()`` are closed after
    each test.
    """

    def bootstrap(self, *modules: SilkModule, **env_changes) -> Injector:
        """Bootstrap an injector that is closed when the test ends."""
        env = Environment().with_(**env_changes) if env_changes else None
        injector = bootstrap(*modules, env=env)
        self.addCleanup(injector.close)
        return injector


def create_simple_module(*service_classes: Type) -> SilkModule:
    """
    Create a module binding each class to its own constructor.

    Example:
        >>> module = create_simple_module(Database, CacheService)
        >>> injector = bootstrap(module)
    """
    module = SilkModule()
    with module:
        for cls in service_classes:
            module.construct(cls)
    return module


def module_of(declare: Callable[[SilkModule], None], name: str = None) -> SilkModule:
    """
    Create a module whose declarations are made by ``declare(module)``.

    Example:
        >>> module = module_of(lambda m: m.bind[int].to(42))
    """
    module = SilkModule(name)
    with module:
        declare(module)
    return module
