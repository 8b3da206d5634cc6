"""
Bootstrap Tests

Tests for assembling an injector: precedence and deduplication of
declarations, contracts, provided and required types, scopes and the
deterministic order of bindings.
"""

import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from silkinjection import (
    AmbiguousBindingError,
    AmbiguousResolutionError,
    BootstrapAssembler,
    Declaration,
    Instance,
    NoResourceError,
    ReferenceLoopBindingError,
    Resource,
    ScopeRegistry,
    Scopes,
    Source,
    UnknownScopeError,
    UnresolvedRequirementError,
)
from silkinjection.scope import ApplicationScope
from silkinjection.suppliers import ReferenceSupplier

from conftest import SilkInjectionTestCase, create_simple_module, module_of
from fixtures import (
    CacheService,
    Database,
    FileStorage,
    MemoryStorage,
    Order,
    OrderRepo,
    Plugin,
    Repository,
    Storage,
    User,
    UserRepo,
)


class TestPrecedence(SilkInjectionTestCase):
    """Tests for declarations describing the same resource."""

    def test_explicit_duplicate_is_ambiguous(self):
        def declare(m):
            m.bind[int].to(1)
            m.bind[int].to(2)

        with self.assertRaises(AmbiguousBindingError):
            self.bootstrap(module_of(declare))

    def test_explicit_duplicate_across_modules(self):
        with self.assertRaises(AmbiguousBindingError):
            self.bootstrap(create_simple_module(Database), create_simple_module(Database))

    def test_same_module_twice_is_not_a_duplicate(self):
        module = create_simple_module(Database)
        parent = module_of(lambda m: m.install(module))

        injector = self.bootstrap(parent, module)

        self.assertEqual(len(injector.bindings_for(Database)), 1)

    def test_auto_binding_is_overridden(self):
        db = Database()

        def declare(m):
            m.auto().construct(Database)
            m.bind[Database].to(db)

        injector = self.bootstrap(module_of(declare))

        self.assertIs(injector.resolve(Database), db)

    def test_different_targets_are_different_resources(self):
        def declare(m):
            m.construct(Database)
            m.injecting_into(CacheService).bind[Database].to_constructor()

        injector = self.bootstrap(module_of(declare))

        self.assertEqual(len(injector.bindings_for(Database)), 2)

    def test_multi_bindings_are_all_kept(self):
        def declare(m):
            m.multibind[Plugin].to(Plugin("a"))
            m.multibind[Plugin].to(Plugin("b"))

        injector = self.bootstrap(module_of(declare))

        self.assertEqual(len(injector.bindings_for(Plugin)), 2)

    def test_explicit_binding_shadows_multi_bindings(self):
        def declare(m):
            m.multibind[Plugin].to(Plugin("a"))
            m.bind[Plugin].to(Plugin("single"))
            m.multibind[Plugin].to(Plugin("b"))

        injector = self.bootstrap(module_of(declare))

        self.assertEqual(len(injector.bindings_for(Plugin)), 1)
        self.assertEqual(injector.resolve(Plugin).name, "single")


class TestContracts(SilkInjectionTestCase):
    """Tests for contract declarations."""

    def test_contract_binds_supertypes(self):
        injector = self.bootstrap(module_of(lambda m: m.contract(FileStorage)))
        self.assertIs(injector.resolve(Storage), injector.resolve(FileStorage))

    def test_explicit_binding_beats_contract(self):
        def declare(m):
            m.contract(FileStorage)
            m.bind[Storage].to_constructor(MemoryStorage)

        injector = self.bootstrap(module_of(declare))

        self.assertIsInstance(injector.resolve(Storage), MemoryStorage)
        self.assertIsInstance(injector.resolve(FileStorage), FileStorage)

    def test_generic_contracts(self):
        def declare(m):
            m.contract(UserRepo)
            m.contract(OrderRepo)

        injector = self.bootstrap(module_of(declare))

        self.assertIsInstance(injector.resolve(Repository[User]), UserRepo)
        self.assertIsInstance(injector.resolve(Repository[Order]), OrderRepo)
        with self.assertRaises(AmbiguousResolutionError):
            injector.resolve(Repository)

    def test_custom_contracts_by(self):
        injector = self.bootstrap(
            module_of(lambda m: m.contract(FileStorage)),
            contracts_by=lambda supertype, impl: False,
        )
        with self.assertRaises(NoResourceError):
            injector.resolve(Storage)


class TestRequirements(SilkInjectionTestCase):
    """Tests for provided and required declarations."""

    def test_unrequired_provided_binding_is_dropped(self):
        injector = self.bootstrap(module_of(lambda m: m.provide(FileStorage)))
        with self.assertRaises(NoResourceError):
            injector.resolve(FileStorage)

    def test_required_provided_binding_is_kept(self):
        def declare(m):
            m.provide(FileStorage)
            m.require(Storage)

        injector = self.bootstrap(module_of(declare))

        self.assertIs(injector.resolve(Storage), injector.resolve(FileStorage))

    def test_requirement_met_by_explicit_binding(self):
        def declare(m):
            m.construct(Database)
            m.require(Database)

        self.assertIsInstance(self.bootstrap(module_of(declare)).resolve(Database), Database)

    def test_unresolved_requirement(self):
        with self.assertRaises(UnresolvedRequirementError) as ctx:
            self.bootstrap(module_of(lambda m: m.require(Storage)))
        self.assertIn("Storage", str(ctx.exception))

    def test_requirement_from_other_module(self):
        provider = module_of(lambda m: m.provide(MemoryStorage), "provider")
        consumer = module_of(lambda m: m.require(Storage), "consumer")

        injector = self.bootstrap(provider, consumer)

        self.assertIsInstance(injector.resolve(Storage), MemoryStorage)


class TestReferences(SilkInjectionTestCase):
    """Tests for references checked while declaring and bootstrapping."""

    def test_self_reference_of_abstract_class(self):
        with self.assertRaises(ReferenceLoopBindingError):
            module_of(lambda m: m.bind[Storage].to_reference(Storage))

    def test_self_reference_declared_directly(self):
        instance = Instance.of(Storage)
        declaration = Declaration(
            Resource(instance), ReferenceSupplier(instance), Scopes.INJECTION, Source("raw")
        )
        with self.assertRaises(ReferenceLoopBindingError):
            BootstrapAssembler().assemble([declaration])

    def test_self_reference_of_concrete_class_constructs(self):
        injector = self.bootstrap(module_of(lambda m: m.bind[Database].to_reference(Database)))
        self.assertIsInstance(injector.resolve(Database), Database)

    def test_reference_binds_referenced_class_implicitly(self):
        injector = self.bootstrap(module_of(lambda m: m.bind[Storage].to_reference(FileStorage)))
        self.assertIs(injector.resolve(Storage), injector.resolve(FileStorage))


class TestScopes(SilkInjectionTestCase):
    """Tests for scope names used by declarations."""

    def test_unknown_scope(self):
        with self.assertRaises(UnknownScopeError) as ctx:
            self.bootstrap(module_of(lambda m: m.per("request").construct(Database)))
        self.assertIn("request", str(ctx.exception))

    def test_custom_scope(self):
        injector = self.bootstrap(
            module_of(lambda m: m.per("request").construct(Database)),
            scopes=ScopeRegistry.standard().with_scope("request", ApplicationScope),
        )
        self.assertIs(injector.resolve(Database), injector.resolve(Database))


class TestBindingOrder(SilkInjectionTestCase):
    """Tests for the deterministic order of bootstrapped bindings."""

    def test_serial_ids_follow_order(self):
        injector = self.bootstrap(create_simple_module(Database, CacheService, FileStorage))
        self.assertEqual([b.serial_id for b in injector.bindings], [0, 1, 2])

    def test_most_precise_name_first(self):
        def declare(m):
            m.bind(str, "db*").to("pattern")
            m.bind(str, "primary").to("named")
            m.bind[str].to("default")

        injector = self.bootstrap(module_of(declare))

        self.assertEqual(
            [str(b.name) for b in injector.bindings_for(str)], ["", "primary", "db*"]
        )

    def test_order_does_not_depend_on_module_order(self):
        first = module_of(lambda m: m.bind(str, "a").to("a"), "first")
        second = module_of(lambda m: m.bind[str].to("b"), "second")

        forward = self.bootstrap(first, second)
        backward = self.bootstrap(second, first)

        self.assertEqual(
            [b.resource for b in forward.bindings], [b.resource for b in backward.bindings]
        )

    def test_describe(self):
        injector = self.bootstrap(create_simple_module(Database))
        text = injector.describe()
        self.assertTrue(text.startswith("1 bindings:"))
        self.assertIn("constructor Database", text)


if __name__ == '__main__':
    unittest.main()
