"""
Resource and Target Tests

Tests for target availability within construction chains and for the
ordering of resources.
"""

import os
import sys
import unittest
from numbers import Number

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from silkinjection import Dependency, DeclarationType, Instance, Packages, Resource, Source, Target

from fixtures import Bar, Baz, Foo, Qux, Serializable


class Local:
    """Class outside of the fixtures module"""


class TestPackages(unittest.TestCase):
    """Tests for module based restrictions."""

    def test_all_includes_everything(self):
        self.assertTrue(Packages.ALL.includes("anything.at.all"))

    def test_package_of(self):
        packages = Packages.package_of(Foo)
        self.assertTrue(packages.includes(Foo.__module__))
        self.assertFalse(packages.includes(Foo.__module__ + ".sub"))
        self.assertFalse(packages.includes(Local.__module__))

    def test_package_and_subpackages_of(self):
        packages = Packages.package_and_subpackages_of(Foo)
        self.assertTrue(packages.includes(Foo.__module__))
        self.assertTrue(packages.includes(Foo.__module__ + ".sub"))

    def test_subpackages_of(self):
        packages = Packages.subpackages_of(Foo)
        self.assertFalse(packages.includes(Foo.__module__))
        self.assertTrue(packages.includes(Foo.__module__ + ".sub"))

    def test_precision(self):
        self.assertTrue(Packages.package_of(Foo).more_precise_than(Packages.ALL))
        self.assertTrue(
            Packages.package_of(Foo).more_precise_than(Packages.package_and_subpackages_of(Foo))
        )


class TestTargetAvailability(unittest.TestCase):
    """Tests for Target.is_available_for()."""

    def test_unrestricted_target_is_available_everywhere(self):
        self.assertTrue(Target.ANY.is_available_for(Dependency.of(Bar)))
        self.assertTrue(Target.ANY.is_available_for(Dependency.of(Bar).injecting_into(Foo)))

    def test_direct_target(self):
        target = Target.injecting_into(Instance.of(Foo))
        self.assertTrue(target.is_available_for(Dependency.of(Bar).injecting_into(Foo)))
        self.assertFalse(target.is_available_for(Dependency.of(Bar).injecting_into(Baz)))
        self.assertFalse(target.is_available_for(Dependency.of(Bar)))

    def test_direct_target_matches_subclasses(self):
        target = Target.injecting_into(Instance.of(Serializable))
        self.assertTrue(target.is_available_for(Dependency.of(Bar).injecting_into(Foo)))
        self.assertFalse(target.is_available_for(Dependency.of(Bar).injecting_into(Baz)))

    def test_direct_target_only_sees_last_chain_element(self):
        dependency = Dependency.of(Qux).injecting_into(Foo).injecting_into(Bar)
        self.assertFalse(Target.injecting_into(Instance.of(Foo)).is_available_for(dependency))
        self.assertTrue(Target.injecting_into(Instance.of(Bar)).is_available_for(dependency))

    def test_indirect_target_sees_whole_chain(self):
        dependency = Dependency.of(Qux).injecting_into(Foo).injecting_into(Bar)
        self.assertTrue(Target.within(Instance.of(Foo)).is_available_for(dependency))
        self.assertFalse(Target.within(Instance.of(Baz)).is_available_for(dependency))

    def test_named_target(self):
        target = Target.injecting_into(Instance.of(Foo, "special"))
        self.assertTrue(target.is_available_for(
            Dependency.of(Bar).injecting_into(Instance.of(Foo, "special"))
        ))
        self.assertFalse(target.is_available_for(Dependency.of(Bar).injecting_into(Foo)))

    def test_package_target(self):
        target = Target(packages=Packages.package_of(Foo))
        self.assertTrue(target.is_available_for(Dependency.of(Bar).injecting_into(Foo)))
        self.assertFalse(target.is_available_for(Dependency.of(Bar).injecting_into(Local)))
        self.assertFalse(target.is_available_for(Dependency.of(Bar)))


class TestTargetPrecision(unittest.TestCase):
    """Tests for Target.more_precise_than()."""

    def test_restricted_beats_unrestricted(self):
        self.assertTrue(Target.injecting_into(Instance.of(Foo)).more_precise_than(Target.ANY))
        self.assertFalse(Target.ANY.more_precise_than(Target.injecting_into(Instance.of(Foo))))

    def test_more_specific_target_type_wins(self):
        foo = Target.injecting_into(Instance.of(Foo))
        serializable = Target.injecting_into(Instance.of(Serializable))
        self.assertTrue(foo.more_precise_than(serializable))
        self.assertFalse(serializable.more_precise_than(foo))

    def test_direct_beats_indirect(self):
        direct = Target.injecting_into(Instance.of(Foo))
        indirect = Target.within(Instance.of(Foo))
        self.assertTrue(direct.more_precise_than(indirect))
        self.assertFalse(indirect.more_precise_than(direct))

    def test_package_restriction_beats_unrestricted(self):
        self.assertTrue(Target(packages=Packages.package_of(Foo)).more_precise_than(Target.ANY))

    def test_equal_targets_are_not_more_precise(self):
        target = Target.injecting_into(Instance.of(Foo))
        self.assertFalse(target.more_precise_than(Target.injecting_into(Instance.of(Foo))))


class TestResource(unittest.TestCase):
    """Tests for Resource applicability and ordering."""

    def test_applicable_for_supertype_request(self):
        resource = Resource(Instance.of(int))
        self.assertTrue(resource.is_applicable_for(Dependency.of(Number)))
        self.assertFalse(Resource(Instance.of(Number)).is_applicable_for(Dependency.of(int)))

    def test_name_must_match(self):
        resource = Resource(Instance.of(Bar, "special"))
        self.assertTrue(resource.is_applicable_for(Dependency.of(Bar, "SPECIAL")))
        self.assertFalse(resource.is_applicable_for(Dependency.of(Bar)))

    def test_type_specificity_comes_first(self):
        specific = Resource(Instance.of(int))
        targeted = Resource(Instance.of(Number), Target.injecting_into(Instance.of(Foo)))
        self.assertTrue(specific.more_applicable_than(targeted))
        self.assertFalse(targeted.more_applicable_than(specific))

    def test_name_before_target(self):
        default = Resource(Instance.of(Bar))
        named = Resource(Instance.of(Bar, "x*"), Target.injecting_into(Instance.of(Foo)))
        self.assertTrue(default.more_applicable_than(named))

    def test_target_decides_when_type_and_name_are_equal(self):
        plain = Resource(Instance.of(Bar))
        targeted = Resource(Instance.of(Bar), Target.injecting_into(Instance.of(Foo)))
        self.assertTrue(targeted.more_applicable_than(plain))
        self.assertFalse(plain.more_applicable_than(targeted))


class TestDeclarationType(unittest.TestCase):
    """Tests for source precedence."""

    def test_precedence_order(self):
        order = [
            DeclarationType.EXPLICIT, DeclarationType.IMPLICIT, DeclarationType.CONTRACT,
            DeclarationType.MULTI, DeclarationType.PROVIDED, DeclarationType.AUTO,
            DeclarationType.REQUIRED,
        ]
        for higher, lower in zip(order, order[1:]):
            self.assertTrue(higher.more_precise_than(lower))
            self.assertFalse(lower.more_precise_than(higher))

    def test_typed_source_keeps_provenance(self):
        source = Source("app", declaration_no=3)
        implicit = source.typed(DeclarationType.IMPLICIT)

        self.assertTrue(source.is_explicit)
        self.assertFalse(implicit.is_explicit)
        self.assertEqual((implicit.ident, implicit.declaration_no), ("app", 3))
        self.assertTrue(source.more_precise_than(implicit))


class TestDependency(unittest.TestCase):
    """Tests for requests within a construction chain."""

    def test_depth_counts_injections(self):
        dependency = Dependency.of(Bar)
        self.assertEqual(dependency.depth, 0)
        self.assertEqual(dependency.injecting_into(Foo).injecting_into(Baz).depth, 2)

    def test_typed_keeps_name_and_chain(self):
        dependency = Dependency.of(Bar, "primary").injecting_into(Foo).typed(Qux)

        self.assertEqual(dependency.instance, Instance.of(Qux, "primary"))
        self.assertEqual(dependency.depth, 1)


if __name__ == '__main__':
    unittest.main()
