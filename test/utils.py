"""
Utilities behavioral tests.

Scope
- Validate the Unset sentinel and coalesce().
- Validate switch name derivation (kebabize) and natural-language lists (conjoin).

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from argosy.utils import Unset, UnsetType, coalesce, conjoin, kebabize


class TestUnset(TestCase):
    def testSingleton(self):
        self.assertIs(Unset, UnsetType())

    def testFalsyAndRepr(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            class Other(UnsetType):  # NOQA: F-841
                pass

    def testCoalescePreservesFalseyValues(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, "fallback"), 0)
        self.assertIsNone(coalesce(Unset))


class TestKebabize(TestCase):
    def testSingleWord(self):
        self.assertEqual(kebabize("increment"), "increment")

    def testCamelCase(self):
        self.assertEqual(kebabize("intVal"), "int-val")
        self.assertEqual(kebabize("cleanCacheNow"), "clean-cache-now")

    def testSnakeCase(self):
        self.assertEqual(kebabize("clean_cache"), "clean-cache")

    def testLeadingUnderscoresStripped(self):
        self.assertEqual(kebabize("_intVal"), "int-val")
        self.assertEqual(kebabize("__tables"), "tables")

    def testAcronymsAndDigits(self):
        self.assertEqual(kebabize("HTTPPort"), "http-port")
        self.assertEqual(kebabize("md5Sum"), "md5-sum")

    def testNonAsciiLetters(self):
        self.assertEqual(kebabize("größe"), "größe")
        self.assertEqual(kebabize("maxGröße"), "max-größe")
        self.assertEqual(kebabize("ÄrgerWert"), "ärger-wert")
        self.assertEqual(kebabize("_tête_à_tête"), "tête-à-tête")

    def testRejectsNonStrings(self):
        with self.assertRaises(TypeError):
            kebabize(1)


class TestConjoin(TestCase):
    def testEmpty(self):
        self.assertEqual(conjoin([]), "")

    def testSingle(self):
        self.assertEqual(conjoin(['"tables"']), '"tables"')

    def testTwo(self):
        self.assertEqual(conjoin(["a", "b"]), "a and b")

    def testMany(self):
        self.assertEqual(conjoin(["a", "b", "c"]), "a, b and c")

    def testCustomJoiner(self):
        self.assertEqual(conjoin(("build", "clean", "deploy"), "or"), "build, clean or deploy")


if __name__ == "__main__":
    unittest.main()
