"""
Tests for the Unset sentinel and the small helpers around it.

This module verifies semantic guarantees of the `UnsetType` sentinel:
- Singleton identity (single instance per interpreter process).
- Falsy semantics and representation behavior.
- Copying, deep copying, pickling, and thread safety properties.
- Finality (type cannot be subclassed).

It also covers coalesce(), rename() and mirror().
"""
import copy
import pickle
import unittest
from threading import Thread, Lock
from types import MappingProxyType
from unittest import TestCase

from rich.console import Console

from commandant.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `UnsetType` singleton.
    """

    def setUp(self) -> None:
        self.unset: UnsetType = UnsetType()
        self.type: type[UnsetType] = UnsetType

    def testSingleton(self) -> None:
        """
        The constructor returns the same object reference on every call.
        """
        self.assertIs(self.unset, self.type())

    def testModuleSingleton(self) -> None:
        """
        The exported `Unset` matches the constructed singleton instance.
        """
        self.assertIs(Unset, self.unset)

    def testHashAndSetUniqueness(self) -> None:
        set = {self.unset, self.type()}
        self.assertEqual(len(set), 1)

    def testRepr(self) -> None:
        self.assertEqual(repr(self.unset), "Unset")
        self.assertEqual(str(self.unset), "Unset")

    def testRichConsolePrint(self) -> None:
        """
        Console.print(...) renders 'Unset' without ANSI when color is disabled.
        """
        console = Console(color_system=None, force_terminal=False)
        with console.capture() as capture:
            console.print(self.unset)
        self.assertEqual(capture.get().strip(), "Unset")

    def testFalsely(self) -> None:
        self.assertFalse(bool(self.unset))

    def testNotEqualToOtherFalsyValues(self) -> None:
        """
        Falsy does not imply equality with None, False, 0 or "".
        """
        for value in (None, False, 0, ""):
            with self.subTest(value=value):
                self.assertNotEqual(self.unset, value)

    def testCopyDeepcopyPreserveSingleton(self) -> None:
        self.assertIs(copy.copy(self.unset), self.unset)
        self.assertIs(copy.deepcopy(self.unset), self.unset)
        self.assertIs(copy.deepcopy([self.unset])[0], self.unset)

    def testPickleRoundTrip(self) -> None:
        self.assertIs(pickle.loads(pickle.dumps(self.unset)), self.unset)

    def testThreadSafetySingleton(self) -> None:
        """
        Concurrent constructions return the same instance (thread-safe singleton).
        """
        results: list[UnsetType] = []
        lock: Lock = Lock()

        def worker():
            instance = self.type()
            with lock:
                results.append(instance)

        threads: list[Thread] = [Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(results), 16)
        for instance in results:
            self.assertIs(instance, self.unset)

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("UnsetSubtype", (self.type,), {})

    def testUnionAnnotation(self) -> None:
        self.assertEqual(str | UnsetType, str | self.type)


class CoalesceTest(TestCase):

    def testUnsetReplaced(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testFalsyValuesPreserved(self) -> None:
        for value in (None, 0, "", False, []):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "fallback"), value)


class RenameTest(TestCase):

    def testFunctionForm(self) -> None:
        def original():
            pass

        self.assertIs(rename(original, "renamed"), original)
        self.assertEqual(original.__name__, "renamed")
        self.assertEqual(original.__qualname__, "renamed")

    def testDecoratorForm(self) -> None:
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")

    def testRejectsBadArguments(self) -> None:
        with self.assertRaises(TypeError):
            rename(42, "name")
        with self.assertRaises(TypeError):
            rename(print, 42)
        with self.assertRaises(TypeError):
            rename()


class MirrorTest(TestCase):

    def setUp(self) -> None:
        class Holder:
            items = mirror("items")
            table = mirror("table")
            tags = mirror("tags")
            name = mirror("name")

            def __init__(self):
                self._items = [1, 2]
                self._table = {"a": 1}
                self._tags = {"x"}
                self._name = "holder"

        self.holder = Holder()

    def testReadOnlyViews(self) -> None:
        self.assertEqual(self.holder.items, (1, 2))
        self.assertIsInstance(self.holder.table, MappingProxyType)
        self.assertEqual(self.holder.tags, frozenset({"x"}))
        self.assertEqual(self.holder.name, "holder")

    def testNotAssignable(self) -> None:
        with self.assertRaises(AttributeError):
            self.holder.items = ()


if __name__ == '__main__':
    unittest.main()
