"""
Tests for the shared utilities.

This module verifies:
- The `Unset` sentinel: singleton identity, falsy semantics, unions, copy and pickle.
- `coalesce` only replaces Unset.
- `rename` in its function and decorator forms.
- `mirror` properties return snapshots instead of the backing containers.
"""
import copy
import pickle
import unittest
from unittest import TestCase

from flagstaff.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` singleton.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the exported instance on every call.
        """
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsely(self) -> None:
        """
        Unset is falsy but distinct from the other falsy values.
        """
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, 0)
        self.assertNotEqual(Unset, "")

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")
        self.assertEqual(str(Unset), "Unset")

    def testUnion(self) -> None:
        """
        `str | Unset` builds a union usable with isinstance.
        """
        self.assertIsInstance("text", str | Unset)
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(1, str | Unset)

    def testCopyAndPickle(self) -> None:
        """
        Copies and pickle round-trips preserve identity.
        """
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(copy.deepcopy([Unset])[0], Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testFinal(self) -> None:
        """
        Subclassing the sentinel type is rejected.
        """
        with self.assertRaises(TypeError):
            type("UnsetSubtype", (UnsetType,), {})


class CoalesceTest(TestCase):
    def testUnsetIsReplaced(self) -> None:
        self.assertEqual(coalesce(Unset, 2), 2)
        self.assertIsNone(coalesce(Unset))

    def testFalsyValuesAreKept(self) -> None:
        for value in (None, 0, "", [], False):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, 2), value)


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
            rename()
        with self.assertRaises(TypeError):
            rename(1, "name")
        with self.assertRaises(TypeError):
            rename(len, 1)
        with self.assertRaises(TypeError):
            rename("name")(1)


class MirrorTest(TestCase):
    """
    Mirrored properties expose read-only snapshots.
    """

    def setUp(self) -> None:
        class Holder:
            items = mirror("items")
            table = mirror("table")
            label = mirror("label")

            def __init__(self):
                self._items = [1, [2, 3]]
                self._table = {"a": [1]}
                self._label = "text"

        self.holder = Holder()

    def testSequenceSnapshot(self) -> None:
        self.assertEqual(self.holder.items, (1, (2, 3)))
        self.assertIsInstance(self.holder.items, tuple)

    def testMappingSnapshot(self) -> None:
        table = self.holder.table
        table["b"] = 2
        self.assertEqual(self.holder.table, {"a": (1,)})

    def testStringsPassThrough(self) -> None:
        self.assertEqual(self.holder.label, "text")

    def testReadOnly(self) -> None:
        with self.assertRaises(AttributeError):
            self.holder.items = ()


if __name__ == '__main__':
    unittest.main()
