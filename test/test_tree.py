"""
Command tree tests (arena layout, aliases, traversal boundaries).

Conventions
- Test method names follow CamelCase per project convention.
- Handlers are plain sentinels; the tree never calls them.
"""
import unittest
from unittest import TestCase

from helmsman import CommandNode, CommandTree, Dispatcher, PathNotFoundError


class TestDrilling(TestCase):
    def setUp(self):
        self.tree = CommandTree()

    def testFreshTreeHasOnlyRoot(self):
        self.assertEqual(len(self.tree), 1)
        self.assertIsNone(self.tree.root.name)
        self.assertIsNone(self.tree.root.handler)

    def testRegisterCreatesIntermediateNodes(self):
        node = self.tree.register(["bar", "baz", "foo"], "handler")

        self.assertEqual(len(self.tree), 4)
        self.assertEqual(node.handler, "handler")
        self.assertIsNone(self.tree.traverse_full(["bar", "baz"]).handler)
        self.assertEqual(self.tree.route(node), ("bar", "baz", "foo"))

    def testSharedPrefixesShareNodes(self):
        self.tree.register(["remote", "add"], "add")
        self.tree.register(["remote", "remove"], "remove")

        self.assertEqual(len(self.tree), 4)
        self.assertEqual(self.tree.tokens(self.tree.traverse_full(["remote"])), ["add", "remove"])

    def testRegisterOverwrites(self):
        self.tree.register(["a"], "first")
        self.tree.register(["a"], "second")

        self.assertEqual(len(self.tree), 2)
        self.assertEqual(self.tree.traverse_full(["a"]).handler, "second")

    def testChildrenAreArenaIndices(self):
        node = self.tree.register(["a"], "handler")

        self.assertEqual(self.tree.root.children, (node.index,))
        self.assertIs(self.tree.node(node.index), node)
        self.assertEqual(node.parent, self.tree.root.index)

    def testDispatcherTreeIsPublicType(self):
        tree = Dispatcher().tree

        self.assertIsInstance(tree, CommandTree)
        self.assertIsInstance(tree.root, CommandNode)

    def testStringPathRejected(self):
        with self.assertRaises(TypeError):
            self.tree.register("bar baz", "handler")


class TestAliases(TestCase):
    def setUp(self):
        self.tree = CommandTree()
        self.node = self.tree.register(["math", "add"], "add")
        self.tree.register(["math", "sub"], "sub")

    def testAliasResolvesToSameNode(self):
        self.tree.add_alias(["math", "add"], "plus")

        self.assertIs(self.tree.traverse_full(["math", "plus"]), self.node)
        self.assertEqual(self.node.aliases, ("add", "plus"))

    def testAliasListedAmongChildTokens(self):
        self.tree.add_alias(["math", "add"], "plus")

        self.assertEqual(self.tree.tokens(self.tree.traverse_full(["math"])), ["add", "plus", "sub"])

    def testAliasOnIntermediateNode(self):
        self.tree.add_alias(["math"], "m")

        self.assertIs(self.tree.traverse_full(["m", "add"]), self.node)

    def testAliasingUnknownPathRaises(self):
        with self.assertRaises(PathNotFoundError):
            self.tree.add_alias(["math", "mul"], "times")

    def testAliasClashingWithSiblingRaises(self):
        with self.assertRaises(ValueError):
            self.tree.add_alias(["math", "add"], "sub")

    def testRepeatedAliasIsNoop(self):
        self.tree.add_alias(["math", "add"], "plus")
        self.tree.add_alias(["math", "add"], "plus")

        self.assertEqual(self.node.aliases, ("add", "plus"))


class TestTraversal(TestCase):
    def setUp(self):
        self.tree = CommandTree()
        self.leaf = self.tree.register(["bar", "baz"], "handler")

    def testFullTraversalReportsSegment(self):
        with self.assertRaises(PathNotFoundError) as context:
            self.tree.traverse_full(["bar", "qux"])
        self.assertEqual(context.exception.segment, "qux")
        self.assertEqual(context.exception.path, ("bar", "qux"))

    def testPartialTraversalConsumesWholePath(self):
        node, index = self.tree.traverse_partial(["bar", "baz"])

        self.assertIs(node, self.leaf)
        self.assertEqual(index, 2)

    def testPartialTraversalStopsAtUnmatchedToken(self):
        node, index = self.tree.traverse_partial(["bar", "baz", "10", "baz"])

        self.assertIs(node, self.leaf)
        self.assertEqual(index, 2)

    def testPartialTraversalStopsAtFlag(self):
        self.tree.register(["bar", "-x"], "unreachable")

        node, index = self.tree.traverse_partial(["bar", "-x"])

        self.assertEqual(node.name, "bar")
        self.assertEqual(index, 1)

    def testPartialTraversalFromRoot(self):
        node, index = self.tree.traverse_partial(["foo", "bar", "baz"])

        self.assertIs(node, self.tree.root)
        self.assertEqual(index, 0)

    def testEmptyTokens(self):
        node, index = self.tree.traverse_partial([])

        self.assertIs(node, self.tree.root)
        self.assertEqual(index, 0)

    def testNoPrefixOrCaseFolding(self):
        self.assertIsNone(self.tree.child(self.tree.root, "ba"))
        self.assertIsNone(self.tree.child(self.tree.root, "BAR"))


if __name__ == "__main__":
    unittest.main()
