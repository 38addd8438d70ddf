"""Breaking up a recursive method for testing.

``Node.total`` recurses into its children. Hooking the children's ``total``
lets a test check the recursing case without building a deep fixture tree,
and check which nodes were visited and in what order.
"""

import unittest

import partialmock
from partialmock import ScopeMode


class Node:
    def __init__(self, value: int, children: tuple["Node", ...] = ()) -> None:
        self.value = value
        self.children = children

    def total(self) -> int:
        return self.value + sum(child.total() for child in self.children)


class NodeTotalTest(unittest.TestCase):
    def setUp(self) -> None:
        partialmock.setup_for(self)

    def test_leaf_terminates(self) -> None:
        self.assertEqual(Node(5).total(), 5)

    def test_recursing_case_visits_children_in_order(self) -> None:
        left, right = Node(0), Node(0)
        root = Node(1, (left, right))
        visited = []

        def child_total():
            visited.append(partialmock.current_object())
            return 10

        partialmock.define_mock("child", ScopeMode.CALLER, child_total)
        partialmock.hook("child", left, "total")
        partialmock.hook("child", right, "total")

        self.assertEqual(root.total(), 21)
        self.assertEqual(visited, [left, right])


def main() -> None:
    suite = unittest.defaultTestLoader.loadTestsFromTestCase(NodeTotalTest)
    unittest.TextTestRunner(verbosity=2).run(suite)


if __name__ == "__main__":
    main()
