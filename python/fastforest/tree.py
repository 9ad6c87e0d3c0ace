"""
Decision trees of bounded depth.

An L{ArrayTree} of maximum depth d owns the 2^d - 1 slots of a complete binary tree in level
order, the children of slot i are the slots 2i + 1 and 2i + 2. Slots that the trainer never
reaches keep no statistics.
"""

import numpy as np

from .errors import precondition


class TreeNode(object):
    """
    Handle on one slot of an L{ArrayTree}. Handles are created on demand and compare equal
    when they refer to the same slot of the same tree.
    """

    def __init__(self, tree, index):
        self._tree = tree
        self._index = index

    @property
    def index(self):
        return self._index

    @property
    def depth(self):
        """Depth of the node, the root has depth 1."""
        return int(self._index + 1).bit_length()

    @property
    def split_point(self):
        return self._tree._split_points[self._index]

    @split_point.setter
    def split_point(self, value):
        self._tree._split_points[self._index] = value

    @property
    def statistics(self):
        return self._tree._statistics[self._index]

    @statistics.setter
    def statistics(self, value):
        self._tree._statistics[self._index] = value

    @property
    def leaf_node(self):
        return bool(self._tree._leaf_nodes[self._index])

    @leaf_node.setter
    def leaf_node(self, value):
        self._tree._leaf_nodes[self._index] = bool(value)

    @property
    def left_child(self):
        return self._tree._child(2 * self._index + 1)

    @property
    def right_child(self):
        return self._tree._child(2 * self._index + 2)

    def __eq__(self, other):
        if not isinstance(other, TreeNode):
            return NotImplemented
        return self._tree is other._tree and self._index == other._index

    def __hash__(self):
        return hash((id(self._tree), self._index))

    def __repr__(self):
        return 'TreeNode(index={}, leaf_node={})'.format(self._index, self.leaf_node)


class ArrayTree(object):

    def __init__(self, maximum_depth):
        precondition(maximum_depth >= 1, "ArrayTree(): maximum depth must be at least 1")
        num_of_nodes = 2**maximum_depth - 1
        self._maximum_depth = maximum_depth
        self._split_points = [None] * num_of_nodes
        self._statistics = [None] * num_of_nodes
        self._leaf_nodes = np.zeros((num_of_nodes,), dtype=bool)

    def __len__(self):
        return len(self._statistics)

    def _child(self, index):
        if index >= len(self):
            return None
        return TreeNode(self, index)

    @property
    def maximum_depth(self):
        return self._maximum_depth

    @property
    def root(self):
        return TreeNode(self, 0)

    def node(self, index):
        precondition(0 <= index < len(self), "ArrayTree.node(): index {} out of range".format(index))
        return TreeNode(self, index)

    def nodes(self, reached_only=True):
        """
        Iterate over the nodes in level order.

        @param reached_only: Skip the slots that never received statistics.
        """
        for i in range(len(self)):
            if reached_only and self._statistics[i] is None:
                continue
            yield TreeNode(self, i)

    def leaves(self):
        return [node for node in self.nodes() if node.leaf_node]

    def apply(self, features):
        """
        Route rows of features from the root down to their leaves.

        @param features: A L{numpy} array of dimensions (numOfRows x numOfColumns)
        @return: The index of the leaf every row ends up in.
        """
        features = np.asarray(features)
        node_indices = np.zeros((features.shape[0],), dtype=np.int64)
        active = np.flatnonzero(~self._leaf_nodes[node_indices])
        while len(active) > 0:
            for index in np.unique(node_indices[active]):
                rows = active[node_indices[active] == index]
                left = self._split_points[index].goes_left(features[rows])
                node_indices[rows] = np.where(left, 2 * index + 1, 2 * index + 2)
            active = active[~self._leaf_nodes[node_indices[active]]]
        return node_indices

    def find_leaf(self, row):
        """
        @param row: A 1-D L{numpy} array of features.
        @return: The leaf L{TreeNode} the row ends up in.
        """
        row = np.asarray(row).reshape((1, -1))
        return TreeNode(self, int(self.apply(row)[0]))
