import numpy as np
import pytest

from fastforest.errors import PreconditionViolation
from fastforest.histogram_statistics import HistogramStatistics, histogram_entropy
from fastforest.problem_spec import ProblemSpec
from fastforest.tree import ArrayTree
from fastforest.weak_learner import Parameters, SplitPoint, WeakLearnerContext


def _stump():
    # root splits column 1 at 0.5, node 1 splits column 0 at 2.0
    tree = ArrayTree(3)
    tree.root.split_point = SplitPoint(1, 0.5)
    tree.node(1).split_point = SplitPoint(0, 2.0)
    for index in (3, 4, 2):
        tree.node(index).leaf_node = True
    for index in (0, 1, 2, 3, 4):
        tree.node(index).statistics = HistogramStatistics(np.ones((2,)))
    return tree


def test_children_are_stored_in_level_order():
    tree = ArrayTree(2)
    assert len(tree) == 3
    assert tree.maximum_depth == 2
    assert tree.root.left_child.index == 1
    assert tree.root.right_child.index == 2
    assert tree.node(1).left_child is None
    assert tree.node(2).depth == 2
    assert tree.root == tree.node(0)


def test_invalid_trees_and_nodes():
    with pytest.raises(PreconditionViolation):
        ArrayTree(0)
    with pytest.raises(PreconditionViolation):
        ArrayTree(2).node(3)


def test_nodes_skip_unreached_slots():
    tree = _stump()
    assert [node.index for node in tree.nodes()] == [0, 1, 2, 3, 4]
    assert [node.index for node in tree.nodes(reached_only=False)] == list(range(7))
    assert [node.index for node in tree.leaves()] == [2, 3, 4]


def test_apply_routes_rows_to_leaves():
    tree = _stump()
    features = np.array([[1.0, 0.2], [3.0, 0.2], [1.0, 0.9], [2.0, 0.0]])
    assert tree.apply(features).tolist() == [3, 4, 2, 4]
    assert tree.find_leaf(np.array([1.0, 0.2])).index == 3


def test_histogram_statistics():
    statistics = HistogramStatistics.from_labels(np.array([0, 0, 1, 1]), 3)
    assert statistics.num_of_samples == 4
    assert statistics.num_of_classes == 3
    assert statistics.histogram.tolist() == [2.0, 2.0, 0.0]
    assert statistics.entropy() == 1.0
    assert statistics.probabilities().tolist() == [0.5, 0.5, 0.0]

    weighted = HistogramStatistics.from_labels(np.array([0, 1]), 2, np.array([1.0, 3.0]))
    assert weighted.num_of_samples == 4.0
    assert weighted.probabilities().tolist() == [0.25, 0.75]

    empty = HistogramStatistics(np.zeros((2,)))
    assert empty.entropy() == 0.0
    assert empty.probabilities().tolist() == [0.0, 0.0]


def test_histogram_entropy_of_many_histograms():
    entropies = histogram_entropy(np.array([[[4.0, 0.0], [1.0, 1.0]], [[0.0, 0.0], [1.0, 3.0]]]))
    assert entropies.shape == (2, 2)
    np.testing.assert_allclose(entropies, [[0.0, 1.0], [0.0, 0.8112781244591328]])


def test_split_point_array_round_trip():
    split_point = SplitPoint(3, 1.25)
    assert SplitPoint.from_array(split_point.to_array()) == split_point


class TestWeakLearnerContext:

    def _context(self):
        features = np.array([[0.0, 1.0], [0.0, 2.0], [1.0, 3.0], [1.0, 4.0]])
        label_indices = np.array([0, 0, 1, 1])
        context = WeakLearnerContext(Parameters(num_of_thresholds=4))
        context.set_external_parameters(ProblemSpec().classes_([0, 1]), features, label_indices)
        return context

    def test_split_points_lie_within_node_values(self):
        context = self._context()
        split_points = context.sample_split_points(np.arange(4), 2, np.random.RandomState(0))
        assert split_points.num_of_features == 2
        assert split_points.num_of_thresholds == 4
        assert sorted(split_points.features.tolist()) == [0, 1]
        for i, feature in enumerate(split_points.features):
            low, high = (0.0, 1.0) if feature == 0 else (1.0, 4.0)
            assert np.all(split_points.thresholds[i] >= low)
            assert np.all(split_points.thresholds[i] <= high)

    def test_best_split_separates_classes(self):
        context = self._context()
        sample_indices = np.arange(4)
        split_points = context.sample_split_points(sample_indices, 2, np.random.RandomState(0))
        split_statistics = context.compute_split_statistics(sample_indices, split_points)
        split_id, gain = context.select_best_split_point(
            context.compute_statistics(sample_indices), split_statistics, return_information_gain=True)
        assert gain == 1.0

        i_split = context.partition(sample_indices, split_points.get_split_point(split_id))
        assert i_split == 2
        assert sorted(sample_indices[:2].tolist()) == [0, 1]
