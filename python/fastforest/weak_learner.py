"""
Default split strategy: axis-aligned thresholds on randomly chosen columns, selected by
information gain.
"""

import numpy as np

from .histogram_statistics import HistogramStatistics, histogram_entropy
from .training_context import SplitPoint as SplitPointBase
from .training_context import TrainingContext


class Parameters(object):

    def __init__(self, num_of_thresholds=10):
        self.num_of_thresholds = num_of_thresholds


class SplitPoint(SplitPointBase):
    """Rows whose value in column C{feature} is below C{threshold} go to the left child."""

    def __init__(self, feature, threshold):
        self._feature = int(feature)
        self._threshold = float(threshold)

    @property
    def feature(self):
        return self._feature

    @property
    def threshold(self):
        return self._threshold

    def goes_left(self, features):
        return features[:, self._feature] < self._threshold

    def to_array(self):
        return np.array([self._feature, self._threshold], dtype=np.float64)

    @staticmethod
    def from_array(array):
        assert len(array) == 2
        return SplitPoint(array[0], array[1])

    def __eq__(self, other):
        if not isinstance(other, SplitPoint):
            return NotImplemented
        return self._feature == other._feature and self._threshold == other._threshold

    __hash__ = None

    def __repr__(self):
        return 'SplitPoint(feature={}, threshold={})'.format(self._feature, self._threshold)


class SplitPointCollection(object):
    """Candidate thresholds, one row of C{num_of_thresholds} values per candidate column."""

    def __init__(self, features, thresholds):
        assert thresholds.shape[0] == features.shape[0]
        self._features = features
        self._thresholds = thresholds

    @property
    def features(self):
        return self._features

    @property
    def thresholds(self):
        return self._thresholds

    @property
    def num_of_features(self):
        return self._thresholds.shape[0]

    @property
    def num_of_thresholds(self):
        return self._thresholds.shape[1]

    def get_split_point(self, split_point_id):
        feature_id, threshold_id = split_point_id
        return SplitPoint(self._features[feature_id], self._thresholds[feature_id, threshold_id])


class SplitStatistics(object):
    """
    Class histograms of both children for every candidate split, arrays of dimensions
    (numOfFeatures x numOfThresholds x numOfClasses).
    """

    def __init__(self, left_child_statistics, right_child_statistics):
        self._left_child_statistics = left_child_statistics
        self._right_child_statistics = right_child_statistics

    @property
    def left_child_statistics(self):
        return self._left_child_statistics

    @property
    def right_child_statistics(self):
        return self._right_child_statistics


class WeakLearnerContext(TrainingContext):

    def __init__(self, parameters=None):
        if parameters is None:
            parameters = Parameters()
        self._parameters = parameters
        self._features = None
        self._label_indices = None
        self._num_of_classes = 0
        self._class_weights = None

    @property
    def parameters(self):
        return self._parameters

    def set_external_parameters(self, problem_spec, features, label_indices):
        self._features = np.asarray(features)
        self._label_indices = np.asarray(label_indices, dtype=np.int64)
        self._num_of_classes = problem_spec.class_count_
        if problem_spec.is_weighted:
            self._class_weights = np.asarray(problem_spec.class_weights_, dtype=np.float64)
        else:
            self._class_weights = None

    def compute_statistics(self, sample_indices):
        return HistogramStatistics.from_labels(
            self._label_indices[sample_indices], self._num_of_classes, self._class_weights)

    def sample_split_points(self, sample_indices, num_of_features, random_state):
        features = random_state.choice(self._features.shape[1], size=num_of_features, replace=False)
        values = self._features[sample_indices][:, features]
        low = np.min(values, axis=0)[:, np.newaxis]
        high = np.max(values, axis=0)[:, np.newaxis]
        thresholds = random_state.uniform(low, high, size=(num_of_features, self._parameters.num_of_thresholds))
        return SplitPointCollection(features, thresholds)

    def _weighted_class_indicator(self, sample_indices):
        # (numOfSamples x numOfClasses), row i holds the weight of sample i in the column of its class
        labels = self._label_indices[sample_indices]
        indicator = np.zeros((len(labels), self._num_of_classes), dtype=np.float64)
        indicator[np.arange(len(labels)), labels] = 1.0
        if self._class_weights is not None:
            indicator *= self._class_weights
        return indicator

    def compute_split_statistics(self, sample_indices, split_points):
        indicator = self._weighted_class_indicator(sample_indices)
        total = np.sum(indicator, axis=0)
        values = self._features[sample_indices][:, split_points.features]
        # left[i, j, k] is True if sample k goes left for threshold j of candidate column i
        left = values.T[:, np.newaxis, :] < split_points.thresholds[:, :, np.newaxis]
        left_child_statistics = np.matmul(left.astype(np.float64), indicator)
        right_child_statistics = np.maximum(total - left_child_statistics, 0.0)
        return SplitStatistics(left_child_statistics, right_child_statistics)

    def select_best_split_point(self, current_statistics, split_statistics, return_information_gain=False):
        information_gain = self._compute_information_gain(
            current_statistics, split_statistics.left_child_statistics, split_statistics.right_child_statistics)
        best_split_point_id = np.unravel_index(np.argmax(information_gain), information_gain.shape)
        best_split_point_id = tuple(int(i) for i in best_split_point_id)

        if return_information_gain:
            return best_split_point_id, float(information_gain[best_split_point_id])
        return best_split_point_id

    def _compute_information_gain(self, parent_statistics, left_histograms, right_histograms):
        num_of_samples = parent_statistics.num_of_samples
        if num_of_samples <= 0:
            return np.zeros(left_histograms.shape[:-1])
        left_weight = np.sum(left_histograms, axis=-1)
        right_weight = np.sum(right_histograms, axis=-1)
        children_entropy = left_weight * histogram_entropy(left_histograms) \
            + right_weight * histogram_entropy(right_histograms)
        return parent_statistics.entropy() - children_entropy / num_of_samples

    def partition(self, sample_indices, split_point):
        left = split_point.goes_left(self._features[sample_indices])
        i_split = int(np.count_nonzero(left))
        sample_indices[:] = np.hstack([sample_indices[left], sample_indices[~left]])
        return i_split
