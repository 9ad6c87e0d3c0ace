from abc import ABCMeta, abstractmethod

import numpy as np


def histogram_entropy(histograms):
    """
    Shannon entropy (in bits) of one or more histograms.

    @param histograms: A L{numpy} array whose last axis runs over the classes.
    @return: The entropy of every histogram, an array with the last axis removed.
    """
    histograms = np.asarray(histograms, dtype=np.float64)
    totals = np.sum(histograms, axis=-1, keepdims=True)
    with np.errstate(divide='ignore', invalid='ignore'):
        p = np.where(totals > 0, histograms / totals, 0.0)
        terms = np.where(p > 0, p * np.log2(p), 0.0)
    return -np.sum(terms, axis=-1)


class Statistics(metaclass=ABCMeta):
    """
    Interface of the node statistics a L{TrainingContext} computes.
    """

    @property
    @abstractmethod
    def num_of_samples(self):
        """
        @return: The (weighted) number of samples that contributed to this statistics object.
        """
        pass

    @abstractmethod
    def entropy(self):
        pass


class HistogramStatistics(Statistics):
    """
    Class histogram of the samples that reached a node.
    """

    def __init__(self, histogram):
        """
        @param histogram: The (weighted) count of every class index as a L{numpy} array.
        """
        self._histogram = np.asarray(histogram, dtype=np.float64)

    @classmethod
    def from_labels(cls, label_indices, num_of_classes, class_weights=None):
        """
        @param label_indices: A L{numpy} array of class indices in [0, num_of_classes).
        @param class_weights: Optional weight of every class, each sample counts with the weight of its class.
        """
        histogram = np.bincount(label_indices, minlength=num_of_classes).astype(np.float64)
        if class_weights is not None:
            histogram *= class_weights
        return cls(histogram)

    @property
    def num_of_classes(self):
        return len(self._histogram)

    @property
    def num_of_samples(self):
        return float(np.sum(self._histogram))

    @property
    def histogram(self):
        return self._histogram

    def probabilities(self):
        """
        @return: The histogram normalized to sum 1, all zeros for an empty histogram.
        """
        total = self.num_of_samples
        if total <= 0:
            return np.zeros_like(self._histogram)
        return self._histogram / total

    def entropy(self):
        return float(histogram_entropy(self._histogram))

    def __repr__(self):
        return 'HistogramStatistics({!r})'.format(self._histogram.tolist())
