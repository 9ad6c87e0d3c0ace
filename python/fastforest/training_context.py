from abc import ABCMeta, abstractmethod


class TrainingContext(metaclass=ABCMeta):
    """
    Interface of the split strategy used by L{RandomForestTrainer}.

    Sample indices are row indices into the training data. The trainer passes views into its own
    index array, L{partition} reorders them in place.
    """

    @abstractmethod
    def set_external_parameters(self, problem_spec, features, label_indices):
        """Bind the training data and the resolved problem specification before training."""
        pass

    @abstractmethod
    def compute_statistics(self, sample_indices): pass

    @abstractmethod
    def sample_split_points(self, sample_indices, num_of_features, random_state): pass

    @abstractmethod
    def compute_split_statistics(self, sample_indices, split_points): pass

    @abstractmethod
    def select_best_split_point(self, current_statistics, split_statistics, return_information_gain=False):
        """Returns an ID that uniquely identifies the best split point"""
        pass

    @abstractmethod
    def partition(self, sample_indices, split_point):
        """
        Partitions the array sample_indices into a left and right part based on the specified split point.
        The returned index i_split is the partition point, i.e. sample_indices[:i_split] is the left part
        and sample_indices[i_split:] is the right part.
        """
        pass


class SplitPoint(metaclass=ABCMeta):

    @abstractmethod
    def goes_left(self, features):
        """Returns a boolean array telling for each row of features whether it goes to the left child."""
        pass

    @abstractmethod
    def to_array(self): pass

    @staticmethod
    @abstractmethod
    def from_array(array): pass
