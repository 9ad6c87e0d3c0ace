import logging

import numpy as np

from .defaults import DefaultValueChooser, rf_default
from .early_stop import EarlyStopPolicy
from .forest import Forest
from .options import ForestOptions, OptionTag
from .preprocessing import prepare_problem
from .problem_spec import ProblemSpec
from .tree import ArrayTree
from .weak_learner import WeakLearnerContext

logger = logging.getLogger(__name__)


class TrainingParameters(object):
    """Parameters of the tree growing that are not part of L{ForestOptions}."""

    def __init__(self, maximum_depth=12, minimum_information_gain=0.0):
        self.maximum_depth = maximum_depth
        self.minimum_information_gain = minimum_information_gain


class StopVisiting(object):
    """Visitor that does nothing."""

    def visit_after_tree(self, trainer, tree, tree_index):
        pass

    def visit_at_end(self, forest):
        pass


class RFTraits(object):
    """
    The types used when L{rf_default}() is passed to the trainer. Refer to these names instead of
    the classes themselves, the defaults may change.
    """
    Options_t = ForestOptions
    ProblemSpec_t = ProblemSpec
    DecisionTree_t = ArrayTree
    Default_Split_t = WeakLearnerContext
    Default_Stop_t = EarlyStopPolicy
    Default_Visitor_t = StopVisiting
    StopVisiting_t = StopVisiting


def _stratum_sizes(num_of_samples, strata, stratification_method, sample_with_replacement):
    num_of_strata = len(strata)
    stratum_lengths = np.array([len(stratum) for stratum in strata], dtype=np.int64)
    if stratification_method == OptionTag.EQUAL:
        sizes = np.full((num_of_strata,), num_of_samples // num_of_strata, dtype=np.int64)
        sizes[:num_of_samples % num_of_strata] += 1
    else:
        exact_sizes = num_of_samples * stratum_lengths / float(np.sum(stratum_lengths))
        sizes = np.floor(exact_sizes).astype(np.int64)
        remainder = num_of_samples - int(np.sum(sizes))
        sizes[np.argsort(sizes - exact_sizes, kind='stable')[:remainder]] += 1
    sizes[stratum_lengths == 0] = 0
    if not sample_with_replacement:
        sizes = np.minimum(sizes, stratum_lengths)
    return sizes


def draw_samples(label_indices, options, problem_spec, random_state):
    """
    Draw the row indices used to grow one tree.

    @param label_indices: The class index of every training row.
    @return: A L{numpy} array of row indices.
    """
    num_of_samples = problem_spec.actual_msample_
    replace = options.sample_with_replacement_
    stratification_method = options.stratification_method_
    if stratification_method == OptionTag.EXTERNAL:
        logger.warning("External stratification is not available, sampling without stratification")
        stratification_method = OptionTag.NONE

    if stratification_method == OptionTag.NONE:
        return random_state.choice(len(label_indices), size=num_of_samples, replace=replace)

    strata = [np.flatnonzero(label_indices == class_index) for class_index in range(problem_spec.class_count_)]
    sizes = _stratum_sizes(num_of_samples, strata, stratification_method, replace)
    sample_indices = [random_state.choice(stratum, size=size, replace=replace)
                      for stratum, size in zip(strata, sizes) if size > 0]
    return np.hstack(sample_indices).astype(np.int64)


class RandomForestTrainer(object):

    class _TrainingOperation(object):

        def __init__(self, sample_indices, training_context, training_parameters, problem_spec, stop,
                     random_state):
            self._sample_indices = sample_indices
            self._trainingContext = training_context
            self._trainingParameters = training_parameters
            self._problemSpec = problem_spec
            self._stop = stop
            self._randomState = random_state

        def train_recursive(self, node, i_start, i_end, statistics=None):
            # define local aliases for some long variable names
            sample_indices = self._sample_indices[i_start:i_end]

            # assign statistics to node
            if statistics is None:
                statistics = self._trainingContext.compute_statistics(sample_indices)
            node.statistics = statistics
            node.leaf_node = True

            # stop splitting the node if the stopping criterion holds or the maximum depth is reached
            if self._stop(sample_indices) or node.left_child is None:
                return

            split_points = self._trainingContext.sample_split_points(
                sample_indices, self._problemSpec.actual_mtry_, self._randomState)
            split_statistics = self._trainingContext.compute_split_statistics(sample_indices, split_points)

            best_split_point_id, best_information_gain = self._trainingContext.select_best_split_point(
                node.statistics, split_statistics, return_information_gain=True)

            # stop splitting the node if the best information gain is below the minimum information gain
            if best_information_gain <= self._trainingParameters.minimum_information_gain:
                return

            # sample_indices[:i_split] will contain the left child indices
            # and sample_indices[i_split:] will contain the right child indices
            split_point = split_points.get_split_point(best_split_point_id)
            i_split = i_start + self._trainingContext.partition(sample_indices, split_point)
            if i_split == i_start or i_split == i_end:
                return

            node.split_point = split_point
            node.leaf_node = False

            self.train_recursive(node.left_child, i_start, i_split)
            self.train_recursive(node.right_child, i_split, i_end)

    def __init__(self, training_parameters=None):
        if training_parameters is None:
            training_parameters = TrainingParameters()
        self._training_parameters = training_parameters

    @property
    def training_parameters(self):
        return self._training_parameters

    def train_forest(self, features, labels, options=rf_default(), problem_spec=rf_default(),
                     split=rf_default(), stop=rf_default(), visitor=rf_default(), random_state=None):
        """
        Train a random forest.

        Every strategy argument may be L{rf_default}(), in which case the corresponding type of
        L{RFTraits} is used.

        @param features: A L{numpy} array of dimensions (numOfRows x numOfColumns)
        @param labels: A L{numpy} array with one class label per row
        @param options: L{ForestOptions}
        @param problem_spec: A L{ProblemSpec} with the known facts about the problem
        @param split: A L{TrainingContext} that finds the splits
        @param stop: A callable deciding for the samples of a node whether to stop splitting. The
                     default is a new L{EarlyStopPolicy} for every tree.
        @param visitor: An object notified after every tree and at the end of training
        @param random_state: Seed or L{numpy.random.RandomState}
        @return: The trained L{Forest}
        """
        features = np.asarray(features)
        options, problem_spec, label_indices = prepare_problem(features, labels, options, problem_spec)
        split = DefaultValueChooser.choose(split, RFTraits.Default_Split_t())
        visitor = DefaultValueChooser.choose(visitor, RFTraits.Default_Visitor_t())
        if not isinstance(random_state, np.random.RandomState):
            random_state = np.random.RandomState(random_state)

        split.set_external_parameters(problem_spec, features, label_indices)

        logger.info("Training %d trees on %d rows with %d columns", options.tree_count_,
                    problem_spec.row_count_, problem_spec.column_count_)
        forest = Forest(options, problem_spec)
        for i in range(options.tree_count_):
            sample_indices = draw_samples(label_indices, options, problem_spec, random_state)
            tree_stop = DefaultValueChooser.choose(stop, RFTraits.Default_Stop_t(options))
            if hasattr(tree_stop, 'set_external_parameters'):
                tree_stop.set_external_parameters(problem_spec)
            tree = RFTraits.DecisionTree_t(self._training_parameters.maximum_depth)
            self.train_tree(tree, sample_indices, split, tree_stop, problem_spec, random_state)
            forest.append(tree)
            visitor.visit_after_tree(self, tree, i)
            logger.debug("Trained tree %d of %d", i + 1, options.tree_count_)
        visitor.visit_at_end(forest)
        return forest

    def train_tree(self, tree, sample_indices, training_context, stop, problem_spec, random_state):
        rf_operation = self._TrainingOperation(sample_indices, training_context, self._training_parameters,
                                               problem_spec, stop, random_state)
        i_start = 0
        i_end = len(sample_indices)
        rf_operation.train_recursive(tree.root, i_start, i_end)
        return tree
