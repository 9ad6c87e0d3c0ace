"""
Resolution of the problem specification from the training data.
"""

import copy
import logging
import math

import numpy as np

from .defaults import DefaultValueChooser, rf_default
from .errors import precondition
from .options import ForestOptions, OptionTag
from .problem_spec import LABEL_DTYPES, ProblemSpec, ProblemType, cast_labels

logger = logging.getLogger(__name__)


def compute_mtry(options, column_count):
    """
    @return: The number of columns to consider at each split for a problem with C{column_count} columns.
    """
    switch = options.mtry_switch_
    if switch == OptionTag.SQRT:
        return int(math.floor(math.sqrt(column_count) + 0.5))
    elif switch == OptionTag.LOG:
        return int(1 + math.log(column_count, 2))
    elif switch == OptionTag.ALL:
        return column_count
    elif switch == OptionTag.FUNCTION:
        precondition(options.mtry_func_ is not None, "compute_mtry(): no feature count function was set")
        return int(options.mtry_func_(column_count))
    return options.mtry_


def compute_msample(options, row_count):
    """
    @return: The number of samples drawn for each tree for a problem with C{row_count} rows.
    """
    switch = options.training_set_calc_switch_
    if switch == OptionTag.PROPORTIONAL:
        return int(math.ceil(options.training_set_proportion_ * row_count))
    elif switch == OptionTag.FUNCTION:
        precondition(options.training_set_func_ is not None, "compute_msample(): no sample count function was set")
        return int(options.training_set_func_(row_count))
    return options.training_set_size_


def _compute_label_indices(problem_spec, labels):
    class_labels = problem_spec.labels(problem_spec.class_type_)
    converted = cast_labels(labels, class_labels.dtype)
    precondition(np.array_equal(converted, labels),
                 "prepare_problem(): labels cannot be represented in the class label kind")
    order = np.argsort(class_labels, kind='stable')
    sorted_labels = class_labels[order]
    positions = np.searchsorted(sorted_labels, converted)
    positions = np.minimum(positions, len(sorted_labels) - 1)
    precondition(np.all(sorted_labels[positions] == converted),
                 "prepare_problem(): found labels that are not among the given classes")
    return order[positions]


def prepare_problem(features, labels, options=rf_default(), problem_spec=rf_default()):
    """
    Complete the problem specification for the given training data.

    The given options and problem specification are not modified.

    @param features: A L{numpy} array of dimensions (numOfRows x numOfColumns)
    @param labels: A L{numpy} array with one class label per row
    @param options: L{ForestOptions} or L{rf_default}()
    @param problem_spec: A partially filled L{ProblemSpec} or L{rf_default}()
    @return: A tuple of the built options, the completed problem specification and an array with
             the class index of every row.
    """
    features = np.asarray(features)
    labels = np.asarray(labels)
    precondition(features.ndim == 2, "prepare_problem(): features must be a 2-D array")
    precondition(labels.ndim == 1, "prepare_problem(): labels must be a 1-D array")
    precondition(features.shape[0] == labels.shape[0],
                 "prepare_problem(): number of labels does not match the number of rows")
    precondition(features.shape[0] > 0 and features.shape[1] > 0, "prepare_problem(): empty training data")

    options = DefaultValueChooser.choose(options, ForestOptions())
    if not options.frozen:
        options = options.build()
    problem_spec = copy.deepcopy(DefaultValueChooser.choose(problem_spec, ProblemSpec()))

    row_count, column_count = features.shape
    precondition(problem_spec.column_count_ in (0, column_count),
                 "prepare_problem(): column count {} was specified but the data has {} columns".format(
                     problem_spec.column_count_, column_count))
    problem_spec.column_count(column_count)
    problem_spec.row_count_ = row_count

    if problem_spec.problem_type_ == ProblemType.CHECKLATER:
        problem_spec.problem_type_ = ProblemType.CLASSIFICATION
    precondition(problem_spec.problem_type_ == ProblemType.CLASSIFICATION,
                 "prepare_problem(): only classification problems are supported")

    if problem_spec.class_count_ == 0:
        class_labels, label_indices = np.unique(labels, return_inverse=True)
        problem_spec.classes_(class_labels)
        label_indices = label_indices.reshape((-1,))
    else:
        precondition(problem_spec.class_type_ in LABEL_DTYPES,
                     "prepare_problem(): the class label kind of the problem specification is unknown")
        label_indices = _compute_label_indices(problem_spec, labels)

    if problem_spec.is_weighted:
        precondition(len(problem_spec.class_weights_) == problem_spec.class_count_,
                     "prepare_problem(): got {} class weights for {} classes".format(
                         len(problem_spec.class_weights_), problem_spec.class_count_))

    problem_spec.actual_mtry_ = compute_mtry(options, column_count)
    precondition(1 <= problem_spec.actual_mtry_ <= column_count,
                 "prepare_problem(): number of features per node {} is not in [1, {}]".format(
                     problem_spec.actual_mtry_, column_count))
    problem_spec.actual_msample_ = compute_msample(options, row_count)
    precondition(1 <= problem_spec.actual_msample_ <= row_count,
                 "prepare_problem(): number of samples per tree {} is not in [1, {}]".format(
                     problem_spec.actual_msample_, row_count))

    logger.debug("Prepared problem: %d rows, %d columns, %d classes, mtry=%d, msample=%d",
                 row_count, column_count, problem_spec.class_count_,
                 problem_spec.actual_mtry_, problem_spec.actual_msample_)
    return options, problem_spec, np.asarray(label_indices, dtype=np.int64)
