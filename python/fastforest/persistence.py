"""
Reading and writing random forests and their configuration as MATLAB .mat files.

A file contains the variables
 - C{options}: the flat buffer of L{ForestOptions.serialize}
 - C{ext_param}: the struct written by L{ProblemSpec.make_map}
 - C{labels}: the class labels in double precision
 - C{forest}: a cell array with one node matrix per tree (only for forests)

Files in the HDF5 based MATLAB v7.3 format can be read as well.
"""

import logging
import math

import numpy as np
import scipy.io

from .errors import precondition
from .forest import Forest
from .histogram_statistics import HistogramStatistics
from .options import ForestOptions
from .problem_spec import LABEL_DTYPES, LabelType, ProblemSpec, cast_labels
from .tree import ArrayTree
from .weak_learner import SplitPoint

logger = logging.getLogger(__name__)

OPTIONS_VAR_NAME = 'options'
EXT_PARAM_VAR_NAME = 'ext_param'
LABELS_VAR_NAME = 'labels'
FOREST_VAR_NAME = 'forest'

# columns of a node matrix: split feature, split threshold, histogram..., leaf node indicator
SPLIT_POINT_COLUMNS = 2


def convert_tree_to_matrix(tree, num_of_classes):
    """
    @return: A L{numpy} array with one row per node of the tree. Rows of nodes that were never
             reached during training are -1.
    """
    histogram_columns = slice(SPLIT_POINT_COLUMNS, SPLIT_POINT_COLUMNS + num_of_classes)
    matrix = -np.ones((len(tree), SPLIT_POINT_COLUMNS + num_of_classes + 1), dtype=np.float64)
    for node in tree.nodes():
        row = matrix[node.index]
        if not node.leaf_node:
            row[:SPLIT_POINT_COLUMNS] = node.split_point.to_array()
        row[histogram_columns] = node.statistics.histogram
        row[-1] = 1 if node.leaf_node else 0
    return matrix


def convert_matrix_to_tree(matrix, num_of_classes):
    matrix = np.asarray(matrix, dtype=np.float64)
    precondition(matrix.ndim == 2 and matrix.shape[1] == SPLIT_POINT_COLUMNS + num_of_classes + 1,
                 "convert_matrix_to_tree(): tree matrix does not match the number of classes")
    maximum_depth = int(round(math.log(matrix.shape[0] + 1, 2)))
    precondition(2**maximum_depth - 1 == matrix.shape[0],
                 "convert_matrix_to_tree(): tree matrix does not describe a complete binary tree")
    tree = ArrayTree(maximum_depth)
    for i in np.flatnonzero(matrix[:, -1] >= 0):
        row = matrix[i]
        node = tree.node(int(i))
        node.statistics = HistogramStatistics(row[SPLIT_POINT_COLUMNS:SPLIT_POINT_COLUMNS + num_of_classes].copy())
        node.leaf_node = row[-1] == 1
        if not node.leaf_node:
            node.split_point = SplitPoint.from_array(row[:SPLIT_POINT_COLUMNS])
    return tree


def _make_configuration_dict(options, problem_spec):
    return {
        OPTIONS_VAR_NAME: options.serialize(),
        EXT_PARAM_VAR_NAME: problem_spec.make_map(),
        LABELS_VAR_NAME: np.asarray(problem_spec.labels(LabelType.DOUBLE), dtype=np.float64),
    }


def save_configuration(filename, options, problem_spec):
    """Write options and problem specification to a .mat file."""
    scipy.io.savemat(filename, _make_configuration_dict(options, problem_spec))


def save_forest(filename, forest):
    """Write a trained L{Forest} to a .mat file."""
    m_dict = _make_configuration_dict(forest.options, forest.problem_spec)
    forest_array = np.empty((len(forest),), dtype=object)
    for i, tree in enumerate(forest):
        forest_array[i] = convert_tree_to_matrix(tree, forest.problem_spec.class_count_)
    m_dict[FOREST_VAR_NAME] = forest_array
    scipy.io.savemat(filename, m_dict)
    logger.info("Saved forest with %d trees to %s", len(forest), filename)


def _read_matlab_file(filename, with_forest):
    try:
        mat_dict = scipy.io.loadmat(filename)
        struct = mat_dict[EXT_PARAM_VAR_NAME]
        m_dict = {
            OPTIONS_VAR_NAME: np.ravel(mat_dict[OPTIONS_VAR_NAME]),
            EXT_PARAM_VAR_NAME: dict((name, np.ravel(struct[name][0, 0])) for name in struct.dtype.names),
            LABELS_VAR_NAME: np.ravel(mat_dict[LABELS_VAR_NAME]),
        }
        if with_forest:
            m_dict[FOREST_VAR_NAME] = [np.asarray(matrix) for matrix in np.ravel(mat_dict[FOREST_VAR_NAME])]
    except NotImplementedError:
        import h5py
        logger.debug("Reading %s as HDF5 file", filename)
        with h5py.File(filename, 'r') as f:
            group = f[EXT_PARAM_VAR_NAME]
            m_dict = {
                OPTIONS_VAR_NAME: np.ravel(f[OPTIONS_VAR_NAME][()]),
                EXT_PARAM_VAR_NAME: dict((name, np.ravel(group[name][()])) for name in group),
                LABELS_VAR_NAME: np.ravel(f[LABELS_VAR_NAME][()]),
            }
            if with_forest:
                m_dict[FOREST_VAR_NAME] = [f[reference][()].T for reference in np.ravel(f[FOREST_VAR_NAME][()])]
    return m_dict


def _configuration_from_dict(m_dict):
    options = ForestOptions().unserialize(m_dict[OPTIONS_VAR_NAME])
    problem_spec = ProblemSpec().make_from_map(m_dict[EXT_PARAM_VAR_NAME])
    labels = np.asarray(m_dict[LABELS_VAR_NAME], dtype=np.float64)
    precondition(len(labels) == problem_spec.class_count_,
                 "load_configuration(): number of labels does not match the class count")
    if problem_spec.class_count_ > 0:
        precondition(problem_spec.class_type_ in LABEL_DTYPES,
                     "load_configuration(): unknown class label kind")
        problem_spec.classes_(cast_labels(labels, LABEL_DTYPES[problem_spec.class_type_]))
    return options, problem_spec


def load_configuration(filename):
    """
    Read options and problem specification from a file written by L{save_configuration} or
    L{save_forest}.

    @return: A tuple (options, problem_spec)
    """
    return _configuration_from_dict(_read_matlab_file(filename, with_forest=False))


def load_forest(filename):
    """
    Read a forest written by L{save_forest}.

    @return: The L{Forest}
    """
    m_dict = _read_matlab_file(filename, with_forest=True)
    options, problem_spec = _configuration_from_dict(m_dict)
    trees = [convert_matrix_to_tree(matrix, problem_spec.class_count_) for matrix in m_dict[FOREST_VAR_NAME]]
    logger.info("Loaded forest with %d trees from %s", len(trees), filename)
    return Forest(options.build(), problem_spec, trees)
