"""
Options for training a random forest.

Usage::

    options = ForestOptions() \\
        .tree_count(100) \\
        .min_split_node_size(5) \\
        .features_per_node(OptionTag.SQRT) \\
        .sample_with_replacement(False)

The options only contain parameters that do not depend on the problem. Class weights and
other problem dependent settings live in L{ProblemSpec}.
"""

import copy
import numbers
from enum import IntEnum

import numpy as np

from .errors import PreconditionViolation, precondition


class OptionTag(IntEnum):
    """Policy selectors shared by the sampling, stratification and feature count options."""
    EQUAL = 0
    PROPORTIONAL = 1
    EXTERNAL = 2
    NONE = 3
    FUNCTION = 4
    LOG = 5
    SQRT = 6
    CONST = 7
    ALL = 8


STRATIFICATION_TAGS = (OptionTag.EQUAL, OptionTag.PROPORTIONAL, OptionTag.EXTERNAL, OptionTag.NONE)
FEATURES_PER_NODE_TAGS = (OptionTag.LOG, OptionTag.SQRT, OptionTag.ALL)


def _is_integer(value):
    return isinstance(value, (numbers.Integral, np.integer)) and not isinstance(value, (bool, np.bool_, OptionTag))


def _is_real(value):
    return isinstance(value, (numbers.Real, np.floating)) and not isinstance(value, (bool, np.bool_, OptionTag))


class ForestOptions(object):

    SERIALIZED_SIZE = 11

    # serialization order of the fields, None marks the slot of a function flag
    _FIELDS = (
        'training_set_proportion_',
        'training_set_size_',
        None,
        'training_set_calc_switch_',
        'sample_with_replacement_',
        'stratification_method_',
        'mtry_switch_',
        'mtry_',
        None,
        'tree_count_',
        'min_split_node_size_',
    )

    # tags each switch may hold
    _ALLOWED_TAGS = {
        'training_set_calc_switch_': (OptionTag.PROPORTIONAL, OptionTag.CONST, OptionTag.FUNCTION),
        'stratification_method_': STRATIFICATION_TAGS,
        'mtry_switch_': FEATURES_PER_NODE_TAGS + (OptionTag.CONST, OptionTag.FUNCTION),
    }

    _CONVERTERS = {
        'training_set_proportion_': float,
        'training_set_size_': int,
        'training_set_calc_switch_': lambda v: OptionTag(int(v)),
        'sample_with_replacement_': bool,
        'stratification_method_': lambda v: OptionTag(int(v)),
        'mtry_switch_': lambda v: OptionTag(int(v)),
        'mtry_': int,
        'tree_count_': int,
        'min_split_node_size_': int,
    }

    def __init__(self):
        self.training_set_proportion_ = 1.0
        self.training_set_size_ = 0
        self.training_set_func_ = None
        self.training_set_calc_switch_ = OptionTag.PROPORTIONAL

        self.sample_with_replacement_ = True
        self.stratification_method_ = OptionTag.NONE

        self.mtry_switch_ = OptionTag.SQRT
        self.mtry_ = 0
        self.mtry_func_ = None

        self.tree_count_ = 256
        self.min_split_node_size_ = 1

        self._frozen = False

    def _check_mutable(self, method_name):
        precondition(not self._frozen,
                     "ForestOptions.{}(): options have been built and can no longer be changed".format(method_name))

    @property
    def frozen(self):
        return self._frozen

    def build(self):
        """
        @return: A frozen copy of these options. The training driver only works with built options.
        """
        options = copy.copy(self)
        options._frozen = True
        return options

    def use_stratification(self, tag):
        """
        Specify the stratification strategy.

        EQUAL draws the same number of samples from every class, PROPORTIONAL samples every
        class proportional to its share of the population, EXTERNAL means the strata have been
        set externally and NONE disables stratification.

        @param tag: One of OptionTag.EQUAL, PROPORTIONAL, EXTERNAL or NONE. Default: NONE.
        """
        self._check_mutable('use_stratification')
        precondition(isinstance(tag, OptionTag) and tag in STRATIFICATION_TAGS,
                     "ForestOptions.use_stratification(): input must be EQUAL, PROPORTIONAL, EXTERNAL or NONE")
        self.stratification_method_ = tag
        return self

    def sample_with_replacement(self, flag):
        """Sample from the training population with or without replacement. Default: True."""
        self._check_mutable('sample_with_replacement')
        self.sample_with_replacement_ = bool(flag)
        return self

    def samples_per_tree(self, value):
        """
        Specify how many samples are drawn for each tree.

        @param value: A float is the fraction of the rows used per tree (should be in [0, 1] when
                      sampling without replacement), an int is the absolute number of samples and a
                      callable maps the number of rows to the number of samples. Default: 1.0.
        """
        self._check_mutable('samples_per_tree')
        if _is_integer(value):
            self.training_set_size_ = int(value)
            self.training_set_calc_switch_ = OptionTag.CONST
        elif _is_real(value):
            self.training_set_proportion_ = float(value)
            self.training_set_calc_switch_ = OptionTag.PROPORTIONAL
        else:
            precondition(callable(value),
                         "ForestOptions.samples_per_tree(): input must be a float, an int or a function")
            self.training_set_func_ = value
            self.training_set_calc_switch_ = OptionTag.FUNCTION
        return self

    def features_per_node(self, value):
        """
        Specify mtry, the number of columns randomly chosen to select the best split from.

        @param value: OptionTag.LOG, SQRT or ALL to compute mtry from the number of columns, an int
                      to set it directly, or a callable mapping the number of columns to mtry.
                      Default: OptionTag.SQRT.
        """
        self._check_mutable('features_per_node')
        if isinstance(value, OptionTag):
            precondition(value in FEATURES_PER_NODE_TAGS,
                         "ForestOptions.features_per_node(): input must be LOG, SQRT or ALL")
            self.mtry_switch_ = value
        elif _is_integer(value):
            self.mtry_ = int(value)
            self.mtry_switch_ = OptionTag.CONST
        else:
            precondition(callable(value),
                         "ForestOptions.features_per_node(): input must be an OptionTag, an int or a function")
            self.mtry_func_ = value
            self.mtry_switch_ = OptionTag.FUNCTION
        return self

    def tree_count(self, count):
        """How many trees to create. Default: 256."""
        self._check_mutable('tree_count')
        self.tree_count_ = int(count)
        return self

    def min_split_node_size(self, size):
        """
        Number of samples required for a node to be split.

        Nodes with fewer samples are not split even if the classes are not yet separated, they
        predict the class proportions of their samples instead. Default: 1 (complete growing).
        """
        self._check_mutable('min_split_node_size')
        self.min_split_node_size_ = int(size)
        return self

    def serialized_size(self):
        return self.SERIALIZED_SIZE

    def serialize(self, out=None):
        """
        Write the options into a flat buffer.

        The functions set with L{samples_per_tree} and L{features_per_node} are only recorded
        as a 1/0 presence flag.

        @param out: Optional buffer with exactly 11 slots that is filled in place.
        @return: The buffer as a L{numpy} float64 array.
        """
        if out is None:
            out = np.zeros((self.SERIALIZED_SIZE,), dtype=np.float64)
        precondition(len(out) == self.SERIALIZED_SIZE,
                     "ForestOptions.serialize(): wrong number of parameters")
        for i, field in enumerate(self._FIELDS):
            if field is not None:
                out[i] = float(getattr(self, field))
        out[2] = 0.0 if self.training_set_func_ is None else 1.0
        out[8] = 0.0 if self.mtry_func_ is None else 1.0
        return out

    def unserialize(self, buf):
        """
        Read the options from a flat buffer written by L{serialize}.

        Functions cannot be restored, after reading both function slots are None.
        """
        self._check_mutable('unserialize')
        precondition(len(buf) == self.SERIALIZED_SIZE,
                     "ForestOptions.unserialize(): wrong number of parameters")
        values = {}
        for field, value in zip(self._FIELDS, buf):
            if field is not None:
                try:
                    values[field] = self._CONVERTERS[field](value)
                except (ValueError, OverflowError) as e:
                    raise PreconditionViolation(
                        "ForestOptions.unserialize(): invalid value {!r} for {}".format(value, field)) from e
        for field, tags in self._ALLOWED_TAGS.items():
            precondition(values[field] in tags,
                         "ForestOptions.unserialize(): {} cannot be {}".format(field, values[field].name))
        self.__dict__.update(values)
        self.training_set_func_ = None
        self.mtry_func_ = None
        return self

    def __eq__(self, other):
        if not isinstance(other, ForestOptions):
            return NotImplemented
        return all(getattr(self, field) == getattr(other, field)
                   for field in self._FIELDS if field is not None)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    def __repr__(self):
        return 'ForestOptions({})'.format(', '.join(
            '{}={!r}'.format(field, getattr(self, field)) for field in self._FIELDS if field is not None))
