"""
This file contains configurations for the random forest trainer and the weak learner.
"""

from fastforest.defaults import rf_default
from fastforest.forest_trainer import TrainingParameters
from fastforest.options import ForestOptions, OptionTag
from fastforest.weak_learner import Parameters

training_data_parameters = {
    'offsets': [(0, 0),
                (-3, 0), (3, 0), (0, -3), (0, 3),
                (-9, 0), (9, 0), (0, -9), (0, 9),
                (-15, -15), (15, 15), (-15, 15), (15, -15)],
}

forest_options = ForestOptions() \
    .tree_count(3) \
    .min_split_node_size(100) \
    .features_per_node(OptionTag.SQRT) \
    .samples_per_tree(0.5) \
    .sample_with_replacement(False)

problem_spec = rf_default()

training_parameters = TrainingParameters(
    maximum_depth=12,
    minimum_information_gain=0.0,
)

weak_learner_parameters = Parameters(
    num_of_thresholds=20,
)

random_seed = None
