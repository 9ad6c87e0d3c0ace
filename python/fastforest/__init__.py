"""
Random forest training configuration: options, problem specification, stopping criteria and
default substitution, together with a trainer and image feature extraction that use them.
"""

from .defaults import DefaultTag, DefaultValueChooser, is_default, rf_default
from .early_stop import EarlyStopPolicy
from .errors import ContractViolation, ForestError, PreconditionViolation
from .forest import Forest
from .forest_trainer import RandomForestTrainer, RFTraits, StopVisiting, TrainingParameters
from .image_data import ImageData, ImageDataReader, copy_image, copy_image_if
from .options import ForestOptions, OptionTag
from .persistence import load_configuration, load_forest, save_configuration, save_forest
from .preprocessing import prepare_problem
from .problem_spec import LabelType, ProblemSpec, ProblemType
from .tree import ArrayTree
from .weak_learner import WeakLearnerContext

__version__ = '0.1.0'
