import importlib.util
import os
import sys
from time import time

from .defaults import rf_default
from .forest_trainer import RandomForestTrainer
from .image_data import ImageDataReader
from .persistence import save_forest
from .weak_learner import WeakLearnerContext

DEFAULT_CONFIGURATION_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'configuration.py')


def run(matlab_file, forest_file, config):
    image_data = ImageDataReader.read_from_matlab_file(matlab_file)
    features, labels = image_data.create_feature_matrix(config.training_data_parameters['offsets'])

    print("Training forest with {} samples ...".format(features.shape[0]))
    trainer = RandomForestTrainer(config.training_parameters)
    start_time = time()
    forest = trainer.train_forest(features, labels,
                                  options=config.forest_options,
                                  problem_spec=getattr(config, 'problem_spec', rf_default()),
                                  split=WeakLearnerContext(config.weak_learner_parameters),
                                  random_state=getattr(config, 'random_seed', None))
    stop_time = time()
    print("Training time: {}".format(stop_time - start_time))

    print("Saving forest...")
    save_forest(forest_file, forest)
    print("Done.")
    return forest


def load_configuration_from_python_file(filename):
    spec = importlib.util.spec_from_file_location('configuration', filename)
    config = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(config)
    return config


def main(argv=None):
    if argv is None:
        argv = sys.argv
    if len(argv) < 3:
        print("Usage: python -m fastforest.main <data file> <forest file> [configuration file]")
        return 1

    matlab_file = argv[1]
    forest_file = argv[2]

    config_file = DEFAULT_CONFIGURATION_FILE
    if len(argv) > 3:
        config_file = argv[3]
    config = load_configuration_from_python_file(config_file)

    run(matlab_file, forest_file, config)
    return 0


if __name__ == '__main__':
    sys.exit(main())
