import os
import textwrap
from types import SimpleNamespace

import numpy as np
import pytest
import scipy.io

from fastforest import main
from fastforest.forest_trainer import TrainingParameters
from fastforest.options import ForestOptions, OptionTag
from fastforest.persistence import load_forest
from fastforest.weak_learner import Parameters


@pytest.fixture
def matlab_file(tmp_path):
    # left half of every image is class 0, right half class 1
    data = np.zeros((2, 6, 6))
    data[:, 3:, :] = 10.0
    labels = np.zeros((2, 6, 6))
    labels[:, 3:, :] = 1
    labels[1, 0, 0] = -1
    filename = str(tmp_path / 'images.mat')
    scipy.io.savemat(filename, {'data': data.T, 'labels': labels.T})
    return filename


def _configuration(tree_count=2):
    return SimpleNamespace(
        training_data_parameters={'offsets': [(0, 0), (1, 0)]},
        forest_options=ForestOptions().tree_count(tree_count).features_per_node(OptionTag.ALL),
        training_parameters=TrainingParameters(maximum_depth=4),
        weak_learner_parameters=Parameters(num_of_thresholds=5),
        random_seed=0,
    )


def test_run_trains_and_saves_forest(tmp_path, matlab_file, capsys):
    forest_file = str(tmp_path / 'forest.mat')
    forest = main.run(matlab_file, forest_file, _configuration())

    assert len(forest) == 2
    assert forest.problem_spec.row_count_ == 71
    assert forest.problem_spec.labels().tolist() == [0.0, 1.0]
    assert os.path.exists(forest_file)
    assert len(load_forest(forest_file)) == 2
    assert 'Training forest with 71 samples' in capsys.readouterr().out


def test_main_reads_configuration_file(tmp_path, matlab_file):
    config_file = tmp_path / 'my_configuration.py'
    config_file.write_text(textwrap.dedent("""
        from fastforest.forest_trainer import TrainingParameters
        from fastforest.options import ForestOptions
        from fastforest.weak_learner import Parameters

        training_data_parameters = {'offsets': [(0, 0)]}
        forest_options = ForestOptions().tree_count(1)
        training_parameters = TrainingParameters(maximum_depth=3)
        weak_learner_parameters = Parameters(num_of_thresholds=4)
    """))
    forest_file = str(tmp_path / 'forest.mat')

    assert main.main(['main', matlab_file, forest_file, str(config_file)]) == 0
    forest = load_forest(forest_file)
    assert len(forest) == 1
    assert forest.problem_spec.column_count_ == 1


def test_default_configuration_is_loadable():
    config = main.load_configuration_from_python_file(main.DEFAULT_CONFIGURATION_FILE)
    assert config.forest_options.tree_count_ == 3
    assert len(config.training_data_parameters['offsets']) == 13


def test_usage(capsys):
    assert main.main(['main']) == 1
    assert 'Usage' in capsys.readouterr().out
