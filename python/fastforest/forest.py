import numpy as np

from .errors import precondition


class Forest(object):
    """
    A trained random forest: the trees together with the options and the problem specification
    they were trained with.
    """

    def __init__(self, options, problem_spec, trees=None):
        self._options = options
        self._problem_spec = problem_spec
        self._trees = [] if trees is None else list(trees)

    @property
    def options(self):
        return self._options

    @property
    def problem_spec(self):
        return self._problem_spec

    def append(self, tree):
        self._trees.append(tree)

    def __len__(self):
        return len(self._trees)

    def __iter__(self):
        return iter(self._trees)

    def __getitem__(self, index):
        return self._trees[index]

    def predict_probabilities(self, features):
        """
        @param features: A L{numpy} array of dimensions (numOfRows x numOfColumns)
        @return: A L{numpy} array of dimensions (numOfRows x numOfClasses) with the leaf class
                 distributions averaged over all trees.
        """
        features = np.asarray(features)
        precondition(features.ndim == 2 and features.shape[1] == self._problem_spec.column_count_,
                     "Forest.predict_probabilities(): features must have {} columns".format(
                         self._problem_spec.column_count_))
        precondition(len(self._trees) > 0, "Forest.predict_probabilities(): the forest has no trees")
        probabilities = np.zeros((features.shape[0], self._problem_spec.class_count_), dtype=np.float64)
        for tree in self._trees:
            leaf_indices = tree.apply(features)
            for leaf_index in np.unique(leaf_indices):
                probabilities[leaf_indices == leaf_index, :] += tree.node(leaf_index).statistics.probabilities()
        return probabilities / len(self._trees)

    def predict_class_indices(self, features):
        return np.argmax(self.predict_probabilities(features), axis=1)

    def predict_labels(self, features, label_type=None):
        """
        @param label_type: The kind of the returned labels, defaults to the kind of the training labels.
        @return: A L{numpy} array with the predicted label of every row.
        """
        if label_type is None:
            label_type = self._problem_spec.class_type_
        class_labels = self._problem_spec.labels(label_type)
        return class_labels[self.predict_class_indices(features)]

    def predict_label(self, row, label_type=None):
        """
        @param row: A 1-D L{numpy} array of features.
        @return: The predicted label as a L{numpy} scalar.
        """
        if label_type is None:
            label_type = self._problem_spec.class_type_
        row = np.asarray(row).reshape((1, -1))
        class_index = int(self.predict_class_indices(row)[0])
        return self._problem_spec.to_classlabel(class_index, label_type)
