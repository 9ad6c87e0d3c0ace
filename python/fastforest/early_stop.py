"""
Stopping criteria for growing trees.

The trainer accepts any callable with the same contract as L{EarlyStopPolicy}: it is
constructed once per tree and called with the samples of every node that is considered for
splitting. It returns True if the node should become a leaf.
"""


class EarlyStopPolicy(object):
    """
    Standard early stopping criterion: stop if the node has fewer samples than
    C{min_split_node_size_}.
    """

    def __init__(self, options):
        """
        @param options: Any object with a C{min_split_node_size_} attribute, usually L{ForestOptions}.
        """
        self.min_split_node_size_ = options.min_split_node_size_

    def set_external_parameters(self, problem_spec):
        pass

    def __call__(self, region):
        return len(region) < self.min_split_node_size_

    def __repr__(self):
        return 'EarlyStopPolicy(min_split_node_size_={})'.format(self.min_split_node_size_)
