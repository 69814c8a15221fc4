import logging
from bnrestart.config import SearchConfig
from bnrestart.graph import Graph
from bnrestart.markov_blanket import markov_blanket_correction
from bnrestart.parser import SingleFileParser
from bnrestart.restart import RepeatedHillClimbSearch
from bnrestart.scores import K2Score


class StructureEstimator(object):
    def __init__(self, data, target=None, config=None, weights=None, scoring_method=None, logger=None):
        """
        Learns a Bayesian network classifier structure from a discrete data set with
        repeated hill climbing. Only the structure is learned; `get_model` hands it over
        for parameter fitting.

        :param data: pandas DataFrame, one column per variable
        :param target: name of the class variable
        :param config: SearchConfig
        :param weights: per-row weights for the default K2Score
        :param scoring_method: oracle to use instead of K2Score
        :param logger: logging.Logger
        """
        self.data = data
        self.variables = list(data.columns)
        self.config = (SearchConfig() if config is None else config).validate()
        self.logger = logger or logging.getLogger(__name__)

        self.target = target
        self.target_index = None
        if target is not None:
            if target not in self.variables:
                raise ValueError('Target {name!r} is not a column of the data.'.format(name=target))
            self.target_index = self.variables.index(target)

        if scoring_method is None:
            scoring_method = K2Score(data, score_type=self.config.score_type, weights=weights)
        self.scoring_method = scoring_method
        self.search = RepeatedHillClimbSearch(self.scoring_method, config=self.config, target=self.target_index,
                                              logger=self.logger)
        self.graph = None
        self.result = None

    @classmethod
    def from_csv(cls, file_name, target=None, weight_column=None, config=None, **kwargs):
        parser = SingleFileParser(file_name, target=target, weight_column=weight_column)
        return cls(parser.data_frame, target=target, config=config, weights=parser.weights, **kwargs)

    def initial_graph(self):
        graph = Graph(len(self.variables))
        if self.config.init_as_naive_bayes and self.target_index is not None:
            for node in range(graph.n_nodes):
                if node != self.target_index and graph.n_parents(node) < self.config.max_parents:
                    graph.add_parent(node, self.target_index)
        return graph

    def estimate(self, start=None, cancellation=None):
        """
        Runs the search and returns its SearchResult.

        :param start: starting Graph; the naive structure (or the empty graph) by default
        :param cancellation: CancellationToken polled between restarts
        """
        graph = self.initial_graph() if start is None else start
        if graph.n_nodes != len(self.variables):
            raise ValueError("'start' should be a Graph over the same variables as the data set, or 'None'.")

        result = self.search.search(graph, cancellation=cancellation)

        # a cancelled search hands back its incumbent untouched
        if self.config.markov_blanket_correction and self.target_index is not None and not result.cancelled:
            cardinalities = None
            if isinstance(self.scoring_method, K2Score):
                cardinalities = [len(self.scoring_method.state_names[v]) for v in self.variables]
            added = markov_blanket_correction(graph, self.target_index, cardinalities=cardinalities)
            if added:
                self.logger.info('Markov blanket correction added %d arcs', len(added))
                result = result._replace(score=self.search.calc_score(graph))

        self.graph = graph
        self.result = result
        return result

    @property
    def edges(self):
        if self.graph is None:
            return []
        return [(self.variables[X], self.variables[Y]) for (X, Y) in self.graph.edges()]

    def get_model(self):
        """The learned structure as a pgmpy DAG over the variable names."""
        if self.graph is None:
            self.estimate()
        return self.graph.to_dag(self.variables)

    def print_edges(self):
        print(self.edges)

    def plot_edges(self, file_name=None):
        import matplotlib.pyplot as plt
        import networkx as nx

        plt.figure()
        G = nx.DiGraph()
        G.add_nodes_from(self.variables)
        G.add_edges_from(self.edges)
        pos = nx.shell_layout(G)

        nx.draw_networkx_nodes(G, pos, node_size=750)
        nx.draw_networkx_labels(G, pos)
        nx.draw_networkx_edges(G, pos, arrows=True, arrowsize=20)

        if file_name is None:
            plt.show()
        else:
            plt.savefig(file_name)
            plt.close()
