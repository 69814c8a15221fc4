import logging
from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor
import numpy as np
from bnrestart.config import SearchConfig
from bnrestart.exceptions import InvalidConfiguration
from bnrestart.graph import Graph
from bnrestart.hill_climb import HillClimbSearch

SearchResult = namedtuple('SearchResult', ['graph', 'score', 'runs_completed', 'cancelled', 'run_scores'])
RunResult = namedtuple('RunResult', ['run_index', 'graph', 'score', 'n_operations'])


class RepeatedHillClimbSearch(HillClimbSearch):
    def __init__(self, scoring_method, config=None, target=None, logger=None):
        """
        Repeatedly runs hill climbing from randomly generated network structures and keeps
        the best structure of the various runs.

        Parameters
        ----------
        scoring_method: StructureScore or callable
            Oracle mapping a Graph to a score; larger is better.

        config: SearchConfig (optional)
            Search options; validated here, before any search state exists.

        target: int (optional)
            Index of the class variable. With `init_as_naive_bayes` every random graph
            starts with the target as the parent of all other nodes.

        logger: logging.Logger (optional)
        """
        config = SearchConfig() if config is None else config
        config.validate()
        super(RepeatedHillClimbSearch, self).__init__(scoring_method,
                                                      max_parents=config.max_parents,
                                                      use_arc_reversal=config.use_arc_reversal,
                                                      logger=logger)
        self.config = config
        self.n_runs = config.n_runs
        self.seed = config.seed
        self.init_as_naive_bayes = config.init_as_naive_bayes
        self.n_jobs = config.n_jobs
        self.target = target

    def run_rng(self, run_index):
        """Random source of a single run, derived from the seed and the run index only."""
        return np.random.default_rng([self.seed % 2 ** 64, run_index])

    def generate_random_graph(self, graph, rng):
        n_nodes = graph.n_nodes
        # clear network
        graph.clear()

        # initialize as naive Bayes?
        if self.init_as_naive_bayes and self.target is not None:
            for node in range(n_nodes):
                if node != self.target and graph.n_parents(node) < self.max_parents:
                    graph.add_parent(node, self.target)

        if n_nodes == 0:
            return graph

        # insert random arcs, illegal attempts are skipped
        n_attempts = int(rng.integers(n_nodes * n_nodes))
        for _ in range(n_attempts):
            tail = int(rng.integers(n_nodes))
            head = int(rng.integers(n_nodes))
            if graph.n_parents(head) < self.max_parents and self.add_arc_makes_sense(graph, tail, head):
                graph.add_parent(head, tail)

        return graph

    def _run(self, run_index, n_nodes):
        graph = Graph(n_nodes, max_parents=self.max_parents)
        self.generate_random_graph(graph, self.run_rng(run_index))
        self.logger.debug('run %d starts from %d arcs', run_index, graph.n_edges)

        climb = self.estimate(graph)
        score = self.calc_score(graph)
        return RunResult(run_index, graph, score, len(climb.operations))

    def _cancellable_run(self, run_index, n_nodes, cancellation):
        if cancellation is not None and cancellation.cancelled:
            return None
        return self._run(run_index, n_nodes)

    def _sequential_runs(self, n_nodes, cancellation):
        for run_index in range(self.n_runs):
            run = self._cancellable_run(run_index, n_nodes, cancellation)
            yield run
            if run is None:
                return

    def _parallel_runs(self, n_nodes, cancellation):
        with ThreadPoolExecutor(max_workers=self.n_jobs) as executor:
            futures = [executor.submit(self._cancellable_run, run_index, n_nodes, cancellation)
                       for run_index in range(self.n_runs)]
            try:
                # run-index order, so the incumbent does not depend on scheduling
                for future in futures:
                    yield future.result()
            finally:
                for future in futures:
                    future.cancel()

    def search(self, graph, cancellation=None):
        """
        Searches for the best structure and writes it into `graph`.

        The score of `graph` itself is the score to beat, so the result is never worse
        than the input. The cancellation token is polled before every run; a cancelled
        search returns the best structure of the runs completed so far (or `graph`
        unchanged if there were none). A ScoringFailure aborts the search and leaves
        `graph` unchanged.

        With `n_jobs > 1` every run that started before the token was set is allowed to
        finish and takes part in the comparison, in run-index order, even when a run with
        a lower index saw the token first and was skipped.

        Parameters
        ----------
        graph: Graph
            Starting structure; replaced by the best structure found.
        cancellation: CancellationToken (optional)

        Returns
        -------
        result: SearchResult
        """
        n_nodes = graph.n_nodes
        if self.target is not None and not 0 <= self.target < n_nodes:
            raise InvalidConfiguration('target {target} is not a node of a {n}-node graph.'.format(
                target=self.target, n=n_nodes))
        if graph.max_parents is not None and graph.max_parents < self.max_parents:
            raise InvalidConfiguration('graph allows {limit} parents per node but max_parents is {max}.'.format(
                limit=graph.max_parents, max=self.max_parents))

        # keeps track of best structure found so far
        best_score = self.calc_score(graph)
        # holder takes the caller's limit, which admits every run graph
        best_graph = graph.copy()
        self.logger.info('initial score %.6f, %d runs', best_score, self.n_runs)

        runs = self._parallel_runs(n_nodes, cancellation) if self.n_jobs > 1 else \
            self._sequential_runs(n_nodes, cancellation)

        runs_completed = 0
        run_scores = []
        cancelled = False
        for run in runs:
            if run is None:
                cancelled = True
                continue

            runs_completed += 1
            run_scores.append(run.score)
            self.logger.info('run %d: score %.6f after %d operations', run.run_index, run.score, run.n_operations)

            # keep track of best network seen so far
            if run.score > best_score:
                best_score = run.score
                best_graph.copy_from(run.graph)

        if cancelled:
            self.logger.info('search cancelled after %d of %d runs', runs_completed, self.n_runs)

        # restore current network to best network
        graph.copy_from(best_graph)
        return SearchResult(graph, best_score, runs_completed, cancelled, run_scores)
