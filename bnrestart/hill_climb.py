import logging
import math
from collections import namedtuple
from bnrestart.exceptions import ScoringFailure

ClimbResult = namedtuple('ClimbResult', ['score', 'operations', 'scores'])


class HillClimbSearch(object):
    def __init__(self, scoring_method, max_parents=2, use_arc_reversal=False, logger=None):
        """
        Greedy hill climbing over network structures. Starting from a given graph,
        `estimate` repeatedly applies the single add / delete / (optionally) reverse arc
        operation with the best resulting score, as long as it strictly improves the
        current score.

        Parameters
        ----------
        scoring_method: StructureScore or callable
            Oracle mapping a Graph to a score; larger is better. Called once per candidate
            operation, so it should be reasonably cheap.

        max_parents: int
            No operation may leave a node with more than `max_parents` parents.

        use_arc_reversal: bool
            Whether reversing an existing arc is a candidate operation.

        logger: logging.Logger (optional)
        """
        self.scoring_method = scoring_method
        self.max_parents = max_parents
        self.use_arc_reversal = use_arc_reversal
        self.logger = logger or logging.getLogger(__name__)

    def calc_score(self, graph):
        try:
            score = self.scoring_method(graph)
        except Exception as e:
            raise ScoringFailure('Scoring oracle failed: {error}'.format(error=e)) from e
        try:
            score = float(score)
        except (TypeError, ValueError) as e:
            raise ScoringFailure('Scoring oracle returned {score!r}.'.format(score=score)) from e
        if math.isnan(score):
            raise ScoringFailure('Scoring oracle returned NaN.')
        return score

    def add_arc_makes_sense(self, graph, tail, head):
        """tail -> head is not a self loop, is not present yet and would not close a cycle."""
        if tail == head:
            return False
        if graph.has_arc(tail, head):
            return False
        return not graph.path_exists(head, tail)

    def reverse_arc_makes_sense(self, graph, tail, head):
        """The arc tail -> head exists and head -> tail is acyclic once it is removed."""
        if not graph.has_arc(tail, head):
            return False
        position = graph.delete_parent(head, tail)
        try:
            return self.add_arc_makes_sense(graph, head, tail)
        finally:
            graph.insert_parent(head, position, tail)

    def _legal_operations(self, graph):
        """Generates the legal operations for `graph` in a fixed order:
        (1) add, by head then tail, (2) remove, by head then parent order,
        (3) flip, in the same order as removals (only with arc reversal enabled)."""
        n_nodes = graph.n_nodes

        for head in range(n_nodes):  # (1) add single edge
            if graph.n_parents(head) < self.max_parents:
                for tail in range(n_nodes):
                    if self.add_arc_makes_sense(graph, tail, head):
                        yield ('+', (tail, head))

        for head in range(n_nodes):  # (2) remove single edge
            for tail in graph.parents(head):
                yield ('-', (tail, head))

        if self.use_arc_reversal:
            for head in range(n_nodes):  # (3) flip single edge
                for tail in graph.parents(head):
                    if graph.n_parents(tail) < self.max_parents and self.reverse_arc_makes_sense(graph, tail, head):
                        yield ('flip', (tail, head))

    def perform_operation(self, graph, operation):
        """Applies `operation` and returns what is needed to undo it."""
        kind, (tail, head) = operation
        if kind == '+':
            graph.add_parent(head, tail)
            return None
        elif kind == '-':
            return graph.delete_parent(head, tail)
        elif kind == 'flip':
            position = graph.delete_parent(head, tail)
            graph.add_parent(tail, head)
            return position
        raise ValueError('Unknown operation {operation!r}.'.format(operation=operation))

    def undo_operation(self, graph, operation, position):
        kind, (tail, head) = operation
        if kind == '+':
            graph.delete_last_parent(head)
        elif kind == '-':
            graph.insert_parent(head, position, tail)
        elif kind == 'flip':
            graph.delete_last_parent(tail)
            graph.insert_parent(head, position, tail)

    def score_operation(self, graph, operation):
        position = self.perform_operation(graph, operation)
        try:
            return self.calc_score(graph)
        finally:
            self.undo_operation(graph, operation, position)

    def get_optimal_operation(self, graph, current_score):
        """
        Scores every legal operation and returns `(operation, score)` for the best one
        that strictly improves on `current_score`, or `(None, current_score)`.
        On ties the first operation in enumeration order wins.
        """
        best_operation = None
        best_score = current_score

        # materialize first: scoring mutates and restores the graph
        for operation in list(self._legal_operations(graph)):
            score = self.score_operation(graph, operation)
            if score > best_score:
                best_operation = operation
                best_score = score

        return best_operation, best_score

    def estimate(self, graph, score=None):
        """
        Performs local hill climb search from `graph` until no single operation improves
        the score. `graph` is modified in place and ends at a local maximum.

        Parameters
        ----------
        graph: Graph
            The starting point, also the result.
        score: float (optional)
            Score of `graph` if already known.

        Returns
        -------
        result: ClimbResult
            Final score, applied operations and the score after each of them.
        """
        current_score = self.calc_score(graph) if score is None else score
        operations = []
        scores = []

        while True:
            best_operation, best_score = self.get_optimal_operation(graph, current_score)
            if best_operation is None:
                break

            self.perform_operation(graph, best_operation)
            self.logger.debug('%s %s: %.6f -> %.6f', best_operation[0], best_operation[1], current_score, best_score)
            current_score = best_score
            operations.append(best_operation)
            scores.append(best_score)

        self.logger.debug('converged after %d operations with score %.6f', len(operations), current_score)
        return ClimbResult(current_score, operations, scores)
