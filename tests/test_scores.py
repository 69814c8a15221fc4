from math import log
import numpy as np
import pandas
import pytest
from bnrestart.graph import Graph
from bnrestart.scores import DecomposableScore, FunctionScore, K2Score, LocalScoreAdapter


def test_dependent_variable_prefers_arc(dependent_data):
    for score_type in K2Score.score_types:
        scorer = K2Score(dependent_data, score_type=score_type)
        assert scorer.score(Graph.from_edges(3, [(0, 1)])) > scorer.score(Graph(3))


def test_penalized_scores_reject_independent_parent(dependent_data):
    for score_type in ('k2', 'bdeu', 'bic'):
        scorer = K2Score(dependent_data, score_type=score_type)
        assert scorer.score(Graph.from_edges(3, [(0, 2)])) < scorer.score(Graph(3))


def test_k2_of_single_variable():
    scorer = K2Score(pandas.DataFrame({'x': [0, 0, 1, 1]}))
    assert scorer.score(Graph(1)) == pytest.approx(log(4. / 120.))


def test_mle_of_single_variable():
    scorer = K2Score(pandas.DataFrame({'x': [0, 0, 1, 1]}), score_type='mle')
    assert scorer.score(Graph(1)) == pytest.approx(4 * log(0.5))


def test_weights_scale_state_counts():
    data = pandas.DataFrame({'x': [0, 0, 1, 1]})
    scorer = K2Score(data, score_type='mle', weights=[2, 2, 1, 1])
    assert scorer.state_counts('x').values.ravel().tolist() == [4., 2.]
    assert scorer.score(Graph(1)) == pytest.approx(4 * log(4. / 6.) + 2 * log(2. / 6.))


def test_negative_weights_are_rejected():
    with pytest.raises(ValueError):
        K2Score(pandas.DataFrame({'x': [0, 1]}), weights=[1, -1])


def test_state_counts_cover_all_parent_configurations():
    data = pandas.DataFrame({
        'x': [0, 1, 0, 1, 1],
        'y': [0, 1, 2, 0, 1],
        'z': [0, 0, 1, 1, 0],
    })
    scorer = K2Score(data)
    counts = scorer.state_counts('x', ['y', 'z'])
    assert counts.shape == (2, 6)
    assert counts.values.sum() == 5

    counts = scorer.state_counts('x', ['y'])
    assert list(counts.columns) == [0, 1, 2]
    assert counts.loc[1, 1] == 2


def test_missing_values():
    data = pandas.DataFrame({
        'x': [0, 1, np.nan, 1],
        'y': [0, 0, 1, np.nan],
    })
    complete = K2Score(data)
    assert complete.state_counts('x').values.sum() == 2

    per_family = K2Score(data, complete_samples_only=False)
    assert per_family.state_counts('x').values.sum() == 3
    assert per_family.state_counts('x', ['y']).values.sum() == 2


def test_unknown_score_type():
    with pytest.raises(ValueError):
        K2Score(pandas.DataFrame({'x': [0, 1]}), score_type='aic')


class CountingScore(DecomposableScore):
    def __init__(self, variables):
        super(CountingScore, self).__init__(variables=variables)
        self.calls = []

    def local_score(self, variable, parents):
        self.calls.append((variable, tuple(parents)))
        return -float(len(parents))


def test_local_scores_are_cached_by_parent_set():
    scorer = CountingScore(['a', 'b', 'c'])
    graph = Graph.from_edges(3, [(0, 2), (1, 2)])
    assert scorer.score(graph) == -2.
    assert scorer.score(Graph.from_edges(3, [(1, 2), (0, 2)])) == -2.
    assert len(scorer.calls) == 3
    assert ('c', ('a', 'b')) in scorer.calls


def test_graph_size_must_match_variables():
    with pytest.raises(ValueError):
        CountingScore(['a', 'b']).score(Graph(3))


def test_local_score_adapter_passes_variable_names():
    class Scorer(object):
        def __init__(self):
            self.seen = []

        def local_score(self, variable, parents):
            self.seen.append((variable, list(parents)))
            return 1.

    scorer = Scorer()
    adapter = LocalScoreAdapter(scorer, ['class', 'x'])
    assert adapter(Graph.from_edges(2, [(0, 1)])) == 2.
    assert ('x', ['class']) in scorer.seen


def test_function_score_receives_data():
    data = object()
    seen = []
    oracle = FunctionScore(lambda graph, d: seen.append(d) or 0., data)
    oracle(Graph(1))
    assert seen == [data]
