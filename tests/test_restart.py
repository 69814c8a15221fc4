import numpy as np
import pytest
from bnrestart.cancellation import CancellationToken
from bnrestart.config import SearchConfig
from bnrestart.exceptions import InvalidConfiguration, ScoringFailure
from bnrestart.graph import Graph
from bnrestart.restart import RepeatedHillClimbSearch
from bnrestart.scores import FunctionScore
from oracles import edge_set_score, hash_score

TARGET_EDGES = [(0, 1), (0, 2), (1, 3), (2, 3), (3, 4)]


def test_finds_rewarded_edge_set_within_three_runs():
    config = SearchConfig(max_parents=2, n_runs=3, seed=42, init_as_naive_bayes=False)
    search = RepeatedHillClimbSearch(edge_set_score(TARGET_EDGES), config=config)
    graph = Graph(5)
    result = search.search(graph)

    assert result.graph is graph
    assert set(graph.edges()) == set(TARGET_EDGES)
    assert result.score == 0.
    assert result.runs_completed == 3
    assert not result.cancelled
    assert len(result.run_scores) == 3


def test_single_run_from_local_optimum_keeps_structure():
    config = SearchConfig(max_parents=2, n_runs=1, seed=42, init_as_naive_bayes=False)
    search = RepeatedHillClimbSearch(edge_set_score(TARGET_EDGES), config=config)
    graph = Graph.from_edges(5, TARGET_EDGES)
    before = graph.structure()

    assert search.estimate(graph.copy()).operations == []
    result = search.search(graph)
    assert graph.structure() == before
    assert result.score == 0.


def test_never_returns_worse_than_input():
    start_edges = [(4, 0), (3, 1)]

    def score(graph, data):
        if set(graph.edges()) == set(start_edges):
            return 100.
        return -float(len(set(graph.edges()) ^ set(TARGET_EDGES)))

    config = SearchConfig(max_parents=2, n_runs=4, seed=3, init_as_naive_bayes=False)
    search = RepeatedHillClimbSearch(FunctionScore(score), config=config)
    graph = Graph.from_edges(5, start_edges)
    result = search.search(graph)

    assert result.score == 100.
    assert set(graph.edges()) == set(start_edges)
    assert result.runs_completed == 4


def test_result_is_best_of_runs():
    config = SearchConfig(max_parents=2, n_runs=5, seed=8, use_arc_reversal=True, init_as_naive_bayes=False)
    search = RepeatedHillClimbSearch(FunctionScore(hash_score), config=config)
    graph = Graph(5)
    initial = hash_score(graph)
    result = search.search(graph)

    assert result.score == max([initial] + result.run_scores)
    assert result.score == hash_score(graph)
    assert graph.is_acyclic()
    assert all(graph.n_parents(node) <= 2 for node in range(5))


def test_same_seed_reproduces_structure():
    config = SearchConfig(max_parents=2, n_runs=4, seed=5, use_arc_reversal=True)
    first = Graph(6)
    second = Graph(6)
    RepeatedHillClimbSearch(FunctionScore(hash_score), config=config, target=0).search(first)
    RepeatedHillClimbSearch(FunctionScore(hash_score), config=config, target=0).search(second)
    assert first.structure() == second.structure()


def test_parallel_runs_match_sequential_runs():
    sequential = SearchConfig(max_parents=2, n_runs=6, seed=17, use_arc_reversal=True)
    parallel = sequential.updated(n_jobs=3)
    first = Graph(6)
    second = Graph(6)
    a = RepeatedHillClimbSearch(FunctionScore(hash_score), config=sequential, target=2).search(first)
    b = RepeatedHillClimbSearch(FunctionScore(hash_score), config=parallel, target=2).search(second)

    assert first.structure() == second.structure()
    assert a.score == b.score
    assert a.run_scores == b.run_scores


def test_run_rng_depends_only_on_seed_and_run_index():
    search = RepeatedHillClimbSearch(FunctionScore(hash_score), config=SearchConfig(seed=9))
    assert search.run_rng(3).integers(1000, size=5).tolist() == search.run_rng(3).integers(1000, size=5).tolist()
    assert search.run_rng(3).integers(1 << 30) != search.run_rng(4).integers(1 << 30)


def test_random_graph_is_seeded_with_naive_structure():
    config = SearchConfig(max_parents=2, seed=1, init_as_naive_bayes=True)
    search = RepeatedHillClimbSearch(FunctionScore(hash_score), config=config, target=0)
    for seed in range(10):
        graph = Graph.from_edges(5, [(3, 4), (4, 2)])
        search.generate_random_graph(graph, np.random.default_rng(seed))
        assert graph.is_acyclic()
        for node in range(1, 5):
            assert graph.parents(node)[0] == 0
            assert graph.n_parents(node) <= 2
        assert graph.parents(0) == ()


def test_random_graph_without_naive_structure_respects_limits():
    config = SearchConfig(max_parents=1, seed=1, init_as_naive_bayes=False)
    search = RepeatedHillClimbSearch(FunctionScore(hash_score), config=config, target=0)
    for seed in range(10):
        graph = Graph(6)
        search.generate_random_graph(graph, np.random.default_rng(seed))
        assert graph.is_acyclic()
        assert all(graph.n_parents(node) <= 1 for node in range(6))


def test_cancelled_before_start_leaves_graph_identical():
    token = CancellationToken()
    token.cancel()
    config = SearchConfig(max_parents=2, n_runs=3, seed=42, init_as_naive_bayes=False)
    search = RepeatedHillClimbSearch(edge_set_score(TARGET_EDGES), config=config)
    graph = Graph.from_edges(5, [(1, 0), (4, 2)])
    before = graph.structure()
    result = search.search(graph, cancellation=token)

    assert graph.structure() == before
    assert result.runs_completed == 0
    assert result.cancelled
    assert result.score == -7.


def test_cancelled_between_runs_keeps_completed_run():
    token = CancellationToken()
    calls = []

    def score(graph, data):
        calls.append(1)
        if len(calls) > 1:
            token.cancel()
        return -float(len(set(graph.edges()) ^ set(TARGET_EDGES)))

    config = SearchConfig(max_parents=2, n_runs=5, seed=42, init_as_naive_bayes=False)
    search = RepeatedHillClimbSearch(FunctionScore(score), config=config)
    graph = Graph(5)
    result = search.search(graph, cancellation=token)

    assert result.cancelled
    assert result.runs_completed == 1
    assert set(graph.edges()) == set(TARGET_EDGES)


def test_scoring_failure_aborts_search_and_keeps_input():
    def score(graph, data):
        if graph.n_edges > 1:
            raise ArithmeticError('singular matrix')
        return float(graph.n_edges)

    config = SearchConfig(max_parents=2, n_runs=3, seed=1, init_as_naive_bayes=False)
    search = RepeatedHillClimbSearch(FunctionScore(score), config=config)
    graph = Graph.from_edges(4, [(0, 1)])
    with pytest.raises(ScoringFailure):
        search.search(graph)
    assert graph.edges() == [(0, 1)]


@pytest.mark.parametrize('options', [
    dict(max_parents=-1),
    dict(n_runs=0),
    dict(seed=1.5),
    dict(n_jobs=0),
])
def test_invalid_configuration_is_rejected_at_construction(options):
    with pytest.raises(InvalidConfiguration):
        RepeatedHillClimbSearch(FunctionScore(hash_score), config=SearchConfig(**options))


def test_target_out_of_range_is_rejected():
    search = RepeatedHillClimbSearch(FunctionScore(hash_score), config=SearchConfig(n_runs=1), target=7)
    graph = Graph(3)
    with pytest.raises(InvalidConfiguration):
        search.search(graph)
    assert graph.n_edges == 0


def test_graph_with_stricter_parent_limit_is_rejected():
    config = SearchConfig(max_parents=2, n_runs=3, seed=42, init_as_naive_bayes=False)
    search = RepeatedHillClimbSearch(edge_set_score(TARGET_EDGES), config=config)
    graph = Graph.from_edges(5, [(0, 1)], max_parents=1)
    with pytest.raises(InvalidConfiguration):
        search.search(graph)
    assert graph.edges() == [(0, 1)]


def test_graph_with_looser_parent_limit_receives_best_structure():
    config = SearchConfig(max_parents=2, n_runs=3, seed=42, init_as_naive_bayes=False)
    search = RepeatedHillClimbSearch(edge_set_score(TARGET_EDGES), config=config)
    graph = Graph(5, max_parents=3)
    search.search(graph)
    assert set(graph.edges()) == set(TARGET_EDGES)


def test_parallel_scoring_failure_keeps_input():
    def score(graph, data):
        if graph.n_edges > 1:
            raise ArithmeticError('singular matrix')
        return float(graph.n_edges)

    config = SearchConfig(max_parents=2, n_runs=4, seed=1, init_as_naive_bayes=False, n_jobs=3)
    search = RepeatedHillClimbSearch(FunctionScore(score), config=config)
    graph = Graph.from_edges(4, [(0, 1)])
    with pytest.raises(ScoringFailure):
        search.search(graph)
    assert graph.edges() == [(0, 1)]


def test_parallel_search_cancelled_before_start_leaves_graph_identical():
    token = CancellationToken()
    token.cancel()
    config = SearchConfig(max_parents=2, n_runs=4, seed=42, init_as_naive_bayes=False, n_jobs=2)
    search = RepeatedHillClimbSearch(edge_set_score(TARGET_EDGES), config=config)
    graph = Graph.from_edges(5, [(1, 0), (4, 2)])
    before = graph.structure()
    result = search.search(graph, cancellation=token)

    assert graph.structure() == before
    assert result.cancelled
    assert result.runs_completed == 0
    assert result.run_scores == []


def test_parallel_search_cancelled_midway_keeps_started_runs():
    token = CancellationToken()
    calls = []

    def score(graph, data):
        calls.append(1)
        if len(calls) > 1:
            token.cancel()
        return -float(len(set(graph.edges()) ^ set(TARGET_EDGES)))

    config = SearchConfig(max_parents=2, n_runs=6, seed=42, init_as_naive_bayes=False, n_jobs=2)
    search = RepeatedHillClimbSearch(FunctionScore(score), config=config)
    graph = Graph(5)
    initial = -float(len(TARGET_EDGES))
    result = search.search(graph, cancellation=token)

    assert result.cancelled
    assert 1 <= result.runs_completed < 6
    assert len(result.run_scores) == result.runs_completed
    assert result.score == max([initial] + result.run_scores)
    assert graph.is_acyclic()
