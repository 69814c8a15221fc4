import hashlib
from bnrestart.scores import FunctionScore


def edge_set_score(target_edges):
    """Oracle rewarding exactly `target_edges`: minus the size of the symmetric difference."""
    target_edges = set(target_edges)

    def score(graph, data):
        return -float(len(set(graph.edges()) ^ target_edges))

    return FunctionScore(score)


def hash_score(graph, data=None):
    """Arbitrary but deterministic score of a structure."""
    digest = hashlib.sha256(repr(graph.structure()).encode('utf-8')).hexdigest()
    return int(digest[:12], 16) / float(16 ** 12)


class RecordingScore(object):
    def __init__(self, function):
        self.function = function
        self.graphs = []

    def __call__(self, graph):
        self.graphs.append(graph.copy())
        return self.function(graph, None)
