import logging
from functools import reduce

logger = logging.getLogger(__name__)


def ancestors(graph, node):
    """`node` followed by all its ancestors, in discovery order."""
    found = [node]
    old_size = 0
    while old_size != len(found):
        old_size = len(found)
        for current in found[:old_size]:
            for parent in graph.parents(current):
                if parent not in found:
                    found.append(parent)
    return found


def in_markov_blanket(graph, node, target):
    if node == target or graph.has_arc(target, node) or graph.has_arc(node, target):
        return True
    # spouses: node and target share a child
    return any(graph.has_arc(node, child) and graph.has_arc(target, child) for child in range(graph.n_nodes))


def markov_blanket_correction(graph, target, cardinalities=None, max_parent_cardinality=1024):
    """
    Adds arcs so that every node ends up in the Markov blanket of `target`. An ancestor
    of the target becomes a parent of the target, any other node gets the target as a
    parent; neither can introduce a cycle. `graph` is modified in place.

    :param graph: Graph
    :param target: index of the class variable
    :param cardinalities: number of states per node; when given, the target receives no
        more parents once the product of its parents' cardinalities reaches
        `max_parent_cardinality`
    :return: list of added arcs (parent, child)
    """
    target_ancestors = set(ancestors(graph, target))
    added = []

    for node in range(graph.n_nodes):
        if in_markov_blanket(graph, node, target):
            continue
        if node in target_ancestors:
            if cardinalities is not None:
                parent_cardinality = reduce(lambda x, y: x * y,
                                            [cardinalities[parent] for parent in graph.parents(target)], 1)
                if parent_cardinality >= max_parent_cardinality:
                    logger.debug('target parent cardinality %d too large to add %d', parent_cardinality, node)
                    continue
            graph.add_parent(target, node)
            added.append((node, target))
        else:
            graph.add_parent(node, target)
            added.append((target, node))

    return added
