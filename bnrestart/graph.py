import networkx as nx
from bnrestart.exceptions import GraphError


class ParentSet(object):
    def __init__(self, max_parents=None):
        """
        Ordered parents of a single node. Order is insertion order.

        :param max_parents: maximum number of parents, or None for no limit
        """
        self.max_parents = max_parents
        self.parents = []

    def __len__(self):
        return len(self.parents)

    def __iter__(self):
        return iter(self.parents)

    def __contains__(self, parent):
        return parent in self.parents

    def __eq__(self, other):
        if not isinstance(other, ParentSet):
            return NotImplemented
        return self.parents == other.parents

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __repr__(self):
        return 'ParentSet({parents})'.format(parents=self.parents)

    @property
    def n_parents(self):
        return len(self.parents)

    def add_parent(self, parent):
        if parent in self.parents:
            raise GraphError('{parent} is already a parent.'.format(parent=parent))
        if self.max_parents is not None and len(self.parents) >= self.max_parents:
            raise GraphError('Parent set is full ({max} parents).'.format(max=self.max_parents))
        self.parents.append(parent)

    def delete_last_parent(self):
        if not self.parents:
            return None
        return self.parents.pop()

    def delete_parent(self, parent):
        position = self.parents.index(parent)
        del self.parents[position]
        return position

    def insert_parent(self, position, parent):
        if parent in self.parents:
            raise GraphError('{parent} is already a parent.'.format(parent=parent))
        if self.max_parents is not None and len(self.parents) >= self.max_parents:
            raise GraphError('Parent set is full ({max} parents).'.format(max=self.max_parents))
        self.parents.insert(position, parent)

    def copy_from(self, other):
        if self.max_parents is not None and len(other.parents) > self.max_parents:
            raise GraphError('Cannot copy {n} parents into a set limited to {max}.'.format(
                n=len(other.parents), max=self.max_parents))
        self.parents = list(other.parents)

    def clear(self):
        while len(self.parents) > 0:
            self.delete_last_parent()


class Graph(object):
    def __init__(self, n_nodes, max_parents=None):
        """
        Directed dependency graph over the variables 0..n_nodes-1, stored as one
        ParentSet per node.

        Adding a parent does not check for cycles; use `path_exists` before mutating.
        Reachability queries run on a networkx view kept in step with the parent sets.

        :param n_nodes: number of variables
        :param max_parents: limit applied to every parent set, or None
        """
        if n_nodes < 0:
            raise GraphError('n_nodes must be non-negative.')
        self.n_nodes = n_nodes
        self.max_parents = max_parents
        self.parent_sets = [ParentSet(max_parents) for _ in range(n_nodes)]
        self._digraph = nx.DiGraph()
        self._digraph.add_nodes_from(range(n_nodes))

    @classmethod
    def from_edges(cls, n_nodes, edges, max_parents=None):
        graph = cls(n_nodes, max_parents=max_parents)
        for (parent, child) in edges:
            graph.add_parent(child, parent)
        return graph

    def __eq__(self, other):
        if not isinstance(other, Graph):
            return NotImplemented
        return self.structure() == other.structure()

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash(self.structure())

    def __repr__(self):
        return 'Graph(n_nodes={n}, edges={edges})'.format(n=self.n_nodes, edges=self.edges())

    def _check_node(self, node):
        if not 0 <= node < self.n_nodes:
            raise GraphError('Node {node} out of range 0..{last}.'.format(node=node, last=self.n_nodes - 1))

    def parent_set(self, node):
        self._check_node(node)
        return self.parent_sets[node]

    def parents(self, node):
        return tuple(self.parent_set(node).parents)

    def n_parents(self, node):
        return len(self.parent_set(node))

    def has_arc(self, parent, child):
        return parent in self.parent_set(child)

    def add_parent(self, child, parent):
        self._check_node(parent)
        if parent == child:
            raise GraphError('Node {node} cannot be its own parent.'.format(node=child))
        self.parent_set(child).add_parent(parent)
        self._digraph.add_edge(parent, child)

    def delete_last_parent(self, child):
        parent = self.parent_set(child).delete_last_parent()
        if parent is not None:
            self._digraph.remove_edge(parent, child)
        return parent

    def delete_parent(self, child, parent):
        position = self.parent_set(child).delete_parent(parent)
        self._digraph.remove_edge(parent, child)
        return position

    def insert_parent(self, child, position, parent):
        self._check_node(parent)
        if parent == child:
            raise GraphError('Node {node} cannot be its own parent.'.format(node=child))
        self.parent_set(child).insert_parent(position, parent)
        self._digraph.add_edge(parent, child)

    def clear(self):
        for parent_set in self.parent_sets:
            parent_set.clear()
        self._digraph.remove_edges_from(list(self._digraph.edges()))

    def copy_from(self, source):
        if source.n_nodes != self.n_nodes:
            raise GraphError('Cannot copy a graph of {n} nodes into one of {m} nodes.'.format(
                n=source.n_nodes, m=self.n_nodes))
        try:
            for node in range(self.n_nodes):
                self.parent_sets[node].copy_from(source.parent_sets[node])
        finally:
            self._digraph.remove_edges_from(list(self._digraph.edges()))
            self._digraph.add_edges_from(self.edges())

    def copy(self):
        graph = Graph(self.n_nodes, max_parents=self.max_parents)
        graph.copy_from(self)
        return graph

    def edges(self):
        return [(parent, child) for child in range(self.n_nodes) for parent in self.parent_sets[child]]

    @property
    def n_edges(self):
        return sum(len(parent_set) for parent_set in self.parent_sets)

    def structure(self):
        return tuple(tuple(parent_set.parents) for parent_set in self.parent_sets)

    def to_networkx(self, names=None):
        if names is None:
            return self._digraph.copy()
        G = nx.DiGraph()
        G.add_nodes_from(names)
        G.add_edges_from([(names[X], names[Y]) for (X, Y) in self.edges()])
        return G

    def to_dag(self, names):
        """Structure as a pgmpy DAG over the variable names, for parameter fitting."""
        from pgmpy.base import DAG

        if len(names) != self.n_nodes:
            raise GraphError('Expected {n} variable names, got {m}.'.format(n=self.n_nodes, m=len(names)))
        dag = DAG()
        dag.add_nodes_from(names)
        dag.add_edges_from([(names[X], names[Y]) for (X, Y) in self.edges()])
        return dag

    def path_exists(self, source, target):
        self._check_node(source)
        self._check_node(target)
        return nx.has_path(self._digraph, source, target)

    def is_acyclic(self):
        return nx.is_directed_acyclic_graph(self._digraph)

    # A recursive function used by topological_order
    def _topological_order_util(self, node, visited, order):
        visited[node] = True

        # parents come before their children
        for parent in self.parent_sets[node]:
            if not visited[parent]:
                self._topological_order_util(parent, visited, order)

        order.append(node)

    def topological_order(self):
        if not self.is_acyclic():
            raise GraphError('Graph contains a cycle.')
        visited = [False] * self.n_nodes
        order = []
        for node in range(self.n_nodes):
            if not visited[node]:
                self._topological_order_util(node, visited, order)
        return order
