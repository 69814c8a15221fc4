import numpy as np
import pandas
from scipy.special import gammaln


class StructureScore(object):
    def __init__(self, data=None):
        """
        Scoring oracle for the structure search. `score` maps a Graph to a real number,
        larger means a better fit. It must not modify the graph or the data.

        :param data: the data set the oracle scores against (opaque to the search)
        """
        self.data = data

    def score(self, graph):
        raise NotImplementedError

    def __call__(self, graph):
        return self.score(graph)


class FunctionScore(StructureScore):
    def __init__(self, function, data=None):
        """
        Wraps a plain function `function(graph, data) -> float` as an oracle.
        """
        super(FunctionScore, self).__init__(data)
        self.function = function

    def score(self, graph):
        return self.function(graph, self.data)


class DecomposableScore(StructureScore):
    def __init__(self, data=None, variables=None, cache=None):
        """
        Score that is a sum of per-node local scores. Local scores are cached by
        (node, sorted parents), so re-evaluating a family during the search is free.

        :param data: pandas DataFrame, one column per variable
        :param variables: variable names in node-index order (defaults to the data columns)
        :param cache: dict shared between scorers on the same data, optional
        """
        super(DecomposableScore, self).__init__(data)
        if variables is not None:
            self.variables = list(variables)
        elif data is not None:
            self.variables = list(data.columns)
        else:
            raise ValueError('Either data or variables must be given.')
        self.cache = {} if cache is None else cache

    def local_score(self, variable, parents):
        raise NotImplementedError

    def get_local_score(self, node, parents):
        key = (node, tuple(sorted(parents)))
        # get score from cache
        if key in self.cache:
            return self.cache[key]
        # cache result for later use
        score = self.local_score(self.variables[node], [self.variables[parent] for parent in parents])
        self.cache[key] = score
        return score

    def score(self, graph):
        if graph.n_nodes != len(self.variables):
            raise ValueError('Graph has {n} nodes but the score knows {m} variables.'.format(
                n=graph.n_nodes, m=len(self.variables)))
        return sum(self.get_local_score(node, graph.parents(node)) for node in range(graph.n_nodes))


class LocalScoreAdapter(DecomposableScore):
    def __init__(self, scorer, variables, cache=None):
        """
        Uses any object exposing `local_score(variable, parents)`, for instance a pgmpy
        structure score, as a decomposable oracle.
        """
        super(LocalScoreAdapter, self).__init__(getattr(scorer, 'data', None), variables=variables, cache=cache)
        self.scorer = scorer

    def local_score(self, variable, parents):
        return self.scorer.local_score(variable, parents)


class K2Score(DecomposableScore):
    score_types = ('k2', 'bdeu', 'bic', 'mle')

    def __init__(self, data, score_type='k2', equivalent_sample_size=10, weights=None, state_names=None,
                 complete_samples_only=True, variables=None, cache=None):
        """
        Bayesian structure scores for discrete data with Dirichlet priors.
        The K2 score is the result of setting all Dirichlet hyperparameters/pseudo_counts to 1.
        `bdeu`, `bic` and `mle` select the BDeu, BIC and maximum-likelihood local scores.

        Parameters
        ----------
        data: pandas DataFrame object
            datafame object where each column represents one variable.
            (If some values in the data are missing the data cells should be set to `numpy.NaN`.
            Note that pandas converts each column containing `numpy.NaN`s to dtype `float`.)

        score_type: str
            One of 'k2', 'bdeu', 'bic', 'mle'.

        equivalent_sample_size: float
            Equivalent sample size of the BDeu prior.

        weights: array-like (optional)
            One non-negative weight per row; state counts are sums of weights.
            Defaults to 1 for every row.

        state_names: dict (optional)
            A dict indicating, for each variable, the discrete set of states (or values)
            that the variable can take. If unspecified, the observed values in the data set
            are taken to be the only possible states.

        complete_samples_only: bool (optional, default `True`)
            Specifies how to deal with missing data, if present. If set to `True` all rows
            that contain `np.Nan` somewhere are ignored. If `False` then, for each variable,
            every row where neither the variable nor its parents are `np.NaN` is used.

        References
        ---------
        [1] Koller & Friedman, Probabilistic Graphical Models - Principles and Techniques, 2009
        Section 18.3.4-18.3.6 (esp. page 806)
        [2] AM Carvalho, Scoring functions for learning Bayesian networks,
        http://www.lx.it.pt/~asmc/pub/talks/09-TA/ta_pres.pdf
        """
        if score_type not in self.score_types:
            raise ValueError('Unknown score type {score_type!r}, expected one of {types}.'.format(
                score_type=score_type, types=', '.join(self.score_types)))
        if variables is not None:
            data = data[list(variables)]

        if weights is None:
            weights = pandas.Series(1., index=data.index)
        else:
            weights = pandas.Series(np.asarray(weights, dtype=float), index=data.index)
            if (weights < 0).any():
                raise ValueError('Row weights must be non-negative.')

        self.complete_samples_only = complete_samples_only
        if complete_samples_only:
            data = data.dropna()
            weights = weights.loc[data.index]

        super(K2Score, self).__init__(data, variables=variables, cache=cache)
        self.score_type = score_type
        self.equivalent_sample_size = equivalent_sample_size
        self.weights = weights
        self.state_names = {}
        for variable in self.variables:
            if state_names is not None and variable in state_names:
                self.state_names[variable] = list(state_names[variable])
            else:
                self.state_names[variable] = sorted(data[variable].dropna().unique())

    def state_counts(self, variable, parents=()):
        """
        Weighted counts of `variable`'s states (rows) for every combination of parent
        states (columns). Without parents there is a single column.
        """
        parents = list(parents)
        columns = [variable] + parents
        data = self.data[columns]
        if not self.complete_samples_only:
            data = data.dropna()
        weights = self.weights.loc[data.index]
        var_states = self.state_names[variable]

        if not parents:
            counts = weights.groupby(data[variable]).sum().reindex(var_states, fill_value=0.)
            return pandas.DataFrame({variable: counts.values}, index=var_states)

        if len(parents) == 1:
            parent_states = pandas.Index(self.state_names[parents[0]], name=parents[0])
        else:
            parent_states = pandas.MultiIndex.from_product([self.state_names[parent] for parent in parents],
                                                           names=parents)
        if data.empty:
            return pandas.DataFrame(0., index=var_states, columns=parent_states)

        counts = weights.groupby([data[column] for column in columns]).sum().unstack(parents)
        return counts.reindex(index=var_states, columns=parent_states).fillna(0.)

    def local_score(self, variable, parents):
        if self.score_type == 'bdeu':
            return self.local_score_bdeu(variable, parents)
        elif self.score_type == 'bic':
            return self.local_score_bic(variable, parents)
        elif self.score_type == 'mle':
            return self.local_score_mle(variable, parents)
        return self.local_score_k2(variable, parents)

    def local_score_k2(self, variable, parents):
        """K2"""

        counts = self.state_counts(variable, parents).values
        var_cardinality = counts.shape[0]
        conditional_sample_sizes = counts.sum(axis=0)

        score = np.sum(gammaln(var_cardinality) - gammaln(conditional_sample_sizes + var_cardinality))
        score += np.sum(gammaln(counts + 1))
        return float(score)

    def local_score_mle(self, variable, parents):
        """MLE"""

        counts = self.state_counts(variable, parents).values
        conditional_sample_sizes = np.broadcast_to(counts.sum(axis=0), counts.shape)

        observed = counts > 0
        score = np.sum(counts[observed] * (np.log(counts[observed]) - np.log(conditional_sample_sizes[observed])))
        return float(score)

    def local_score_bdeu(self, variable, parents):
        """BDeu"""

        counts = self.state_counts(variable, parents).values
        var_cardinality = counts.shape[0]
        num_parents_states = float(counts.shape[1])
        conditional_sample_sizes = counts.sum(axis=0)

        alpha = self.equivalent_sample_size / num_parents_states
        beta = self.equivalent_sample_size / (num_parents_states * var_cardinality)

        score = np.sum(gammaln(alpha) - gammaln(conditional_sample_sizes + alpha))
        score += np.sum(gammaln(counts + beta) - gammaln(beta))
        return float(score)

    def local_score_bic(self, variable, parents):
        """BIC"""

        counts = self.state_counts(variable, parents).values
        var_cardinality = counts.shape[0]
        num_parents_states = float(counts.shape[1])
        sample_size = counts.sum()

        score = self.local_score_mle(variable, parents)
        if sample_size > 0:
            score -= 0.5 * np.log(sample_size) * num_parents_states * (var_cardinality - 1)
        return float(score)
