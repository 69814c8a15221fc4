from bnrestart.cancellation import CancellationToken
from bnrestart.config import SearchConfig
from bnrestart.estimator import StructureEstimator
from bnrestart.exceptions import GraphError, InvalidConfiguration, ScoringFailure, SearchError
from bnrestart.graph import Graph, ParentSet
from bnrestart.hill_climb import ClimbResult, HillClimbSearch
from bnrestart.markov_blanket import markov_blanket_correction
from bnrestart.restart import RepeatedHillClimbSearch, SearchResult
from bnrestart.scores import DecomposableScore, FunctionScore, K2Score, LocalScoreAdapter, StructureScore

__version__ = '0.1'
