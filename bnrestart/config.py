import numbers
import yaml
from bnrestart.exceptions import InvalidConfiguration
from bnrestart.scores import K2Score


class SearchConfig(object):
    fields = ('max_parents', 'n_runs', 'seed', 'use_arc_reversal', 'init_as_naive_bayes',
              'markov_blanket_correction', 'score_type', 'n_jobs')

    def __init__(self, max_parents=2, n_runs=10, seed=1, use_arc_reversal=False, init_as_naive_bayes=True,
                 markov_blanket_correction=False, score_type='k2', n_jobs=1):
        """
        Options of the repeated hill climbing search.

        :param max_parents: maximum number of parents of any node
        :param n_runs: number of random restarts
        :param seed: random number seed; a fixed seed reproduces the whole search
        :param use_arc_reversal: also consider reversing arcs
        :param init_as_naive_bayes: start from (and seed random graphs with) the target as parent of every node
        :param markov_blanket_correction: make every node part of the target's Markov blanket after the search
        :param score_type: local score of the default K2Score oracle
        :param n_jobs: number of restarts run concurrently
        """
        self.max_parents = max_parents
        self.n_runs = n_runs
        self.seed = seed
        self.use_arc_reversal = use_arc_reversal
        self.init_as_naive_bayes = init_as_naive_bayes
        self.markov_blanket_correction = markov_blanket_correction
        self.score_type = score_type
        self.n_jobs = n_jobs

    def __repr__(self):
        return 'SearchConfig({options})'.format(
            options=', '.join('{k}={v!r}'.format(k=k, v=v) for k, v in self.to_dict().items()))

    def __eq__(self, other):
        if not isinstance(other, SearchConfig):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    @staticmethod
    def _is_int(value):
        return isinstance(value, numbers.Integral) and not isinstance(value, bool)

    def validate(self):
        if not self._is_int(self.max_parents) or self.max_parents < 0:
            raise InvalidConfiguration('max_parents must be an integer >= 0, got {v!r}.'.format(v=self.max_parents))
        if not self._is_int(self.n_runs) or self.n_runs < 1:
            raise InvalidConfiguration('n_runs must be an integer >= 1, got {v!r}.'.format(v=self.n_runs))
        if not self._is_int(self.seed):
            raise InvalidConfiguration('seed must be an integer, got {v!r}.'.format(v=self.seed))
        if not self._is_int(self.n_jobs) or self.n_jobs < 1:
            raise InvalidConfiguration('n_jobs must be an integer >= 1, got {v!r}.'.format(v=self.n_jobs))
        if self.score_type not in K2Score.score_types:
            raise InvalidConfiguration('score_type must be one of {types}, got {v!r}.'.format(
                types=', '.join(K2Score.score_types), v=self.score_type))
        for name in ('use_arc_reversal', 'init_as_naive_bayes', 'markov_blanket_correction'):
            if not isinstance(getattr(self, name), bool):
                raise InvalidConfiguration('{name} must be a bool, got {v!r}.'.format(name=name, v=getattr(self, name)))
        return self

    def to_dict(self):
        return dict((name, getattr(self, name)) for name in self.fields)

    def updated(self, **options):
        values = self.to_dict()
        values.update((k, v) for k, v in options.items() if v is not None)
        return SearchConfig.from_dict(values)

    @classmethod
    def from_dict(cls, options):
        unknown = set(options) - set(cls.fields)
        if unknown:
            raise InvalidConfiguration('Unknown option(s): {names}.'.format(names=', '.join(sorted(unknown))))
        return cls(**options).validate()

    @classmethod
    def from_yaml(cls, path):
        with open(path, 'r', encoding='utf-8') as fh:
            options = yaml.safe_load(fh) or {}
        if not isinstance(options, dict):
            raise InvalidConfiguration('{path} must contain a mapping of options.'.format(path=path))
        # a file may keep the search options under a `search` key
        if 'search' in options and isinstance(options['search'], dict):
            options = options['search']
        return cls.from_dict(options)
