import argparse
import logging
import sys
import yaml
from bnrestart.cancellation import CancellationToken
from bnrestart.config import SearchConfig
from bnrestart.estimator import StructureEstimator
from bnrestart.exceptions import InvalidConfiguration
from bnrestart.scores import K2Score


def build_parser():
    p = argparse.ArgumentParser(prog='bnrestart',
                                description='Learn a Bayesian network structure with repeated hill climbing')
    p.add_argument('data', help='Path to a .csv file with one discrete variable per column')
    p.add_argument('--target', help='Name of the class variable')
    p.add_argument('--weights', help='Name of a column holding per-row weights')
    p.add_argument('--config', help='Path to a YAML file with search options')
    p.add_argument('-U', '--runs', type=int, dest='n_runs', help='Number of runs')
    p.add_argument('-A', '--seed', type=int, dest='seed', help='Random number seed')
    p.add_argument('-P', '--max-parents', type=int, dest='max_parents', help='Maximum number of parents')
    p.add_argument('-R', '--arc-reversal', action='store_const', const=True, dest='use_arc_reversal',
                   help='Use arc reversal operation')
    p.add_argument('-N', '--empty-start', action='store_const', const=False, dest='init_as_naive_bayes',
                   help='Initial structure is empty (instead of naive Bayes)')
    p.add_argument('--mbc', action='store_const', const=True, dest='markov_blanket_correction',
                   help='Apply a Markov blanket correction to the learned structure')
    p.add_argument('--score', choices=K2Score.score_types, dest='score_type', help='Local score')
    p.add_argument('--jobs', type=int, dest='n_jobs', help='Number of runs executed concurrently')
    p.add_argument('--timeout', type=float, help='Stop starting new runs after this many seconds')
    p.add_argument('--plot', nargs='?', const='', help='Plot the structure (to a file if a path is given)')
    p.add_argument('-v', '--verbose', action='count', default=0, help='-v for progress, -vv for every step')
    return p


def load_config(args):
    config = SearchConfig.from_yaml(args.config) if args.config else SearchConfig()
    return config.updated(**{name: getattr(args, name) for name in SearchConfig.fields if hasattr(args, name)})


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    args = build_parser().parse_args(argv)

    level = logging.WARNING if args.verbose == 0 else logging.INFO if args.verbose == 1 else logging.DEBUG
    logging.basicConfig(level=level, format='%(asctime)s %(name)s %(levelname)s: %(message)s')
    logger = logging.getLogger('bnrestart')

    try:
        config = load_config(args)
        estimator = StructureEstimator.from_csv(args.data, target=args.target, weight_column=args.weights,
                                                config=config, logger=logger)
    except (InvalidConfiguration, ValueError, OSError, yaml.YAMLError) as e:
        logger.error('%s', e)
        return 2

    cancellation = CancellationToken()
    if args.timeout is not None:
        cancellation.cancel_after(args.timeout)

    result = estimator.estimate(cancellation=cancellation)
    if result.cancelled:
        logger.warning('Timed out after %d of %d runs.', result.runs_completed, config.n_runs)

    print('Score: {score:.6f}'.format(score=result.score))
    print('Runs: {n}'.format(n=result.runs_completed))
    print('Edges:', estimator.edges)

    if args.plot is not None:
        estimator.plot_edges(args.plot or None)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
