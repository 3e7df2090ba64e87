import argparse
import logging

from . import base
from .errors import GitMtimeError

logger = logging.getLogger(__name__)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args)
    try:
        base.restore(args.path, max_depth=args.max_depth or None)
    except GitMtimeError as err:
        logger.error('%s', err)
        return 1
    return 0


def non_negative(value):
    depth = int(value)
    if depth < 0:
        raise argparse.ArgumentTypeError(f'must not be negative: {value}')
    return depth


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='git-restore-mtime',
        description='Set the modification time of files and directories to '
                    'the time of the last commit that changed them.')
    parser.add_argument('path', help='root of the git work tree')
    parser.add_argument('--max-depth', type=non_negative, default=0, metavar='N',
                        help='maximum number of commits to walk back (default unlimited)')

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', dest='loglevel', action='store_const',
                           const=logging.DEBUG, default=logging.INFO,
                           help='log every path that is examined')
    verbosity.add_argument('-q', '--quiet', dest='loglevel', action='store_const',
                           const=logging.WARNING,
                           help='only log warnings and errors')

    return parser.parse_args(argv)


def setup_logging(args):
    logging.basicConfig(level=args.loglevel, format='%(levelname)s %(name)s: %(message)s')
