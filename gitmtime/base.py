import logging
import os
import posixpath
import time
from types import MappingProxyType

from . import data, diff, ignore, sync
from . import types

logger = logging.getLogger(__name__)


def update_path(mod_times: dict[types.Path, types.Timestamp],
                path: types.Path, timestamp: types.Timestamp) -> None:
    """Record ``timestamp`` for ``path`` and every directory containing it.

    An existing entry is only replaced when it is not newer than
    ``timestamp``.
    """
    while path and path != types.ROOT:
        current = mod_times.get(path)
        if current is None or current <= timestamp:
            mod_times[path] = timestamp
        path = posixpath.dirname(path) or types.ROOT


def collect(repo, max_depth: int | None = None) -> types.History:
    """Walk the first-parent chain from HEAD and record change times.

    ``max_depth`` bounds the number of parent edges followed; ``None`` or
    ``0`` walks down to the root commit.
    """
    head = data.get_head(repo)
    mod_times = {}
    oldest = int(time.time())
    depth_capped = False

    commits = data.iter_first_parent(repo, head)
    commit_ = next(commits)
    depth = 0
    while True:
        parent = next(commits, None)
        if parent is None:
            logger.debug('reached root commit %s', commit_.oid)
            for path in data.get_tree(repo, commit_.tree):
                update_path(mod_times, path, commit_.timestamp)
            oldest = min(oldest, commit_.timestamp)
            break

        for path in diff.changed_paths(repo, parent.tree, commit_.tree):
            logger.debug('%s changed at %d', path, commit_.timestamp)
            update_path(mod_times, path, commit_.timestamp)
        oldest = min(oldest, commit_.timestamp)

        depth += 1
        if max_depth and depth >= max_depth:
            logger.info('reached max depth %d', depth)
            depth_capped = True
            break
        commit_ = parent

    return types.History(mod_times=MappingProxyType(mod_times),
                         oldest=oldest,
                         depth_capped=depth_capped)


def restore(root, max_depth: int | None = None) -> int:
    """Set the times of everything under ``root`` from git history."""
    root = os.path.abspath(root)
    with data.open_repo(root) as repo:
        history = collect(repo, max_depth)
        work_tree = os.path.abspath(repo.path)

    # discovery searches upwards, so root is always inside the work tree
    prefix = os.path.relpath(root, work_tree).replace('\\', '/')
    spec = ignore.load_ignore(work_tree)
    return sync.synchronize(root, history, spec, prefix=prefix)
