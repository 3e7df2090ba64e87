import logging
import os
import posixpath
import stat

import pathspec

from . import data, ignore
from . import types
from .errors import FilesystemWriteError

logger = logging.getLogger(__name__)

# Symlinks are only updated where their own times can be set
UPDATE_SYMLINKS = os.utime in os.supports_follow_symlinks

NS_PER_SECOND = 1_000_000_000


def synchronize(root, history: types.History, spec: pathspec.PathSpec,
                prefix: types.Path = types.ROOT) -> int:
    """Apply recorded change times to every entry below ``root``.

    ``prefix`` is ``root`` relative to the work tree; map keys and ignore
    patterns are both relative to the work tree.
    Returns the number of entries whose times were rewritten.
    """
    updated = 0
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        rel_dir = os.path.relpath(dirpath, root).replace('\\', '/')

        kept = []
        for dirname in dirnames:
            path = _repo_path(prefix, rel_dir, dirname)
            if dirname == data.GIT_DIR or ignore.is_ignored(spec, path, is_dir=True):
                logger.debug('skipping directory %s', path)
                continue
            kept.append(dirname)
            if _set_time(os.path.join(dirpath, dirname), path, history):
                updated += 1
        dirnames[:] = kept

        for filename in filenames:
            path = _repo_path(prefix, rel_dir, filename)
            if filename == data.GIT_DIR or ignore.is_ignored(spec, path):
                logger.debug('skipping %s', path)
                continue
            if _set_time(os.path.join(dirpath, filename), path, history):
                updated += 1

    logger.info('updated mod times of %d paths', updated)
    return updated


def _repo_path(prefix: types.Path, rel_dir: types.Path, name: str) -> types.Path:
    return posixpath.normpath(posixpath.join(prefix, rel_dir, name))


def _log_walk_error(err: OSError) -> None:
    logger.warning('cannot list %s: %s', err.filename, err.strerror)


def _set_time(full_path, path: types.Path, history: types.History) -> bool:
    timestamp = history.mod_times.get(path)
    if timestamp is None:
        if not history.depth_capped:
            logger.warning('path not found in commit history: %s', path)
            return False
        # changed before the traversed window; oldest seen time is the best bound
        timestamp = history.oldest

    target = timestamp * NS_PER_SECOND
    try:
        st = os.lstat(full_path)
        if stat.S_ISLNK(st.st_mode) and not UPDATE_SYMLINKS:
            logger.debug('cannot set times on symlink %s', path)
            return False
        if st.st_mtime_ns == target:
            logger.debug('mod time of %s already %d', path, timestamp)
            return False
        logger.debug('setting mod time of %s from %d to %d',
                     path, st.st_mtime_ns // NS_PER_SECOND, timestamp)
        os.utime(full_path, ns=(target, target), follow_symlinks=not UPDATE_SYMLINKS)
    except OSError as err:
        raise FilesystemWriteError(path, err.strerror or err) from err
    return True
