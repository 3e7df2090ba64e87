import os
import stat
import logging
from typing import Iterable

from dulwich.errors import NotGitRepository, ObjectFormatException
from dulwich.objects import Commit as DulwichCommit, ShaFile, Tree
from dulwich.repo import Repo

from . import types
from .errors import RepositoryStateError

logger = logging.getLogger(__name__)

GIT_DIR = '.git'

# Errors dulwich raises for missing, unreadable or malformed objects
_READ_ERRORS = (KeyError, OSError, ValueError, ObjectFormatException)


def open_repo(path) -> Repo:
    """Open the repository whose work tree contains ``path``."""
    try:
        repo = Repo.discover(os.fspath(path))
    except NotGitRepository as err:
        raise RepositoryStateError(f'not a git repository: {path}') from err
    if repo.bare:
        repo.close()
        raise RepositoryStateError(f'repository has no work tree: {path}')
    return repo


def get_head(repo: Repo) -> types.OID:
    try:
        return repo.head().decode()
    except _READ_ERRORS as err:
        raise RepositoryStateError('repository has no HEAD commit') from err


def get_shallow(repo: Repo) -> frozenset[types.OID]:
    try:
        return frozenset(oid.decode() for oid in repo.get_shallow())
    except OSError as err:
        raise RepositoryStateError('cannot read shallow file') from err


def get_object(repo: Repo, oid: types.OID, expected: type[ShaFile]) -> ShaFile:
    try:
        obj = repo[oid.encode()]
    except _READ_ERRORS as err:
        raise RepositoryStateError(f'cannot read object {oid}: {err!r}') from err
    if not isinstance(obj, expected):
        raise RepositoryStateError(
            f'expected {expected.type_name.decode()} {oid}, got {obj.type_name.decode()}')
    return obj


def get_commit(repo: Repo, oid: types.OID, shallow=frozenset()) -> types.Commit:
    commit_ = get_object(repo, oid, DulwichCommit)
    # The parents of a shallow boundary commit are not in the object store
    parents = [] if oid in shallow else [p.decode() for p in commit_.parents]
    return types.Commit(oid=oid,
                        tree=commit_.tree.decode(),
                        parents=parents,
                        timestamp=commit_.commit_time)


def get_first_parent(commit_: types.Commit) -> types.OID | None:
    return commit_.parents[0] if commit_.parents else None


def iter_first_parent(repo: Repo, oid: types.OID) -> Iterable[types.Commit]:
    shallow = get_shallow(repo)
    while oid:
        commit_ = get_commit(repo, oid, shallow)
        yield commit_
        oid = get_first_parent(commit_)


def _iter_tree_entries(repo: Repo, oid: types.OID):
    tree = get_object(repo, oid, Tree)
    for entry in tree.iteritems():
        yield entry.mode, entry.sha.decode(), os.fsdecode(entry.path)


def get_tree(repo: Repo, oid: types.OID, base_path: types.Path = '') -> types.TreeMap:
    """Flatten a tree into a map of every file path it contains."""
    result = {}
    for mode, oid_, name in _iter_tree_entries(repo, oid):
        path = base_path + name
        if stat.S_ISDIR(mode):
            result.update(get_tree(repo, oid_, f'{path}/'))
        else:
            # blobs, symlinks and submodule links are all leaves
            result[path] = types.TreeEntry(mode=mode, oid=oid_)
    return result
