import os
import posixpath
from typing import Iterable

from dulwich.diff_tree import (
    CHANGE_ADD,
    CHANGE_COPY,
    CHANGE_DELETE,
    CHANGE_MODIFY,
    CHANGE_RENAME,
    tree_changes,
)
from dulwich.errors import ObjectFormatException
from dulwich.repo import Repo

from . import types
from .errors import RepositoryStateError

_ACTIONS: dict[str, types.Action] = {
    CHANGE_ADD: 'new_file',
    CHANGE_COPY: 'new_file',
    CHANGE_DELETE: 'deleted',
    CHANGE_MODIFY: 'modified',
    CHANGE_RENAME: 'renamed',
}


def iter_changed_files(repo: Repo, t_from: types.OID | None, t_to: types.OID) -> Iterable[
        tuple[types.Path, types.Action]]:
    """Yield every file that differs between two trees.

    Added, modified and renamed files are reported under their name in
    ``t_to``; deleted files under their name in ``t_from``.
    """
    t_from = t_from.encode() if t_from else None
    try:
        changes = list(tree_changes(repo.object_store, t_from, t_to.encode()))
    except (KeyError, OSError, ValueError, ObjectFormatException) as err:
        raise RepositoryStateError(f'cannot diff tree {t_to}: {err!r}') from err

    for change in changes:
        action = _ACTIONS[change.type]
        entry = change.old if action == 'deleted' else change.new
        yield os.fsdecode(entry.path), action


def changed_paths(repo: Repo, t_from: types.OID | None, t_to: types.OID) -> Iterable[types.Path]:
    """Paths whose change time is the time of the commit owning ``t_to``.

    A deleted file is reported as its containing directory, not dropped.
    """
    for path, action in iter_changed_files(repo, t_from, t_to):
        if action == 'deleted':
            # a deleted file only changes the listing of its directory
            yield posixpath.dirname(path) or types.ROOT
        else:
            yield path
