import logging
import os

import pathspec

from . import types

logger = logging.getLogger(__name__)

IGNORE_FILE = '.gitignore'


def load_ignore(repo_root) -> pathspec.PathSpec:
    """Compile the ignore file at the repository root.

    A missing or unreadable file is not an error; it yields a matcher that
    matches nothing.
    """
    path = os.path.join(repo_root, IGNORE_FILE)
    try:
        with open(path, encoding='utf-8') as f:
            lines = f.read().splitlines()
    except (OSError, UnicodeDecodeError) as err:
        logger.warning('failed to read %s: %s', IGNORE_FILE, err)
        lines = []
    return pathspec.GitIgnoreSpec.from_lines(lines)


def is_ignored(spec: pathspec.PathSpec, path: types.Path, is_dir=False) -> bool:
    if is_dir:
        path = f'{path}/'
    return spec.match_file(path)
