class GitMtimeError(Exception):
    pass


class RepositoryStateError(GitMtimeError):
    """Reading head, a commit, a tree or a diff from the repository failed."""


class FilesystemWriteError(GitMtimeError):
    def __init__(self, path, reason):
        super().__init__(f'cannot set times on {path}: {reason}')
        self.path = path
