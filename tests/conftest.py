import os

import pytest
from dulwich.objects import Blob, Commit, Tree
from dulwich.repo import Repo

T1 = 1_600_000_000
T2 = T1 + 3600
T3 = T2 + 3600
T4 = T3 + 3600


class RepoBuilder:
    """Writes commits with fixed committer times into a real git repository.

    The work tree on disk follows every commit, so it always matches the
    last snapshot written.
    """

    def __init__(self, path):
        self.path = path
        self.repo = Repo.init(str(path))
        self.repo.refs.set_symbolic_ref(b'HEAD', b'refs/heads/master')
        self.files = {}
        self.head = None

    def commit(self, changes, timestamp, parents=None, move_head=True):
        for name, content in changes.items():
            full_path = os.path.join(self.path, name)
            if content is None:
                del self.files[name]
                os.remove(full_path)
                continue
            self.files[name] = content
            os.makedirs(os.path.dirname(full_path), exist_ok=True)
            with open(full_path, 'wb') as f:
                f.write(content)

        commit_ = Commit()
        commit_.tree = self._write_tree()
        if parents is None:
            parents = [self.head] if self.head else []
        commit_.parents = [p.encode() for p in parents]
        commit_.author = commit_.committer = b'Test <test@example.com>'
        commit_.author_time = commit_.commit_time = timestamp
        commit_.author_timezone = commit_.commit_timezone = 0
        commit_.encoding = b'UTF-8'
        commit_.message = b'commit\n'
        self.repo.object_store.add_object(commit_)

        oid = commit_.id.decode()
        if move_head:
            self.repo.refs[b'refs/heads/master'] = commit_.id
            self.head = oid
        return oid

    def mark_shallow(self, oid):
        with open(os.path.join(self.repo.controldir(), 'shallow'), 'w') as f:
            f.write(f'{oid}\n')

    def object_path(self, oid):
        return os.path.join(self.repo.controldir(), 'objects', oid[:2], oid[2:])

    def _write_tree(self):
        index_as_tree = {}
        for path, content in self.files.items():
            *dirpath, filename = path.split('/')
            current = index_as_tree
            for dirname in dirpath:
                current = current.setdefault(dirname, {})
            current[filename] = content

        def write_tree_recursive(tree_dict):
            tree = Tree()
            for name, value in tree_dict.items():
                if isinstance(value, dict):
                    tree.add(name.encode(), 0o040000, write_tree_recursive(value))
                else:
                    blob = Blob.from_string(value)
                    self.repo.object_store.add_object(blob)
                    tree.add(name.encode(), 0o100644, blob.id)
            self.repo.object_store.add_object(tree)
            return tree.id

        return write_tree_recursive(index_as_tree)


@pytest.fixture
def builder(tmp_path):
    repo_builder = RepoBuilder(tmp_path)
    yield repo_builder
    repo_builder.repo.close()


@pytest.fixture
def scenario(builder):
    """Root commit adds a.txt and dir/b.txt at T1; the head modifies dir/b.txt at T2."""
    builder.commit({'a.txt': b'a', 'dir/b.txt': b'b'}, T1)
    builder.commit({'dir/b.txt': b'b2'}, T2)
    return builder


def mtime(path):
    return os.lstat(path).st_mtime_ns // 1_000_000_000
