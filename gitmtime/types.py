from typing import Mapping, NamedTuple, TypeAlias, Literal

Path: TypeAlias = str  # repository-relative, forward slashes
OID: TypeAlias = str  # hex hash
Timestamp: TypeAlias = int  # seconds since the epoch
Action: TypeAlias = Literal['new_file', 'deleted', 'modified', 'renamed']

ROOT: Path = '.'


class TreeEntry(NamedTuple):
    mode: int
    oid: OID


TreeMap: TypeAlias = dict[Path, TreeEntry]


class Commit(NamedTuple):
    oid: OID
    tree: OID
    parents: list[OID]
    timestamp: Timestamp


class History(NamedTuple):
    mod_times: Mapping[Path, Timestamp]
    oldest: Timestamp
    depth_capped: bool
