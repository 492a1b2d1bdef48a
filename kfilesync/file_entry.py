"""File index entries, version vectors and the sync plan model."""

from __future__ import annotations

import enum
import time
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from typing import ClassVar, Optional

DeviceId = str
ShareId = str


def _now() -> int:
    return int(time.time())


class VersionVector(Mapping):
    """An immutable map of device id to edit counter."""

    def __init__(self, counters: Optional[Mapping[DeviceId, int]] = None) -> None:
        self._counters: dict[DeviceId, int] = dict(sorted((counters or {}).items()))

    def __getitem__(self, device: DeviceId) -> int:
        return self._counters[device]

    def __iter__(self) -> Iterator[DeviceId]:
        return iter(self._counters)

    def __len__(self) -> int:
        return len(self._counters)

    def __hash__(self) -> int:
        return hash(frozenset(self._counters.items()))

    def __repr__(self) -> str:
        return f"VersionVector({self._counters!r})"

    def is_ancestor_of(self, other: "VersionVector") -> bool:
        return all(v <= other.get(d, 0) for d, v in self._counters.items())

    def conflicts_with(self, other: "VersionVector") -> bool:
        return not self.is_ancestor_of(other) and not other.is_ancestor_of(self)

    def increment(self, device: DeviceId) -> "VersionVector":
        counters = dict(self._counters)
        counters[device] = counters.get(device, 0) + 1
        return VersionVector(counters)

    def merge(self, other: "VersionVector") -> "VersionVector":
        counters = dict(self._counters)
        for device, version in other.items():
            counters[device] = max(counters.get(device, 0), version)
        return VersionVector(counters)


class EntryType(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


@dataclass(frozen=True)
class BlockInfo:
    index: int
    size: int
    hash: str


@dataclass
class FileEntry:
    share_id: ShareId
    path: str
    entry_type: EntryType
    size: int
    modified_at: int
    modified_by: DeviceId
    version: VersionVector
    sha256: Optional[str] = None
    blocks: tuple[BlockInfo, ...] = ()
    deleted: bool = False
    deleted_at: Optional[int] = None

    @classmethod
    def create(
        cls, share_id: ShareId, path: str, entry_type: EntryType, device_id: DeviceId
    ) -> "FileEntry":
        """A fresh, empty entry whose version counts one edit by device_id."""
        return cls(
            share_id=share_id,
            path=path,
            entry_type=entry_type,
            size=0,
            modified_at=_now(),
            modified_by=device_id,
            version=VersionVector().increment(device_id),
        )

    def update_content(self, size, sha256, blocks, device_id) -> "FileEntry":
        return replace(
            self,
            size=size,
            sha256=sha256,
            blocks=tuple(blocks),
            modified_by=device_id,
            modified_at=_now(),
            version=self.version.increment(device_id),
        )

    def mark_deleted(self, device_id: DeviceId) -> "FileEntry":
        return replace(
            self,
            deleted=True,
            deleted_at=_now(),
            modified_by=device_id,
            version=self.version.increment(device_id),
        )

    def apply_remote_version(self, remote: "FileEntry") -> "FileEntry":
        return replace(self, version=self.version.merge(remote.version))


class SyncStatus(enum.Enum):
    IDLE = "idle"
    SYNCING = "syncing"
    HAS_CONFLICTS = "has_conflicts"
    PAUSED = "paused"


@dataclass
class SyncAction:
    path: str
    entry: FileEntry
    missing_blocks: list[int] = field(default_factory=list)


class ResolutionKind(enum.Enum):
    PENDING = "pending"
    KEEP_LOCAL = "keep_local"
    KEEP_REMOTE = "keep_remote"
    KEEP_BOTH = "keep_both"


@dataclass(frozen=True)
class ConflictResolution:
    """How a conflict is settled; KEEP_BOTH carries the conflict copy path."""

    kind: ResolutionKind
    conflict_copy_path: Optional[str] = None

    PENDING: ClassVar["ConflictResolution"]
    KEEP_LOCAL: ClassVar["ConflictResolution"]
    KEEP_REMOTE: ClassVar["ConflictResolution"]

    def __post_init__(self) -> None:
        has_path = self.conflict_copy_path is not None
        if has_path != (self.kind is ResolutionKind.KEEP_BOTH):
            raise ValueError("a conflict copy path goes with KEEP_BOTH and only with it")

    @classmethod
    def keep_both(cls, conflict_copy_path: str) -> "ConflictResolution":
        return cls(ResolutionKind.KEEP_BOTH, conflict_copy_path)


ConflictResolution.PENDING = ConflictResolution(ResolutionKind.PENDING)
ConflictResolution.KEEP_LOCAL = ConflictResolution(ResolutionKind.KEEP_LOCAL)
ConflictResolution.KEEP_REMOTE = ConflictResolution(ResolutionKind.KEEP_REMOTE)


@dataclass
class SyncConflict:
    conflict_id: str
    path: str
    local: FileEntry
    remote: FileEntry
    resolution: ConflictResolution


@dataclass
class SyncPlan:
    to_pull: list[SyncAction] = field(default_factory=list)
    to_push: list[SyncAction] = field(default_factory=list)
    conflicts: list[SyncConflict] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)


@dataclass
class SyncSession:
    session_id: str
    share_id: ShareId
    peer_device_id: DeviceId
    status: SyncStatus = SyncStatus.IDLE
    plan: Optional[SyncPlan] = None
    started_at: Optional[int] = None


@dataclass(frozen=True)
class Tombstone:
    share_id: ShareId
    path: str
    deleted_at: int
    version: VersionVector