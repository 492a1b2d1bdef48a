"""Building a sync plan from a local and a remote file index."""

from __future__ import annotations

import uuid
from typing import Iterable

from kfilesync.conflict_resolver import resolve
from kfilesync.file_entry import FileEntry, SyncAction, SyncConflict, SyncPlan
from kfilesync.share import SharePermission

DeviceId = str


def _by_path(index: Iterable[FileEntry]) -> dict[str, FileEntry]:
    return {entry.path: entry for entry in index}


def generate(
    local_index: Iterable[FileEntry],
    remote_index: Iterable[FileEntry],
    local_device: DeviceId,
    permission: SharePermission,
) -> SyncPlan:
    """Compare two indexes path by path and decide what to pull, push or resolve.

    Paths are visited in sorted order. Tombstones present on one side only
    are never propagated, and the permission limits pushes and pulls.
    """
    plan = SyncPlan()
    can_pull = permission.can_pull()
    can_push = permission.can_push()

    local_map = _by_path(local_index)
    remote_map = _by_path(remote_index)

    for path in sorted(local_map.keys() | remote_map.keys()):
        local = local_map.get(path)
        remote = remote_map.get(path)

        if remote is None:
            if can_push and not local.deleted:
                plan.to_push.append(SyncAction(path, local))
            continue
        if local is None:
            if can_pull and not remote.deleted:
                plan.to_pull.append(SyncAction(path, remote))
            continue

        local_is_ancestor = local.version.is_ancestor_of(remote.version)
        remote_is_ancestor = remote.version.is_ancestor_of(local.version)

        if local_is_ancestor and remote_is_ancestor:
            plan.unchanged.append(path)
        elif local_is_ancestor:
            if can_pull:
                plan.to_pull.append(SyncAction(path, remote))
        elif remote_is_ancestor:
            if can_push:
                plan.to_push.append(SyncAction(path, local))
        else:
            plan.conflicts.append(
                SyncConflict(
                    conflict_id=str(uuid.uuid4()),
                    path=path,
                    local=local,
                    remote=remote,
                    resolution=resolve(local, remote),
                )
            )

    return plan