"""Deterministic resolution of concurrent edits to the same file."""

from __future__ import annotations

from datetime import datetime, timezone

from kfilesync.file_entry import ConflictResolution, FileEntry

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def resolve(local: FileEntry, remote: FileEntry) -> ConflictResolution:
    """Decide which side of a conflict wins; a modification beats a deletion."""
    if local.deleted and not remote.deleted:
        return ConflictResolution.KEEP_REMOTE
    if local.deleted:
        return ConflictResolution.KEEP_LOCAL
    if remote.deleted:
        return ConflictResolution.KEEP_LOCAL

    if local.modified_at != remote.modified_at:
        loser = remote if local.modified_at > remote.modified_at else local
    elif local.modified_by != remote.modified_by:
        # Same time: the larger device id keeps the original name.
        loser = remote if local.modified_by > remote.modified_by else local
    else:
        return ConflictResolution.KEEP_LOCAL

    return ConflictResolution.keep_both(
        _conflict_path(loser.path, loser.modified_at, loser.modified_by)
    )


def _split_name(name: str) -> tuple[str, str]:
    if name in ("", ".", ".."):
        return name, ""
    before, dot, after = name.rpartition(".")
    if not dot or not before:
        return name, ""
    return before, after


def _conflict_path(original_path: str, timestamp: int, device_id: str) -> str:
    """Build <parent>/<stem>.sync-conflict-<YYYYMMDD>-<HHMMSS>-<device>.<ext>."""
    parent, _, name = original_path.rpartition("/")
    stem, extension = _split_name(name)

    try:
        moment = datetime.fromtimestamp(timestamp, timezone.utc)
    except (OverflowError, OSError, ValueError):
        moment = _EPOCH
    stamp = moment.strftime("%Y%m%d-%H%M%S")

    filename = f"{stem}.sync-conflict-{stamp}-{device_id[:8]}"
    if extension:
        filename = f"{filename}.{extension}"
    return f"{parent}/{filename}" if parent else filename