# kfilesync

The domain core of a peer-to-peer file sharing and folder synchronisation tool for a local network. It has no dependencies outside the standard library.

## What it covers

- **Errors** (`kfilesync.errors`): every error is a subclass of `AppError`. Domain failures derive from `DomainError`. Examples are `InvalidStateTransition`, `SessionExpired`, `InvalidPinCode`, `BusinessRuleViolation`, `DeviceNotFound`, `DeviceNotTrusted`, `ShareNotFound`, `PermissionDenied`, `NetworkError`, `NonceReplay` and `TimestampOutOfWindow`. `InternalError` covers the rest. Two errors compare equal when they have the same class and the same detail.
- **Devices and pairing** (`kfilesync.device`):
  - `Device` holds a `DeviceState`. The states are `Discovered`, `Paired` and `Revoked`, and `confirm_pairing` and `revoke` move a device between them.
  - `Certificate.from_pem` rejects any text that does not start with a PEM header.
  - `PairingSession.verify` checks a PIN. It raises on expiry, on a wrong code, and after three attempts.
- **Shares** (`kfilesync.share`):
  - `Share` is immutable, and every change returns a new `Share`. `Share.create` makes the creator a `READ_WRITE` member.
  - The changes are `authorize_member`, `remove_member` (the creator cannot be removed), `update_permission`, `pause` and `resume`.
  - `SharePermission.can_push` and `can_pull` give the rights of each permission. `SyncMode` is `TWO_WAY`, `SEND_ONLY` or `RECEIVE_ONLY`.
- **File index** (`kfilesync.file_entry`):
  - `FileEntry` has `create`, `update_content`, `mark_deleted` and `apply_remote_version`.
  - `VersionVector` is an immutable mapping. It has `is_ancestor_of`, `conflicts_with`, `increment` and `merge`.
  - The same module defines `SyncPlan`, `SyncAction`, `SyncConflict` and `ConflictResolution` (`PENDING`, `KEEP_LOCAL`, `KEEP_REMOTE`, `keep_both(path)`).
- **Chunking** (`kfilesync.chunking`): `compute_chunk_size` returns 0 for files up to 128 KiB, which are sent whole. Larger files get 128 KiB, 1 MiB, 4 MiB or 16 MiB chunks as they grow.
- **Transfers** (`kfilesync.transfer`):
  - `TransferJob.create_from_files` builds a chunk manifest for each `FileRequest`.
  - A job moves through the states `Pending`, `Active`, `Paused`, `Verifying`, `Completed`, `Failed` and `Cancelled` with `accept`, `record_chunk_done`, `pause`, `resume`, `begin_verify`, `complete`, `fail` and `cancel`. Each transition returns a new job.
  - `fail` counts retries. `progress()` returns a `TransferProgress`.
- **Events** (`kfilesync.events`): the `DomainEvent` and `EventBus` interfaces, and event classes such as `ShareCreated`, `MemberAuthorized`, `MemberRevoked`, `SyncCompleted`, `ConflictDetected`, `LocalIndexChanged`, `TransferProgressUpdated` and `TransferFailed`.
- **Sync planning**:
  - `kfilesync.sync_plan.generate` compares a local and a remote index path by path, in sorted order. It sorts each path into `to_pull`, `to_push`, `conflicts` or `unchanged`.
  - The permission limits what may be pulled or pushed. A tombstone that exists on one side only is never propagated.
  - `kfilesync.conflict_resolver.resolve` settles a conflict in a fixed, repeatable way:
    1. A modification beats a deletion.
    2. Otherwise the newer edit wins.
    3. On equal times the larger device id wins.
  - The losing side is kept as a copy named like `doc.sync-conflict-20200913-122640-devB.txt`.
- **Ignore rules** (`kfilesync.ignore_spec`):
  - `IgnoreSpec(base_dir, additional_rules)` and `IgnoreSpec.from_file(path)` apply rules in gitignore style.
  - The built-in defaults are `.DS_Store`, `Thumbs.db`, `desktop.ini`, `$RECYCLE.BIN` and `.lansync-tmp/`.
  - `is_ignored(path, is_dir)` also checks the parents of the path. A malformed rule or an unreadable file raises `IgnorePatternError`.
- **Policy** (`kfilesync.policy`):
  - `PolicyEnforcer.check_transfer` requires a paired device.
  - `check_sync` checks, in turn, that the device is paired, that it is a member of the share, that the share's `SyncMode` allows the `SyncDirection`, and that the member's permission allows it.
  - `PolicyEnforcer.check_file_ignored` applies an `IgnoreSpec`.
- **Share service** (`kfilesync.share_service`): `ShareAppService` creates shares, invites paired peers and removes members, and publishes the matching events.
  - If storing a new member fails after the peer accepted the invite, the service withdraws the invite from the peer and raises the storage error.
  - Peers are contacted on `DEFAULT_PORT` (53317) unless you pass the `port=` keyword.
- **Ports** (`kfilesync.ports`): the abstract interfaces the services depend on. They are `DeviceRepository`, `ShareRepository`, `TransferRepository`, `FileIndexRepository`, `AuditLogRepository`, `NetworkClient`, `DiscoveryProvider`, `FileWatcher` and `KeyStore`, with their request and response records.

## What it does not do

This package holds the model, the rules and the share service only. It ships no implementations of the ports. You supply your own for:

- storage
- the HTTP network client
- LAN discovery
- file watching
- key storage
- an event bus

It has no services for pairing, transfers, indexing or running a sync. It has no server, no user interface and no command-line program.

## Install

```
pip install kfilesync
```

## Example

```python
from kfilesync.file_entry import EntryType, FileEntry
from kfilesync.share import SharePermission
from kfilesync import sync_plan

me, peer = "device-a", "device-b"
local = FileEntry.create("share-1", "notes.txt", EntryType.FILE, me)
remote = local.update_content(42, "sha", [], peer)

plan = sync_plan.generate([local], [remote], me, SharePermission.READ_WRITE)
print([action.path for action in plan.to_pull])   # ['notes.txt']
```

## Tests

```
pip install "kfilesync[test]"
python -m pytest
```