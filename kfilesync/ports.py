"""Ports: the interfaces the domain expects from storage, network and the OS."""

from __future__ import annotations

import abc
import asyncio
import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from kfilesync.device import Device, DeviceState
from kfilesync.file_entry import FileEntry, SyncConflict
from kfilesync.share import Share
from kfilesync.transfer import TransferJob

DeviceId = str
ShareId = str
JobId = str
WatchHandle = str


# ---------------------------------------------------------------- audit log


@dataclass(frozen=True)
class AuditEntry:
    id: str
    timestamp: int
    event_type: str
    aggregate_id: str
    details: str


class AuditLogRepository(abc.ABC):
    """Append-only store of audit records."""

    @abc.abstractmethod
    async def append(self, entry: AuditEntry) -> None:
        """Store one audit record."""


# ---------------------------------------------------------------- discovery


@dataclass(frozen=True)
class DeviceInfo:
    device_id: DeviceId
    alias: str
    ip: str
    port: int


@dataclass(frozen=True)
class DiscoveredDevice:
    device_id: DeviceId
    alias: str
    address: str


class DiscoveryProvider(abc.ABC):
    """Announces this device on the network and finds others."""

    @abc.abstractmethod
    async def announce(self, info: DeviceInfo) -> None:
        """Make this device visible to peers."""

    @abc.abstractmethod
    async def listen(self, queue: "asyncio.Queue[DiscoveredDevice]") -> None:
        """Put every discovered device on the queue until stopped."""

    @abc.abstractmethod
    async def stop(self) -> None:
        """Stop announcing and listening."""


# ---------------------------------------------------------------- file index


class FileIndexRepository(abc.ABC):
    """Persistent index of the files of each share, and their conflicts."""

    @abc.abstractmethod
    async def save(self, entry: FileEntry) -> None:
        """Insert or replace an entry."""

    @abc.abstractmethod
    async def find_by_path(self, share_id: ShareId, path: str) -> Optional[FileEntry]:
        """The entry at a share-relative path, if any."""

    @abc.abstractmethod
    async def find_all_by_share(self, share_id: ShareId) -> list[FileEntry]:
        """Every entry of a share, tombstones included."""

    @abc.abstractmethod
    async def save_conflict(self, conflict: SyncConflict) -> None:
        """Record a detected conflict."""

    @abc.abstractmethod
    async def find_conflicts_by_share(self, share_id: ShareId) -> list[SyncConflict]:
        """Every recorded conflict of a share."""

    @abc.abstractmethod
    async def delete_conflict(self, conflict_id: str) -> None:
        """Forget a conflict once it is settled."""


# ---------------------------------------------------------------- file watcher


class FileEventType(enum.Enum):
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


@dataclass(frozen=True)
class FileEvent:
    """A change on disk; a rename also names the path it came from."""

    path: Path
    event_type: FileEventType
    timestamp: int
    renamed_from: Optional[Path] = field(default=None)

    def __post_init__(self) -> None:
        if (self.renamed_from is not None) != (self.event_type is FileEventType.RENAMED):
            raise ValueError("renamed_from goes with RENAMED events and only with them")


class FileWatcher(abc.ABC):
    """Watches directories and reports debounced file events."""

    @abc.abstractmethod
    async def watch(self, path: Path, queue: "asyncio.Queue[FileEvent]") -> WatchHandle:
        """Start watching a directory, putting events on the queue."""

    @abc.abstractmethod
    async def unwatch(self, handle: WatchHandle) -> None:
        """Stop the watch behind a handle."""


# ---------------------------------------------------------------- key store


class KeyStore(abc.ABC):
    """Secure storage of device private keys."""

    @abc.abstractmethod
    def store_private_key(self, device_id: DeviceId, key: bytes) -> None:
        """Store the private key of a device."""

    @abc.abstractmethod
    def load_private_key(self, device_id: DeviceId) -> bytes:
        """Load the private key of a device."""

    @abc.abstractmethod
    def delete_private_key(self, device_id: DeviceId) -> None:
        """Remove the private key of a device."""


# ---------------------------------------------------------------- network


@dataclass(frozen=True)
class PairingRequest:
    device_id: str
    alias: str
    platform: str
    fingerprint: str


@dataclass(frozen=True)
class PairingResponse:
    status: str
    device_id: str
    alias: str
    platform: str
    fingerprint: str


@dataclass(frozen=True)
class ShareInvite:
    share_id: str
    share_name: str
    permission: str
    invited_by: str


@dataclass(frozen=True)
class TransferRequestItem:
    file_id: str
    file_path: str
    file_size: int
    sha256: str
    chunk_count: int
    chunk_size: int


@dataclass(frozen=True)
class TransferRequest:
    job_id: str
    session_id: str
    sender_device_id: str
    items: list[TransferRequestItem]


@dataclass(frozen=True)
class SkipChunkInfo:
    file_id: str
    chunks_already_done: int


@dataclass(frozen=True)
class TransferResponse:
    status: str
    skip_chunks: list[SkipChunkInfo] = field(default_factory=list)


class NetworkClient(abc.ABC):
    """Outbound calls to peer devices."""

    @abc.abstractmethod
    async def request_pairing(
        self, peer_addr: str, port: int, req: PairingRequest
    ) -> PairingResponse:
        """Send a pairing request to a peer."""

    @abc.abstractmethod
    async def invite_to_share(self, peer_addr: str, port: int, invite: ShareInvite) -> None:
        """Invite a peer to join a share."""

    @abc.abstractmethod
    async def fetch_remote_index(self, peer_addr: str, port: int, share_id: str) -> str:
        """Fetch a peer's index of a share as JSON text."""

    @abc.abstractmethod
    async def request_transfer(
        self, peer_addr: str, port: int, req: TransferRequest
    ) -> TransferResponse:
        """Announce a transfer and learn which chunks the peer already has."""

    @abc.abstractmethod
    async def download_chunk(
        self, peer_addr: str, port: int, job_id: str, file_id: str, chunk_index: int
    ) -> bytes:
        """Fetch one chunk of a file from a peer."""

    @abc.abstractmethod
    async def upload_chunk(
        self,
        peer_addr: str,
        port: int,
        job_id: str,
        file_id: str,
        chunk_index: int,
        data: bytes,
    ) -> None:
        """Send one chunk of a file to a peer."""

    @abc.abstractmethod
    async def cancel_share_invite(
        self, peer_addr: str, port: int, share_id: str, device_id: str
    ) -> None:
        """Withdraw an invite the peer has already accepted."""


# ---------------------------------------------------------------- repositories


class DeviceRepository(abc.ABC):
    """Persistent store of known devices."""

    @abc.abstractmethod
    async def find_by_id(self, device_id: DeviceId) -> Optional[Device]:
        """The device with this id, if known."""

    @abc.abstractmethod
    async def find_paired(self) -> list[Device]:
        """Every device in the Paired state."""

    @abc.abstractmethod
    async def save(self, device: Device) -> None:
        """Insert or replace a device."""

    @abc.abstractmethod
    async def update_trust_status(self, device_id: DeviceId, status: DeviceState) -> None:
        """Replace the trust state of a device."""


class ShareRepository(abc.ABC):
    """Persistent store of shares."""

    @abc.abstractmethod
    async def save(self, share: Share) -> None:
        """Insert or replace a share."""

    @abc.abstractmethod
    async def find_by_id(self, share_id: ShareId) -> Optional[Share]:
        """The share with this id, if any."""

    @abc.abstractmethod
    async def find_by_member(self, device_id: DeviceId) -> list[Share]:
        """Every share the device is a member of."""

    @abc.abstractmethod
    async def find_all(self) -> list[Share]:
        """Every share."""


class TransferRepository(abc.ABC):
    """Persistent store of transfer jobs."""

    @abc.abstractmethod
    async def find_by_id(self, job_id: JobId) -> Optional[TransferJob]:
        """The job with this id, if any."""

    @abc.abstractmethod
    async def save(self, job: TransferJob) -> None:
        """Insert or replace a job."""

    @abc.abstractmethod
    async def find_incomplete_jobs(self) -> list[TransferJob]:
        """Every job that has not completed or been cancelled."""

    @abc.abstractmethod
    async def find_actions_by_peer(self, device_id: DeviceId) -> list[TransferJob]:
        """Every job exchanged with a peer."""