"""Domain events and the event bus port that carries them."""

from __future__ import annotations

import abc
from dataclasses import dataclass

from kfilesync.file_entry import VersionVector
from kfilesync.share import SharePermission
from kfilesync.transfer import TransferError

DeviceId = str
ShareId = str
JobId = str
FileId = str


class DomainEvent(abc.ABC):
    """Something that happened in the domain, tied to one aggregate."""

    def event_type(self) -> str:
        return type(self).__name__

    @abc.abstractmethod
    def aggregate_id(self) -> str:
        """Identifier of the aggregate the event belongs to."""


class EventBus(abc.ABC):
    """Delivers domain events to whoever listens."""

    @abc.abstractmethod
    def publish(self, event: DomainEvent) -> None:
        """Hand an event to the bus."""


@dataclass(frozen=True)
class DeviceDiscovered(DomainEvent):
    device_id: DeviceId
    alias: str

    def aggregate_id(self) -> str:
        return self.device_id


@dataclass(frozen=True)
class PairingCompleted(DomainEvent):
    local_device: DeviceId
    peer_device: DeviceId
    paired_at: int

    def aggregate_id(self) -> str:
        return self.peer_device


@dataclass(frozen=True)
class TrustRevoked(DomainEvent):
    device_id: DeviceId
    revoked_at: int

    def aggregate_id(self) -> str:
        return self.device_id


@dataclass(frozen=True)
class ShareCreated(DomainEvent):
    share_id: ShareId
    created_by: DeviceId

    def aggregate_id(self) -> str:
        return self.share_id


@dataclass(frozen=True)
class MemberAuthorized(DomainEvent):
    share_id: ShareId
    device_id: DeviceId
    permission: SharePermission

    def aggregate_id(self) -> str:
        return self.share_id


@dataclass(frozen=True)
class MemberRevoked(DomainEvent):
    share_id: ShareId
    device_id: DeviceId

    def aggregate_id(self) -> str:
        return self.share_id


@dataclass(frozen=True)
class PermissionChanged(DomainEvent):
    share_id: ShareId
    device_id: DeviceId
    old: SharePermission
    new: SharePermission

    def aggregate_id(self) -> str:
        return self.share_id


@dataclass(frozen=True)
class SyncStarted(DomainEvent):
    share_id: ShareId
    peer_device: DeviceId

    def aggregate_id(self) -> str:
        return self.share_id


@dataclass(frozen=True)
class SyncCompleted(DomainEvent):
    share_id: ShareId
    files_synced: int

    def aggregate_id(self) -> str:
        return self.share_id


@dataclass(frozen=True)
class ConflictDetected(DomainEvent):
    share_id: ShareId
    path: str
    local_version: VersionVector
    remote_version: VersionVector

    def aggregate_id(self) -> str:
        return self.share_id


@dataclass(frozen=True)
class FileDeleted(DomainEvent):
    share_id: ShareId
    path: str
    version: VersionVector

    def aggregate_id(self) -> str:
        return self.share_id


@dataclass(frozen=True)
class LocalIndexChanged(DomainEvent):
    """The local index of a share changed; outbound sync may be due."""

    share_id: ShareId

    def aggregate_id(self) -> str:
        return self.share_id


@dataclass(frozen=True)
class TransferRequested(DomainEvent):
    job_id: JobId
    peer: DeviceId

    def aggregate_id(self) -> str:
        return self.job_id


@dataclass(frozen=True)
class TransferProgressUpdated(DomainEvent):
    job_id: JobId
    file_id: FileId
    chunks_done: int
    total_chunks: int
    bytes_done: int
    total_bytes: int

    def aggregate_id(self) -> str:
        return self.job_id


@dataclass(frozen=True)
class TransferCompleted(DomainEvent):
    job_id: JobId
    total_bytes: int

    def aggregate_id(self) -> str:
        return self.job_id


@dataclass(frozen=True)
class TransferFailed(DomainEvent):
    job_id: JobId
    error: TransferError

    def aggregate_id(self) -> str:
        return self.job_id


@dataclass(frozen=True)
class ChunkVerificationFailed(DomainEvent):
    job_id: JobId
    file_id: FileId
    chunk_index: int

    def aggregate_id(self) -> str:
        return self.job_id