"""Transfer jobs: chunk manifests, per-item progress and the job state machine."""

from __future__ import annotations

import enum
import time
import uuid
from dataclasses import dataclass, field, replace
from typing import ClassVar, Iterable, Optional, Union

from kfilesync.chunking import compute_chunk_size
from kfilesync.errors import InvalidStateTransition

DeviceId = str
JobId = str
FileId = str


def _now() -> int:
    return int(time.time())


def _new_id() -> str:
    return str(uuid.uuid4())


class TransferType(enum.Enum):
    SEND = "send"
    RECEIVE = "receive"
    SYNC_PULL = "sync_pull"
    SYNC_PUSH = "sync_push"


@dataclass(frozen=True)
class Checkpoint:
    file_id: FileId
    chunks_done: int


@dataclass(frozen=True)
class TransferProgress:
    total_bytes: int
    transferred_bytes: int
    total_files: int
    completed_files: int


@dataclass(frozen=True)
class ChunkInfo:
    index: int
    offset: int
    size: int
    hash: str = ""


@dataclass
class ChunkManifest:
    chunks: list[ChunkInfo]
    chunk_size: int


class TransferItemStatus(enum.Enum):
    PENDING = "pending"
    TRANSFERRING = "transferring"
    VERIFYING = "verifying"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class TransferItem:
    file_id: FileId
    file_path: str
    file_size: int
    sha256: str
    chunk_manifest: ChunkManifest
    status: TransferItemStatus = TransferItemStatus.PENDING
    chunks_done: int = 0
    temp_path: Optional[str] = None


_ERROR_KINDS = frozenset(
    {
        "connection_lost",
        "verification_failed",
        "storage_error",
        "peer_rejected",
        "timeout",
        "unknown",
    }
)


@dataclass(frozen=True)
class TransferError:
    """Why a transfer failed; only the ``unknown`` kind carries a detail."""

    kind: str
    detail: Optional[str] = None

    CONNECTION_LOST: ClassVar["TransferError"]
    VERIFICATION_FAILED: ClassVar["TransferError"]
    STORAGE_ERROR: ClassVar["TransferError"]
    PEER_REJECTED: ClassVar["TransferError"]
    TIMEOUT: ClassVar["TransferError"]

    def __post_init__(self) -> None:
        if self.kind not in _ERROR_KINDS:
            raise ValueError(f"unknown transfer error kind: {self.kind!r}")
        if (self.detail is not None) != (self.kind == "unknown"):
            raise ValueError("a detail goes with the unknown kind and only with it")

    @classmethod
    def unknown(cls, detail: str) -> "TransferError":
        return cls("unknown", detail)

    def __str__(self) -> str:
        return self.kind if self.detail is None else f"{self.kind}: {self.detail}"


TransferError.CONNECTION_LOST = TransferError("connection_lost")
TransferError.VERIFICATION_FAILED = TransferError("verification_failed")
TransferError.STORAGE_ERROR = TransferError("storage_error")
TransferError.PEER_REJECTED = TransferError("peer_rejected")
TransferError.TIMEOUT = TransferError("timeout")


@dataclass(frozen=True)
class Pending:
    pass


@dataclass(frozen=True)
class Active:
    started_at: int


@dataclass(frozen=True)
class Paused:
    checkpoint: Optional[Checkpoint] = None


@dataclass(frozen=True)
class Verifying:
    pass


@dataclass(frozen=True)
class Completed:
    completed_at: int


@dataclass(frozen=True)
class Failed:
    error: TransferError
    retries: int = 0


@dataclass(frozen=True)
class Cancelled:
    pass


TransferState = Union[Pending, Active, Paused, Verifying, Completed, Failed, Cancelled]


@dataclass(frozen=True)
class FileRequest:
    file_path: str
    file_size: int
    sha256: str = ""


def _manifest_for(file_size: int) -> ChunkManifest:
    chunk_size = compute_chunk_size(file_size)
    if chunk_size == 0:
        return ChunkManifest([ChunkInfo(0, 0, file_size)], 0)
    chunks = [
        ChunkInfo(index, offset, min(chunk_size, file_size - offset))
        for index, offset in enumerate(range(0, file_size, chunk_size))
    ]
    return ChunkManifest(chunks, chunk_size)


@dataclass
class TransferJob:
    """A transfer of one or more files; transitions return a new job."""

    job_type: TransferType
    peer_device_id: DeviceId
    items: list[TransferItem]
    state: TransferState = field(default_factory=Pending)
    job_id: JobId = field(default_factory=_new_id)
    session_id: str = field(default_factory=_new_id)
    share_id: Optional[str] = None
    created_at: int = field(default_factory=_now)

    @classmethod
    def create_from_files(
        cls,
        job_type: TransferType,
        peer_device_id: DeviceId,
        files: Iterable[FileRequest],
    ) -> "TransferJob":
        """Build a pending job with a chunk manifest for every requested file."""
        items = [
            TransferItem(
                file_id=_new_id(),
                file_path=f.file_path,
                file_size=f.file_size,
                sha256=f.sha256,
                chunk_manifest=_manifest_for(f.file_size),
            )
            for f in files
        ]
        return cls(job_type=job_type, peer_device_id=peer_device_id, items=items)

    def _with(self, **changes) -> "TransferJob":
        changes.setdefault("items", [replace(item) for item in self.items])
        return replace(self, **changes)

    def accept(self) -> "TransferJob":
        if not isinstance(self.state, Pending):
            raise InvalidStateTransition("Only Pending jobs can be accepted")
        return self._with(state=Active(_now()))

    def record_chunk_done(self, file_id: FileId, chunk_index: int) -> "TransferJob":
        if not isinstance(self.state, Active):
            raise InvalidStateTransition("Job must be Active to record progress")
        items = []
        for item in self.items:
            if item.file_id == file_id:
                done = max(item.chunks_done, chunk_index + 1)
                status = (
                    TransferItemStatus.VERIFYING
                    if done >= len(item.chunk_manifest.chunks)
                    else TransferItemStatus.TRANSFERRING
                )
                item = replace(item, chunks_done=done, status=status)
            else:
                item = replace(item)
            items.append(item)
        finished = (TransferItemStatus.VERIFYING, TransferItemStatus.COMPLETED)
        state = (
            Verifying()
            if all(item.status in finished for item in items)
            else self.state
        )
        return self._with(items=items, state=state)

    def pause(self, checkpoint: Optional[Checkpoint] = None) -> "TransferJob":
        if not isinstance(self.state, Active):
            raise InvalidStateTransition("Only Active jobs can be paused")
        return self._with(state=Paused(checkpoint))

    def resume(self) -> "TransferJob":
        if not isinstance(self.state, Paused):
            raise InvalidStateTransition("Only Paused jobs can be resumed")
        return self._with(state=Active(_now()))

    def begin_verify(self) -> "TransferJob":
        if not isinstance(self.state, Active):
            raise InvalidStateTransition("Only Active jobs can begin verify")
        return self._with(state=Verifying())

    def complete(self) -> "TransferJob":
        if not isinstance(self.state, Verifying):
            raise InvalidStateTransition(
                "Job must be in Verifying state to be completed"
            )
        items = [replace(i, status=TransferItemStatus.COMPLETED) for i in self.items]
        return self._with(items=items, state=Completed(_now()))

    def fail(self, error: TransferError) -> "TransferJob":
        if not isinstance(self.state, (Active, Paused, Verifying, Failed)):
            raise InvalidStateTransition(
                "Only Active, Paused, Verifying or Failed jobs can be failed"
            )
        retries = self.state.retries + 1 if isinstance(self.state, Failed) else 0
        return self._with(state=Failed(error, retries))

    def cancel(self) -> "TransferJob":
        return self._with(state=Cancelled())

    def progress(self) -> TransferProgress:
        total_bytes = transferred = completed_files = 0
        for item in self.items:
            total_bytes += item.file_size
            if item.status is TransferItemStatus.COMPLETED:
                transferred += item.file_size
                completed_files += 1
            elif item.chunk_manifest.chunk_size == 0:
                if item.chunks_done > 0:
                    transferred += item.file_size
            else:
                done = item.chunks_done * item.chunk_manifest.chunk_size
                transferred += min(done, item.file_size)
        return TransferProgress(
            total_bytes=total_bytes,
            transferred_bytes=transferred,
            total_files=len(self.items),
            completed_files=completed_files,
        )