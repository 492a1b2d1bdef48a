"""Shared folders, their members and permissions."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, replace
from typing import Optional

from kfilesync.errors import BusinessRuleViolation, InvalidStateTransition

DeviceId = str
ShareId = str


class SyncMode(enum.Enum):
    TWO_WAY = "two_way"
    SEND_ONLY = "send_only"
    RECEIVE_ONLY = "receive_only"


class ShareStatus(enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    ERROR = "error"


class SharePermission(enum.Enum):
    READ_ONLY = "read_only"
    READ_WRITE = "read_write"
    SEND_ONLY = "send_only"
    RECEIVE_ONLY = "receive_only"

    def can_push(self) -> bool:
        return self in (SharePermission.READ_WRITE, SharePermission.SEND_ONLY)

    def can_pull(self) -> bool:
        return self in (
            SharePermission.READ_WRITE,
            SharePermission.READ_ONLY,
            SharePermission.RECEIVE_ONLY,
        )


@dataclass(frozen=True)
class ShareMember:
    device_id: DeviceId
    permission: SharePermission
    authorized_by: DeviceId
    authorized_at: int


@dataclass(frozen=True)
class Share:
    """A shared folder; every change returns a new Share."""

    share_id: ShareId
    share_name: str
    local_path: str
    sync_mode: SyncMode
    status: ShareStatus
    members: tuple[ShareMember, ...]
    created_by: DeviceId
    created_at: int
    status_detail: Optional[str] = None

    @classmethod
    def create(cls, share_id, share_name, local_path, sync_mode, created_by) -> "Share":
        created_at = int(time.time())
        creator = ShareMember(
            device_id=created_by,
            permission=SharePermission.READ_WRITE,
            authorized_by=created_by,
            authorized_at=created_at,
        )
        return cls(
            share_id=share_id,
            share_name=share_name,
            local_path=local_path,
            sync_mode=sync_mode,
            status=ShareStatus.ACTIVE,
            members=(creator,),
            created_by=created_by,
            created_at=created_at,
        )

    def authorize_member(self, device_id, permission, authorized_by) -> "Share":
        if self.has_member(device_id):
            raise BusinessRuleViolation(f"Device {device_id} is already a member")
        member = ShareMember(device_id, permission, authorized_by, int(time.time()))
        return replace(self, members=self.members + (member,))

    def remove_member(self, device_id: DeviceId) -> "Share":
        if self.created_by == device_id:
            raise BusinessRuleViolation("Cannot remove the creator of the share")
        remaining = tuple(m for m in self.members if m.device_id != device_id)
        if len(remaining) == len(self.members):
            raise BusinessRuleViolation(f"Device {device_id} is not a member")
        return replace(self, members=remaining)

    def update_permission(self, device_id, new_permission) -> "Share":
        if not self.has_member(device_id):
            raise BusinessRuleViolation(f"Device {device_id} is not a member")
        members = tuple(
            replace(m, permission=new_permission) if m.device_id == device_id else m
            for m in self.members
        )
        return replace(self, members=members)

    def pause(self) -> "Share":
        if self.status is not ShareStatus.ACTIVE:
            raise InvalidStateTransition("Share must be Active to pause")
        return replace(self, status=ShareStatus.PAUSED)

    def resume(self) -> "Share":
        if self.status is not ShareStatus.PAUSED:
            raise InvalidStateTransition("Share must be Paused to resume")
        return replace(self, status=ShareStatus.ACTIVE)

    def has_member(self, device_id: DeviceId) -> bool:
        return any(m.device_id == device_id for m in self.members)

    def get_permission(self, device_id: DeviceId) -> Optional[SharePermission]:
        return next(
            (m.permission for m in self.members if m.device_id == device_id), None
        )