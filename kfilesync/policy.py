"""Authorisation checks for transfers and sync actions."""

from __future__ import annotations

import enum

from kfilesync.device import Paired
from kfilesync.errors import (
    DeviceNotFound,
    DeviceNotTrusted,
    PermissionDenied,
    ShareNotFound,
)
from kfilesync.ignore_spec import IgnoreSpec, PathLike
from kfilesync.ports import DeviceRepository, ShareRepository
from kfilesync.share import SyncMode

DeviceId = str
ShareId = str


class SyncDirection(enum.Enum):
    PUSH = "push"
    PULL = "pull"

    def __str__(self) -> str:
        return self.name.capitalize()


class PolicyEnforcer:
    """Decides whether a peer may transfer or sync, raising when it may not."""

    def __init__(self, device_repo: DeviceRepository, share_repo: ShareRepository) -> None:
        self._device_repo = device_repo
        self._share_repo = share_repo

    async def _trusted_device(self, peer: DeviceId):
        device = await self._device_repo.find_by_id(peer)
        if device is None:
            raise DeviceNotFound(peer)
        if not isinstance(device.state, Paired):
            raise DeviceNotTrusted(peer)
        return device

    async def check_transfer(self, peer: DeviceId) -> None:
        """A transfer is allowed only with a paired device."""
        await self._trusted_device(peer)

    async def check_sync(
        self, peer: DeviceId, share_id: ShareId, action: SyncDirection
    ) -> None:
        """Check trust, membership, share mode and member permission in turn."""
        device = await self._trusted_device(peer)

        share = await self._share_repo.find_by_id(share_id)
        if share is None:
            raise ShareNotFound(share_id)

        if not share.has_member(device.id):
            raise PermissionDenied(
                f"Device {peer} is not a member of share {share_id}"
            )

        if share.sync_mode is SyncMode.SEND_ONLY and action is SyncDirection.PUSH:
            raise PermissionDenied("Share is SendOnly: peers cannot push")
        if share.sync_mode is SyncMode.RECEIVE_ONLY and action is SyncDirection.PULL:
            raise PermissionDenied("Share is ReceiveOnly: peers cannot pull")

        permission = share.get_permission(device.id)
        if permission is None:
            raise PermissionDenied(
                f"No permission found for device {peer} on share {share_id}"
            )

        allowed = (
            permission.can_push() if action is SyncDirection.PUSH else permission.can_pull()
        )
        if not allowed:
            raise PermissionDenied(
                f"Sync action {action} denied for device {peer} on share {share_id} "
            )

    @staticmethod
    def check_file_ignored(path: PathLike, is_dir: bool, ignore_spec: IgnoreSpec) -> bool:
        """Whether the .syncignore rules exclude the path."""
        return ignore_spec.is_ignored(path, is_dir)