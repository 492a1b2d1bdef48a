"""Application service for creating shares and managing their members."""

from __future__ import annotations

import logging

from kfilesync.device import Paired
from kfilesync.errors import (
    BusinessRuleViolation,
    DeviceNotFound,
    DeviceNotTrusted,
    DomainError,
    NetworkError,
    ShareNotFound,
)
from kfilesync.events import EventBus, MemberAuthorized, MemberRevoked, ShareCreated
from kfilesync.policy import PolicyEnforcer
from kfilesync.ports import DeviceRepository, NetworkClient, ShareInvite, ShareRepository
from kfilesync.share import Share, SharePermission, SyncMode

DeviceId = str
ShareId = str

DEFAULT_PORT = 53317

_log = logging.getLogger(__name__)


class ShareAppService:
    """Creates shares, invites peers into them and removes members."""

    def __init__(
        self,
        local_device_id: DeviceId,
        share_repo: ShareRepository,
        device_repo: DeviceRepository,
        network_client: NetworkClient,
        policy_enforcer: PolicyEnforcer,
        event_bus: EventBus,
        *,
        port: int = DEFAULT_PORT,
    ) -> None:
        self.local_device_id = local_device_id
        self._share_repo = share_repo
        self._device_repo = device_repo
        self._network = network_client
        self._policy = policy_enforcer
        self._events = event_bus
        self._port = port

    async def _load_share(self, share_id: ShareId) -> Share:
        share = await self._share_repo.find_by_id(share_id)
        if share is None:
            raise ShareNotFound(share_id)
        return share

    async def create_share(
        self, share_id: ShareId, share_name: str, local_path: str, sync_mode: SyncMode
    ) -> ShareId:
        """Create and store a share owned by this device."""
        share = Share.create(share_id, share_name, local_path, sync_mode, self.local_device_id)
        await self._share_repo.save(share)
        self._events.publish(ShareCreated(share_id=share_id, created_by=self.local_device_id))
        return share_id

    async def invite_device(
        self, share_id: ShareId, peer_id: DeviceId, permission: SharePermission
    ) -> None:
        """Invite a paired peer; on acceptance record it as a member.

        If storing the new member fails after the peer accepted, the invite is
        withdrawn from the peer and the storage error is raised.
        """
        await self._policy.check_transfer(peer_id)
        share = await self._load_share(share_id)

        peer = await self._device_repo.find_by_id(peer_id)
        if peer is None:
            raise DeviceNotFound(peer_id)
        if not isinstance(peer.state, Paired):
            raise DeviceNotTrusted(peer_id)
        address = peer.state.address

        invite = ShareInvite(
            share_id=share.share_id,
            share_name=share.share_name,
            permission=permission.value,
            invited_by=self.local_device_id,
        )
        try:
            await self._network.invite_to_share(address, self._port, invite)
        except DomainError as exc:
            raise NetworkError(f"Peer {peer_id} rejected the invite") from exc

        try:
            updated = share.authorize_member(peer_id, permission, self.local_device_id)
        except DomainError as exc:
            raise BusinessRuleViolation(str(exc)) from exc

        try:
            await self._share_repo.save(updated)
        except DomainError:
            _log.error("Failed to persist share %s; rolling back peer %s", share_id, peer_id)
            try:
                await self._network.cancel_share_invite(
                    address, self._port, share_id, self.local_device_id
                )
            except DomainError as rollback_err:
                _log.critical(
                    "Rollback also failed for peer %s: %s. Manual cleanup required.",
                    peer_id,
                    rollback_err,
                )
            raise

        self._events.publish(
            MemberAuthorized(share_id=share_id, device_id=peer_id, permission=permission)
        )

    async def remove_member(self, share_id: ShareId, peer_id: DeviceId) -> None:
        """Remove a member from a share."""
        share = await self._load_share(share_id)
        updated = share.remove_member(peer_id)
        await self._share_repo.save(updated)
        self._events.publish(MemberRevoked(share_id=share_id, device_id=peer_id))