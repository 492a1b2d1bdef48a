"""Devices, their trust lifecycle and PIN-based pairing sessions."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Optional

from kfilesync.errors import (
    BusinessRuleViolation,
    InvalidPinCode,
    InvalidStateTransition,
    SessionExpired,
)

DeviceId = str


@dataclass(frozen=True)
class Certificate:
    """A PEM-encoded device certificate."""

    pem: str

    @classmethod
    def from_pem(cls, pem: str) -> "Certificate":
        """Build a certificate, requiring a PEM header."""
        if not pem.lstrip().startswith("-----BEGIN"):
            raise BusinessRuleViolation(
                "Certificate must be a valid PEM-encoded string starting with '-----BEGIN'"
            )
        return cls(pem)


class DeviceState:
    """Base of the device trust states: Discovered, Paired and Revoked."""

    def confirm_pairing(self, certificate: Certificate, timestamp: int) -> "Paired":
        if not isinstance(self, Discovered):
            raise InvalidStateTransition("only Discovered can be paired")
        return Paired(
            certificate=certificate,
            paired_at=timestamp,
            alias=self.alias,
            address=self.address,
        )

    def revoke(self, timestamp: int) -> "Revoked":
        if not isinstance(self, Paired):
            raise InvalidStateTransition("only Paired can be revoked")
        return Revoked(
            revoked_at=timestamp,
            certificate=self.certificate,
            alias=self.alias,
            address=self.address,
        )


@dataclass(frozen=True)
class Discovered(DeviceState):
    alias: str
    address: str


@dataclass(frozen=True)
class Paired(DeviceState):
    certificate: Certificate
    paired_at: int
    alias: str
    address: str
    last_seen_at: Optional[int] = None


@dataclass(frozen=True)
class Revoked(DeviceState):
    revoked_at: int
    certificate: Certificate
    alias: str
    address: str


@dataclass(frozen=True)
class Device:
    id: DeviceId
    state: DeviceState


@dataclass
class PairingSession:
    """A pending pairing with a PIN that may be tried a limited number of times."""

    target_device: DeviceId
    pin_code: str
    expires_at: int
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    attempts: int = 0
    max_attempts: int = 3

    def verify(self, code: str, current_time: int) -> None:
        """Check a PIN; raises on expiry, exhausted attempts or a wrong code."""
        if current_time > self.expires_at:
            raise SessionExpired()
        if self.attempts >= self.max_attempts:
            raise BusinessRuleViolation("Maximum PIN attempts exceeded")
        self.attempts += 1
        if self.pin_code != code:
            raise InvalidPinCode()