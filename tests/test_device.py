import pytest

from kfilesync.device import (
    Certificate,
    Device,
    Discovered,
    Paired,
    PairingSession,
    Revoked,
)
from kfilesync.errors import (
    BusinessRuleViolation,
    InvalidPinCode,
    InvalidStateTransition,
    SessionExpired,
)


def test_valid_transitions():
    initial = Discovered(alias="test", address="192.168.1.5")
    paired = initial.confirm_pairing(Certificate("cert"), 12345)
    assert isinstance(paired, Paired)
    assert paired.alias == "test"
    assert paired.paired_at == 12345
    assert paired.address == "192.168.1.5"
    assert paired.last_seen_at is None

    revoked = paired.revoke(67890)
    assert isinstance(revoked, Revoked)
    assert revoked.alias == "test"
    assert revoked.revoked_at == 67890
    assert revoked.certificate == Certificate("cert")


def test_invalid_transitions():
    initial = Discovered(alias="test", address="")
    with pytest.raises(InvalidStateTransition):
        initial.revoke(12345)

    paired = initial.confirm_pairing(Certificate("cert"), 12345)
    with pytest.raises(InvalidStateTransition):
        paired.confirm_pairing(Certificate("new"), 67890)


def test_revoked_cannot_be_paired_or_revoked():
    revoked = Discovered("a", "b").confirm_pairing(Certificate("c"), 1).revoke(2)
    with pytest.raises(InvalidStateTransition):
        revoked.revoke(3)
    with pytest.raises(InvalidStateTransition):
        revoked.confirm_pairing(Certificate("c"), 3)


def test_certificate_pem_validation():
    valid = "-----BEGIN CERTIFICATE-----\nMIIBIjANBgkq\n-----END CERTIFICATE-----"
    assert Certificate.from_pem(valid).pem == valid

    with pytest.raises(BusinessRuleViolation) as info:
        Certificate.from_pem("MIIBIjANBgkqhkiG9w0BAQEFAAOCAQ8AMIIBCgKCAQEA...")
    assert "PEM" in info.value.detail

    with pytest.raises(BusinessRuleViolation):
        Certificate.from_pem("")


def test_device_holds_state():
    state = Discovered("laptop", "10.0.0.2")
    device = Device(id="dev-1", state=state)
    assert device.state.alias == "laptop"


def test_pairing_session_verify():
    pin = "123456"
    expires_at = 9999999999
    session = PairingSession("device_abc", pin, expires_at)
    session.verify(pin, 1000000000)
    assert session.attempts == 1

    session2 = PairingSession("device_abc", pin, expires_at)
    with pytest.raises(InvalidPinCode):
        session2.verify("000000", 1000000000)

    session3 = PairingSession("device_abc", pin, expires_at)
    with pytest.raises(SessionExpired):
        session3.verify(pin, expires_at + 1)


def test_pairing_session_max_attempts():
    pin = "654321"
    session = PairingSession("device_xyz", pin, 9999999999)
    for wrong in ("111111", "222222", "333333"):
        with pytest.raises(InvalidPinCode):
            session.verify(wrong, 1000000000)
    with pytest.raises(BusinessRuleViolation):
        session.verify(pin, 1000000000)


def test_pairing_sessions_have_distinct_ids():
    a = PairingSession("d", "1", 10)
    b = PairingSession("d", "1", 10)
    assert a.id != b.id
    assert a.max_attempts == 3