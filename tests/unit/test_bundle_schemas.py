"""
Bundle Schemas Unit Tests
=========================
Tests for identities, payloads, status parsing, BundleConfig and the
error taxonomy.
"""

import pytest
from pydantic import ValidationError
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from jito_bundler.shared.execution.errors import (
    BundleTimeoutError,
    BundlerError,
    RelayError,
    SubmissionError,
)
from jito_bundler.shared.execution.schemas import (
    BundleConfig,
    BundleStats,
    BundleStatus,
    InvalidStatusPolicy,
    PrebuiltPayload,
    RawMessages,
    SigningIdentity,
    TransferIntent,
)


class TestSigningIdentity:
    """Test the normalized keypair wrapper."""

    def test_generate_has_matching_address(self):
        identity = SigningIdentity.generate()
        assert identity.address == str(identity.pubkey)
        assert identity.address in repr(identity)

    def test_from_bytes_roundtrips_keypair(self):
        kp = Keypair()
        identity = SigningIdentity.from_bytes(bytes(kp))
        assert identity.pubkey == kp.pubkey()

    def test_from_bytes_rejects_wrong_length(self):
        with pytest.raises(ValueError, match="expected 64 bytes"):
            SigningIdentity.from_bytes(b"\x01" * 32)

    def test_from_base58_string(self):
        kp = Keypair()
        identity = SigningIdentity.from_base58_string(str(kp))
        assert identity.pubkey == kp.pubkey()

    def test_repr_hides_secret(self):
        kp = Keypair()
        assert str(kp) not in repr(SigningIdentity(kp))


class TestPayloads:
    def test_transfer_intent_kind(self):
        identity = SigningIdentity.generate()
        native = TransferIntent(identity, Pubkey.new_unique(), 10)
        token = TransferIntent(identity, Pubkey.new_unique(), 10, mint=Pubkey.new_unique())
        assert not native.is_token
        assert token.is_token

    def test_raw_messages_length(self):
        assert len(RawMessages(("a", "b"))) == 2
        assert len(RawMessages(())) == 0

    def test_empty_prebuilt_has_no_anchor(self):
        payload = PrebuiltPayload(())
        assert len(payload) == 0
        assert payload.anchor is None


class TestBundleStatus:
    @pytest.mark.parametrize("raw,expected", [
        ("Landed", BundleStatus.LANDED),
        ("Failed", BundleStatus.FAILED),
        ("Pending", BundleStatus.PENDING),
        ("Invalid", BundleStatus.INVALID),
        (None, BundleStatus.UNKNOWN),
        ("Exploded", BundleStatus.UNKNOWN),
    ])
    def test_parse(self, raw, expected):
        assert BundleStatus.parse(raw) == expected

    def test_terminal_statuses(self):
        assert BundleStatus.LANDED.is_terminal
        assert BundleStatus.FAILED.is_terminal
        assert not BundleStatus.PENDING.is_terminal
        assert not BundleStatus.INVALID.is_terminal


class TestBundleConfig:
    """Test pydantic validation of per-call bundle options."""

    def test_defaults(self):
        config = BundleConfig()
        assert config.tip_lamports == 1_000
        assert config.simulate_first is True
        assert config.timeout_ms == 30_000
        assert config.poll_interval_ms == 3_000
        assert config.wait_before_poll_ms == 5_000
        assert config.invalid_policy == InvalidStatusPolicy.RETRY

    def test_tip_below_minimum_rejected(self):
        with pytest.raises(ValidationError):
            BundleConfig(tip_lamports=999)

    def test_zero_poll_interval_rejected(self):
        with pytest.raises(ValidationError):
            BundleConfig(poll_interval_ms=0)

    def test_frozen(self):
        config = BundleConfig()
        with pytest.raises(ValidationError):
            config.tip_lamports = 5_000


class TestErrors:
    def test_timeout_is_builtin_timeout(self):
        err = BundleTimeoutError("abc", 30_000)
        assert isinstance(err, TimeoutError)
        assert isinstance(err, BundlerError)
        assert "30000ms" in str(err)

    def test_submission_error_is_relay_error(self):
        err = SubmissionError("rejected")
        assert isinstance(err, RelayError)
        assert err.method == "sendBundle"

    def test_stats_to_dict(self):
        stats = BundleStats(submitted=2, landed=1, failed=1)
        assert stats.to_dict() == {
            "bundles_submitted": 2,
            "bundles_landed": 1,
            "bundles_failed": 1,
            "bundles_timed_out": 0,
        }
