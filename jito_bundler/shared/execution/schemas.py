"""
Bundle Schemas
==============
Shared value types for the bundle pipeline.

- SigningIdentity: the one normalized keypair wrapper used everywhere
- TransferIntent: what to move, from whom, to whom
- SignedTransaction: a signed legacy transaction bound to its liveness anchor
- RawMessages / PrebuiltPayload: tagged bundle payloads
- BundleConfig: per-call submission and polling options (pydantic)
"""

import base64
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from jito_bundler.config.settings import Settings


# =============================================================================
# IDENTITIES & INTENTS
# =============================================================================

@dataclass(frozen=True)
class SigningIdentity:
    """
    Keypair exclusively owned by one wallet record.

    Built once when the wallet is created or loaded; every layer reads
    the keypair from here and nowhere else.
    """
    keypair: Keypair

    @classmethod
    def generate(cls) -> "SigningIdentity":
        return cls(Keypair())

    @classmethod
    def from_bytes(cls, secret_key: bytes) -> "SigningIdentity":
        """64-byte ed25519 secret key."""
        if len(secret_key) != 64:
            raise ValueError(f"Invalid secret key length: expected 64 bytes, got {len(secret_key)}")
        return cls(Keypair.from_bytes(bytes(secret_key)))

    @classmethod
    def from_base58_string(cls, secret_key: str) -> "SigningIdentity":
        return cls(Keypair.from_base58_string(secret_key))

    @property
    def pubkey(self) -> Pubkey:
        return self.keypair.pubkey()

    @property
    def address(self) -> str:
        return str(self.keypair.pubkey())

    def __repr__(self) -> str:
        return f"SigningIdentity({self.address})"


@dataclass(frozen=True)
class TransferIntent:
    """One transfer of native lamports (mint=None) or token base units."""
    source: SigningIdentity
    destination: Pubkey
    amount: int
    mint: Optional[Pubkey] = None

    @property
    def is_token(self) -> bool:
        return self.mint is not None


@dataclass(frozen=True)
class SignedTransaction:
    """
    A signed transaction and the anchor it was signed against.

    A transaction whose anchor has expired can never land; rebuild it
    with a fresh anchor instead of resubmitting. anchor is None when the
    transaction was signed elsewhere and its blockhash is not tracked.
    """
    transaction: Transaction
    anchor: Optional[Hash]
    signers: Tuple[str, ...] = ()
    is_tip: bool = False

    @property
    def signature(self) -> str:
        return str(self.transaction.signatures[0])

    def to_wire(self) -> str:
        """Base64 encoded wire transaction."""
        return base64.b64encode(bytes(self.transaction)).decode("ascii")


# =============================================================================
# BUNDLE PAYLOADS (tagged)
# =============================================================================

@dataclass(frozen=True)
class RawMessages:
    """Messages to be wrapped as memo transactions signed by the main wallet."""
    messages: Tuple[str, ...]

    def __len__(self) -> int:
        return len(self.messages)


@dataclass(frozen=True)
class PrebuiltPayload:
    """Already-signed transactions; the engine appends the tip transaction."""
    transactions: Tuple[SignedTransaction, ...]

    def __len__(self) -> int:
        return len(self.transactions)

    @property
    def anchor(self) -> Optional[Hash]:
        return self.transactions[0].anchor if self.transactions else None


BundlePayload = Union[RawMessages, PrebuiltPayload]


# =============================================================================
# STATUS
# =============================================================================

class BundleStatus(str, Enum):
    """Relay inflight status plus engine-level synthetic values."""
    INVALID = "Invalid"
    PENDING = "Pending"
    LANDED = "Landed"
    FAILED = "Failed"
    TIMED_OUT = "TimedOut"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "BundleStatus":
        for status in cls:
            if status.value == value:
                return status
        return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in (BundleStatus.LANDED, BundleStatus.FAILED, BundleStatus.TIMED_OUT)


class BundleState(str, Enum):
    """Engine lifecycle of a single submission."""
    BUILDING = "BUILDING"
    SIMULATED = "SIMULATED"
    SUBMITTED = "SUBMITTED"
    POLLING = "POLLING"
    LANDED = "LANDED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"


class InvalidStatusPolicy(str, Enum):
    """How the poller treats an `Invalid` inflight status."""
    RETRY = "retry"  # keep polling until timeout
    FAIL = "fail"    # terminal, raise BundleFailed


# =============================================================================
# CONFIG
# =============================================================================

class BundleConfig(BaseModel):
    """
    Per-call bundle options.

    Example:
        config = BundleConfig(tip_lamports=5_000, simulate_first=False)
    """
    model_config = ConfigDict(frozen=True)

    tip_lamports: int = Field(
        default=Settings.JITO_MINIMUM_TIP_LAMPORTS,
        ge=Settings.JITO_MINIMUM_TIP_LAMPORTS,
        description="Incentive payment to the tip account, in lamports",
    )
    simulate_first: bool = Field(default=True, description="Run simulateBundle before sendBundle")
    timeout_ms: int = Field(default=Settings.POLL_TIMEOUT_MS, ge=0)
    poll_interval_ms: int = Field(default=Settings.POLL_INTERVAL_MS, gt=0)
    wait_before_poll_ms: int = Field(default=Settings.WAIT_BEFORE_POLL_MS, ge=0)
    invalid_policy: InvalidStatusPolicy = InvalidStatusPolicy.RETRY


@dataclass
class BundleStats:
    submitted: int = 0
    landed: int = 0
    failed: int = 0
    timed_out: int = 0

    def to_dict(self) -> dict:
        return {
            "bundles_submitted": self.submitted,
            "bundles_landed": self.landed,
            "bundles_failed": self.failed,
            "bundles_timed_out": self.timed_out,
        }
