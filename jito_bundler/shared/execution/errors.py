"""
Bundler Error Taxonomy
======================
Every failure of the bundle pipeline surfaces as one of these types.
Nothing in the engine recovers locally or resubmits.
"""

from typing import Optional


class BundlerError(Exception):
    """Base class for all bundle orchestration failures."""


# =============================================================================
# ASSEMBLY
# =============================================================================

class AssemblyError(BundlerError):
    """A transaction could not be built (bad key, bad amount)."""


class AccountLookupError(BundlerError):
    """Destination account state (or a balance) could not be determined."""

    def __init__(self, address: str, reason: str = ""):
        self.address = address
        self.reason = reason
        super().__init__(f"Account lookup failed for {address}: {reason}" if reason
                         else f"Account lookup failed for {address}")


class NoTipAccountsAvailable(BundlerError):
    """Relay returned an empty tip account pool."""

    def __init__(self):
        super().__init__("No Jito tip accounts available")


class EmptyBundleError(BundlerError):
    """A bundle must contain at least one payload transaction."""

    def __init__(self):
        super().__init__("Cannot submit an empty bundle")


# =============================================================================
# RELAY
# =============================================================================

class RelayError(BundlerError):
    """Transport failure or JSON-RPC error returned by the block engine."""

    def __init__(self, method: str, reason: str):
        self.method = method
        self.reason = reason
        super().__init__(f"{method} failed: {reason}")


class SubmissionError(RelayError):
    """sendBundle was rejected or could not be delivered."""

    def __init__(self, reason: str):
        super().__init__("sendBundle", reason)


class SimulationFailed(BundlerError):
    """Relay simulation reported a failure. The bundle is never sent."""

    def __init__(self, reason: str, failing_signature: Optional[str] = None):
        self.reason = reason
        self.failing_signature = failing_signature
        super().__init__(f"Bundle simulation failed: {reason}")


class BundleFailed(BundlerError):
    """Relay marked the bundle with a terminal failure status."""

    def __init__(self, bundle_id: str, status: str):
        self.bundle_id = bundle_id
        self.status = status
        super().__init__(f"Bundle {bundle_id} failed with status: {status}")


class BundleTimeoutError(BundlerError, TimeoutError):
    """
    Polling window exhausted without a terminal status.

    The bundle's fate on the relay is unknown; it may still land.
    """

    def __init__(self, bundle_id: str, timeout_ms: int):
        self.bundle_id = bundle_id
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Polling timeout exceeded, bundle {bundle_id} not confirmed within {timeout_ms}ms"
        )


# =============================================================================
# PRECONDITIONS (raised before any network call)
# =============================================================================

class NothingToCollect(BundlerError):
    def __init__(self):
        super().__init__("No wallets have sufficient SOL to collect")


class NoWalletsFound(BundlerError):
    def __init__(self, detail: str = "No wallets found in specified folders"):
        super().__init__(detail)


class FolderNotFound(BundlerError):
    def __init__(self, folder_id: str):
        self.folder_id = folder_id
        super().__init__(f"Folder not found: {folder_id}")


class ServicesNotInitialized(BundlerError):
    def __init__(self, component: str = "Bundle services"):
        super().__init__(f"{component} not initialized")
