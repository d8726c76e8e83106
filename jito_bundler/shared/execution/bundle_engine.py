"""
Bundle Submission Engine
========================
Composes, simulates, submits and tracks Jito bundles.

Lifecycle of one submission:

    BUILDING ──→ [SIMULATED] ──→ SUBMITTED ──→ POLLING ──┬─→ LANDED
                                                          ├─→ FAILED
                                                          └─→ TIMED_OUT

Invariants:
- Exactly one incentive (tip) payment per bundle, always in the last
  transaction.
- A bundle whose simulation failed is never sent.
- submit() returns the bundle id only after the relay reports Landed;
  every other outcome raises.

Usage:
    engine = BundleSubmissionEngine(relay, rpc, main_wallet)
    async with engine:
        bundle_id = await engine.submit(RawMessages(("gm",)))
"""

import asyncio
import time
from typing import Dict, List, Optional

from jito_bundler.config.settings import Settings
from jito_bundler.shared.execution.assembler import TransactionAssembler
from jito_bundler.shared.execution.errors import (
    AssemblyError,
    BundleFailed,
    BundleTimeoutError,
    EmptyBundleError,
    RelayError,
    ServicesNotInitialized,
    SimulationFailed,
    SubmissionError,
)
from jito_bundler.shared.execution.schemas import (
    BundleConfig,
    BundlePayload,
    BundleState,
    BundleStats,
    BundleStatus,
    InvalidStatusPolicy,
    PrebuiltPayload,
    RawMessages,
    SignedTransaction,
    SigningIdentity,
)
from jito_bundler.shared.execution.tip_selector import TipAccountSelector
from jito_bundler.shared.infrastructure.jito_adapter import JitoAdapter
from jito_bundler.shared.infrastructure.rpc_client import SolanaRpc
from jito_bundler.shared.system.logging import Logger


class BundleSubmissionEngine:
    def __init__(
        self,
        relay: JitoAdapter,
        rpc: SolanaRpc,
        main_wallet: SigningIdentity,
        assembler: Optional[TransactionAssembler] = None,
        tip_selector: Optional[TipAccountSelector] = None,
        default_config: Optional[BundleConfig] = None,
    ):
        self.relay = relay
        self.rpc = rpc
        self.main_wallet = main_wallet
        self.assembler = assembler or TransactionAssembler(rpc)
        self.tip_selector = tip_selector or TipAccountSelector(relay)
        self.default_config = default_config or BundleConfig()
        self.stats = BundleStats()
        self._initialized = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def initialize(self) -> None:
        self._initialized = True
        Logger.info(f"[BUNDLE] Engine ready (main wallet {self.main_wallet.address[:8]}..., "
                    f"relay {self.relay.api_url})")

    async def close(self) -> None:
        self._initialized = False
        Logger.debug("[BUNDLE] Engine closed")

    async def __aenter__(self) -> "BundleSubmissionEngine":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise ServicesNotInitialized("BundleSubmissionEngine")

    # =========================================================================
    # SUBMISSION
    # =========================================================================

    async def submit(self, payload: BundlePayload, config: Optional[BundleConfig] = None) -> str:
        """
        Build, simulate, send and confirm one bundle.

        Returns:
            The relay's bundle id, once the bundle has landed.
        """
        self._ensure_initialized()
        config = config or self.default_config
        if len(payload) == 0:
            raise EmptyBundleError()

        Logger.info(f"[BUNDLE] Bundling {len(payload)} transactions (tip {config.tip_lamports} lamports)")
        self._log_state(BundleState.BUILDING)
        transactions = await self.compose(payload, config)
        wire_transactions = [tx.to_wire() for tx in transactions]

        if len(wire_transactions) > Settings.MAX_BUNDLE_TRANSACTIONS:
            Logger.warning(f"[BUNDLE] {len(wire_transactions)} transactions exceeds the relay limit of "
                           f"{Settings.MAX_BUNDLE_TRANSACTIONS}; relay may reject the bundle")

        if config.simulate_first:
            await self.simulate(wire_transactions)
            self._log_state(BundleState.SIMULATED)

        bundle_id = await self.send(wire_transactions)
        self._log_state(BundleState.SUBMITTED, bundle_id)

        await self.poll_status(bundle_id, config)

        Logger.success(f"[BUNDLE] Bundle successfully landed: {bundle_id}")
        Logger.info(f"[BUNDLE] Jito Explorer: {Settings.JITO_EXPLORER_URL}/{bundle_id}")
        return bundle_id

    async def compose(self, payload: BundlePayload, config: BundleConfig) -> List[SignedTransaction]:
        """Ordered bundle transactions with the tip attached last."""
        if isinstance(payload, RawMessages):
            return await self._compose_messages(payload, config)
        if isinstance(payload, PrebuiltPayload):
            return await self._compose_prebuilt(payload, config)
        raise TypeError(f"Unsupported bundle payload: {type(payload).__name__}")

    async def _compose_messages(self, payload: RawMessages, config: BundleConfig) -> List[SignedTransaction]:
        anchor = await self.rpc.get_latest_anchor()
        tip_account = await self.tip_selector.select_tip_account()
        Logger.debug(f"[BUNDLE] Memo bundle anchor {anchor}, tip account {tip_account}")

        last = len(payload.messages) - 1
        transactions = []
        for i, message in enumerate(payload.messages):
            if i == last:
                transactions.append(self.assembler.build_memo(
                    self.main_wallet, message, anchor,
                    tip_account=tip_account, tip_lamports=config.tip_lamports,
                ))
            else:
                transactions.append(self.assembler.build_memo(self.main_wallet, message, anchor))
        return transactions

    async def _compose_prebuilt(self, payload: PrebuiltPayload, config: BundleConfig) -> List[SignedTransaction]:
        if any(tx.is_tip for tx in payload.transactions):
            raise AssemblyError("Prebuilt payload already carries a tip transaction")

        anchor = payload.anchor
        if anchor is None:
            anchor = await self.rpc.get_latest_anchor()
            Logger.debug(f"[BUNDLE] Payload carries no anchor, tip signed against {anchor}")
        elif any(tx.anchor != anchor for tx in payload.transactions):
            Logger.warning("[BUNDLE] Payload transactions reference different blockhashes")

        tip_account = await self.tip_selector.select_tip_account()
        tip = self.assembler.build_tip(self.main_wallet, tip_account, config.tip_lamports, anchor)
        return list(payload.transactions) + [tip]

    async def simulate(self, wire_transactions: List[str]) -> Dict:
        Logger.info("[BUNDLE] Simulating bundle...")
        value = await self.relay.simulate_bundle(wire_transactions)
        summary = value.get("summary")

        if summary == "succeeded":
            Logger.info("[BUNDLE] Simulation successful")
            return value

        if isinstance(summary, dict) and "failed" in summary:
            failed = summary["failed"] or {}
            reason = self._failure_reason(failed.get("error"))
            Logger.warning(f"[BUNDLE] Simulation Failed: {reason}")
            raise SimulationFailed(reason, failed.get("tx_signature"))

        raise SimulationFailed(f"unexpected simulation summary: {summary!r}")

    @staticmethod
    def _failure_reason(error) -> str:
        if isinstance(error, dict) and "TransactionFailure" in error:
            failure = error["TransactionFailure"]
            if isinstance(failure, (list, tuple)) and len(failure) > 1:
                return str(failure[1])
            return str(failure)
        return str(error)

    async def send(self, wire_transactions: List[str]) -> str:
        try:
            bundle_id = await self.relay.send_bundle(wire_transactions)
        except SubmissionError:
            raise
        except RelayError as e:
            Logger.error(f"[BUNDLE] Error sending bundle: {e.reason}")
            raise SubmissionError(e.reason) from e

        self.stats.submitted += 1
        Logger.info(f"[JITO] Bundle sent: {bundle_id}")
        return bundle_id

    # =========================================================================
    # STATUS POLLING
    # =========================================================================

    async def poll_status(self, bundle_id: str, config: Optional[BundleConfig] = None) -> bool:
        """
        Poll inflight status until Landed, Failed or timeout.

        Waits wait_before_poll_ms once, then queries every poll_interval_ms.
        Each status is logged once; every iteration still queries the relay.

        Raises:
            BundleFailed: relay reported Failed (or Invalid under the FAIL policy)
            BundleTimeoutError: timeout_ms elapsed from the first query
        """
        config = config or self.default_config
        self._log_state(BundleState.POLLING, bundle_id)
        await asyncio.sleep(config.wait_before_poll_ms / 1000)

        timeout_s = config.timeout_ms / 1000
        start = time.monotonic()
        last_status = None

        while time.monotonic() - start < timeout_s:
            statuses = await self.relay.get_inflight_bundle_statuses([bundle_id])
            raw = statuses[0].get("status") if statuses else None
            status = BundleStatus.parse(raw)

            if status != last_status:
                Logger.info(f"[POLL] Bundle status: {status.value}")
                last_status = status

            if status == BundleStatus.LANDED:
                self.stats.landed += 1
                self._log_state(BundleState.LANDED, bundle_id)
                return True

            if status == BundleStatus.FAILED or (
                status == BundleStatus.INVALID and config.invalid_policy == InvalidStatusPolicy.FAIL
            ):
                self.stats.failed += 1
                self._log_state(BundleState.FAILED, bundle_id)
                raise BundleFailed(bundle_id, status.value)

            await asyncio.sleep(config.poll_interval_ms / 1000)

        self.stats.timed_out += 1
        self._log_state(BundleState.TIMED_OUT, bundle_id)
        raise BundleTimeoutError(bundle_id, config.timeout_ms)

    # =========================================================================
    # INFORMATIONAL
    # =========================================================================

    async def get_bundle_statuses(self, bundle_ids: List[str]) -> List[Dict]:
        return await self.relay.get_bundle_statuses(bundle_ids)

    async def get_regions(self) -> List[str]:
        return await self.relay.get_regions()

    def get_stats(self) -> Dict[str, int]:
        return self.stats.to_dict()

    @staticmethod
    def _log_state(state: BundleState, bundle_id: str = "") -> None:
        ref = f" {bundle_id[:16]}..." if bundle_id else ""
        Logger.debug(f"[BUNDLE] -> {state.value}{ref}")
