"""
Bundle Submission Engine Unit Tests
===================================
Composition, the simulation gate, submission and lifecycle.

"Golden Path":
1. Compose: payload transactions in order, exactly one tip, last
2. Simulate: a failed simulation never reaches sendBundle
3. Send + Poll: bundle id returned only once Landed
"""

from dataclasses import replace

import pytest
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from spl.memo.constants import MEMO_PROGRAM_ID

from jito_bundler.shared.execution.assembler import TransactionAssembler
from jito_bundler.shared.execution.bundle_engine import BundleSubmissionEngine
from jito_bundler.shared.execution.errors import (
    AssemblyError,
    EmptyBundleError,
    ServicesNotInitialized,
    SimulationFailed,
    SubmissionError,
)
from jito_bundler.shared.execution.schemas import (
    BundleConfig,
    PrebuiltPayload,
    RawMessages,
    SigningIdentity,
    TransferIntent,
)
from tests.mocks.mock_relay import MockRelay, failing_relay
from tests.mocks.transactions import decode_wire, fee_payer, instruction_accounts, lamports_of, memo_text, program_ids


async def prebuilt(ledger, count):
    """`count` SOL transfers from fresh wallets, signed against the ledger anchor."""
    assembler = TransactionAssembler(ledger)
    sources = [SigningIdentity.generate() for _ in range(count)]
    intents = [TransferIntent(s, Pubkey.new_unique(), 10_000) for s in sources]
    transactions = await assembler.build_batch(intents, await ledger.get_latest_anchor())
    return sources, PrebuiltPayload(tuple(transactions))


def tip_transfers(tx, tip_accounts):
    """Indexes of system transfers into a tip account."""
    tips = {Pubkey.from_string(a) for a in tip_accounts}
    found = []
    for i, program in enumerate(program_ids(tx)):
        if program == SYSTEM_PROGRAM_ID and instruction_accounts(tx, i)[1] in tips:
            found.append(i)
    return found


class TestRawMessagesComposition:
    """Memo bundles: one transaction per message, tip in the last."""

    @pytest.mark.asyncio
    async def test_one_transaction_per_message(self, engine, relay, main_wallet):
        await engine.submit(RawMessages(("one", "two", "three")))

        sent = [decode_wire(w) for w in relay.sent[0]]
        assert len(sent) == 3
        assert [memo_text(tx) for tx in sent] == ["one", "two", "three"]
        assert all(fee_payer(tx) == main_wallet.pubkey for tx in sent)

    @pytest.mark.asyncio
    async def test_tip_only_in_last_transaction(self, engine, relay):
        await engine.submit(RawMessages(("one", "two", "three")))

        sent = [decode_wire(w) for w in relay.sent[0]]
        assert [len(tip_transfers(tx, relay.tip_accounts)) for tx in sent] == [0, 0, 1]
        last = sent[-1]
        assert program_ids(last) == [MEMO_PROGRAM_ID, SYSTEM_PROGRAM_ID]
        assert lamports_of(last, 1) == 1_000

    @pytest.mark.asyncio
    async def test_shared_anchor(self, engine, relay, ledger):
        await engine.submit(RawMessages(("a", "b")))

        sent = [decode_wire(w) for w in relay.sent[0]]
        assert {tx.message.recent_blockhash for tx in sent} == {ledger.anchor}

    @pytest.mark.asyncio
    async def test_custom_tip(self, engine, relay, fast_config):
        config = fast_config.model_copy(update={"tip_lamports": 25_000})
        await engine.submit(RawMessages(("a",)), config)

        last = decode_wire(relay.sent[0][-1])
        assert lamports_of(last, 1) == 25_000


class TestPrebuiltComposition:
    """Prebuilt payloads get one extra tip transaction from the main wallet."""

    @pytest.mark.asyncio
    async def test_n_plus_one_with_tip_last(self, engine, relay, ledger, main_wallet):
        sources, payload = await prebuilt(ledger, 3)

        await engine.submit(payload)

        sent = [decode_wire(w) for w in relay.sent[0]]
        assert len(sent) == 4
        assert [fee_payer(tx) for tx in sent[:3]] == [s.pubkey for s in sources]
        assert fee_payer(sent[3]) == main_wallet.pubkey
        assert [len(tip_transfers(tx, relay.tip_accounts)) for tx in sent] == [0, 0, 0, 1]
        assert sent[3].message.recent_blockhash == payload.anchor

    @pytest.mark.asyncio
    async def test_payload_wire_is_untouched(self, engine, relay, ledger):
        _, payload = await prebuilt(ledger, 2)

        await engine.submit(payload)

        assert relay.sent[0][:2] == [tx.to_wire() for tx in payload.transactions]

    @pytest.mark.asyncio
    async def test_untracked_anchor_fetches_one_for_tip(self, engine, relay, ledger):
        _, payload = await prebuilt(ledger, 2)
        untracked = PrebuiltPayload(tuple(replace(tx, anchor=None) for tx in payload.transactions))
        calls_before = ledger.anchor_calls

        await engine.submit(untracked)

        assert ledger.anchor_calls == calls_before + 1
        tip = decode_wire(relay.sent[0][-1])
        assert tip.message.recent_blockhash == ledger.anchor
        assert len(relay.sent[0]) == 3

    @pytest.mark.asyncio
    async def test_payload_with_tip_rejected(self, engine, relay, ledger, main_wallet):
        tip = TransactionAssembler(ledger).build_tip(
            main_wallet, Pubkey.new_unique(), 1_000, await ledger.get_latest_anchor())

        with pytest.raises(AssemblyError, match="already carries a tip"):
            await engine.submit(PrebuiltPayload((tip,)))

        assert relay.sent == []

    @pytest.mark.asyncio
    async def test_oversized_bundle_still_submitted(self, engine, relay, ledger):
        _, payload = await prebuilt(ledger, 6)

        await engine.submit(payload)

        assert len(relay.sent[0]) == 7


class TestSimulationGate:
    @pytest.mark.asyncio
    async def test_failed_simulation_never_sends(self, engine, relay, failed_simulation):
        relay.simulation = failed_simulation

        with pytest.raises(SimulationFailed) as exc_info:
            await engine.submit(RawMessages(("a",)))

        assert exc_info.value.reason == "insufficient funds for fee"
        assert exc_info.value.failing_signature == "5xFailingSig"
        assert len(relay.simulated) == 1
        assert relay.sent == []
        assert engine.stats.submitted == 0

    @pytest.mark.asyncio
    async def test_unexpected_summary_is_failure(self, engine, relay):
        relay.simulation = {"summary": "maybe"}

        with pytest.raises(SimulationFailed, match="unexpected simulation summary"):
            await engine.submit(RawMessages(("a",)))

        assert relay.sent == []

    @pytest.mark.asyncio
    async def test_simulation_can_be_skipped(self, engine, relay, fast_config, failed_simulation):
        relay.simulation = failed_simulation
        config = fast_config.model_copy(update={"simulate_first": False})

        bundle_id = await engine.submit(RawMessages(("a",)), config)

        assert bundle_id == relay.bundle_id
        assert relay.simulated == []

    @pytest.mark.asyncio
    async def test_simulated_transactions_match_sent(self, engine, relay):
        await engine.submit(RawMessages(("a", "b")))
        assert relay.simulated[0] == relay.sent[0]


class TestSubmission:
    @pytest.mark.asyncio
    async def test_returns_bundle_id_after_landing(self, engine, relay):
        bundle_id = await engine.submit(RawMessages(("a",)))

        assert bundle_id == relay.bundle_id
        assert engine.get_stats()["bundles_submitted"] == 1
        assert engine.get_stats()["bundles_landed"] == 1

    @pytest.mark.asyncio
    async def test_send_rejection_is_submission_error(self, ledger, main_wallet, fast_config):
        relay = failing_relay("bundle rejected: duplicate")
        engine = BundleSubmissionEngine(relay, ledger, main_wallet, default_config=fast_config)

        async with engine:
            with pytest.raises(SubmissionError, match="duplicate"):
                await engine.submit(RawMessages(("a",)))

        assert relay.status_queries == 0
        assert engine.stats.submitted == 0

    @pytest.mark.asyncio
    async def test_empty_payload_rejected_without_network(self, engine, relay, ledger):
        with pytest.raises(EmptyBundleError):
            await engine.submit(RawMessages(()))
        with pytest.raises(EmptyBundleError):
            await engine.submit(PrebuiltPayload(()))

        assert relay.tip_queries == 0
        assert ledger.call_count == 0

    @pytest.mark.asyncio
    async def test_unsupported_payload(self, engine):
        with pytest.raises(TypeError):
            await engine.compose(["not", "a", "payload"], BundleConfig())


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_submit_requires_initialize(self, relay, ledger, main_wallet):
        engine = BundleSubmissionEngine(relay, ledger, main_wallet)

        with pytest.raises(ServicesNotInitialized):
            await engine.submit(RawMessages(("a",)))

        assert relay.sent == []

    @pytest.mark.asyncio
    async def test_context_manager(self, relay, ledger, main_wallet):
        engine = BundleSubmissionEngine(relay, ledger, main_wallet)

        async with engine:
            assert engine.is_initialized
        assert not engine.is_initialized

    @pytest.mark.asyncio
    async def test_informational_calls(self, engine):
        assert "tokyo" in await engine.get_regions()
        statuses = await engine.get_bundle_statuses(["b1"])
        assert statuses[0]["bundle_id"] == "b1"


@pytest.mark.asyncio
async def test_random_tip_pool(ledger, main_wallet, fast_config, tip_accounts):
    relay = MockRelay(tip_accounts=tip_accounts)
    async with BundleSubmissionEngine(relay, ledger, main_wallet, default_config=fast_config) as engine:
        await engine.submit(RawMessages(("a",)))

    last = decode_wire(relay.sent[0][-1])
    assert len(tip_transfers(last, tip_accounts)) == 1
