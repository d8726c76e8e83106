"""
SOL Distribution Service
========================
Moves native SOL between the main wallet and folder wallets in one
atomic bundle.

- distribute: main wallet -> each target (fixed amount), then tip
- collect:    each source -> main wallet (balance minus reserve), then tip

Both paths sign every transfer against one shared blockhash.
"""

import asyncio
from typing import List, Optional, Sequence

from solders.pubkey import Pubkey

from jito_bundler.modules.funds.config import FundsConfig
from jito_bundler.shared.execution.bundle_engine import BundleSubmissionEngine
from jito_bundler.shared.execution.errors import NoWalletsFound, NothingToCollect
from jito_bundler.shared.execution.schemas import PrebuiltPayload, SigningIdentity, TransferIntent
from jito_bundler.shared.system.logging import Logger


class SolDistributionService:
    def __init__(self, engine: BundleSubmissionEngine, config: Optional[FundsConfig] = None):
        self.engine = engine
        self.config = config or FundsConfig()

    @property
    def main_wallet(self) -> SigningIdentity:
        return self.engine.main_wallet

    async def distribute_sol_to_wallets(self, target_wallets: Sequence[Pubkey], amount_per_wallet: float) -> str:
        """
        Args:
            target_wallets: destination addresses, in bundle order
            amount_per_wallet: SOL sent to each target

        Returns:
            Bundle id once landed
        """
        if not target_wallets:
            raise NoWalletsFound("No target wallets provided")
        lamports = self.config.sol_to_lamports(amount_per_wallet)
        if lamports <= 0:
            raise ValueError(f"Amount per wallet must be greater than 0, got {amount_per_wallet}")

        Logger.info(f"[FUNDS] Distributing {amount_per_wallet} SOL to {len(target_wallets)} wallets via Jito Bundle")

        intents = [TransferIntent(source=self.main_wallet, destination=target, amount=lamports)
                   for target in target_wallets]

        anchor = await self.engine.rpc.get_latest_anchor()
        transactions = await self.engine.assembler.build_batch(intents, anchor)
        Logger.debug(f"[FUNDS] Transactions prepared: {len(transactions)}")

        return await self.engine.submit(PrebuiltPayload(tuple(transactions)), self.config.bundle_config())

    async def collect_sol_from_wallets(self, source_wallets: Sequence[SigningIdentity]) -> str:
        """
        Sweep every source wallet into the main wallet.

        Each wallet keeps COLLECT_RESERVE_LAMPORTS; wallets at or below the
        reserve are skipped.
        """
        if not source_wallets:
            raise NoWalletsFound("No source wallets provided")

        balances = await asyncio.gather(*(self.engine.rpc.get_balance(w.pubkey) for w in source_wallets))
        intents = self.plan_collection(source_wallets, balances)
        if not intents:
            raise NothingToCollect()

        Logger.info(f"[FUNDS] Collecting SOL from {len(intents)}/{len(source_wallets)} wallets via Jito Bundle")

        anchor = await self.engine.rpc.get_latest_anchor()
        transactions = await self.engine.assembler.build_batch(intents, anchor)

        return await self.engine.submit(PrebuiltPayload(tuple(transactions)), self.config.bundle_config())

    def plan_collection(self, source_wallets: Sequence[SigningIdentity], balances: Sequence[int]) -> List[TransferIntent]:
        intents = []
        for wallet, balance in zip(source_wallets, balances):
            amount = balance - self.config.COLLECT_RESERVE_LAMPORTS
            if amount <= 0:
                Logger.debug(f"[FUNDS] Skipping {wallet.address[:8]}... ({balance} lamports)")
                continue
            intents.append(TransferIntent(source=wallet, destination=self.main_wallet.pubkey, amount=amount))
        return intents

    # =========================================================================
    # BALANCES
    # =========================================================================

    async def get_sol_balance(self, wallet: Pubkey) -> float:
        lamports = await self.engine.rpc.get_balance(wallet)
        return self.config.lamports_to_sol(lamports)

    async def get_total_sol_balance(self, wallets: Sequence[Pubkey]) -> float:
        balances = await asyncio.gather(*(self.get_sol_balance(w) for w in wallets))
        return sum(balances)

    def calculate_distribution_amounts(
        self,
        total_sol: float,
        wallet_count: int,
        reserve_amount: Optional[float] = None,
    ) -> float:
        """SOL per wallet when spreading total_sol (minus a fee reserve) evenly."""
        if wallet_count <= 0:
            return 0.0
        reserve = self.config.DISTRIBUTION_RESERVE_SOL if reserve_amount is None else reserve_amount
        return max(0.0, (total_sol - reserve) / wallet_count)
